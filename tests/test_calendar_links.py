from datetime import datetime
from urllib.parse import unquote

from appointly.utils.calendar_links import build_calendar_links, encode_component

START = datetime(2024, 1, 15, 9, 30)  # 15:00 in Asia/Kolkata


def build(**overrides):
    params = {
        "start": START,
        "slot_duration": 45,
        "provider_name": "Asha Salon",
        "service_type": "Home Visit",
        "location": "Flat 4B, Indiranagar",
        "tz_name": "Asia/Kolkata",
    }
    params.update(overrides)
    return build_calendar_links(**params)


def test_encode_component_matches_encode_uri_component():
    assert encode_component("Appointment with A&B (x)!") == "Appointment%20with%20A%26B%20(x)!"


def test_google_link_uses_compact_utc_window():
    links = build()
    assert links.google.startswith("https://www.google.com/calendar/render?action=TEMPLATE")
    assert "&dates=20240115T093000Z/20240115T101500Z" in links.google
    assert "&text=Appointment%20with%20Asha%20Salon" in links.google
    assert "&location=Flat%204B%2C%20Indiranagar" in links.google


def test_outlook_link_uses_iso_window():
    links = build()
    assert links.outlook.startswith("https://outlook.live.com/calendar/0/deeplink/compose?")
    assert "&startdt=2024-01-15T09:30:00.000Z&enddt=2024-01-15T10:15:00.000Z" in links.outlook
    assert "&body=Booking%20for%20Home%20Visit%20with%20Asha%20Salon." in links.outlook


def test_ics_uses_provider_wall_time_for_the_same_instants():
    links = build()
    assert links.ics.startswith("data:text/calendar;charset=utf-8,")
    document = unquote(links.ics.split(",", 1)[1])
    lines = document.split("\r\n")
    assert lines[0] == "BEGIN:VCALENDAR"
    assert "DTSTART;TZID=Asia/Kolkata:20240115T150000" in lines
    assert "DTEND;TZID=Asia/Kolkata:20240115T154500" in lines
    assert lines[-1] == "END:VCALENDAR"


def test_default_slot_duration_and_location():
    links = build(slot_duration=None, location=None)
    assert "&dates=20240115T093000Z/20240115T103000Z" in links.google
    assert "&location=Online" in links.google
