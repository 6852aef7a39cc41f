"""
"Add to calendar" links included in booking confirmation emails.
All three formats encode the same start and end instants.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional
from urllib.parse import quote

from .formatting import as_utc, get_zone, to_iso_z

DEFAULT_SLOT_DURATION = 60  # minutes

GOOGLE_RENDER_URL = "https://www.google.com/calendar/render"
OUTLOOK_COMPOSE_URL = "https://outlook.live.com/calendar/0/deeplink/compose"


@dataclass(frozen=True)
class CalendarLinks:
    google: str
    outlook: str
    ics: str


def encode_component(value: str) -> str:
    """Percent-encode like JavaScript's encodeURIComponent"""
    return quote(value, safe="-_.!~*'()")


def to_compact_utc(instant: datetime) -> str:
    """20240115T093000Z"""
    return as_utc(instant).strftime("%Y%m%dT%H%M%SZ")


def event_window(start: datetime, slot_duration: Optional[int]) -> tuple[datetime, datetime]:
    """Start and end of an appointment; end = start + slot duration (default 60 minutes)"""
    return start, start + timedelta(minutes=slot_duration or DEFAULT_SLOT_DURATION)


def to_compact_local(instant: datetime, tz_name: str) -> str:
    """Wall-clock time in tz_name, 20240115T150000"""
    return as_utc(instant).astimezone(get_zone(tz_name)).strftime("%Y%m%dT%H%M%S")


def build_ics(
    start: datetime, end: datetime, tz_name: str, title: str, description: str, location: str
) -> str:
    """Minimal VCALENDAR document; fields carry the already-encoded text"""
    return "\r\n".join(
        [
            "BEGIN:VCALENDAR",
            "VERSION:2.0",
            "BEGIN:VEVENT",
            f"DTSTART;TZID={tz_name}:{to_compact_local(start, tz_name)}",
            f"DTEND;TZID={tz_name}:{to_compact_local(end, tz_name)}",
            f"SUMMARY:{title}",
            f"DESCRIPTION:{description}",
            f"LOCATION:{location}",
            "END:VEVENT",
            "END:VCALENDAR",
        ]
    )


def build_calendar_links(
    start: datetime,
    slot_duration: Optional[int],
    provider_name: str,
    service_type: str,
    location: Optional[str],
    tz_name: str,
) -> CalendarLinks:
    """Build Google, Outlook and .ics links for a confirmed booking"""
    start, end = event_window(start, slot_duration)

    title = encode_component(f"Appointment with {provider_name}")
    description = encode_component(f"Booking for {service_type} with {provider_name}.")
    event_location = encode_component(location or "Online")

    google = (
        f"{GOOGLE_RENDER_URL}?action=TEMPLATE&text={title}"
        f"&dates={to_compact_utc(start)}/{to_compact_utc(end)}"
        f"&details={description}&location={event_location}"
    )
    outlook = (
        f"{OUTLOOK_COMPOSE_URL}?path=/calendar/action/compose&rru=addevent"
        f"&subject={title}&startdt={to_iso_z(start)}&enddt={to_iso_z(end)}"
        f"&body={description}&location={event_location}"
    )
    ics_content = build_ics(start, end, tz_name, title, description, event_location)
    ics = f"data:text/calendar;charset=utf-8,{encode_component(ics_content)}"

    return CalendarLinks(google=google, outlook=outlook, ics=ics)
