import json
from datetime import datetime, timedelta

import httpx
import pytest

from appointly.models import Booking
from appointly.models_google_calendar import GoogleCalendarIntegration
from appointly.services import google_calendar_service
from appointly.services.google_calendar_service import (
    build_event_payload,
    create_calendar_event,
    get_cipher,
)


@pytest.fixture
def booking(db, provider) -> Booking:
    booking = Booking(
        provider_username=provider.username,
        customer_name="Ravi Kumar",
        customer_email="ravi@example.com",
        customer_phone="+919876543210",
        service_type="Video Consult",
        date_time=datetime(2024, 1, 15, 9, 30),
        address="Online",
        status="Upcoming",
        payment={},
    )
    db.add(booking)
    db.commit()
    return booking


@pytest.fixture
def integration(db, provider) -> GoogleCalendarIntegration:
    cipher = get_cipher()
    integration = GoogleCalendarIntegration(
        provider_username=provider.username,
        access_token=cipher.encrypt(b"access-123").decode(),
        refresh_token=cipher.encrypt(b"refresh-456").decode(),
        token_expires_at=datetime.utcnow() + timedelta(hours=1),
        google_calendar_id="primary",
        auto_sync_enabled=True,
    )
    db.add(integration)
    db.commit()
    return integration


@pytest.fixture
def calendar_api(monkeypatch):
    """Route the module's httpx clients to an in-memory Calendar API"""
    requests = []
    responses = {"status": 200, "body": {"id": "evt_1", "hangoutLink": "https://meet.google.com/abc"}}
    real_client = httpx.AsyncClient

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(responses["status"], json=responses["body"])

    def client_factory(**kwargs):
        return real_client(transport=httpx.MockTransport(handler), **kwargs)

    monkeypatch.setattr(google_calendar_service.httpx, "AsyncClient", client_factory)
    return {"requests": requests, "responses": responses}


def test_event_payload_uses_slot_window_and_provider_timezone(provider, booking):
    payload = build_event_payload(provider, booking, with_meet=False)

    assert payload["summary"] == "Video Consult - Ravi Kumar"
    assert payload["start"] == {"dateTime": "2024-01-15T09:30:00+00:00", "timeZone": "Asia/Kolkata"}
    assert payload["end"] == {"dateTime": "2024-01-15T10:00:00+00:00", "timeZone": "Asia/Kolkata"}
    assert payload["attendees"] == [{"email": "ravi@example.com"}]
    assert "location" not in payload
    assert "conferenceData" not in payload


def test_event_payload_requests_meet_link(provider, booking):
    payload = build_event_payload(provider, booking, with_meet=True)

    assert payload["conferenceData"]["createRequest"]["conferenceSolutionKey"] == {"type": "hangoutsMeet"}


async def test_unconnected_provider_is_unavailable(db, provider, booking):
    result = await create_calendar_event(provider, booking, db)

    assert result.ok is False
    assert result.reason == "Google Calendar not connected"


async def test_event_created_with_meet_link(db, provider, booking, integration, calendar_api):
    result = await create_calendar_event(provider, booking, db, with_meet=True)

    assert result.ok is True
    assert result.event_id == "evt_1"
    assert result.meet_link == "https://meet.google.com/abc"

    request = calendar_api["requests"][0]
    assert request.headers["Authorization"] == "Bearer access-123"
    assert request.url.params["conferenceDataVersion"] == "1"
    assert json.loads(request.content)["summary"] == "Video Consult - Ravi Kumar"


async def test_api_error_is_reported_as_unavailable(db, provider, booking, integration, calendar_api):
    calendar_api["responses"].update(status=403, body={"error": "forbidden"})

    result = await create_calendar_event(provider, booking, db)

    assert result.ok is False
    assert "Failed to create calendar event" in result.reason


async def test_expired_token_is_refreshed(db, provider, booking, integration, calendar_api):
    integration.token_expires_at = datetime.utcnow() - timedelta(minutes=1)
    db.commit()
    calendar_api["responses"]["body"] = {"access_token": "fresh-789", "expires_in": 3600, "id": "evt_2"}

    result = await create_calendar_event(provider, booking, db)

    assert result.event_id == "evt_2"
    assert str(calendar_api["requests"][0].url) == "https://oauth2.googleapis.com/token"
    assert calendar_api["requests"][1].headers["Authorization"] == "Bearer fresh-789"
    db.refresh(integration)
    assert get_cipher().decrypt(integration.access_token.encode()) == b"fresh-789"
