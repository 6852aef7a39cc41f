"""
Google Calendar Service
Creates calendar events (with an optional Google Meet link) for confirmed bookings.

Event creation is best-effort: callers get a CalendarSyncResult instead of an
exception, so a calendar outage never blocks a booking confirmation.
"""
import base64
import hashlib
import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

import httpx
from cryptography.fernet import Fernet
from sqlalchemy.orm import Session

from ..config import GOOGLE_CLIENT_ID, GOOGLE_CLIENT_SECRET, SECRET_KEY
from ..exceptions import CalendarSyncError
from ..models import Booking, Provider
from ..models_google_calendar import GoogleCalendarIntegration
from ..utils.calendar_links import event_window
from ..utils.formatting import as_utc

logger = logging.getLogger(__name__)

GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"
GOOGLE_CALENDAR_API = "https://www.googleapis.com/calendar/v3"


@dataclass(frozen=True)
class CalendarSyncResult:
    """Outcome of a best-effort calendar sync: ok (event id, meet link) or unavailable"""

    event_id: Optional[str] = None
    meet_link: Optional[str] = None
    reason: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.event_id is not None

    @classmethod
    def created(cls, event_id: str, meet_link: Optional[str] = None) -> "CalendarSyncResult":
        return cls(event_id=event_id, meet_link=meet_link)

    @classmethod
    def unavailable(cls, reason: str) -> "CalendarSyncResult":
        return cls(reason=reason)


def get_cipher() -> Fernet:
    """Fernet cipher for stored OAuth tokens, keyed from SECRET_KEY"""
    key = base64.urlsafe_b64encode(hashlib.sha256(SECRET_KEY.encode()).digest())
    return Fernet(key)


async def get_valid_access_token(integration: GoogleCalendarIntegration, db: Session) -> str:
    """
    Get a valid access token, refreshing if necessary
    Raises CalendarSyncError if refresh fails
    """
    cipher_suite = get_cipher()

    # Token still valid for at least 5 minutes
    if integration.token_expires_at > datetime.utcnow() + timedelta(minutes=5):
        return cipher_suite.decrypt(integration.access_token.encode()).decode()

    logger.info("🔄 Google Calendar token expired, refreshing...")
    refresh_token = cipher_suite.decrypt(integration.refresh_token.encode()).decode()

    async with httpx.AsyncClient(timeout=30) as client:
        response = await client.post(
            GOOGLE_TOKEN_URL,
            data={
                "client_id": GOOGLE_CLIENT_ID,
                "client_secret": GOOGLE_CLIENT_SECRET,
                "refresh_token": refresh_token,
                "grant_type": "refresh_token",
            },
        )

    if response.status_code != 200:
        raise CalendarSyncError(f"Token refresh failed: {response.text}")

    tokens = response.json()
    new_access_token = tokens.get("access_token")
    if not new_access_token:
        raise CalendarSyncError("No access token in refresh response")

    integration.access_token = cipher_suite.encrypt(new_access_token.encode()).decode()
    integration.token_expires_at = datetime.utcnow() + timedelta(
        seconds=tokens.get("expires_in", 3600)
    )
    db.commit()

    logger.info("✅ Google Calendar token refreshed successfully")
    return new_access_token


def build_event_payload(provider: Provider, booking: Booking, with_meet: bool) -> dict:
    settings = provider.settings or {}
    tz_name = settings.get("timezone") or "UTC"
    start, end = event_window(as_utc(booking.date_time), settings.get("slotDuration"))

    event_data = {
        "summary": f"{booking.service_type} - {booking.customer_name}",
        "description": (
            f"Booking for {booking.service_type} with {provider.name}.\n\n"
            f"Customer: {booking.customer_name}\n"
            f"Email: {booking.customer_email}\n"
            f"Phone: {booking.customer_phone}"
        ),
        "start": {"dateTime": start.isoformat(), "timeZone": tz_name},
        "end": {"dateTime": end.isoformat(), "timeZone": tz_name},
        "attendees": [{"email": booking.customer_email}],
    }

    if booking.address and booking.address != "Online":
        event_data["location"] = booking.address

    if with_meet:
        event_data["conferenceData"] = {
            "createRequest": {
                "requestId": str(uuid.uuid4()),
                "conferenceSolutionKey": {"type": "hangoutsMeet"},
            }
        }

    return event_data


async def create_calendar_event(
    provider: Provider, booking: Booking, db: Session, with_meet: bool = False
) -> CalendarSyncResult:
    """
    Create a Google Calendar event for a booking.
    Never raises; failures come back as CalendarSyncResult.unavailable.
    """
    try:
        integration = (
            db.query(GoogleCalendarIntegration)
            .filter(GoogleCalendarIntegration.provider_username == provider.username)
            .first()
        )

        if not integration or not integration.auto_sync_enabled:
            logger.info("ℹ️ Google Calendar not connected or auto-sync disabled")
            return CalendarSyncResult.unavailable("Google Calendar not connected")

        access_token = await get_valid_access_token(integration, db)
        event_data = build_event_payload(provider, booking, with_meet)

        calendar_id = integration.google_calendar_id or "primary"
        async with httpx.AsyncClient(timeout=30) as client:
            response = await client.post(
                f"{GOOGLE_CALENDAR_API}/calendars/{calendar_id}/events",
                params={"conferenceDataVersion": 1 if with_meet else 0, "sendUpdates": "all"},
                headers={"Authorization": f"Bearer {access_token}"},
                json=event_data,
            )

        if response.status_code not in [200, 201]:
            raise CalendarSyncError(f"Failed to create calendar event: {response.text}")

        event = response.json()
        event_id = event.get("id")
        if not event_id:
            raise CalendarSyncError("Calendar API returned no event id")

        meet_link = event.get("hangoutLink")
        logger.info(f"📅 Google Calendar event created: {event_id}")
        return CalendarSyncResult.created(event_id, meet_link)

    except Exception as e:
        logger.error(f"❌ Error creating calendar event for booking {booking.id}: {e}")
        return CalendarSyncResult.unavailable(str(e))
