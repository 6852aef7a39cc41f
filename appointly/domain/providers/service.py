"""Availability service - Blocking and unblocking slots and dates"""

import logging
from typing import Iterable

from sqlalchemy.orm import Session

from ...cache import invalidate_provider_cache
from ...exceptions import ProviderNotFoundError
from .repository import ProviderRepository

logger = logging.getLogger(__name__)


def toggle_members(current: Iterable[str], values: Iterable[str], should_block: bool) -> list[str]:
    """
    Add or remove values with set semantics, keeping first-seen order.
    Duplicates already present in current are collapsed too.
    """
    if should_block:
        return list(dict.fromkeys([*current, *values]))
    to_remove = set(values)
    return list(dict.fromkeys(item for item in current if item not in to_remove))


class AvailabilityService:
    """Service layer for provider slot and date blocking"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = ProviderRepository()

    def _get_provider(self, username: str):
        provider = self.repo.get_provider_by_username(self.db, username)
        if not provider:
            raise ProviderNotFoundError(username)
        return provider

    def update_blocked_slots(self, username: str, slot_iso: str, should_block: bool) -> dict:
        """Block or unblock a single slot (ISO timestamp)"""
        try:
            provider = self._get_provider(username)
            current = (provider.settings or {}).get("blockedSlots") or []
            blocked = toggle_members(current, [slot_iso], should_block)
            self.repo.update_settings(self.db, provider, blockedSlots=blocked)
            invalidate_provider_cache(username)

            logger.info(
                f"✅ {'Blocked' if should_block else 'Unblocked'} slot {slot_iso} for {username}"
            )
            return {"success": True, "blockedSlots": blocked}
        except ProviderNotFoundError:
            return {"success": False, "error": "Provider not found"}

    def update_blocked_dates(self, username: str, dates: list[str], should_block: bool) -> dict:
        """Block or unblock a set of calendar dates (yyyy-MM-dd)"""
        try:
            provider = self._get_provider(username)
            current = (provider.settings or {}).get("blockedDates") or []
            blocked = toggle_members(current, dates, should_block)
            self.repo.update_settings(self.db, provider, blockedDates=blocked)
            invalidate_provider_cache(username)

            logger.info(
                f"✅ {'Blocked' if should_block else 'Unblocked'} {len(dates)} date(s) for {username}"
            )
            return {"success": True, "blockedDates": blocked}
        except ProviderNotFoundError:
            return {"success": False, "error": "Provider not found"}
