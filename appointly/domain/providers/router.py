"""Provider router - FastAPI endpoints for slot and date blocking"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...database import get_db
from .schemas import BlockedDatesResult, BlockedDatesUpdate, BlockedSlotsResult, BlockedSlotUpdate
from .service import AvailabilityService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/providers", tags=["Providers"])


def get_availability_service(db: Session = Depends(get_db)) -> AvailabilityService:
    """Dependency injection for AvailabilityService"""
    return AvailabilityService(db)


# ============================================================================
# AVAILABILITY
# ============================================================================


@router.post("/{username}/blocked-slots", response_model=BlockedSlotsResult)
async def update_blocked_slots(
    username: str,
    body: BlockedSlotUpdate,
    service: AvailabilityService = Depends(get_availability_service),
):
    """Block or unblock a single time slot"""
    return service.update_blocked_slots(username, body.slot, body.block)


@router.post("/{username}/blocked-dates", response_model=BlockedDatesResult)
async def update_blocked_dates(
    username: str,
    body: BlockedDatesUpdate,
    service: AvailabilityService = Depends(get_availability_service),
):
    """Block or unblock whole dates"""
    return service.update_blocked_dates(username, body.dates, body.block)
