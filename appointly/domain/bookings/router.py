"""Booking router - FastAPI endpoints for booking operations"""

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, RedirectResponse
from sqlalchemy.orm import Session

from ...config import GatewayConfig, load_gateway_config
from ...database import get_db
from .schemas import (
    BookingActionResult,
    PaymentVerificationResult,
    RescheduleRequest,
    VerifyBookingPaymentRequest,
)
from .service import BookingService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/bookings", tags=["Bookings"])


def get_booking_service(
    db: Session = Depends(get_db),
    config: GatewayConfig = Depends(load_gateway_config),
) -> BookingService:
    """Dependency injection for BookingService"""
    return BookingService(db, config)


# ============================================================================
# BOOKING SUBMISSION
# ============================================================================


@router.post("")
async def create_booking(
    request: Request,
    service: BookingService = Depends(get_booking_service),
):
    """
    Submit a booking form (form-encoded).

    Responds 422 with field errors, 200 with a Razorpay order for online
    payment, or 303 to the confirmation page once the booking is confirmed.
    """
    form = await request.form()
    result = await service.create_booking(dict(form))

    if "errors" in result:
        return JSONResponse(status_code=422, content=result)
    if "redirect" in result:
        return RedirectResponse(url=result["redirect"], status_code=303)
    return result


@router.post("/{username}/{booking_id}/verify-payment", response_model=PaymentVerificationResult)
async def verify_booking_payment(
    username: str,
    booking_id: str,
    body: VerifyBookingPaymentRequest,
    service: BookingService = Depends(get_booking_service),
):
    """Verify the checkout callback and confirm the booking"""
    return await service.verify_booking_payment(username, booking_id, body)


# ============================================================================
# BOOKING MAINTENANCE
# ============================================================================


@router.post("/{username}/{booking_id}/cancel", response_model=BookingActionResult)
async def cancel_booking(
    username: str,
    booking_id: str,
    service: BookingService = Depends(get_booking_service),
):
    """Cancel a booking"""
    return await service.cancel_booking(username, booking_id)


@router.post("/{username}/{booking_id}/reschedule", response_model=BookingActionResult)
async def reschedule_booking(
    username: str,
    booking_id: str,
    body: RescheduleRequest,
    service: BookingService = Depends(get_booking_service),
):
    """Move a booking to a new time"""
    return await service.reschedule_booking(username, booking_id, body.newDateTime)
