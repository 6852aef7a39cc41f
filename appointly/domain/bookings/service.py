"""Booking service - Business logic for booking, payment verification and maintenance"""

import logging
from datetime import datetime
from typing import Optional
from urllib.parse import urlencode

from pydantic import ValidationError
from sqlalchemy.orm import Session

from ... import config as app_config
from ...config import GatewayConfig
from ...email_service import (
    send_booking_cancelled_email,
    send_booking_confirmation_email,
    send_provider_booking_notification_email,
    send_provider_reschedule_email,
    send_reschedule_email,
)
from ...exceptions import BookingNotFoundError, PaymentConfigurationError, ProviderNotFoundError
from ...models import Booking, Provider
from ...services.google_calendar_service import CalendarSyncResult, create_calendar_event
from ...services.notification_service import notify_new_booking
from ...utils.calendar_links import build_calendar_links
from ...utils.formatting import (
    DEFAULT_DATE_FORMAT,
    display_time,
    format_amount,
    format_in_timezone,
    to_iso_z,
    to_naive_utc,
)
from ...webhook_security import verify_payment_signature
from ..billing.razorpay_service import RazorpayService
from ..billing.repository import BillingRepository
from ..providers.repository import ProviderRepository
from .repository import BookingRepository
from .schemas import (
    DOORSTEP_FIELDS,
    BookingRequest,
    ServiceCategory,
    VerifyBookingPaymentRequest,
    flatten_field_errors,
)

logger = logging.getLogger(__name__)

INVALID_SERVICE_TYPE = "This service type is not valid for this provider."
INVALID_SIGNATURE = "Invalid payment signature."
VERIFICATION_FAILED = "Failed to update booking after payment."
PAYMENT_MISMATCH = "Payment does not match this booking."
FREE_BOOKING = "This is a free booking."
PAY_AFTER_SERVICE = "To be paid after service."
BOOKING_PAYMENT_PLAN_ID = "booking"


def find_service_type(provider: Provider, name: str) -> Optional[dict]:
    """Enabled catalog entry with the given name"""
    for service_type in (provider.settings or {}).get("serviceTypes") or []:
        if service_type.get("name") == name and service_type.get("enabled"):
            return service_type
    return None


def service_category(service_type: dict) -> ServiceCategory:
    try:
        return ServiceCategory(service_type.get("id"))
    except ValueError:
        logger.warning(f"⚠️ Unknown service category '{service_type.get('id')}', treating as online")
        return ServiceCategory.ONLINE


def service_price(service_type: dict) -> float:
    """Configured price, or 0 when pricing is off"""
    if not service_type.get("priceEnabled"):
        return 0
    return service_type.get("price") or 0


def build_address(category: ServiceCategory, form: BookingRequest, provider: Provider) -> Optional[str]:
    """Where the appointment happens"""
    if category is ServiceCategory.DOORSTEP:
        landmark = f"{form.landmark}, " if form.landmark else ""
        return (
            f"{form.flatHouseNo}, {landmark}{form.city}, {form.state} - {form.pincode}, {form.country}"
        )
    if category is ServiceCategory.SHOP:
        return (provider.settings or {}).get("shopAddress") or None
    return "Online"


def missing_doorstep_fields(form: BookingRequest) -> dict[str, list[str]]:
    return {
        field: ["This field is required for doorstep services."]
        for field in DOORSTEP_FIELDS
        if not getattr(form, field)
    }


class BookingService:
    """Service layer for the booking lifecycle"""

    def __init__(
        self,
        db: Session,
        config: GatewayConfig,
        razorpay: Optional[RazorpayService] = None,
    ):
        self.db = db
        self.config = config
        self.razorpay = razorpay or RazorpayService(config)
        self.repo = BookingRepository()
        self.providers = ProviderRepository()
        self.billing = BillingRepository()

    # ========================================================================
    # HELPERS
    # ========================================================================

    def _get_provider(self, username: str) -> Provider:
        provider = self.providers.get_provider_by_username(self.db, username)
        if not provider:
            raise ProviderNotFoundError(username)
        return provider

    def _get_booking(self, username: str, booking_id: str) -> Booking:
        booking = self.repo.get_booking(self.db, username, booking_id)
        if not booking:
            raise BookingNotFoundError(booking_id)
        return booking

    def _confirmation_params(
        self,
        booking: Booking,
        provider: Provider,
        customer_timezone: str,
    ) -> list[tuple[str, str]]:
        """Query parameters the confirmation page renders from"""
        settings = provider.settings or {}
        params = [
            ("customerName", booking.customer_name),
            ("customerEmail", booking.customer_email),
            ("customerPhone", booking.customer_phone),
            ("serviceType", booking.service_type),
            ("dateTime", to_iso_z(booking.date_time)),
            ("providerName", provider.name),
            ("providerEmail", provider.email),
            ("providerUsername", provider.username),
        ]
        if booking.address:
            params.append(("address", booking.address))
        if settings.get("googleMapLink"):
            params.append(("googleMapLink", settings["googleMapLink"]))
        params.extend(
            [
                ("dateFormat", settings.get("dateFormat") or DEFAULT_DATE_FORMAT),
                ("timezone", settings.get("timezone") or "UTC"),
                ("customerTimezone", customer_timezone),
                ("currencyCode", settings.get("currency") or self.config.currency),
            ]
        )
        return params

    async def _sync_calendar(self, provider: Provider, booking: Booking, with_meet: bool) -> CalendarSyncResult:
        """Best-effort event creation; an unavailable calendar never blocks the booking"""
        if not provider.google_calendar:
            return CalendarSyncResult.unavailable("Google Calendar not connected")

        result = await create_calendar_event(provider, booking, self.db, with_meet=with_meet)
        if not result.ok:
            logger.warning(f"⚠️ Calendar sync skipped for booking {booking.id}: {result.reason}")
        return result

    async def _send_confirmations(
        self,
        provider: Provider,
        booking: Booking,
        customer_timezone: str,
        payment_details: str,
        google_meet_link: Optional[str],
    ):
        """Customer confirmation and provider notification emails"""
        settings = provider.settings or {}
        provider_timezone = settings.get("timezone") or "UTC"
        date_format = settings.get("dateFormat") or DEFAULT_DATE_FORMAT
        google_map_link = settings.get("googleMapLink")
        booking_address = booking.address or "N/A"

        links = build_calendar_links(
            booking.date_time,
            settings.get("slotDuration"),
            provider.name,
            booking.service_type,
            booking.address,
            provider_timezone,
        )

        await send_booking_confirmation_email(
            to=booking.customer_email,
            customer_name=booking.customer_name,
            provider_name=provider.name,
            service_type=booking.service_type,
            booking_date=format_in_timezone(booking.date_time, customer_timezone, date_format),
            booking_time=display_time(booking.date_time, customer_timezone),
            booking_time_provider=display_time(booking.date_time, provider_timezone),
            booking_address=booking_address,
            google_link=links.google,
            outlook_link=links.outlook,
            ics_link=links.ics,
            payment_details=payment_details,
            google_meet_link=google_meet_link,
            google_map_link=google_map_link,
        )

        await send_provider_booking_notification_email(
            to=provider.email,
            provider_name=provider.name,
            customer_name=booking.customer_name,
            customer_email=booking.customer_email,
            customer_phone=booking.customer_phone,
            service_type=booking.service_type,
            booking_date=format_in_timezone(booking.date_time, provider_timezone, date_format),
            booking_time=format_in_timezone(booking.date_time, provider_timezone, "p"),
            booking_address=booking_address,
            payment_details=payment_details,
            google_meet_link=google_meet_link,
            google_map_link=google_map_link,
        )

    # ========================================================================
    # BOOKING WORKFLOW
    # ========================================================================

    async def create_booking(self, form_data: dict) -> dict:
        """
        Validate and store a booking, then take the payment path.

        Returns one of:
            {"errors": {field: [messages]}}             validation failed, nothing stored
            {"order", "bookingId", "confirmationParams"} online payment pending
            {"redirect": url}                           confirmed, emails sent
        """
        try:
            form = BookingRequest.model_validate(form_data)
        except ValidationError as e:
            return {"errors": flatten_field_errors(e)}

        provider = self._get_provider(form.providerUsername)
        customer_timezone = form.customerTimezone or "UTC"

        service_type = find_service_type(provider, form.serviceType)
        if not service_type:
            return {"errors": {"serviceType": [INVALID_SERVICE_TYPE]}}

        category = service_category(service_type)
        if category is ServiceCategory.DOORSTEP:
            missing = missing_doorstep_fields(form)
            if missing:
                return {"errors": missing}

        booking_data = {
            "provider_username": provider.username,
            "customer_name": form.customerName,
            "customer_email": form.customerEmail,
            "customer_phone": form.full_phone,
            "service_type": form.serviceType,
            "date_time": to_naive_utc(form.dateTime),
            "address": build_address(category, form, provider),
        }
        if category is ServiceCategory.DOORSTEP:
            booking_data.update(
                flat_house_no=form.flatHouseNo,
                landmark=form.landmark,
                city=form.city,
                state=form.state,
                pincode=form.pincode,
                country=form.country,
            )

        booking = self.repo.create_booking(self.db, status="Pending", **booking_data)
        logger.info(f"📝 Booking {booking.id} created for {provider.username} ({form.serviceType})")

        settings = provider.settings or {}
        price = service_price(service_type)
        is_paid_service = price > 0
        params = self._confirmation_params(booking, provider, customer_timezone)

        if is_paid_service and settings.get("onlinePaymentEnabled") and form.paymentMethod == "online":
            order = await self.razorpay.create_order(price, notes={"booking_id": booking.id})
            self.repo.update_booking(self.db, booking, payment={"orderId": order["id"]})
            logger.info(f"💳 Booking {booking.id} awaiting payment on order {order['id']}")
            return {
                "order": order,
                "bookingId": booking.id,
                "confirmationParams": urlencode(params),
            }

        pay_later = is_paid_service and form.paymentMethod == "later"
        payment_details = FREE_BOOKING
        if pay_later and settings.get("payAfterServiceEnabled"):
            payment_details = PAY_AFTER_SERVICE

        self.repo.update_booking(
            self.db,
            booking,
            status="Upcoming",
            payment={"status": "Pending", "amount": price},
        )

        calendar = await self._sync_calendar(
            provider, booking, with_meet=category is ServiceCategory.ONLINE
        )
        if calendar.ok:
            self.repo.update_booking(
                self.db,
                booking,
                google_calendar_event_id=calendar.event_id,
                google_meet_link=calendar.meet_link,
            )

        notify_new_booking(self.db, provider.username, form.customerName, form.serviceType)

        await self._send_confirmations(
            provider, booking, customer_timezone, payment_details, calendar.meet_link
        )

        if calendar.meet_link:
            params.append(("googleMeetLink", calendar.meet_link))
        if pay_later:
            params.append(("amountPaid", "0"))
            params.append(("totalAmount", format_amount(price)))

        logger.info(f"✅ Booking {booking.id} confirmed for {provider.username}")
        return {"redirect": f"{app_config.FRONTEND_URL}/confirmation?{urlencode(params)}"}

    # ========================================================================
    # PAYMENT VERIFICATION WORKFLOW
    # ========================================================================

    async def verify_booking_payment(
        self,
        username: str,
        booking_id: str,
        callback: VerifyBookingPaymentRequest,
    ) -> dict:
        """
        Confirm a booking after the checkout callback.
        Runs after money has moved, so every failure past the signature check
        is reported as a result instead of raised.
        """
        if not self.config.can_sign:
            raise PaymentConfigurationError("Razorpay key secret is not configured.")

        if not verify_payment_signature(
            self.config.key_secret,
            callback.razorpay_order_id,
            callback.razorpay_payment_id,
            callback.razorpay_signature,
        ):
            return {"success": False, "error": INVALID_SIGNATURE}

        try:
            booking = self._get_booking(username, booking_id)
            provider = self._get_provider(username)

            # The signed pair must belong to the order this booking is still waiting on
            if (
                booking.status != "Pending"
                or (booking.payment or {}).get("orderId") != callback.razorpay_order_id
            ):
                logger.warning(
                    f"⚠️ Rejected payment {callback.razorpay_payment_id} for booking {booking.id} "
                    f"(status {booking.status}, order {callback.razorpay_order_id})"
                )
                return {"success": False, "error": PAYMENT_MISMATCH}

            # Older checkout clients don't send the customer's timezone
            customer_timezone = callback.customerTimezone or "UTC"

            booking = self.repo.update_booking(
                self.db,
                booking,
                status="Upcoming",
                payment={
                    "orderId": callback.razorpay_order_id,
                    "paymentId": callback.razorpay_payment_id,
                    "amount": callback.amount,
                    "status": "Paid",
                },
            )

            calendar = await self._sync_calendar(provider, booking, with_meet=booking.address == "Online")
            if calendar.ok:
                self.repo.update_booking(
                    self.db,
                    booking,
                    google_calendar_event_id=calendar.event_id,
                    google_meet_link=calendar.meet_link,
                )

            self.billing.create_payment_record(
                self.db,
                provider_username=username,
                booking_id=booking.id,
                plan_id=BOOKING_PAYMENT_PLAN_ID,
                amount=callback.amount,
                currency=self.config.currency,
                razorpay_order_id=callback.razorpay_order_id,
                razorpay_payment_id=callback.razorpay_payment_id,
            )
            logger.info(f"💳 Booking {booking.id} paid: {callback.razorpay_payment_id}")

            notify_new_booking(self.db, provider.username, booking.customer_name, booking.service_type)

            await self._send_confirmations(
                provider,
                booking,
                customer_timezone,
                f"Paid ₹{format_amount(callback.amount)} Online",
                calendar.meet_link,
            )

            confirmation_params = []
            if calendar.meet_link:
                confirmation_params.append(("googleMeetLink", calendar.meet_link))

            return {"success": True, "confirmationParams": urlencode(confirmation_params)}

        except Exception as e:
            logger.error(f"❌ Payment verification failed for booking {booking_id}: {e}", exc_info=True)
            return {"success": False, "error": VERIFICATION_FAILED}

    # ========================================================================
    # BOOKING MAINTENANCE
    # ========================================================================

    async def cancel_booking(self, username: str, booking_id: str) -> dict:
        """Cancel a booking and tell the customer"""
        try:
            provider = self._get_provider(username)
            booking = self._get_booking(username, booking_id)

            self.repo.update_booking(self.db, booking, status="Canceled")

            settings = provider.settings or {}
            timezone_name = settings.get("timezone") or "UTC"
            date_format = settings.get("dateFormat") or DEFAULT_DATE_FORMAT

            await send_booking_cancelled_email(
                to=booking.customer_email,
                customer_name=booking.customer_name,
                provider_name=provider.name,
                service_type=booking.service_type,
                booking_date=format_in_timezone(booking.date_time, timezone_name, date_format),
                booking_time=format_in_timezone(booking.date_time, timezone_name, "p"),
            )

            logger.info(f"✅ Booking {booking_id} cancelled")
            return {"success": True}

        except Exception as e:
            logger.error(f"❌ Booking cancellation failed for {booking_id}: {e}", exc_info=True)
            return {"success": False, "error": str(e) or "Failed to cancel booking."}

    async def reschedule_booking(self, username: str, booking_id: str, new_date_time: datetime) -> dict:
        """Move a booking and tell both sides"""
        try:
            provider = self._get_provider(username)
            booking = self._get_booking(username, booking_id)

            booking = self.repo.update_booking(self.db, booking, date_time=to_naive_utc(new_date_time))

            settings = provider.settings or {}
            timezone_name = settings.get("timezone") or "UTC"
            date_format = settings.get("dateFormat") or DEFAULT_DATE_FORMAT
            new_booking_date = format_in_timezone(booking.date_time, timezone_name, date_format)
            new_booking_time = format_in_timezone(booking.date_time, timezone_name, "p")

            await send_reschedule_email(
                to=booking.customer_email,
                customer_name=booking.customer_name,
                provider_name=provider.name,
                service_type=booking.service_type,
                new_booking_date=new_booking_date,
                new_booking_time=new_booking_time,
            )
            await send_provider_reschedule_email(
                to=provider.email,
                provider_name=provider.name,
                customer_name=booking.customer_name,
                service_type=booking.service_type,
                new_booking_date=new_booking_date,
                new_booking_time=new_booking_time,
            )

            logger.info(f"✅ Booking {booking_id} rescheduled to {booking.date_time.isoformat()}")
            return {"success": True}

        except Exception as e:
            logger.error(f"❌ Reschedule failed for {booking_id}: {e}", exc_info=True)
            return {"success": False, "error": str(e) or "Could not reschedule booking."}
