"""
Email Service using Resend
Provides email functionality using MJML templates for responsive design
"""

import logging
from datetime import datetime
from typing import Optional, Union

import resend
from mjml import mjml2html as mjml_to_html

from .config import EMAIL_FROM_ADDRESS, RESEND_API_KEY
from .email_templates import (
    booking_cancelled_template,
    booking_confirmed_template,
    booking_rescheduled_template,
    provider_booking_rescheduled_template,
    provider_new_booking_template,
    subscription_purchased_template,
)
from .utils.sanitization import sanitize_string

logger = logging.getLogger(__name__)

resend.api_key = RESEND_API_KEY


def compile_mjml_to_html(mjml_content: str) -> str:
    """Compile MJML template to production-ready HTML"""
    try:
        result = mjml_to_html(mjml_content)
        # mjml_to_html returns a dict with 'html' and 'errors' keys
        if isinstance(result, dict):
            if result.get("errors"):
                logger.warning(f"MJML compilation warnings: {result['errors']}")
            return result.get("html", "")
        return str(result)
    except Exception as e:
        logger.error(f"MJML compilation error: {e}")
        raise Exception(f"Failed to compile MJML template: {str(e)}") from e


async def send_email(
    to: Union[str, list[str]],
    subject: str,
    mjml_content: str,
    from_address: Optional[str] = None,
) -> dict:
    """
    Send an email through Resend

    Args:
        to: Recipient email(s)
        subject: Email subject line
        mjml_content: MJML template content (will be compiled to HTML)
        from_address: Optional custom from address

    Returns:
        Send response dict
    """
    html_content = compile_mjml_to_html(mjml_content)

    recipients = [to] if isinstance(to, str) else to
    sender = from_address or EMAIL_FROM_ADDRESS

    if not RESEND_API_KEY:
        logger.error("❌ No email service configured - RESEND_API_KEY missing")
        raise Exception("Email service not configured")

    try:
        logger.info(f"📧 Sending email via Resend to: {to}")
        response = resend.Emails.send(
            {
                "from": sender,
                "to": recipients,
                "subject": subject,
                "html": html_content,
            }
        )
        logger.info(f"✅ Email sent successfully via Resend: {response}")
        return response
    except Exception as e:
        logger.error(f"❌ Email send error to {recipients}: {e}")
        raise Exception(f"Failed to send email: {str(e)}") from e


# ============================================
# Pre-built Email Templates for Booking Events
# ============================================


async def send_subscription_email(
    to: str,
    provider_name: str,
    plan_name: str,
    expiry_date: datetime,
    is_renewal: bool,
) -> dict:
    """Confirm a plan purchase or renewal to the provider"""
    mjml_content = subscription_purchased_template(
        provider_name=sanitize_string(provider_name),
        plan_name=sanitize_string(plan_name),
        expiry_date=expiry_date.strftime("%B %d, %Y"),
        is_renewal=is_renewal,
    )
    action = "Renewed" if is_renewal else "Activated"
    return await send_email(
        to=to,
        subject=f"Subscription {action}: {plan_name}",
        mjml_content=mjml_content,
    )


async def send_booking_confirmation_email(
    to: str,
    customer_name: str,
    provider_name: str,
    service_type: str,
    booking_date: str,
    booking_time: str,
    booking_time_provider: str,
    booking_address: str,
    google_link: str,
    outlook_link: str,
    ics_link: str,
    payment_details: str,
    google_meet_link: Optional[str] = None,
    google_map_link: Optional[str] = None,
) -> dict:
    """Send booking confirmation email to customer"""
    mjml_content = booking_confirmed_template(
        customer_name=sanitize_string(customer_name),
        provider_name=sanitize_string(provider_name),
        service_type=sanitize_string(service_type),
        booking_date=booking_date,
        booking_time=booking_time,
        booking_time_provider=booking_time_provider,
        booking_address=sanitize_string(booking_address),
        payment_details=sanitize_string(payment_details),
        google_link=google_link,
        outlook_link=outlook_link,
        ics_link=ics_link,
        google_meet_link=google_meet_link,
        google_map_link=sanitize_string(google_map_link),
    )

    return await send_email(
        to=to,
        subject=f"Booking Confirmed: {service_type} with {provider_name}",
        mjml_content=mjml_content,
    )


async def send_provider_booking_notification_email(
    to: str,
    provider_name: str,
    customer_name: str,
    customer_email: str,
    customer_phone: str,
    service_type: str,
    booking_date: str,
    booking_time: str,
    booking_address: str,
    payment_details: str,
    google_meet_link: Optional[str] = None,
    google_map_link: Optional[str] = None,
) -> dict:
    """Notify provider of a new confirmed booking"""
    mjml_content = provider_new_booking_template(
        provider_name=sanitize_string(provider_name),
        customer_name=sanitize_string(customer_name),
        customer_email=sanitize_string(customer_email),
        customer_phone=sanitize_string(customer_phone),
        service_type=sanitize_string(service_type),
        booking_date=booking_date,
        booking_time=booking_time,
        booking_address=sanitize_string(booking_address),
        payment_details=sanitize_string(payment_details),
        google_meet_link=google_meet_link,
        google_map_link=sanitize_string(google_map_link),
    )

    return await send_email(
        to=to,
        subject=f"New Booking: {customer_name} - {booking_date}",
        mjml_content=mjml_content,
    )


async def send_booking_cancelled_email(
    to: str,
    customer_name: str,
    provider_name: str,
    service_type: str,
    booking_date: str,
    booking_time: str,
) -> dict:
    """Tell the customer their booking was cancelled"""
    mjml_content = booking_cancelled_template(
        customer_name=sanitize_string(customer_name),
        provider_name=sanitize_string(provider_name),
        service_type=sanitize_string(service_type),
        booking_date=booking_date,
        booking_time=booking_time,
    )

    return await send_email(
        to=to,
        subject=f"Booking Cancelled - {provider_name}",
        mjml_content=mjml_content,
    )


async def send_reschedule_email(
    to: str,
    customer_name: str,
    provider_name: str,
    service_type: str,
    new_booking_date: str,
    new_booking_time: str,
) -> dict:
    mjml_content = booking_rescheduled_template(
        customer_name=sanitize_string(customer_name),
        provider_name=sanitize_string(provider_name),
        service_type=sanitize_string(service_type),
        new_booking_date=new_booking_date,
        new_booking_time=new_booking_time,
    )

    return await send_email(
        to=to,
        subject=f"Booking Rescheduled - {provider_name}",
        mjml_content=mjml_content,
    )


async def send_provider_reschedule_email(
    to: str,
    provider_name: str,
    customer_name: str,
    service_type: str,
    new_booking_date: str,
    new_booking_time: str,
) -> dict:
    mjml_content = provider_booking_rescheduled_template(
        provider_name=sanitize_string(provider_name),
        customer_name=sanitize_string(customer_name),
        service_type=sanitize_string(service_type),
        new_booking_date=new_booking_date,
        new_booking_time=new_booking_time,
    )

    return await send_email(
        to=to,
        subject=f"Booking Rescheduled: {customer_name} - {new_booking_date}",
        mjml_content=mjml_content,
    )
