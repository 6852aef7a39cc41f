"""
MJML Email Templates
All email templates using MJML for responsive, cross-client compatibility
"""

from typing import Optional

# App theme colors - Indigo/Slate color scheme
THEME = {
    "primary": "#4f46e5",
    "primary_dark": "#4338ca",
    "primary_light": "#e0e7ff",
    "background": "#f8fafc",
    "card_bg": "#ffffff",
    "text_primary": "#0f172a",
    "text_secondary": "#334155",
    "text_muted": "#64748b",
    "border": "#e2e8f0",
    "success": "#16a34a",
    "warning": "#f59e0b",
    "danger": "#ef4444",
}


def get_base_template(
    title: str,
    preview_text: str,
    content_sections: str,
    cta_url: Optional[str] = None,
    cta_label: Optional[str] = None,
    is_user_email: bool = False,
) -> str:
    """Base MJML template wrapper for all emails"""

    cta_section = ""
    if cta_url and cta_label:
        cta_section = f"""
        <mj-section padding="20px 0">
          <mj-column>
            <mj-button
              href="{cta_url}"
              background-color="{THEME['primary']}"
              color="#ffffff"
              font-weight="600"
              border-radius="8px"
              padding="18px 40px"
              font-size="16px">
              {cta_label}
            </mj-button>
          </mj-column>
        </mj-section>
        """

    footer_notice = ""
    if is_user_email:
        footer_notice = """
        <mj-text align="center" font-size="12px" color="#94a3b8" padding="12px 0 0 0">
          You're receiving this because you have a provider account with Appointly.
        </mj-text>
        """

    return f"""
    <mjml>
      <mj-head>
        <mj-title>{title}</mj-title>
        <mj-preview>{preview_text}</mj-preview>
        <mj-attributes>
          <mj-all font-family="-apple-system, BlinkMacSystemFont, 'Segoe UI', 'Helvetica Neue', Arial, sans-serif" />
          <mj-text font-size="16px" line-height="1.6" color="{THEME['text_secondary']}" />
        </mj-attributes>
      </mj-head>
      <mj-body background-color="{THEME['background']}">
        <!-- Main Content -->
        <mj-section background-color="#ffffff" padding="40px 40px 48px 40px">
          <mj-column>
            <mj-text font-size="24px" font-weight="600" color="{THEME['text_primary']}" line-height="1.3" padding="0 0 16px 0">
              {title}
            </mj-text>

            {content_sections}
          </mj-column>
        </mj-section>

        {cta_section}

        <!-- Footer -->
        <mj-section padding="32px 20px">
          <mj-column>
            <mj-text align="center" font-size="13px" color="#94a3b8" padding="0">
              Sent by Appointly on behalf of your service provider.
            </mj-text>
            {footer_notice}
          </mj-column>
        </mj-section>
      </mj-body>
    </mjml>
    """


def _detail_rows(rows: list[tuple[str, Optional[str]]]) -> str:
    """Label/value lines, skipping empty values"""
    lines = [f"<strong>{label}:</strong> {value}" for label, value in rows if value]
    return "<br/>".join(lines)


def _calendar_buttons(google_link: str, outlook_link: str, ics_link: str) -> str:
    return f"""
    <mj-text font-size="14px" color="{THEME['text_muted']}" padding="20px 0 0 0">
      Add to your calendar:
      <a href="{google_link}" style="color: {THEME['primary']};">Google</a>
      <span style="color: #cbd5e1; margin: 0 8px;">•</span>
      <a href="{outlook_link}" style="color: {THEME['primary']};">Outlook</a>
      <span style="color: #cbd5e1; margin: 0 8px;">•</span>
      <a href="{ics_link}" download="appointment.ics" style="color: {THEME['primary']};">iCal (.ics)</a>
    </mj-text>
    """


def booking_confirmed_template(
    customer_name: str,
    provider_name: str,
    service_type: str,
    booking_date: str,
    booking_time: str,
    booking_time_provider: str,
    booking_address: str,
    payment_details: str,
    google_link: str,
    outlook_link: str,
    ics_link: str,
    google_meet_link: Optional[str] = None,
    google_map_link: Optional[str] = None,
) -> str:
    """Booking confirmed notification for customer"""
    details = _detail_rows(
        [
            ("Service", service_type),
            ("Address", booking_address),
            ("Provider's time", booking_time_provider),
            ("Payment", payment_details),
            ("Google Meet", google_meet_link),
            ("Map", google_map_link),
        ]
    )
    content = f"""
    <mj-text>
      Hi {customer_name},
    </mj-text>

    <mj-text>
      Your appointment with <strong>{provider_name}</strong> is confirmed.
    </mj-text>

    <mj-text align="center" font-size="16px" color="{THEME['text_primary']}" padding="20px 0 0 0">
      📅 {booking_date}
    </mj-text>

    <mj-text align="center" font-size="16px" color="{THEME['text_primary']}" padding="0 0 20px 0">
      ⏰ {booking_time}
    </mj-text>

    <mj-text font-size="14px" color="{THEME['text_muted']}">
      {details}
    </mj-text>

    {_calendar_buttons(google_link, outlook_link, ics_link)}
    """

    return get_base_template(
        title="Your Booking is Confirmed! 🎉",
        preview_text=f"Booking Confirmed - {service_type} with {provider_name}",
        content_sections=content,
        cta_url=google_meet_link,
        cta_label="Join Google Meet" if google_meet_link else None,
    )


def provider_new_booking_template(
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
) -> str:
    """New booking notification for provider"""
    details = _detail_rows(
        [
            ("Customer", customer_name),
            ("Email", customer_email),
            ("Phone", customer_phone),
            ("Service", service_type),
            ("Address", booking_address),
            ("Payment", payment_details),
            ("Google Meet", google_meet_link),
            ("Map", google_map_link),
        ]
    )
    content = f"""
    <mj-text>
      Hi {provider_name},
    </mj-text>

    <mj-text>
      You have a new booking from <strong>{customer_name}</strong>.
    </mj-text>

    <mj-text font-size="16px" color="{THEME['text_primary']}" padding="20px 0">
      📅 {booking_date} ⏰ {booking_time}
    </mj-text>

    <mj-text font-size="14px" color="{THEME['text_muted']}">
      {details}
    </mj-text>
    """

    return get_base_template(
        title="New Booking Received",
        preview_text=f"New booking from {customer_name} for {service_type}",
        content_sections=content,
        is_user_email=True,
    )


def booking_cancelled_template(
    customer_name: str,
    provider_name: str,
    service_type: str,
    booking_date: str,
    booking_time: str,
) -> str:
    """Booking cancelled notification for customer"""
    content = f"""
    <mj-text>
      Hi {customer_name},
    </mj-text>

    <mj-text>
      Your <strong>{service_type}</strong> appointment with <strong>{provider_name}</strong>
      on {booking_date} at {booking_time} has been cancelled.
    </mj-text>

    <mj-text color="{THEME['text_muted']}" font-size="14px">
      If you think this is a mistake, please contact {provider_name} directly.
    </mj-text>
    """

    return get_base_template(
        title="Booking Cancelled",
        preview_text=f"Your booking with {provider_name} was cancelled",
        content_sections=content,
    )


def booking_rescheduled_template(
    customer_name: str,
    provider_name: str,
    service_type: str,
    new_booking_date: str,
    new_booking_time: str,
) -> str:
    """Booking rescheduled notification for customer"""
    content = f"""
    <mj-text>
      Hi {customer_name},
    </mj-text>

    <mj-text>
      <strong>{provider_name}</strong> has moved your <strong>{service_type}</strong> appointment.
    </mj-text>

    <mj-text align="center" font-size="16px" color="{THEME['text_primary']}" padding="20px 0 0 0">
      📅 {new_booking_date}
    </mj-text>

    <mj-text align="center" font-size="16px" color="{THEME['text_primary']}" padding="0 0 20px 0">
      ⏰ {new_booking_time}
    </mj-text>
    """

    return get_base_template(
        title="Your Booking Was Rescheduled",
        preview_text=f"New time for your booking with {provider_name}",
        content_sections=content,
    )


def provider_booking_rescheduled_template(
    provider_name: str,
    customer_name: str,
    service_type: str,
    new_booking_date: str,
    new_booking_time: str,
) -> str:
    """Booking rescheduled confirmation for provider"""
    content = f"""
    <mj-text>
      Hi {provider_name},
    </mj-text>

    <mj-text>
      The <strong>{service_type}</strong> booking for <strong>{customer_name}</strong> was rescheduled.
    </mj-text>

    <mj-text font-size="14px" color="{THEME['text_muted']}" padding="20px 0">
      📅 {new_booking_date} {new_booking_time}
    </mj-text>
    """

    return get_base_template(
        title="Booking Rescheduled",
        preview_text=f"Booking for {customer_name} rescheduled",
        content_sections=content,
        is_user_email=True,
    )


def subscription_purchased_template(
    provider_name: str,
    plan_name: str,
    expiry_date: str,
    is_renewal: bool,
) -> str:
    """Subscription purchase or renewal notification for provider"""
    action = "renewed" if is_renewal else "activated"
    content = f"""
    <mj-text>
      Hi {provider_name},
    </mj-text>

    <mj-text>
      Your <strong>{plan_name}</strong> plan has been {action}.
    </mj-text>

    <mj-text align="center" font-size="18px" font-weight="600" color="{THEME['success']}" padding="20px 0">
      ✓ Valid until {expiry_date}
    </mj-text>

    <mj-text color="{THEME['text_muted']}" font-size="14px">
      Thank you for choosing Appointly. A receipt is available in your billing dashboard.
    </mj-text>
    """

    return get_base_template(
        title="Subscription Renewed! 🎉" if is_renewal else "Subscription Activated! 🎉",
        preview_text=f"{plan_name} plan {action}",
        content_sections=content,
        is_user_email=True,
    )
