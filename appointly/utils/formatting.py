"""
Date, time and money formatting helpers.
Booking instants are stored as naive UTC datetimes and rendered in the
provider's or customer's timezone using date-fns style patterns, which is
what provider settings store (e.g. "PPP", "dd/MM/yyyy").
"""

import logging
import re
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dateutil.relativedelta import relativedelta

logger = logging.getLogger(__name__)

DEFAULT_DATE_FORMAT = "PPP"
DEFAULT_TRIAL_DAYS = 7
LIFETIME_EXPIRY = datetime(9999, 12, 31)

# Long-form presets expand into token patterns before rendering
_PRESETS = {
    "PPPP": "EEEE, MMMM do, yyyy",
    "PPP": "MMMM do, yyyy",
    "PP": "MMM d, yyyy",
    "P": "MM/dd/yyyy",
    "p": "h:mm a",
    "pp": "h:mm:ss a",
}

_TOKEN_RE = re.compile(
    r"'[^']*'|yyyy|yy|MMMM|MMM|MM|M|do|dd|d|EEEE|EEE|HH|H|hh|h|mm|m|ss|s|aaa|aa|a"
)


def get_zone(tz_name: Optional[str]) -> ZoneInfo:
    """Resolve an IANA timezone name, falling back to UTC"""
    try:
        return ZoneInfo(tz_name or "UTC")
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning(f"⚠️ Unknown timezone '{tz_name}', rendering in UTC")
        return ZoneInfo("UTC")


def as_utc(instant: datetime) -> datetime:
    """Treat naive datetimes as UTC"""
    if instant.tzinfo is None:
        return instant.replace(tzinfo=timezone.utc)
    return instant.astimezone(timezone.utc)


def to_naive_utc(instant: datetime) -> datetime:
    """Normalize an instant for storage"""
    return as_utc(instant).replace(tzinfo=None)


def ordinal(day: int) -> str:
    if 11 <= day % 100 <= 13:
        return f"{day}th"
    suffix = {1: "st", 2: "nd", 3: "rd"}.get(day % 10, "th")
    return f"{day}{suffix}"


def _render_token(token: str, local: datetime) -> str:
    if token.startswith("'"):
        return token[1:-1]
    hour12 = local.hour % 12 or 12
    return {
        "yyyy": f"{local.year:04d}",
        "yy": f"{local.year % 100:02d}",
        "MMMM": local.strftime("%B"),
        "MMM": local.strftime("%b"),
        "MM": f"{local.month:02d}",
        "M": str(local.month),
        "do": ordinal(local.day),
        "dd": f"{local.day:02d}",
        "d": str(local.day),
        "EEEE": local.strftime("%A"),
        "EEE": local.strftime("%a"),
        "HH": f"{local.hour:02d}",
        "H": str(local.hour),
        "hh": f"{hour12:02d}",
        "h": str(hour12),
        "mm": f"{local.minute:02d}",
        "m": str(local.minute),
        "ss": f"{local.second:02d}",
        "s": str(local.second),
        "a": "AM" if local.hour < 12 else "PM",
        "aa": "AM" if local.hour < 12 else "PM",
        "aaa": "am" if local.hour < 12 else "pm",
    }[token]


def format_in_timezone(instant: datetime, tz_name: Optional[str], pattern: Optional[str]) -> str:
    """Render an instant in the given timezone with a date-fns style pattern"""
    local = as_utc(instant).astimezone(get_zone(tz_name))
    pattern = pattern or DEFAULT_DATE_FORMAT
    pattern = _PRESETS.get(pattern, pattern)
    return _TOKEN_RE.sub(lambda match: _render_token(match.group(0), local), pattern)


def timezone_label(tz_name: Optional[str]) -> str:
    """'America/New_York' -> 'America/New York'"""
    return (tz_name or "UTC").replace("_", " ")


def display_time(instant: datetime, tz_name: Optional[str]) -> str:
    """Time with its zone label, e.g. '9:30 AM (Asia/Kolkata)'"""
    # Unknown names render and label as UTC
    zone_name = get_zone(tz_name).key
    return f"{format_in_timezone(instant, zone_name, 'p')} ({timezone_label(zone_name)})"


def to_iso_z(instant: datetime) -> str:
    """ISO-8601 in UTC with millisecond precision and a trailing Z"""
    utc = as_utc(instant)
    return utc.strftime("%Y-%m-%dT%H:%M:%S.") + f"{utc.microsecond // 1000:03d}Z"


def parse_instant(value: str) -> datetime:
    """Parse an ISO-8601 string (trailing Z allowed) into naive UTC"""
    value = value.strip()
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    return to_naive_utc(datetime.fromisoformat(value))


def format_amount(amount: Optional[float]) -> str:
    """500.0 -> '500', 12345.67 -> '12345.67', never rounded or in exponent form"""
    if amount is None:
        return "0"
    if float(amount).is_integer():
        return str(int(amount))
    return format(Decimal(str(amount)), "f")


def compute_plan_expiry(duration: str, base_date: datetime, days: Optional[int] = None) -> datetime:
    """
    New expiry for a plan applied on top of base_date.
    base_date is the current expiry for an unexpired renewal, otherwise now.
    """
    if base_date >= LIFETIME_EXPIRY:
        return LIFETIME_EXPIRY
    if duration == "monthly":
        return base_date + relativedelta(months=1)
    if duration == "yearly":
        return base_date + relativedelta(years=1)
    if duration == "lifetime":
        return LIFETIME_EXPIRY
    if duration == "trial":
        return base_date + timedelta(days=days or DEFAULT_TRIAL_DAYS)
    raise ValueError("Invalid plan duration")
