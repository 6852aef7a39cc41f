"""Shared validation utilities"""

import re
from typing import Optional


def validate_email(email: Optional[str]) -> Optional[str]:
    """
    Validate email format.

    Args:
        email: Email address string

    Returns:
        Lowercase email address

    Raises:
        ValueError: If email format is invalid
    """
    if not email:
        return email

    email = email.strip().lower()

    # Basic email validation pattern
    email_pattern = r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$"

    if not re.match(email_pattern, email):
        raise ValueError("Invalid email format")

    return email


def validate_phone_digits(phone: Optional[str]) -> Optional[str]:
    """
    Validate a local phone number (country code is collected separately).

    Returns:
        The number with spaces, dashes and brackets removed

    Raises:
        ValueError: If the number is not 7-15 digits
    """
    if not phone:
        return phone

    digits = re.sub(r"[\s\-()]", "", phone)
    if not re.fullmatch(r"\d{7,15}", digits):
        raise ValueError("Phone number must be 7 to 15 digits")

    return digits


def validate_country_code(code: Optional[str]) -> Optional[str]:
    """'+91' style dialing code"""
    if not code:
        return code

    code = code.strip()
    if not code.startswith("+"):
        code = f"+{code}"
    if not re.fullmatch(r"\+\d{1,4}", code):
        raise ValueError("Invalid country code")

    return code
