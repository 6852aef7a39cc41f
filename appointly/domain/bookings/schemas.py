"""Booking domain schemas - Pydantic models for validation"""

from datetime import datetime
from enum import Enum
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from ...shared.validators import validate_country_code, validate_email, validate_phone_digits
from ...utils.formatting import parse_instant
from ..billing.schemas import RazorpayCallback

DOORSTEP_FIELDS = ("flatHouseNo", "city", "state", "pincode", "country")


class ServiceCategory(str, Enum):
    """Delivery category of a service type; decides the booking address"""

    DOORSTEP = "doorstep"
    SHOP = "shop"
    ONLINE = "online"


class BookingRequest(BaseModel):
    """Schema for a submitted booking form"""

    model_config = ConfigDict(str_strip_whitespace=True)

    providerUsername: str = Field(min_length=1)
    customerName: str = Field(min_length=2, max_length=100)
    customerEmail: str
    countryCode: str = "+91"
    customerPhone: str
    serviceType: str = Field(min_length=1)
    dateTime: datetime
    flatHouseNo: Optional[str] = None
    landmark: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    pincode: Optional[str] = None
    country: Optional[str] = None
    paymentMethod: Optional[Literal["online", "later"]] = None
    customerTimezone: Optional[str] = None

    @field_validator("customerEmail")
    @classmethod
    def validate_customer_email(cls, v: str) -> str:
        if not v:
            raise ValueError("Email is required")
        return validate_email(v)

    @field_validator("customerPhone")
    @classmethod
    def validate_customer_phone(cls, v: str) -> str:
        if not v:
            raise ValueError("Phone number is required")
        return validate_phone_digits(v)

    @field_validator("countryCode")
    @classmethod
    def validate_code(cls, v: str) -> str:
        return validate_country_code(v) or "+91"

    @field_validator("dateTime", mode="before")
    @classmethod
    def parse_date_time(cls, v):
        if isinstance(v, str):
            try:
                return parse_instant(v)
            except ValueError:
                raise ValueError("Invalid date and time")
        return v

    @field_validator(
        "flatHouseNo", "landmark", "city", "state", "pincode", "country", "customerTimezone",
        "paymentMethod", mode="before",
    )
    @classmethod
    def blank_to_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @property
    def full_phone(self) -> str:
        return f"{self.countryCode}{self.customerPhone}"


def flatten_field_errors(exc: ValidationError) -> dict[str, list[str]]:
    """Field name -> messages, the shape the booking form renders inline"""
    errors: dict[str, list[str]] = {}
    for error in exc.errors():
        field = str(error["loc"][0]) if error.get("loc") else "_form"
        message = error.get("msg", "Invalid value")
        # pydantic prefixes custom errors with "Value error, "
        message = message.removeprefix("Value error, ")
        errors.setdefault(field, []).append(message)
    return errors


class VerifyBookingPaymentRequest(RazorpayCallback):
    """Checkout callback for a booking plus the amount charged"""

    amount: float = Field(ge=0)
    customerTimezone: Optional[str] = None


class RescheduleRequest(BaseModel):
    newDateTime: datetime

    @field_validator("newDateTime", mode="before")
    @classmethod
    def parse_new_date_time(cls, v):
        if isinstance(v, str):
            return parse_instant(v)
        return v


class BookingActionResult(BaseModel):
    success: bool
    error: Optional[str] = None


class PaymentVerificationResult(BaseModel):
    success: bool
    error: Optional[str] = None
    confirmationParams: Optional[str] = None
