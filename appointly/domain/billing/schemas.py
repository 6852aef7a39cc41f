"""Billing domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator


class RazorpayCallback(BaseModel):
    """Fields the Razorpay checkout SDK hands back after a payment"""

    razorpay_order_id: str
    razorpay_payment_id: str
    razorpay_signature: str


class SubscriptionOrderRequest(BaseModel):
    """Schema for creating a plan checkout order"""

    plan_id: str


class SubscriptionPaymentDetails(BaseModel):
    razorpay_payment_id: Optional[str] = None
    razorpay_order_id: Optional[str] = None
    razorpay_signature: Optional[str] = None
    amount: Optional[float] = None

    @field_validator("amount")
    @classmethod
    def validate_amount(cls, v: Optional[float]) -> Optional[float]:
        if v is not None and v < 0:
            raise ValueError("amount cannot be negative")
        return v


class UpdateSubscriptionRequest(BaseModel):
    """Schema for applying a plan purchase or renewal"""

    username: str
    plan_id: str
    payment: SubscriptionPaymentDetails = SubscriptionPaymentDetails()


class PlanResponse(BaseModel):
    id: str
    name: str
    price: float
    duration: str
    days: Optional[int] = None


class EnrichedProviderResponse(BaseModel):
    """Provider with its current plan attached"""

    username: str
    name: str
    email: str
    plan_id: Optional[str] = None
    plan_expiry: Optional[datetime] = None
    has_used_trial: bool = False
    plan: Optional[PlanResponse] = None


class SubscriptionResult(BaseModel):
    success: bool
    error: Optional[str] = None
    provider: Optional[EnrichedProviderResponse] = None


class SignatureResult(BaseModel):
    success: bool
    error: Optional[str] = None


class PaymentItem(BaseModel):
    """Schema for payment ledger item"""

    model_config = ConfigDict(from_attributes=True)

    id: int
    plan_id: str
    booking_id: Optional[str] = None
    amount: float
    currency: str
    razorpay_order_id: str
    razorpay_payment_id: str
    created_at: Optional[datetime] = None


class PaymentsResponse(BaseModel):
    """Schema for payments list response"""

    payments: list[PaymentItem]
