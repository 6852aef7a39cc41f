"""Billing router - FastAPI endpoints for subscription billing"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...config import GatewayConfig, load_gateway_config
from ...database import get_db
from .repository import BillingRepository
from .schemas import (
    PaymentsResponse,
    RazorpayCallback,
    SignatureResult,
    SubscriptionOrderRequest,
    SubscriptionResult,
    UpdateSubscriptionRequest,
)
from .subscription_service import SubscriptionService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/billing", tags=["Billing"])


def get_subscription_service(
    db: Session = Depends(get_db),
    config: GatewayConfig = Depends(load_gateway_config),
) -> SubscriptionService:
    """Dependency injection for SubscriptionService"""
    return SubscriptionService(db, config)


# ============================================================================
# SUBSCRIPTION MANAGEMENT
# ============================================================================


@router.post("/orders")
async def create_subscription_order(
    body: SubscriptionOrderRequest,
    service: SubscriptionService = Depends(get_subscription_service),
):
    """Create a Razorpay order for a plan checkout"""
    return await service.create_subscription_order(body.plan_id)


@router.post("/verify-signature", response_model=SignatureResult)
async def verify_subscription_signature(
    body: RazorpayCallback,
    service: SubscriptionService = Depends(get_subscription_service),
):
    """Verify the checkout callback signature before applying a plan"""
    return service.verify_subscription_payment_signature(body)


@router.post("/subscriptions", response_model=SubscriptionResult)
async def update_provider_subscription(
    body: UpdateSubscriptionRequest,
    service: SubscriptionService = Depends(get_subscription_service),
):
    """Apply a plan purchase, renewal or trial"""
    return await service.update_provider_subscription(body.username, body.plan_id, body.payment)


# ============================================================================
# PAYMENT INFORMATION
# ============================================================================


@router.get("/payments/{username}", response_model=PaymentsResponse)
async def get_provider_payments(username: str, db: Session = Depends(get_db)):
    """Get a provider's payment ledger"""
    payments = BillingRepository.get_payments_for_provider(db, username)
    return {"payments": payments}
