"""Subscription service - Business logic for plan purchases and renewals"""

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from ...cache import invalidate_provider_cache
from ...config import GatewayConfig
from ...email_service import send_subscription_email
from ...exceptions import PaymentConfigurationError, PlanNotFoundError, ProviderNotFoundError
from ...models import Plan, Provider
from ...services.notification_service import notify_admin
from ...utils.formatting import compute_plan_expiry
from ...webhook_security import verify_payment_signature
from ..providers.repository import ProviderRepository
from .razorpay_service import RazorpayService
from .repository import BillingRepository
from .schemas import RazorpayCallback, SubscriptionPaymentDetails

logger = logging.getLogger(__name__)

INVALID_SIGNATURE = "Invalid payment signature."
TRIAL_ALREADY_USED = "You have already used your trial plan. Please choose a paid plan."
PAYMENT_DETAILS_REQUIRED = "Payment details are required for paid plans."


def serialize_plan(plan: Optional[Plan]) -> Optional[dict]:
    if plan is None:
        return None
    return {
        "id": plan.id,
        "name": plan.name,
        "price": plan.price,
        "duration": plan.duration,
        "days": plan.days,
    }


def enrich_provider(provider: Provider, plan: Optional[Plan]) -> dict:
    """Provider fields the dashboard needs, with the plan attached"""
    return {
        "username": provider.username,
        "name": provider.name,
        "email": provider.email,
        "plan_id": provider.plan_id,
        "plan_expiry": provider.plan_expiry,
        "has_used_trial": provider.has_used_trial,
        "plan": serialize_plan(plan),
    }


class SubscriptionService:
    """Service for subscription management"""

    def __init__(
        self,
        db: Session,
        config: GatewayConfig,
        razorpay: Optional[RazorpayService] = None,
    ):
        self.db = db
        self.config = config
        self.razorpay = razorpay or RazorpayService(config)
        self.repo = BillingRepository()
        self.providers = ProviderRepository()

    def verify_subscription_payment_signature(self, callback: RazorpayCallback) -> dict:
        """Check a plan checkout callback; a mismatch is a result, not an error"""
        if not self.config.can_sign:
            raise PaymentConfigurationError("Razorpay key secret is not configured.")

        if not verify_payment_signature(
            self.config.key_secret,
            callback.razorpay_order_id,
            callback.razorpay_payment_id,
            callback.razorpay_signature,
        ):
            return {"success": False, "error": INVALID_SIGNATURE}

        return {"success": True}

    async def create_subscription_order(self, plan_id: str) -> dict:
        """Create a Razorpay order for a plan's price"""
        plan = self.repo.get_plan(self.db, plan_id)
        if not plan:
            raise PlanNotFoundError(plan_id)

        order = await self.razorpay.create_order(plan.price, notes={"plan_id": plan.id})
        return {"order": order, "plan": serialize_plan(plan)}

    def _admin_message(self, provider: Provider, plan: Plan, is_renewal: bool) -> str:
        if is_renewal:
            current_plan = self.repo.get_plan(self.db, provider.plan_id)
            if current_plan and plan.price > current_plan.price:
                return f"{provider.name} has upgraded their plan to {plan.name}."
            return f"{provider.name} has renewed their {plan.name} plan."
        return f"{provider.name} has subscribed to the {plan.name} plan."

    def _verify_plan_payment(self, payment: SubscriptionPaymentDetails) -> None:
        """Paid plans need the checkout ids and a signature over that exact pair"""
        if not payment.razorpay_payment_id or not payment.razorpay_order_id or not payment.razorpay_signature:
            raise ValueError(PAYMENT_DETAILS_REQUIRED)
        if not self.config.can_sign:
            raise PaymentConfigurationError("Razorpay key secret is not configured.")
        if not verify_payment_signature(
            self.config.key_secret,
            payment.razorpay_order_id,
            payment.razorpay_payment_id,
            payment.razorpay_signature,
        ):
            raise ValueError(INVALID_SIGNATURE)

    async def update_provider_subscription(
        self,
        username: str,
        plan_id: str,
        payment: SubscriptionPaymentDetails,
        now: Optional[datetime] = None,
    ) -> dict:
        """
        Apply a plan purchase, renewal or trial to a provider account.

        Best-effort rather than transactional: any failure returns
        {"success": False, "error": ...} and already-persisted steps stay applied.
        """
        try:
            plan = self.repo.get_plan(self.db, plan_id)
            if not plan:
                raise PlanNotFoundError(plan_id)

            provider = self.providers.get_provider_by_username(self.db, username)
            if not provider:
                raise ProviderNotFoundError(username)

            if plan.duration == "trial" and provider.has_used_trial:
                return {"success": False, "error": TRIAL_ALREADY_USED}

            now = now or datetime.utcnow()
            is_renewal = bool(
                provider.plan_id and provider.plan_expiry and provider.plan_expiry > now
            )
            base_date = provider.plan_expiry if is_renewal else now
            notification_message = self._admin_message(provider, plan, is_renewal)

            new_expiry = compute_plan_expiry(plan.duration, base_date, plan.days)

            amount_paid = payment.amount
            is_paid = amount_paid is not None and amount_paid > 0
            if is_paid or plan.price > 0:
                self._verify_plan_payment(payment)

            self.repo.update_provider_plan(
                self.db,
                provider,
                plan_id=plan.id,
                plan_expiry=new_expiry,
                has_used_trial=provider.has_used_trial or plan.duration == "trial",
            )

            if is_paid:
                self.repo.create_payment_record(
                    self.db,
                    provider_username=username,
                    plan_id=plan.id,
                    amount=amount_paid,
                    currency=self.config.currency,
                    razorpay_order_id=payment.razorpay_order_id,
                    razorpay_payment_id=payment.razorpay_payment_id,
                )
                logger.info(f"💳 Recorded {amount_paid} payment for {username} ({plan.id})")

            notify_admin(self.db, notification_message)

            await send_subscription_email(
                provider.email, provider.name, plan.name, new_expiry, is_renewal
            )

            updated_provider = self.providers.get_provider_by_username(self.db, username)
            if not updated_provider:
                raise ProviderNotFoundError(username)

            invalidate_provider_cache(username)

            logger.info(f"✅ Applied plan {plan.id} to {username}, expires {new_expiry.isoformat()}")
            return {"success": True, "provider": enrich_provider(updated_provider, plan)}

        except Exception as e:
            logger.error(f"❌ Subscription update failed for {username}: {e}", exc_info=True)
            return {"success": False, "error": str(e) or "Failed to update subscription."}
