"""Billing repository - Database operations for plans and payments"""

from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from ...models import PaymentRecord, Plan, Provider


class BillingRepository:
    """Repository for billing database operations"""

    @staticmethod
    def get_plan(db: Session, plan_id: str) -> Optional[Plan]:
        """Get plan by ID"""
        return db.query(Plan).filter(Plan.id == plan_id).first()

    @staticmethod
    def update_provider_plan(
        db: Session,
        provider: Provider,
        plan_id: str,
        plan_expiry: datetime,
        has_used_trial: bool,
    ) -> Provider:
        """Update provider subscription fields"""
        provider.plan_id = plan_id
        provider.plan_expiry = plan_expiry
        provider.has_used_trial = has_used_trial

        db.commit()
        db.refresh(provider)
        return provider

    @staticmethod
    def create_payment_record(
        db: Session,
        provider_username: str,
        plan_id: str,
        amount: float,
        razorpay_order_id: str,
        razorpay_payment_id: str,
        currency: str = "INR",
        booking_id: Optional[str] = None,
    ) -> PaymentRecord:
        """Append a payment ledger record"""
        record = PaymentRecord(
            provider_username=provider_username,
            booking_id=booking_id,
            plan_id=plan_id,
            amount=amount,
            currency=currency,
            razorpay_order_id=razorpay_order_id,
            razorpay_payment_id=razorpay_payment_id,
        )
        db.add(record)
        db.commit()
        db.refresh(record)
        return record

    @staticmethod
    def get_payments_for_provider(db: Session, provider_username: str) -> list[PaymentRecord]:
        """Get a provider's payment ledger, newest first"""
        return (
            db.query(PaymentRecord)
            .filter(PaymentRecord.provider_username == provider_username)
            .order_by(PaymentRecord.id.desc())
            .all()
        )
