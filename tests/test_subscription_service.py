from datetime import datetime

import pytest

from appointly.config import GatewayConfig
from appointly.domain.billing.schemas import RazorpayCallback, SubscriptionPaymentDetails
from appointly.domain.billing.subscription_service import SubscriptionService
from appointly.exceptions import PaymentConfigurationError, PlanNotFoundError
from appointly.models import Notification, PaymentRecord

NOW = datetime(2024, 1, 15, 10, 0)


@pytest.fixture
def paid(sign):
    """Signed checkout details for a plan payment"""

    def _paid(amount, order_id="order_s1", payment_id="pay_s1") -> SubscriptionPaymentDetails:
        return SubscriptionPaymentDetails(
            razorpay_order_id=order_id,
            razorpay_payment_id=payment_id,
            razorpay_signature=sign(order_id, payment_id),
            amount=amount,
        )

    return _paid


@pytest.fixture
def service(db, gateway_config, razorpay) -> SubscriptionService:
    return SubscriptionService(db, gateway_config, razorpay=razorpay)


# ============================================================================
# SIGNATURE
# ============================================================================


def test_valid_subscription_signature(service, sign):
    body = RazorpayCallback(
        razorpay_order_id="order_s1", razorpay_payment_id="pay_s1", razorpay_signature=sign("order_s1", "pay_s1")
    )
    assert service.verify_subscription_payment_signature(body) == {"success": True}


def test_tampered_subscription_signature(service, db, sign):
    body = RazorpayCallback(
        razorpay_order_id="order_s1",
        razorpay_payment_id="pay_s1",
        razorpay_signature=sign("order_s1", "pay_s2"),
    )

    assert service.verify_subscription_payment_signature(body) == {
        "success": False,
        "error": "Invalid payment signature.",
    }
    assert db.query(PaymentRecord).count() == 0


def test_signature_check_requires_key_secret(db):
    service = SubscriptionService(db, GatewayConfig(key_id="rzp_test_key", key_secret=None))
    body = RazorpayCallback(razorpay_order_id="o", razorpay_payment_id="p", razorpay_signature="s")

    with pytest.raises(PaymentConfigurationError):
        service.verify_subscription_payment_signature(body)


# ============================================================================
# ORDERS
# ============================================================================


async def test_create_subscription_order_charges_plan_price(service, plans, razorpay_recorder):
    result = await service.create_subscription_order("pro-monthly")

    assert result["plan"]["id"] == "pro-monthly"
    assert result["order"]["amount"] == 59900
    assert razorpay_recorder.last_payload["notes"] == {"plan_id": "pro-monthly"}


async def test_create_order_for_unknown_plan(service, plans):
    with pytest.raises(PlanNotFoundError):
        await service.create_subscription_order("platinum")


async def test_create_order_without_keys(db, plans):
    service = SubscriptionService(db, GatewayConfig(key_id=None, key_secret=None))

    with pytest.raises(PaymentConfigurationError, match="Razorpay settings not configured."):
        await service.create_subscription_order("pro-monthly")


# ============================================================================
# APPLYING PLANS
# ============================================================================


async def test_new_monthly_subscription(service, db, plans, provider, sent_emails, invalidated_providers, paid):
    result = await service.update_provider_subscription("asha", "basic-monthly", paid(299), now=NOW)

    assert result["success"] is True
    assert result["provider"]["plan_id"] == "basic-monthly"
    assert result["provider"]["plan"]["name"] == "Basic"
    assert result["provider"]["plan_expiry"] == datetime(2024, 2, 15, 10, 0)

    record = db.query(PaymentRecord).one()
    assert (record.plan_id, record.amount, record.currency, record.booking_id) == ("basic-monthly", 299, "INR", None)

    notification = db.query(Notification).one()
    assert notification.recipient == "admin"
    assert notification.message == "Asha Salon has subscribed to the Basic plan."

    assert sent_emails[0]["to"] == "asha@example.com"
    assert sent_emails[0]["subject"] == "Subscription Activated: Basic"
    assert invalidated_providers == ["provider:asha*"]


async def test_monthly_purchase_on_2024_01_15(service, db, plans, provider, paid):
    result = await service.update_provider_subscription(
        "asha", "basic-monthly", paid(299), now=datetime(2024, 1, 15)
    )

    assert result["provider"]["plan_expiry"] == datetime(2024, 2, 15)


async def test_renewal_extends_from_current_expiry(service, db, plans, provider, sent_emails, paid):
    first = await service.update_provider_subscription("asha", "basic-monthly", paid(299), now=NOW)
    second = await service.update_provider_subscription(
        "asha", "basic-monthly", paid(299, "order_s2", "pay_s2"), now=datetime(2024, 2, 1)
    )
    third = await service.update_provider_subscription(
        "asha", "basic-monthly", paid(299, "order_s3", "pay_s3"), now=datetime(2024, 2, 2)
    )

    expiries = [r["provider"]["plan_expiry"] for r in (first, second, third)]
    assert expiries == [datetime(2024, 2, 15, 10), datetime(2024, 3, 15, 10), datetime(2024, 4, 15, 10)]
    assert expiries == sorted(expiries)

    messages = [n.message for n in db.query(Notification).order_by(Notification.id)]
    assert messages[1] == "Asha Salon has renewed their Basic plan."
    assert sent_emails[1]["subject"] == "Subscription Renewed: Basic"
    assert db.query(PaymentRecord).count() == 3


async def test_lapsed_plan_restarts_from_now(service, db, plans, provider, paid):
    await service.update_provider_subscription("asha", "basic-monthly", paid(299), now=NOW)

    result = await service.update_provider_subscription(
        "asha", "basic-monthly", paid(299, "order_s2", "pay_s2"), now=datetime(2024, 6, 1)
    )

    assert result["provider"]["plan_expiry"] == datetime(2024, 7, 1)
    assert db.query(Notification).order_by(Notification.id.desc()).first().message == (
        "Asha Salon has subscribed to the Basic plan."
    )


async def test_upgrade_is_announced(service, db, plans, provider, paid):
    await service.update_provider_subscription("asha", "basic-monthly", paid(299), now=NOW)
    await service.update_provider_subscription(
        "asha", "pro-monthly", paid(599, "order_s2", "pay_s2"), now=datetime(2024, 1, 20)
    )

    latest = db.query(Notification).order_by(Notification.id.desc()).first()
    assert latest.message == "Asha Salon has upgraded their plan to Pro."


async def test_trial_can_only_be_used_once(service, db, plans, provider, sent_emails):
    first = await service.update_provider_subscription(
        "asha", "trial", SubscriptionPaymentDetails(amount=0), now=NOW
    )
    second = await service.update_provider_subscription(
        "asha", "trial", SubscriptionPaymentDetails(amount=0), now=NOW
    )

    assert first["success"] is True
    assert first["provider"]["has_used_trial"] is True
    assert first["provider"]["plan_expiry"] == datetime(2024, 1, 29, 10, 0)
    assert second == {
        "success": False,
        "error": "You have already used your trial plan. Please choose a paid plan.",
    }
    assert db.query(PaymentRecord).count() == 0

    db.expire_all()
    assert provider.has_used_trial is True


async def test_paid_plan_after_trial_keeps_trial_flag(service, db, plans, provider, paid):
    await service.update_provider_subscription("asha", "trial", SubscriptionPaymentDetails(), now=NOW)
    result = await service.update_provider_subscription("asha", "pro-yearly", paid(5999), now=NOW)

    assert result["provider"]["has_used_trial"] is True
    assert result["provider"]["plan_expiry"] == datetime(2025, 1, 29, 10, 0)


async def test_lifetime_plan(service, db, plans, provider, paid):
    result = await service.update_provider_subscription("asha", "lifetime", paid(19999), now=NOW)

    assert result["provider"]["plan_expiry"] == datetime(9999, 12, 31)


async def test_paid_plan_requires_payment_ids(service, db, plans, provider):
    result = await service.update_provider_subscription(
        "asha", "basic-monthly", SubscriptionPaymentDetails(amount=299), now=NOW
    )

    assert result == {"success": False, "error": "Payment details are required for paid plans."}
    assert db.query(PaymentRecord).count() == 0
    db.refresh(provider)
    assert provider.plan_id is None


async def test_unsigned_payment_does_not_grant_plan(service, db, plans, provider, sent_emails):
    made_up = SubscriptionPaymentDetails(
        razorpay_order_id="made_up", razorpay_payment_id="made_up", razorpay_signature="0" * 64, amount=19999
    )

    result = await service.update_provider_subscription("asha", "lifetime", made_up, now=NOW)

    assert result == {"success": False, "error": "Invalid payment signature."}
    assert db.query(PaymentRecord).count() == 0
    db.refresh(provider)
    assert provider.plan_id is None
    assert sent_emails == []


async def test_signature_from_another_order_is_rejected(service, db, plans, provider, sign):
    payment = SubscriptionPaymentDetails(
        razorpay_order_id="order_s2",
        razorpay_payment_id="pay_s1",
        razorpay_signature=sign("order_s1", "pay_s1"),
        amount=299,
    )

    result = await service.update_provider_subscription("asha", "basic-monthly", payment, now=NOW)

    assert result["success"] is False
    assert db.query(PaymentRecord).count() == 0


async def test_priced_plan_without_amount_still_needs_payment(service, db, plans, provider):
    result = await service.update_provider_subscription(
        "asha", "pro-monthly", SubscriptionPaymentDetails(), now=NOW
    )

    assert result == {"success": False, "error": "Payment details are required for paid plans."}
    db.refresh(provider)
    assert provider.plan_id is None


@pytest.mark.parametrize("plan_id", ["basic-monthly", "pro-yearly"])
async def test_shorter_plan_after_lifetime_keeps_lifetime_expiry(service, db, plans, provider, paid, plan_id):
    await service.update_provider_subscription("asha", "lifetime", paid(19999), now=NOW)

    result = await service.update_provider_subscription(
        "asha", plan_id, paid(299, "order_s2", "pay_s2"), now=datetime(2024, 3, 1)
    )

    assert result["success"] is True
    assert result["provider"]["plan_expiry"] == datetime(9999, 12, 31)


@pytest.mark.parametrize(
    "username,plan_id,error",
    [("asha", "platinum", "Plan not found"), ("nobody", "basic-monthly", "Provider not found.")],
)
async def test_missing_plan_or_provider_is_a_failure_result(service, plans, provider, username, plan_id, error, paid):
    result = await service.update_provider_subscription(username, plan_id, paid(299), now=NOW)

    assert result == {"success": False, "error": error}
