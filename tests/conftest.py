import json
import os

os.environ.setdefault("SECRET_KEY", "test-secret-key")

import httpx
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

import appointly.models_google_calendar  # noqa: F401
from appointly import cache as cache_module
from appointly import email_service
from appointly.config import GatewayConfig
from appointly.database import Base
from appointly.domain.billing.razorpay_service import RazorpayService
from appointly.models import Plan, Provider
from appointly.webhook_security import sign_payment

KEY_ID = "rzp_test_key"
KEY_SECRET = "rzp_test_secret"


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def db(engine) -> Session:
    TestingSession = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def gateway_config() -> GatewayConfig:
    return GatewayConfig(key_id=KEY_ID, key_secret=KEY_SECRET)


@pytest.fixture
def sign():
    """Signature the checkout SDK would hand back for an order/payment pair"""

    def _sign(order_id: str, payment_id: str) -> str:
        return sign_payment(KEY_SECRET, order_id, payment_id)

    return _sign


class RazorpayRecorder:
    """Collects order requests made through an httpx.MockTransport"""

    def __init__(self, status_code: int = 200):
        self.status_code = status_code
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.status_code != 200:
            return httpx.Response(self.status_code, json={"error": {"description": "gateway down"}})
        body = json.loads(request.content)
        return httpx.Response(
            200,
            json={
                "id": f"order_{len(self.requests)}",
                "entity": "order",
                "amount": body["amount"],
                "currency": body["currency"],
                "receipt": body["receipt"],
                "status": "created",
                "notes": body.get("notes", {}),
            },
        )

    @property
    def last_payload(self) -> dict:
        return json.loads(self.requests[-1].content)


@pytest.fixture
def razorpay_recorder() -> RazorpayRecorder:
    return RazorpayRecorder()


@pytest.fixture
def razorpay(gateway_config, razorpay_recorder) -> RazorpayService:
    return RazorpayService(gateway_config, transport=httpx.MockTransport(razorpay_recorder))


@pytest.fixture(autouse=True)
def sent_emails(monkeypatch) -> list[dict]:
    """Capture outgoing mail instead of calling Resend"""
    sent = []

    async def fake_send_email(to, subject, mjml_content, from_address=None):
        sent.append({"to": to, "subject": subject, "body": mjml_content})
        return {"id": f"email_{len(sent)}"}

    monkeypatch.setattr(email_service, "send_email", fake_send_email)
    return sent


@pytest.fixture(autouse=True)
def invalidated_providers(monkeypatch) -> list[str]:
    """Record cache invalidations without touching Redis"""
    deleted = []

    def fake_delete_pattern(pattern):
        deleted.append(pattern)
        return 0

    monkeypatch.setattr(cache_module.cache, "delete_pattern", fake_delete_pattern)
    return deleted


@pytest.fixture
def plans(db) -> dict[str, Plan]:
    rows = [
        Plan(id="trial", name="Free Trial", price=0, duration="trial", days=14),
        Plan(id="basic-monthly", name="Basic", price=299, duration="monthly"),
        Plan(id="pro-monthly", name="Pro", price=599, duration="monthly"),
        Plan(id="pro-yearly", name="Pro Yearly", price=5999, duration="yearly"),
        Plan(id="lifetime", name="Lifetime", price=19999, duration="lifetime"),
    ]
    db.add_all(rows)
    db.commit()
    return {plan.id: plan for plan in rows}


@pytest.fixture
def provider(db) -> Provider:
    provider = Provider(
        username="asha",
        name="Asha Salon",
        email="asha@example.com",
        phone="+919800000000",
        settings={
            "serviceTypes": [
                {"id": "doorstep", "name": "Home Visit", "enabled": True, "priceEnabled": True, "price": 500},
                {"id": "shop", "name": "Salon Visit", "enabled": True, "priceEnabled": False, "price": 0},
                {"id": "online", "name": "Video Consult", "enabled": True, "priceEnabled": True, "price": 250},
                {"id": "online", "name": "Retired Service", "enabled": False, "priceEnabled": False},
            ],
            "timezone": "Asia/Kolkata",
            "dateFormat": "PPP",
            "currency": "INR",
            "slotDuration": 30,
            "blockedDates": [],
            "blockedSlots": [],
            "shopAddress": "12 MG Road, Bengaluru",
            "googleMapLink": "https://maps.google.com/?q=asha",
            "onlinePaymentEnabled": True,
            "payAfterServiceEnabled": True,
        },
    )
    db.add(provider)
    db.commit()
    db.refresh(provider)
    return provider
