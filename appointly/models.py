import uuid

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
)
from sqlalchemy.ext.mutable import MutableDict
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .database import Base

NOTIFICATION_TYPES = ("new_booking", "general")

ADMIN_RECIPIENT = "admin"


def generate_booking_id():
    """Generate a unique booking ID"""
    return str(uuid.uuid4())


class Provider(Base):
    __tablename__ = "providers"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(100), unique=True, index=True, nullable=False)
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False)
    phone = Column(String(50), nullable=True)
    # serviceTypes, timezone, dateFormat, currency, slotDuration, blockedDates,
    # blockedSlots, googleMapLink, shopAddress, onlinePaymentEnabled, payAfterServiceEnabled
    settings = Column(MutableDict.as_mutable(JSON), default=dict, nullable=False)
    plan_id = Column(String(100), ForeignKey("plans.id"), nullable=True)
    plan_expiry = Column(DateTime, nullable=True)  # naive UTC
    has_used_trial = Column(Boolean, default=False, nullable=False)
    google_calendar = Column(Boolean, default=False, nullable=False)  # Calendar sync connected
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    plan = relationship("Plan")
    bookings = relationship("Booking", back_populates="provider")


class Plan(Base):
    __tablename__ = "plans"

    id = Column(String(100), primary_key=True)
    name = Column(String(255), nullable=False)
    price = Column(Float, default=0, nullable=False)
    duration = Column(String(20), nullable=False)  # trial, monthly, yearly, lifetime
    days = Column(Integer, nullable=True)  # Trial length, defaults to 7 when unset
    created_at = Column(DateTime, server_default=func.now())


class Booking(Base):
    __tablename__ = "bookings"

    id = Column(String(36), primary_key=True, default=generate_booking_id)
    provider_username = Column(
        String(100), ForeignKey("providers.username"), index=True, nullable=False
    )
    customer_name = Column(String(255), nullable=False)
    customer_email = Column(String(255), nullable=False)
    customer_phone = Column(String(50), nullable=False)
    service_type = Column(String(255), nullable=False)
    date_time = Column(DateTime, nullable=False)  # naive UTC
    address = Column(Text, nullable=True)
    # Doorstep address parts
    flat_house_no = Column(String(255), nullable=True)
    landmark = Column(String(255), nullable=True)
    city = Column(String(255), nullable=True)
    state = Column(String(255), nullable=True)
    pincode = Column(String(20), nullable=True)
    country = Column(String(100), nullable=True)
    status = Column(String(20), default="Pending", nullable=False)  # Pending, Upcoming, Canceled
    # orderId, paymentId, amount, status
    payment = Column(MutableDict.as_mutable(JSON), default=dict, nullable=False)
    google_calendar_event_id = Column(String(255), nullable=True)
    google_meet_link = Column(String(500), nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    provider = relationship("Provider", back_populates="bookings")


class PaymentRecord(Base):
    """Immutable payment ledger entry"""

    __tablename__ = "payments"

    id = Column(Integer, primary_key=True, index=True)
    provider_username = Column(String(100), index=True, nullable=False)
    booking_id = Column(String(36), nullable=True)
    plan_id = Column(String(100), nullable=False)  # "booking" for booking payments
    amount = Column(Float, nullable=False)
    currency = Column(String(3), default="INR", nullable=False)
    razorpay_order_id = Column(String(100), index=True, nullable=False)
    razorpay_payment_id = Column(String(100), index=True, nullable=False)
    created_at = Column(DateTime, server_default=func.now())


class Notification(Base):
    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True, index=True)
    recipient = Column(String(100), index=True, nullable=False)  # provider username or "admin"
    message = Column(Text, nullable=False)
    type = Column(String(50), default="general", nullable=False)  # new_booking, general
    link = Column(String(500), nullable=True)
    read = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, server_default=func.now())
