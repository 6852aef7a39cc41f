"""Booking repository - Database operations for bookings"""

from typing import Optional

from sqlalchemy.orm import Session

from ...models import Booking


class BookingRepository:
    """Repository for booking database operations"""

    @staticmethod
    def get_booking(db: Session, provider_username: str, booking_id: str) -> Optional[Booking]:
        """Get a provider's booking by ID"""
        return (
            db.query(Booking)
            .filter(Booking.id == booking_id, Booking.provider_username == provider_username)
            .first()
        )

    @staticmethod
    def create_booking(db: Session, status: str = "Pending", **booking_data) -> Booking:
        """Create a new booking"""
        booking = Booking(status=status, payment={}, **booking_data)
        db.add(booking)
        db.commit()
        db.refresh(booking)
        return booking

    @staticmethod
    def update_booking(db: Session, booking: Booking, **updates) -> Booking:
        """Update a booking with provided fields; payment is merged, not replaced"""
        payment = updates.pop("payment", None)
        if payment is not None:
            booking.payment = {**(booking.payment or {}), **payment}

        for key, value in updates.items():
            if value is not None and hasattr(booking, key):
                setattr(booking, key, value)

        db.commit()
        db.refresh(booking)
        return booking
