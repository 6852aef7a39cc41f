"""Booking domain - booking submission, payment verification, cancel and reschedule"""

from .router import router

__all__ = ["router"]
