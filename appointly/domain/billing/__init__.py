"""Billing domain - Plan purchases, renewals and Razorpay payments"""

from .router import router

__all__ = ["router"]
