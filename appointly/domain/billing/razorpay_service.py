"""Razorpay service - Integration with the Razorpay Orders API"""

import logging
import time
from typing import Optional

import httpx

from ...config import GatewayConfig
from ...exceptions import PaymentConfigurationError, PaymentGatewayError

logger = logging.getLogger(__name__)


def to_minor_units(amount: float) -> int:
    """Rupees to paise"""
    return int(round(float(amount) * 100))


def build_receipt_id() -> str:
    """Receipt id derived from the current timestamp (milliseconds)"""
    return f"receipt_order_{int(time.time() * 1000)}"


class RazorpayService:
    """Service for Razorpay API operations, bound to one GatewayConfig"""

    def __init__(self, config: GatewayConfig, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.config = config
        self.transport = transport

    def is_available(self) -> bool:
        """Check if order creation is configured"""
        return self.config.can_create_orders

    async def create_order(
        self,
        amount: float,
        currency: Optional[str] = None,
        notes: Optional[dict] = None,
    ) -> dict:
        """
        Create an auto-captured order.

        Args:
            amount: Amount in major units (rupees)
            currency: ISO currency, defaults to the configured currency (INR)
            notes: Free-form metadata stored on the order (booking or plan id)

        Returns:
            The Razorpay order object (id, amount, currency, receipt, status, ...)
        """
        if not self.is_available():
            raise PaymentConfigurationError("Razorpay settings not configured.")

        payload = {
            "amount": to_minor_units(amount),
            "currency": currency or self.config.currency,
            "receipt": build_receipt_id(),
            "payment_capture": 1,
            "notes": notes or {},
        }

        try:
            async with httpx.AsyncClient(
                base_url=self.config.api_url,
                auth=(self.config.key_id, self.config.key_secret),
                timeout=30,
                transport=self.transport,
            ) as client:
                response = await client.post("/orders", json=payload)
                response.raise_for_status()
                order = response.json()
        except Exception as e:
            logger.error(f"❌ Razorpay order creation failed: {e}")
            raise PaymentGatewayError("Could not create Razorpay order.") from e

        logger.info(f"💳 Razorpay order created: {order.get('id')} ({payload['amount']} {payload['currency']})")
        return order
