"""
Payment Callback Security Module

Signature verification for Razorpay checkout callbacks.
The client SDK hands back (order_id, payment_id, signature) after a payment;
the signature is hex(HMAC-SHA256(key_secret, "<order_id>|<payment_id>")).
"""

import hashlib
import hmac
import logging
from typing import Optional

logger = logging.getLogger(__name__)


def constant_time_compare(a: Optional[str], b: Optional[str]) -> bool:
    """
    Compare two strings in constant time to prevent timing attacks.
    Equal only when both are non-empty and identical.
    """
    if not a or not b:
        return False
    return hmac.compare_digest(a.encode("utf-8"), b.encode("utf-8"))


def compute_hmac_sha256(secret: str, payload: bytes) -> str:
    """Compute HMAC-SHA256 signature of payload"""
    return hmac.new(secret.encode("utf-8"), payload, hashlib.sha256).hexdigest()


def sign_payment(secret: str, order_id: str, payment_id: str) -> str:
    """Signature Razorpay attaches to a successful checkout"""
    body = f"{order_id}|{payment_id}"
    return compute_hmac_sha256(secret, body.encode("utf-8"))


def verify_payment_signature(
    secret: str, order_id: str, payment_id: str, signature: Optional[str]
) -> bool:
    """
    Verify a Razorpay checkout signature.

    Args:
        secret: Razorpay key secret
        order_id: razorpay_order_id from the callback
        payment_id: razorpay_payment_id from the callback
        signature: razorpay_signature from the callback

    Returns:
        True if the signature matches, False otherwise
    """
    expected = sign_payment(secret, order_id or "", payment_id or "")
    if not constant_time_compare(expected, signature):
        logger.warning(f"🚫 Invalid payment signature for order {order_id}")
        return False

    logger.info(f"✅ Payment signature verified for order {order_id}")
    return True
