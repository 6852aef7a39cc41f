import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# Load .env from project root
env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./appointly.db")

# Security - CRITICAL: No default secret key in production
SECRET_KEY = os.getenv("SECRET_KEY")
if not SECRET_KEY:
    import warnings

    warnings.warn(
        "SECRET_KEY not set! Using insecure default - DO NOT USE IN PRODUCTION", RuntimeWarning, stacklevel=2
    )
    SECRET_KEY = "INSECURE-DEV-KEY-CHANGE-IN-PRODUCTION"  # noqa: S105 - Dev fallback only

# Frontend base URL for redirects (confirmation page lives here)
FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:3000")

# CORS origins, comma separated
ALLOWED_ORIGINS = os.getenv("ALLOWED_ORIGINS", "http://localhost:3000,http://localhost:5173").split(",")

# Resend Email Configuration
RESEND_API_KEY = os.getenv("RESEND_API_KEY")
EMAIL_FROM_ADDRESS = os.getenv("EMAIL_FROM_ADDRESS", "Appointly <noreply@appointly.app>")

# Google Calendar OAuth Configuration
GOOGLE_CLIENT_ID = os.getenv("GOOGLE_CLIENT_ID")
GOOGLE_CLIENT_SECRET = os.getenv("GOOGLE_CLIENT_SECRET")

# Razorpay Configuration
RAZORPAY_KEY_ID = os.getenv("RAZORPAY_KEY_ID")
RAZORPAY_KEY_SECRET = os.getenv("RAZORPAY_KEY_SECRET")
RAZORPAY_API_URL = os.getenv("RAZORPAY_API_URL", "https://api.razorpay.com/v1")

# Only INR is supported by the checkout integration
PAYMENT_CURRENCY = "INR"


@dataclass(frozen=True)
class GatewayConfig:
    """Razorpay credentials read once for a single workflow invocation"""

    key_id: Optional[str]
    key_secret: Optional[str]
    api_url: str = "https://api.razorpay.com/v1"
    currency: str = PAYMENT_CURRENCY

    @property
    def can_sign(self) -> bool:
        return bool(self.key_secret)

    @property
    def can_create_orders(self) -> bool:
        return bool(self.key_id and self.key_secret)


def load_gateway_config() -> GatewayConfig:
    """Read Razorpay settings from the environment (FastAPI dependency)"""
    return GatewayConfig(
        key_id=os.getenv("RAZORPAY_KEY_ID") or None,
        key_secret=os.getenv("RAZORPAY_KEY_SECRET") or None,
        api_url=os.getenv("RAZORPAY_API_URL", RAZORPAY_API_URL),
    )
