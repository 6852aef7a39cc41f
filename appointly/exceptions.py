"""Domain exceptions shared by the booking, billing and availability workflows"""


class AppointlyError(Exception):
    """Base class for all workflow errors"""

    status_code = 500


class ProviderNotFoundError(AppointlyError):
    status_code = 404

    def __init__(self, username: str = ""):
        self.username = username
        super().__init__("Provider not found.")


class BookingNotFoundError(AppointlyError):
    status_code = 404

    def __init__(self, booking_id: str = ""):
        self.booking_id = booking_id
        super().__init__("Booking not found.")


class PlanNotFoundError(AppointlyError):
    status_code = 404

    def __init__(self, plan_id: str = ""):
        self.plan_id = plan_id
        super().__init__("Plan not found")


class PaymentConfigurationError(AppointlyError):
    """Raised when Razorpay credentials are missing"""

    status_code = 503


class PaymentGatewayError(AppointlyError):
    """Raised when the Razorpay API rejects or fails an order request"""

    status_code = 502


class CalendarSyncError(AppointlyError):
    """Raised inside the calendar adapter; never escapes it"""

    status_code = 502
