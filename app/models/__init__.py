# app/models/__init__.py
from .base import Base
from .user import User, UserRole
from .availability import HostAvailability
from .pricing import HostPricing
from .booking_session import BookingSession, BookingSessionStatus
from .booking import Booking, BookingStatus
from .payment import StripePayment, Invoice, PaymentStatus
from .admin_config import AdminConfig

__all__ = [
    "Base",
    "User",
    "UserRole",
    "HostAvailability",
    "HostPricing",
    "BookingSession",
    "BookingSessionStatus",
    "Booking",
    "BookingStatus",
    "StripePayment",
    "Invoice",
    "PaymentStatus",
    "AdminConfig",
]
