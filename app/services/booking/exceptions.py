# app/services/booking/exceptions.py
"""Errors raised by the booking and checkout services; routers map them to HTTP codes"""


class BookingError(Exception):
    """Base class for booking domain errors"""


class BookingValidationError(BookingError):
    """Request is well formed but not bookable (400)"""


class BookingNotFoundError(BookingError):
    """Booking, session or host does not exist (404)"""


class BookingPermissionError(BookingError):
    """Caller is not a party to the booking (403)"""


class SlotUnavailableError(BookingError):
    """Slot already taken by a confirmed booking (409)"""


class InvalidSessionTransition(BookingError):
    """Booking session state change not allowed (409)"""


class InvalidBookingTransition(BookingError):
    """Booking status change not allowed (409)"""


class CheckoutInProgressError(BookingError):
    """Another request holds the checkout claim (409)"""


class SessionExpiredError(BookingError):
    """Booking session is past its expiry (410)"""


class PaymentProviderError(BookingError):
    """Stripe call failed (502)"""
