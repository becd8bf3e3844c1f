"""Map booking domain errors to HTTP responses"""
from fastapi import HTTPException, status

from app.services.booking.exceptions import (
    BookingError,
    BookingValidationError,
    BookingNotFoundError,
    BookingPermissionError,
    SlotUnavailableError,
    InvalidSessionTransition,
    InvalidBookingTransition,
    CheckoutInProgressError,
    SessionExpiredError,
    PaymentProviderError,
)

STATUS_CODES = {
    BookingValidationError: status.HTTP_400_BAD_REQUEST,
    BookingNotFoundError: status.HTTP_404_NOT_FOUND,
    BookingPermissionError: status.HTTP_403_FORBIDDEN,
    SlotUnavailableError: status.HTTP_409_CONFLICT,
    InvalidSessionTransition: status.HTTP_409_CONFLICT,
    InvalidBookingTransition: status.HTTP_409_CONFLICT,
    CheckoutInProgressError: status.HTTP_409_CONFLICT,
    SessionExpiredError: status.HTTP_410_GONE,
    PaymentProviderError: status.HTTP_502_BAD_GATEWAY,
}


def to_http_exception(error: BookingError) -> HTTPException:
    code = STATUS_CODES.get(type(error), status.HTTP_400_BAD_REQUEST)
    return HTTPException(status_code=code, detail=str(error))
