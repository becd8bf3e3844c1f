# app/api/v1/dashboard/payments.py
"""
Stripe checkout and Connect onboarding (JWT required)
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
import logging

from app.api.dependencies import get_current_user
from app.api.v1.errors import to_http_exception
from app.config.database import get_db
from app.models.user import User
from app.schemas.payment import (
    PaymentIntentRequest,
    PaymentIntentResponse,
    ConnectAccountResponse,
    OnboardingLinkResponse,
    AccountStatusResponse,
)
from app.services.booking.exceptions import BookingError
from app.services.payment.stripe_service import StripeService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/stripe")


@router.post("/create-payment-intent", response_model=PaymentIntentResponse)
def create_payment_intent(
        data: PaymentIntentRequest,
        current_user: User = Depends(get_current_user),
        db: Session = Depends(get_db)
):
    """
    Start checkout for a booking session.
    Asking again for a session that already has an intent returns the same intent.
    """
    try:
        return StripeService.create_payment_intent(db, data.booking_session_id, current_user)
    except BookingError as e:
        raise to_http_exception(e)


# ============================================================================
# Connect
# ============================================================================

@router.post("/connect/create-account", response_model=ConnectAccountResponse)
def create_connect_account(
        current_user: User = Depends(get_current_user),
        db: Session = Depends(get_db)
):
    try:
        account_id = StripeService.create_connect_account(db, current_user)
    except BookingError as e:
        raise to_http_exception(e)
    return {"account_id": account_id}


@router.post("/connect/onboarding-link", response_model=OnboardingLinkResponse)
def create_onboarding_link(current_user: User = Depends(get_current_user)):
    try:
        return {"url": StripeService.create_onboarding_link(current_user)}
    except BookingError as e:
        raise to_http_exception(e)


@router.api_route("/connect/account-status", methods=["GET", "POST"], response_model=AccountStatusResponse)
def account_status(
        current_user: User = Depends(get_current_user),
        db: Session = Depends(get_db)
):
    """Sync onboarding completion from Stripe"""
    try:
        return StripeService.sync_account_status(db, current_user)
    except BookingError as e:
        raise to_http_exception(e)
