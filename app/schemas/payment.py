"""
Pydantic schemas for Stripe checkout and Connect
"""
from decimal import Decimal
from typing import Optional
from uuid import UUID

from app.schemas.common import CamelModel


class PaymentIntentRequest(CamelModel):
    booking_session_id: UUID


class PaymentIntentResponse(CamelModel):
    client_secret: Optional[str] = None
    payment_intent_id: Optional[str] = None
    amount: Decimal
    currency: str
    booking_id: Optional[UUID] = None


class ConnectAccountResponse(CamelModel):
    account_id: str


class OnboardingLinkResponse(CamelModel):
    url: str


class AccountStatusResponse(CamelModel):
    account_id: Optional[str] = None
    charges_enabled: bool = False
    payouts_enabled: bool = False
    onboarding_completed: bool = False
