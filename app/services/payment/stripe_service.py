# app/services/payment/stripe_service.py
"""
Stripe checkout, webhooks and Connect onboarding.

Checkout charges a booking session at most once: the session is claimed with a
conditional update before Stripe is called, and the intent id is bound after.
"""
from decimal import Decimal
from typing import Dict, Optional
from uuid import UUID
import logging

import stripe
from sqlalchemy.orm import Session

from app.config.settings import settings
from app.models.booking_session import BookingSession, BookingSessionStatus
from app.models.payment import StripePayment, PaymentStatus
from app.models.user import User
from app.services.admin.admin_config_service import AdminConfigService
from app.services.availability.availability_service import AvailabilityService
from app.services.booking.booking_service import BookingService
from app.services.booking.booking_session_service import BookingSessionService
from app.services.booking.exceptions import (
    BookingNotFoundError,
    BookingPermissionError,
    BookingValidationError,
    CheckoutInProgressError,
    InvalidSessionTransition,
    PaymentProviderError,
    SlotUnavailableError,
)
from app.services.pricing.pricing_service import PricingService

logger = logging.getLogger(__name__)


def to_cents(amount) -> int:
    return int((Decimal(str(amount)) * 100).to_integral_value())


class StripeService:

    @staticmethod
    def _configure():
        stripe.api_key = settings.STRIPE_SECRET_KEY

    # ------------------------------------------------------------------
    # Customers
    # ------------------------------------------------------------------

    @staticmethod
    def get_or_create_customer(db: Session, user: User) -> str:
        if user.stripe_customer_id:
            return user.stripe_customer_id

        StripeService._configure()
        customer = stripe.Customer.create(
            email=user.email,
            name=user.display_name or None,
            metadata={"user_id": str(user.id)},
        )
        user.stripe_customer_id = customer.id
        db.commit()
        logger.info(f"Created Stripe customer {customer.id} for user {user.id}")
        return customer.id

    # ------------------------------------------------------------------
    # Checkout
    # ------------------------------------------------------------------

    @staticmethod
    def create_payment_intent(db: Session, session_id: UUID, user: User) -> Dict:
        """
        Start (or resume) checkout for a booking session.
        Returns {client_secret, payment_intent_id, amount, currency, booking_id}.
        """
        session = BookingSessionService.get_live_session(db, session_id)

        if session.host_id == user.id:
            raise BookingValidationError("Hosts cannot book their own sessions")
        if session.guest_id is not None and session.guest_id != user.id:
            raise BookingPermissionError("Booking session belongs to another user")

        if session.status == BookingSessionStatus.CONFIRMED.value:
            raise InvalidSessionTransition("Booking session is already confirmed")

        if session.status == BookingSessionStatus.PAID.value:
            return StripeService._resume_payment_intent(session)

        if session.guest_id is None:
            if not BookingSessionService.bind_guest(db, session.id, user.id):
                raise BookingPermissionError("Booking session belongs to another user")
            db.refresh(session)

        if AvailabilityService.is_slot_booked(
                db, session.host_id, session.selected_date, session.selected_time, session.selected_duration
        ):
            raise SlotUnavailableError("This slot has been booked since the session was created")

        if Decimal(session.total_price) <= 0:
            return StripeService._confirm_free_session(db, session)

        if not BookingSessionService.claim_for_checkout(db, session.id):
            raise CheckoutInProgressError("Checkout already in progress for this booking session")

        db.refresh(session)
        host = db.query(User).filter(User.id == session.host_id).first()
        rates = AdminConfigService.get_commission_rates(db)
        split = PricingService.commission_split(session.total_price, rates["commission_rate"], rates["vat_rate"])

        StripeService._configure()
        try:
            customer_id = StripeService.get_or_create_customer(db, user)
            params = {
                "amount": to_cents(session.total_price),
                "currency": session.currency.lower(),
                "customer": customer_id,
                "automatic_payment_methods": {"enabled": True},
                "metadata": {
                    "booking_session_id": str(session.id),
                    "guest_id": str(user.id),
                    "host_id": str(session.host_id),
                    "commission": str(split["commission"]),
                    "vat": str(split["vat"]),
                    "host_amount": str(split["host_amount"]),
                },
            }
            if host and host.stripe_account_id and host.stripe_onboarding_completed:
                params["application_fee_amount"] = to_cents(split["commission"] + split["vat"])
                params["transfer_data"] = {"destination": host.stripe_account_id}

            intent = stripe.PaymentIntent.create(**params)
        except stripe.StripeError as e:
            BookingSessionService.release_claim(db, session.id)
            logger.error(f"Stripe PaymentIntent failed for booking session {session.id}: {e}")
            raise PaymentProviderError(getattr(e, "user_message", None) or str(e))
        except Exception:
            BookingSessionService.release_claim(db, session.id)
            raise

        fees = session.service_fees or {}
        payment = StripePayment(
            booking_session_id=session.id,
            stripe_payment_intent_id=intent.id,
            stripe_customer_id=customer_id,
            amount=split["total"],
            host_amount=split["host_amount"],
            commission_amount=split["commission"],
            vat_amount=split["vat"],
            currency=session.currency,
            screen_sharing_fee=Decimal(fees.get("screen_sharing", "0")),
            translation_fee=Decimal(fees.get("translation", "0")),
            recording_fee=Decimal(fees.get("recording", "0")),
            transcription_fee=Decimal(fees.get("transcription", "0")),
            status=PaymentStatus.PENDING.value,
        )
        db.add(payment)
        BookingSessionService.mark_paid(db, session, intent.id)

        logger.info(f"PaymentIntent {intent.id} bound to booking session {session.id}")
        return {
            "client_secret": intent.client_secret,
            "payment_intent_id": intent.id,
            "amount": session.total_price,
            "currency": session.currency,
            "booking_id": None,
        }

    @staticmethod
    def _resume_payment_intent(session: BookingSession) -> Dict:
        """A paid session already has its intent; hand back the same one"""
        if not session.payment_intent_id:
            raise InvalidSessionTransition("Booking session has no payment to resume")

        StripeService._configure()
        try:
            intent = stripe.PaymentIntent.retrieve(session.payment_intent_id)
        except stripe.StripeError as e:
            logger.error(f"Could not retrieve PaymentIntent {session.payment_intent_id}: {e}")
            raise PaymentProviderError(str(e))

        return {
            "client_secret": intent.client_secret,
            "payment_intent_id": intent.id,
            "amount": session.total_price,
            "currency": session.currency,
            "booking_id": None,
        }

    @staticmethod
    def _confirm_free_session(db: Session, session: BookingSession) -> Dict:
        if not BookingSessionService.claim_for_checkout(db, session.id):
            raise CheckoutInProgressError("Checkout already in progress for this booking session")

        db.refresh(session)
        BookingSessionService.mark_paid(db, session, None)
        booking = BookingService.confirm_session(db, session)

        return {
            "client_secret": None,
            "payment_intent_id": None,
            "amount": session.total_price,
            "currency": session.currency,
            "booking_id": booking.id,
        }

    # ------------------------------------------------------------------
    # Webhook events
    # ------------------------------------------------------------------

    @staticmethod
    def construct_event(payload: bytes, signature: Optional[str]):
        """Raises ValueError or stripe.SignatureVerificationError on bad input"""
        return stripe.Webhook.construct_event(payload, signature, settings.STRIPE_WEBHOOK_SECRET)

    @staticmethod
    def handle_payment_succeeded(db: Session, intent: Dict) -> Optional[UUID]:
        """Returns the booking id, creating the booking on first delivery"""
        intent_id = intent["id"]
        payment = db.query(StripePayment).filter(
            StripePayment.stripe_payment_intent_id == intent_id
        ).first()

        session = None
        if payment is not None:
            session = BookingSessionService.get_session(db, payment.booking_session_id)
        else:
            session = db.query(BookingSession).filter(
                BookingSession.payment_intent_id == intent_id
            ).first()

        if session is None:
            logger.warning(f"payment_intent.succeeded for unknown intent {intent_id}")
            return None

        if payment is not None and payment.status != PaymentStatus.SUCCEEDED.value:
            payment.status = PaymentStatus.SUCCEEDED.value
            db.commit()

        booking = BookingService.confirm_session(db, session, payment)
        return booking.id

    @staticmethod
    def handle_payment_failed(db: Session, intent: Dict) -> bool:
        payment = db.query(StripePayment).filter(
            StripePayment.stripe_payment_intent_id == intent["id"]
        ).first()
        if payment is None:
            logger.warning(f"payment_intent.payment_failed for unknown intent {intent['id']}")
            return False

        if payment.status == PaymentStatus.PENDING.value:
            payment.status = PaymentStatus.FAILED.value
            db.commit()

        error = (intent.get("last_payment_error") or {}).get("message")
        logger.warning(f"Payment {intent['id']} failed: {error}")
        return True

    # ------------------------------------------------------------------
    # Connect
    # ------------------------------------------------------------------

    @staticmethod
    def create_connect_account(db: Session, user: User) -> str:
        """Express account for a host; an existing account is reused"""
        if user.stripe_account_id:
            return user.stripe_account_id

        StripeService._configure()
        try:
            account = stripe.Account.create(
                type="express",
                country=settings.STRIPE_CONNECT_COUNTRY,
                email=user.email,
                capabilities={
                    "card_payments": {"requested": True},
                    "transfers": {"requested": True},
                },
                metadata={"user_id": str(user.id)},
            )
        except stripe.StripeError as e:
            logger.error(f"Stripe Connect account creation failed for {user.id}: {e}")
            raise PaymentProviderError(str(e))

        user.stripe_account_id = account.id
        db.commit()
        logger.info(f"Created Connect account {account.id} for host {user.id}")
        return account.id

    @staticmethod
    def create_onboarding_link(user: User) -> str:
        if not user.stripe_account_id:
            raise BookingNotFoundError("No Stripe Connect account for this user")

        StripeService._configure()
        try:
            link = stripe.AccountLink.create(
                account=user.stripe_account_id,
                refresh_url=f"{settings.FRONTEND_URL}/dashboard?stripe_connect=reauth",
                return_url=f"{settings.FRONTEND_URL}/dashboard?stripe_connect=success",
                type="account_onboarding",
            )
        except stripe.StripeError as e:
            logger.error(f"Stripe onboarding link failed for {user.stripe_account_id}: {e}")
            raise PaymentProviderError(str(e))
        return link.url

    @staticmethod
    def sync_account_status(db: Session, user: User) -> Dict:
        if not user.stripe_account_id:
            return {
                "account_id": None,
                "charges_enabled": False,
                "payouts_enabled": False,
                "onboarding_completed": False,
            }

        StripeService._configure()
        try:
            account = stripe.Account.retrieve(user.stripe_account_id)
        except stripe.StripeError as e:
            logger.error(f"Stripe account lookup failed for {user.stripe_account_id}: {e}")
            raise PaymentProviderError(str(e))

        charges_enabled = bool(account.charges_enabled)
        payouts_enabled = bool(account.payouts_enabled)
        completed = charges_enabled and payouts_enabled

        if user.stripe_onboarding_completed != completed:
            user.stripe_onboarding_completed = completed
            db.commit()

        return {
            "account_id": user.stripe_account_id,
            "charges_enabled": charges_enabled,
            "payouts_enabled": payouts_enabled,
            "onboarding_completed": completed,
        }
