# app/services/booking/booking_session_service.py
"""
Booking sessions hold a guest's selections and the price snapshot until payment.

created -> paid -> confirmed
created -> abandoned
"""
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Optional, Dict
from uuid import UUID
import logging

from sqlalchemy import update, or_
from sqlalchemy.orm import Session

from app.config.settings import settings
from app.models.booking_session import BookingSession, BookingSessionStatus
from app.models.user import User
from app.services.availability.availability_service import AvailabilityService, to_minutes
from app.services.booking.exceptions import (
    BookingValidationError,
    BookingNotFoundError,
    SlotUnavailableError,
    InvalidSessionTransition,
    SessionExpiredError,
)
from app.services.pricing.pricing_service import PricingService

logger = logging.getLogger(__name__)

ALLOWED_TRANSITIONS = {
    BookingSessionStatus.CREATED.value: {BookingSessionStatus.PAID.value, BookingSessionStatus.ABANDONED.value},
    BookingSessionStatus.PAID.value: {BookingSessionStatus.CONFIRMED.value},
    BookingSessionStatus.CONFIRMED.value: set(),
    BookingSessionStatus.ABANDONED.value: set(),
}


def _now() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """SQLite hands back naive datetimes; everything is stored in UTC"""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class BookingSessionService:

    @staticmethod
    def create_session(
            db: Session,
            host_id: UUID,
            selected_date,
            selected_time: str,
            selected_duration: int,
            selected_services: Dict[str, bool],
            call_language: Optional[str] = None,
            guest: Optional[User] = None
    ) -> BookingSession:
        """Validate the selection against the host's calendar and price it"""
        host = db.query(User).filter(User.id == host_id, User.is_active == True).first()
        if host is None:
            raise BookingNotFoundError("Host not found")
        if guest is not None and guest.id == host.id:
            raise BookingValidationError("Hosts cannot book their own sessions")

        now = _now()
        if selected_date < now.date():
            raise BookingValidationError("Selected date is in the past")
        if selected_date == now.date() and to_minutes(selected_time) <= now.hour * 60 + now.minute:
            raise BookingValidationError("Selected time is in the past")

        records = AvailabilityService.get_host_availability(db, host_id, active_only=True)
        slots = AvailabilityService.slots_for_date(selected_date, records, duration=selected_duration)
        if selected_time not in slots:
            raise BookingValidationError("Selected time is not available for this host")

        if AvailabilityService.is_slot_booked(db, host_id, selected_date, selected_time, selected_duration):
            raise SlotUnavailableError("This slot has already been booked")

        quote = PricingService.quote(db, host_id, selected_duration, selected_services)
        if quote is None:
            raise BookingValidationError("Host does not offer this duration")

        session = BookingSession(
            host_id=host_id,
            guest_id=guest.id if guest else None,
            selected_date=selected_date,
            selected_time=selected_time,
            selected_duration=selected_duration,
            selected_services={k: bool(v) for k, v in selected_services.items()},
            call_language=call_language,
            base_price=quote["base_price"],
            services_total=quote["services_total"],
            total_price=quote["total"],
            service_fees={k: str(v) for k, v in quote["applied_fees"].items()},
            currency=quote["currency"],
            status=BookingSessionStatus.CREATED.value,
            expires_at=now + timedelta(minutes=settings.BOOKING_SESSION_TTL_MINUTES),
        )
        db.add(session)
        db.commit()
        db.refresh(session)

        logger.info(
            f"Booking session {session.id} created: host={host_id} "
            f"{selected_date} {selected_time} {selected_duration}min total={session.total_price}"
        )
        return session

    @staticmethod
    def get_session(db: Session, session_id: UUID) -> Optional[BookingSession]:
        return db.query(BookingSession).filter(BookingSession.id == session_id).first()

    @staticmethod
    def is_expired(session: BookingSession, now: Optional[datetime] = None) -> bool:
        return as_utc(session.expires_at) <= (now or _now())

    @staticmethod
    def has_live_claim(session: BookingSession, now: Optional[datetime] = None) -> bool:
        """A checkout is talking to Stripe for this session"""
        claimed_at = as_utc(session.checkout_claimed_at)
        if claimed_at is None:
            return False
        return claimed_at >= (now or _now()) - timedelta(seconds=settings.CHECKOUT_CLAIM_TIMEOUT_SECONDS)

    @staticmethod
    def get_live_session(db: Session, session_id: UUID) -> BookingSession:
        """
        Load a session for display or checkout.
        An expired created session is abandoned on read unless a checkout holds it.
        """
        session = BookingSessionService.get_session(db, session_id)
        if session is None:
            raise BookingNotFoundError("Booking session not found")

        if session.status == BookingSessionStatus.ABANDONED.value:
            raise SessionExpiredError("Booking session has expired")

        if (
                session.status == BookingSessionStatus.CREATED.value
                and BookingSessionService.is_expired(session)
                and not BookingSessionService.has_live_claim(session)
        ):
            BookingSessionService.transition(db, session, BookingSessionStatus.ABANDONED)
            raise SessionExpiredError("Booking session has expired")

        return session

    @staticmethod
    def transition(db: Session, session: BookingSession, new_status: BookingSessionStatus, **fields) -> BookingSession:
        target = new_status.value
        if target not in ALLOWED_TRANSITIONS[session.status]:
            raise InvalidSessionTransition(f"Cannot move booking session from {session.status} to {target}")

        now = _now()
        session.status = target
        if target == BookingSessionStatus.PAID.value:
            session.paid_at = now
        elif target == BookingSessionStatus.CONFIRMED.value:
            session.confirmed_at = now
        elif target == BookingSessionStatus.ABANDONED.value:
            session.abandoned_at = now

        for key, value in fields.items():
            setattr(session, key, value)

        db.commit()
        db.refresh(session)
        logger.info(f"Booking session {session.id} -> {target}")
        return session

    # ------------------------------------------------------------------
    # Checkout claim
    # ------------------------------------------------------------------

    @staticmethod
    def claim_for_checkout(db: Session, session_id: UUID) -> bool:
        """
        Atomically mark the session as being checked out.
        Only one caller wins while the claim is fresh; stale claims can be retaken.
        """
        now = _now()
        stale_before = now - timedelta(seconds=settings.CHECKOUT_CLAIM_TIMEOUT_SECONDS)

        result = db.execute(
            update(BookingSession)
            .where(
                BookingSession.id == session_id,
                BookingSession.status == BookingSessionStatus.CREATED.value,
                BookingSession.payment_intent_id.is_(None),
                or_(
                    BookingSession.checkout_claimed_at.is_(None),
                    BookingSession.checkout_claimed_at < stale_before,
                ),
            )
            .values(checkout_claimed_at=now)
            .execution_options(synchronize_session=False)
        )
        db.commit()

        claimed = result.rowcount == 1
        if not claimed:
            logger.warning(f"Checkout claim refused for booking session {session_id}")
        return claimed

    @staticmethod
    def bind_guest(db: Session, session_id: UUID, guest_id: UUID) -> bool:
        """Attach an anonymous session to its payer; first caller wins"""
        result = db.execute(
            update(BookingSession)
            .where(
                BookingSession.id == session_id,
                BookingSession.guest_id.is_(None),
            )
            .values(guest_id=guest_id)
            .execution_options(synchronize_session=False)
        )
        db.commit()

        if result.rowcount != 1:
            logger.warning(f"Booking session {session_id} was already bound to another guest")
            return False
        return True

    @staticmethod
    def release_claim(db: Session, session_id: UUID) -> None:
        db.execute(
            update(BookingSession)
            .where(
                BookingSession.id == session_id,
                BookingSession.status == BookingSessionStatus.CREATED.value,
            )
            .values(checkout_claimed_at=None)
            .execution_options(synchronize_session=False)
        )
        db.commit()

    @staticmethod
    def mark_paid(db: Session, session: BookingSession, payment_intent_id: Optional[str]) -> BookingSession:
        return BookingSessionService.transition(
            db, session, BookingSessionStatus.PAID,
            payment_intent_id=payment_intent_id,
            checkout_claimed_at=None,
        )

    @staticmethod
    def mark_confirmed(db: Session, session: BookingSession) -> BookingSession:
        return BookingSessionService.transition(db, session, BookingSessionStatus.CONFIRMED)

    @staticmethod
    def expire_stale_sessions(db: Session) -> int:
        """Abandon every created session past its expiry; returns how many"""
        now = _now()
        claim_cutoff = now - timedelta(seconds=settings.CHECKOUT_CLAIM_TIMEOUT_SECONDS)
        stale = db.query(BookingSession).filter(
            BookingSession.status == BookingSessionStatus.CREATED.value,
            BookingSession.expires_at <= now,
            # sessions mid-checkout are left to finish
            or_(
                BookingSession.checkout_claimed_at.is_(None),
                BookingSession.checkout_claimed_at < claim_cutoff,
            ),
        ).all()

        for session in stale:
            session.status = BookingSessionStatus.ABANDONED.value
            session.abandoned_at = now
            session.checkout_claimed_at = None

        db.commit()
        if stale:
            logger.info(f"Abandoned {len(stale)} expired booking sessions")
        return len(stale)

    @staticmethod
    def to_response(session: BookingSession) -> Dict:
        return {
            "session_id": session.id,
            "host_id": session.host_id,
            "guest_id": session.guest_id,
            "selected_date": session.selected_date,
            "selected_time": session.selected_time,
            "selected_duration": session.selected_duration,
            "selected_services": session.selected_services or {},
            "call_language": session.call_language,
            "base_price": session.base_price,
            "services_total": session.services_total,
            "total_price": session.total_price,
            "service_fees": {k: Decimal(v) for k, v in (session.service_fees or {}).items()},
            "currency": session.currency,
            "status": session.status,
            "expires_at": as_utc(session.expires_at),
        }
