# app/services/booking/booking_service.py
"""
Bookings: created from paid sessions, then completed by the call or cancelled.
confirmed -> completed | cancelled, both terminal.
"""
from datetime import datetime, timezone
from typing import List, Optional
from uuid import UUID
import logging

from sqlalchemy.orm import Session

from app.models.booking import Booking, BookingStatus
from app.models.booking_session import BookingSession, BookingSessionStatus
from app.models.payment import StripePayment
from app.models.user import User
from app.services.booking.booking_session_service import BookingSessionService
from app.services.booking.exceptions import (
    BookingNotFoundError,
    BookingPermissionError,
    BookingValidationError,
    InvalidBookingTransition,
)
from app.services.payment.invoice_service import InvoiceService

logger = logging.getLogger(__name__)

ALLOWED_TRANSITIONS = {
    BookingStatus.CONFIRMED.value: {BookingStatus.COMPLETED.value, BookingStatus.CANCELLED.value},
    BookingStatus.COMPLETED.value: set(),
    BookingStatus.CANCELLED.value: set(),
}


class BookingService:

    @staticmethod
    def confirm_session(db: Session, session: BookingSession, payment: Optional[StripePayment] = None) -> Booking:
        """
        Turn a paid session into a confirmed booking.
        Safe to call again for the same session (webhook re-delivery).
        """
        existing = db.query(Booking).filter(Booking.booking_session_id == session.id).first()
        if existing:
            logger.info(f"Booking {existing.id} already exists for session {session.id}")
            return existing

        if session.guest_id is None:
            raise BookingValidationError("Booking session has no guest")

        booking = Booking(
            host_id=session.host_id,
            guest_id=session.guest_id,
            booking_session_id=session.id,
            scheduled_date=session.selected_date,
            start_time=session.selected_time,
            duration=session.selected_duration,
            price=session.total_price,
            currency=session.currency,
            call_language=session.call_language,
            services=session.selected_services or {},
            status=BookingStatus.CONFIRMED.value,
        )
        db.add(booking)
        db.flush()
        booking.agora_channel_name = f"booking_{booking.id}"

        if payment is not None:
            payment.booking_id = booking.id

        if session.status == BookingSessionStatus.PAID.value:
            BookingSessionService.mark_confirmed(db, session)
        else:
            db.commit()
        db.refresh(booking)

        if payment is not None:
            InvoiceService.issue_for_booking(db, booking, payment)

        logger.info(f"Booking {booking.id} confirmed from session {session.id}")
        BookingService._queue_confirmation_emails(db, booking)
        return booking

    @staticmethod
    def get_booking(db: Session, booking_id: UUID) -> Optional[Booking]:
        return db.query(Booking).filter(Booking.id == booking_id).first()

    @staticmethod
    def get_for_participant(db: Session, booking_id: UUID, user: User) -> Booking:
        booking = BookingService.get_booking(db, booking_id)
        if booking is None:
            raise BookingNotFoundError("Booking not found")
        if not booking.is_participant(user.id):
            raise BookingPermissionError("Not a participant of this booking")
        return booking

    @staticmethod
    def list_for_user(db: Session, user_id: UUID, role: Optional[str] = None) -> List[Booking]:
        query = db.query(Booking)
        if role == "host":
            query = query.filter(Booking.host_id == user_id)
        elif role == "guest":
            query = query.filter(Booking.guest_id == user_id)
        else:
            query = query.filter((Booking.host_id == user_id) | (Booking.guest_id == user_id))
        return query.order_by(Booking.scheduled_date.desc(), Booking.start_time.desc()).all()

    @staticmethod
    def transition(db: Session, booking: Booking, new_status: BookingStatus) -> Booking:
        target = new_status.value
        if target not in ALLOWED_TRANSITIONS[booking.status]:
            raise InvalidBookingTransition(f"Cannot move booking from {booking.status} to {target}")

        booking.status = target
        if target == BookingStatus.COMPLETED.value:
            booking.completed_at = datetime.now(timezone.utc)
        elif target == BookingStatus.CANCELLED.value:
            booking.cancelled_at = datetime.now(timezone.utc)

        db.commit()
        db.refresh(booking)
        logger.info(f"Booking {booking.id} -> {target}")
        return booking

    @staticmethod
    def cancel(db: Session, booking_id: UUID, user: User, reason: Optional[str] = None) -> Booking:
        booking = BookingService.get_for_participant(db, booking_id, user)
        booking.cancelled_by = "host" if booking.host_id == user.id else "guest"
        if reason:
            booking.notes = reason
        booking = BookingService.transition(db, booking, BookingStatus.CANCELLED)

        BookingService._queue_cancellation_emails(db, booking)
        return booking

    @staticmethod
    def complete(db: Session, booking_id: UUID, user: User) -> Booking:
        booking = BookingService.get_for_participant(db, booking_id, user)
        return BookingService.transition(db, booking, BookingStatus.COMPLETED)

    # ------------------------------------------------------------------
    # Notifications
    # ------------------------------------------------------------------

    @staticmethod
    def _parties(db: Session, booking: Booking):
        host = db.query(User).filter(User.id == booking.host_id).first()
        guest = db.query(User).filter(User.id == booking.guest_id).first()
        return host, guest

    @staticmethod
    def _queue_confirmation_emails(db: Session, booking: Booking) -> None:
        from app.tasks.email_tasks import send_booking_confirmation_email

        host, guest = BookingService._parties(db, booking)
        when = {
            "scheduled_date": booking.scheduled_date.isoformat(),
            "start_time": booking.start_time,
            "duration": booking.duration,
        }
        try:
            for recipient, counterpart, role in ((guest, host, "guest"), (host, guest, "host")):
                if recipient is None or not recipient.email:
                    continue
                send_booking_confirmation_email.delay(
                    email=recipient.email,
                    user_name=recipient.display_name,
                    counterpart_name=counterpart.display_name if counterpart else "",
                    role=role,
                    booking_id=str(booking.id),
                    amount=str(booking.price),
                    currency=booking.currency,
                    **when
                )
        except Exception as e:
            logger.error(f"Failed to queue confirmation emails for booking {booking.id}: {e}")

    @staticmethod
    def _queue_cancellation_emails(db: Session, booking: Booking) -> None:
        from app.tasks.email_tasks import send_booking_cancelled_email

        host, guest = BookingService._parties(db, booking)
        try:
            for recipient in (guest, host):
                if recipient is None or not recipient.email:
                    continue
                send_booking_cancelled_email.delay(
                    email=recipient.email,
                    user_name=recipient.display_name,
                    booking_id=str(booking.id),
                    scheduled_date=booking.scheduled_date.isoformat(),
                    start_time=booking.start_time,
                    cancelled_by=booking.cancelled_by or "",
                )
        except Exception as e:
            logger.error(f"Failed to queue cancellation emails for booking {booking.id}: {e}")
