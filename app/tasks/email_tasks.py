# ===== app/tasks/email_tasks.py =====
import logging

from app.config.celery_config import celery_app
from app.services.email.email_service import EmailService

logger = logging.getLogger(__name__)


@celery_app.task(bind=True, max_retries=3)
def send_booking_confirmation_email(
        self,
        email: str,
        user_name: str,
        counterpart_name: str,
        role: str,
        booking_id: str,
        scheduled_date: str,
        start_time: str,
        duration: int,
        amount: str,
        currency: str
):
    """
    Send the booking confirmation to one party

    Args:
        email: Recipient address
        role: "guest" or "host", picks the wording
        booking_id: Booking UUID as string
    """
    try:
        logger.info(f"Sending booking confirmation for {booking_id} to {email}")

        sent = EmailService.send_booking_confirmation_email(
            email=email,
            user_name=user_name,
            counterpart_name=counterpart_name,
            role=role,
            booking_id=booking_id,
            scheduled_date=scheduled_date,
            start_time=start_time,
            duration=duration,
            amount=amount,
            currency=currency
        )

        return {"status": "success" if sent else "skipped", "email": email}

    except Exception as exc:
        logger.error(f"Failed to send booking confirmation to {email}: {exc}")

        # Retry with exponential backoff: 1min, 2min, 4min
        raise self.retry(
            exc=exc,
            countdown=60 * (2 ** self.request.retries)
        )


@celery_app.task(bind=True, max_retries=3)
def send_booking_cancelled_email(
        self,
        email: str,
        user_name: str,
        booking_id: str,
        scheduled_date: str,
        start_time: str,
        cancelled_by: str
):
    """Tell one party that a booking was cancelled"""
    try:
        logger.info(f"Sending cancellation for {booking_id} to {email}")

        sent = EmailService.send_booking_cancelled_email(
            email=email,
            user_name=user_name,
            booking_id=booking_id,
            scheduled_date=scheduled_date,
            start_time=start_time,
            cancelled_by=cancelled_by
        )

        return {"status": "success" if sent else "skipped", "email": email}

    except Exception as exc:
        logger.error(f"Failed to send cancellation email to {email}: {exc}")

        raise self.retry(
            exc=exc,
            countdown=60 * (2 ** self.request.retries)
        )
