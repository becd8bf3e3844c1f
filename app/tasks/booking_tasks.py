"""Booking session housekeeping tasks"""
import logging

from app.config.celery_config import celery_app
from app.config.database import get_db
from app.services.booking.booking_session_service import BookingSessionService

logger = logging.getLogger(__name__)


@celery_app.task(bind=True, max_retries=3)
def expire_stale_booking_sessions(self):
    """Abandon created booking sessions that are past their expiry"""
    try:
        db = next(get_db())

        try:
            expired = BookingSessionService.expire_stale_sessions(db)
            return {"status": "success", "expired": expired}
        finally:
            db.close()

    except Exception as exc:
        logger.error(f"Failed to expire booking sessions: {exc}")
        raise self.retry(exc=exc, countdown=60)
