# app/api/v1/public/booking_session.py
"""
Booking sessions: created before login is required, paid after
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import Optional
from uuid import UUID
import logging

from app.api.dependencies import optional_current_user
from app.api.v1.errors import to_http_exception
from app.config.database import get_db
from app.models.user import User
from app.schemas.booking import BookingSessionCreate, BookingSessionResponse
from app.services.booking.booking_session_service import BookingSessionService
from app.services.booking.exceptions import BookingError

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/booking-session", response_model=BookingSessionResponse, status_code=201)
def create_booking_session(
        data: BookingSessionCreate,
        current_user: Optional[User] = Depends(optional_current_user),
        db: Session = Depends(get_db)
):
    """Validate the guest's selection and snapshot its price"""
    try:
        session = BookingSessionService.create_session(
            db,
            host_id=data.host_id,
            selected_date=data.selected_date,
            selected_time=data.selected_time,
            selected_duration=data.selected_duration,
            selected_services=data.selected_services.model_dump(),
            call_language=data.call_language,
            guest=current_user
        )
    except BookingError as e:
        raise to_http_exception(e)

    return BookingSessionService.to_response(session)


@router.get("/booking-session/{session_id}", response_model=BookingSessionResponse)
def get_booking_session(session_id: UUID, db: Session = Depends(get_db)):
    try:
        session = BookingSessionService.get_live_session(db, session_id)
    except BookingError as e:
        raise to_http_exception(e)

    return BookingSessionService.to_response(session)
