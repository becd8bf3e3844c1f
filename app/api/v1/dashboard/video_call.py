# app/api/v1/dashboard/video_call.py
"""
Agora video call tokens (JWT required)
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from uuid import UUID

from app.api.dependencies import get_current_user
from app.api.v1.errors import to_http_exception
from app.config.database import get_db
from app.models.user import User
from app.schemas.booking import BookingResponse
from app.schemas.video_call import VideoTokenRequest, VideoTokenResponse
from app.services.booking.exceptions import BookingError
from app.services.video.video_call_service import VideoCallService

router = APIRouter(prefix="/video-call")


@router.post("/token", response_model=VideoTokenResponse)
def get_video_token(
        data: VideoTokenRequest,
        current_user: User = Depends(get_current_user),
        db: Session = Depends(get_db)
):
    try:
        return VideoCallService.token_for_booking(db, data.booking_id, current_user)
    except BookingError as e:
        raise to_http_exception(e)


@router.post("/end/{booking_id}", response_model=BookingResponse)
def end_video_call(
        booking_id: UUID,
        current_user: User = Depends(get_current_user),
        db: Session = Depends(get_db)
):
    """Marks the booking completed"""
    try:
        return VideoCallService.end_call(db, booking_id, current_user)
    except BookingError as e:
        raise to_http_exception(e)
