# app/api/v1/dashboard/availability.py
"""
Host availability management (JWT required)
"""
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from typing import List
from uuid import UUID
import logging

from app.api.dependencies import get_current_user
from app.config.database import get_db
from app.models.user import User
from app.schemas.availability import AvailabilityCreate, AvailabilityResponse
from app.services.availability.availability_service import AvailabilityService
from app.services.user.user_service import UserService

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/host/availability", response_model=List[AvailabilityResponse])
def list_my_availability(
        current_user: User = Depends(get_current_user),
        db: Session = Depends(get_db)
):
    return AvailabilityService.get_host_availability(db, current_user.id)


@router.post("/host/availability", response_model=AvailabilityResponse, status_code=201)
def create_availability(
        data: AvailabilityCreate,
        current_user: User = Depends(get_current_user),
        db: Session = Depends(get_db)
):
    """Add a weekly (dayOfWeek) or one-off (date) window"""
    try:
        record = AvailabilityService.create_availability(
            db,
            user_id=current_user.id,
            start_time=data.start_time,
            end_time=data.end_time,
            day_of_week=data.day_of_week,
            specific_date=data.date,
            is_active=data.is_active
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    UserService.mark_as_host(db, current_user)
    return record


@router.delete("/host/availability/{availability_id}")
def delete_availability(
        availability_id: UUID,
        current_user: User = Depends(get_current_user),
        db: Session = Depends(get_db)
):
    if not AvailabilityService.delete_availability(db, current_user.id, availability_id):
        raise HTTPException(status_code=404, detail="Availability not found")
    return {"success": True}
