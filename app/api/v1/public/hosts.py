# app/api/v1/public/hosts.py
"""
Public host calendar and pricing (no authentication)
"""
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session
from datetime import date
from typing import List, Optional
from uuid import UUID

from app.config.database import get_db
from app.models.user import User
from app.schemas.availability import AvailabilityResponse, SlotListResponse, AvailableDatesResponse
from app.schemas.pricing import PricingOptionResponse, HostServicesResponse
from app.services.availability.availability_service import AvailabilityService
from app.services.pricing.pricing_service import PricingService

router = APIRouter()


def _get_host_or_404(db: Session, host_id: UUID) -> User:
    host = db.query(User).filter(User.id == host_id, User.is_active == True).first()
    if not host:
        raise HTTPException(status_code=404, detail="Host not found")
    return host


@router.get("/users/{user_id}/availability", response_model=List[AvailabilityResponse])
def get_user_availability(user_id: UUID, db: Session = Depends(get_db)):
    _get_host_or_404(db, user_id)
    return AvailabilityService.get_host_availability(db, user_id, active_only=True)


@router.get("/users/{user_id}/pricing", response_model=List[PricingOptionResponse])
def get_user_pricing(user_id: UUID, db: Session = Depends(get_db)):
    _get_host_or_404(db, user_id)
    return PricingService.get_options(db, user_id, active_only=True)


@router.get("/host/{host_id}/services", response_model=HostServicesResponse)
def get_host_services(host_id: UUID, db: Session = Depends(get_db)):
    """Add-ons this host offers, with the platform fee for each"""
    _get_host_or_404(db, host_id)
    return {"host_id": host_id, "services": PricingService.get_host_services(db, host_id)}


@router.get("/hosts/{host_id}/slots", response_model=SlotListResponse)
def get_host_slots(
        host_id: UUID,
        date: date = Query(...),
        duration: Optional[int] = Query(None, ge=0, le=480),
        db: Session = Depends(get_db)
):
    _get_host_or_404(db, host_id)
    slots = AvailabilityService.get_slots_with_status(db, host_id, date, duration)
    return {"host_id": host_id, "date": date, "duration": duration, "slots": slots}


@router.get("/hosts/{host_id}/available-dates", response_model=AvailableDatesResponse)
def get_host_available_dates(
        host_id: UUID,
        start: date = Query(...),
        end: date = Query(...),
        duration: Optional[int] = Query(None, ge=0, le=480),
        db: Session = Depends(get_db)
):
    _get_host_or_404(db, host_id)
    try:
        dates = AvailabilityService.get_available_dates(db, host_id, start, end, duration)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"host_id": host_id, "start": start, "end": end, "dates": dates}
