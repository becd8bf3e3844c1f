# app/api/v1/dashboard/pricing.py
"""
Host pricing management (JWT required)
"""
from fastapi import APIRouter, Depends, HTTPException, Body
from sqlalchemy.orm import Session
from typing import List, Union
from uuid import UUID
import logging

from app.api.dependencies import get_current_user
from app.config.database import get_db
from app.models.user import User
from app.schemas.pricing import PricingOptionCreate, PricingOptionResponse
from app.services.pricing.pricing_service import PricingService
from app.services.user.user_service import UserService

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/host/pricing", response_model=List[PricingOptionResponse])
def list_my_pricing(
        current_user: User = Depends(get_current_user),
        db: Session = Depends(get_db)
):
    return PricingService.get_options(db, current_user.id, active_only=True)


@router.post(
    "/host/pricing",
    response_model=Union[List[PricingOptionResponse], PricingOptionResponse]
)
def save_pricing(
        payload: Union[List[PricingOptionCreate], PricingOptionCreate] = Body(...),
        current_user: User = Depends(get_current_user),
        db: Session = Depends(get_db)
):
    """
    An object upserts one option by duration.
    An array replaces the whole price list.
    """
    try:
        if isinstance(payload, list):
            result = PricingService.replace_options(
                db, current_user.id, [item.model_dump() for item in payload]
            )
        else:
            result = PricingService.upsert_option(db, current_user.id, payload.model_dump())
    except ValueError as e:
        db.rollback()
        raise HTTPException(status_code=400, detail=str(e))

    UserService.mark_as_host(db, current_user)
    return result


@router.delete("/host/pricing/{pricing_id}")
def delete_pricing(
        pricing_id: UUID,
        current_user: User = Depends(get_current_user),
        db: Session = Depends(get_db)
):
    if not PricingService.delete_option(db, current_user.id, pricing_id):
        raise HTTPException(status_code=404, detail="Pricing option not found")
    return {"success": True}
