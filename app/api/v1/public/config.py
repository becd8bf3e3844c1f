from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.config.database import get_db
from app.schemas.pricing import ServicePricesResponse
from app.services.admin.admin_config_service import AdminConfigService

router = APIRouter()


@router.get("/config/service-prices", response_model=ServicePricesResponse)
def get_service_prices(db: Session = Depends(get_db)):
    """Current add-on fees shown in the booking flow"""
    return AdminConfigService.get_service_prices(db)
