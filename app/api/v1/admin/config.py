# app/api/v1/admin/config.py
"""
Admin configuration (JWT + admin required)
"""
from fastapi import APIRouter, Depends, HTTPException, Body
from sqlalchemy.orm import Session
from typing import Dict, Any
import logging

from app.api.dependencies import require_admin
from app.config.database import get_db
from app.models.user import User
from app.services.admin.admin_config_service import AdminConfigService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/admin")


@router.get("/config")
def get_admin_config(
        admin: User = Depends(require_admin),
        db: Session = Depends(get_db)
) -> Dict[str, str]:
    return AdminConfigService.get_all(db)


@router.put("/config")
def update_admin_config(
        values: Dict[str, Any] = Body(...),
        admin: User = Depends(require_admin),
        db: Session = Depends(get_db)
) -> Dict[str, str]:
    """Upsert a {key: value} map"""
    if not values:
        raise HTTPException(status_code=400, detail="No values to update")

    try:
        config = AdminConfigService.set_values(db, values, updated_by=admin.id)
    except ValueError as e:
        db.rollback()
        raise HTTPException(status_code=400, detail=str(e))

    logger.info(f"Admin {admin.email} updated config keys {sorted(values.keys())}")
    return config
