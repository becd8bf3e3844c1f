# app/services/admin/admin_config_service.py
"""Admin-managed platform settings stored in the admin_config table"""
from decimal import Decimal, InvalidOperation
from typing import Dict, Optional
from uuid import UUID
import logging

from sqlalchemy.orm import Session

from app.config.settings import settings
from app.models.admin_config import AdminConfig

logger = logging.getLogger(__name__)

# Keys read by the pricing and payment services
SERVICE_PRICE_KEYS = {
    "screen_sharing": "screen_sharing_price",
    "translation": "translation_price",
    "recording": "recording_price",
    "transcription": "transcription_price",
}


class AdminConfigService:

    @staticmethod
    def get_all(db: Session) -> Dict[str, str]:
        rows = db.query(AdminConfig).order_by(AdminConfig.key).all()
        return {row.key: row.value for row in rows}

    @staticmethod
    def get_value(db: Session, key: str, default: Optional[str] = None) -> Optional[str]:
        row = db.query(AdminConfig).filter(AdminConfig.key == key).first()
        return row.value if row else default

    @staticmethod
    def get_decimal(db: Session, key: str, default) -> Decimal:
        """Numeric setting; absent or unparsable rows fall back to the default"""
        raw = AdminConfigService.get_value(db, key)
        if raw is None:
            return Decimal(str(default))
        try:
            value = Decimal(str(raw).strip())
        except InvalidOperation:
            value = None

        # NaN and Infinity parse but cannot be priced
        if value is None or not value.is_finite():
            logger.warning(f"admin_config {key}={raw!r} is not numeric, using default {default}")
            return Decimal(str(default))
        return value

    @staticmethod
    def set_values(db: Session, values: Dict[str, object], updated_by: Optional[UUID] = None) -> Dict[str, str]:
        """Upsert a {key: value} map"""
        for key, value in values.items():
            if not key or len(key) > 100:
                raise ValueError(f"Invalid config key: {key!r}")

            row = db.query(AdminConfig).filter(AdminConfig.key == key).first()
            if row:
                row.value = str(value)
                row.updated_by = updated_by
            else:
                db.add(AdminConfig(key=key, value=str(value), updated_by=updated_by))

        db.commit()
        logger.info(f"Admin config updated: {sorted(values.keys())}")
        return AdminConfigService.get_all(db)

    @staticmethod
    def get_service_prices(db: Session) -> Dict[str, Decimal]:
        """Add-on fee table with settings defaults"""
        defaults = {
            "screen_sharing": settings.DEFAULT_SCREEN_SHARING_PRICE,
            "translation": settings.DEFAULT_TRANSLATION_PRICE,
            "recording": settings.DEFAULT_RECORDING_PRICE,
            "transcription": settings.DEFAULT_TRANSCRIPTION_PRICE,
        }
        return {
            service: AdminConfigService.get_decimal(db, key, defaults[service])
            for service, key in SERVICE_PRICE_KEYS.items()
        }

    @staticmethod
    def get_commission_rates(db: Session) -> Dict[str, Decimal]:
        return {
            "commission_rate": AdminConfigService.get_decimal(db, "commission_rate", settings.DEFAULT_COMMISSION_RATE),
            "vat_rate": AdminConfigService.get_decimal(db, "vat_rate", settings.DEFAULT_VAT_RATE),
        }
