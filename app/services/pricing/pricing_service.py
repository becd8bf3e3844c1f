# app/services/pricing/pricing_service.py
"""
Host pricing options and price composition.

total = base price + fee of every add-on that is both selected and offered by the host
"""
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, List, Optional, Mapping, Iterable
from uuid import UUID
import logging

from sqlalchemy.orm import Session

from app.models.pricing import HostPricing
from app.services.admin.admin_config_service import AdminConfigService

logger = logging.getLogger(__name__)

SERVICES = ("screen_sharing", "translation", "recording", "transcription")

# add-on -> HostPricing flag
SERVICE_FLAGS = {
    "screen_sharing": "includes_screen_sharing",
    "translation": "includes_translation",
    "recording": "includes_recording",
    "transcription": "includes_transcription",
}

CENT = Decimal("0.01")

PRICING_FIELDS = (
    "price",
    "currency",
    "is_active",
    "is_custom",
    "includes_screen_sharing",
    "includes_translation",
    "includes_recording",
    "includes_transcription",
)


def _money(value) -> Decimal:
    return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)


class PricingService:

    # ------------------------------------------------------------------
    # Composition
    # ------------------------------------------------------------------

    @staticmethod
    def compose(
            base_price,
            toggles: Mapping[str, bool],
            fees: Mapping[str, Optional[Decimal]],
            enabled: Iterable[str]
    ) -> Dict:
        """
        Returns {"total", "services_total", "applied_fees"}.
        Missing or non-finite fees count as zero and negative fees are clamped, so total >= base.
        """
        base = max(_money(base_price), Decimal("0.00"))
        enabled = set(enabled)

        applied = {}
        for service in SERVICES:
            if not toggles.get(service) or service not in enabled:
                continue
            fee = fees.get(service)
            fee = _money(fee) if fee is not None and Decimal(str(fee)).is_finite() else Decimal("0.00")
            applied[service] = max(fee, Decimal("0.00"))

        services_total = sum(applied.values(), Decimal("0.00"))
        return {
            "total": base + services_total,
            "services_total": services_total,
            "applied_fees": applied,
        }

    @staticmethod
    def commission_split(total, commission_rate, vat_rate) -> Dict[str, Decimal]:
        """Platform commission, VAT on the commission and what the host keeps"""
        total = _money(total)
        commission = _money(total * Decimal(str(commission_rate)))
        vat = _money(commission * Decimal(str(vat_rate)))
        return {
            "total": total,
            "commission": commission,
            "vat": vat,
            "host_amount": total - commission - vat,
        }

    @staticmethod
    def enabled_services(options: Iterable[HostPricing]) -> List[str]:
        """A service counts as enabled when any active option includes it"""
        options = [o for o in options if o.is_active]
        return [
            service for service in SERVICES
            if any(getattr(o, SERVICE_FLAGS[service]) for o in options)
        ]

    @staticmethod
    def quote(db: Session, host_id: UUID, duration: int, toggles: Mapping[str, bool]) -> Optional[Dict]:
        """Price for a host/duration/toggle selection, None if the host does not offer that duration"""
        options = PricingService.get_options(db, host_id, active_only=True)
        option = next((o for o in options if o.duration == duration), None)
        if option is None:
            return None

        fees = AdminConfigService.get_service_prices(db)
        composed = PricingService.compose(
            option.price, toggles, fees, PricingService.enabled_services(options)
        )
        composed["base_price"] = _money(option.price)
        composed["currency"] = option.currency
        return composed

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    @staticmethod
    def get_options(db: Session, user_id: UUID, active_only: bool = True) -> List[HostPricing]:
        query = db.query(HostPricing).filter(HostPricing.user_id == user_id)
        if active_only:
            query = query.filter(HostPricing.is_active == True)
        return query.order_by(HostPricing.duration).all()

    @staticmethod
    def upsert_option(db: Session, user_id: UUID, data: Dict) -> HostPricing:
        """Create or update the option for (user_id, duration)"""
        option = db.query(HostPricing).filter(
            HostPricing.user_id == user_id,
            HostPricing.duration == data["duration"]
        ).first()

        if option is None:
            option = HostPricing(user_id=user_id, duration=data["duration"])
            db.add(option)

        for field in PRICING_FIELDS:
            if field in data:
                setattr(option, field, data[field])

        db.commit()
        db.refresh(option)
        logger.info(f"Saved pricing {option.duration}min={option.price} for host {user_id}")
        return option

    @staticmethod
    def replace_options(db: Session, user_id: UUID, items: List[Dict]) -> List[HostPricing]:
        """Replace the host's whole price list"""
        durations = [item["duration"] for item in items]
        if len(durations) != len(set(durations)):
            raise ValueError("Duplicate durations in pricing list")

        db.query(HostPricing).filter(HostPricing.user_id == user_id).delete(synchronize_session=False)
        db.flush()

        for item in items:
            option = HostPricing(user_id=user_id, duration=item["duration"])
            for field in PRICING_FIELDS:
                if field in item:
                    setattr(option, field, item[field])
            db.add(option)

        db.commit()
        logger.info(f"Replaced pricing for host {user_id} with {len(items)} options")
        return PricingService.get_options(db, user_id, active_only=False)

    @staticmethod
    def delete_option(db: Session, user_id: UUID, option_id: UUID) -> bool:
        option = db.query(HostPricing).filter(
            HostPricing.id == option_id,
            HostPricing.user_id == user_id
        ).first()
        if not option:
            return False

        db.delete(option)
        db.commit()
        return True

    @staticmethod
    def get_host_services(db: Session, host_id: UUID) -> List[Dict]:
        """Add-ons a host offers with their current fee"""
        fees = AdminConfigService.get_service_prices(db)
        enabled = PricingService.enabled_services(PricingService.get_options(db, host_id))
        return [{"name": service, "price": fees[service]} for service in enabled]
