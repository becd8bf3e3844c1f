"""
Pydantic schemas for host pricing options and service fees
"""
from decimal import Decimal
from typing import Optional, List
from uuid import UUID

from pydantic import Field

from app.schemas.common import CamelModel


class PricingOptionCreate(CamelModel):
    duration: int = Field(..., ge=0, le=480, description="Minutes, 0 = free consultation")
    price: Decimal = Field(..., ge=0)
    currency: str = Field(default="EUR", min_length=3, max_length=3)
    is_active: bool = True
    is_custom: bool = False
    includes_screen_sharing: bool = False
    includes_translation: bool = False
    includes_recording: bool = False
    includes_transcription: bool = False


class PricingOptionResponse(CamelModel):
    id: UUID
    user_id: UUID
    duration: int
    price: Decimal
    currency: str
    is_active: bool
    is_custom: bool
    includes_screen_sharing: bool
    includes_translation: bool
    includes_recording: bool
    includes_transcription: bool


class ServicePricesResponse(CamelModel):
    """Add-on fee table"""
    screen_sharing: Decimal
    translation: Decimal
    recording: Decimal
    transcription: Decimal


class HostServiceResponse(CamelModel):
    name: str
    price: Decimal


class HostServicesResponse(CamelModel):
    host_id: UUID
    services: List[HostServiceResponse]
