"""
Pydantic schemas for booking sessions and bookings
"""
from datetime import date as date_type, datetime
from decimal import Decimal
from typing import Optional, Dict
from uuid import UUID

from pydantic import Field, field_validator

from app.schemas.availability import TIME_PATTERN
from app.schemas.common import CamelModel


class SelectedServices(CamelModel):
    screen_sharing: bool = False
    translation: bool = False
    recording: bool = False
    transcription: bool = False


# ============================================================================
# Booking session
# ============================================================================

class BookingSessionCreate(CamelModel):
    host_id: UUID
    selected_date: date_type
    selected_time: str
    selected_duration: int = Field(..., ge=0)
    selected_services: SelectedServices = Field(default_factory=SelectedServices)
    call_language: Optional[str] = Field(None, max_length=10)

    @field_validator("selected_time")
    @classmethod
    def validate_time(cls, v):
        if not TIME_PATTERN.match(v):
            raise ValueError("Time must be in HH:MM format")
        return v


class BookingSessionResponse(CamelModel):
    session_id: UUID
    host_id: UUID
    guest_id: Optional[UUID] = None
    selected_date: date_type
    selected_time: str
    selected_duration: int
    selected_services: Dict[str, bool]
    call_language: Optional[str] = None
    base_price: Decimal
    services_total: Decimal
    total_price: Decimal
    service_fees: Dict[str, Decimal]
    currency: str
    status: str
    expires_at: datetime


# ============================================================================
# Booking
# ============================================================================

class BookingResponse(CamelModel):
    id: UUID
    host_id: UUID
    guest_id: UUID
    booking_session_id: Optional[UUID] = None
    scheduled_date: date_type
    start_time: str
    duration: int
    price: Decimal
    currency: str
    status: str
    call_language: Optional[str] = None
    services: Optional[Dict[str, bool]] = None
    agora_channel_name: Optional[str] = None
    created_at: Optional[datetime] = None
    cancelled_by: Optional[str] = None


class BookingCancelRequest(CamelModel):
    reason: Optional[str] = Field(None, max_length=500)
