"""
Pydantic schemas for host availability and slot listings
"""
import re
from datetime import date as date_type, datetime
from typing import Optional, List
from uuid import UUID

from pydantic import Field, field_validator, model_validator

from app.schemas.common import CamelModel

TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


# ============================================================================
# Request Schemas
# ============================================================================

class AvailabilityCreate(CamelModel):
    """
    A weekly window (dayOfWeek) or a one-off window (date).
    When both are sent the date wins.
    """
    date: Optional[date_type] = None
    day_of_week: Optional[int] = Field(None, ge=0, le=6, description="0=Sunday")
    start_time: str
    end_time: str
    is_active: bool = True

    @field_validator("start_time", "end_time")
    @classmethod
    def validate_time(cls, v):
        if not TIME_PATTERN.match(v):
            raise ValueError("Time must be in HH:MM format")
        return v

    @model_validator(mode="after")
    def check_window(self):
        if self.start_time >= self.end_time:
            raise ValueError("startTime must be before endTime")
        if self.date is None and self.day_of_week is None:
            raise ValueError("Either date or dayOfWeek is required")
        if self.date is not None:
            self.day_of_week = None
        return self


# ============================================================================
# Response Schemas
# ============================================================================

class AvailabilityResponse(CamelModel):
    id: UUID
    user_id: UUID
    date: Optional[date_type] = None
    day_of_week: Optional[int] = None
    start_time: str
    end_time: str
    is_active: bool
    created_at: Optional[datetime] = None


class SlotResponse(CamelModel):
    time: str
    available: bool


class SlotListResponse(CamelModel):
    host_id: UUID
    date: date_type
    duration: Optional[int] = None
    slots: List[SlotResponse]


class AvailableDatesResponse(CamelModel):
    host_id: UUID
    start: date_type
    end: date_type
    dates: List[date_type]
