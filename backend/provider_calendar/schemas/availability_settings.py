# backend/provider_calendar/schemas/availability_settings.py

from typing import Optional
from pydantic import BaseModel, Field, field_validator

from ..services.slots.errors import RangeError
from ..services.slots.timeutils import get_zone


class AvailabilitySettingsUpdate(BaseModel):
    timezone: Optional[str] = None
    slot_duration_minutes: Optional[int] = Field(None, ge=15, le=480)
    buffer_before_minutes: Optional[int] = Field(None, ge=0, le=120)
    buffer_after_minutes: Optional[int] = Field(None, ge=0, le=120)
    min_advance_hours: Optional[int] = Field(None, ge=0, le=168)
    max_advance_days: Optional[int] = Field(None, ge=1, le=365)

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        try:
            get_zone(v)
        except RangeError:
            raise ValueError("Invalid timezone")
        return v


class AvailabilitySettingsRead(BaseModel):
    provider_id: int
    timezone: str
    slot_duration_minutes: int
    buffer_before_minutes: int
    buffer_after_minutes: int
    min_advance_hours: int
    max_advance_days: int

    model_config = {"from_attributes": True}
