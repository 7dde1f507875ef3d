# backend/provider_calendar/schemas/availability_overrides.py

from datetime import date
from typing import Optional
from pydantic import BaseModel, Field, model_validator

from ..services.slots.entities import OverrideType
from .availability_rules import END_TIME_PATTERN, TIME_PATTERN, _check_order


class AvailabilityOverrideCreate(BaseModel):
    date: date
    override_type: OverrideType

    # Both or neither; neither = all day
    start_time: Optional[str] = Field(None, pattern=TIME_PATTERN)
    end_time: Optional[str] = Field(None, pattern=END_TIME_PATTERN)

    reason: Optional[str] = Field(None, max_length=255)

    @model_validator(mode="after")
    def validate_times(self):
        if (self.start_time is None) != (self.end_time is None):
            raise ValueError("start_time and end_time must be given together")
        _check_order(self.start_time, self.end_time)
        return self


class AvailabilityOverrideUpdate(BaseModel):
    override_type: Optional[OverrideType] = None
    start_time: Optional[str] = Field(None, pattern=TIME_PATTERN)
    end_time: Optional[str] = Field(None, pattern=END_TIME_PATTERN)
    reason: Optional[str] = Field(None, max_length=255)

    @model_validator(mode="after")
    def validate_order(self):
        _check_order(self.start_time, self.end_time)
        return self


class AvailabilityOverrideRead(BaseModel):
    id: int
    provider_id: int

    date: date
    override_type: OverrideType
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    reason: Optional[str] = None

    model_config = {"from_attributes": True}
