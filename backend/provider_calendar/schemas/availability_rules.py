# backend/provider_calendar/schemas/availability_rules.py

from typing import Optional
from pydantic import BaseModel, Field, model_validator

from ..services.slots.timeutils import DayOfWeek, parse_end_time_to_minutes, parse_time_to_minutes

# 24-hour HH:MM
TIME_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"
# Interval ends may also be 24:00, end of day
END_TIME_PATTERN = r"^(([01]\d|2[0-3]):[0-5]\d|24:00)$"


def _check_order(start_time: Optional[str], end_time: Optional[str]) -> None:
    if start_time and end_time and parse_end_time_to_minutes(end_time) <= parse_time_to_minutes(start_time):
        raise ValueError("End time must be after start time")


class AvailabilityRuleCreate(BaseModel):
    day_of_week: DayOfWeek
    start_time: str = Field(pattern=TIME_PATTERN)
    end_time: str = Field(pattern=END_TIME_PATTERN)
    is_active: bool = True

    @model_validator(mode="after")
    def validate_order(self):
        _check_order(self.start_time, self.end_time)
        return self


class AvailabilityRuleUpdate(BaseModel):
    start_time: Optional[str] = Field(None, pattern=TIME_PATTERN)
    end_time: Optional[str] = Field(None, pattern=END_TIME_PATTERN)
    is_active: Optional[bool] = None

    @model_validator(mode="after")
    def validate_order(self):
        _check_order(self.start_time, self.end_time)
        return self


class AvailabilityRuleBulk(BaseModel):
    """Full replacement of a provider's weekly rules."""
    rules: list[AvailabilityRuleCreate]


class AvailabilityRuleRead(BaseModel):
    id: int
    provider_id: int

    day_of_week: DayOfWeek
    start_time: str
    end_time: str
    is_active: bool

    model_config = {"from_attributes": True}
