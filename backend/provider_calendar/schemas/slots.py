# backend/provider_calendar/schemas/slots.py
"""
Pydantic schemas for slots API.

All dates and times are the provider's calendar/wall clock; every
response carries the provider's `timezone`.
"""

from datetime import date
from typing import Optional
from pydantic import BaseModel, Field

from ..services.slots.entities import DateAvailability, TimeSlot


class SlotsDateStatus(BaseModel):
    """Status of a single day in calendar."""
    date: date
    has_availability: bool


class SlotsDatesResponse(BaseModel):
    """Response with calendar of available days."""
    provider_id: int
    timezone: str = Field(description="IANA zone all dates/times are expressed in")
    date_from: date
    date_to: date
    dates: list[SlotsDateStatus]

    # Metadata
    min_advance_hours: int
    max_advance_days: int


class SlotInfo(BaseModel):
    """Information about a single slot (wire format)."""
    date: date
    start_time: str = Field(alias="startTime")  # "HH:MM"
    end_time: str = Field(alias="endTime")  # "HH:MM", "24:00" = end of day
    available: bool
    reason: Optional[str] = None

    model_config = {"populate_by_name": True}

    @classmethod
    def from_slot(cls, slot: TimeSlot) -> "SlotInfo":
        return cls(
            date=slot.date,
            start_time=slot.start_time,
            end_time=slot.end_time,
            available=slot.available,
            reason=slot.reason,
        )


class SlotsDayResponse(BaseModel):
    """Response with detailed slots for a day."""
    provider_id: int
    service_id: Optional[int] = None
    date: date
    timezone: str
    slots: list[SlotInfo]


class NextSlotResponse(BaseModel):
    provider_id: int
    service_id: Optional[int] = None
    timezone: str
    slot: SlotInfo


class OpenInterval(BaseModel):
    start: str
    end: str


class DayPreview(BaseModel):
    """Materialized day before bookings (admin preview)."""
    date: date
    is_open: bool
    open_intervals: list[OpenInterval]
    reason: Optional[str] = None

    @classmethod
    def from_day(cls, day: DateAvailability) -> "DayPreview":
        return cls(
            date=day.date,
            is_open=day.is_open,
            open_intervals=[
                OpenInterval(start=i.start_time, end=i.end_time) for i in day.open_intervals
            ],
            reason=day.reason,
        )


class SlotsPreviewResponse(BaseModel):
    provider_id: int
    timezone: str
    days: list[DayPreview]
