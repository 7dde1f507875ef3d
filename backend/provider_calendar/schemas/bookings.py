# backend/provider_calendar/schemas/bookings.py

from datetime import date
from typing import Optional
from pydantic import BaseModel, Field

from ..services.slots.entities import BookingStatus
from .availability_rules import TIME_PATTERN


class BookingCreate(BaseModel):
    service_id: int
    date: date  # provider's calendar date
    start_time: Optional[str] = Field(
        None, pattern=TIME_PATTERN, description="Provider's wall clock, HH:MM; omitted for date-only services"
    )
    customer_id: Optional[int] = None
    notes: Optional[str] = Field(None, max_length=1000)


class BookingStatusUpdate(BaseModel):
    status: BookingStatus
    reason: Optional[str] = Field(None, max_length=500)


class BookingCancel(BaseModel):
    reason: str = Field(min_length=1, max_length=500)


class BookingRead(BaseModel):
    id: int

    provider_id: int
    service_id: int
    customer_id: Optional[int] = None

    date: date
    start_time: Optional[str] = None
    end_time: Optional[str] = None

    status: BookingStatus
    notes: Optional[str] = None
    cancel_reason: Optional[str] = None

    model_config = {"from_attributes": True}
