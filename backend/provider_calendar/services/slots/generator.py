# backend/provider_calendar/services/slots/generator.py
"""
Slot generator: fixed-stride tiling of open intervals.

Buffers are not part of slot boundaries; they are applied by the
Conflict Detector around occupied time only.
"""

from datetime import date

from .entities import AvailabilitySettings, DateAvailability, Interval, TimeSlot
from .errors import RangeError


def resolve_duration(service_duration: int | None, settings: AvailabilitySettings) -> int:
    """Service duration, falling back to the provider's slot duration."""
    if service_duration:
        return service_duration
    return settings.slot_duration_minutes


def tile_interval(target_date: date, interval: Interval, duration: int) -> list[TimeSlot]:
    """
    Split interval into consecutive slots of `duration` minutes.

    A trailing remainder shorter than duration is dropped.
    """
    if duration <= 0:
        raise RangeError(f"Slot duration must be positive, got {duration}")

    slots = []
    cursor = interval.start
    while cursor + duration <= interval.end:
        slots.append(TimeSlot(target_date, Interval(cursor, cursor + duration)))
        cursor += duration
    return slots


def generate_slots(day: DateAvailability, duration: int) -> list[TimeSlot]:
    """All slots for a date, each initially available."""
    slots: list[TimeSlot] = []
    for interval in day.open_intervals:
        slots.extend(tile_interval(day.date, interval, duration))
    return slots
