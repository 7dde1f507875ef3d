# backend/provider_calendar/services/slots/conflicts.py
"""
Conflict detector.

Single source of truth for "do these two time ranges conflict". Used for
bulk slot marking and for the final check before a booking is committed.
"""

from dataclasses import dataclass, replace
from datetime import date
from typing import Iterable

from .entities import Booking, DateAvailability, Interval, TimeSlot


REASON_BOOKED = "booked"


@dataclass(frozen=True)
class ConflictResult:
    conflict: bool
    conflicting_booking_id: int | None = None

    def __bool__(self) -> bool:
        return self.conflict


NO_CONFLICT = ConflictResult(False)


def ranges_overlap(a_start: int, a_end: int, b_start: int, b_end: int) -> bool:
    """Half-open overlap; touching endpoints do not overlap."""
    return a_start < b_end and b_start < a_end


def overlaps(a: Interval, b: Interval) -> bool:
    return ranges_overlap(a.start, a.end, b.start, b.end)


def expand(interval: Interval, buffer_before: int, buffer_after: int) -> tuple[int, int]:
    """Occupied range padded by buffers. May extend past midnight."""
    return interval.start - buffer_before, interval.end + buffer_after


def check_booking_conflict(
    candidate_date: date,
    candidate: Interval,
    existing_bookings: Iterable[Booking],
    buffer_before: int = 0,
    buffer_after: int = 0,
) -> ConflictResult:
    """
    Check a candidate range against the provider's bookings.

    Both the candidate and every existing booking are expanded by the
    buffers before comparing. Non-blocking statuses and time-less bookings
    are ignored.

    Returns:
        ConflictResult with the first conflicting booking id, if any.
    """
    c_start, c_end = expand(candidate, buffer_before, buffer_after)

    for booking in existing_bookings:
        if not booking.is_blocking or booking.date != candidate_date:
            continue
        if booking.interval is None:
            continue
        b_start, b_end = expand(booking.interval, buffer_before, buffer_after)
        if ranges_overlap(c_start, c_end, b_start, b_end):
            return ConflictResult(True, booking.id)

    return NO_CONFLICT


def check_date_conflict(candidate_date: date, existing_bookings: Iterable[Booking]) -> ConflictResult:
    """A date-only request conflicts with any blocking booking on that date."""
    for booking in existing_bookings:
        if booking.is_blocking and booking.date == candidate_date:
            return ConflictResult(True, booking.id)
    return NO_CONFLICT


def check_within_available_hours(candidate: Interval, day: DateAvailability) -> bool:
    """True iff candidate lies entirely inside one open interval."""
    return any(interval.contains(candidate) for interval in day.open_intervals)


def mark_booked_slots(
    slots: Iterable[TimeSlot],
    existing_bookings: Iterable[Booking],
    buffer_before: int = 0,
    buffer_after: int = 0,
) -> list[TimeSlot]:
    """Flag slots that conflict with existing bookings as unavailable."""
    bookings = [b for b in existing_bookings if b.is_blocking]
    result = []
    for slot in slots:
        if slot.available and check_booking_conflict(
            slot.date, slot.interval, bookings, buffer_before, buffer_after
        ):
            slot = replace(slot, available=False, reason=REASON_BOOKED)
        result.append(slot)
    return result
