# backend/provider_calendar/services/slots/window.py
"""
Booking window validator.

`now` is always passed in by the caller, captured once per request.
"""

from datetime import datetime, timedelta, timezone

from .entities import AvailabilitySettings
from .errors import OK, ErrorCode, ValidationResult
from .timeutils import to_provider_time


def validate_within_booking_window(
    candidate: datetime,
    now: datetime,
    settings: AvailabilitySettings,
) -> ValidationResult:
    """
    Enforce minimum notice and maximum horizon.

    Args:
        candidate: Aware start instant of the requested booking
        now: Aware current instant
        settings: Provider settings (timezone, min_advance_hours, max_advance_days)
    """
    candidate_local = to_provider_time(candidate, settings.timezone)
    now_local = to_provider_time(now, settings.timezone)

    # Elapsed time, compared in UTC so DST shifts count
    hours_until = candidate.astimezone(timezone.utc) - now.astimezone(timezone.utc)
    if hours_until < timedelta(hours=settings.min_advance_hours):
        return ValidationResult.failure(
            ErrorCode.OUTSIDE_BOOKING_WINDOW,
            f"Booking requires at least {settings.min_advance_hours} hours advance notice",
        )

    days_ahead = (candidate_local.date() - now_local.date()).days
    if days_ahead > settings.max_advance_days:
        return ValidationResult.failure(
            ErrorCode.OUTSIDE_BOOKING_WINDOW,
            f"Booking cannot be more than {settings.max_advance_days} days in advance",
        )

    return OK
