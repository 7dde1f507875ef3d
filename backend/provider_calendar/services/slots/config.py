# backend/provider_calendar/services/slots/config.py
"""
Calendar configuration for availability calculation.

Per-provider AvailabilitySettings rows are created from these defaults on
first access. Every default can be overridden from the environment
(CALENDAR_DEFAULT_*), see provider_calendar.config.Settings.
"""

from dataclasses import dataclass
from functools import lru_cache

from .errors import RangeError
from .timeutils import get_zone


# field -> (min, max), inclusive
SETTINGS_BOUNDS: dict[str, tuple[int, int]] = {
    "slot_duration_minutes": (15, 480),
    "buffer_before_minutes": (0, 120),
    "buffer_after_minutes": (0, 120),
    "min_advance_hours": (0, 168),
    "max_advance_days": (1, 365),
}

MAX_QUERY_RANGE_DAYS = 90
NEXT_SLOT_HORIZON_DAYS = 30


def check_bounds(field: str, value: int) -> int:
    """Raise RangeError if value is outside the documented bounds of field."""
    low, high = SETTINGS_BOUNDS[field]
    if isinstance(value, bool) or not isinstance(value, int) or not low <= value <= high:
        raise RangeError(f"{field} must be an integer in [{low}, {high}], got {value!r}")
    return value


@dataclass(frozen=True)
class CalendarDefaults:
    """
    Defaults for a provider's availability settings.

    Attributes:
        timezone: IANA zone the provider's wall-clock times are in
        slot_duration_minutes: Slot size when the service has no duration (15-480)
        buffer_before_minutes: Padding reserved before each booking (0-120)
        buffer_after_minutes: Padding reserved after each booking (0-120)
        min_advance_hours: Minimum notice before a booking starts (0-168)
        max_advance_days: How many days ahead bookings are accepted (1-365)
    """
    timezone: str = "Asia/Bahrain"
    slot_duration_minutes: int = 30
    buffer_before_minutes: int = 0
    buffer_after_minutes: int = 0
    min_advance_hours: int = 24
    max_advance_days: int = 30

    def __post_init__(self):
        """Validate configuration."""
        get_zone(self.timezone)
        for field in SETTINGS_BOUNDS:
            check_bounds(field, getattr(self, field))

    def as_dict(self) -> dict:
        return {
            "timezone": self.timezone,
            "slot_duration_minutes": self.slot_duration_minutes,
            "buffer_before_minutes": self.buffer_before_minutes,
            "buffer_after_minutes": self.buffer_after_minutes,
            "min_advance_hours": self.min_advance_hours,
            "max_advance_days": self.max_advance_days,
        }


@lru_cache
def get_calendar_defaults() -> CalendarDefaults:
    """Calendar defaults (singleton), read from process settings."""
    from ...config import settings

    return CalendarDefaults(
        timezone=settings.calendar_default_timezone,
        slot_duration_minutes=settings.calendar_default_slot_duration_minutes,
        buffer_before_minutes=settings.calendar_default_buffer_before_minutes,
        buffer_after_minutes=settings.calendar_default_buffer_after_minutes,
        min_advance_hours=settings.calendar_default_min_advance_hours,
        max_advance_days=settings.calendar_default_max_advance_days,
    )
