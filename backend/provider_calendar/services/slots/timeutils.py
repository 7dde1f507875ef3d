# backend/provider_calendar/services/slots/timeutils.py
"""
Wall-clock and calendar conversions.

Times are "HH:MM" strings or minutes since midnight. Dates are
"YYYY-MM-DD" strings or datetime.date. Nothing here reads the host
timezone: every conversion to or from an instant takes the provider's
IANA zone explicitly.
"""

import re
from datetime import date, datetime, time, timedelta
from enum import Enum
from typing import Iterator, NamedTuple
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .errors import ParseError, RangeError


MINUTES_PER_DAY = 24 * 60

_TIME_RE = re.compile(r"^\d{2}:\d{2}$")
_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


class DayOfWeek(str, Enum):
    SUNDAY = "SUNDAY"
    MONDAY = "MONDAY"
    TUESDAY = "TUESDAY"
    WEDNESDAY = "WEDNESDAY"
    THURSDAY = "THURSDAY"
    FRIDAY = "FRIDAY"
    SATURDAY = "SATURDAY"


# 0 = Sunday, 6 = Saturday
DAY_OF_WEEK_INDEX: dict[DayOfWeek, int] = {
    DayOfWeek.SUNDAY: 0,
    DayOfWeek.MONDAY: 1,
    DayOfWeek.TUESDAY: 2,
    DayOfWeek.WEDNESDAY: 3,
    DayOfWeek.THURSDAY: 4,
    DayOfWeek.FRIDAY: 5,
    DayOfWeek.SATURDAY: 6,
}

INDEX_TO_DAY_OF_WEEK: dict[int, DayOfWeek] = {v: k for k, v in DAY_OF_WEEK_INDEX.items()}


class WallClockTime(NamedTuple):
    """Timezone-less time of day."""
    hour: int
    minute: int

    @classmethod
    def parse(cls, value: str) -> "WallClockTime":
        """Parse "HH:MM"; 24:00 is not a time of day."""
        if not isinstance(value, str) or not _TIME_RE.match(value):
            raise ParseError(f"Invalid time {value!r}, expected HH:MM")

        hour, minute = int(value[:2]), int(value[3:])
        if hour > 23 or minute > 59:
            raise ParseError(f"Invalid time {value!r}, out of range")
        return cls(hour, minute)

    @classmethod
    def from_minutes(cls, minutes: int) -> "WallClockTime":
        if minutes < 0 or minutes >= MINUTES_PER_DAY:
            raise RangeError(f"Minutes must be in [0, {MINUTES_PER_DAY}), got {minutes}")
        return cls(*divmod(minutes, 60))

    @property
    def minutes(self) -> int:
        return self.hour * 60 + self.minute

    def __str__(self) -> str:
        return f"{self.hour:02d}:{self.minute:02d}"


# ── Time strings ─────────────────────────────────────────────────────────


def parse_time_to_minutes(value: str) -> int:
    """Convert "HH:MM" to minutes since midnight."""
    return WallClockTime.parse(value).minutes


def parse_end_time_to_minutes(value: str) -> int:
    """Like parse_time_to_minutes, but also accepts "24:00" as end of day."""
    if value == "24:00":
        return MINUTES_PER_DAY
    return parse_time_to_minutes(value)


def minutes_to_time(minutes: int) -> str:
    """Convert minutes since midnight to "HH:MM"."""
    return str(WallClockTime.from_minutes(minutes))


def format_end_time(minutes: int) -> str:
    """Format an exclusive interval end; end of day is written "24:00"."""
    if minutes == MINUTES_PER_DAY:
        return "24:00"
    return minutes_to_time(minutes)


# ── Calendar dates ───────────────────────────────────────────────────────


def format_date_string(value: date) -> str:
    """Calendar part of value as "YYYY-MM-DD" (no timezone conversion)."""
    return date(value.year, value.month, value.day).isoformat()


def parse_date_string(value: str) -> date:
    """Inverse of format_date_string."""
    if not isinstance(value, str) or not _DATE_RE.match(value):
        raise ParseError(f"Invalid date {value!r}, expected YYYY-MM-DD")
    try:
        return date.fromisoformat(value)
    except ValueError as e:
        raise ParseError(f"Invalid date {value!r}: {e}") from e


def date_range(start: date, end: date) -> Iterator[date]:
    """Dates in [start, end], inclusive. Empty when end < start."""
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


# ── Timezones ────────────────────────────────────────────────────────────


def get_zone(name: str) -> ZoneInfo:
    """Resolve an IANA timezone name."""
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise RangeError(f"Unknown timezone {name!r}") from e


def _require_aware(value: datetime) -> None:
    if value.tzinfo is None or value.utcoffset() is None:
        raise ValueError("datetime must be timezone-aware")


def to_provider_time(value: datetime, timezone: str) -> datetime:
    """Express an instant in the provider's zone."""
    _require_aware(value)
    return value.astimezone(get_zone(timezone))


def local_date(value: datetime, timezone: str) -> date:
    """Calendar date of an instant as seen in the provider's zone."""
    return to_provider_time(value, timezone).date()


def to_instant(day: date, minutes: int, timezone: str) -> datetime:
    """Aware datetime for wall-clock `minutes` on `day` in the provider's zone."""
    naive = datetime.combine(day, time.min) + timedelta(minutes=minutes)
    return naive.replace(tzinfo=get_zone(timezone))


def get_day_of_week(value: date | datetime, timezone: str | None = None) -> DayOfWeek:
    """
    Day of week for a calendar date or an instant.

    Aware datetimes are first converted to `timezone` so that an instant
    late on Sunday UTC is Monday in Asia/Bahrain. Plain dates are already
    calendar dates and are used as-is.
    """
    if isinstance(value, datetime):
        if value.tzinfo is not None and timezone is not None:
            value = to_provider_time(value, timezone)
        value = value.date()
    # date.weekday(): 0 = Monday
    return INDEX_TO_DAY_OF_WEEK[(value.weekday() + 1) % 7]
