# backend/provider_calendar/services/slots/entities.py
"""
Plain value types consumed and produced by the availability engine.

The repository maps database rows onto these; the engine never sees ORM
objects.
"""

from dataclasses import dataclass
from datetime import date
from enum import Enum

from .config import SETTINGS_BOUNDS, check_bounds
from .errors import RangeError
from .timeutils import (
    MINUTES_PER_DAY,
    DayOfWeek,
    format_end_time,
    get_zone,
    minutes_to_time,
    parse_end_time_to_minutes,
    parse_time_to_minutes,
)


class ServiceType(str, Enum):
    APPOINTMENT = "APPOINTMENT"
    DELIVERY_DATE = "DELIVERY_DATE"
    PICKUP_DROPOFF = "PICKUP_DROPOFF"


# Booked by calendar date, no start time
DATE_ONLY_SERVICE_TYPES = frozenset({ServiceType.DELIVERY_DATE, ServiceType.PICKUP_DROPOFF})


class OverrideType(str, Enum):
    BLOCKED = "BLOCKED"
    AVAILABLE = "AVAILABLE"


class BookingStatus(str, Enum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"
    REJECTED = "REJECTED"
    NO_SHOW = "NO_SHOW"


# Statuses that free the provider's timeline
NON_BLOCKING_STATUSES = frozenset({
    BookingStatus.CANCELLED,
    BookingStatus.REJECTED,
    BookingStatus.NO_SHOW,
})


@dataclass(frozen=True, order=True)
class Interval:
    """Half-open [start, end) in minutes since midnight."""
    start: int
    end: int

    def __post_init__(self):
        if not 0 <= self.start < self.end <= MINUTES_PER_DAY:
            raise RangeError(
                f"Invalid interval [{self.start}, {self.end}): "
                f"need 0 <= start < end <= {MINUTES_PER_DAY}"
            )

    @classmethod
    def from_strings(cls, start_time: str, end_time: str) -> "Interval":
        return cls(parse_time_to_minutes(start_time), parse_end_time_to_minutes(end_time))

    @property
    def start_time(self) -> str:
        return minutes_to_time(self.start)

    @property
    def end_time(self) -> str:
        return format_end_time(self.end)

    @property
    def duration(self) -> int:
        return self.end - self.start

    def contains(self, other: "Interval") -> bool:
        return self.start <= other.start and other.end <= self.end

    def __str__(self) -> str:
        return f"{self.start_time}-{self.end_time}"


@dataclass(frozen=True)
class AvailabilityRule:
    """Recurring weekly availability window."""
    provider_id: int
    day_of_week: DayOfWeek
    start_time: str
    end_time: str
    is_active: bool = True
    id: int | None = None

    def __post_init__(self):
        object.__setattr__(self, "day_of_week", DayOfWeek(self.day_of_week))
        # Raises ParseError / RangeError on malformed or inverted times
        self.interval

    @property
    def interval(self) -> Interval:
        return Interval.from_strings(self.start_time, self.end_time)


@dataclass(frozen=True)
class AvailabilityOverride:
    """Date-specific exception; no time bounds means all day."""
    provider_id: int
    date: date
    type: OverrideType
    start_time: str | None = None
    end_time: str | None = None
    reason: str | None = None
    id: int | None = None

    def __post_init__(self):
        object.__setattr__(self, "type", OverrideType(self.type))
        if (self.start_time is None) != (self.end_time is None):
            raise RangeError("Override needs both start_time and end_time, or neither")
        self.interval

    @property
    def is_all_day(self) -> bool:
        return self.start_time is None

    @property
    def interval(self) -> Interval | None:
        if self.is_all_day:
            return None
        return Interval.from_strings(self.start_time, self.end_time)


@dataclass(frozen=True)
class AvailabilitySettings:
    provider_id: int
    timezone: str
    slot_duration_minutes: int
    buffer_before_minutes: int
    buffer_after_minutes: int
    min_advance_hours: int
    max_advance_days: int

    def __post_init__(self):
        get_zone(self.timezone)
        for name in SETTINGS_BOUNDS:
            check_bounds(name, getattr(self, name))


@dataclass(frozen=True)
class Booking:
    """A time-less booking (date-only service) has no start or end time."""
    id: int
    provider_id: int
    service_id: int | None
    date: date
    start_time: str | None
    end_time: str | None
    status: BookingStatus = BookingStatus.PENDING

    def __post_init__(self):
        object.__setattr__(self, "status", BookingStatus(self.status))

    @property
    def interval(self) -> Interval | None:
        if self.start_time is None or self.end_time is None:
            return None
        return Interval.from_strings(self.start_time, self.end_time)

    @property
    def is_blocking(self) -> bool:
        return self.status not in NON_BLOCKING_STATUSES


@dataclass(frozen=True)
class Service:
    id: int
    provider_id: int
    duration_minutes: int | None = None
    is_active: bool = True
    service_type: ServiceType = ServiceType.APPOINTMENT
    preparation_days: int = 0

    def __post_init__(self):
        object.__setattr__(self, "service_type", ServiceType(self.service_type))
        if self.preparation_days < 0:
            raise RangeError(f"preparation_days must be >= 0, got {self.preparation_days}")

    @property
    def is_date_only(self) -> bool:
        return self.service_type in DATE_ONLY_SERVICE_TYPES


@dataclass(frozen=True)
class DateAvailability:
    """Open intervals of one date, before bookings are subtracted."""
    date: date
    is_open: bool
    open_intervals: tuple[Interval, ...] = ()
    reason: str | None = None


@dataclass(frozen=True)
class TimeSlot:
    date: date
    interval: Interval
    available: bool = True
    reason: str | None = None

    @property
    def start_time(self) -> str:
        return self.interval.start_time

    @property
    def end_time(self) -> str:
        return self.interval.end_time
