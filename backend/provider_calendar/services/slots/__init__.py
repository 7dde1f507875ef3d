# backend/provider_calendar/services/slots/__init__.py
"""
Availability & booking conflict engine.

Level 1: Materialized open intervals per date (cached in Redis)
Level 2: Slots for a service, marked against bookings (calculated on-the-fly)
"""

from .config import CalendarDefaults, get_calendar_defaults
from .calculator import materialize_day, materialize_range
from .availability import AvailabilityEngine
from .errors import ErrorCode, ParseError, RangeError, ValidationResult
from .redis_store import DayAvailabilityRedisStore
from .invalidator import invalidate_provider_cache
from .repository import AvailabilityRepository, SqlAlchemyAvailabilityRepository

__all__ = [
    "CalendarDefaults",
    "get_calendar_defaults",
    "materialize_day",
    "materialize_range",
    "AvailabilityEngine",
    "ErrorCode",
    "ParseError",
    "RangeError",
    "ValidationResult",
    "DayAvailabilityRedisStore",
    "invalidate_provider_cache",
    "AvailabilityRepository",
    "SqlAlchemyAvailabilityRepository",
]
