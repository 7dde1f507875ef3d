# backend/provider_calendar/services/slots/errors.py
"""
Error taxonomy for the availability engine.

Expected business outcomes (window, hours, conflicts, rule overlap) are
returned as ValidationResult values. Malformed input (ParseError,
RangeError) is a defect and raised.
"""

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .entities import TimeSlot


class ParseError(ValueError):
    """Malformed time/date string."""


class RangeError(ValueError):
    """Value outside its documented bounds."""


class ErrorCode(str, Enum):
    SERVICE_NOT_FOUND = "SERVICE_NOT_FOUND"
    SERVICE_NOT_AVAILABLE = "SERVICE_NOT_AVAILABLE"
    OUTSIDE_BOOKING_WINDOW = "OUTSIDE_BOOKING_WINDOW"
    TIME_NOT_AVAILABLE = "TIME_NOT_AVAILABLE"
    SLOT_ALREADY_BOOKED = "SLOT_ALREADY_BOOKED"
    RULE_OVERLAP = "RULE_OVERLAP"


@dataclass(frozen=True)
class ValidationResult:
    """
    Outcome of a validator.

    Attributes:
        ok: True when the candidate passed
        code: Error code when it did not
        message: Human readable explanation of the failure
        conflicting_booking_id: First booking found in conflict (SLOT_ALREADY_BOOKED only)
        slot: The validated slot, set on successful booking checks
    """
    ok: bool
    code: ErrorCode | None = None
    message: str | None = None
    conflicting_booking_id: int | None = None
    slot: "TimeSlot | None" = None

    def __bool__(self) -> bool:
        return self.ok

    @classmethod
    def success(cls, slot: "TimeSlot | None" = None) -> "ValidationResult":
        return cls(ok=True, slot=slot)

    @classmethod
    def failure(
        cls,
        code: ErrorCode,
        message: str,
        conflicting_booking_id: int | None = None,
    ) -> "ValidationResult":
        return cls(
            ok=False,
            code=code,
            message=message,
            conflicting_booking_id=conflicting_booking_id,
        )


OK = ValidationResult.success()
