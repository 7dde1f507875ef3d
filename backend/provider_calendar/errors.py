# backend/provider_calendar/errors.py
"""
HTTP mapping of engine and booking error codes.

The engine never formats responses; routers and exception handlers use
this table so that every code has one fixed status.
"""

from fastapi import status

from .services.bookings import BOOKING_NOT_FOUND, INVALID_TRANSITION
from .services.slots.errors import ErrorCode, ValidationResult


ERROR_STATUS: dict[str, int] = {
    ErrorCode.SERVICE_NOT_FOUND.value: status.HTTP_404_NOT_FOUND,
    ErrorCode.SERVICE_NOT_AVAILABLE.value: status.HTTP_422_UNPROCESSABLE_ENTITY,
    ErrorCode.OUTSIDE_BOOKING_WINDOW.value: status.HTTP_400_BAD_REQUEST,
    ErrorCode.TIME_NOT_AVAILABLE.value: status.HTTP_400_BAD_REQUEST,
    ErrorCode.SLOT_ALREADY_BOOKED.value: status.HTTP_409_CONFLICT,
    ErrorCode.RULE_OVERLAP.value: status.HTTP_409_CONFLICT,
    BOOKING_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    INVALID_TRANSITION: status.HTTP_422_UNPROCESSABLE_ENTITY,
}


def error_body(code: str, message: str) -> dict:
    return {"error": message, "code": code}


class ApiError(Exception):
    """Rejected request carrying a stable error code."""

    def __init__(self, code: str, message: str):
        super().__init__(message)
        self.code = code
        self.message = message

    @property
    def status_code(self) -> int:
        return status_code_for(self.code)


def status_code_for(code: str) -> int:
    return ERROR_STATUS.get(code, status.HTTP_400_BAD_REQUEST)


def raise_for_result(result: ValidationResult) -> None:
    if not result:
        raise ApiError(result.code.value, result.message)
