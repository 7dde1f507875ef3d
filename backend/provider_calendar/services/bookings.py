"""
backend/provider_calendar/services/bookings.py

Booking creation and status transitions.

The availability engine is the only source of truth for whether a time can
be booked. Creation runs under the provider's commit lock and re-runs the
full validation in the same transaction that inserts the row, so two
concurrent requests for overlapping time cannot both commit.
"""

import logging
from datetime import date, datetime

from redis import Redis
from sqlalchemy import func
from sqlalchemy.orm import Session

from ..models.generated import Bookings as DBBookings, Services as DBServices
from .slots.availability import AvailabilityEngine
from .slots.entities import BookingStatus
from .slots.errors import ErrorCode
from .slots.locks import provider_commit_lock
from .slots.repository import SqlAlchemyAvailabilityRepository
from .slots.timeutils import format_date_string

logger = logging.getLogger(__name__)


BOOKING_NOT_FOUND = "BOOKING_NOT_FOUND"
INVALID_TRANSITION = "INVALID_TRANSITION"

BOOKING_STATUS_TRANSITIONS: dict[BookingStatus, set[BookingStatus]] = {
    BookingStatus.PENDING: {BookingStatus.CONFIRMED, BookingStatus.REJECTED, BookingStatus.CANCELLED},
    BookingStatus.CONFIRMED: {BookingStatus.IN_PROGRESS, BookingStatus.CANCELLED, BookingStatus.NO_SHOW},
    BookingStatus.IN_PROGRESS: {BookingStatus.COMPLETED, BookingStatus.CANCELLED},
    BookingStatus.COMPLETED: set(),
    BookingStatus.CANCELLED: set(),
    BookingStatus.REJECTED: set(),
    BookingStatus.NO_SHOW: set(),
}


class BookingValidationError(Exception):
    """Booking request rejected with a stable error code."""

    def __init__(self, code: str, message: str):
        super().__init__(message)
        self.code = code
        self.message = message


def is_valid_transition(current: BookingStatus, new: BookingStatus) -> bool:
    return new in BOOKING_STATUS_TRANSITIONS.get(current, set())


def create_booking(
    db: Session,
    service_id: int,
    target_date: date,
    start_time: str | None,
    now: datetime,
    customer_id: int | None = None,
    notes: str | None = None,
    redis: Redis | None = None,
) -> DBBookings:
    """
    Validate and persist a booking.

    start_time is None for date-only services; the booking then holds the
    whole date.

    Raises:
        BookingValidationError: request failed one of the engine checks
        ProviderBusyError: provider's commit lock not acquired in time
    """
    service = db.get(DBServices, service_id)
    if service is None:
        raise BookingValidationError(ErrorCode.SERVICE_NOT_FOUND.value, "Service not found")
    provider_id = service.provider_id

    engine = AvailabilityEngine(SqlAlchemyAvailabilityRepository(db), redis)

    with provider_commit_lock(provider_id, redis):
        result = engine.validate_booking_request(
            provider_id, service_id, target_date, start_time, now
        )
        if not result:
            db.rollback()
            logger.info(
                "Booking rejected: provider=%s service=%s %s %s code=%s",
                provider_id, service_id, target_date, start_time, result.code.value,
            )
            raise BookingValidationError(result.code.value, result.message)

        obj = DBBookings(
            provider_id=provider_id,
            service_id=service_id,
            customer_id=customer_id,
            date=format_date_string(target_date),
            start_time=result.slot.start_time if result.slot else None,
            end_time=result.slot.end_time if result.slot else None,
            status=BookingStatus.PENDING.value,
            notes=notes,
        )
        db.add(obj)
        db.commit()

    db.refresh(obj)
    logger.info(
        "Booking created: id=%s provider=%s %s %s-%s",
        obj.id, provider_id, obj.date, obj.start_time, obj.end_time,
    )
    return obj


def update_booking_status(
    db: Session,
    booking_id: int,
    status: BookingStatus,
    reason: str | None = None,
) -> DBBookings:
    """Move a booking along its lifecycle. Cancelling frees the slot."""
    obj = db.get(DBBookings, booking_id)
    if obj is None:
        raise BookingValidationError(BOOKING_NOT_FOUND, "Booking not found")

    current = BookingStatus(obj.status)
    status = BookingStatus(status)
    if not is_valid_transition(current, status):
        raise BookingValidationError(
            INVALID_TRANSITION,
            f"Cannot change booking status from {current.value} to {status.value}",
        )

    obj.status = status.value
    if status == BookingStatus.CANCELLED:
        obj.cancel_reason = reason
    obj.updated_at = func.current_timestamp()
    db.commit()
    db.refresh(obj)

    logger.info("Booking %s: %s → %s", booking_id, current.value, status.value)
    return obj


def cancel_booking(db: Session, booking_id: int, reason: str | None = None) -> DBBookings:
    return update_booking_status(db, booking_id, BookingStatus.CANCELLED, reason)
