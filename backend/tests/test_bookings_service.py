import pytest

from provider_calendar.services.bookings import (
    BOOKING_NOT_FOUND,
    INVALID_TRANSITION,
    BookingValidationError,
    cancel_booking,
    create_booking,
    is_valid_transition,
    update_booking_status,
)
from provider_calendar.services.slots.entities import BookingStatus

from conftest import NOW, PROVIDER_ID, WEDNESDAY


def test_create_booking(seeded_db):
    obj = create_booking(seeded_db, 1, WEDNESDAY, "10:00", NOW, customer_id=5, notes="first visit")

    assert obj.id is not None
    assert obj.provider_id == PROVIDER_ID
    assert (obj.date, obj.start_time, obj.end_time) == ("2024-01-10", "10:00", "11:00")
    assert obj.status == BookingStatus.PENDING.value


def test_overlapping_booking_is_rejected(seeded_db):
    first = create_booking(seeded_db, 1, WEDNESDAY, "10:00", NOW)

    with pytest.raises(BookingValidationError) as exc:
        create_booking(seeded_db, 1, WEDNESDAY, "10:30", NOW)

    assert exc.value.code == "SLOT_ALREADY_BOOKED"
    assert first.id is not None


@pytest.mark.parametrize("service_id,start_time,code", [
    (999, "10:00", "SERVICE_NOT_FOUND"),
    (2, "10:00", "SERVICE_NOT_AVAILABLE"),
    (1, "07:00", "TIME_NOT_AVAILABLE"),
])
def test_rejected_requests(seeded_db, service_id, start_time, code):
    with pytest.raises(BookingValidationError) as exc:
        create_booking(seeded_db, service_id, WEDNESDAY, start_time, NOW)
    assert exc.value.code == code


def test_cancelling_frees_the_slot(seeded_db):
    first = create_booking(seeded_db, 1, WEDNESDAY, "10:00", NOW)
    cancelled = cancel_booking(seeded_db, first.id, "Customer request")

    assert cancelled.status == BookingStatus.CANCELLED.value
    assert cancelled.cancel_reason == "Customer request"

    second = create_booking(seeded_db, 1, WEDNESDAY, "10:00", NOW)
    assert second.id != first.id


def test_status_lifecycle(seeded_db):
    obj = create_booking(seeded_db, 1, WEDNESDAY, "12:00", NOW)

    for status in (BookingStatus.CONFIRMED, BookingStatus.IN_PROGRESS, BookingStatus.COMPLETED):
        obj = update_booking_status(seeded_db, obj.id, status)
    assert obj.status == BookingStatus.COMPLETED.value

    with pytest.raises(BookingValidationError) as exc:
        update_booking_status(seeded_db, obj.id, BookingStatus.CANCELLED)
    assert exc.value.code == INVALID_TRANSITION


def test_unknown_booking(seeded_db):
    with pytest.raises(BookingValidationError) as exc:
        cancel_booking(seeded_db, 12345)
    assert exc.value.code == BOOKING_NOT_FOUND


def test_transition_table():
    assert is_valid_transition(BookingStatus.PENDING, BookingStatus.CONFIRMED)
    assert is_valid_transition(BookingStatus.CONFIRMED, BookingStatus.NO_SHOW)
    assert not is_valid_transition(BookingStatus.PENDING, BookingStatus.COMPLETED)
    assert not is_valid_transition(BookingStatus.CANCELLED, BookingStatus.PENDING)


def test_date_only_booking_holds_the_date(seeded_db):
    obj = create_booking(seeded_db, 3, WEDNESDAY, None, NOW)
    assert (obj.date, obj.start_time, obj.end_time) == ("2024-01-10", None, None)

    with pytest.raises(BookingValidationError) as exc:
        create_booking(seeded_db, 3, WEDNESDAY, None, NOW)
    assert (exc.value.code, exc.value.message) == ("SLOT_ALREADY_BOOKED", "Date already booked")
