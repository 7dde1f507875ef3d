from datetime import date

import pytest

from provider_calendar.services.slots.conflicts import (
    REASON_BOOKED,
    check_booking_conflict,
    check_date_conflict,
    check_within_available_hours,
    mark_booked_slots,
    ranges_overlap,
)
from provider_calendar.services.slots.entities import (
    Booking,
    BookingStatus,
    DateAvailability,
    Interval,
    TimeSlot,
)

DAY = date(2024, 1, 10)


def booking(start, end, status=BookingStatus.CONFIRMED, id=10, day=DAY):
    return Booking(id=id, provider_id=1, service_id=1, date=day, start_time=start, end_time=end, status=status)


@pytest.mark.parametrize("a,b,expected", [
    ((600, 660), (630, 690), True),
    ((600, 660), (660, 720), False),
    ((600, 660), (540, 600), False),
    ((600, 720), (630, 660), True),
    ((600, 660), (600, 660), True),
])
def test_overlap_is_half_open_and_symmetric(a, b, expected):
    assert ranges_overlap(*a, *b) is expected
    assert ranges_overlap(*b, *a) is expected


def test_reports_first_conflicting_booking():
    result = check_booking_conflict(DAY, Interval(630, 690), [booking("10:00", "11:00", id=7)])
    assert result
    assert result.conflicting_booking_id == 7


def test_back_to_back_bookings_do_not_conflict():
    assert not check_booking_conflict(DAY, Interval(660, 720), [booking("10:00", "11:00")])


def test_buffer_after_pushes_next_start():
    existing = [booking("10:00", "11:00")]
    assert check_booking_conflict(DAY, Interval(660, 690), existing, buffer_after=15)
    assert not check_booking_conflict(DAY, Interval(675, 705), existing, buffer_after=15)


def test_buffers_only_add_conflicts():
    existing = [booking("10:00", "11:00")]
    for start in range(480, 780, 15):
        candidate = Interval(start, start + 30)
        if check_booking_conflict(DAY, candidate, existing):
            assert check_booking_conflict(DAY, candidate, existing, 10, 20)


@pytest.mark.parametrize("status", [
    BookingStatus.CANCELLED,
    BookingStatus.REJECTED,
    BookingStatus.NO_SHOW,
])
def test_non_blocking_statuses_free_time(status):
    assert not check_booking_conflict(DAY, Interval(600, 660), [booking("10:00", "11:00", status)])


def test_bookings_on_other_dates_are_ignored():
    existing = [booking("10:00", "11:00", day=date(2024, 1, 11))]
    assert not check_booking_conflict(DAY, Interval(600, 660), existing)


def test_within_available_hours():
    day = DateAvailability(DAY, True, (Interval(540, 720), Interval(780, 1020)))
    assert check_within_available_hours(Interval(540, 600), day)
    assert check_within_available_hours(Interval(960, 1020), day)
    assert not check_within_available_hours(Interval(690, 810), day)
    assert not check_within_available_hours(Interval(500, 560), day)


def test_mark_booked_slots():
    slots = [TimeSlot(DAY, Interval(s, s + 30)) for s in (540, 570, 600, 630, 660)]
    marked = mark_booked_slots(slots, [booking("09:30", "10:30")], buffer_after=15)

    # the candidate carries the buffer too: 09:00-09:30 needs 09:00-09:45
    assert [s.available for s in marked] == [False, False, False, False, True]
    assert marked[1].reason == REASON_BOOKED
    # input is left untouched
    assert all(s.available for s in slots)


def test_time_less_bookings_only_conflict_by_date():
    whole_day = booking(None, None, id=30)

    assert not check_booking_conflict(DAY, Interval(600, 660), [whole_day])
    assert check_date_conflict(DAY, [whole_day]).conflicting_booking_id == 30
    assert check_date_conflict(DAY, [booking("10:00", "11:00", id=31)]).conflicting_booking_id == 31
    assert not check_date_conflict(DAY, [booking(None, None, status=BookingStatus.CANCELLED)])
    assert not check_date_conflict(DAY, [booking(None, None, day=date(2024, 1, 11))])
