from datetime import date

import pytest

from provider_calendar.services.slots.entities import DateAvailability, Interval
from provider_calendar.services.slots.errors import RangeError
from provider_calendar.services.slots.generator import (
    generate_slots,
    resolve_duration,
    tile_interval,
)

from conftest import make_settings

DAY = date(2024, 1, 10)


def test_working_day_in_half_hours():
    day = DateAvailability(DAY, True, (Interval(540, 1020),))
    slots = generate_slots(day, 30)

    assert len(slots) == 16
    assert (slots[0].start_time, slots[0].end_time) == ("09:00", "09:30")
    assert (slots[-1].start_time, slots[-1].end_time) == ("16:30", "17:00")
    assert all(s.available and s.date == DAY for s in slots)


def test_trailing_remainder_is_dropped():
    slots = tile_interval(DAY, Interval(540, 600), 45)
    assert [str(s.interval) for s in slots] == ["09:00-09:45"]


def test_slots_never_cross_interval_gaps():
    day = DateAvailability(DAY, True, (Interval(540, 630), Interval(660, 720)))
    slots = generate_slots(day, 60)
    assert [str(s.interval) for s in slots] == ["09:00-10:00", "11:00-12:00"]


def test_full_day_ends_at_midnight():
    day = DateAvailability(DAY, True, (Interval(0, 1440),))
    slots = generate_slots(day, 60)
    assert len(slots) == 24
    assert slots[-1].end_time == "24:00"
    assert str(slots[-1].interval) == "23:00-24:00"


def test_closed_day_has_no_slots():
    assert generate_slots(DateAvailability(DAY, False), 30) == []


@pytest.mark.parametrize("duration", [0, -15])
def test_non_positive_duration(duration):
    with pytest.raises(RangeError):
        tile_interval(DAY, Interval(540, 600), duration)


def test_duration_falls_back_to_settings():
    settings = make_settings(slot_duration_minutes=45)
    assert resolve_duration(None, settings) == 45
    assert resolve_duration(90, settings) == 90
