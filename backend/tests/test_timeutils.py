from datetime import date, datetime, timezone

import pytest

from provider_calendar.services.slots.errors import ParseError, RangeError
from provider_calendar.services.slots.timeutils import (
    DayOfWeek,
    WallClockTime,
    date_range,
    format_date_string,
    format_end_time,
    get_day_of_week,
    get_zone,
    local_date,
    minutes_to_time,
    parse_date_string,
    parse_end_time_to_minutes,
    parse_time_to_minutes,
    to_instant,
    to_provider_time,
)


@pytest.mark.parametrize("value,expected", [
    ("00:00", 0),
    ("09:30", 570),
    ("23:59", 1439),
])
def test_parse_time_to_minutes(value, expected):
    assert parse_time_to_minutes(value) == expected


@pytest.mark.parametrize("value", ["9:30", "24:00", "12:60", "ab:cd", "", "09:30:00", None])
def test_parse_time_rejects_malformed(value):
    with pytest.raises(ParseError):
        parse_time_to_minutes(value)


def test_end_of_day_only_accepted_as_end():
    assert parse_end_time_to_minutes("24:00") == 1440
    assert parse_end_time_to_minutes("17:00") == 1020
    assert format_end_time(1440) == "24:00"


@pytest.mark.parametrize("minutes", [-1, 1440, 2000])
def test_minutes_to_time_out_of_range(minutes):
    with pytest.raises(RangeError):
        minutes_to_time(minutes)


def test_time_strings_round_trip():
    for minutes in (0, 1, 59, 60, 570, 1439):
        assert parse_time_to_minutes(minutes_to_time(minutes)) == minutes
    assert minutes_to_time(parse_time_to_minutes("07:05")) == "07:05"


def test_wall_clock_time():
    t = WallClockTime.parse("08:15")
    assert (t.hour, t.minute) == (8, 15)
    assert t.minutes == 495
    assert str(t) == "08:15"
    assert WallClockTime.from_minutes(495) == t


def test_format_date_string_ignores_time_of_day():
    assert format_date_string(date(2024, 1, 7)) == "2024-01-07"
    assert format_date_string(datetime(2024, 1, 7, 23, 30)) == "2024-01-07"


@pytest.mark.parametrize("value", ["2024-1-7", "2024-13-01", "2024-02-30", "07/01/2024"])
def test_parse_date_string_rejects_malformed(value):
    with pytest.raises(ParseError):
        parse_date_string(value)


def test_parse_date_string():
    assert parse_date_string("2024-02-29") == date(2024, 2, 29)


def test_date_range_inclusive():
    days = list(date_range(date(2024, 1, 30), date(2024, 2, 2)))
    assert days == [date(2024, 1, 30), date(2024, 1, 31), date(2024, 2, 1), date(2024, 2, 2)]
    assert list(date_range(date(2024, 1, 2), date(2024, 1, 1))) == []


def test_day_of_week_for_calendar_date():
    # 2024-01-07 is a Sunday
    assert get_day_of_week(date(2024, 1, 7)) == DayOfWeek.SUNDAY
    assert get_day_of_week(date(2024, 1, 13)) == DayOfWeek.SATURDAY


def test_day_of_week_uses_provider_zone_for_instants():
    # Sunday 22:00 UTC is already Monday 01:00 in Bahrain
    instant = datetime(2024, 1, 7, 22, 0, tzinfo=timezone.utc)
    assert get_day_of_week(instant, "Asia/Bahrain") == DayOfWeek.MONDAY
    assert get_day_of_week(instant, "UTC") == DayOfWeek.SUNDAY


def test_to_instant_and_back():
    instant = to_instant(date(2024, 1, 8), 540, "Asia/Bahrain")
    assert instant == datetime(2024, 1, 8, 6, 0, tzinfo=timezone.utc)
    assert to_provider_time(instant, "Asia/Bahrain").hour == 9
    assert local_date(datetime(2024, 1, 7, 22, 0, tzinfo=timezone.utc), "Asia/Bahrain") == date(2024, 1, 8)


def test_to_provider_time_requires_aware_datetime():
    with pytest.raises(ValueError):
        to_provider_time(datetime(2024, 1, 8, 9, 0), "Asia/Bahrain")


def test_unknown_zone():
    with pytest.raises(RangeError):
        get_zone("Mars/Olympus_Mons")
