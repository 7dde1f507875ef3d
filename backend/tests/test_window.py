from datetime import datetime, timedelta, timezone
from zoneinfo import ZoneInfo

from provider_calendar.services.slots.errors import ErrorCode
from provider_calendar.services.slots.window import validate_within_booking_window

from conftest import NOW, make_settings


def test_exactly_min_advance_is_accepted():
    settings = make_settings(min_advance_hours=24)
    assert validate_within_booking_window(NOW + timedelta(hours=24), NOW, settings)


def test_one_minute_short_is_rejected():
    settings = make_settings(min_advance_hours=24)
    result = validate_within_booking_window(NOW + timedelta(hours=23, minutes=59), NOW, settings)

    assert not result
    assert result.code == ErrorCode.OUTSIDE_BOOKING_WINDOW
    assert "24 hours" in result.message


def test_past_instant_is_rejected_even_without_notice():
    settings = make_settings(min_advance_hours=0)
    assert not validate_within_booking_window(NOW - timedelta(minutes=1), NOW, settings)
    assert validate_within_booking_window(NOW, NOW, settings)


def test_max_advance_counts_calendar_days():
    settings = make_settings(max_advance_days=30)
    # last bookable day, late evening local time
    assert validate_within_booking_window(NOW + timedelta(days=30, hours=13), NOW, settings)

    result = validate_within_booking_window(NOW + timedelta(days=31), NOW, settings)
    assert not result
    assert result.code == ErrorCode.OUTSIDE_BOOKING_WINDOW
    assert "30 days" in result.message


def test_notice_is_measured_in_elapsed_time_across_dst():
    zone = ZoneInfo("America/New_York")
    settings = make_settings(timezone="America/New_York", min_advance_hours=24)
    now = datetime(2024, 3, 9, 12, 0, tzinfo=zone)
    # Same wall clock next day, but clocks sprang forward: only 23h elapse
    candidate = datetime(2024, 3, 10, 12, 0, tzinfo=zone)

    assert not validate_within_booking_window(candidate, now, settings)
    assert validate_within_booking_window(candidate + timedelta(hours=1), now, settings)


def test_instants_in_any_zone_compare_equal():
    settings = make_settings(min_advance_hours=24)
    candidate = (NOW + timedelta(hours=24)).astimezone(timezone(timedelta(hours=-5)))
    assert validate_within_booking_window(candidate, NOW, settings)
