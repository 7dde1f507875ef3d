# backend/provider_calendar/services/slots/availability.py
"""
Availability engine facade.

Answers "what can a customer book" and "is this request still valid".

Data flow:
  repository → materializer (cached per day in Redis)
             → slot generator
             → conflict detector (bookings, buffers)
             → booking window (when `now` is given)

The booking gate (validate_booking_request) skips the day cache and reads
rules and overrides straight from the repository.

Every method that depends on the current time takes `now` as an aware
datetime; nothing here reads the clock.
"""

import logging
from dataclasses import replace
from datetime import date, datetime, timedelta
from typing import Iterable

from redis import Redis
from redis.exceptions import RedisError

from .calculator import materialize_range
from .config import NEXT_SLOT_HORIZON_DAYS
from .conflicts import (
    check_booking_conflict,
    check_date_conflict,
    check_within_available_hours,
    mark_booked_slots,
)
from .entities import (
    AvailabilityRule,
    AvailabilitySettings,
    Booking,
    DateAvailability,
    Interval,
    Service,
    TimeSlot,
)
from .errors import OK, ErrorCode, ValidationResult
from .generator import generate_slots, resolve_duration
from .redis_store import DayAvailabilityRedisStore
from .repository import AvailabilityRepository
from .rules import validate_rule_set
from .timeutils import (
    MINUTES_PER_DAY,
    date_range,
    format_date_string,
    local_date,
    parse_time_to_minutes,
    to_instant,
)
from .window import validate_within_booking_window

logger = logging.getLogger(__name__)

REASON_OUTSIDE_WINDOW = "outside_booking_window"


class AvailabilityEngine:
    """Stateless apart from the optional day cache; safe to share."""

    def __init__(self, repository: AvailabilityRepository, redis: Redis | None = None):
        self.repository = repository
        self.store = DayAvailabilityRedisStore(redis) if redis is not None else None

    # ── Materialization ──────────────────────────────────────────────────

    def materialize(
        self,
        provider_id: int,
        start: date,
        end: date,
        use_cache: bool = True,
    ) -> list[DateAvailability]:
        """
        Open intervals for every date in [start, end].

        Not capped by the booking window, so it also serves administrative
        previews of arbitrary ranges. With use_cache=False the cache is
        neither read nor written and the repository is the only source.
        """
        dates = list(date_range(start, end))
        if not dates:
            return []

        store = self.store if use_cache else None
        version = self._read_version(store, provider_id)
        cached = self._read_cache(store, provider_id, dates)
        missing = [d for d in dates if cached.get(d) is None]

        if missing:
            logger.debug(
                "Materializing %s of %s days for provider=%s",
                len(missing), len(dates), provider_id,
            )
            rules = self.repository.get_active_rules(provider_id)
            overrides = self.repository.get_overrides(provider_id, missing[0], missing[-1])
            wanted = set(missing)
            computed = [
                day for day in materialize_range(missing[0], missing[-1], rules, overrides)
                if day.date in wanted
            ]
            self._write_cache(store, provider_id, computed, version)
            cached.update({day.date: day for day in computed})

        return [cached[d] for d in dates]

    @staticmethod
    def _read_version(store: DayAvailabilityRedisStore | None, provider_id: int) -> int | None:
        if store is None:
            return None
        try:
            return store.get_version(provider_id)
        except RedisError:
            logger.exception("Availability cache version read failed for provider=%s", provider_id)
            return None

    @staticmethod
    def _read_cache(
        store: DayAvailabilityRedisStore | None,
        provider_id: int,
        dates: list[date],
    ) -> dict[date, DateAvailability | None]:
        if store is None:
            return {}
        try:
            return store.mget_days(provider_id, dates)
        except RedisError:
            logger.exception("Availability cache read failed for provider=%s", provider_id)
            return {}

    @staticmethod
    def _write_cache(
        store: DayAvailabilityRedisStore | None,
        provider_id: int,
        days: list[DateAvailability],
        version: int | None,
    ) -> None:
        # No version means it could not be read; the write can't be checked
        if store is None or version is None:
            return
        try:
            if not store.store_multiple_days(provider_id, days, version):
                logger.debug(
                    "Availability changed while materializing for provider=%s, not caching",
                    provider_id,
                )
        except RedisError:
            logger.exception("Availability cache write failed for provider=%s", provider_id)

    # ── Helpers ──────────────────────────────────────────────────────────

    @staticmethod
    def booking_horizon(settings: AvailabilitySettings, now: datetime) -> tuple[date, date]:
        """First and last bookable calendar dates in the provider's zone."""
        today = local_date(now, settings.timezone)
        return today, today + timedelta(days=settings.max_advance_days)

    def _slots_for_day(
        self,
        day: DateAvailability,
        duration: int,
        bookings: Iterable[Booking],
        settings: AvailabilitySettings,
        now: datetime | None,
    ) -> list[TimeSlot]:
        slots = generate_slots(day, duration)
        slots = mark_booked_slots(
            slots,
            bookings,
            settings.buffer_before_minutes,
            settings.buffer_after_minutes,
        )
        if now is None:
            return slots

        result = []
        for slot in slots:
            if slot.available:
                start = to_instant(slot.date, slot.interval.start, settings.timezone)
                if not validate_within_booking_window(start, now, settings):
                    slot = replace(slot, available=False, reason=REASON_OUTSIDE_WINDOW)
            result.append(slot)
        return result

    def _bookable_service(self, provider_id: int, service_id: int) -> Service | None:
        service = self.repository.get_service(service_id)
        if service is None or not service.is_active or service.provider_id != provider_id:
            return None
        return service

    def _service_duration(
        self,
        provider_id: int,
        service_id: int | None,
        settings: AvailabilitySettings,
    ) -> int | None:
        """Slot size for service_id; None if the service has no slot grid here."""
        if service_id is None:
            return settings.slot_duration_minutes
        service = self._bookable_service(provider_id, service_id)
        if service is None or service.is_date_only:
            return None
        return resolve_duration(service.duration_minutes, settings)

    def _dates_with_slots(
        self,
        provider_id: int,
        date_from: date,
        date_to: date,
        duration: int,
        settings: AvailabilitySettings,
        now: datetime,
    ) -> dict[date, bool]:
        today, last = self.booking_horizon(settings, now)
        start, end = max(date_from, today), min(date_to, last)
        if start > end:
            return {}

        available = {}
        bookings = self.repository.get_bookings_in_range(provider_id, start, end)
        for day in self.materialize(provider_id, start, end):
            slots = self._slots_for_day(day, duration, bookings, settings, now)
            available[day.date] = any(s.available for s in slots)
        return available

    @staticmethod
    def _check_date_only(
        service: Service,
        day: DateAvailability,
        bookings: Iterable[Booking],
        settings: AvailabilitySettings,
        now: datetime,
    ) -> ValidationResult:
        """
        Whole-date check for DELIVERY_DATE / PICKUP_DROPOFF services.

        The date must be at least preparation_days after today, pass the
        booking window measured from its local midnight, be open, and
        hold no other blocking booking.
        """
        today = local_date(now, settings.timezone)
        if day.date < today + timedelta(days=service.preparation_days):
            return ValidationResult.failure(
                ErrorCode.OUTSIDE_BOOKING_WINDOW,
                f"Requires {service.preparation_days} days preparation",
            )

        window = validate_within_booking_window(
            to_instant(day.date, 0, settings.timezone), now, settings
        )
        if not window:
            return window

        if not day.is_open:
            return ValidationResult.failure(
                ErrorCode.TIME_NOT_AVAILABLE, day.reason or "Date is not available"
            )

        conflict = check_date_conflict(day.date, bookings)
        if conflict:
            return ValidationResult.failure(
                ErrorCode.SLOT_ALREADY_BOOKED,
                "Date already booked",
                conflicting_booking_id=conflict.conflicting_booking_id,
            )
        return OK

    def _dates_for_date_only_service(
        self,
        provider_id: int,
        service: Service,
        date_from: date,
        date_to: date,
        settings: AvailabilitySettings,
        now: datetime,
    ) -> dict[date, bool]:
        today, last = self.booking_horizon(settings, now)
        start, end = max(date_from, today), min(date_to, last)
        if start > end:
            return {}

        bookings = self.repository.get_bookings_in_range(provider_id, start, end)
        return {
            day.date: bool(self._check_date_only(service, day, bookings, settings, now))
            for day in self.materialize(provider_id, start, end)
        }

    # ── Public API ───────────────────────────────────────────────────────

    def get_available_dates(
        self,
        provider_id: int,
        date_from: date,
        date_to: date,
        now: datetime,
        service_id: int | None = None,
    ) -> list[dict]:
        """
        One entry per requested date: {"date": "YYYY-MM-DD", "has_availability": bool}.

        Dates outside the booking window are listed as unavailable. For a
        date-only service a date is available when it can take the whole
        booking; otherwise when at least one slot of the service is free.
        """
        settings = self.repository.get_settings(provider_id)

        available: dict[date, bool] = {}
        if service_id is None:
            available = self._dates_with_slots(
                provider_id, date_from, date_to, settings.slot_duration_minutes, settings, now
            )
        else:
            service = self._bookable_service(provider_id, service_id)
            if service is not None and service.is_date_only:
                available = self._dates_for_date_only_service(
                    provider_id, service, date_from, date_to, settings, now
                )
            elif service is not None:
                duration = resolve_duration(service.duration_minutes, settings)
                available = self._dates_with_slots(
                    provider_id, date_from, date_to, duration, settings, now
                )

        return [
            {"date": format_date_string(d), "has_availability": available.get(d, False)}
            for d in date_range(date_from, date_to)
        ]

    def get_available_slots(
        self,
        provider_id: int,
        service_id: int | None,
        target_date: date,
        now: datetime | None = None,
    ) -> list[TimeSlot]:
        """
        Slot grid of one date, each slot flagged available or not.

        With `now`, dates outside the booking window yield no slots and
        slots too close to `now` are flagged unavailable. Without it the
        grid is computed for administrative use. Date-only services have
        no grid.
        """
        settings = self.repository.get_settings(provider_id)
        duration = self._service_duration(provider_id, service_id, settings)
        if duration is None:
            logger.debug("Service %s has no slots for provider=%s", service_id, provider_id)
            return []

        if now is not None:
            today, last = self.booking_horizon(settings, now)
            if not today <= target_date <= last:
                return []

        day = self.materialize(provider_id, target_date, target_date)[0]
        if not day.is_open:
            return []

        bookings = self.repository.get_bookings_in_range(provider_id, target_date, target_date)
        return self._slots_for_day(day, duration, bookings, settings, now)

    def get_next_available_slot(
        self,
        provider_id: int,
        service_id: int | None,
        now: datetime,
        after: date | None = None,
        horizon_days: int = NEXT_SLOT_HORIZON_DAYS,
    ) -> TimeSlot | None:
        """First available slot on or after `after` (default: today)."""
        settings = self.repository.get_settings(provider_id)
        duration = self._service_duration(provider_id, service_id, settings)
        if duration is None:
            return None

        today, last = self.booking_horizon(settings, now)
        start = max(after or today, today)
        end = min(start + timedelta(days=horizon_days), last)
        if start > end:
            return None

        bookings = self.repository.get_bookings_in_range(provider_id, start, end)
        for day in self.materialize(provider_id, start, end):
            for slot in self._slots_for_day(day, duration, bookings, settings, now):
                if slot.available:
                    return slot
        return None

    def validate_booking_request(
        self,
        provider_id: int,
        service_id: int,
        target_date: date,
        start_time: str | None,
        now: datetime,
    ) -> ValidationResult:
        """
        Authoritative gate before a booking is persisted.

        Checks, in order: service exists and is bookable, booking window,
        available hours, conflicts with existing bookings. Date-only
        services take no start_time and are checked per date. Rules and
        overrides are read from the repository, never from the day cache.
        Malformed start_time raises ParseError.
        """
        service: Service | None = self.repository.get_service(service_id)
        if service is None:
            return ValidationResult.failure(ErrorCode.SERVICE_NOT_FOUND, "Service not found")
        if not service.is_active or service.provider_id != provider_id:
            return ValidationResult.failure(
                ErrorCode.SERVICE_NOT_AVAILABLE, "Service is not available for booking"
            )

        settings = self.repository.get_settings(provider_id)

        if service.is_date_only:
            if start_time is not None:
                return ValidationResult.failure(
                    ErrorCode.TIME_NOT_AVAILABLE, "Service is booked by date, without a start time"
                )
            day = self.materialize(provider_id, target_date, target_date, use_cache=False)[0]
            bookings = self.repository.get_bookings_in_range(provider_id, target_date, target_date)
            return self._check_date_only(service, day, bookings, settings, now)

        if start_time is None:
            return ValidationResult.failure(ErrorCode.TIME_NOT_AVAILABLE, "Start time is required")

        duration = resolve_duration(service.duration_minutes, settings)
        start = parse_time_to_minutes(start_time)
        if start + duration > MINUTES_PER_DAY:
            return ValidationResult.failure(
                ErrorCode.TIME_NOT_AVAILABLE, "Booking would run past midnight"
            )
        candidate = Interval(start, start + duration)

        window = validate_within_booking_window(
            to_instant(target_date, start, settings.timezone), now, settings
        )
        if not window:
            return window

        day = self.materialize(provider_id, target_date, target_date, use_cache=False)[0]
        if not check_within_available_hours(candidate, day):
            return ValidationResult.failure(
                ErrorCode.TIME_NOT_AVAILABLE,
                day.reason if not day.is_open and day.reason else "Time is outside available hours",
            )

        bookings = self.repository.get_bookings_in_range(provider_id, target_date, target_date)
        conflict = check_booking_conflict(
            target_date,
            candidate,
            bookings,
            settings.buffer_before_minutes,
            settings.buffer_after_minutes,
        )
        if conflict:
            return ValidationResult.failure(
                ErrorCode.SLOT_ALREADY_BOOKED,
                "Time slot conflicts with existing booking",
                conflicting_booking_id=conflict.conflicting_booking_id,
            )

        return ValidationResult.success(TimeSlot(target_date, candidate))

    @staticmethod
    def validate_rule_set(
        existing_rules: Iterable[AvailabilityRule],
        candidate_rules: Iterable[AvailabilityRule],
    ) -> ValidationResult:
        return validate_rule_set(existing_rules, candidate_rules)
