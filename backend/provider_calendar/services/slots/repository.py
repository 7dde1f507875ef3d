# backend/provider_calendar/services/slots/repository.py
"""
Data access for the availability engine.

AvailabilityRepository is what the engine consumes. The SQLAlchemy
implementation maps rows onto engine entities and creates a provider's
settings row from the calendar defaults on first read.
"""

from datetime import date
from typing import Protocol

from sqlalchemy.orm import Session

from ...models.generated import (
    AvailabilityOverrides as DBAvailabilityOverrides,
    AvailabilityRules as DBAvailabilityRules,
    AvailabilitySettings as DBAvailabilitySettings,
    Bookings as DBBookings,
    Services as DBServices,
)
from .config import CalendarDefaults, get_calendar_defaults
from .entities import (
    AvailabilityOverride,
    AvailabilityRule,
    AvailabilitySettings,
    Booking,
    Service,
)
from .timeutils import format_date_string, parse_date_string


class AvailabilityRepository(Protocol):
    def get_active_rules(self, provider_id: int) -> list[AvailabilityRule]: ...

    def get_override(self, provider_id: int, target_date: date) -> AvailabilityOverride | None: ...

    def get_overrides(self, provider_id: int, start: date, end: date) -> list[AvailabilityOverride]: ...

    def get_settings(self, provider_id: int) -> AvailabilitySettings: ...

    def get_bookings_in_range(self, provider_id: int, start: date, end: date) -> list[Booking]: ...

    def get_service(self, service_id: int) -> Service | None: ...


# ── Row mappers ──────────────────────────────────────────────────────────


def rule_from_row(row: DBAvailabilityRules) -> AvailabilityRule:
    return AvailabilityRule(
        id=row.id,
        provider_id=row.provider_id,
        day_of_week=row.day_of_week,
        start_time=row.start_time,
        end_time=row.end_time,
        is_active=bool(row.is_active),
    )


def override_from_row(row: DBAvailabilityOverrides) -> AvailabilityOverride:
    return AvailabilityOverride(
        id=row.id,
        provider_id=row.provider_id,
        date=parse_date_string(row.date),
        type=row.override_type,
        start_time=row.start_time,
        end_time=row.end_time,
        reason=row.reason,
    )


def settings_from_row(row: DBAvailabilitySettings) -> AvailabilitySettings:
    return AvailabilitySettings(
        provider_id=row.provider_id,
        timezone=row.timezone,
        slot_duration_minutes=row.slot_duration_minutes,
        buffer_before_minutes=row.buffer_before_minutes,
        buffer_after_minutes=row.buffer_after_minutes,
        min_advance_hours=row.min_advance_hours,
        max_advance_days=row.max_advance_days,
    )


def booking_from_row(row: DBBookings) -> Booking:
    return Booking(
        id=row.id,
        provider_id=row.provider_id,
        service_id=row.service_id,
        date=parse_date_string(row.date),
        start_time=row.start_time,
        end_time=row.end_time,
        status=row.status,
    )


def service_from_row(row: DBServices) -> Service:
    return Service(
        id=row.id,
        provider_id=row.provider_id,
        duration_minutes=row.duration_minutes,
        is_active=bool(row.is_active),
        service_type=row.service_type,
        preparation_days=row.preparation_days or 0,
    )


# ── SQLAlchemy implementation ────────────────────────────────────────────


class SqlAlchemyAvailabilityRepository:
    """AvailabilityRepository over a SQLAlchemy session."""

    def __init__(self, db: Session, defaults: CalendarDefaults | None = None):
        self.db = db
        self.defaults = defaults or get_calendar_defaults()

    def get_active_rules(self, provider_id: int) -> list[AvailabilityRule]:
        rows = (
            self.db.query(DBAvailabilityRules)
            .filter(
                DBAvailabilityRules.provider_id == provider_id,
                DBAvailabilityRules.is_active == 1,
            )
            .order_by(DBAvailabilityRules.day_of_week, DBAvailabilityRules.start_time)
            .all()
        )
        return [rule_from_row(r) for r in rows]

    def get_override(self, provider_id: int, target_date: date) -> AvailabilityOverride | None:
        overrides = self.get_overrides(provider_id, target_date, target_date)
        return overrides[0] if overrides else None

    def get_overrides(self, provider_id: int, start: date, end: date) -> list[AvailabilityOverride]:
        rows = (
            self.db.query(DBAvailabilityOverrides)
            .filter(
                DBAvailabilityOverrides.provider_id == provider_id,
                DBAvailabilityOverrides.date >= format_date_string(start),
                DBAvailabilityOverrides.date <= format_date_string(end),
            )
            .order_by(DBAvailabilityOverrides.date, DBAvailabilityOverrides.id)
            .all()
        )
        return [override_from_row(r) for r in rows]

    def get_settings_row(self, provider_id: int) -> DBAvailabilitySettings:
        """Settings row, created from the calendar defaults if missing."""
        row = self.db.get(DBAvailabilitySettings, provider_id)
        if row is None:
            row = DBAvailabilitySettings(provider_id=provider_id, **self.defaults.as_dict())
            self.db.add(row)
            self.db.flush()
        return row

    def get_settings(self, provider_id: int) -> AvailabilitySettings:
        return settings_from_row(self.get_settings_row(provider_id))

    def get_bookings_in_range(self, provider_id: int, start: date, end: date) -> list[Booking]:
        """All bookings in range, status included; the engine filters."""
        rows = (
            self.db.query(DBBookings)
            .filter(
                DBBookings.provider_id == provider_id,
                DBBookings.date >= format_date_string(start),
                DBBookings.date <= format_date_string(end),
            )
            .order_by(DBBookings.date, DBBookings.start_time)
            .all()
        )
        return [booking_from_row(r) for r in rows]

    def get_service(self, service_id: int) -> Service | None:
        row = self.db.get(DBServices, service_id)
        return service_from_row(row) if row else None
