# backend/provider_calendar/routers/slots.py
"""
Slots API endpoints.

GET /slots/dates   - Which dates of a range have anything bookable
GET /slots/day     - Slot grid of one date for a service
GET /slots/next    - First bookable slot from a date on
GET /slots/preview - Materialized open hours, ignoring bookings (admin)

`now` is read here once per request and passed down; the engine never
reads the clock.
"""

from datetime import date, datetime, timedelta, timezone
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from ..database import get_db
from ..errors import ApiError
from ..redis_client import redis_client
from ..schemas.slots import (
    DayPreview,
    NextSlotResponse,
    SlotInfo,
    SlotsDateStatus,
    SlotsDatesResponse,
    SlotsDayResponse,
    SlotsPreviewResponse,
)
from ..services.slots import AvailabilityEngine, ErrorCode, SqlAlchemyAvailabilityRepository
from ..services.slots.config import MAX_QUERY_RANGE_DAYS


router = APIRouter(prefix="/slots", tags=["slots"])


def _engine(db: Session) -> tuple[AvailabilityEngine, SqlAlchemyAvailabilityRepository]:
    repository = SqlAlchemyAvailabilityRepository(db)
    return AvailabilityEngine(repository, redis_client), repository


def _check_range(date_from: date, date_to: date) -> None:
    if date_to < date_from:
        raise HTTPException(status_code=400, detail="date_to must not be before date_from")
    if (date_to - date_from).days >= MAX_QUERY_RANGE_DAYS:
        raise HTTPException(
            status_code=400,
            detail=f"Date range cannot exceed {MAX_QUERY_RANGE_DAYS} days",
        )


def _check_service(repository: SqlAlchemyAvailabilityRepository, service_id: int | None) -> None:
    if service_id is not None and repository.get_service(service_id) is None:
        raise ApiError(ErrorCode.SERVICE_NOT_FOUND.value, "Service not found")


@router.get("/dates", response_model=SlotsDatesResponse)
def get_slots_dates(
    provider_id: int,
    date_from: date,
    date_to: date,
    service_id: int | None = None,
    db: Session = Depends(get_db),
):
    """Calendar of bookable days for a provider."""
    _check_range(date_from, date_to)
    engine, repository = _engine(db)
    _check_service(repository, service_id)

    now = datetime.now(timezone.utc)
    dates = engine.get_available_dates(provider_id, date_from, date_to, now, service_id)
    settings = repository.get_settings(provider_id)
    db.commit()

    return SlotsDatesResponse(
        provider_id=provider_id,
        timezone=settings.timezone,
        date_from=date_from,
        date_to=date_to,
        dates=[SlotsDateStatus(**d) for d in dates],
        min_advance_hours=settings.min_advance_hours,
        max_advance_days=settings.max_advance_days,
    )


@router.get("/day", response_model=SlotsDayResponse, response_model_by_alias=True)
def get_slots_day(
    provider_id: int,
    service_id: int,
    target_date: date = Query(..., alias="date"),
    db: Session = Depends(get_db),
):
    """Slot grid of one date; unavailable slots carry a reason."""
    engine, repository = _engine(db)
    _check_service(repository, service_id)

    now = datetime.now(timezone.utc)
    slots = engine.get_available_slots(provider_id, service_id, target_date, now)
    settings = repository.get_settings(provider_id)
    db.commit()

    return SlotsDayResponse(
        provider_id=provider_id,
        service_id=service_id,
        date=target_date,
        timezone=settings.timezone,
        slots=[SlotInfo.from_slot(s) for s in slots],
    )


@router.get("/next", response_model=NextSlotResponse, response_model_by_alias=True)
def get_next_slot(
    provider_id: int,
    service_id: int,
    after: date | None = None,
    db: Session = Depends(get_db),
):
    engine, repository = _engine(db)
    _check_service(repository, service_id)

    now = datetime.now(timezone.utc)
    slot = engine.get_next_available_slot(provider_id, service_id, now, after)
    settings = repository.get_settings(provider_id)
    db.commit()

    if slot is None:
        raise HTTPException(status_code=404, detail="No available slot")

    return NextSlotResponse(
        provider_id=provider_id,
        service_id=service_id,
        timezone=settings.timezone,
        slot=SlotInfo.from_slot(slot),
    )


@router.get("/preview", response_model=SlotsPreviewResponse)
def preview_availability(
    provider_id: int,
    date_from: date,
    date_to: date | None = None,
    db: Session = Depends(get_db),
):
    """Open hours per day after rules and overrides (admin endpoint)."""
    if date_to is None:
        date_to = date_from + timedelta(days=6)
    _check_range(date_from, date_to)

    engine, repository = _engine(db)
    days = engine.materialize(provider_id, date_from, date_to)
    settings = repository.get_settings(provider_id)
    db.commit()

    return SlotsPreviewResponse(
        provider_id=provider_id,
        timezone=settings.timezone,
        days=[DayPreview.from_day(d) for d in days],
    )
