# backend/provider_calendar/routers/availability_overrides.py
# Date-specific exceptions to the weekly rules. Writes drop the cached day(s).

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from ..database import get_db
from ..models.generated import AvailabilityOverrides as DBAvailabilityOverrides
from ..redis_client import redis_client
from ..schemas.availability_overrides import (
    AvailabilityOverrideCreate,
    AvailabilityOverrideRead,
    AvailabilityOverrideUpdate,
)
from ..services.slots.invalidator import invalidate_provider_cache
from ..services.slots.timeutils import format_date_string, parse_date_string

router = APIRouter(
    prefix="/providers/{provider_id}/availability/overrides",
    tags=["availability_overrides"],
)


def _get_override(db: Session, provider_id: int, override_id: int) -> DBAvailabilityOverrides:
    obj = db.get(DBAvailabilityOverrides, override_id)
    if not obj or obj.provider_id != provider_id:
        raise HTTPException(status_code=404, detail="Not found")
    return obj


@router.get("/", response_model=list[AvailabilityOverrideRead])
def list_overrides(
    provider_id: int,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    db: Session = Depends(get_db),
):
    query = db.query(DBAvailabilityOverrides).filter(
        DBAvailabilityOverrides.provider_id == provider_id
    )
    if start_date:
        query = query.filter(DBAvailabilityOverrides.date >= format_date_string(start_date))
    if end_date:
        query = query.filter(DBAvailabilityOverrides.date <= format_date_string(end_date))
    return query.order_by(DBAvailabilityOverrides.date, DBAvailabilityOverrides.id).all()


@router.get("/{override_id}", response_model=AvailabilityOverrideRead)
def get_override(provider_id: int, override_id: int, db: Session = Depends(get_db)):
    return _get_override(db, provider_id, override_id)


@router.post("/", response_model=AvailabilityOverrideRead, status_code=status.HTTP_201_CREATED)
def create_override(
    provider_id: int,
    data: AvailabilityOverrideCreate,
    db: Session = Depends(get_db),
):
    obj = DBAvailabilityOverrides(
        provider_id=provider_id,
        date=format_date_string(data.date),
        override_type=data.override_type.value,
        start_time=data.start_time,
        end_time=data.end_time,
        reason=data.reason,
    )
    db.add(obj)
    db.commit()
    db.refresh(obj)
    invalidate_provider_cache(redis_client, provider_id, [data.date])
    return obj


@router.patch("/{override_id}", response_model=AvailabilityOverrideRead)
def update_override(
    provider_id: int,
    override_id: int,
    data: AvailabilityOverrideUpdate,
    db: Session = Depends(get_db),
):
    obj = _get_override(db, provider_id, override_id)
    changes = data.model_dump(exclude_unset=True)

    start_time = changes.get("start_time", obj.start_time)
    end_time = changes.get("end_time", obj.end_time)
    if (start_time is None) != (end_time is None):
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="start_time and end_time must be given together",
        )
    if start_time is not None and start_time >= end_time:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="end_time must be after start_time",
        )

    if "override_type" in changes:
        obj.override_type = changes["override_type"].value
    if "reason" in changes:
        obj.reason = changes["reason"]
    obj.start_time = start_time
    obj.end_time = end_time

    db.commit()
    db.refresh(obj)
    invalidate_provider_cache(redis_client, provider_id, [parse_date_string(obj.date)])
    return obj


@router.delete("/{override_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_override(provider_id: int, override_id: int, db: Session = Depends(get_db)):
    obj = _get_override(db, provider_id, override_id)
    target_date = parse_date_string(obj.date)
    db.delete(obj)
    db.commit()
    invalidate_provider_cache(redis_client, provider_id, [target_date])
