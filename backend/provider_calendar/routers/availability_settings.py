# backend/provider_calendar/routers/availability_settings.py
# One row per provider, created from the calendar defaults on first read. No DELETE.

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..database import get_db
from ..schemas.availability_settings import (
    AvailabilitySettingsRead,
    AvailabilitySettingsUpdate,
)
from ..services.slots.repository import SqlAlchemyAvailabilityRepository

router = APIRouter(
    prefix="/providers/{provider_id}/availability/settings",
    tags=["availability_settings"],
)


@router.get("/", response_model=AvailabilitySettingsRead)
def get_settings(provider_id: int, db: Session = Depends(get_db)):
    obj = SqlAlchemyAvailabilityRepository(db).get_settings_row(provider_id)
    db.commit()
    db.refresh(obj)
    return obj


@router.patch("/", response_model=AvailabilitySettingsRead)
def update_settings(
    provider_id: int,
    data: AvailabilitySettingsUpdate,
    db: Session = Depends(get_db),
):
    # Settings do not change materialized days, so the day cache stays.
    obj = SqlAlchemyAvailabilityRepository(db).get_settings_row(provider_id)
    for field, value in data.model_dump(exclude_unset=True).items():
        if value is not None:
            setattr(obj, field, value)
    db.commit()
    db.refresh(obj)
    return obj
