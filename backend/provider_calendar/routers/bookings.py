# backend/provider_calendar/routers/bookings.py
# PATCH = 405, DELETE = 405. Status changes go through /status and /cancel.

from datetime import date, datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from ..database import get_db
from ..errors import ApiError
from ..models.generated import Bookings as DBBookings
from ..redis_client import redis_client
from ..schemas.bookings import (
    BookingCancel,
    BookingCreate,
    BookingRead,
    BookingStatusUpdate,
)
from ..services import bookings as booking_service
from ..services.slots.timeutils import format_date_string

router = APIRouter(prefix="/bookings", tags=["bookings"])


@router.get("/", response_model=list[BookingRead])
def list_bookings(
    provider_id: Optional[int] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    db: Session = Depends(get_db),
):
    query = db.query(DBBookings)
    if provider_id is not None:
        query = query.filter(DBBookings.provider_id == provider_id)
    if date_from:
        query = query.filter(DBBookings.date >= format_date_string(date_from))
    if date_to:
        query = query.filter(DBBookings.date <= format_date_string(date_to))
    return query.order_by(DBBookings.date, DBBookings.start_time).all()


@router.get("/{id}", response_model=BookingRead)
def get_booking(id: int, db: Session = Depends(get_db)):
    obj = db.get(DBBookings, id)
    if not obj:
        raise ApiError(booking_service.BOOKING_NOT_FOUND, "Booking not found")
    return obj


@router.post("/", response_model=BookingRead, status_code=status.HTTP_201_CREATED)
def create_booking(
    data: BookingCreate,
    db: Session = Depends(get_db),
):
    return booking_service.create_booking(
        db,
        service_id=data.service_id,
        target_date=data.date,
        start_time=data.start_time,
        now=datetime.now(timezone.utc),
        customer_id=data.customer_id,
        notes=data.notes,
        redis=redis_client,
    )


@router.post("/{id}/status", response_model=BookingRead)
def change_booking_status(
    id: int,
    data: BookingStatusUpdate,
    db: Session = Depends(get_db),
):
    return booking_service.update_booking_status(db, id, data.status, data.reason)


@router.post("/{id}/cancel", response_model=BookingRead)
def cancel_booking(
    id: int,
    data: BookingCancel,
    db: Session = Depends(get_db),
):
    return booking_service.cancel_booking(db, id, data.reason)
