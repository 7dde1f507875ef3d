# backend/provider_calendar/routers/availability_rules.py
# Every write re-checks the no-overlap invariant and drops the provider's cached days.

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from ..database import get_db
from ..errors import raise_for_result
from ..models.generated import AvailabilityRules as DBAvailabilityRules
from ..redis_client import redis_client
from ..schemas.availability_rules import (
    AvailabilityRuleBulk,
    AvailabilityRuleCreate,
    AvailabilityRuleRead,
    AvailabilityRuleUpdate,
)
from ..services.slots.entities import AvailabilityRule
from ..services.slots.invalidator import invalidate_provider_cache
from ..services.slots.repository import rule_from_row
from ..services.slots.rules import validate_rule_set, validate_rules_no_overlap

router = APIRouter(
    prefix="/providers/{provider_id}/availability/rules",
    tags=["availability_rules"],
)


def _get_rule(db: Session, provider_id: int, rule_id: int) -> DBAvailabilityRules:
    obj = db.get(DBAvailabilityRules, rule_id)
    if not obj or obj.provider_id != provider_id:
        raise HTTPException(status_code=404, detail="Not found")
    return obj


def _day_rules(db: Session, provider_id: int, day_of_week: str) -> list[AvailabilityRule]:
    rows = (
        db.query(DBAvailabilityRules)
        .filter(
            DBAvailabilityRules.provider_id == provider_id,
            DBAvailabilityRules.day_of_week == day_of_week,
        )
        .all()
    )
    return [rule_from_row(r) for r in rows]


@router.get("/", response_model=list[AvailabilityRuleRead])
def list_rules(provider_id: int, active_only: bool = False, db: Session = Depends(get_db)):
    query = db.query(DBAvailabilityRules).filter(DBAvailabilityRules.provider_id == provider_id)
    if active_only:
        query = query.filter(DBAvailabilityRules.is_active == 1)
    return query.order_by(DBAvailabilityRules.day_of_week, DBAvailabilityRules.start_time).all()


@router.post("/", response_model=AvailabilityRuleRead, status_code=status.HTTP_201_CREATED)
def create_rule(
    provider_id: int,
    data: AvailabilityRuleCreate,
    db: Session = Depends(get_db),
):
    candidate = AvailabilityRule(
        provider_id=provider_id,
        day_of_week=data.day_of_week,
        start_time=data.start_time,
        end_time=data.end_time,
        is_active=data.is_active,
    )
    raise_for_result(
        validate_rules_no_overlap(_day_rules(db, provider_id, data.day_of_week.value), candidate)
    )

    obj = DBAvailabilityRules(
        provider_id=provider_id,
        day_of_week=data.day_of_week.value,
        start_time=data.start_time,
        end_time=data.end_time,
        is_active=int(data.is_active),
    )
    db.add(obj)
    db.commit()
    db.refresh(obj)
    invalidate_provider_cache(redis_client, provider_id)
    return obj


@router.put("/", response_model=list[AvailabilityRuleRead])
def replace_rules(
    provider_id: int,
    data: AvailabilityRuleBulk,
    db: Session = Depends(get_db),
):
    """Replace all weekly rules of the provider; all or nothing."""
    candidates = [
        AvailabilityRule(
            provider_id=provider_id,
            day_of_week=r.day_of_week,
            start_time=r.start_time,
            end_time=r.end_time,
            is_active=r.is_active,
        )
        for r in data.rules
    ]
    raise_for_result(validate_rule_set([], candidates))

    db.query(DBAvailabilityRules).filter(
        DBAvailabilityRules.provider_id == provider_id
    ).delete(synchronize_session=False)
    db.add_all([
        DBAvailabilityRules(
            provider_id=provider_id,
            day_of_week=r.day_of_week.value,
            start_time=r.start_time,
            end_time=r.end_time,
            is_active=int(r.is_active),
        )
        for r in candidates
    ])
    db.commit()
    invalidate_provider_cache(redis_client, provider_id)
    return list_rules(provider_id, db=db)


@router.patch("/{rule_id}", response_model=AvailabilityRuleRead)
def update_rule(
    provider_id: int,
    rule_id: int,
    data: AvailabilityRuleUpdate,
    db: Session = Depends(get_db),
):
    obj = _get_rule(db, provider_id, rule_id)
    changes = data.model_dump(exclude_unset=True, exclude_none=True)

    candidate = AvailabilityRule(
        id=obj.id,
        provider_id=provider_id,
        day_of_week=obj.day_of_week,
        start_time=changes.get("start_time", obj.start_time),
        end_time=changes.get("end_time", obj.end_time),
        is_active=changes.get("is_active", bool(obj.is_active)),
    )
    raise_for_result(
        validate_rules_no_overlap(_day_rules(db, provider_id, obj.day_of_week), candidate)
    )

    obj.start_time = candidate.start_time
    obj.end_time = candidate.end_time
    obj.is_active = int(candidate.is_active)
    db.commit()
    db.refresh(obj)
    invalidate_provider_cache(redis_client, provider_id)
    return obj


@router.delete("/{rule_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_rule(provider_id: int, rule_id: int, db: Session = Depends(get_db)):
    obj = _get_rule(db, provider_id, rule_id)
    db.delete(obj)
    db.commit()
    invalidate_provider_cache(redis_client, provider_id)
