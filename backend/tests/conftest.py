# backend/tests/conftest.py

from datetime import date, datetime, timezone

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from provider_calendar.models.generated import (
    AvailabilityRules as DBAvailabilityRules,
    AvailabilitySettings as DBAvailabilitySettings,
    Base,
    Services as DBServices,
)
from provider_calendar.services.slots.entities import (
    AvailabilityOverride,
    AvailabilityRule,
    AvailabilitySettings,
    Booking,
    Service,
    ServiceType,
)
from provider_calendar.services.slots.timeutils import DayOfWeek


PROVIDER_ID = 1
OTHER_PROVIDER_ID = 2

# Monday 2024-01-08 09:00 in Asia/Bahrain (UTC+3)
NOW = datetime(2024, 1, 8, 6, 0, tzinfo=timezone.utc)
MONDAY = date(2024, 1, 8)
WEDNESDAY = date(2024, 1, 10)


def make_settings(**overrides) -> AvailabilitySettings:
    values = dict(
        provider_id=PROVIDER_ID,
        timezone="Asia/Bahrain",
        slot_duration_minutes=30,
        buffer_before_minutes=0,
        buffer_after_minutes=0,
        min_advance_hours=24,
        max_advance_days=30,
    )
    values.update(overrides)
    return AvailabilitySettings(**values)


def weekly_rules(start_time="09:00", end_time="17:00", provider_id=PROVIDER_ID) -> list[AvailabilityRule]:
    return [
        AvailabilityRule(provider_id, day, start_time, end_time, id=i)
        for i, day in enumerate(DayOfWeek, start=1)
    ]


class InMemoryRepository:
    """Repository double over plain lists."""

    def __init__(self, rules=None, overrides=None, settings=None, bookings=None, services=None):
        self.rules: list[AvailabilityRule] = list(rules or [])
        self.overrides: list[AvailabilityOverride] = list(overrides or [])
        self.settings = settings or make_settings()
        self.bookings: list[Booking] = list(bookings or [])
        self.services: dict[int, Service] = {s.id: s for s in services or []}

    def get_active_rules(self, provider_id):
        return [r for r in self.rules if r.provider_id == provider_id and r.is_active]

    def get_override(self, provider_id, target_date):
        found = self.get_overrides(provider_id, target_date, target_date)
        return found[0] if found else None

    def get_overrides(self, provider_id, start, end):
        return [
            o for o in self.overrides
            if o.provider_id == provider_id and start <= o.date <= end
        ]

    def get_settings(self, provider_id):
        return self.settings

    def get_bookings_in_range(self, provider_id, start, end):
        return [
            b for b in self.bookings
            if b.provider_id == provider_id and start <= b.date <= end
        ]

    def get_service(self, service_id):
        return self.services.get(service_id)


class DictRedis:
    """Just enough of redis-py for the day cache, over a dict."""

    def __init__(self):
        self.data = {}

    def get(self, key):
        return self.data.get(key)

    def incr(self, key):
        self.data[key] = int(self.data.get(key, 0)) + 1
        return self.data[key]

    def mget(self, keys):
        return [self.data.get(k) for k in keys]

    def delete(self, *keys):
        return sum(self.data.pop(k, None) is not None for k in keys)

    def scan_iter(self, match):
        prefix = match.rstrip("*")
        return [k for k in list(self.data) if k.startswith(prefix)]

    def pipeline(self):
        return DictPipeline(self)


class DictPipeline:
    def __init__(self, redis):
        self.redis = redis
        self.queued = []

    def watch(self, key):
        pass

    def get(self, key):
        return self.redis.get(key)

    def multi(self):
        pass

    def set(self, key, value, ex=None):
        self.queued.append((key, value))

    def execute(self):
        self.redis.data.update(self.queued)
        self.queued = []

    def reset(self):
        self.queued = []


@pytest.fixture
def services():
    return [
        Service(id=1, provider_id=PROVIDER_ID, duration_minutes=60),
        Service(id=2, provider_id=PROVIDER_ID, duration_minutes=None),
        Service(id=3, provider_id=PROVIDER_ID, duration_minutes=30, is_active=False),
        Service(id=4, provider_id=OTHER_PROVIDER_ID, duration_minutes=30),
        Service(id=5, provider_id=PROVIDER_ID, service_type=ServiceType.DELIVERY_DATE, preparation_days=2),
        Service(id=6, provider_id=PROVIDER_ID, service_type=ServiceType.PICKUP_DROPOFF),
    ]


@pytest.fixture
def repository(services):
    return InMemoryRepository(rules=weekly_rules(), services=services)


# ── Database ─────────────────────────────────────────────────────────────


@pytest.fixture
def db_engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db(db_engine):
    Session = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)
    session = Session()
    try:
        yield session
    finally:
        session.close()


def seed_provider(db):
    """Provider 1 open 09:00-17:00 every day, one 60 minute service, one delivery service."""
    db.add(DBAvailabilitySettings(
        provider_id=PROVIDER_ID,
        timezone="Asia/Bahrain",
        slot_duration_minutes=30,
        buffer_before_minutes=0,
        buffer_after_minutes=0,
        min_advance_hours=24,
        max_advance_days=30,
    ))
    db.add_all([
        DBAvailabilityRules(
            provider_id=PROVIDER_ID,
            day_of_week=day.value,
            start_time="09:00",
            end_time="17:00",
            is_active=1,
        )
        for day in DayOfWeek
    ])
    db.add(DBServices(id=1, provider_id=PROVIDER_ID, name="Consultation", duration_minutes=60))
    db.add(DBServices(id=2, provider_id=PROVIDER_ID, name="Retired", duration_minutes=30, is_active=0))
    db.add(DBServices(
        id=3, provider_id=PROVIDER_ID, name="Cake delivery",
        service_type=ServiceType.DELIVERY_DATE.value, preparation_days=2,
    ))
    db.commit()


@pytest.fixture
def seeded_db(db):
    seed_provider(db)
    return db
