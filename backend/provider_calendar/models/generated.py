from sqlalchemy import CheckConstraint, Column, Index, Integer, Text, text

from sqlalchemy.orm import declarative_base

Base = declarative_base()
metadata = Base.metadata


class Services(Base):
    __tablename__ = 'services'

    provider_id = Column(Integer, nullable=False, index=True)
    name = Column(Text, nullable=False)
    duration_minutes = Column(Integer)  # NULL = provider's slot_duration_minutes
    service_type = Column(Text, nullable=False, default='APPOINTMENT', server_default=text("'APPOINTMENT'"))
    preparation_days = Column(Integer)  # date-only services; NULL = 0
    is_active = Column(Integer, nullable=False, server_default=text('1'))
    id = Column(Integer, primary_key=True)


class AvailabilityRules(Base):
    __tablename__ = 'availability_rules'

    provider_id = Column(Integer, nullable=False)
    day_of_week = Column(Text, nullable=False)
    start_time = Column(Text, nullable=False)  # HH:MM
    end_time = Column(Text, nullable=False)  # HH:MM
    is_active = Column(Integer, nullable=False, server_default=text('1'))
    id = Column(Integer, primary_key=True)
    created_at = Column(Text, server_default=text('CURRENT_TIMESTAMP'))

    __table_args__ = (
        CheckConstraint('end_time > start_time', name='availability_rules_time_check'),
        Index('ar_provider_day_idx', 'provider_id', 'day_of_week'),
    )


class AvailabilityOverrides(Base):
    __tablename__ = 'availability_overrides'

    provider_id = Column(Integer, nullable=False)
    date = Column(Text, nullable=False)  # YYYY-MM-DD
    override_type = Column(Text, nullable=False)
    id = Column(Integer, primary_key=True)
    start_time = Column(Text)  # NULL together with end_time = all day
    end_time = Column(Text)
    reason = Column(Text)
    created_at = Column(Text, server_default=text('CURRENT_TIMESTAMP'))

    __table_args__ = (
        CheckConstraint(
            "override_type IN ('BLOCKED', 'AVAILABLE')",
            name='availability_overrides_type_check',
        ),
        Index('ao_provider_date_idx', 'provider_id', 'date'),
    )


class AvailabilitySettings(Base):
    __tablename__ = 'availability_settings'

    provider_id = Column(Integer, primary_key=True)
    timezone = Column(Text, nullable=False)
    slot_duration_minutes = Column(Integer, nullable=False)
    buffer_before_minutes = Column(Integer, nullable=False)
    buffer_after_minutes = Column(Integer, nullable=False)
    min_advance_hours = Column(Integer, nullable=False)
    max_advance_days = Column(Integer, nullable=False)
    updated_at = Column(Text, server_default=text('CURRENT_TIMESTAMP'))


class Bookings(Base):
    __tablename__ = 'bookings'

    provider_id = Column(Integer, nullable=False)
    service_id = Column(Integer, nullable=False)
    customer_id = Column(Integer)
    date = Column(Text, nullable=False)  # YYYY-MM-DD, provider's calendar
    start_time = Column(Text)  # HH:MM, provider's wall clock; NULL for date-only services
    end_time = Column(Text)
    status = Column(Text, nullable=False, server_default=text("'PENDING'"))
    id = Column(Integer, primary_key=True)
    notes = Column(Text)
    cancel_reason = Column(Text)
    created_at = Column(Text, nullable=False, server_default=text('CURRENT_TIMESTAMP'))
    updated_at = Column(Text, nullable=False, server_default=text('CURRENT_TIMESTAMP'))

    __table_args__ = (
        Index('bk_provider_date_idx', 'provider_id', 'date'),
    )
