"""
SQLAlchemy database models for the rotation reassignment engine.

This module defines the tables the reassignment engine reads and mutates:
- ScheduledFlight: recurring flight templates with their assigned registration
- TailAssignmentOverride: per-date registration overrides for a flight template
- Rotation: ordered, named groups of legs flown by one aircraft
- RotationLeg: one sequenced leg of a rotation, optionally tied to a flight
"""

import uuid
from datetime import datetime

from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    Time,
)
from sqlalchemy.orm import declarative_base, relationship

from ..models.enums import FlightSource, FlightStatus

# Create the declarative base for all models
Base = declarative_base()


def _new_id() -> str:
    return str(uuid.uuid4())


class ScheduledFlight(Base):
    """
    Recurring flight template.

    A template operates on the days in ``days_of_operation`` between
    ``period_start`` and ``period_end``. ``aircraft_reg`` is the default
    registration for every operating date; individual dates can be
    overridden through TailAssignmentOverride.
    """
    __tablename__ = 'scheduled_flights'

    id = Column(String(36), primary_key=True, default=_new_id)
    season_id = Column(String(36), nullable=True, index=True)

    # Flight identification
    airline_code = Column(String(3), nullable=True)
    flight_number = Column(String(8), nullable=False, index=True)

    # Route and timing (local times)
    dep_station = Column(String(4), nullable=False)
    arr_station = Column(String(4), nullable=False)
    std_local = Column(Time, nullable=False)
    sta_local = Column(Time, nullable=False)
    block_minutes = Column(Integer, nullable=False, default=0)
    arrival_day_offset = Column(Integer, nullable=False, default=0)

    # Validity
    days_of_operation = Column(String(7), nullable=False, default='1234567')
    period_start = Column(Date, nullable=True)
    period_end = Column(Date, nullable=True)

    aircraft_type_icao = Column(String(4), nullable=True)
    service_type = Column(String(1), nullable=False, default='J')
    aircraft_reg = Column(String(10), nullable=True, index=True)

    source = Column(String(16), nullable=False, default=FlightSource.MANUAL.value)
    status = Column(String(16), nullable=False, default=FlightStatus.DRAFT.value)
    created_at = Column(DateTime, nullable=False, default=datetime.now)

    tail_assignments = relationship(
        "TailAssignmentOverride",
        back_populates="flight",
        cascade="all, delete-orphan",
        lazy="select"
    )

    def __repr__(self):
        return f"<ScheduledFlight(id={self.id}, flight_number='{self.flight_number}', reg='{self.aircraft_reg}')>"


class TailAssignmentOverride(Base):
    """Registration override for one flight template on one calendar date."""
    __tablename__ = 'flight_tail_assignments'

    scheduled_flight_id = Column(
        String(36),
        ForeignKey('scheduled_flights.id', ondelete='CASCADE'),
        primary_key=True
    )
    flight_date = Column(Date, primary_key=True)
    aircraft_reg = Column(String(10), nullable=False, index=True)

    flight = relationship("ScheduledFlight", back_populates="tail_assignments", lazy="select")

    def __repr__(self):
        return f"<TailAssignmentOverride(flight={self.scheduled_flight_id}, date={self.flight_date}, reg='{self.aircraft_reg}')>"


class Rotation(Base):
    """
    Aircraft rotation (route).

    Its legs always form a gap-free 1..N sequence. ``version`` is bumped
    by every change of leg membership so concurrent editors can detect
    that the rotation moved under them.
    """
    __tablename__ = 'aircraft_routes'

    id = Column(String(36), primary_key=True, default=_new_id)
    season_id = Column(String(36), nullable=True, index=True)
    scenario_id = Column(String(36), nullable=True, index=True)
    route_name = Column(String(50), nullable=True)
    aircraft_type_icao = Column(String(4), nullable=True)
    days_of_operation = Column(String(7), nullable=False, default='1234567')
    period_start = Column(Date, nullable=True)
    period_end = Column(Date, nullable=True)
    duration_days = Column(Integer, nullable=False, default=1)
    status = Column(String(16), nullable=False, default=FlightStatus.DRAFT.value)
    notes = Column(Text, nullable=True)
    version = Column(Integer, nullable=False, default=1)

    legs = relationship(
        "RotationLeg",
        back_populates="rotation",
        order_by="RotationLeg.leg_sequence",
        cascade="all, delete-orphan",
        lazy="select"
    )

    def __repr__(self):
        return f"<Rotation(id={self.id}, name='{self.route_name}', version={self.version})>"


class RotationLeg(Base):
    """
    One leg of a rotation.

    Carries its own copy of the station, time and service fields so a leg
    stays meaningful without (or before) a materialized flight record.
    """
    __tablename__ = 'aircraft_route_legs'

    id = Column(String(36), primary_key=True, default=_new_id)
    route_id = Column(
        String(36),
        ForeignKey('aircraft_routes.id', ondelete='CASCADE'),
        nullable=False,
        index=True
    )
    leg_sequence = Column(Integer, nullable=False)
    flight_id = Column(
        String(36),
        ForeignKey('scheduled_flights.id', ondelete='SET NULL'),
        nullable=True,
        index=True
    )

    airline_code = Column(String(3), nullable=True)
    flight_number = Column(String(8), nullable=True)
    dep_station = Column(String(4), nullable=False)
    arr_station = Column(String(4), nullable=False)
    std_local = Column(Time, nullable=False)
    sta_local = Column(Time, nullable=False)
    block_minutes = Column(Integer, nullable=True)
    day_offset = Column(Integer, nullable=False, default=0)
    arrives_next_day = Column(Boolean, nullable=False, default=False)
    service_type = Column(String(1), nullable=False, default='J')

    rotation = relationship("Rotation", back_populates="legs", lazy="select")

    def __repr__(self):
        return f"<RotationLeg(id={self.id}, route={self.route_id}, seq={self.leg_sequence}, flight={self.flight_id})>"


# Composite indexes for the lookups the engine performs
Index('idx_route_leg_sequence', RotationLeg.route_id, RotationLeg.leg_sequence)
Index('idx_flight_reg_period', ScheduledFlight.aircraft_reg, ScheduledFlight.period_start)


def create_all_tables(engine):
    """
    Create all database tables using the provided SQLAlchemy engine.

    Args:
        engine: SQLAlchemy engine instance
    """
    Base.metadata.create_all(bind=engine)


def drop_all_tables(engine):
    """
    Drop all database tables using the provided SQLAlchemy engine.

    Args:
        engine: SQLAlchemy engine instance
    """
    Base.metadata.drop_all(bind=engine)


__all__ = [
    'Base',
    'ScheduledFlight',
    'TailAssignmentOverride',
    'Rotation',
    'RotationLeg',
    'create_all_tables',
    'drop_all_tables'
]
