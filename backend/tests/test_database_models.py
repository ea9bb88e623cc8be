"""
Test suite for SQLAlchemy database models.

Tests defaults, relationships and cascades of the rotation store tables.
"""

import pytest
from datetime import date, time
from sqlalchemy import create_engine, event, select
from sqlalchemy.orm import sessionmaker

from rotations.database.models import (
    Rotation,
    RotationLeg,
    ScheduledFlight,
    TailAssignmentOverride,
    create_all_tables,
    drop_all_tables,
)


@pytest.fixture
def engine():
    """Create an in-memory SQLite engine with foreign keys on."""
    engine = create_engine("sqlite:///:memory:", echo=False)

    @event.listens_for(engine, "connect")
    def set_sqlite_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    create_all_tables(engine)
    yield engine
    drop_all_tables(engine)
    engine.dispose()


@pytest.fixture
def session(engine):
    """Create a database session for testing."""
    Session = sessionmaker(bind=engine)
    session = Session()
    yield session
    session.close()


@pytest.fixture
def sample_flight(session):
    flight = ScheduledFlight(
        flight_number="KM100",
        dep_station="MLA",
        arr_station="LHR",
        std_local=time(6, 0),
        sta_local=time(9, 0),
        aircraft_reg="9H-AAA",
    )
    session.add(flight)
    session.commit()
    return flight


def make_leg(seq, flight=None):
    return RotationLeg(
        leg_sequence=seq,
        flight_id=flight.id if flight else None,
        dep_station="MLA",
        arr_station="LHR",
        std_local=time(6, 0),
        sta_local=time(9, 0),
    )


class TestScheduledFlightModel:
    """Test cases for the ScheduledFlight model."""

    def test_defaults(self, sample_flight):
        """Test defaults applied on insert."""
        assert len(sample_flight.id) == 36
        assert sample_flight.days_of_operation == "1234567"
        assert sample_flight.service_type == "J"
        assert sample_flight.source == "manual"
        assert sample_flight.status == "draft"
        assert sample_flight.block_minutes == 0
        assert sample_flight.created_at is not None

    def test_repr(self, sample_flight):
        repr_str = repr(sample_flight)
        assert "ScheduledFlight" in repr_str
        assert "KM100" in repr_str

    def test_deleting_flight_removes_overrides(self, session, sample_flight):
        session.add(TailAssignmentOverride(
            scheduled_flight_id=sample_flight.id,
            flight_date=date(2025, 6, 2),
            aircraft_reg="9H-BBB",
        ))
        session.commit()

        session.delete(sample_flight)
        session.commit()

        assert session.execute(select(TailAssignmentOverride)).scalars().all() == []


class TestRotationModel:
    """Test cases for the Rotation and RotationLeg models."""

    def test_legs_ordered_by_sequence(self, session, sample_flight):
        rotation = Rotation(route_name="R1")
        rotation.legs.extend([make_leg(2), make_leg(1, sample_flight)])
        session.add(rotation)
        session.commit()
        session.expire_all()

        loaded = session.get(Rotation, rotation.id)

        assert [leg.leg_sequence for leg in loaded.legs] == [1, 2]
        assert loaded.version == 1
        assert loaded.legs[0].flight_id == sample_flight.id

    def test_deleting_rotation_removes_legs(self, session):
        rotation = Rotation(route_name="R1")
        rotation.legs.append(make_leg(1))
        session.add(rotation)
        session.commit()

        session.delete(rotation)
        session.commit()

        assert session.execute(select(RotationLeg)).scalars().all() == []

    def test_orphaned_leg_is_deleted(self, session):
        rotation = Rotation(route_name="R1")
        rotation.legs.extend([make_leg(1), make_leg(2)])
        session.add(rotation)
        session.commit()

        rotation.legs.pop()
        session.commit()

        assert len(session.execute(select(RotationLeg)).scalars().all()) == 1

    def test_deleting_flight_detaches_leg(self, session, sample_flight):
        """A leg outlives its flight with a null reference."""
        rotation = Rotation(route_name="R1")
        rotation.legs.append(make_leg(1, sample_flight))
        session.add(rotation)
        session.commit()

        session.delete(sample_flight)
        session.commit()
        session.expire_all()

        leg = session.execute(select(RotationLeg)).scalar_one()
        assert leg.flight_id is None

    def test_repr(self, session):
        rotation = Rotation(route_name="R1")
        session.add(rotation)
        session.commit()

        assert "R1" in repr(rotation)
        assert "version=1" in repr(rotation)
