"""
Shared fixtures: an in-memory rotation store and a seeded five-leg rotation.
"""

from datetime import date, time

import pytest

from rotations.database.config import DatabaseConfig
from rotations.database.models import Rotation, RotationLeg, ScheduledFlight


# (flight number, dep, arr, std, sta)
ROTATION_LEGS = [
    ("KM100", "MLA", "LHR", time(6, 0), time(9, 0)),
    ("KM101", "LHR", "MLA", time(10, 0), time(13, 0)),
    ("KM102", "MLA", "FCO", time(14, 0), time(15, 30)),
    ("KM103", "FCO", "MLA", time(16, 15), time(17, 45)),
    ("KM104", "MLA", "CDG", time(18, 30), time(21, 15)),
]


@pytest.fixture
def db_config():
    """Create an initialized in-memory SQLite store."""
    config = DatabaseConfig("sqlite:///:memory:")
    config.create_tables()
    yield config
    config.close()


@pytest.fixture
def seeded_rotation(db_config):
    """
    Seed rotation R1 with five legs flown by 9H-AAA.

    Returns:
        Dict with ``rotation_id`` and ``flight_ids`` in leg order
    """
    with db_config.get_session_context() as session:
        rotation = Rotation(
            route_name="R1",
            aircraft_type_icao="A320",
            period_start=date(2025, 4, 1),
            period_end=date(2025, 10, 25),
        )
        flights = []
        for seq, (number, dep, arr, std, sta) in enumerate(ROTATION_LEGS, start=1):
            flight = ScheduledFlight(
                airline_code="KM",
                flight_number=number,
                dep_station=dep,
                arr_station=arr,
                std_local=std,
                sta_local=sta,
                block_minutes=(sta.hour * 60 + sta.minute) - (std.hour * 60 + std.minute),
                period_start=date(2025, 4, 1),
                period_end=date(2025, 10, 25),
                aircraft_type_icao="A320",
                aircraft_reg="9H-AAA",
                status="published",
            )
            session.add(flight)
            session.flush()
            flights.append(flight)
            rotation.legs.append(RotationLeg(
                leg_sequence=seq,
                flight_id=flight.id,
                airline_code="KM",
                flight_number=number,
                dep_station=dep,
                arr_station=arr,
                std_local=std,
                sta_local=sta,
                block_minutes=flight.block_minutes,
            ))
        session.add(rotation)
        session.flush()

        return {
            "rotation_id": rotation.id,
            "flight_ids": [f.id for f in flights],
        }
