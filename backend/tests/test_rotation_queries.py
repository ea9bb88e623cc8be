"""
Test suite for rotation, tail assignment and aircraft row queries.
"""

from datetime import date, time

import pytest
from sqlalchemy import select

from rotations.database.models import Rotation, ScheduledFlight, TailAssignmentOverride
from rotations.models.enums import FlightSource, FlightStatus
from rotations.models.flight import FlightDateItemModel
from rotations.services.rotation_queries import RotationRepository, minutes_of, operating_dates


@pytest.fixture
def repository(db_config):
    return RotationRepository(db_config)


@pytest.fixture
def builder_flight(db_config):
    """A builder-created flight outside any rotation."""
    with db_config.get_session_context() as session:
        flight = ScheduledFlight(
            flight_number="KM900",
            dep_station="MLA",
            arr_station="TUN",
            std_local=time(7, 0),
            sta_local=time(8, 0),
            block_minutes=60,
            source="builder",
            aircraft_reg="9H-AAA",
        )
        session.add(flight)
        session.flush()
        return flight.id


class TestHelpers:
    """Test cases for date and time helpers."""

    def test_minutes_of(self):
        assert minutes_of(time(0, 0)) == 0
        assert minutes_of(time(13, 45)) == 825

    def test_operating_dates_follow_weekday_mask(self):
        """Only the listed ISO weekdays operate (2025-06-02 is a Monday)."""
        dates = list(operating_dates("1.3....", date(2025, 6, 2), date(2025, 6, 15)))

        assert dates == [date(2025, 6, 2), date(2025, 6, 4), date(2025, 6, 9), date(2025, 6, 11)]

    def test_operating_dates_empty_range(self):
        assert list(operating_dates("1234567", date(2025, 6, 3), date(2025, 6, 2))) == []


class TestRotationLookup:
    """Test cases for loading rotations."""

    def test_get_rotation_with_legs(self, repository, seeded_rotation):
        rotation = repository.get_rotation_with_legs(seeded_rotation["rotation_id"])

        assert rotation.route_name == "R1"
        assert rotation.leg_sequences == [1, 2, 3, 4, 5]
        assert [leg.flight_id for leg in rotation.legs] == seeded_rotation["flight_ids"]

    def test_get_unknown_rotation(self, repository, seeded_rotation):
        assert repository.get_rotation_with_legs("missing") is None

    def test_rotations_for_flights_are_unique(self, repository, seeded_rotation):
        """Several flights of the same rotation yield it once."""
        ids = seeded_rotation["flight_ids"]

        rotations = repository.get_rotations_for_flights([ids[0], ids[2], ids[4]])

        assert [r.id for r in rotations] == [seeded_rotation["rotation_id"]]
        assert len(rotations[0].legs) == 5

    def test_rotations_for_unrouted_flights(self, repository, builder_flight):
        assert repository.get_rotations_for_flights([builder_flight]) == []
        assert repository.get_rotations_for_flights([]) == []

    def test_get_flights_in_requested_order(self, repository, seeded_rotation, builder_flight):
        """Templates come back typed, in id order given, unknown ids skipped."""
        first = seeded_rotation["flight_ids"][0]

        flights = repository.get_flights([builder_flight, "missing", first])

        assert [f.id for f in flights] == [builder_flight, first]
        assert flights[0].source == FlightSource.BUILDER
        assert flights[0].status == FlightStatus.DRAFT
        assert flights[0].period_start is None
        assert flights[1].flight_number == "KM100"
        assert flights[1].status == FlightStatus.PUBLISHED
        assert (flights[1].std_local, flights[1].block_minutes) == (time(6, 0), 180)
        assert repository.get_flights([]) == []


class TestTailAssignments:
    """Test cases for per-date registration overrides."""

    def test_assign_and_resolve(self, repository, seeded_rotation):
        """An override wins over the template registration on its date only."""
        fid = seeded_rotation["flight_ids"][0]
        day = date(2025, 6, 2)

        repository.assign_flights_to_aircraft([FlightDateItemModel(flight_id=fid, flight_date=day)], "9H-ZZZ")

        assert repository.effective_registration(fid, day) == "9H-ZZZ"
        assert repository.effective_registration(fid, date(2025, 6, 3)) == "9H-AAA"

    def test_assign_twice_updates(self, repository, seeded_rotation):
        fid = seeded_rotation["flight_ids"][0]
        item = FlightDateItemModel(flight_id=fid, flight_date=date(2025, 6, 2))

        repository.assign_flights_to_aircraft([item], "9H-ZZZ")
        repository.assign_flights_to_aircraft([item], "9H-YYY")

        overrides = repository.get_flight_tail_assignments(date(2025, 6, 1), date(2025, 6, 30))
        assert [(o.scheduled_flight_id, o.aircraft_reg) for o in overrides] == [(fid, "9H-YYY")]

    def test_unassign(self, repository, seeded_rotation):
        fid = seeded_rotation["flight_ids"][0]
        item = FlightDateItemModel(flight_id=fid, flight_date=date(2025, 6, 2))
        repository.assign_flights_to_aircraft([item], "9H-ZZZ")

        assert repository.unassign_flights_tail([item]) == 1
        assert repository.effective_registration(fid, item.flight_date) == "9H-AAA"
        assert repository.unassign_flights_tail([]) == 0


class TestDeleteSingleFlight:
    """Test cases for deleting one flight from its rotation."""

    def test_delete_renumbers_rotation(self, repository, db_config, seeded_rotation):
        """Deleting a middle leg closes the gap and bumps the version."""
        ids = seeded_rotation["flight_ids"]

        outcome = repository.delete_single_flight(ids[1])

        assert outcome == {"route_deleted": False}
        rotation = repository.get_rotation_with_legs(seeded_rotation["rotation_id"])
        assert rotation.leg_sequences == [1, 2, 3, 4]
        assert [leg.flight_id for leg in rotation.legs] == [ids[0], ids[2], ids[3], ids[4]]
        assert rotation.version == 2

        # Manual flights survive outside the rotation
        with db_config.get_session_context() as session:
            assert session.get(ScheduledFlight, ids[1]) is not None

    def test_delete_last_leg_deletes_rotation(self, repository, db_config, seeded_rotation):
        ids = seeded_rotation["flight_ids"]
        for fid in ids[:-1]:
            repository.delete_single_flight(fid)

        outcome = repository.delete_single_flight(ids[-1])

        assert outcome == {"route_deleted": True}
        with db_config.get_session_context() as session:
            assert session.execute(select(Rotation)).scalars().all() == []

    def test_delete_builder_flight_removes_record(self, repository, db_config, builder_flight):
        """Builder flights are deleted together with their overrides."""
        repository.assign_flights_to_aircraft(
            [FlightDateItemModel(flight_id=builder_flight, flight_date=date(2025, 6, 2))], "9H-ZZZ"
        )

        outcome = repository.delete_single_flight(builder_flight)

        assert outcome == {"route_deleted": False}
        with db_config.get_session_context() as session:
            assert session.get(ScheduledFlight, builder_flight) is None
            assert session.execute(select(TailAssignmentOverride)).scalars().all() == []


class TestRowFlights:
    """Test cases for expanding templates into an aircraft row."""

    def test_row_flights_for_one_day(self, repository, seeded_rotation):
        """A day on the row holds every leg in departure order."""
        day = date(2025, 6, 2)

        row = repository.get_row_flights("9H-AAA", day, day)

        assert [f.flight_id for f in row] == seeded_rotation["flight_ids"]
        assert row[0].id == f"{seeded_rotation['flight_ids'][0]}_2025-06-02"
        assert (row[0].std_minutes, row[0].sta_minutes) == (360, 540)
        assert all(f.flight_date == day for f in row)

    def test_override_moves_date_between_rows(self, repository, seeded_rotation):
        fid = seeded_rotation["flight_ids"][0]
        day = date(2025, 6, 2)
        repository.assign_flights_to_aircraft([FlightDateItemModel(flight_id=fid, flight_date=day)], "9H-BBB")

        row_a = repository.get_row_flights("9H-AAA", day, date(2025, 6, 3))
        row_b = repository.get_row_flights("9H-BBB", day, date(2025, 6, 3))

        assert len(row_a) == 9
        assert [(f.flight_id, f.flight_date) for f in row_b] == [(fid, day)]

    def test_row_outside_period_is_empty(self, repository, seeded_rotation):
        assert repository.get_row_flights("9H-AAA", date(2026, 1, 1), date(2026, 1, 7)) == []

    def test_open_validity_period_is_unbounded(self, repository, db_config):
        """Templates without a start or end date operate across the whole range."""
        with db_config.get_session_context() as session:
            for number, start, end in (("KM910", None, None), ("KM911", date(2025, 6, 3), None)):
                session.add(ScheduledFlight(
                    flight_number=number,
                    dep_station="MLA",
                    arr_station="TUN",
                    std_local=time(7, 0) if number == "KM910" else time(12, 0),
                    sta_local=time(8, 0) if number == "KM910" else time(13, 0),
                    period_start=start,
                    period_end=end,
                    aircraft_reg="9H-DDD",
                ))

        row = repository.get_row_flights("9H-DDD", date(2025, 6, 2), date(2025, 6, 3))

        assert [(f.flight_date, f.std_minutes) for f in row] == [
            (date(2025, 6, 2), 420),
            (date(2025, 6, 3), 420),
            (date(2025, 6, 3), 720),
        ]
