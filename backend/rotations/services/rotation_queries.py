"""
Rotation and assignment queries.

Read access the clipboard needs before a cut or copy (rotations with their
legs), per-date tail assignment overrides, single-flight deletion that
keeps rotations gap-free, and expansion of flight templates into the dated
rows the swap validator walks.
"""

import logging
from datetime import date, time, timedelta
from typing import Dict, Iterator, List, Optional, Tuple

from sqlalchemy import and_, delete, or_, select
from sqlalchemy.orm import selectinload

from ..database.config import DatabaseConfig
from ..database.models import Rotation, RotationLeg, ScheduledFlight, TailAssignmentOverride
from ..models.enums import FlightSource, FlightStatus
from ..models.flight import FlightDateItemModel, ScheduledFlightModel, SwapFlightModel, TailAssignmentModel
from ..models.rotation import RotationModel

logger = logging.getLogger(__name__)

ACTIVE_STATUSES = (FlightStatus.DRAFT.value, FlightStatus.READY.value, FlightStatus.PUBLISHED.value)


def minutes_of(value: time) -> int:
    """Minutes after midnight for a time of day."""
    return value.hour * 60 + value.minute


def operating_dates(days_of_operation: str, period_start: date, period_end: date) -> Iterator[date]:
    """
    Dates between ``period_start`` and ``period_end`` on which a template operates.

    ``days_of_operation`` holds a digit 1 (Monday) .. 7 (Sunday) for each
    operating weekday; any other character is a non-operating day.
    """
    weekdays = {int(c) for c in days_of_operation if c.isdigit() and '1' <= c <= '7'}
    current = period_start
    while current <= period_end:
        if current.isoweekday() in weekdays:
            yield current
        current += timedelta(days=1)


class RotationRepository:
    """Queries over rotations, legs and tail assignments."""

    def __init__(self, db_config: DatabaseConfig):
        self.db = db_config

    # ─── Rotations ──────────────────────────────────────────────

    def get_rotation_with_legs(self, rotation_id: str) -> Optional[RotationModel]:
        """
        Load one rotation with its legs ordered by sequence.

        Args:
            rotation_id: Rotation identifier

        Returns:
            RotationModel, or None when the id does not resolve
        """
        with self.db.get_session_context() as session:
            rotation = session.execute(
                select(Rotation).options(selectinload(Rotation.legs)).where(Rotation.id == rotation_id)
            ).scalar_one_or_none()
            return RotationModel.model_validate(rotation) if rotation else None

    def get_rotations_for_flights(self, flight_ids: List[str]) -> List[RotationModel]:
        """
        Every rotation containing at least one of the flights, each once.

        Args:
            flight_ids: Scheduled flight ids

        Returns:
            List of RotationModel with full leg data
        """
        if not flight_ids:
            return []

        with self.db.get_session_context() as session:
            route_ids = select(RotationLeg.route_id).where(RotationLeg.flight_id.in_(flight_ids)).distinct()
            rotations = session.execute(
                select(Rotation)
                .options(selectinload(Rotation.legs))
                .where(Rotation.id.in_(route_ids))
                .order_by(Rotation.route_name, Rotation.id)
            ).scalars().all()
            return [RotationModel.model_validate(r) for r in rotations]

    # ─── Flights ────────────────────────────────────────────────

    def get_flights(self, flight_ids: List[str]) -> List[ScheduledFlightModel]:
        """
        Load flight templates, in the order their ids were given.

        Ids that do not resolve are skipped.
        """
        if not flight_ids:
            return []

        with self.db.get_session_context() as session:
            rows = session.execute(
                select(ScheduledFlight).where(ScheduledFlight.id.in_(flight_ids))
            ).scalars().all()
            by_id = {row.id: ScheduledFlightModel.model_validate(row) for row in rows}
            return [by_id[fid] for fid in flight_ids if fid in by_id]

    # ─── Tail assignments ───────────────────────────────────────

    def assign_flights_to_aircraft(self, items: List[FlightDateItemModel], registration: str) -> None:
        """
        Upsert per-date registration overrides.

        Args:
            items: (flight, date) pairs to assign
            registration: Registration operating those dates
        """
        if not items:
            return

        with self.db.get_session_context() as session:
            for item in items:
                override = session.get(TailAssignmentOverride, (item.flight_id, item.flight_date))
                if override is None:
                    session.add(TailAssignmentOverride(
                        scheduled_flight_id=item.flight_id,
                        flight_date=item.flight_date,
                        aircraft_reg=registration,
                    ))
                else:
                    override.aircraft_reg = registration

        logger.info(f"Assigned {len(items)} flight date(s) to {registration}")

    def unassign_flights_tail(self, items: List[FlightDateItemModel]) -> int:
        """
        Remove per-date overrides, falling back to the template registration.

        Returns:
            Number of overrides deleted
        """
        if not items:
            return 0

        conditions = [
            and_(
                TailAssignmentOverride.scheduled_flight_id == item.flight_id,
                TailAssignmentOverride.flight_date == item.flight_date,
            )
            for item in items
        ]
        with self.db.get_session_context() as session:
            result = session.execute(delete(TailAssignmentOverride).where(or_(*conditions)))
            return result.rowcount

    def get_flight_tail_assignments(self, range_start: date, range_end: date) -> List[TailAssignmentModel]:
        """Overrides dated within ``range_start`` .. ``range_end`` inclusive."""
        with self.db.get_session_context() as session:
            rows = session.execute(
                select(TailAssignmentOverride)
                .where(TailAssignmentOverride.flight_date >= range_start)
                .where(TailAssignmentOverride.flight_date <= range_end)
                .order_by(TailAssignmentOverride.flight_date)
            ).scalars().all()
            return [TailAssignmentModel.model_validate(r) for r in rows]

    def effective_registration(self, flight_id: str, flight_date: date) -> Optional[str]:
        """Registration operating a flight on a date: the override if any, else the template's."""
        with self.db.get_session_context() as session:
            override = session.get(TailAssignmentOverride, (flight_id, flight_date))
            if override is not None:
                return override.aircraft_reg
            flight = session.get(ScheduledFlight, flight_id)
            return flight.aircraft_reg if flight else None

    # ─── Deletion ───────────────────────────────────────────────

    def delete_single_flight(self, flight_id: str) -> Dict[str, bool]:
        """
        Remove a flight from its rotation and delete it if builder-created.

        The rotation is renumbered 1..N and deleted when its last leg goes.
        All of it happens in one transaction.

        Returns:
            {"route_deleted": bool}
        """
        route_deleted = False

        with self.db.get_session_context() as session:
            leg = session.execute(
                select(RotationLeg).where(RotationLeg.flight_id == flight_id)
            ).scalars().first()

            if leg is not None:
                rotation = leg.rotation
                rotation.legs.remove(leg)
                session.flush()

                for seq, remaining in enumerate(sorted(rotation.legs, key=lambda l: l.leg_sequence), start=1):
                    remaining.leg_sequence = seq
                rotation.version = rotation.version + 1

                if not rotation.legs:
                    session.delete(rotation)
                    route_deleted = True

            flight = session.get(ScheduledFlight, flight_id)
            if flight is not None and flight.source == FlightSource.BUILDER.value:
                session.delete(flight)

        logger.info(f"Deleted flight {flight_id} (route deleted: {route_deleted})")
        return {"route_deleted": route_deleted}

    # ─── Aircraft rows ──────────────────────────────────────────

    def get_row_flights(self, registration: str, range_start: date, range_end: date) -> List[SwapFlightModel]:
        """
        Dated flights operated by ``registration`` within a date range.

        Templates are expanded over their operating days; a per-date
        override moves that date onto (or off) the row.

        Returns:
            SwapFlightModel list sorted by date then departure
        """
        with self.db.get_session_context() as session:
            overrides: Dict[Tuple[str, date], str] = {
                (o.scheduled_flight_id, o.flight_date): o.aircraft_reg
                for o in session.execute(
                    select(TailAssignmentOverride)
                    .where(TailAssignmentOverride.flight_date >= range_start)
                    .where(TailAssignmentOverride.flight_date <= range_end)
                ).scalars()
            }
            override_ids = {fid for (fid, _), reg in overrides.items() if reg == registration}

            flights = session.execute(
                select(ScheduledFlight)
                .where(or_(ScheduledFlight.aircraft_reg == registration, ScheduledFlight.id.in_(override_ids)))
                .where(ScheduledFlight.status.in_(ACTIVE_STATUSES))
                .where(or_(ScheduledFlight.period_start.is_(None), ScheduledFlight.period_start <= range_end))
                .where(or_(ScheduledFlight.period_end.is_(None), ScheduledFlight.period_end >= range_start))
            ).scalars().all()

            entries: List[SwapFlightModel] = []
            for flight in flights:
                # An open validity bound does not narrow the range
                start = max(flight.period_start, range_start) if flight.period_start else range_start
                end = min(flight.period_end, range_end) if flight.period_end else range_end
                for flight_date in operating_dates(flight.days_of_operation, start, end):
                    reg = overrides.get((flight.id, flight_date), flight.aircraft_reg)
                    if reg != registration:
                        continue
                    entries.append(SwapFlightModel(
                        id=f"{flight.id}_{flight_date.isoformat()}",
                        flight_id=flight.id,
                        dep_station=flight.dep_station,
                        arr_station=flight.arr_station,
                        std_minutes=minutes_of(flight.std_local),
                        sta_minutes=minutes_of(flight.sta_local),
                        block_minutes=flight.block_minutes or 0,
                        flight_date=flight_date,
                        aircraft_type_icao=flight.aircraft_type_icao,
                    ))

        entries.sort(key=lambda e: (e.flight_date, e.std_minutes))
        return entries
