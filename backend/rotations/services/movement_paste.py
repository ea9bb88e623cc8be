"""
Move, split and copy transaction engine with undo.

Every public operation runs as one transaction against the rotation store:
either every step commits or the session is rolled back and the caller
gets an error value. Successful mutations return the undo payload that
exactly reverses them; ``undo_paste`` applies one such payload, again
atomically.

Payloads are not idempotent. Applying the same payload twice is undefined
and callers must discard a payload once it has been applied.
"""

import logging
from typing import Callable, Dict, Iterable, List, Optional

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..database.config import DatabaseConfig
from ..database.models import Rotation, RotationLeg, ScheduledFlight
from ..models.enums import FlightSource, FlightStatus
from ..models.undo import (
    DeleteCopiesPayload,
    OperationResultModel,
    RevertMovePayload,
    RevertSplitPayload,
    UndoPayload,
)
from ..utils.config import ReassignmentConfig
from ..utils.errors import (
    NO_FLIGHTS_TO_COPY,
    NO_FLIGHTS_TO_MOVE,
    NO_LEGS_TO_MOVE,
    NO_MATCHING_LEGS,
    SPLIT_EMPTIES_SOURCE,
    FlightNotFoundError,
    PreconditionError,
    ReassignmentError,
    RotationNotFoundError,
    StaleRotationError,
)

logger = logging.getLogger(__name__)

# Columns duplicated when a flight is copied (source, status and registration are set explicitly)
FLIGHT_COPY_FIELDS = (
    'season_id', 'airline_code', 'flight_number',
    'dep_station', 'arr_station', 'std_local', 'sta_local',
    'block_minutes', 'arrival_day_offset', 'days_of_operation',
    'period_start', 'period_end', 'aircraft_type_icao', 'service_type',
)

ROTATION_CLONE_FIELDS = (
    'season_id', 'scenario_id', 'aircraft_type_icao', 'days_of_operation',
    'period_start', 'period_end', 'duration_days', 'status', 'notes',
)

LEG_COPY_FIELDS = (
    'airline_code', 'flight_number', 'dep_station', 'arr_station',
    'std_local', 'sta_local', 'block_minutes', 'day_offset',
    'arrives_next_day', 'service_type',
)


def _dedupe(ids: Iterable[str]) -> List[str]:
    """Drop repeated ids, keeping first occurrence order."""
    return list(dict.fromkeys(ids))


class MovementPasteService:
    """
    Atomic reassignment operations on flights and rotations.

    Features:
    - Full move: reassign flights to another registration
    - Split and move: detach some legs of a rotation into a new rotation
    - Copy: duplicate flights (and optionally their rotation) as drafts
    - Undo: reverse exactly one of the above from its payload
    - Optimistic version check on rotations whose legs are rearranged
    """

    def __init__(
        self,
        db_config: DatabaseConfig,
        split_suffix: str = "-S",
        copy_suffix: str = "-Copy"
    ):
        """
        Initialize the paste service.

        Args:
            db_config: Store configuration providing transactional sessions
            split_suffix: Appended to the name of a rotation created by a split
            copy_suffix: Appended to the name of a rotation created by a copy
        """
        self.db = db_config
        self.split_suffix = split_suffix
        self.copy_suffix = copy_suffix

    @classmethod
    def from_config(cls, config: ReassignmentConfig, db_config: DatabaseConfig) -> 'MovementPasteService':
        """Build a service whose rotation name suffixes come from configuration."""
        return cls(db_config, config.split_route_suffix, config.copy_route_suffix)

    # ─── Transaction plumbing ───────────────────────────────────

    def _run(
        self,
        operation: str,
        work: Callable[[Session], Optional[UndoPayload]]
    ) -> OperationResultModel:
        """Run ``work`` in one transaction and turn failures into an error value."""
        try:
            with self.db.get_session_context() as session:
                payload = work(session)
        except (ReassignmentError, SQLAlchemyError) as e:
            logger.error(f"{operation} failed, transaction rolled back: {e}")
            return OperationResultModel(error=str(e))

        return OperationResultModel(undo_payload=payload)

    @staticmethod
    def _load_flights(session: Session, flight_ids: List[str]) -> Dict[str, ScheduledFlight]:
        rows = session.execute(
            select(ScheduledFlight).where(ScheduledFlight.id.in_(flight_ids))
        ).scalars().all()
        flights = {f.id: f for f in rows}

        missing = [fid for fid in flight_ids if fid not in flights]
        if missing:
            raise FlightNotFoundError(missing)
        return flights

    @staticmethod
    def _load_rotation(session: Session, rotation_id: str) -> Rotation:
        rotation = session.get(Rotation, rotation_id)
        if rotation is None:
            raise RotationNotFoundError(rotation_id)
        return rotation

    @staticmethod
    def _bump_version(session: Session, rotation_id: str, expected_version: Optional[int] = None) -> None:
        """
        Increment a rotation's version, optionally only from ``expected_version``.

        Raises:
            StaleRotationError: If the rotation is no longer at ``expected_version``
        """
        stmt = update(Rotation).where(Rotation.id == rotation_id)
        if expected_version is not None:
            stmt = stmt.where(Rotation.version == expected_version)
        result = session.execute(
            stmt.values(version=Rotation.version + 1).execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            raise StaleRotationError(rotation_id, expected_version)

    @staticmethod
    def _restore_registrations(session: Session, original_regs: Dict[str, Optional[str]]) -> None:
        if not original_regs:
            return
        flights = MovementPasteService._load_flights(session, list(original_regs))
        for flight_id, reg in original_regs.items():
            flights[flight_id].aircraft_reg = reg

    def _clone_rotation(self, source: Rotation, suffix: str, status: Optional[str] = None) -> Rotation:
        clone = Rotation(
            route_name=(source.route_name or 'Route') + suffix,
            **{field: getattr(source, field) for field in ROTATION_CLONE_FIELDS}
        )
        if status is not None:
            clone.status = status
        return clone

    # ─── Move Full Route ────────────────────────────────────────

    def move_full_route(self, flight_ids: List[str], target_reg: str) -> OperationResultModel:
        """
        Reassign flights to ``target_reg``.

        Args:
            flight_ids: Scheduled flight ids to move
            target_reg: Registration to assign

        Returns:
            OperationResultModel with a RevertMovePayload on success
        """
        flight_ids = _dedupe(flight_ids)
        if not flight_ids:
            return OperationResultModel(error=NO_FLIGHTS_TO_MOVE)

        def work(session: Session) -> UndoPayload:
            flights = self._load_flights(session, flight_ids)
            original_regs = {fid: flights[fid].aircraft_reg for fid in flight_ids}

            for fid in flight_ids:
                flights[fid].aircraft_reg = target_reg

            logger.info(f"Moved {len(flight_ids)} flight(s) to {target_reg}")
            return RevertMovePayload(flight_ids=flight_ids, original_regs=original_regs)

        return self._run("move_full_route", work)

    # ─── Split & Move Route ─────────────────────────────────────

    def split_and_move_route(
        self,
        source_rotation_id: str,
        moved_leg_sequences: List[int],
        target_reg: str,
        expected_version: Optional[int] = None
    ) -> OperationResultModel:
        """
        Split legs off a rotation into a new rotation flown by ``target_reg``.

        The new rotation clones the source's fields with the split suffix on
        its name. Moved legs are renumbered 1..k in their original relative
        order; the legs left behind are renumbered 1..m. Every flight tied
        to a moved leg is reassigned.

        Args:
            source_rotation_id: Rotation to split
            moved_leg_sequences: Sequence numbers of the legs to move
            target_reg: Registration for the moved flights
            expected_version: Rotation version the caller analysed, if known

        Returns:
            OperationResultModel with a RevertSplitPayload on success
        """
        if not moved_leg_sequences:
            return OperationResultModel(error=NO_LEGS_TO_MOVE)

        moved_set = set(moved_leg_sequences)

        def work(session: Session) -> UndoPayload:
            source = self._load_rotation(session, source_rotation_id)
            self._bump_version(session, source.id, expected_version)

            legs = sorted(source.legs, key=lambda leg: leg.leg_sequence)
            moved = [leg for leg in legs if leg.leg_sequence in moved_set]
            remaining = [leg for leg in legs if leg.leg_sequence not in moved_set]
            if not moved:
                raise PreconditionError(NO_MATCHING_LEGS)
            if not remaining:
                raise PreconditionError(SPLIT_EMPTIES_SOURCE)

            new_rotation = self._clone_rotation(source, self.split_suffix)
            session.add(new_rotation)
            session.flush()

            for seq, leg in enumerate(moved, start=1):
                leg.rotation = new_rotation
                leg.leg_sequence = seq

            for seq, leg in enumerate(remaining, start=1):
                leg.leg_sequence = seq

            moved_flight_ids = _dedupe(leg.flight_id for leg in moved if leg.flight_id)
            original_regs: Dict[str, Optional[str]] = {}
            if moved_flight_ids:
                flights = self._load_flights(session, moved_flight_ids)
                for fid in moved_flight_ids:
                    original_regs[fid] = flights[fid].aircraft_reg
                    flights[fid].aircraft_reg = target_reg

            logger.info(
                f"Split {len(moved)} leg(s) of rotation {source.id} into {new_rotation.id} "
                f"on {target_reg} ({len(remaining)} leg(s) remain)"
            )
            return RevertSplitPayload(
                new_rotation_id=new_rotation.id,
                source_rotation_id=source.id,
                moved_leg_flight_ids=moved_flight_ids,
                original_regs=original_regs,
            )

        return self._run("split_and_move_route", work)

    # ─── Copy Flights ───────────────────────────────────────────

    def copy_flights(
        self,
        flight_ids: List[str],
        target_reg: str,
        source_rotation_id: Optional[str] = None
    ) -> OperationResultModel:
        """
        Duplicate flights as builder-created drafts assigned to ``target_reg``.

        Source records are never modified. When ``source_rotation_id`` is
        given, the rotation is cloned with the copy suffix and receives
        the legs whose flight was copied, pointing at the new flights, and
        any template-only legs that carry no flight. Legs keep their order
        and are renumbered from 1.

        Args:
            flight_ids: Scheduled flight ids to copy
            target_reg: Registration for the copies
            source_rotation_id: Rotation whose structure to clone, if any

        Returns:
            OperationResultModel with a DeleteCopiesPayload on success
        """
        flight_ids = _dedupe(flight_ids)
        if not flight_ids:
            return OperationResultModel(error=NO_FLIGHTS_TO_COPY)

        def work(session: Session) -> UndoPayload:
            flights = self._load_flights(session, flight_ids)

            copies: Dict[str, ScheduledFlight] = {}
            for fid in flight_ids:
                original = flights[fid]
                copy = ScheduledFlight(
                    source=FlightSource.BUILDER.value,
                    status=FlightStatus.DRAFT.value,
                    aircraft_reg=target_reg,
                    **{field: getattr(original, field) for field in FLIGHT_COPY_FIELDS}
                )
                session.add(copy)
                copies[fid] = copy
            session.flush()

            old_to_new = {fid: copy.id for fid, copy in copies.items()}
            new_rotation_id: Optional[str] = None

            if source_rotation_id:
                source = session.get(Rotation, source_rotation_id)
                if source is None:
                    logger.warning(f"Rotation {source_rotation_id} not found, copying flights without it")
                else:
                    copied_legs = [
                        leg for leg in sorted(source.legs, key=lambda leg: leg.leg_sequence)
                        if leg.flight_id is None or leg.flight_id in old_to_new
                    ]
                    # Template-only legs alone do not make a rotation
                    if any(leg.flight_id is not None for leg in copied_legs):
                        new_rotation = self._clone_rotation(source, self.copy_suffix, FlightStatus.DRAFT.value)
                        for seq, leg in enumerate(copied_legs, start=1):
                            new_rotation.legs.append(RotationLeg(
                                leg_sequence=seq,
                                flight_id=old_to_new.get(leg.flight_id),
                                **{field: getattr(leg, field) for field in LEG_COPY_FIELDS}
                            ))
                        session.add(new_rotation)
                        session.flush()
                        new_rotation_id = new_rotation.id

            new_flight_ids = [old_to_new[fid] for fid in flight_ids]
            logger.info(
                f"Copied {len(new_flight_ids)} flight(s) to {target_reg}"
                + (f" with rotation {new_rotation_id}" if new_rotation_id else "")
            )
            return DeleteCopiesPayload(new_rotation_id=new_rotation_id, new_flight_ids=new_flight_ids)

        return self._run("copy_flights", work)

    # ─── Undo Paste ─────────────────────────────────────────────

    def undo_paste(self, payload: UndoPayload) -> OperationResultModel:
        """
        Reverse one prior operation from its payload.

        Args:
            payload: Undo payload returned by move, split or copy

        Returns:
            OperationResultModel, with ``error`` set on failure
        """
        def work(session: Session) -> None:
            if payload.type == "revert_move":
                self._restore_registrations(session, payload.original_regs)
                logger.info(f"Reverted move of {len(payload.flight_ids)} flight(s)")

            elif payload.type == "revert_split":
                self._revert_split(session, payload)

            elif payload.type == "delete_copies":
                self._delete_copies(session, payload)

            else:
                raise PreconditionError(f"Unknown undo payload type: {payload.type}")
            return None

        return self._run(f"undo_paste ({payload.type})", work)

    def _revert_split(self, session: Session, payload: RevertSplitPayload) -> None:
        source = self._load_rotation(session, payload.source_rotation_id)
        split_off = self._load_rotation(session, payload.new_rotation_id)
        self._bump_version(session, source.id)

        next_seq = max((leg.leg_sequence for leg in source.legs), default=0) + 1
        for leg in sorted(split_off.legs, key=lambda leg: leg.leg_sequence):
            leg.rotation = source
            leg.leg_sequence = next_seq
            next_seq += 1

        for seq, leg in enumerate(sorted(source.legs, key=lambda leg: leg.leg_sequence), start=1):
            leg.leg_sequence = seq

        # Legs must be re-parented in the store before their old rotation goes
        session.flush()
        session.delete(split_off)

        self._restore_registrations(session, payload.original_regs)
        logger.info(f"Folded rotation {payload.new_rotation_id} back into {source.id}")

    def _delete_copies(self, session: Session, payload: DeleteCopiesPayload) -> None:
        if payload.new_rotation_id:
            rotation = session.get(Rotation, payload.new_rotation_id)
            if rotation is not None:
                session.delete(rotation)
                session.flush()
            else:
                logger.warning(f"Copied rotation {payload.new_rotation_id} already gone")

        if payload.new_flight_ids:
            copies = session.execute(
                select(ScheduledFlight).where(ScheduledFlight.id.in_(payload.new_flight_ids))
            ).scalars().all()
            for copy in copies:
                session.delete(copy)

        logger.info(f"Deleted {len(payload.new_flight_ids)} copied flight(s)")
