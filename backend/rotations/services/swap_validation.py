"""
Swap validation for exchanging flights between two aircraft rows.

Pure functions: given both sides of a hypothetical swap and the rows they
land on, produce graded warnings for the post-swap state. Nothing here
touches the store; a validation never fails, it only grades.
"""

from typing import Dict, Iterable, List, Mapping, Optional, Union

from ..models.enums import SwapSeverity, SwapSide, SwapWarningType
from ..models.flight import SwapFlightModel
from ..models.swap import SwapWarningModel
from ..utils.config import ReassignmentConfig

DEFAULT_MIN_TAT_MINUTES = 45


class TatLookup:
    """
    Minimum turnaround time per registration.

    Registrations without a rule fall back to ``default_minutes``.
    """

    def __init__(self, minutes_by_reg: Optional[Mapping[str, int]] = None,
                 default_minutes: int = DEFAULT_MIN_TAT_MINUTES):
        self.minutes_by_reg: Dict[str, int] = dict(minutes_by_reg or {})
        self.default_minutes = default_minutes

    @classmethod
    def from_config(cls, config: ReassignmentConfig,
                    minutes_by_reg: Optional[Mapping[str, int]] = None) -> "TatLookup":
        """Lookup whose fallback is the configured default turnaround."""
        return cls(minutes_by_reg, config.default_min_tat_minutes)

    def get(self, registration: str) -> int:
        return self.minutes_by_reg.get(registration, self.default_minutes)


def format_minutes(minutes: int) -> str:
    """Format minutes after midnight as HH:MM."""
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def extract_family(icao: Optional[str]) -> Optional[str]:
    """Coarse aircraft family from an ICAO type code (A320 -> A32, B738 -> B73)."""
    if not icao or len(icao) < 3:
        return None
    return icao[:3]


def build_post_swap_row(
    row_flights: Iterable[SwapFlightModel],
    remove: Iterable[SwapFlightModel],
    add: Iterable[SwapFlightModel]
) -> List[SwapFlightModel]:
    """Row after the swap: outgoing flights removed, incoming appended, sorted by date then departure."""
    remove_ids = {f.id for f in remove}
    remaining = [f for f in row_flights if f.id not in remove_ids]
    # sorted() is stable, so equal (date, std) pairs keep their input order
    return sorted(remaining + list(add), key=lambda f: (f.flight_date, f.std_minutes))


def _validate_side(
    full_row: List[SwapFlightModel],
    incoming: List[SwapFlightModel],
    side: SwapSide,
    target_reg: str,
    tat: TatLookup,
    warnings: List[SwapWarningModel]
) -> None:
    incoming_ids = {f.id for f in incoming}

    for curr, nxt in zip(full_row, full_row[1:]):
        # Only transitions touching an incoming flight are the swap's doing
        if curr.id not in incoming_ids and nxt.id not in incoming_ids:
            continue
        if curr.flight_date != nxt.flight_date:
            continue

        if curr.sta_minutes > nxt.std_minutes:
            warnings.append(SwapWarningModel(
                side=side, reg=target_reg,
                type=SwapWarningType.TIME_OVERLAP,
                severity=SwapSeverity.ERROR,
                message=(
                    f"Time overlap on {target_reg}: flight ending at {format_minutes(curr.sta_minutes)} "
                    f"overlaps with departure at {format_minutes(nxt.std_minutes)}"
                ),
            ))
            continue

        if curr.arr_station != nxt.dep_station:
            warnings.append(SwapWarningModel(
                side=side, reg=target_reg,
                type=SwapWarningType.CHAIN_BREAK,
                severity=SwapSeverity.WARNING,
                message=f"Chain break on {target_reg}: arrives {curr.arr_station}, next departs {nxt.dep_station}",
            ))
            continue

        gap = nxt.std_minutes - curr.sta_minutes
        min_tat = tat.get(target_reg)
        if 0 <= gap < min_tat:
            warnings.append(SwapWarningModel(
                side=side, reg=target_reg,
                type=SwapWarningType.TAT_INSUFFICIENT,
                severity=SwapSeverity.WARNING,
                message=f"Tight turnaround on {target_reg}: {gap}min gap (min {min_tat}min)",
            ))


def validate_swap(
    side_a: List[SwapFlightModel], reg_a: str, ac_type_a: str,
    side_b: List[SwapFlightModel], reg_b: str, ac_type_b: str,
    row_a_flights: List[SwapFlightModel],
    row_b_flights: List[SwapFlightModel],
    tat_minutes: Optional[Union[Mapping[str, int], "TatLookup"]] = None,
    default_tat_minutes: int = DEFAULT_MIN_TAT_MINUTES,
) -> List[SwapWarningModel]:
    """
    Validate swapping ``side_a`` (currently on ``reg_a``) with ``side_b``
    (currently on ``reg_b``).

    Side A entries describe A's flights landing on B's row and come first,
    followed by side B entries for B's flights landing on A's row. Within a
    side, entries follow the row order. When nothing is found a single
    ``ok`` entry is returned.

    Args:
        side_a: Flights leaving reg_a
        reg_a: Registration of row A
        ac_type_a: Aircraft type operating row A
        side_b: Flights leaving reg_b
        reg_b: Registration of row B
        ac_type_b: Aircraft type operating row B
        row_a_flights: Every flight currently on row A
        row_b_flights: Every flight currently on row B
        tat_minutes: Minimum turnaround per registration (mapping or TatLookup)
        default_tat_minutes: Turnaround for registrations without a rule

    Returns:
        List of SwapWarningModel
    """
    tat = tat_minutes if isinstance(tat_minutes, TatLookup) else TatLookup(tat_minutes, default_tat_minutes)
    warnings: List[SwapWarningModel] = []

    if ac_type_a != ac_type_b:
        family_a = extract_family(ac_type_a)
        family_b = extract_family(ac_type_b)
        if family_a and family_a == family_b:
            warnings.append(SwapWarningModel(
                side=SwapSide.A, reg=reg_b,
                type=SwapWarningType.AC_TYPE_MISMATCH,
                severity=SwapSeverity.WARNING,
                message=f"{ac_type_a} flights moving to {ac_type_b} aircraft (same family)",
            ))
        else:
            warnings.append(SwapWarningModel(
                side=SwapSide.A, reg=reg_b,
                type=SwapWarningType.AC_TYPE_MISMATCH,
                severity=SwapSeverity.ERROR,
                message=f"{ac_type_a} flights moving to {ac_type_b} aircraft (different type)",
            ))

    row_b_after = build_post_swap_row(row_b_flights, side_b, side_a)
    _validate_side(row_b_after, side_a, SwapSide.A, reg_b, tat, warnings)

    row_a_after = build_post_swap_row(row_a_flights, side_a, side_b)
    _validate_side(row_a_after, side_b, SwapSide.B, reg_a, tat, warnings)

    if not warnings:
        warnings.append(SwapWarningModel(
            side=SwapSide.A, reg=reg_b,
            type=SwapWarningType.CLEAN,
            severity=SwapSeverity.OK,
            message="Swap looks clean, no conflicts detected",
        ))

    return warnings


def has_blocking_errors(warnings: Iterable[SwapWarningModel]) -> bool:
    """True when any entry has ``error`` severity and the swap needs explicit confirmation."""
    return any(w.severity == SwapSeverity.ERROR for w in warnings)
