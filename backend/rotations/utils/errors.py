"""
Exceptions raised inside engine transactions and the mapping of raw store
errors to planner-facing messages.
"""

import logging
import re
from typing import Callable, List, Optional, Tuple, Union

logger = logging.getLogger(__name__)


class ReassignmentError(Exception):
    """Base exception for the reassignment engine."""


class PreconditionError(ReassignmentError):
    """Raised when an operation's inputs are rejected before mutating anything."""


class RotationNotFoundError(ReassignmentError):
    """Raised when a rotation id does not resolve."""

    def __init__(self, rotation_id: str):
        super().__init__(f"Rotation not found: {rotation_id}")
        self.rotation_id = rotation_id


class FlightNotFoundError(ReassignmentError):
    """Raised when one or more flight ids do not resolve."""

    def __init__(self, flight_ids: List[str]):
        super().__init__(f"Flight not found: {', '.join(flight_ids)}")
        self.flight_ids = flight_ids


class StaleRotationError(ReassignmentError):
    """Raised when a rotation changed since the caller last read it."""

    def __init__(self, rotation_id: str, expected_version: Optional[int]):
        super().__init__(
            f"Stale rotation {rotation_id}: expected version {expected_version}"
        )
        self.rotation_id = rotation_id
        self.expected_version = expected_version


# Precondition messages are planner-facing as they are
NO_FLIGHTS_TO_MOVE = "No flights to move"
NO_FLIGHTS_TO_COPY = "No flights to copy"
NO_LEGS_TO_MOVE = "No legs to move"
NO_MATCHING_LEGS = "None of the selected legs belong to the rotation"
SPLIT_EMPTIES_SOURCE = "Split would move every leg; move the full rotation instead"

PRECONDITION_MESSAGES = frozenset({
    NO_FLIGHTS_TO_MOVE,
    NO_FLIGHTS_TO_COPY,
    NO_LEGS_TO_MOVE,
    NO_MATCHING_LEGS,
    SPLIT_EMPTIES_SOURCE,
})


FIELD_NAMES = {
    'period start': 'From date',
    'period end': 'To date',
    'route name': 'Route name',
    'dep station': 'Departure station',
    'arr station': 'Arrival station',
    'std local': 'STD (departure time)',
    'sta local': 'STA (arrival time)',
    'flight number': 'Flight number',
    'aircraft type icao': 'Aircraft type',
    'days of operation': 'Days of operation',
    'airline code': 'Airline code',
    'service type': 'Service type',
    'leg sequence': 'Leg sequence',
}


def _not_null(match: re.Match) -> str:
    # PostgreSQL quotes the column, SQLite reports table.column
    field = match.group(1).split('.')[-1].replace('_', ' ')
    friendly = FIELD_NAMES.get(field, field[:1].upper() + field[1:])
    return f"{friendly} is required."


ERROR_RULES: List[Tuple[str, Union[str, Callable[[re.Match], str]]]] = [
    (r'null value in column "(.+?)"', _not_null),
    (r'NOT NULL constraint failed: (\S+)', _not_null),
    (r'duplicate key value|UNIQUE constraint failed', 'A record with this name already exists. Choose a different name.'),
    (r'violates foreign key constraint|FOREIGN KEY constraint failed', 'Referenced record not found. Please refresh and try again.'),
    (r'violates check constraint|CHECK constraint failed', 'One or more values are outside the allowed range.'),
    (r'Stale rotation', 'This rotation was changed by someone else. Refresh and try again.'),
    (r'Rotation not found', 'Rotation not found. Please refresh and try again.'),
    (r'Flight not found', 'One or more flights no longer exist. Please refresh and try again.'),
    (r'connection refused|connection terminated|ECONNREFUSED|unable to open database', 'Cannot connect to database. Please check your connection and try again.'),
    (r'timeout|timed out|ETIMEDOUT', 'Request timed out. Please try again.'),
    (r'relation "(.+?)" does not exist|no such table', 'Internal error: missing table. Please contact support.'),
    (r'permission denied', 'You do not have permission to perform this action.'),
]


def friendly_error(raw_error: str) -> str:
    """
    Map a raw store or engine error message to planner-facing text.

    Precondition messages raised by the engine are already readable and
    pass through unchanged.

    Args:
        raw_error: Error message as returned by the engine

    Returns:
        Message suitable for a notification
    """
    for pattern, friendly in ERROR_RULES:
        match = re.search(pattern, raw_error, re.IGNORECASE)
        if match:
            return friendly(match) if callable(friendly) else friendly

    if raw_error in PRECONDITION_MESSAGES:
        return raw_error

    logger.error(f"Unhandled error: {raw_error}")
    return 'Something went wrong. Please try again.'


__all__ = [
    'ReassignmentError',
    'PreconditionError',
    'RotationNotFoundError',
    'FlightNotFoundError',
    'StaleRotationError',
    'friendly_error',
]
