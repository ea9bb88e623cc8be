"""
Configuration and error helpers for the reassignment engine.
"""

from .config import ReassignmentConfig, load_config, get_config
from .errors import (
    ReassignmentError,
    PreconditionError,
    RotationNotFoundError,
    FlightNotFoundError,
    StaleRotationError,
    friendly_error,
)

__all__ = [
    'ReassignmentConfig',
    'load_config',
    'get_config',
    'ReassignmentError',
    'PreconditionError',
    'RotationNotFoundError',
    'FlightNotFoundError',
    'StaleRotationError',
    'friendly_error',
]
