"""
Database package for the rotation reassignment engine.

This package provides the SQLAlchemy models and the database configuration
used as the engine's transactional store.
"""

from .models import (
    Base,
    ScheduledFlight,
    TailAssignmentOverride,
    Rotation,
    RotationLeg,
    create_all_tables,
    drop_all_tables
)

from .config import (
    DatabaseConfig,
    get_database_config,
    initialize_database,
)

__all__ = [
    # Models
    'Base',
    'ScheduledFlight',
    'TailAssignmentOverride',
    'Rotation',
    'RotationLeg',
    'create_all_tables',
    'drop_all_tables',

    # Configuration
    'DatabaseConfig',
    'get_database_config',
    'initialize_database',
]
