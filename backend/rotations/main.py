"""
Main entry point for the rotation reassignment engine.

Loads configuration, sets up logging and prepares the rotation store.
"""

import logging

from rotations.database.config import initialize_database
from rotations.utils.config import get_config

logger = logging.getLogger(__name__)


def main() -> int:
    """Initialize the store and create its tables."""
    try:
        config = get_config()
    except ValueError as e:
        logging.basicConfig(level=logging.ERROR)
        logger.error(f"Invalid configuration: {e}")
        return 1

    logging.basicConfig(
        level=getattr(logging, config.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        db_config = initialize_database(config.database_url, echo=config.db_echo)
    except Exception as e:
        logger.error(f"Failed to initialize rotation store: {e}")
        return 1

    logger.info(f"Rotation store ready ({db_config.db_type})")
    db_config.close()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
