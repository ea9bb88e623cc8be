"""
Environment configuration loader with validation for the reassignment engine.
"""

import os
import logging
from typing import Optional, Dict, Any
from pydantic import BaseModel, Field, field_validator
from dotenv import load_dotenv

logger = logging.getLogger(__name__)


class ReassignmentConfig(BaseModel):
    """Configuration model for the reassignment engine with validation."""

    # Database Configuration
    database_url: str = Field(
        default="sqlite:///rotations.db", description="Database connection URL"
    )
    db_echo: bool = Field(default=False, description="Log SQL statements")

    log_level: str = Field(default="INFO", description="Logging level")

    # Clipboard timers
    undo_window_seconds: float = Field(
        default=10.0, gt=0, description="How long a paste stays undoable"
    )
    just_pasted_highlight_seconds: float = Field(
        default=1.5, gt=0, description="How long pasted flights stay highlighted"
    )

    # Swap validation
    default_min_tat_minutes: int = Field(
        default=45, ge=0, description="Minimum turnaround when a registration has no rule"
    )

    # Names given to rotations created by split and copy
    split_route_suffix: str = Field(default="-S", min_length=1)
    copy_route_suffix: str = Field(default="-Copy", min_length=1)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is one of the standard levels."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Log level must be one of: {valid_levels}")
        return v.upper()


def load_config(env_file: Optional[str] = None) -> ReassignmentConfig:
    """
    Load configuration from environment variables and .env file.

    Args:
        env_file: Optional path to .env file. If None, looks for .env in current directory.

    Returns:
        ReassignmentConfig: Validated configuration object

    Raises:
        ValueError: If configuration is invalid
    """
    if env_file is None:
        env_file = ".env"

    if os.path.exists(env_file):
        load_dotenv(env_file)

    config_data: Dict[str, Any] = {
        "database_url": os.getenv("DATABASE_URL", "sqlite:///rotations.db"),
        "db_echo": os.getenv("DB_ECHO", "false").lower() in ("true", "1", "yes", "on"),
        "log_level": os.getenv("LOG_LEVEL", "INFO"),
        "undo_window_seconds": float(os.getenv("UNDO_WINDOW_SECONDS", "10")),
        "just_pasted_highlight_seconds": float(
            os.getenv("JUST_PASTED_HIGHLIGHT_SECONDS", "1.5")
        ),
        "default_min_tat_minutes": int(os.getenv("DEFAULT_MIN_TAT_MINUTES", "45")),
        "split_route_suffix": os.getenv("SPLIT_ROUTE_SUFFIX", "-S"),
        "copy_route_suffix": os.getenv("COPY_ROUTE_SUFFIX", "-Copy"),
    }

    try:
        return ReassignmentConfig(**config_data)
    except Exception as e:
        raise ValueError(f"Configuration validation failed: {e}")


# Global configuration instance
_config: Optional[ReassignmentConfig] = None


def get_config() -> ReassignmentConfig:
    """
    Get the global configuration instance, loading it if necessary.

    Returns:
        ReassignmentConfig: The global configuration object
    """
    global _config
    if _config is None:
        _config = load_config()
        logger.info(f"Configuration loaded (database: {_config.database_url})")
    return _config
