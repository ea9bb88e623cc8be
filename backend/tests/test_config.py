"""
Test suite for configuration loading and error message mapping.
"""

import os
import pytest
from unittest.mock import patch

from rotations.utils import config as config_module
from rotations.utils.config import ReassignmentConfig, get_config, load_config
from rotations.utils.errors import (
    FlightNotFoundError,
    RotationNotFoundError,
    StaleRotationError,
    friendly_error,
)


class TestReassignmentConfig:
    """Test cases for configuration loading."""

    @patch.dict(os.environ, {}, clear=True)
    def test_defaults(self, tmp_path):
        config = load_config(str(tmp_path / "missing.env"))

        assert config.undo_window_seconds == 10.0
        assert config.just_pasted_highlight_seconds == 1.5
        assert config.default_min_tat_minutes == 45
        assert config.split_route_suffix == "-S"
        assert config.copy_route_suffix == "-Copy"
        assert config.log_level == "INFO"
        assert config.db_echo is False

    @patch.dict(os.environ, {
        "UNDO_WINDOW_SECONDS": "30",
        "DEFAULT_MIN_TAT_MINUTES": "35",
        "LOG_LEVEL": "debug",
        "DB_ECHO": "yes",
    }, clear=True)
    def test_environment_overrides(self, tmp_path):
        config = load_config(str(tmp_path / "missing.env"))

        assert config.undo_window_seconds == 30.0
        assert config.default_min_tat_minutes == 35
        assert config.log_level == "DEBUG"
        assert config.db_echo is True

    @patch.dict(os.environ, {}, clear=True)
    def test_env_file_is_loaded(self, tmp_path):
        env_file = tmp_path / ".env"
        env_file.write_text("SPLIT_ROUTE_SUFFIX=-B\nDATABASE_URL=sqlite:///:memory:\n")

        config = load_config(str(env_file))

        assert config.split_route_suffix == "-B"
        assert config.database_url == "sqlite:///:memory:"

    @patch.dict(os.environ, {"LOG_LEVEL": "VERBOSE"}, clear=True)
    def test_invalid_log_level(self, tmp_path):
        with pytest.raises(ValueError, match="Configuration validation failed"):
            load_config(str(tmp_path / "missing.env"))

    def test_undo_window_must_be_positive(self):
        with pytest.raises(ValueError):
            ReassignmentConfig(undo_window_seconds=0)

    @patch.dict(os.environ, {}, clear=True)
    def test_get_config_is_cached(self):
        with patch.object(config_module, "_config", None):
            assert get_config() is get_config()


class TestFriendlyError:
    """Test cases for mapping raw errors to planner-facing messages."""

    @pytest.mark.parametrize("raw, expected", [
        ('null value in column "dep_station" violates not-null constraint', "Departure station is required."),
        ("NOT NULL constraint failed: aircraft_routes.route_name", "Route name is required."),
        ("NOT NULL constraint failed: scheduled_flights.season_id", "Season id is required."),
        ("UNIQUE constraint failed: aircraft_routes.route_name",
         "A record with this name already exists. Choose a different name."),
        ("FOREIGN KEY constraint failed", "Referenced record not found. Please refresh and try again."),
        ("canceling statement due to statement timeout", "Request timed out. Please try again."),
        ("(sqlite3.OperationalError) no such table: aircraft_routes",
         "Internal error: missing table. Please contact support."),
        ("permission denied for table aircraft_routes", "You do not have permission to perform this action."),
    ])
    def test_store_errors(self, raw, expected):
        assert friendly_error(raw) == expected

    def test_engine_errors(self):
        assert friendly_error(str(StaleRotationError("r1", 3))) == (
            "This rotation was changed by someone else. Refresh and try again."
        )
        assert friendly_error(str(RotationNotFoundError("r1"))) == "Rotation not found. Please refresh and try again."
        assert friendly_error(str(FlightNotFoundError(["f1", "f2"]))) == (
            "One or more flights no longer exist. Please refresh and try again."
        )

    def test_preconditions_pass_through(self):
        assert friendly_error("No flights to move") == "No flights to move"
        assert friendly_error("None of the selected legs belong to the rotation") == (
            "None of the selected legs belong to the rotation"
        )

    def test_unknown_error_is_generic(self):
        assert friendly_error("segfault in widget") == "Something went wrong. Please try again."
