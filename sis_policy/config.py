"""
Configuration management for SIS_POLICY.

Values come from explicit constructor arguments first, then environment
variables, then the defaults in ``constants``.
"""

import os

from .constants import (
    DEFAULT_ATTENDANCE_DELETE_DAYS,
    DEFAULT_ATTENDANCE_EDIT_HOURS,
    DEFAULT_MARKING_WINDOW_END,
    DEFAULT_MARKING_WINDOW_START,
    DEFAULT_MAX_CONCURRENT_LOOKUPS,
)
from .exceptions import ConfigurationError


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.lower() in ("1", "true", "yes", "on")


def _pick(value, env_name: str, default: int) -> int:
    if value is not None:
        return value
    return int(os.getenv(env_name, str(default)))


class PolicyConfig:
    """
    Policy engine configuration.

    Example:
        # Using environment variables
        config = PolicyConfig()

        # Or using direct parameters
        config = PolicyConfig(marking_window_start=8, concurrent_lookups=False)
    """

    def __init__(
        self,
        mongo_uri: str | None = None,
        db_name: str | None = None,
        marking_window_start: int | None = None,
        marking_window_end: int | None = None,
        attendance_edit_hours: int | None = None,
        attendance_delete_days: int | None = None,
        concurrent_lookups: bool | None = None,
        max_concurrent_lookups: int | None = None,
    ):
        """
        Initialize configuration.

        Args:
            mongo_uri: MongoDB connection URI (defaults to SIS_MONGO_URI env var)
            db_name: Database name (defaults to SIS_DB_NAME env var)
            marking_window_start: First hour attendance may be marked (default 7)
            marking_window_end: Hour attendance marking closes, exclusive (default 18)
            attendance_edit_hours: Edit window after the attendance date (default 24)
            attendance_delete_days: Delete window after the attendance date (default 7)
            concurrent_lookups: Run independent relationship checks concurrently
            max_concurrent_lookups: Bound on per-item lookups while filtering
        """
        self.mongo_uri = mongo_uri or os.getenv("SIS_MONGO_URI", "")
        self.db_name = db_name or os.getenv("SIS_DB_NAME", "")
        self.marking_window_start = _pick(
            marking_window_start, "SIS_MARKING_WINDOW_START", DEFAULT_MARKING_WINDOW_START
        )
        self.marking_window_end = _pick(
            marking_window_end, "SIS_MARKING_WINDOW_END", DEFAULT_MARKING_WINDOW_END
        )
        self.attendance_edit_hours = _pick(
            attendance_edit_hours, "SIS_ATTENDANCE_EDIT_HOURS", DEFAULT_ATTENDANCE_EDIT_HOURS
        )
        self.attendance_delete_days = _pick(
            attendance_delete_days, "SIS_ATTENDANCE_DELETE_DAYS", DEFAULT_ATTENDANCE_DELETE_DAYS
        )
        if concurrent_lookups is None:
            concurrent_lookups = _env_bool("SIS_CONCURRENT_LOOKUPS", True)
        self.concurrent_lookups = concurrent_lookups
        self.max_concurrent_lookups = _pick(
            max_concurrent_lookups, "SIS_MAX_CONCURRENT_LOOKUPS", DEFAULT_MAX_CONCURRENT_LOOKUPS
        )

    def validate(self, require_database: bool = False) -> None:
        """
        Validate configuration values.

        Args:
            require_database: Also require mongo_uri and db_name

        Raises:
            ConfigurationError: If configuration is missing or invalid
        """
        if require_database:
            if not self.mongo_uri:
                raise ConfigurationError(
                    "mongo_uri is required (set SIS_MONGO_URI environment variable or pass directly)",
                    config_key="mongo_uri",
                )
            if not self.db_name:
                raise ConfigurationError(
                    "db_name is required (set SIS_DB_NAME environment variable or pass directly)",
                    config_key="db_name",
                )

        for key in ("marking_window_start", "marking_window_end"):
            value = getattr(self, key)
            if not 0 <= value <= 24:
                raise ConfigurationError(
                    f"{key} must be between 0 and 24, got {value}",
                    config_key=key,
                    config_value=value,
                )

        if self.marking_window_start >= self.marking_window_end:
            raise ConfigurationError(
                f"marking_window_start ({self.marking_window_start}) must be before "
                f"marking_window_end ({self.marking_window_end})",
                config_key="marking_window_start",
                config_value=self.marking_window_start,
            )

        if self.attendance_edit_hours < 0:
            raise ConfigurationError(
                f"attendance_edit_hours must be >= 0, got {self.attendance_edit_hours}",
                config_key="attendance_edit_hours",
                config_value=self.attendance_edit_hours,
            )

        if self.attendance_delete_days < 0:
            raise ConfigurationError(
                f"attendance_delete_days must be >= 0, got {self.attendance_delete_days}",
                config_key="attendance_delete_days",
                config_value=self.attendance_delete_days,
            )

        if self.max_concurrent_lookups < 1:
            raise ConfigurationError(
                f"max_concurrent_lookups must be >= 1, got {self.max_concurrent_lookups}",
                config_key="max_concurrent_lookups",
                config_value=self.max_concurrent_lookups,
            )
