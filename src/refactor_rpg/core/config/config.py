"""
Static configuration management for RefactorRPG.

Purpose
-------
Provides centralized static configuration loaded from environment variables
with sensible defaults, type validation, and bounds checking. This module
handles non-dynamic configuration that is set when the host starts a session.

Responsibilities
----------------
- Load configuration from environment variables with .env support
- Provide type-safe access to all static configuration values
- Validate settings on startup and fall back to defaults on bad input
- Track configuration loading metrics

Non-Responsibilities
--------------------
- Gameplay tunables such as the XP curve (handled by ConfigManager)
- Persistence of player state (handled by the host)

Architecture Notes
------------------
- Singleton pattern via class methods (no instantiation)
- Auto-loads on module import via Config.validate()
- Metrics track which values came from environment vs defaults
- Directory paths relative to project root for portability

Dependencies
------------
- python-dotenv: Environment variable loading
- pathlib: Cross-platform path handling
- logging: Basic logging (bootstrap only)

Environment Variables
---------------------
- ENVIRONMENT: Environment type (default: development)
- DEBUG: Debug mode flag (default: False)
- LOG_LEVEL: Logging level (default: INFO)
- LOG_JSON: Force JSON log output (default: unset, JSON in production)
- LOG_COLORS: Colored console output in development (default: True)
- LOGS_DIR / CONFIG_DIR: Override default directories
- DEDUP_WINDOW_MS: Duplicate detection window (default: 500)
- MAX_HISTORY_SIZE: Cap on retained action history, 0 = unbounded (default: 0)
"""

import logging
import os
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

# Structured logger depends on Config, so bootstrap uses the stdlib root logger.
_bootstrap_log = logging.getLogger(__name__)


# ============================================================================
# Enums and Constants
# ============================================================================


class Environment(Enum):
    """Deployment environment types."""

    DEVELOPMENT = "development"
    TESTING = "testing"
    PRODUCTION = "production"

    @classmethod
    def from_string(cls, value: str) -> "Environment":
        """
        Parse environment string safely with fallback.

        Example
        -------
        >>> Environment.from_string("PRODUCTION") == Environment.PRODUCTION
        True
        >>> Environment.from_string("invalid") == Environment.DEVELOPMENT
        True
        """
        try:
            return cls(value.lower())
        except ValueError:
            _bootstrap_log.warning(
                "Unknown environment '%s', defaulting to development", value
            )
            return cls.DEVELOPMENT


VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


# ============================================================================
# Configuration Metrics Tracker
# ============================================================================


class _ConfigLoadMetrics:
    """
    Internal metrics tracker for configuration loading.

    Tracks which configuration values came from environment variables
    versus defaults, and any validation errors encountered.
    """

    def __init__(self):
        self.env_vars_loaded: Dict[str, bool] = {}
        self.validation_errors: Dict[str, str] = {}
        self.defaults_used: Dict[str, Any] = {}
        self.last_reload: Optional[str] = None

    def record_env_load(self, key: str, from_env: bool, default: Any):
        """Record whether a config value came from environment."""
        self.env_vars_loaded[key] = from_env
        if not from_env:
            self.defaults_used[key] = default

    def record_validation_error(self, key: str, error: str):
        """Record a validation error."""
        self.validation_errors[key] = error

    def get_summary(self) -> Dict[str, Any]:
        """Get configuration loading summary."""
        return {
            "total_configs": len(self.env_vars_loaded),
            "from_environment": sum(1 for v in self.env_vars_loaded.values() if v),
            "from_defaults": sum(1 for v in self.env_vars_loaded.values() if not v),
            "validation_errors": len(self.validation_errors),
            "defaults_used": list(self.defaults_used.keys()),
            "last_reload": self.last_reload,
        }


# ============================================================================
# Main Configuration Class
# ============================================================================


class Config:
    """
    Centralized static configuration for RefactorRPG.

    All configuration values are loaded from environment variables with
    sensible defaults. Invalid values are logged and replaced by defaults
    so a bad environment never prevents the editor plugin from starting.

    Usage
    -----
    >>> Config.DEDUP_WINDOW_MS
    500
    >>> if Config.is_production():
    ...     logger.info("Running in production mode")
    >>> logger.info("Config loaded", extra=Config.get_config_summary())
    """

    # =========================================================================
    # Internal State
    # =========================================================================

    _metrics: Optional[_ConfigLoadMetrics] = None
    _enable_metrics: bool = True
    _validated: bool = False

    # =========================================================================
    # Environment Configuration
    # =========================================================================

    ENVIRONMENT: str = "development"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    LOG_JSON: Optional[bool] = None
    LOG_COLORS: bool = True

    # =========================================================================
    # Directory Configuration
    # =========================================================================

    PROJECT_ROOT = Path(__file__).resolve().parents[4]
    LOGS_DIR = PROJECT_ROOT / "logs"
    CONFIG_DIR = PROJECT_ROOT / "config"

    # =========================================================================
    # Detection
    # =========================================================================

    DEDUP_WINDOW_MS: int = 500
    MAX_HISTORY_SIZE: int = 0

    # =========================================================================
    # Metadata
    # =========================================================================

    APP_NAME: str = "RefactorRPG"
    APP_VERSION: str = "1.0.0"

    # =========================================================================
    # Helper Methods
    # =========================================================================

    @classmethod
    def _init_metrics(cls):
        """Initialize metrics tracking if enabled."""
        if cls._enable_metrics and cls._metrics is None:
            cls._metrics = _ConfigLoadMetrics()

    @classmethod
    def _reject(cls, key: str, error: str) -> None:
        _bootstrap_log.warning(error)
        if cls._metrics:
            cls._metrics.record_validation_error(key, error)

    @classmethod
    def _safe_int(
        cls,
        key: str,
        default: int,
        min_val: Optional[int] = None,
        max_val: Optional[int] = None,
    ) -> int:
        """
        Safely parse integer from environment with validation.

        Parameters
        ----------
        key:
            Environment variable name.
        default:
            Default value if not set or invalid.
        min_val:
            Minimum allowed value (inclusive).
        max_val:
            Maximum allowed value (inclusive).

        Returns
        -------
        int
            Validated integer value.

        Example
        -------
        >>> Config._safe_int("DEDUP_WINDOW_MS", 500, min_val=1, max_val=60_000)
        500
        """
        cls._init_metrics()

        raw_value = os.getenv(key)

        if raw_value is None:
            if cls._metrics:
                cls._metrics.record_env_load(key, False, default)
            return default

        try:
            value = int(raw_value)
        except ValueError:
            cls._reject(
                key, f"{key}='{raw_value}' is not a valid integer, using default {default}"
            )
            return default

        if min_val is not None and value < min_val:
            cls._reject(key, f"{key}={value} is below minimum {min_val}, using default {default}")
            return default

        if max_val is not None and value > max_val:
            cls._reject(key, f"{key}={value} exceeds maximum {max_val}, using default {default}")
            return default

        if cls._metrics:
            cls._metrics.record_env_load(key, True, default)
        return value

    @classmethod
    def _parse_bool(cls, raw_value: str) -> Optional[bool]:
        normalized = raw_value.lower().strip()
        if normalized in {"true", "yes", "1", "on"}:
            return True
        if normalized in {"false", "no", "0", "off"}:
            return False
        return None

    @classmethod
    def _safe_bool(cls, key: str, default: bool) -> bool:
        """
        Safely parse boolean from environment.

        Recognizes: true/false, yes/no, 1/0, on/off (case-insensitive).

        Example
        -------
        >>> Config._safe_bool("DEBUG", False)
        False
        """
        cls._init_metrics()

        raw_value = os.getenv(key)

        if raw_value is None:
            if cls._metrics:
                cls._metrics.record_env_load(key, False, default)
            return default

        value = cls._parse_bool(raw_value)
        if value is None:
            cls._reject(
                key, f"{key}='{raw_value}' is not a valid boolean, using default {default}"
            )
            return default

        if cls._metrics:
            cls._metrics.record_env_load(key, True, default)
        return value

    @classmethod
    def _safe_optional_bool(cls, key: str) -> Optional[bool]:
        """Parse a tri-state flag where unset means "decide from environment"."""
        cls._init_metrics()

        raw_value = os.getenv(key)
        if raw_value is None:
            if cls._metrics:
                cls._metrics.record_env_load(key, False, None)
            return None

        value = cls._parse_bool(raw_value)
        if value is None:
            cls._reject(key, f"{key}='{raw_value}' is not a valid boolean, ignoring")
            return None

        if cls._metrics:
            cls._metrics.record_env_load(key, True, None)
        return value

    @classmethod
    def _safe_str(cls, key: str, default: str) -> str:
        """Safely get string from environment."""
        cls._init_metrics()

        value = os.getenv(key, default)
        if cls._metrics:
            cls._metrics.record_env_load(key, key in os.environ, default)
        return value

    @classmethod
    def _safe_path(cls, key: str, default: Path) -> Path:
        raw_value = cls._safe_str(key, "")
        return Path(raw_value).expanduser() if raw_value else default

    # =========================================================================
    # Configuration Loading
    # =========================================================================

    @classmethod
    def load(cls) -> None:
        """
        Load all configuration from environment variables with validation.

        Called automatically on module import, and again by tests that patch
        the environment.
        """
        cls._init_metrics()

        # Environment Configuration
        cls.ENVIRONMENT = Environment.from_string(
            cls._safe_str("ENVIRONMENT", "development")
        ).value
        cls.DEBUG = cls._safe_bool("DEBUG", False)
        cls.LOG_LEVEL = cls._safe_str("LOG_LEVEL", "INFO").upper()
        cls.LOG_JSON = cls._safe_optional_bool("LOG_JSON")
        cls.LOG_COLORS = cls._safe_bool("LOG_COLORS", True)

        # Directories
        cls.LOGS_DIR = cls._safe_path("LOGS_DIR", cls.PROJECT_ROOT / "logs")
        cls.CONFIG_DIR = cls._safe_path("CONFIG_DIR", cls.PROJECT_ROOT / "config")

        # Detection
        cls.DEDUP_WINDOW_MS = cls._safe_int(
            "DEDUP_WINDOW_MS", 500, min_val=1, max_val=60_000
        )
        cls.MAX_HISTORY_SIZE = cls._safe_int("MAX_HISTORY_SIZE", 0, min_val=0)

        if cls._metrics:
            cls._metrics.last_reload = datetime.now(timezone.utc).isoformat()

    @classmethod
    def validate(cls) -> None:
        """
        Load and sanity-check configuration values.

        Never raises outside production; an invalid log level is replaced
        with INFO and reported.
        """
        if cls._validated:
            return

        cls._init_metrics()

        try:
            cls.load()

            if cls.LOG_LEVEL not in VALID_LOG_LEVELS:
                cls._reject("LOG_LEVEL", f"Invalid LOG_LEVEL '{cls.LOG_LEVEL}', using INFO")
                cls.LOG_LEVEL = "INFO"

            if cls.is_production() and cls.DEBUG:
                _bootstrap_log.warning("DEBUG mode enabled in production")

            cls._validated = True

            if cls._metrics and cls._metrics.validation_errors:
                _bootstrap_log.warning(
                    "Configuration warnings: %s", cls._metrics.validation_errors
                )

        except Exception as e:
            _bootstrap_log.warning("Config validation warning (safe for tests): %s", e)
            if cls.is_production():
                raise

    @classmethod
    def reload(cls) -> None:
        """Force a reload from the current environment."""
        cls._validated = False
        cls._metrics = None
        cls.validate()

    # =========================================================================
    # Environment Checks
    # =========================================================================

    @classmethod
    def is_production(cls) -> bool:
        """Check if running in production environment."""
        return cls.ENVIRONMENT.lower() == "production"

    @classmethod
    def is_development(cls) -> bool:
        """Check if running in development environment."""
        return cls.ENVIRONMENT.lower() == "development"

    @classmethod
    def is_testing(cls) -> bool:
        """Check if running in testing environment."""
        return cls.ENVIRONMENT.lower() == "testing"

    @classmethod
    def is_set_from_env(cls, key: str) -> bool:
        """True when `key` was read from the environment on the last load."""
        if cls._metrics is None:
            return False
        return cls._metrics.env_vars_loaded.get(key, False)

    # =========================================================================
    # Metrics & Summary
    # =========================================================================

    @classmethod
    def get_metrics(cls) -> Optional[_ConfigLoadMetrics]:
        """Get configuration loading metrics."""
        return cls._metrics

    @classmethod
    def get_config_summary(cls) -> Dict[str, Any]:
        """
        Get configuration summary for debugging.

        Example
        -------
        >>> Config.get_config_summary()["environment"]
        'development'
        """
        return {
            "environment": cls.ENVIRONMENT,
            "debug": cls.DEBUG,
            "log_level": cls.LOG_LEVEL,
            "log_json": cls.LOG_JSON,
            "logs_dir": str(cls.LOGS_DIR),
            "config_dir": str(cls.CONFIG_DIR),
            "dedup_window_ms": cls.DEDUP_WINDOW_MS,
            "max_history_size": cls.MAX_HISTORY_SIZE,
            "app_version": cls.APP_VERSION,
        }


# Auto-validate on import
Config.validate()
