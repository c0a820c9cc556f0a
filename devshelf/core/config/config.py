"""
Static configuration management for DevShelf.

Purpose
-------
Provides centralized static configuration loaded from environment variables
with sensible defaults, type validation, and bounds checking. Everything here
is read once at startup; the progress engine itself takes no configuration and
receives all of its inputs explicitly.

Responsibilities
----------------
- Load configuration from environment variables with .env support
- Provide type-safe access to all static configuration values
- Validate critical settings on startup
- Track which values came from the environment and which fell back to defaults

Non-Responsibilities
--------------------
- Achievement definitions (owned by the catalog module)
- XP reward amounts (domain constants, not deployment settings)
- Secrets management (use environment variables)

Architecture Notes
------------------
- Singleton pattern via class methods (no instantiation)
- Auto-loads on module import via Config.validate()
- Metrics track which values came from environment vs defaults
- Directory paths relative to project root for portability

Environment Variables
---------------------
All optional:
- ENVIRONMENT: Environment type (default: development)
- DEBUG: Debug mode flag (default: False)
- LOG_LEVEL: Logging level (default: INFO)
- LOG_JSON: Force JSON console logs (default: production only)
- LOG_COLORS: Colored console logs in development (default: True)
- LOG_TO_FILE: Keep a daily rotating JSON log file (default: False)
- LOGS_DIR: Directory for the log file (default: <project>/logs)
- STREAK_TIMEZONE: IANA zone used to decide "today" for streaks (default: UTC)
- ACHIEVEMENTS_FILE: YAML file with extra achievement definitions
"""

import os
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

# ============================================================================
# Enums and Constants
# ============================================================================


class Environment(Enum):
    """
    Deployment environment types.

    Defines valid environment values with strict type safety.
    """
    DEVELOPMENT = "development"
    TESTING = "testing"
    STAGING = "staging"
    PRODUCTION = "production"

    @classmethod
    def from_string(cls, value: str) -> "Environment":
        """
        Parse environment string safely with fallback.

        Parameters
        ----------
        value:
            Environment string to parse.

        Returns
        -------
        Environment
            Parsed environment enum value.

        Example
        -------
        >>> Environment.from_string("production") == Environment.PRODUCTION
        True
        >>> Environment.from_string("invalid") == Environment.DEVELOPMENT
        True
        """
        try:
            return cls(value.lower())
        except ValueError:
            # Use basic logging during bootstrap (structured logger not yet initialized)
            import logging
            logging.warning(
                f"Unknown environment '{value}', defaulting to development"
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

    def record_env_load(self, key: str, from_env: bool, value: Any, default: Any):
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
    Centralized static configuration for DevShelf.

    All configuration values loaded from environment variables with sensible
    defaults. Invalid values are logged and replaced by their defaults rather
    than failing startup.

    Usage
    -----
    >>> if Config.is_production():
    ...     logger.info("Running in production mode")
    >>> summary = Config.get_config_summary()
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
    LOG_TO_FILE: bool = False

    # =========================================================================
    # Directory Configuration
    # =========================================================================

    PROJECT_ROOT = Path(__file__).resolve().parents[3]
    LOGS_DIR = PROJECT_ROOT / "logs"

    # =========================================================================
    # Application Metadata
    # =========================================================================

    APP_NAME: str = "DevShelf"
    APP_VERSION: str = "1.0.0"

    # =========================================================================
    # Progress Engine
    # =========================================================================

    STREAK_TIMEZONE: str = "UTC"
    ACHIEVEMENTS_FILE: Optional[Path] = None

    # =========================================================================
    # Helper Methods
    # =========================================================================

    @classmethod
    def _init_metrics(cls):
        """Initialize metrics tracking if enabled."""
        if cls._enable_metrics and cls._metrics is None:
            cls._metrics = _ConfigLoadMetrics()

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
        """
        cls._init_metrics()

        raw_value = os.getenv(key)

        if raw_value is None:
            if cls._metrics:
                cls._metrics.record_env_load(key, False, default, default)
            return default

        try:
            value = int(raw_value)
        except ValueError:
            error = f"{key}='{raw_value}' is not a valid integer, using default {default}"
            import logging
            logging.warning(error)
            if cls._metrics:
                cls._metrics.record_validation_error(key, error)
            return default

        if min_val is not None and value < min_val:
            error = f"{key}={value} is below minimum {min_val}, using default {default}"
            import logging
            logging.warning(error)
            if cls._metrics:
                cls._metrics.record_validation_error(key, error)
            return default

        if max_val is not None and value > max_val:
            error = f"{key}={value} exceeds maximum {max_val}, using default {default}"
            import logging
            logging.warning(error)
            if cls._metrics:
                cls._metrics.record_validation_error(key, error)
            return default

        if cls._metrics:
            cls._metrics.record_env_load(key, True, value, default)

        return value

    @classmethod
    def _safe_bool(cls, key: str, default: Optional[bool]) -> Optional[bool]:
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
                cls._metrics.record_env_load(key, False, default, default)
            return default

        normalized = raw_value.lower().strip()
        true_values = {"true", "yes", "1", "on"}
        false_values = {"false", "no", "0", "off"}

        if normalized in true_values:
            value = True
        elif normalized in false_values:
            value = False
        else:
            error = f"{key}='{raw_value}' is not a valid boolean, using default {default}"
            import logging
            logging.warning(error)
            if cls._metrics:
                cls._metrics.record_validation_error(key, error)
            return default

        if cls._metrics:
            cls._metrics.record_env_load(key, True, value, default)

        return value

    @classmethod
    def _safe_str(cls, key: str, default: str) -> str:
        """Safely get string from environment."""
        cls._init_metrics()

        value = os.getenv(key, default)
        from_env = key in os.environ

        if cls._metrics:
            cls._metrics.record_env_load(key, from_env, value, default)

        return value

    @classmethod
    def _safe_path(cls, key: str, default: Optional[Path]) -> Optional[Path]:
        """Read a filesystem path; relative paths resolve against PROJECT_ROOT."""
        cls._init_metrics()

        raw_value = os.getenv(key)
        if not raw_value:
            if cls._metrics:
                cls._metrics.record_env_load(key, False, default, default)
            return default

        path = Path(raw_value).expanduser()
        if not path.is_absolute():
            path = cls.PROJECT_ROOT / path

        if cls._metrics:
            cls._metrics.record_env_load(key, True, path, default)
        return path

    # =========================================================================
    # Configuration Loading
    # =========================================================================

    @classmethod
    def load(cls) -> None:
        """
        Load all configuration from environment variables with validation.

        Called automatically on module import; call again to pick up
        changed environment variables (tests do this via monkeypatch).
        """
        cls._init_metrics()

        # Environment Configuration
        cls.ENVIRONMENT = Environment.from_string(
            cls._safe_str("ENVIRONMENT", "development")
        ).value
        cls.DEBUG = bool(cls._safe_bool("DEBUG", False))
        cls.LOG_LEVEL = cls._safe_str("LOG_LEVEL", "INFO").upper()
        cls.LOG_JSON = cls._safe_bool("LOG_JSON", None)
        cls.LOG_COLORS = bool(cls._safe_bool("LOG_COLORS", True))
        cls.LOG_TO_FILE = bool(cls._safe_bool("LOG_TO_FILE", False))
        cls.LOGS_DIR = cls._safe_path("LOGS_DIR", cls.PROJECT_ROOT / "logs")

        # Progress Engine
        cls.STREAK_TIMEZONE = cls._safe_str("STREAK_TIMEZONE", "UTC")
        cls.ACHIEVEMENTS_FILE = cls._safe_path("ACHIEVEMENTS_FILE", None)

        if cls._metrics:
            from datetime import datetime, timezone
            cls._metrics.last_reload = datetime.now(timezone.utc).isoformat()

    @classmethod
    def validate(cls) -> None:
        """
        Validate configuration values on startup.

        Invalid values are replaced by defaults and logged. Nothing here can
        fail outside production.
        """
        if cls._validated:
            return

        import logging
        logger = logging.getLogger(__name__)
        cls._init_metrics()

        try:
            cls.load()

            if cls.LOG_LEVEL not in VALID_LOG_LEVELS:
                logger.warning(f"Invalid LOG_LEVEL '{cls.LOG_LEVEL}', using INFO")
                cls.LOG_LEVEL = "INFO"

            from zoneinfo import ZoneInfo, ZoneInfoNotFoundError
            try:
                ZoneInfo(cls.STREAK_TIMEZONE)
            except (ZoneInfoNotFoundError, ValueError):
                logger.warning(
                    f"Unknown STREAK_TIMEZONE '{cls.STREAK_TIMEZONE}', using UTC"
                )
                cls.STREAK_TIMEZONE = "UTC"

            if cls.ACHIEVEMENTS_FILE is not None and not cls.ACHIEVEMENTS_FILE.is_file():
                from devshelf.core.exceptions import ConfigurationError
                raise ConfigurationError(
                    "ACHIEVEMENTS_FILE",
                    f"Achievement file not found: {cls.ACHIEVEMENTS_FILE}",
                )

            if cls.is_production() and cls.DEBUG:
                logger.warning("DEBUG mode enabled in production!")

            cls._validated = True

            if cls._metrics:
                logger.info(f"Configuration loaded: {cls._metrics.get_summary()}")
                if cls._metrics.validation_errors:
                    logger.warning(
                        f"Configuration warnings: {cls._metrics.validation_errors}"
                    )

        except Exception as e:
            logger.warning(f"Config validation warning: {e}")
            if cls.is_production():
                logger.error("Configuration validation failed in production!")
                raise

    @classmethod
    def reset(cls) -> None:
        """Forget validation state and reload from the environment."""
        cls._metrics = None
        cls._validated = False
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
        >>> Config.get_config_summary()["streak_timezone"]
        'UTC'
        """
        return {
            "environment": cls.ENVIRONMENT,
            "debug": cls.DEBUG,
            "log_level": cls.LOG_LEVEL,
            "log_to_file": cls.LOG_TO_FILE,
            "app_version": cls.APP_VERSION,
            "streak_timezone": cls.STREAK_TIMEZONE,
            "achievements_file": str(cls.ACHIEVEMENTS_FILE) if cls.ACHIEVEMENTS_FILE else None,
        }


# Auto-validate on import
Config.validate()
