"""
Static configuration management for Launcher Sentinel.

Purpose
-------
Provides centralized static configuration loaded from environment variables
with sensible defaults, type validation, and bounds checking. Every value is
set once at process startup; nothing here changes while the bot is running.

Responsibilities
----------------
- Load configuration from environment variables with .env support
- Provide type-safe access to all static configuration values
- Validate critical settings on startup (token, health-check URL, prefix)
- Track which values came from the environment versus defaults

Non-Responsibilities
--------------------
- Secrets management (use environment variables)
- Runtime reconfiguration (restart the process instead)

Architecture Notes
------------------
- Singleton pattern via class attributes (no instantiation)
- ``Config.load()`` runs on module import so attributes are populated for tests
- ``Config.validate()`` is the startup gate called by ``src.main``

Environment Variables
---------------------
Required:
- DISCORD_TOKEN: Bot authentication token

Optional (with defaults):
- COMMAND_PREFIX: Prefix for routed commands (default: "~")
- INLINE_PING_TOKEN: Literal message answered inline (default: "!ping")
- PING_REPLY: Reply to both ping paths (default: "Pong!")
- SERVICE_NAME: Name shown in the presence text (default: "Blue Protocol")
- HEALTH_CHECK_URL: Endpoint polled for launcher status
- HEALTH_CHECK_TIMEOUT_SECONDS: Total timeout of one check (default: 10)
- POLL_INTERVAL_SECONDS: Delay between checks (default: 10)
- POLLER_STOP_TIMEOUT_SECONDS: Grace period when stopping the poller (default: 5)
- ENVIRONMENT: Environment type (default: development)
- LOG_LEVEL: Logging level (default: INFO)
- LOG_JSON: Force JSON console logs (default: production only)
"""

import logging
import os
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional
from urllib.parse import urlparse

from dotenv import load_dotenv

from src.core.config.errors import ConfigValidationError

# Load environment variables from .env file
load_dotenv()


class Environment(Enum):
    """Deployment environment types."""

    DEVELOPMENT = "development"
    TESTING = "testing"
    STAGING = "staging"
    PRODUCTION = "production"

    @classmethod
    def from_string(cls, value: str) -> "Environment":
        """
        Parse environment string safely with fallback.

        >>> Environment.from_string("PRODUCTION") == Environment.PRODUCTION
        True
        >>> Environment.from_string("nope") == Environment.DEVELOPMENT
        True
        """
        try:
            return cls(value.lower())
        except ValueError:
            # Structured logger is not initialized yet during bootstrap
            logging.warning(f"Unknown environment '{value}', defaulting to development")
            return cls.DEVELOPMENT


# ============================================================================
# Configuration Metrics Tracker
# ============================================================================


class _ConfigLoadMetrics:
    """Tracks which values came from the environment and any validation errors."""

    def __init__(self):
        self.env_vars_loaded: Dict[str, bool] = {}
        self.validation_errors: Dict[str, str] = {}
        self.defaults_used: Dict[str, Any] = {}
        self.last_reload: Optional[str] = None

    def record_env_load(self, key: str, from_env: bool, default: Any):
        self.env_vars_loaded[key] = from_env
        if not from_env:
            self.defaults_used[key] = default

    def record_validation_error(self, key: str, error: str):
        self.validation_errors[key] = error

    def get_summary(self) -> Dict[str, Any]:
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
    Centralized static configuration for the Launcher Sentinel bot.

    Usage
    -----
    >>> token = Config.DISCORD_TOKEN
    >>> url = Config.HEALTH_CHECK_URL
    >>> if Config.is_production():
    ...     logger.info("Running in production mode")
    """

    _metrics: Optional[_ConfigLoadMetrics] = None
    _validated: bool = False

    # =========================================================================
    # Discord Configuration
    # =========================================================================

    DISCORD_TOKEN: str = ""
    COMMAND_PREFIX: str = "~"
    INLINE_PING_TOKEN: str = "!ping"
    PING_REPLY: str = "Pong!"

    # =========================================================================
    # Launcher Health Polling
    # =========================================================================

    SERVICE_NAME: str = "Blue Protocol"
    HEALTH_CHECK_URL: str = "https://api-bnolauncher.bandainamco-ol.jp"
    HEALTH_CHECK_TIMEOUT_SECONDS: float = 10.0
    POLL_INTERVAL_SECONDS: float = 10.0
    POLLER_STOP_TIMEOUT_SECONDS: float = 5.0

    # =========================================================================
    # Environment Configuration
    # =========================================================================

    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"
    LOG_JSON: Optional[bool] = None

    PROJECT_ROOT = Path(__file__).resolve().parents[3]
    LOGS_DIR = PROJECT_ROOT / "logs"

    # =========================================================================
    # Bot Metadata
    # =========================================================================

    BOT_NAME: str = "Launcher Sentinel"
    BOT_VERSION: str = "1.0.0"
    BOT_DESCRIPTION: str = "Mirrors the game launcher status into the bot presence"

    # =========================================================================
    # Helper Methods
    # =========================================================================

    @classmethod
    def _init_metrics(cls):
        if cls._metrics is None:
            cls._metrics = _ConfigLoadMetrics()

    @classmethod
    def _reject(cls, key: str, error: str) -> None:
        logging.warning(error)
        if cls._metrics:
            cls._metrics.record_validation_error(key, error)

    @classmethod
    def _safe_float(
        cls,
        key: str,
        default: float,
        min_val: Optional[float] = None,
        max_val: Optional[float] = None,
    ) -> float:
        """
        Safely parse a float from the environment with bounds checking.

        Out-of-range or unparsable values fall back to ``default`` and are
        recorded as validation errors.

        >>> Config._safe_float("POLL_INTERVAL_SECONDS", 10.0, min_val=1.0)
        10.0
        """
        cls._init_metrics()

        raw_value = os.getenv(key)
        if raw_value is None:
            if cls._metrics:
                cls._metrics.record_env_load(key, False, default)
            return default

        try:
            value = float(raw_value)
        except ValueError:
            cls._reject(key, f"{key}='{raw_value}' is not a valid number, using default {default}")
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
    def _safe_bool(cls, key: str, default: Optional[bool]) -> Optional[bool]:
        """
        Safely parse boolean from environment.

        Recognizes: true/false, yes/no, 1/0, on/off (case-insensitive).
        """
        cls._init_metrics()

        raw_value = os.getenv(key)
        if raw_value is None:
            if cls._metrics:
                cls._metrics.record_env_load(key, False, default)
            return default

        normalized = raw_value.lower().strip()
        if normalized in {"true", "yes", "1", "on"}:
            value = True
        elif normalized in {"false", "no", "0", "off"}:
            value = False
        else:
            cls._reject(key, f"{key}='{raw_value}' is not a valid boolean, using default {default}")
            return default

        if cls._metrics:
            cls._metrics.record_env_load(key, True, default)
        return value

    @classmethod
    def _safe_str(cls, key: str, default: str, required: bool = False) -> str:
        cls._init_metrics()

        value = os.getenv(key, default)
        if cls._metrics:
            cls._metrics.record_env_load(key, key in os.environ, default)

        if required and not value:
            error = f"Required environment variable {key} is not set"
            logging.error(error)
            if cls._metrics:
                cls._metrics.record_validation_error(key, error)

        return value

    # =========================================================================
    # Configuration Loading
    # =========================================================================

    @classmethod
    def load(cls) -> None:
        """
        Load all configuration from environment variables.

        Called on module import; call again after changing the environment
        (tests do this through ``monkeypatch``).
        """
        cls._metrics = _ConfigLoadMetrics()
        cls._validated = False

        # Discord
        cls.DISCORD_TOKEN = cls._safe_str("DISCORD_TOKEN", "", required=True)
        cls.COMMAND_PREFIX = cls._safe_str("COMMAND_PREFIX", "~")
        cls.INLINE_PING_TOKEN = cls._safe_str("INLINE_PING_TOKEN", "!ping")
        cls.PING_REPLY = cls._safe_str("PING_REPLY", "Pong!")

        # Launcher health polling
        cls.SERVICE_NAME = cls._safe_str("SERVICE_NAME", "Blue Protocol")
        cls.HEALTH_CHECK_URL = cls._safe_str(
            "HEALTH_CHECK_URL", "https://api-bnolauncher.bandainamco-ol.jp"
        )
        cls.HEALTH_CHECK_TIMEOUT_SECONDS = cls._safe_float(
            "HEALTH_CHECK_TIMEOUT_SECONDS", 10.0, min_val=0.5, max_val=120.0
        )
        cls.POLL_INTERVAL_SECONDS = cls._safe_float(
            "POLL_INTERVAL_SECONDS", 10.0, min_val=1.0, max_val=3600.0
        )
        cls.POLLER_STOP_TIMEOUT_SECONDS = cls._safe_float(
            "POLLER_STOP_TIMEOUT_SECONDS", 5.0, min_val=0.1, max_val=60.0
        )

        # Environment
        cls.ENVIRONMENT = cls._safe_str("ENVIRONMENT", "development")
        cls.LOG_LEVEL = cls._safe_str("LOG_LEVEL", "INFO")
        cls.LOG_JSON = cls._safe_bool("LOG_JSON", None)

        cls._metrics.last_reload = datetime.now(timezone.utc).isoformat()

    @classmethod
    def validate(cls) -> None:
        """
        Validate critical configuration values on startup.

        Raises
        ------
        ConfigValidationError
            If the Discord token is missing or the health-check URL is not an
            absolute http(s) URL, or if the command prefix would
            also route the inline ping token.
        """
        if cls._validated:
            return

        logger = logging.getLogger(__name__)
        cls.load()

        if not cls.DISCORD_TOKEN:
            raise ConfigValidationError("DISCORD_TOKEN environment variable is required")

        parsed = urlparse(cls.HEALTH_CHECK_URL)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ConfigValidationError(
                f"HEALTH_CHECK_URL must be an absolute http(s) URL, got '{cls.HEALTH_CHECK_URL}'"
            )

        # The inline token is answered before routing; a routed match would reply twice.
        if cls.INLINE_PING_TOKEN.startswith(cls.COMMAND_PREFIX):
            raise ConfigValidationError(
                f"COMMAND_PREFIX '{cls.COMMAND_PREFIX}' would route INLINE_PING_TOKEN "
                f"'{cls.INLINE_PING_TOKEN}' as a command"
            )

        valid_log_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if cls.LOG_LEVEL.upper() not in valid_log_levels:
            logger.warning(f"Invalid LOG_LEVEL '{cls.LOG_LEVEL}', using INFO")
            cls.LOG_LEVEL = "INFO"

        if cls.HEALTH_CHECK_TIMEOUT_SECONDS > cls.POLL_INTERVAL_SECONDS:
            logger.warning(
                "Health check timeout exceeds poll interval; cycles will run back to back",
                extra={
                    "timeout_seconds": cls.HEALTH_CHECK_TIMEOUT_SECONDS,
                    "interval_seconds": cls.POLL_INTERVAL_SECONDS,
                },
            )

        cls._validated = True

        if cls._metrics:
            logger.info(f"Configuration loaded: {cls._metrics.get_summary()}")
            if cls._metrics.validation_errors:
                logger.warning(f"Configuration warnings: {cls._metrics.validation_errors}")

    # =========================================================================
    # Environment Checks
    # =========================================================================

    @classmethod
    def environment(cls) -> Environment:
        return Environment.from_string(cls.ENVIRONMENT)

    @classmethod
    def is_production(cls) -> bool:
        """Check if running in production environment."""
        return cls.environment() is Environment.PRODUCTION

    # =========================================================================
    # Metrics & Summary
    # =========================================================================

    @classmethod
    def get_metrics(cls) -> Optional[_ConfigLoadMetrics]:
        return cls._metrics

    @classmethod
    def get_config_summary(cls) -> Dict[str, Any]:
        """
        Get non-sensitive configuration summary for debugging.

        The token itself is never included, only whether it is set.
        """
        return {
            "environment": cls.ENVIRONMENT,
            "log_level": cls.LOG_LEVEL,
            "command_prefix": cls.COMMAND_PREFIX,
            "service_name": cls.SERVICE_NAME,
            "health_check_url": cls.HEALTH_CHECK_URL,
            "health_check_timeout_seconds": cls.HEALTH_CHECK_TIMEOUT_SECONDS,
            "poll_interval_seconds": cls.POLL_INTERVAL_SECONDS,
            "bot_version": cls.BOT_VERSION,
            "discord_token_set": bool(cls.DISCORD_TOKEN),
        }


Config.load()
