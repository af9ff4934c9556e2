"""
Configuration error hierarchy for Launcher Sentinel.

Purpose
-------
Provides exceptions for configuration failures that must stop the process
before the bot connects to the gateway.

Exception Hierarchy
-------------------
ConfigError (base)
└── ConfigValidationError (missing or malformed values)
"""


class ConfigError(Exception):
    """
    Base exception for all configuration-related errors.

    Example
    -------
    >>> try:
    ...     Config.validate()
    ... except ConfigError as e:
    ...     logger.critical(f"Cannot start: {e}")
    """


class ConfigValidationError(ConfigError):
    """
    Raised when configuration validation fails.

    This exception is raised when:
    - DISCORD_TOKEN is not set
    - HEALTH_CHECK_URL is not an absolute http(s) URL
    """


__all__ = [
    "ConfigError",
    "ConfigValidationError",
]
