"""
Core infrastructure layer for Launcher Sentinel.

- Configuration (``src.core.config``): static, environment-driven settings
- Logging (``src.core.logging``): structured logging and LogContext
- Status (``src.core.status``): launcher health checks and the presence poller

Submodules are imported directly; this package performs no imports so that
``src.core.config`` can load before logging is configured.
"""
