"""
Configuration subsystem for Launcher Sentinel.

Static configuration is loaded from environment variables (``.env`` supported)
and validated once at startup.

Usage
-----
```python
from src.core.config import Config

Config.validate()
url = Config.HEALTH_CHECK_URL
interval = Config.POLL_INTERVAL_SECONDS
```
"""

from src.core.config.config import Config, Environment
from src.core.config.errors import ConfigError, ConfigValidationError

__all__ = [
    "Config",
    "Environment",
    "ConfigError",
    "ConfigValidationError",
]
