"""
Launcher status value types.

``HealthStatus`` is deliberately binary: a clean HTTP 200 is ``UP`` and every
other outcome, including network failures, is ``DOWN``. The launcher's
maintenance payload cannot be told apart from a genuine outage, so no third
state exists.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class HealthStatus(Enum):
    """Binary launcher health tag."""

    UP = "Up"
    DOWN = "Down"


@dataclass(frozen=True)
class HealthCheckResult:
    """Outcome of a single health check."""

    status: HealthStatus
    status_code: Optional[int] = None
    latency_ms: float = 0.0
    error: Optional[str] = None
    checked_at: float = field(default_factory=time.time)

    @property
    def is_up(self) -> bool:
        return self.status is HealthStatus.UP


def activity_text(service_name: str, status: HealthStatus) -> str:
    """Presence string shown next to the bot, e.g. ``"Blue Protocol is Up!"``."""
    return f"{service_name} is {status.value}!"
