"""
Launcher status polling.

Leaf-first: ``models`` (HealthStatus, activity text) -> ``gate`` (one-time
start flag) -> ``checker`` (HTTP classification) -> ``publisher`` (presence)
-> ``poller`` (the background loop).
"""

from src.core.status.checker import HealthChecker, classify_status_code
from src.core.status.gate import ReadinessGate
from src.core.status.models import HealthCheckResult, HealthStatus, activity_text
from src.core.status.poller import PollerMetrics, PollerState, StatusPoller
from src.core.status.publisher import PresencePublisher

__all__ = [
    "HealthStatus",
    "HealthCheckResult",
    "activity_text",
    "ReadinessGate",
    "HealthChecker",
    "classify_status_code",
    "PresencePublisher",
    "StatusPoller",
    "PollerState",
    "PollerMetrics",
]
