"""
Bot Lifecycle Management for Launcher Sentinel

Purpose
-------
Hold the state shared by the bot's event handlers: the readiness gate, the
owned status-poller handle, and runtime metrics. This separates lifecycle
concerns from Discord event wiring.

Responsibilities
----------------
- Start the status poller exactly once, however many times ``on_ready`` fires
- Keep an explicit handle to the poller task so shutdown can stop it
- Track runtime metrics (ready events, messages, pings, failed replies)
- Graceful shutdown of the poller and its HTTP session

Non-Responsibilities
--------------------
- Discord event handling (handled by SentinelBot)
- Health classification and presence text (handled by src.core.status)

Architecture Notes
------------------
- ReadinessGate is the only synchronization point between ready events.
- The poller captures ``bot.change_presence`` once when it is built.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Dict, Optional

from src.core.config.config import Config
from src.core.logging.logger import get_logger
from src.core.status.checker import HealthChecker
from src.core.status.gate import ReadinessGate
from src.core.status.poller import StatusPoller
from src.core.status.publisher import PresencePublisher

if TYPE_CHECKING:
    from discord.ext import commands

logger = get_logger(__name__)


@dataclass
class BotMetrics:
    """Runtime metrics for bot operations."""

    ready_events: int = 0
    messages_seen: int = 0
    pings_answered: int = 0
    replies_failed: int = 0
    commands_executed: int = 0
    commands_failed: int = 0


class BotLifecycle:
    """
    Owns the readiness gate and the single status poller.

    Parameters
    ----------
    bot : commands.Bot
        The Discord bot whose presence the poller updates.
    checker : HealthChecker, optional
        Injected checker; built from Config when omitted.
    """

    def __init__(
        self,
        bot: "commands.Bot",
        checker: Optional[HealthChecker] = None,
        interval_seconds: Optional[float] = None,
    ) -> None:
        self.bot = bot
        self.metrics = BotMetrics()
        self.gate = ReadinessGate()
        self.poller: Optional[StatusPoller] = None
        self._is_shutting_down = False

        self._checker = checker
        self._interval_seconds = (
            interval_seconds if interval_seconds is not None else Config.POLL_INTERVAL_SECONDS
        )

        logger.info(
            "BotLifecycle initialized",
            extra={
                "health_check_url": Config.HEALTH_CHECK_URL,
                "poll_interval_seconds": self._interval_seconds,
            },
        )

    # ════════════════════════════════════════════════════════════════════════
    # STATUS POLLING
    # ════════════════════════════════════════════════════════════════════════

    def start_status_polling(self) -> bool:
        """
        Start the poller if this call wins the readiness gate.

        Returns
        -------
        bool
            True if this call spawned the poller, False on every later call.
        """
        self.metrics.ready_events += 1

        if self._is_shutting_down:
            logger.debug("Ignoring ready event during shutdown")
            return False

        if not self.gate.try_start():
            logger.debug(
                "Status poller already running; ready event ignored",
                extra={"ready_events": self.metrics.ready_events},
            )
            return False

        if self._checker is None:
            self._checker = HealthChecker(
                Config.HEALTH_CHECK_URL,
                timeout_seconds=Config.HEALTH_CHECK_TIMEOUT_SECONDS,
            )

        self.poller = StatusPoller(
            checker=self._checker,
            publisher=PresencePublisher(self.bot.change_presence, Config.SERVICE_NAME),
            interval_seconds=self._interval_seconds,
        )
        self.poller.start()
        return True

    @property
    def poller_task(self) -> Optional["asyncio.Task[None]"]:
        return self.poller.task if self.poller else None

    # ════════════════════════════════════════════════════════════════════════
    # SHUTDOWN
    # ════════════════════════════════════════════════════════════════════════

    async def shutdown(self) -> None:
        """Stop the poller and release its HTTP session."""
        if self._is_shutting_down:
            logger.warning("Shutdown already in progress")
            return

        self._is_shutting_down = True
        logger.info("Starting graceful shutdown")

        if self.poller is not None:
            await self.poller.stop(timeout=Config.POLLER_STOP_TIMEOUT_SECONDS)

        if self._checker is not None:
            try:
                await self._checker.close()
            except Exception as exc:
                logger.error(
                    "Error closing health checker session",
                    extra={"error": str(exc), "error_type": type(exc).__name__},
                    exc_info=True,
                )

        logger.info("Graceful shutdown complete")

    # ════════════════════════════════════════════════════════════════════════
    # METRICS
    # ════════════════════════════════════════════════════════════════════════

    def get_metrics_snapshot(self) -> Dict[str, Any]:
        """Snapshot of bot counters plus the poller's last result."""
        snapshot: Dict[str, Any] = {
            "ready_events": self.metrics.ready_events,
            "messages_seen": self.metrics.messages_seen,
            "pings_answered": self.metrics.pings_answered,
            "replies_failed": self.metrics.replies_failed,
            "commands_executed": self.metrics.commands_executed,
            "commands_failed": self.metrics.commands_failed,
            "poller_started": self.gate.started,
            "poller_running": bool(self.poller and self.poller.is_running),
        }

        if self.poller is not None:
            poller_metrics = self.poller.metrics
            last = poller_metrics.last_result
            snapshot.update(
                {
                    "poll_cycles_completed": poller_metrics.cycles_completed,
                    "poll_cycles_failed": poller_metrics.cycles_failed,
                    "presence_failures": poller_metrics.presence_failures,
                    "last_status": last.status.value if last else None,
                    "last_status_code": last.status_code if last else None,
                    "last_latency_ms": round(last.latency_ms, 2) if last else None,
                }
            )

        return snapshot
