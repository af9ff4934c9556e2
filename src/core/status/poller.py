"""
Launcher Status Poller

Purpose
-------
Own the single background task that checks the launcher endpoint, mirrors the
result into the bot presence, and sleeps for a fixed interval, forever.

Responsibilities
----------------
- Run check -> publish -> wait cycles at a fixed cadence
- Absorb every per-cycle error so the loop never dies on one bad cycle
- Expose an explicit stop signal that interrupts both the health check and
  the wait between cycles
- Keep lightweight metrics; the ``status`` command reads ``last_result``

Non-Responsibilities
--------------------
- Deciding when to start (handled by ReadinessGate via BotLifecycle)
- Retry or backoff (the fixed interval is the only reschedule)

Architecture Notes
------------------
- The wait between cycles is ``asyncio.wait_for(stop_event.wait(), interval)``
  so a stop request wakes the loop immediately instead of after a full interval.
- The health check races the stop event; if stop wins the check is cancelled
  and the cycle ends without touching the presence.
- No lock is held across any await; the loop owns its state exclusively.
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from src.core.logging.logger import LogContext, get_logger
from src.core.status.checker import HealthChecker
from src.core.status.models import HealthCheckResult
from src.core.status.publisher import PresencePublisher

logger = get_logger(__name__)


class PollerState(Enum):
    NOT_STARTED = "not_started"
    RUNNING = "running"
    STOPPED = "stopped"


@dataclass
class PollerMetrics:
    """Runtime counters for the poller loop."""

    loops_entered: int = 0
    cycles_completed: int = 0
    cycles_failed: int = 0
    presence_failures: int = 0
    last_result: Optional[HealthCheckResult] = None
    last_cycle_at: Optional[float] = None


class StatusPoller:
    """
    Periodically checks launcher health and publishes it as bot presence.

    Parameters
    ----------
    checker : HealthChecker
        Classifies the endpoint into UP/DOWN.
    publisher : PresencePublisher
        Forwards the status to the gateway client.
    interval_seconds : float
        Fixed delay between the end of one cycle and the start of the next.
    on_cycle : callable, optional
        Invoked with each ``HealthCheckResult`` after it is published. Used
        as an observation hook in tests.
    """

    def __init__(
        self,
        checker: HealthChecker,
        publisher: PresencePublisher,
        interval_seconds: float = 10.0,
        on_cycle: Optional[Callable[[HealthCheckResult], None]] = None,
    ) -> None:
        self.checker = checker
        self.publisher = publisher
        self.interval_seconds = interval_seconds
        self.on_cycle = on_cycle
        self.metrics = PollerMetrics()
        self.state = PollerState.NOT_STARTED

        self._stop_event = asyncio.Event()
        self._task: Optional["asyncio.Task[None]"] = None

    # --------------------------------------------------------------- #
    # Lifecycle
    # --------------------------------------------------------------- #

    def start(self) -> "asyncio.Task[None]":
        """Spawn the loop as an owned task. A second call returns the same task."""
        if self._task is not None:
            logger.warning("Status poller already started")
            return self._task

        self.state = PollerState.RUNNING
        self._task = asyncio.create_task(self.run(), name="status-poller")
        logger.info(
            "Status poller started",
            extra={"url": self.checker.url, "interval_seconds": self.interval_seconds},
        )
        return self._task

    async def stop(self, timeout: float = 5.0) -> None:
        """Signal the loop to exit and wait for it, cancelling if it overruns."""
        self._stop_event.set()

        task = self._task
        if task is None or task.done():
            self.state = PollerState.STOPPED
            return

        try:
            await asyncio.wait_for(asyncio.shield(task), timeout=timeout)
        except asyncio.TimeoutError:
            logger.warning("Status poller did not stop in time; cancelling", extra={"timeout": timeout})
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass

        self.state = PollerState.STOPPED
        logger.info("Status poller stopped", extra={"cycles_completed": self.metrics.cycles_completed})

    @property
    def task(self) -> Optional["asyncio.Task[None]"]:
        return self._task

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    # --------------------------------------------------------------- #
    # Loop
    # --------------------------------------------------------------- #

    async def run(self) -> None:
        """Loop until the stop event is set. Only cancellation escapes."""
        self.metrics.loops_entered += 1

        with LogContext(component="status_poller"):
            logger.debug("Status poller loop entered")

            while not self._stop_event.is_set():
                await self.run_cycle()

                if await self._wait_for_stop(self.interval_seconds):
                    break

            logger.debug("Status poller loop exited")

    async def run_cycle(self) -> Optional[HealthCheckResult]:
        """
        One check -> publish pass.

        Returns the result, or None if the cycle failed or a stop request
        arrived before the presence was published.
        """
        try:
            result = await self._check_unless_stopped()
            if result is None or self._stop_event.is_set():
                logger.debug("Stop requested mid-cycle; skipping presence update")
                return None
            published = await self.publisher.publish(result.status)
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            self.metrics.cycles_failed += 1
            logger.error(
                "Status poll cycle failed",
                extra={"error": str(exc), "error_type": type(exc).__name__},
                exc_info=True,
            )
            return None

        if not published:
            self.metrics.presence_failures += 1

        self.metrics.cycles_completed += 1
        self.metrics.last_result = result
        self.metrics.last_cycle_at = time.time()

        if self.on_cycle is not None:
            try:
                self.on_cycle(result)
            except Exception as exc:
                logger.warning(
                    "Poll cycle hook raised",
                    extra={"error": str(exc), "error_type": type(exc).__name__},
                )

        return result

    async def _check_unless_stopped(self) -> Optional[HealthCheckResult]:
        """Run the health check, abandoning it if stop is requested first."""
        check = asyncio.ensure_future(self.checker.check())
        stopped = asyncio.ensure_future(self._stop_event.wait())
        try:
            await asyncio.wait({check, stopped}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            pending = [fut for fut in (check, stopped) if not fut.done()]
            for fut in pending:
                fut.cancel()
            if pending:
                await asyncio.gather(*pending, return_exceptions=True)

        if self._stop_event.is_set():
            return None
        return check.result()

    async def _wait_for_stop(self, seconds: float) -> bool:
        """Sleep up to ``seconds``; return True if stop was requested meanwhile."""
        try:
            await asyncio.wait_for(self._stop_event.wait(), timeout=seconds)
        except asyncio.TimeoutError:
            return False
        return True
