"""
Launcher Health Checker

Purpose
-------
Issue one GET against the launcher health endpoint and classify the outcome
into a ``HealthStatus``.

Classification
--------------
- HTTP 200                      -> UP
- any other HTTP status code    -> DOWN
- timeout, DNS, refused, TLS    -> DOWN

The checker never retries; the poller's fixed cadence is the only reschedule.
Only ``asyncio.CancelledError`` escapes ``check()`` so the owning task can be
cancelled.
"""

from __future__ import annotations

import asyncio
import time
from typing import Optional

import aiohttp

from src.core.logging.logger import get_logger
from src.core.status.models import HealthCheckResult, HealthStatus

logger = get_logger(__name__)

SUCCESS_STATUS_CODE = 200


def classify_status_code(status_code: int) -> HealthStatus:
    """Only a clean 200 counts as up. Any other final status code is down."""
    return HealthStatus.UP if status_code == SUCCESS_STATUS_CODE else HealthStatus.DOWN


class HealthChecker:
    """
    Classifies the launcher endpoint as up or down.

    Parameters
    ----------
    url : str
        Endpoint to GET.
    timeout_seconds : float
        Total time allowed for connect plus response headers.
    session : aiohttp.ClientSession, optional
        Shared session. When omitted the checker creates one lazily and owns it.
    """

    def __init__(
        self,
        url: str,
        timeout_seconds: float = 10.0,
        session: Optional[aiohttp.ClientSession] = None,
    ) -> None:
        self.url = url
        self.timeout = aiohttp.ClientTimeout(total=timeout_seconds)
        self._session = session
        self._owns_session = session is None

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=self.timeout)
            self._owns_session = True
        return self._session

    async def check(self) -> HealthCheckResult:
        """Run one health check. Never raises except on cancellation."""
        start_time = time.perf_counter()
        logger.debug("Fetching launcher status", extra={"url": self.url})

        try:
            session = self._get_session()
            async with session.get(self.url, timeout=self.timeout, allow_redirects=True) as resp:
                status_code = resp.status
        except asyncio.CancelledError:
            raise
        except asyncio.TimeoutError:
            return self._down(start_time, f"timed out after {self.timeout.total}s", "TimeoutError")
        except aiohttp.ClientError as exc:
            return self._down(start_time, str(exc) or type(exc).__name__, type(exc).__name__)
        except Exception as exc:
            logger.error(
                "Unexpected error during health check",
                extra={"url": self.url, "error": str(exc), "error_type": type(exc).__name__},
                exc_info=True,
            )
            return self._down(start_time, str(exc), type(exc).__name__)

        latency_ms = (time.perf_counter() - start_time) * 1000
        status = classify_status_code(status_code)

        if status is HealthStatus.UP:
            logger.debug(
                "Launcher is up",
                extra={"status_code": status_code, "latency_ms": round(latency_ms, 2)},
            )
        else:
            logger.info(
                "Launcher is down or under maintenance",
                extra={"status_code": status_code, "latency_ms": round(latency_ms, 2)},
            )

        return HealthCheckResult(status=status, status_code=status_code, latency_ms=latency_ms)

    async def status(self) -> HealthStatus:
        return (await self.check()).status

    def _down(self, start_time: float, error: str, error_type: str) -> HealthCheckResult:
        latency_ms = (time.perf_counter() - start_time) * 1000
        logger.warning(
            "Health check transport failure",
            extra={
                "url": self.url,
                "error": error,
                "error_type": error_type,
                "latency_ms": round(latency_ms, 2),
            },
        )
        return HealthCheckResult(status=HealthStatus.DOWN, latency_ms=latency_ms, error=error)

    async def close(self) -> None:
        """Close the HTTP session if this checker created it."""
        if self._owns_session and self._session is not None and not self._session.closed:
            await self._session.close()
        self._session = None
