"""Shared test doubles and async helpers."""

from __future__ import annotations

import asyncio
from typing import Dict, List, Optional

from src.core.status.models import HealthCheckResult, HealthStatus


class FakeChecker:
    """
    Scriptable stand-in for HealthChecker.

    Returns queued results in order, then repeats the last one. When
    ``block`` is set, ``check()`` waits on ``release`` before returning.
    """

    def __init__(self, results: Optional[List[HealthCheckResult]] = None) -> None:
        self.url = "http://launcher.test/"
        self.results = list(results or [HealthCheckResult(HealthStatus.UP, status_code=200)])
        self.calls = 0
        self.block = False
        self.entered = asyncio.Event()
        self.release = asyncio.Event()
        self.closed = False
        self.raise_on_call: Dict[int, Exception] = {}

    async def check(self) -> HealthCheckResult:
        self.calls += 1
        self.entered.set()
        if self.calls in self.raise_on_call:
            raise self.raise_on_call[self.calls]
        if self.block:
            await self.release.wait()
        index = min(self.calls, len(self.results)) - 1
        return self.results[index]

    async def close(self) -> None:
        self.closed = True


async def wait_until(predicate, timeout: float = 1.0) -> None:
    """Yield to the loop until ``predicate()`` is true, failing after ``timeout``."""

    async def _poll():
        while not predicate():
            await asyncio.sleep(0.001)

    await asyncio.wait_for(_poll(), timeout=timeout)
