"""
Readiness gate guarding the one-time start of the status poller.

``on_ready`` fires on every gateway (re)connection and may be delivered in
quick succession, so the check and the set happen under one lock.
"""

from __future__ import annotations

import threading


class ReadinessGate:
    """
    A shared boolean that flips from False to True at most once.

    >>> gate = ReadinessGate()
    >>> gate.try_start()
    True
    >>> gate.try_start()
    False
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._started = False

    def try_start(self) -> bool:
        """Return True for exactly one caller, the one that must spawn the poller."""
        with self._lock:
            if self._started:
                return False
            self._started = True
            return True

    @property
    def started(self) -> bool:
        with self._lock:
            return self._started
