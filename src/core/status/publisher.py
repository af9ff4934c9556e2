"""Mirror a HealthStatus into the bot's Discord presence."""

from __future__ import annotations

from typing import Any, Awaitable, Callable, Optional

import discord

from src.core.logging.logger import get_logger
from src.core.status.models import HealthStatus, activity_text

logger = get_logger(__name__)

PresenceSetter = Callable[..., Awaitable[Any]]


class PresencePublisher:
    """
    Turns a status into a "Playing <Service> is Up!" activity.

    ``change_presence`` is the gateway client's bound method, captured once
    when the poller is built and reused for the life of the process.
    """

    def __init__(self, change_presence: PresenceSetter, service_name: str) -> None:
        self._change_presence = change_presence
        self.service_name = service_name
        self.last_activity: Optional[str] = None

    async def publish(self, status: HealthStatus) -> bool:
        """Set the presence. Returns False (and logs) if the gateway call fails."""
        text = activity_text(self.service_name, status)

        try:
            await self._change_presence(activity=discord.Game(name=text))
        except Exception as exc:
            logger.warning(
                "Failed to update presence",
                extra={"activity": text, "error": str(exc), "error_type": type(exc).__name__},
            )
            return False

        if text != self.last_activity:
            logger.info("Presence updated", extra={"activity": text})
        self.last_activity = text
        return True
