"""
General commands for Launcher Sentinel.

Routed through the ``discord.ext.commands`` prefix router (``~`` by default).
The inline ``!ping`` fast path lives in ``SentinelBot.on_message`` and does
not pass through here.
"""

from __future__ import annotations

from discord.ext import commands

from src.core.config.config import Config
from src.core.logging.logger import get_logger
from src.core.status.models import activity_text

logger = get_logger(__name__)

NO_RESULT_YET = "No health check has completed yet."


class GeneralCog(commands.Cog, name="General"):
    """Ping and launcher status commands."""

    def __init__(self, bot: commands.Bot):
        self.bot = bot

    @commands.command(name="ping")
    async def ping(self, ctx: commands.Context) -> None:
        await ctx.reply(Config.PING_REPLY)

    @commands.command(name="status")
    async def status(self, ctx: commands.Context) -> None:
        """Show the most recent launcher check."""
        await ctx.reply(self.describe_last_result())

    def describe_last_result(self) -> str:
        lifecycle = getattr(self.bot, "lifecycle", None)
        poller = lifecycle.poller if lifecycle is not None else None
        result = poller.metrics.last_result if poller is not None else None

        if result is None:
            return NO_RESULT_YET

        line = activity_text(Config.SERVICE_NAME, result.status)
        if result.status_code is not None:
            return f"{line} (HTTP {result.status_code}, {result.latency_ms:.0f}ms)"
        return f"{line} ({result.error or 'no response'})"


async def setup(bot: commands.Bot):
    await bot.add_cog(GeneralCog(bot))
