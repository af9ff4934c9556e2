"""
Launcher Sentinel Discord Bot - Main Bot Class

Purpose
-------
Discord gateway client and event dispatcher for the launcher status bot.

Responsibilities
----------------
- Discord integration (intents, prefix commands, presence)
- ``on_ready``: start the status poller through BotLifecycle (once only)
- ``on_message``: answer the inline ``!ping`` fast path, then hand the
  message to the command router
- Global error handling for prefix commands
- Graceful shutdown of the poller before the gateway closes

Non-Responsibilities
--------------------
- Health classification and the polling loop (src.core.status)
- Command implementations (feature cogs under src.features)
- Process bootstrap and credential loading (src.main)

Architecture Notes
------------------
- Event handlers never await the poller; the poller is its own task.
- Every reply failure is logged and swallowed so one bad message cannot
  affect the next.
"""

from __future__ import annotations

import time
from typing import Optional

import discord
from discord.ext import commands

from src.bot.lifecycle import BotLifecycle
from src.bot.loader import load_all_features
from src.core.config.config import Config
from src.core.logging.logger import LogContext, get_logger
from src.core.status.checker import HealthChecker

logger = get_logger(__name__)


class SentinelBot(commands.Bot):
    """
    Discord bot that mirrors launcher health into its presence.

    Parameters
    ----------
    checker : HealthChecker, optional
        Injected health checker; built from Config on first ready when omitted.
    interval_seconds : float, optional
        Poll interval override; defaults to ``Config.POLL_INTERVAL_SECONDS``.
    """

    def __init__(
        self,
        checker: Optional[HealthChecker] = None,
        interval_seconds: Optional[float] = None,
    ) -> None:
        intents = discord.Intents.default()
        intents.guild_messages = True
        intents.dm_messages = True
        intents.message_content = True

        super().__init__(
            command_prefix=Config.COMMAND_PREFIX,
            intents=intents,
            help_command=None,
            case_insensitive=True,
            description=Config.BOT_DESCRIPTION,
        )

        self.lifecycle = BotLifecycle(self, checker=checker, interval_seconds=interval_seconds)
        self.inline_ping_token = Config.INLINE_PING_TOKEN
        self.ping_reply = Config.PING_REPLY

        logger.debug("SentinelBot initialized")

    # --------------------------------------------------------------- #
    # Startup
    # --------------------------------------------------------------- #

    async def setup_hook(self) -> None:
        """Load feature cogs before the gateway connection is opened."""
        startup_start = time.perf_counter()

        stats = await load_all_features(self)

        logger.info(
            "✓ Bot setup complete",
            extra={
                "cogs_loaded": stats.get("loaded", 0),
                "cogs_failed": stats.get("failed", 0),
                "setup_time_ms": round((time.perf_counter() - startup_start) * 1000, 2),
            },
        )

    # --------------------------------------------------------------- #
    # Discord Events
    # --------------------------------------------------------------- #

    async def on_ready(self) -> None:
        """Gateway is ready. May fire again on reconnect."""
        logger.info("%s is connected!", getattr(self.user, "name", "unknown"))

        started = self.lifecycle.start_status_polling()
        if started:
            logger.info("Launcher status polling scheduled")

    async def on_message(self, message: discord.Message) -> None:
        """Inline ``!ping`` fast path, then the command router."""
        if self.user is not None and message.author.id == self.user.id:
            return

        self.lifecycle.metrics.messages_seen += 1

        async with LogContext(
            user_id=getattr(message.author, "id", None),
            guild_id=message.guild.id if message.guild else None,
            channel_id=getattr(message.channel, "id", None),
        ):
            logger.debug("Message received", extra={"content_length": len(message.content)})

            if message.content == self.inline_ping_token:
                await self._send_reply(message.channel, self.ping_reply)

            try:
                await self.process_commands(message)
            except Exception as exc:
                logger.error(
                    "Command routing failed",
                    extra={"error": str(exc), "error_type": type(exc).__name__},
                    exc_info=True,
                )

    async def _send_reply(self, channel: discord.abc.Messageable, text: str) -> bool:
        try:
            await channel.send(text)
        except Exception as exc:
            self.lifecycle.metrics.replies_failed += 1
            logger.warning(
                "Error sending message",
                extra={"error": str(exc), "error_type": type(exc).__name__},
            )
            return False

        self.lifecycle.metrics.pings_answered += 1
        return True

    # --------------------------------------------------------------- #
    # Error Handling - Prefix Commands
    # --------------------------------------------------------------- #

    async def on_command_error(self, ctx: commands.Context, error: Exception) -> None:
        """Log command failures; unknown commands are ignored silently."""
        if isinstance(error, commands.CommandNotFound):
            return

        self.lifecycle.metrics.commands_failed += 1
        original = getattr(error, "original", error)

        async with LogContext(
            user_id=ctx.author.id,
            guild_id=ctx.guild.id if ctx.guild else None,
            command=f"prefix:{ctx.command}" if ctx.command else "unknown",
        ):
            logger.error(
                "Unhandled command error",
                extra={
                    "command": str(ctx.command),
                    "error": str(original),
                    "error_type": type(original).__name__,
                },
                exc_info=original,
            )

    async def on_command_completion(self, ctx: commands.Context) -> None:
        self.lifecycle.metrics.commands_executed += 1

    # --------------------------------------------------------------- #
    # Graceful Shutdown
    # --------------------------------------------------------------- #

    async def close(self) -> None:
        """Stop the poller, then close the gateway connection."""
        logger.info("=" * 60)
        logger.info("SENTINEL BOT SHUTDOWN")
        logger.info("=" * 60)

        snapshot = self.lifecycle.get_metrics_snapshot()
        logger.info("Final statistics", extra=snapshot)

        await self.lifecycle.shutdown()
        logger.info("✓ Bot lifecycle shut down")

        await super().close()
        logger.info("✓ Bot shutdown complete")
