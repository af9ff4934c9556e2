"""
Bot infrastructure and Discord integration layer for Launcher Sentinel.

Re-exports the bot class and its lifecycle state.

Example
-------
    from src.bot import SentinelBot

    bot = SentinelBot()
    await bot.start(token)
"""

from __future__ import annotations

from src.bot.lifecycle import BotLifecycle, BotMetrics
from src.bot.sentinel_bot import SentinelBot

__all__ = [
    "SentinelBot",
    "BotLifecycle",
    "BotMetrics",
]
