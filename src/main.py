"""
Launcher Sentinel - Application Entry Point
============================================

- Config validation
- Bot construction
- Gateway connection
- Graceful shutdown
"""

import asyncio
import signal
import sys

import discord

from src.bot.sentinel_bot import SentinelBot
from src.core.config.config import Config
from src.core.config.errors import ConfigError
from src.core.logging.logger import get_logger, shutdown_logging

logger = get_logger(__name__)


# ============================================================================
# Application Bootstrap
# ============================================================================

def _startup() -> SentinelBot:
    """Validate configuration and build the bot. Errors here are fatal."""
    logger.info("========== LAUNCHER SENTINEL INITIALIZATION START ==========")

    try:
        Config.validate()
        logger.info("✓ Configuration validated", extra=Config.get_config_summary())
    except ConfigError as exc:
        logger.critical(f"Configuration validation failed: {exc}")
        raise

    bot = SentinelBot()
    logger.info("✓ Bot initialized")
    return bot


async def _shutdown(bot: SentinelBot | None) -> None:
    """Gracefully shut down the bot (which stops the poller first)."""
    logger.info("========== LAUNCHER SENTINEL SHUTDOWN START ==========")

    if bot and not bot.is_closed():
        try:
            await bot.close()
            logger.info("✓ Bot closed")
        except Exception as exc:
            logger.error(f"Error while closing bot: {exc}", exc_info=True)

    logger.info("========== SHUTDOWN COMPLETE ==========")


# ============================================================================
# Application Entrypoint
# ============================================================================

async def main() -> None:
    """
    Launcher Sentinel entry point.

    Lifecycle:
        1. Validate configuration
        2. Start bot (the poller starts on the first ready event)
        3. Handle shutdown gracefully
    """
    bot: SentinelBot | None = None

    try:
        bot = _startup()

        logger.info("Starting Launcher Sentinel Discord bot...")
        await bot.start(Config.DISCORD_TOKEN)

    except asyncio.CancelledError:
        logger.warning("Asyncio task cancellation received; shutting down gracefully.")
        raise

    except discord.LoginFailure as exc:
        logger.critical(f"Discord login failed: {exc}")
        sys.exit(1)

    except ConfigError:
        sys.exit(1)

    except Exception as exc:
        logger.critical(f"Fatal startup error: {exc}", exc_info=True)
        sys.exit(1)

    finally:
        await _shutdown(bot)


def _install_signal_handlers(loop: asyncio.AbstractEventLoop, main_task: asyncio.Task) -> None:
    """Cancel the main task on SIGTERM so ``main()`` runs its shutdown path."""
    try:
        loop.add_signal_handler(signal.SIGTERM, main_task.cancel)
        logger.debug("SIGTERM handler installed")
    except NotImplementedError:
        logger.debug("SIGTERM not supported on this platform (likely Windows)")


def run() -> None:
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    main_task = loop.create_task(main())
    _install_signal_handlers(loop, main_task)

    try:
        loop.run_until_complete(main_task)
    except KeyboardInterrupt:
        logger.info("Bot manually stopped via keyboard interrupt.")
        main_task.cancel()
        try:
            loop.run_until_complete(main_task)
        except asyncio.CancelledError:
            pass
    except asyncio.CancelledError:
        logger.info("Bot stopped by signal.")
    finally:
        loop.close()
        logger.info("Event loop closed.")
        shutdown_logging()


if __name__ == "__main__":
    run()
