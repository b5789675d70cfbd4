"""
StarSync - Application Entry Point
==================================

Bootstrap
---------
- Config validation
- Database initialization
- Bot construction (builds the service container)
- Bot lifecycle management
- Graceful shutdown

Run with ``python -m starsync.main``.
"""

import asyncio
import signal
import sys

from starsync.bot.starsync_bot import StarSyncBot
from starsync.core.config.config import Config
from starsync.core.database.service import DatabaseService
from starsync.core.logging.logger import get_logger, shutdown_logging

logger = get_logger(__name__)


# ============================================================================
# Application Bootstrap
# ============================================================================

async def _startup() -> StarSyncBot:
    """Initialize infrastructure before launching the bot."""
    logger.info("========== STARSYNC INITIALIZATION START ==========")

    # Step 1: Validate configuration early
    try:
        Config.validate()
        logger.info("✓ Configuration validated")
    except Exception as exc:
        logger.critical(f"Configuration validation failed: {exc}")
        raise

    # Step 2: Claims database
    try:
        await DatabaseService.initialize()
        logger.info("✓ Database service initialized")
    except Exception as exc:
        logger.critical(f"Database initialization failed: {exc}", exc_info=True)
        raise

    # Step 3: Bot and its services
    try:
        bot = StarSyncBot()
        logger.info("✓ Bot initialized")
    except Exception as exc:
        logger.critical(f"Bot initialization failed: {exc}", exc_info=True)
        raise

    logger.info(
        "========== INFRASTRUCTURE INITIALIZED SUCCESSFULLY ==========",
        extra=Config.get_config_summary(),
    )
    return bot


# ============================================================================
# Application Shutdown
# ============================================================================

async def _shutdown(bot: StarSyncBot | None) -> None:
    """Gracefully shut down the bot and infrastructure services."""
    logger.info("========== STARSYNC SHUTDOWN START ==========")

    # Step 1: Close bot if active (stops the poll loop and HTTP session)
    if bot and not bot.is_closed():
        try:
            await bot.close()
            logger.info("✓ Bot closed")
        except Exception as exc:
            logger.error(f"Error while closing bot: {exc}", exc_info=True)

    # Step 2: Shutdown database
    try:
        await DatabaseService.shutdown()
        logger.info("✓ Database service shut down")
    except Exception as exc:
        logger.error(f"Database service shutdown error: {exc}", exc_info=True)

    logger.info("========== SHUTDOWN COMPLETE ==========")


# ============================================================================
# Application Entrypoint
# ============================================================================

async def main() -> None:
    """
    StarSync entry point.

    Lifecycle:
        1. Validate configuration
        2. Initialize the claims database
        3. Start bot (the poll loop starts once the gateway is ready)
        4. Handle shutdown gracefully
    """
    bot: StarSyncBot | None = None

    try:
        bot = await _startup()

        logger.info("Starting StarSync Discord bot...")
        await bot.start(Config.DISCORD_TOKEN)

    except asyncio.CancelledError:
        logger.warning("Asyncio task cancellation received; shutting down gracefully.")
        raise

    except KeyboardInterrupt:
        logger.info("Manual shutdown via keyboard interrupt.")

    except Exception as exc:
        logger.critical(f"Fatal startup error: {exc}", exc_info=True)
        sys.exit(1)

    finally:
        await _shutdown(bot)


# ============================================================================
# Process Startup
# ============================================================================

def _install_signal_handlers(loop: asyncio.AbstractEventLoop) -> None:
    try:
        loop.add_signal_handler(signal.SIGTERM, loop.stop)
        logger.debug("SIGTERM handler installed")
    except NotImplementedError:
        logger.debug("SIGTERM not supported on this platform (likely Windows)")


def run() -> None:
    """Console script target."""
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    _install_signal_handlers(loop)

    try:
        loop.run_until_complete(main())
    except KeyboardInterrupt:
        logger.info("Bot manually stopped via keyboard interrupt.")
    except Exception as exc:
        logger.critical(f"Startup failure: {exc}", exc_info=True)
        sys.exit(1)
    finally:
        loop.close()
        logger.info("Event loop closed.")
        shutdown_logging()


if __name__ == "__main__":
    run()
