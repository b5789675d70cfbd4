"""
Event-end nickname reset.

Logs in once, strips the star suffix from every claimed member in every
guild and exits. Run after the last puzzle day::

    python -m starsync.event_end

Exit code is 0 when the pass completed (individual member failures are
logged, not fatal) and 1 when configuration, the database or the Discord
login failed.
"""

import asyncio
import sys
from typing import List, Optional

import discord

from starsync.core.config.config import Config
from starsync.core.database.service import DatabaseService
from starsync.core.logging.logger import LogContext, get_logger, shutdown_logging
from starsync.modules.claims.repository import SqlClaimStore
from starsync.modules.leaderboard.snapshot import SnapshotStore
from starsync.modules.nickname.service import NicknameService, UpdateOutcome, UpdateResult

logger = get_logger(__name__)


class EventEndClient(discord.Client):
    """Minimal gateway client: reset on ready, then disconnect."""

    def __init__(self, nicknames: NicknameService) -> None:
        intents = discord.Intents.default()
        intents.members = True
        intents.guilds = True
        super().__init__(intents=intents)
        self.nicknames = nicknames
        self.results: List[UpdateResult] = []
        self.error: Optional[Exception] = None
        self._done = False

    async def on_ready(self) -> None:
        if self._done:
            return
        self._done = True

        logger.info("Connected as %s, resetting %d guild(s)", self.user, len(self.guilds))
        try:
            async with LogContext(operation="event_end"):
                self.results = await self.nicknames.reset_all(self.guilds)
        except Exception as exc:
            self.error = exc
            logger.error("Nickname reset aborted: %s", exc, exc_info=True)
        finally:
            await self.close()


async def reset_nicknames() -> int:
    """Run the reset pass; returns the process exit code."""
    try:
        Config.validate()
        await DatabaseService.initialize(create_schema=False)
    except Exception as exc:
        logger.critical(f"Startup failed: {exc}", exc_info=True)
        return 1

    client = EventEndClient(NicknameService(SqlClaimStore(), SnapshotStore()))
    try:
        await client.start(Config.DISCORD_TOKEN)
    except discord.LoginFailure as exc:
        logger.critical(f"Discord login failed: {exc}")
        return 1
    finally:
        if not client.is_closed():
            await client.close()
        await DatabaseService.shutdown()

    if client.error is not None:
        return 1

    failed = sum(1 for r in client.results if r.outcome is UpdateOutcome.FAILED)
    logger.info(
        "Event-end reset finished",
        extra={"members": len(client.results), "failed": failed},
    )
    return 0


def main() -> None:
    try:
        code = asyncio.run(reset_nicknames())
    finally:
        shutdown_logging()
    sys.exit(code)


if __name__ == "__main__":
    main()
