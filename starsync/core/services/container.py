"""
Service Container
=================

Builds every domain service once and wires their dependencies. The bot owns
one container and hands it to cogs through their constructors.

Shutdown closes the HTTP session and stops the poll loop; the database
engine is shut down separately by the entry point.
"""

from __future__ import annotations

import time
from typing import Optional

from starsync.core.logging.logger import get_logger
from starsync.modules.claims.repository import SqlClaimStore
from starsync.modules.claims.store import ClaimStore
from starsync.modules.leaderboard.fetcher import LeaderboardFetcher
from starsync.modules.leaderboard.snapshot import SnapshotStore
from starsync.modules.nickname.service import NicknameService
from starsync.modules.roster.service import RosterService
from starsync.modules.sync.reconciler import GuildSource, Reconciler, SnapshotSource
from starsync.modules.sync.runner import PollRunner
from starsync.modules.sync.schedule import PollSchedule

logger = get_logger(__name__)


class ServiceContainer:
    def __init__(
        self,
        client: GuildSource,
        claims: Optional[ClaimStore] = None,
        fetcher: Optional[SnapshotSource] = None,
        schedule: Optional[PollSchedule] = None,
        snapshots: Optional[SnapshotStore] = None,
    ) -> None:
        start = time.perf_counter()

        self.claims: ClaimStore = claims or SqlClaimStore()
        self.snapshots = snapshots or SnapshotStore()
        self.fetcher = fetcher or LeaderboardFetcher.from_config()
        self.nicknames = NicknameService(self.claims, self.snapshots)
        self.roster = RosterService(self.claims, self.snapshots, self.nicknames)
        self.reconciler = Reconciler(
            client, self.fetcher, self.snapshots, self.claims, self.nicknames
        )
        self.runner = PollRunner(self.reconciler, schedule or PollSchedule.from_config())

        logger.info(
            "Service container initialized",
            extra={"duration_ms": round((time.perf_counter() - start) * 1000, 2)},
        )

    async def shutdown(self) -> None:
        await self.runner.stop()
        close = getattr(self.fetcher, "close", None)
        if close is not None:
            await close()
