"""
Reconciliation cycle.

One cycle fetches a fresh leaderboard, swaps it into the SnapshotStore and
rewrites the nickname of every claimed member whose id appears in either the
old or the new snapshot, in every guild the bot is in.

A failed fetch aborts the cycle before anything changes, so the previous
snapshot stays active until the next tick succeeds. Member updates are
independent; their outcomes are collected into a ReconcileReport.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Iterable, List, Optional, Protocol, Set

import discord

from starsync.core.exceptions import (
    PlatformOperationFailure,
    StarSyncInfrastructureException,
    UpstreamFetchFailure,
)
from starsync.core.logging.logger import LogContext, get_logger
from starsync.modules.claims.store import ClaimStore
from starsync.modules.leaderboard.snapshot import (
    LeaderboardSnapshot,
    SnapshotStore,
    compute_affected_ids,
)
from starsync.modules.nickname.service import NicknameService, UpdateOutcome, UpdateResult

logger = get_logger(__name__)


class SnapshotSource(Protocol):
    async def fetch(self) -> LeaderboardSnapshot:
        ...


class GuildSource(Protocol):
    @property
    def guilds(self) -> Iterable[discord.Guild]:
        ...


@dataclass
class ReconcileReport:
    cycle_id: str
    started_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    finished_at: Optional[datetime] = None
    fetch_error: Optional[UpstreamFetchFailure] = None
    affected_ids: Set[str] = field(default_factory=set)
    guild_errors: List[StarSyncInfrastructureException] = field(default_factory=list)
    results: List[UpdateResult] = field(default_factory=list)

    @property
    def aborted(self) -> bool:
        return self.fetch_error is not None

    def count(self, outcome: UpdateOutcome) -> int:
        return sum(1 for result in self.results if result.outcome is outcome)

    @property
    def failures(self) -> List[UpdateResult]:
        return [r for r in self.results if r.outcome is UpdateOutcome.FAILED]

    def summary(self) -> dict:
        return {
            "cycle_id": self.cycle_id,
            "aborted": self.aborted,
            "affected": len(self.affected_ids),
            "updated": self.count(UpdateOutcome.UPDATED),
            "unchanged": self.count(UpdateOutcome.UNCHANGED),
            "skipped": self.count(UpdateOutcome.SKIPPED),
            "failed": self.count(UpdateOutcome.FAILED),
            "guild_errors": len(self.guild_errors),
        }


class Reconciler:
    """
    Runs reconciliation cycles. Holds no state of its own besides its
    collaborators; the active snapshot lives in the SnapshotStore.
    """

    def __init__(
        self,
        client: GuildSource,
        fetcher: SnapshotSource,
        snapshots: SnapshotStore,
        claims: ClaimStore,
        nicknames: NicknameService,
    ) -> None:
        self.client = client
        self.fetcher = fetcher
        self.snapshots = snapshots
        self.claims = claims
        self.nicknames = nicknames

    async def run_cycle(self) -> ReconcileReport:
        report = ReconcileReport(cycle_id=LogContext.new_id())
        start = time.perf_counter()

        async with LogContext(component="sync", operation="reconcile", cycle_id=report.cycle_id):
            try:
                snapshot = await self.fetcher.fetch()
            except UpstreamFetchFailure as exc:
                report.fetch_error = exc
                report.finished_at = datetime.now(timezone.utc)
                logger.warning(
                    f"Leaderboard fetch failed, keeping previous snapshot: {exc.message}",
                    extra=exc.details,
                )
                return report

            previous = self.snapshots.replace(snapshot)
            report.affected_ids = compute_affected_ids(previous, snapshot)

            for guild in list(self.client.guilds):
                await self._reconcile_guild(guild, report)

            report.finished_at = datetime.now(timezone.utc)
            for failure in report.failures:
                logger.warning(
                    f"Nickname update failed for {failure.discord_id}: {failure.error}",
                    extra={"guild_id": failure.guild_id, "aoc_id": failure.aoc_id},
                )
            logger.info(
                "Reconciliation cycle complete",
                extra={
                    **report.summary(),
                    "duration_ms": round((time.perf_counter() - start) * 1000, 2),
                },
            )
        return report

    async def _reconcile_guild(self, guild: discord.Guild, report: ReconcileReport) -> None:
        guild_id = str(guild.id)
        try:
            if not guild.chunked:
                await guild.chunk()
            claims = await self.claims.find_many(guild_id)
        except discord.HTTPException as exc:
            error = PlatformOperationFailure("chunk_members", guild.id, None, exc)
            report.guild_errors.append(error)
            logger.warning(f"Skipping guild {guild_id}: {error.message}")
            return
        except StarSyncInfrastructureException as exc:
            report.guild_errors.append(exc)
            logger.warning(f"Skipping guild {guild_id}: {exc.message}")
            return

        for claim in claims:
            if claim.aoc_id not in report.affected_ids:
                continue
            report.results.append(await self.nicknames.update_member(guild, claim))
