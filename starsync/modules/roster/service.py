"""
Roster Service

Purpose
-------
Business logic behind the member commands: claim, unclaim, verify and
leaderboard. Raises domain exceptions for user mistakes; the cog turns them
into replies.

Ordering
--------
`claim` persists first and then renames the member. The two steps are
independent: if the rename fails (or the process dies in between) the next
reconciliation cycle fixes the nickname.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Optional

import discord

from starsync.core.exceptions import PlatformOperationFailure
from starsync.core.logging.logger import get_logger
from starsync.modules.claims.record import ClaimRecord
from starsync.modules.claims.store import ClaimStore
from starsync.modules.leaderboard.ranking import RankingEntry, render_leaderboard
from starsync.modules.leaderboard.snapshot import SnapshotStore
from starsync.modules.nickname.codec import parse_base_name, parse_score
from starsync.modules.nickname.service import NicknameService, UpdateOutcome, UpdateResult
from starsync.modules.shared.base_service import BaseService
from starsync.modules.shared.exceptions import (
    AlreadyClaimedError,
    ClaimNotFoundError,
    InvalidInputError,
)

logger = get_logger(__name__)

_AOC_ID_RE = re.compile(r"^[0-9]{1,32}$")
_MEMBER_REF_RE = re.compile(r"^<@!?([0-9]+)>$|^([0-9]+)$")


def parse_aoc_id(raw: str) -> str:
    """
    Validate an AoC id: 1 to 32 ASCII digits. Leading zeros are dropped to
    match the ids in the leaderboard feed.

    >>> parse_aoc_id("0123")
    '123'
    """
    value = (raw or "").strip()
    if not _AOC_ID_RE.match(value):
        raise InvalidInputError("aoc_id", value, "it must be 1 to 32 digits")
    return str(int(value))


def parse_member_reference(raw: str) -> str:
    """
    Extract a user id from a mention (`<@123>`, `<@!123>`) or a raw id.

    >>> parse_member_reference("<@!42>")
    '42'
    """
    value = (raw or "").strip()
    match = _MEMBER_REF_RE.match(value)
    if match is None:
        raise InvalidInputError("member", value, "use a mention or a user id")
    return match.group(1) or match.group(2)


@dataclass(frozen=True)
class ClaimOutcome:
    claim: ClaimRecord
    nickname: UpdateResult


class RosterService(BaseService):
    def __init__(
        self,
        claims: ClaimStore,
        snapshots: SnapshotStore,
        nicknames: NicknameService,
    ) -> None:
        super().__init__(logger)
        self.claims = claims
        self.snapshots = snapshots
        self.nicknames = nicknames

    async def claim(
        self, guild: discord.Guild, requester: discord.abc.User, raw_aoc_id: str
    ) -> ClaimOutcome:
        """
        Link `requester` to an AoC id in this guild.

        Raises:
            InvalidInputError: id is not all digits
            AlreadyClaimedError: the id or the requester already has a claim
        """
        aoc_id = parse_aoc_id(raw_aoc_id)
        guild_id, discord_id = str(guild.id), str(requester.id)

        existing = await self.claims.find_one(
            guild_id, discord_id=discord_id, aoc_id=aoc_id, any_of=True
        )
        if existing is not None:
            if existing.aoc_id == aoc_id:
                raise AlreadyClaimedError("aoc_id", aoc_id, owner_id=existing.discord_id)
            raise AlreadyClaimedError("member", existing.aoc_id, owner_id=discord_id)

        claim = await self.claims.add(ClaimRecord(guild_id, discord_id, aoc_id))
        self.log_operation("claim", guild_id=guild_id, discord_id=discord_id, aoc_id=aoc_id)

        result = await self.nicknames.update_member(guild, claim)
        return ClaimOutcome(claim, result)

    async def unclaim(self, guild: discord.Guild, requester: discord.abc.User) -> UpdateResult:
        """
        Remove the requester's claim after stripping the star suffix.

        The claim is kept when the reset fails, so the suffix is never left
        behind on an unclaimed member.

        Raises:
            ClaimNotFoundError: the requester has no claim here
            PlatformOperationFailure: Discord rejected the nickname reset
        """
        guild_id, discord_id = str(guild.id), str(requester.id)

        claim = await self.claims.find_one(guild_id, discord_id=discord_id)
        if claim is None:
            raise ClaimNotFoundError(guild_id, discord_id)

        result = await self.nicknames.reset_member(guild, claim)
        if result.outcome is UpdateOutcome.FAILED:
            raise result.error
        await self.claims.delete(guild_id, discord_id)
        self.log_operation(
            "unclaim",
            guild_id=guild_id,
            discord_id=discord_id,
            aoc_id=claim.aoc_id,
            reset=result.outcome.value,
        )
        return result

    async def verify(self, guild: discord.Guild, target_id: str) -> bool:
        """
        True only when the member has a claim, is present, carries a
        suffix, and the suffix matches the snapshot (unknown == unknown).
        """
        claim = await self.claims.find_one(str(guild.id), discord_id=str(target_id))
        if claim is None:
            return False

        try:
            member = await self.nicknames.resolve_member(guild, claim.discord_id)
        except PlatformOperationFailure:
            return False
        if member is None:
            return False

        parsed = parse_score(member.display_name)
        if parsed is None:
            return False
        return parsed.value == self.snapshots.get_score(claim.aoc_id)

    async def leaderboard_entries(self, guild: discord.Guild) -> List[RankingEntry]:
        """Resolve every claim to (base name, score); unfetchable members are left out."""
        entries: List[RankingEntry] = []
        for claim in await self.claims.find_many(str(guild.id)):
            try:
                member: Optional[discord.Member] = await self.nicknames.resolve_member(
                    guild, claim.discord_id
                )
            except PlatformOperationFailure as exc:
                logger.warning(f"Leaderboard skipping {claim.discord_id}: {exc.message}")
                continue
            if member is None:
                continue
            entries.append(
                RankingEntry(
                    name=parse_base_name(member.display_name),
                    score=self.snapshots.get_score(claim.aoc_id),
                )
            )
        return entries

    async def leaderboard(self, guild: discord.Guild) -> str:
        return render_leaderboard(await self.leaderboard_entries(guild))
