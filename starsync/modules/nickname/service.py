"""
Nickname Service

Purpose
-------
Applies the display-name codec to Discord members: writes the current star
count into a claimed member's nickname, and strips it again on unclaim or at
the end of the event.

Rules
-----
- The guild owner is never renamed (Discord forbids it for bots).
- A nickname is only written when it differs from the current one, so an
  unchanged snapshot produces no API calls.
- Each member update is independent; failures are reported in the returned
  UpdateResult rather than raised.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional

import discord

from starsync.core.config.config import Config
from starsync.core.exceptions import PlatformOperationFailure
from starsync.core.logging.logger import get_logger
from starsync.modules.claims.record import ClaimRecord
from starsync.modules.claims.store import ClaimStore
from starsync.modules.leaderboard.snapshot import SnapshotStore
from starsync.modules.nickname.codec import build_display_name, parse_base_name
from starsync.modules.shared.base_service import BaseService

logger = get_logger(__name__)


class UpdateOutcome(str, enum.Enum):
    UPDATED = "updated"
    UNCHANGED = "unchanged"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(slots=True)
class UpdateResult:
    guild_id: str
    discord_id: str
    aoc_id: str
    outcome: UpdateOutcome
    old_nick: Optional[str] = None
    new_nick: Optional[str] = None
    reason: Optional[str] = None
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.outcome is not UpdateOutcome.FAILED


class NicknameService(BaseService):
    def __init__(self, claims: ClaimStore, snapshots: SnapshotStore) -> None:
        super().__init__(logger)
        self.claims = claims
        self.snapshots = snapshots

    # ========================================================================
    # Member lookup
    # ========================================================================

    async def resolve_member(
        self, guild: discord.Guild, discord_id: str
    ) -> Optional[discord.Member]:
        """
        Cached member, falling back to an API fetch.

        Returns None when the member left the guild.

        Raises:
            PlatformOperationFailure: if Discord rejects the fetch
        """
        member_id = int(discord_id)
        member = guild.get_member(member_id)
        if member is not None:
            return member
        try:
            return await guild.fetch_member(member_id)
        except discord.NotFound:
            return None
        except discord.HTTPException as exc:
            raise PlatformOperationFailure("fetch_member", guild.id, discord_id, exc) from exc

    # ========================================================================
    # Updates
    # ========================================================================

    def desired_nickname(self, member: discord.Member, aoc_id: str) -> str:
        base = parse_base_name(member.display_name)
        return build_display_name(
            base, self.snapshots.get_score(aoc_id), limit=Config.NICKNAME_LIMIT
        )

    @staticmethod
    def reset_nickname(member: discord.Member) -> Optional[str]:
        base = parse_base_name(member.display_name)
        if base == member.name or (member.nick is None and base == member.display_name):
            return None
        return base

    async def _apply(
        self,
        guild: discord.Guild,
        claim: ClaimRecord,
        compute: Callable[[discord.Member], Optional[str]],
        reason: str,
    ) -> UpdateResult:
        """Resolve the member, skip the owner, and write the computed nick if it changed."""
        result = UpdateResult(
            guild_id=claim.guild_id,
            discord_id=claim.discord_id,
            aoc_id=claim.aoc_id,
            outcome=UpdateOutcome.SKIPPED,
        )
        try:
            member = await self.resolve_member(guild, claim.discord_id)
        except PlatformOperationFailure as exc:
            result.outcome, result.error = UpdateOutcome.FAILED, exc
            return result

        if member is None:
            result.reason = "member not in guild"
            return result
        if member.id == guild.owner_id:
            result.reason = "guild owner"
            return result

        new_nick = compute(member)
        result.old_nick = member.nick
        result.new_nick = new_nick
        if member.nick == new_nick:
            result.outcome = UpdateOutcome.UNCHANGED
            return result

        try:
            await member.edit(nick=new_nick, reason=f"{Config.BOT_NAME}: {reason}")
        except discord.HTTPException as exc:
            result.outcome = UpdateOutcome.FAILED
            result.error = PlatformOperationFailure("edit_nickname", guild.id, member.id, exc)
            return result

        result.outcome = UpdateOutcome.UPDATED
        logger.debug(
            f"Nickname {reason}: {member.id} {result.old_nick!r} -> {new_nick!r}",
            extra={"guild_id": claim.guild_id, "discord_id": claim.discord_id},
        )
        return result

    async def update_member(self, guild: discord.Guild, claim: ClaimRecord) -> UpdateResult:
        """Write the claim's current score into the member's nickname."""
        return await self._apply(
            guild, claim, lambda member: self.desired_nickname(member, claim.aoc_id), "sync"
        )

    async def update_for_aoc_id(self, guild: discord.Guild, aoc_id: str) -> UpdateResult:
        """Update whoever claimed `aoc_id` in this guild; skipped when unclaimed."""
        claim = await self.claims.find_one(str(guild.id), aoc_id=aoc_id)
        if claim is None:
            return UpdateResult(
                guild_id=str(guild.id),
                discord_id="",
                aoc_id=aoc_id,
                outcome=UpdateOutcome.SKIPPED,
                reason="unclaimed",
            )
        return await self.update_member(guild, claim)

    # ========================================================================
    # Resets
    # ========================================================================

    async def reset_member(self, guild: discord.Guild, claim: ClaimRecord) -> UpdateResult:
        """
        Strip the star suffix from the member's nickname.

        When the remaining base equals the account username the nickname is
        cleared instead, so the member falls back to their plain name.
        """
        return await self._apply(guild, claim, self.reset_nickname, "reset")

    async def reset_all(self, guilds: Iterable[discord.Guild]) -> List[UpdateResult]:
        """Reset every claimed member in every guild; used when the event ends."""
        results: List[UpdateResult] = []
        for guild in guilds:
            if not guild.chunked:
                await guild.chunk()
            claims = await self.claims.find_many(str(guild.id))
            for claim in claims:
                result = await self.reset_member(guild, claim)
                if result.outcome is UpdateOutcome.FAILED:
                    self.log_error(
                        "reset_nickname",
                        result.error,
                        guild_id=claim.guild_id,
                        discord_id=claim.discord_id,
                    )
                results.append(result)

        self.log_operation(
            "reset_all",
            members=len(results),
            reset=sum(1 for r in results if r.outcome is UpdateOutcome.UPDATED),
            failed=sum(1 for r in results if r.outcome is UpdateOutcome.FAILED),
        )
        return results
