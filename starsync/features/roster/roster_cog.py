"""
Roster commands: claim, unclaim, verify, leaderboard.

Available both as text commands (`aoc claim 123456`) and slash commands
(`/claim 123456`). Discord layer only; every rule lives in RosterService.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from discord.ext import commands

from starsync.bot.base_cog import BaseCog, unwrap_error
from starsync.modules.nickname.service import UpdateOutcome
from starsync.modules.roster.service import parse_member_reference
from starsync.ui.emojis import Emojis
from starsync.ui.formatters import TextFormatters

if TYPE_CHECKING:
    from starsync.core.services.container import ServiceContainer


class RosterCog(BaseCog):
    """Self-service linking of Discord members to Advent of Code accounts."""

    def __init__(self, bot: commands.Bot, services: Optional[ServiceContainer] = None):
        super().__init__(bot, "RosterCog", services)

    @property
    def roster(self):
        return self.services.roster

    # ===============================================================
    # claim / unclaim
    # ===============================================================

    @commands.hybrid_command(
        name="claim",
        description="Link your Advent of Code account to your nickname",
    )
    @commands.guild_only()
    async def claim(self, ctx: commands.Context, aoc_id: str):
        """Claim an AoC account by its numeric id."""
        async with self.command_context(ctx, "claim", aoc_id=aoc_id):
            outcome = await self.roster.claim(ctx.guild, ctx.author, aoc_id)

            description = f"{Emojis.LINK} AoC account `{outcome.claim.aoc_id}` successfully claimed."
            if outcome.nickname.outcome is UpdateOutcome.FAILED:
                description += "\nI couldn't update your nickname yet; it will refresh on the next sync."
            await self.send_success(ctx, "Account Claimed", description)

    @commands.hybrid_command(
        name="unclaim",
        description="Unlink your Advent of Code account",
    )
    @commands.guild_only()
    async def unclaim(self, ctx: commands.Context):
        """Remove your claim and the star suffix from your nickname."""
        async with self.command_context(ctx, "unclaim"):
            await self.roster.unclaim(ctx.guild, ctx.author)
            await self.send_success(
                ctx, "Account Unclaimed", f"{Emojis.UNLINK} AoC account successfully unclaimed."
            )

    # ===============================================================
    # verify
    # ===============================================================

    @commands.hybrid_command(
        name="verify",
        description="Check that a member's nickname shows their real star count",
    )
    @commands.guild_only()
    async def verify(self, ctx: commands.Context, member: str):
        """Reply ✅ when the member's nickname matches the leaderboard, ❌ otherwise."""
        async with self.command_context(ctx, "verify"):
            target_id = parse_member_reference(member)
            verified = await self.roster.verify(ctx.guild, target_id)
            await self._safe_send(ctx, content=Emojis.CHECK if verified else Emojis.CROSS)

    # ===============================================================
    # leaderboard
    # ===============================================================

    @commands.hybrid_command(
        name="leaderboard",
        aliases=["lb"],
        description="Show the server's Advent of Code leaderboard",
    )
    @commands.guild_only()
    async def leaderboard(self, ctx: commands.Context):
        """Ranked star counts of everyone who claimed an account here."""
        async with self.command_context(ctx, "leaderboard"):
            await ctx.defer()
            text = await self.roster.leaderboard(ctx.guild)
            if not text:
                await self.send_info(
                    ctx, "Leaderboard", "Nobody has claimed an account yet. Use `aoc claim <id>`."
                )
                return
            for chunk in TextFormatters.code_block_chunks(text):
                await self._safe_send(ctx, content=chunk)

    # ===============================================================
    # Errors
    # ===============================================================

    async def cog_command_error(self, ctx: commands.Context, error: Exception) -> None:
        if await self.handle_standard_errors(ctx, unwrap_error(error)):
            ctx.starsync_error_handled = True


async def setup(bot: commands.Bot):
    await bot.add_cog(RosterCog(bot))
