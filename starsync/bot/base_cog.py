"""
Base Discord Cog for StarSync

Purpose
-------
Shared plumbing for feature cogs: standardized embed feedback, error
translation through ErrorResponseService, and command logging with
LogContext.

Non-Responsibilities
--------------------
- Business logic (delegated to services)
- Feature loading (FeatureLoader)

Usage Example
-------------
>>> class RosterCog(BaseCog):
...     def __init__(self, bot, services):
...         super().__init__(bot, "RosterCog", services)
...
...     @commands.hybrid_command()
...     async def unclaim(self, ctx):
...         await self.services.roster.unclaim(ctx.guild, ctx.author)
...         await self.send_success(ctx, "Unclaimed", "Done")
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Optional

import discord
from discord.ext import commands

from starsync.core.logging.logger import LogContext, get_logger
from starsync.core.services.error_response_service import ErrorResponseService
from starsync.domain.exceptions.registry import get_exception_template
from starsync.ui.embeds import EmbedFactory

if TYPE_CHECKING:
    from starsync.core.services.container import ServiceContainer


def unwrap_error(error: BaseException) -> BaseException:
    """Peel CommandInvokeError / HybridCommandError wrappers down to the raised exception."""
    seen = 0
    while getattr(error, "original", None) is not None and seen < 5:
        error = error.original
        seen += 1
    return error


class BaseCog(commands.Cog):
    """
    Base class for all feature cogs.

    Attributes
    ----------
    bot : commands.Bot
        Discord bot instance
    cog_name : str
        Name of the cog for logging
    services : ServiceContainer
        Domain services, injected by the bot
    """

    def __init__(
        self,
        bot: commands.Bot,
        cog_name: str,
        services: Optional[ServiceContainer] = None,
        error_response_service: Optional[ErrorResponseService] = None,
    ) -> None:
        self.bot = bot
        self.cog_name = cog_name
        self.logger = get_logger(f"starsync.features.{cog_name}")
        self.services = services or getattr(bot, "services", None)
        self.error_response_service = error_response_service or ErrorResponseService()

    # ========================================================================
    # USER FEEDBACK UTILITIES
    # ========================================================================

    async def send_success(
        self,
        ctx: commands.Context,
        title: str,
        description: str,
        footer: Optional[str] = None,
    ) -> None:
        await self._safe_send(ctx, embed=EmbedFactory.success(title, description, footer))

    async def send_info(
        self,
        ctx: commands.Context,
        title: str,
        description: str,
        footer: Optional[str] = None,
    ) -> None:
        await self._safe_send(ctx, embed=EmbedFactory.info(title, description, footer))

    async def _safe_send(
        self,
        ctx: commands.Context,
        content: Optional[str] = None,
        embed: Optional[discord.Embed] = None,
    ) -> None:
        """Reply when possible, fall back to send; delivery errors are logged."""
        try:
            if ctx.message is not None and ctx.interaction is None:
                await ctx.reply(content=content, embed=embed, mention_author=False)
            else:
                await ctx.send(content=content, embed=embed)
        except discord.HTTPException as exc:
            self.logger.error(
                "Failed to send reply",
                extra={
                    "cog_name": self.cog_name,
                    "error": str(exc),
                    "error_type": type(exc).__name__,
                },
            )

    # ========================================================================
    # STANDARDIZED ERROR HANDLING
    # ========================================================================

    async def handle_standard_errors(self, ctx: commands.Context, error: Exception) -> bool:
        """
        Reply with the registered template for `error`.

        Returns:
            True if the error was known and a response was sent.
        """
        if get_exception_template(error) is None:
            return False

        response = self.error_response_service.format_error(error)
        await self._safe_send(ctx, embed=EmbedFactory.from_error_response(response))
        return True

    # ========================================================================
    # LOGGING UTILITIES
    # ========================================================================

    def command_context(self, ctx: commands.Context, command_name: str, **extra: Any) -> LogContext:
        """LogContext carrying the invoking user and guild."""
        return LogContext(
            user_id=ctx.author.id,
            guild_id=ctx.guild.id if ctx.guild else None,
            command=command_name,
            component=self.cog_name,
            **extra,
        )

