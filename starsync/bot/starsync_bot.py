"""
StarSync Discord Bot - Main Bot Class

Purpose
-------
Discord integration for the nickname sync: events, commands, presence and
the global command error handler.

Responsibilities
----------------
- Build the ServiceContainer (the bot is the container's guild source)
- Load feature cogs and sync slash commands in setup_hook
- Start the poll runner once the gateway is ready
- Trigger an immediate sync when the configured trigger account posts
- Translate command errors into embeds

Non-Responsibilities
--------------------
- Database initialization and logging setup (entry point)
- Business rules (services)
"""

from __future__ import annotations

import asyncio
import time
from typing import Dict, List, Optional, Set

import discord
from discord.ext import commands

from starsync.bot.base_cog import unwrap_error
from starsync.bot.loader import load_all_features
from starsync.core.config.config import Config
from starsync.core.logging.logger import LogContext, get_logger
from starsync.core.services.container import ServiceContainer
from starsync.core.services.error_response_service import ErrorResponseService
from starsync.domain.exceptions.registry import get_exception_template
from starsync.modules.shared.exceptions import is_user_error
from starsync.ui.embeds import EmbedFactory

logger = get_logger(__name__)

ACTIVITY_TEXT = "aoc claim AOC_USER_ID"


class StarSyncBot(commands.Bot):
    """
    Handles:
    - Discord integration, events, prefix and slash commands
    - Presence and the poll runner lifecycle
    - Global error handling
    """

    def __init__(self, services: Optional[ServiceContainer] = None) -> None:
        intents = discord.Intents.default()
        intents.message_content = True
        intents.members = True
        intents.guilds = True

        super().__init__(
            command_prefix=self._get_prefix,
            intents=intents,
            help_command=None,
            case_insensitive=True,
            strip_after_prefix=True,
            description=Config.BOT_DESCRIPTION,
        )

        self.services = services or ServiceContainer(self)
        self.error_response_service = ErrorResponseService()
        self.errors_by_type: Dict[str, int] = {}
        self.commands_executed = 0
        self.commands_failed = 0
        self._background: Set[asyncio.Task] = set()

    # --------------------------------------------------------------- #
    # Prefix Handling
    # --------------------------------------------------------------- #

    def _get_prefix(self, bot: commands.Bot, message: discord.Message) -> List[str]:
        """`aoc claim 1`, `aoc  claim 1` and `@StarSync claim 1` all work."""
        prefix = Config.COMMAND_PREFIX
        variants = [prefix]
        stripped = prefix.rstrip()
        if stripped != prefix:
            variants.append(stripped)
        return commands.when_mentioned_or(*variants)(bot, message)

    # --------------------------------------------------------------- #
    # Startup
    # --------------------------------------------------------------- #

    async def setup_hook(self) -> None:
        start = time.perf_counter()
        logger.info("=" * 60)
        logger.info("STARSYNC BOT SETUP")
        logger.info("=" * 60)

        stats = await load_all_features(self)
        logger.info("✓ Feature cogs loaded (%d/%d)", stats["loaded"], stats["discovered"])

        if Config.DISCORD_GUILD_ID:
            guild = discord.Object(id=Config.DISCORD_GUILD_ID)
            self.tree.copy_global_to(guild=guild)
            synced = await self.tree.sync(guild=guild)
        else:
            synced = await self.tree.sync()
        logger.info("✓ Slash commands synced (%d)", len(synced))

        logger.info("✓ Bot setup complete (%.2fms)", (time.perf_counter() - start) * 1000)

    async def on_ready(self) -> None:
        logger.info("=" * 60)
        logger.info("Bot is ONLINE as %s", self.user)
        logger.info("Guilds: %d", len(self.guilds))
        logger.info("=" * 60)

        await self.change_presence(activity=discord.Game(name=ACTIVITY_TEXT))

        # on_ready fires again after reconnects
        if not self.services.runner.running:
            self.services.runner.start(run_immediately=Config.SYNC_ON_STARTUP)

    async def on_guild_join(self, guild: discord.Guild) -> None:
        logger.info(
            "Joined guild",
            extra={"guild_name": guild.name, "guild_id": guild.id},
        )

    async def on_guild_remove(self, guild: discord.Guild) -> None:
        logger.info(
            "Removed from guild",
            extra={"guild_name": guild.name, "guild_id": guild.id},
        )

    # --------------------------------------------------------------- #
    # Messages
    # --------------------------------------------------------------- #

    def is_trigger_message(self, message: discord.Message) -> bool:
        return Config.TRIGGER_USER_ID is not None and message.author.id == Config.TRIGGER_USER_ID

    async def on_message(self, message: discord.Message) -> None:
        if self.is_trigger_message(message):
            logger.info(
                "Sync triggered by message",
                extra={"guild_id": getattr(message.guild, "id", None)},
            )
            task = asyncio.create_task(self.services.runner.trigger("message"))
            self._background.add(task)
            task.add_done_callback(self._background.discard)

        await self.process_commands(message)

    # --------------------------------------------------------------- #
    # Error Handling
    # --------------------------------------------------------------- #

    async def on_command_error(self, ctx: commands.Context, error: Exception) -> None:
        """
        Global error handler.

        Errors already answered by a cog's `cog_command_error` are only
        counted here.
        """
        async with LogContext(
            user_id=ctx.author.id,
            guild_id=ctx.guild.id if ctx.guild else None,
            command=str(ctx.command) if ctx.command else "unknown",
        ):
            if isinstance(error, commands.CommandNotFound):
                return

            self.commands_failed += 1
            original = unwrap_error(error)
            error_type = type(original).__name__
            self.errors_by_type[error_type] = self.errors_by_type.get(error_type, 0) + 1

            if getattr(ctx, "starsync_error_handled", False):
                return

            if get_exception_template(original) is not None:
                if is_user_error(original):
                    logger.info("Command rejected: %s", original)
                else:
                    logger.warning("Command failed", extra={"error": str(original), "error_type": error_type})
                response = self.error_response_service.format_error(original)
                await ctx.send(embed=EmbedFactory.from_error_response(response))
                return

            if isinstance(error, commands.MissingRequiredArgument):
                await ctx.send(
                    embed=EmbedFactory.error(
                        "Missing Argument",
                        f"Missing required argument: `{error.param.name}`",
                        help_text=f"Usage: `{Config.COMMAND_PREFIX}{ctx.command} {ctx.command.signature}`"
                        if ctx.command
                        else None,
                    )
                )
                return

            if isinstance(error, commands.NoPrivateMessage):
                await ctx.send(
                    embed=EmbedFactory.error("Server Only", "This command only works inside a server.")
                )
                return

            if isinstance(error, commands.CheckFailure):
                await ctx.send(
                    embed=EmbedFactory.error(
                        "Permission Denied", "You lack permission to use this command."
                    )
                )
                return

            logger.error(
                "Unhandled command error",
                extra={"error": str(original), "error_type": error_type},
                exc_info=original,
            )
            await ctx.send(
                embed=EmbedFactory.error(
                    "Unexpected Error",
                    "Something went wrong while processing your command.",
                    help_text="The issue has been logged.",
                )
            )

    async def on_command_completion(self, ctx: commands.Context) -> None:
        self.commands_executed += 1

    # --------------------------------------------------------------- #
    # Graceful Shutdown
    # --------------------------------------------------------------- #

    async def close(self) -> None:
        logger.info("=" * 60)
        logger.info("STARSYNC BOT SHUTDOWN")
        logger.info("=" * 60)
        logger.info("  Commands Executed: %d", self.commands_executed)
        logger.info("  Commands Failed:   %d", self.commands_failed)

        await self.services.shutdown()
        for task in list(self._background):
            task.cancel()

        await super().close()
        logger.info("✓ Bot shutdown complete")
