"""
Embed factory for StarSync replies.

Usage:
    >>> from starsync.ui.embeds import EmbedFactory
    >>> embed = EmbedFactory.success("Claimed", "Linked AoC id 123456")
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional

import discord

from starsync.core.config.config import Config
from starsync.modules.shared.exceptions import ErrorSeverity
from starsync.ui.emojis import Emojis
from starsync.ui.formatters import DiscordLimits, TextFormatters


class EmbedFactory:
    """
    Factory for standardized Discord embeds.

    All embeds carry a timestamp, the bot footer and enforce Discord limits.
    """

    @staticmethod
    def _base_embed(
        title: str,
        description: str,
        color: int,
        footer: Optional[str] = None,
    ) -> discord.Embed:
        embed = discord.Embed(
            title=TextFormatters.truncate(title, DiscordLimits.EMBED_TITLE),
            description=TextFormatters.truncate(description, DiscordLimits.EMBED_DESCRIPTION),
            color=color,
            timestamp=datetime.now(timezone.utc),
        )
        embed.set_footer(
            text=TextFormatters.truncate(
                footer or f"{Emojis.TREE} {Config.BOT_NAME} · AoC {Config.AOC_LEADERBOARD_YEAR}",
                DiscordLimits.EMBED_FOOTER,
            )
        )
        return embed

    @staticmethod
    def success(title: str, description: str, footer: Optional[str] = None) -> discord.Embed:
        return EmbedFactory._base_embed(title, description, Config.EMBED_COLOR_SUCCESS, footer)

    @staticmethod
    def error(title: str, description: str, help_text: Optional[str] = None) -> discord.Embed:
        """
        Error embeds with optional help text.

        Args:
            title: Error title
            description: Error description
            help_text: Optional suggestion for the user
        """
        desc = description
        if help_text:
            desc += f"\n\n{Emojis.TIP} **Help:** {help_text}"
        return EmbedFactory._base_embed(title, desc, Config.EMBED_COLOR_ERROR)

    @staticmethod
    def warning(title: str, description: str, footer: Optional[str] = None) -> discord.Embed:
        return EmbedFactory._base_embed(title, description, Config.EMBED_COLOR_WARNING, footer)

    @staticmethod
    def info(title: str, description: str, footer: Optional[str] = None) -> discord.Embed:
        return EmbedFactory._base_embed(title, description, Config.EMBED_COLOR_INFO, footer)

    @staticmethod
    def from_error_response(response: Dict[str, Any]) -> discord.Embed:
        """Build an embed from an ErrorResponseService dict, styled by severity."""
        severity = response.get("severity", ErrorSeverity.ERROR)
        if severity in (ErrorSeverity.WARNING, ErrorSeverity.INFO, ErrorSeverity.DEBUG):
            description = response["description"]
            if response.get("help_text"):
                description += f"\n\n{Emojis.TIP} **Help:** {response['help_text']}"
            return EmbedFactory.warning(response["title"], description)
        return EmbedFactory.error(
            response["title"], response["description"], response.get("help_text")
        )
