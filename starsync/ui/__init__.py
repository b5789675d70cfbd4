"""
UI Subsystem

Emojis, text formatters and the embed factory shared by every cog.

Usage:
    >>> from starsync.ui import EmbedFactory
    >>> embed = EmbedFactory.success("Account Claimed", "Done")
"""

from starsync.ui.embeds import EmbedFactory
from starsync.ui.emojis import Emojis
from starsync.ui.formatters import DiscordLimits, TextFormatters

__all__ = ["EmbedFactory", "Emojis", "DiscordLimits", "TextFormatters"]
