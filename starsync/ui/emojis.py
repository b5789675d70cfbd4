"""
Centralized emoji definitions for StarSync replies.

Usage:
    from starsync.ui.emojis import Emojis

    await ctx.reply(Emojis.CHECK)
"""


class Emojis:
    """Unicode emoji constants used across replies and embeds."""

    CHECK = "✅"
    CROSS = "❌"
    TIP = "💡"
    TREE = "🎄"
    LINK = "🔗"
    UNLINK = "✂️"
