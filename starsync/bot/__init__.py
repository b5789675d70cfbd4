"""
Bot infrastructure and Discord integration layer for StarSync.

Re-exports the bot class; events, feature loading and the shared cog base
live in the submodules.

Example
-------
    from starsync.bot import StarSyncBot

    bot = StarSyncBot()
    await bot.start(token)
"""

from __future__ import annotations

from starsync.bot.starsync_bot import StarSyncBot

__all__ = ["StarSyncBot"]
