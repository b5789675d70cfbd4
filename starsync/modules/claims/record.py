"""
Plain claim value passed between the store and the services.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class ClaimRecord:
    guild_id: str
    discord_id: str
    aoc_id: str

    @classmethod
    def of(cls, guild_id: object, discord_id: object, aoc_id: object) -> "ClaimRecord":
        """Build a record from ids of any type; everything is stored as text."""
        return cls(str(guild_id), str(discord_id), str(aoc_id))
