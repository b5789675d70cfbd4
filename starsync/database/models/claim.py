"""
Claim: links one Discord member to one Advent of Code account in one guild.
Schema only.
"""

from __future__ import annotations

from sqlalchemy import Index, String
from sqlalchemy.orm import Mapped, mapped_column

from starsync.core.database.base import Base, IdMixin, TimestampMixin
from starsync.modules.claims.record import ClaimRecord


class Claim(Base, IdMixin, TimestampMixin):
    """
    One row per claim. Uniqueness of (guild, member) and (guild, aoc id) is
    checked by the roster service before insert, not by constraints.
    """

    __tablename__ = "claims"
    __table_args__ = (
        Index("ix_claims_guild_discord", "guild_id", "discord_id"),
        Index("ix_claims_guild_aoc", "guild_id", "aoc_id"),
    )

    guild_id: Mapped[str] = mapped_column(String(32), nullable=False)
    discord_id: Mapped[str] = mapped_column(String(32), nullable=False)
    aoc_id: Mapped[str] = mapped_column(String(32), nullable=False)

    def to_record(self) -> ClaimRecord:
        return ClaimRecord(
            guild_id=self.guild_id,
            discord_id=self.discord_id,
            aoc_id=self.aoc_id,
        )

    def __repr__(self) -> str:
        return (
            f"<Claim guild={self.guild_id} discord={self.discord_id} aoc={self.aoc_id}>"
        )
