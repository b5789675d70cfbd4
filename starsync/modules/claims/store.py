"""
Claim store interface.

Filters are exact matches. `guild_id`, when given, always applies; the
`discord_id` / `aoc_id` filters are AND-ed by default or OR-ed with
`any_of=True` (used for the claim-uniqueness check).
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List, Optional

from starsync.modules.claims.record import ClaimRecord


class ClaimStore(ABC):
    @abstractmethod
    async def find_one(
        self,
        guild_id: str,
        *,
        discord_id: Optional[str] = None,
        aoc_id: Optional[str] = None,
        any_of: bool = False,
    ) -> Optional[ClaimRecord]:
        ...

    @abstractmethod
    async def find_many(
        self,
        guild_id: Optional[str] = None,
        *,
        discord_id: Optional[str] = None,
        aoc_id: Optional[str] = None,
        any_of: bool = False,
    ) -> List[ClaimRecord]:
        ...

    @abstractmethod
    async def add(self, claim: ClaimRecord) -> ClaimRecord:
        ...

    @abstractmethod
    async def delete(self, guild_id: str, discord_id: str) -> int:
        """Delete the member's claim(s) in the guild; returns rows removed."""


def matches(
    claim: ClaimRecord,
    guild_id: Optional[str],
    discord_id: Optional[str],
    aoc_id: Optional[str],
    any_of: bool,
) -> bool:
    """Reference semantics of a store filter, shared by non-SQL stores."""
    if guild_id is not None and claim.guild_id != guild_id:
        return False
    checks = []
    if discord_id is not None:
        checks.append(claim.discord_id == discord_id)
    if aoc_id is not None:
        checks.append(claim.aoc_id == aoc_id)
    if not checks:
        return True
    return any(checks) if any_of else all(checks)
