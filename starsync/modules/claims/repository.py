"""
SQL-backed claim store.

Each call opens its own session from DatabaseService: reads use
`get_session()`, writes use `get_transaction()`. SQLAlchemy failures are
wrapped in DatabaseError.
"""

from __future__ import annotations

from typing import List, Optional

from sqlalchemy import and_, or_
from sqlalchemy.exc import SQLAlchemyError

from starsync.core.database.service import DatabaseService
from starsync.core.exceptions import DatabaseError
from starsync.core.logging.logger import get_logger
from starsync.database.models.claim import Claim
from starsync.modules.claims.record import ClaimRecord
from starsync.modules.claims.store import ClaimStore
from starsync.modules.shared.base_repository import BaseRepository

logger = get_logger(__name__)


class ClaimRepository(BaseRepository[Claim]):
    """Condition builders over the claims table."""

    def __init__(self) -> None:
        super().__init__(Claim, logger)

    @staticmethod
    def conditions(
        guild_id: Optional[str],
        discord_id: Optional[str],
        aoc_id: Optional[str],
        any_of: bool,
    ) -> list:
        where = []
        if guild_id is not None:
            where.append(Claim.guild_id == guild_id)

        members = []
        if discord_id is not None:
            members.append(Claim.discord_id == discord_id)
        if aoc_id is not None:
            members.append(Claim.aoc_id == aoc_id)
        if members:
            where.append(or_(*members) if any_of else and_(*members))
        return where


class SqlClaimStore(ClaimStore):
    def __init__(self, repository: Optional[ClaimRepository] = None) -> None:
        self.repository = repository or ClaimRepository()

    async def find_one(
        self,
        guild_id: str,
        *,
        discord_id: Optional[str] = None,
        aoc_id: Optional[str] = None,
        any_of: bool = False,
    ) -> Optional[ClaimRecord]:
        where = self.repository.conditions(guild_id, discord_id, aoc_id, any_of)
        try:
            async with DatabaseService.get_session() as session:
                claim = await self.repository.find_one_where(session, *where)
        except SQLAlchemyError as exc:
            raise DatabaseError("find_one claim", exc) from exc
        return claim.to_record() if claim is not None else None

    async def find_many(
        self,
        guild_id: Optional[str] = None,
        *,
        discord_id: Optional[str] = None,
        aoc_id: Optional[str] = None,
        any_of: bool = False,
    ) -> List[ClaimRecord]:
        where = self.repository.conditions(guild_id, discord_id, aoc_id, any_of)
        try:
            async with DatabaseService.get_session() as session:
                claims = await self.repository.find_many_where(
                    session, *where, order_by=Claim.id
                )
        except SQLAlchemyError as exc:
            raise DatabaseError("find_many claims", exc) from exc
        return [claim.to_record() for claim in claims]

    async def add(self, claim: ClaimRecord) -> ClaimRecord:
        try:
            async with DatabaseService.get_transaction() as session:
                self.repository.add(
                    session,
                    Claim(
                        guild_id=claim.guild_id,
                        discord_id=claim.discord_id,
                        aoc_id=claim.aoc_id,
                    ),
                )
        except SQLAlchemyError as exc:
            raise DatabaseError("add claim", exc) from exc
        return claim

    async def delete(self, guild_id: str, discord_id: str) -> int:
        where = self.repository.conditions(guild_id, discord_id, None, False)
        try:
            async with DatabaseService.get_transaction() as session:
                return await self.repository.delete_where(session, *where)
        except SQLAlchemyError as exc:
            raise DatabaseError("delete claim", exc) from exc
