"""
Base Repository Pattern

Purpose
-------
Generic async data access over one SQLAlchemy model. Repositories never
manage transactions; callers pass the session from DatabaseService.

Usage
-----
    class ClaimRepository(BaseRepository[Claim]):
        async def for_guild(self, session, guild_id):
            return await self.find_many_where(session, Claim.guild_id == guild_id)
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Generic, List, Optional, Type, TypeVar

from sqlalchemy import delete as sql_delete
from sqlalchemy import select

if TYPE_CHECKING:
    from logging import Logger

    from sqlalchemy import ColumnElement
    from sqlalchemy.ext.asyncio import AsyncSession

T = TypeVar("T")


class BaseRepository(Generic[T]):
    """
    Generic base repository for type-safe database operations.

    Type Parameters:
        T: The SQLAlchemy model class this repository manages
    """

    def __init__(self, model_class: Type[T], logger: Logger) -> None:
        self.model_class = model_class
        self.log = logger

    async def find_one_where(
        self,
        session: AsyncSession,
        *conditions: ColumnElement[bool],
    ) -> Optional[T]:
        """First record matching all conditions, or None."""
        stmt = select(self.model_class).where(*conditions).limit(1)
        result = await session.execute(stmt)
        instance = result.scalars().first()

        self.log.debug(
            f"Repository.find_one_where: {self.model_class.__name__}",
            extra={
                "model": self.model_class.__name__,
                "found": instance is not None,
            },
        )
        return instance

    async def find_many_where(
        self,
        session: AsyncSession,
        *conditions: ColumnElement[bool],
        order_by: Optional[ColumnElement] = None,
    ) -> List[T]:
        """All records matching the conditions."""
        stmt = select(self.model_class).where(*conditions)
        if order_by is not None:
            stmt = stmt.order_by(order_by)
        result = await session.execute(stmt)
        instances = list(result.scalars().all())

        self.log.debug(
            f"Repository.find_many_where: {self.model_class.__name__}",
            extra={
                "model": self.model_class.__name__,
                "count": len(instances),
            },
        )
        return instances

    def add(self, session: AsyncSession, instance: T) -> T:
        """Stage a new record; flushed on commit."""
        session.add(instance)
        self.log.debug(
            f"Repository.add: {self.model_class.__name__}",
            extra={"model": self.model_class.__name__},
        )
        return instance

    async def delete_where(
        self,
        session: AsyncSession,
        *conditions: ColumnElement[bool],
    ) -> int:
        """Delete every record matching the conditions; returns the row count."""
        result = await session.execute(sql_delete(self.model_class).where(*conditions))
        deleted = result.rowcount or 0

        self.log.debug(
            f"Repository.delete_where: {self.model_class.__name__}",
            extra={"model": self.model_class.__name__, "deleted": deleted},
        )
        return deleted
