"""
Base CRUD operations for SQLAlchemy models.

Subclasses bind one model and build their queries on these primitives.
Nothing here commits: the calling service owns the transaction, so an
indexing batch or a chat turn succeeds or rolls back as a unit.

Dependencies: sqlalchemy
System role: Foundation for all database CRUD operations
"""

from typing import Any, Generic, TypeVar
from uuid import UUID

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from vault_rag.boundary.db.base import Base

ModelT = TypeVar("ModelT", bound=Base)


class BaseCRUD(Generic[ModelT]):
    """
    Generic CRUD bound to one model.

    Type Parameters:
        ModelT: SQLAlchemy model class inheriting from Base
    """

    def __init__(self, model: type[ModelT]) -> None:
        self.model = model

    async def create(self, session: AsyncSession, **fields: Any) -> ModelT:
        """Add a row and flush so its generated id is available."""
        instance = self.model(**fields)
        session.add(instance)
        await session.flush()
        return instance

    async def get_by_id(self, session: AsyncSession, id: UUID) -> ModelT | None:
        return await session.get(self.model, id)

    async def delete_where(self, session: AsyncSession, *criteria) -> int:
        """
        Bulk delete matching rows.

        Args:
            session: Async database session
            *criteria: WHERE clauses on the bound model

        Returns:
            int: Rows deleted
        """
        result = await session.execute(delete(self.model).where(*criteria))
        return result.rowcount or 0

    async def count_where(self, session: AsyncSession, *criteria) -> int:
        stmt = select(func.count()).select_from(self.model).where(*criteria)
        return (await session.execute(stmt)).scalar_one()
