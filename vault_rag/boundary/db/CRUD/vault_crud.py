"""
Vault and membership read operations.

Dependencies: sqlalchemy, vault_rag.boundary.db.models
System role: Authorization lookups and prompt context
"""

from typing import Sequence
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from vault_rag.boundary.db.CRUD.base_crud import BaseCRUD
from vault_rag.boundary.db.models.vault_model import VaultMemberModel, VaultModel


class VaultCRUD(BaseCRUD[VaultModel]):
    """Read operations for vaults and their members."""

    def __init__(self) -> None:
        super().__init__(VaultModel)

    async def is_member(self, session: AsyncSession, vault_id: UUID, user_id: UUID) -> bool:
        """Return True when user_id belongs to the vault."""
        stmt = select(VaultMemberModel.id).where(
            VaultMemberModel.vault_id == vault_id,
            VaultMemberModel.user_id == user_id,
        )
        result = await session.execute(stmt)
        return result.first() is not None

    async def list_members(
        self,
        session: AsyncSession,
        vault_id: UUID,
    ) -> Sequence[VaultMemberModel]:
        stmt = (
            select(VaultMemberModel)
            .where(VaultMemberModel.vault_id == vault_id)
            .order_by(VaultMemberModel.created_at)
        )
        result = await session.execute(stmt)
        return result.scalars().all()


vault_crud = VaultCRUD()
