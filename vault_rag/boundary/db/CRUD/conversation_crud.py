"""
Conversation and message CRUD operations.

Dependencies: sqlalchemy, vault_rag.boundary.db.models
System role: Chat persistence operations
"""

import logging
from typing import Any, Sequence
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from vault_rag.boundary.db.CRUD.base_crud import BaseCRUD
from vault_rag.boundary.db.models.conversation_model import ConversationModel, MessageModel
from vault_rag.core.exceptions import NotFoundError

logger = logging.getLogger(__name__)


class ConversationCRUD(BaseCRUD[ConversationModel]):
    """CRUD operations for ConversationModel."""

    def __init__(self) -> None:
        super().__init__(ConversationModel)

    async def get_for_member(
        self,
        session: AsyncSession,
        vault_id: UUID,
        user_id: UUID,
    ) -> ConversationModel | None:
        """Return the caller's conversation in a vault, if one exists."""
        stmt = select(ConversationModel).where(
            ConversationModel.vault_id == vault_id,
            ConversationModel.user_id == user_id,
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_owned(
        self,
        session: AsyncSession,
        conversation_id: UUID,
        vault_id: UUID,
        user_id: UUID,
    ) -> ConversationModel:
        """
        Return a conversation by ID, provided it belongs to (vault, user).

        Raises:
            NotFoundError: No such conversation, or it belongs to someone else
        """
        conversation = await self.get_by_id(session, conversation_id)
        if conversation is None or conversation.vault_id != vault_id or conversation.user_id != user_id:
            raise NotFoundError("conversation", str(conversation_id))
        return conversation

    async def get_or_create(
        self,
        session: AsyncSession,
        vault_id: UUID,
        user_id: UUID,
        title: str,
    ) -> ConversationModel:
        """
        Return the caller's conversation, creating it if absent.

        A concurrent first turn can hit the (vault_id, user_id) unique
        constraint; the losing request rolls back and re-reads the winner's
        row, so the session must hold no other pending writes.

        Args:
            session: Async database session
            vault_id: Vault UUID
            user_id: Caller UUID
            title: Title used only when the conversation is created

        Returns:
            ConversationModel: Existing or newly created conversation
        """
        existing = await self.get_for_member(session, vault_id, user_id)
        if existing is not None:
            return existing

        try:
            return await self.create(session, vault_id=vault_id, user_id=user_id, title=title)
        except IntegrityError:
            await session.rollback()
            logger.info(
                "Conversation created concurrently, reusing existing row",
                extra={"vault_id": str(vault_id), "user_id": str(user_id)},
            )
            conversation = await self.get_for_member(session, vault_id, user_id)
            if conversation is None:
                raise
            return conversation

    async def delete_for_member(
        self,
        session: AsyncSession,
        vault_id: UUID,
        user_id: UUID,
    ) -> bool:
        """
        Delete the caller's conversation and, by cascade, its messages.

        Returns:
            True if a conversation was deleted, False if none existed
        """
        conversation = await self.get_for_member(session, vault_id, user_id)
        if conversation is None:
            return False
        await message_crud.delete_where(session, MessageModel.conversation_id == conversation.id)
        await self.delete_where(session, ConversationModel.id == conversation.id)
        return True


class MessageCRUD(BaseCRUD[MessageModel]):
    """CRUD operations for MessageModel."""

    def __init__(self) -> None:
        super().__init__(MessageModel)

    async def add_message(
        self,
        session: AsyncSession,
        conversation_id: UUID,
        role: str,
        content: str,
        citations: list[dict[str, Any]] | None = None,
    ) -> MessageModel:
        """Append one message to a conversation (flushed, not committed)."""
        return await self.create(
            session,
            conversation_id=conversation_id,
            role=role,
            content=content,
            citations=citations or [],
        )

    async def get_recent(
        self,
        session: AsyncSession,
        conversation_id: UUID,
        limit: int,
    ) -> list[MessageModel]:
        """
        Return the latest `limit` messages, ordered oldest to newest.

        Args:
            session: Async database session
            conversation_id: Conversation UUID
            limit: Window size

        Returns:
            list[MessageModel]: Chronological window ending at the newest message
        """
        stmt = (
            select(MessageModel)
            .where(MessageModel.conversation_id == conversation_id)
            .order_by(MessageModel.created_at.desc())
            .limit(limit)
        )
        result = await session.execute(stmt)
        return list(reversed(result.scalars().all()))

    async def get_for_conversation(
        self,
        session: AsyncSession,
        conversation_id: UUID,
    ) -> Sequence[MessageModel]:
        """Return every message in a conversation, oldest first."""
        stmt = (
            select(MessageModel)
            .where(MessageModel.conversation_id == conversation_id)
            .order_by(MessageModel.created_at.asc())
        )
        result = await session.execute(stmt)
        return result.scalars().all()


conversation_crud = ConversationCRUD()
message_crud = MessageCRUD()
