"""
Conversation and message ORM models.

At most one conversation exists per (vault, user); it is created lazily on
the first chat turn. Messages are append-only and only ever removed
together with their conversation.

Dependencies: sqlalchemy, vault_rag.boundary.db.base
System role: Chat persistence
"""

import uuid
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, JSON, String, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from vault_rag.boundary.db.base import Base, TimestampMixin, UUIDMixin, VaultScopedMixin, utc_now


class ConversationModel(Base, UUIDMixin, VaultScopedMixin, TimestampMixin):
    """Per-user, per-vault chat thread."""

    __tablename__ = "chat_conversations"
    __table_args__ = (
        UniqueConstraint("vault_id", "user_id", name="uq_chat_conversations_vault_user"),
    )

    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    title: Mapped[str] = mapped_column(String(255), nullable=False, default="")

    messages = relationship(
        "MessageModel",
        back_populates="conversation",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


class MessageModel(Base, UUIDMixin):
    """Single chat message; citations are stored on assistant messages."""

    __tablename__ = "chat_messages"

    conversation_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("chat_conversations.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    role: Mapped[str] = mapped_column(String(16), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    citations: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        nullable=False,
    )

    conversation = relationship("ConversationModel", back_populates="messages")
