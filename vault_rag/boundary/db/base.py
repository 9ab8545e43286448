"""
SQLAlchemy declarative base and common mixins.

All tables use UUID keys (the portable Uuid type, so the same models run
on PostgreSQL and the SQLite test database). Everything a vault owns
carries a cascading vault_id so deleting a vault removes its chunks,
conversations and content in one statement.

Dependencies: sqlalchemy
System role: Foundation for all database models
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, ForeignKey, Uuid
from sqlalchemy.orm import DeclarativeBase, Mapped, declared_attr, mapped_column


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    """Declarative base; importing a model registers its table in Base.metadata."""

    pass


class UUIDMixin:
    """UUID v4 primary key generated client-side on insert."""

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)


class TimestampMixin:
    """
    created_at / updated_at in UTC.

    Chunks are replaced rather than updated, so on document_chunks the two
    are always equal; updated_at matters for content and conversations.
    """

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        onupdate=utc_now,
        nullable=False,
    )


class VaultScopedMixin:
    """Owning vault; rows are removed with the vault."""

    @declared_attr
    def vault_id(cls) -> Mapped[uuid.UUID]:
        return mapped_column(
            Uuid,
            ForeignKey("vaults.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        )
