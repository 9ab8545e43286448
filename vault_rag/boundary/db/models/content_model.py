"""
Vault content ORM models (sources, annotations, files).

Owned by the external content CRUD handlers; read-only here. Files hold a
storage key and size, never the file body.

Dependencies: sqlalchemy, vault_rag.boundary.db.base
System role: Content item persistence read by the indexer
"""

import uuid

from sqlalchemy import BigInteger, ForeignKey, JSON, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from vault_rag.boundary.db.base import Base, TimestampMixin, UUIDMixin, VaultScopedMixin


class SourceModel(Base, UUIDMixin, VaultScopedMixin, TimestampMixin):
    """Saved link or reference with bibliographic metadata."""

    __tablename__ = "sources"

    url: Mapped[str] = mapped_column(String(2048), nullable=False)
    title: Mapped[str | None] = mapped_column(String(512), nullable=True)
    metadata_: Mapped[dict] = mapped_column("metadata", JSON, nullable=False, default=dict)
    created_by: Mapped[uuid.UUID | None] = mapped_column(Uuid, nullable=True)


class AnnotationModel(Base, UUIDMixin, TimestampMixin):
    """Member note attached to a source."""

    __tablename__ = "annotations"

    source_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("sources.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    content: Mapped[str] = mapped_column(Text, nullable=False)
    created_by: Mapped[uuid.UUID | None] = mapped_column(Uuid, nullable=True)


class FileModel(Base, UUIDMixin, VaultScopedMixin, TimestampMixin):
    """Uploaded file metadata."""

    __tablename__ = "files"

    file_name: Mapped[str] = mapped_column(String(512), nullable=False)
    file_url: Mapped[str] = mapped_column(
        String(2048),
        nullable=False,
        doc="Storage key, or an http(s) URL for seeded placeholder files",
    )
    file_size: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    uploaded_by: Mapped[uuid.UUID | None] = mapped_column(Uuid, nullable=True)
