"""
Document chunk ORM model.

One embedded chunk of vault content. Re-indexing an item deletes every
chunk it owns before inserting the new ones; rows are never merged.

Dependencies: sqlalchemy, vault_rag.boundary.db.base
System role: Chunk store (system of record for retrieval)
"""

import uuid

from sqlalchemy import Index, Integer, JSON, String, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from vault_rag.boundary.db.base import Base, TimestampMixin, UUIDMixin, VaultScopedMixin


class DocumentChunkModel(Base, UUIDMixin, VaultScopedMixin, TimestampMixin):
    """
    Persisted chunk with its embedding.

    Attributes:
        vault_id: Owning vault (cascade delete)
        source_type: source, annotation, or file
        source_id: ID of the content item the chunk came from
        chunk_index: Ordinal within the item's chunking call
        content: Chunk text
        embedding: Fixed-length float vector, stored as a JSON array
        metadata_: Denormalized display fields (title, author, url)

    Constraints:
        (vault_id, source_type, source_id, chunk_index) is unique
    """

    __tablename__ = "document_chunks"
    __table_args__ = (
        UniqueConstraint(
            "vault_id",
            "source_type",
            "source_id",
            "chunk_index",
            name="uq_document_chunks_item_index",
        ),
        Index("ix_document_chunks_item", "source_type", "source_id"),
    )

    source_type: Mapped[str] = mapped_column(String(20), nullable=False)
    source_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    chunk_index: Mapped[int] = mapped_column(Integer, nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    embedding: Mapped[list[float]] = mapped_column(JSON, nullable=False)
    metadata_: Mapped[dict] = mapped_column("metadata", JSON, nullable=False, default=dict)
