"""
Document chunk CRUD operations.

Bulk insert and per-item delete for the indexer, plus the two read paths
used by retrieval: the database-side similarity function and a bounded
row scan for in-process ranking.

Dependencies: sqlalchemy, vault_rag.boundary.db.models
System role: Chunk store persistence operations
"""

import json
from typing import Sequence
from uuid import UUID

from sqlalchemy import select, text
from sqlalchemy.ext.asyncio import AsyncSession

from vault_rag.boundary.db.CRUD.base_crud import BaseCRUD
from vault_rag.boundary.db.models.chunk_model import DocumentChunkModel
from vault_rag.models.chunk import Chunk
from vault_rag.models.retrieval import RetrievedChunk

MATCH_CHUNKS_SQL = text(
    """
    SELECT id, source_type, source_id, chunk_index, content, metadata, similarity
    FROM match_vault_chunks(
        :vault_id,
        CAST(:query_embedding AS vector),
        :match_count,
        :match_threshold
    )
    """
)


class ChunkCRUD(BaseCRUD[DocumentChunkModel]):
    """CRUD operations for DocumentChunkModel."""

    def __init__(self) -> None:
        super().__init__(DocumentChunkModel)

    async def get_indexed_keys(
        self,
        session: AsyncSession,
        vault_id: UUID,
    ) -> set[tuple[str, str]]:
        """
        Return every (source_type, source_id) that has at least one chunk.

        Args:
            session: Async database session
            vault_id: Vault UUID

        Returns:
            set[tuple[str, str]]: Item keys with source_id as string
        """
        stmt = (
            select(DocumentChunkModel.source_type, DocumentChunkModel.source_id)
            .where(DocumentChunkModel.vault_id == vault_id)
            .distinct()
        )
        result = await session.execute(stmt)
        return {(source_type, str(source_id)) for source_type, source_id in result.all()}

    async def insert_chunks(
        self,
        session: AsyncSession,
        vault_id: UUID,
        chunks: Sequence[Chunk],
        embeddings: Sequence[list[float]],
    ) -> int:
        """
        Insert chunks with their embeddings (flushed, not committed).

        Args:
            session: Async database session
            vault_id: Owning vault
            chunks: Chunks carrying source_type/source_id metadata
            embeddings: One vector per chunk, same order

        Returns:
            int: Number of rows inserted

        Raises:
            ValueError: If chunk and embedding counts differ
        """
        if len(chunks) != len(embeddings):
            raise ValueError(
                f"Chunk/embedding count mismatch: {len(chunks)} chunks, {len(embeddings)} embeddings"
            )

        rows = [
            DocumentChunkModel(
                vault_id=vault_id,
                source_type=chunk.source_type,
                source_id=UUID(str(chunk.source_id)),
                chunk_index=chunk.index,
                content=chunk.content,
                embedding=list(embedding),
                metadata_=chunk.metadata,
            )
            for chunk, embedding in zip(chunks, embeddings)
        ]
        session.add_all(rows)
        await session.flush()
        return len(rows)

    async def delete_for_item(
        self,
        session: AsyncSession,
        source_type: str,
        source_id: UUID,
        vault_id: UUID | None = None,
    ) -> int:
        """
        Delete every chunk owned by one content item.

        Args:
            session: Async database session
            source_type: source, annotation, or file
            source_id: Content item UUID
            vault_id: Optional vault scope

        Returns:
            int: Number of rows deleted
        """
        criteria = [
            DocumentChunkModel.source_type == source_type,
            DocumentChunkModel.source_id == source_id,
        ]
        if vault_id is not None:
            criteria.append(DocumentChunkModel.vault_id == vault_id)
        return await self.delete_where(session, *criteria)

    async def match_chunks(
        self,
        session: AsyncSession,
        vault_id: UUID,
        query_embedding: list[float],
        top_k: int,
        threshold: float,
    ) -> list[RetrievedChunk]:
        """
        Run the database-side similarity function.

        Raises whatever the driver raises when the function is missing or
        fails; callers decide whether to fall back.

        Returns:
            list[RetrievedChunk]: At most top_k chunks, similarity descending
        """
        result = await session.execute(
            MATCH_CHUNKS_SQL,
            {
                "vault_id": vault_id,
                "query_embedding": json.dumps(query_embedding),
                "match_count": top_k,
                "match_threshold": threshold,
            },
        )
        return [
            RetrievedChunk(
                id=str(row.id),
                source_type=row.source_type,
                source_id=str(row.source_id),
                chunk_index=row.chunk_index,
                content=row.content,
                metadata=_decode_json(row.metadata) or {},
                similarity=float(row.similarity),
            )
            for row in result
        ]

    async def get_vault_chunks(
        self,
        session: AsyncSession,
        vault_id: UUID,
        limit: int,
    ) -> Sequence[DocumentChunkModel]:
        """
        Load a bounded set of a vault's chunks in storage order.

        Args:
            session: Async database session
            vault_id: Vault UUID
            limit: Maximum rows scanned

        Returns:
            Sequence of DocumentChunkModel
        """
        stmt = (
            select(DocumentChunkModel)
            .where(DocumentChunkModel.vault_id == vault_id)
            .order_by(DocumentChunkModel.created_at, DocumentChunkModel.chunk_index)
            .limit(limit)
        )
        result = await session.execute(stmt)
        return result.scalars().all()

    async def count_for_item(
        self,
        session: AsyncSession,
        source_type: str,
        source_id: UUID,
    ) -> int:
        """Number of chunks currently stored for one item."""
        return await self.count_where(
            session,
            DocumentChunkModel.source_type == source_type,
            DocumentChunkModel.source_id == source_id,
        )


def _decode_json(value):
    """Drivers return JSON columns either decoded or as text."""
    if isinstance(value, (str, bytes)):
        return json.loads(value)
    return value


chunk_crud = ChunkCRUD()
