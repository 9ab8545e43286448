"""
Retrieval service.

Embeds the question and asks the database similarity function for the
best chunks. When that call errors (function missing, extension not
installed, driver failure) a bounded window of stored vectors is ranked
in-process instead. A legitimately empty primary result is returned as-is.

Dependencies: sqlalchemy, vault_rag.boundary.db, vault_rag.boundary.llm, vault_rag.core
System role: Retrieval orchestration
"""

import json
import logging
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from vault_rag.boundary.db.CRUD.chunk_crud import chunk_crud
from vault_rag.boundary.llm.embedding_client import GeminiEmbeddingClient
from vault_rag.core.context_formatter import DEFAULT_SNIPPET_LENGTH, format_context
from vault_rag.core.similarity import rank_by_similarity
from vault_rag.models.citation import Citation
from vault_rag.models.retrieval import RetrievedChunk

logger = logging.getLogger(__name__)


class RetrievalService:
    """Similarity search over a vault's chunks with an in-process fallback."""

    def __init__(
        self,
        db: AsyncSession,
        embedder: GeminiEmbeddingClient,
        top_k: int = 8,
        threshold: float = 0.4,
        fallback_scan_limit: int = 200,
        snippet_length: int = DEFAULT_SNIPPET_LENGTH,
    ) -> None:
        """
        Initialize retrieval service.

        Args:
            db: AsyncSession with no pending writes (a failed primary query rolls it back)
            embedder: Embedding provider for the query
            top_k: Maximum chunks returned
            threshold: Minimum cosine similarity (inclusive)
            fallback_scan_limit: Rows scanned by the fallback path
            snippet_length: Citation snippet length
        """
        self.db = db
        self._embedder = embedder
        self._top_k = top_k
        self._threshold = threshold
        self._fallback_scan_limit = fallback_scan_limit
        self._snippet_length = snippet_length

    async def retrieve(
        self,
        vault_id: UUID,
        query: str,
        top_k: int | None = None,
        threshold: float | None = None,
    ) -> list[RetrievedChunk]:
        """
        Return the chunks most similar to the query.

        Args:
            vault_id: Vault UUID
            query: Question text
            top_k: Override for the configured result count
            threshold: Override for the configured similarity floor

        Returns:
            list[RetrievedChunk]: Similarity descending, all >= threshold

        Raises:
            ProviderError: If the query cannot be embedded
        """
        top_k = self._top_k if top_k is None else top_k
        threshold = self._threshold if threshold is None else threshold

        query_embedding = await self._embedder.embed(query)

        try:
            chunks = await chunk_crud.match_chunks(self.db, vault_id, query_embedding, top_k, threshold)
        except SQLAlchemyError as e:
            logger.warning(
                f"{__name__}:retrieve - Primary similarity search failed, using fallback scan",
                extra={"vault_id": str(vault_id), "error_type": type(e).__name__},
            )
            await self.db.rollback()
            return await self._fallback_search(vault_id, query_embedding, top_k, threshold)

        logger.info(
            f"{__name__}:retrieve - Primary search returned {len(chunks)} chunks",
            extra={"vault_id": str(vault_id)},
        )
        return chunks

    async def retrieve_context(
        self,
        vault_id: UUID,
        query: str,
    ) -> tuple[str, list[Citation], list[RetrievedChunk]]:
        """
        Retrieve and format in one step.

        Returns:
            tuple: (context_text, citations, chunks)
        """
        chunks = await self.retrieve(vault_id, query)
        context_text, citations = format_context(chunks, self._snippet_length)
        return context_text, citations, chunks

    async def _fallback_search(
        self,
        vault_id: UUID,
        query_embedding: list[float],
        top_k: int,
        threshold: float,
    ) -> list[RetrievedChunk]:
        rows = await chunk_crud.get_vault_chunks(self.db, vault_id, self._fallback_scan_limit)
        candidates = [(row, _as_vector(row.embedding)) for row in rows]
        ranked = rank_by_similarity(query_embedding, candidates, top_k, threshold)

        logger.info(
            f"{__name__}:_fallback_search - Scanned {len(rows)} rows, kept {len(ranked)}",
            extra={"vault_id": str(vault_id)},
        )
        return [
            RetrievedChunk(
                id=str(row.id),
                source_type=row.source_type,
                source_id=str(row.source_id),
                chunk_index=row.chunk_index,
                content=row.content,
                metadata=row.metadata_ or {},
                similarity=similarity,
            )
            for row, similarity in ranked
        ]


def _as_vector(value) -> list[float]:
    """Stored embeddings may come back decoded or as JSON text."""
    if isinstance(value, (str, bytes)):
        value = json.loads(value)
    return [float(x) for x in value or []]
