"""
Vault indexing service.

Incremental indexer: every content item that has no chunks yet is chunked,
embedded and persisted in small batches, so peak memory stays at one batch
no matter how large the vault is. Items are processed one at a time and
embedding calls are never issued in parallel.

A failed batch fails every item it touched: their already-persisted chunks
are removed again so the next run sees them as unindexed instead of
skipping a half-written item.

Dependencies: vault_rag.boundary.db, vault_rag.boundary.llm, vault_rag.boundary.storage, vault_rag.core
System role: Indexing orchestration (vault-wide and single item)
"""

import logging
from dataclasses import dataclass
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from vault_rag.boundary.db.CRUD.chunk_crud import chunk_crud
from vault_rag.boundary.db.CRUD.content_crud import content_crud
from vault_rag.boundary.llm.embedding_client import GeminiEmbeddingClient
from vault_rag.boundary.storage.file_extractor import FileExtractor
from vault_rag.core.chunker import (
    DEFAULT_CHUNK_OVERLAP,
    DEFAULT_CHUNK_SIZE,
    chunk_annotation,
    chunk_file,
    chunk_source,
)
from vault_rag.models.chunk import Chunk
from vault_rag.models.content import AnnotationItem, FileItem, SourceItem, SourceType
from vault_rag.models.indexing import IndexStats, ReindexAction
from vault_rag.observability.log_utils import log_event, log_failure

logger = logging.getLogger(__name__)

ItemKey = tuple[str, str]

CATEGORY_COUNTERS = {
    SourceType.SOURCE.value: "indexed_sources",
    SourceType.ANNOTATION.value: "indexed_annotations",
    SourceType.FILE.value: "indexed_files",
}


@dataclass
class _ItemProgress:
    """Chunks of one item still waiting in the buffer vs. already persisted."""

    pending: int
    written: int = 0
    failed: bool = False


class IndexingService:
    """Chunk, embed and persist vault content."""

    def __init__(
        self,
        db: AsyncSession,
        embedder: GeminiEmbeddingClient,
        extractor: FileExtractor,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        chunk_overlap: int = DEFAULT_CHUNK_OVERLAP,
        batch_size: int = 10,
    ) -> None:
        """
        Initialize indexing service.

        Args:
            db: AsyncSession for chunk and content access
            embedder: Embedding provider
            extractor: File text extractor
            chunk_size: Chunk window in characters
            chunk_overlap: Overlap between consecutive chunks
            batch_size: Chunks per embed-and-persist batch
        """
        self.db = db
        self._embedder = embedder
        self._extractor = extractor
        self._chunk_size = chunk_size
        self._chunk_overlap = chunk_overlap
        self._batch_size = max(1, batch_size)

    async def index_vault(self, vault_id: UUID) -> IndexStats:
        """
        Index every item in the vault that has no chunks yet.

        Flow:
        1. Load the set of already-indexed (source_type, source_id) keys
        2. For each unindexed source, annotation and file: derive chunks
        3. Buffer chunks; embed and persist every batch_size chunks
        4. Flush the remainder

        Args:
            vault_id: Vault UUID

        Returns:
            IndexStats: Counts for this run (partial on failures)
        """
        logger.info(f"{__name__}:index_vault - START vault_id={vault_id}")

        stats = IndexStats()
        indexed = await chunk_crud.get_indexed_keys(self.db, vault_id)
        progress: dict[ItemKey, _ItemProgress] = {}
        pending: list[Chunk] = []

        sources = await content_crud.list_sources(self.db, vault_id)
        annotations = await content_crud.list_annotations(self.db, vault_id)
        files = await content_crud.list_files(self.db, vault_id)
        items: list[SourceItem | AnnotationItem | FileItem] = [*sources, *annotations, *files]

        for item in items:
            key = (_source_type_of(item).value, str(item.id))
            if key in indexed:
                stats.skipped_already_indexed += 1
                continue

            try:
                chunks = await self._build_chunks(item)
            except Exception as e:
                log_failure(
                    logger,
                    f"{__name__}:index_vault - Failed to chunk item",
                    e,
                    source_type=key[0],
                    source_id=key[1],
                )
                stats.failed_items += 1
                continue

            if not chunks:
                logger.debug(f"{__name__}:index_vault - No content for {key[0]} {key[1]}")
                continue

            progress[key] = _ItemProgress(pending=len(chunks))
            for chunk in chunks:
                if progress[key].failed:
                    break
                pending.append(chunk)
                if len(pending) >= self._batch_size:
                    await self._flush(vault_id, pending, progress, stats)
                    pending = []

        if pending:
            await self._flush(vault_id, pending, progress, stats)

        log_event(
            logger,
            logging.INFO,
            f"{__name__}:index_vault - END vault_id={vault_id}",
            **stats.model_dump(),
        )
        return stats

    async def reindex_item(
        self,
        vault_id: UUID,
        source_type: SourceType,
        source_id: UUID,
        action: ReindexAction = ReindexAction.UPSERT,
    ) -> int:
        """
        Replace (or remove) the chunks of one item.

        All prior chunks are deleted before new ones are inserted, in one
        transaction, so a failure leaves the previous chunks in place.

        Args:
            vault_id: Vault UUID
            source_type: Kind of item
            source_id: Item UUID
            action: UPSERT re-chunks the item, DELETE only removes chunks

        Returns:
            int: Chunks written

        Raises:
            ProviderError: If embedding fails (transaction rolled back)
        """
        logger.info(
            f"{__name__}:reindex_item - START {source_type.value} {source_id} action={action.value}"
        )
        try:
            deleted = await chunk_crud.delete_for_item(self.db, source_type.value, source_id, vault_id)

            written = 0
            if action == ReindexAction.UPSERT:
                item = await content_crud.get_item(self.db, vault_id, source_type, source_id)
                if item is None:
                    logger.info(f"{__name__}:reindex_item - Item no longer exists, chunks removed")
                else:
                    chunks = await self._build_chunks(item)
                    for start in range(0, len(chunks), self._batch_size):
                        batch = chunks[start:start + self._batch_size]
                        embeddings = await self._embedder.embed_batch([c.content for c in batch])
                        written += await chunk_crud.insert_chunks(self.db, vault_id, batch, embeddings)

            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        logger.info(f"{__name__}:reindex_item - END deleted={deleted} written={written}")
        return written

    async def delete_item_chunks(
        self,
        source_type: SourceType,
        source_id: UUID,
        vault_id: UUID | None = None,
    ) -> int:
        """Remove every chunk of one item (the item itself was deleted)."""
        deleted = await chunk_crud.delete_for_item(self.db, source_type.value, source_id, vault_id)
        await self.db.commit()
        logger.info(f"{__name__}:delete_item_chunks - Removed {deleted} chunks for {source_type.value} {source_id}")
        return deleted

    async def _build_chunks(self, item: SourceItem | AnnotationItem | FileItem) -> list[Chunk]:
        if isinstance(item, SourceItem):
            return chunk_source(item, self._chunk_size, self._chunk_overlap)
        if isinstance(item, AnnotationItem):
            return chunk_annotation(item, self._chunk_size, self._chunk_overlap)
        text = await self._extractor.extract(item)
        return chunk_file(item, text, self._chunk_size, self._chunk_overlap)

    async def _flush(
        self,
        vault_id: UUID,
        batch: list[Chunk],
        progress: dict[ItemKey, _ItemProgress],
        stats: IndexStats,
    ) -> None:
        """Embed and persist one batch, then settle per-item bookkeeping."""
        keys = list(dict.fromkeys((c.source_type, c.source_id) for c in batch))
        try:
            embeddings = await self._embedder.embed_batch([c.content for c in batch])
            await chunk_crud.insert_chunks(self.db, vault_id, batch, embeddings)
            await self.db.commit()
        except Exception as e:
            await self.db.rollback()
            log_failure(
                logger,
                f"{__name__}:_flush - Batch failed",
                e,
                vault_id=vault_id,
                batch_size=len(batch),
                items=keys,
            )
            for key in keys:
                await self._fail_item(vault_id, key, progress[key], stats)
            return

        stats.total_chunks += len(batch)
        for chunk in batch:
            progress[(chunk.source_type, chunk.source_id)].written += 1
        for key in keys:
            item_progress = progress[key]
            item_progress.pending -= sum(1 for c in batch if (c.source_type, c.source_id) == key)
            if item_progress.pending == 0 and not item_progress.failed:
                counter = CATEGORY_COUNTERS[key[0]]
                setattr(stats, counter, getattr(stats, counter) + 1)

    async def _fail_item(
        self,
        vault_id: UUID,
        key: ItemKey,
        item_progress: _ItemProgress,
        stats: IndexStats,
    ) -> None:
        if item_progress.failed:
            return
        item_progress.failed = True
        stats.failed_items += 1
        if item_progress.written:
            await chunk_crud.delete_for_item(self.db, key[0], UUID(key[1]), vault_id)
            await self.db.commit()
            stats.total_chunks -= item_progress.written
            item_progress.written = 0


def _source_type_of(item: SourceItem | AnnotationItem | FileItem) -> SourceType:
    if isinstance(item, SourceItem):
        return SourceType.SOURCE
    if isinstance(item, AnnotationItem):
        return SourceType.ANNOTATION
    return SourceType.FILE
