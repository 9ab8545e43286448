"""
Single-item reindex Celery task.

Task: reindex_item_task(vault_id, source_type, source_id, action)
Flow: delete the item's chunks -> (upsert) chunk -> embed -> insert -> commit

Each job runs on its own event loop, so it builds a pool-less engine for
that loop instead of sharing the API's connection pool.

Dependencies: celery, sqlalchemy, vault_rag.application, vault_rag.workers
System role: Async reindex processing task
"""

import asyncio
import logging
from functools import lru_cache
from uuid import UUID

from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from vault_rag.application.services.indexing_service import IndexingService
from vault_rag.boundary.llm.embedding_client import GeminiEmbeddingClient
from vault_rag.boundary.storage import FileExtractor, S3FileStore
from vault_rag.configs import get_settings
from vault_rag.core.exceptions import ProviderError
from vault_rag.models.content import SourceType
from vault_rag.models.indexing import ReindexAction
from vault_rag.observability.correlation import bind_vault
from vault_rag.workers import celery_app, celery_config

logger = logging.getLogger(__name__)


@lru_cache
def get_worker_embedder() -> GeminiEmbeddingClient:
    return GeminiEmbeddingClient.from_settings(get_settings().llm)


@lru_cache
def get_worker_extractor() -> FileExtractor:
    settings = get_settings()
    store = S3FileStore(bucket=settings.storage.bucket, region=settings.storage.region)
    return FileExtractor(store, max_file_size=settings.rag.max_file_size)


def _job_session_factory():
    engine = create_async_engine(get_settings().database.async_database_url, poolclass=NullPool)
    return engine, async_sessionmaker(bind=engine, expire_on_commit=False)


async def run_reindex_job(
    vault_id: str,
    source_type: str,
    source_id: str,
    action: str = ReindexAction.UPSERT.value,
    session_factory=None,
    embedder: GeminiEmbeddingClient | None = None,
    extractor: FileExtractor | None = None,
) -> int:
    """
    Reindex or remove one item's chunks.

    Args:
        vault_id: Vault UUID as string
        source_type: source, annotation, or file
        source_id: Item UUID as string
        action: upsert or delete
        session_factory: Session factory (a per-job engine when None)
        embedder: Embedding client override
        extractor: File extractor override

    Returns:
        int: Chunks written
    """
    bind_vault(vault_id)
    engine = None
    if session_factory is None:
        engine, session_factory = _job_session_factory()

    settings = get_settings()
    try:
        async with session_factory() as db:
            service = IndexingService(
                db=db,
                embedder=embedder or get_worker_embedder(),
                extractor=extractor or get_worker_extractor(),
                chunk_size=settings.rag.chunk_size,
                chunk_overlap=settings.rag.chunk_overlap,
                batch_size=settings.rag.index_batch_size,
            )
            return await service.reindex_item(
                UUID(vault_id),
                SourceType(source_type),
                UUID(source_id),
                ReindexAction(action),
            )
    finally:
        if engine is not None:
            await engine.dispose()


@celery_app.task(
    bind=True,
    max_retries=celery_config.reindex_max_retries,
    autoretry_for=(ProviderError,),
    retry_backoff=celery_config.reindex_retry_backoff,
    retry_backoff_max=celery_config.reindex_retry_backoff_max,
)
def reindex_item_task(self, vault_id: str, source_type: str, source_id: str, action: str = "upsert"):
    """
    Reindex one content item in the background.

    Provider failures are retried with backoff; anything else is logged
    and re-raised so the result backend records the failure.

    Returns:
        dict: Item key and chunks written
    """
    logger.info(
        f"{__name__}:reindex_item_task - START {action} {source_type} {source_id}",
        extra={"task_id": self.request.id, "vault_id": vault_id},
    )
    try:
        written = asyncio.run(run_reindex_job(vault_id, source_type, source_id, action))
    except ProviderError:
        logger.warning(f"{__name__}:reindex_item_task - Provider failure, retry {self.request.retries}")
        raise
    except Exception as e:
        logger.exception(f"{__name__}:reindex_item_task - Failed: {type(e).__name__}: {e}")
        raise

    logger.info(f"{__name__}:reindex_item_task - END chunks_written={written}")
    return {"source_type": source_type, "source_id": source_id, "chunks_written": written}
