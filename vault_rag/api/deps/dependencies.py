"""
Dependency injection container.

Factory functions for FastAPI dependencies. Provider clients are
process-wide and cached; services are built per request around the
request's database session.

Dependencies: vault_rag.configs, vault_rag.application, vault_rag.boundary
System role: DI container for service injection
"""

from functools import lru_cache
from typing import Callable
from uuid import UUID

from fastapi import Depends, Header, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from vault_rag.configs import Settings, get_settings
from vault_rag.boundary.db import get_async_db
from vault_rag.boundary.db.CRUD.vault_crud import vault_crud
from vault_rag.observability.correlation import bind_vault
from vault_rag.application.services import (
    ChatService,
    IndexingService,
    ModelFallbackGenerator,
    RetrievalService,
)

ReindexEnqueuer = Callable[[UUID, str, UUID, str], str | None]


class ServiceCache:
    """Container for cached provider clients."""

    def __init__(self):
        self._embedding_client = None
        self._generation_client = None
        self._file_extractor = None

    @property
    def embedding_client(self):
        """Get cached embedding client."""
        if self._embedding_client is None:
            from vault_rag.boundary.llm.embedding_client import GeminiEmbeddingClient

            self._embedding_client = GeminiEmbeddingClient.from_settings(get_settings().llm)
        return self._embedding_client

    @property
    def generation_client(self):
        """Get cached streaming generation client."""
        if self._generation_client is None:
            from vault_rag.boundary.llm.generation_client import GeminiGenerationClient

            self._generation_client = GeminiGenerationClient.from_settings(get_settings().llm)
        return self._generation_client

    @property
    def file_extractor(self):
        """Get cached file extractor backed by the vault files bucket."""
        if self._file_extractor is None:
            from vault_rag.boundary.storage import FileExtractor, S3FileStore

            settings = get_settings()
            store = S3FileStore(bucket=settings.storage.bucket, region=settings.storage.region)
            self._file_extractor = FileExtractor(store, max_file_size=settings.rag.max_file_size)
        return self._file_extractor

    async def aclose(self) -> None:
        """Release network resources and clear all cached instances."""
        if self._generation_client is not None:
            await self._generation_client.aclose()
        self.clear()

    def clear(self) -> None:
        """Clear all cached instances."""
        self._embedding_client = None
        self._generation_client = None
        self._file_extractor = None


# Global service cache
_service_cache = ServiceCache()


def get_service_cache() -> ServiceCache:
    """Get service cache singleton."""
    return _service_cache


@lru_cache
def get_settings_dependency() -> Settings:
    """Get settings singleton."""
    return get_settings()


def get_current_user_id(x_user_id: str | None = Header(default=None, alias="X-User-Id")) -> UUID:
    """
    Resolve the authenticated caller.

    Authentication happens upstream; the gateway forwards the user id.

    Raises:
        HTTPException(401): Header missing or not a UUID
    """
    if not x_user_id:
        raise HTTPException(status_code=401, detail="Unauthorized")
    try:
        return UUID(x_user_id)
    except ValueError:
        raise HTTPException(status_code=401, detail="Unauthorized")


async def require_vault_member(
    vault_id: UUID,
    user_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_async_db),
) -> UUID:
    """
    Reject callers who are not members of the path vault.

    Returns:
        UUID: The caller's user id

    Raises:
        HTTPException(403): Not a member
    """
    bind_vault(vault_id)
    if not await vault_crud.is_member(db, vault_id, user_id):
        raise HTTPException(status_code=403, detail="Not a member of this vault")
    return user_id


def get_retrieval_service(
    db: AsyncSession = Depends(get_async_db),
    settings: Settings = Depends(get_settings_dependency),
) -> RetrievalService:
    """
    Get retrieval service instance.

    Args:
        db: Async database session (injected via Depends)
        settings: Application settings

    Returns:
        RetrievalService: Retriever bound to this request's session
    """
    rag = settings.rag
    return RetrievalService(
        db=db,
        embedder=get_service_cache().embedding_client,
        top_k=rag.top_k,
        threshold=rag.similarity_threshold,
        fallback_scan_limit=rag.fallback_scan_limit,
        snippet_length=rag.snippet_length,
    )


def get_chat_service(
    db: AsyncSession = Depends(get_async_db),
    retriever: RetrievalService = Depends(get_retrieval_service),
    settings: Settings = Depends(get_settings_dependency),
) -> ChatService:
    """
    Get chat service instance with retrieval and model fallback generation.

    Returns:
        ChatService: Chat service for this request
    """
    generator = ModelFallbackGenerator(
        client=get_service_cache().generation_client,
        models=settings.llm.generation_models,
        max_retries_per_model=settings.llm.max_retries_per_model,
        base_delay=settings.llm.retry_base_delay,
    )
    return ChatService(
        db=db,
        retriever=retriever,
        generator=generator,
        history_limit=settings.rag.history_limit,
        prompt_history_messages=settings.rag.prompt_history_messages,
        title_length=settings.rag.conversation_title_length,
    )


def get_indexing_service(
    db: AsyncSession = Depends(get_async_db),
    settings: Settings = Depends(get_settings_dependency),
) -> IndexingService:
    """
    Get indexing service instance.

    Returns:
        IndexingService: Indexer bound to this request's session
    """
    cache = get_service_cache()
    return IndexingService(
        db=db,
        embedder=cache.embedding_client,
        extractor=cache.file_extractor,
        chunk_size=settings.rag.chunk_size,
        chunk_overlap=settings.rag.chunk_overlap,
        batch_size=settings.rag.index_batch_size,
    )


def _enqueue_reindex(vault_id: UUID, source_type: str, source_id: UUID, action: str) -> str | None:
    # Lazy import so the API does not need a broker connection at startup
    from vault_rag.workers.tasks.reindex import reindex_item_task

    result = reindex_item_task.delay(str(vault_id), source_type, str(source_id), action)
    return result.id


def get_reindex_enqueuer() -> ReindexEnqueuer:
    """Get the function that schedules single-item reindex jobs."""
    return _enqueue_reindex
