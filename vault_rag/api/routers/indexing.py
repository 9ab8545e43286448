"""Indexing API endpoints.

Routes:
- POST /vaults/{vault_id}/index - Index every not-yet-indexed item in the vault
- POST /vaults/{vault_id}/items/{source_type}/{source_id}/index - Queue a single-item reindex

Dependencies: vault_rag.application.services.indexing_service, vault_rag.workers
System role: Indexing HTTP API
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException

from vault_rag.application.services.indexing_service import IndexingService
from vault_rag.api.deps import get_indexing_service, get_reindex_enqueuer, require_vault_member
from vault_rag.api.deps.dependencies import ReindexEnqueuer
from vault_rag.core.exceptions import VaultRAGException
from vault_rag.models.content import SourceType
from vault_rag.models.indexing import IndexStats, ReindexQueuedResponse, ReindexRequest

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/vaults", tags=["indexing"])


@router.post("/{vault_id}/index", response_model=IndexStats)
async def index_vault(
    vault_id: UUID,
    user_id: UUID = Depends(require_vault_member),
    indexing_service: IndexingService = Depends(get_indexing_service),
) -> IndexStats:
    """Index all content that has no chunks yet.

    Items that fail are counted in failed_items; the run still returns 200
    with accurate partial counts.

    Raises:
        HTTPException(403): Not a vault member
        HTTPException(500): Content could not be listed
    """
    logger.info(f"{__name__}:index_vault - START vault_id={vault_id} user_id={user_id}")
    try:
        return await indexing_service.index_vault(vault_id)
    except VaultRAGException as e:
        logger.error(f"{__name__}:index_vault - {e}")
        raise HTTPException(status_code=500, detail="Indexing failed")


@router.post(
    "/{vault_id}/items/{source_type}/{source_id}/index",
    response_model=ReindexQueuedResponse,
    status_code=202,
)
async def reindex_item(
    vault_id: UUID,
    source_type: SourceType,
    source_id: UUID,
    request: ReindexRequest,
    user_id: UUID = Depends(require_vault_member),
    enqueue: ReindexEnqueuer = Depends(get_reindex_enqueuer),
) -> ReindexQueuedResponse:
    """Queue a background reindex (or chunk removal) for one item.

    Fire-and-forget: the caller's own write has already succeeded, so a
    failed reindex is logged by the worker and never reported here.
    """
    task_id = enqueue(vault_id, source_type.value, source_id, request.action.value)
    logger.info(
        f"{__name__}:reindex_item - Queued {request.action.value} for {source_type.value} {source_id}",
        extra={"task_id": task_id, "user_id": str(user_id)},
    )
    return ReindexQueuedResponse(queued=True, task_id=task_id)
