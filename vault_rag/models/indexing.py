"""
Indexing request/response schemas.

Dependencies: pydantic
System role: Indexing API contracts
"""

import enum

from pydantic import BaseModel, Field


class IndexStats(BaseModel):
    """Outcome of one vault indexing run."""

    total_chunks: int = Field(default=0, description="Chunks written in this run")
    indexed_sources: int = 0
    indexed_annotations: int = 0
    indexed_files: int = 0
    skipped_already_indexed: int = Field(
        default=0,
        description="Items skipped because chunks already exist for them",
    )
    failed_items: int = Field(default=0, description="Items that could not be indexed")


class ReindexAction(str, enum.Enum):
    """What a single-item index job does."""

    UPSERT = "upsert"
    DELETE = "delete"


class ReindexRequest(BaseModel):
    """Request body for single-item index jobs."""

    action: ReindexAction = ReindexAction.UPSERT


class ReindexQueuedResponse(BaseModel):
    """Acknowledgement that a reindex job was enqueued."""

    queued: bool = True
    task_id: str | None = None
