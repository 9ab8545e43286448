"""
Retrieval result model.

Dependencies: pydantic
System role: Ranked chunk returned by the retriever
"""

from typing import Any

from pydantic import BaseModel, Field


class RetrievedChunk(BaseModel):
    """Single chunk returned by similarity search."""

    id: str = Field(description="Chunk record identifier")
    source_type: str
    source_id: str
    chunk_index: int
    content: str
    metadata: dict[str, Any] = Field(default_factory=dict)
    similarity: float = Field(description="Cosine similarity to the query (higher is closer)")
