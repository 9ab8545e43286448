"""
Chunk domain model.

Represents one bounded slice of content text produced by the chunker,
tagged with provenance metadata. The unit of embedding and retrieval.

Dependencies: pydantic
System role: Document chunk data structure
"""

from typing import Any

from pydantic import BaseModel, Field


class Chunk(BaseModel):
    """Transient chunk produced by a single chunking call."""

    content: str = Field(description="Chunk text content")
    index: int = Field(description="Ordinal within one chunking call, starting at 0")
    metadata: dict[str, Any] = Field(
        default_factory=dict,
        description="Provenance (source_type, source_id) and denormalized display fields",
    )

    @property
    def source_type(self) -> str:
        return self.metadata["source_type"]

    @property
    def source_id(self) -> str:
        return self.metadata["source_id"]
