"""
Vault content item models.

Lightweight, metadata-only views of the content a vault holds. No binary
payloads are ever loaded into these records; file bodies are fetched
lazily by the extractor.

Dependencies: pydantic
System role: Read-only content provider contracts
"""

import enum
import uuid
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class SourceType(str, enum.Enum):
    """Kinds of indexable vault content."""

    SOURCE = "source"
    ANNOTATION = "annotation"
    FILE = "file"


class SourceItem(BaseModel):
    """A saved link/reference with descriptive metadata."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    vault_id: uuid.UUID
    url: str
    title: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)
    created_by: uuid.UUID | None = None


class AnnotationItem(BaseModel):
    """A member's note attached to a source."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    source_id: uuid.UUID
    content: str
    created_by: uuid.UUID | None = None
    author_name: str | None = None
    author_email: str | None = None
    source_title: str | None = Field(default=None, description="Parent source title")


class FileItem(BaseModel):
    """An uploaded file; only storage location and size, never the body."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    vault_id: uuid.UUID
    file_name: str
    file_url: str
    file_size: int | None = None
    uploaded_by: uuid.UUID | None = None
