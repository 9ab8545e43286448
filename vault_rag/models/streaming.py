"""
Streaming event schemas for chat turns.

Each event is an independently parsable record delivered as one
Server-Sent Events frame.

Dependencies: pydantic
System role: Streaming protocol schemas
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

from vault_rag.core.sse import format_sse


class StreamEventType(str, Enum):
    """Server-to-client event types for streaming chat."""

    TEXT = "text"
    CITATIONS = "citations"
    DONE = "done"
    ERROR = "error"


class StreamEvent(BaseModel):
    """
    Streaming event model.

    Attributes:
        type: Event type identifier
        data: Event-specific payload, merged into the wire record
    """

    type: StreamEventType
    data: dict[str, Any] = Field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dictionary."""
        return {"type": self.type.value, **self.data}

    def to_sse(self) -> str:
        """Render as one SSE frame."""
        return format_sse(self.to_dict())

    @classmethod
    def text(cls, content: str) -> "StreamEvent":
        return cls(type=StreamEventType.TEXT, data={"content": content})

    @classmethod
    def citations(cls, citations: list[dict[str, Any]], conversation_id: str) -> "StreamEvent":
        return cls(
            type=StreamEventType.CITATIONS,
            data={"citations": citations, "conversationId": conversation_id},
        )

    @classmethod
    def done(cls) -> "StreamEvent":
        return cls(type=StreamEventType.DONE)

    @classmethod
    def error(cls, message: str, code: str = "PROCESSING_ERROR") -> "StreamEvent":
        return cls(type=StreamEventType.ERROR, data={"code": code, "content": message})
