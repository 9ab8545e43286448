"""
Chat domain models and schemas.

Request/response schemas for chat operations.

Dependencies: pydantic
System role: Chat API contracts
"""

import uuid
from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


class ChatRequest(BaseModel):
    """Request schema for a chat turn."""

    question: str = Field(default="", description="User question (blank is rejected with 400)")
    conversation_id: uuid.UUID | None = Field(
        default=None,
        description="Existing conversation to continue",
    )


class GenerationMessage(BaseModel):
    """One prior turn forwarded to the generation model."""

    role: Literal["user", "assistant"]
    content: str


class ChatMessageResponse(BaseModel):
    """Single chat message in history."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    role: str = Field(description="Message role: 'user' or 'assistant'")
    content: str = Field(description="Message content")
    citations: list[dict[str, Any]] = Field(default_factory=list)
    created_at: datetime


class ChatHistoryResponse(BaseModel):
    """Response schema for chat history."""

    conversation_id: uuid.UUID | None = None
    messages: list[ChatMessageResponse]
