"""Chat API endpoints.

Routes:
- POST /vaults/{vault_id}/chat - Ask a question, answer streamed as Server-Sent Events (SSE)
- GET /vaults/{vault_id}/chat/history - Caller's conversation in this vault
- DELETE /vaults/{vault_id}/chat/history - Clear the caller's conversation

Dependencies: vault_rag.application.services.chat_service
System role: Chat messaging HTTP API with streaming support
"""

import logging
from collections.abc import AsyncGenerator
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import StreamingResponse

from vault_rag.application.services.chat_service import SEARCH_FAILED_MESSAGE, ChatService, ChatTurn
from vault_rag.api.deps import get_chat_service, get_current_user_id
from vault_rag.core.exceptions import (
    NotAuthorizedError,
    ProviderError,
    ServiceUnavailableError,
    ValidationError,
)
from vault_rag.models.chat import ChatHistoryResponse, ChatRequest
from vault_rag.models.streaming import StreamEvent
from vault_rag.observability.correlation import bind_vault

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/vaults", tags=["chat"])

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",  # Disable nginx buffering
}


@router.post("/{vault_id}/chat")
async def chat_stream(
    vault_id: UUID,
    request: ChatRequest,
    user_id: UUID = Depends(get_current_user_id),
    chat_service: ChatService = Depends(get_chat_service),
) -> StreamingResponse:
    """Stream an answer grounded in the vault's content.

    SSE Format (data-only frames, one JSON record each):
        data: {"type": "text", "content": "..."}
        data: {"type": "citations", "citations": [...], "conversationId": "..."}
        data: {"type": "done"}
        data: {"type": "error", "code": "...", "content": "..."}

    Args:
        vault_id: Vault UUID
        request: ChatRequest with question and optional conversation_id
        user_id: Caller (X-User-Id header)
        chat_service: Injected ChatService

    Returns:
        StreamingResponse: SSE stream of chat events

    Raises:
        HTTPException(400): Empty question
        HTTPException(403): Not a vault member
        HTTPException(502): Vault search failed before streaming
        HTTPException(503): Every generation model is unavailable
    """
    bind_vault(vault_id)
    logger.info(f"{__name__}:chat_stream - START vault_id={vault_id}")

    try:
        turn = await chat_service.start_turn(
            vault_id=vault_id,
            user_id=user_id,
            question=request.question,
            conversation_id=request.conversation_id,
        )
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=e.message)
    except NotAuthorizedError as e:
        raise HTTPException(status_code=403, detail=e.message)

    try:
        turn = await chat_service.open_turn(turn)
    except ServiceUnavailableError as e:
        logger.error(f"{__name__}:chat_stream - No generation model available for vault_id={vault_id}")
        raise HTTPException(status_code=503, detail=e.message)
    except ProviderError:
        raise HTTPException(status_code=502, detail=SEARCH_FAILED_MESSAGE)

    return StreamingResponse(
        _event_generator(chat_service, turn),
        media_type="text/event-stream",
        headers=SSE_HEADERS,
    )


async def _event_generator(chat_service: ChatService, turn: ChatTurn) -> AsyncGenerator[str, None]:
    """Render chat events as SSE frames."""
    bind_vault(turn.vault_id)
    try:
        async for event in chat_service.stream_turn(turn):
            yield event.to_sse()
        logger.info(f"{__name__}:chat_stream - Stream completed for vault_id={turn.vault_id}")
    except Exception as e:
        logger.exception(f"{__name__}:chat_stream - {type(e).__name__}: {e}")
        yield StreamEvent.error("Something went wrong while answering. Please try again.").to_sse()


@router.get("/{vault_id}/chat/history", response_model=ChatHistoryResponse)
async def get_chat_history(
    vault_id: UUID,
    user_id: UUID = Depends(get_current_user_id),
    chat_service: ChatService = Depends(get_chat_service),
) -> ChatHistoryResponse:
    """Return the caller's conversation, oldest message first."""
    bind_vault(vault_id)
    try:
        return await chat_service.get_history(vault_id, user_id)
    except NotAuthorizedError as e:
        raise HTTPException(status_code=403, detail=e.message)


@router.delete("/{vault_id}/chat/history")
async def clear_chat_history(
    vault_id: UUID,
    user_id: UUID = Depends(get_current_user_id),
    chat_service: ChatService = Depends(get_chat_service),
) -> dict[str, bool]:
    """Delete the caller's conversation and its messages."""
    bind_vault(vault_id)
    try:
        await chat_service.clear_history(vault_id, user_id)
    except NotAuthorizedError as e:
        raise HTTPException(status_code=403, detail=e.message)
    return {"success": True}
