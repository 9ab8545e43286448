"""
Chat service for vault Q&A with RAG.

Orchestrates a chat turn in three phases. start_turn() does everything that
can be rejected up front (validation, membership, conversation lookup) and
stores the user's message. open_turn() retrieves context and opens a
generation stream with model fallback; both still run before the response
starts. stream_turn() then yields events to the caller.

The assistant answer is written exactly once, after the provider stream
has ended. A caller that disconnects mid-stream closes the generator at a
yield point, so a partial answer is never stored.

Dependencies: vault_rag.boundary.db, vault_rag.application.services, vault_rag.core
System role: Chat service orchestration layer
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import aclosing
from dataclasses import dataclass, field
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from vault_rag.application.services.generation_service import GenerationStream, ModelFallbackGenerator
from vault_rag.application.services.retrieval_service import RetrievalService
from vault_rag.boundary.db.CRUD.conversation_crud import conversation_crud, message_crud
from vault_rag.boundary.db.CRUD.vault_crud import vault_crud
from vault_rag.core.exceptions import (
    NotAuthorizedError,
    NotFoundError,
    ProviderError,
    ValidationError,
)
from vault_rag.core.prompt import build_history, build_system_prompt
from vault_rag.models.chat import ChatHistoryResponse, ChatMessageResponse, GenerationMessage
from vault_rag.models.citation import Citation
from vault_rag.models.streaming import StreamEvent

logger = logging.getLogger(__name__)

SEARCH_FAILED_MESSAGE = "Could not search this vault right now. Please try again shortly."
STREAM_FAILED_MESSAGE = "The answer was interrupted. Please try again."
UNEXPECTED_ERROR_MESSAGE = "Something went wrong while answering. Please try again."


@dataclass
class ChatTurn:
    """State carried from start_turn() through open_turn() to stream_turn()."""

    vault_id: UUID
    user_id: UUID
    question: str
    conversation_id: UUID
    history: list[GenerationMessage] = field(default_factory=list)
    vault_name: str = "this vault"
    vault_info_text: str | None = None
    members_text: str | None = None
    citations: list[Citation] = field(default_factory=list)
    chunk_count: int = 0
    stream: GenerationStream | None = None


class ChatService:
    """
    Chat service for conversational Q&A over one vault.

    Coordinates membership checks, conversation persistence, retrieval,
    prompt assembly and model fallback generation.
    """

    def __init__(
        self,
        db: AsyncSession,
        retriever: RetrievalService,
        generator: ModelFallbackGenerator,
        history_limit: int = 20,
        prompt_history_messages: int = 6,
        title_length: int = 100,
    ) -> None:
        """
        Initialize chat service.

        Args:
            db: AsyncSession for database operations
            retriever: Retrieval service bound to the same session
            generator: Model fallback generator
            history_limit: Messages loaded per turn
            prompt_history_messages: Prior messages forwarded to the model
            title_length: New conversations are titled with the question cut to this length
        """
        self.db = db
        self.retriever = retriever
        self.generator = generator
        self._history_limit = history_limit
        self._prompt_history_messages = prompt_history_messages
        self._title_length = title_length

    async def start_turn(
        self,
        vault_id: UUID,
        user_id: UUID,
        question: str,
        conversation_id: UUID | None = None,
    ) -> ChatTurn:
        """
        Validate the request and persist the user's message.

        Flow:
        1. Reject empty questions
        2. Reject non-members
        3. Resolve the conversation (create on first turn or unknown id)
        4. Load recent history, then store the new user message

        Raises:
            ValidationError: Empty question
            NotAuthorizedError: Caller is not a vault member
        """
        question = (question or "").strip()
        if not question:
            raise ValidationError("Question is required", field="question")

        if not await vault_crud.is_member(self.db, vault_id, user_id):
            logger.warning(
                f"{__name__}:start_turn - Rejected non-member",
                extra={"vault_id": str(vault_id), "user_id": str(user_id)},
            )
            raise NotAuthorizedError(str(vault_id), str(user_id))

        conversation = None
        if conversation_id is not None:
            try:
                conversation = await conversation_crud.get_owned(self.db, conversation_id, vault_id, user_id)
            except NotFoundError as e:
                logger.info(f"{__name__}:start_turn - {e.message}, resolving by member")
        if conversation is None:
            conversation = await conversation_crud.get_or_create(
                self.db, vault_id, user_id, title=question[: self._title_length]
            )

        prior = await message_crud.get_recent(self.db, conversation.id, self._history_limit)
        history = [
            GenerationMessage(role=message.role, content=message.content)
            for message in prior
            if message.role in ("user", "assistant")
        ]

        await message_crud.add_message(self.db, conversation.id, "user", question)
        await self.db.commit()

        vault = await vault_crud.get_by_id(self.db, vault_id)
        members = await vault_crud.list_members(self.db, vault_id)
        members_text = "\n".join(_describe_member(member) for member in members) or None

        logger.info(
            f"{__name__}:start_turn - Turn started",
            extra={"conversation_id": str(conversation.id), "history_messages": len(history)},
        )
        return ChatTurn(
            vault_id=vault_id,
            user_id=user_id,
            question=question,
            conversation_id=conversation.id,
            history=history,
            vault_name=vault.name if vault else "this vault",
            vault_info_text=vault.description if vault and vault.description else None,
            members_text=members_text,
        )

    async def open_turn(self, turn: ChatTurn) -> ChatTurn:
        """
        Retrieve context and open the generation stream.

        Runs before any response bytes are sent, so its failures can still
        be reported as a plain HTTP error.

        Args:
            turn: Output of start_turn(), filled in place

        Returns:
            ChatTurn: The same turn with context, citations and stream set

        Raises:
            ProviderError: Retrieval failed
            ServiceUnavailableError: Every model and attempt failed
        """
        try:
            context_text, citations, chunks = await self.retriever.retrieve_context(
                turn.vault_id, turn.question
            )
        except ProviderError as e:
            logger.error(f"{__name__}:open_turn - Retrieval failed: {e}")
            raise

        system_prompt = build_system_prompt(
            turn.vault_name,
            context_text,
            members_text=turn.members_text,
            vault_info_text=turn.vault_info_text,
        )
        messages = build_history(turn.history, self._prompt_history_messages)
        messages.append(GenerationMessage(role="user", content=turn.question))

        turn.stream = await self.generator.open_stream(system_prompt, messages)
        turn.citations = citations
        turn.chunk_count = len(chunks)
        return turn

    async def stream_turn(self, turn: ChatTurn) -> AsyncGenerator[StreamEvent, None]:
        """
        Stream one answer from an opened turn.

        Yields text events as fragments arrive, then citations and done. A
        failure after the stream opened ends it with one error event
        carrying a short human-readable message.

        Args:
            turn: Output of open_turn()

        Yields:
            StreamEvent: text*, citations, done | error
        """
        if turn.stream is None:
            await self.open_turn(turn)
        stream = turn.stream

        parts: list[str] = []
        try:
            async with aclosing(stream.fragments) as fragments:
                async for fragment in fragments:
                    parts.append(fragment)
                    yield StreamEvent.text(fragment)
        except ProviderError as e:
            logger.error(f"{__name__}:stream_turn - {stream.model} stream failed: {e}")
            yield StreamEvent.error(STREAM_FAILED_MESSAGE, code="STREAM_INTERRUPTED")
            return

        answer = "".join(parts)
        citation_payload = [citation.model_dump() for citation in turn.citations]

        # Stored before citations and done: a client that has seen done finds the answer in history.
        try:
            if answer:
                await message_crud.add_message(
                    self.db,
                    turn.conversation_id,
                    "assistant",
                    answer,
                    citations=citation_payload,
                )
                await self.db.commit()
            else:
                logger.warning(f"{__name__}:stream_turn - {stream.model} returned an empty answer")
        except Exception as e:
            await self.db.rollback()
            logger.exception(f"{__name__}:stream_turn - Failed to store answer: {type(e).__name__}")
            yield StreamEvent.error(UNEXPECTED_ERROR_MESSAGE)
            return

        logger.info(
            f"{__name__}:stream_turn - Completed",
            extra={
                "conversation_id": str(turn.conversation_id),
                "model": stream.model,
                "chunks": turn.chunk_count,
                "answer_len": len(answer),
            },
        )
        yield StreamEvent.citations(citation_payload, str(turn.conversation_id))
        yield StreamEvent.done()

    async def stream_chat(
        self,
        vault_id: UUID,
        user_id: UUID,
        question: str,
        conversation_id: UUID | None = None,
    ) -> AsyncGenerator[StreamEvent, None]:
        """start_turn(), open_turn() and stream_turn() in one call."""
        turn = await self.start_turn(vault_id, user_id, question, conversation_id)
        await self.open_turn(turn)
        async for event in self.stream_turn(turn):
            yield event

    async def get_history(self, vault_id: UUID, user_id: UUID) -> ChatHistoryResponse:
        """
        Return the caller's conversation in this vault, oldest first.

        Raises:
            NotAuthorizedError: Caller is not a vault member
        """
        if not await vault_crud.is_member(self.db, vault_id, user_id):
            raise NotAuthorizedError(str(vault_id), str(user_id))

        conversation = await conversation_crud.get_for_member(self.db, vault_id, user_id)
        if conversation is None:
            return ChatHistoryResponse(conversation_id=None, messages=[])

        messages = await message_crud.get_for_conversation(self.db, conversation.id)
        return ChatHistoryResponse(
            conversation_id=conversation.id,
            messages=[ChatMessageResponse.model_validate(message) for message in messages],
        )

    async def clear_history(self, vault_id: UUID, user_id: UUID) -> bool:
        """
        Delete the caller's conversation and all its messages.

        Returns:
            True if a conversation existed
        """
        if not await vault_crud.is_member(self.db, vault_id, user_id):
            raise NotAuthorizedError(str(vault_id), str(user_id))

        deleted = await conversation_crud.delete_for_member(self.db, vault_id, user_id)
        await self.db.commit()
        logger.info(f"{__name__}:clear_history - deleted={deleted} vault_id={vault_id}")
        return deleted


def _describe_member(member) -> str:
    name = member.display_name or member.email or str(member.user_id)
    email = f" ({member.email})" if member.email and member.display_name else ""
    return f"- {name}{email}, {member.role}"
