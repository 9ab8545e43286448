"""
Model fallback generation.

Walks an ordered list of candidate models. Rate-limited calls are retried
on the same model with incrementing waits (base, 2 * base, ...) between
attempts; an unknown model is abandoned at once; any other provider
failure moves on to the next model. The first model that opens a stream
serves the whole turn.

Dependencies: tenacity, vault_rag.boundary.llm, vault_rag.core
System role: Generation resilience
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import AsyncIterator, Awaitable, Callable

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    wait_incrementing,
)

from vault_rag.boundary.llm.generation_client import GeminiGenerationClient
from vault_rag.core.exceptions import (
    ModelNotFoundError,
    ProviderError,
    RateLimitError,
    ServiceUnavailableError,
)
from vault_rag.models.chat import GenerationMessage

logger = logging.getLogger(__name__)


@dataclass
class GenerationStream:
    """An opened generation: the serving model and its text fragments."""

    model: str
    fragments: AsyncIterator[str]


def _log_backoff(model: str, max_attempts: int) -> Callable[[RetryCallState], None]:
    def before_sleep(retry_state: RetryCallState) -> None:
        logger.warning(
            f"{__name__}:open_stream - {model} rate limited "
            f"(attempt {retry_state.attempt_number}/{max_attempts}), "
            f"backing off {retry_state.next_action.sleep:.1f}s"
        )

    return before_sleep


class ModelFallbackGenerator:
    """Open a streaming generation on the first model that accepts it."""

    def __init__(
        self,
        client: GeminiGenerationClient,
        models: list[str],
        max_retries_per_model: int = 2,
        base_delay: float = 1.0,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        """
        Args:
            client: Streaming generation client
            models: Candidate model names in preference order
            max_retries_per_model: Retries after a rate-limited first attempt
            base_delay: Backoff base in seconds
            sleep: Awaitable delay (tests record the delays)
        """
        if not models:
            raise ValueError("At least one generation model is required")
        self._client = client
        self._models = list(models)
        self._max_attempts = max(0, max_retries_per_model) + 1
        self._base_delay = base_delay
        self._sleep = sleep

    def _retrying(self, model: str) -> AsyncRetrying:
        return AsyncRetrying(
            retry=retry_if_exception_type(RateLimitError),
            stop=stop_after_attempt(self._max_attempts),
            wait=wait_incrementing(start=self._base_delay, increment=self._base_delay),
            sleep=self._sleep,
            before_sleep=_log_backoff(model, self._max_attempts),
            reraise=True,
        )

    async def _open_on(self, model: str, system_prompt: str, messages: list[GenerationMessage]) -> AsyncIterator[str]:
        async for attempt in self._retrying(model):
            with attempt:
                return await self._client.open_stream(model, system_prompt, messages)

    async def open_stream(
        self,
        system_prompt: str,
        messages: list[GenerationMessage],
    ) -> GenerationStream:
        """
        Open a stream on the first available model.

        Args:
            system_prompt: System instruction
            messages: Prior turns plus the current question

        Returns:
            GenerationStream: Serving model and fragment iterator

        Raises:
            ServiceUnavailableError: Every model and attempt failed
        """
        for model in self._models:
            try:
                fragments = await self._open_on(model, system_prompt, messages)
            except RateLimitError:
                logger.warning(f"{__name__}:open_stream - {model} still rate limited, trying next model")
                continue
            except ModelNotFoundError:
                logger.warning(f"{__name__}:open_stream - {model} not available, trying next model")
                continue
            except ProviderError as e:
                logger.error(
                    f"{__name__}:open_stream - {model} failed: {e.message}",
                    extra={"status_code": e.status_code},
                )
                continue

            logger.info(f"{__name__}:open_stream - Streaming from {model}")
            return GenerationStream(model=model, fragments=fragments)

        logger.error(f"{__name__}:open_stream - All generation models exhausted")
        raise ServiceUnavailableError(details={"models": self._models})
