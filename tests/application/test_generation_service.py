"""
Test suite for ModelFallbackGenerator.

System role: Verification of generation resilience (retry and model fallback)
"""

import pytest

from conftest import ScriptedGenerationClient
from vault_rag.application.services.generation_service import ModelFallbackGenerator
from vault_rag.core.exceptions import (
    ModelNotFoundError,
    ProviderError,
    RateLimitError,
    ServiceUnavailableError,
)
from vault_rag.models.chat import GenerationMessage

MESSAGES = [GenerationMessage(role="user", content="Question?")]


def rate_limited() -> RateLimitError:
    return RateLimitError("slow down", provider="generation", status_code=429)


class RecordingSleep:
    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


async def collect(stream) -> list[str]:
    return [fragment async for fragment in stream.fragments]


def test_requires_at_least_one_model():
    with pytest.raises(ValueError):
        ModelFallbackGenerator(ScriptedGenerationClient({}), models=[])


@pytest.mark.asyncio
class TestOpenStream:
    """ModelFallbackGenerator.open_stream()"""

    async def test_rate_limited_model_backs_off_then_next_model_serves(self) -> None:
        """Test two rate-limited retries back off 1s then 2s before model-2 serves."""
        # Arrange
        client = ScriptedGenerationClient({
            "model-1": [rate_limited(), rate_limited(), rate_limited()],
            "model-2": [["Grounded ", "answer."]],
        })
        sleep = RecordingSleep()
        generator = ModelFallbackGenerator(
            client, ["model-1", "model-2"], max_retries_per_model=2, base_delay=1.0, sleep=sleep
        )

        # Act
        stream = await generator.open_stream("system", MESSAGES)

        # Assert
        assert stream.model == "model-2"
        assert await collect(stream) == ["Grounded ", "answer."]
        assert client.calls == ["model-1", "model-1", "model-1", "model-2"]
        assert sleep.delays == [1.0, 2.0]

    async def test_no_wait_after_final_attempt(self) -> None:
        """Test every backoff is followed by another attempt on the same model."""
        # Arrange
        client = ScriptedGenerationClient({"only": [rate_limited(), rate_limited()]})
        sleep = RecordingSleep()
        generator = ModelFallbackGenerator(
            client, ["only"], max_retries_per_model=1, base_delay=1.0, sleep=sleep
        )

        # Act
        with pytest.raises(ServiceUnavailableError):
            await generator.open_stream("system", MESSAGES)

        # Assert
        assert client.calls == ["only", "only"]
        assert sleep.delays == [1.0]

    async def test_zero_retries_advances_without_waiting(self) -> None:
        client = ScriptedGenerationClient({
            "model-1": [rate_limited()],
            "model-2": [["ok"]],
        })
        sleep = RecordingSleep()
        generator = ModelFallbackGenerator(
            client, ["model-1", "model-2"], max_retries_per_model=0, sleep=sleep
        )

        stream = await generator.open_stream("system", MESSAGES)

        assert stream.model == "model-2"
        assert sleep.delays == []

    async def test_rate_limit_recovers_on_same_model(self) -> None:
        client = ScriptedGenerationClient({"model-1": [rate_limited(), ["ok"]]})
        sleep = RecordingSleep()
        generator = ModelFallbackGenerator(client, ["model-1"], sleep=sleep)

        stream = await generator.open_stream("system", MESSAGES)

        assert stream.model == "model-1"
        assert sleep.delays == [1.0]

    async def test_unknown_model_is_skipped_without_retry(self) -> None:
        client = ScriptedGenerationClient({
            "retired": [ModelNotFoundError("gone", provider="generation", status_code=404)],
            "current": [["hi"]],
        })
        sleep = RecordingSleep()
        generator = ModelFallbackGenerator(client, ["retired", "current"], sleep=sleep)

        stream = await generator.open_stream("system", MESSAGES)

        assert stream.model == "current"
        assert client.calls == ["retired", "current"]
        assert sleep.delays == []

    async def test_other_provider_error_moves_to_next_model(self) -> None:
        client = ScriptedGenerationClient({
            "model-1": [ProviderError("boom", provider="generation", status_code=500)],
            "model-2": [["fine"]],
        })
        sleep = RecordingSleep()
        generator = ModelFallbackGenerator(client, ["model-1", "model-2"], sleep=sleep)

        stream = await generator.open_stream("system", MESSAGES)

        assert stream.model == "model-2"
        assert client.calls == ["model-1", "model-2"]
        assert sleep.delays == []

    async def test_exhaustion_raises_service_unavailable(self) -> None:
        client = ScriptedGenerationClient({
            "model-1": [rate_limited(), rate_limited(), rate_limited()],
            "model-2": [ModelNotFoundError("gone", provider="generation", status_code=404)],
        })
        generator = ModelFallbackGenerator(client, ["model-1", "model-2"], sleep=RecordingSleep())

        with pytest.raises(ServiceUnavailableError) as exc_info:
            await generator.open_stream("system", MESSAGES)

        assert exc_info.value.details["models"] == ["model-1", "model-2"]

    async def test_forwards_prompt_and_messages(self) -> None:
        client = ScriptedGenerationClient({"model-1": [["x"]]})
        generator = ModelFallbackGenerator(client, ["model-1"])

        await generator.open_stream("the system prompt", MESSAGES)

        assert client.last_system_prompt == "the system prompt"
        assert client.last_messages == MESSAGES
