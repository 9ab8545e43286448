"""
Test suite for the streaming Gemini client.

Uses httpx.MockTransport so status classification and incremental SSE
decoding are exercised without network access.

System role: Verification of generation provider boundary
"""

import json

import httpx
import pytest

from vault_rag.boundary.llm.generation_client import (
    GeminiGenerationClient,
    build_request_body,
    classify_error,
    extract_text,
)
from vault_rag.core.exceptions import ModelNotFoundError, ProviderError, RateLimitError
from vault_rag.models.chat import GenerationMessage

MESSAGES = [
    GenerationMessage(role="user", content="Earlier question"),
    GenerationMessage(role="assistant", content="Earlier answer"),
    GenerationMessage(role="user", content="What about folding?"),
]


def frame(text: str) -> bytes:
    payload = {"candidates": [{"content": {"parts": [{"text": text}]}}]}
    return f"data: {json.dumps(payload)}\r\n\r\n".encode()


async def byte_stream(chunks: list[bytes]):
    for chunk in chunks:
        yield chunk


def make_client(handler) -> GeminiGenerationClient:
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return GeminiGenerationClient(api_key="test-key", http_client=http_client)


async def collect(stream) -> list[str]:
    return [fragment async for fragment in stream]


class TestRequestHelpers:
    """build_request_body() / extract_text() / classify_error()"""

    def test_request_body_maps_roles(self):
        body = build_request_body("be helpful", MESSAGES, temperature=0.3, max_output_tokens=2000)

        assert body["systemInstruction"] == {"parts": [{"text": "be helpful"}]}
        assert [content["role"] for content in body["contents"]] == ["user", "model", "user"]
        assert body["generationConfig"] == {"temperature": 0.3, "maxOutputTokens": 2000}

    def test_extract_text_joins_parts(self):
        payload = {"candidates": [{"content": {"parts": [{"text": "a"}, {"text": "b"}]}}]}

        assert extract_text(payload) == "ab"
        assert extract_text({"candidates": []}) == ""
        assert extract_text({"usageMetadata": {}}) == ""

    @pytest.mark.parametrize(
        "status,error_type",
        [(429, RateLimitError), (404, ModelNotFoundError), (500, ProviderError)],
    )
    def test_classify_error(self, status, error_type):
        error = classify_error("gemini-a", status, "body")

        assert type(error) is error_type
        assert error.status_code == status


@pytest.mark.asyncio
class TestOpenStream:
    """GeminiGenerationClient.open_stream()"""

    async def test_streams_fragments_split_across_reads(self):
        wire = frame("Hello") + frame(", world") + frame("!")
        chunks = [wire[:7], wire[7:40], wire[40:95], wire[95:]]
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = request.url
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, content=byte_stream(chunks))

        client = make_client(handler)

        fragments = await collect(await client.open_stream("gemini-a", "system", MESSAGES))

        assert "".join(fragments) == "Hello, world!"
        assert fragments == ["Hello", ", world", "!"]
        assert seen["url"].path.endswith("/models/gemini-a:streamGenerateContent")
        assert seen["url"].params["alt"] == "sse"
        assert seen["body"]["contents"][-1]["parts"][0]["text"] == "What about folding?"
        await client.aclose()

    async def test_malformed_and_empty_fragments_are_skipped(self):
        wire = b"data: {not json\n\n" + frame("") + b": ping\n\n" + frame("kept")

        client = make_client(lambda request: httpx.Response(200, content=wire))

        assert await collect(await client.open_stream("gemini-a", "s", MESSAGES)) == ["kept"]

    @pytest.mark.parametrize(
        "status,error_type",
        [(429, RateLimitError), (404, ModelNotFoundError), (503, ProviderError)],
    )
    async def test_non_200_raises_before_any_text(self, status, error_type):
        client = make_client(lambda request: httpx.Response(status, text="nope"))

        with pytest.raises(error_type) as exc_info:
            await client.open_stream("gemini-a", "s", MESSAGES)

        assert exc_info.value.status_code == status

    async def test_transport_failure_is_provider_error(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        client = make_client(handler)

        with pytest.raises(ProviderError, match="request failed"):
            await client.open_stream("gemini-a", "s", MESSAGES)

    async def test_error_payload_mid_stream_raises(self):
        wire = frame("partial") + b'data: {"error": {"code": 500, "status": "INTERNAL"}}\n\n'
        client = make_client(lambda request: httpx.Response(200, content=wire))
        stream = await client.open_stream("gemini-a", "s", MESSAGES)

        received = []
        with pytest.raises(ProviderError, match="mid-stream"):
            async for fragment in stream:
                received.append(fragment)

        assert received == ["partial"]
