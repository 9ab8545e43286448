"""
Streaming Gemini generation client.

Talks to the Generative Language REST API over httpx and decodes the
server-sent event stream incrementally. Opening a stream and consuming it
are separate steps: open_stream() raises the classified provider error
(rate limit, unknown model, other) before any text is produced, which is
what the model fallback loop keys off.

Dependencies: httpx, vault_rag.core.sse
System role: Text generation provider
"""

import logging
from typing import Any, AsyncIterator

import httpx

from vault_rag.core.exceptions import ModelNotFoundError, ProviderError, RateLimitError
from vault_rag.core.sse import SSEParser, parse_json_payloads
from vault_rag.models.chat import GenerationMessage

logger = logging.getLogger(__name__)

GEMINI_ROLES = {"user": "user", "assistant": "model"}


def build_request_body(
    system_prompt: str,
    messages: list[GenerationMessage],
    temperature: float,
    max_output_tokens: int,
) -> dict[str, Any]:
    """Assemble a generateContent request body."""
    return {
        "systemInstruction": {"parts": [{"text": system_prompt}]},
        "contents": [
            {"role": GEMINI_ROLES[message.role], "parts": [{"text": message.content}]}
            for message in messages
        ],
        "generationConfig": {
            "temperature": temperature,
            "maxOutputTokens": max_output_tokens,
        },
    }


def extract_text(payload: dict[str, Any]) -> str:
    """Concatenate the text parts of the first candidate."""
    candidates = payload.get("candidates") or []
    if not candidates or not isinstance(candidates[0], dict):
        return ""
    parts = (candidates[0].get("content") or {}).get("parts") or []
    return "".join(part.get("text", "") for part in parts if isinstance(part, dict))


def classify_error(model: str, status_code: int, body: str) -> ProviderError:
    """Map an HTTP failure onto the provider error taxonomy."""
    message = f"Model {model} returned HTTP {status_code}"
    details = {"model": model, "body_preview": body[:200]}
    if status_code == 429:
        return RateLimitError(message, provider="generation", status_code=status_code, details=details)
    if status_code == 404:
        return ModelNotFoundError(message, provider="generation", status_code=status_code, details=details)
    return ProviderError(message, provider="generation", status_code=status_code, details=details)


class GeminiGenerationClient:
    """Async streaming client for Gemini streamGenerateContent."""

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://generativelanguage.googleapis.com/v1beta",
        timeout: float = 60.0,
        temperature: float = 0.3,
        max_output_tokens: int = 2000,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """
        Args:
            api_key: Generative Language API key
            base_url: REST base URL
            timeout: Connect/read timeout in seconds
            temperature: Sampling temperature
            max_output_tokens: Response token limit
            http_client: Shared client (tests pass one with a MockTransport)
        """
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._temperature = temperature
        self._max_output_tokens = max_output_tokens
        self._client = http_client or httpx.AsyncClient(timeout=httpx.Timeout(timeout))

    @classmethod
    def from_settings(cls, llm_settings) -> "GeminiGenerationClient":
        return cls(
            api_key=llm_settings.api_key,
            base_url=llm_settings.base_url,
            timeout=llm_settings.request_timeout,
            temperature=llm_settings.temperature,
            max_output_tokens=llm_settings.max_output_tokens,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def open_stream(
        self,
        model: str,
        system_prompt: str,
        messages: list[GenerationMessage],
    ) -> AsyncIterator[str]:
        """
        Start a streaming generation and return its text fragments.

        Args:
            model: Model name, e.g. "gemini-2.0-flash"
            system_prompt: System instruction
            messages: Conversation ending with the current question

        Returns:
            AsyncIterator[str]: Non-empty text fragments in arrival order

        Raises:
            RateLimitError: HTTP 429
            ModelNotFoundError: HTTP 404
            ProviderError: Any other status or transport failure
        """
        request = self._client.build_request(
            "POST",
            f"{self._base_url}/models/{model}:streamGenerateContent",
            params={"alt": "sse", "key": self._api_key},
            json=build_request_body(system_prompt, messages, self._temperature, self._max_output_tokens),
        )

        try:
            response = await self._client.send(request, stream=True)
        except httpx.HTTPError as e:
            raise ProviderError(
                f"Model {model} request failed: {type(e).__name__}",
                provider="generation",
                details={"model": model},
            ) from e

        if response.status_code != 200:
            body = (await response.aread()).decode("utf-8", errors="replace")
            await response.aclose()
            raise classify_error(model, response.status_code, body)

        return self._iter_text(model, response)

    async def _iter_text(self, model: str, response: httpx.Response) -> AsyncIterator[str]:
        parser = SSEParser()
        try:
            async for raw in response.aiter_bytes():
                for payload in parse_json_payloads(parser.feed(raw)):
                    text = self._payload_text(model, payload)
                    if text:
                        yield text
            for payload in parse_json_payloads(parser.close()):
                text = self._payload_text(model, payload)
                if text:
                    yield text
        except httpx.HTTPError as e:
            raise ProviderError(
                f"Model {model} stream interrupted: {type(e).__name__}",
                provider="generation",
                details={"model": model},
            ) from e
        finally:
            await response.aclose()

    @staticmethod
    def _payload_text(model: str, payload: dict[str, Any]) -> str:
        if "error" in payload:
            error = payload["error"] if isinstance(payload["error"], dict) else {}
            raise ProviderError(
                f"Model {model} reported an error mid-stream",
                provider="generation",
                status_code=error.get("code"),
                details={"model": model, "status": error.get("status")},
            )
        return extract_text(payload)
