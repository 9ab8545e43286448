"""
Gemini embedding client with fixed output dimensionality.

FixedDimensionEmbeddings wraps GoogleGenerativeAIEmbeddings so every call
uses the configured dimension (the base class ignores
output_dimensionality in the constructor). GeminiEmbeddingClient adds
the async surface the pipeline uses: explicit timeouts, order-preserving
batches, dimension checks, and provider error mapping. No retries here;
callers own resilience.

Dependencies: langchain_google_genai
System role: Embedding provider for indexing and retrieval
"""

import asyncio
import logging
from typing import List

from langchain_google_genai import GoogleGenerativeAIEmbeddings

from vault_rag.core.exceptions import ProviderError

logger = logging.getLogger(__name__)


class FixedDimensionEmbeddings(GoogleGenerativeAIEmbeddings):
    """GoogleGenerativeAIEmbeddings wrapper with fixed output dimensionality."""

    _output_dimensionality: int = 768

    def __init__(
        self,
        model: str = "models/gemini-embedding-001",
        output_dimensionality: int = 768,
        **kwargs,
    ) -> None:
        """
        Initialize embeddings with fixed output dimensionality.

        Args:
            model: Google embedding model ID
            output_dimensionality: Fixed dimension for all embeddings
            **kwargs: Additional arguments for GoogleGenerativeAIEmbeddings
        """
        super().__init__(model=model, **kwargs)
        self._output_dimensionality = output_dimensionality
        logger.info(
            f"{__name__}:__init__ - Initialized with model={model}, "
            f"output_dimensionality={output_dimensionality}"
        )

    def embed_documents(
        self,
        texts: List[str],
        *,
        batch_size: int = 100,
        task_type: str | None = None,
        titles: List[str] | None = None,
        output_dimensionality: int | None = None,
    ) -> List[List[float]]:
        dim = output_dimensionality or self._output_dimensionality
        return super().embed_documents(
            texts,
            batch_size=batch_size,
            task_type=task_type,
            titles=titles,
            output_dimensionality=dim,
        )

    def embed_query(
        self,
        text: str,
        task_type: str | None = None,
        title: str | None = None,
        output_dimensionality: int | None = None,
    ) -> List[float]:
        dim = output_dimensionality or self._output_dimensionality
        return super().embed_query(
            text,
            task_type=task_type,
            title=title,
            output_dimensionality=dim,
        )


class GeminiEmbeddingClient:
    """Async embedding client with timeouts and dimension validation."""

    def __init__(
        self,
        embeddings: GoogleGenerativeAIEmbeddings,
        dimension: int,
        timeout: float = 60.0,
    ) -> None:
        """
        Args:
            embeddings: LangChain embeddings backend
            dimension: Expected vector length
            timeout: Per-call timeout in seconds
        """
        self._embeddings = embeddings
        self._dimension = dimension
        self._timeout = timeout

    @classmethod
    def from_settings(cls, llm_settings) -> "GeminiEmbeddingClient":
        """Build the client from LLMSettings."""
        kwargs = {"google_api_key": llm_settings.api_key} if llm_settings.api_key else {}
        embeddings = FixedDimensionEmbeddings(
            model=llm_settings.embedding_model,
            output_dimensionality=llm_settings.embedding_dimension,
            **kwargs,
        )
        return cls(embeddings, llm_settings.embedding_dimension, llm_settings.request_timeout)

    @property
    def dimension(self) -> int:
        return self._dimension

    async def embed(self, text: str) -> list[float]:
        """
        Embed one query text.

        Raises:
            ProviderError: On backend failure, timeout, or wrong dimension
        """
        vector = await self._call(self._embeddings.embed_query, text, operation="embed")
        self._check_dimension(vector)
        return vector

    async def embed_batch(self, texts: list[str]) -> list[list[float]]:
        """
        Embed many texts in one provider call, preserving input order.

        Raises:
            ProviderError: On backend failure, timeout, count or dimension mismatch
        """
        if not texts:
            return []

        vectors = await self._call(self._embeddings.embed_documents, texts, operation="embed_batch")
        if len(vectors) != len(texts):
            raise ProviderError(
                f"Embedding count mismatch: expected {len(texts)}, got {len(vectors)}",
                provider="embedding",
            )
        for vector in vectors:
            self._check_dimension(vector)
        return [list(vector) for vector in vectors]

    async def _call(self, fn, payload, operation: str):
        try:
            return await asyncio.wait_for(asyncio.to_thread(fn, payload), timeout=self._timeout)
        except asyncio.TimeoutError as e:
            logger.error(
                f"{__name__}:{operation} - Embedding call timed out",
                extra={"timeout": self._timeout},
            )
            raise ProviderError("Embedding request timed out", provider="embedding") from e
        except ProviderError:
            raise
        except Exception as e:
            logger.error(
                f"{__name__}:{operation} - Embedding call failed: {type(e).__name__}: {e}",
            )
            raise ProviderError(f"Embedding request failed: {e}", provider="embedding") from e

    def _check_dimension(self, vector: list[float]) -> None:
        if len(vector) != self._dimension:
            raise ProviderError(
                f"Embedding dimension mismatch: expected {self._dimension}, got {len(vector)}",
                provider="embedding",
            )
