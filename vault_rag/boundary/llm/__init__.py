"""Model provider adapters: embeddings and streaming generation."""

from vault_rag.boundary.llm.embedding_client import FixedDimensionEmbeddings, GeminiEmbeddingClient
from vault_rag.boundary.llm.generation_client import GeminiGenerationClient

__all__ = ["FixedDimensionEmbeddings", "GeminiEmbeddingClient", "GeminiGenerationClient"]
