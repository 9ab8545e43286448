"""
RAG pipeline configuration settings.

Chunking, indexing, retrieval, and conversation window constants.

Dependencies: pydantic, pydantic_settings
System role: Retrieval pipeline configuration
"""

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from vault_rag.configs.base import BaseSettings


class RAGSettings(BaseSettings):
    """Chunking, indexing and retrieval configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="RAG_",
        case_sensitive=False,
        extra="ignore",
    )

    chunk_size: int = Field(default=1500, description="Maximum chunk length in characters")
    chunk_overlap: int = Field(default=200, description="Characters shared by consecutive chunks")

    index_batch_size: int = Field(
        default=10,
        description="Chunks embedded and persisted per batch during vault indexing",
    )
    max_file_size: int = Field(
        default=5 * 1024 * 1024,
        description="Files larger than this are indexed by description only (bytes)",
    )

    top_k: int = Field(default=8, description="Number of chunks retrieved per question")
    similarity_threshold: float = Field(
        default=0.4,
        description="Minimum cosine similarity for a retrieved chunk (0.0-1.0)",
    )
    fallback_scan_limit: int = Field(
        default=200,
        description="Rows scanned by the in-process fallback search",
    )
    snippet_length: int = Field(default=150, description="Citation snippet length")

    history_limit: int = Field(default=20, description="Messages loaded per chat turn")
    prompt_history_messages: int = Field(
        default=6,
        description="Prior messages forwarded to the model",
    )
    conversation_title_length: int = Field(
        default=100,
        description="Conversation title is the first question truncated to this length",
    )
