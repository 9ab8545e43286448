"""
Language model provider configuration.

Gemini API credentials, embedding model, and the ordered list of
generation models tried for each chat turn.

Dependencies: pydantic, pydantic_settings
System role: Embedding and generation provider configuration
"""

from pydantic import AliasChoices, Field
from pydantic_settings import SettingsConfigDict

from vault_rag.configs.base import BaseSettings


class LLMSettings(BaseSettings):
    """Embedding and generation provider configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="LLM_",
        case_sensitive=False,
        extra="ignore",
    )

    api_key: str = Field(
        default="",
        validation_alias=AliasChoices("LLM_API_KEY", "GEMINI_API_KEY"),
        description="Google Generative Language API key",
    )
    base_url: str = Field(
        default="https://generativelanguage.googleapis.com/v1beta",
        description="Generative Language REST base URL",
    )

    embedding_model: str = Field(
        default="models/gemini-embedding-001",
        description="Embedding model ID",
    )
    embedding_dimension: int = Field(
        default=768,
        description="Embedding vector dimension (truncated from the native size)",
    )

    generation_models: list[str] = Field(
        default=["gemini-2.0-flash", "gemini-2.0-flash-lite", "gemini-1.5-flash"],
        description="Candidate generation models, tried in order",
    )
    max_retries_per_model: int = Field(
        default=2,
        description="Retries per model after a rate-limited attempt",
    )
    retry_base_delay: float = Field(
        default=1.0,
        description="Backoff base in seconds; retry N waits N * base",
    )
    request_timeout: float = Field(default=60.0, description="Provider request timeout in seconds")
    temperature: float = Field(default=0.3, description="Generation temperature")
    max_output_tokens: int = Field(default=2000, description="Generation token limit")
