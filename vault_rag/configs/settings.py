"""
Unified application settings.

Each section reads its own env prefix (POSTGRES_, RAG_, LLM_, STORAGE_,
CELERY_). Sections are built when Settings() is constructed, not at
import, so tests can set the environment first.

Dependencies: All config modules
System role: Central configuration aggregator for the application
"""

from functools import lru_cache

from pydantic import Field, model_validator

from vault_rag.configs.base import BaseSettings
from vault_rag.configs.celery_config import CelerySettings
from vault_rag.configs.database import DatabaseSettings
from vault_rag.configs.llm import LLMSettings
from vault_rag.configs.rag import RAGSettings
from vault_rag.configs.storage import StorageSettings


class Settings(BaseSettings):
    """Service settings: shared fields plus one section per concern."""

    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    rag: RAGSettings = Field(default_factory=RAGSettings)
    llm: LLMSettings = Field(default_factory=LLMSettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)
    celery: CelerySettings = Field(default_factory=CelerySettings)

    @model_validator(mode="after")
    def check_pipeline(self) -> "Settings":
        """Reject combinations that would fail on the first chat turn or indexing run."""
        if not 0 <= self.rag.chunk_overlap < self.rag.chunk_size:
            raise ValueError("RAG_CHUNK_OVERLAP must be non-negative and smaller than RAG_CHUNK_SIZE")
        if not self.llm.generation_models:
            raise ValueError("LLM_GENERATION_MODELS must name at least one model")
        return self


@lru_cache
def get_settings() -> Settings:
    """
    Settings singleton, read from the environment once per process.

    Usage:
        from vault_rag.configs import get_settings
        settings = get_settings()
    """
    return Settings()
