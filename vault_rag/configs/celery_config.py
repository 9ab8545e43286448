"""
Celery configuration settings.

Redis broker and result backend for background reindex jobs, plus the
retry policy applied when the embedding provider fails mid-job.

Dependencies: pydantic, pydantic_settings
System role: Async task queue configuration for item reindexing
"""

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from vault_rag.configs.base import BaseSettings


class CelerySettings(BaseSettings):
    """Celery broker (Redis) configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="CELERY_",
        case_sensitive=False,
        extra="ignore",
    )

    redis_url: str | None = Field(
        default=None,
        description="Full Redis URL; overrides host/port when set (managed Redis, TLS)",
    )
    broker_host: str = Field(default="localhost", description="Redis broker host")
    broker_port: int = Field(default=6379, description="Redis broker port")
    broker_db: int = Field(default=0, description="Redis database number for the broker")
    result_backend_db: int = Field(default=1, description="Redis database number for results")

    task_serializer: str = Field(default="json", description="Task serialization format")
    result_serializer: str = Field(default="json", description="Result serialization format")
    accept_content: list[str] = Field(default=["json"], description="Accepted content types")
    timezone: str = Field(default="UTC", description="Celery timezone")
    task_always_eager: bool = Field(
        default=False,
        description="Run tasks inline (local development without a broker)",
    )

    reindex_max_retries: int = Field(default=3, description="Retries for provider failures")
    reindex_retry_backoff: int = Field(default=30, description="First retry delay in seconds")
    reindex_retry_backoff_max: int = Field(default=300, description="Retry delay cap in seconds")

    def _redis_url(self, db: int) -> str:
        if self.redis_url:
            return f"{self.redis_url.rstrip('/')}/{db}"
        return f"redis://{self.broker_host}:{self.broker_port}/{db}"

    @property
    def broker_url(self) -> str:
        return self._redis_url(self.broker_db)

    @property
    def result_backend_url(self) -> str:
        return self._redis_url(self.result_backend_db)
