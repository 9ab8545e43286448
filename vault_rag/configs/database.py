"""
Database configuration settings.

PostgreSQL (with pgvector for primary retrieval) in deployment. A full
DATABASE_URL may replace the individual POSTGRES_* parts; plain postgres://
URLs from hosting providers are rewritten for the asyncpg driver.

Dependencies: pydantic, pydantic_settings
System role: Database connection configuration for ORM
"""

from pydantic import AliasChoices, Field
from pydantic_settings import SettingsConfigDict

from vault_rag.configs.base import BaseSettings

ASYNC_DRIVER_PREFIXES = {
    "postgres://": "postgresql+asyncpg://",
    "postgresql://": "postgresql+asyncpg://",
}


class DatabaseSettings(BaseSettings):
    """PostgreSQL database configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="POSTGRES_",
        case_sensitive=False,
        extra="ignore",
    )

    url: str | None = Field(
        default=None,
        validation_alias=AliasChoices("DATABASE_URL", "POSTGRES_URL"),
        description="Full connection URL; overrides the individual parts",
    )
    host: str = Field(default="localhost", description="PostgreSQL host")
    port: int = Field(default=5432, description="PostgreSQL port")
    user: str = Field(default="postgres", description="PostgreSQL user")
    password: str = Field(default="postgres", description="PostgreSQL password")
    db: str = Field(default="vaultrag", description="PostgreSQL database name")
    ssl_required: bool = Field(default=False, description="Require TLS (managed Postgres)")

    pool_size: int = Field(default=10, description="Connection pool size")
    max_overflow: int = Field(default=20, description="Maximum overflow connections")
    pool_timeout: int = Field(default=30, description="Connection pool timeout in seconds")
    echo_sql: bool = Field(default=False, description="Echo SQL statements to logs")

    @property
    def async_database_url(self) -> str:
        """SQLAlchemy URL with an async driver."""
        if self.url:
            for prefix, replacement in ASYNC_DRIVER_PREFIXES.items():
                if self.url.startswith(prefix):
                    return replacement + self.url[len(prefix):]
            return self.url

        url = f"postgresql+asyncpg://{self.user}:{self.password}@{self.host}:{self.port}/{self.db}"
        return f"{url}?ssl=require" if self.ssl_required else url

    @property
    def is_postgres(self) -> bool:
        return self.async_database_url.startswith("postgresql")
