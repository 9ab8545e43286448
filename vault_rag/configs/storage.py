"""
Object storage configuration settings.

Bucket holding uploaded vault files, read during file indexing.

Dependencies: pydantic, pydantic_settings
System role: File storage configuration
"""

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from vault_rag.configs.base import BaseSettings


class StorageSettings(BaseSettings):
    """S3 bucket for vault file uploads."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="STORAGE_",
        case_sensitive=False,
        extra="ignore",
    )

    bucket: str = Field(default="vault-files", description="S3 bucket for vault files")
    region: str = Field(default="us-east-1", description="AWS region for the bucket")
