"""
Shared configuration base.

Every settings section reads the same .env file and ignores unknown keys,
so sections with different prefixes can live side by side in one file.

Dependencies: pydantic, pydantic_settings
System role: Foundation for all configuration classes
"""

import logging

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings as PydanticBaseSettings, SettingsConfigDict


class BaseSettings(PydanticBaseSettings):
    """Base configuration class with service-wide settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    service_name: str = Field(default="vault-rag", description="Name reported in logs")
    log_level: str = Field(default="INFO", description="Root log level name")
    cors_origins: list[str] = Field(
        default=["*"],
        description="Origins allowed to call the API (JSON list in the environment)",
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"Unknown log level: {value}")
        return level
