"""
Core business logic module.

Contains domain logic with no I/O: exception hierarchy, chunking,
similarity scoring, context formatting, prompt assembly, and SSE framing.
"""

from vault_rag.core.exceptions import (
    VaultRAGException,
    ValidationError,
    NotAuthorizedError,
    NotFoundError,
    ProviderError,
    RateLimitError,
    ModelNotFoundError,
    ServiceUnavailableError,
    ExtractionError,
)

__all__ = [
    "VaultRAGException",
    "ValidationError",
    "NotAuthorizedError",
    "NotFoundError",
    "ProviderError",
    "RateLimitError",
    "ModelNotFoundError",
    "ServiceUnavailableError",
    "ExtractionError",
]
