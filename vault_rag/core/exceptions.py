"""
Exception hierarchy for the vault RAG service.

Provides layered exception structure for domain-specific errors.
All exceptions include context for observability and debugging.

Dependencies: None (pure domain layer)
System role: Centralized exception handling across the application
"""

from typing import Any


class VaultRAGException(Exception):
    """Base exception for all vault RAG errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """
        Initialize base exception with message and optional context.

        Args:
            message: Human-readable error message
            details: Optional dictionary of additional context for debugging
        """
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        """Return string representation including details."""
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ValidationError(VaultRAGException):
    """Raised when a required field is missing or malformed."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize validation error.

        Args:
            message: Error message
            field: Field name that failed validation
            details: Additional context
        """
        details = details or {}
        if field:
            details["field"] = field
        super().__init__(message, details)


class NotAuthorizedError(VaultRAGException):
    """Raised when the caller is not a member of the vault."""

    def __init__(
        self,
        vault_id: str,
        user_id: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        details.update({"vault_id": vault_id, "user_id": user_id})
        super().__init__("Not a member of this vault", details)


class NotFoundError(VaultRAGException):
    """Raised when a conversation, vault, or content item cannot be found."""

    def __init__(
        self,
        resource: str,
        resource_id: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize not found error.

        Args:
            resource: Resource kind ("conversation", "source", ...)
            resource_id: ID of the missing resource
            details: Additional context
        """
        details = details or {}
        details.update({"resource": resource, "resource_id": resource_id})
        super().__init__(f"{resource.capitalize()} not found: {resource_id}", details)


class ProviderError(VaultRAGException):
    """Raised when the embedding or generation backend fails or rejects a call."""

    def __init__(
        self,
        message: str,
        provider: str | None = None,
        status_code: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize provider error.

        Args:
            message: Error message
            provider: Provider operation ("embedding", "generation")
            status_code: HTTP status returned by the backend, if any
            details: Additional context
        """
        details = details or {}
        if provider:
            details["provider"] = provider
        if status_code is not None:
            details["status_code"] = status_code
        self.status_code = status_code
        super().__init__(message, details)


class RateLimitError(ProviderError):
    """Raised when the provider answers with a rate-limit response (HTTP 429)."""

    pass


class ModelNotFoundError(ProviderError):
    """Raised when the requested model does not exist or is unsupported (HTTP 404)."""

    pass


class ServiceUnavailableError(VaultRAGException):
    """Raised when every candidate model and attempt has been exhausted."""

    def __init__(
        self,
        message: str = "The assistant is temporarily unavailable. Please try again shortly.",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)


class ExtractionError(VaultRAGException):
    """Raised when file text extraction fails (always degraded to a placeholder)."""

    pass
