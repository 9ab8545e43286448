"""
Observability module.

Structured logging with request context (correlation ID and vault ID)
and request logging middleware.
"""

from vault_rag.observability.correlation import bind_vault, get_correlation_id, set_correlation_id
from vault_rag.observability.logger import configure_logging

__all__ = ["bind_vault", "configure_logging", "get_correlation_id", "set_correlation_id"]
