"""
Request-scoped log context.

Carries the request's correlation ID and the vault it operates on across
async boundaries, so log lines from services, CRUD and clients can be tied
back to one chat turn or indexing run without threading ids through calls.

Dependencies: contextvars
System role: Request tracing across service boundaries
"""

import uuid
from contextvars import ContextVar
from uuid import UUID

correlation_id_ctx: ContextVar[str] = ContextVar("correlation_id", default="")
vault_id_ctx: ContextVar[str] = ContextVar("vault_id", default="")


def set_correlation_id(correlation_id: str | None = None) -> str:
    """
    Bind the correlation ID for the current request.

    Args:
        correlation_id: Caller-supplied ID (a new hex UUID when None or blank)

    Returns:
        str: The bound correlation ID
    """
    value = (correlation_id or "").strip() or uuid.uuid4().hex
    correlation_id_ctx.set(value)
    return value


def get_correlation_id() -> str:
    return correlation_id_ctx.get()


def bind_vault(vault_id: UUID | str) -> None:
    """Tag subsequent log records in this context with the vault ID."""
    vault_id_ctx.set(str(vault_id))


def get_bound_vault() -> str:
    return vault_id_ctx.get()


def clear_correlation_id() -> None:
    """Reset the request's log context."""
    correlation_id_ctx.set("")
    vault_id_ctx.set("")
