"""
Structured logging helpers for indexing and retrieval.

Keeps log records small: embedding vectors are reduced to their dimension,
item key lists to a short preview, and long text to a bounded prefix.
Provider context carried on domain exceptions is lifted into the record.

Dependencies: logging (stdlib), vault_rag.core.exceptions
System role: Logging helper functions
"""

import logging
from typing import Any
from uuid import UUID

from vault_rag.core.exceptions import VaultRAGException

MAX_TEXT_LENGTH = 200
KEY_PREVIEW_COUNT = 3


def _is_vector(value: Any) -> bool:
    return (
        isinstance(value, (list, tuple))
        and len(value) > 0
        and all(isinstance(x, float) for x in value)
    )


def _is_item_key(value: Any) -> bool:
    return isinstance(value, tuple) and len(value) == 2 and all(isinstance(x, str) for x in value)


def summarize_value(value: Any, max_length: int = MAX_TEXT_LENGTH) -> str:
    """
    Render a log field without dumping embeddings or whole batches.

    Args:
        value: Field value
        max_length: Text longer than this is cut with a remainder count

    Returns:
        str: Log-safe representation
    """
    if value is None:
        return "None"
    if isinstance(value, UUID):
        return str(value)
    if _is_vector(value):
        return f"vector(dim={len(value)})"
    if isinstance(value, (list, tuple, set)) and not _is_item_key(value):
        items = list(value)
        if items and all(_is_item_key(item) for item in items):
            preview = ", ".join(f"{kind}:{item_id}" for kind, item_id in items[:KEY_PREVIEW_COUNT])
            extra = len(items) - KEY_PREVIEW_COUNT
            return f"[{preview}]" + (f" +{extra} more" if extra > 0 else "")
        return f"{type(value).__name__}({len(items)} items)"
    if isinstance(value, dict):
        return f"dict({len(value)} keys)"

    text = value if isinstance(value, str) else str(value)
    if len(text) > max_length:
        return f"{text[:max_length]}...(+{len(text) - max_length} chars)"
    return text


def log_event(logger: logging.Logger, level: int, message: str, **context) -> None:
    """Log a message with summarized context fields."""
    logger.log(level, message, extra={key: summarize_value(val) for key, val in context.items()})


def log_failure(logger: logging.Logger, message: str, exc: Exception, **context) -> None:
    """
    Log an exception with summarized context and its error fields.

    Domain exceptions contribute their provider and status_code details so
    rate limits and rejected batches can be told apart in the logs.

    Args:
        logger: Logger instance
        message: Log message
        exc: Exception being handled
        **context: Additional fields (vault_id, items, batch_size...)
    """
    fields = {key: summarize_value(val) for key, val in context.items()}
    fields["error_type"] = type(exc).__name__
    if isinstance(exc, VaultRAGException):
        fields["error_msg"] = summarize_value(exc.message)
        for key in ("provider", "status_code"):
            if key in exc.details:
                fields[key] = exc.details[key]
    else:
        fields["error_msg"] = summarize_value(str(exc))
    logger.exception(message, extra=fields)
