"""
FastAPI middleware for observability.

CorrelationMiddleware binds the request's correlation ID (reusing the
caller's header) and echoes it back. RequestLoggingMiddleware logs one
line per request. For chat streams the response returned here only has
its headers ready, so the logged duration is time-to-first-byte and the
stream's own completion is logged by the chat router.

Dependencies: fastapi, starlette, vault_rag.observability
System role: Request/response observability injection
"""

import logging
import time

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from vault_rag.observability.correlation import clear_correlation_id, set_correlation_id

logger = logging.getLogger(__name__)

CORRELATION_HEADER = "X-Correlation-ID"
USER_HEADER = "X-User-Id"
QUIET_PATH_PREFIXES = ("/api/v1/health",)


def _is_event_stream(response: Response) -> bool:
    return response.headers.get("content-type", "").startswith("text/event-stream")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log method, path, status and timing for every request."""

    async def dispatch(self, request: Request, call_next):
        started = time.perf_counter()
        method, path = request.method, request.url.path
        fields = {"method": method, "path": path, "user_id": request.headers.get(USER_HEADER, "-")}
        level = logging.DEBUG if path.startswith(QUIET_PATH_PREFIXES) else logging.INFO

        try:
            response: Response = await call_next(request)
        except Exception as e:
            logger.exception(
                f"{method} {path} - unhandled {type(e).__name__}",
                extra={**fields, "duration_ms": round((time.perf_counter() - started) * 1000, 2)},
            )
            raise

        streaming = _is_event_stream(response)
        logger.log(
            level,
            f"{method} {path} - {response.status_code}{' (stream opened)' if streaming else ''}",
            extra={
                **fields,
                "status_code": response.status_code,
                "streaming": streaming,
                "duration_ms": round((time.perf_counter() - started) * 1000, 2),
            },
        )
        return response


class CorrelationMiddleware(BaseHTTPMiddleware):
    """Bind a correlation ID per request and echo it in the response."""

    async def dispatch(self, request: Request, call_next):
        correlation_id = set_correlation_id(request.headers.get(CORRELATION_HEADER))
        try:
            response: Response = await call_next(request)
            response.headers[CORRELATION_HEADER] = correlation_id
            return response
        finally:
            clear_correlation_id()
