"""API routers."""

from .chat import router as chat_router
from .health import router as health_router
from .indexing import router as indexing_router

__all__ = ["chat_router", "health_router", "indexing_router"]
