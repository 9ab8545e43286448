"""
FastAPI application with assembled routers.

Initializes FastAPI app with all API routers and configures uvicorn server.

Dependencies: fastapi, vault_rag.api.routers, uvicorn
System role: API entry point with router assembly and server launch
"""

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from vault_rag.boundary.db.connection import dispose_engine
from vault_rag.configs import get_settings
from vault_rag.observability.logger import configure_logging
from vault_rag.observability.middleware import CorrelationMiddleware, RequestLoggingMiddleware
from vault_rag.api.deps.dependencies import get_service_cache
from .routers import chat_router, health_router, indexing_router


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Build the process-wide provider clients before the first request and
    close their connection pools on shutdown.
    """
    settings = get_settings()
    configure_logging(settings.log_level, settings.service_name)
    logger = logging.getLogger(__name__)

    cache = get_service_cache()
    cache.embedding_client
    cache.generation_client
    cache.file_extractor
    logger.info(
        f"{__name__}:lifespan - Providers ready",
        extra={
            "embedding_model": settings.llm.embedding_model,
            "generation_models": ",".join(settings.llm.generation_models),
        },
    )

    yield

    await cache.aclose()
    await dispose_engine()
    logger.info(f"{__name__}:lifespan - Provider clients closed")


def create_app() -> FastAPI:
    """
    Create and configure FastAPI application with routers.

    Returns:
        FastAPI: Configured application instance with all routers registered
    """
    app = FastAPI(
        title="Vault RAG API",
        description="Question answering over a shared research vault",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=get_settings().cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Add observability middleware
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(CorrelationMiddleware)

    # Register all routers with /api/v1 prefix for versioning
    app.include_router(health_router, prefix="/api/v1")
    app.include_router(chat_router, prefix="/api/v1")
    app.include_router(indexing_router, prefix="/api/v1")

    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run(
        "vault_rag.api.main:app",
        host="0.0.0.0",
        port=8000,
    )
