"""
Database connection management.

One async engine per API process, a session factory bound to it, and the
FastAPI dependency that gives each request its own session. Celery jobs
build their own pool-less engine instead (see workers.tasks.reindex).

Dependencies: sqlalchemy, asyncpg, vault_rag.configs
System role: Database connection lifecycle management
"""

from functools import lru_cache
from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from vault_rag.configs import get_settings


@lru_cache
def get_async_engine() -> AsyncEngine:
    """
    Create the process-wide engine.

    Pool sizing only applies to PostgreSQL; other URLs (SQLite for local
    runs) use the dialect's default pool.

    Returns:
        AsyncEngine: Configured async SQLAlchemy engine
    """
    db_config = get_settings().database
    options = {"echo": db_config.echo_sql, "pool_pre_ping": True}
    if db_config.is_postgres:
        options.update(
            pool_size=db_config.pool_size,
            max_overflow=db_config.max_overflow,
            pool_timeout=db_config.pool_timeout,
        )
    return create_async_engine(db_config.async_database_url, **options)


@lru_cache
def get_async_session_factory() -> async_sessionmaker[AsyncSession]:
    # Objects stay readable after commit; chat turns keep using them while streaming.
    return async_sessionmaker(bind=get_async_engine(), autoflush=False, expire_on_commit=False)


async def get_async_db() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency yielding a request-scoped session.

    Leaving the context rolls back anything the handler did not commit.
    """
    async with get_async_session_factory()() as session:
        yield session


async def dispose_engine() -> None:
    """Close pooled connections (application shutdown)."""
    if get_async_engine.cache_info().currsize:
        await get_async_engine().dispose()
        get_async_engine.cache_clear()
        get_async_session_factory.cache_clear()
