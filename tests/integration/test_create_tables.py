"""
Tests for schema creation.

SQLite has no pgvector, so only the tables are created and the
similarity function is skipped.
"""

import pytest
from sqlalchemy import inspect
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool

from vault_rag.boundary.db.create_tables import create_all_tables, drop_all_tables


@pytest.fixture
async def sqlite_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    yield engine
    await engine.dispose()


async def _table_names(engine) -> set[str]:
    async with engine.connect() as conn:
        return set(await conn.run_sync(lambda sync_conn: inspect(sync_conn).get_table_names()))


class TestCreateTables:
    """Test suite for create_all_tables / drop_all_tables."""

    @pytest.mark.asyncio
    async def test_creates_and_drops_every_table(self, sqlite_engine):
        """All ORM tables are created idempotently and dropped again."""
        await create_all_tables(sqlite_engine)
        await create_all_tables(sqlite_engine)

        names = await _table_names(sqlite_engine)
        assert {"document_chunks", "chat_conversations", "chat_messages"} <= names

        await drop_all_tables(sqlite_engine)

        assert await _table_names(sqlite_engine) == set()
