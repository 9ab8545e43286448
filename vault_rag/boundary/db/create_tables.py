"""
Database table creation script.

Creates all tables defined in ORM models and, on PostgreSQL, installs the
match_vault_chunks similarity function used by primary retrieval.

Dependencies: sqlalchemy, vault_rag.configs
System role: Database schema initialization

Usage:
    python -m vault_rag.boundary.db.create_tables
"""

import asyncio
import logging

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine

from vault_rag.boundary.db.base import Base
from vault_rag.boundary.db.connection import get_async_engine

# Import all models to register them with Base.metadata
from vault_rag.boundary.db import models  # noqa: F401

logger = logging.getLogger(__name__)

# Embeddings are stored as JSON arrays, whose text form is a valid pgvector literal.
MATCH_FUNCTION_DDL = [
    "CREATE EXTENSION IF NOT EXISTS vector",
    """
    CREATE OR REPLACE FUNCTION match_vault_chunks(
        p_vault_id uuid,
        p_query_embedding vector,
        p_match_count int,
        p_match_threshold float
    )
    RETURNS TABLE (
        id uuid,
        source_type varchar,
        source_id uuid,
        chunk_index int,
        content text,
        metadata json,
        similarity float
    )
    LANGUAGE sql STABLE
    AS $$
        SELECT * FROM (
            SELECT
                c.id,
                c.source_type,
                c.source_id,
                c.chunk_index,
                c.content,
                c.metadata,
                1 - ((c.embedding::text)::vector <=> p_query_embedding) AS similarity
            FROM document_chunks c
            WHERE c.vault_id = p_vault_id
        ) ranked
        WHERE ranked.similarity >= p_match_threshold
        ORDER BY ranked.similarity DESC
        LIMIT p_match_count
    $$
    """,
]


async def create_all_tables(engine: AsyncEngine | None = None) -> None:
    """
    Create all database tables from registered ORM models.

    Idempotent: CREATE TABLE IF NOT EXISTS for each model and
    CREATE OR REPLACE for the similarity function.

    Args:
        engine: Engine to use (defaults to the configured one)
    """
    engine = engine or get_async_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
        if conn.dialect.name == "postgresql":
            for statement in MATCH_FUNCTION_DDL:
                await conn.execute(text(statement))
        else:
            logger.warning(
                "Similarity function not installed; retrieval will use the fallback scan",
                extra={"dialect": conn.dialect.name},
            )
    logger.info("All tables created successfully.")


async def drop_all_tables(engine: AsyncEngine | None = None) -> None:
    """
    Drop all database tables and their data.

    WARNING: Destructive operation. All data will be permanently lost.
    """
    engine = engine or get_async_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    logger.info("All tables dropped.")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    asyncio.run(create_all_tables())
