"""
Shared test fixtures and configuration for entire test suite.

Provides: In-memory async database, seeded vault content, deterministic
embedding/extraction fakes, scripted generation clients
Dependencies: pytest, pytest-asyncio, sqlalchemy, aiosqlite
System role: Test infrastructure and fixture management
"""

import uuid
from dataclasses import dataclass, field
from typing import AsyncIterator

import pytest

from vault_rag.core.exceptions import ProviderError
from vault_rag.models.content import FileItem

KEYWORDS = ("alpha", "beta", "gamma", "delta")


def keyword_vector(text: str) -> list[float]:
    """Count of each keyword in the text; zero vector when none appear."""
    lower = text.lower()
    return [float(lower.count(word)) for word in KEYWORDS]


class FakeEmbedder:
    """Deterministic embedding client keyed on a fixed vocabulary."""

    dimension = len(KEYWORDS)

    def __init__(self, fail_on: str | None = None, fail_query: bool = False) -> None:
        self.fail_on = fail_on
        self.fail_query = fail_query
        self.batch_calls: list[list[str]] = []
        self.query_calls: list[str] = []

    async def embed(self, text: str) -> list[float]:
        self.query_calls.append(text)
        if self.fail_query:
            raise ProviderError("embedding backend down", provider="embedding")
        return keyword_vector(text)

    async def embed_batch(self, texts: list[str]) -> list[list[float]]:
        self.batch_calls.append(list(texts))
        if self.fail_on and any(self.fail_on in text for text in texts):
            raise ProviderError("embedding backend rejected batch", provider="embedding")
        return [keyword_vector(text) for text in texts]


class FakeExtractor:
    """File extractor that returns canned text per file name."""

    def __init__(self, texts: dict[str, str] | None = None) -> None:
        self.texts = texts or {}
        self.calls: list[str] = []

    async def extract(self, file: FileItem) -> str:
        self.calls.append(file.file_name)
        return self.texts.get(file.file_name, f"File: {file.file_name}")


async def _iterate(fragments: list[str]) -> AsyncIterator[str]:
    for fragment in fragments:
        yield fragment


class ScriptedGenerationClient:
    """
    Generation client whose open_stream outcomes are scripted per model.

    Each model maps to a list consumed one entry per attempt: an exception
    instance is raised, a list of strings becomes the fragment stream.
    """

    def __init__(self, script: dict[str, list]) -> None:
        self.script = {model: list(outcomes) for model, outcomes in script.items()}
        self.calls: list[str] = []
        self.last_messages = None
        self.last_system_prompt = None

    async def open_stream(self, model, system_prompt, messages):
        self.calls.append(model)
        self.last_system_prompt = system_prompt
        self.last_messages = messages
        outcome = self.script[model].pop(0)
        if isinstance(outcome, BaseException):
            raise outcome
        return _iterate(outcome)


@dataclass
class SeededVault:
    """IDs of rows created by the seeded_vault fixture."""

    vault_id: uuid.UUID
    owner_id: uuid.UUID
    outsider_id: uuid.UUID
    source_ids: list[uuid.UUID] = field(default_factory=list)
    annotation_ids: list[uuid.UUID] = field(default_factory=list)
    file_ids: list[uuid.UUID] = field(default_factory=list)


@pytest.fixture
async def test_async_db():
    """
    Create in-memory SQLite async database for testing.

    The similarity function does not exist on SQLite, so every primary
    search here errors and exercises the fallback path.

    Yields:
        AsyncSession: Test database session with cleanup
    """
    from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
    from sqlalchemy.pool import StaticPool
    from vault_rag.boundary.db.base import Base
    from vault_rag.boundary.db import models  # noqa: F401

    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async_session = async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with async_session() as session:
        yield session
        await session.rollback()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
async def seeded_vault(test_async_db) -> SeededVault:
    """
    Vault with one member, two sources, one annotation and one file.

    Content uses the fake embedder's vocabulary so similarities are
    predictable: source 0 is about alpha, source 1 about beta, the
    annotation about gamma, the file about delta.
    """
    from vault_rag.boundary.db.models import (
        AnnotationModel,
        FileModel,
        SourceModel,
        VaultMemberModel,
        VaultModel,
    )

    db = test_async_db
    owner_id = uuid.uuid4()
    vault = VaultModel(name="Protein Folding", description="Shared reading list")
    db.add(vault)
    await db.flush()

    db.add(VaultMemberModel(
        vault_id=vault.id,
        user_id=owner_id,
        role="owner",
        display_name="Ada Lovelace",
        email="ada@example.com",
    ))

    alpha = SourceModel(
        vault_id=vault.id,
        url="https://example.com/alpha",
        title="Alpha paper",
        metadata_={"description": "alpha alpha alpha", "authors": ["Grace Hopper"]},
        created_by=owner_id,
    )
    beta = SourceModel(
        vault_id=vault.id,
        url="https://example.com/beta",
        title="Beta notes",
        metadata_={"abstract": "beta beta beta"},
        created_by=owner_id,
    )
    db.add_all([alpha, beta])
    await db.flush()

    note = AnnotationModel(source_id=alpha.id, content="gamma gamma insight", created_by=owner_id)
    upload = FileModel(
        vault_id=vault.id,
        file_name="delta-report.txt",
        file_url=f"{vault.id}/docs/1700000000-delta-report.txt",
        file_size=120,
        uploaded_by=owner_id,
    )
    db.add_all([note, upload])
    await db.commit()

    return SeededVault(
        vault_id=vault.id,
        owner_id=owner_id,
        outsider_id=uuid.uuid4(),
        source_ids=[alpha.id, beta.id],
        annotation_ids=[note.id],
        file_ids=[upload.id],
    )


@pytest.fixture
def fake_embedder() -> FakeEmbedder:
    return FakeEmbedder()


@pytest.fixture
def fake_extractor() -> FakeExtractor:
    return FakeExtractor({"delta-report.txt": "File: delta-report.txt\n\ndelta delta quarterly numbers"})


@pytest.fixture
def vault_id():
    """Generate a test vault ID."""
    return uuid.uuid4()


@pytest.fixture
def user_id():
    """Generate a test user ID."""
    return uuid.uuid4()
