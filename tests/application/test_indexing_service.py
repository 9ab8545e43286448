"""
Test suite for IndexingService.

Runs the incremental indexer against an in-memory database with a
deterministic embedder, covering skip-if-indexed, batching, per-category
counts, batch failure cleanup, and single-item reindexing.

System role: Verification of indexing orchestration
"""

import uuid

import pytest
from sqlalchemy import func, select

from conftest import FakeEmbedder, FakeExtractor
from vault_rag.application.services.indexing_service import IndexingService
from vault_rag.boundary.db.CRUD.chunk_crud import chunk_crud
from vault_rag.boundary.db.models import DocumentChunkModel, SourceModel, VaultModel
from vault_rag.core.chunker import chunk_text
from vault_rag.core.exceptions import ProviderError
from vault_rag.models.content import SourceType
from vault_rag.models.indexing import ReindexAction


class ExplodingExtractor:
    async def extract(self, file):
        raise RuntimeError("extractor crashed")


async def total_chunk_rows(db, vault_id) -> int:
    result = await db.execute(
        select(func.count()).select_from(DocumentChunkModel).where(DocumentChunkModel.vault_id == vault_id)
    )
    return result.scalar_one()


async def preindex(db, vault_id, source_id, text="already indexed"):
    chunks = chunk_text(text, {"source_type": "source", "source_id": str(source_id)})
    await chunk_crud.insert_chunks(db, vault_id, chunks, [[1.0, 0.0, 0.0, 0.0]] * len(chunks))
    await db.commit()


@pytest.mark.asyncio
class TestIndexVault:
    """IndexingService.index_vault()"""

    async def test_only_new_source_is_indexed(self, test_async_db, fake_embedder, fake_extractor):
        # Arrange: three sources, two already indexed
        db = test_async_db
        vault = VaultModel(name="Incremental")
        db.add(vault)
        await db.flush()
        old_a = SourceModel(vault_id=vault.id, url="https://example.com/a", title="A")
        old_b = SourceModel(vault_id=vault.id, url="https://example.com/b", title="B")
        new = SourceModel(
            vault_id=vault.id,
            url="https://example.com/new",
            title="New source",
            metadata_={"description": "alpha" * 12},
        )
        db.add_all([old_a, old_b, new])
        await db.commit()
        vault_id, new_id = vault.id, new.id
        await preindex(db, vault_id, old_a.id)
        await preindex(db, vault_id, old_b.id)

        service = IndexingService(db, fake_embedder, fake_extractor, chunk_size=100, chunk_overlap=20)

        # Act
        stats = await service.index_vault(vault_id)

        # Assert
        assert stats.total_chunks == 2
        assert stats.indexed_sources == 1
        assert stats.skipped_already_indexed == 2
        assert stats.failed_items == 0
        assert await chunk_crud.count_for_item(db, "source", new_id) == 2

    async def test_counts_each_category(self, test_async_db, seeded_vault, fake_embedder, fake_extractor):
        service = IndexingService(test_async_db, fake_embedder, fake_extractor)

        stats = await service.index_vault(seeded_vault.vault_id)

        assert stats.indexed_sources == 2
        assert stats.indexed_annotations == 1
        assert stats.indexed_files == 1
        assert stats.total_chunks == 4
        assert fake_extractor.calls == ["delta-report.txt"]
        assert await total_chunk_rows(test_async_db, seeded_vault.vault_id) == 4

    async def test_second_run_is_idempotent(self, test_async_db, seeded_vault, fake_embedder, fake_extractor):
        service = IndexingService(test_async_db, fake_embedder, fake_extractor)
        await service.index_vault(seeded_vault.vault_id)

        stats = await service.index_vault(seeded_vault.vault_id)

        assert stats.total_chunks == 0
        assert stats.skipped_already_indexed == 4
        assert await total_chunk_rows(test_async_db, seeded_vault.vault_id) == 4

    async def test_batches_never_exceed_batch_size(self, test_async_db, seeded_vault, fake_extractor):
        embedder = FakeEmbedder()
        service = IndexingService(
            test_async_db, embedder, fake_extractor, chunk_size=40, chunk_overlap=5, batch_size=3
        )

        stats = await service.index_vault(seeded_vault.vault_id)

        assert all(len(batch) <= 3 for batch in embedder.batch_calls)
        assert sum(len(batch) for batch in embedder.batch_calls) == stats.total_chunks
        assert await total_chunk_rows(test_async_db, seeded_vault.vault_id) == stats.total_chunks

    async def test_annotation_chunks_carry_author(self, test_async_db, seeded_vault, fake_embedder, fake_extractor):
        service = IndexingService(test_async_db, fake_embedder, fake_extractor)
        await service.index_vault(seeded_vault.vault_id)

        rows = await chunk_crud.get_vault_chunks(test_async_db, seeded_vault.vault_id, limit=10)

        annotation = next(row for row in rows if row.source_type == "annotation")
        assert annotation.metadata_["author_name"] == "Ada Lovelace"
        assert annotation.metadata_["title"] == 'Annotation on "Alpha paper"'


@pytest.mark.asyncio
class TestIndexVaultFailures:
    """Failure accounting in index_vault()"""

    async def test_failed_multi_batch_item_leaves_no_chunks(self, test_async_db, seeded_vault, fake_extractor):
        # Arrange: alpha spans several one-chunk batches; its last chunk fails
        embedder = FakeEmbedder(fail_on="Hopper")
        service = IndexingService(
            test_async_db, embedder, fake_extractor, chunk_size=40, chunk_overlap=5, batch_size=1
        )
        alpha_id = seeded_vault.source_ids[0]

        # Act
        stats = await service.index_vault(seeded_vault.vault_id)

        # Assert
        assert stats.failed_items == 1
        assert stats.indexed_sources == 1
        assert stats.indexed_annotations == 1
        assert stats.indexed_files == 1
        assert await chunk_crud.count_for_item(test_async_db, "source", alpha_id) == 0
        assert stats.total_chunks == await total_chunk_rows(test_async_db, seeded_vault.vault_id)

    async def test_failed_item_is_retried_next_run(self, test_async_db, seeded_vault, fake_extractor):
        failing = IndexingService(test_async_db, FakeEmbedder(fail_on="Hopper"), fake_extractor)
        await failing.index_vault(seeded_vault.vault_id)

        stats = await IndexingService(test_async_db, FakeEmbedder(), fake_extractor).index_vault(
            seeded_vault.vault_id
        )

        assert stats.failed_items == 0
        assert stats.skipped_already_indexed == 0
        assert (stats.indexed_sources, stats.indexed_annotations, stats.indexed_files) == (2, 1, 1)
        assert await chunk_crud.count_for_item(test_async_db, "source", seeded_vault.source_ids[0]) == 1

    async def test_shared_batch_failure_fails_every_item_in_it(self, test_async_db, seeded_vault, fake_extractor):
        # All four single-chunk items land in one batch of ten
        service = IndexingService(test_async_db, FakeEmbedder(fail_on="gamma"), fake_extractor)

        stats = await service.index_vault(seeded_vault.vault_id)

        assert stats.failed_items == 4
        assert stats.total_chunks == 0
        assert await total_chunk_rows(test_async_db, seeded_vault.vault_id) == 0

    async def test_extraction_crash_counts_as_failed_item(self, test_async_db, seeded_vault, fake_embedder):
        service = IndexingService(test_async_db, fake_embedder, ExplodingExtractor())

        stats = await service.index_vault(seeded_vault.vault_id)

        assert stats.failed_items == 1
        assert stats.indexed_files == 0
        assert stats.indexed_sources == 2
        assert stats.total_chunks == 3


@pytest.mark.asyncio
class TestReindexItem:
    """IndexingService.reindex_item() / delete_item_chunks()"""

    async def test_upsert_replaces_existing_chunks(self, test_async_db, seeded_vault, fake_embedder, fake_extractor):
        # Arrange: indexed once with the default window
        await IndexingService(test_async_db, fake_embedder, fake_extractor).index_vault(seeded_vault.vault_id)
        alpha_id = seeded_vault.source_ids[0]
        small_windows = IndexingService(
            test_async_db, fake_embedder, fake_extractor, chunk_size=40, chunk_overlap=5
        )

        # Act
        written = await small_windows.reindex_item(seeded_vault.vault_id, SourceType.SOURCE, alpha_id)

        # Assert
        assert written > 1
        assert await chunk_crud.count_for_item(test_async_db, "source", alpha_id) == written

    async def test_failed_upsert_keeps_previous_chunks(self, test_async_db, seeded_vault, fake_extractor):
        await IndexingService(test_async_db, FakeEmbedder(), fake_extractor).index_vault(seeded_vault.vault_id)
        alpha_id = seeded_vault.source_ids[0]
        failing = IndexingService(test_async_db, FakeEmbedder(fail_on="Hopper"), fake_extractor)

        with pytest.raises(ProviderError):
            await failing.reindex_item(seeded_vault.vault_id, SourceType.SOURCE, alpha_id)

        assert await chunk_crud.count_for_item(test_async_db, "source", alpha_id) == 1

    async def test_delete_action_only_removes(self, test_async_db, seeded_vault, fake_embedder, fake_extractor):
        service = IndexingService(test_async_db, fake_embedder, fake_extractor)
        await service.index_vault(seeded_vault.vault_id)
        annotation_id = seeded_vault.annotation_ids[0]
        fake_embedder.batch_calls.clear()

        written = await service.reindex_item(
            seeded_vault.vault_id, SourceType.ANNOTATION, annotation_id, ReindexAction.DELETE
        )

        assert written == 0
        assert fake_embedder.batch_calls == []
        assert await chunk_crud.count_for_item(test_async_db, "annotation", annotation_id) == 0

    async def test_missing_item_only_removes_chunks(self, test_async_db, seeded_vault, fake_embedder, fake_extractor):
        ghost_id = uuid.uuid4()
        await preindex(test_async_db, seeded_vault.vault_id, ghost_id)
        service = IndexingService(test_async_db, fake_embedder, fake_extractor)

        written = await service.reindex_item(seeded_vault.vault_id, SourceType.SOURCE, ghost_id)

        assert written == 0
        assert await chunk_crud.count_for_item(test_async_db, "source", ghost_id) == 0

    async def test_delete_item_chunks_reports_count(self, test_async_db, seeded_vault, fake_embedder, fake_extractor):
        service = IndexingService(test_async_db, fake_embedder, fake_extractor)
        await service.index_vault(seeded_vault.vault_id)

        deleted = await service.delete_item_chunks(SourceType.FILE, seeded_vault.file_ids[0])

        assert deleted == 1
        assert await total_chunk_rows(test_async_db, seeded_vault.vault_id) == 3
