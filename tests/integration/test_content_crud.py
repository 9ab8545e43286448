"""
Test suite for ContentCRUD against an in-memory database.

System role: Verification of the read-only content provider
"""

import uuid

import pytest

from vault_rag.boundary.db.CRUD.content_crud import content_crud
from vault_rag.models.content import AnnotationItem, FileItem, SourceItem, SourceType


@pytest.mark.asyncio
class TestContentCRUD:
    """ContentCRUD queries"""

    async def test_lists_each_kind(self, test_async_db, seeded_vault) -> None:
        sources = await content_crud.list_sources(test_async_db, seeded_vault.vault_id)
        annotations = await content_crud.list_annotations(test_async_db, seeded_vault.vault_id)
        files = await content_crud.list_files(test_async_db, seeded_vault.vault_id)

        assert {s.id for s in sources} == set(seeded_vault.source_ids)
        assert [a.id for a in annotations] == seeded_vault.annotation_ids
        assert [f.id for f in files] == seeded_vault.file_ids
        assert files[0].file_size == 120

    async def test_annotation_carries_author_and_parent_title(self, test_async_db, seeded_vault) -> None:
        """Test the annotator's membership row supplies author display fields."""
        annotations = await content_crud.list_annotations(test_async_db, seeded_vault.vault_id)

        assert annotations[0].author_name == "Ada Lovelace"
        assert annotations[0].author_email == "ada@example.com"
        assert annotations[0].source_title == "Alpha paper"

    async def test_source_metadata_is_exposed(self, test_async_db, seeded_vault) -> None:
        sources = await content_crud.list_sources(test_async_db, seeded_vault.vault_id)

        alpha = next(s for s in sources if s.title == "Alpha paper")
        assert alpha.metadata["authors"] == ["Grace Hopper"]

    @pytest.mark.parametrize(
        "source_type,attribute,item_type",
        [
            (SourceType.SOURCE, "source_ids", SourceItem),
            (SourceType.ANNOTATION, "annotation_ids", AnnotationItem),
            (SourceType.FILE, "file_ids", FileItem),
        ],
    )
    async def test_get_item_by_kind(self, test_async_db, seeded_vault, source_type, attribute, item_type) -> None:
        item_id = getattr(seeded_vault, attribute)[0]

        item = await content_crud.get_item(test_async_db, seeded_vault.vault_id, source_type, item_id)

        assert isinstance(item, item_type)
        assert item.id == item_id

    async def test_get_item_is_scoped_to_vault(self, test_async_db, seeded_vault) -> None:
        item = await content_crud.get_item(
            test_async_db, uuid.uuid4(), SourceType.SOURCE, seeded_vault.source_ids[0]
        )

        assert item is None
