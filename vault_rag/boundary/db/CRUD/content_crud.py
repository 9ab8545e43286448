"""
Content provider queries.

Lists a vault's sources, annotations and files as lightweight records.
Only the columns the indexer needs are selected; file bodies live in
object storage and are never read here.

Dependencies: sqlalchemy, vault_rag.boundary.db.models, vault_rag.models.content
System role: Read-only content provider for the indexer
"""

from uuid import UUID

from sqlalchemy import and_, select
from sqlalchemy.ext.asyncio import AsyncSession

from vault_rag.boundary.db.models.content_model import AnnotationModel, FileModel, SourceModel
from vault_rag.boundary.db.models.vault_model import VaultMemberModel
from vault_rag.models.content import AnnotationItem, FileItem, SourceItem, SourceType


class ContentCRUD:
    """Read-only queries over vault content."""

    def _source_stmt(self):
        return select(
            SourceModel.id,
            SourceModel.vault_id,
            SourceModel.url,
            SourceModel.title,
            SourceModel.metadata_.label("metadata"),
            SourceModel.created_by,
        )

    def _annotation_stmt(self):
        # Author display fields come from the annotator's membership row.
        return (
            select(
                AnnotationModel.id,
                AnnotationModel.source_id,
                AnnotationModel.content,
                AnnotationModel.created_by,
                SourceModel.title.label("source_title"),
                VaultMemberModel.display_name.label("author_name"),
                VaultMemberModel.email.label("author_email"),
            )
            .join(SourceModel, SourceModel.id == AnnotationModel.source_id)
            .outerjoin(
                VaultMemberModel,
                and_(
                    VaultMemberModel.vault_id == SourceModel.vault_id,
                    VaultMemberModel.user_id == AnnotationModel.created_by,
                ),
            )
        )

    def _file_stmt(self):
        return select(
            FileModel.id,
            FileModel.vault_id,
            FileModel.file_name,
            FileModel.file_url,
            FileModel.file_size,
            FileModel.uploaded_by,
        )

    async def list_sources(self, session: AsyncSession, vault_id: UUID) -> list[SourceItem]:
        stmt = self._source_stmt().where(SourceModel.vault_id == vault_id).order_by(SourceModel.created_at)
        result = await session.execute(stmt)
        return [SourceItem.model_validate(dict(row._mapping)) for row in result]

    async def list_annotations(self, session: AsyncSession, vault_id: UUID) -> list[AnnotationItem]:
        stmt = (
            self._annotation_stmt()
            .where(SourceModel.vault_id == vault_id)
            .order_by(AnnotationModel.created_at)
        )
        result = await session.execute(stmt)
        return [AnnotationItem.model_validate(dict(row._mapping)) for row in result]

    async def list_files(self, session: AsyncSession, vault_id: UUID) -> list[FileItem]:
        stmt = self._file_stmt().where(FileModel.vault_id == vault_id).order_by(FileModel.created_at)
        result = await session.execute(stmt)
        return [FileItem.model_validate(dict(row._mapping)) for row in result]

    async def get_item(
        self,
        session: AsyncSession,
        vault_id: UUID,
        source_type: SourceType,
        source_id: UUID,
    ) -> SourceItem | AnnotationItem | FileItem | None:
        """
        Fetch one content item of the given kind, scoped to the vault.

        Returns:
            The item record, or None when it no longer exists
        """
        if source_type == SourceType.SOURCE:
            stmt = self._source_stmt().where(SourceModel.id == source_id, SourceModel.vault_id == vault_id)
            item_type = SourceItem
        elif source_type == SourceType.ANNOTATION:
            stmt = self._annotation_stmt().where(
                AnnotationModel.id == source_id, SourceModel.vault_id == vault_id
            )
            item_type = AnnotationItem
        else:
            stmt = self._file_stmt().where(FileModel.id == source_id, FileModel.vault_id == vault_id)
            item_type = FileItem

        row = (await session.execute(stmt)).first()
        if row is None:
            return None
        return item_type.model_validate(dict(row._mapping))


content_crud = ContentCRUD()
