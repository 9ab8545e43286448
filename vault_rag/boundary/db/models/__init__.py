"""ORM models."""

from vault_rag.boundary.db.models.vault_model import VaultModel, VaultMemberModel
from vault_rag.boundary.db.models.content_model import AnnotationModel, FileModel, SourceModel
from vault_rag.boundary.db.models.chunk_model import DocumentChunkModel
from vault_rag.boundary.db.models.conversation_model import ConversationModel, MessageModel

__all__ = [
    "VaultModel",
    "VaultMemberModel",
    "SourceModel",
    "AnnotationModel",
    "FileModel",
    "DocumentChunkModel",
    "ConversationModel",
    "MessageModel",
]
