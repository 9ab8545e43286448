"""
Database boundary layer: ORM models, CRUD operations, and connection management.

Exports:
  - Base, UUIDMixin, TimestampMixin, VaultScopedMixin: Model building blocks
  - get_async_engine(), get_async_session_factory(), get_async_db(), dispose_engine(): Connection management
  - chunk_crud, content_crud, conversation_crud, message_crud, vault_crud: CRUD singletons

Dependencies: sqlalchemy, vault_rag.configs
System role: Persistent storage for chunks and conversations; read access to vault content
"""

from vault_rag.boundary.db.base import Base, TimestampMixin, UUIDMixin, VaultScopedMixin
from vault_rag.boundary.db.connection import (
    dispose_engine,
    get_async_db,
    get_async_engine,
    get_async_session_factory,
)
from vault_rag.boundary.db.models import (
    AnnotationModel,
    ConversationModel,
    DocumentChunkModel,
    FileModel,
    MessageModel,
    SourceModel,
    VaultMemberModel,
    VaultModel,
)
from vault_rag.boundary.db.CRUD import (
    chunk_crud,
    content_crud,
    conversation_crud,
    message_crud,
    vault_crud,
)

__all__ = [
    "Base",
    "TimestampMixin",
    "UUIDMixin",
    "VaultScopedMixin",
    "dispose_engine",
    "get_async_db",
    "get_async_engine",
    "get_async_session_factory",
    "VaultModel",
    "VaultMemberModel",
    "SourceModel",
    "AnnotationModel",
    "FileModel",
    "DocumentChunkModel",
    "ConversationModel",
    "MessageModel",
    "chunk_crud",
    "content_crud",
    "conversation_crud",
    "message_crud",
    "vault_crud",
]
