"""CRUD operations for database models."""

from vault_rag.boundary.db.CRUD.base_crud import BaseCRUD
from vault_rag.boundary.db.CRUD.chunk_crud import ChunkCRUD, chunk_crud
from vault_rag.boundary.db.CRUD.content_crud import ContentCRUD, content_crud
from vault_rag.boundary.db.CRUD.conversation_crud import (
    ConversationCRUD,
    MessageCRUD,
    conversation_crud,
    message_crud,
)
from vault_rag.boundary.db.CRUD.vault_crud import VaultCRUD, vault_crud

__all__ = [
    "BaseCRUD",
    "ChunkCRUD",
    "ContentCRUD",
    "ConversationCRUD",
    "MessageCRUD",
    "VaultCRUD",
    "chunk_crud",
    "content_crud",
    "conversation_crud",
    "message_crud",
    "vault_crud",
]
