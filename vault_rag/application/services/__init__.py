"""
Application services.

Exports:
  - IndexingService: Incremental vault and single-item indexing
  - RetrievalService: Similarity search with in-process fallback
  - ModelFallbackGenerator: Multi-model streaming generation with retry
  - ChatService: Chat turn orchestration and history
"""

from vault_rag.application.services.indexing_service import IndexingService
from vault_rag.application.services.retrieval_service import RetrievalService
from vault_rag.application.services.generation_service import GenerationStream, ModelFallbackGenerator
from vault_rag.application.services.chat_service import ChatService, ChatTurn

__all__ = [
    "IndexingService",
    "RetrievalService",
    "GenerationStream",
    "ModelFallbackGenerator",
    "ChatService",
    "ChatTurn",
]
