"""API-specific dependencies."""

from .dependencies import (
    get_chat_service,
    get_current_user_id,
    get_indexing_service,
    get_reindex_enqueuer,
    get_retrieval_service,
    get_service_cache,
    get_settings_dependency,
    require_vault_member,
)

__all__ = [
    "get_chat_service",
    "get_current_user_id",
    "get_indexing_service",
    "get_reindex_enqueuer",
    "get_retrieval_service",
    "get_service_cache",
    "get_settings_dependency",
    "require_vault_member",
]
