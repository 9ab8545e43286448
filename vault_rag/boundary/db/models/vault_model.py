"""
Vault and membership ORM models.

Vaults are the collaboration boundary: all indexing, retrieval and chat
are scoped to one vault. Managed by external CRUD handlers; this service
only reads them.

Dependencies: sqlalchemy, vault_rag.boundary.db.base
System role: Collaboration scope and membership lookup
"""

import uuid

from sqlalchemy import String, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from vault_rag.boundary.db.base import Base, TimestampMixin, UUIDMixin, VaultScopedMixin


class VaultModel(Base, UUIDMixin, TimestampMixin):
    """Shared research workspace."""

    __tablename__ = "vaults"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)


class VaultMemberModel(Base, UUIDMixin, VaultScopedMixin, TimestampMixin):
    """
    Vault membership row.

    Display name and email double as the author attribution for
    annotations written by this member.
    """

    __tablename__ = "vault_members"
    __table_args__ = (UniqueConstraint("vault_id", "user_id", name="uq_vault_members_vault_user"),)

    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    role: Mapped[str] = mapped_column(String(32), nullable=False, default="contributor")
    display_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
