"""
SnipShare — Snippet SQLAlchemy Model
=====================================

What:  ORM model representing the `snippets` table.
Who:   Used by SnippetService for CRUD operations and by Alembic for schema management.

Table Design Rationale:
    - UUID primary key: snippet ids appear in URLs; non-sequential ids cannot
      be enumerated by walking /1/snippetfullview, /2/snippetfullview, ...
    - title / code_content: both required; TEXT for code so long snippets fit
    - created_at / updated_at: UTC with timezone

    Ownership is NOT stored here. A snippet belongs to whichever user lists
    its id in `user_snippets` (see models/user.py).
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, Index, String, Text, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column

from snipshare.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Snippet(Base):
    """
    A stored code sample.

    Query Patterns:
        - Public index: SELECT ... ORDER BY created_at DESC
          → Uses idx_snippets_created_at
        - Full view / edit / remove: SELECT ... WHERE id = :uuid
          → Primary key lookup
        - Profile: SELECT ... WHERE id IN (:owned ids)
    """

    __tablename__ = "snippets"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )

    title: Mapped[str] = mapped_column(
        String(200),
        nullable=False,
    )

    code_content: Mapped[str] = mapped_column(
        Text,
        nullable=False,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    # onupdate fires for ORM updates and for core update() statements alike
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        onupdate=_utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    __table_args__ = (
        Index("idx_snippets_created_at", created_at.desc()),
    )

    def __repr__(self) -> str:
        return f"<Snippet(id={self.id}, title='{self.title}')>"
