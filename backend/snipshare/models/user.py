"""
SnipShare — User and Ownership SQLAlchemy Models
=================================================

What:  ORM models for the `users` table and the `user_snippets` owned-id list.
Who:   Used by AccountService (registration, login, authorization) and
       SnippetService (append/prune owned ids).

Ownership Model:
    Every user keeps a list of the snippet ids they created. The list lives in
    `user_snippets` rows (user_id, snippet_id, added_at) and is exposed on the
    model as `User.snippet_ids`, ordered by insertion.

    Invariant: a snippet may be edited or deleted only by the user whose
    list contains its id. AccountService.authorize_owner enforces it.

    Why a table instead of an array column:
        The database then enforces that listed ids point at real snippets
        (FK with ON DELETE CASCADE), and "is this id in the list" is an
        indexed primary-key lookup instead of an array scan.

Session Binding:
    `session_id` holds the random id of the browser session that last logged
    in as this user. It is overwritten on every login and cleared on logout,
    so only the most recent login can act on the account.
"""

import uuid
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import DateTime, ForeignKey, String, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from snipshare.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UserSnippet(Base):
    """One entry of a user's owned-id list."""

    __tablename__ = "user_snippets"

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
    )

    snippet_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("snippets.id", ondelete="CASCADE"),
        primary_key=True,
    )

    added_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    def __repr__(self) -> str:
        return f"<UserSnippet(user_id={self.user_id}, snippet_id={self.snippet_id})>"


class User(Base):
    """
    A registered account.

    Lifecycle:
        1. Created at registration with a bcrypt hash (never the plaintext)
        2. session_id set on each successful login
        3. snippet_links grows on create and shrinks on delete
        4. session_id cleared on logout
    """

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )

    # Unique index doubles as the login lookup index
    username: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        unique=True,
        index=True,
    )

    # bcrypt output is 60 chars; leave room for a future scheme prefix
    password: Mapped[str] = mapped_column(
        String(128),
        nullable=False,
    )

    session_id: Mapped[Optional[str]] = mapped_column(
        String(128),
        nullable=True,
        index=True,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        onupdate=_utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    # selectin: async sessions cannot lazy-load, so the list is fetched
    # together with the user in one extra SELECT ... WHERE user_id IN (...)
    snippet_links: Mapped[List[UserSnippet]] = relationship(
        UserSnippet,
        order_by=UserSnippet.added_at,
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    @property
    def snippet_ids(self) -> List[uuid.UUID]:
        """The owned-id list, oldest first."""
        return [link.snippet_id for link in self.snippet_links]

    def owns(self, snippet_id: uuid.UUID) -> bool:
        return snippet_id in self.snippet_ids

    def __repr__(self) -> str:
        return f"<User(id={self.id}, username='{self.username}')>"
