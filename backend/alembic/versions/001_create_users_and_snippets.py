"""Create users, snippets and user_snippets tables

Revision ID: 001
Revises: None
Create Date: 2026-10-18 00:00:00.000000+00:00

What:  Creates the account table, the snippet table, and the owned-id list
       that links them.
How:   UUID primary keys, TIMESTAMP WITH TIME ZONE, and ON DELETE CASCADE on
       both sides of user_snippets so a deleted snippet or user never leaves
       a dangling owned id.

Rollback: downgrade() drops all three tables (destructive, all data lost).
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create the three tables and their indexes. See snipshare/models for docs."""
    op.create_table(
        "users",
        sa.Column("id", sa.Uuid(), nullable=False),

        # Login lookup key; unique index below
        sa.Column(
            "username",
            sa.String(100),
            nullable=False,
            comment="Unique login name, stored trimmed",
        ),

        sa.Column(
            "password",
            sa.String(128),
            nullable=False,
            comment="bcrypt hash, never the plaintext",
        ),

        # Overwritten on every login, NULL after logout
        sa.Column(
            "session_id",
            sa.String(128),
            nullable=True,
            comment="Id of the browser session currently logged in as this user",
        ),

        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_users_username", "users", ["username"], unique=True)
    op.create_index("ix_users_session_id", "users", ["session_id"])

    op.create_table(
        "snippets",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("code_content", sa.Text(), nullable=False),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
    )

    # The public index is ORDER BY created_at DESC on every page load
    op.create_index(
        "idx_snippets_created_at",
        "snippets",
        [sa.text("created_at DESC")],
    )

    op.create_table(
        "user_snippets",
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("snippet_id", sa.Uuid(), nullable=False),
        sa.Column(
            "added_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
            comment="Insertion time; orders the owned-id list",
        ),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["snippet_id"], ["snippets.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("user_id", "snippet_id"),
    )


def downgrade() -> None:
    """
    Drop all tables in dependency order.

    WARNING: destructive. Every account and snippet is lost.
    """
    op.drop_table("user_snippets")
    op.drop_index("idx_snippets_created_at", table_name="snippets")
    op.drop_table("snippets")
    op.drop_index("ix_users_session_id", table_name="users")
    op.drop_index("ix_users_username", table_name="users")
    op.drop_table("users")
