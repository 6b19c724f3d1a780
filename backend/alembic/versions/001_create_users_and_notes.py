"""Create users and notes tables

Revision ID: 001
Revises: None
Create Date: 2026-10-19 00:00:00.000000+00:00

What:  Creates the `users` and `notes` tables.
How:   Portable column types (UUID stored natively on PostgreSQL, as CHAR(32)
       on SQLite); notes.user_id references users.id with ON DELETE CASCADE.

Rollback: downgrade() drops both tables (destructive, all data lost).
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
    """Create users, then notes (which references users)."""
    op.create_table(
        "users",
        sa.Column("id", sa.Uuid(as_uuid=True), nullable=False, comment="Unique user identifier"),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("email", sa.String(255), nullable=False, comment="Login identifier, lower-cased"),
        sa.Column(
            "password_hash",
            sa.String(255),
            nullable=False,
            comment="Salted bcrypt hash of the password",
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "notes",
        sa.Column("id", sa.Uuid(as_uuid=True), nullable=False, comment="Unique note identifier"),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column(
            "category",
            sa.String(50),
            nullable=False,
            server_default=sa.text("'Personal'"),
            comment="User-chosen label",
        ),
        # Active | Pinned | Archived, independent of category
        sa.Column(
            "status",
            sa.String(20),
            nullable=False,
            server_default=sa.text("'Active'"),
            comment="Active, Pinned or Archived",
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
            comment="Last edit of title, content or category",
        ),
        sa.Column("user_id", sa.Uuid(as_uuid=True), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )

    # Every list query is "one user's notes, newest first"
    op.create_index("idx_notes_user_created_at", "notes", ["user_id", "created_at"])


def downgrade() -> None:
    """Drop both tables. Destructive: all notes and accounts are lost."""
    op.drop_index("idx_notes_user_created_at", table_name="notes")
    op.drop_table("notes")
    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")
