"""
Notekeeper Backend: Note SQLAlchemy Model
==========================================

What:  ORM model representing the `notes` table.
Who:   Used by NoteService for CRUD operations and by Alembic.

Table Design:
    - UUID primary key (non-sequential, so ids of other users' notes
      cannot be guessed by counting)
    - category: free text label chosen by the user, defaults to "Personal"
    - status: Active | Pinned | Archived, independent of category, so
      pinning or archiving never destroys the user's category
    - user_id: owning user, NOT NULL, ON DELETE CASCADE
    - created_at / updated_at: UTC; updated_at changes on edit only

    Index on (user_id, created_at):
        Every list query is "this user's notes, newest first".
"""

import enum
import uuid
from datetime import datetime, timezone
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, Enum, ForeignKey, Index, String, Text, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from notekeeper.database import Base

if TYPE_CHECKING:
    from notekeeper.models.user import User


class NoteStatus(str, enum.Enum):
    """Display status of a note. Exactly one holds at a time."""

    ACTIVE = "Active"
    PINNED = "Pinned"
    ARCHIVED = "Archived"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Note(Base):
    """
    A note owned by exactly one user.

    Lifecycle:
        1. Created with status Active
        2. Edited (title/content/category, updated_at refreshed)
        3. Pinned or archived (status overwritten, idempotent)
        4. Deleted explicitly, or by cascade when the owner is deleted

    Query Patterns:
        Every statement filters on user_id; single-note statements filter
        on (id, user_id) together.
    """

    __tablename__ = "notes"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        comment="Unique note identifier",
    )

    title: Mapped[str] = mapped_column(String(255), nullable=False)

    content: Mapped[str] = mapped_column(Text, nullable=False)

    category: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        default="Personal",
        server_default=text("'Personal'"),
        comment="User-chosen label",
    )

    status: Mapped[NoteStatus] = mapped_column(
        Enum(
            NoteStatus,
            name="note_status",
            native_enum=False,
            length=20,
            values_callable=lambda members: [m.value for m in members],
        ),
        nullable=False,
        default=NoteStatus.ACTIVE,
        server_default=text("'Active'"),
        comment="Active, Pinned or Archived",
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
        server_default=text("CURRENT_TIMESTAMP"),
        comment="Last edit of title, content or category",
    )

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )

    owner: Mapped["User"] = relationship(back_populates="notes")

    __table_args__ = (
        Index("idx_notes_user_created_at", "user_id", "created_at"),
    )

    def __repr__(self) -> str:
        return (
            f"<Note(id={self.id}, user_id={self.user_id}, "
            f"status='{self.status.value if self.status else None}')>"
        )
