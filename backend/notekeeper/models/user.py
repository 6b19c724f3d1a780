"""
Notekeeper Backend: User SQLAlchemy Model
==========================================

What:  ORM model representing the `users` table.
Who:   Used by UserService (signup, login, deletion) and by Alembic.

Table Design:
    - UUID primary key, generated in Python so the same model works on
      SQLite and PostgreSQL
    - email: unique, stored stripped and lower-cased by UserService
    - password_hash: bcrypt hash only; the plaintext is never stored
    - notes: one-to-many, ON DELETE CASCADE at the database level
"""

import uuid
from datetime import datetime, timezone
from typing import TYPE_CHECKING, List

from sqlalchemy import DateTime, String, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from notekeeper.database import Base

if TYPE_CHECKING:
    from notekeeper.models.note import Note


class User(Base):
    """
    An account that owns notes.

    Lifecycle:
        1. Created on signup
        2. Never updated through the API
        3. Deleting the row removes every note it owns (FK cascade)
    """

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        comment="Unique user identifier",
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        index=True,
        nullable=False,
        comment="Login identifier, lower-cased",
    )

    password_hash: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Salted bcrypt hash of the password",
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=text("CURRENT_TIMESTAMP"),
    )

    # passive_deletes: let the database cascade instead of loading every
    # note into the session (lazy loads are unavailable under asyncio)
    notes: Mapped[List["Note"]] = relationship(
        back_populates="owner",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email='{self.email}')>"
