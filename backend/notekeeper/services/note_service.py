"""
Notekeeper Backend: Note Service (Business Logic)
==================================================

What:  Create/read/update/delete/list/pin/archive for notes.
How:   Every method receives the request's AsyncSession and the user id
       resolved by the access-control guard. Every statement filters on
       that user id; single-note statements filter on (id, user_id).
Who:   Called by the notes route handlers.

Per-note state machine:
    nonexistent ──create──▶ Active ──pin──▶ Pinned
                              │  ◀──edit──▶   │
                              └──archive──▶ Archived
    any state ──delete / owner deleted──▶ gone

Mutations that match nothing:
    update  → NotFoundError (404)
    delete  → no-op, returns False
    pin     → no-op, returns False
    archive → no-op, returns False
"""

import logging
from datetime import datetime, timezone
from typing import List, Optional
from uuid import UUID

from sqlalchemy import delete, desc, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from notekeeper.config import settings
from notekeeper.exceptions import DatabaseError, NotFoundError, ValidationError
from notekeeper.models.note import Note, NoteStatus

logger = logging.getLogger(__name__)


def _require_title_and_content(title: Optional[str], content: Optional[str]) -> None:
    missing = [
        field for field, value in (("title", title), ("content", content))
        if value is None or not value.strip()
    ]
    if missing:
        raise ValidationError(
            message="Title and content are required",
            context={"fields": missing},
        )


def _clean_category(category: Optional[str]) -> Optional[str]:
    if category is None:
        return None
    return category.strip() or None


class NoteService:
    """
    Business logic layer for note operations.

    Stateless: dependencies (session, user id) arrive with each call.
    Store failures are wrapped in DatabaseError; NotFoundError and
    ValidationError propagate unchanged.
    """

    async def list_notes(
        self,
        db: AsyncSession,
        user_id: UUID,
        category: Optional[str] = None,
        status: Optional[NoteStatus] = None,
        search: Optional[str] = None,
    ) -> List[Note]:
        """
        List the caller's notes, newest first.

        Args:
            category: exact category match
            status:   only notes in this status
            search:   case-insensitive substring of the title
        """
        query = select(Note).where(Note.user_id == user_id)
        if category:
            query = query.where(Note.category == category)
        if status is not None:
            query = query.where(Note.status == status)
        if search:
            query = query.where(Note.title.icontains(search, autoescape=True))
        query = query.order_by(desc(Note.created_at), desc(Note.id))

        try:
            result = await db.execute(query)
            return list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error("Database error listing notes for %s: %s", user_id, str(e), exc_info=True)
            raise DatabaseError(
                message="Could not retrieve notes. Please try again.",
                context={"error_type": type(e).__name__},
            )

    async def _fetch_owned(self, db: AsyncSession, user_id: UUID, note_id: UUID) -> Optional[Note]:
        result = await db.execute(
            select(Note).where(Note.id == note_id, Note.user_id == user_id)
        )
        return result.scalar_one_or_none()

    async def get_note(self, db: AsyncSession, user_id: UUID, note_id: UUID) -> Note:
        """
        Retrieve a single note owned by the caller.

        Raises:
            NotFoundError: no such note, or it belongs to someone else
        """
        try:
            note = await self._fetch_owned(db, user_id, note_id)
        except SQLAlchemyError as e:
            logger.error("Database error fetching note %s: %s", note_id, str(e))
            raise DatabaseError(
                message="Could not retrieve the note. Please try again.",
                context={"note_id": str(note_id)},
            )

        if note is None:
            raise NotFoundError(resource="note", resource_id=str(note_id))
        return note

    async def create_note(
        self,
        db: AsyncSession,
        user_id: UUID,
        title: Optional[str],
        content: Optional[str],
        category: Optional[str] = None,
    ) -> Note:
        """
        Create a note for the caller.

        Validation runs before anything touches the session, so a rejected
        note never produces a row.

        Raises:
            ValidationError: title or content missing/blank
        """
        _require_title_and_content(title, content)

        now = datetime.now(timezone.utc)
        note = Note(
            title=title.strip(),
            content=content,
            category=_clean_category(category) or settings.default_category,
            status=NoteStatus.ACTIVE,
            created_at=now,
            updated_at=now,
            user_id=user_id,
        )
        try:
            db.add(note)
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error creating note for %s: %s", user_id, str(e), exc_info=True)
            raise DatabaseError(
                message="Could not save the note. Please try again.",
                context={"error_type": type(e).__name__},
            )

        logger.info("Note %s created by %s", note.id, user_id)
        return note

    async def update_note(
        self,
        db: AsyncSession,
        user_id: UUID,
        note_id: UUID,
        title: Optional[str],
        content: Optional[str],
        category: Optional[str] = None,
    ) -> Note:
        """
        Replace title/content (and category, if given) of the caller's note.

        `updated_at` is refreshed on every successful update. Status is not
        touched: editing a pinned note leaves it pinned.

        Raises:
            ValidationError: title or content missing/blank
            NotFoundError: no such note for this user
        """
        _require_title_and_content(title, content)

        note = await self.get_note(db, user_id, note_id)
        note.title = title.strip()
        note.content = content
        new_category = _clean_category(category)
        if new_category is not None:
            note.category = new_category
        note.updated_at = datetime.now(timezone.utc)

        try:
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error updating note %s: %s", note_id, str(e), exc_info=True)
            raise DatabaseError(
                message="Could not update the note. Please try again.",
                context={"note_id": str(note_id)},
            )

        logger.info("Note %s updated", note_id)
        return note

    async def delete_note(self, db: AsyncSession, user_id: UUID, note_id: UUID) -> bool:
        """Delete the caller's note. Returns False when nothing matched."""
        try:
            result = await db.execute(
                delete(Note).where(Note.id == note_id, Note.user_id == user_id)
            )
        except SQLAlchemyError as e:
            logger.error("Database error deleting note %s: %s", note_id, str(e))
            raise DatabaseError(
                message="Could not delete the note. Please try again.",
                context={"note_id": str(note_id)},
            )

        deleted = result.rowcount > 0
        if deleted:
            logger.info("Note %s deleted", note_id)
        else:
            logger.debug("Delete of note %s matched nothing for %s", note_id, user_id)
        return deleted

    async def _set_status(
        self,
        db: AsyncSession,
        user_id: UUID,
        note_id: UUID,
        status: NoteStatus,
    ) -> bool:
        try:
            result = await db.execute(
                update(Note)
                .where(Note.id == note_id, Note.user_id == user_id)
                .values(status=status)
                .execution_options(synchronize_session="fetch")
            )
        except SQLAlchemyError as e:
            logger.error("Database error setting status of note %s: %s", note_id, str(e))
            raise DatabaseError(
                message="Could not update the note. Please try again.",
                context={"note_id": str(note_id), "status": status.value},
            )
        matched = result.rowcount > 0
        if matched:
            logger.info("Note %s marked %s", note_id, status.value)
        return matched

    async def pin_note(self, db: AsyncSession, user_id: UUID, note_id: UUID) -> bool:
        """Set status to Pinned. Idempotent; False when nothing matched."""
        return await self._set_status(db, user_id, note_id, NoteStatus.PINNED)

    async def archive_note(self, db: AsyncSession, user_id: UUID, note_id: UUID) -> bool:
        """Set status to Archived. Idempotent; False when nothing matched."""
        return await self._set_status(db, user_id, note_id, NoteStatus.ARCHIVED)


# ── Singleton Instance ────────────────────────────────────────────────────
note_service = NoteService()
