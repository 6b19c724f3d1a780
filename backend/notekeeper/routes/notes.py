"""
Notekeeper Backend: Notes Route Handlers
=========================================

What:  CRUD, pin and archive endpoints under /notes.
How:   The router carries the access-control guard as a router-level
       dependency, so no handler here can run without a verified user id.
       Handlers pass that id to NoteService, which scopes every statement.
Who:   Called by the frontend notes view and by NotesClient.

Route Inventory:
    GET    /notes                list caller's notes (filters: category, status, search)
    POST   /notes                create
    GET    /notes/{id}           read one
    PUT    /notes/{id}           edit title/content/category
    DELETE /notes/{id}           delete (no-op if nothing matched)
    PATCH  /notes/{id}/pin       status → Pinned
    PATCH  /notes/{id}/archive   status → Archived
"""

import logging
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from notekeeper.database import DbSession
from notekeeper.middleware.auth import require_user
from notekeeper.models.note import NoteStatus
from notekeeper.schemas.note import (
    ErrorResponse,
    MessageResponse,
    NoteCreate,
    NoteResponse,
    NoteUpdate,
)
from notekeeper.services.note_service import note_service

logger = logging.getLogger(__name__)

_AUTH_ERRORS = {
    401: {"description": "Missing token", "model": ErrorResponse},
    403: {"description": "Invalid or expired token", "model": ErrorResponse},
}

router = APIRouter(
    prefix="/notes",
    tags=["Notes"],
    dependencies=[Depends(require_user)],
    responses=_AUTH_ERRORS,
)


@router.get(
    "",
    response_model=List[NoteResponse],
    summary="List the caller's notes",
)
async def list_notes(
    response: Response,
    category: Optional[str] = Query(default=None, description="Only notes with this category"),
    status: Optional[NoteStatus] = Query(default=None, description="Only notes in this status"),
    search: Optional[str] = Query(
        default=None,
        max_length=255,
        description="Case-insensitive substring of the title",
    ),
    user_id: UUID = Depends(require_user),
    db: AsyncSession = DbSession,
) -> List[NoteResponse]:
    """
    List notes owned by the caller, newest first.

    The X-Total-Count header carries the number of notes returned.
    """
    notes = await note_service.list_notes(
        db=db,
        user_id=user_id,
        category=category,
        status=status,
        search=search,
    )
    response.headers["X-Total-Count"] = str(len(notes))
    return [NoteResponse.model_validate(note) for note in notes]


@router.post(
    "",
    status_code=201,
    response_model=NoteResponse,
    responses={400: {"description": "Title or content missing", "model": ErrorResponse}},
    summary="Create a note",
)
async def create_note(
    payload: NoteCreate,
    user_id: UUID = Depends(require_user),
    db: AsyncSession = DbSession,
) -> NoteResponse:
    note = await note_service.create_note(
        db=db,
        user_id=user_id,
        title=payload.title,
        content=payload.content,
        category=payload.category,
    )
    return NoteResponse.model_validate(note)


@router.get(
    "/{note_id}",
    response_model=NoteResponse,
    responses={404: {"description": "Note not found", "model": ErrorResponse}},
    summary="Get a single note",
)
async def get_note(
    note_id: UUID,
    response: Response,
    user_id: UUID = Depends(require_user),
    db: AsyncSession = DbSession,
) -> NoteResponse:
    note = await note_service.get_note(db=db, user_id=user_id, note_id=note_id)
    # Per-user data that changes on edit/pin/archive
    response.headers["Cache-Control"] = "private, no-cache"
    return NoteResponse.model_validate(note)


@router.put(
    "/{note_id}",
    response_model=NoteResponse,
    responses={
        400: {"description": "Title or content missing", "model": ErrorResponse},
        404: {"description": "Note not found", "model": ErrorResponse},
    },
    summary="Edit a note",
)
async def update_note(
    note_id: UUID,
    payload: NoteUpdate,
    user_id: UUID = Depends(require_user),
    db: AsyncSession = DbSession,
) -> NoteResponse:
    """
    Replace a note's title and content (and category, when provided).

    A note that does not exist or belongs to another user yields 404.
    """
    note = await note_service.update_note(
        db=db,
        user_id=user_id,
        note_id=note_id,
        title=payload.title,
        content=payload.content,
        category=payload.category,
    )
    return NoteResponse.model_validate(note)


@router.delete(
    "/{note_id}",
    response_model=MessageResponse,
    summary="Delete a note",
)
async def delete_note(
    note_id: UUID,
    user_id: UUID = Depends(require_user),
    db: AsyncSession = DbSession,
) -> MessageResponse:
    await note_service.delete_note(db=db, user_id=user_id, note_id=note_id)
    return MessageResponse(message="Note deleted successfully", id=note_id)


@router.patch(
    "/{note_id}/pin",
    response_model=MessageResponse,
    summary="Pin a note",
)
async def pin_note(
    note_id: UUID,
    user_id: UUID = Depends(require_user),
    db: AsyncSession = DbSession,
) -> MessageResponse:
    await note_service.pin_note(db=db, user_id=user_id, note_id=note_id)
    return MessageResponse(message="Note pinned successfully", id=note_id)


@router.patch(
    "/{note_id}/archive",
    response_model=MessageResponse,
    summary="Archive a note",
)
async def archive_note(
    note_id: UUID,
    user_id: UUID = Depends(require_user),
    db: AsyncSession = DbSession,
) -> MessageResponse:
    await note_service.archive_note(db=db, user_id=user_id, note_id=note_id)
    return MessageResponse(message="Note archived successfully", id=note_id)
