"""
Notekeeper Backend: Note Request/Response Schemas
==================================================

What:  Pydantic models defining the notes API contract.
How:   FastAPI validates request bodies against these models, serializes
       responses through them, and builds the OpenAPI docs from them.

Note on required fields:
    `title` and `content` are declared Optional here on purpose: the note
    service enforces "required and non-blank" itself, so a missing field
    and a blank field produce the same 400 `validation_error` response.
"""

import uuid
from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from notekeeper.models.note import NoteStatus


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class NoteCreate(BaseModel):
    """Body of POST /notes."""
    title: Optional[str] = Field(default=None, max_length=255, description="Note title (required)")
    content: Optional[str] = Field(default=None, description="Note body (required)")
    category: Optional[str] = Field(
        default=None,
        max_length=50,
        description="Free-text category; defaults to 'Personal'",
    )


class NoteUpdate(BaseModel):
    """
    Body of PUT /notes/{id}.

    title and content are required as on create. Omitting category keeps
    the note's current category.
    """
    title: Optional[str] = Field(default=None, max_length=255)
    content: Optional[str] = Field(default=None)
    category: Optional[str] = Field(default=None, max_length=50)


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class NoteResponse(BaseModel):
    """
    What:  Full representation of a note.
    Who:   Returned by GET /notes, GET /notes/{id}, POST /notes, PUT /notes/{id}.
    """
    id: uuid.UUID = Field(description="Unique note identifier (UUID)")
    title: str
    content: str
    category: str = Field(description="User-chosen category")
    status: NoteStatus = Field(
        description="Active, Pinned or Archived. Pinning sets this field, never category",
    )
    created_at: datetime = Field(description="Creation time (UTC ISO 8601)")
    updated_at: datetime = Field(description="Last edit time (UTC ISO 8601)")
    user_id: uuid.UUID = Field(description="Owning user")

    model_config = {"from_attributes": True}

    @field_validator("created_at", "updated_at")
    @classmethod
    def as_utc(cls, value: datetime) -> datetime:
        # SQLite returns naive datetimes; stored values are always UTC
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)


class MessageResponse(BaseModel):
    """Confirmation body for DELETE, pin and archive."""
    message: str
    id: Optional[uuid.UUID] = None


# ══════════════════════════════════════════════════════════════════════════
# Error / Health Models
# ══════════════════════════════════════════════════════════════════════════


class ErrorResponse(BaseModel):
    """
    What:  Standardized error body for every API error.

    Example:
        {
            "error": "missing_token",
            "message": "Authentication token not provided",
            "request_id": "1f0c2a9b"
        }
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """Returned by GET /health."""
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
