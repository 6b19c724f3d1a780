"""
Notekeeper Backend: Authentication Schemas
===========================================

What:  Request/response bodies for POST /signup and POST /login.

Fields are Optional for the same reason as in the note schemas: the user
service reports missing and blank values with one 400 validation error.
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class SignupRequest(BaseModel):
    name: Optional[str] = Field(default=None, max_length=255)
    email: Optional[str] = Field(default=None, max_length=255)
    password: Optional[str] = Field(default=None, max_length=128)


class SignupResponse(BaseModel):
    message: str = Field(default="User registered successfully")
    user_id: uuid.UUID


class LoginRequest(BaseModel):
    email: Optional[str] = Field(default=None, max_length=255)
    password: Optional[str] = Field(default=None, max_length=128)


class TokenResponse(BaseModel):
    """
    What:  Session token returned by a successful login.
    How:   Client sends it back as `Authorization: Bearer <token>`.
    """
    token: str = Field(description="Signed JWT session token")
    token_type: str = Field(default="bearer")
    expires_at: datetime = Field(description="Token expiry (UTC)")
