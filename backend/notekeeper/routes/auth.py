"""
Notekeeper Backend: Auth Route Handlers
========================================

What:  POST /signup and POST /login.
How:   Thin handlers: parse the body, delegate to UserService, shape the
       response. Failures are raised as application exceptions and turned
       into JSON by the global handlers in main.py.
Who:   Called by the signup and login forms of the frontend and by NotesClient.

Both endpoints are public and rate limited per IP (AuthRateLimitMiddleware).
"""

import logging

from fastapi import APIRouter
from sqlalchemy.ext.asyncio import AsyncSession

from notekeeper.database import DbSession
from notekeeper.schemas.auth import (
    LoginRequest,
    SignupRequest,
    SignupResponse,
    TokenResponse,
)
from notekeeper.schemas.note import ErrorResponse
from notekeeper.services.user_service import user_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Auth"])


@router.post(
    "/signup",
    status_code=201,
    response_model=SignupResponse,
    responses={
        201: {"description": "Account created", "model": SignupResponse},
        400: {"description": "Missing fields or email already registered", "model": ErrorResponse},
        429: {"description": "Too many attempts", "model": ErrorResponse},
    },
    summary="Register a new user",
)
async def signup(
    payload: SignupRequest,
    db: AsyncSession = DbSession,
) -> SignupResponse:
    user = await user_service.signup(
        db=db,
        name=payload.name,
        email=payload.email,
        password=payload.password,
    )
    return SignupResponse(user_id=user.id)


@router.post(
    "/login",
    response_model=TokenResponse,
    responses={
        200: {"description": "Session token", "model": TokenResponse},
        400: {"description": "Invalid email or password", "model": ErrorResponse},
        429: {"description": "Too many attempts", "model": ErrorResponse},
    },
    summary="Exchange email and password for a session token",
)
async def login(
    payload: LoginRequest,
    db: AsyncSession = DbSession,
) -> TokenResponse:
    """
    Log in and receive a bearer token.

    The token is valid for JWT_EXPIRE_HOURS (default 720 hours). An unknown
    email and a wrong password produce the same 400 response.
    """
    issued = await user_service.login(db=db, email=payload.email, password=payload.password)
    return TokenResponse(token=issued.token, expires_at=issued.expires_at)
