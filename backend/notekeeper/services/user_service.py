"""
Notekeeper Backend: User Service
=================================

What:  Signup, login and account deletion.
How:   Validates input, hashes/verifies passwords through CredentialService,
       and reads/writes the `users` table through the request's AsyncSession.
Who:   Called by the auth route handlers (signup, login). delete_user is
       service-level only; no HTTP route exposes it.

Email handling:
    Emails are stripped and lower-cased before every lookup and insert,
    so "A@X.com" and "a@x.com" are the same account.
"""

import logging
from typing import Optional
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from notekeeper.exceptions import (
    DatabaseError,
    DuplicateEmailError,
    InvalidCredentialsError,
    ValidationError,
)
from notekeeper.models.user import User
from notekeeper.services.credential_service import (
    CredentialService,
    IssuedToken,
    credential_service,
)

logger = logging.getLogger(__name__)


def normalize_email(email: Optional[str]) -> str:
    return (email or "").strip().lower()


class UserService:
    """
    Business logic for accounts.

    Error Handling Strategy:
        Business-rule failures raise their own exceptions (ValidationError,
        DuplicateEmailError, InvalidCredentialsError). Unexpected store
        failures are wrapped in DatabaseError.
    """

    def __init__(self, credentials: Optional[CredentialService] = None):
        self.credentials = credentials or credential_service

    async def signup(
        self,
        db: AsyncSession,
        name: Optional[str],
        email: Optional[str],
        password: Optional[str],
    ) -> User:
        """
        Register a new account.

        Raises:
            ValidationError: name, email or password missing/blank
            DuplicateEmailError: email already registered
            DatabaseError: insert failed for any other reason
        """
        name = (name or "").strip()
        email = normalize_email(email)
        missing = [
            field for field, value in (("name", name), ("email", email), ("password", password))
            if not value
        ]
        if missing:
            raise ValidationError(
                message="Name, email and password are required",
                context={"fields": missing},
            )

        try:
            existing = await db.execute(select(User.id).where(User.email == email))
            if existing.scalar_one_or_none() is not None:
                raise DuplicateEmailError()

            user = User(
                name=name,
                email=email,
                password_hash=self.credentials.hash_password(password),
            )
            db.add(user)
            await db.flush()
        except IntegrityError:
            # Unique constraint lost a race with a concurrent signup
            await db.rollback()
            raise DuplicateEmailError()
        except SQLAlchemyError as e:
            logger.error("Database error during signup: %s", str(e))
            raise DatabaseError(
                message="Could not create the account. Please try again.",
                context={"error_type": type(e).__name__},
            )

        logger.info("User registered: %s", user.id)
        return user

    async def login(
        self,
        db: AsyncSession,
        email: Optional[str],
        password: Optional[str],
    ) -> IssuedToken:
        """
        Exchange credentials for a session token.

        Unknown email, wrong password and missing fields all raise the same
        InvalidCredentialsError.
        """
        email = normalize_email(email)
        if not email or not password:
            raise InvalidCredentialsError()

        try:
            result = await db.execute(select(User).where(User.email == email))
            user = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Database error during login: %s", str(e))
            raise DatabaseError(
                message="Could not log in. Please try again.",
                context={"error_type": type(e).__name__},
            )

        if user is None:
            self.credentials.dummy_verify()
            logger.info("Failed login attempt")
            raise InvalidCredentialsError()
        if not self.credentials.verify_password(password, user.password_hash):
            logger.info("Failed login attempt")
            raise InvalidCredentialsError()

        issued = self.credentials.issue_token(user.id)
        logger.info("User %s logged in", user.id)
        return issued

    async def delete_user(self, db: AsyncSession, user_id: UUID) -> bool:
        """
        Delete an account. The store cascades the user's notes.

        Returns:
            True if a user row was removed, False if none matched.
        """
        try:
            result = await db.execute(delete(User).where(User.id == user_id))
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error deleting user %s: %s", user_id, str(e))
            raise DatabaseError(
                message="Could not delete the account. Please try again.",
                context={"user_id": str(user_id)},
            )
        deleted = result.rowcount > 0
        if deleted:
            logger.info("User %s deleted with all notes", user_id)
        return deleted


# ── Singleton Instance ────────────────────────────────────────────────────
user_service = UserService()
