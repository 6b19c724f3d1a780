"""
Notekeeper Backend: Credential Service
=======================================

What:  Password hashing and session-token signing/verification.
How:   passlib's CryptContext (bcrypt) for passwords; python-jose for
       HS256-signed JWTs carrying the user id in the `sub` claim.
Who:   UserService (signup/login) and the access-control guard.
When:  Hashing on signup, verification on login, token checks on every
       protected request.

Token Claims:
    sub: user id (UUID string)
    iat: issued-at (unix seconds)
    exp: expiry (unix seconds), iat + JWT_EXPIRE_HOURS

Failure mapping for verify_token():
    empty token            → MissingTokenError   (401)
    exp in the past        → ExpiredTokenError   (403)
    bad signature / format → InvalidTokenError   (403)
    sub missing / not UUID → InvalidTokenError   (403)
"""

import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import NamedTuple, Optional

from jose import JWTError, jwt
from jose.exceptions import ExpiredSignatureError
from passlib.context import CryptContext

from notekeeper.config import settings
from notekeeper.exceptions import (
    ConfigurationError,
    ExpiredTokenError,
    InvalidTokenError,
    MissingTokenError,
    ValidationError,
)

logger = logging.getLogger(__name__)


class IssuedToken(NamedTuple):
    token: str
    expires_at: datetime


class CredentialService:
    """
    Hashes passwords and issues/verifies session tokens.

    The signing secret is captured once at construction. The module-level
    `credential_service` singleton is built from `settings` at import time;
    tests construct their own instances with explicit parameters.
    """

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        expire_hours: int = 720,
        bcrypt_rounds: int = 12,
    ):
        self._secret = secret
        self.algorithm = algorithm
        self.expire_hours = expire_hours
        self._pwd_context = CryptContext(
            schemes=["bcrypt"],
            deprecated="auto",
            bcrypt__rounds=bcrypt_rounds,
        )

    @classmethod
    def from_settings(cls) -> "CredentialService":
        return cls(
            secret=settings.jwt_secret,
            algorithm=settings.jwt_algorithm,
            expire_hours=settings.jwt_expire_hours,
            bcrypt_rounds=settings.bcrypt_rounds,
        )

    # ── Passwords ─────────────────────────────────────────────────────────

    def hash_password(self, password: str) -> str:
        """Return a salted bcrypt hash of `password`."""
        if not password:
            raise ValidationError(message="Password is required", field="password")
        return self._pwd_context.hash(password)

    def verify_password(self, password: Optional[str], hashed: Optional[str]) -> bool:
        """
        Check `password` against a stored hash.

        Returns False (never raises) for missing input or an unrecognised
        hash format, so callers can treat every failure as a mismatch.
        """
        if not password or not hashed:
            return False
        try:
            return self._pwd_context.verify(password, hashed)
        except (ValueError, TypeError):
            logger.warning("Stored password hash could not be identified")
            return False

    def dummy_verify(self) -> bool:
        """
        Spend the same bcrypt effort as a real verify, then return False.

        Login calls this for unknown emails so response time does not reveal
        which addresses are registered.
        """
        return self._pwd_context.dummy_verify()

    # ── Tokens ────────────────────────────────────────────────────────────

    def _require_secret(self) -> str:
        if not self._secret:
            raise ConfigurationError(message="JWT_SECRET is not configured")
        return self._secret

    def issue_token(
        self,
        user_id: uuid.UUID,
        expires_delta: Optional[timedelta] = None,
    ) -> IssuedToken:
        """
        Sign a session token for `user_id`.

        Args:
            user_id: Subject of the token
            expires_delta: Override of the configured lifetime (tests use a
                           negative delta to mint already-expired tokens)
        """
        now = datetime.now(timezone.utc).replace(microsecond=0)
        expires_at = now + (expires_delta if expires_delta is not None else timedelta(hours=self.expire_hours))
        claims = {
            "sub": str(user_id),
            "iat": int(now.timestamp()),
            "exp": int(expires_at.timestamp()),
        }
        token = jwt.encode(claims, self._require_secret(), algorithm=self.algorithm)
        return IssuedToken(token=token, expires_at=expires_at)

    def verify_token(self, token: Optional[str]) -> uuid.UUID:
        """
        Resolve a token to the user id it was issued for.

        Raises:
            MissingTokenError: token is None or empty
            ExpiredTokenError: signature valid but `exp` has passed
            InvalidTokenError: any other decoding or claim problem
        """
        if not token:
            raise MissingTokenError()

        try:
            payload = jwt.decode(token, self._require_secret(), algorithms=[self.algorithm])
        except ExpiredSignatureError:
            raise ExpiredTokenError()
        except JWTError as e:
            logger.debug("Token rejected: %s", e)
            raise InvalidTokenError(context={"reason": type(e).__name__})

        subject = payload.get("sub")
        if not subject:
            raise InvalidTokenError(context={"reason": "missing_subject"})
        try:
            return uuid.UUID(str(subject))
        except ValueError:
            raise InvalidTokenError(context={"reason": "malformed_subject"})


# ── Singleton Instance ────────────────────────────────────────────────────
credential_service = CredentialService.from_settings()
