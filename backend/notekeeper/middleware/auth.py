"""
Notekeeper Backend: Access-Control Guard
=========================================

What:  Verifies the bearer token on every protected request and exposes the
       authenticated user id to downstream code.
How:   A FastAPI dependency attached once per protected router:

           router = APIRouter(prefix="/notes", dependencies=[Depends(require_user)])

       Handlers that need the id declare `user_id: UUID = Depends(require_user)`;
       FastAPI caches the dependency, so the token is verified once per request.
When:  Before any handler of a protected router runs. Router dependencies are
       resolved before path/body validation, so a request without a valid
       token never reaches the handler or its input parsing.

Outcomes:
    no Authorization header           → 401 missing_token
    header not "Bearer <token>"       → 403 invalid_token
    bad signature / malformed token   → 403 invalid_token
    expired token                     → 403 expired_token
    valid token                       → user id returned, also on request.state.user_id
"""

from typing import Optional
from uuid import UUID

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from notekeeper.exceptions import InvalidTokenError, MissingTokenError
from notekeeper.services.credential_service import credential_service

# auto_error=False: the guard decides between 401 and 403 itself
bearer_scheme = HTTPBearer(auto_error=False, description="Session token from POST /login")


async def require_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> UUID:
    """
    Resolve the caller's user id from the Authorization header.

    Raises:
        MissingTokenError: header absent or empty
        InvalidTokenError: wrong scheme, or token failed verification
        ExpiredTokenError: token expired
    """
    if not request.headers.get("Authorization", "").strip():
        raise MissingTokenError()
    if credentials is None:
        # Header present, but not in "Bearer <token>" form
        raise InvalidTokenError(message="Authorization header must use the Bearer scheme")

    user_id = credential_service.verify_token(credentials.credentials)

    # Read by the access log after the response is produced
    request.state.user_id = user_id
    return user_id
