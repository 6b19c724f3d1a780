"""
Notekeeper Backend: Request ID Middleware
==========================================

What:  Assigns a correlation id to each request and echoes it in the
       X-Request-ID response header.
How:   Uses the client's X-Request-ID when present, otherwise a short UUID.
       The id is stored in a ContextVar (read by log lines and the rate
       limiter) and on request.state (read by the exception handlers,
       including the fallback 500 handler that runs outside this middleware).
When:  Early in the middleware chain, before request logging.

Every error body carries the same id as `request_id`, so a user-reported
error can be matched to its log lines.
"""

import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

# Coroutine-local: concurrent requests on one event loop each see their own id
request_id_var: ContextVar[str] = ContextVar("request_id", default="")

# Longer client-supplied ids are replaced rather than logged verbatim
_MAX_CLIENT_ID_LENGTH = 64


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Middleware that tags each request with an id for tracing."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = request.headers.get("X-Request-ID", "").strip()
        if not rid or len(rid) > _MAX_CLIENT_ID_LENGTH:
            rid = str(uuid.uuid4())[:8]

        request_id_var.set(rid)
        request.state.request_id = rid

        response = await call_next(request)
        response.headers["X-Request-ID"] = rid
        return response
