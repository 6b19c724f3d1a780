"""
Notekeeper Backend: Request Logging Middleware
===============================================

What:  One access-log line per HTTP request.
How:   Measures wall time around the downstream app and logs method, path,
       status, duration, request id, authenticated user and client IP on
       the `notekeeper.access` logger.
When:  After RequestIDMiddleware (uses its request id).

Logged:      method, path, status, duration, request id, user id, client IP
Not logged:  request bodies (passwords, note text), Authorization header

Level by status: 5xx → ERROR, 4xx → WARNING, otherwise INFO.
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from notekeeper.middleware.request_id import request_id_var

logger = logging.getLogger("notekeeper.access")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Logs structured information about each HTTP request and response.

    The user id is read from request.state after the response is produced:
    the access-control guard sets it on the shared request scope, which is
    visible here even though the guard runs in a child task.
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        path = request.url.path
        if path == "/health":
            return await call_next(request)

        start_time = time.perf_counter()
        client_ip = getattr(request.client, "host", "unknown") if request.client else "unknown"
        method = request.method
        rid = request_id_var.get("")

        response = await call_next(request)

        duration_ms = (time.perf_counter() - start_time) * 1000
        user_id = getattr(request.state, "user_id", None)
        user = str(user_id) if user_id else "-"

        status = response.status_code
        if status >= 500:
            log_level = logging.ERROR
        elif status >= 400:
            log_level = logging.WARNING
        else:
            log_level = logging.INFO

        logger.log(
            log_level,
            "%s %s %d %.1fms [%s] user=%s from %s",
            method,
            path,
            status,
            duration_ms,
            rid,
            user,
            client_ip,
            extra={
                "request_id": rid,
                "method": method,
                "path": path,
                "status": status,
                "duration_ms": round(duration_ms, 2),
                "user_id": user,
                "client_ip": client_ip,
            },
        )

        return response
