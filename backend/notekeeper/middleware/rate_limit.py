"""
Notekeeper Backend: Credential Endpoint Rate Limiting
======================================================

What:  Per-IP sliding window limit on POST /signup and POST /login.
How:   Tracks request timestamps per client IP in memory; once an IP has
       `max_requests` timestamps inside the window, further credential
       requests get 429 with a Retry-After header.
When:  Innermost middleware, after request id and access logging; rejected
       requests never reach a handler or the password hasher.

Algorithm: Sliding Window Log
    1. Each IP gets a list of request timestamps
    2. On each limited request, drop timestamps older than the window
    3. If remaining count >= limit, reject with 429
    4. Otherwise record the current timestamp and continue

Scope:
    Note endpoints are not limited; they already require a valid token.
    State lives in this process only. Multi-worker deployments need a
    shared store for the counters.
"""

import logging
import time
from collections import defaultdict
from typing import Dict, FrozenSet, List, Optional, Tuple

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from notekeeper.config import settings
from notekeeper.exceptions import RateLimitExceededError
from notekeeper.middleware.request_id import request_id_var

logger = logging.getLogger(__name__)

LIMITED_ROUTES: FrozenSet[Tuple[str, str]] = frozenset({
    ("POST", "/signup"),
    ("POST", "/login"),
})


class AuthRateLimitMiddleware(BaseHTTPMiddleware):
    """
    In-memory sliding window rate limiter for credential endpoints.

    Configuration defaults come from settings (RATE_LIMIT_ENABLED,
    AUTH_RATE_LIMIT_REQUESTS, AUTH_RATE_LIMIT_WINDOW); keyword arguments
    override them, which is how tests build a small, strict limiter.
    """

    def __init__(
        self,
        app,
        max_requests: Optional[int] = None,
        window_seconds: Optional[int] = None,
        enabled: Optional[bool] = None,
    ):
        super().__init__(app)
        self.max_requests = max_requests if max_requests is not None else settings.auth_rate_limit_requests
        self.window_seconds = window_seconds if window_seconds is not None else settings.auth_rate_limit_window
        self.enabled = enabled if enabled is not None else settings.rate_limit_enabled
        self._requests: Dict[str, List[float]] = defaultdict(list)

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if not self.enabled or (request.method, request.url.path) not in LIMITED_ROUTES:
            return await call_next(request)

        client_ip = (
            getattr(request.client, "host", "unknown")
            if request.client
            else "unknown"
        )

        now = time.time()
        window_start = now - self.window_seconds

        # ── Sliding Window: drop expired entries ──────────────────────────
        timestamps = [ts for ts in self._requests[client_ip] if ts > window_start]
        self._requests[client_ip] = timestamps

        if len(timestamps) >= self.max_requests:
            retry_after = int(timestamps[0] + self.window_seconds - now) + 1
            logger.warning(
                "Rate limit exceeded for IP %s on %s: %d requests in %ds window",
                client_ip,
                request.url.path,
                len(timestamps),
                self.window_seconds,
            )
            exc = RateLimitExceededError(retry_after=retry_after)
            return JSONResponse(
                status_code=429,
                content={
                    "error": "rate_limit_exceeded",
                    "message": exc.message,
                    "details": exc.context,
                    "request_id": request_id_var.get(""),
                },
                headers={"Retry-After": str(retry_after)},
            )

        timestamps.append(now)

        # Periodic cleanup of IPs with no recent requests
        if len(self._requests) > 1000:
            self._cleanup_inactive_ips(window_start)

        return await call_next(request)

    def _cleanup_inactive_ips(self, window_start: float) -> None:
        inactive_ips = [
            ip for ip, timestamps in self._requests.items()
            if not timestamps or timestamps[-1] < window_start
        ]
        for ip in inactive_ips:
            del self._requests[ip]

        if inactive_ips:
            logger.debug("Cleaned up %d inactive IP entries", len(inactive_ips))
