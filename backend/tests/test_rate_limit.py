"""
Notekeeper Backend: Rate Limit Middleware Tests
================================================

What:  AuthRateLimitMiddleware in isolation, on a minimal FastAPI app.
How:   The app under test disables the limiter through settings; these
       tests pass explicit limits instead.
"""

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from notekeeper.middleware.rate_limit import AuthRateLimitMiddleware


def _app(max_requests=2, enabled=True):
    app = FastAPI()
    app.add_middleware(
        AuthRateLimitMiddleware,
        max_requests=max_requests,
        window_seconds=60,
        enabled=enabled,
    )

    @app.post("/login")
    async def login():
        return {"ok": True}

    @app.post("/signup")
    async def signup():
        return {"ok": True}

    @app.get("/notes")
    async def notes():
        return []

    return app


def _client(app):
    return AsyncClient(transport=ASGITransport(app=app), base_url="http://test")


class TestAuthRateLimit:

    @pytest.mark.asyncio
    async def test_third_login_is_rejected(self):
        async with _client(_app()) as client:
            assert (await client.post("/login")).status_code == 200
            assert (await client.post("/login")).status_code == 200

            r = await client.post("/login")

        assert r.status_code == 429
        assert r.json()["error"] == "rate_limit_exceeded"
        assert 0 < int(r.headers["Retry-After"]) <= 61

    @pytest.mark.asyncio
    async def test_signup_and_login_share_the_budget(self):
        async with _client(_app()) as client:
            await client.post("/signup")
            await client.post("/login")
            r = await client.post("/signup")
        assert r.status_code == 429

    @pytest.mark.asyncio
    async def test_other_routes_not_limited(self):
        async with _client(_app(max_requests=1)) as client:
            for _ in range(5):
                assert (await client.get("/notes")).status_code == 200

    @pytest.mark.asyncio
    async def test_disabled(self):
        async with _client(_app(max_requests=1, enabled=False)) as client:
            for _ in range(3):
                assert (await client.post("/login")).status_code == 200
