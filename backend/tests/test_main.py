"""
Notekeeper Backend: Application Lifecycle Tests
================================================

What we test:
    ✅ GET /health reports the store as connected
    ✅ Startup refuses to run without a signing secret
    ✅ Startup refuses to run when the schema cannot be created
    ✅ A normal startup creates the tables
    ✅ 429 and 500 bodies carry the request id; CORS headers reach 429s
    ✅ The access log records the authenticated user
"""

import logging

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import inspect
from sqlalchemy.exc import OperationalError

from notekeeper import __version__, main
from notekeeper.config import settings
from notekeeper.database import engine
from notekeeper.exceptions import ConfigurationError
from notekeeper.services.credential_service import credential_service


@pytest.fixture
def quiet_startup(monkeypatch):
    # setup_logging() replaces root handlers, including pytest's capture
    monkeypatch.setattr(main, "setup_logging", lambda: None)


@pytest.mark.asyncio
async def test_health(test_client):
    r = await test_client.get("/health")

    assert r.status_code == 200
    body = r.json()
    assert body["status"] == "healthy"
    assert body["database"] == "connected"
    assert body["version"] == __version__


class TestLifespan:

    @pytest.mark.asyncio
    @pytest.mark.parametrize("secret", ["", "   ", "change-me"])
    async def test_missing_secret_is_fatal(self, monkeypatch, quiet_startup, secret):
        monkeypatch.setattr(settings, "jwt_secret", secret)

        with pytest.raises(ConfigurationError):
            async with main.lifespan(main.app):
                pass

    @pytest.mark.asyncio
    async def test_schema_failure_is_fatal(self, monkeypatch, quiet_startup):
        async def broken_init():
            raise OperationalError("CREATE TABLE", {}, Exception("unable to open database file"))

        monkeypatch.setattr(main, "init_models", broken_init)

        with pytest.raises(ConfigurationError):
            async with main.lifespan(main.app):
                pass

    @pytest.mark.asyncio
    async def test_startup_creates_tables(self, db_schema, quiet_startup):
        async with engine.begin() as conn:
            await conn.exec_driver_sql("DROP TABLE notes")
            await conn.exec_driver_sql("DROP TABLE users")

        async with main.lifespan(main.app):
            async with engine.connect() as conn:
                tables = await conn.run_sync(lambda sync_conn: inspect(sync_conn).get_table_names())

        assert {"users", "notes"} <= set(tables)


class TestMiddlewareChain:

    @pytest.mark.asyncio
    async def test_rate_limited_response_is_tagged_and_cors_readable(self, db_schema, monkeypatch):
        monkeypatch.setattr(settings, "rate_limit_enabled", True)
        monkeypatch.setattr(settings, "auth_rate_limit_requests", 1)
        app = main.create_app()
        headers = {"Origin": "http://localhost:3000", "X-Request-ID": "trace-429"}

        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            await client.post("/login", json={}, headers=headers)
            r = await client.post("/login", json={}, headers=headers)

        assert r.status_code == 429
        assert r.json()["request_id"] == "trace-429"
        assert r.headers["X-Request-ID"] == "trace-429"
        assert r.headers["access-control-allow-origin"] == "http://localhost:3000"
        assert "Retry-After" in r.headers

    @pytest.mark.asyncio
    async def test_unexpected_error_body_carries_request_id(self):
        app = main.create_app()

        async def explode():
            raise RuntimeError("boom")

        app.add_api_route("/explode", explode)
        transport = ASGITransport(app=app, raise_app_exceptions=False)

        async with AsyncClient(transport=transport, base_url="http://test") as client:
            r = await client.get("/explode", headers={"X-Request-ID": "trace-500"})

        assert r.status_code == 500
        assert r.json()["error"] == "internal_server_error"
        assert r.json()["request_id"] == "trace-500"
        assert "boom" not in r.text

    @pytest.mark.asyncio
    async def test_access_log_names_the_authenticated_user(self, test_client, register_user, caplog):
        headers = await register_user()
        user_id = credential_service.verify_token(headers["Authorization"].split(" ", 1)[1])
        caplog.set_level(logging.INFO, logger="notekeeper.access")

        await test_client.get("/notes", headers=headers)

        lines = [r.getMessage() for r in caplog.records if r.name == "notekeeper.access"]
        assert any("GET /notes 200" in line and f"user={user_id}" in line for line in lines)

    def test_api_description_explains_status_vs_category(self):
        description = main.create_app().openapi()["info"]["description"]
        assert "`status`" in description
        assert "keeps its category" in description
