"""
Notekeeper Backend: Session Lifecycle Tests
============================================

What we test:
    ✅ A write is committed before its response leaves the app
    ✅ A failed commit surfaces as DatabaseError
    ✅ A failing handler rolls its writes back
"""

import asyncio
import json
import uuid
from unittest.mock import AsyncMock

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError

from notekeeper.database import async_session_factory, get_db_session
from notekeeper.exceptions import DatabaseError
from notekeeper.models.note import Note
from notekeeper.models.user import User


async def _count(model) -> int:
    async with async_session_factory() as session:
        return (await session.execute(select(func.count()).select_from(model))).scalar_one()


async def _call_app(app, method, path, body, headers):
    """
    Drive the app with raw ASGI messages.

    Returns the response status and the number of notes in the store at
    the moment the final body chunk was sent.
    """
    payload = json.dumps(body).encode()
    scope = {
        "type": "http",
        "asgi": {"version": "3.0"},
        "http_version": "1.1",
        "method": method,
        "scheme": "http",
        "path": path,
        "raw_path": path.encode(),
        "root_path": "",
        "query_string": b"",
        "headers": [
            (b"host", b"test"),
            (b"content-type", b"application/json"),
            (b"content-length", str(len(payload)).encode()),
            *[(k.lower().encode(), v.encode()) for k, v in headers.items()],
        ],
        "client": ("127.0.0.1", 50000),
        "server": ("test", 80),
    }
    request_messages = [{"type": "http.request", "body": payload, "more_body": False}]
    response_sent = asyncio.Event()
    seen = {}

    async def receive():
        if request_messages:
            return request_messages.pop(0)
        await response_sent.wait()
        return {"type": "http.disconnect"}

    async def send(message):
        if message["type"] == "http.response.start":
            seen["status"] = message["status"]
        elif message["type"] == "http.response.body" and not message.get("more_body", False):
            seen["notes_in_store"] = await _count(Note)
            response_sent.set()

    await app(scope, receive, send)
    return seen


class TestCommitOrdering:

    @pytest.mark.asyncio
    async def test_created_note_is_visible_when_response_is_sent(self, test_client, register_user):
        from notekeeper.main import app

        headers = await register_user()

        seen = await _call_app(app, "POST", "/notes", {"title": "T", "content": "C"}, headers)

        assert seen["status"] == 201
        assert seen["notes_in_store"] == 1

    @pytest.mark.asyncio
    async def test_signup_is_visible_right_after_response(self, test_client):
        r = await test_client.post(
            "/signup", json={"name": "A", "email": "a@x.com", "password": "pw"}
        )

        assert r.status_code == 201
        assert await _count(User) == 1


class TestSessionDependency:

    @pytest.mark.asyncio
    async def test_failed_commit_raises_database_error(self, db_schema):
        gen = get_db_session()
        session = await gen.__anext__()
        session.commit = AsyncMock(
            side_effect=OperationalError("COMMIT", {}, Exception("database is locked"))
        )

        with pytest.raises(DatabaseError):
            await gen.__anext__()

    @pytest.mark.asyncio
    async def test_handler_error_rolls_back(self, db_schema):
        gen = get_db_session()
        session = await gen.__anext__()
        session.add(User(id=uuid.uuid4(), name="A", email="a@x.com", password_hash="x"))
        await session.flush()

        with pytest.raises(RuntimeError):
            await gen.athrow(RuntimeError("handler failed"))

        assert await _count(User) == 0
