"""
Notekeeper Backend: NotesClient Tests
======================================

What:  The Python API client against the real app over ASGITransport.
"""

import stat

import pytest
import pytest_asyncio
from httpx import ASGITransport

from notekeeper.client import ApiError, NotesClient, TokenStore


@pytest_asyncio.fixture
async def client(db_schema, tmp_path):
    from notekeeper.main import app

    store = TokenStore(tmp_path / "session.json")
    async with NotesClient("http://test", token_store=store, transport=ASGITransport(app=app)) as c:
        yield c


class TestTokenStore:

    def test_load_missing_file(self, tmp_path):
        assert TokenStore(tmp_path / "nope.json").load() is None

    def test_save_load_clear(self, tmp_path):
        store = TokenStore(tmp_path / "dir" / "session.json")
        store.save("abc", "2026-01-01T00:00:00+00:00")

        assert store.load() == "abc"
        assert stat.S_IMODE(store.path.stat().st_mode) == 0o600

        store.clear()
        assert store.load() is None
        store.clear()

    def test_corrupt_file_ignored(self, tmp_path):
        path = tmp_path / "session.json"
        path.write_text("{not json")
        assert TokenStore(path).load() is None


class TestNotesClient:

    @pytest.mark.asyncio
    async def test_session_flow(self, client):
        await client.signup("A", "a@x.com", "pw")
        token = await client.login("a@x.com", "pw")
        assert client.token_store.load() == token.token

        note = await client.create_note("Groceries", "milk", category="Home")
        assert note.category == "Home"

        assert await client.pin_note(note.id) == "Note pinned successfully"
        assert (await client.get_note(note.id)).status.value == "Pinned"

        edited = await client.update_note(note.id, "Groceries", "milk, eggs")
        assert edited.content == "milk, eggs"
        assert edited.category == "Home"

        assert [n.id for n in await client.list_notes(status="Pinned")] == [note.id]

        assert await client.archive_note(note.id) == "Note archived successfully"
        assert await client.delete_note(note.id) == "Note deleted successfully"
        assert await client.list_notes() == []

    @pytest.mark.asyncio
    async def test_logout_drops_token(self, client):
        await client.signup("A", "a@x.com", "pw")
        await client.login("a@x.com", "pw")
        client.logout()

        with pytest.raises(ApiError) as exc_info:
            await client.list_notes()

        assert exc_info.value.status_code == 401
        assert exc_info.value.error == "missing_token"

    @pytest.mark.asyncio
    async def test_bad_login_raises(self, client):
        with pytest.raises(ApiError) as exc_info:
            await client.login("a@x.com", "pw")

        assert exc_info.value.status_code == 400
        assert exc_info.value.error == "invalid_credentials"
        assert client.token_store.load() is None
