"""
Notekeeper Backend: Python API Client
======================================

What:  Async client for the Notekeeper HTTP API, with the session token
       persisted on disk between runs.
How:   httpx.AsyncClient for transport; TokenStore keeps the token in a JSON
       file. Protected calls send `Authorization: Bearer <token>`. Note
       payloads are parsed into NoteResponse models.
Who:   Scripts, integrations, and the end-to-end tests (which pass an
       ASGITransport so no server needs to run).

Usage:
    async with NotesClient("http://localhost:8000") as client:
        await client.login("a@x.com", "pw")
        note = await client.create_note("Groceries", "milk, eggs")
        await client.pin_note(note.id)
"""

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional, Union
from uuid import UUID

import httpx

from notekeeper.schemas.auth import TokenResponse
from notekeeper.schemas.note import NoteResponse

logger = logging.getLogger(__name__)

DEFAULT_TOKEN_PATH = Path(os.path.expanduser("~")) / ".notekeeper" / "session.json"


class ApiError(Exception):
    """Non-2xx response from the API, carrying its error body."""

    def __init__(self, status_code: int, error: str, message: str):
        self.status_code = status_code
        self.error = error
        self.message = message
        super().__init__(f"{status_code} {error}: {message}")


class TokenStore:
    """Session token persisted as JSON at `path`."""

    def __init__(self, path: Union[str, Path] = DEFAULT_TOKEN_PATH):
        self.path = Path(path)

    def load(self) -> Optional[str]:
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return None
        except (OSError, ValueError):
            logger.warning("Ignoring unreadable token file %s", self.path)
            return None
        return data.get("token") or None

    def save(self, token: str, expires_at: Optional[str] = None) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(
            json.dumps({"token": token, "expires_at": expires_at}),
            encoding="utf-8",
        )
        # Bearer tokens grant full account access
        os.chmod(self.path, 0o600)

    def clear(self) -> None:
        try:
            self.path.unlink()
        except FileNotFoundError:
            pass


class NotesClient:
    """
    Thin async wrapper over the REST API.

    Args:
        base_url: API root, e.g. "http://localhost:8000"
        token_store: where the session token lives (default ~/.notekeeper/session.json)
        transport: optional httpx transport (tests pass httpx.ASGITransport)
        timeout: per-request timeout in seconds
    """

    def __init__(
        self,
        base_url: str,
        token_store: Optional[TokenStore] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = 10.0,
    ):
        self.token_store = token_store or TokenStore()
        self._http = httpx.AsyncClient(base_url=base_url, transport=transport, timeout=timeout)

    async def __aenter__(self) -> "NotesClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    # ── Transport ─────────────────────────────────────────────────────────

    async def _request(
        self,
        method: str,
        path: str,
        *,
        json_body: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None,
        authenticated: bool = True,
    ) -> Any:
        headers = {}
        if authenticated:
            token = self.token_store.load()
            if token:
                headers["Authorization"] = f"Bearer {token}"

        response = await self._http.request(method, path, json=json_body, params=params, headers=headers)
        if response.is_success:
            return response.json()

        try:
            body = response.json()
        except ValueError:
            body = {}
        raise ApiError(
            status_code=response.status_code,
            error=body.get("error", "http_error"),
            message=body.get("message", response.reason_phrase),
        )

    # ── Auth ──────────────────────────────────────────────────────────────

    async def signup(self, name: str, email: str, password: str) -> UUID:
        data = await self._request(
            "POST",
            "/signup",
            json_body={"name": name, "email": email, "password": password},
            authenticated=False,
        )
        return UUID(data["user_id"])

    async def login(self, email: str, password: str) -> TokenResponse:
        """Log in and persist the returned token."""
        data = await self._request(
            "POST",
            "/login",
            json_body={"email": email, "password": password},
            authenticated=False,
        )
        token = TokenResponse.model_validate(data)
        self.token_store.save(token.token, token.expires_at.isoformat())
        return token

    def logout(self) -> None:
        self.token_store.clear()

    # ── Notes ─────────────────────────────────────────────────────────────

    async def list_notes(
        self,
        category: Optional[str] = None,
        status: Optional[str] = None,
        search: Optional[str] = None,
    ) -> List[NoteResponse]:
        params = {
            key: value
            for key, value in (("category", category), ("status", status), ("search", search))
            if value is not None
        }
        data = await self._request("GET", "/notes", params=params)
        return [NoteResponse.model_validate(item) for item in data]

    async def get_note(self, note_id: UUID) -> NoteResponse:
        data = await self._request("GET", f"/notes/{note_id}")
        return NoteResponse.model_validate(data)

    async def create_note(
        self,
        title: str,
        content: str,
        category: Optional[str] = None,
    ) -> NoteResponse:
        body = {"title": title, "content": content}
        if category is not None:
            body["category"] = category
        data = await self._request("POST", "/notes", json_body=body)
        return NoteResponse.model_validate(data)

    async def update_note(
        self,
        note_id: UUID,
        title: str,
        content: str,
        category: Optional[str] = None,
    ) -> NoteResponse:
        body = {"title": title, "content": content, "category": category}
        data = await self._request("PUT", f"/notes/{note_id}", json_body=body)
        return NoteResponse.model_validate(data)

    async def delete_note(self, note_id: UUID) -> str:
        data = await self._request("DELETE", f"/notes/{note_id}")
        return data["message"]

    async def pin_note(self, note_id: UUID) -> str:
        data = await self._request("PATCH", f"/notes/{note_id}/pin")
        return data["message"]

    async def archive_note(self, note_id: UUID) -> str:
        data = await self._request("PATCH", f"/notes/{note_id}/archive")
        return data["message"]
