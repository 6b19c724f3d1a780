"""
Notekeeper Backend: Application Package Initializer
====================================================

What: Marks the `notekeeper` directory as a Python package.
Who:  Used by uvicorn (`notekeeper.main:app`), Alembic and pytest.

Architecture Note:
    The backend is a layered FastAPI application:

    ┌─────────────────────────────────────┐
    │     Routes + Access Guard (HTTP)    │  ← status codes, bearer tokens
    ├─────────────────────────────────────┤
    │   Services (Users, Notes, Creds)    │  ← ownership scoping, validation
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘

    Routes never touch SQL; services never touch HTTP. Every note query
    in the service layer is filtered by the authenticated user's id.
"""

__version__ = "1.0.0"
