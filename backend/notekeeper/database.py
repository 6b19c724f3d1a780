"""
Notekeeper Backend: Database Session Management
================================================

What:  Async SQLAlchemy engine, session factory, and FastAPI dependency.
How:   Creates an async engine, provides a session dependency that commits
       on success and rolls back on error.
Who:   Used by route handlers via FastAPI's dependency injection system.
When:  Engine is created at module import; sessions are created per-request.

Store Notes:
    - SQLite (default): every new DBAPI connection runs
      `PRAGMA foreign_keys=ON`. SQLite ignores foreign keys otherwise, and
      deleting a user must cascade to that user's notes.
    - PostgreSQL: pooled connections (pool_size + max_overflow), pre-ping
      and hourly recycling.
"""

import logging
from typing import AsyncGenerator

from fastapi import Depends
from sqlalchemy import event
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from notekeeper.config import settings
from notekeeper.exceptions import DatabaseError

logger = logging.getLogger(__name__)


def _engine_options() -> dict:
    """Builds create_async_engine keyword arguments for the configured backend."""
    options = {"echo": settings.log_level == "DEBUG"}
    if settings.is_sqlite:
        # aiosqlite runs each connection in its own thread
        options["connect_args"] = {"check_same_thread": False}
    else:
        options.update(
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_pre_ping=settings.db_pool_pre_ping,
            pool_recycle=3600,
        )
    return options


# ── Engine Configuration ──────────────────────────────────────────────────
engine: AsyncEngine = create_async_engine(settings.database_url, **_engine_options())


if settings.is_sqlite:

    @event.listens_for(engine.sync_engine, "connect")
    def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


# ── Session Factory ───────────────────────────────────────────────────────
# expire_on_commit=False: attributes stay readable after commit, since
# lazy refreshes are not allowed outside the async greenlet context
async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


# ── Base Model ────────────────────────────────────────────────────────────
class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    Every model registers on this metadata, which is what Alembic and
    `init_models()` use to build the schema.
    """
    pass


# ── Session Dependency ────────────────────────────────────────────────────
async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    How it works:
        1. Creates a new session from the factory
        2. Yields it to the route handler
        3. On success: commits the transaction
        4. On error: rolls back the transaction and re-raises
        5. Always: closes the session (returns connection to pool)

    Routes must depend on it with `scope="function"` (see `DbSession`) so
    the commit happens when the handler returns, before the response is
    sent. A failed commit answers 500.

    Example usage in a route:
        @router.get("/notes")
        async def list_notes(db: AsyncSession = DbSession):
            ...
    """
    async with async_session_factory() as session:
        try:
            yield session
        except Exception:
            # Roll back for ANY failure, then let the global handlers respond
            await session.rollback()
            raise

        try:
            await session.commit()
        except SQLAlchemyError as e:
            await session.rollback()
            logger.error("Commit failed: %s", str(e))
            raise DatabaseError(
                message="Could not save changes. Please try again.",
                context={"error_type": type(e).__name__},
            )


# Session dependency for route signatures: committed when the handler returns
DbSession = Depends(get_db_session, scope="function")


# ── Lifecycle Helpers ─────────────────────────────────────────────────────
async def init_models() -> None:
    """
    What:  Creates all tables that do not exist yet.
    When:  Startup lifespan (when CREATE_SCHEMA_ON_STARTUP is true) and tests.
    Raises: SQLAlchemyError if the store cannot be reached; startup treats
            this as fatal.
    """
    # Models must be imported so their tables are registered on Base.metadata
    import notekeeper.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database schema ready")


async def dispose_engine() -> None:
    """
    What:  Gracefully closes all connections in the pool.
    When:  Called during application shutdown (lifespan handler).
    """
    await engine.dispose()
