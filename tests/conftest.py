"""Shared test fixtures — async DB, client, storage, auth helpers.

Uses SQLite + aiosqlite for fast isolated tests without PostgreSQL. Each test
gets its own in-memory engine so no connection outlives its event loop.
"""

from __future__ import annotations

import os
import tempfile

# Set test settings before any other import touches pydantic-settings
os.environ.setdefault("JWT_SECRET", "test-secret-for-ci-do-not-use-in-production")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("UPLOAD_DIR", os.path.join(tempfile.gettempdir(), "leavedesk-test-uploads"))

import uuid
from datetime import datetime, timezone
from typing import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from leavedesk.config import settings
from leavedesk.database import Base, get_db
from leavedesk.main import create_app
from leavedesk.storage import LocalDocumentStorage, get_document_storage

# Import ALL model modules so the metadata holds every table
import leavedesk.auth.models  # noqa: F401
import leavedesk.leave.models  # noqa: F401
import leavedesk.profiles.models  # noqa: F401

# ── SQLite compat: compile PG-specific types ────────────────────────

from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy.ext.compiler import compiles


@compiles(PG_UUID, "sqlite")
def _uuid_sqlite(element, compiler, **kw):
    return "CHAR(36)"


def _register_sqlite_functions(dbapi_conn, connection_record):
    """Register NOW() and uuid_generate_v4() as SQLite custom functions."""
    dbapi_conn.create_function(
        "NOW", 0, lambda: datetime.now(timezone.utc).isoformat(),
    )
    dbapi_conn.create_function(
        "uuid_generate_v4", 0, lambda: str(uuid.uuid4()),
    )


# ── Test database (SQLite in-memory) ────────────────────────────────

TEST_DATABASE_URL = "sqlite+aiosqlite://"


@pytest.fixture
async def engine():
    """Fresh in-memory database with all tables."""
    test_engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    event.listen(test_engine.sync_engine, "connect", _register_sqlite_functions)

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield test_engine
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await test_engine.dispose()


@pytest.fixture
def session_factory(engine) -> async_sessionmaker:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture(autouse=True)
def _reset_rate_limiter():
    """Reset rate limiter storage between tests to prevent cross-test interference."""
    from leavedesk.common.rate_limit import limiter

    limiter.reset()
    yield


# ── Database session (for direct DB operations in tests) ────────────

@pytest.fixture
async def db(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


# ── FastAPI test client ─────────────────────────────────────────────

@pytest.fixture
def upload_root(tmp_path) -> str:
    return str(tmp_path / "uploads")


@pytest.fixture
async def app(session_factory, upload_root, monkeypatch):
    """Create a fresh app instance with DB and storage dependencies overridden."""
    monkeypatch.setattr(settings, "UPLOAD_DIR", upload_root)

    async def _override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise
            finally:
                await session.close()

    application = create_app()
    application.dependency_overrides[get_db] = _override_get_db
    application.dependency_overrides[get_document_storage] = (
        lambda: LocalDocumentStorage(root=upload_root)
    )
    yield application
    application.dependency_overrides.clear()


@pytest.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client wired to the test app."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac
