"""
Storyboard Backend — Test Configuration (conftest.py)
======================================================

What:  Shared pytest fixtures for the entire test suite.
How:   Points the app at a throwaway SQLite file and upload directory
       before anything from `storyboard` is imported, then recreates the
       schema for every test.

Fixture Hierarchy:
    Autouse (every test):
    └── reset_database: drop_all + create_all on the test engine

    Function-scoped:
    ├── db_session: AsyncSession for service-level tests
    ├── mock_db_session: AsyncMock session for failure-path tests
    ├── upload_dir: the configured upload directory, emptied per test
    ├── sample_image_bytes: tiny JPEG for upload tests
    ├── test_client: anonymous HTTPX AsyncClient on the ASGI app
    └── auth_client: HTTPX AsyncClient with a logged-in session
"""

import os
import shutil
import tempfile
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient


# ══════════════════════════════════════════════════════════════════════════
# Environment Setup
# ══════════════════════════════════════════════════════════════════════════

# Must run before any storyboard import: settings and the engine are
# created at import time
_TEST_ROOT = tempfile.mkdtemp(prefix="storyboard_test_")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_TEST_ROOT}/test.db"
os.environ["UPLOAD_DIR"] = os.path.join(_TEST_ROOT, "uploads")
os.environ["AUTH_USERNAME"] = "editor"
os.environ["AUTH_PASSWORD"] = "s3cret-pass"
os.environ["AUTH_PASSWORD_HASH"] = ""
os.environ["SESSION_SECRET"] = "test-session-secret"
os.environ["APP_ENV"] = "development"
os.environ["AUTO_CREATE_SCHEMA"] = "false"
os.environ["LOG_LEVEL"] = "WARNING"

TEST_USERNAME = "editor"
TEST_PASSWORD = "s3cret-pass"


# ══════════════════════════════════════════════════════════════════════════
# Database
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture(autouse=True)
async def reset_database():
    """Fresh, empty `parts` table for each test."""
    from storyboard.database import Base, engine
    from storyboard.models import part  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    yield
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session():
    """
    A real AsyncSession on the test database.

    Usage:
        async def test_create(db_session):
            part = await part_service.create(db_session, PartPayload(...))
    """
    from storyboard.database import async_session_factory

    async with async_session_factory() as session:
        yield session
        await session.commit()


@pytest.fixture
def mock_db_session():
    """AsyncMock standing in for AsyncSession, for storage-failure paths."""
    session = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session


# ══════════════════════════════════════════════════════════════════════════
# Files
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def upload_dir() -> Path:
    """The upload directory the app writes to, emptied before the test."""
    path = Path(os.environ["UPLOAD_DIR"])
    shutil.rmtree(path, ignore_errors=True)
    path.mkdir(parents=True, exist_ok=True)
    return path


@pytest.fixture
def temp_storage(tmp_path):
    storage_dir = tmp_path / "storage"
    storage_dir.mkdir()
    return str(storage_dir)


@pytest.fixture
def sample_image_bytes():
    """
    Minimal JPEG: SOI + JFIF header + EOI.

    Only the declared MIME type is checked on upload, so this is enough.
    """
    return (
        b'\xff\xd8\xff\xe0\x00\x10JFIF\x00\x01\x01\x00\x00\x01\x00\x01\x00\x00'
        b'\xff\xd9'
    )


# ══════════════════════════════════════════════════════════════════════════
# HTTP Clients
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def test_client():
    """
    HTTPX AsyncClient routed straight into the ASGI app.

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
            assert response.status_code == 200
    """
    from storyboard.main import app

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest_asyncio.fixture
async def auth_client():
    """Like test_client, but the session cookie is already authenticated."""
    from storyboard.main import app

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        response = await client.post(
            "/api/auth/login",
            json={"username": TEST_USERNAME, "password": TEST_PASSWORD},
        )
        assert response.status_code == 200
        yield client
