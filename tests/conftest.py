"""
NoteShare Backend — Test Configuration (conftest.py)
======================================================

Fixture Hierarchy (all function-scoped):
    ├── mock_db_session:  AsyncMock session for "no store call" checks
    ├── db_engine:        in-memory aiosqlite database with every table
    ├── db_session:       a session on db_engine (committed by the test)
    ├── taxonomy:         one professor and two subjects, already committed
    ├── alice / bob:      principals
    ├── make_token:       signs identity provider access tokens
    ├── blob_store:       BlobStore on a per-test tmp directory
    └── test_client:      httpx AsyncClient over the app, wired to db_engine
"""

import os
import tempfile
import time
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch
from uuid import uuid4

# Must run before anything imports noteshare.config
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["AUTH_JWT_SECRET"] = "test-secret-not-real"
os.environ["AUTH_JWT_AUDIENCE"] = "authenticated"
os.environ["STORAGE_ROOT"] = tempfile.mkdtemp(prefix="noteshare_test_")
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["RATE_LIMIT_REQUESTS"] = "10000"

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from jose import jwt
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from noteshare import models  # noqa: F401
from noteshare.auth import Principal
from noteshare.config import settings
from noteshare.database import Base, get_db_session
from noteshare.models.taxonomy import Professor, Subject
from noteshare.services.blob_store import BlobStore


# ══════════════════════════════════════════════════════════════════════════
# Database
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def mock_db_session():
    """
    AsyncMock standing in for AsyncSession.

    Used where a test must prove that no store call happened:
        mock_db_session.execute.assert_not_called()
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session


@pytest_asyncio.fixture
async def db_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(db_engine):
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def taxonomy(session_factory):
    """Subjects "Calculus" and "Algebra", professor "Rossi"."""
    async with session_factory() as session:
        calculus = Subject(name="Calculus")
        algebra = Subject(name="Algebra")
        rossi = Professor(name="Rossi")
        session.add_all([calculus, algebra, rossi])
        await session.commit()
    return SimpleNamespace(calculus=calculus, algebra=algebra, rossi=rossi)


# ══════════════════════════════════════════════════════════════════════════
# Identity
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def alice():
    return Principal(id=uuid4(), email="alice@uni.example", username="alice")


@pytest.fixture
def bob():
    return Principal(id=uuid4(), email="bob@uni.example")


@pytest.fixture
def make_token():
    """
    Build an access token the way the identity provider does.

    Each token carries a unique jti so revoking one never revokes another.
    """

    def _make(principal, expires_in=3600, secret=None, audience="authenticated", **claims):
        payload = {
            "sub": str(principal.id),
            "email": principal.email,
            "aud": audience,
            "exp": int(time.time()) + expires_in,
            "jti": uuid4().hex,
        }
        if principal.username:
            payload["user_metadata"] = {"username": principal.username}
        payload.update(claims)
        return jwt.encode(payload, secret or settings.auth_jwt_secret, algorithm="HS256")

    return _make


# ══════════════════════════════════════════════════════════════════════════
# Storage
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def temp_storage(tmp_path):
    storage_dir = tmp_path / "storage"
    storage_dir.mkdir()
    return str(storage_dir)


@pytest.fixture
def blob_store(temp_storage):
    """
    A BlobStore on a fresh directory, patched in wherever services use it.
    """
    store = BlobStore(storage_root=temp_storage, max_file_size=1_048_576)
    with patch("noteshare.services.note_service.blob_store", store), \
         patch("noteshare.services.rating_service.blob_store", store):
        yield store


@pytest.fixture
def sample_pdf_bytes():
    return b"%PDF-1.4\n1 0 obj<<>>endobj\ntrailer<<>>\n%%EOF"


# ══════════════════════════════════════════════════════════════════════════
# HTTP
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def test_client(session_factory, blob_store):
    """
    httpx AsyncClient talking to the app in-process.

    Requests get sessions from the in-memory test database, with the same
    commit-on-success / rollback-on-error behavior as production.
    """
    from noteshare.main import app

    async def _test_db_session():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db_session] = _test_db_session
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()
