"""
CuriousDog Backend — Test Configuration (conftest.py)
======================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy (all function-scoped):
    ├── mock_db_session:  AsyncMock session for pure unit tests
    ├── temp_storage:     Temporary directory for file operations
    ├── sample_png_bytes: Minimal PNG header for upload tests
    ├── db_engine:        aiosqlite engine on a per-test database file
    │   └── session_factory
    │       ├── db_session: one open session
    │       ├── make_user:  seeds a user, returns its id
    │       └── test_client: HTTPX AsyncClient on a fresh app bound to the test database
    └── auth_headers:     builds an Authorization header for a user id

The per-test database is a file (not :memory:) with NullPool so that two
sessions in the same test really are two connections.
"""

import itertools
import os
import tempfile

# Settings are read at import time: configure the environment before any app import
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["JWT_SECRET"] = "test-secret-not-for-production"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["STORAGE_ROOT"] = tempfile.mkdtemp(prefix="curiousdog_test_")
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["RATE_LIMIT_REQUESTS"] = "100000"
os.environ["RATE_LIMIT_WRITE_REQUESTS"] = "10000"

from typing import AsyncGenerator, Callable, Dict  # noqa: E402
from unittest.mock import AsyncMock, MagicMock  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import NullPool  # noqa: E402

from app.database import Base, get_db_session  # noqa: E402
from app.models.question import Question  # noqa: E402,F401
from app.models.user import User  # noqa: E402,F401
from app.repositories.users import UserRepository  # noqa: E402
from app.services.auth_service import auth_service  # noqa: E402


# ══════════════════════════════════════════════════════════════════════════
# Unit-test Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def mock_db_session():
    """
    A MagicMock that simulates AsyncSession behavior.

    Usage:
        async def test_login_unknown_email(mock_db_session):
            mock_db_session.execute.return_value.scalar_one_or_none.return_value = None
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.get = AsyncMock()
    session.add = MagicMock()
    return session


@pytest.fixture
def temp_storage(tmp_path):
    storage_dir = tmp_path / "storage"
    storage_dir.mkdir()
    return str(storage_dir)


@pytest.fixture
def sample_png_bytes():
    """PNG signature plus an IHDR chunk header; enough for libmagic to say image/png."""
    return (
        b"\x89PNG\r\n\x1a\n"
        b"\x00\x00\x00\rIHDR\x00\x00\x00\x01\x00\x00\x00\x01\x08\x06\x00\x00\x00"
        b"\x1f\x15\xc4\x89"
    )


# ══════════════════════════════════════════════════════════════════════════
# Database Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def db_engine(tmp_path):
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'curiousdog_test.db'}",
        poolclass=NullPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest.fixture
def make_user(session_factory) -> Callable:
    """
    Seeds a committed user and returns its id.

    The password hash is a placeholder; tests that log in go through
    UserService.register instead.
    """
    counter = itertools.count(1)

    async def _make(username: str = None) -> int:
        n = next(counter)
        async with session_factory() as session:
            user = await UserRepository(session).insert(
                username=username or f"user{n}",
                email=f"user{n}@example.com",
                password_hash="placeholder-hash",
            )
            await session.commit()
            return user.id

    return _make


@pytest.fixture
def auth_headers() -> Callable[[int], Dict[str, str]]:
    def _headers(user_id: int) -> Dict[str, str]:
        return {"Authorization": f"Bearer {auth_service.create_access_token(user_id)}"}

    return _headers


@pytest_asyncio.fixture
async def test_client(session_factory):
    """
    HTTPX AsyncClient talking to a fresh app instance over ASGITransport.

    A fresh app per test also means a fresh rate limiter. The database
    dependency is overridden to use the per-test database with the same
    commit/rollback contract as get_db_session.

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
    """
    from app.main import create_app

    app = create_app()

    async def override_db_session():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db_session] = override_db_session

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
