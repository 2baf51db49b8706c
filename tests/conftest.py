"""
BlogQL — Test Configuration (conftest.py)
==========================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy:
    Function-scoped (created fresh for each test):
    ├── db_engine: in-memory SQLite (aiosqlite) with the schema created
    ├── db_session: AsyncSession bound to db_engine
    ├── user_repo / post_repo: SQL repositories on db_session
    ├── temp_storage: temporary directory for file operations
    ├── sample_image_bytes: minimal PNG for upload tests
    ├── make_user / make_post: transient ORM objects for mocked-repo tests
    └── test_client: HTTPX AsyncClient whose requests share db_engine
"""

import os
import tempfile
from datetime import datetime, timezone
from typing import Optional
from uuid import uuid4

# Settings are read at import time; configure them BEFORE any blogql import
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["JWT_SECRET"] = "test-secret-not-for-production"
os.environ["STORAGE_ROOT"] = tempfile.mkdtemp(prefix="blogql_test_")
os.environ["BCRYPT_ROUNDS"] = "4"  # Cost 12 would make the suite crawl
os.environ["LOG_LEVEL"] = "WARNING"

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from blogql.auth import AuthContext, create_access_token
from blogql.database import Base
from blogql.models import Post, User
from blogql.repositories import SQLPostRepository, SQLUserRepository


# ══════════════════════════════════════════════════════════════════════════
# Database Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def db_engine():
    """
    A fresh in-memory database per test.

    StaticPool keeps one connection open, so every session created from this
    engine sees the same in-memory database.
    """
    engine = create_async_engine("sqlite+aiosqlite://", poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(db_engine):
    factory = async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)
    async with factory() as session:
        yield session


@pytest.fixture
def user_repo(db_session):
    return SQLUserRepository(db_session)


@pytest.fixture
def post_repo(db_session):
    return SQLPostRepository(db_session)


# ══════════════════════════════════════════════════════════════════════════
# Domain Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def make_user():
    """
    Factory for transient User objects (never added to a session).

    Usage:
        user = make_user(email="bob@example.com")
    """
    def _make(email: str = "alice@example.com", name: str = "Alice") -> User:
        return User(
            id=uuid4(),
            email=email,
            name=name,
            password="$2b$04$not-a-real-hash",
            created_at=datetime.now(timezone.utc),
            posts=[],
        )
    return _make


@pytest.fixture
def make_post():
    """Factory for transient Post objects attached to a creator."""
    def _make(creator: User, title: str = "First post", content: str = "Hello there",
              image_url: Optional[str] = None) -> Post:
        now = datetime.now(timezone.utc)
        return Post(
            id=uuid4(),
            title=title,
            content=content,
            image_url=image_url,
            creator=creator,
            creator_id=creator.id,
            created_at=now,
            updated_at=now,
        )
    return _make


@pytest.fixture
def auth_for():
    """Builds the authenticated context the middleware would attach for a user."""
    def _auth(user: User) -> AuthContext:
        return AuthContext.for_subject(user_id=str(user.id), email=user.email)
    return _auth


@pytest.fixture
def temp_storage(tmp_path):
    storage_dir = tmp_path / "storage"
    storage_dir.mkdir()
    return str(storage_dir)


@pytest.fixture
def sample_image_bytes():
    """
    Minimal PNG bytes for upload tests.

    Only the signature and an IHDR chunk; enough to look like a PNG, which
    is all the upload path needs (it checks the declared type, not pixels).
    """
    return (
        b"\x89PNG\r\n\x1a\n"
        b"\x00\x00\x00\rIHDR\x00\x00\x00\x01\x00\x00\x00\x01\x08\x06\x00\x00\x00"
        b"\x1f\x15\xc4\x89"
    )


# ══════════════════════════════════════════════════════════════════════════
# HTTP Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def test_client(db_engine):
    """
    HTTPX AsyncClient talking to the FastAPI app in-process.

    get_db_session is overridden so each request runs in its own session on
    the test database, committing on success like the real dependency.
    """
    from blogql.database import get_db_session
    from blogql.main import app

    factory = async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)

    async def override_db_session():
        async with factory() as session:
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
    app.dependency_overrides.clear()


@pytest.fixture
def bearer():
    """Authorization header for a token issued to the given user id/email."""
    def _bearer(user_id: str, email: str = "alice@example.com") -> dict:
        return {"Authorization": f"Bearer {create_access_token(user_id=user_id, email=email)}"}
    return _bearer
