"""
Selah Backend — Test Configuration (conftest.py)
=================================================

What:  Shared pytest fixtures for the whole suite.
How:   Every test gets a fresh in-memory SQLite database (aiosqlite +
       StaticPool so all sessions share one connection) with the full schema
       created from Base.metadata. The HTTP client talks to the real FastAPI
       app through httpx.ASGITransport with the DB session and the caller
       identity overridden.

Fixture Hierarchy (all function-scoped):
    engine          → in-memory database with every table
    session_factory → async_sessionmaker bound to `engine`
    db              → one AsyncSession for service-level tests
    user / other_user
    test_client     → AsyncClient authenticated as `user`
    anon_client     → AsyncClient with the real identity dependency
"""

import os

# Settings are read at import time: configure the environment BEFORE any app import
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["GEMINI_API_KEY"] = ""
os.environ["AUTH_PROVIDER_URL"] = "http://auth.test"
os.environ["AUTH_PROVIDER_ANON_KEY"] = "test-anon-key"
os.environ["GUTENBERG_API_URL"] = "http://catalog.test"
os.environ["SEED_ON_STARTUP"] = "false"
os.environ["LOG_LEVEL"] = "WARNING"

from typing import AsyncGenerator, List  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

import app.models  # noqa: E402,F401
from app.database import Base, get_db_session  # noqa: E402
from app.dependencies import get_current_user, get_optional_user  # noqa: E402
from app.models.bible import BibleVerse  # noqa: E402
from app.services.identity_service import AuthenticatedUser  # noqa: E402

# (book, chapter, verse, text)
SAMPLE_VERSES = [
    ("John", 3, 16, "For God so loved the world, that he gave his only begotten Son."),
    ("John", 3, 17, "For God sent not his Son into the world to condemn the world."),
    ("Psalms", 23, 1, "The LORD is my shepherd; I shall not want."),
    ("Psalms", 23, 2, "He maketh me to lie down in green pastures."),
    ("Psalms", 24, 1, "The earth is the LORD's, and the fulness thereof."),
]


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def verses(db) -> List[BibleVerse]:
    """Seeds SAMPLE_VERSES (KJV) and returns the rows in insertion order."""
    rows = [
        BibleVerse(book=b, chapter=c, verse=v, text=t, translation="KJV")
        for b, c, v, t in SAMPLE_VERSES
    ]
    db.add_all(rows)
    await db.commit()
    return rows


@pytest.fixture
def user() -> AuthenticatedUser:
    return AuthenticatedUser(id="user-a", email="a@example.com", role="authenticated")


@pytest.fixture
def other_user() -> AuthenticatedUser:
    return AuthenticatedUser(id="user-b", email="b@example.com", role="authenticated")


def _override_db(session_factory):
    async def override() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    return override


@pytest_asyncio.fixture
async def test_client(session_factory, user):
    """
    AsyncClient for the real app, authenticated as `user`.

    Switch callers mid-test with:
        app.dependency_overrides[get_current_user] = lambda: other_user
        app.dependency_overrides[get_optional_user] = lambda: other_user
    """
    from app.main import app

    app.dependency_overrides[get_db_session] = _override_db(session_factory)
    app.dependency_overrides[get_current_user] = lambda: user
    app.dependency_overrides[get_optional_user] = lambda: user
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def anon_client(session_factory):
    """AsyncClient with only the DB overridden; identity goes through IdentityService."""
    from app.main import app

    app.dependency_overrides[get_db_session] = _override_db(session_factory)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()
