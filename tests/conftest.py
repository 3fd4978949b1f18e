"""
Book Review Service — Test Configuration (conftest.py)
=======================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy:
    Function-scoped (created fresh for each test):
    ├── mock_db_session: AsyncMock session for failure paths (no real DB)
    ├── db_engine / db_session: in-memory SQLite with tables + aggregate view
    ├── make_book / make_review: row factories on db_session
    ├── auth_service: AuthService on an httpx MockTransport
    ├── signed_in / signed_out: resolved SessionContext objects
    └── test_client: HTTPX AsyncClient on the FastAPI app, DB and auth overridden
"""

import os

# Override settings for testing BEFORE any bookreview imports
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./test_bookreview.db"
os.environ["AUTH_URL"] = "http://auth.test/auth/v1"
os.environ["AUTH_API_KEY"] = "test-key-not-real"
os.environ["LOG_LEVEL"] = "WARNING"

from datetime import datetime, timedelta, timezone
from typing import AsyncGenerator, Optional
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from bookreview.database import Base, get_db_session
from bookreview.models import Book, Review
from bookreview.models.book_with_ratings import BOOKS_WITH_RATINGS_DDL
from bookreview.schemas.session import SessionUser
from bookreview.services.auth_service import AuthService
from bookreview.services.session import SessionContext, get_auth_service

from tests.auth_fakes import READER, VALID_TOKEN, auth_handler

BASE_TIME = datetime(2024, 1, 1, tzinfo=timezone.utc)


# ══════════════════════════════════════════════════════════════════════════
# Mocked Collaborators
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def mock_db_session():
    """
    Provides a mock async database session.

    Usage:
        async def test_failure(mock_db_session):
            mock_db_session.execute.side_effect = OperationalError(...)
            with pytest.raises(DatabaseError):
                await catalog_service.list_books(mock_db_session)
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
async def auth_service() -> AsyncGenerator[AuthService, None]:
    service = AuthService(
        base_url="http://auth.test/auth/v1",
        api_key="test-key-not-real",
        transport=httpx.MockTransport(auth_handler),
    )
    yield service
    await service.close()


@pytest.fixture
def signed_in(auth_service) -> SessionContext:
    context = SessionContext(auth_service)
    context.sign_in(
        SessionUser(id=READER["id"], email=READER["email"], full_name="Ada Reader"),
        VALID_TOKEN,
    )
    return context


@pytest.fixture
def other_reader(auth_service) -> SessionContext:
    context = SessionContext(auth_service)
    context.sign_in(SessionUser(id="user-reader-2", email="bo@example.com"), "other-token")
    return context


# ══════════════════════════════════════════════════════════════════════════
# In-memory Database
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def db_engine():
    """
    In-memory SQLite shared across connections (StaticPool), with the base
    tables from the ORM metadata and the aggregate view from its DDL.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
        await conn.execute(text(BOOKS_WITH_RATINGS_DDL))
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(db_engine) -> AsyncGenerator[AsyncSession, None]:
    factory = async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)
    async with factory() as session:
        yield session


@pytest.fixture
def make_book(db_session):
    """
    Factory inserting a book. `minutes` offsets created_at from a fixed base
    time so "newest first" ordering is deterministic.
    """

    async def _make(
        title: str,
        author: str = "Some Author",
        genre: str = "Fiction",
        minutes: int = 0,
        created_by: Optional[str] = "user-seed",
    ) -> Book:
        created = BASE_TIME + timedelta(minutes=minutes)
        book = Book(
            title=title,
            author=author,
            genre=genre,
            created_by=created_by,
            created_at=created,
            updated_at=created,
        )
        db_session.add(book)
        await db_session.flush()
        return book

    return _make


@pytest.fixture
def make_review(db_session):
    async def _make(book_id, reviewer_id: str, rating: int, text_: str = "Solid read.") -> Review:
        review = Review(
            book_id=book_id,
            reviewer_id=reviewer_id,
            reviewer_name=None,
            rating=rating,
            review_text=text_,
        )
        db_session.add(review)
        await db_session.flush()
        return review

    return _make


# ══════════════════════════════════════════════════════════════════════════
# API Client
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def test_client(db_session, auth_service):
    """
    HTTPX AsyncClient routed straight into the FastAPI app.

    The database dependency yields the in-memory session and the auth
    provider is the MockTransport fake, so the access gate runs for real.

    Usage:
        async def test_list(test_client):
            response = await test_client.get("/api/books", headers=AUTH_HEADERS)
    """
    from bookreview.main import app

    async def _db():
        yield db_session

    app.dependency_overrides[get_db_session] = _db
    app.dependency_overrides[get_auth_service] = lambda: auth_service

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    return {"Authorization": f"Bearer {VALID_TOKEN}"}
