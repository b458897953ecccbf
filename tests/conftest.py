"""Shared pytest fixtures for Heart tests.

Each test gets its own file-backed SQLite database.  ``NullPool`` gives
every session an independent connection, so concurrent sessions contend
on the database's own locks the way separate requests would.
"""
import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./heart-test.db")
os.environ.setdefault("ALLOWED_ORIGINS", "http://localhost:8080")

import httpx
import pytest
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

import heart.models  # noqa: F401  (registers tables on Base.metadata)
from heart.database import Base, get_db
from heart.models.user import User


@pytest.fixture
async def engine(tmp_path):
    eng = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'heart.db'}",
        poolclass=NullPool,
    )
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield eng
    await eng.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(bind=engine, expire_on_commit=False)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def make_user(session_factory):
    """Insert a user with an explicit id and return the id."""

    async def _make(user_id, **fields):
        fields.setdefault("email", f"user{user_id}@example.com")
        fields.setdefault("username", f"user{user_id}")
        async with session_factory() as session:
            session.add(User(id=user_id, **fields))
            await session.commit()
        return user_id

    return _make


@pytest.fixture
async def client(session_factory):
    """HTTP client bound to the app, with ``get_db`` pointed at the test
    database.  The lifespan is not run."""
    from heart.main import app

    async def _test_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = _test_get_db
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
    app.dependency_overrides.clear()
