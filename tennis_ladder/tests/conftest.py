"""
Shared pytest configuration for ladder tests.

Tests run against a throwaway SQLite file (via aiosqlite) per test, so no
database server is needed. Set before any application import: ENV=test
turns rate limiting off.
"""

import os

os.environ.setdefault("ENV", "test")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")

import asyncio  # noqa: E402
from typing import List  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy.pool import NullPool  # noqa: E402

from tennis_ladder.database import db  # noqa: E402
from tennis_ladder.database.db import Base, build_engine, build_session_factory, get_db_session  # noqa: E402
from tennis_ladder.tests.helpers import make_ladder  # noqa: E402


def _sqlite_url(path) -> str:
    return f"sqlite+aiosqlite:///{path}"


@pytest_asyncio.fixture
async def test_engine(tmp_path):
    """Create a fresh database with all tables for one test."""
    # NullPool: every operation opens its own connection, so nothing is
    # bound to a previous test's event loop
    engine = build_engine(_sqlite_url(tmp_path / "ladder_test.db"), poolclass=NullPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(test_engine):
    """Session factory bound to the test engine."""
    return build_session_factory(test_engine)


@pytest_asyncio.fixture
async def db_session(session_factory):
    """A session for arranging and inspecting data."""
    async with session_factory() as session:
        try:
            yield session
        finally:
            await session.rollback()


@pytest_asyncio.fixture
async def ladder_of_ten(session_factory) -> List[int]:
    """Ten players ranked 1..10."""
    return await make_ladder(session_factory, 10)


@pytest.fixture
def api_client(tmp_path, monkeypatch):
    """
    TestClient wired to a fresh SQLite database.

    Both the request-scoped session dependency and the recorder's session
    factory point at the test database. Reporter tokens are cleared so every
    caller may report unless a test sets LADDER_REPORTER_TOKENS.
    """
    url = _sqlite_url(tmp_path / "api_test.db")

    async def _create_tables():
        engine = build_engine(url, poolclass=NullPool)
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        await engine.dispose()

    asyncio.run(_create_tables())

    engine = build_engine(url, poolclass=NullPool)
    factory = build_session_factory(engine)

    async def override_get_db_session():
        async with factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    from tennis_ladder.api.main import app

    monkeypatch.setattr(db, "AsyncSessionLocal", factory)
    monkeypatch.delenv("LADDER_REPORTER_TOKENS", raising=False)
    monkeypatch.delenv("LADDER_RANKING_POLICY", raising=False)
    monkeypatch.delenv("LADDER_SCORE_POLICY", raising=False)
    app.dependency_overrides[get_db_session] = override_get_db_session

    yield TestClient(app)

    app.dependency_overrides.clear()
