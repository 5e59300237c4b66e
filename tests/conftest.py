"""
Shared fixtures: a throwaway SQLite database per test and a cheap hasher.
"""

from __future__ import annotations

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient

from auth.password import PasswordHasher
from auth.repository import SqlUserRepository
from config.settings import Settings
from database.session import build_engine, build_session_factory, create_tables

# bcrypt's minimum cost keeps the suite fast.
TEST_ROUNDS = 4


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'dashboard.db'}",
        salt_rounds=TEST_ROUNDS,
        session_secret="test-session-secret",
        create_tables=True,
    )


@pytest_asyncio.fixture
async def session_factory(settings):
    engine = build_engine(settings)
    await create_tables(engine)
    try:
        yield build_session_factory(engine)
    finally:
        await engine.dispose()


@pytest.fixture
def user_repo(session_factory) -> SqlUserRepository:
    return SqlUserRepository(session_factory)


@pytest.fixture
def hasher() -> PasswordHasher:
    return PasswordHasher(rounds=TEST_ROUNDS)


@pytest.fixture
def client(settings):
    from main import create_app

    with TestClient(create_app(settings)) as c:
        yield c

