"""
Tests for SqlUserRepository against a SQLite database.
"""

import uuid
from types import SimpleNamespace

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, OperationalError

from auth.repository import SqlUserRepository, _is_unique_violation
from database.exceptions import DuplicateKeyError, StorageUnavailableError
from database.models import User


class TestFindByEmail:
    @pytest.mark.asyncio
    async def test_absent_email_returns_none(self, user_repo):
        assert await user_repo.find_by_email("nobody@x.com") is None

    @pytest.mark.asyncio
    async def test_empty_email_returns_none(self, user_repo):
        assert await user_repo.find_by_email("") is None

    @pytest.mark.asyncio
    async def test_exact_match(self, user_repo):
        await user_repo.insert("Al", "al@x.com", "hash")
        found = await user_repo.find_by_email("al@x.com")
        assert found is not None
        assert found.name == "Al"
        assert found.password_hash == "hash"


class TestInsert:
    @pytest.mark.asyncio
    async def test_assigns_id(self, user_repo):
        user = await user_repo.insert("Al", "al@x.com", "hash")
        assert isinstance(user.id, uuid.UUID)

    @pytest.mark.asyncio
    async def test_duplicate_email_raises(self, user_repo, session_factory):
        await user_repo.insert("Al", "al@x.com", "hash")
        with pytest.raises(DuplicateKeyError) as exc_info:
            await user_repo.insert("Other", "al@x.com", "hash2")
        assert exc_info.value.key == "al@x.com"

        async with session_factory() as session:
            count = await session.scalar(select(func.count()).select_from(User))
        assert count == 1


class TestStorageFailure:
    @pytest.mark.asyncio
    async def test_driver_error_is_translated(self):
        class BrokenSession:
            async def __aenter__(self):
                raise OperationalError("SELECT 1", {}, Exception("connection refused"))

            async def __aexit__(self, *exc):
                return False

        repo = SqlUserRepository(lambda: BrokenSession())
        with pytest.raises(StorageUnavailableError):
            await repo.find_by_email("al@x.com")
        with pytest.raises(StorageUnavailableError):
            await repo.insert("Al", "al@x.com", "hash")

    @pytest.mark.asyncio
    async def test_other_constraint_failure_is_not_a_duplicate(self, user_repo, session_factory):
        with pytest.raises(StorageUnavailableError):
            await user_repo.insert(None, "al@x.com", "hash")
        assert await user_repo.find_by_email("al@x.com") is None


class TestUniqueViolationDetection:
    @pytest.mark.parametrize(
        "orig, expected",
        [
            (SimpleNamespace(sqlstate="23505"), True),
            (SimpleNamespace(sqlstate="23502"), False),
            (SimpleNamespace(pgcode="23505"), True),
            (Exception("UNIQUE constraint failed: users.email"), True),
            (Exception("NOT NULL constraint failed: users.name"), False),
        ],
    )
    def test_classifies_driver_errors(self, orig, expected):
        exc = IntegrityError("INSERT INTO users", {}, orig)
        assert _is_unique_violation(exc) is expected
