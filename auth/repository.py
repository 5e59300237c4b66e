"""
User repository — lookup by email and insert.

The unique index on ``users.email`` is the authoritative duplicate guard;
any lookup done before an insert is only advisory.
"""

from __future__ import annotations

import logging
import uuid
from abc import ABC, abstractmethod
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from database.exceptions import DuplicateKeyError, StorageUnavailableError
from database.models import User

logger = logging.getLogger(__name__)

# SQLSTATE for unique_violation (PostgreSQL).
_UNIQUE_VIOLATION = "23505"


def _is_unique_violation(exc: IntegrityError) -> bool:
    orig = exc.orig
    code = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    if code is not None:
        return code == _UNIQUE_VIOLATION
    # SQLite reports constraint kinds only in the message.
    return "UNIQUE constraint failed" in str(orig)


class UserRepository(ABC):
    """Contract for user data access."""

    @abstractmethod
    async def find_by_email(self, email: str) -> Optional[User]:
        """Exact-match lookup. ``None`` when absent; raises only on storage failure."""
        ...

    @abstractmethod
    async def insert(self, name: str, email: str, password_hash: str) -> Optional[User]:
        """
        Create a user and return it with its assigned ``id``.

        Raises
        ------
        DuplicateKeyError
            The email is already registered.
        StorageUnavailableError
            The database could not be reached or the statement failed.
        """
        ...


class SqlUserRepository(UserRepository):
    """SQLAlchemy implementation; every call runs in its own session."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def find_by_email(self, email: str) -> Optional[User]:
        if not email:
            return None
        try:
            async with self._session_factory() as session:
                result = await session.execute(
                    select(User).where(User.email == email)
                )
                return result.scalar_one_or_none()
        except (SQLAlchemyError, OSError) as exc:
            raise StorageUnavailableError("Failed to fetch user.") from exc

    async def insert(self, name: str, email: str, password_hash: str) -> Optional[User]:
        user = User(
            id=uuid.uuid4(),
            name=name,
            email=email,
            password_hash=password_hash,
        )
        try:
            async with self._session_factory() as session:
                session.add(user)
                try:
                    await session.commit()
                except IntegrityError as exc:
                    await session.rollback()
                    if _is_unique_violation(exc):
                        raise DuplicateKeyError(email) from exc
                    raise StorageUnavailableError("Failed to create user.") from exc
        except (DuplicateKeyError, StorageUnavailableError):
            raise
        except (SQLAlchemyError, OSError) as exc:
            raise StorageUnavailableError("Failed to create user.") from exc

        logger.debug("Inserted user %s", user.id)
        return user
