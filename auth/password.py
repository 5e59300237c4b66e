"""
Password hashing and verification.

Uses bcrypt for password hashing with automatic salting and a
configurable work factor (``SALT_ROUNDS``, default 10).
"""

from __future__ import annotations

import asyncio
from functools import lru_cache

import bcrypt

DEFAULT_ROUNDS = 10

# bcrypt only consumes the first 72 bytes of a password.
_MAX_PASSWORD_BYTES = 72


def _encode(password: str) -> bytes:
    return password.encode("utf-8")[:_MAX_PASSWORD_BYTES]


def hash_password(password: str, rounds: int = DEFAULT_ROUNDS) -> str:
    """Hash a password with bcrypt (fresh salt on every call)."""
    return bcrypt.hashpw(_encode(password), bcrypt.gensalt(rounds=rounds)).decode()


def verify_password(password: str, password_hash: str) -> bool:
    """Constant-time comparison against a bcrypt hash. Malformed hashes never match."""
    if not password_hash:
        return False
    try:
        return bcrypt.checkpw(_encode(password), password_hash.encode("utf-8"))
    except (ValueError, TypeError):
        return False


@lru_cache(maxsize=None)
def _decoy_hash(rounds: int) -> str:
    return hash_password("decoy-password-for-timing", rounds)


class PasswordHasher:
    """
    Hashes and verifies passwords off the event loop.

    bcrypt is CPU-bound, so both operations run in a worker thread via
    ``asyncio.to_thread`` and never stall other requests.
    """

    def __init__(self, rounds: int = DEFAULT_ROUNDS) -> None:
        self.rounds = rounds

    async def hash(self, password: str) -> str:
        return await asyncio.to_thread(hash_password, password, self.rounds)

    async def verify(self, password: str, password_hash: str) -> bool:
        return await asyncio.to_thread(verify_password, password, password_hash)

    async def verify_dummy(self, password: str) -> bool:
        """Spend the same bcrypt cost as a real check when there is no user."""
        decoy = await asyncio.to_thread(_decoy_hash, self.rounds)
        await asyncio.to_thread(verify_password, password, decoy)
        return False
