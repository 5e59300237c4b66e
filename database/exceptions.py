"""
Storage-layer exceptions.

Repositories translate SQLAlchemy / driver errors into these so callers
never depend on the database backend in use.
"""

from __future__ import annotations


class StorageError(Exception):
    """Base class for storage failures."""


class DuplicateKeyError(StorageError):
    """An insert violated a uniqueness constraint."""

    def __init__(self, key: str):
        super().__init__(f"Duplicate key: {key}")
        self.key = key


class StorageUnavailableError(StorageError):
    """The database could not be reached or the statement failed."""
