"""Re-exports the ``User`` ORM model for the auth package, alongside the
identity view handed to the session layer.
"""

from database.models import User  # noqa: F401
from utils.schemas import UserIdentity  # noqa: F401

__all__ = ["User", "UserIdentity", "identity_of"]


def identity_of(user: User) -> UserIdentity:
    """Public identity of a stored user (no password hash)."""
    return UserIdentity(user_id=str(user.id), name=user.name, email=user.email)
