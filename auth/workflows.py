"""
Registration and authentication workflows.

Each workflow takes a raw form mapping and returns exactly one outcome
model from ``utils.schemas``. Validation and business failures are
returned, never raised. Storage failures are logged with full detail
and come back as a generic ``SystemFailure``.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional, Protocol

from auth.forms import validate_login, validate_signup
from auth.models import identity_of
from auth.password import PasswordHasher
from auth.repository import UserRepository
from database.exceptions import DuplicateKeyError, StorageError
from utils.schemas import (
    Authenticated,
    AuthenticationResult,
    FieldErrors,
    FormMessage,
    InvalidCredentials,
    Redirect,
    RegistrationResult,
    SystemFailure,
    UserIdentity,
)
from utils.validators import safe_redirect

logger = logging.getLogger(__name__)

DUPLICATE_ACCOUNT_MESSAGE = "User already exists with this email."
CREATION_FAILED_MESSAGE = "An error occurred while creating your account."
SIGNUP_FAILED_MESSAGE = "Failed to sign up. Please try again later."


class SessionStarter(Protocol):
    def issue(self, identity: UserIdentity) -> str:
        ...


class RegistrationWorkflow:
    """
    Submitted → Validated → DuplicateChecked → Hashed → Persisted → Done.

    The email lookup before hashing is an optimisation; concurrent signups
    with the same email are settled by the unique index, and the loser
    gets the same "already exists" message.
    """

    def __init__(
        self,
        users: UserRepository,
        hasher: PasswordHasher,
        login_path: str = "/login",
    ) -> None:
        self.users = users
        self.hasher = hasher
        self.login_path = login_path

    async def execute(self, raw: Mapping[str, Any]) -> RegistrationResult:
        checked = validate_signup(raw)
        if isinstance(checked, FieldErrors):
            logger.debug("Signup rejected by validation: %s", sorted(checked.errors))
            return checked

        try:
            if await self.users.find_by_email(checked.email) is not None:
                logger.info("Signup refused: email already registered")
                return FormMessage(message=DUPLICATE_ACCOUNT_MESSAGE)

            password_hash = await self.hasher.hash(checked.password)

            try:
                user = await self.users.insert(checked.name, checked.email, password_hash)
            except DuplicateKeyError:
                logger.info("Signup lost a race on the unique email index")
                return FormMessage(message=DUPLICATE_ACCOUNT_MESSAGE)
        except StorageError:
            logger.exception("Failed to sign up")
            return SystemFailure(message=SIGNUP_FAILED_MESSAGE)

        if user is None:
            logger.error("Insert returned no user record")
            return FormMessage(message=CREATION_FAILED_MESSAGE)

        logger.info("Registered user %s", user.id)
        return Redirect(redirect=self.login_path)


class AuthenticationWorkflow:
    """
    Validate → lookup → verify → hand the identity to the session starter.

    Bad input, an unknown email and a wrong password all produce the same
    ``InvalidCredentials``. Unknown emails still pay for a bcrypt check.
    """

    def __init__(
        self,
        users: UserRepository,
        hasher: PasswordHasher,
        sessions: SessionStarter,
        home_path: str = "/dashboard",
    ) -> None:
        self.users = users
        self.hasher = hasher
        self.sessions = sessions
        self.home_path = home_path

    async def execute(
        self,
        raw: Mapping[str, Any],
        redirect_to: Optional[str] = None,
    ) -> AuthenticationResult:
        checked = validate_login(raw)
        if isinstance(checked, FieldErrors):
            logger.debug("Login rejected by validation")
            return InvalidCredentials()

        try:
            user = await self.users.find_by_email(checked.email)
        except StorageError:
            logger.exception("Failed to fetch user during login")
            return SystemFailure()

        if user is None:
            await self.hasher.verify_dummy(checked.password)
            logger.info("Invalid credentials")
            return InvalidCredentials()

        if not await self.hasher.verify(checked.password, user.password_hash):
            logger.info("Invalid credentials")
            return InvalidCredentials()

        identity = identity_of(user)
        try:
            token = self.sessions.issue(identity)
        except Exception:
            logger.exception("Session collaborator failed for user %s", identity.user_id)
            return SystemFailure()

        logger.info("Login: %s", identity.user_id)
        return Authenticated(
            identity=identity,
            session_token=token,
            redirect=safe_redirect(redirect_to, self.home_path),
        )
