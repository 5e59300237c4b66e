"""
Credential validation for the signup and login forms.

Pure functions: nothing here touches the database or the hasher. Every
problem is collected so the form can show all of them at once.
"""

from __future__ import annotations

import re
from typing import Any, List, Mapping, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.networks import validate_email
from pydantic_core import PydanticCustomError

from utils.schemas import FieldErrors
from utils.validators import flatten_errors

MIN_NAME_LENGTH = 2
MIN_PASSWORD_LENGTH = 6

EMAIL_MESSAGE = "Please enter a valid email."
NAME_MESSAGE = f"Name must be at least {MIN_NAME_LENGTH} characters long."
CONFIRM_MISMATCH_MESSAGE = "Confirm Password doesn't match Password!"

# Field that carries the mismatch error, separate from ``password``.
CONFIRM_FIELD = "confirm"

_STRENGTH_RULES = (
    (re.compile(r"[a-zA-Z]"), "Contain at least one letter."),
    (re.compile(r"[0-9]"), "Contain at least one number."),
    (re.compile(r"[^a-zA-Z0-9]"), "Contain at least one special character."),
)


def _length_message() -> str:
    return f"Be at least {MIN_PASSWORD_LENGTH} characters long."


def password_problems(value: str) -> List[str]:
    """Ordered list of strength rules ``value`` breaks (empty when strong)."""
    problems: List[str] = []
    if len(value) < MIN_PASSWORD_LENGTH:
        problems.append(_length_message())
    for pattern, message in _STRENGTH_RULES:
        if not pattern.search(value):
            problems.append(message)
    return problems


def _normalise_email(value: str) -> str:
    # Bare addresses only; "Name <addr>" forms are refused.
    if "<" in value or ">" in value:
        raise PydanticCustomError("email", EMAIL_MESSAGE)
    try:
        name, address = validate_email(value)
    except PydanticCustomError:
        raise PydanticCustomError("email", EMAIL_MESSAGE)
    if name and name != address.split("@", 1)[0]:
        raise PydanticCustomError("email", EMAIL_MESSAGE)
    return address


class SignupCredentials(BaseModel):
    """Validated registration input. Never persisted as-is."""

    model_config = ConfigDict(
        populate_by_name=True,
        str_strip_whitespace=True,
        frozen=True,
    )

    name: str
    email: str
    password: str
    confirm_password: str = Field(alias="confirmPassword")

    @field_validator("name")
    @classmethod
    def _check_name(cls, value: str) -> str:
        if len(value) < MIN_NAME_LENGTH:
            raise PydanticCustomError("name_too_short", NAME_MESSAGE)
        return value

    @field_validator("email")
    @classmethod
    def _check_email(cls, value: str) -> str:
        return _normalise_email(value)

    @field_validator("password", "confirm_password")
    @classmethod
    def _check_strength(cls, value: str) -> str:
        problems = password_problems(value)
        if problems:
            raise PydanticCustomError(
                "password_strength",
                "Password is too weak.",
                {"reasons": problems},
            )
        return value


class LoginCredentials(BaseModel):
    """Validated login input.

    Only the minimum length is checked so passwords accepted under older
    rules still reach the hash comparison.
    """

    model_config = ConfigDict(str_strip_whitespace=True, frozen=True)

    email: str
    password: str

    @field_validator("email")
    @classmethod
    def _check_email(cls, value: str) -> str:
        return _normalise_email(value)

    @field_validator("password")
    @classmethod
    def _check_length(cls, value: str) -> str:
        if len(value) < MIN_PASSWORD_LENGTH:
            raise PydanticCustomError("password_too_short", _length_message())
        return value


def _stripped(raw: Mapping[str, Any], key: str):
    value = raw.get(key)
    return value.strip() if isinstance(value, str) else None


def validate_signup(raw: Mapping[str, Any]) -> Union[SignupCredentials, FieldErrors]:
    """Validate a signup submission (``name``, ``email``, ``password``, ``confirmPassword``)."""
    credentials = None
    errors = {}
    try:
        credentials = SignupCredentials.model_validate(dict(raw))
    except ValidationError as exc:
        errors = flatten_errors(exc)

    # Checked even when other fields failed, so every problem shows at once.
    password = _stripped(raw, "password")
    confirm = _stripped(raw, "confirmPassword")
    if password is not None and confirm is not None and password != confirm:
        errors.setdefault(CONFIRM_FIELD, []).append(CONFIRM_MISMATCH_MESSAGE)

    if errors:
        return FieldErrors(errors=errors)
    return credentials


def validate_login(raw: Mapping[str, Any]) -> Union[LoginCredentials, FieldErrors]:
    """Validate a login submission (``email``, ``password``)."""
    try:
        return LoginCredentials.model_validate(dict(raw))
    except ValidationError as exc:
        return FieldErrors(errors=flatten_errors(exc))
