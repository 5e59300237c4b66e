"""
Tests for signup / login credential validation.
"""

import pytest

from auth.forms import (
    CONFIRM_FIELD,
    CONFIRM_MISMATCH_MESSAGE,
    EMAIL_MESSAGE,
    NAME_MESSAGE,
    LoginCredentials,
    SignupCredentials,
    password_problems,
    validate_login,
    validate_signup,
)
from utils.schemas import FieldErrors
from utils.validators import REQUIRED_MESSAGE

LENGTH = "Be at least 6 characters long."
LETTER = "Contain at least one letter."
NUMBER = "Contain at least one number."
SPECIAL = "Contain at least one special character."


def _signup(**overrides) -> dict:
    form = {
        "name": "Al",
        "email": "al@x.com",
        "password": "abc123!",
        "confirmPassword": "abc123!",
    }
    form.update(overrides)
    return form


class TestPasswordProblems:
    @pytest.mark.parametrize(
        "password, expected",
        [
            ("abc123!", []),
            ("ab1!", [LENGTH]),
            ("123456!", [LETTER]),
            ("abcdef!", [NUMBER]),
            ("abc1234", [SPECIAL]),
            ("a", [LENGTH, NUMBER, SPECIAL]),
            ("", [LENGTH, LETTER, NUMBER, SPECIAL]),
        ],
    )
    def test_rules_reported_in_order(self, password, expected):
        assert password_problems(password) == expected

    def test_unicode_symbol_counts_as_special(self):
        assert password_problems("abc123é") == []


class TestValidateSignup:
    def test_valid_submission(self):
        result = validate_signup(_signup(name="  Al  ", email="  al@x.com "))
        assert isinstance(result, SignupCredentials)
        assert result.name == "Al"
        assert result.email == "al@x.com"
        assert result.password == "abc123!"

    def test_mismatch_goes_to_confirm_field(self):
        result = validate_signup({"password": "abc123!", "confirmPassword": "xyz999!"})
        assert isinstance(result, FieldErrors)
        assert result.errors[CONFIRM_FIELD] == [CONFIRM_MISMATCH_MESSAGE]
        assert "password" not in result.errors
        # Missing fields are reported alongside the mismatch.
        assert result.errors["name"] == [REQUIRED_MESSAGE]
        assert result.errors["email"] == [REQUIRED_MESSAGE]

    def test_mismatch_keeps_password_errors(self):
        result = validate_signup(_signup(password="abc", confirmPassword="abd"))
        assert isinstance(result, FieldErrors)
        assert result.errors["password"] == [LENGTH, NUMBER, SPECIAL]
        assert result.errors["confirmPassword"] == [LENGTH, NUMBER, SPECIAL]
        assert result.errors[CONFIRM_FIELD] == [CONFIRM_MISMATCH_MESSAGE]

    def test_empty_submission_reports_every_field(self):
        result = validate_signup({})
        assert isinstance(result, FieldErrors)
        assert set(result.errors) == {"name", "email", "password", "confirmPassword"}
        for messages in result.errors.values():
            assert messages

    def test_name_trimmed_before_length_check(self):
        result = validate_signup(_signup(name="  A  "))
        assert isinstance(result, FieldErrors)
        assert result.errors == {"name": [NAME_MESSAGE]}

    @pytest.mark.parametrize(
        "email",
        ["not-an-email", "al@", "@x.com", "", "Al <al@x.com>", "<al@x.com>"],
    )
    def test_invalid_email(self, email):
        result = validate_signup(_signup(email=email))
        assert isinstance(result, FieldErrors)
        assert result.errors == {"email": [EMAIL_MESSAGE]}

    def test_trimmed_passwords_compared(self):
        result = validate_signup(_signup(password=" abc123! ", confirmPassword="abc123!"))
        assert isinstance(result, SignupCredentials)
        assert result.password == "abc123!"


class TestValidateLogin:
    def test_valid(self):
        result = validate_login({"email": "al@x.com", "password": "abc123!"})
        assert isinstance(result, LoginCredentials)
        assert result.email == "al@x.com"

    def test_accepts_password_without_strength_rules(self):
        result = validate_login({"email": "al@x.com", "password": "abcdef"})
        assert isinstance(result, LoginCredentials)

    def test_short_password_and_bad_email_collected(self):
        result = validate_login({"email": "nope", "password": "abc"})
        assert isinstance(result, FieldErrors)
        assert result.errors == {"email": [EMAIL_MESSAGE], "password": [LENGTH]}

    def test_display_name_form_rejected(self):
        result = validate_login({"email": "Al <al@x.com>", "password": "abc123!"})
        assert isinstance(result, FieldErrors)
        assert result.errors == {"email": [EMAIL_MESSAGE]}

    def test_missing_fields(self):
        result = validate_login({})
        assert isinstance(result, FieldErrors)
        assert result.errors == {"email": [REQUIRED_MESSAGE], "password": [REQUIRED_MESSAGE]}
