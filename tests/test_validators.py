"""
Tests for the shared validation helpers and settings.
"""

import pytest
from pydantic import BaseModel, ValidationError

from config.settings import Settings
from utils.validators import REQUIRED_MESSAGE, flatten_errors, safe_redirect


class _Form(BaseModel):
    title: str
    count: int


class TestFlattenErrors:
    def _errors(self, data, messages=None):
        with pytest.raises(ValidationError) as exc_info:
            _Form.model_validate(data)
        return flatten_errors(exc_info.value, messages)

    def test_missing_fields_get_required_message(self):
        assert self._errors({}) == {
            "title": [REQUIRED_MESSAGE],
            "count": [REQUIRED_MESSAGE],
        }

    def test_override_wins_over_pydantic_text(self):
        errors = self._errors({"title": "x", "count": "many"}, {"count": "Give a number."})
        assert errors == {"count": ["Give a number."]}

    def test_pydantic_text_used_without_override(self):
        errors = self._errors({"title": "x", "count": "many"})
        assert list(errors) == ["count"]
        assert errors["count"][0]


class TestSafeRedirect:
    @pytest.mark.parametrize(
        "target, expected",
        [
            ("/dashboard/invoices?page=2", "/dashboard/invoices?page=2"),
            ("  /dashboard ", "/dashboard"),
            ("https://evil.example", "/home"),
            ("//evil.example", "/home"),
            ("/\\evil.example", "/home"),
            ("dashboard", "/home"),
            ("", "/home"),
            (None, "/home"),
        ],
    )
    def test_only_local_paths(self, target, expected):
        assert safe_redirect(target, "/home") == expected


class TestSettings:
    def test_salt_rounds_bounds(self):
        with pytest.raises(ValidationError):
            Settings(salt_rounds=3)
        with pytest.raises(ValidationError):
            Settings(salt_rounds=32)
        assert Settings(salt_rounds=12).salt_rounds == 12

    def test_env_overrides(self, monkeypatch):
        monkeypatch.setenv("SALT_ROUNDS", "11")
        monkeypatch.setenv("SESSION_SECRET", "from-env")
        settings = Settings()
        assert settings.salt_rounds == 11
        assert settings.session_secret == "from-env"

    def test_sqlite_engine_has_no_pool_sizing(self):
        options = Settings(database_url="sqlite+aiosqlite:///:memory:").engine_options()
        assert "pool_size" not in options
        assert "pool_size" in Settings().engine_options()
