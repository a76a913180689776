from __future__ import annotations

import pytest
from pydantic import ValidationError

from app.core.config import Settings


def test_missing_secret_fails_closed(monkeypatch):
    monkeypatch.delenv("AUTH_SECRET", raising=False)
    with pytest.raises(ValidationError):
        Settings(_env_file=None)


def test_short_secret_rejected(monkeypatch):
    monkeypatch.setenv("AUTH_SECRET", "short")
    with pytest.raises(ValidationError):
        Settings(_env_file=None)


def test_cors_origins_accept_json_or_comma_list(monkeypatch):
    monkeypatch.setenv("AUTH_SECRET", "x" * 32)
    monkeypatch.setenv("BACKEND_CORS_ORIGINS", '["http://a.test", "http://b.test"]')
    assert Settings(_env_file=None).BACKEND_CORS_ORIGINS == ["http://a.test", "http://b.test"]

    monkeypatch.setenv("BACKEND_CORS_ORIGINS", "http://a.test, http://c.test")
    assert Settings(_env_file=None).BACKEND_CORS_ORIGINS == ["http://a.test", "http://c.test"]


def test_user_directory_backend_is_validated(monkeypatch):
    monkeypatch.setenv("AUTH_SECRET", "x" * 32)
    monkeypatch.setenv("USER_DIRECTORY_BACKEND", " Database ")
    assert Settings(_env_file=None).USER_DIRECTORY_BACKEND == "database"

    monkeypatch.setenv("USER_DIRECTORY_BACKEND", "ldap")
    with pytest.raises(ValidationError):
        Settings(_env_file=None)
