from __future__ import annotations

from app.core.config import settings
from app.services import signin_service
from app.services.session_service import SessionManager
from app.services.user_directory import DEMO_USERS, StaticUserDirectory


class _ExplodingManager:
    def authenticate(self, email, password):
        raise RuntimeError("directory offline")


class _CountingManager(SessionManager):
    def __init__(self):
        super().__init__(StaticUserDirectory(DEMO_USERS))
        self.calls = 0

    def authenticate(self, email, password):
        self.calls += 1
        return super().authenticate(email, password)


def test_submit_success_returns_session_and_token():
    m = _CountingManager()
    r = signin_service.submit(m, "demo@aiagents.com", "demo123")
    assert r.ok
    assert r.message == "Welcome back!"
    assert r.session.name == "Demo User"
    assert m.current_session(r.token) == r.session


def test_submit_empty_fields_never_reach_session_manager():
    m = _CountingManager()
    for email, password in [("", "demo123"), ("demo@aiagents.com", ""), ("   ", "x"), (None, None)]:
        r = signin_service.submit(m, email, password)
        assert not r.ok
        assert r.status_code == 400
        assert r.message == signin_service.MSG_MISSING_FIELDS
    assert m.calls == 0


def test_submit_wrong_password_is_generic():
    r = signin_service.submit(_CountingManager(), "demo@aiagents.com", "wrong")
    assert not r.ok
    assert r.status_code == 401
    assert r.message == "Invalid credentials. Please try again."
    assert r.token is None


def test_submit_unexpected_error_is_reported_generically():
    r = signin_service.submit(_ExplodingManager(), "demo@aiagents.com", "demo123")
    assert not r.ok
    assert r.status_code == 500
    assert r.message == "An error occurred. Please try again."
    assert "offline" not in r.message


def test_demo_accounts_can_be_disabled(monkeypatch):
    accounts = signin_service.demo_accounts()
    assert [a["email"] for a in accounts] == ["demo@aiagents.com", "admin@aiagents.com", "kyle@aiagents.com"]

    monkeypatch.setattr(settings, "DEMO_ACCOUNTS_ENABLED", False)
    assert signin_service.demo_accounts() == []


def test_submit_matches_email_exactly():
    m = _CountingManager()
    for email in [" demo@aiagents.com", "demo@aiagents.com ", "Demo@aiagents.com"]:
        r = signin_service.submit(m, email, "demo123")
        assert not r.ok
        assert r.status_code == 401
        assert r.message == signin_service.MSG_INVALID_CREDENTIALS
    assert m.calls == 3
