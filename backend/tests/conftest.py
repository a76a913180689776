from __future__ import annotations

import os

# Settings are read at import time and refuse to load without a signing secret
os.environ.setdefault("AUTH_SECRET", "test-secret-0123456789abcdef")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("USER_DIRECTORY_BACKEND", "static")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.db.base import Base
from app.db.session import get_db
from app.main import app
from app.services.collab_service import ChatSessionRegistry
from app.services.session_service import SessionUser


DEMO_EMAIL = "demo@aiagents.com"
DEMO_PASSWORD = "demo123"


@pytest.fixture()
def db_engine():
    engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def session_factory(db_engine):
    return sessionmaker(bind=db_engine, autocommit=False, autoflush=False)


@pytest.fixture()
def db(session_factory):
    s = session_factory()
    try:
        yield s
    finally:
        s.close()


@pytest.fixture()
def chat_registry(monkeypatch):
    registry = ChatSessionRegistry(delay_seconds=0.01)
    monkeypatch.setattr(app.state, "chat_registry", registry)
    return registry


@pytest.fixture()
def client(session_factory, chat_registry):
    def _get_db():
        s = session_factory()
        try:
            yield s
        finally:
            s.close()

    app.dependency_overrides[get_db] = _get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture()
def demo_session() -> SessionUser:
    return SessionUser(user_id="1", name="Demo User", email=DEMO_EMAIL)


@pytest.fixture()
def signed_in_client(client):
    r = client.post("/api/auth/signin", json={"email": DEMO_EMAIL, "password": DEMO_PASSWORD})
    assert r.status_code == 200, r.text
    return client
