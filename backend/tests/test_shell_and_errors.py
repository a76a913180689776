from __future__ import annotations

from fastapi.testclient import TestClient

from app.db.session import get_db
from app.main import app


def test_anonymous_shell_only_offers_home(client):
    data = client.get("/api/shell").json()["data"]
    assert data["session"] is None
    assert data["tabs"] == ["home"]
    assert [f["title"] for f in data["features"]] == [
        "Real-time Research",
        "Multi-Agent Intelligence",
        "Cost Optimization",
        "Production Ready",
    ]
    assert data["posts"] == []


def test_signed_in_shell_unlocks_chat_and_create(signed_in_client):
    signed_in_client.post("/api/posts", json={"title": "Hello", "content": "World"})
    data = signed_in_client.get("/api/shell").json()["data"]
    assert data["session"]["name"] == "Demo User"
    assert data["tabs"] == ["home", "chat", "create"]
    assert data["posts"][0]["title"] == "Hello"


def test_health(client):
    r = client.get("/api/health")
    assert r.status_code == 200
    assert r.json()["status"] == "ok"
    assert r.json()["user_directory"] == "static"


def test_request_id_is_echoed(client):
    r = client.get("/api/health", headers={"X-Request-ID": "req-123"})
    assert r.headers["X-Request-ID"] == "req-123"


def test_unexpected_error_is_generic(client):
    def _broken_db():
        raise RuntimeError("database exploded: secret detail")

    app.dependency_overrides[get_db] = _broken_db
    c = TestClient(app, raise_server_exceptions=False)
    r = c.get("/api/posts")
    assert r.status_code == 500
    err = r.json()["error"]
    assert err == {"code": "INTERNAL_ERROR", "message": "Something went wrong"}
