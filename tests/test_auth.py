"""Tests for HTTP Basic Auth and security header middleware."""

import base64

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from linkwatch.main import BasicAuthMiddleware, SecurityHeadersMiddleware


def _basic(username: str, password: str) -> dict[str, str]:
    token = base64.b64encode(f"{username}:{password}".encode()).decode()
    return {"Authorization": f"Basic {token}"}


@pytest.fixture
def auth_client() -> TestClient:
    app = FastAPI()

    @app.get("/health")
    def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/api/status")
    def status() -> dict[str, str]:
        return {"status": "Good"}

    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(BasicAuthMiddleware, username="admin", password="secret")
    return TestClient(app)


def test_no_auth_when_password_not_set(client: TestClient):
    """The default app has no password configured."""
    assert client.get("/api/status").status_code == 200


def test_health_is_exempt(auth_client: TestClient):
    assert auth_client.get("/health").status_code == 200


def test_missing_credentials(auth_client: TestClient):
    resp = auth_client.get("/api/status")
    assert resp.status_code == 401
    assert resp.headers["WWW-Authenticate"] == 'Basic realm="LinkWatch"'


def test_wrong_password(auth_client: TestClient):
    assert auth_client.get("/api/status", headers=_basic("admin", "nope")).status_code == 401


def test_malformed_header(auth_client: TestClient):
    resp = auth_client.get("/api/status", headers={"Authorization": "Basic !!!not-base64"})
    assert resp.status_code == 401


def test_valid_credentials(auth_client: TestClient):
    resp = auth_client.get("/api/status", headers=_basic("admin", "secret"))
    assert resp.status_code == 200
    assert resp.json() == {"status": "Good"}


def test_password_may_contain_colon():
    app = FastAPI()

    @app.get("/x")
    def x() -> dict[str, bool]:
        return {"ok": True}

    app.add_middleware(BasicAuthMiddleware, username="admin", password="a:b")
    assert TestClient(app).get("/x", headers=_basic("admin", "a:b")).status_code == 200
