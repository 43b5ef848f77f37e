# tests/test_auth_api.py
from __future__ import annotations

import pytest

from commission_dashboard.core.config import settings

from factories import session_cookie_for


@pytest.mark.asyncio
async def test_login_wrong_password_returns_401(client):
    r = await client.post("/api/auth/login", json={"username": "a", "password": "wrong"})

    assert r.status_code == 401
    body = r.json()
    assert body["success"] is False
    assert body["message"] == "Invalid username or password"
    assert r.headers["X-Error-Code"] == "INVALID_CREDENTIALS"
    assert settings.SESSION_COOKIE_NAME not in r.cookies


@pytest.mark.asyncio
async def test_login_success_returns_user_without_password(client):
    r = await client.post("/api/auth/login", json={"username": "a", "password": "p"})

    assert r.status_code == 200
    body = r.json()
    assert body["success"] is True
    assert body["message"] == "Login successful"
    assert body["user"]["username"] == "a"
    assert body["user"]["name"] == "Alice Admin"
    assert body["user"]["role"] == "admin"
    assert "password" not in body["user"]
    assert settings.SESSION_COOKIE_NAME in r.cookies


@pytest.mark.asyncio
@pytest.mark.parametrize("payload", [{}, {"username": "a"}, {"password": "p"}, {"username": "", "password": ""}])
async def test_login_missing_fields_returns_400(client, payload):
    r = await client.post("/api/auth/login", json=payload)

    assert r.status_code == 400
    body = r.json()
    assert body["success"] is False
    assert body["message"] == "Username and password are required"


@pytest.mark.asyncio
async def test_login_malformed_body_returns_400(client):
    r = await client.post(
        "/api/auth/login",
        content=b"not json",
        headers={"Content-Type": "application/json"},
    )

    assert r.status_code == 400
    assert r.json()["success"] is False


@pytest.mark.asyncio
async def test_login_with_broken_store_returns_500(client, users_file):
    users_file.write_text("[{broken", encoding="utf-8")

    r = await client.post("/api/auth/login", json={"username": "a", "password": "p"})

    assert r.status_code == 500
    assert r.json() == {"success": False, "message": "Internal server error"}


@pytest.mark.asyncio
async def test_session_endpoint_without_cookie(client):
    r = await client.get("/api/auth/session")

    assert r.status_code == 200
    assert r.json() == {"authenticated": False, "user": None}


@pytest.mark.asyncio
async def test_session_endpoint_accepts_bearer_token(client):
    token = session_cookie_for("viewer")

    r = await client.get("/api/auth/session", headers={"Authorization": f"Bearer {token}"})

    body = r.json()
    assert body["authenticated"] is True
    assert body["user"]["username"] == "viewer"
    assert body["user"]["role"] == "viewer"
    assert "password" not in body["user"]


@pytest.mark.asyncio
async def test_tampered_session_is_unauthenticated(client):
    token = session_cookie_for("a")
    client.cookies.set(settings.SESSION_COOKIE_NAME, token[:-4] + "abcd")

    r = await client.get("/api/auth/session")

    assert r.json()["authenticated"] is False


@pytest.mark.asyncio
async def test_logout_clears_cookie(admin_client):
    r = await admin_client.post("/api/auth/logout")

    assert r.status_code == 200
    assert r.json()["success"] is True
    set_cookie = r.headers.get("set-cookie", "")
    assert settings.SESSION_COOKIE_NAME in set_cookie
    assert "Max-Age=0" in set_cookie or "expires=" in set_cookie.lower()


@pytest.mark.asyncio
async def test_logout_forgets_dashboard_state(app, admin_client):
    await admin_client.get("/")
    assert len(app.state.session_registry) == 1

    r = await admin_client.post("/api/auth/logout")

    assert r.status_code == 200
    assert len(app.state.session_registry) == 0
