"""Integration tests for session-cookie authentication."""

import asyncio
from datetime import UTC, datetime, timedelta

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from backend.docchat.security import hash_session_token, new_session_token

ADMIN_USERNAME = "admin"
ADMIN_PASSWORD = "admin-password"


def test_login_sets_httponly_cookie(client: TestClient) -> None:
    response = client.post(
        "/auth/login", json={"username": ADMIN_USERNAME, "password": ADMIN_PASSWORD}
    )

    assert response.status_code == 200
    assert response.json()["role"] == "admin"
    set_cookie = response.headers["set-cookie"]
    assert set_cookie.startswith("docchat_session=")
    assert "HttpOnly" in set_cookie
    assert "samesite=lax" in set_cookie.lower()


def test_login_with_wrong_password_is_401(client: TestClient) -> None:
    response = client.post("/auth/login", json={"username": ADMIN_USERNAME, "password": "nope"})

    assert response.status_code == 401


def test_session_reflects_login_and_logout(client: TestClient) -> None:
    assert client.get("/auth/session").json() == {"isAuthenticated": False, "user": None}

    client.post("/auth/login", json={"username": ADMIN_USERNAME, "password": ADMIN_PASSWORD})
    session = client.get("/auth/session").json()
    assert session["isAuthenticated"] is True
    assert session["user"]["username"] == ADMIN_USERNAME

    assert client.post("/auth/logout").json() == {"ok": True}
    assert client.get("/auth/session").json()["isAuthenticated"] is False
    assert client.get("/chats").status_code == 401


def test_forged_cookie_is_rejected(client: TestClient) -> None:
    client.cookies.set("docchat_session", "forged-token")

    assert client.get("/chats").status_code == 401


def test_signup_creates_regular_user(client: TestClient) -> None:
    response = client.post(
        "/auth/signup",
        json={"email": "new@example.com", "username": "newbie", "password": "pw"},
    )

    assert response.status_code == 200
    assert response.json()["role"] == "user"
    assert client.get("/auth/session").json()["user"]["email"] == "new@example.com"


def test_signup_missing_fields_is_400(client: TestClient) -> None:
    response = client.post("/auth/signup", json={"email": "x@example.com", "username": ""})

    assert response.status_code == 400


def test_signup_duplicate_is_409(client: TestClient) -> None:
    response = client.post(
        "/auth/signup",
        json={"email": "other@example.com", "username": ADMIN_USERNAME, "password": "pw"},
    )

    assert response.status_code == 409


def test_protected_routes_require_login(client: TestClient) -> None:
    assert client.get("/documents").status_code == 401
    assert client.post("/chat/complete", json={"message": "hi"}).status_code == 401
    assert client.get("/settings").status_code == 401


def test_admin_routes_forbid_regular_users(user_client: TestClient) -> None:
    assert user_client.get("/summary").status_code == 403
    assert user_client.put("/settings", json={"organization_name": "X"}).status_code == 403
    assert user_client.get("/settings").status_code == 200


def test_expired_session_is_401_and_removed(app: FastAPI, client: TestClient) -> None:
    stores = app.state.stores
    admin = asyncio.run(stores.users.get_by_username(ADMIN_USERNAME))
    token = new_session_token()
    token_hash = hash_session_token(token)
    asyncio.run(
        stores.sessions.create_session(
            token_hash, admin.user_id, datetime.now(UTC) - timedelta(minutes=1)
        )
    )
    client.cookies.set("docchat_session", token)

    response = client.get("/chats")

    assert response.status_code == 401
    assert response.json() == {"detail": "Session expired"}
    assert asyncio.run(stores.sessions.get_session(token_hash)) is None
    assert client.get("/auth/session").json()["isAuthenticated"] is False


def test_signup_conflict_at_insert_is_409(
    app: FastAPI, client: TestClient, monkeypatch: pytest.MonkeyPatch
) -> None:
    async def stale_exists(*, username: str, email: str) -> bool:
        return False

    # another request registers the name between the check and the insert
    monkeypatch.setattr(app.state.stores.users, "exists", stale_exists)

    response = client.post(
        "/auth/signup",
        json={"email": "late@example.com", "username": ADMIN_USERNAME, "password": "pw"},
    )

    assert response.status_code == 409
    assert response.json() == {"detail": "Already exists"}
