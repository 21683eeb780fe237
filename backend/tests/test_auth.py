"""Tests for session-cookie authentication."""

from fastapi.testclient import TestClient

from datetime import timedelta

from autoheal.config import get_settings
from autoheal.security import create_access_token, decode_session_token, verify_password, get_password_hash

CREDENTIALS = {"username": "alice", "password": "wonderland"}


def register(client: TestClient, **overrides):
    return client.post("/api/auth/register", json={**CREDENTIALS, **overrides})


class TestRegister:
    def test_register_creates_user_and_session(self, test_client: TestClient) -> None:
        response = register(test_client)

        assert response.status_code == 201
        data = response.json()
        assert data["user"]["username"] == "alice"
        assert data["user"]["id"]
        assert data["message"]
        assert get_settings().session_cookie_name in response.cookies

        me = test_client.get("/api/auth/me")
        assert me.status_code == 200
        assert me.json()["user"] == data["user"]

    def test_password_is_not_echoed(self, test_client: TestClient) -> None:
        response = register(test_client)

        assert "wonderland" not in response.text
        assert set(response.json()["user"]) == {"id", "username"}

    def test_duplicate_username_conflicts(self, test_client: TestClient) -> None:
        assert register(test_client).status_code == 201
        test_client.post("/api/auth/logout")

        response = register(test_client, password="another-password")
        assert response.status_code == 409

        # The first account is untouched and no second one was stored
        assert test_client.post("/api/auth/login", json=CREDENTIALS).status_code == 200
        bad = test_client.post(
            "/api/auth/login", json={"username": "alice", "password": "another-password"}
        )
        assert bad.status_code == 401

    def test_password_limit_counts_bytes(self, test_client: TestClient) -> None:
        # 36 characters but 72 bytes is the longest bcrypt accepts
        assert register(test_client, username="fits", password="é" * 36).status_code == 201

        response = register(test_client, username="toolong", password="é" * 40)
        assert response.status_code == 400
        assert any(error["field"].endswith("password") for error in response.json()["errors"])

    def test_short_password_is_rejected(self, test_client: TestClient) -> None:
        response = register(test_client, password="abc")
        assert response.status_code == 400
        assert any(error["field"].endswith("password") for error in response.json()["errors"])


class TestLogin:
    def test_login_sets_session(self, test_client: TestClient) -> None:
        register(test_client)
        test_client.post("/api/auth/logout")
        assert test_client.get("/api/auth/me").status_code == 401

        response = test_client.post("/api/auth/login", json=CREDENTIALS)
        assert response.status_code == 200
        assert response.json()["user"]["username"] == "alice"
        assert test_client.get("/api/auth/me").json()["user"]["username"] == "alice"

    def test_wrong_password_twice_leaves_no_session(self, test_client: TestClient) -> None:
        register(test_client)
        test_client.post("/api/auth/logout")

        for _ in range(2):
            response = test_client.post(
                "/api/auth/login", json={"username": "alice", "password": "wrong-password"}
            )
            assert response.status_code == 401
            assert get_settings().session_cookie_name not in response.cookies

        assert test_client.get("/api/auth/me").status_code == 401

    def test_overlong_password_is_unauthorized(self, test_client: TestClient) -> None:
        register(test_client)
        test_client.post("/api/auth/logout")

        response = test_client.post("/api/auth/login", json={"username": "alice", "password": "x" * 100})

        assert response.status_code == 401
        assert test_client.get("/api/auth/me").status_code == 401

    def test_unknown_user_is_unauthorized(self, test_client: TestClient) -> None:
        response = test_client.post(
            "/api/auth/login", json={"username": "nobody", "password": "whatever"}
        )
        assert response.status_code == 401


class TestCurrentUser:
    def test_me_is_stable_between_calls(self, auth_client: TestClient) -> None:
        first = auth_client.get("/api/auth/me")
        second = auth_client.get("/api/auth/me")

        assert first.status_code == second.status_code == 200
        assert first.json() == second.json()

    def test_me_without_session(self, test_client: TestClient) -> None:
        assert test_client.get("/api/auth/me").status_code == 401

    def test_tampered_session_is_unauthenticated(self, test_client: TestClient) -> None:
        test_client.cookies.set(get_settings().session_cookie_name, "not-a-real-token")
        assert test_client.get("/api/auth/me").status_code == 401

    def test_logout_clears_session(self, auth_client: TestClient) -> None:
        response = auth_client.post("/api/auth/logout")

        assert response.status_code == 200
        assert auth_client.get("/api/auth/me").status_code == 401


class TestSessionToken:
    def test_token_round_trip(self) -> None:
        assert decode_session_token(create_access_token("user-1")) == "user-1"

    def test_expired_token_is_rejected(self, test_client: TestClient) -> None:
        token = create_access_token("user-1", expires_delta=timedelta(minutes=-5))

        assert decode_session_token(token) is None
        test_client.cookies.set(get_settings().session_cookie_name, token)
        assert test_client.get("/api/auth/me").status_code == 401

    def test_overlong_password_never_verifies(self) -> None:
        hashed = get_password_hash("x" * 72)

        assert verify_password("x" * 72, hashed)
        assert not verify_password("x" * 73, hashed)
