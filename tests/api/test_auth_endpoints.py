# This file tests signup, login, logout, and profile endpoints.
# It exists to validate the session cookie contract and the credential error paths.
# The tests also confirm the stored password hash never leaks into responses.

from __future__ import annotations

from sqlalchemy import func, select

from marketplace.api.db_models import UserRecord
from tests.api.support import DEFAULT_PASSWORD, api_test_client, login, signup


def _user_count(client) -> int:
    with client.app.state.db.session() as session:
        return session.scalar(select(func.count()).select_from(UserRecord))


def test_signup_sets_cookie_and_returns_profile() -> None:
    with api_test_client() as client:
        response = client.post(
            "/api/v1/auth/signup",
            json={"name": "Alex", "email": "Alex@Marketplace.io", "password": DEFAULT_PASSWORD},
        )

    assert response.status_code == 201
    payload = response.json()
    assert payload["success"] is True
    assert payload["api_version"] == "v1"
    user = payload["user"]
    assert user["email"] == "alex@marketplace.io"
    assert user["role"] == "user"
    assert "password" not in user
    assert "createdAt" in user

    set_cookie = response.headers["set-cookie"]
    assert set_cookie.startswith("token=")
    assert "HttpOnly" in set_cookie
    assert "Path=/" in set_cookie
    assert "Max-Age=2592000" in set_cookie


def test_signup_as_provider_is_allowed() -> None:
    with api_test_client() as client:
        user = signup(client, email="pat@marketplace.io", role="provider")

    assert user["role"] == "provider"


def test_signup_rejects_admin_role() -> None:
    with api_test_client() as client:
        response = client.post(
            "/api/v1/auth/signup",
            json={
                "name": "Mallory",
                "email": "mallory@marketplace.io",
                "password": DEFAULT_PASSWORD,
                "role": "admin",
            },
        )

    assert response.status_code == 400
    assert response.json()["error_code"] == "VALIDATION_ERROR"


def test_duplicate_email_signup_is_conflict_and_store_unchanged() -> None:
    with api_test_client() as client:
        signup(client, email="dup@marketplace.io")
        before = _user_count(client)

        response = client.post(
            "/api/v1/auth/signup",
            json={"name": "Other", "email": "DUP@marketplace.io", "password": "another1"},
        )
        after = _user_count(client)

    assert response.status_code == 409
    assert response.json()["message"] == "Email already in use."
    assert before == after == 1


def test_short_password_rejected_before_store_write() -> None:
    with api_test_client() as client:
        response = client.post(
            "/api/v1/auth/signup",
            json={"name": "Short", "email": "short@marketplace.io", "password": "12345"},
        )
        count = _user_count(client)

    assert response.status_code == 400
    assert response.json()["message"] == "Password must be at least 6 characters."
    assert count == 0


def test_signup_missing_fields_and_bad_email() -> None:
    with api_test_client() as client:
        missing = client.post("/api/v1/auth/signup", json={"email": "a@marketplace.io"})
        bad_email = client.post(
            "/api/v1/auth/signup",
            json={"name": "A", "email": "not-an-email", "password": DEFAULT_PASSWORD},
        )

    assert missing.status_code == 400
    assert missing.json()["message"] == "Name, email and password are all required."
    assert bad_email.status_code == 400
    assert bad_email.json()["message"] == "Invalid email address."


def test_stored_password_is_hashed_and_login_verifies() -> None:
    with api_test_client() as client:
        signup(client, email="hash@marketplace.io")
        with client.app.state.db.session() as session:
            stored = session.scalar(
                select(UserRecord.password).where(UserRecord.email == "hash@marketplace.io")
            )
        client.post("/api/v1/auth/logout")
        user = login(client, email="hash@marketplace.io")

    assert stored != DEFAULT_PASSWORD
    assert stored.startswith("$2")
    assert user["email"] == "hash@marketplace.io"


def test_login_with_wrong_password_is_unauthorized() -> None:
    with api_test_client() as client:
        signup(client, email="wrong@marketplace.io")
        response = client.post(
            "/api/v1/auth/login",
            json={"email": "wrong@marketplace.io", "password": "not-the-password"},
        )
        unknown = client.post(
            "/api/v1/auth/login",
            json={"email": "nobody@marketplace.io", "password": DEFAULT_PASSWORD},
        )

    assert response.status_code == 401
    assert response.json()["message"] == "Invalid email or password."
    assert unknown.status_code == 401


def test_get_user_requires_session_and_logout_clears_it() -> None:
    with api_test_client() as client:
        anonymous = client.get("/api/v1/auth/getUser")
        signup(client, name="Jordan", email="jordan@marketplace.io")
        me = client.get("/api/v1/auth/getUser")
        logout = client.post("/api/v1/auth/logout")
        after_logout = client.get("/api/v1/auth/getUser")

    assert anonymous.status_code == 401
    assert anonymous.json()["message"] == "User unauthorized"
    assert me.status_code == 200
    assert me.json()["user"]["name"] == "Jordan"
    assert logout.status_code == 200
    assert logout.json()["message"] == "Logged out successfully"
    assert after_logout.status_code == 401


def test_tampered_cookie_is_unauthorized_not_server_error() -> None:
    with api_test_client() as client:
        response = client.get("/api/v1/auth/getUser", headers={"cookie": "token=not.a.jwt"})

    assert response.status_code == 401
    assert response.json()["error_code"] == "TOKEN_INVALID"


def test_malformed_json_body_is_bad_request() -> None:
    with api_test_client() as client:
        response = client.post(
            "/api/v1/auth/login",
            content=b"{not json",
            headers={"content-type": "application/json"},
        )

    assert response.status_code == 400
    assert response.json()["message"] == "Request body must be valid JSON."


def test_overlong_name_and_avatar_are_rejected() -> None:
    with api_test_client() as client:
        long_name = client.post(
            "/api/v1/auth/signup",
            json={"name": "N" * 150, "email": "long@marketplace.io", "password": DEFAULT_PASSWORD},
        )
        long_avatar = client.post(
            "/api/v1/auth/signup",
            json={
                "name": "Avery",
                "email": "avery@marketplace.io",
                "password": DEFAULT_PASSWORD,
                "imageUrl": "https://img.marketplace.io/" + "a" * 2048,
            },
        )
        count = _user_count(client)

    assert long_name.status_code == 400
    assert long_name.json()["message"] == "Name cannot be more than 120 characters."
    assert long_avatar.status_code == 400
    assert long_avatar.json()["message"] == "Image URL cannot be more than 2048 characters"
    assert count == 0
