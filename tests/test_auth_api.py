import pytest
from fastapi.testclient import TestClient

import quiz_arena.routers.auth
from quiz_arena.security import (
    TokenPayload, create_token, decode_token, hash_password, validate_password, verify_password,
)
from quiz_arena.errors import Unauthorized

from conftest import make_settings, signup


def test_password_hashing():
    hashed = hash_password("Secret123")
    assert hashed != "Secret123"
    assert verify_password("Secret123", hashed)
    assert not verify_password("secret123", hashed)


def test_token_round_trip_and_tampering():
    settings = make_settings()
    token = create_token(TokenPayload(userId="u1", email="a@b.co", username="ann"), settings)
    assert decode_token(token, settings).userId == "u1"

    with pytest.raises(Unauthorized):
        decode_token(token, make_settings(jwt_secret="other-secret"))


def test_expired_token():
    settings = make_settings(jwt_expires_days=-1)
    token = create_token(TokenPayload(userId="u1", email="a@b.co", username="ann"), settings)
    with pytest.raises(Unauthorized) as exc:
        decode_token(token, settings)
    assert exc.value.message == "Token expired. Please login again."


def test_signup(client):
    body = signup(client)
    assert body["success"] is True
    assert body["message"] == "Account created successfully"
    assert body["token"]
    assert set(body["user"]) == {"id", "username", "email", "created_at"}


def test_signup_duplicate_email(client, user):
    res = client.post(
        "/api/auth/signup",
        json={"username": "alice2", "email": "alice@example.com", "password": "Secret123"},
    )
    assert res.status_code == 409
    assert res.json()["message"] == "Email already registered"


def test_signup_duplicate_username(client, user):
    res = client.post(
        "/api/auth/signup",
        json={"username": "alice", "email": "other@example.com", "password": "Secret123"},
    )
    assert res.status_code == 409
    assert res.json()["message"] == "Username already taken"


@pytest.mark.parametrize("username,password,message", [
    ("al", "Secret123", "Invalid username"),
    ("bad name!", "Secret123", "Invalid username"),
    ("carol", "short1A", "Password does not meet requirements"),
    ("carol", "alllowercase1", "Password does not meet requirements"),
])
def test_signup_validation(client, username, password, message):
    res = client.post(
        "/api/auth/signup",
        json={"username": username, "email": "carol@example.com", "password": password},
    )
    assert res.status_code == 400
    assert res.json()["message"] == message
    assert res.json()["errors"]


def test_signup_invalid_email(client):
    res = client.post(
        "/api/auth/signup",
        json={"username": "carol", "email": "not-an-email", "password": "Secret123"},
    )
    assert res.status_code == 400


def test_login(client, user):
    res = client.post("/api/auth/login", json={"email": "alice@example.com", "password": "Secret123"})
    assert res.status_code == 200
    assert res.json()["message"] == "Login successful"
    assert res.json()["user"]["username"] == "alice"


@pytest.mark.parametrize("email,password", [
    ("alice@example.com", "Wrong1234"),
    ("nobody@example.com", "Secret123"),
])
def test_login_rejected(client, user, email, password):
    res = client.post("/api/auth/login", json={"email": email, "password": password})
    assert res.status_code == 401
    assert res.json() == {"success": False, "message": "Invalid email or password"}


def test_me_and_logout(client, user, auth_headers):
    res = client.get("/api/auth/me", headers=auth_headers)
    assert res.status_code == 200
    assert res.json()["user"]["id"] == user["user"]["id"]

    res = client.post("/api/auth/logout", headers=auth_headers)
    assert res.json() == {"success": True, "message": "Logged out successfully"}


def test_me_requires_token(client):
    res = client.get("/api/auth/me")
    assert res.status_code == 401


def test_token_from_other_deployment_rejected(client):
    other = TestClient(client.app)
    token = create_token(
        TokenPayload(userId="u1", email="a@b.co", username="ann"),
        make_settings(jwt_secret="other-secret"),
    )
    res = other.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert res.status_code == 401


@pytest.mark.parametrize("password", ["ÉÉÉÉabc12", "ABCDÉFGH²", "Abcdefgh²", "Secret123"])
def test_password_rules_are_ascii(password):
    errors = validate_password(password)
    if password == "Secret123":
        assert errors == []
    else:
        assert errors == ["Password must contain uppercase, lowercase, and number"]


def test_signup_race_on_unique_email(client, user, monkeypatch):
    # both requests pass the pre-check; the database constraint decides
    monkeypatch.setattr(quiz_arena.routers.auth, "_duplicate_message", lambda *args: None)
    res = client.post(
        "/api/auth/signup",
        json={"username": "alice_two", "email": "alice@example.com", "password": "Secret123"},
    )
    assert res.status_code == 409
    assert res.json()["success"] is False
