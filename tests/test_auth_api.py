"""Register / login / me over HTTP."""

from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone

from fastapi.testclient import TestClient

from reviews_api.api.deps import get_repository
from reviews_api.core.security import TokenService
from reviews_api.main import create_application

from conftest import TEST_SECRET, make_settings


def test_register_login_me(client) -> None:
    resp = client.post("/api/auth/register", json={"username": "alice", "password": "pw123"})
    assert resp.status_code == 201
    assert resp.json()["message"] == "User registered successfully"
    assert resp.json()["token"]

    resp = client.post("/api/auth/login", json={"username": "alice", "password": "pw123"})
    assert resp.status_code == 200
    body = resp.json()
    assert body["message"] == "Login successful"

    claim = TokenService(TEST_SECRET).verify(body["token"])
    assert claim.username == "alice"

    resp = client.get("/api/auth/me", headers={"Authorization": f"Bearer {body['token']}"})
    assert resp.status_code == 200
    me = resp.json()
    assert me["username"] == "alice"
    assert me["id"] == str(claim.user_id)
    assert not any("password" in key for key in me)


def test_register_stores_hash_not_password(client, repo) -> None:
    client.post("/api/auth/register", json={"username": "alice", "password": "pw123", "email": "a@example.com"})
    user = next(iter(repo.users.values()))
    assert user.password_hash != "pw123"
    assert user.password_hash.startswith("$2b$")
    assert user.email == "a@example.com"


def test_register_duplicate_username(client) -> None:
    first = client.post("/api/auth/register", json={"username": "alice", "password": "pw123"})
    second = client.post(
        "/api/auth/register", json={"username": "alice", "password": "other", "email": "x@example.com"}
    )
    assert first.status_code == 201
    assert second.status_code == 409
    assert second.json()["message"] == "Username already taken"


def test_usernames_are_case_sensitive(client) -> None:
    assert client.post("/api/auth/register", json={"username": "alice", "password": "pw"}).status_code == 201
    assert client.post("/api/auth/register", json={"username": "Alice", "password": "pw"}).status_code == 201


def test_register_requires_username_and_password(client) -> None:
    for body in ({}, {"username": "alice"}, {"password": "pw123"}, {"username": "", "password": "pw123"}):
        resp = client.post("/api/auth/register", json=body)
        assert resp.status_code == 400
        assert resp.json()["message"] == "Username and password required."


def test_login_wrong_password(client, register) -> None:
    register("alice", "pw123")
    resp = client.post("/api/auth/login", json={"username": "alice", "password": "pw124"})
    assert resp.status_code == 401
    assert resp.json()["message"] == "Invalid credentials"
    assert resp.headers["www-authenticate"] == "Bearer"


def test_login_unknown_user(client) -> None:
    resp = client.post("/api/auth/login", json={"username": "nobody", "password": "pw"})
    assert resp.status_code == 401
    assert resp.json()["message"] == "Invalid credentials"


def test_login_missing_fields(client) -> None:
    resp = client.post("/api/auth/login", json={"username": "alice"})
    assert resp.status_code == 400


def test_me_without_header(client) -> None:
    resp = client.get("/api/auth/me")
    assert resp.status_code == 401
    assert "no token provided" in resp.json()["message"]


def test_me_with_empty_bearer(client) -> None:
    resp = client.get("/api/auth/me", headers={"Authorization": "Bearer  "})
    assert resp.status_code == 401
    assert resp.json()["message"] == "Not authorized, invalid token format in header"


def test_me_with_expired_token(client, register, repo) -> None:
    register("alice")
    user = next(iter(repo.users.values()))
    past = datetime.now(timezone.utc) - timedelta(hours=2)
    token = TokenService(TEST_SECRET).issue(user.id, user.username, now=past)

    resp = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 401
    assert resp.json()["message"] == "Not authorized, token expired"


def test_me_with_tampered_token(client, register) -> None:
    token = register("alice")["Authorization"].removeprefix("Bearer ")
    header, payload, signature = token.split(".")
    signature = ("A" if signature[0] != "A" else "B") + signature[1:]
    resp = client.get("/api/auth/me", headers={"Authorization": f"Bearer {header}.{payload}.{signature}"})
    assert resp.status_code == 401
    assert resp.json()["message"].startswith("Not authorized, token error:")


def test_me_after_user_deleted(client, register, repo) -> None:
    headers = register("alice")
    repo.users.clear()
    resp = client.get("/api/auth/me", headers=headers)
    assert resp.status_code == 401
    assert resp.json()["message"] == "Not authorized, user not found"


def test_unknown_subject_token(client) -> None:
    token = TokenService(TEST_SECRET).issue(uuid.uuid4(), "ghost")
    resp = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 401


def _unconfigured_client(repo) -> TestClient:
    app = create_application(make_settings(jwt_secret=""))
    app.dependency_overrides[get_repository] = lambda: repo
    return TestClient(app)


def test_missing_secret_blocks_registration(repo) -> None:
    client = _unconfigured_client(repo)
    resp = client.post("/api/auth/register", json={"username": "alice", "password": "pw123"})
    assert resp.status_code == 500
    assert resp.json()["message"] == "Authentication configuration error."
    assert repo.users == {}


def test_missing_secret_blocks_login_and_protected_routes(repo) -> None:
    repo.add_user(username="alice", password_hash="x")
    client = _unconfigured_client(repo)
    token = TokenService(TEST_SECRET).issue(next(iter(repo.users)), "alice")

    assert client.post("/api/auth/login", json={"username": "alice", "password": "pw"}).status_code == 500
    resp = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 500
    assert resp.json()["message"] == "Authentication configuration error."
