"""Tests for registration, login and bearer token handling."""

from datetime import timedelta

import pytest

from routers.auth.helpers import auth_helpers


REGISTRATION = {
    "email": "ada@example.com",
    "password": "hunter2",
    "firstName": "Ada",
    "lastName": "Obi",
    "role": "buyer",
    "idNumber": "NIN-001",
}


@pytest.mark.asyncio
async def test_register_and_login(client):
    response = await client.post("/auth/register", json=REGISTRATION)
    assert response.status_code == 201
    user = response.json()
    assert user["email"] == "ada@example.com"
    assert user["first_name"] == "Ada"
    assert user["is_verified"] is False
    assert "password" not in user

    response = await client.post("/auth/login", json={"email": "ada@example.com", "password": "hunter2"})
    assert response.status_code == 200
    body = response.json()
    assert body["user"]["id"] == user["id"]
    assert body["token_type"] == "bearer"

    response = await client.get("/auth/me", headers={"Authorization": f"Bearer {body['access_token']}"})
    assert response.status_code == 200
    assert response.json()["email"] == "ada@example.com"


@pytest.mark.asyncio
async def test_register_rejects_admin_and_duplicates(client):
    response = await client.post("/auth/register", json={**REGISTRATION, "role": "admin"})
    assert response.status_code == 403

    assert (await client.post("/auth/register", json=REGISTRATION)).status_code == 201
    response = await client.post("/auth/register", json={**REGISTRATION, "firstName": "Other"})
    assert response.status_code == 409
    assert response.json()["detail"] == "Email already registered"


@pytest.mark.asyncio
async def test_register_validates_input(client):
    response = await client.post("/auth/register", json={**REGISTRATION, "email": "not-an-email"})
    assert response.status_code == 422

    response = await client.post("/auth/register", json={**REGISTRATION, "role": "wizard"})
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_login_failures(client, make_user):
    await make_user("buyer", email="blocked@example.com", password="pw", is_blocked=True)
    await make_user("buyer", email="ok@example.com", password="pw")

    response = await client.post("/auth/login", json={"email": "ok@example.com", "password": "wrong"})
    assert response.status_code == 401

    response = await client.post("/auth/login", json={"email": "nobody@example.com", "password": "pw"})
    assert response.status_code == 401

    response = await client.post("/auth/login", json={"email": "blocked@example.com", "password": "pw"})
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_bad_tokens(client, make_user):
    user = await make_user("buyer")

    response = await client.get("/auth/me", headers={"Authorization": "Bearer garbage"})
    assert response.status_code == 401

    expired = auth_helpers.create_access_token(user, expires_delta=timedelta(minutes=-5))
    response = await client.get("/auth/me", headers={"Authorization": f"Bearer {expired}"})
    assert response.status_code == 401
    assert response.json()["detail"] == "Token expired"


@pytest.mark.asyncio
async def test_blocked_user_token_rejected(client, make_user, auth_headers):
    user = await make_user("buyer", is_blocked=True)
    response = await client.get("/auth/me", headers=auth_headers(user))
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_ensure_admin_is_idempotent(db):
    first = await auth_helpers.ensure_admin(db, "admin@example.com", "admin123")
    second = await auth_helpers.ensure_admin(db, "admin@example.com", "admin123")
    assert first.id == second.id
    assert first.role == "admin"
    assert first.is_verified is True


def test_token_round_trip():
    class Stub:
        id = 42
        email = "stub@example.com"
        role = "seller"

    payload = auth_helpers.verify_token(auth_helpers.create_access_token(Stub()))
    assert payload["user_id"] == 42
    assert payload["role"] == "seller"
