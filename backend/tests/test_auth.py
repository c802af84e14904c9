"""
Tests for authentication endpoints: registration, login and current account.
"""

import pytest
from httpx import AsyncClient

from event_registry.core.security import decode_access_token


@pytest.mark.asyncio
async def test_register_account(client: AsyncClient):
    """Successful registration returns account data."""
    response = await client.post("/api/v1/auth/register", json={
        "username": "newuser",
        "email": "new@example.com",
        "password": "securepassword123",
    })
    assert response.status_code == 201
    data = response.json()
    assert data["username"] == "newuser"
    assert data["email"] == "new@example.com"
    assert data["role"] == "user"
    assert "hashed_password" not in data  # Never expose password hash


@pytest.mark.asyncio
async def test_register_duplicate_username(client: AsyncClient, test_user):
    """Duplicate username returns 409."""
    response = await client.post("/api/v1/auth/register", json={
        "username": "testuser",
        "email": "different@example.com",
        "password": "securepassword123",
    })
    assert response.status_code == 409
    assert response.json()["detail"] == "username already exists"


@pytest.mark.asyncio
async def test_register_duplicate_email(client: AsyncClient, test_user):
    """Duplicate email returns 409."""
    response = await client.post("/api/v1/auth/register", json={
        "username": "different",
        "email": "test@example.com",
        "password": "securepassword123",
    })
    assert response.status_code == 409
    assert response.json()["detail"] == "email already exists"


@pytest.mark.asyncio
async def test_register_blank_username(client: AsyncClient):
    response = await client.post("/api/v1/auth/register", json={
        "username": "   ",
        "email": "blank@example.com",
        "password": "securepassword123",
    })
    assert response.status_code == 400
    assert response.json()["detail"] == "username is required"


@pytest.mark.asyncio
async def test_login_success(client: AsyncClient, test_user):
    """Valid credentials return a JWT carrying the account identity."""
    response = await client.post("/api/v1/auth/login", json={
        "username": "testuser",
        "password": "testpassword123",
    })
    assert response.status_code == 200
    data = response.json()
    assert data["token_type"] == "bearer"

    identity = decode_access_token(data["access_token"])
    assert identity.account_id == test_user.id
    assert identity.display_name == "testuser"
    assert identity.role == "user"


@pytest.mark.asyncio
async def test_login_wrong_password(client: AsyncClient, test_user):
    response = await client.post("/api/v1/auth/login", json={
        "username": "testuser",
        "password": "wrongpassword",
    })
    assert response.status_code == 401
    assert response.json()["detail"] == "invalid username or password"


@pytest.mark.asyncio
async def test_login_unknown_username(client: AsyncClient):
    response = await client.post("/api/v1/auth/login", json={
        "username": "nobody",
        "password": "anypassword123",
    })
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_me_returns_current_account(client: AsyncClient, auth_headers, test_user):
    response = await client.get("/api/v1/auth/me", headers=auth_headers)
    assert response.status_code == 200
    assert response.json()["id"] == test_user.id


@pytest.mark.asyncio
async def test_me_requires_token(client: AsyncClient):
    response = await client.get("/api/v1/auth/me")
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_me_rejects_garbage_token(client: AsyncClient):
    response = await client.get("/api/v1/auth/me", headers={"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid token"
