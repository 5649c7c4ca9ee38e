"""Tests for health endpoint and error envelope."""

import pytest
from httpx import ASGITransport, AsyncClient

from storerate.main import create_app
from storerate.models import User
from storerate.services.access import Role
from tests.conftest import auth_header, make_user


@pytest.mark.asyncio
async def test_health_check(client: AsyncClient):
    """Test health endpoint returns ok."""
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"ok": True}


@pytest.mark.asyncio
async def test_missing_token_is_401_with_error_envelope(client: AsyncClient):
    response = await client.get("/user/stats")
    assert response.status_code == 401
    body = response.json()
    assert body["error"]["code"] == "UNAUTHORIZED"
    assert body["error"]["message"] == "No token, authorization denied"


@pytest.mark.asyncio
async def test_garbage_token_is_401(client: AsyncClient):
    response = await client.get("/user/stats", headers={"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == 401
    assert response.json()["error"]["message"] == "Token is not valid"


@pytest.mark.asyncio
async def test_token_for_deleted_user_is_401(client: AsyncClient):
    ghost = User(id=999, name="x", email="ghost@example.com", password_hash="", address="", role=Role.USER)
    response = await client.get("/user/stats", headers=auth_header(ghost))
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_wrong_role_is_403(client: AsyncClient, db):
    owner = await make_user(db, "owner@example.com", role=Role.STORE_OWNER)
    response = await client.get("/admin/dashboard", headers=auth_header(owner))
    assert response.status_code == 403
    assert response.json()["error"]["code"] == "FORBIDDEN"


@pytest.mark.asyncio
async def test_query_validation_is_400_with_fields(client: AsyncClient, db):
    user = await make_user(db, "user@example.com")
    response = await client.get("/user/stores", params={"limit": 0}, headers=auth_header(user))
    assert response.status_code == 400
    body = response.json()
    assert body["error"]["code"] == "VALIDATION_FAILED"
    assert body["error"]["detail"]["fields"][0]["field"] == "limit"


@pytest.mark.asyncio
async def test_unhandled_error_is_500_without_internals(db):
    app = create_app(database=db)

    async def explode() -> None:
        raise RuntimeError("secret internals")

    app.add_api_route("/explode", explode)
    async with AsyncClient(
        transport=ASGITransport(app=app, raise_app_exceptions=False),
        base_url="http://test",
    ) as ac:
        response = await ac.get("/explode")

    assert response.status_code == 500
    body = response.json()
    assert body["error"]["code"] == "INTERNAL_ERROR"
    assert body["error"]["message"] == "Internal server error"
    assert "secret internals" not in response.text
