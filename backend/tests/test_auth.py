"""Tests for bearer token validation and the health endpoints."""

from datetime import datetime, timedelta, timezone

import pytest
from httpx import AsyncClient
from jose import jwt
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.jwt import ALGORITHM, create_access_token, decode_token
from app.config import settings
from app.models.public.organization import Store
from app.models.public.user import User
from app.routers import health

from conftest import make_token


@pytest.mark.auth
class TestTokens:

    def test_create_and_decode(self):
        payload = decode_token(create_access_token(user_id="user-1"))
        assert payload["sub"] == "user-1"
        assert payload["type"] == "access"

    def test_invalid_token_decodes_to_empty(self):
        assert decode_token("not-a-jwt") == {}

    def test_expired_token_decodes_to_empty(self):
        token = create_access_token(user_id="user-1", expires_delta=timedelta(seconds=-1))
        assert decode_token(token) == {}

    def test_wrong_secret_decodes_to_empty(self):
        token = jwt.encode({"sub": "user-1", "type": "access"}, "other-secret", algorithm=ALGORITHM)
        assert decode_token(token) == {}


@pytest.mark.auth
@pytest.mark.api
@pytest.mark.asyncio
class TestBearerAuth:

    async def test_valid_token(self, client: AsyncClient, auth_headers):
        response = await client.get("/api/onboarding/gate", headers=auth_headers)
        assert response.status_code == 200

    async def test_garbage_token(self, client: AsyncClient):
        response = await client.get(
            "/api/onboarding/gate", headers={"Authorization": "Bearer garbage"}
        )
        assert response.status_code == 401

    async def test_non_access_token(self, client: AsyncClient, merchant: User, store: Store):
        token = jwt.encode(
            {
                "sub": merchant.id,
                "type": "refresh",
                "exp": datetime.now(timezone.utc) + timedelta(minutes=5),
            },
            settings.secret_key,
            algorithm=ALGORITHM,
        )
        response = await client.get(
            "/api/onboarding/gate", headers={"Authorization": f"Bearer {token}"}
        )
        assert response.status_code == 401

    async def test_unknown_user(self, client: AsyncClient):
        headers = {"Authorization": f"Bearer {make_token('no-such-user')}"}
        response = await client.get("/api/onboarding/gate", headers=headers)
        assert response.status_code == 401

    async def test_inactive_user(
        self, client: AsyncClient, db_session: AsyncSession, merchant: User, auth_headers
    ):
        merchant.is_active = False
        await db_session.commit()

        response = await client.get("/api/onboarding/gate", headers=auth_headers)
        assert response.status_code == 401

    async def test_optional_auth_reports_unauthorized(self, client: AsyncClient):
        response = await client.put(
            "/api/onboarding/status",
            json={"status": "completed"},
            headers={"Authorization": "Bearer garbage"},
        )
        assert response.status_code == 401
        assert response.json() == {"success": False, "errorCode": "unauthorized"}


@pytest.mark.api
@pytest.mark.asyncio
class TestHealth:

    async def test_health(self, client: AsyncClient):
        response = await client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ok"
        assert data["service"] == "storefront-onboarding"

    async def test_ready(self, client: AsyncClient, test_engine, monkeypatch):
        monkeypatch.setattr(health, "engine", test_engine)

        response = await client.get("/health/ready")

        assert response.status_code == 200
        assert response.json()["checks"] == {"service": "ok", "database": "ok", "redis": "ok"}

    async def test_not_ready_when_redis_is_down(
        self, client: AsyncClient, test_engine, fake_redis, monkeypatch
    ):
        async def failing_ping():
            raise ConnectionError("redis down")

        monkeypatch.setattr(health, "engine", test_engine)
        monkeypatch.setattr(fake_redis, "ping", failing_ping)

        response = await client.get("/health/ready")

        assert response.status_code == 503
        data = response.json()
        assert data["status"] == "unhealthy"
        assert data["checks"]["database"] == "ok"
        assert data["checks"]["redis"].startswith("error")
