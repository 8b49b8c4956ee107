"""Tests for the onboarding status updater and its endpoints."""

import json
from unittest.mock import AsyncMock, patch

import pytest
from httpx import AsyncClient
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.public.organization import Store
from app.models.public.user import User
from app.services.onboarding_status import (
    complete_onboarding,
    skip_onboarding,
    update_onboarding_status,
)
from app.utils.cache import onboarding_status_key

from conftest import make_token


async def _flag(db: AsyncSession, store_id: str) -> str | None:
    result = await db.execute(select(Store.onboarding_completed).where(Store.id == store_id))
    return result.scalar_one()


@pytest.mark.onboarding
@pytest.mark.asyncio
class TestUpdateOnboardingStatus:

    async def test_success(self, db_session: AsyncSession, merchant: User, store: Store):
        store_id = store.id
        result = await update_onboarding_status(db_session, merchant, "in_progress")

        assert result.success is True
        assert result.status == "in_progress"
        assert result.to_response() == {"success": True, "status": "in_progress"}
        assert await _flag(db_session, store_id) == "in_progress"

    async def test_idempotent(self, db_session: AsyncSession, merchant: User, store: Store):
        store_id = store.id
        first = await update_onboarding_status(db_session, merchant, "completed")
        second = await update_onboarding_status(db_session, merchant, "completed")

        assert first == second
        assert await _flag(db_session, store_id) == "completed"

    async def test_only_the_flag_column_changes(
        self, db_session: AsyncSession, merchant: User, store: Store
    ):
        store_id = store.id
        before = (await db_session.execute(
            select(Store.name, Store.status, Store.updated_at).where(Store.id == store_id)
        )).one()

        await complete_onboarding(db_session, merchant)

        after = (await db_session.execute(
            select(Store.name, Store.status, Store.updated_at).where(Store.id == store_id)
        )).one()
        assert after == before

    async def test_wrappers(self, db_session: AsyncSession, merchant: User, store: Store):
        store_id = store.id
        assert (await skip_onboarding(db_session, merchant)).status == "skipped"
        assert await _flag(db_session, store_id) == "skipped"

        assert (await complete_onboarding(db_session, merchant)).status == "completed"
        assert await _flag(db_session, store_id) == "completed"

    async def test_unauthorized_never_writes(self, db_session: AsyncSession, store: Store):
        with patch(
            "app.services.onboarding_status.set_store_onboarding_flag", new_callable=AsyncMock
        ) as set_flag:
            result = await update_onboarding_status(db_session, None, "completed")

        assert result.success is False
        assert result.error_code == "unauthorized"
        set_flag.assert_not_called()

    async def test_no_store_never_writes(self, db_session: AsyncSession, storeless_merchant: User):
        with patch(
            "app.services.onboarding_status.set_store_onboarding_flag", new_callable=AsyncMock
        ) as set_flag:
            result = await update_onboarding_status(db_session, storeless_merchant, "completed")

        assert result.success is False
        assert result.error_code == "no_store"
        assert result.message == "No store found for user"
        set_flag.assert_not_called()

    async def test_database_error(self, db_session: AsyncSession, merchant: User, store: Store):
        store_id = store.id
        with patch(
            "app.services.onboarding_status.set_store_onboarding_flag",
            AsyncMock(side_effect=SQLAlchemyError("write failed")),
        ):
            result = await update_onboarding_status(db_session, merchant, "completed")

        assert result.success is False
        assert result.error_code == "database_error"
        assert result.message == "write failed"
        assert await _flag(db_session, store_id) is None

    async def test_terminal_status_is_cached(
        self, db_session: AsyncSession, merchant: User, store: Store, fake_redis
    ):
        merchant_id, store_id = merchant.id, store.id
        key = onboarding_status_key(merchant_id)

        await skip_onboarding(db_session, merchant)
        assert json.loads(fake_redis.data[key]) == {"status": "skipped", "store_id": store_id}

        await update_onboarding_status(db_session, merchant, "in_progress")
        assert key not in fake_redis.data

    async def test_redis_outage_does_not_fail_update(
        self, db_session: AsyncSession, merchant: User, store: Store, broken_redis
    ):
        result = await complete_onboarding(db_session, merchant)
        assert result.success is True


@pytest.mark.onboarding
@pytest.mark.api
@pytest.mark.asyncio
class TestOnboardingStatusEndpoints:

    async def test_put_status(self, client: AsyncClient, auth_headers):
        response = await client.put(
            "/api/onboarding/status", json={"status": "in_progress"}, headers=auth_headers
        )
        assert response.status_code == 200
        assert response.json() == {"success": True, "status": "in_progress"}

    async def test_put_invalid_status(self, client: AsyncClient, auth_headers):
        response = await client.put(
            "/api/onboarding/status", json={"status": "done"}, headers=auth_headers
        )
        assert response.status_code == 422
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"

    async def test_complete_and_skip(self, client: AsyncClient, auth_headers):
        complete = await client.post("/api/onboarding/complete", headers=auth_headers)
        assert complete.json() == {"success": True, "status": "completed"}

        skip = await client.post("/api/onboarding/skip", headers=auth_headers)
        assert skip.json() == {"success": True, "status": "skipped"}

    async def test_unauthorized(self, client: AsyncClient):
        response = await client.post("/api/onboarding/complete")
        assert response.status_code == 401
        assert response.json() == {"success": False, "errorCode": "unauthorized"}

    async def test_no_store(self, client: AsyncClient, storeless_merchant: User):
        headers = {"Authorization": f"Bearer {make_token(storeless_merchant.id)}"}
        response = await client.post("/api/onboarding/skip", headers=headers)

        assert response.status_code == 404
        assert response.json() == {
            "success": False,
            "errorCode": "no_store",
            "message": "No store found for user",
        }

    async def test_database_error(self, client: AsyncClient, auth_headers):
        with patch(
            "app.services.onboarding_status.set_store_onboarding_flag",
            AsyncMock(side_effect=SQLAlchemyError("write failed")),
        ):
            response = await client.post("/api/onboarding/complete", headers=auth_headers)

        assert response.status_code == 500
        assert response.json() == {
            "success": False,
            "errorCode": "database_error",
            "message": "write failed",
        }
