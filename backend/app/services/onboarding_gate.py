"""Decide whether the concierge onboarding should be shown to a merchant.

Entry conditions:
  - the merchant has an organization with a store (created by store setup)
  - the store's onboarding status is not_started or in_progress

Terminal statuses (completed / skipped) are cached in Redis under
`onboarding:status:{user_id}` for `settings.onboarding_status_cache_ttl`
seconds, so repeat page loads skip the database. The status updater writes
through this cache; a Redis outage only costs a database round trip.
"""

import logging

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.models.public.organization import OnboardingStatus
from app.models.public.user import User
from app.models.store.store_product import StoreProduct
from app.schemas.onboarding import OnboardingGate
from app.services.organizations import get_user_organization
from app.utils.cache import (
    cache_delete,
    cache_get_json,
    cache_set_json,
    onboarding_status_key,
)

logger = logging.getLogger(__name__)

TERMINAL_STATUSES = {OnboardingStatus.COMPLETED.value, OnboardingStatus.SKIPPED.value}
KNOWN_STATUSES = {s.value for s in OnboardingStatus}


async def remember_onboarding_status(
    user_id: str,
    status: str,
    store_id: str | None = None,
) -> None:
    """Write a status change through to the gate cache."""
    key = onboarding_status_key(user_id)
    if status in TERMINAL_STATUSES:
        await cache_set_json(
            key,
            {"status": status, "store_id": store_id},
            settings.onboarding_status_cache_ttl,
        )
    else:
        await cache_delete(key)


async def _count_products(db: AsyncSession, store_id: str) -> int:
    result = await db.execute(
        select(func.count()).select_from(StoreProduct).where(StoreProduct.store_id == store_id)
    )
    return result.scalar_one()


async def resolve_onboarding_gate(db: AsyncSession, user: User) -> OnboardingGate:
    cached = await cache_get_json(onboarding_status_key(user.id))
    if isinstance(cached, dict) and cached.get("status") in TERMINAL_STATUSES:
        return OnboardingGate(
            show_onboarding=False,
            onboarding_status=cached["status"],
            store_id=cached.get("store_id"),
            from_cache=True,
        )

    org = await get_user_organization(db, user)
    if org is None or org.store_id is None:
        # No store yet: store setup runs before onboarding
        return OnboardingGate(show_onboarding=False)

    status = org.onboarding_completed or OnboardingStatus.NOT_STARTED.value
    if status not in KNOWN_STATUSES:
        logger.warning(
            f"Unknown onboarding status {status!r} on store {org.store_id}; treating as not_started"
        )
        status = OnboardingStatus.NOT_STARTED.value

    if status in TERMINAL_STATUSES:
        await remember_onboarding_status(user.id, status, org.store_id)
        return OnboardingGate(
            show_onboarding=False,
            onboarding_status=status,
            store_id=org.store_id,
        )

    try:
        product_count = await _count_products(db, org.store_id)
    except SQLAlchemyError as e:
        logger.error(f"Error counting products for store {org.store_id}: {e}")
        await db.rollback()
        product_count = 0

    return OnboardingGate(
        show_onboarding=True,
        onboarding_status=status,
        store_state="draft" if product_count > 0 else "empty",
        store_id=org.store_id,
    )
