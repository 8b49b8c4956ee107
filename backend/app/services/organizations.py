"""Resolve the caller's organization and store.

Stores are never looked up by an id from the request: every onboarding
write is scoped to the store found here for the authenticated user.
"""

import logging

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.public.organization import Organization, Store
from app.models.public.user import User
from app.schemas.onboarding import UserOrganization

logger = logging.getLogger(__name__)


async def get_user_organization(
    db: AsyncSession,
    user: User | None,
) -> UserOrganization | None:
    """The user's organization and its first store, or None.

    Returns None when there is no user, no organization, or the lookup
    fails (the error is logged).
    """
    if user is None:
        return None

    stmt = (
        select(Organization, Store)
        .outerjoin(Store, Store.organization_id == Organization.id)
        .where(Organization.owner_id == user.id)
        .order_by(Organization.created_at, Store.created_at)
        .limit(1)
        .execution_options(populate_existing=True)
    )
    try:
        row = (await db.execute(stmt)).first()
    except SQLAlchemyError as e:
        logger.error(f"Error getting organization for user {user.id}: {e}")
        await db.rollback()
        return None

    if row is None:
        return None

    org, store = row
    return UserOrganization(
        organization_id=org.id,
        organization_slug=org.slug,
        store_id=store.id if store else None,
        store_slug=store.slug if store else None,
        store_type=store.store_type if store else None,
        store_status=store.status if store else None,
        theme_id=store.theme_id if store else None,
        onboarding_completed=store.onboarding_completed if store else None,
    )
