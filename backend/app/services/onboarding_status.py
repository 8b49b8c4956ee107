"""Onboarding status flag on the merchant's store.

`stores.onboarding_completed` is the single source of truth for whether the
onboarding UI is shown again. Updates are one-column, scoped to the caller's
own store, and idempotent: setting the same status twice is a no-op in
effect and returns the same result.
"""

import logging

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.public.organization import OnboardingStatus, Store
from app.models.public.user import User
from app.schemas.onboarding import OnboardingStatusResult
from app.services.onboarding_gate import remember_onboarding_status
from app.services.organizations import get_user_organization

logger = logging.getLogger(__name__)


async def set_store_onboarding_flag(
    db: AsyncSession,
    store_id: str,
    status: OnboardingStatus | str,
) -> None:
    """UPDATE stores SET onboarding_completed = :status WHERE id = :store_id.

    Commits on success. Storage errors propagate to the caller.
    """
    value = OnboardingStatus(status).value
    await db.execute(
        update(Store)
        .where(Store.id == store_id)
        .values(onboarding_completed=value)
    )
    await db.commit()


async def update_onboarding_status(
    db: AsyncSession,
    user: User | None,
    status: OnboardingStatus | str,
) -> OnboardingStatusResult:
    if user is None:
        logger.warning("Onboarding status update without an authenticated user")
        return OnboardingStatusResult(success=False, error_code="unauthorized")

    status = OnboardingStatus(status)

    try:
        org = await get_user_organization(db, user)
        if org is None or org.store_id is None:
            return OnboardingStatusResult(
                success=False,
                error_code="no_store",
                message="No store found for user",
            )

        await set_store_onboarding_flag(db, org.store_id, status)
    except Exception as e:
        logger.error(
            f"Error updating onboarding status for user {user.id}: {e}",
            exc_info=True,
        )
        await db.rollback()
        return OnboardingStatusResult(
            success=False,
            error_code="database_error",
            message=str(e) or "Unknown error",
        )

    await remember_onboarding_status(user.id, status.value, org.store_id)
    logger.info(f"Onboarding status for store {org.store_id} set to {status.value}")
    return OnboardingStatusResult(success=True, status=status.value)


async def complete_onboarding(db: AsyncSession, user: User | None) -> OnboardingStatusResult:
    return await update_onboarding_status(db, user, OnboardingStatus.COMPLETED)


async def skip_onboarding(db: AsyncSession, user: User | None) -> OnboardingStatusResult:
    return await update_onboarding_status(db, user, OnboardingStatus.SKIPPED)
