"""Confirm-and-persist for AI product drafts.

The bulk upload flow stores generated drafts in `product_drafts`. When the
merchant confirms, the selected drafts become store products (status
"draft", so they are not published yet) and are marked `persisted` in the
same commit, which makes a draft promotable at most once.
"""

import logging

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.models.public.organization import OnboardingStatus
from app.models.public.user import User
from app.models.store.product_draft import ProductDraft
from app.models.store.store_product import StoreProduct
from app.schemas.onboarding import DraftPersistenceResult
from app.schemas.workflow import PersistenceComplete
from app.services.onboarding_status import update_onboarding_status
from app.services.organizations import get_user_organization
from app.services.workflow_state import advance_workflow_for_context
from app.utils.slugs import SlugGenerationError, generate_product_slug

logger = logging.getLogger(__name__)


def _product_from_draft(draft: ProductDraft, slug: str) -> StoreProduct:
    return StoreProduct(
        store_id=draft.store_id,
        name=draft.name,
        name_ar=draft.name_ar,
        slug=slug,
        description=draft.description,
        description_ar=draft.description_ar,
        category=draft.category,
        category_ar=draft.category_ar,
        tags=draft.tags or [],
        price=draft.suggested_price or 0,
        currency=settings.default_currency,
        image_url=draft.primary_image_url,
        images=draft.image_urls or [],
        status="draft",
        ai_generated=True,
        ai_confidence=draft.ai_confidence or "medium",
        inventory=0,
    )


async def persist_product_drafts(
    db: AsyncSession,
    user: User | None,
    draft_ids: list[str],
    batch_id: str | None = None,
) -> DraftPersistenceResult:
    """Turn the caller's unpersisted drafts into store products.

    Only drafts that belong to the caller's store and are still in "draft"
    status are used; others in `draft_ids` are ignored.
    """
    if user is None:
        return DraftPersistenceResult(success=False, error="Unauthorized")

    org = await get_user_organization(db, user)
    if org is None or org.store_id is None:
        return DraftPersistenceResult(
            success=False, error="Store not found. Please complete initial setup."
        )
    store_id = org.store_id

    try:
        result = await db.execute(
            select(ProductDraft)
            .where(
                ProductDraft.id.in_(draft_ids),
                ProductDraft.store_id == store_id,
                ProductDraft.status == "draft",
            )
            .order_by(ProductDraft.created_at)
        )
        drafts = list(result.scalars().all())
    except SQLAlchemyError as e:
        logger.error(f"Failed to fetch drafts for store {store_id}: {e}")
        await db.rollback()
        return DraftPersistenceResult(success=False, error=f"Failed to fetch drafts: {e}")

    if not drafts:
        return DraftPersistenceResult(
            success=False, error="No drafts found or all drafts already persisted"
        )

    try:
        reserved: set[str] = set()
        products = []
        for draft in drafts:
            slug = await generate_product_slug(db, store_id, draft.name, reserved)
            products.append(_product_from_draft(draft, slug))
            draft.status = "persisted"

        db.add_all(products)
        await db.commit()
    except (SlugGenerationError, SQLAlchemyError) as e:
        logger.error(f"Failed to persist drafts for store {store_id}: {e}", exc_info=True)
        await db.rollback()
        return DraftPersistenceResult(success=False, error=f"Failed to insert products: {e}")

    product_ids = [p.id for p in products]
    logger.info(f"Persisted {len(product_ids)} drafts as products for store {store_id}")

    status_result = await update_onboarding_status(db, user, OnboardingStatus.COMPLETED)
    if not status_result.success:
        logger.error(
            f"Failed to update onboarding status after persisting drafts: "
            f"{status_result.error_code} {status_result.message or ''}"
        )

    await advance_workflow_for_context(
        db,
        merchant_id=user.id,
        stage_update=PersistenceComplete(product_ids=product_ids),
        batch_id=batch_id,
        store_id=store_id,
    )

    return DraftPersistenceResult(
        success=True,
        product_ids=product_ids,
        count=len(product_ids),
        message=f"Created {len(product_ids)} product(s)",
    )
