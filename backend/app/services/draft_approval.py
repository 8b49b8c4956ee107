"""Commit an approved concierge draft to the merchant's store.

This is the only code path that writes AI-proposed content to storage, and
it only runs on an explicit approval from the merchant. There is no
multi-statement transaction; writes happen in a fixed order and each one
commits at its own boundary:

  1. store settings upsert          (failure aborts with 500)
  2. store name mirror              (best-effort)
  3. product slugs + batch insert   (failure aborts with 500)
  4. onboarding flag → completed    (best-effort)

Products are inserted before the flag is flipped, so a retry after a
failed insert will try again, and a retry after a successful one hits the
idempotency guard: once onboarding is completed and the store has
products, a draft with products is acknowledged without writing anything.
"""

import logging

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.database import utcnow
from app.middleware.exceptions import DraftApprovalError
from app.models.public.organization import OnboardingStatus, Store
from app.models.public.user import User
from app.models.store.store_product import StoreProduct
from app.models.store.store_settings import StoreSettings
from app.schemas.concierge import ConciergeContext
from app.schemas.drafts import DraftAppearance, DraftProduct, DraftStoreState
from app.schemas.onboarding import DraftApprovalResult, SavedSummary
from app.schemas.workflow import PersistenceComplete
from app.services.onboarding_gate import remember_onboarding_status
from app.services.onboarding_status import set_store_onboarding_flag
from app.services.organizations import get_user_organization
from app.services.workflow_state import advance_workflow_for_context
from app.utils.slugs import SlugGenerationError, generate_product_slug

logger = logging.getLogger(__name__)

DEFAULT_PRIMARY_COLOR = "#000000"
DEFAULT_ACCENT_COLOR = "#6366f1"
DEFAULT_FONT_FAMILY = "Inter"
DEFAULT_AI_CONFIDENCE = "medium"


# ── Write steps ──────────────────────────────────────────────

def _appearance_settings(appearance: DraftAppearance) -> dict:
    return {
        "primary_color": appearance.primary_color or DEFAULT_PRIMARY_COLOR,
        "accent_color": appearance.accent_color or DEFAULT_ACCENT_COLOR,
        "font_family": appearance.font_family or DEFAULT_FONT_FAMILY,
        "logo_url": appearance.logo_preview_url or None,
    }


async def upsert_store_settings(
    db: AsyncSession,
    merchant_id: str,
    store_id: str,
    draft: DraftStoreState,
) -> None:
    """Create or update the merchant's settings row from the draft.

    `ai_preferences` is merged key by key; unrelated keys are kept.
    """
    result = await db.execute(
        select(StoreSettings).where(StoreSettings.merchant_id == merchant_id)
    )
    row = result.scalar_one_or_none()
    if row is None:
        row = StoreSettings(merchant_id=merchant_id, store_id=store_id)
        db.add(row)

    now = utcnow()
    row.store_id = store_id
    if draft.has_store_name:
        row.ai_preferences = {
            **(row.ai_preferences or {}),
            "store_name": draft.store_name.value,
            "onboarding_draft_saved": True,
            "last_draft_save": now.isoformat(),
        }
    if draft.has_appearance:
        row.appearance = _appearance_settings(draft.appearance)
    row.updated_at = now
    await db.commit()


async def _mirror_store_name(db: AsyncSession, store_id: str, name: str) -> None:
    try:
        await db.execute(
            update(Store)
            .where(Store.id == store_id)
            .values(name=name, updated_at=utcnow())
        )
        await db.commit()
    except SQLAlchemyError as e:
        logger.error(f"Store name update failed for store {store_id}: {e}")
        await db.rollback()


def build_store_product(store_id: str, product: DraftProduct, slug: str) -> StoreProduct:
    ai_generated = product.confidence == "ai_generated"
    images = product.images or ([product.image_url] if product.image_url else [])
    return StoreProduct(
        store_id=store_id,
        name=product.name,
        name_ar=product.name_ar or None,
        slug=slug,
        description=product.description or None,
        description_ar=product.description_ar or None,
        price=product.price or 0,
        currency=settings.default_currency,
        category=product.category or None,
        category_ar=product.category_ar or product.category or None,
        tags=[],
        image_url=product.image_url or None,
        images=images,
        status="active",
        ai_generated=ai_generated,
        ai_confidence=(product.ai_confidence or DEFAULT_AI_CONFIDENCE) if ai_generated else None,
    )


async def insert_store_products(db: AsyncSession, rows: list[StoreProduct]) -> list[str]:
    """Insert all rows in one flush and commit. Returns the new product ids."""
    db.add_all(rows)
    await db.commit()
    return [row.id for row in rows]


async def _store_has_products(db: AsyncSession, store_id: str) -> bool:
    result = await db.execute(
        select(StoreProduct.id).where(StoreProduct.store_id == store_id).limit(1)
    )
    return result.first() is not None


# ── Entry point ──────────────────────────────────────────────

async def approve_draft(
    db: AsyncSession,
    user: User | None,
    draft_state: DraftStoreState | None,
    context: ConciergeContext | None = None,
) -> DraftApprovalResult:
    """Persist an approved draft for the caller's store.

    Raises:
        DraftApprovalError: 401 unauthenticated, 400 missing/empty draft,
            404 no store, 500 when settings, slugs or products fail.
    """
    # 1. Authenticate
    if user is None:
        raise DraftApprovalError("Unauthorized", 401, "UNAUTHORIZED")
    user_id = user.id

    # 2. Validate
    if draft_state is None:
        raise DraftApprovalError("Missing draft state", 400, "MISSING_DRAFT_STATE")

    has_store_name = draft_state.has_store_name
    has_products = draft_state.has_products
    has_appearance = draft_state.has_appearance

    if not (has_store_name or has_products or has_appearance):
        raise DraftApprovalError("Nothing to save", 400, "NOTHING_TO_SAVE")

    # 3. Resolve the caller's store
    org = await get_user_organization(db, user)
    if org is None or org.store_id is None:
        raise DraftApprovalError(
            "Store not found. Please complete initial setup.", 404, "STORE_NOT_FOUND"
        )
    store_id = org.store_id

    try:
        return await _commit_draft(
            db, user_id, store_id, org.onboarding_completed, draft_state, context,
            has_store_name=has_store_name,
            has_products=has_products,
            has_appearance=has_appearance,
        )
    except DraftApprovalError:
        raise
    except Exception as e:
        logger.error(
            f"Draft approval failed for user {user_id}: {e}",
            extra={"store_id": store_id},
            exc_info=True,
        )
        await db.rollback()
        raise DraftApprovalError(
            "Failed to save draft", 500, "DRAFT_SAVE_FAILED", details=str(e) or "Unknown error"
        ) from e


async def _commit_draft(
    db: AsyncSession,
    user_id: str,
    store_id: str,
    onboarding_completed: str | None,
    draft: DraftStoreState,
    context: ConciergeContext | None,
    *,
    has_store_name: bool,
    has_products: bool,
    has_appearance: bool,
) -> DraftApprovalResult:
    # 4. Idempotency guard
    already_saved = False
    if onboarding_completed == OnboardingStatus.COMPLETED.value and has_products:
        try:
            already_saved = await _store_has_products(db, store_id)
        except SQLAlchemyError as e:
            logger.error(f"Error checking existing products for store {store_id}: {e}")
            await db.rollback()
    if already_saved:
        logger.warning(
            f"Products already exist for store {store_id}; skipping duplicate approval"
        )
        return DraftApprovalResult(
            message="Draft already saved previously",
            saved=SavedSummary(
                store_name=has_store_name, products=0, appearance=has_appearance
            ),
            note="Onboarding was already completed. Only updating store settings.",
        )

    logger.info(f"Starting draft approval for user {user_id}, store {store_id}")

    # 5a. Settings, then the store name mirror
    if has_store_name or has_appearance:
        try:
            await upsert_store_settings(db, user_id, store_id, draft)
        except SQLAlchemyError as e:
            await db.rollback()
            raise DraftApprovalError(
                "Failed to save store settings", 500, "SETTINGS_SAVE_FAILED"
            ) from e

    if has_store_name:
        await _mirror_store_name(db, store_id, draft.store_name.value)

    saved = SavedSummary(store_name=has_store_name, products=0, appearance=has_appearance)

    # 5b. Products: every slug first, then one insert
    product_ids: list[str] = []
    if has_products:
        reserved: set[str] = set()
        rows = []
        for product in draft.products:
            try:
                slug = await generate_product_slug(db, store_id, product.name, reserved)
            except SlugGenerationError as e:
                await db.rollback()
                raise DraftApprovalError(
                    "Failed to save draft", 500, "SLUG_GENERATION_FAILED", details=str(e)
                ) from e
            rows.append(build_store_product(store_id, product, slug))

        try:
            product_ids = await insert_store_products(db, rows)
        except SQLAlchemyError as e:
            await db.rollback()
            raise DraftApprovalError(
                "Failed to save products", 500, "PRODUCTS_INSERT_FAILED",
                details=str(getattr(e, "orig", None) or e),
            ) from e

        logger.info(f"Inserted {len(product_ids)} products for store {store_id}")
        saved.products = len(product_ids)

    # 5c. Flag flip
    flag_saved = True
    try:
        await set_store_onboarding_flag(db, store_id, OnboardingStatus.COMPLETED)
    except SQLAlchemyError as e:
        flag_saved = False
        logger.error(f"Onboarding status update failed for store {store_id}: {e}")
        await db.rollback()

    if flag_saved:
        await remember_onboarding_status(user_id, OnboardingStatus.COMPLETED.value, store_id)

    batch_id = context.ui_context.batch_id if context else None
    await advance_workflow_for_context(
        db,
        merchant_id=user_id,
        stage_update=PersistenceComplete(product_ids=product_ids),
        batch_id=batch_id,
        store_id=store_id,
    )

    logger.info(f"Draft approved for user {user_id}; onboarding marked completed")
    return DraftApprovalResult(message="Draft saved successfully", saved=saved)
