"""Store-scoped product slug generation.

Slugs are derived from the product name and must be unique within a store:

    "Linen Shirt"  → linen-shirt
    (taken)        → linen-shirt-2, linen-shirt-3, …

Arabic and other non-Latin letters are kept as-is. Names with nothing
slug-able fall back to "product".

When a batch of products is being prepared for a single insert, pass the
same `reserved` set to every call so two drafts with the same name in one
batch do not collide with each other before either row exists.
"""

import re
import unicodedata

from sqlalchemy import or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.store.store_product import StoreProduct

FALLBACK_SLUG = "product"
MAX_SLUG_LENGTH = 200

_NON_WORD_RE = re.compile(r"[^\w]+", re.UNICODE)


class SlugGenerationError(Exception):
    """Raised when a unique slug cannot be produced for a product."""


def slugify_name(name: str) -> str:
    normalized = unicodedata.normalize("NFKC", name or "").lower()
    slug = _NON_WORD_RE.sub("-", normalized).replace("_", "-")
    slug = re.sub(r"-{2,}", "-", slug).strip("-")
    return slug[:MAX_SLUG_LENGTH].rstrip("-") or FALLBACK_SLUG


async def _taken_slugs(db: AsyncSession, store_id: str, base: str) -> set[str]:
    """Existing slugs in the store that equal `base` or extend it with a suffix."""
    result = await db.execute(
        select(StoreProduct.slug).where(
            StoreProduct.store_id == store_id,
            or_(StoreProduct.slug == base, StoreProduct.slug.like(f"{base}-%")),
        )
    )
    return set(result.scalars().all())


async def generate_product_slug(
    db: AsyncSession,
    store_id: str,
    name: str,
    reserved: set[str] | None = None,
) -> str:
    """Return a slug for `name` that is unused in `store_id`.

    Args:
        db: Database session
        store_id: Store the product will belong to
        name: Product display name
        reserved: Slugs already handed out for the current batch; the
            returned slug is added to it.

    Raises:
        SlugGenerationError if the existing slugs cannot be read.
    """
    base = slugify_name(name)

    try:
        taken = await _taken_slugs(db, store_id, base)
    except SQLAlchemyError as e:
        raise SlugGenerationError(f"Failed to generate slug for product: {name}") from e

    if reserved:
        taken |= reserved

    slug = base
    seq = 2
    while slug in taken:
        slug = f"{base}-{seq}"
        seq += 1

    if reserved is not None:
        reserved.add(slug)
    return slug
