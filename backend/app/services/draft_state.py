"""In-memory accumulator for concierge drafts.

Holds the store name, products and appearance proposed during an onboarding
conversation, each tagged with where it came from. Nothing in this module
touches the database: the only path from a draft to storage is an explicit
approval (see app.services.draft_approval).
"""

import uuid
from datetime import datetime, timezone
from typing import Any

from app.schemas.drafts import (
    DraftAppearance,
    DraftProduct,
    DraftSource,
    DraftStoreName,
    DraftStoreState,
    DraftStoreUpdates,
    ProductConfidence,
)


def _now() -> datetime:
    return datetime.now(timezone.utc)


def create_empty_draft_state() -> DraftStoreState:
    return DraftStoreState(products=[], last_updated=_now(), is_dirty=False)


def merge_draft_updates(
    current: DraftStoreState,
    updates: DraftStoreUpdates | dict[str, Any],
) -> DraftStoreState:
    """Merge a partial draft into `current` and return a new state.

    Products in `updates` are appended; any other key present in `updates`
    replaces the current value. The result is marked dirty.
    """
    if isinstance(updates, dict):
        updates = DraftStoreUpdates.model_validate(updates)

    changes: dict[str, Any] = {
        field: getattr(updates, field)
        for field in updates.model_fields_set
        if field != "products"
    }
    if updates.products:
        changes["products"] = [*current.products, *updates.products]

    return current.model_copy(
        update={**changes, "last_updated": _now(), "is_dirty": True}
    )


class DraftProductNotFound(KeyError):
    pass


class DraftStateContainer:
    """Mutable wrapper around a DraftStoreState.

    Every mutation tags provenance and marks the draft dirty. Use
    `snapshot()` to get an independent copy for approval.
    """

    def __init__(self, state: DraftStoreState | None = None):
        self._state = state.model_copy(deep=True) if state else create_empty_draft_state()

    @property
    def state(self) -> DraftStoreState:
        return self._state

    def _touch(self) -> None:
        self._state.last_updated = _now()
        self._state.is_dirty = True

    def _index_of(self, product_id: str) -> int:
        for i, product in enumerate(self._state.products):
            if product.id == product_id:
                return i
        raise DraftProductNotFound(product_id)

    # ── Mutations ────────────────────────────────────────────

    def set_store_name(self, value: str, source: DraftSource = "ai") -> DraftStoreName:
        name = DraftStoreName(
            value=value,
            source=source,
            confidence="user_provided" if source == "user" else "suggestion",
        )
        self._state.store_name = name
        self._touch()
        return name

    def add_product(
        self,
        product: DraftProduct | dict[str, Any],
        confidence: ProductConfidence | None = None,
    ) -> DraftProduct:
        if isinstance(product, dict):
            product = DraftProduct.model_validate(
                {"id": str(uuid.uuid4()), **product}
            )
        else:
            product = product.model_copy()
        if confidence is not None:
            product.confidence = confidence
        self._state.products.append(product)
        self._touch()
        return product

    def edit_product(self, product_id: str, **changes: Any) -> DraftProduct:
        """Apply merchant edits to a draft product.

        Raises DraftProductNotFound if no product has that id.
        """
        changes.pop("id", None)
        changes.pop("confidence", None)
        i = self._index_of(product_id)
        current = self._state.products[i]
        edited = DraftProduct.model_validate(
            {**current.model_dump(), **changes, "confidence": "user_edited"}
        )
        self._state.products[i] = edited
        self._touch()
        return edited

    def remove_product(self, product_id: str) -> DraftProduct:
        removed = self._state.products.pop(self._index_of(product_id))
        self._touch()
        return removed

    def set_appearance(self, **fields: Any) -> DraftAppearance:
        base = self._state.appearance.model_dump() if self._state.appearance else {}
        appearance = DraftAppearance.model_validate({**base, **fields})
        self._state.appearance = appearance
        self._touch()
        return appearance

    def merge_updates(self, updates: DraftStoreUpdates | dict[str, Any]) -> DraftStoreState:
        self._state = merge_draft_updates(self._state, updates)
        return self._state

    def clear(self) -> None:
        self._state = create_empty_draft_state()

    # ── Queries ──────────────────────────────────────────────

    def has_content(self) -> bool:
        s = self._state
        return s.has_store_name or s.has_products or s.has_appearance

    def snapshot(self) -> DraftStoreState:
        return self._state.model_copy(deep=True)
