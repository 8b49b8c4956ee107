"""Draft store content proposed by the AI concierge or typed by the merchant.

Drafts live client-side (and in `DraftStateContainer` server-side) and are
never written to storage until the merchant explicitly approves them.
"""

from datetime import datetime, timezone
from typing import Literal

from pydantic import BaseModel, Field

StoreNameConfidence = Literal["suggestion", "user_provided"]
DraftSource = Literal["ai", "user"]
ProductConfidence = Literal["ai_generated", "user_edited"]
AIConfidence = Literal["high", "medium", "low"]


def _now() -> datetime:
    return datetime.now(timezone.utc)


class DraftStoreName(BaseModel):
    value: str
    confidence: StoreNameConfidence = "suggestion"
    source: DraftSource = "ai"


class DraftProduct(BaseModel):
    id: str
    name: str
    name_ar: str | None = None
    description: str | None = None
    description_ar: str | None = None
    price: float | None = None
    category: str | None = None
    category_ar: str | None = None
    image_url: str | None = None
    images: list[str] = Field(default_factory=list)
    confidence: ProductConfidence = "ai_generated"
    ai_confidence: AIConfidence | None = None


class DraftAppearance(BaseModel):
    primary_color: str | None = None
    accent_color: str | None = None
    font_family: str | None = None
    logo_preview_url: str | None = None


class DraftStoreState(BaseModel):
    store_name: DraftStoreName | None = None
    products: list[DraftProduct] = Field(default_factory=list)
    appearance: DraftAppearance | None = None

    # Meta
    last_updated: datetime = Field(default_factory=_now)
    is_dirty: bool = False

    @property
    def has_store_name(self) -> bool:
        return bool(self.store_name and self.store_name.value)

    @property
    def has_products(self) -> bool:
        return len(self.products) > 0

    @property
    def has_appearance(self) -> bool:
        return self.appearance is not None


class DraftStoreUpdates(BaseModel):
    """Partial draft as emitted by the AI (`draft_updates`)."""
    store_name: DraftStoreName | None = None
    products: list[DraftProduct] | None = None
    appearance: DraftAppearance | None = None
