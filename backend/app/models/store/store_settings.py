"""Per-merchant storefront settings.

One row per merchant (unique merchant_id), upserted by the draft approval
flow. `ai_preferences` is a free-form blob shared with other features, so
writers must merge into it rather than replace it.
"""

import uuid
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, JSON, String
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base, utcnow


class StoreSettings(Base):
    __tablename__ = "store_settings"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    merchant_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id"), unique=True, nullable=False
    )
    store_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("stores.id"), nullable=False, index=True
    )
    ai_preferences: Mapped[dict | None] = mapped_column(JSON, default=None)
    # {"primary_color", "accent_color", "font_family", "logo_url"}
    appearance: Mapped[dict | None] = mapped_column(JSON, default=None)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow
    )
