"""AI-generated product drafts awaiting merchant confirmation.

Rows are written by the product-intelligence agent (outside this service).
The bulk persistence flow turns `draft` rows into store products and marks
them `persisted`, so a draft is promoted at most once.
"""

import uuid
from datetime import datetime

from sqlalchemy import DateTime, Float, ForeignKey, JSON, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base, utcnow


class ProductDraft(Base):
    __tablename__ = "product_drafts"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    store_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("stores.id"), nullable=False, index=True
    )
    batch_id: Mapped[str | None] = mapped_column(String(36), index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    name_ar: Mapped[str | None] = mapped_column(String(255))
    description: Mapped[str | None] = mapped_column(Text)
    description_ar: Mapped[str | None] = mapped_column(Text)
    category: Mapped[str | None] = mapped_column(String(100))
    category_ar: Mapped[str | None] = mapped_column(String(100))
    tags: Mapped[list | None] = mapped_column(JSON, default=list)
    suggested_price: Mapped[float | None] = mapped_column(Float)
    primary_image_url: Mapped[str | None] = mapped_column(String(1024))
    image_urls: Mapped[list | None] = mapped_column(JSON, default=list)
    ai_confidence: Mapped[str | None] = mapped_column(String(10))
    status: Mapped[str] = mapped_column(String(20), default="draft")  # draft | persisted
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
