"""Tracks AI workflow progress per conversation.

One row per workflow instance (created when a workflow starts, never
deleted, so the table doubles as an onboarding audit trail).
`stage_data` accumulates: every stage advance merges its keys into the
existing blob. UI components read `image_groups`, `draft_ids` and
`product_ids` from it by convention.
"""

import enum
import uuid
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Integer, JSON, String
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base, utcnow


class WorkflowType(str, enum.Enum):
    ONBOARDING = "onboarding"
    BULK_IMAGE_TO_PRODUCTS = "bulk_image_to_products"
    PRODUCT_EDIT = "product_edit"
    MARKETING_CAMPAIGN = "marketing_campaign"
    BULK_EDIT = "bulk_edit"


class WorkflowStatus(str, enum.Enum):
    IN_PROGRESS = "in_progress"
    PAUSED = "paused"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class WorkflowState(Base):
    __tablename__ = "ai_workflow_state"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    conversation_id: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    merchant_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id"), nullable=False, index=True
    )
    store_id: Mapped[str | None] = mapped_column(String(36), ForeignKey("stores.id"))
    workflow_type: Mapped[str] = mapped_column(String(50), nullable=False)
    current_stage: Mapped[int] = mapped_column(Integer, default=1)
    # Snapshot of the workflow definition at creation time
    total_stages: Mapped[int] = mapped_column(Integer, nullable=False)
    stage_data: Mapped[dict | None] = mapped_column(JSON, default=dict)
    status: Mapped[str] = mapped_column(String(20), default=WorkflowStatus.IN_PROGRESS.value)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow
    )
