"""Pydantic schemas for AI workflow tracking.

`stage_data` on a workflow is an open JSON mapping. The stage update models
below give the well-known payloads a shape while letting unknown keys pass
through untouched (extra="allow").
"""

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from app.models.store.workflow_state import WorkflowType


# ── Stage updates ────────────────────────────────────────────

class StageUpdate(BaseModel):
    model_config = ConfigDict(extra="allow")

    stage_name: str | None = None

    def as_stage_data(self) -> dict[str, Any]:
        """Flatten to the dict merged into `stage_data` (unset keys dropped)."""
        return self.model_dump(mode="json", exclude_unset=True)


class VisionComplete(StageUpdate):
    stage_name: Literal["vision_complete"] = "vision_complete"
    image_groups: list[Any] = Field(default_factory=list)

    def as_stage_data(self) -> dict[str, Any]:
        return self.model_dump(mode="json")


class DraftsGenerated(StageUpdate):
    stage_name: Literal["drafts_generated"] = "drafts_generated"
    draft_ids: list[str] = Field(default_factory=list)

    def as_stage_data(self) -> dict[str, Any]:
        return self.model_dump(mode="json")


class PersistenceComplete(StageUpdate):
    stage_name: Literal["persistence_complete"] = "persistence_complete"
    product_ids: list[str] = Field(default_factory=list)

    def as_stage_data(self) -> dict[str, Any]:
        return self.model_dump(mode="json")


# ── Requests ─────────────────────────────────────────────────

class WorkflowCreate(BaseModel):
    conversation_id: str
    workflow_type: WorkflowType = WorkflowType.ONBOARDING
    total_stages: int | None = Field(default=None, ge=1)
    initial_data: dict[str, Any] | None = None


# ── Responses ────────────────────────────────────────────────

class WorkflowStateOut(BaseModel):
    id: str
    conversation_id: str
    merchant_id: str
    store_id: str | None = None
    workflow_type: str
    current_stage: int
    total_stages: int
    stage_data: dict[str, Any] | None = None
    status: str
    created_at: datetime | None = None
    updated_at: datetime | None = None
    completed_at: datetime | None = None

    model_config = {"from_attributes": True}


class WorkflowProgress(BaseModel):
    current_stage: int
    total_stages: int
    percentage: int
    is_complete: bool


class WorkflowActionResult(BaseModel):
    success: bool


class StageDefinitionOut(BaseModel):
    stage: int
    name: str
    description: str
    generative_ui: str | None = None
    agent_action: str | None = None
    optional: bool = False
