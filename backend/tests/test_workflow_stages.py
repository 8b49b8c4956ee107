"""Tests for workflow stage definitions."""

import pytest

from app.models.store.workflow_state import WorkflowType
from app.services.workflow_stages import (
    ONBOARDING_WORKFLOW_STAGES,
    WORKFLOW_STAGES,
    get_stage_by_number,
    get_stage_name,
    get_total_stages,
    is_stage_optional,
)


@pytest.mark.workflow
@pytest.mark.unit
class TestStageDefinitions:

    def test_totals(self):
        assert get_total_stages(WorkflowType.ONBOARDING) == 7
        assert get_total_stages("bulk_image_to_products") == 7
        assert get_total_stages(WorkflowType.PRODUCT_EDIT) == 5
        assert get_total_stages(WorkflowType.BULK_EDIT) is None
        assert get_total_stages("not-a-workflow") is None

    def test_stages_are_numbered_from_one(self):
        for definition in WORKFLOW_STAGES.values():
            numbers = [s.stage for s in definition.stages]
            assert numbers == list(range(1, definition.total + 1))

    def test_onboarding_stage_names(self):
        names = [s.name for s in ONBOARDING_WORKFLOW_STAGES]
        assert names[0] == "image_upload"
        assert names[-1] == "persistence"
        assert get_stage_name(2) == "vision_analysis"
        assert get_stage_name(99) == "unknown"

    def test_stage_lookup(self):
        stage = get_stage_by_number(5)
        assert stage.generative_ui == "DraftGrid"
        assert stage.agent_action == "render_draft_cards"
        assert get_stage_by_number(0) is None
        assert get_stage_by_number(1, "not-a-workflow") is None

    def test_optional_stages(self):
        assert is_stage_optional(6) is True
        assert is_stage_optional(7) is False
        assert is_stage_optional(6, WorkflowType.BULK_IMAGE_TO_PRODUCTS) is True
        assert is_stage_optional(42) is False
