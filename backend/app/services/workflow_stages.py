"""Stage definitions for the AI workflows.

WORKFLOW_STAGES gives each workflow type its fixed stage list; the total is
snapshotted onto a workflow row when it is created.

ONBOARDING_WORKFLOW_STAGES is the detailed concierge onboarding flow, mapping
each stage to the generative UI component it renders and the agent action
that drives it.
"""

from dataclasses import dataclass

from app.models.store.workflow_state import WorkflowType


@dataclass(frozen=True)
class StageDefinition:
    stage: int
    name: str
    description: str
    generative_ui: str | None = None
    agent_action: str | None = None
    optional: bool = False


@dataclass(frozen=True)
class WorkflowDefinition:
    workflow_type: WorkflowType
    stages: tuple[StageDefinition, ...]

    @property
    def total(self) -> int:
        return len(self.stages)


ONBOARDING_WORKFLOW_STAGES: tuple[StageDefinition, ...] = (
    StageDefinition(1, "image_upload", "User uploads product images"),
    StageDefinition(
        2, "vision_analysis", "Vision agent groups images by similarity",
        generative_ui="ProgressCard", agent_action="delegate_to_vision",
    ),
    StageDefinition(
        3, "group_confirmation", "User reviews and confirms image grouping",
        generative_ui="QuestionCard", agent_action="ask_user",
    ),
    StageDefinition(
        4, "product_generation", "Product intel agent generates bilingual drafts",
        generative_ui="ProgressCard", agent_action="delegate_to_product_intel",
    ),
    StageDefinition(
        5, "draft_preview", "User reviews draft products in grid",
        generative_ui="DraftGrid", agent_action="render_draft_cards",
    ),
    StageDefinition(
        6, "draft_editing", "User edits individual drafts",
        generative_ui="BeforeAfterPreview", agent_action="delegate_to_editor",
        optional=True,
    ),
    StageDefinition(
        7, "persistence", "User approves and drafts are saved to database",
        generative_ui="ConfirmationCard", agent_action="confirm_and_persist",
    ),
)


WORKFLOW_STAGES: dict[WorkflowType, WorkflowDefinition] = {
    WorkflowType.ONBOARDING: WorkflowDefinition(
        WorkflowType.ONBOARDING, ONBOARDING_WORKFLOW_STAGES
    ),
    WorkflowType.BULK_IMAGE_TO_PRODUCTS: WorkflowDefinition(
        WorkflowType.BULK_IMAGE_TO_PRODUCTS,
        (
            StageDefinition(1, "Image Upload", "Upload images to storage"),
            StageDefinition(2, "Vision Analysis", "Group images by similarity"),
            StageDefinition(3, "Group Confirmation", "User reviews grouping"),
            StageDefinition(4, "Product Generation", "Generate bilingual drafts"),
            StageDefinition(5, "Draft Preview", "User reviews drafts"),
            StageDefinition(6, "Draft Editing", "User edits drafts", optional=True),
            StageDefinition(7, "Persistence", "Save to store products"),
        ),
    ),
    WorkflowType.PRODUCT_EDIT: WorkflowDefinition(
        WorkflowType.PRODUCT_EDIT,
        (
            StageDefinition(1, "Product Selection", "Select product to edit"),
            StageDefinition(2, "Edit Intent", "Parse user edit request"),
            StageDefinition(3, "Edit Execution", "Apply changes"),
            StageDefinition(4, "Preview", "Show before/after"),
            StageDefinition(5, "Confirmation", "Save changes"),
        ),
    ),
}


def get_workflow_definition(workflow_type: WorkflowType | str) -> WorkflowDefinition | None:
    try:
        return WORKFLOW_STAGES.get(WorkflowType(workflow_type))
    except ValueError:
        return None


def get_total_stages(workflow_type: WorkflowType | str = WorkflowType.ONBOARDING) -> int | None:
    definition = get_workflow_definition(workflow_type)
    return definition.total if definition else None


def get_stage_by_number(
    stage_number: int,
    workflow_type: WorkflowType | str = WorkflowType.ONBOARDING,
) -> StageDefinition | None:
    definition = get_workflow_definition(workflow_type)
    if not definition:
        return None
    return next((s for s in definition.stages if s.stage == stage_number), None)


def get_stage_name(
    stage_number: int,
    workflow_type: WorkflowType | str = WorkflowType.ONBOARDING,
) -> str:
    stage = get_stage_by_number(stage_number, workflow_type)
    return stage.name if stage else "unknown"


def is_stage_optional(
    stage_number: int,
    workflow_type: WorkflowType | str = WorkflowType.ONBOARDING,
) -> bool:
    stage = get_stage_by_number(stage_number, workflow_type)
    return stage.optional if stage else False
