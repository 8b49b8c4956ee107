"""AI workflow progress endpoints.

Endpoints:
  POST  /api/workflows/                          → start a workflow
  GET   /api/workflows/stages                    → stage definitions for a type
  GET   /api/workflows/conversation/{conv_id}    → in-progress workflow for a conversation
  GET   /api/workflows/{id}                      → workflow by id
  GET   /api/workflows/{id}/progress             → stage / percentage summary
  POST  /api/workflows/{id}/advance              → move to next stage, merge stage data
  PATCH /api/workflows/{id}/data                 → merge stage data only
  POST  /api/workflows/{id}/pause|resume|cancel  → status changes

All rows are scoped to the caller: a workflow owned by another merchant
answers 404.
"""

from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.deps import get_current_user
from app.database import get_db
from app.middleware.exceptions import ResourceNotFoundError
from app.models.public.user import User
from app.models.store.workflow_state import WorkflowState, WorkflowType
from app.schemas.workflow import (
    StageDefinitionOut,
    StageUpdate,
    WorkflowActionResult,
    WorkflowCreate,
    WorkflowProgress,
    WorkflowStateOut,
)
from app.services.organizations import get_user_organization
from app.services.workflow_stages import get_workflow_definition
from app.services.workflow_state import (
    advance_workflow_stage,
    cancel_workflow,
    create_workflow_state,
    get_workflow_progress,
    get_workflow_state,
    get_workflow_state_by_id,
    pause_workflow,
    resume_workflow,
    update_workflow_data,
)

router = APIRouter()


# ── Helpers ──────────────────────────────────────────────────

async def _get_owned_workflow(db: AsyncSession, workflow_id: str, user: User) -> WorkflowState:
    state = await get_workflow_state_by_id(db, workflow_id)
    if not state or state.merchant_id != user.id:
        raise ResourceNotFoundError("Workflow", workflow_id)
    return state


# ── Endpoints ────────────────────────────────────────────────

@router.post("/", response_model=WorkflowStateOut, status_code=status.HTTP_201_CREATED)
async def start_workflow(
    body: WorkflowCreate,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    org = await get_user_organization(db, user)
    state = await create_workflow_state(
        db,
        conversation_id=body.conversation_id,
        merchant_id=user.id,
        workflow_type=body.workflow_type,
        total_stages=body.total_stages,
        initial_data=body.initial_data,
        store_id=org.store_id if org else None,
    )
    if state is None:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create workflow",
        )
    return state


@router.get("/stages", response_model=list[StageDefinitionOut])
async def list_stage_definitions(
    workflow_type: WorkflowType = Query(WorkflowType.ONBOARDING),
    user: User = Depends(get_current_user),
):
    definition = get_workflow_definition(workflow_type)
    if definition is None:
        raise HTTPException(
            status_code=404,
            detail=f"No stage definition for workflow type {workflow_type.value}",
        )
    return [StageDefinitionOut.model_validate(s, from_attributes=True) for s in definition.stages]


@router.get("/conversation/{conversation_id}", response_model=WorkflowStateOut)
async def get_conversation_workflow(
    conversation_id: str,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    state = await get_workflow_state(db, conversation_id)
    if not state or state.merchant_id != user.id:
        raise HTTPException(status_code=404, detail="No workflow in progress")
    return state


@router.get("/{workflow_id}", response_model=WorkflowStateOut)
async def get_workflow(
    workflow_id: str,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return await _get_owned_workflow(db, workflow_id, user)


@router.get("/{workflow_id}/progress", response_model=WorkflowProgress)
async def workflow_progress(
    workflow_id: str,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    state = await _get_owned_workflow(db, workflow_id, user)
    return get_workflow_progress(state)


@router.post("/{workflow_id}/advance", response_model=WorkflowActionResult)
async def advance_workflow(
    workflow_id: str,
    body: StageUpdate,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    await _get_owned_workflow(db, workflow_id, user)
    return WorkflowActionResult(success=await advance_workflow_stage(db, workflow_id, body))


@router.patch("/{workflow_id}/data", response_model=WorkflowActionResult)
async def patch_workflow_data(
    workflow_id: str,
    patch: dict[str, Any] = Body(...),
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    await _get_owned_workflow(db, workflow_id, user)
    return WorkflowActionResult(success=await update_workflow_data(db, workflow_id, patch))


@router.post("/{workflow_id}/pause", response_model=WorkflowActionResult)
async def pause(
    workflow_id: str,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    await _get_owned_workflow(db, workflow_id, user)
    return WorkflowActionResult(success=await pause_workflow(db, workflow_id))


@router.post("/{workflow_id}/resume", response_model=WorkflowActionResult)
async def resume(
    workflow_id: str,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    await _get_owned_workflow(db, workflow_id, user)
    return WorkflowActionResult(success=await resume_workflow(db, workflow_id))


@router.post("/{workflow_id}/cancel", response_model=WorkflowActionResult)
async def cancel(
    workflow_id: str,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    await _get_owned_workflow(db, workflow_id, user)
    return WorkflowActionResult(success=await cancel_workflow(db, workflow_id))
