"""AI workflow state tracking: pause/resume-able multi-stage workflows.

Bookkeeping only. Nothing here is safety-critical, so every operation logs
and swallows storage errors, returning None / False so the conversation can
carry on even when progress tracking fails. Each write commits on its own
and a failed write rolls the session back before returning.

Stage rules:
  - current_stage starts at 1 and never decreases
  - advancing past the last stage pins current_stage at total_stages
  - status becomes "completed" when current_stage reaches total_stages;
    completed_at is stamped once, on that transition
  - stage_data accumulates: each advance/patch is shallow-merged into it
  - paused and cancelled workflows cannot be advanced
"""

import logging
import math
from typing import Any, Mapping

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import utcnow
from app.models.store.workflow_state import WorkflowState, WorkflowStatus, WorkflowType
from app.schemas.workflow import StageUpdate, WorkflowProgress
from app.services.workflow_stages import get_total_stages

logger = logging.getLogger(__name__)

StageData = Mapping[str, Any] | StageUpdate

# Paused and cancelled workflows change status only through resume / cancel
ADVANCEABLE_STATUSES = {WorkflowStatus.IN_PROGRESS.value, WorkflowStatus.COMPLETED.value}


def _as_stage_data(update: StageData | None) -> dict[str, Any]:
    if update is None:
        return {}
    if isinstance(update, StageUpdate):
        return update.as_stage_data()
    return dict(update)


async def _rollback(db: AsyncSession) -> None:
    try:
        await db.rollback()
    except SQLAlchemyError:
        logger.exception("Rollback after workflow state error failed")


async def _fetch(db: AsyncSession, workflow_id: str) -> WorkflowState | None:
    result = await db.execute(
        select(WorkflowState).where(WorkflowState.id == workflow_id)
    )
    return result.scalar_one_or_none()


async def create_workflow_state(
    db: AsyncSession,
    conversation_id: str,
    merchant_id: str,
    workflow_type: WorkflowType | str,
    total_stages: int | None = None,
    initial_data: StageData | None = None,
    store_id: str | None = None,
) -> WorkflowState | None:
    """Start a workflow at stage 1. Returns None if it cannot be stored."""
    workflow_type = WorkflowType(workflow_type)
    if total_stages is None:
        total_stages = get_total_stages(workflow_type)
    if not total_stages:
        logger.error(
            "Cannot create workflow state: no stage definition for %s and no total given",
            workflow_type.value,
        )
        return None

    state = WorkflowState(
        conversation_id=conversation_id,
        merchant_id=merchant_id,
        store_id=store_id,
        workflow_type=workflow_type.value,
        current_stage=1,
        total_stages=total_stages,
        stage_data=_as_stage_data(initial_data),
        status=WorkflowStatus.IN_PROGRESS.value,
        completed_at=None,
    )
    try:
        db.add(state)
        await db.commit()
    except SQLAlchemyError:
        logger.exception("Failed to create workflow state for conversation %s", conversation_id)
        await _rollback(db)
        return None
    return state


async def get_workflow_state(
    db: AsyncSession,
    conversation_id: str,
) -> WorkflowState | None:
    """Most recent in-progress workflow for a conversation, if any."""
    try:
        result = await db.execute(
            select(WorkflowState)
            .where(
                WorkflowState.conversation_id == conversation_id,
                WorkflowState.status == WorkflowStatus.IN_PROGRESS.value,
            )
            .order_by(WorkflowState.created_at.desc())
            .limit(1)
        )
        return result.scalars().first()
    except SQLAlchemyError:
        logger.exception("Failed to get workflow state for conversation %s", conversation_id)
        await _rollback(db)
        return None


async def get_workflow_state_by_id(
    db: AsyncSession,
    workflow_id: str,
) -> WorkflowState | None:
    try:
        return await _fetch(db, workflow_id)
    except SQLAlchemyError:
        logger.exception("Failed to get workflow state %s", workflow_id)
        await _rollback(db)
        return None


async def advance_workflow_stage(
    db: AsyncSession,
    workflow_id: str,
    stage_update: StageData,
) -> bool:
    """Move to the next stage and merge `stage_update` into stage_data."""
    data = _as_stage_data(stage_update)

    try:
        state = await _fetch(db, workflow_id)
    except SQLAlchemyError:
        logger.exception("Failed to fetch workflow state %s", workflow_id)
        await _rollback(db)
        return False

    if state is None:
        logger.error("Cannot advance workflow %s: not found", workflow_id)
        return False

    if state.status not in ADVANCEABLE_STATUSES:
        logger.warning("Refusing to advance workflow %s while %s", workflow_id, state.status)
        return False

    next_stage = min(state.current_stage + 1, state.total_stages)
    now = utcnow()

    state.current_stage = next_stage
    state.stage_data = {**(state.stage_data or {}), **data}
    if next_stage == state.total_stages:
        state.status = WorkflowStatus.COMPLETED.value
        if state.completed_at is None:
            state.completed_at = now
    else:
        state.status = WorkflowStatus.IN_PROGRESS.value
    state.updated_at = now

    try:
        await db.commit()
    except SQLAlchemyError:
        logger.exception("Failed to update workflow state %s", workflow_id)
        await _rollback(db)
        return False

    logger.info(
        "Workflow %s advanced to stage %d/%d (%s)",
        workflow_id, next_stage, state.total_stages, data.get("stage_name", "-"),
    )
    return True


async def update_workflow_data(
    db: AsyncSession,
    workflow_id: str,
    patch: StageData,
) -> bool:
    """Merge `patch` into stage_data without touching stage or status."""
    data = _as_stage_data(patch)
    try:
        state = await _fetch(db, workflow_id)
        if state is None:
            logger.error("Cannot update workflow data for %s: not found", workflow_id)
            return False
        state.stage_data = {**(state.stage_data or {}), **data}
        state.updated_at = utcnow()
        await db.commit()
    except SQLAlchemyError:
        logger.exception("Failed to update workflow data for %s", workflow_id)
        await _rollback(db)
        return False
    return True


async def _set_status(
    db: AsyncSession,
    workflow_id: str,
    status: WorkflowStatus,
    allowed_from: set[WorkflowStatus],
) -> bool:
    try:
        state = await _fetch(db, workflow_id)
        if state is None:
            logger.error("Cannot set workflow %s to %s: not found", workflow_id, status.value)
            return False
        if WorkflowStatus(state.status) not in allowed_from:
            logger.warning(
                "Refusing to move workflow %s from %s to %s",
                workflow_id, state.status, status.value,
            )
            return False
        state.status = status.value
        state.updated_at = utcnow()
        await db.commit()
    except SQLAlchemyError:
        logger.exception("Failed to set workflow %s to %s", workflow_id, status.value)
        await _rollback(db)
        return False
    return True


async def pause_workflow(db: AsyncSession, workflow_id: str) -> bool:
    """Pause an in-progress workflow so the merchant can resume later."""
    return await _set_status(
        db, workflow_id, WorkflowStatus.PAUSED, {WorkflowStatus.IN_PROGRESS}
    )


async def resume_workflow(db: AsyncSession, workflow_id: str) -> bool:
    return await _set_status(
        db, workflow_id, WorkflowStatus.IN_PROGRESS, {WorkflowStatus.PAUSED}
    )


async def cancel_workflow(db: AsyncSession, workflow_id: str) -> bool:
    return await _set_status(
        db, workflow_id, WorkflowStatus.CANCELLED,
        {WorkflowStatus.IN_PROGRESS, WorkflowStatus.PAUSED},
    )


def get_workflow_progress(state: WorkflowState) -> WorkflowProgress:
    """Progress summary; percentage is rounded half-up."""
    percentage = math.floor(state.current_stage / state.total_stages * 100 + 0.5)
    return WorkflowProgress(
        current_stage=state.current_stage,
        total_stages=state.total_stages,
        percentage=percentage,
        is_complete=state.status == WorkflowStatus.COMPLETED.value,
    )


async def advance_workflow_for_context(
    db: AsyncSession,
    merchant_id: str,
    stage_update: StageData,
    batch_id: str | None = None,
    store_id: str | None = None,
) -> bool:
    """Advance the merchant's onboarding workflow, starting one if needed.

    The conversation is keyed by the upload batch when there is one, else
    by `onboarding-{merchant_id}`. A freshly started workflow is seeded
    with `stage_update` as its initial data and stays at stage 1.
    """
    conversation_id = batch_id or f"onboarding-{merchant_id}"

    workflow = await get_workflow_state(db, conversation_id)
    if workflow is None:
        created = await create_workflow_state(
            db,
            conversation_id=conversation_id,
            merchant_id=merchant_id,
            workflow_type=WorkflowType.ONBOARDING,
            initial_data=stage_update,
            store_id=store_id,
        )
        return created is not None

    if workflow.merchant_id != merchant_id:
        logger.warning(
            "Workflow %s for conversation %s belongs to another merchant",
            workflow.id, conversation_id,
        )
        return False

    return await advance_workflow_stage(db, workflow.id, stage_update)
