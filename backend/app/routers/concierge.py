"""AI concierge persistence endpoints.

Endpoints:
  POST /api/concierge/approve-draft   → commit an approved draft (store name,
                                        products, appearance)
  POST /api/concierge/persist-drafts  → promote stored product drafts to
                                        store products

These are the only concierge endpoints that write. Both act on the caller's
own store; store ids are never read from the request.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.deps import get_current_user, get_optional_user
from app.database import get_db
from app.models.public.user import User
from app.schemas.concierge import ApproveDraftRequest, PersistDraftsRequest
from app.schemas.onboarding import DraftPersistenceResult
from app.services.draft_approval import approve_draft
from app.services.draft_persistence import persist_product_drafts

router = APIRouter()


@router.post("/approve-draft")
async def approve_draft_endpoint(
    body: ApproveDraftRequest,
    db: AsyncSession = Depends(get_db),
    user: User | None = Depends(get_optional_user),
):
    """Save the merchant's approved draft.

    Returns `{success, message, saved: {store_name, products, appearance},
    note?}`. Failures are rendered as `{error, details?}` with 400, 401, 404
    or 500 by the DraftApprovalError handler.
    """
    result = await approve_draft(db, user, body.draft_state, body.context)
    return result.model_dump(exclude_none=True)


@router.post("/persist-drafts", response_model=DraftPersistenceResult)
async def persist_drafts_endpoint(
    body: PersistDraftsRequest,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return await persist_product_drafts(db, user, body.draft_ids, body.batch_id)
