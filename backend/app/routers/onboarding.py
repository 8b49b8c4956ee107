"""Onboarding status endpoints.

Endpoints:
  GET  /api/onboarding/gate     → should the concierge onboarding be shown?
  PUT  /api/onboarding/status   → set onboarding status
  POST /api/onboarding/complete → mark onboarding completed
  POST /api/onboarding/skip     → mark onboarding skipped

Status updates answer `{success: true, status}` or
`{success: false, errorCode, message?}`; the HTTP status mirrors the error
code (401 unauthorized, 404 no_store, 500 database_error).
"""

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.deps import get_current_user, get_optional_user
from app.database import get_db
from app.models.public.user import User
from app.schemas.onboarding import (
    OnboardingGate,
    OnboardingStatusResult,
    OnboardingStatusUpdate,
)
from app.services.onboarding_gate import resolve_onboarding_gate
from app.services.onboarding_status import (
    complete_onboarding,
    skip_onboarding,
    update_onboarding_status,
)

router = APIRouter()

ERROR_STATUS_CODES = {
    "unauthorized": status.HTTP_401_UNAUTHORIZED,
    "no_store": status.HTTP_404_NOT_FOUND,
    "database_error": status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def _respond(result: OnboardingStatusResult) -> JSONResponse:
    if result.success:
        return JSONResponse(status_code=status.HTTP_200_OK, content=result.to_response())
    return JSONResponse(
        status_code=ERROR_STATUS_CODES.get(result.error_code, status.HTTP_500_INTERNAL_SERVER_ERROR),
        content=result.to_response(),
    )


@router.get("/gate", response_model=OnboardingGate)
async def get_onboarding_gate(
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return await resolve_onboarding_gate(db, user)


@router.put("/status")
async def set_onboarding_status(
    body: OnboardingStatusUpdate,
    db: AsyncSession = Depends(get_db),
    user: User | None = Depends(get_optional_user),
):
    return _respond(await update_onboarding_status(db, user, body.status))


@router.post("/complete")
async def mark_onboarding_complete(
    db: AsyncSession = Depends(get_db),
    user: User | None = Depends(get_optional_user),
):
    return _respond(await complete_onboarding(db, user))


@router.post("/skip")
async def mark_onboarding_skipped(
    db: AsyncSession = Depends(get_db),
    user: User | None = Depends(get_optional_user),
):
    return _respond(await skip_onboarding(db, user))
