"""Result shapes for onboarding status, gate and draft approval."""

from typing import Literal

from pydantic import BaseModel

OnboardingStatusValue = Literal["not_started", "in_progress", "completed", "skipped"]
StatusErrorCode = Literal["unauthorized", "no_store", "database_error"]


class UserOrganization(BaseModel):
    """Caller's organization and (first) store, as seen by onboarding."""
    organization_id: str
    organization_slug: str | None = None
    store_id: str | None = None
    store_slug: str | None = None
    store_type: str | None = None
    store_status: str | None = None
    theme_id: str | None = None
    # Raw column value; store setup may write statuses this service does not know
    onboarding_completed: str | None = None


# ── Status updater ───────────────────────────────────────────

class OnboardingStatusUpdate(BaseModel):
    status: OnboardingStatusValue


class OnboardingStatusResult(BaseModel):
    success: bool
    status: OnboardingStatusValue | None = None
    error_code: StatusErrorCode | None = None
    message: str | None = None

    def to_response(self) -> dict:
        if self.success:
            return {"success": True, "status": self.status}
        body = {"success": False, "errorCode": self.error_code}
        if self.message:
            body["message"] = self.message
        return body


# ── Gate ─────────────────────────────────────────────────────

class OnboardingGate(BaseModel):
    show_onboarding: bool
    onboarding_status: OnboardingStatusValue = "not_started"
    store_state: Literal["empty", "draft", "active"] = "empty"
    store_id: str | None = None
    from_cache: bool = False


# ── Draft approval ───────────────────────────────────────────

class SavedSummary(BaseModel):
    store_name: bool
    products: int
    appearance: bool


class DraftApprovalResult(BaseModel):
    success: bool = True
    message: str
    saved: SavedSummary
    note: str | None = None


class DraftPersistenceResult(BaseModel):
    success: bool
    product_ids: list[str] = []
    count: int = 0
    message: str | None = None
    error: str | None = None
