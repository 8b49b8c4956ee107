"""Structured UI context sent alongside concierge requests.

The AI understands the page because the UI describes it: semantic page
names, visible components and user signals. No DOM, no screenshots.
"""

from datetime import datetime, timezone
from typing import Any, Literal

from pydantic import BaseModel, Field

from app.schemas.drafts import DraftStoreState

StoreState = Literal["empty", "draft", "active"]
OnboardingStatusValue = Literal["not_started", "in_progress", "skipped", "completed"]
OnboardingStep = Literal["welcome", "brand", "products", "appearance", "review"]
Locale = Literal["ar", "en"]

MAX_USER_SIGNALS = 10


def _now() -> datetime:
    return datetime.now(timezone.utc)


class VisibleComponent(BaseModel):
    type: str
    variant: str | None = None
    action: str | None = None
    label: str | None = None
    state: Literal["active", "inactive", "loading", "completed"] | None = None
    metadata: dict[str, Any] | None = None


class StructuredUIContext(BaseModel):
    # Route & page identity
    page: str
    route: str

    locale: Locale = "en"
    direction: Literal["rtl", "ltr"] = "ltr"

    store_state: StoreState = "empty"
    store_name: str | None = None

    onboarding_status: OnboardingStatusValue = "not_started"
    onboarding_step: OnboardingStep | None = None
    onboarding_progress: int | None = Field(default=None, ge=0, le=100)

    visible_components: list[VisibleComponent] = Field(default_factory=list)
    user_signals: list[str] = Field(default_factory=list)

    session_start: datetime | None = None
    messages_count: int | None = None
    has_made_selections: bool | None = None

    workflow_type: Literal["onboarding", "editing", "bulk_upload"] | None = None
    is_initial_greeting: bool | None = None

    # Bulk upload
    uploaded_images: list[str] | None = None
    batch_id: str | None = None


class VisualMetadata(BaseModel):
    primary_focus: str | None = None
    cta_visible: bool = False
    cta_label: str | None = None
    cta_position: Literal["bottom", "center", "inline"] | None = None
    layout_density: Literal["minimal", "calm", "moderate", "busy"] = "calm"
    motion: str | None = None
    color_scheme: Literal["light", "dark"] | None = None


class ConciergeContext(BaseModel):
    ui_context: StructuredUIContext
    visual_context: VisualMetadata | None = None
    timestamp: datetime = Field(default_factory=_now)


class ApproveDraftRequest(BaseModel):
    """Body of POST /approve-draft: `{draftState, context}`."""
    draft_state: DraftStoreState | None = Field(default=None, alias="draftState")
    context: ConciergeContext | None = None

    model_config = {"populate_by_name": True}


class PersistDraftsRequest(BaseModel):
    draft_ids: list[str] = Field(min_length=1)
    batch_id: str | None = None


# ── Context helpers ──────────────────────────────────────────

def create_initial_context(
    page: str,
    route: str,
    locale: Locale = "en",
    store_state: StoreState = "empty",
    onboarding_status: OnboardingStatusValue = "not_started",
) -> ConciergeContext:
    return ConciergeContext(
        ui_context=StructuredUIContext(
            page=page,
            route=route,
            locale=locale,
            direction="rtl" if locale == "ar" else "ltr",
            store_state=store_state,
            onboarding_status=onboarding_status,
            user_signals=["viewed_page"],
        ),
    )


def add_user_signal(context: ConciergeContext, signal: str) -> ConciergeContext:
    """Append a user signal, skipping consecutive duplicates.

    Only the most recent MAX_USER_SIGNALS signals are kept.
    """
    signals = context.ui_context.user_signals
    if signals and signals[-1] == signal:
        return context

    ui = context.ui_context.model_copy(
        update={"user_signals": [*signals, signal][-MAX_USER_SIGNALS:]}
    )
    return context.model_copy(update={"ui_context": ui, "timestamp": _now()})


def set_visible_components(
    context: ConciergeContext,
    components: list[VisibleComponent],
) -> ConciergeContext:
    ui = context.ui_context.model_copy(update={"visible_components": list(components)})
    return context.model_copy(update={"ui_context": ui, "timestamp": _now()})
