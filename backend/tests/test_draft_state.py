"""Tests for the in-memory draft container and concierge context helpers."""

import pytest

from app.schemas.concierge import (
    MAX_USER_SIGNALS,
    VisibleComponent,
    add_user_signal,
    create_initial_context,
    set_visible_components,
)
from app.schemas.drafts import DraftProduct, DraftStoreUpdates
from app.services.draft_state import (
    DraftProductNotFound,
    DraftStateContainer,
    create_empty_draft_state,
    merge_draft_updates,
)


@pytest.mark.concierge
@pytest.mark.unit
class TestDraftHelpers:

    def test_empty_draft(self):
        draft = create_empty_draft_state()
        assert draft.products == []
        assert draft.store_name is None
        assert draft.appearance is None
        assert draft.is_dirty is False

    def test_merge_appends_products_and_replaces_the_rest(self):
        current = create_empty_draft_state()
        current = merge_draft_updates(current, {
            "store_name": {"value": "First"},
            "products": [{"id": "p1", "name": "Shirt"}],
        })
        merged = merge_draft_updates(current, DraftStoreUpdates(
            store_name={"value": "Second", "source": "user", "confidence": "user_provided"},
            products=[DraftProduct(id="p2", name="Tote")],
        ))

        assert [p.id for p in merged.products] == ["p1", "p2"]
        assert merged.store_name.value == "Second"
        assert merged.is_dirty is True

    def test_merge_without_products_keeps_existing(self):
        current = merge_draft_updates(
            create_empty_draft_state(), {"products": [{"id": "p1", "name": "Shirt"}]}
        )
        merged = merge_draft_updates(current, {"appearance": {"primary_color": "#fff"}})

        assert [p.id for p in merged.products] == ["p1"]
        assert merged.appearance.primary_color == "#fff"

    def test_merge_does_not_touch_absent_keys(self):
        current = merge_draft_updates(create_empty_draft_state(), {"store_name": {"value": "Keep"}})
        merged = merge_draft_updates(current, {"products": [{"id": "p1", "name": "Shirt"}]})
        assert merged.store_name.value == "Keep"


@pytest.mark.concierge
@pytest.mark.unit
class TestDraftStateContainer:

    def test_store_name_provenance(self):
        container = DraftStateContainer()

        ai_name = container.set_store_name("Acme Threads")
        assert ai_name.source == "ai"
        assert ai_name.confidence == "suggestion"

        user_name = container.set_store_name("Acme", source="user")
        assert user_name.confidence == "user_provided"
        assert container.state.store_name.value == "Acme"
        assert container.state.is_dirty is True

    def test_add_edit_remove_products(self):
        container = DraftStateContainer()
        added = container.add_product({"name": "Linen Shirt", "price": 450})
        container.add_product(DraftProduct(id="p2", name="Tote"), confidence="user_edited")

        assert added.id
        assert added.confidence == "ai_generated"
        assert container.state.products[1].confidence == "user_edited"

        edited = container.edit_product(added.id, price=500, name_ar="قميص")
        assert edited.price == 500
        assert edited.name_ar == "قميص"
        assert edited.name == "Linen Shirt"
        assert edited.confidence == "user_edited"

        removed = container.remove_product("p2")
        assert removed.name == "Tote"
        assert [p.id for p in container.state.products] == [added.id]

    def test_missing_product(self):
        container = DraftStateContainer()
        with pytest.raises(DraftProductNotFound):
            container.edit_product("nope", price=1)
        with pytest.raises(DraftProductNotFound):
            container.remove_product("nope")

    def test_appearance_is_merged(self):
        container = DraftStateContainer()
        container.set_appearance(primary_color="#111111")
        appearance = container.set_appearance(font_family="Cairo")

        assert appearance.primary_color == "#111111"
        assert appearance.font_family == "Cairo"

    def test_has_content_and_clear(self):
        container = DraftStateContainer()
        assert container.has_content() is False

        container.set_appearance(accent_color="#6366f1")
        assert container.has_content() is True

        container.clear()
        assert container.has_content() is False
        assert container.state.is_dirty is False

    def test_snapshot_is_independent(self):
        container = DraftStateContainer()
        container.add_product({"id": "p1", "name": "Shirt"})
        snapshot = container.snapshot()

        container.edit_product("p1", name="Changed")
        assert snapshot.products[0].name == "Shirt"

    def test_merge_updates(self):
        container = DraftStateContainer()
        container.add_product({"id": "p1", "name": "Shirt"})
        container.merge_updates({"products": [{"id": "p2", "name": "Tote"}]})
        assert [p.id for p in container.state.products] == ["p1", "p2"]


@pytest.mark.concierge
@pytest.mark.unit
class TestConciergeContext:

    def test_initial_context_direction(self):
        ar = create_initial_context("onboarding", "/ar/admin", locale="ar")
        en = create_initial_context("onboarding", "/en/admin")

        assert ar.ui_context.direction == "rtl"
        assert en.ui_context.direction == "ltr"
        assert en.ui_context.user_signals == ["viewed_page"]

    def test_consecutive_duplicate_signals_are_skipped(self):
        context = create_initial_context("onboarding", "/en/admin")
        context = add_user_signal(context, "clicked_cta")
        context = add_user_signal(context, "clicked_cta")

        assert context.ui_context.user_signals == ["viewed_page", "clicked_cta"]

    def test_signals_are_capped(self):
        context = create_initial_context("onboarding", "/en/admin")
        for i in range(15):
            context = add_user_signal(context, f"signal_{i}")

        signals = context.ui_context.user_signals
        assert len(signals) == MAX_USER_SIGNALS
        assert signals[-1] == "signal_14"
        assert signals[0] == "signal_5"

    def test_set_visible_components(self):
        context = create_initial_context("onboarding", "/en/admin")
        updated = set_visible_components(context, [VisibleComponent(type="DraftGrid")])

        assert [c.type for c in updated.ui_context.visible_components] == ["DraftGrid"]
        assert context.ui_context.visible_components == []
