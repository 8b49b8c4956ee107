"""Store-scoped models. Every row belongs to exactly one store or merchant."""

from app.models.store.product_draft import ProductDraft
from app.models.store.store_product import StoreProduct
from app.models.store.store_settings import StoreSettings
from app.models.store.workflow_state import WorkflowState, WorkflowStatus, WorkflowType

__all__ = [
    "ProductDraft",
    "StoreProduct",
    "StoreSettings",
    "WorkflowState",
    "WorkflowStatus",
    "WorkflowType",
]
