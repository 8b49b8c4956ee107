"""Aggregate model imports for Alembic auto-detection."""

# Accounts
from app.models.public.user import User  # noqa: F401
from app.models.public.organization import Organization, Store  # noqa: F401

# Store-scoped
from app.models.store.store_settings import StoreSettings  # noqa: F401
from app.models.store.store_product import StoreProduct  # noqa: F401
from app.models.store.product_draft import ProductDraft  # noqa: F401
from app.models.store.workflow_state import WorkflowState  # noqa: F401
