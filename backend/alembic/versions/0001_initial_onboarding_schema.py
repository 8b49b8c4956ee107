"""Initial schema: accounts, stores, products, drafts, workflow state.

Revision ID: 0001
Revises: (none)
Create Date: 2026-10-17
"""

revision = "0001"
down_revision = None
branch_labels = None
depends_on = None

from alembic import op
import sqlalchemy as sa


def upgrade() -> None:
    # ── Accounts ─────────────────────────────────────────────

    op.create_table(
        "users",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("full_name", sa.String(255)),
        sa.Column("is_active", sa.Boolean(), server_default="true"),
        sa.Column("preferred_language", sa.String(5), nullable=False, server_default="en"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "organizations",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("owner_id", sa.String(36), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("slug", sa.String(100), nullable=False, unique=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_organizations_owner_id", "organizations", ["owner_id"])

    op.create_table(
        "stores",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("organization_id", sa.String(36), sa.ForeignKey("organizations.id"), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("slug", sa.String(100), nullable=False, unique=True),
        sa.Column("store_type", sa.String(20)),
        sa.Column("status", sa.String(20), server_default="draft"),
        sa.Column("theme_id", sa.String(50)),
        sa.Column("onboarding_completed", sa.String(20)),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_stores_organization_id", "stores", ["organization_id"])

    # ── Store content ────────────────────────────────────────

    op.create_table(
        "store_settings",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("merchant_id", sa.String(36), sa.ForeignKey("users.id"), nullable=False, unique=True),
        sa.Column("store_id", sa.String(36), sa.ForeignKey("stores.id"), nullable=False),
        sa.Column("ai_preferences", sa.JSON()),
        sa.Column("appearance", sa.JSON()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_store_settings_store_id", "store_settings", ["store_id"])

    op.create_table(
        "store_products",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("store_id", sa.String(36), sa.ForeignKey("stores.id"), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("name_ar", sa.String(255)),
        sa.Column("slug", sa.String(255), nullable=False),
        sa.Column("description", sa.Text()),
        sa.Column("description_ar", sa.Text()),
        sa.Column("price", sa.Float(), server_default="0"),
        sa.Column("currency", sa.String(3), nullable=False),
        sa.Column("category", sa.String(100)),
        sa.Column("category_ar", sa.String(100)),
        sa.Column("tags", sa.JSON()),
        sa.Column("image_url", sa.String(1024)),
        sa.Column("images", sa.JSON()),
        sa.Column("status", sa.String(20), server_default="active"),
        sa.Column("inventory", sa.Integer()),
        sa.Column("ai_generated", sa.Boolean(), server_default="false"),
        sa.Column("ai_confidence", sa.String(10)),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint("store_id", "slug", name="uq_store_products_store_slug"),
    )
    op.create_index("ix_store_products_store_id", "store_products", ["store_id"])

    op.create_table(
        "product_drafts",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("store_id", sa.String(36), sa.ForeignKey("stores.id"), nullable=False),
        sa.Column("batch_id", sa.String(36)),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("name_ar", sa.String(255)),
        sa.Column("description", sa.Text()),
        sa.Column("description_ar", sa.Text()),
        sa.Column("category", sa.String(100)),
        sa.Column("category_ar", sa.String(100)),
        sa.Column("tags", sa.JSON()),
        sa.Column("suggested_price", sa.Float()),
        sa.Column("primary_image_url", sa.String(1024)),
        sa.Column("image_urls", sa.JSON()),
        sa.Column("ai_confidence", sa.String(10)),
        sa.Column("status", sa.String(20), server_default="draft"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_product_drafts_store_id", "product_drafts", ["store_id"])
    op.create_index("ix_product_drafts_batch_id", "product_drafts", ["batch_id"])

    # ── AI workflow tracking ─────────────────────────────────

    op.create_table(
        "ai_workflow_state",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("conversation_id", sa.String(100), nullable=False),
        sa.Column("merchant_id", sa.String(36), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("store_id", sa.String(36), sa.ForeignKey("stores.id")),
        sa.Column("workflow_type", sa.String(50), nullable=False),
        sa.Column("current_stage", sa.Integer(), server_default="1"),
        sa.Column("total_stages", sa.Integer(), nullable=False),
        sa.Column("stage_data", sa.JSON()),
        sa.Column("status", sa.String(20), server_default="in_progress"),
        sa.Column("completed_at", sa.DateTime(timezone=True)),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_ai_workflow_state_conversation_id", "ai_workflow_state", ["conversation_id"])
    op.create_index("ix_ai_workflow_state_merchant_id", "ai_workflow_state", ["merchant_id"])


def downgrade() -> None:
    op.drop_table("ai_workflow_state")
    op.drop_table("product_drafts")
    op.drop_table("store_products")
    op.drop_table("store_settings")
    op.drop_table("stores")
    op.drop_table("organizations")
    op.drop_table("users")
