"""add recipes and inventory logs

Revision ID: 0002_recipes_inventory_logs
Revises: 0001_initial
Create Date: 2026-10-20
"""

from alembic import op
import sqlalchemy as sa


revision: str = "0002_recipes_inventory_logs"
down_revision: str | None = "0001_initial"
branch_labels: tuple[str, ...] | None = None
depends_on: tuple[str, ...] | None = None


def upgrade() -> None:
    op.create_table(
        "menu_item_ingredients",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column(
            "menu_item_id",
            sa.String(36),
            sa.ForeignKey("menu_items.id"),
            nullable=False,
            index=True,
        ),
        sa.Column(
            "inventory_item_id",
            sa.String(36),
            sa.ForeignKey("inventory_items.id"),
            nullable=False,
        ),
        sa.Column("quantity_required", sa.Numeric(12, 3), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_table(
        "inventory_logs",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column(
            "cafe_id", sa.String(36), sa.ForeignKey("cafes.id"), nullable=False, index=True
        ),
        sa.Column(
            "inventory_item_id",
            sa.String(36),
            sa.ForeignKey("inventory_items.id"),
            nullable=False,
            index=True,
        ),
        sa.Column("change_amount", sa.Numeric(12, 3), nullable=False),
        sa.Column("reason", sa.String(), nullable=False),
        sa.Column("reference", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )


def downgrade() -> None:
    op.drop_table("inventory_logs")
    op.drop_table("menu_item_ingredients")
