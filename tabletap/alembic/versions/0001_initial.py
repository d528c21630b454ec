"""create cafe tables

Revision ID: 0001_initial
Revises: None
Create Date: 2026-10-19
"""

from alembic import op
import sqlalchemy as sa


revision: str = "0001_initial"
down_revision: str | None = None
branch_labels: tuple[str, ...] | None = None
depends_on: tuple[str, ...] | None = None


def _id() -> sa.Column:
    return sa.Column("id", sa.String(36), primary_key=True)


def _cafe_fk() -> sa.Column:
    return sa.Column(
        "cafe_id", sa.String(36), sa.ForeignKey("cafes.id"), nullable=False, index=True
    )


def _created() -> sa.Column:
    return sa.Column("created_at", sa.DateTime(timezone=True), nullable=False)


def upgrade() -> None:
    op.create_table(
        "users",
        _id(),
        sa.Column("email", sa.String(), nullable=False, unique=True),
        sa.Column("password_hash", sa.String(), nullable=False),
        _created(),
    )
    op.create_table(
        "super_admins",
        _id(),
        sa.Column("email", sa.String(), nullable=False, unique=True),
        _created(),
    )
    op.create_table(
        "cafes",
        _id(),
        sa.Column("owner_id", sa.String(36), nullable=True, index=True),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("logo_url", sa.String(), nullable=True),
        sa.Column(
            "subscription_plan",
            sa.String(),
            nullable=False,
            server_default="basic",
        ),
        sa.Column("telegram_bot_token", sa.String(), nullable=True),
        sa.Column("telegram_chat_id", sa.String(), nullable=True),
        _created(),
    )
    op.create_table(
        "menu_items",
        _id(),
        _cafe_fk(),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("price", sa.Numeric(10, 2), nullable=False),
        sa.Column("category", sa.String(), nullable=False),
        sa.Column("image_url", sa.String(), nullable=True),
        sa.Column("is_available", sa.Boolean(), nullable=False),
        sa.Column("cost_price", sa.Numeric(10, 2), nullable=True),
        _created(),
    )
    op.create_table(
        "orders",
        _id(),
        _cafe_fk(),
        sa.Column("table_number", sa.Integer(), nullable=False),
        sa.Column("customer_name", sa.String(), nullable=True),
        sa.Column("status", sa.String(), nullable=False),
        sa.Column("total_amount", sa.Numeric(10, 2), nullable=False),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), nullable=False, index=True
        ),
    )
    op.create_table(
        "order_items",
        _id(),
        sa.Column(
            "order_id",
            sa.String(36),
            sa.ForeignKey("orders.id"),
            nullable=False,
            index=True,
        ),
        sa.Column(
            "menu_item_id", sa.String(36), sa.ForeignKey("menu_items.id"), nullable=True
        ),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("price", sa.Numeric(10, 2), nullable=False),
        _created(),
    )
    op.create_table(
        "ratings",
        _id(),
        sa.Column(
            "menu_item_id", sa.String(36), sa.ForeignKey("menu_items.id"), nullable=False
        ),
        sa.Column("order_id", sa.String(36), sa.ForeignKey("orders.id"), nullable=False),
        sa.Column("rating", sa.Integer(), nullable=False),
        sa.Column("comment", sa.Text(), nullable=True),
        _created(),
        sa.UniqueConstraint("menu_item_id", "order_id"),
    )
    op.create_table(
        "cafe_tables",
        _id(),
        _cafe_fk(),
        sa.Column("table_number", sa.Integer(), nullable=False),
        sa.Column("section", sa.String(), nullable=False),
        sa.Column("capacity", sa.Integer(), nullable=False),
        sa.Column("status", sa.String(), nullable=False),
        sa.Column("current_order_id", sa.String(36), nullable=True),
        _created(),
        sa.UniqueConstraint("cafe_id", "section", "table_number"),
    )
    op.create_table(
        "inventory_items",
        _id(),
        _cafe_fk(),
        sa.Column("item_name", sa.String(), nullable=False),
        sa.Column("quantity", sa.Numeric(12, 3), nullable=False),
        sa.Column("unit", sa.String(), nullable=False),
        sa.Column("min_threshold", sa.Numeric(12, 3), nullable=False),
        sa.Column("last_updated", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_table(
        "suppliers",
        _id(),
        _cafe_fk(),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("contact_person", sa.String(), nullable=True),
        sa.Column("phone", sa.String(), nullable=True),
        sa.Column("email", sa.String(), nullable=True),
        sa.Column("address", sa.Text(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        _created(),
    )
    op.create_table(
        "purchase_orders",
        _id(),
        _cafe_fk(),
        sa.Column(
            "supplier_id", sa.String(36), sa.ForeignKey("suppliers.id"), nullable=True
        ),
        sa.Column("order_number", sa.String(), nullable=False),
        sa.Column("status", sa.String(), nullable=False),
        sa.Column("total_amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("expected_date", sa.Date(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        _created(),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_table(
        "purchase_order_items",
        _id(),
        sa.Column(
            "purchase_order_id",
            sa.String(36),
            sa.ForeignKey("purchase_orders.id"),
            nullable=False,
            index=True,
        ),
        sa.Column(
            "inventory_item_id",
            sa.String(36),
            sa.ForeignKey("inventory_items.id"),
            nullable=True,
        ),
        sa.Column("item_name", sa.String(), nullable=False),
        sa.Column("quantity", sa.Numeric(12, 3), nullable=False),
        sa.Column("unit_price", sa.Numeric(12, 2), nullable=False),
    )
    op.create_table(
        "staff",
        _id(),
        _cafe_fk(),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("role", sa.String(), nullable=False),
        sa.Column("phone", sa.String(), nullable=True),
        sa.Column("email", sa.String(), nullable=True),
        sa.Column("hourly_rate", sa.Numeric(10, 2), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        _created(),
    )
    op.create_table(
        "staff_shifts",
        _id(),
        _cafe_fk(),
        sa.Column("staff_id", sa.String(36), sa.ForeignKey("staff.id"), nullable=False),
        sa.Column("start_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        _created(),
    )
    op.create_table(
        "staff_attendance",
        _id(),
        _cafe_fk(),
        sa.Column("staff_id", sa.String(36), sa.ForeignKey("staff.id"), nullable=False),
        sa.Column(
            "shift_id", sa.String(36), sa.ForeignKey("staff_shifts.id"), nullable=True
        ),
        sa.Column("check_in", sa.DateTime(timezone=True), nullable=False),
        sa.Column("check_out", sa.DateTime(timezone=True), nullable=True),
        sa.Column("status", sa.String(), nullable=False),
        _created(),
    )
    op.create_table(
        "customers",
        _id(),
        _cafe_fk(),
        sa.Column("customer_name", sa.String(), nullable=False),
        sa.Column("phone", sa.String(), nullable=True),
        sa.Column("total_spend", sa.Numeric(12, 2), nullable=False),
        sa.Column("visit_count", sa.Integer(), nullable=False),
        sa.Column("last_visit", sa.DateTime(timezone=True), nullable=True),
        sa.Column("loyalty_points", sa.Integer(), nullable=False),
        _created(),
        sa.UniqueConstraint("cafe_id", "customer_name"),
    )
    op.create_table(
        "loyalty_transactions",
        _id(),
        _cafe_fk(),
        sa.Column(
            "customer_id", sa.String(36), sa.ForeignKey("customers.id"), nullable=False
        ),
        sa.Column("points", sa.Integer(), nullable=False),
        sa.Column("type", sa.String(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        _created(),
    )
    op.create_table(
        "financial_parties",
        _id(),
        _cafe_fk(),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("party_type", sa.String(), nullable=False),
        sa.Column("outstanding_balance", sa.Numeric(12, 2), nullable=False),
        _created(),
    )
    op.create_table(
        "invoices",
        _id(),
        _cafe_fk(),
        sa.Column(
            "party_id",
            sa.String(36),
            sa.ForeignKey("financial_parties.id"),
            nullable=True,
        ),
        sa.Column("type", sa.String(), nullable=False),
        sa.Column("invoice_number", sa.String(), nullable=False),
        sa.Column("invoice_date", sa.Date(), nullable=False),
        sa.Column("total_amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("status", sa.String(), nullable=False),
        _created(),
    )
    op.create_table(
        "business_expenses",
        _id(),
        _cafe_fk(),
        sa.Column("category", sa.String(), nullable=False),
        sa.Column("amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("payment_mode", sa.String(), nullable=False),
        _created(),
    )
    op.create_table(
        "accounts_ledger",
        _id(),
        _cafe_fk(),
        sa.Column("account_name", sa.String(), nullable=False),
        sa.Column("account_type", sa.String(), nullable=False),
        sa.Column("balance", sa.Numeric(12, 2), nullable=False),
        _created(),
    )


def downgrade() -> None:
    for table in (
        "accounts_ledger",
        "business_expenses",
        "invoices",
        "financial_parties",
        "loyalty_transactions",
        "customers",
        "staff_attendance",
        "staff_shifts",
        "staff",
        "purchase_order_items",
        "purchase_orders",
        "suppliers",
        "inventory_items",
        "cafe_tables",
        "ratings",
        "order_items",
        "orders",
        "menu_items",
        "cafes",
        "super_admins",
        "users",
    ):
        op.drop_table(table)
