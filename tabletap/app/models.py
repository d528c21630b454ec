"""Database models for cafes and everything a cafe owns.

Every tenant-scoped table carries a ``cafe_id`` column; a cafe is the unit of
data isolation. Primary keys are UUID strings so rows can be referenced from
realtime payloads and client-side state without conversion."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import declarative_base, relationship

from config import Plan

Base = declarative_base()


def _uuid() -> str:
    return str(uuid.uuid4())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(Base):
    """Account able to sign in; owns at most one cafe."""

    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=_uuid)
    email = Column(String, nullable=False, unique=True)
    password_hash = Column(String, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)


class SuperAdmin(Base):
    """Allow-listed email with platform-wide plan management rights."""

    __tablename__ = "super_admins"

    id = Column(String(36), primary_key=True, default=_uuid)
    email = Column(String, nullable=False, unique=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)


class Cafe(Base):
    """Tenant root."""

    __tablename__ = "cafes"

    id = Column(String(36), primary_key=True, default=_uuid)
    owner_id = Column(String(36), nullable=True, index=True)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    logo_url = Column(String, nullable=True)
    subscription_plan = Column(String, nullable=False, default=Plan.BASIC.value)
    telegram_bot_token = Column(String, nullable=True)
    telegram_chat_id = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)


class MenuItem(Base):
    __tablename__ = "menu_items"

    id = Column(String(36), primary_key=True, default=_uuid)
    cafe_id = Column(String(36), ForeignKey("cafes.id"), nullable=False, index=True)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    price = Column(Numeric(10, 2), nullable=False)
    category = Column(String, nullable=False, default="General")
    image_url = Column(String, nullable=True)
    is_available = Column(Boolean, nullable=False, default=True)
    cost_price = Column(Numeric(10, 2), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)


class Order(Base):
    """Placed order; ``total_amount`` is fixed at creation."""

    __tablename__ = "orders"

    id = Column(String(36), primary_key=True, default=_uuid)
    cafe_id = Column(String(36), ForeignKey("cafes.id"), nullable=False, index=True)
    table_number = Column(Integer, nullable=False, default=0)
    customer_name = Column(String, nullable=True)
    status = Column(String, nullable=False, default="pending")
    total_amount = Column(Numeric(10, 2), nullable=False)
    created_at = Column(
        DateTime(timezone=True), nullable=False, default=utcnow, index=True
    )

    items = relationship("OrderItem", back_populates="order", lazy="selectin")


class OrderItem(Base):
    """Order line with the unit price captured at order time."""

    __tablename__ = "order_items"

    id = Column(String(36), primary_key=True, default=_uuid)
    order_id = Column(String(36), ForeignKey("orders.id"), nullable=False, index=True)
    menu_item_id = Column(String(36), ForeignKey("menu_items.id"), nullable=True)
    quantity = Column(Integer, nullable=False)
    price = Column(Numeric(10, 2), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    order = relationship("Order", back_populates="items")
    menu_item = relationship("MenuItem", lazy="selectin")


class Rating(Base):
    __tablename__ = "ratings"
    __table_args__ = (UniqueConstraint("menu_item_id", "order_id"),)

    id = Column(String(36), primary_key=True, default=_uuid)
    menu_item_id = Column(String(36), ForeignKey("menu_items.id"), nullable=False)
    order_id = Column(String(36), ForeignKey("orders.id"), nullable=False)
    rating = Column(Integer, nullable=False)
    comment = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)


class CafeTable(Base):
    """Dining table with its floor status."""

    __tablename__ = "cafe_tables"
    __table_args__ = (UniqueConstraint("cafe_id", "section", "table_number"),)

    id = Column(String(36), primary_key=True, default=_uuid)
    cafe_id = Column(String(36), ForeignKey("cafes.id"), nullable=False, index=True)
    table_number = Column(Integer, nullable=False)
    section = Column(String, nullable=False, default="ac")
    capacity = Column(Integer, nullable=False, default=4)
    status = Column(String, nullable=False, default="available")
    current_order_id = Column(String(36), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)


class InventoryItem(Base):
    __tablename__ = "inventory_items"

    id = Column(String(36), primary_key=True, default=_uuid)
    cafe_id = Column(String(36), ForeignKey("cafes.id"), nullable=False, index=True)
    item_name = Column(String, nullable=False)
    quantity = Column(Numeric(12, 3), nullable=False, default=0)
    unit = Column(String, nullable=False, default="unit")
    min_threshold = Column(Numeric(12, 3), nullable=False, default=0)
    last_updated = Column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )


class Supplier(Base):
    __tablename__ = "suppliers"

    id = Column(String(36), primary_key=True, default=_uuid)
    cafe_id = Column(String(36), ForeignKey("cafes.id"), nullable=False, index=True)
    name = Column(String, nullable=False)
    contact_person = Column(String, nullable=True)
    phone = Column(String, nullable=True)
    email = Column(String, nullable=True)
    address = Column(Text, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)


class PurchaseOrder(Base):
    __tablename__ = "purchase_orders"

    id = Column(String(36), primary_key=True, default=_uuid)
    cafe_id = Column(String(36), ForeignKey("cafes.id"), nullable=False, index=True)
    supplier_id = Column(String(36), ForeignKey("suppliers.id"), nullable=True)
    order_number = Column(String, nullable=False)
    status = Column(String, nullable=False, default="pending")
    total_amount = Column(Numeric(12, 2), nullable=False, default=0)
    expected_date = Column(Date, nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )

    supplier = relationship("Supplier", lazy="selectin")
    items = relationship(
        "PurchaseOrderItem", lazy="selectin", cascade="all, delete-orphan"
    )


class PurchaseOrderItem(Base):
    __tablename__ = "purchase_order_items"

    id = Column(String(36), primary_key=True, default=_uuid)
    purchase_order_id = Column(
        String(36), ForeignKey("purchase_orders.id"), nullable=False, index=True
    )
    inventory_item_id = Column(
        String(36), ForeignKey("inventory_items.id"), nullable=True
    )
    item_name = Column(String, nullable=False)
    quantity = Column(Numeric(12, 3), nullable=False)
    unit_price = Column(Numeric(12, 2), nullable=False, default=0)


class MenuItemIngredient(Base):
    """Recipe line: stock consumed by one unit of a menu item."""

    __tablename__ = "menu_item_ingredients"

    id = Column(String(36), primary_key=True, default=_uuid)
    menu_item_id = Column(
        String(36), ForeignKey("menu_items.id"), nullable=False, index=True
    )
    inventory_item_id = Column(
        String(36), ForeignKey("inventory_items.id"), nullable=False
    )
    quantity_required = Column(Numeric(12, 3), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    inventory_item = relationship("InventoryItem", lazy="selectin")


class InventoryLog(Base):
    """Append-only record of stock movements."""

    __tablename__ = "inventory_logs"

    id = Column(String(36), primary_key=True, default=_uuid)
    cafe_id = Column(String(36), ForeignKey("cafes.id"), nullable=False, index=True)
    inventory_item_id = Column(
        String(36), ForeignKey("inventory_items.id"), nullable=False, index=True
    )
    change_amount = Column(Numeric(12, 3), nullable=False)
    reason = Column(String, nullable=False)
    reference = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    inventory_item = relationship("InventoryItem", lazy="selectin")


class Staff(Base):
    __tablename__ = "staff"

    id = Column(String(36), primary_key=True, default=_uuid)
    cafe_id = Column(String(36), ForeignKey("cafes.id"), nullable=False, index=True)
    name = Column(String, nullable=False)
    role = Column(String, nullable=False, default="waiter")
    phone = Column(String, nullable=True)
    email = Column(String, nullable=True)
    hourly_rate = Column(Numeric(10, 2), nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)


class StaffShift(Base):
    __tablename__ = "staff_shifts"

    id = Column(String(36), primary_key=True, default=_uuid)
    cafe_id = Column(String(36), ForeignKey("cafes.id"), nullable=False, index=True)
    staff_id = Column(String(36), ForeignKey("staff.id"), nullable=False)
    start_time = Column(DateTime(timezone=True), nullable=False)
    end_time = Column(DateTime(timezone=True), nullable=False)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)


class StaffAttendance(Base):
    __tablename__ = "staff_attendance"

    id = Column(String(36), primary_key=True, default=_uuid)
    cafe_id = Column(String(36), ForeignKey("cafes.id"), nullable=False, index=True)
    staff_id = Column(String(36), ForeignKey("staff.id"), nullable=False)
    shift_id = Column(String(36), ForeignKey("staff_shifts.id"), nullable=True)
    check_in = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    check_out = Column(DateTime(timezone=True), nullable=True)
    status = Column(String, nullable=False, default="present")
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)


class Customer(Base):
    """Loyalty aggregate rebuilt from completed orders by an explicit sync."""

    __tablename__ = "customers"
    __table_args__ = (UniqueConstraint("cafe_id", "customer_name"),)

    id = Column(String(36), primary_key=True, default=_uuid)
    cafe_id = Column(String(36), ForeignKey("cafes.id"), nullable=False, index=True)
    customer_name = Column(String, nullable=False)
    phone = Column(String, nullable=True)
    total_spend = Column(Numeric(12, 2), nullable=False, default=0)
    visit_count = Column(Integer, nullable=False, default=0)
    last_visit = Column(DateTime(timezone=True), nullable=True)
    loyalty_points = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)


class LoyaltyTransaction(Base):
    __tablename__ = "loyalty_transactions"

    id = Column(String(36), primary_key=True, default=_uuid)
    cafe_id = Column(String(36), ForeignKey("cafes.id"), nullable=False, index=True)
    customer_id = Column(String(36), ForeignKey("customers.id"), nullable=False)
    points = Column(Integer, nullable=False)
    type = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)


class FinancialParty(Base):
    """Customer or supplier with a running balance.

    A negative ``outstanding_balance`` is owed to the cafe (receivable), a
    positive one is owed by the cafe (payable)."""

    __tablename__ = "financial_parties"

    id = Column(String(36), primary_key=True, default=_uuid)
    cafe_id = Column(String(36), ForeignKey("cafes.id"), nullable=False, index=True)
    name = Column(String, nullable=False)
    party_type = Column(String, nullable=False, default="customer")
    outstanding_balance = Column(Numeric(12, 2), nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)


class Invoice(Base):
    __tablename__ = "invoices"

    id = Column(String(36), primary_key=True, default=_uuid)
    cafe_id = Column(String(36), ForeignKey("cafes.id"), nullable=False, index=True)
    party_id = Column(String(36), ForeignKey("financial_parties.id"), nullable=True)
    type = Column(String, nullable=False, default="sales")
    invoice_number = Column(String, nullable=False)
    invoice_date = Column(Date, nullable=False)
    total_amount = Column(Numeric(12, 2), nullable=False)
    status = Column(String, nullable=False, default="unpaid")
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)


class BusinessExpense(Base):
    __tablename__ = "business_expenses"

    id = Column(String(36), primary_key=True, default=_uuid)
    cafe_id = Column(String(36), ForeignKey("cafes.id"), nullable=False, index=True)
    category = Column(String, nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    date = Column(Date, nullable=False)
    description = Column(Text, nullable=True)
    payment_mode = Column(String, nullable=False, default="cash")
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)


class AccountsLedger(Base):
    __tablename__ = "accounts_ledger"

    id = Column(String(36), primary_key=True, default=_uuid)
    cafe_id = Column(String(36), ForeignKey("cafes.id"), nullable=False, index=True)
    account_name = Column(String, nullable=False)
    account_type = Column(String, nullable=False, default="cash")
    balance = Column(Numeric(12, 2), nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
