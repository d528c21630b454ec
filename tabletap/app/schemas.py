"""Typed entities exchanged with the store, the API and the realtime feed.

Rows loaded through SQLAlchemy are converted with :func:`to_entity` before
they leave a repository, so a malformed row is rejected at the store boundary
instead of travelling through the application as an untyped object."""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Annotated, Any, Iterable, Literal, Optional, TypeVar

from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    EmailStr,
    Field,
    ValidationError,
)

from config import Plan

from .domain.order_status import OrderStatus


def as_utc(value: Any) -> Any:
    """Attach UTC to naive datetimes (SQLite drops the offset on read)."""
    if isinstance(value, datetime) and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


UtcDatetime = Annotated[datetime, BeforeValidator(as_utc)]


class StoreError(Exception):
    """Raised when a row read from the store does not match its entity."""


class Conflict(ValueError):
    """Raised when a write would duplicate a unique record."""


class Entity(BaseModel):
    model_config = ConfigDict(from_attributes=True)


E = TypeVar("E", bound=BaseModel)


def to_entity(schema: type[E], row: Any) -> E:
    """Validate ``row`` into ``schema`` or raise :class:`StoreError`."""
    try:
        return schema.model_validate(row)
    except ValidationError as exc:
        raise StoreError(f"malformed {schema.__name__} row: {exc}") from exc


def to_entities(schema: type[E], rows: Iterable[Any]) -> list[E]:
    return [to_entity(schema, row) for row in rows]


# -- cafes -----------------------------------------------------------------


class CafeOut(Entity):
    id: str
    owner_id: Optional[str] = None
    name: str
    description: Optional[str] = None
    logo_url: Optional[str] = None
    subscription_plan: Plan = Plan.BASIC
    telegram_bot_token: Optional[str] = None
    telegram_chat_id: Optional[str] = None
    created_at: UtcDatetime


class CafeCreate(BaseModel):
    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    logo_url: Optional[str] = None


class CafeUpdate(BaseModel):
    """Owner-editable fields; the plan is changed by super admins only."""

    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    logo_url: Optional[str] = None
    telegram_bot_token: Optional[str] = None
    telegram_chat_id: Optional[str] = None


class PlanUpdate(BaseModel):
    plan: Plan


# -- menu ------------------------------------------------------------------


class MenuItemOut(Entity):
    id: str
    cafe_id: str
    name: str
    description: Optional[str] = None
    price: float = Field(..., ge=0)
    category: str
    image_url: Optional[str] = None
    is_available: bool = True
    cost_price: Optional[float] = None
    created_at: UtcDatetime
    avg_rating: Optional[float] = None
    total_ratings: Optional[int] = None


class MenuItemIn(BaseModel):
    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    price: float = Field(..., ge=0)
    category: str = "General"
    image_url: Optional[str] = None
    is_available: bool = True
    cost_price: Optional[float] = Field(None, ge=0)


class MenuItemUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    price: Optional[float] = Field(None, ge=0)
    category: Optional[str] = None
    image_url: Optional[str] = None
    is_available: Optional[bool] = None
    cost_price: Optional[float] = Field(None, ge=0)


# -- orders ----------------------------------------------------------------


class OrderOut(Entity):
    id: str
    cafe_id: str
    table_number: int = 0
    customer_name: Optional[str] = None
    status: OrderStatus
    total_amount: float
    created_at: UtcDatetime


class OrderCreate(BaseModel):
    """Body of ``POST /api/orders``."""

    cafe_id: str
    table_number: Optional[int] = None
    customer_name: Optional[str] = None
    status: OrderStatus = OrderStatus.PENDING
    total_amount: float = Field(..., ge=0)


class OrderItemOut(Entity):
    id: str
    order_id: str
    menu_item_id: Optional[str] = None
    quantity: int = Field(..., ge=1)
    price: float


class OrderItemDetail(OrderItemOut):
    menu_items: Optional[MenuItemOut] = Field(None, validation_alias="menu_item")


class OrderWithItems(OrderOut):
    order_items: list[OrderItemDetail] = Field(
        default_factory=list, validation_alias="items"
    )


class StatusUpdate(BaseModel):
    status: OrderStatus


class OrderChange(BaseModel):
    """Change event published on ``rt:orders:{cafe_id}``."""

    type: Literal["INSERT", "UPDATE", "DELETE"]
    cafe_id: str
    new: Optional[OrderOut] = None
    old: Optional[OrderOut] = None


# -- ratings ---------------------------------------------------------------


class RatingIn(BaseModel):
    menu_item_id: str
    rating: int = Field(..., ge=1, le=5)
    comment: Optional[str] = None


class RatingOut(Entity):
    id: str
    menu_item_id: str
    order_id: str
    rating: int
    comment: Optional[str] = None
    created_at: UtcDatetime


# -- tables ----------------------------------------------------------------

TableState = Literal["available", "occupied", "reserved", "cleaning"]


class TableOut(Entity):
    id: str
    cafe_id: str
    table_number: int
    section: str
    capacity: int
    status: TableState
    current_order_id: Optional[str] = None


class TableStatusUpdate(BaseModel):
    status: TableState


class TableAssign(BaseModel):
    order_id: str


# -- inventory & purchasing ------------------------------------------------


class InventoryItemOut(Entity):
    id: str
    cafe_id: str
    item_name: str
    quantity: float
    unit: str
    min_threshold: float
    last_updated: UtcDatetime


class InventoryItemIn(BaseModel):
    item_name: str = Field(..., min_length=1)
    quantity: float = Field(0, ge=0)
    unit: str = "unit"
    min_threshold: float = Field(0, ge=0)


class InventoryItemUpdate(BaseModel):
    item_name: Optional[str] = Field(None, min_length=1)
    quantity: Optional[float] = Field(None, ge=0)
    unit: Optional[str] = None
    min_threshold: Optional[float] = Field(None, ge=0)


class StockAdjust(BaseModel):
    adjustment: float


class StockRef(Entity):
    item_name: str
    unit: str


class InventoryLogOut(Entity):
    id: str
    cafe_id: str
    inventory_item_id: str
    change_amount: float
    reason: str
    reference: Optional[str] = None
    created_at: UtcDatetime
    inventory_item: Optional[StockRef] = None


class IngredientIn(BaseModel):
    inventory_item_id: str
    quantity_required: float = Field(..., gt=0)


class IngredientOut(Entity):
    id: str
    menu_item_id: str
    inventory_item_id: str
    quantity_required: float
    created_at: UtcDatetime
    inventory_item: Optional[StockRef] = None


class SupplierOut(Entity):
    id: str
    cafe_id: str
    name: str
    contact_person: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None
    is_active: bool = True


class SupplierIn(BaseModel):
    name: str = Field(..., min_length=1)
    contact_person: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[EmailStr] = None
    address: Optional[str] = None
    is_active: bool = True


class SupplierUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    contact_person: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[EmailStr] = None
    address: Optional[str] = None
    is_active: Optional[bool] = None


PurchaseStatus = Literal["pending", "ordered", "delivered", "cancelled"]


class PurchaseOrderItemIn(BaseModel):
    inventory_item_id: Optional[str] = None
    item_name: str
    quantity: float = Field(..., gt=0)
    unit_price: float = Field(0, ge=0)


class PurchaseOrderItemOut(Entity):
    id: str
    inventory_item_id: Optional[str] = None
    item_name: str
    quantity: float
    unit_price: float


class PurchaseOrderIn(BaseModel):
    supplier_id: Optional[str] = None
    expected_date: Optional[date] = None
    notes: Optional[str] = None
    items: list[PurchaseOrderItemIn] = Field(default_factory=list)


class PurchaseOrderOut(Entity):
    id: str
    cafe_id: str
    supplier_id: Optional[str] = None
    order_number: str
    status: PurchaseStatus
    total_amount: float
    expected_date: Optional[date] = None
    notes: Optional[str] = None
    created_at: UtcDatetime
    updated_at: UtcDatetime
    items: list[PurchaseOrderItemOut] = Field(default_factory=list)


class PurchaseStatusUpdate(BaseModel):
    status: PurchaseStatus


# -- staff -----------------------------------------------------------------


class StaffOut(Entity):
    id: str
    cafe_id: str
    name: str
    role: str
    phone: Optional[str] = None
    email: Optional[str] = None
    hourly_rate: Optional[float] = None
    is_active: bool = True


class StaffIn(BaseModel):
    name: str = Field(..., min_length=1)
    role: str = "waiter"
    phone: Optional[str] = None
    email: Optional[EmailStr] = None
    hourly_rate: Optional[float] = Field(None, ge=0)
    is_active: bool = True


class ShiftOut(Entity):
    id: str
    cafe_id: str
    staff_id: str
    start_time: UtcDatetime
    end_time: UtcDatetime
    notes: Optional[str] = None


class ShiftIn(BaseModel):
    staff_id: str
    start_time: datetime
    end_time: datetime
    notes: Optional[str] = None


class AttendanceOut(Entity):
    id: str
    cafe_id: str
    staff_id: str
    shift_id: Optional[str] = None
    check_in: UtcDatetime
    check_out: Optional[UtcDatetime] = None
    status: Literal["present", "on_break", "on_leave"]


class CheckInPayload(BaseModel):
    staff_id: str
    shift_id: Optional[str] = None


class BreakPayload(BaseModel):
    on_break: bool


# -- crm -------------------------------------------------------------------


class CustomerOut(Entity):
    id: str
    cafe_id: str
    customer_name: str
    phone: Optional[str] = None
    total_spend: float
    visit_count: int
    last_visit: Optional[UtcDatetime] = None
    loyalty_points: int


class RedeemPayload(BaseModel):
    points: int = Field(..., gt=0)
    amount_value: float = Field(..., ge=0)


# -- accounts --------------------------------------------------------------


class InvoiceIn(BaseModel):
    type: Literal["sales", "purchase"] = "sales"
    invoice_number: str
    party_id: Optional[str] = None
    invoice_date: date
    total_amount: float = Field(..., ge=0)
    status: str = "unpaid"


class InvoiceOut(Entity):
    id: str
    cafe_id: str
    type: str
    invoice_number: str
    party_id: Optional[str] = None
    invoice_date: date
    total_amount: float
    status: str


class ExpenseIn(BaseModel):
    category: str
    amount: float = Field(..., ge=0)
    date: date
    description: Optional[str] = None
    payment_mode: str = "cash"


class ExpenseOut(Entity):
    id: str
    cafe_id: str
    category: str
    amount: float
    date: date
    description: Optional[str] = None
    payment_mode: str


class LedgerOut(Entity):
    id: str
    cafe_id: str
    account_name: str
    account_type: str
    balance: float


class LedgerIn(BaseModel):
    account_name: str
    account_type: Literal["cash", "bank"] = "cash"
    balance: float = 0


class PartyOut(Entity):
    id: str
    cafe_id: str
    name: str
    party_type: str
    outstanding_balance: float


class PartyIn(BaseModel):
    name: str
    party_type: Literal["customer", "supplier"] = "customer"
    outstanding_balance: float = 0


# -- auth ------------------------------------------------------------------


class Credentials(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=6)


class SessionUser(BaseModel):
    id: str
    email: str
