"""SQLAlchemy-backed repository helpers for orders.

An order and its lines are written in one transaction, so a failed checkout
never leaves an order without items behind. Each line keeps the unit price
captured when the order was placed. After a successful commit the change is
published on the cafe's realtime channel when a Redis client is supplied.
"""

from __future__ import annotations

from typing import Optional, Sequence

from sqlalchemy import desc, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..domain import OrderStatus, can_transition
from ..models import Cafe, Order, OrderItem
from ..schemas import (
    OrderChange,
    OrderCreate,
    OrderItemDetail,
    OrderOut,
    OrderWithItems,
    to_entities,
    to_entity,
)

# (menu_item_id, quantity, unit price)
Line = tuple[Optional[str], int, float]


async def create_order(
    session: AsyncSession,
    payload: OrderCreate,
    lines: Sequence[Line] = (),
    redis=None,
) -> OrderOut:
    """Insert an order with ``lines`` and return it.

    ``table_number`` defaults to ``0`` when absent. Raises ``LookupError``
    when the cafe does not exist.
    """

    if await session.get(Cafe, payload.cafe_id) is None:
        raise LookupError("cafe not found")
    for _, quantity, _ in lines:
        if quantity < 1:
            raise ValueError("quantity must be at least 1")

    order = Order(
        cafe_id=payload.cafe_id,
        table_number=payload.table_number or 0,
        customer_name=payload.customer_name or None,
        status=OrderStatus(payload.status).value,
        total_amount=payload.total_amount,
    )
    order.items = [
        OrderItem(menu_item_id=menu_item_id, quantity=quantity, price=price)
        for menu_item_id, quantity, price in lines
    ]
    session.add(order)
    await session.commit()

    created = to_entity(OrderOut, order)

    from ..routes_metrics import orders_created_total

    orders_created_total.inc()
    if redis is not None:
        from ..realtime import publish_order_change

        await publish_order_change(
            redis, OrderChange(type="INSERT", cafe_id=created.cafe_id, new=created)
        )
    return created


async def list_orders(
    session: AsyncSession, cafe_id: str | None = None
) -> list[OrderWithItems]:
    """Return orders newest first with their lines and menu items."""

    query = select(Order).order_by(desc(Order.created_at))
    if cafe_id:
        query = query.where(Order.cafe_id == cafe_id)
    result = await session.execute(query)
    return to_entities(OrderWithItems, result.scalars())


async def get_order(session: AsyncSession, order_id: str) -> OrderOut | None:
    order = await session.get(Order, order_id)
    return to_entity(OrderOut, order) if order else None


async def items_for_order(session: AsyncSession, order_id: str) -> list[OrderItemDetail]:
    """Return the lines of ``order_id`` with their menu item attached."""

    result = await session.execute(
        select(OrderItem)
        .where(OrderItem.order_id == order_id)
        .order_by(OrderItem.created_at)
    )
    return to_entities(OrderItemDetail, result.scalars())


async def update_status(
    session: AsyncSession,
    order_id: str,
    status: OrderStatus,
    cafe_id: str | None = None,
    redis=None,
) -> OrderOut:
    """Move an order to ``status`` following :data:`TRANSITIONS`.

    Raises ``LookupError`` for unknown orders (or orders of another cafe when
    ``cafe_id`` is given) and ``ValueError`` for a forbidden transition.
    """

    order = await session.get(Order, order_id)
    if order is None or (cafe_id is not None and order.cafe_id != cafe_id):
        raise LookupError("order not found")
    old = to_entity(OrderOut, order)
    target = OrderStatus(status)
    if not can_transition(old.status, target):
        raise ValueError(f"cannot move order from {old.status.value} to {target.value}")
    order.status = target.value
    await session.commit()

    new = to_entity(OrderOut, order)
    if redis is not None:
        from ..realtime import publish_order_change

        await publish_order_change(
            redis, OrderChange(type="UPDATE", cafe_id=new.cafe_id, new=new, old=old)
        )
    return new


__all__ = [
    "create_order",
    "list_orders",
    "get_order",
    "items_for_order",
    "update_status",
]
