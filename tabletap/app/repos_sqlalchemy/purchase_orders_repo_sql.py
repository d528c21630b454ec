"""Purchase orders raised with suppliers.

Receiving an order (``delivered``) books every line referencing an inventory
item into stock and the movement log. Delivered and cancelled orders are
final, so stock is incremented exactly once per order.
"""

from __future__ import annotations

from datetime import date, datetime, timezone

from sqlalchemy import desc, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models import InventoryItem, PurchaseOrder, PurchaseOrderItem, Supplier
from ..schemas import PurchaseOrderIn, PurchaseOrderOut, to_entities, to_entity
from . import CafeGuard, inventory_repo_sql

FINAL_STATUSES = ("delivered", "cancelled")


async def next_order_number(
    session: AsyncSession, cafe_id: str, day: date | None = None
) -> str:
    """Return the next ``PO-YYYYMMDD-NNNN`` number for ``day``."""

    day = day or datetime.now(timezone.utc).date()
    prefix = f"PO-{day:%Y%m%d}-"
    issued = await session.scalar(
        select(func.count())
        .select_from(PurchaseOrder)
        .where(
            PurchaseOrder.cafe_id == cafe_id,
            PurchaseOrder.order_number.like(f"{prefix}%"),
        )
    )
    return f"{prefix}{int(issued or 0) + 1:04d}"


async def list_orders(session: AsyncSession, cafe_id: str) -> list[PurchaseOrderOut]:
    result = await session.execute(
        select(PurchaseOrder)
        .where(PurchaseOrder.cafe_id == cafe_id)
        .order_by(desc(PurchaseOrder.created_at))
    )
    return to_entities(PurchaseOrderOut, result.scalars())


async def create_order(
    session: AsyncSession, cafe_id: str, payload: PurchaseOrderIn
) -> PurchaseOrderOut:
    if payload.supplier_id:
        await CafeGuard.get_scoped(session, Supplier, payload.supplier_id, cafe_id)
    for line in payload.items:
        if line.inventory_item_id:
            await CafeGuard.get_scoped(
                session, InventoryItem, line.inventory_item_id, cafe_id
            )

    order = PurchaseOrder(
        cafe_id=cafe_id,
        supplier_id=payload.supplier_id,
        order_number=await next_order_number(session, cafe_id),
        status="pending",
        total_amount=round(
            sum(line.quantity * line.unit_price for line in payload.items), 2
        ),
        expected_date=payload.expected_date,
        notes=payload.notes,
    )
    order.items = [PurchaseOrderItem(**line.model_dump()) for line in payload.items]
    session.add(order)
    await session.commit()
    return to_entity(PurchaseOrderOut, order)


async def update_status(
    session: AsyncSession, cafe_id: str, order_id: str, status: str
) -> PurchaseOrderOut:
    order = await CafeGuard.get_scoped(session, PurchaseOrder, order_id, cafe_id)
    if order.status in FINAL_STATUSES:
        raise ValueError(f"purchase order already {order.status}")
    if status == "delivered":
        for line in order.items:
            if not line.inventory_item_id:
                continue
            stock = await session.get(InventoryItem, line.inventory_item_id)
            if stock is None or stock.cafe_id != cafe_id:
                continue
            inventory_repo_sql.record_movement(
                session, stock, float(line.quantity), "purchase_order", order.order_number
            )
    order.status = status
    await session.commit()
    return to_entity(PurchaseOrderOut, order)


async def delete_order(session: AsyncSession, cafe_id: str, order_id: str) -> None:
    order = await CafeGuard.get_scoped(session, PurchaseOrder, order_id, cafe_id)
    await session.delete(order)
    await session.commit()
