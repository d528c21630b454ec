"""Stock levels of ingredients and supplies.

Every stock movement is written to ``inventory_logs`` in the same
transaction as the quantity change.
"""

from __future__ import annotations

from sqlalchemy import delete, desc, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from ..models import InventoryItem, InventoryLog, MenuItemIngredient, PurchaseOrderItem
from ..schemas import (
    InventoryItemIn,
    InventoryItemOut,
    InventoryItemUpdate,
    InventoryLogOut,
    to_entities,
    to_entity,
)
from . import CafeGuard

LOG_LIMIT = 50


async def list_items(
    session: AsyncSession, cafe_id: str, low_stock_only: bool = False
) -> list[InventoryItemOut]:
    query = (
        select(InventoryItem)
        .where(InventoryItem.cafe_id == cafe_id)
        .order_by(InventoryItem.item_name)
    )
    if low_stock_only:
        query = query.where(InventoryItem.quantity <= InventoryItem.min_threshold)
    result = await session.execute(query)
    return to_entities(InventoryItemOut, result.scalars())


async def create_item(
    session: AsyncSession, cafe_id: str, payload: InventoryItemIn
) -> InventoryItemOut:
    item = InventoryItem(cafe_id=cafe_id, **payload.model_dump())
    session.add(item)
    await session.commit()
    return to_entity(InventoryItemOut, item)


async def update_item(
    session: AsyncSession, cafe_id: str, item_id: str, payload: InventoryItemUpdate
) -> InventoryItemOut:
    item = await CafeGuard.get_scoped(session, InventoryItem, item_id, cafe_id)
    for key, value in payload.model_dump(exclude_unset=True).items():
        setattr(item, key, value)
    await session.commit()
    return to_entity(InventoryItemOut, item)


async def delete_item(session: AsyncSession, cafe_id: str, item_id: str) -> None:
    """Delete a stock item with its recipe lines and movement history.

    Purchase order lines keep their name and quantity but lose the link.
    """

    item = await CafeGuard.get_scoped(session, InventoryItem, item_id, cafe_id)
    await session.execute(
        delete(MenuItemIngredient).where(MenuItemIngredient.inventory_item_id == item_id)
    )
    await session.execute(delete(InventoryLog).where(InventoryLog.inventory_item_id == item_id))
    await session.execute(
        update(PurchaseOrderItem)
        .where(PurchaseOrderItem.inventory_item_id == item_id)
        .values(inventory_item_id=None)
    )
    await session.delete(item)
    await session.commit()


def record_movement(
    session: AsyncSession,
    item: InventoryItem,
    change: float,
    reason: str,
    reference: str | None = None,
) -> None:
    """Apply ``change`` to ``item`` (flooring at zero) and log what moved.

    The caller commits.
    """

    before = float(item.quantity or 0)
    after = max(0.0, before + change)
    item.quantity = after
    session.add(
        InventoryLog(
            cafe_id=item.cafe_id,
            inventory_item_id=item.id,
            change_amount=round(after - before, 3),
            reason=reason,
            reference=reference,
        )
    )


async def adjust_stock(
    session: AsyncSession, cafe_id: str, item_id: str, adjustment: float
) -> InventoryItemOut:
    """Add ``adjustment`` (may be negative) to the stock, flooring at zero."""

    item = await CafeGuard.get_scoped(session, InventoryItem, item_id, cafe_id)
    record_movement(session, item, adjustment, "adjustment")
    await session.commit()
    return to_entity(InventoryItemOut, item)


async def list_logs(
    session: AsyncSession, cafe_id: str, item_id: str | None = None
) -> list[InventoryLogOut]:
    """Latest stock movements, newest first, optionally for one item."""

    query = (
        select(InventoryLog)
        .where(InventoryLog.cafe_id == cafe_id)
        .order_by(desc(InventoryLog.created_at))
        .limit(LOG_LIMIT)
    )
    if item_id:
        query = query.where(InventoryLog.inventory_item_id == item_id)
    result = await session.execute(query)
    return to_entities(InventoryLogOut, result.scalars())
