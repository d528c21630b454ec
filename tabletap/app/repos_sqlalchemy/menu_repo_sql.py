"""Menu item persistence with rating aggregates for listings."""

from __future__ import annotations

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from ..models import MenuItem, MenuItemIngredient, OrderItem, Rating
from ..schemas import MenuItemIn, MenuItemOut, MenuItemUpdate, to_entity
from . import CafeGuard


async def list_items(
    session: AsyncSession, cafe_id: str, only_available: bool = False
) -> list[MenuItemOut]:
    """Return the cafe's menu ordered by category and name.

    Each item carries ``avg_rating`` (one decimal) and ``total_ratings``;
    items without ratings report ``None`` and ``0``.
    """

    stats = (
        select(
            Rating.menu_item_id,
            func.avg(Rating.rating).label("avg_rating"),
            func.count(Rating.id).label("total_ratings"),
        )
        .group_by(Rating.menu_item_id)
        .subquery()
    )
    query = (
        select(MenuItem, stats.c.avg_rating, stats.c.total_ratings)
        .outerjoin(stats, stats.c.menu_item_id == MenuItem.id)
        .where(MenuItem.cafe_id == cafe_id)
        .order_by(MenuItem.category, MenuItem.name)
    )
    if only_available:
        query = query.where(MenuItem.is_available.is_(True))
    result = await session.execute(query)
    items = []
    for item, avg_rating, total in result.all():
        entity = to_entity(MenuItemOut, item)
        items.append(
            entity.model_copy(
                update={
                    "avg_rating": round(float(avg_rating), 1) if avg_rating else None,
                    "total_ratings": int(total or 0),
                }
            )
        )
    return items


async def get_item(session: AsyncSession, item_id: str) -> MenuItemOut | None:
    item = await session.get(MenuItem, item_id)
    return to_entity(MenuItemOut, item) if item else None


async def create_item(
    session: AsyncSession, cafe_id: str, payload: MenuItemIn
) -> MenuItemOut:
    item = MenuItem(cafe_id=cafe_id, **payload.model_dump())
    session.add(item)
    await session.commit()
    return to_entity(MenuItemOut, item)


async def update_item(
    session: AsyncSession, cafe_id: str, item_id: str, payload: MenuItemUpdate
) -> MenuItemOut:
    item = await CafeGuard.get_scoped(session, MenuItem, item_id, cafe_id)
    for key, value in payload.model_dump(exclude_unset=True).items():
        setattr(item, key, value)
    await session.commit()
    return to_entity(MenuItemOut, item)


async def delete_item(session: AsyncSession, cafe_id: str, item_id: str) -> None:
    """Delete a menu item.

    Past order lines keep their captured price but lose the item reference;
    the item's ratings and recipe lines are removed with it.
    """

    item = await CafeGuard.get_scoped(session, MenuItem, item_id, cafe_id)
    await session.execute(
        update(OrderItem)
        .where(OrderItem.menu_item_id == item_id)
        .values(menu_item_id=None)
    )
    await session.execute(delete(Rating).where(Rating.menu_item_id == item_id))
    await session.execute(
        delete(MenuItemIngredient).where(MenuItemIngredient.menu_item_id == item_id)
    )
    await session.delete(item)
    await session.commit()


async def count_items(session: AsyncSession, cafe_id: str) -> int:
    total = await session.scalar(
        select(func.count()).select_from(MenuItem).where(MenuItem.cafe_id == cafe_id)
    )
    return int(total or 0)
