"""Recipe lines linking menu items to the stock they consume."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models import InventoryItem, MenuItem, MenuItemIngredient
from ..schemas import IngredientIn, IngredientOut, to_entities, to_entity
from . import CafeGuard


async def list_ingredients(
    session: AsyncSession, cafe_id: str, menu_item_id: str
) -> list[IngredientOut]:
    await CafeGuard.get_scoped(session, MenuItem, menu_item_id, cafe_id)
    result = await session.execute(
        select(MenuItemIngredient)
        .where(MenuItemIngredient.menu_item_id == menu_item_id)
        .order_by(MenuItemIngredient.created_at)
    )
    return to_entities(IngredientOut, result.scalars())


async def add_ingredient(
    session: AsyncSession, cafe_id: str, menu_item_id: str, payload: IngredientIn
) -> IngredientOut:
    """Attach stock to a menu item; both must belong to ``cafe_id``."""

    await CafeGuard.get_scoped(session, MenuItem, menu_item_id, cafe_id)
    await CafeGuard.get_scoped(session, InventoryItem, payload.inventory_item_id, cafe_id)
    row = MenuItemIngredient(menu_item_id=menu_item_id, **payload.model_dump())
    session.add(row)
    await session.commit()
    await session.refresh(row, attribute_names=["inventory_item"])
    return to_entity(IngredientOut, row)


async def remove_ingredient(
    session: AsyncSession, cafe_id: str, menu_item_id: str, ingredient_id: str
) -> None:
    await CafeGuard.get_scoped(session, MenuItem, menu_item_id, cafe_id)
    row = await session.get(MenuItemIngredient, ingredient_id)
    if row is None or row.menu_item_id != menu_item_id:
        raise LookupError("ingredient not found")
    await session.delete(row)
    await session.commit()
