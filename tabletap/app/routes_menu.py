"""Menu management for owners and the public menu for customers."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from .db import get_session
from .deps import FeatureGate
from .repos_sqlalchemy import cafes_repo_sql, menu_repo_sql, recipes_repo_sql
from .schemas import CafeOut, IngredientIn, MenuItemIn, MenuItemUpdate
from .utils.responses import ok
from .utils.results import run

router = APIRouter(prefix="/api/cafes/{cafe_id}/menu", tags=["menu"])
public_router = APIRouter(prefix="/api/public", tags=["public"])

menu_gate = FeatureGate("menu")
# Recipe lines require the inventory entitlement.
recipe_gate = FeatureGate("inventory")

PUBLIC_CAFE_FIELDS = {"id", "name", "description", "logo_url"}


@router.get("")
async def list_menu(cafe: CafeOut = Depends(menu_gate)) -> dict:
    async with get_session() as session:
        items = await run(menu_repo_sql.list_items, session, cafe.id)
    return ok([item.model_dump(mode="json") for item in items])


@router.post("")
async def create_item(payload: MenuItemIn, cafe: CafeOut = Depends(menu_gate)) -> dict:
    async with get_session() as session:
        item = await run(menu_repo_sql.create_item, session, cafe.id, payload)
    return ok(item.model_dump(mode="json"))


@router.patch("/{item_id}")
async def update_item(
    item_id: str, payload: MenuItemUpdate, cafe: CafeOut = Depends(menu_gate)
) -> dict:
    async with get_session() as session:
        item = await run(menu_repo_sql.update_item, session, cafe.id, item_id, payload)
    return ok(item.model_dump(mode="json"))


@router.delete("/{item_id}")
async def delete_item(item_id: str, cafe: CafeOut = Depends(menu_gate)) -> dict:
    async with get_session() as session:
        await run(menu_repo_sql.delete_item, session, cafe.id, item_id)
    return ok({"deleted": item_id})


@router.get("/{item_id}/ingredients")
async def list_ingredients(item_id: str, cafe: CafeOut = Depends(recipe_gate)) -> dict:
    async with get_session() as session:
        rows = await run(recipes_repo_sql.list_ingredients, session, cafe.id, item_id)
    return ok([row.model_dump(mode="json") for row in rows])


@router.post("/{item_id}/ingredients")
async def add_ingredient(
    item_id: str, payload: IngredientIn, cafe: CafeOut = Depends(recipe_gate)
) -> dict:
    async with get_session() as session:
        row = await run(recipes_repo_sql.add_ingredient, session, cafe.id, item_id, payload)
    return ok(row.model_dump(mode="json"))


@router.delete("/{item_id}/ingredients/{ingredient_id}")
async def remove_ingredient(
    item_id: str, ingredient_id: str, cafe: CafeOut = Depends(recipe_gate)
) -> dict:
    async with get_session() as session:
        await run(
            recipes_repo_sql.remove_ingredient, session, cafe.id, item_id, ingredient_id
        )
    return ok({"deleted": ingredient_id})


@public_router.get("/cafes/{cafe_id}/menu")
async def public_menu(cafe_id: str) -> dict:
    """Cafe profile and available items, as shown after scanning a table QR."""

    async with get_session() as session:
        cafe = await cafes_repo_sql.get(session, cafe_id)
        if cafe is None:
            raise HTTPException(404, "Cafe not found")
        items = await run(menu_repo_sql.list_items, session, cafe_id, only_available=True)
    return ok(
        {
            "cafe": cafe.model_dump(mode="json", include=PUBLIC_CAFE_FIELDS),
            "items": [item.model_dump(mode="json") for item in items],
        }
    )
