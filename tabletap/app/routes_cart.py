"""Session cart endpoints used by the customer menu."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel

from .cart import CartStore, cart_view
from .db import get_session
from .repos_sqlalchemy import menu_repo_sql
from .utils.responses import failure_response, ok

router = APIRouter(prefix="/api/cart/{session_id}", tags=["cart"])


class AddItemPayload(BaseModel):
    menu_item_id: str


class CheckoutPayload(BaseModel):
    cafe_id: str
    table_number: Optional[int] = None
    customer_name: Optional[str] = None


def _store(request: Request) -> CartStore:
    return CartStore(request.app.state.redis)


@router.get("")
async def get_cart(session_id: str, request: Request) -> dict:
    cart = await _store(request).load(session_id)
    return ok(cart_view(cart))


@router.delete("")
async def clear_cart(session_id: str, request: Request) -> dict:
    store = _store(request)
    cart = await store.load(session_id)
    cart.clear()
    await store.clear(session_id)
    return ok(cart_view(cart))


@router.post("/items")
async def add_item(session_id: str, payload: AddItemPayload, request: Request) -> dict:
    async with get_session() as session:
        item = await menu_repo_sql.get_item(session, payload.menu_item_id)
    if item is None:
        raise HTTPException(404, "Menu item not found")
    store = _store(request)
    cart = await store.load(session_id)
    cart.add_item(item)
    await store.save(session_id, cart)
    return ok(cart_view(cart))


@router.delete("/items/{menu_item_id}")
async def remove_item(session_id: str, menu_item_id: str, request: Request) -> dict:
    store = _store(request)
    cart = await store.load(session_id)
    cart.remove_item(menu_item_id)
    await store.save(session_id, cart)
    return ok(cart_view(cart))


@router.post("/checkout")
async def checkout(session_id: str, payload: CheckoutPayload, request: Request):
    store = _store(request)
    cart = await store.load(session_id)
    result = await cart.checkout(
        payload.cafe_id,
        payload.table_number,
        payload.customer_name,
        redis=request.app.state.redis,
    )
    await store.save(session_id, cart)
    if not result.ok:
        status = 500 if result.code == "store" else 400
        return failure_response("CHECKOUT_FAILED", result.error or "checkout failed", status)
    return ok({"order": result.data.model_dump(mode="json"), "cart": cart_view(cart)})
