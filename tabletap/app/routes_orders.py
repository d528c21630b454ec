"""Order placement, listing and status changes."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from fastapi.responses import JSONResponse

from .auth import get_current_user
from .db import get_session
from .repos_sqlalchemy import cafes_repo_sql, orders_repo_sql, users_repo_sql
from .schemas import OrderCreate, SessionUser, StatusUpdate
from .utils.responses import ok
from .utils.results import run, store_call

router = APIRouter(prefix="/api/orders", tags=["orders"])


@router.post("")
async def create_order(payload: OrderCreate, request: Request):
    """Create a single order row and announce it on the cafe's feed."""

    async with get_session() as session:
        result = await store_call(
            orders_repo_sql.create_order,
            session,
            payload,
            redis=request.app.state.redis,
        )
    if not result.ok:
        return JSONResponse({"error": result.error}, status_code=500)
    return result.data.model_dump(mode="json")


@router.get("")
async def list_orders(
    cafe_id: str | None = Query(None, alias="cafeId"),
    user: SessionUser = Depends(get_current_user),
):
    """Orders with their lines, newest first.

    Without ``cafeId`` super admins see every order and owners their own
    cafe's orders.
    """

    async with get_session() as session:
        if cafe_id is None and not await users_repo_sql.is_super_admin(
            session, user.email
        ):
            own = await cafes_repo_sql.get_by_owner(session, user.id)
            if own is None:
                return []
            cafe_id = own.id
        elif cafe_id is not None:
            cafe = await cafes_repo_sql.get(session, cafe_id)
            if cafe is None or cafe.owner_id != user.id:
                raise HTTPException(403, "Not your cafe")
        orders = await run(orders_repo_sql.list_orders, session, cafe_id)
    return [order.model_dump(mode="json") for order in orders]


@router.patch("/{order_id}/status")
async def update_status(
    order_id: str,
    payload: StatusUpdate,
    request: Request,
    user: SessionUser = Depends(get_current_user),
) -> dict:
    async with get_session() as session:
        order = await orders_repo_sql.get_order(session, order_id)
        cafe = await cafes_repo_sql.get(session, order.cafe_id) if order else None
        if cafe is None or cafe.owner_id != user.id:
            raise HTTPException(404, "Order not found")
        updated = await run(
            orders_repo_sql.update_status,
            session,
            order_id,
            payload.status,
            cafe_id=cafe.id,
            redis=request.app.state.redis,
        )
    return ok(updated.model_dump(mode="json"))
