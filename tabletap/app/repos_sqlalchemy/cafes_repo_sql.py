"""Cafe (tenant) persistence, including the plan field."""

from __future__ import annotations

from sqlalchemy import desc, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from config import Plan

from ..domain import OrderStatus
from ..models import Cafe, Order
from ..schemas import CafeCreate, CafeOut, CafeUpdate, Conflict, to_entities, to_entity


async def get(session: AsyncSession, cafe_id: str) -> CafeOut | None:
    cafe = await session.get(Cafe, cafe_id)
    return to_entity(CafeOut, cafe) if cafe else None


async def get_by_owner(session: AsyncSession, owner_id: str) -> CafeOut | None:
    """Return the cafe owned by ``owner_id``; owners have at most one."""

    result = await session.execute(
        select(Cafe).where(Cafe.owner_id == owner_id).order_by(Cafe.created_at).limit(1)
    )
    cafe = result.scalar_one_or_none()
    return to_entity(CafeOut, cafe) if cafe else None


async def create(session: AsyncSession, owner_id: str, payload: CafeCreate) -> CafeOut:
    """Create the owner's cafe; raises ``Conflict`` if one already exists."""

    if await get_by_owner(session, owner_id) is not None:
        raise Conflict("owner already has a cafe")
    cafe = Cafe(owner_id=owner_id, **payload.model_dump())
    session.add(cafe)
    await session.commit()
    return to_entity(CafeOut, cafe)


async def update_profile(
    session: AsyncSession, cafe_id: str, payload: CafeUpdate
) -> CafeOut:
    cafe = await session.get(Cafe, cafe_id)
    if cafe is None:
        raise LookupError("cafe not found")
    for key, value in payload.model_dump(exclude_unset=True).items():
        setattr(cafe, key, value)
    await session.commit()
    return to_entity(CafeOut, cafe)


async def list_all(session: AsyncSession) -> list[CafeOut]:
    """Return every cafe, newest first."""

    result = await session.execute(select(Cafe).order_by(desc(Cafe.created_at)))
    return to_entities(CafeOut, result.scalars())


async def set_plan(session: AsyncSession, cafe_id: str, plan: Plan) -> CafeOut:
    cafe = await session.get(Cafe, cafe_id)
    if cafe is None:
        raise LookupError("cafe not found")
    cafe.subscription_plan = Plan(plan).value
    await session.commit()
    return to_entity(CafeOut, cafe)


async def platform_totals(session: AsyncSession) -> dict:
    """Cafe, plan and revenue totals across every tenant."""

    cafes = await session.scalar(select(func.count()).select_from(Cafe))
    pro = await session.scalar(
        select(func.count())
        .select_from(Cafe)
        .where(Cafe.subscription_plan == Plan.PRO.value)
    )
    orders = await session.scalar(select(func.count()).select_from(Order))
    revenue = await session.scalar(
        select(func.coalesce(func.sum(Order.total_amount), 0)).where(
            Order.status == OrderStatus.COMPLETED.value
        )
    )
    return {
        "total_cafes": int(cafes or 0),
        "pro_cafes": int(pro or 0),
        "basic_cafes": int(cafes or 0) - int(pro or 0),
        "total_orders": int(orders or 0),
        "total_revenue": float(revenue or 0),
    }
