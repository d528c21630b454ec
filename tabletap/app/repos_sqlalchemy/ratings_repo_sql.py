"""Dish ratings left by customers after ordering."""

from __future__ import annotations

from typing import Sequence

from sqlalchemy import desc, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models import MenuItem, Order, Rating
from ..schemas import Conflict, RatingIn, RatingOut, to_entities


async def submit_ratings(
    session: AsyncSession, order_id: str, ratings: Sequence[RatingIn]
) -> list[RatingOut]:
    """Store one rating per rated item of ``order_id``.

    Every rated item must be a line of the order and may be rated only once
    per order; otherwise nothing is written and ``ValueError`` is raised.
    """

    order = await session.get(Order, order_id)
    if order is None:
        raise LookupError("order not found")
    if not ratings:
        raise ValueError("no ratings given")
    ordered = {line.menu_item_id for line in order.items}
    seen: set[str] = set()
    for entry in ratings:
        if entry.menu_item_id not in ordered:
            raise ValueError(f"item {entry.menu_item_id} is not part of the order")
        if entry.menu_item_id in seen:
            raise ValueError(f"item {entry.menu_item_id} rated twice")
        seen.add(entry.menu_item_id)

    existing = await session.scalar(
        select(Rating.id).where(
            Rating.order_id == order_id, Rating.menu_item_id.in_(seen)
        )
    )
    if existing is not None:
        raise Conflict("order already rated")

    rows = [
        Rating(
            order_id=order_id,
            menu_item_id=entry.menu_item_id,
            rating=entry.rating,
            comment=entry.comment or None,
        )
        for entry in ratings
    ]
    session.add_all(rows)
    await session.commit()
    return to_entities(RatingOut, rows)


async def list_for_item(session: AsyncSession, item_id: str) -> list[RatingOut]:
    result = await session.execute(
        select(Rating)
        .where(Rating.menu_item_id == item_id)
        .order_by(desc(Rating.created_at))
    )
    return to_entities(RatingOut, result.scalars())


async def list_for_cafe(session: AsyncSession, cafe_id: str) -> list[dict]:
    """Return the cafe's ratings newest first, each with the dish name."""

    result = await session.execute(
        select(Rating, MenuItem.name)
        .join(MenuItem, MenuItem.id == Rating.menu_item_id)
        .where(MenuItem.cafe_id == cafe_id)
        .order_by(desc(Rating.created_at))
    )
    out = []
    for rating, name in result.all():
        entry = RatingOut.model_validate(rating).model_dump(mode="json")
        entry["menu_item_name"] = name
        out.append(entry)
    return out
