"""Helpers for owner dashboard aggregates.

Each helper is a single independent read so callers can run them
concurrently on separate sessions.
"""

from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone
from typing import Iterable

from sqlalchemy import desc, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from zoneinfo import ZoneInfo

from ..domain import ACTIVE_STATUSES, OrderStatus
from ..models import MenuItem, Order
from ..schemas import OrderOut, OrderWithItems, as_utc, to_entities

CHART_DAYS = 7


async def total_revenue(session: AsyncSession, cafe_id: str) -> float:
    """Sum of ``total_amount`` over completed orders."""

    total = await session.scalar(
        select(func.coalesce(func.sum(Order.total_amount), 0)).where(
            Order.cafe_id == cafe_id, Order.status == OrderStatus.COMPLETED.value
        )
    )
    return round(float(total or 0), 2)


async def active_orders(session: AsyncSession, cafe_id: str) -> int:
    count = await session.scalar(
        select(func.count())
        .select_from(Order)
        .where(
            Order.cafe_id == cafe_id,
            Order.status.in_([s.value for s in ACTIVE_STATUSES]),
        )
    )
    return int(count or 0)


async def total_orders(session: AsyncSession, cafe_id: str) -> int:
    count = await session.scalar(
        select(func.count()).select_from(Order).where(Order.cafe_id == cafe_id)
    )
    return int(count or 0)


async def menu_items_count(session: AsyncSession, cafe_id: str) -> int:
    count = await session.scalar(
        select(func.count()).select_from(MenuItem).where(MenuItem.cafe_id == cafe_id)
    )
    return int(count or 0)


async def orders_since(
    session: AsyncSession, cafe_id: str, since: datetime
) -> list[tuple[datetime, str, float]]:
    """Return ``(created_at, status, total_amount)`` for orders at or after ``since``."""

    result = await session.execute(
        select(Order.created_at, Order.status, Order.total_amount).where(
            Order.cafe_id == cafe_id,
            Order.created_at >= since.astimezone(timezone.utc),
        )
    )
    return [(as_utc(ts), status, float(amount)) for ts, status, amount in result.all()]


async def recent_orders(
    session: AsyncSession, cafe_id: str, limit: int = 5
) -> list[OrderOut]:
    result = await session.execute(
        select(Order)
        .where(Order.cafe_id == cafe_id)
        .order_by(desc(Order.created_at))
        .limit(limit)
    )
    return to_entities(OrderOut, result.scalars())


def window_start(today: date, tz: str) -> datetime:
    """UTC instant at which the chart window of ``today`` in ``tz`` begins."""

    first = today - timedelta(days=CHART_DAYS - 1)
    return datetime.combine(first, time.min, ZoneInfo(tz)).astimezone(timezone.utc)


def build_chart(
    rows: Iterable[tuple[datetime, str, float]], today: date, tz: str
) -> list[dict]:
    """Bucket ``rows`` into the seven local days ending ``today``, oldest first.

    Revenue counts completed orders only; the order count includes every
    status except cancelled. Days without orders are present with zeros.
    """

    tzinfo = ZoneInfo(tz)
    days = [today - timedelta(days=offset) for offset in range(CHART_DAYS - 1, -1, -1)]
    buckets = {day: {"revenue": 0.0, "orders": 0} for day in days}
    for created_at, status, amount in rows:
        local_day = as_utc(created_at).astimezone(tzinfo).date()
        bucket = buckets.get(local_day)
        if bucket is None:
            continue
        if status == OrderStatus.COMPLETED.value:
            bucket["revenue"] += amount
        if status != OrderStatus.CANCELLED.value:
            bucket["orders"] += 1
    return [
        {
            "name": day.strftime("%a"),
            "date": day.isoformat(),
            "revenue": round(buckets[day]["revenue"], 2),
            "orders": buckets[day]["orders"],
        }
        for day in days
    ]


async def orders_between(
    session: AsyncSession, cafe_id: str, start: datetime, end: datetime
) -> list[OrderWithItems]:
    """Orders created in ``[start, end)`` with their lines, oldest first."""

    result = await session.execute(
        select(Order)
        .where(
            Order.cafe_id == cafe_id,
            Order.created_at >= start.astimezone(timezone.utc),
            Order.created_at < end.astimezone(timezone.utc),
        )
        .order_by(Order.created_at)
    )
    return to_entities(OrderWithItems, result.scalars())
