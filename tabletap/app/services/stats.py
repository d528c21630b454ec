"""Dashboard statistics for a cafe.

The six reads are independent and run concurrently, each on its own
session; results are combined without any cross-query consistency.
"""

from __future__ import annotations

import asyncio
from datetime import date, datetime
from typing import Any, Awaitable, Callable

from zoneinfo import ZoneInfo

from config import get_settings

from ..db import get_session
from ..repos_sqlalchemy import dashboard_repo_sql as repo


async def _read(fn: Callable[..., Awaitable[Any]], *args: Any) -> Any:
    async with get_session() as session:
        return await fn(session, *args)


async def compute_stats(
    cafe_id: str, today: date | None = None, tz: str | None = None
) -> dict:
    """Return totals, the 7-day chart and the five most recent orders."""

    tz = tz or get_settings().default_tz
    today = today or datetime.now(ZoneInfo(tz)).date()
    (
        revenue,
        active,
        total,
        menu_count,
        window,
        recent,
    ) = await asyncio.gather(
        _read(repo.total_revenue, cafe_id),
        _read(repo.active_orders, cafe_id),
        _read(repo.total_orders, cafe_id),
        _read(repo.menu_items_count, cafe_id),
        _read(repo.orders_since, cafe_id, repo.window_start(today, tz)),
        _read(repo.recent_orders, cafe_id),
    )
    return {
        "total_revenue": revenue,
        "active_orders": active,
        "total_orders": total,
        "menu_items_count": menu_count,
        "chart_data": repo.build_chart(window, today, tz),
        "recent_orders": [order.model_dump(mode="json") for order in recent],
    }
