"""Owner dashboard statistics and Pro analytics."""

from __future__ import annotations

from datetime import date, datetime
from typing import Literal

from fastapi import APIRouter, Depends, Query, Request
from zoneinfo import ZoneInfo

from config import get_settings

from .db import get_session
from .deps import FeatureGate, get_owned_cafe
from .repos_sqlalchemy import dashboard_repo_sql
from .schemas import CafeOut
from .services import analytics
from .services.query_cache import QueryCache, stats_key
from .services.stats import compute_stats
from .utils.responses import ok

router = APIRouter(prefix="/api/cafes/{cafe_id}", tags=["dashboard"])

analytics_gate = FeatureGate("analytics", mode="blur")


@router.get("/stats")
async def stats(request: Request, cafe: CafeOut = Depends(get_owned_cafe)) -> dict:
    """Dashboard totals and the 7-day chart, recomputed on every call.

    The result also replaces the cached copy shared with open dashboard streams.
    """

    cache = QueryCache(request.app.state.redis, get_settings().query_cache_ttl_secs)
    data = await cache.refetch(stats_key(cafe.id), lambda: compute_stats(cafe.id))
    return ok(data)


@router.get("/analytics")
async def sales_analytics(
    request: Request,
    view: Literal["day", "month", "year"] = "month",
    day: date | None = Query(None, alias="date"),
    cafe: CafeOut = Depends(analytics_gate),
) -> dict:
    tz = get_settings().default_tz
    day = day or datetime.now(ZoneInfo(tz)).date()
    start, end = analytics.period_bounds(view, day, tz)
    async with get_session() as session:
        orders = await dashboard_repo_sql.orders_between(session, cafe.id, start, end)
    return ok(analytics_gate.wrap(request, analytics.summarize(orders, view, start, end)))
