"""Sales analytics over a day, month or year (Pro plan)."""

from __future__ import annotations

import calendar
from datetime import date, datetime, time, timedelta
from typing import Literal

from zoneinfo import ZoneInfo

from ..domain import OrderStatus
from ..schemas import OrderWithItems

ViewMode = Literal["day", "month", "year"]

STATUS_COLORS = {
    OrderStatus.COMPLETED: "#10b981",
    OrderStatus.PREPARING: "#f59e0b",
    OrderStatus.PENDING: "#3b82f6",
    OrderStatus.CANCELLED: "#ef4444",
}


def period_bounds(view: ViewMode, day: date, tz: str) -> tuple[datetime, datetime]:
    """Return the local ``[start, end)`` of the period containing ``day``."""

    tzinfo = ZoneInfo(tz)
    if view == "day":
        first, last = day, day
    elif view == "month":
        first = day.replace(day=1)
        last = day.replace(day=calendar.monthrange(day.year, day.month)[1])
    else:
        first, last = date(day.year, 1, 1), date(day.year, 12, 31)
    start = datetime.combine(first, time.min, tzinfo)
    end = datetime.combine(last + timedelta(days=1), time.min, tzinfo)
    return start, end


def _buckets(view: ViewMode, start: datetime, end: datetime) -> list[dict]:
    if view == "day":
        return [
            {"name": f"{hour:02d}:00", "hour": hour, "revenue": 0.0, "orders": 0}
            for hour in range(24)
        ]
    if view == "month":
        days = (end.date() - start.date()).days
        return [
            {
                "name": f"{d:%b} {d.day}",
                "date": d.isoformat(),
                "revenue": 0.0,
                "orders": 0,
            }
            for d in (start.date() + timedelta(days=i) for i in range(days))
        ]
    return [
        {"name": calendar.month_abbr[month], "month": month, "revenue": 0.0, "orders": 0}
        for month in range(1, 13)
    ]


def summarize(
    orders: list[OrderWithItems], view: ViewMode, start: datetime, end: datetime
) -> dict:
    """Aggregate revenue, top items, status mix and per-table performance."""

    tzinfo = start.tzinfo
    chart = _buckets(view, start, end)
    index = {
        "day": lambda ts: ts.hour,
        "month": lambda ts: (ts.date() - start.date()).days,
        "year": lambda ts: ts.month - 1,
    }[view]

    total_revenue = 0.0
    total_orders = 0
    items: dict[str, dict] = {}
    tables: dict[int, dict] = {}
    statuses = {status: 0 for status in STATUS_COLORS}

    for order in orders:
        completed = order.status is OrderStatus.COMPLETED
        statuses[order.status] += 1
        bucket = chart[index(order.created_at.astimezone(tzinfo))]
        if completed:
            total_revenue += order.total_amount
            bucket["revenue"] += order.total_amount
        if order.status is OrderStatus.CANCELLED:
            continue
        total_orders += 1
        bucket["orders"] += 1
        table = tables.setdefault(order.table_number, {"orders": 0, "revenue": 0.0})
        table["orders"] += 1
        if completed:
            table["revenue"] += order.total_amount
        for line in order.order_items:
            key = line.menu_item_id or "unknown"
            name = line.menu_items.name if line.menu_items else "Unknown Item"
            entry = items.setdefault(key, {"name": name, "quantity": 0, "revenue": 0.0})
            entry["quantity"] += line.quantity
            if completed:
                entry["revenue"] += line.price * line.quantity

    return {
        "total_revenue": round(total_revenue, 2),
        "total_orders": total_orders,
        "chart_data": chart,
        "top_items": sorted(items.values(), key=lambda e: e["quantity"], reverse=True)[:5],
        "status_distribution": [
            {"name": status.value.title(), "value": count, "color": STATUS_COLORS[status]}
            for status, count in statuses.items()
            if count
        ],
        "table_performance": sorted(
            (
                {"table": f"Table {number}", **stats}
                for number, stats in tables.items()
            ),
            key=lambda e: e["revenue"],
            reverse=True,
        ),
    }
