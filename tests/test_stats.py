import asyncio
from datetime import date, datetime, timedelta, timezone

import pytest

from tabletap.app.db import get_session
from tabletap.app.models import Order
from tabletap.app.repos_sqlalchemy.dashboard_repo_sql import build_chart, window_start
from tabletap.app.services.stats import compute_stats
from tests._seed_cafe import auth_headers, make_item, make_owner

TODAY = date(2024, 3, 10)


def _at(day: date, hour: int = 12) -> datetime:
    return datetime(day.year, day.month, day.day, hour, tzinfo=timezone.utc)


async def _add_order(cafe_id: str, status: str, amount: float, created_at: datetime, table: int = 1):
    async with get_session() as session:
        session.add(
            Order(
                cafe_id=cafe_id,
                table_number=table,
                status=status,
                total_amount=amount,
                created_at=created_at,
            )
        )
        await session.commit()


@pytest.mark.anyio
async def test_chart_counts_completed_revenue_and_skips_cancelled(database):
    _, cafe = await make_owner()
    first = TODAY - timedelta(days=6)
    await _add_order(cafe.id, "completed", 42.50, _at(first + timedelta(days=2)))
    await _add_order(cafe.id, "cancelled", 10.0, _at(first + timedelta(days=4)))

    stats = await compute_stats(cafe.id, today=TODAY, tz="UTC")

    chart = stats["chart_data"]
    assert len(chart) == 7
    assert chart[0]["date"] == first.isoformat()
    assert chart[-1]["date"] == TODAY.isoformat()
    assert (chart[2]["revenue"], chart[2]["orders"]) == (42.5, 1)
    assert (chart[4]["revenue"], chart[4]["orders"]) == (0, 0)
    assert all(
        (day["revenue"], day["orders"]) == (0, 0)
        for index, day in enumerate(chart)
        if index != 2
    )
    assert chart[2]["name"] == (first + timedelta(days=2)).strftime("%a")


@pytest.mark.anyio
async def test_totals_only_count_completed_revenue(database):
    _, cafe = await make_owner()
    _, other = await make_owner("other@cafe.test", "Other")
    await make_item(cafe.id)
    now = datetime.now(timezone.utc)
    await _add_order(cafe.id, "completed", 20.0, now - timedelta(minutes=5))
    await _add_order(cafe.id, "pending", 7.0, now - timedelta(minutes=4))
    await _add_order(cafe.id, "preparing", 8.0, now - timedelta(minutes=3))
    await _add_order(cafe.id, "cancelled", 9.0, now - timedelta(minutes=2))
    await _add_order(other.id, "completed", 99.0, now - timedelta(minutes=1))

    stats = await compute_stats(cafe.id, tz="UTC")

    assert stats["total_revenue"] == 20.0
    assert stats["active_orders"] == 2
    assert stats["total_orders"] == 4
    assert stats["menu_items_count"] == 1
    assert [o["status"] for o in stats["recent_orders"]] == [
        "cancelled",
        "preparing",
        "pending",
        "completed",
    ]


def test_chart_buckets_by_local_day():
    # 23:30 UTC on the 9th is already the 10th in Kolkata.
    late = datetime(2024, 3, 9, 23, 30, tzinfo=timezone.utc)
    chart = build_chart([(late, "completed", 5.0)], TODAY, "Asia/Kolkata")
    assert chart[-1] == {
        "name": TODAY.strftime("%a"),
        "date": TODAY.isoformat(),
        "revenue": 5.0,
        "orders": 1,
    }
    assert window_start(TODAY, "UTC") == datetime(2024, 3, 4, tzinfo=timezone.utc)


def test_stats_route_reflects_order_changes_without_a_stream(client, owner):
    cafe = owner["cafe"]
    url = f"/api/cafes/{cafe.id}/stats"
    before = client.get(url, headers=owner["headers"]).json()["data"]
    assert before["total_revenue"] == 0
    assert before["total_orders"] == 0

    order = client.post("/api/orders", json={"cafe_id": cafe.id, "total_amount": 42.5}).json()
    placed = client.get(url, headers=owner["headers"]).json()["data"]
    assert placed["total_orders"] == 1
    assert placed["active_orders"] == 1
    assert placed["total_revenue"] == 0

    resp = client.patch(
        f"/api/orders/{order['id']}/status",
        json={"status": "completed"},
        headers=owner["headers"],
    )
    assert resp.status_code == 200

    after = client.get(url, headers=owner["headers"]).json()["data"]
    assert after["total_revenue"] == 42.5
    assert after["active_orders"] == 0
    assert after["chart_data"][-1]["revenue"] == 42.5


def test_stats_route_rejects_other_owner(client, owner):
    stranger, _ = asyncio.run(make_owner("stranger@cafe.test", "Elsewhere"))
    resp = client.get(f"/api/cafes/{owner['cafe'].id}/stats", headers=auth_headers(stranger))
    assert resp.status_code == 403
