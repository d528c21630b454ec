import asyncio
from datetime import datetime, timezone

from config import Plan
from tabletap.app.db import get_session
from tabletap.app.repos_sqlalchemy import cafes_repo_sql


def _upgrade(cafe_id: str) -> None:
    async def run():
        async with get_session() as session:
            await cafes_repo_sql.set_plan(session, cafe_id, Plan.PRO)

    asyncio.run(run())


def test_metrics_are_blurred_on_basic(client, owner):
    resp = client.get(f"/api/cafes/{owner['cafe'].id}/accounts/metrics", headers=owner["headers"])
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["locked"] is True
    assert data["data"]["total_sales"] == 0

    invoices = client.get(
        f"/api/cafes/{owner['cafe'].id}/accounts/invoices", headers=owner["headers"]
    )
    assert invoices.status_code == 403


def test_metrics_split_receivables_and_payables(client, owner):
    cafe_id = owner["cafe"].id
    _upgrade(cafe_id)
    base = f"/api/cafes/{cafe_id}/accounts"
    today = datetime.now(timezone.utc).date().isoformat()
    headers = owner["headers"]

    client.post(f"{base}/parties", json={"name": "Regular", "outstanding_balance": -40}, headers=headers)
    client.post(
        f"{base}/parties",
        json={"name": "Roaster", "party_type": "supplier", "outstanding_balance": 25},
        headers=headers,
    )
    client.post(
        f"{base}/invoices",
        json={"invoice_number": "S-1", "invoice_date": today, "total_amount": 120},
        headers=headers,
    )
    client.post(
        f"{base}/invoices",
        json={"type": "purchase", "invoice_number": "P-1", "invoice_date": today, "total_amount": 60},
        headers=headers,
    )
    client.post(
        f"{base}/expenses",
        json={"category": "Rent", "amount": 15, "date": today},
        headers=headers,
    )

    metrics = client.get(f"{base}/metrics", headers=headers).json()["data"]
    assert metrics == {
        "total_sales": 120.0,
        "total_purchase": 60.0,
        "receivables": 40.0,
        "payables": 25.0,
    }
    trend = client.get(f"{base}/trend", headers=headers).json()["data"]
    assert trend == [{"date": today, "sales": 120.0, "purchase": 60.0, "expense": 15.0}]
