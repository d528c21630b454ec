import asyncio

import pytest

from config import Plan
from tabletap.app.domain.plans import has_access, normalize_plan, required_plan
from tests._seed_cafe import auth_headers, make_owner


@pytest.mark.parametrize(
    "current,required,expected",
    [
        (None, Plan.BASIC, True),
        (None, Plan.PRO, False),
        ("basic", Plan.PRO, False),
        ("pro", Plan.PRO, True),
        ("pro", Plan.BASIC, True),
        ("enterprise", Plan.PRO, False),
    ],
)
def test_has_access(current, required, expected):
    assert has_access(current, required) is expected


def test_unknown_feature_requires_pro():
    assert required_plan("time-travel") is Plan.PRO
    assert normalize_plan("") is Plan.BASIC


def test_basic_cafe_is_blocked_from_pro_feature(client, owner):
    resp = client.get(f"/api/cafes/{owner['cafe'].id}/suppliers", headers=owner["headers"])
    assert resp.status_code == 403
    body = resp.json()
    assert body["ok"] is False
    assert body["error"]["code"] == "PLAN_403"
    assert "Pro" in body["error"]["hint"]


def test_basic_cafe_gets_locked_analytics_preview(client, owner):
    resp = client.get(f"/api/cafes/{owner['cafe'].id}/analytics", headers=owner["headers"])
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["locked"] is True
    assert data["data"]["total_revenue"] == 0


def test_locked_preview_carries_the_real_figures(client, owner):
    cafe_id = owner["cafe"].id
    order = client.post("/api/orders", json={"cafe_id": cafe_id, "total_amount": 12.5}).json()
    client.patch(
        f"/api/orders/{order['id']}/status", json={"status": "completed"}, headers=owner["headers"]
    )

    data = client.get(f"/api/cafes/{cafe_id}/analytics", headers=owner["headers"]).json()["data"]
    assert data["locked"] is True
    assert "Pro" in data["upsell"]
    assert data["data"]["total_revenue"] == 12.5


def test_features_endpoint_lists_entitlements(client, owner):
    resp = client.get(f"/api/cafes/{owner['cafe'].id}/features", headers=owner["headers"])
    data = resp.json()["data"]
    assert data["plan"] == "basic"
    assert data["features"]["menu"] is True
    assert data["features"]["crm"] is False


def test_super_admin_upgrade_unlocks_pro_features(client, owner):
    admin, _ = asyncio.run(make_owner("admin@tabletap.test", "Admin Cafe"))
    admin_headers = auth_headers(admin)

    resp = client.post("/api/super/admins/bootstrap", headers=admin_headers)
    assert resp.status_code == 200
    assert resp.json()["data"]["added"] is True

    cafe_id = owner["cafe"].id
    listing = client.get("/api/super/cafes", headers=admin_headers)
    assert {c["id"] for c in listing.json()["data"]} >= {cafe_id}

    resp = client.patch(
        f"/api/super/cafes/{cafe_id}/plan", json={"plan": "pro"}, headers=admin_headers
    )
    assert resp.status_code == 200
    assert resp.json()["data"]["subscription_plan"] == "pro"

    resp = client.get(f"/api/cafes/{cafe_id}/suppliers", headers=owner["headers"])
    assert resp.status_code == 200
    assert resp.json()["data"] == []

    listing = client.get("/api/super/cafes", headers=admin_headers)
    plans = {c["id"]: c["subscription_plan"] for c in listing.json()["data"]}
    assert plans[cafe_id] == "pro"


def test_bootstrap_refused_once_allow_list_exists(client, owner):
    admin, _ = asyncio.run(make_owner("admin@tabletap.test", "Admin Cafe"))
    assert client.post("/api/super/admins/bootstrap", headers=auth_headers(admin)).status_code == 200

    resp = client.post("/api/super/admins/bootstrap", headers=owner["headers"])
    assert resp.status_code == 403

    again = client.post("/api/super/admins/bootstrap", headers=auth_headers(admin))
    assert again.json()["data"]["added"] is False


def test_owner_cannot_change_plans(client, owner):
    resp = client.patch(
        f"/api/super/cafes/{owner['cafe'].id}/plan",
        json={"plan": "pro"},
        headers=owner["headers"],
    )
    assert resp.status_code == 403
