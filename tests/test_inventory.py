import asyncio
from datetime import date

import pytest
from sqlalchemy import func, select

from config import Plan
from tabletap.app.db import get_session
from tabletap.app.models import MenuItemIngredient
from tabletap.app.repos_sqlalchemy import (
    cafes_repo_sql,
    inventory_repo_sql,
    menu_repo_sql,
    purchase_orders_repo_sql,
    recipes_repo_sql,
    suppliers_repo_sql,
)
from tabletap.app.schemas import (
    IngredientIn,
    InventoryItemIn,
    PurchaseOrderIn,
    PurchaseOrderItemIn,
    SupplierIn,
)
from tests._seed_cafe import make_item, make_owner


async def _stock(cafe_id: str, name: str = "Milk", quantity: float = 5, threshold: float = 2):
    async with get_session() as session:
        return await inventory_repo_sql.create_item(
            session,
            cafe_id,
            InventoryItemIn(item_name=name, quantity=quantity, unit="l", min_threshold=threshold),
        )


@pytest.mark.anyio
async def test_adjust_stock_floors_at_zero_and_low_stock_filter(database):
    _, cafe = await make_owner()
    milk = await _stock(cafe.id, "Milk", 5, 2)
    await _stock(cafe.id, "Beans", 10, 2)

    async with get_session() as session:
        milk = await inventory_repo_sql.adjust_stock(session, cafe.id, milk.id, -8)
        low = await inventory_repo_sql.list_items(session, cafe.id, low_stock_only=True)

    assert milk.quantity == 0
    assert [item.item_name for item in low] == ["Milk"]


@pytest.mark.anyio
async def test_delivered_purchase_order_books_stock_once(database):
    _, cafe = await make_owner()
    milk = await _stock(cafe.id, "Milk", 5)
    async with get_session() as session:
        supplier = await suppliers_repo_sql.create_supplier(
            session, cafe.id, SupplierIn(name="Dairy Co", email="sales@dairy.test")
        )
        po = await purchase_orders_repo_sql.create_order(
            session,
            cafe.id,
            PurchaseOrderIn(
                supplier_id=supplier.id,
                items=[
                    PurchaseOrderItemIn(inventory_item_id=milk.id, item_name="Milk", quantity=10, unit_price=1.2),
                    PurchaseOrderItemIn(item_name="Napkins", quantity=2, unit_price=3.5),
                ],
            ),
        )
    assert po.total_amount == 19.0
    assert po.status == "pending"
    assert po.order_number.startswith("PO-")
    assert po.order_number.endswith("-0001")

    async with get_session() as session:
        await purchase_orders_repo_sql.update_status(session, cafe.id, po.id, "ordered")
        delivered = await purchase_orders_repo_sql.update_status(
            session, cafe.id, po.id, "delivered"
        )
        with pytest.raises(ValueError):
            await purchase_orders_repo_sql.update_status(session, cafe.id, po.id, "delivered")
    assert delivered.status == "delivered"

    async with get_session() as session:
        items = await inventory_repo_sql.list_items(session, cafe.id)
    assert items[0].quantity == 15


@pytest.mark.anyio
async def test_order_numbers_are_sequential_per_day(database):
    _, cafe = await make_owner()
    async with get_session() as session:
        first = await purchase_orders_repo_sql.create_order(session, cafe.id, PurchaseOrderIn())
        second = await purchase_orders_repo_sql.create_order(session, cafe.id, PurchaseOrderIn())
        tomorrow = await purchase_orders_repo_sql.next_order_number(
            session, cafe.id, date(2099, 1, 1)
        )
    assert first.order_number[-4:] == "0001"
    assert second.order_number[-4:] == "0002"
    assert tomorrow == "PO-20990101-0001"


@pytest.mark.anyio
async def test_purchase_order_rejects_other_cafes_stock(database):
    _, cafe = await make_owner()
    _, other = await make_owner("other@cafe.test", "Other")
    foreign = await _stock(other.id)
    async with get_session() as session:
        with pytest.raises(LookupError):
            await purchase_orders_repo_sql.create_order(
                session,
                cafe.id,
                PurchaseOrderIn(
                    items=[PurchaseOrderItemIn(inventory_item_id=foreign.id, item_name="Milk", quantity=1)]
                ),
            )


def test_inventory_routes_on_basic_plan(client, owner):
    base = f"/api/cafes/{owner['cafe'].id}/inventory"
    created = client.post(
        base, json={"item_name": "Cups", "quantity": 100, "unit": "pcs"}, headers=owner["headers"]
    ).json()["data"]
    adjusted = client.post(
        f"{base}/{created['id']}/adjust", json={"adjustment": -30}, headers=owner["headers"]
    ).json()["data"]
    assert adjusted["quantity"] == 70

    assert client.get(
        f"/api/cafes/{owner['cafe'].id}/purchase-orders", headers=owner["headers"]
    ).status_code == 403


def test_purchase_order_routes_on_pro_plan(client, owner):
    cafe_id = owner["cafe"].id

    async def upgrade():
        async with get_session() as session:
            await cafes_repo_sql.set_plan(session, cafe_id, Plan.PRO)

    asyncio.run(upgrade())
    base = f"/api/cafes/{cafe_id}/purchase-orders"
    po = client.post(
        base,
        json={"items": [{"item_name": "Sugar", "quantity": 3, "unit_price": 2}]},
        headers=owner["headers"],
    ).json()["data"]
    assert po["total_amount"] == 6

    resp = client.patch(
        f"{base}/{po['id']}/status", json={"status": "cancelled"}, headers=owner["headers"]
    )
    assert resp.json()["data"]["status"] == "cancelled"
    resp = client.patch(
        f"{base}/{po['id']}/status", json={"status": "delivered"}, headers=owner["headers"]
    )
    assert resp.status_code == 400


@pytest.mark.anyio
async def test_stock_movements_are_logged_newest_first(database):
    _, cafe = await make_owner()
    milk = await _stock(cafe.id, "Milk", 5)
    beans = await _stock(cafe.id, "Beans", 1)

    async with get_session() as session:
        await inventory_repo_sql.adjust_stock(session, cafe.id, milk.id, 3)
        await inventory_repo_sql.adjust_stock(session, cafe.id, milk.id, -20)
        await inventory_repo_sql.adjust_stock(session, cafe.id, beans.id, 4)
        po = await purchase_orders_repo_sql.create_order(
            session,
            cafe.id,
            PurchaseOrderIn(
                items=[PurchaseOrderItemIn(inventory_item_id=milk.id, item_name="Milk", quantity=6)]
            ),
        )
        await purchase_orders_repo_sql.update_status(session, cafe.id, po.id, "delivered")

    async with get_session() as session:
        logs = await inventory_repo_sql.list_logs(session, cafe.id)
        milk_logs = await inventory_repo_sql.list_logs(session, cafe.id, milk.id)

    assert len(logs) == 4
    stamps = [log.created_at for log in logs]
    assert stamps == sorted(stamps, reverse=True)
    assert {log.inventory_item_id for log in milk_logs} == {milk.id}
    # the floor at zero is what gets logged, not the requested amount
    assert sorted(log.change_amount for log in milk_logs) == [-8, 3, 6]
    delivery = next(log for log in milk_logs if log.reason == "purchase_order")
    assert delivery.reference == po.order_number
    assert delivery.inventory_item.item_name == "Milk"


@pytest.mark.anyio
async def test_recipe_lines_reference_own_stock(database):
    _, cafe = await make_owner()
    _, other = await make_owner("other@cafe.test", "Other")
    latte = await make_item(cafe.id, "Latte", 4.5)
    milk = await _stock(cafe.id, "Milk", 5)
    foreign = await _stock(other.id, "Milk", 5)

    async with get_session() as session:
        line = await recipes_repo_sql.add_ingredient(
            session, cafe.id, latte.id, IngredientIn(inventory_item_id=milk.id, quantity_required=0.2)
        )
        with pytest.raises(LookupError):
            await recipes_repo_sql.add_ingredient(
                session,
                cafe.id,
                latte.id,
                IngredientIn(inventory_item_id=foreign.id, quantity_required=0.2),
            )
        with pytest.raises(LookupError):
            await recipes_repo_sql.list_ingredients(session, other.id, latte.id)

    assert line.quantity_required == 0.2
    assert line.inventory_item.item_name == "Milk"
    assert line.inventory_item.unit == "l"

    async with get_session() as session:
        await menu_repo_sql.delete_item(session, cafe.id, latte.id)
        remaining = await session.scalar(
            select(func.count()).select_from(MenuItemIngredient)
        )
    assert remaining == 0


def test_recipe_and_log_routes(client, owner):
    cafe_id = owner["cafe"].id
    headers = owner["headers"]
    latte = asyncio.run(make_item(cafe_id, "Latte", 4.5))
    milk = asyncio.run(_stock(cafe_id, "Milk", 5))

    base = f"/api/cafes/{cafe_id}/menu/{latte.id}/ingredients"
    added = client.post(
        base, json={"inventory_item_id": milk.id, "quantity_required": 0.25}, headers=headers
    )
    assert added.status_code == 200
    line = added.json()["data"]

    listed = client.get(base, headers=headers).json()["data"]
    assert [row["inventory_item"] for row in listed] == [{"item_name": "Milk", "unit": "l"}]

    bad = client.post(base, json={"inventory_item_id": milk.id, "quantity_required": 0}, headers=headers)
    assert bad.status_code == 422

    assert client.delete(f"{base}/{line['id']}", headers=headers).status_code == 200
    assert client.get(base, headers=headers).json()["data"] == []
    assert client.delete(f"{base}/{line['id']}", headers=headers).status_code == 404

    client.post(
        f"/api/cafes/{cafe_id}/inventory/{milk.id}/adjust", json={"adjustment": 2}, headers=headers
    )
    logs = client.get(
        f"/api/cafes/{cafe_id}/inventory/logs", params={"item_id": milk.id}, headers=headers
    ).json()["data"]
    assert [(log["change_amount"], log["reason"]) for log in logs] == [(2, "adjustment")]
