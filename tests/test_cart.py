import asyncio
from datetime import datetime, timezone

import pytest
from hypothesis import given
from hypothesis import strategies as st

from tabletap.app.cart import Cart, CartStore, cart_view
from tabletap.app.db import get_session
from tabletap.app.repos_sqlalchemy import orders_repo_sql
from tabletap.app.schemas import MenuItemOut
from tests._seed_cafe import make_item, make_owner


def _item(item_id: str, price: float, cafe_id: str = "cafe-1", **fields) -> MenuItemOut:
    return MenuItemOut(
        id=item_id,
        cafe_id=cafe_id,
        name=item_id.title(),
        price=price,
        category="Drinks",
        created_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
        **fields,
    )


def test_cart_total_and_count_follow_lines():
    cart = Cart()
    latte, scone = _item("latte", 4.5), _item("scone", 3.25)

    cart.add_item(latte)
    cart.add_item(latte)
    cart.add_item(scone)

    assert cart.state == "populated"
    assert cart.count == 3
    assert cart.total == 12.25
    assert [line.quantity for line in cart.lines] == [2, 1]


def test_remove_item_drops_line_with_last_unit():
    cart = Cart()
    latte = _item("latte", 4.5)
    cart.add_item(latte)
    cart.add_item(latte)

    cart.remove_item("latte")
    assert cart.lines[0].quantity == 1

    cart.remove_item("latte")
    assert cart.lines == []
    assert cart.total == 0
    assert cart.state == "empty"


# prices in quarters are exact in binary floating point
price_strategy = st.integers(min_value=1, max_value=400).map(lambda q: q / 4)

menu_strategy = st.lists(
    st.tuples(price_strategy, st.booleans()), min_size=1, max_size=5
)

step_strategy = st.lists(
    st.tuples(st.sampled_from(["add", "remove"]), st.integers(min_value=0, max_value=4)),
    max_size=40,
)


@given(menu=menu_strategy, steps=step_strategy)
def test_cart_lines_and_total_hold_for_any_sequence(menu, steps):
    items = [
        _item(f"item{i}", price, is_available=available)
        for i, (price, available) in enumerate(menu)
    ]
    cart = Cart()
    expected: dict[str, int] = {}

    for action, index in steps:
        item = items[index % len(items)]
        if action == "add":
            cart.add_item(item)
            if item.is_available:
                expected[item.id] = expected.get(item.id, 0) + 1
        else:
            cart.remove_item(item.id)
            if expected.get(item.id, 0) > 1:
                expected[item.id] -= 1
            else:
                expected.pop(item.id, None)

        assert all(line.quantity >= 1 for line in cart.lines)
        assert all(line.item.is_available for line in cart.lines)
        assert {line.item.id: line.quantity for line in cart.lines} == expected
        assert cart.total == round(sum(line.item.price * line.quantity for line in cart.lines), 2)
        assert cart.count == sum(expected.values())
        assert cart.state == ("populated" if expected else "empty")


def test_unavailable_items_are_not_added():
    cart = Cart()
    cart.add_item(_item("soldout", 2.0, is_available=False))
    assert cart.lines == []
    assert cart.state == "empty"


@pytest.mark.anyio
async def test_empty_cart_checkout_fails_without_writing(database):
    _, cafe = await make_owner()
    cart = Cart()

    result = await cart.checkout(cafe.id, 3)

    assert not result.ok
    assert cart.state == "empty"
    async with get_session() as session:
        assert await orders_repo_sql.list_orders(session, cafe.id) == []


@pytest.mark.anyio
async def test_checkout_writes_order_and_lines_with_captured_prices(database, redis):
    _, cafe = await make_owner()
    latte = await make_item(cafe.id, "Latte", 4.5)
    scone = await make_item(cafe.id, "Scone", 3.0)
    cart = Cart()
    cart.add_item(latte)
    cart.add_item(latte)
    cart.add_item(scone)

    result = await cart.checkout(cafe.id, 7, "Ada", redis=redis)

    assert result.ok
    order = result.data
    assert order.status.value == "pending"
    assert order.total_amount == 12.0
    assert order.table_number == 7
    assert cart.state == "success"
    assert cart.lines == []
    assert cart.last_order_id == order.id

    async with get_session() as session:
        items = await orders_repo_sql.items_for_order(session, order.id)
    assert sorted((i.menu_item_id, i.quantity, i.price) for i in items) == sorted(
        [(latte.id, 2, 4.5), (scone.id, 1, 3.0)]
    )


@pytest.mark.anyio
async def test_missing_table_number_is_stored_as_zero(database):
    _, cafe = await make_owner()
    cart = Cart()
    cart.add_item(await make_item(cafe.id))

    result = await cart.checkout(cafe.id, None)

    assert result.ok
    assert result.data.table_number == 0
    assert result.data.customer_name is None


@pytest.mark.anyio
async def test_checkout_rejects_items_from_another_cafe(database):
    _, cafe = await make_owner()
    _, other = await make_owner("other@cafe.test", "Other")
    cart = Cart()
    cart.add_item(await make_item(other.id))

    result = await cart.checkout(cafe.id, 1)

    assert not result.ok
    assert len(cart.lines) == 1


@pytest.mark.anyio
async def test_failed_store_write_keeps_lines(database):
    cart = Cart()
    cart.add_item(_item("latte", 4.5, cafe_id="missing-cafe"))

    result = await cart.checkout("missing-cafe", 2)

    assert not result.ok
    assert result.code == "not_found"
    assert cart.state == "failed"
    assert cart.count == 1
    assert cart.last_order_id is None


@pytest.mark.anyio
async def test_store_round_trips_lines_and_last_order(redis):
    store = CartStore(redis)
    cart = Cart(last_order_id="order-1")
    cart.add_item(_item("latte", 4.5))
    await store.save("sess", cart)

    loaded = await store.load("sess")

    assert cart_view(loaded)["items"][0]["quantity"] == 1
    assert loaded.last_order_id == "order-1"
    assert loaded.state == "populated"

    await store.clear("sess")
    cleared = await store.load("sess")
    assert cleared.lines == []
    assert cleared.last_order_id == "order-1"


def test_cart_routes_add_and_checkout(client, owner):
    cafe = owner["cafe"]
    item = asyncio.run(make_item(cafe.id, "Mocha", 5.0))

    resp = client.post("/api/cart/s1/items", json={"menu_item_id": item.id})
    assert resp.status_code == 200
    assert resp.json()["data"]["total"] == 5.0

    resp = client.post("/api/cart/s1/checkout", json={"cafe_id": cafe.id, "table_number": 4})
    assert resp.status_code == 200
    body = resp.json()["data"]
    assert body["order"]["table_number"] == 4
    assert body["cart"]["items"] == []
    assert body["cart"]["last_order_id"] == body["order"]["id"]

    resp = client.post("/api/cart/s1/checkout", json={"cafe_id": cafe.id})
    assert resp.status_code == 400
    assert resp.json()["error"]["code"] == "CHECKOUT_FAILED"
