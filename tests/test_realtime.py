import asyncio

import anyio
import pytest

from tabletap.app.db import get_session
from tabletap.app.realtime import OrderRealtimeBridge, sse_event
from tabletap.app.repos_sqlalchemy import cafes_repo_sql, orders_repo_sql
from tabletap.app.schemas import CafeUpdate, OrderChange, OrderCreate
from tabletap.app.services.push import PushNotifier
from tests._seed_cafe import make_item, make_owner


class Recorder:
    def __init__(self) -> None:
        self.events: list[tuple[str, object]] = []
        self.seen = asyncio.Event()

    async def __call__(self, event: str, data) -> None:
        self.events.append((event, data))
        self.seen.set()

    def named(self, event: str) -> list:
        return [data for name, data in self.events if name == event]


async def _place_order(cafe_id: str, table: int = 7, amount: float = 12.0, redis=None):
    item = await make_item(cafe_id, "Flat White", amount / 2)
    async with get_session() as session:
        return await orders_repo_sql.create_order(
            session,
            OrderCreate(cafe_id=cafe_id, table_number=table, total_amount=amount),
            [(item.id, 2, item.price)],
            redis=redis,
        )


def _insert(order) -> str:
    return OrderChange(type="INSERT", cafe_id=order.cafe_id, new=order).model_dump_json()


@pytest.mark.anyio
async def test_insert_refetches_orders_and_stats_and_alerts_once(database, redis):
    _, cafe = await make_owner()
    order = await _place_order(cafe.id)
    emit = Recorder()
    bridge = OrderRealtimeBridge(redis, emit, tz="UTC")
    bridge.cafe_id = cafe.id

    await bridge.handle(_insert(order))

    assert len(emit.named("orders")) == 1
    assert [o["id"] for o in emit.named("orders")[0]] == [order.id]
    assert emit.named("stats")[0]["total_orders"] == 1
    alerts = emit.named("alert")
    assert len(alerts) == 1
    assert alerts[0]["description"] == "Table 7 just placed an order for $12.00"
    assert emit.named("sound") == [{"src": "/notification.mp3"}]
    assert await bridge.cache.get(f"orders:{cafe.id}") is not None


@pytest.mark.anyio
async def test_update_resyncs_without_notifications(database, redis):
    _, cafe = await make_owner()
    order = await _place_order(cafe.id)
    emit = Recorder()
    bridge = OrderRealtimeBridge(redis, emit, tz="UTC")
    bridge.cafe_id = cafe.id
    change = OrderChange(type="UPDATE", cafe_id=cafe.id, new=order, old=order)

    await bridge.handle(change.model_dump_json())

    assert [name for name, _ in emit.events] == ["orders", "stats"]


@pytest.mark.anyio
async def test_malformed_and_foreign_events_are_dropped(database, redis):
    _, cafe = await make_owner()
    _, other = await make_owner("other@cafe.test", "Other")
    order = await _place_order(other.id)
    emit = Recorder()
    bridge = OrderRealtimeBridge(redis, emit, tz="UTC")
    bridge.cafe_id = cafe.id

    await bridge.handle("{not json")
    await bridge.handle('{"type": "INSERT"}')
    await bridge.handle(_insert(order))

    assert emit.events == []


@pytest.mark.anyio
async def test_push_and_telegram_sent_once_across_dashboards(database, redis, telegram, telegram_api):
    _, cafe = await make_owner()
    async with get_session() as session:
        await cafes_repo_sql.update_profile(
            session,
            cafe.id,
            CafeUpdate(telegram_bot_token="123:abc", telegram_chat_id="42"),
        )
    order = await _place_order(cafe.id, table=3, amount=8.0)
    push = PushNotifier(redis, "vapid", permission="granted")
    first, second = Recorder(), Recorder()
    bridges = [
        OrderRealtimeBridge(redis, emit, push=push, telegram=telegram, tz="UTC")
        for emit in (first, second)
    ]
    for bridge in bridges:
        bridge.cafe_id = cafe.id

    for bridge in bridges:
        await bridge.handle(_insert(order))

    pushes = first.named("push") + second.named("push")
    assert len(pushes) == 1
    assert pushes[0]["body"] == "Table 3\n2 item(s) • $8.00"
    assert len(telegram_api.requests) == 1
    sent = telegram_api.requests[0]
    assert sent["url"].startswith("https://telegram.test/bot123")
    assert sent["url"].endswith("/sendMessage")
    assert sent["json"]["chat_id"] == "42"
    assert "*Table:* 3" in sent["json"]["text"]
    # Each dashboard still shows its own in-app alert.
    assert len(first.named("alert")) == len(second.named("alert")) == 1


@pytest.mark.anyio
async def test_failing_side_channel_does_not_break_resync(database, redis):
    _, cafe = await make_owner()
    order = await _place_order(cafe.id)

    class BrokenTelegram:
        async def notify_new_order(self, *args):
            raise RuntimeError("boom")

    async with get_session() as session:
        await cafes_repo_sql.update_profile(
            session, cafe.id, CafeUpdate(telegram_bot_token="1:x", telegram_chat_id="2")
        )
    emit = Recorder()
    bridge = OrderRealtimeBridge(redis, emit, telegram=BrokenTelegram(), tz="UTC")
    bridge.cafe_id = cafe.id

    await bridge.handle(_insert(order))

    assert len(emit.named("orders")) == 1
    assert len(emit.named("alert")) == 1


@pytest.mark.anyio
async def test_subscription_receives_published_orders(database, redis):
    _, cafe = await make_owner()
    emit = Recorder()

    async with OrderRealtimeBridge(redis, emit, tz="UTC") as bridge:
        await bridge.start(cafe.id)
        assert bridge.active
        await _place_order(cafe.id, redis=redis)
        with anyio.fail_after(5):
            while not (emit.named("alert") and emit.named("stats")):
                emit.seen.clear()
                await emit.seen.wait()
        await bridge.switch(cafe.id)
        assert bridge.cafe_id == cafe.id

    assert not bridge.active
    assert len(emit.named("alert")) == 1


@pytest.mark.anyio
async def test_start_requires_cafe(redis):
    bridge = OrderRealtimeBridge(redis, Recorder())
    with pytest.raises(ValueError):
        await bridge.start("")


@pytest.mark.anyio
async def test_resync_before_start_raises(redis):
    bridge = OrderRealtimeBridge(redis, Recorder())
    with pytest.raises(RuntimeError):
        await bridge.resync()


def test_sse_event_format():
    assert sse_event("alert", {"a": 1}) == 'event: alert\ndata: {"a": 1}\n\n'
