"""Realtime order change feed and the per-view sync bridge.

Repositories publish an :class:`OrderChange` on ``rt:orders:{cafe_id}``
after each committed order write. A mounted dashboard view owns one
:class:`OrderRealtimeBridge`, which keeps exactly one subscription open for
the cafe it shows. Every change re-syncs the view's order list and stats;
an ``INSERT`` also fans out the new-order notifications.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Awaitable, Callable, Optional

from pydantic import ValidationError

from config import get_settings

from .schemas import OrderChange, OrderOut
from .services.query_cache import QueryCache, orders_key, stats_key
from .utils.results import best_effort

logger = logging.getLogger("realtime")

Emit = Callable[[str, Any], Awaitable[None]]

POLL_TIMEOUT = 1.0
NOTIFY_CLAIM_TTL = 3600


def orders_channel(cafe_id: str) -> str:
    return f"rt:orders:{cafe_id}"


@best_effort("realtime")
async def publish_order_change(redis, change: OrderChange) -> None:
    """Publish ``change`` on its cafe's channel."""
    await redis.publish(orders_channel(change.cafe_id), change.model_dump_json())


class OrderRealtimeBridge:
    """Keep one view in sync with its cafe's orders.

    ``emit(event, data)`` delivers events to the view: ``orders`` and
    ``stats`` after each re-sync, plus ``alert``, ``sound`` and ``push`` for
    new orders.
    """

    def __init__(
        self,
        redis,
        emit: Emit,
        *,
        cache: QueryCache | None = None,
        push=None,
        telegram=None,
        tz: str | None = None,
    ):
        self.redis = redis
        self.emit = emit
        self.cache = cache or QueryCache(redis, get_settings().query_cache_ttl_secs)
        self.push = push
        self.telegram = telegram
        self.tz = tz
        self.cafe_id: Optional[str] = None
        self._pubsub = None
        self._task: Optional[asyncio.Task] = None

    @property
    def active(self) -> bool:
        return self._pubsub is not None

    async def start(self, cafe_id: str) -> None:
        """Subscribe to ``cafe_id``; a running subscription is replaced."""
        if not cafe_id:
            raise ValueError("cafe_id required")
        await self.stop()
        self.cafe_id = cafe_id
        self._pubsub = self.redis.pubsub()
        await self._pubsub.subscribe(orders_channel(cafe_id))
        self._task = asyncio.create_task(self._listen())
        logger.info("subscribed to orders of cafe %s", cafe_id)

    async def switch(self, cafe_id: str) -> None:
        if cafe_id != self.cafe_id or not self.active:
            await self.start(cafe_id)

    async def stop(self) -> None:
        task, pubsub = self._task, self._pubsub
        self._task = self._pubsub = None
        if task is not None:
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
        if pubsub is not None:
            await pubsub.unsubscribe()
            await pubsub.aclose()
            logger.info("unsubscribed from orders of cafe %s", self.cafe_id)

    async def __aenter__(self) -> "OrderRealtimeBridge":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.stop()

    async def _listen(self) -> None:
        pubsub = self._pubsub
        while True:
            message = await pubsub.get_message(
                ignore_subscribe_messages=True, timeout=POLL_TIMEOUT
            )
            if message is None:
                continue
            try:
                await self.handle(message["data"])
            except asyncio.CancelledError:
                raise
            except Exception:
                logger.exception("order change handling failed")

    async def handle(self, raw: str | bytes) -> None:
        """Apply one change event published on the cafe's channel."""

        if isinstance(raw, bytes):
            raw = raw.decode()
        try:
            change = OrderChange.model_validate_json(raw)
        except ValidationError as exc:
            logger.warning("dropping malformed order change: %s", exc.errors()[:1])
            return
        if change.cafe_id != self.cafe_id:
            return

        from .routes_metrics import realtime_events_total

        realtime_events_total.labels(type=change.type).inc()
        resync = asyncio.create_task(self.resync())
        if change.type == "INSERT" and change.new is not None:
            await self.fan_out(change.new)
        await resync

    async def resync(self) -> None:
        """Invalidate and refetch the order list and stats, then emit both."""

        from .db import get_session
        from .repos_sqlalchemy import orders_repo_sql
        from .services.stats import compute_stats

        cafe_id = self.cafe_id
        if cafe_id is None:
            raise RuntimeError("resync called before start()")

        async def fetch_orders() -> list[dict]:
            async with get_session() as session:
                orders = await orders_repo_sql.list_orders(session, cafe_id)
            return [order.model_dump(mode="json") for order in orders]

        async def fetch_stats() -> dict:
            return await compute_stats(cafe_id, tz=self.tz)

        await self.cache.invalidate(orders_key(cafe_id), stats_key(cafe_id))
        orders, stats = await asyncio.gather(
            self.cache.refetch(orders_key(cafe_id), fetch_orders),
            self.cache.refetch(stats_key(cafe_id), fetch_stats),
        )
        await self.emit("orders", orders)
        await self.emit("stats", stats)

    async def fan_out(self, order: OrderOut) -> None:
        """Dispatch the new-order notifications; none of them can fail the caller."""

        from .services import notifications

        await asyncio.gather(
            notifications.send_alert(self.emit, order),
            notifications.play_sound(self.emit),
            self._push(order),
            self._telegram(order),
        )

    async def _claim(self, channel: str, order_id: str) -> bool:
        # One dashboard per order sends the shared notifications.
        return bool(
            await self.redis.set(
                f"rt:notified:{channel}:{order_id}", "1", nx=True, ex=NOTIFY_CLAIM_TTL
            )
        )

    @best_effort("push")
    async def _push(self, order: OrderOut) -> None:
        if self.push is None or not await self._claim("push", order.id):
            return
        from .db import get_session
        from .repos_sqlalchemy import orders_repo_sql

        async with get_session() as session:
            items = await orders_repo_sql.items_for_order(session, order.id)
        notification = await self.push.notify_new_order(
            order.cafe_id,
            order.table_number,
            order.customer_name,
            order.total_amount,
            sum(item.quantity for item in items),
            order_id=order.id,
        )
        if notification is not None:
            await self.emit("push", notification)

    @best_effort("telegram")
    async def _telegram(self, order: OrderOut) -> None:
        if self.telegram is None:
            return
        from .db import get_session
        from .repos_sqlalchemy import cafes_repo_sql, orders_repo_sql

        async with get_session() as session:
            cafe = await cafes_repo_sql.get(session, order.cafe_id)
            if cafe is None or not (cafe.telegram_bot_token and cafe.telegram_chat_id):
                return
            if not await self._claim("telegram", order.id):
                return
            items = await orders_repo_sql.items_for_order(session, order.id)
        await self.telegram.notify_new_order(cafe, order, items)


def sse_event(event: str, data: Any) -> str:
    return f"event: {event}\ndata: {json.dumps(data)}\n\n"
