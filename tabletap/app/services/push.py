"""Push notification gate for cafe dashboards.

:class:`PushNotifier` is created once per application and stored on
``app.state.push``. Its ``permission`` mirrors the browser permission model:
``default`` may be upgraded by a single request, ``granted`` allows
dispatch and ``denied`` is final.

Dashboards register their Web Push subscription per cafe; registered
subscriptions live in the Redis hash ``rt:push:{cafe_id}:subs`` and
notifications are published on ``rt:push:{cafe_id}`` for the service worker
relay.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Awaitable, Callable, Literal, Optional

logger = logging.getLogger("push")

Permission = Literal["default", "granted", "denied"]
Prompt = Callable[[str], Awaitable[Permission]]

NEW_ORDER_TITLE = "🔔 New Order Received!"
NEW_ORDER_TAG = "new-order"
ICON = "/logo.png"


def channel(cafe_id: str) -> str:
    return f"rt:push:{cafe_id}"


def subscriptions_key(cafe_id: str) -> str:
    return f"rt:push:{cafe_id}:subs"


def new_order_body(
    table_number: int, customer_name: str | None, total_amount: float, item_count: int
) -> str:
    guest = f" - {customer_name}" if customer_name else ""
    return f"Table {table_number}{guest}\n{item_count} item(s) • ${total_amount:.2f}"


class PushNotifier:
    """Dispatch browser notifications to a cafe's registered dashboards."""

    def __init__(
        self,
        redis,
        vapid_public_key: str | None = None,
        *,
        permission: Permission = "default",
        auto_close_secs: int = 10,
        prompt: Prompt | None = None,
    ):
        self.redis = redis
        self.vapid_public_key = vapid_public_key
        self.permission: Permission = permission
        self.auto_close_secs = auto_close_secs
        self._prompt = prompt or self._subscription_prompt

    @property
    def supported(self) -> bool:
        return bool(self.vapid_public_key)

    async def _subscription_prompt(self, cafe_id: str) -> Permission:
        # A registered subscription means the browser already granted access.
        return "granted" if await self.redis.hlen(subscriptions_key(cafe_id)) else "default"

    async def request_permission(self, cafe_id: str) -> Permission:
        """Ask once while the permission is ``default``; other states are kept."""
        if self.permission == "default":
            self.permission = await self._prompt(cafe_id)
            logger.info("push permission now %s", self.permission)
        return self.permission

    async def subscribe(self, cafe_id: str, endpoint: str, keys: dict[str, str]) -> None:
        await self.redis.hset(
            subscriptions_key(cafe_id), endpoint, json.dumps({"endpoint": endpoint, "keys": keys})
        )
        if self.permission == "default":
            self.permission = "granted"

    async def unsubscribe(self, cafe_id: str, endpoint: str) -> bool:
        return bool(await self.redis.hdel(subscriptions_key(cafe_id), endpoint))

    async def subscriptions(self, cafe_id: str) -> list[dict]:
        raw = await self.redis.hvals(subscriptions_key(cafe_id))
        return [json.loads(value) for value in raw]

    async def notify(
        self,
        cafe_id: str,
        title: str,
        *,
        body: str = "",
        tag: str | None = None,
        data: Optional[dict[str, Any]] = None,
    ) -> dict | None:
        """Publish a notification; returns it, or ``None`` when nothing was sent."""

        if not self.supported:
            logger.warning("push notifications not supported: no VAPID key configured")
            return None
        if self.permission != "granted":
            await self.request_permission(cafe_id)
            if self.permission != "granted":
                logger.warning("push permission %s; notification dropped", self.permission)
                return None

        notification = {
            "title": title,
            "body": body,
            "tag": tag,
            "icon": ICON,
            "badge": ICON,
            "require_interaction": True,
            "auto_close_secs": self.auto_close_secs,
            "focus_on_click": True,
            "data": data or {},
        }
        await self.redis.publish(channel(cafe_id), json.dumps(notification))
        return notification

    async def notify_new_order(
        self,
        cafe_id: str,
        table_number: int,
        customer_name: str | None,
        total_amount: float,
        item_count: int,
        order_id: str | None = None,
    ) -> dict | None:
        return await self.notify(
            cafe_id,
            NEW_ORDER_TITLE,
            body=new_order_body(table_number, customer_name, total_amount, item_count),
            tag=NEW_ORDER_TAG,
            data={"order_id": order_id} if order_id else None,
        )
