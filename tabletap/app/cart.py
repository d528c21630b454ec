"""Customer cart and checkout.

A cart belongs to one browsing session and is persisted in Redis after every
mutation under the session's ``cafe-qr-cart`` and ``cafe-last-order-id``
keys. Each session has a single writer; the last write wins.

State flow: ``empty`` -> ``populated`` -> ``submitting`` -> ``success`` or
``failed``. A failed checkout leaves the lines untouched.
"""

from __future__ import annotations

import json
import logging
from typing import Literal, Optional

from pydantic import BaseModel, Field, ValidationError

from .db import get_session
from .repos_sqlalchemy import orders_repo_sql
from .schemas import MenuItemOut, OrderCreate, OrderOut
from .utils.results import Result, store_call

logger = logging.getLogger("cart")

CART_KEY = "cafe-qr-cart"
LAST_ORDER_KEY = "cafe-last-order-id"

CartState = Literal["empty", "populated", "submitting", "success", "failed"]


class CartLine(BaseModel):
    item: MenuItemOut
    quantity: int = Field(1, ge=1)

    @property
    def subtotal(self) -> float:
        return self.item.price * self.quantity


class Cart(BaseModel):
    lines: list[CartLine] = Field(default_factory=list)
    last_order_id: Optional[str] = None
    state: CartState = "empty"

    @property
    def total(self) -> float:
        return round(sum(line.subtotal for line in self.lines), 2)

    @property
    def count(self) -> int:
        return sum(line.quantity for line in self.lines)

    def _settle(self) -> None:
        self.state = "populated" if self.lines else "empty"

    def add_item(self, item: MenuItemOut) -> None:
        """Add one unit of ``item``; unavailable items are ignored."""
        if not item.is_available:
            return
        for line in self.lines:
            if line.item.id == item.id:
                line.quantity += 1
                break
        else:
            self.lines.append(CartLine(item=item, quantity=1))
        self._settle()

    def remove_item(self, menu_item_id: str) -> None:
        """Remove one unit; the line disappears with its last unit."""
        for line in self.lines:
            if line.item.id == menu_item_id:
                if line.quantity > 1:
                    line.quantity -= 1
                else:
                    self.lines.remove(line)
                break
        self._settle()

    def clear(self) -> None:
        self.lines = []
        self._settle()

    async def checkout(
        self,
        cafe_id: str,
        table_number: int | None,
        customer_name: str | None = None,
        *,
        redis=None,
    ) -> Result[OrderOut]:
        """Place the cart as one pending order with captured line prices."""

        if not self.lines:
            return Result.failure("cart is empty")
        if any(line.item.cafe_id != cafe_id for line in self.lines):
            return Result.failure("cart contains items from another cafe")

        self.state = "submitting"
        payload = OrderCreate(
            cafe_id=cafe_id,
            table_number=table_number or 0,
            customer_name=customer_name or None,
            total_amount=self.total,
        )
        lines = [(line.item.id, line.quantity, line.item.price) for line in self.lines]
        async with get_session() as session:
            result = await store_call(
                orders_repo_sql.create_order, session, payload, lines, redis=redis
            )
        if not result.ok:
            self.state = "failed"
            logger.warning("checkout failed for cafe %s: %s", cafe_id, result.error)
            return result

        self.last_order_id = result.data.id
        self.lines = []
        self.state = "success"
        logger.info("order %s placed for cafe %s", self.last_order_id, cafe_id)
        return result


class CartStore:
    """Persist carts in Redis, one namespace per browsing session."""

    def __init__(self, redis):
        self.redis = redis

    @staticmethod
    def key(session_id: str, name: str) -> str:
        return f"cart:{session_id}:{name}"

    async def load(self, session_id: str) -> Cart:
        raw_lines = await self.redis.get(self.key(session_id, CART_KEY))
        last_order_id = await self.redis.get(self.key(session_id, LAST_ORDER_KEY))
        if isinstance(last_order_id, bytes):
            last_order_id = last_order_id.decode()
        lines: list[CartLine] = []
        if raw_lines:
            try:
                lines = [CartLine.model_validate(line) for line in json.loads(raw_lines)]
            except (ValueError, ValidationError) as exc:
                logger.warning("discarding unreadable cart for %s: %s", session_id, exc)
        cart = Cart(lines=lines, last_order_id=last_order_id)
        cart._settle()
        return cart

    async def save(self, session_id: str, cart: Cart) -> None:
        lines = [line.model_dump(mode="json") for line in cart.lines]
        await self.redis.set(self.key(session_id, CART_KEY), json.dumps(lines))
        if cart.last_order_id:
            await self.redis.set(self.key(session_id, LAST_ORDER_KEY), cart.last_order_id)

    async def clear(self, session_id: str) -> None:
        await self.redis.delete(self.key(session_id, CART_KEY))


def cart_view(cart: Cart) -> dict:
    return {
        "items": [
            {**line.item.model_dump(mode="json"), "quantity": line.quantity}
            for line in cart.lines
        ],
        "total": cart.total,
        "count": cart.count,
        "state": cart.state,
        "last_order_id": cart.last_order_id,
    }
