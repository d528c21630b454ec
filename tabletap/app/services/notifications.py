"""In-app alert and audio cue sent to a mounted dashboard view."""

from __future__ import annotations

from typing import Any, Awaitable, Callable

from ..schemas import OrderOut
from ..utils.results import best_effort

Emit = Callable[[str, Any], Awaitable[None]]

ALERT_TITLE = "New Order Received!"
ALERT_DURATION_MS = 10_000
SOUND_URL = "/notification.mp3"


def alert_payload(order: OrderOut) -> dict:
    return {
        "title": ALERT_TITLE,
        "description": (
            f"Table {order.table_number} just placed an order for "
            f"${order.total_amount:.2f}"
        ),
        "order_id": order.id,
        "duration_ms": ALERT_DURATION_MS,
    }


@best_effort("alert")
async def send_alert(emit: Emit, order: OrderOut) -> None:
    await emit("alert", alert_payload(order))


@best_effort("sound")
async def play_sound(emit: Emit) -> None:
    await emit("sound", {"src": SOUND_URL})
