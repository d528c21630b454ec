"""New-order messages to a cafe's Telegram chat.

The bot token and chat id are configured per cafe. The client is created
once per application (``app.state.telegram``); tests pass an
``httpx.MockTransport``.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Optional

import httpx
from pydantic import BaseModel, ConfigDict, Field

from config import get_settings

logger = logging.getLogger("telegram")

DIVIDER = "-" * 28


class TelegramError(Exception):
    """The Telegram API rejected a message or could not be reached."""


class TelegramNotConfigured(TelegramError):
    """The cafe has no bot token or chat id."""


class MessageOrder(BaseModel):
    model_config = ConfigDict(from_attributes=True, extra="ignore")

    id: Optional[str] = None
    table_number: int = 0
    customer_name: Optional[str] = None
    total_amount: float = 0


class MessageItem(BaseModel):
    model_config = ConfigDict(from_attributes=True, extra="ignore")

    quantity: int = 1
    name: Optional[str] = None
    menu_item: Optional[dict[str, Any]] = None
    menu_items: Optional[dict[str, Any]] = None

    @property
    def label(self) -> str:
        nested = self.menu_item or self.menu_items or {}
        return self.name or nested.get("name") or "Item"


class ChatCredentials(BaseModel):
    model_config = ConfigDict(from_attributes=True, extra="ignore")

    telegram_bot_token: Optional[str] = None
    telegram_chat_id: Optional[str] = None

    @property
    def configured(self) -> bool:
        return bool(self.telegram_bot_token and self.telegram_chat_id)


class TelegramNotification(BaseModel):
    """Body of ``POST /api/notifications/telegram``."""

    order: MessageOrder
    items: list[MessageItem] = Field(default_factory=list)
    cafe: ChatCredentials


def format_order_message(
    order: MessageOrder, items: Iterable[MessageItem], base_url: str
) -> str:
    lines = "\n".join(f"• {item.quantity}x {item.label}" for item in items)
    return "\n".join(
        [
            "🔔 *New Order Received!*",
            "",
            f"📍 *Table:* {order.table_number}",
            f"👤 *Customer:* {order.customer_name or 'Guest'}",
            DIVIDER,
            lines,
            DIVIDER,
            f"💰 *Total:* ${order.total_amount:.2f}",
            "",
            f"✅ [View Order]({base_url.rstrip('/')}/dashboard/orders)",
        ]
    )


class TelegramClient:
    def __init__(
        self,
        api_base: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        settings = get_settings()
        self.api_base = (api_base or settings.telegram_api_base).rstrip("/")
        self.timeout = timeout or settings.telegram_timeout_secs
        self.transport = transport

    async def send_message(self, token: str, chat_id: str, text: str) -> dict:
        """Call ``sendMessage``; raises :class:`TelegramError` unless the API says ok."""

        url = f"{self.api_base}/bot{token}/sendMessage"
        payload = {"chat_id": chat_id, "text": text, "parse_mode": "Markdown"}
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self.transport
            ) as client:
                resp = await client.post(url, json=payload)
            result = resp.json()
        except (httpx.HTTPError, ValueError) as exc:
            raise TelegramError(str(exc)) from exc
        if not result.get("ok"):
            logger.error("telegram api error: %s", result.get("description"))
            raise TelegramError(result.get("description") or "Telegram API error")
        return result

    async def notify_new_order(
        self, cafe: Any, order: Any, items: Iterable[Any]
    ) -> None:
        """Send the new-order message for ``order`` to the cafe's chat."""

        creds = ChatCredentials.model_validate(cafe)
        if not creds.configured:
            raise TelegramNotConfigured("Telegram not configured")
        message = format_order_message(
            MessageOrder.model_validate(order),
            [_as_item(item) for item in items],
            get_settings().public_base_url,
        )
        await self.send_message(
            creds.telegram_bot_token, creds.telegram_chat_id, message  # type: ignore[arg-type]
        )


def _as_item(item: Any) -> MessageItem:
    if isinstance(item, MessageItem):
        return item
    if isinstance(item, dict):
        return MessageItem.model_validate(item)
    nested = getattr(item, "menu_items", None) or getattr(item, "menu_item", None)
    return MessageItem(
        quantity=getattr(item, "quantity", 1),
        name=getattr(nested, "name", None),
    )
