"""Outbound chat-bot notification endpoint."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from config import get_settings

from .services.telegram import (
    TelegramClient,
    TelegramError,
    TelegramNotification,
    format_order_message,
)

router = APIRouter(prefix="/api/notifications", tags=["notifications"])
logger = logging.getLogger("telegram")


@router.post("/telegram")
async def send_telegram(payload: TelegramNotification, request: Request) -> JSONResponse:
    """Format the order and post it to the cafe's Telegram chat."""

    if not payload.cafe.configured:
        return JSONResponse(
            {"success": False, "error": "Telegram not configured"}, status_code=400
        )
    client: TelegramClient = request.app.state.telegram
    message = format_order_message(
        payload.order, payload.items, get_settings().public_base_url
    )
    try:
        await client.send_message(
            payload.cafe.telegram_bot_token,  # type: ignore[arg-type]
            payload.cafe.telegram_chat_id,  # type: ignore[arg-type]
            message,
        )
    except TelegramError as exc:
        logger.warning("telegram notification failed: %s", exc)
        return JSONResponse({"success": False, "error": str(exc)}, status_code=500)
    return JSONResponse({"success": True})
