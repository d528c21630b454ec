"""Web Push subscription endpoints for cafe dashboards."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel

from config import get_settings

from .deps import get_owned_cafe
from .schemas import CafeOut
from .services.push import PushNotifier
from .utils.responses import ok


class PushKeys(BaseModel):
    p256dh: str
    auth: str


class PushSubscription(BaseModel):
    endpoint: str
    keys: PushKeys


class Unsubscribe(BaseModel):
    endpoint: str


router = APIRouter(tags=["push"])


def _notifier(request: Request) -> PushNotifier:
    return request.app.state.push


@router.get("/api/vapid/public_key")
async def vapid_public_key() -> dict:
    """Return the configured VAPID public key."""
    key = get_settings().vapid_public_key
    if not key:
        raise HTTPException(status_code=404, detail="VAPID key not configured")
    return {"key": key}


@router.post("/api/cafes/{cafe_id}/push/subscription")
async def subscribe(
    sub: PushSubscription, request: Request, cafe: CafeOut = Depends(get_owned_cafe)
) -> dict:
    """Register the dashboard's Web Push subscription for ``cafe``."""
    notifier = _notifier(request)
    await notifier.subscribe(cafe.id, sub.endpoint, sub.keys.model_dump())
    return ok({"status": "subscribed", "permission": notifier.permission})


@router.delete("/api/cafes/{cafe_id}/push/subscription")
async def unsubscribe(
    payload: Unsubscribe, request: Request, cafe: CafeOut = Depends(get_owned_cafe)
) -> dict:
    removed = await _notifier(request).unsubscribe(cafe.id, payload.endpoint)
    return ok({"removed": removed})


@router.post("/api/cafes/{cafe_id}/push/test")
async def test_notification(
    request: Request, cafe: CafeOut = Depends(get_owned_cafe)
) -> dict:
    """Send a sample new-order notification."""
    notification = await _notifier(request).notify_new_order(
        cafe.id, 5, "Test Customer", 25.50, 3
    )
    return ok({"sent": notification is not None, "notification": notification})
