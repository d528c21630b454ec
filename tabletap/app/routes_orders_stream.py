"""Server-Sent Events stream backing a mounted dashboard view.

On connect the stream sends the current ``orders`` and ``stats`` snapshot.
Afterwards an :class:`OrderRealtimeBridge` pushes ``orders``/``stats`` on
every order change and ``alert``/``sound``/``push`` for new orders. The
bridge's subscription is torn down when the client goes away.
"""

from __future__ import annotations

import asyncio

from fastapi import APIRouter, Depends, Request
from fastapi.responses import StreamingResponse

from config import get_settings

from .db import get_session
from .deps import get_owned_cafe
from .realtime import OrderRealtimeBridge, sse_event
from .repos_sqlalchemy import orders_repo_sql
from .routes_metrics import sse_clients_gauge
from .schemas import CafeOut
from .services.query_cache import QueryCache, orders_key, stats_key
from .services.stats import compute_stats

KEEPALIVE_INTERVAL = 15
QUEUE_SIZE = 100

router = APIRouter()


@router.get(
    "/api/cafes/{cafe_id}/orders/stream",
    response_class=StreamingResponse,
    responses={200: {"content": {"text/event-stream": {}}}},
)
async def stream_orders(
    request: Request, cafe: CafeOut = Depends(get_owned_cafe)
) -> StreamingResponse:
    """Stream order and stats updates for ``cafe`` via SSE."""

    state = request.app.state
    settings = get_settings()
    cache = QueryCache(state.redis, settings.query_cache_ttl_secs)
    queue: asyncio.Queue[str] = asyncio.Queue(maxsize=QUEUE_SIZE)

    async def emit(event: str, data) -> None:
        try:
            queue.put_nowait(sse_event(event, data))
        except asyncio.QueueFull:
            # slow client, drop
            pass

    async def fetch_orders() -> list[dict]:
        async with get_session() as session:
            orders = await orders_repo_sql.list_orders(session, cafe.id)
        return [order.model_dump(mode="json") for order in orders]

    async def event_gen():
        bridge = OrderRealtimeBridge(
            state.redis,
            emit,
            cache=cache,
            push=getattr(state, "push", None),
            telegram=getattr(state, "telegram", None),
        )
        sse_clients_gauge.inc()
        try:
            async with bridge:
                await bridge.start(cafe.id)
                # A freshly mounted view starts from current data, not the cache.
                yield sse_event("orders", await cache.refetch(orders_key(cafe.id), fetch_orders))
                yield sse_event(
                    "stats",
                    await cache.refetch(stats_key(cafe.id), lambda: compute_stats(cafe.id)),
                )
                while True:
                    if await request.is_disconnected():
                        break
                    try:
                        item = await asyncio.wait_for(queue.get(), timeout=KEEPALIVE_INTERVAL)
                    except asyncio.TimeoutError:
                        yield ":keepalive\n\n"
                        continue
                    yield item
        finally:
            sse_clients_gauge.dec()

    return StreamingResponse(event_gen(), media_type="text/event-stream")
