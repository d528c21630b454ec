"""Redis-backed query cache shared by dashboard views.

Entries are JSON documents under ``qc:{key}``. ``refetch`` always runs the
fetcher and overwrites the entry, so concurrent refetches resolve to the
value of whichever completed last.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Awaitable, Callable

logger = logging.getLogger("realtime")

PREFIX = "qc:"

Fetcher = Callable[[], Awaitable[Any]]


def orders_key(cafe_id: str) -> str:
    return f"orders:{cafe_id}"


def stats_key(cafe_id: str) -> str:
    return f"stats:{cafe_id}"


class QueryCache:
    def __init__(self, redis, ttl: int = 60):
        self.redis = redis
        self.ttl = ttl

    async def get(self, key: str) -> Any | None:
        raw = await self.redis.get(PREFIX + key)
        if raw is None:
            return None
        if isinstance(raw, bytes):
            raw = raw.decode()
        return json.loads(raw)

    async def set(self, key: str, value: Any) -> None:
        await self.redis.set(PREFIX + key, json.dumps(value), ex=self.ttl)

    async def invalidate(self, *keys: str) -> None:
        if keys:
            await self.redis.delete(*(PREFIX + key for key in keys))

    async def refetch(self, key: str, fetch: Fetcher) -> Any:
        """Run ``fetch`` and store its result under ``key``."""
        value = await fetch()
        await self.set(key, value)
        return value

    async def get_or_fetch(self, key: str, fetch: Fetcher) -> Any:
        cached = await self.get(key)
        if cached is not None:
            return cached
        logger.debug("query cache miss %s", key)
        return await self.refetch(key, fetch)
