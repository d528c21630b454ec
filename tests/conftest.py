import asyncio
import json
from typing import Any

import fakeredis.aioredis
import httpx
import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import NullPool

from tabletap.app import db
from tabletap.app.services.push import PushNotifier
from tabletap.app.services.telegram import TelegramClient
from tests._seed_cafe import auth_headers, make_owner


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def database(tmp_path):
    # File database so that concurrent stats reads see the same rows.
    db.configure(f"sqlite+aiosqlite:///{tmp_path}/tabletap.db", poolclass=NullPool)
    asyncio.run(db.create_all())
    yield
    asyncio.run(db.dispose())


@pytest.fixture
def redis():
    return fakeredis.aioredis.FakeRedis(decode_responses=True)


class TelegramRecorder:
    """``httpx.MockTransport`` handler answering like the Bot API."""

    def __init__(self) -> None:
        self.requests: list[dict[str, Any]] = []
        self.reply: dict[str, Any] = {"ok": True, "result": {"message_id": 1}}

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append({"url": str(request.url), "json": json.loads(request.content)})
        return httpx.Response(200, json=self.reply)


@pytest.fixture
def telegram_api() -> TelegramRecorder:
    return TelegramRecorder()


@pytest.fixture
def telegram(telegram_api) -> TelegramClient:
    return TelegramClient(
        api_base="https://telegram.test", transport=httpx.MockTransport(telegram_api)
    )


@pytest.fixture
def client(database, redis, telegram):
    from tabletap.app.main import app

    app.state.redis = redis
    app.state.push = PushNotifier(redis, "test-vapid-key")
    app.state.telegram = telegram
    return TestClient(app)


@pytest.fixture
def owner(database):
    """Owner with a cafe, plus bearer headers for them."""

    user, cafe = asyncio.run(make_owner())
    return {"user": user, "cafe": cafe, "headers": auth_headers(user)}
