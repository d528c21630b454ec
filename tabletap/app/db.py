"""Async database engine and session helpers.

The DSN comes from ``Settings.database_url``. Tests call :func:`configure`
with a temporary SQLite file so that concurrent sessions share data."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from config import get_settings

from .models import Base

logger = logging.getLogger("db")

_engine: AsyncEngine | None = None
_sessionmaker: async_sessionmaker[AsyncSession] | None = None


def configure(url: str | None = None, **engine_kwargs) -> AsyncEngine:
    """(Re)create the engine for ``url`` or the configured database URL."""
    global _engine, _sessionmaker
    _engine = create_async_engine(
        url or get_settings().database_url, future=True, **engine_kwargs
    )
    _sessionmaker = async_sessionmaker(
        _engine, expire_on_commit=False, class_=AsyncSession
    )
    return _engine


def get_engine() -> AsyncEngine:
    """Return a singleton async engine."""
    if _engine is None:
        configure()
    assert _engine is not None  # for type checkers
    return _engine


@asynccontextmanager
async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """Yield a session and ensure it is closed afterwards."""
    if _sessionmaker is None:
        get_engine()
    assert _sessionmaker is not None  # for type checkers
    session = _sessionmaker()
    try:
        yield session
    finally:
        await session.close()


async def create_all() -> None:
    """Create every table; used for development and tests."""
    async with get_engine().begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("schema ensured")


async def dispose() -> None:
    global _engine, _sessionmaker
    if _engine is not None:
        await _engine.dispose()
    _engine = None
    _sessionmaker = None


__all__ = ["configure", "get_engine", "get_session", "create_all", "dispose"]
