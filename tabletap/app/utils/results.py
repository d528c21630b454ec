"""Uniform success/failure values for store operations and side channels.

Store-facing service functions return a :class:`Result` instead of raising,
so every caller handles failure the same way. Side channels whose failure
must never reach the caller are wrapped with :func:`best_effort`.
"""

from __future__ import annotations

import functools
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Generic, Optional, TypeVar

from fastapi import HTTPException
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from ..schemas import Conflict, StoreError

T = TypeVar("T")

logger = logging.getLogger("api")

# Result.code -> HTTP status used by routes
STATUS_BY_CODE = {"not_found": 404, "invalid": 400, "conflict": 409, "store": 500}


@dataclass(frozen=True)
class Result(Generic[T]):
    """Outcome of a store operation."""

    ok: bool
    data: Optional[T] = None
    error: Optional[str] = None
    code: Optional[str] = None

    @classmethod
    def success(cls, data: T | None = None) -> "Result[T]":
        return cls(ok=True, data=data)

    @classmethod
    def failure(cls, error: str, code: str = "invalid") -> "Result[T]":
        return cls(ok=False, error=error, code=code)


def _classify(exc: Exception) -> str:
    if isinstance(exc, (Conflict, IntegrityError)):
        return "conflict"
    if isinstance(exc, LookupError):
        return "not_found"
    if isinstance(exc, ValueError):
        return "invalid"
    return "store"


async def store_call(
    op: Callable[..., Awaitable[T]], *args: Any, **kwargs: Any
) -> Result[T]:
    """Run ``op`` and fold store and domain errors into a :class:`Result`."""
    try:
        return Result.success(await op(*args, **kwargs))
    except (SQLAlchemyError, StoreError, ValueError, LookupError) as exc:
        logger.warning("store operation %s failed: %s", op.__name__, exc)
        message = "store error" if isinstance(exc, SQLAlchemyError) else str(exc)
        if isinstance(exc, IntegrityError):
            message = "duplicate or conflicting record"
        return Result.failure(message, _classify(exc))


def unwrap(result: Result[T]) -> T:
    """Return the data of a successful result or raise ``HTTPException``."""
    if result.ok:
        return result.data  # type: ignore[return-value]
    raise HTTPException(STATUS_BY_CODE.get(result.code or "", 400), result.error)


async def run(op: Callable[..., Awaitable[T]], *args: Any, **kwargs: Any) -> T:
    """Shorthand for ``unwrap(await store_call(...))`` used by routes."""
    return unwrap(await store_call(op, *args, **kwargs))


def best_effort(
    channel: str,
) -> Callable[[Callable[..., Awaitable[Any]]], Callable[..., Awaitable[None]]]:
    """Decorate a coroutine so that its failures are logged and swallowed.

    The wrapped coroutine always returns ``None``; a failure increments
    ``notifications_failed_total`` for ``channel``.
    """

    def decorator(func: Callable[..., Awaitable[Any]]) -> Callable[..., Awaitable[None]]:
        @functools.wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> None:
            from ..routes_metrics import notifications_failed_total

            try:
                await func(*args, **kwargs)
            except Exception as exc:
                notifications_failed_total.labels(channel=channel).inc()
                logging.getLogger(channel).warning(
                    "%s side channel failed: %s", channel, exc
                )

        return wrapper

    return decorator


__all__ = ["Result", "store_call", "unwrap", "run", "best_effort"]
