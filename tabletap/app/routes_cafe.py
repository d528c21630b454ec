"""Cafe profile endpoints for owners."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from config import get_settings

from .auth import get_current_user
from .db import get_session
from .deps import get_owned_cafe
from .domain import FEATURES, has_access
from .repos_sqlalchemy import cafes_repo_sql
from .routes_superadmin import ADMIN_CAFES_KEY, owner_cache_key
from .schemas import CafeCreate, CafeOut, CafeUpdate, SessionUser
from .services.query_cache import QueryCache
from .utils.responses import ok
from .utils.results import run

router = APIRouter(prefix="/api/cafes", tags=["cafes"])


def _cache(request: Request) -> QueryCache:
    return QueryCache(request.app.state.redis, get_settings().query_cache_ttl_secs)


@router.post("")
async def create_cafe(
    payload: CafeCreate,
    request: Request,
    user: SessionUser = Depends(get_current_user),
) -> dict:
    async with get_session() as session:
        cafe = await run(cafes_repo_sql.create, session, user.id, payload)
    await _cache(request).invalidate(ADMIN_CAFES_KEY, owner_cache_key(user.id))
    return ok(cafe.model_dump(mode="json"))


@router.get("/mine")
async def my_cafe(request: Request, user: SessionUser = Depends(get_current_user)) -> dict:
    """The caller's cafe, or ``null`` when they have not created one yet."""

    async def fetch():
        async with get_session() as session:
            cafe = await cafes_repo_sql.get_by_owner(session, user.id)
        return cafe.model_dump(mode="json") if cafe else None

    cache = _cache(request)
    key = owner_cache_key(user.id)
    data = await cache.get(key)
    if data is None:
        data = await fetch()
        if data is not None:
            await cache.set(key, data)
    return ok(data)


@router.patch("/{cafe_id}")
async def update_cafe(
    payload: CafeUpdate,
    request: Request,
    cafe: CafeOut = Depends(get_owned_cafe),
) -> dict:
    async with get_session() as session:
        updated = await run(cafes_repo_sql.update_profile, session, cafe.id, payload)
    await _cache(request).invalidate(ADMIN_CAFES_KEY, owner_cache_key(cafe.owner_id or ""))
    return ok(updated.model_dump(mode="json"))


@router.get("/{cafe_id}/features")
async def features(cafe: CafeOut = Depends(get_owned_cafe)) -> dict:
    """Plan of the cafe and which feature areas it unlocks."""

    return ok(
        {
            "plan": cafe.subscription_plan.value,
            "features": {
                name: has_access(cafe.subscription_plan, required)
                for name, required in FEATURES.items()
            },
        }
    )
