"""Platform administration: cafe plans and the super-admin allow-list."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Request

from config import get_settings

from .auth import get_current_user, require_super_admin
from .db import get_session
from .repos_sqlalchemy import cafes_repo_sql, users_repo_sql
from .schemas import PlanUpdate, SessionUser
from .services.query_cache import QueryCache
from .utils.responses import ok
from .utils.results import run

router = APIRouter(prefix="/api/super", tags=["superadmin"])
logger = logging.getLogger("api")

ADMIN_CAFES_KEY = "admin-cafes"


def owner_cache_key(owner_id: str) -> str:
    return f"cafe-owner:{owner_id}"


def _cache(request: Request) -> QueryCache:
    return QueryCache(request.app.state.redis, get_settings().query_cache_ttl_secs)


@router.get("/cafes")
async def list_cafes(
    request: Request, _: SessionUser = Depends(require_super_admin)
) -> dict:
    """Every cafe, newest first."""

    async def fetch() -> list[dict]:
        async with get_session() as session:
            cafes = await cafes_repo_sql.list_all(session)
        return [cafe.model_dump(mode="json", exclude={"telegram_bot_token"}) for cafe in cafes]

    return ok(await _cache(request).get_or_fetch(ADMIN_CAFES_KEY, fetch))


@router.patch("/cafes/{cafe_id}/plan")
async def change_plan(
    cafe_id: str,
    payload: PlanUpdate,
    request: Request,
    _: SessionUser = Depends(require_super_admin),
) -> dict:
    async with get_session() as session:
        cafe = await run(cafes_repo_sql.set_plan, session, cafe_id, payload.plan)
    keys = [ADMIN_CAFES_KEY]
    if cafe.owner_id:
        keys.append(owner_cache_key(cafe.owner_id))
    await _cache(request).invalidate(*keys)
    logger.info("cafe %s moved to plan %s", cafe.id, cafe.subscription_plan.value)
    return ok(cafe.model_dump(mode="json", exclude={"telegram_bot_token"}))


@router.get("/admins")
async def list_admins(_: SessionUser = Depends(require_super_admin)) -> dict:
    async with get_session() as session:
        return ok(await users_repo_sql.list_super_admins(session))


@router.post("/admins/bootstrap")
async def bootstrap_admin(user: SessionUser = Depends(get_current_user)) -> dict:
    """Add the caller to the allow-list.

    Allowed while the allow-list is empty, or when the caller is already
    listed (a no-op).
    """

    async with get_session() as session:
        admins = await users_repo_sql.list_super_admins(session)
        if admins and user.email.lower() not in admins:
            raise HTTPException(403, "Allow-list already initialised")
        added = await users_repo_sql.add_super_admin(session, user.email)
    return ok({"email": user.email, "added": added})


@router.get("/stats")
async def platform_stats(_: SessionUser = Depends(require_super_admin)) -> dict:
    async with get_session() as session:
        return ok(await cafes_repo_sql.platform_totals(session))


__all__ = ["router"]
