"""Landing documents for the login page, owner dashboard and admin panel."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from .auth import get_current_user, require_super_admin
from .db import get_session
from .repos_sqlalchemy import cafes_repo_sql
from .schemas import SessionUser
from .utils.responses import ok

router = APIRouter(tags=["pages"])


@router.get("/login")
async def login_page() -> dict:
    return ok({"page": "login", "actions": {"login": "/auth/login", "signup": "/auth/signup"}})


@router.get("/dashboard")
async def dashboard_page(user: SessionUser = Depends(get_current_user)) -> dict:
    async with get_session() as session:
        cafe = await cafes_repo_sql.get_by_owner(session, user.id)
    return ok(
        {
            "page": "dashboard",
            "user": user.model_dump(),
            "cafe": cafe.model_dump(mode="json") if cafe else None,
        }
    )


@router.get("/admin")
async def admin_page(user: SessionUser = Depends(require_super_admin)) -> dict:
    return ok({"page": "admin", "user": user.model_dump()})
