"""Owner sign-up, sign-in via one-time code, and sign-out."""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import RedirectResponse

from config import get_settings

from .auth import (
    consume_login_code,
    create_session_token,
    hash_password,
    issue_login_code,
    verify_password,
)
from .db import get_session
from .repos_sqlalchemy import users_repo_sql
from .schemas import Credentials, SessionUser
from .utils.responses import ok
from .utils.results import run

router = APIRouter(prefix="/auth", tags=["auth"])
logger = logging.getLogger("auth")


@router.post("/signup")
async def signup(payload: Credentials) -> dict:
    async with get_session() as session:
        user = await run(
            users_repo_sql.create_user,
            session,
            payload.email,
            hash_password(payload.password),
        )
    return ok({"id": user.id, "email": user.email})


@router.post("/login")
async def login(payload: Credentials, request: Request) -> dict:
    """Check credentials and return a one-time code for ``/auth/callback``."""

    async with get_session() as session:
        user = await users_repo_sql.get_by_email(session, payload.email)
    if user is None or not verify_password(payload.password, user.password_hash):
        raise HTTPException(status_code=401, detail="Invalid credentials")
    code = await issue_login_code(
        request.app.state.redis, SessionUser(id=user.id, email=user.email)
    )
    return ok({"code": code, "callback": f"/auth/callback?code={code}"})


@router.get("/callback")
async def callback(request: Request, code: str | None = None) -> RedirectResponse:
    """Exchange ``code`` for a session cookie and route by role."""

    user = await consume_login_code(request.app.state.redis, code) if code else None
    if user is None:
        return RedirectResponse("/login?error=invalid_code", status_code=303)

    async with get_session() as session:
        is_admin = await users_repo_sql.is_super_admin(session, user.email)
    settings = get_settings()
    response = RedirectResponse("/admin" if is_admin else "/dashboard", status_code=303)
    response.set_cookie(
        settings.session_cookie,
        create_session_token(user),
        max_age=settings.session_ttl_minutes * 60,
        httponly=True,
        samesite="lax",
    )
    logger.info("session started for user %s", user.id)
    return response


@router.post("/logout")
async def logout() -> RedirectResponse:
    response = RedirectResponse("/login", status_code=303)
    response.delete_cookie(get_settings().session_cookie)
    return response


__all__ = ["router"]
