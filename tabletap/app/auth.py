# auth.py

"""Password authentication, session tokens and one-time login codes."""

from __future__ import annotations

import json
import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from argon2 import PasswordHasher
from argon2.exceptions import VerificationError, VerifyMismatchError
from fastapi import Depends, HTTPException, Request, status

from config import get_settings

from .db import get_session
from .repos_sqlalchemy import users_repo_sql
from .schemas import SessionUser

logger = logging.getLogger("auth")

ALGORITHM = "HS256"
LOGIN_CODE_PREFIX = "login_code:"

ph = PasswordHasher()


def hash_password(password: str) -> str:
    return ph.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Check a plaintext password against a stored hash."""

    try:
        return ph.verify(hashed_password, plain_password)
    except VerifyMismatchError:
        return False
    except VerificationError as exc:  # pragma: no cover - unexpected
        logger.error("argon2 verification error: %s", exc)
        raise


def create_session_token(user: SessionUser, expires_delta: Optional[timedelta] = None) -> str:
    """Create a signed JWT identifying ``user``."""

    settings = get_settings()
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.session_ttl_minutes)
    )
    payload = {"sub": user.id, "email": user.email, "exp": expire}
    return jwt.encode(payload, settings.secret_key, algorithm=ALGORITHM)


def decode_session_token(token: str) -> SessionUser | None:
    """Return the user encoded in ``token`` or ``None`` if it is invalid."""

    try:
        payload = jwt.decode(token, get_settings().secret_key, algorithms=[ALGORITHM])
    except jwt.PyJWTError:
        return None
    sub, email = payload.get("sub"), payload.get("email")
    if not sub or not email:
        return None
    return SessionUser(id=sub, email=email)


def session_from_request(request: Request) -> SessionUser | None:
    """Resolve the session from the cookie or an ``Authorization: Bearer`` header."""

    token = request.cookies.get(get_settings().session_cookie)
    if not token:
        header = request.headers.get("authorization", "")
        if header.lower().startswith("bearer "):
            token = header[7:].strip()
    if not token:
        return None
    return decode_session_token(token)


async def issue_login_code(redis, user: SessionUser) -> str:
    """Store a one-time code exchangeable for a session at ``/auth/callback``."""

    code = secrets.token_urlsafe(24)
    await redis.setex(
        f"{LOGIN_CODE_PREFIX}{code}",
        get_settings().login_code_ttl_secs,
        json.dumps(user.model_dump()),
    )
    return code


async def consume_login_code(redis, code: str) -> SessionUser | None:
    """Redeem ``code`` once; returns ``None`` when unknown or expired."""

    key = f"{LOGIN_CODE_PREFIX}{code}"
    raw = await redis.get(key)
    if raw is None:
        return None
    await redis.delete(key)
    if isinstance(raw, bytes):
        raw = raw.decode()
    return SessionUser.model_validate_json(raw)


def get_current_user(request: Request) -> SessionUser:
    """Resolve the signed-in user or raise ``HTTPException``."""

    user = session_from_request(request)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


async def require_super_admin(
    user: SessionUser = Depends(get_current_user),
) -> SessionUser:
    """Dependency enforcing membership of the super-admin allow-list."""

    async with get_session() as session:
        allowed = await users_repo_sql.is_super_admin(session, user.email)
    if not allowed:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN, detail="Insufficient privileges"
        )
    return user


__all__ = [
    "hash_password",
    "verify_password",
    "create_session_token",
    "decode_session_token",
    "session_from_request",
    "issue_login_code",
    "consume_login_code",
    "get_current_user",
    "require_super_admin",
]
