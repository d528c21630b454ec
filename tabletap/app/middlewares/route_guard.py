"""Redirects between the login page and the dashboard based on the session."""

from __future__ import annotations

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import RedirectResponse

from ..auth import session_from_request

PROTECTED_PREFIX = "/dashboard"
LOGIN_PATH = "/login"


class RouteGuardMiddleware(BaseHTTPMiddleware):
    """Send anonymous visitors of ``/dashboard*`` to ``/login`` and signed-in
    visitors of ``/login`` to ``/dashboard``."""

    async def dispatch(self, request: Request, call_next):
        path = request.url.path
        if path.startswith(PROTECTED_PREFIX) or path == LOGIN_PATH:
            user = session_from_request(request)
            if path.startswith(PROTECTED_PREFIX) and user is None:
                return RedirectResponse(LOGIN_PATH, status_code=307)
            if path == LOGIN_PATH and user is not None:
                return RedirectResponse(PROTECTED_PREFIX, status_code=307)
        return await call_next(request)
