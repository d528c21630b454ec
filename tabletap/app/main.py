# main.py

"""FastAPI application wiring for TableTap."""

from __future__ import annotations

import logging
import os

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from redis.asyncio import from_url
from starlette.exceptions import HTTPException as StarletteHTTPException

from config import get_settings

from . import db
from .middlewares import (
    LoggingMiddleware,
    PrometheusMiddleware,
    RequestIdMiddleware,
    RouteGuardMiddleware,
)
from .obs.logging import configure_logging
from .routes_accounts import router as accounts_router
from .routes_auth import router as auth_router
from .routes_cafe import router as cafe_router
from .routes_cart import router as cart_router
from .routes_crm import router as crm_router
from .routes_dashboard import router as dashboard_router
from .routes_inventory import router as inventory_router
from .routes_menu import public_router as public_menu_router
from .routes_menu import router as menu_router
from .routes_metrics import router as metrics_router
from .routes_notifications import router as notifications_router
from .routes_orders import router as orders_router
from .routes_orders_stream import router as orders_stream_router
from .routes_pages import router as pages_router
from .routes_push import router as push_router
from .routes_ratings import router as ratings_router
from .routes_staff import router as staff_router
from .routes_superadmin import router as superadmin_router
from .routes_tables import router as tables_router
from .services.push import PushNotifier
from .services.telegram import TelegramClient
from .utils.responses import err, ok

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
configure_logging(getattr(logging, LOG_LEVEL, logging.INFO))
logger = logging.getLogger("api")

settings = get_settings()
app = FastAPI(title="TableTap API", version="1.0.0")

app.state.redis = from_url(settings.redis_url, decode_responses=True)
app.state.push = PushNotifier(
    app.state.redis,
    settings.vapid_public_key,
    auto_close_secs=settings.push_auto_close_secs,
)
app.state.telegram = TelegramClient()

app.add_middleware(PrometheusMiddleware)
app.add_middleware(RouteGuardMiddleware)
app.add_middleware(RequestIdMiddleware)
if settings.allowed_origins:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[o.strip() for o in settings.allowed_origins.split(",") if o.strip()],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
app.add_middleware(LoggingMiddleware)


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    logger.warning(
        "http error %s on %s", exc.status_code, request.url.path,
        extra={"status": exc.status_code, "route": request.url.path},
    )
    # Dependencies may raise with a ready-made envelope (e.g. plan gates).
    if isinstance(exc.detail, dict) and "error" in exc.detail:
        payload = exc.detail
    else:
        payload = err(exc.status_code, exc.detail)
    return JSONResponse(payload, status_code=exc.status_code, headers=exc.headers)


@app.on_event("startup")
async def startup() -> None:
    if settings.auto_create_schema:
        await db.create_all()


@app.on_event("shutdown")
async def shutdown() -> None:
    await db.dispose()
    await app.state.redis.aclose()


@app.get("/health")
async def health() -> dict:
    return ok({"status": "ok"})


app.include_router(auth_router)
app.include_router(pages_router)
app.include_router(cafe_router)
app.include_router(menu_router)
app.include_router(public_menu_router)
app.include_router(orders_router)
app.include_router(orders_stream_router)
app.include_router(cart_router)
app.include_router(dashboard_router)
app.include_router(ratings_router)
app.include_router(tables_router)
app.include_router(inventory_router)
app.include_router(staff_router)
app.include_router(crm_router)
app.include_router(accounts_router)
app.include_router(push_router)
app.include_router(notifications_router)
app.include_router(superadmin_router)
app.include_router(metrics_router)
