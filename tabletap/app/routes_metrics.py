# routes_metrics.py

"""Prometheus metrics and /metrics endpoint."""

from __future__ import annotations

from fastapi import APIRouter, Response
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Gauge, generate_latest

# Counters
http_requests_total = Counter(
    "http_requests_total", "Total HTTP requests", ["path", "method", "status"]
)
orders_created_total = Counter("orders_created_total", "Total orders created")
orders_created_total.inc(0)

realtime_events_total = Counter(
    "realtime_events_total", "Order change events delivered to views", ["type"]
)
for _type in ("INSERT", "UPDATE", "DELETE"):
    realtime_events_total.labels(type=_type).inc(0)

notifications_failed_total = Counter(
    "notifications_failed_total",
    "Best-effort notifications that failed",
    ["channel"],
)
for _channel in ("alert", "sound", "push", "telegram", "realtime"):
    notifications_failed_total.labels(channel=_channel).inc(0)

sse_clients_gauge = Gauge("sse_clients", "Open order stream connections")

router = APIRouter()


@router.get("/metrics")
async def metrics_endpoint() -> Response:
    """Expose Prometheus metrics."""
    data = generate_latest()
    return Response(data, media_type=CONTENT_TYPE_LATEST)
