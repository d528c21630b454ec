from .logging import LoggingMiddleware
from .prometheus import PrometheusMiddleware
from .request_id import RequestIdMiddleware
from .route_guard import RouteGuardMiddleware

__all__ = [
    "RequestIdMiddleware",
    "LoggingMiddleware",
    "PrometheusMiddleware",
    "RouteGuardMiddleware",
]
