import json
import logging
import random
import time
import uuid
from datetime import datetime, timezone

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse

from config import get_settings

from ..utils.responses import err
from .request_id import request_id_ctx

# Fields in requests that should be redacted from logs
PII_KEYS = {"password", "email", "phone", "telegram_bot_token", "code", "auth"}
LOG_SAMPLE_2XX = get_settings().log_sample_2xx


logger = logging.getLogger("api")


def _redact(obj):
    if isinstance(obj, dict):
        return {
            k: ("***" if k.lower() in PII_KEYS else _redact(v)) for k, v in obj.items()
        }
    if isinstance(obj, list):
        return [_redact(v) for v in obj]
    return obj


class LoggingMiddleware(BaseHTTPMiddleware):
    """Emit structured inbound/outbound request logs with a request ID."""

    async def dispatch(self, request: Request, call_next):
        req_id = getattr(request.state, "request_id", None)
        token = None
        if not req_id:
            req_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
            request.state.request_id = req_id
            # Fallback for contexts where RequestIdMiddleware is absent
            token = request_id_ctx.set(req_id)

        body_bytes = await request.body()

        async def receive() -> dict:
            return {"type": "http.request", "body": body_bytes, "more_body": False}

        request._receive = receive

        body = None
        if body_bytes:
            try:
                body = json.loads(body_bytes)
            except ValueError:
                body = None

        query = dict(request.query_params)
        inbound = {
            "ts": datetime.now(timezone.utc).isoformat(),
            "level": "INFO",
            "req_id": req_id,
            "path": request.url.path,
            "method": request.method,
            "ip": request.client.host if request.client else None,
            "ua": request.headers.get("user-agent"),
        }
        if query:
            inbound["query"] = _redact(query)
        if body is not None:
            inbound["body"] = _redact(body)

        start = time.perf_counter()
        response = None
        error_id = None
        try:
            response = await call_next(request)
        except Exception:
            error_id = str(uuid.uuid4())
            logger.exception(json.dumps({"req_id": req_id, "error_id": error_id}))
            payload = err(500, "Internal Server Error")
            payload["error_id"] = error_id
            response = JSONResponse(payload, status_code=500)
        dur_ms = int((time.perf_counter() - start) * 1000)
        status = response.status_code
        level = "ERROR" if status >= 500 else "INFO"
        outbound = {
            "ts": datetime.now(timezone.utc).isoformat(),
            "level": level,
            "req_id": req_id,
            "route": request.url.path,
            "status": status,
            "latency_ms": dur_ms,
        }
        if error_id:
            outbound["error_id"] = error_id

        should_log = True
        if 200 <= status < 400 and random.random() >= LOG_SAMPLE_2XX:
            should_log = False

        if should_log:
            logger.info(json.dumps(inbound))
            log_fn = logger.error if level == "ERROR" else logger.info
            log_fn(json.dumps(outbound))

        response.headers["X-Request-ID"] = req_id

        if token is not None:
            request_id_ctx.reset(token)
        return response
