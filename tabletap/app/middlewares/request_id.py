import logging
import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

# Context variable used by log filter and error envelopes
request_id_ctx: ContextVar[str | None] = ContextVar("request_id", default=None)
logger = logging.getLogger("api")

HEADER = "X-Request-ID"


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Tag every request and response with a request id.

    An id supplied by the caller (or a proxy) is reused so that a dashboard
    action can be traced across the stream and the API logs.
    """

    async def dispatch(self, request: Request, call_next):
        req_id = request.headers.get(HEADER) or uuid.uuid4().hex
        token = request_id_ctx.set(req_id)
        request.state.request_id = req_id
        try:
            response = await call_next(request)
        finally:
            request_id_ctx.reset(token)
        response.headers[HEADER] = req_id
        return response
