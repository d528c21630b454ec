from typing import Any, Dict

from fastapi.responses import JSONResponse


def ok(data: Any) -> Dict[str, Any]:
    """Return a success envelope."""
    return {"ok": True, "data": data}


def err(
    code: int | str,
    message: str,
    details: Dict[str, Any] | None = None,
    hint: str | None = None,
) -> Dict[str, Any]:
    """Return an error envelope."""
    from ..middlewares.request_id import request_id_ctx

    error: Dict[str, Any] = {"code": code, "message": message}
    if hint:
        error["hint"] = hint
    if details:
        error["details"] = details

    return {"ok": False, "request_id": request_id_ctx.get(None), "error": error}


def failure_response(
    code: str, message: str, status_code: int = 400, hint: str | None = None
) -> JSONResponse:
    """Return an error envelope wrapped in a :class:`JSONResponse`."""
    return JSONResponse(err(code, message, hint=hint), status_code=status_code)
