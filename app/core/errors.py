# app/core/errors.py
from __future__ import annotations

import logging
import uuid
from typing import Any, Dict, Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from app.schemas.semaphore import SemaphoreSettingsError

log = logging.getLogger("app.errors")


def trace_id_for(request: Request) -> str:
    """
    trace_id set by RequestLoggingMiddleware, else an inbound X-Request-ID,
    else a fresh one (stored on request.state).
    """
    val = getattr(request.state, "trace_id", None)
    if val:
        return str(val)
    val = request.headers.get("x-request-id") or uuid.uuid4().hex
    request.state.trace_id = val
    return val


def error_body(
    *,
    message: str,
    typ: str,
    status: int,
    trace_id: str,
    details: Optional[Any] = None,
) -> Dict[str, Any]:
    err: Dict[str, Any] = {
        "type": typ,
        "message": message,
        "status": status,
        "trace_id": trace_id,
    }
    if details is not None:
        err["details"] = details
    return {"ok": False, "error": err}


def _respond(request: Request, status: int, typ: str, message: str, details=None, headers=None):
    trace_id = trace_id_for(request)
    hdrs = dict(headers or {})
    hdrs["X-Request-ID"] = trace_id
    return JSONResponse(
        status_code=status,
        headers=hdrs,
        content=error_body(
            message=message, typ=typ, status=status, trace_id=trace_id, details=details
        ),
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Uniform JSON error envelope for every failure path."""

    @app.exception_handler(HTTPException)
    async def http_exc_handler(request: Request, exc: HTTPException):
        status_code = int(exc.status_code)
        level = logging.ERROR if status_code >= 500 else logging.WARNING
        log.log(
            level,
            "HTTPException %s %s -> %s | detail=%r",
            request.method,
            request.url.path,
            status_code,
            exc.detail,
        )
        message = exc.detail if isinstance(exc.detail, str) else "HTTP error"
        details = exc.detail if isinstance(exc.detail, dict) else None
        return _respond(request, status_code, "http_error", message, details, exc.headers)

    @app.exception_handler(RequestValidationError)
    async def validation_exc_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        log.warning(
            "ValidationError %s %s -> 422 | errors=%s", request.method, request.url.path, errors
        )
        # errors() may carry the raw exception in ctx; keep it JSON-safe
        details = [{k: v for k, v in e.items() if k != "ctx"} for e in errors]
        return _respond(request, 422, "validation_error", "Validation failed.", details)

    @app.exception_handler(SemaphoreSettingsError)
    async def settings_exc_handler(request: Request, exc: SemaphoreSettingsError):
        log.warning(
            "Rejected semaphore settings %s %s | %s", request.method, request.url.path, exc
        )
        return _respond(request, 400, "invalid_settings", str(exc))

    @app.exception_handler(Exception)
    async def unhandled_exc_handler(request: Request, exc: Exception):
        # full traceback to the log, generic message to the client
        log.exception("Unhandled exception %s %s -> 500", request.method, request.url.path)
        return _respond(request, 500, "internal_error", "Internal server error.")
