from __future__ import annotations

import logging
import time
import uuid

from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from timegrid.core.config import Settings
from timegrid.core.logging_config import request_id_var

REQUEST_ID_HEADER = "X-Request-ID"

STATIC_SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "no-referrer",
    "Cache-Control": "no-store",
}

access_logger = logging.getLogger("timegrid.access")


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Tag each request with an id, echo it back and write one access line."""

    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        token = request_id_var.set(request_id)
        started = time.perf_counter()
        try:
            response = await call_next(request)
        finally:
            elapsed_ms = (time.perf_counter() - started) * 1000
            request_id_var.reset(token)
        response.headers[REQUEST_ID_HEADER] = request_id
        access_logger.info(
            "%s %s %s %.1fms [%s]", request.method, request.url.path, response.status_code, elapsed_ms, request_id
        )
        return response


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, *, settings: Settings) -> None:
        super().__init__(app)
        self._headers = dict(STATIC_SECURITY_HEADERS)
        if settings.security_enable_hsts:
            self._headers["Strict-Transport-Security"] = f"max-age={max(1, settings.security_hsts_max_age_seconds)}"

    async def dispatch(self, request: Request, call_next) -> Response:
        response = await call_next(request)
        for name, value in self._headers.items():
            response.headers.setdefault(name, value)
        return response


class RequestSizeLimitMiddleware(BaseHTTPMiddleware):
    """Reject bodies whose declared length exceeds ``max_bytes`` with 413."""

    def __init__(self, app, *, max_bytes: int) -> None:
        super().__init__(app)
        self._max_bytes = max(1, max_bytes)

    async def dispatch(self, request: Request, call_next) -> Response:
        declared = request.headers.get("content-length", "")
        size = int(declared) if declared.isdigit() else 0
        if size > self._max_bytes:
            return JSONResponse(
                status_code=413,
                content={"message": "Request body too large", "details": {"size": size, "max_bytes": self._max_bytes}},
            )
        return await call_next(request)
