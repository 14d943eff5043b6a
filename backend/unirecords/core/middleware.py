"""
HTTP middleware: request correlation and timing, security headers, and a
body size guard. Errors leave in the same envelope the exception handlers
use.
"""

import time
from typing import Callable, Dict, FrozenSet
import logging
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.types import ASGIApp

from unirecords.core.logging_config import (
    logger,
    set_request_id,
    set_user_id,
    generate_request_id,
)

# Probes and docs are served but not logged
QUIET_PATHS: FrozenSet[str] = frozenset({
    "/",
    "/health/live",
    "/favicon.ico",
    "/docs",
    "/redoc",
    "/openapi.json",
})

SLOW_REQUEST_MS = 1000

SECURITY_HEADERS: Dict[str, str] = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "strict-origin-when-cross-origin",
    "X-XSS-Protection": "1; mode=block",
}


def status_log_level(status_code: int) -> int:
    if status_code >= 500:
        return logging.ERROR
    if status_code >= 400:
        return logging.WARNING
    return logging.INFO


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Tags every request with an X-Request-ID (taken from the caller when
    present), logs its outcome and adds X-Response-Time.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get("X-Request-ID") or generate_request_id()
        set_request_id(request_id)
        path = request.url.path
        quiet = path in QUIET_PATHS
        started = time.perf_counter()

        try:
            try:
                response = await call_next(request)
            except Exception as exc:
                elapsed = (time.perf_counter() - started) * 1000
                logger.log_error_with_context(exc, context=f"{request.method} {path} after {elapsed:.1f}ms")
                raise

            elapsed = (time.perf_counter() - started) * 1000
            response.headers["X-Request-ID"] = request_id
            response.headers["X-Response-Time"] = f"{elapsed:.2f}ms"

            if not quiet:
                logger.log_request(
                    request.method,
                    path,
                    response.status_code,
                    elapsed,
                    level=status_log_level(response.status_code),
                    client_ip=request.client.host if request.client else None,
                )
                if elapsed > SLOW_REQUEST_MS:
                    logger.warning(f"Slow request: {request.method} {path} took {elapsed:.0f}ms")
            return response
        finally:
            set_request_id("")
            set_user_id("")


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Hardening headers on every response; API responses are marked no-store"""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        response = await call_next(request)
        for header, value in SECURITY_HEADERS.items():
            response.headers.setdefault(header, value)
        if request.url.path.startswith("/api/"):
            response.headers["Cache-Control"] = "no-store"
        return response


class RequestSizeLimitMiddleware(BaseHTTPMiddleware):
    """Rejects bodies whose declared Content-Length exceeds `max_size`"""

    def __init__(self, app: ASGIApp, max_size: int = 10 * 1024 * 1024):
        super().__init__(app)
        self.max_size = max_size

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        content_length = request.headers.get("content-length", "")
        if content_length.isdigit() and int(content_length) > self.max_size:
            logger.warning(f"Request body too large on {request.url.path}: {content_length} bytes")
            return JSONResponse(
                status_code=413,
                content={
                    "status": "error",
                    "message": f"Request body too large. Maximum size is {self.max_size // (1024 * 1024)}MB",
                    "code": "REQUEST_TOO_LARGE",
                },
            )
        return await call_next(request)


__all__ = [
    "RequestLoggingMiddleware",
    "SecurityHeadersMiddleware",
    "RequestSizeLimitMiddleware",
    "status_log_level",
]
