"""
Audit Middleware - one log line per API call, plus response hardening.

Each line records the request id, method, path, status, duration and
how the caller presented its session (bearer header, cookie or none).
Bodies and query strings are never logged: they carry chat messages,
passwords and API keys.
"""
import time
import uuid
from typing import Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from echora.core.config import SESSION_COOKIE
from echora.core.logging_config import get_logger

logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"
QUIET_PATHS = frozenset({"/health", "/health/ready", "/"})


def credential_kind(request: Request) -> str:
    """How the caller identified itself: 'bearer', 'cookie' or 'none'."""
    if request.headers.get("Authorization", "").lower().startswith("bearer "):
        return "bearer"
    if SESSION_COOKIE in request.cookies:
        return "cookie"
    return "none"


class AuditMiddleware(BaseHTTPMiddleware):
    """
    Logs every request with its outcome and timing.

    A request id is taken from the incoming ``X-Request-ID`` header (or
    generated) and echoed back so frontend errors can be matched to
    server logs.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex[:12]
        started = time.perf_counter()
        line = f"[{request_id}] {request.method} {request.url.path} auth={credential_kind(request)}"

        try:
            response = await call_next(request)
        except Exception as e:
            elapsed_ms = (time.perf_counter() - started) * 1000
            logger.error(f"{line} FAILED after {elapsed_ms:.0f}ms: {type(e).__name__}")
            raise

        elapsed_ms = (time.perf_counter() - started) * 1000
        response.headers[REQUEST_ID_HEADER] = request_id
        response.headers["X-Response-Time"] = f"{elapsed_ms:.0f}ms"

        if request.url.path in QUIET_PATHS:
            logger.debug(f"{line} -> {response.status_code} ({elapsed_ms:.0f}ms)")
        elif response.status_code >= 500:
            logger.error(f"{line} -> {response.status_code} ({elapsed_ms:.0f}ms)")
        elif response.status_code >= 400:
            logger.warning(f"{line} -> {response.status_code} ({elapsed_ms:.0f}ms)")
        else:
            logger.info(f"{line} -> {response.status_code} ({elapsed_ms:.0f}ms)")

        return response


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """
    Adds hardening headers to every response.

    Responses carry personal data (settings, memories, replies), so they
    are marked ``no-store`` unless the route set its own Cache-Control.
    """

    HEADERS = {
        "X-Content-Type-Options": "nosniff",
        "X-Frame-Options": "DENY",
        "Referrer-Policy": "strict-origin-when-cross-origin",
        "Permissions-Policy": "camera=(), microphone=(), geolocation=()",
    }

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        response = await call_next(request)
        for name, value in self.HEADERS.items():
            response.headers[name] = value
        if "cache-control" not in response.headers:
            response.headers["Cache-Control"] = "no-store"
        return response
