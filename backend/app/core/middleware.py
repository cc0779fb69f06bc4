"""Middleware: request ID injection, structured access logging, UI preference cookie."""

import hashlib
import logging
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from app.config import settings
from app.schemas.cookie import parse_ui_cookie

logger = logging.getLogger("session_console.access")


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Inject a unique request ID into each request and response."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = str(uuid.uuid4())
        request.state.request_id = request_id

        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        return response


class AccessLogMiddleware(BaseHTTPMiddleware):
    """Structured access log: request_id, subject user_id (hashed), endpoint, status."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        start = time.monotonic()
        response = await call_next(request)
        elapsed_ms = round((time.monotonic() - start) * 1000, 1)

        request_id = getattr(request.state, "request_id", "-")
        user_id_raw = getattr(request.state, "user_id", None)
        user_id = _hash_user_id(user_id_raw) if user_id_raw else "-"
        client_ip = request.client.host if request.client else "-"

        logger.info(
            "request_id=%s user=%s ip=%s method=%s path=%s status=%d elapsed_ms=%.1f",
            request_id,
            user_id,
            client_ip,
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
        )
        return response


class UiPreferencesMiddleware(BaseHTTPMiddleware):
    """Expose the validated UI cookie on request.state and echo its locale."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        ui_cookie = parse_ui_cookie(request.cookies.get(settings.ui_cookie_name))
        request.state.ui_cookie = ui_cookie

        response = await call_next(request)
        locales = (ui_cookie.ui_locales or "").split()
        if locales:
            response.headers["Content-Language"] = locales[0]
        return response


def _hash_user_id(uid: str) -> str:
    """Hash user ID for log privacy — first 12 chars of SHA-256."""
    return hashlib.sha256(str(uid).encode()).hexdigest()[:12]
