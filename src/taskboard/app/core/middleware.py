"""HTTP middleware for correlation ids, security headers and origin checks."""

from __future__ import annotations

import logging
import uuid
from typing import Awaitable, Callable, Mapping
from urllib.parse import urlsplit

from starlette import status
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.types import ASGIApp

from ..schemas.system import ApiResponse
from .context import REQUEST_ID_HEADER, bind_request_id, reset_context

logger = logging.getLogger(__name__)

DEFAULT_SECURITY_HEADERS: dict[str, str] = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "X-XSS-Protection": "1; mode=block",
    "Referrer-Policy": "origin-when-cross-origin",
}

_SAFE_METHODS = frozenset({"GET", "HEAD", "OPTIONS"})

CallNext = Callable[[Request], Awaitable[Response]]


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    """Attach a correlation identifier to each request/response cycle."""

    def __init__(self, app: ASGIApp, header_name: str = REQUEST_ID_HEADER) -> None:
        super().__init__(app)
        self._header_name = header_name

    async def dispatch(self, request: Request, call_next: CallNext) -> Response:
        request_id = request.headers.get(self._header_name) or str(uuid.uuid4())
        token = bind_request_id(request_id)
        request.state.request_id = request_id
        try:
            response = await call_next(request)
        finally:
            reset_context(token)
        response.headers.setdefault(self._header_name, request_id)
        return response


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Apply a fixed set of hardening headers to every response."""

    def __init__(self, app: ASGIApp, *, headers: Mapping[str, str | None] | None = None) -> None:
        super().__init__(app)
        source = DEFAULT_SECURITY_HEADERS if headers is None else headers
        self._headers = {key: value for key, value in source.items() if value}

    async def dispatch(self, request: Request, call_next: CallNext) -> Response:
        response = await call_next(request)
        for header, value in self._headers.items():
            response.headers.setdefault(header, value)
        return response


class OriginCheckMiddleware(BaseHTTPMiddleware):
    """Reject cross-origin writes to the API.

    Requests without an ``Origin`` header pass through; browsers always send
    one on cross-site writes, so non-browser clients are unaffected.
    """

    def __init__(self, app: ASGIApp, *, path_prefix: str = "/api") -> None:
        super().__init__(app)
        self._path_prefix = path_prefix

    async def dispatch(self, request: Request, call_next: CallNext) -> Response:
        if request.method in _SAFE_METHODS or not request.url.path.startswith(self._path_prefix):
            return await call_next(request)
        origin = request.headers.get("origin")
        host = request.headers.get("host")
        if origin and host and urlsplit(origin).netloc != host:
            logger.warning(
                "Rejected cross-origin write",
                extra={"origin": origin, "host": host, "path": request.url.path},
            )
            payload = ApiResponse[None](
                success=False,
                error="Invalid request origin.",
                code="FORBIDDEN",
                details={"request_id": getattr(request.state, "request_id", None)},
            )
            return JSONResponse(status_code=status.HTTP_403_FORBIDDEN, content=payload.model_dump())
        return await call_next(request)


__all__ = [
    "CorrelationIdMiddleware",
    "DEFAULT_SECURITY_HEADERS",
    "OriginCheckMiddleware",
    "SecurityHeadersMiddleware",
]
