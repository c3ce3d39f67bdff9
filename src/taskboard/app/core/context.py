"""Per-request context shared with the logging layer."""

from __future__ import annotations

from contextvars import ContextVar, Token
from dataclasses import dataclass, replace

REQUEST_ID_HEADER = "X-Request-ID"


@dataclass(frozen=True, slots=True)
class RequestContext:
    request_id: str = "-"
    actor_id: int | None = None


_request_context: ContextVar[RequestContext] = ContextVar("taskboard_request_context", default=RequestContext())


def current_context() -> RequestContext:
    return _request_context.get()


def get_request_id() -> str:
    return _request_context.get().request_id


def bind_request_id(request_id: str) -> Token[RequestContext]:
    """Start a fresh context for ``request_id``; no actor is known yet."""
    return _request_context.set(RequestContext(request_id=request_id))


def bind_actor(user_id: int | None) -> Token[RequestContext]:
    """Record the authenticated user for the rest of the request."""
    return _request_context.set(replace(_request_context.get(), actor_id=user_id))


def reset_context(token: Token[RequestContext]) -> None:
    _request_context.reset(token)


__all__ = [
    "REQUEST_ID_HEADER",
    "RequestContext",
    "bind_actor",
    "bind_request_id",
    "current_context",
    "get_request_id",
    "reset_context",
]
