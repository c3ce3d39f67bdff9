"""Error taxonomy and the exception handlers that render it."""

from __future__ import annotations

import logging
from contextvars import Token
from http import HTTPStatus
from typing import Any, Mapping

from fastapi import FastAPI, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.requests import Request

from .core.context import REQUEST_ID_HEADER, RequestContext, bind_request_id, reset_context
from .schemas.system import ApiResponse

logger = logging.getLogger(__name__)


class ApplicationError(Exception):
    """Base class for errors rendered into the response envelope."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    default_code: str = "APPLICATION_ERROR"
    default_message: str = "Request could not be processed."

    def __init__(
        self,
        message: str | None = None,
        *,
        code: str | None = None,
        status_code: int | None = None,
        details: Any | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)
        self.code = code or self.default_code
        if status_code is not None:
            self.status_code = status_code
        self.details = details
        self.headers = dict(headers) if headers else None


class UnauthorizedError(ApplicationError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_code = "UNAUTHORIZED"
    default_message = "Authentication required."

    def __init__(self, message: str | None = None, **kwargs: Any) -> None:
        kwargs.setdefault("headers", {"WWW-Authenticate": "Bearer"})
        super().__init__(message, **kwargs)


class ForbiddenError(ApplicationError):
    status_code = status.HTTP_403_FORBIDDEN
    default_code = "FORBIDDEN"
    default_message = "Access denied."


class NotFoundError(ApplicationError):
    """Missing resource, or a resource the caller does not own."""

    status_code = status.HTTP_404_NOT_FOUND
    default_code = "NOT_FOUND"
    default_message = "Resource not found."


class TaskNotFoundError(NotFoundError):
    default_code = "TASK_NOT_FOUND"
    default_message = "Task not found."


class ProjectNotFoundError(NotFoundError):
    default_code = "PROJECT_NOT_FOUND"
    default_message = "Project not found or access denied."


class ValidationError(ApplicationError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_code = "VALIDATION_ERROR"
    default_message = "Validation error"


class DuplicateRecordError(ApplicationError):
    status_code = status.HTTP_409_CONFLICT
    default_code = "DUPLICATE_RECORD"
    default_message = "A record with this data already exists."


class ForeignKeyError(ApplicationError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_code = "FOREIGN_KEY_ERROR"
    default_message = "Referenced record does not exist."


class RateLimitedError(ApplicationError):
    status_code = status.HTTP_429_TOO_MANY_REQUESTS
    default_code = "RATE_LIMITED"
    default_message = "Too many requests. Please try again later."


class ServerError(ApplicationError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_code = "SERVER_ERROR"
    default_message = "Internal server error"


_HTTP_STATUS_CODE_MAP: dict[int, str] = {
    status.HTTP_400_BAD_REQUEST: "BAD_REQUEST",
    status.HTTP_401_UNAUTHORIZED: "UNAUTHORIZED",
    status.HTTP_403_FORBIDDEN: "FORBIDDEN",
    status.HTTP_404_NOT_FOUND: "NOT_FOUND",
    status.HTTP_405_METHOD_NOT_ALLOWED: "METHOD_NOT_ALLOWED",
    status.HTTP_409_CONFLICT: "CONFLICT",
    status.HTTP_429_TOO_MANY_REQUESTS: "RATE_LIMITED",
}


def classify_integrity_error(exc: IntegrityError) -> ApplicationError:
    """Translate a driver integrity failure into a domain error."""

    text = str(exc.orig if exc.orig is not None else exc).lower()
    if "unique" in text or "duplicate" in text:
        return DuplicateRecordError()
    if "foreign key" in text:
        return ForeignKeyError()
    return ServerError("Database operation failed.", code="DATABASE_ERROR")


def _bind_request_context(request: Request) -> Token[RequestContext] | None:
    request_id = getattr(request.state, "request_id", None)
    if not request_id:
        return None
    return bind_request_id(request_id)


def _reset_request_context(token: Token[RequestContext] | None) -> None:
    if token is not None:
        reset_context(token)


def _merge_details_with_request(request: Request, details: Any | None) -> Any | None:
    request_id = getattr(request.state, "request_id", None)
    if not request_id:
        return details
    if details is None:
        return {"request_id": request_id}
    if isinstance(details, dict):
        return {**details, "request_id": details.get("request_id", request_id)}
    return {"request_id": request_id, "detail": details}


def _error_response(
    request: Request,
    *,
    status_code: int,
    code: str,
    error: str,
    message: str | None = None,
    details: Any | None = None,
    headers: Mapping[str, str] | None = None,
) -> JSONResponse:
    payload = ApiResponse[None](
        success=False,
        error=error,
        message=message,
        code=code,
        details=_merge_details_with_request(request, details),
    )
    response = JSONResponse(status_code=status_code, content=payload.model_dump(mode="json"))
    if headers:
        response.headers.update(headers)
    request_id = getattr(request.state, "request_id", None)
    if request_id:
        response.headers.setdefault(REQUEST_ID_HEADER, request_id)
    return response


def _field_name(location: tuple[Any, ...] | list[Any]) -> str:
    parts = [str(part) for part in location if part not in {"body", "query", "path", "header"}]
    return ".".join(parts) if parts else "request"


def _expose_details(request: Request) -> bool:
    settings = getattr(request.app.state, "settings", None)
    return bool(getattr(settings, "expose_error_details", False))


def register_exception_handlers(app: FastAPI) -> None:
    """Register the envelope-rendering exception handlers on ``app``."""

    @app.exception_handler(ApplicationError)
    async def _handle_application_error(request: Request, exc: ApplicationError) -> JSONResponse:
        token = _bind_request_context(request)
        try:
            log = logger.error if exc.status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR else logger.warning
            log(
                "Application error encountered",
                extra={"code": exc.code, "status_code": exc.status_code, "path": request.url.path},
            )
            return _error_response(
                request,
                status_code=exc.status_code,
                code=exc.code,
                error=exc.message,
                details=exc.details,
                headers=exc.headers,
            )
        finally:
            _reset_request_context(token)

    @app.exception_handler(RequestValidationError)
    async def _handle_request_validation_error(
        request: Request,
        exc: RequestValidationError,
    ) -> JSONResponse:
        token = _bind_request_context(request)
        try:
            errors = [
                {"field": _field_name(item.get("loc", ())), "message": item.get("msg", ""), "type": item.get("type")}
                for item in exc.errors()
            ]
            first = errors[0] if errors else {"field": "request", "message": "Invalid request."}
            logger.warning("Request validation failed", extra={"field": first["field"]})
            return _error_response(
                request,
                status_code=status.HTTP_400_BAD_REQUEST,
                code=ValidationError.default_code,
                error=ValidationError.default_message,
                message=f"{first['field']}: {first['message']}",
                details={"field": first["field"], "errors": errors},
            )
        finally:
            _reset_request_context(token)

    @app.exception_handler(IntegrityError)
    async def _handle_integrity_error(request: Request, exc: IntegrityError) -> JSONResponse:
        token = _bind_request_context(request)
        try:
            mapped = classify_integrity_error(exc)
            logger.error("Database integrity error encountered", extra={"code": mapped.code}, exc_info=exc)
            return _error_response(
                request,
                status_code=mapped.status_code,
                code=mapped.code,
                error=mapped.message,
            )
        finally:
            _reset_request_context(token)

    @app.exception_handler(StarletteHTTPException)
    async def _handle_http_exception(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        token = _bind_request_context(request)
        try:
            code = _HTTP_STATUS_CODE_MAP.get(exc.status_code, "HTTP_ERROR")
            if isinstance(exc.detail, str):
                error = exc.detail
            else:
                try:
                    error = HTTPStatus(exc.status_code).phrase
                except ValueError:
                    error = "Error"
            logger.warning(
                "HTTP exception raised",
                extra={"code": code, "status_code": exc.status_code, "path": request.url.path},
            )
            return _error_response(
                request,
                status_code=exc.status_code,
                code=code,
                error=error,
                headers=exc.headers or None,
            )
        finally:
            _reset_request_context(token)

    @app.exception_handler(Exception)
    async def _handle_unhandled_exception(request: Request, exc: Exception) -> JSONResponse:
        token = _bind_request_context(request)
        try:
            logger.exception("Unhandled application error")
            message = None
            details = None
            if _expose_details(request):
                message = str(exc)
                details = {"exception": type(exc).__name__}
            return _error_response(
                request,
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                code=ServerError.default_code,
                error=ServerError.default_message,
                message=message,
                details=details,
            )
        finally:
            _reset_request_context(token)


__all__ = [
    "ApplicationError",
    "DuplicateRecordError",
    "ForbiddenError",
    "ForeignKeyError",
    "NotFoundError",
    "ProjectNotFoundError",
    "RateLimitedError",
    "ServerError",
    "TaskNotFoundError",
    "UnauthorizedError",
    "ValidationError",
    "classify_integrity_error",
    "register_exception_handlers",
]
