"""API error taxonomy and the exception handlers that render it as JSON."""

import logging
from http import HTTPStatus
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """Base for errors that map to a JSON `{error, message}` response."""

    status_code: int = 500
    error: str = "Internal Server Error"
    default_message: str = "An unexpected error occurred"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_body(self) -> dict[str, Any]:
        return {"error": self.error, "message": self.message}


class RequestValidationFailed(ApiError):
    """Malformed or out-of-range input, with per-field messages."""

    status_code = 400
    error = "Validation failed"
    default_message = "Request body failed validation"

    def __init__(self, details: dict[str, list[str]], message: str | None = None) -> None:
        super().__init__(message)
        self.details = details

    def to_body(self) -> dict[str, Any]:
        return {"error": self.error, "details": self.details}


class BadRequestError(ApiError):
    status_code = 400
    error = "Bad Request"
    default_message = "The request could not be processed"


class InvariantViolationError(BadRequestError):
    """The request would break a global rule (last admin, self-action)."""


class AuthenticationError(ApiError):
    status_code = 401
    error = "Unauthorized"
    default_message = "Authentication required"


class AuthorizationError(ApiError):
    status_code = 403
    error = "Forbidden"
    default_message = "Admin access required"


class NotFoundError(ApiError):
    status_code = 404
    error = "Not Found"
    default_message = "Resource not found"


class ConflictError(ApiError):
    status_code = 409
    error = "Conflict"
    default_message = "Resource already exists"


class RateLimitError(ApiError):
    status_code = 429
    error = "Too many requests"
    default_message = "Please try again later"


class UpstreamError(ApiError):
    """Auth service or datastore failure; detail is logged, never returned."""


def flatten_validation_errors(errors: list[dict[str, Any]]) -> dict[str, list[str]]:
    """
    Group pydantic errors by field name.

    The location is reduced to its last string component (the camelCase alias);
    errors about the body as a whole are keyed under 'body'.
    """
    details: dict[str, list[str]] = {}
    for err in errors:
        loc = [part for part in err.get("loc", ()) if part not in ("body", "query", "path")]
        field = next((str(p) for p in reversed(loc) if isinstance(p, str)), "body")
        details.setdefault(field, []).append(err.get("msg", "Invalid value"))
    return details


async def _api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    if isinstance(exc, UpstreamError):
        logger.error(
            "Upstream failure",
            extra={"path": request.url.path, "reason": str(exc.__cause__ or exc)[:500]},
        )
    return JSONResponse(status_code=exc.status_code, content=exc.to_body())


async def _request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    failed = RequestValidationFailed(flatten_validation_errors(list(exc.errors())))
    return JSONResponse(status_code=failed.status_code, content=failed.to_body())


async def _http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    if exc.status_code == 404:
        content = {
            "error": "Not Found",
            "message": "The requested endpoint does not exist",
        }
    else:
        try:
            phrase = HTTPStatus(exc.status_code).phrase
        except ValueError:
            phrase = "Error"
        content = {"error": phrase, "message": str(exc.detail)}
    return JSONResponse(
        status_code=exc.status_code,
        content=content,
        headers=getattr(exc, "headers", None),
    )


async def _unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content={
            "error": "Internal Server Error",
            "message": "An unexpected error occurred",
        },
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Install JSON error handlers for the taxonomy above and framework errors."""
    app.add_exception_handler(ApiError, _api_error_handler)
    app.add_exception_handler(RequestValidationError, _request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)
    app.add_exception_handler(Exception, _unhandled_exception_handler)
