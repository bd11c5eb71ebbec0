"""Global exception handlers.

Every failure leaves the API in one envelope:
    {"errors": [{"message": str, "field": str}]}

Invariants:
    - DomainError subclasses map to a fixed status code
    - RequestValidationError → 400 with one entry per offending field
    - Internal failures never leak storage or library error text
"""

import logging
import math

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from domain.model.errors import (
    AuthError,
    ConflictError,
    DomainError,
    InternalError,
    NotFoundError,
    RateLimitedError,
    ValidationError,
)

logger = logging.getLogger(__name__)

INTERNAL_ERROR_MESSAGE = "Something went wrong"

# Checked in order; first isinstance match wins
_STATUS_BY_ERROR: list[tuple[type[DomainError], int]] = [
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (AuthError, status.HTTP_401_UNAUTHORIZED),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (ConflictError, status.HTTP_409_CONFLICT),
    (RateLimitedError, status.HTTP_429_TOO_MANY_REQUESTS),
    (InternalError, status.HTTP_500_INTERNAL_SERVER_ERROR),
]


def error_body(message: str, field: str | None = None) -> dict:
    return {"errors": [{"message": message, "field": field or ""}]}


def status_for(exc: DomainError) -> int:
    for error_type, status_code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return status_code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def register_error_handlers(app: FastAPI) -> None:
    """Register all global error handlers on the FastAPI app."""
    app.add_exception_handler(DomainError, domain_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(Exception, generic_error_handler)


async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    status_code = status_for(exc)
    headers = {}

    if status_code == status.HTTP_500_INTERNAL_SERVER_ERROR:
        logger.error(
            f"Internal error on {request.url.path}: {exc.message}",
            exc_info=exc,
        )
        return JSONResponse(status_code=status_code, content=error_body(INTERNAL_ERROR_MESSAGE))

    if isinstance(exc, AuthError):
        headers["WWW-Authenticate"] = "Bearer"
    if isinstance(exc, RateLimitedError):
        headers["Retry-After"] = str(max(1, math.ceil(exc.retry_after)))

    return JSONResponse(
        status_code=status_code,
        content=error_body(exc.message, exc.field),
        headers=headers or None,
    )


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed JSON, unknown fields and type mismatches are all 400s."""
    logger.info(f"Validation error on {request.url.path}", extra={"errors": len(exc.errors())})
    errors = []
    for error in exc.errors():
        loc = [str(part) for part in error.get("loc", ()) if part != "body"]
        errors.append({"message": error.get("msg", "invalid input"), "field": ".".join(loc)})
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"errors": errors or error_body("invalid input")["errors"]},
    )


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Framework-raised errors (unknown route, wrong method, 503) in the same envelope."""
    message = exc.detail if isinstance(exc.detail, str) else "Request failed"
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(message),
        headers=getattr(exc, "headers", None),
    )


async def generic_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Backstop for failures outside RequestContextMiddleware; never leaks internal details."""
    logger.error(f"Unhandled exception on {request.url.path}: {exc}", exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_body(INTERNAL_ERROR_MESSAGE),
    )
