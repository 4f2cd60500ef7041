"""
Exception handlers.

Maps the module exception families to HTTP statuses so routes can just
raise. Anything unexpected becomes a logged 500 with a generic body.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from shared.exceptions import (
    ScribeError,
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    ExternalServiceError,
    NotFoundError,
    RateLimitError,
    ValidationError,
)

from .models.errors import ErrorResponse, ValidationErrorResponse

logger = logging.getLogger(__name__)

# Checked in order; first match wins
STATUS_BY_FAMILY: list[tuple[type[ScribeError], int]] = [
    (AuthenticationError, 401),
    (AuthorizationError, 403),
    (ValidationError, 400),
    (NotFoundError, 404),
    (ConflictError, 409),
    (RateLimitError, 429),
    (ExternalServiceError, 503),
]


def status_for(exc: ScribeError) -> int:
    for family, status_code in STATUS_BY_FAMILY:
        if isinstance(exc, family):
            return status_code
    return 500


async def scribe_error_handler(request: Request, exc: ScribeError) -> JSONResponse:
    status_code = status_for(exc)
    headers = {}

    if isinstance(exc, AuthenticationError):
        headers["WWW-Authenticate"] = "Bearer"
    elif isinstance(exc, RateLimitError):
        headers["Retry-After"] = str(exc.retry_after)

    if status_code >= 500:
        logger.error(f"{exc.code} on {request.method} {request.url.path}: {exc.message}")

    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder(exc.to_dict()),
        headers=headers or None,
    )


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    body = ValidationErrorResponse(detail=jsonable_encoder(exc.errors()))
    return JSONResponse(status_code=400, content=body.model_dump())


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        f"Unhandled exception on {request.method} {request.url.path}: {exc}",
        exc_info=True,
    )
    body = ErrorResponse(error="INTERNAL_ERROR", message="An unexpected error occurred")
    return JSONResponse(status_code=500, content=body.model_dump())


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ScribeError, scribe_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
