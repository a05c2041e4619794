"""Translate domain failures into HTTP responses.

Every failure is rendered as ``{"error": <code>, "message": <text>}``;
validation failures also carry the per-field ``details``.
"""

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from protean.exceptions import ExpectedVersionError, ObjectNotFoundError, ValidationError

from marketplace.errors import Conflict, Forbidden, MarketplaceError, NotFound, Unauthenticated

logger = structlog.get_logger(__name__)

_STATUS_CODES = {
    Unauthenticated: 401,
    Forbidden: 403,
    NotFound: 404,
    Conflict: 409,
}


def status_code_for(exc: MarketplaceError) -> int:
    for error_cls, status_code in _STATUS_CODES.items():
        if isinstance(exc, error_cls):
            return status_code
    return 400


def _flatten(messages) -> str:
    if isinstance(messages, dict):
        return "; ".join(f"{field}: {', '.join(map(str, errors))}" for field, errors in messages.items())
    return str(messages)


async def marketplace_error_handler(request: Request, exc: MarketplaceError) -> JSONResponse:
    return JSONResponse(
        status_code=status_code_for(exc),
        content={"error": exc.code, "message": exc.message},
    )


async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=422,
        content={"error": "validation_error", "message": _flatten(exc.messages), "details": exc.messages},
    )


async def object_not_found_handler(request: Request, exc: ObjectNotFoundError) -> JSONResponse:
    return JSONResponse(status_code=404, content={"error": "not_found", "message": str(exc)})


async def expected_version_handler(request: Request, exc: ExpectedVersionError) -> JSONResponse:
    logger.warning("Concurrent modification rejected", path=request.url.path)
    return JSONResponse(
        status_code=409,
        content={"error": "conflict", "message": "The record was modified concurrently, please retry"},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(MarketplaceError, marketplace_error_handler)
    app.add_exception_handler(ValidationError, validation_error_handler)
    app.add_exception_handler(ObjectNotFoundError, object_not_found_handler)
    app.add_exception_handler(ExpectedVersionError, expected_version_handler)
