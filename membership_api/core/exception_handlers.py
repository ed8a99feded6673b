"""Centralized exception handlers for the FastAPI app.

Register with register_exception_handlers(app). Maps domain and framework
exceptions to JSON {error, details} responses.
"""

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from membership_api.core.config import get_settings
from membership_api.domain.exceptions import MembershipException
from membership_api.shared.telemetry.logging import NO_REQUEST_ID

logger = logging.getLogger(__name__)


def _request_id(request: Request) -> str:
    return getattr(request.state, "request_id", NO_REQUEST_ID)


def _membership_exception_handler(
    request: Request, exc: MembershipException
) -> JSONResponse:
    """Return exc.to_dict() with the exception's status code."""
    if exc.status_code >= 500:
        logger.error(
            "%s %s failed (request %s): %s (%s)",
            request.method,
            request.url.path,
            _request_id(request),
            exc.message,
            exc.details,
        )
    else:
        logger.info(
            "%s %s (request %s): %s",
            request.method,
            request.url.path,
            _request_id(request),
            exc.message,
        )
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


def _validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Return 422 with validation error details."""
    return JSONResponse(
        status_code=422,
        content={
            "error": "Request validation failed",
            "details": _jsonable_errors(exc),
        },
    )


def _jsonable_errors(exc: RequestValidationError) -> list[dict[str, Any]]:
    """Validation errors without the raw input/ctx objects (not always JSON-serializable)."""
    return [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg"), "type": err.get("type")}
        for err in exc.errors()
    ]


def _http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    """Return JSON for Starlette HTTP exceptions (status + detail)."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
    )


def _generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Return 500; include detail only when debug is True."""
    logger.exception("Unhandled exception (request %s): %s", _request_id(request), exc)
    settings = get_settings()
    detail: Any = str(exc) if settings.debug else None
    content: dict[str, Any] = {"error": "Internal server error"}
    if detail:
        content["details"] = {"reason": detail}
    return JSONResponse(status_code=500, content=content)


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers on the FastAPI app.

    Call once after creating the app. Handlers: MembershipException (and
    subclasses), RequestValidationError, StarletteHTTPException, generic Exception.
    """
    app.add_exception_handler(MembershipException, _membership_exception_handler)
    app.add_exception_handler(RequestValidationError, _validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)
    app.add_exception_handler(Exception, _generic_exception_handler)
