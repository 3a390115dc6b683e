"""
Global Exception Handlers for the FastAPI Application.

This module renders the three kinds of failure the API reports:
- Domain errors raised by services (``BuildBossError`` subclasses), returned
  with their own status code and structured ``extra`` fields
- Request validation errors, returned as HTTP 400 with one entry per field
- Any other unhandled exception, logged with full request context and
  returned as HTTP 500 with an error ID clients can quote when reporting it
"""

import traceback

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from buildboss.core.errors import BuildBossError
from buildboss.core.logging_config import get_logger
from buildboss.core.monitoring import log_error

logger = get_logger(__name__)


async def buildboss_error_handler(request: Request, exc: BuildBossError) -> JSONResponse:
    """
    Render an expected business-rule failure.

    Args:
        request: The HTTP request that caused the error
        exc: The domain error raised by a service or router

    Returns:
        JSONResponse with ``detail``, ``error_type`` and the error's extra fields
    """
    if exc.status_code >= 500:
        logger.error(f"{type(exc).__name__} in {request.method} {request.url.path}: {exc.message}")
    else:
        logger.info(f"{type(exc).__name__} in {request.method} {request.url.path}: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "error_type": type(exc).__name__, **exc.extra},
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report invalid request data as HTTP 400 with a message per field."""
    errors = []
    for error in exc.errors():
        # First element is the location (body, query, path); the rest names the field
        location = [str(part) for part in error.get("loc", ())[1:]]
        errors.append({"field": ".".join(location) or "body", "message": error.get("msg", "Invalid value")})
    logger.debug(f"Validation failed for {request.method} {request.url.path}: {errors}")
    return JSONResponse(status_code=400, content={"detail": "Validation error", "errors": errors})


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Global exception handler to log detailed error information.

    This handler is called for any unhandled exception in the application.
    It logs the full error context and returns a JSON response with an error ID
    that clients can use to reference the error when reporting issues.

    Args:
        request: The HTTP request that caused the exception
        exc: The exception that was raised

    Returns:
        JSONResponse with error details and error ID
    """
    error_id = id(exc)

    logger.error(
        f"Unhandled exception [{error_id}] in {request.method} {request.url.path}: {str(exc)}",
        exc_info=True,
        extra={
            "error_id": error_id,
            "method": request.method,
            "path": request.url.path,
            "query_params": dict(request.query_params),
            "client": request.client.host if request.client else "unknown",
            "error_type": type(exc).__name__,
            "traceback": traceback.format_exc(),
        },
    )
    log_error(
        type(exc).__name__,
        str(exc),
        {"error_id": error_id, "method": request.method, "path": request.url.path},
    )

    return JSONResponse(
        status_code=500,
        content={
            "detail": "Internal server error",
            "error_id": error_id,
            "error_type": type(exc).__name__,
        },
    )


def setup_exception_handlers(app: FastAPI) -> None:
    """
    Register exception handlers with the FastAPI application.

    Args:
        app: The FastAPI application instance
    """
    app.add_exception_handler(BuildBossError, buildboss_error_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, global_exception_handler)
    logger.debug("Exception handlers registered successfully")
