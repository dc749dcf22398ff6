"""Error Handlers: global exception handlers for the admin app.

Invariants:
    - AdminError -> its http_status with code, message, severity
    - RequestValidationError -> 400 with field-level details
    - Exception (catch-all) -> 500, never leaks internal details
    - HTML (error.html) by default, JSON when the client accepts application/json

Design Decisions:
    - Three-layer handler: domain (AdminError), validation (Pydantic), catch-all (Exception)
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse, Response
from fastapi.exceptions import RequestValidationError

from entity_admin.core.errors import AdminError, ErrorSeverity

logger = logging.getLogger(__name__)


def register_error_handlers(app: FastAPI) -> None:
    """Register all global error handlers on the FastAPI app."""
    _register_admin_error_handler(app)
    _register_validation_error_handler(app)
    _register_generic_error_handler(app)


def _register_admin_error_handler(app: FastAPI) -> None:
    """Register admin domain/infrastructure error handler."""

    @app.exception_handler(AdminError)
    async def admin_error_handler(request: Request, exc: AdminError):
        """Handle all admin domain/infrastructure errors."""
        log = logger.error if exc.http_status >= 500 else logger.warning
        log(
            f"AdminError: {exc.message}",
            extra={
                "error_code": exc.code,
                "path": request.url.path,
                "status_code": exc.http_status,
                "section": exc.context.section,
                "entity": exc.context.entity,
                "primary_key": exc.context.primary_key,
            },
        )
        return _error_response(request, exc.http_status, exc.to_response())


def _register_validation_error_handler(app: FastAPI) -> None:
    """Register Pydantic validation error handler."""

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError,
    ):
        """Handle Pydantic validation errors."""
        logger.warning(
            f"Validation error on {request.url.path}: {exc.errors()}",
        )
        return _error_response(
            request, status.HTTP_400_BAD_REQUEST,
            _build_validation_error_response(exc),
        )


def _register_generic_error_handler(app: FastAPI) -> None:
    """Register catch-all error handler."""

    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception):
        """Catch-all: never leaks internal details."""
        logger.error(
            f"Unhandled exception on {request.url.path}: {exc}",
            exc_info=True,
        )
        return _error_response(
            request, status.HTTP_500_INTERNAL_SERVER_ERROR,
            {
                "error": {
                    "code": "INTERNAL_ERROR",
                    "message": "An unexpected error occurred",
                    "category": "internal",
                    "severity": ErrorSeverity.CRITICAL.value,
                },
            },
        )


def _wants_json(request: Request) -> bool:
    return "application/json" in request.headers.get("accept", "")


def _error_response(request: Request, status_code: int, content: dict) -> Response:
    """Render error.html, or JSON for API clients and apps without templates."""
    templates = getattr(request.app.state, "templates", None)
    if _wants_json(request) or templates is None:
        return JSONResponse(status_code=status_code, content=content)
    return templates.render(
        request, "error.html",
        {"error": content["error"], "status_code": status_code},
        status_code=status_code,
    )


def _build_validation_error_response(exc: RequestValidationError) -> dict:
    """Build structured validation error response."""
    return {
        "error": {
            "code": "VALIDATION_ERROR",
            "message": "Invalid request data",
            "category": "validation",
            "severity": ErrorSeverity.ERROR.value,
            "details": [
                {
                    "field": ".".join(str(loc) for loc in e["loc"]),
                    "message": e["msg"],
                    "type": e["type"],
                }
                for e in exc.errors()
            ],
        },
    }
