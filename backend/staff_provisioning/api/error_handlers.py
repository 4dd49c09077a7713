"""Error Handlers — global exception handlers for the staff provisioning API.

Invariants:
    - ProvisioningError → {"error": message} with the error's HTTP status
    - RequestValidationError → 400 {"error": "Invalid request data"}
    - Starlette HTTPException (404, 405, ...) → {"error": detail}
    - Exception (catch-all) → 500, never leaks internal details
    - Every error response carries Cache-Control: no-store

Design Decisions:
    - Four-layer handler: domain (ProvisioningError), validation (Pydantic),
      routing (HTTPException), catch-all (Exception)
    - Extracted from main.py (ADR: import fan-out < 10)
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from staff_provisioning.api.responses import json_response
from staff_provisioning.core.errors import ErrorSeverity, ProvisioningError

logger = logging.getLogger(__name__)

# Client-facing wording for routing errors
_HTTP_ERROR_MESSAGES = {
    status.HTTP_405_METHOD_NOT_ALLOWED: "Method not allowed",
    status.HTTP_404_NOT_FOUND: "Not found",
}


def register_error_handlers(app: FastAPI) -> None:
    """Register all global error handlers on the FastAPI app."""
    _register_provisioning_error_handler(app)
    _register_validation_error_handler(app)
    _register_http_error_handler(app)
    _register_generic_error_handler(app)


def _register_provisioning_error_handler(app: FastAPI) -> None:
    """Register domain/infrastructure error handler."""

    @app.exception_handler(ProvisioningError)
    async def provisioning_error_handler(request: Request, exc: ProvisioningError):
        """Handle all provisioning errors."""
        level = (
            logging.ERROR if exc.severity in (ErrorSeverity.ERROR, ErrorSeverity.CRITICAL)
            else logging.WARNING
        )
        logger.log(
            level,
            f"ProvisioningError: {exc.message}",
            extra={
                "error_code": exc.code,
                "path": request.url.path,
                **exc.context.log_extra(),
            },
        )
        return json_response(exc.http_status, exc.to_response())


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
        return json_response(
            status.HTTP_400_BAD_REQUEST, {"error": "Invalid request data"},
        )


def _register_http_error_handler(app: FastAPI) -> None:
    """Register routing error handler (unknown path, wrong method)."""

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        message = _HTTP_ERROR_MESSAGES.get(exc.status_code, str(exc.detail))
        response = json_response(exc.status_code, {"error": message})
        if exc.headers:
            response.headers.update(exc.headers)
        return response


def _register_generic_error_handler(app: FastAPI) -> None:
    """Register catch-all error handler."""

    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception):
        """Catch-all — never leaks internal details."""
        logger.error(
            f"Unhandled exception on {request.url.path}: {exc}",
            exc_info=True,
        )
        return json_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            {"error": "An unexpected error occurred"},
        )
