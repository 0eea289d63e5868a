"""Error Handlers — global exception handlers for the Orbit API.

Invariants:
    - OrbitError → structured JSON with code, message, kind, severity, retryable
    - 401 responses carry WWW-Authenticate: Bearer
    - RequestValidationError → the same 400 envelope as core ValidationError,
      plus field-level details
    - Exception (catch-all) → never leaks internal details

Design Decisions:
    - Three-layer handler: domain (OrbitError), validation (Pydantic), catch-all (Exception)
    - Extracted from main.py (ADR: ExMA import fan-out < 10)
"""

import logging
from datetime import datetime, timezone

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError

from orbit.core.errors import ErrorKind, ErrorSeverity, OrbitError

logger = logging.getLogger(__name__)

BEARER_CHALLENGE = {"WWW-Authenticate": "Bearer"}


def register_error_handlers(app: FastAPI) -> None:
    """Register all global error handlers on the FastAPI app."""
    _register_orbit_error_handler(app)
    _register_validation_error_handler(app)
    _register_generic_error_handler(app)


def _register_orbit_error_handler(app: FastAPI) -> None:
    """Register Orbit domain/infrastructure error handler."""

    @app.exception_handler(OrbitError)
    async def orbit_error_handler(request: Request, exc: OrbitError):
        """Handle all Orbit domain/infrastructure errors."""
        log = logger.warning if exc.severity is ErrorSeverity.WARNING else logger.error
        log(
            f"OrbitError: {exc.message}",
            extra={"error_code": exc.code, "path": request.url.path},
        )
        headers = BEARER_CHALLENGE if exc.kind is ErrorKind.AUTHENTICATION else None
        return JSONResponse(
            status_code=exc.http_status,
            content=exc.to_response(),
            headers=headers,
        )


def _register_validation_error_handler(app: FastAPI) -> None:
    """Register Pydantic validation error handler."""

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError,
    ):
        """Handle Pydantic validation errors."""
        logger.warning(
            f"Validation error on {request.url.path}",
            extra={"error_code": "VALIDATION_ERROR", "path": request.url.path},
        )
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=_build_validation_error_response(exc),
        )


def _register_generic_error_handler(app: FastAPI) -> None:
    """Register catch-all error handler."""

    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception):
        """Catch-all — never leaks internal details."""
        logger.error(
            f"Unhandled exception on {request.url.path}: {exc}",
            exc_info=True,
            extra={"error_code": "INTERNAL_ERROR", "path": request.url.path},
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": {
                    "code": "INTERNAL_ERROR",
                    "message": "An unexpected error occurred",
                    "kind": "internal",
                    "severity": ErrorSeverity.CRITICAL.value,
                    "retryable": False,
                    "timestamp": _now_iso(),
                },
            },
        )


def _build_validation_error_response(exc: RequestValidationError) -> dict:
    """Build structured validation error response."""
    return {
        "error": {
            "code": "VALIDATION_ERROR",
            "message": "Invalid request data",
            "kind": ErrorKind.VALIDATION.value,
            "severity": ErrorSeverity.ERROR.value,
            "retryable": False,
            "timestamp": _now_iso(),
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


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()
