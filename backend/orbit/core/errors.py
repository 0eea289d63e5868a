"""Error Hierarchy — closed, kind-tagged exceptions for every Orbit failure mode.

Invariants:
    - Every error has a code (str), kind (ErrorKind), severity (ErrorSeverity)
    - ErrorKind is closed: HTTP_STATUS_BY_KIND covers every member
    - Authorization messages never name a resource owner or reveal existence
    - TransientStorageError is always retryable; nothing else is

Design Decisions:
    - Single hierarchy with OrbitError base: FastAPI global handler catches all (ADR: uniform error shape)
    - ErrorKind enum instead of string codes at call sites: callers match on kind,
      codes only refine the wire payload (ADR: no duck-typed error inspection)
"""

from dataclasses import dataclass, field
from enum import Enum
from datetime import datetime, timezone


class ErrorSeverity(str, Enum):
    """Error severity for observability and client handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorKind(str, Enum):
    """The closed set of failure kinds the core can produce."""
    AUTHENTICATION = "authentication"
    AUTHORIZATION = "authorization"
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    TRANSIENT_STORAGE = "transient_storage"


HTTP_STATUS_BY_KIND: dict[ErrorKind, int] = {
    ErrorKind.AUTHENTICATION: 401,
    ErrorKind.AUTHORIZATION: 403,
    ErrorKind.VALIDATION: 400,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.CONFLICT: 409,
    ErrorKind.TRANSIENT_STORAGE: 503,
}


@dataclass
class ErrorContext:
    """Observability context attached to an error (never sent to clients)."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    subject_id: str | None = None
    operation: str | None = None


class OrbitError(Exception):
    """Base exception for all Orbit errors."""

    def __init__(
        self,
        message: str,
        code: str,
        kind: ErrorKind,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: ErrorContext | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.kind = kind
        self.severity = severity
        self.context = context or ErrorContext()

    @property
    def http_status(self) -> int:
        return HTTP_STATUS_BY_KIND[self.kind]

    @property
    def retryable(self) -> bool:
        return self.kind is ErrorKind.TRANSIENT_STORAGE

    def to_response(self) -> dict:
        """Convert to standardized REST error response."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "kind": self.kind.value,
                "severity": self.severity.value,
                "retryable": self.retryable,
                "timestamp": self.context.timestamp.isoformat(),
            }
        }


# ─── Identity Errors (401 / 403) ────────────────────────────────

class AuthenticationError(OrbitError):
    """Missing, malformed, expired or otherwise unverifiable identity."""
    def __init__(self, message: str, code: str, context: ErrorContext | None = None):
        super().__init__(
            message, code, ErrorKind.AUTHENTICATION,
            ErrorSeverity.WARNING, context,
        )


class AuthorizationError(OrbitError):
    """Valid identity, insufficient role or not the resource owner."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "FORBIDDEN", ErrorKind.AUTHORIZATION,
            ErrorSeverity.WARNING, context,
        )


# ─── Input Errors (400 / 404 / 409) ─────────────────────────────

class ValidationError(OrbitError):
    """Malformed input, rejected before any storage write."""
    def __init__(self, message: str, field: str, context: ErrorContext | None = None):
        super().__init__(
            message, "VALIDATION_ERROR", ErrorKind.VALIDATION,
            ErrorSeverity.ERROR, context,
        )
        self.field = field

    def to_response(self) -> dict:
        response = super().to_response()
        response["error"]["field"] = self.field
        return response


class NotFoundError(OrbitError):
    """Requested resource does not exist (only after authorization passed)."""
    def __init__(
        self, resource_type: str, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"{resource_type} not found",
            "RESOURCE_NOT_FOUND", ErrorKind.NOT_FOUND,
            ErrorSeverity.ERROR, context,
        )


class ConflictError(OrbitError):
    """Identity-level conflict outside the idempotent sync/enroll paths."""
    def __init__(self, message: str, code: str, context: ErrorContext | None = None):
        super().__init__(
            message, code, ErrorKind.CONFLICT,
            ErrorSeverity.ERROR, context,
        )


# ─── Infrastructure Errors (503) ────────────────────────────────

class TransientStorageError(OrbitError):
    """Storage fault or timeout — outcome unknown, blind retry is safe."""
    def __init__(self, operation: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.operation = operation
        super().__init__(
            "Storage is temporarily unavailable. The request can be retried safely.",
            "STORAGE_UNAVAILABLE", ErrorKind.TRANSIENT_STORAGE,
            ErrorSeverity.CRITICAL, ctx,
        )
        self.operation = operation
