"""Error Hierarchy — typed, categorized exceptions for every provisioning failure mode.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Client-facing errors keep their message verbatim: to_response() is {"error": message}
    - UpstreamError passes the identity service / record store message through unchanged
    - BackendAPIError is raised by infrastructure only; services translate it per stage

Design Decisions:
    - Single hierarchy with ProvisioningError base: one FastAPI handler catches all
      (ADR: uniform error shape)
    - ErrorContext as dataclass: observability extras without coupling to logging
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from datetime import datetime, timezone


class ErrorSeverity(str, Enum):
    """Error severity for observability and client handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    VALIDATION = "validation"
    AUTHENTICATION = "authentication"
    AUTHORIZATION = "authorization"
    CONFIGURATION = "configuration"
    EXTERNAL_API = "external_api"
    INTERNAL = "internal"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    stage: str | None = None
    caller_id: str | None = None
    identity_id: str | None = None
    debug_info: dict[str, Any] | None = None

    def log_extra(self) -> dict:
        """Non-empty fields, ready for logger `extra=`."""
        return {
            key: value
            for key, value in (
                ("stage", self.stage),
                ("caller_id", self.caller_id),
                ("identity_id", self.identity_id),
            )
            if value is not None
        }


class ProvisioningError(Exception):
    """Base exception for all staff provisioning errors."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: ErrorContext | None = None,
        http_status: int = 500,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()
        self.http_status = http_status

    def to_response(self) -> dict:
        """Convert to the endpoint's error envelope."""
        return {"error": self.message}


# ─── Request Errors (400-level) ─────────────────────────────────

class BadRequestError(ProvisioningError):
    """Request body malformed or missing required fields."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "BAD_REQUEST", ErrorCategory.VALIDATION,
            ErrorSeverity.WARNING, context, 400,
        )


class UnauthorizedError(ProvisioningError):
    """Caller token missing, invalid or expired."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "UNAUTHORIZED", ErrorCategory.AUTHENTICATION,
            ErrorSeverity.WARNING, context, 401,
        )


class ForbiddenError(ProvisioningError):
    """Caller authenticated but not an administrator."""
    def __init__(self, message: str = "Forbidden: admin only", context: ErrorContext | None = None):
        super().__init__(
            message, "FORBIDDEN", ErrorCategory.AUTHORIZATION,
            ErrorSeverity.WARNING, context, 403,
        )


class UpstreamError(ProvisioningError):
    """Identity service or record store rejected an operation."""
    def __init__(
        self,
        message: str,
        upstream_status: int | None = None,
        context: ErrorContext | None = None,
    ):
        super().__init__(
            message, "UPSTREAM_ERROR", ErrorCategory.EXTERNAL_API,
            ErrorSeverity.ERROR, context, 400,
        )
        self.upstream_status = upstream_status


# ─── Own-side Errors (500-level) ────────────────────────────────

class InternalError(ProvisioningError):
    """Own-side failure (e.g. caller profile could not be read)."""
    def __init__(
        self,
        message: str,
        context: ErrorContext | None = None,
        code: str = "INTERNAL_ERROR",
        category: ErrorCategory = ErrorCategory.INTERNAL,
    ):
        super().__init__(
            message, code, category, ErrorSeverity.CRITICAL, context, 500,
        )


class ConfigurationError(InternalError):
    """Required backend settings are missing."""
    def __init__(self, missing: list[str], context: ErrorContext | None = None):
        super().__init__(
            f"Missing env vars: {' / '.join(missing)}",
            context,
            code="CONFIGURATION_ERROR",
            category=ErrorCategory.CONFIGURATION,
        )
        self.missing = missing


class BackendAPIError(ProvisioningError):
    """Backend (auth or REST API) call failed. Raised by infrastructure only."""
    def __init__(
        self,
        message: str,
        operation: str,
        status_code: int | None = None,
        context: ErrorContext | None = None,
    ):
        super().__init__(
            message, "BACKEND_API_ERROR", ErrorCategory.EXTERNAL_API,
            ErrorSeverity.ERROR, context, 500,
        )
        self.operation = operation
        self.status_code = status_code
