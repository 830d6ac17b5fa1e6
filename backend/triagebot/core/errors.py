"""Error Hierarchy - typed, categorized exceptions for every triagebot failure mode.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - User-facing errors (400-level) carry a message that is safe to show verbatim
    - Internal errors (500-level) are logged with detail and shown only as a generic notice
    - "No command found" is never an error: parsers return None for it

Design Decisions:
    - Single hierarchy with TriageError base: FastAPI global handler catches all
    - HandlerMessageError / HandlerInternalError are the only two kinds that leave dispatch
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
    BUSINESS_RULE = "business_rule"
    RESOURCE_NOT_FOUND = "resource_not_found"
    CONFIGURATION = "configuration"
    DATABASE = "database"
    EXTERNAL_API = "external_api"
    INTERNAL = "internal"


class ConfigErrorKind(str, Enum):
    """Classification of a failed repository configuration fetch."""
    MISSING = "missing"
    MALFORMED = "malformed"
    TRANSIENT = "transient"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    repository: str | None = None
    handler: str | None = None
    owner_id: int | None = None
    debug_info: dict[str, Any] | None = None


class TriageError(Exception):
    """Base exception for all triagebot errors."""

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

    @property
    def is_user_facing(self) -> bool:
        return self.http_status < 500

    def to_response(self) -> dict:
        """Convert to standardized REST error response."""
        return {
            "error": {
                "code": self.code,
                "message": self.message if self.is_user_facing else "An internal error occurred.",
                "category": self.category.value,
                "severity": self.severity.value,
                "timestamp": self.context.timestamp.isoformat(),
                "context": {
                    "repository": self.context.repository,
                    "handler": self.context.handler,
                },
            }
        }


# ─── Parse Errors (400-level) ───────────────────────────────────

class LexError(TriageError):
    """Malformed quoting in command text."""
    def __init__(self, message: str, position: int, context: ErrorContext | None = None):
        super().__init__(
            f"{message} (at position {position})",
            "LEX_ERROR", ErrorCategory.VALIDATION,
            ErrorSeverity.WARNING, context, 400,
        )
        self.position = position


class CommandParseError(TriageError):
    """A command keyword was recognized but its arguments are malformed."""
    def __init__(
        self, message: str, family: str, position: int | None = None,
        context: ErrorContext | None = None,
    ):
        detail = message if position is None else f"{message} (at position {position})"
        super().__init__(
            detail, "COMMAND_PARSE_ERROR", ErrorCategory.VALIDATION,
            ErrorSeverity.WARNING, context, 400,
        )
        self.family = family
        self.position = position


# ─── Notification Store Errors (400-level) ──────────────────────

class NotificationNotFoundError(TriageError):
    """No notification at the requested position (or with the requested URL)."""
    def __init__(self, identifier: int | str, size: int, context: ErrorContext | None = None):
        if isinstance(identifier, int):
            message = f"No notification at position {identifier}; the list has {size} entries"
        else:
            message = f"No notification for {identifier}"
        super().__init__(
            message, "NOTIFICATION_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.WARNING, context, 404,
        )
        self.identifier = identifier


class InvalidPositionError(TriageError):
    """Position is 0 or outside the owner's list."""
    def __init__(self, position: int, size: int, context: ErrorContext | None = None):
        if position < 1:
            message = f"Positions are 1-based; got {position}"
        else:
            message = f"Position {position} is out of range; the list has {size} entries"
        super().__init__(
            message, "INVALID_POSITION", ErrorCategory.VALIDATION,
            ErrorSeverity.WARNING, context, 400,
        )
        self.position = position


# ─── Configuration Errors ───────────────────────────────────────

class ConfigurationError(TriageError):
    """Repository configuration could not be loaded.

    MISSING and MALFORMED are the repository owner's problem and are shown
    verbatim; TRANSIENT hides an API failure and is internal.
    """
    def __init__(
        self, kind: ConfigErrorKind, message: str,
        context: ErrorContext | None = None,
    ):
        transient = kind is ConfigErrorKind.TRANSIENT
        super().__init__(
            message, f"CONFIG_{kind.value.upper()}", ErrorCategory.CONFIGURATION,
            ErrorSeverity.CRITICAL if transient else ErrorSeverity.ERROR,
            context, 503 if transient else 400,
        )
        self.kind = kind


# ─── Dispatch Errors ────────────────────────────────────────────

class HandlerMessageError(TriageError):
    """Deterministic problem the triggering user should see verbatim."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "HANDLER_MESSAGE", ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.WARNING, context, 400,
        )


class HandlerInternalError(TriageError):
    """Downstream failure while executing a handler; detail stays in the logs."""
    def __init__(self, cause: BaseException, context: ErrorContext | None = None):
        super().__init__(
            "An internal error occurred.", "HANDLER_INTERNAL", ErrorCategory.INTERNAL,
            ErrorSeverity.CRITICAL, context, 500,
        )
        self.cause = cause


# ─── Infrastructure Errors (500-level) ──────────────────────────

class DatabaseError(TriageError):
    """Database operation failed."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Database {operation} failed: {message}",
            "DATABASE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.operation = operation


class ExternalAPIError(TriageError):
    """GitHub, Zulip or team API call failed."""
    def __init__(
        self,
        service: str,
        message: str,
        status_code: int | None = None,
        context: ErrorContext | None = None,
    ):
        super().__init__(
            f"{service} API error: {message}",
            "EXTERNAL_API_ERROR", ErrorCategory.EXTERNAL_API,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.service = service
        self.status_code = status_code
