"""Error Hierarchy: typed, categorized exceptions for all admin failure modes.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Lookup and input errors are 400-level; infrastructure errors are 500-level
    - to_response() produces the JSON envelope also used as template context
    - No internal details leaked in user-facing messages

Design Decisions:
    - Single hierarchy with AdminError base: one global handler catches all
    - ErrorContext carries the (section, entity, primary key) triple for logging
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
    RESOURCE_NOT_FOUND = "resource_not_found"
    DATABASE = "database"
    INTERNAL = "internal"
    CONFLICT = "conflict"


@dataclass
class ErrorContext:
    """Where in the admin the error happened."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    section: str | None = None
    entity: str | None = None
    primary_key: str | None = None
    debug_info: dict[str, Any] | None = None


class AdminError(Exception):
    """Base exception for all admin errors."""

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
        """Convert to standardized error envelope."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "category": self.category.value,
                "severity": self.severity.value,
                "timestamp": self.context.timestamp.isoformat(),
                "context": {
                    "section": self.context.section,
                    "entity": self.context.entity,
                    "primary_key": self.context.primary_key,
                },
            }
        }


# ─── Lookup Errors (404) ────────────────────────────────────────

class SectionNotFoundError(AdminError):
    """No section registered under this name."""
    def __init__(self, section_name: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext(section=section_name)
        super().__init__(
            f"Section '{section_name}' not found",
            "SECTION_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.WARNING, ctx, 404,
        )
        self.section_name = section_name


class EntityNotRegisteredError(AdminError):
    """Section has no entity registered under this name."""
    def __init__(
        self, section_name: str, entity_name: str, context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext(section=section_name, entity=entity_name)
        super().__init__(
            f"Entity '{entity_name}' is not registered in section '{section_name}'",
            "ENTITY_NOT_REGISTERED", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.WARNING, ctx, 404,
        )
        self.entity_name = entity_name


class EntityNotFoundError(AdminError):
    """No row exists for this primary key."""
    def __init__(
        self, entity_name: str, primary_key: Any, context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext(entity=entity_name, primary_key=str(primary_key))
        super().__init__(
            f"{entity_name} '{primary_key}' not found",
            "ENTITY_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.WARNING, ctx, 404,
        )
        self.primary_key = primary_key


# ─── Input Errors (400/409) ─────────────────────────────────────

class InvalidPageError(AdminError):
    """Page number below 1."""
    def __init__(self, page: int, context: ErrorContext | None = None):
        super().__init__(
            f"Invalid page number: {page}",
            "INVALID_PAGE", ErrorCategory.VALIDATION,
            ErrorSeverity.WARNING, context, 400,
        )
        self.page = page


class ValueCleaningError(AdminError):
    """Submitted values could not be cleaned. Carries one message per field."""
    def __init__(self, field_errors: dict[str, str], context: ErrorContext | None = None):
        fields = ", ".join(sorted(field_errors))
        super().__init__(
            f"Invalid values for: {fields}",
            "VALIDATION_ERROR", ErrorCategory.VALIDATION,
            ErrorSeverity.WARNING, context, 400,
        )
        self.field_errors = field_errors

    def to_response(self) -> dict:
        response = super().to_response()
        response["error"]["details"] = [
            {"field": name, "message": message}
            for name, message in sorted(self.field_errors.items())
        ]
        return response


class IntegrityViolationError(AdminError):
    """Database rejected the write (unique, foreign key or not-null constraint)."""
    def __init__(self, entity_name: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext(entity=entity_name)
        super().__init__(
            f"{entity_name} could not be saved: a database constraint was violated",
            "INTEGRITY_VIOLATION", ErrorCategory.CONFLICT,
            ErrorSeverity.ERROR, ctx, 409,
        )


# ─── Registration Errors ────────────────────────────────────────

class DuplicateRegistrationError(AdminError):
    """Entity registered twice in the same section."""
    def __init__(self, section_name: str, entity_name: str):
        super().__init__(
            f"Entity '{entity_name}' is already registered in section '{section_name}'",
            "DUPLICATE_REGISTRATION", ErrorCategory.CONFLICT,
            ErrorSeverity.ERROR, ErrorContext(section=section_name, entity=entity_name), 409,
        )


class UnsupportedEntityError(AdminError):
    """Model cannot be administered (e.g. composite primary key)."""
    def __init__(self, entity_name: str, reason: str):
        super().__init__(
            f"Entity '{entity_name}' is not supported: {reason}",
            "UNSUPPORTED_ENTITY", ErrorCategory.INTERNAL,
            ErrorSeverity.CRITICAL, ErrorContext(entity=entity_name), 500,
        )


# ─── Infrastructure Errors (500-level) ──────────────────────────

class DatabaseError(AdminError):
    """Database operation failed."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Database {operation} failed: {message}",
            "DATABASE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.operation = operation
