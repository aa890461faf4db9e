"""Error Hierarchy - typed, categorized exceptions for every resolution failure mode.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Not-found and invalid-input errors carry the offending raw identifier and,
      where relevant, the containing project or teamspace identifier
    - Not-found errors are only raised after an exhausted lookup, never derived
      from a store failure
    - to_result() produces the typed failure envelope returned to callers

Design Decisions:
    - Single hierarchy with TrackRefError base: ToolDispatch catches it at one boundary
    - ErrorContext as dataclass: observability fields without coupling to logging
    - Store errors (connection, auth) pass through unchanged from the store adapters
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from datetime import datetime, timezone


class ErrorSeverity(str, Enum):
    """Error severity for observability and caller handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    VALIDATION = "validation"
    RESOURCE_NOT_FOUND = "resource_not_found"
    STORE = "store"
    AUTHENTICATION = "authentication"
    INTERNAL = "internal"


@dataclass
class ErrorContext:
    """Context carried alongside an error for logs and envelopes."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    tool_name: str | None = None
    debug_info: dict[str, Any] | None = None


class TrackRefError(Exception):
    """Base exception for all trackref errors."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: ErrorContext | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()

    def details(self) -> dict[str, Any]:
        """Identifier fields a caller needs to render an actionable message."""
        return {}

    def to_result(self) -> dict:
        """Convert to the typed failure envelope."""
        return {
            "status": "error",
            "error_code": self.code,
            "message": self.message,
            "category": self.category.value,
            "severity": self.severity.value,
            "details": self.details(),
        }


# ─── Lookup Errors ──────────────────────────────────────────────

class ProjectNotFoundError(TrackRefError):
    """No project matches the reference."""
    def __init__(self, identifier: str, context: ErrorContext | None = None):
        super().__init__(
            f"Project '{identifier}' not found",
            "PROJECT_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, context,
        )
        self.identifier = identifier

    def details(self) -> dict[str, Any]:
        return {"identifier": self.identifier}


class IssueNotFoundError(TrackRefError):
    """No issue in the project matches the reference."""
    def __init__(
        self, identifier: str, project: str, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"Issue '{identifier}' not found in project '{project}'",
            "ISSUE_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, context,
        )
        self.identifier = identifier
        self.project = project

    def details(self) -> dict[str, Any]:
        return {"identifier": self.identifier, "project": self.project}


class PersonNotFoundError(TrackRefError):
    """No person matches the email or name."""
    def __init__(self, identifier: str, context: ErrorContext | None = None):
        super().__init__(
            f"Person '{identifier}' not found",
            "PERSON_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, context,
        )
        self.identifier = identifier

    def details(self) -> dict[str, Any]:
        return {"identifier": self.identifier}


class TagNotFoundError(TrackRefError):
    """No label matches the id or title."""
    def __init__(self, identifier: str, context: ErrorContext | None = None):
        super().__init__(
            f"Tag '{identifier}' not found",
            "TAG_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, context,
        )
        self.identifier = identifier

    def details(self) -> dict[str, Any]:
        return {"identifier": self.identifier}


class TeamspaceNotFoundError(TrackRefError):
    """No teamspace matches the id or name."""
    def __init__(self, identifier: str, context: ErrorContext | None = None):
        super().__init__(
            f"Teamspace '{identifier}' not found",
            "TEAMSPACE_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, context,
        )
        self.identifier = identifier

    def details(self) -> dict[str, Any]:
        return {"identifier": self.identifier}


class DocumentNotFoundError(TrackRefError):
    """No document in the teamspace matches the id or title."""
    def __init__(
        self, identifier: str, teamspace: str, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"Document '{identifier}' not found in teamspace '{teamspace}'",
            "DOCUMENT_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, context,
        )
        self.identifier = identifier
        self.teamspace = teamspace

    def details(self) -> dict[str, Any]:
        return {"identifier": self.identifier, "teamspace": self.teamspace}


class ComponentNotFoundError(TrackRefError):
    """No component in the project matches the id or label."""
    def __init__(
        self, identifier: str, project: str, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"Component '{identifier}' not found in project '{project}'",
            "COMPONENT_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, context,
        )
        self.identifier = identifier
        self.project = project

    def details(self) -> dict[str, Any]:
        return {"identifier": self.identifier, "project": self.project}


class MilestoneNotFoundError(TrackRefError):
    """No milestone in the project matches the id or label."""
    def __init__(
        self, identifier: str, project: str, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"Milestone '{identifier}' not found in project '{project}'",
            "MILESTONE_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, context,
        )
        self.identifier = identifier
        self.project = project

    def details(self) -> dict[str, Any]:
        return {"identifier": self.identifier, "project": self.project}


# ─── Invalid Input Errors ───────────────────────────────────────

class InvalidStatusError(TrackRefError):
    """Status name does not exist in the project's workflow."""
    def __init__(
        self, status: str, project: str, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"Invalid status '{status}' for project '{project}'",
            "INVALID_STATUS", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context,
        )
        self.status = status
        self.project = project

    def details(self) -> dict[str, Any]:
        return {"status": self.status, "project": self.project}


class InvalidPersonReferenceError(TrackRefError):
    """Person reference is blank or a malformed email token."""
    def __init__(self, value: str, context: ErrorContext | None = None):
        super().__init__(
            f"Invalid person reference '{value}'",
            "INVALID_PERSON_REFERENCE", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context,
        )
        self.value = value

    def details(self) -> dict[str, Any]:
        return {"value": self.value}


class InvalidArgumentError(TrackRefError):
    """Operation argument missing or outside its vocabulary."""
    def __init__(
        self, argument: str, value: Any = None, context: ErrorContext | None = None,
    ):
        problem = "is required" if value is None else f"has invalid value '{value}'"
        super().__init__(
            f"Argument '{argument}' {problem}",
            "INVALID_ARGUMENT", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context,
        )
        self.argument = argument
        self.value = value

    def details(self) -> dict[str, Any]:
        return {"argument": self.argument, "value": self.value}


# ─── Store Errors (pass-through) ────────────────────────────────

class StoreError(TrackRefError):
    """Document store operation failed."""
    def __init__(
        self, message: str, operation: str, context: ErrorContext | None = None,
        code: str = "STORE_ERROR", category: ErrorCategory = ErrorCategory.STORE,
    ):
        super().__init__(
            f"Store {operation} failed: {message}",
            code, category, ErrorSeverity.CRITICAL, context,
        )
        self.operation = operation

    def details(self) -> dict[str, Any]:
        return {"operation": self.operation}


class StoreConnectionError(StoreError):
    """Store unreachable or the transport failed mid-operation."""
    def __init__(
        self, message: str, operation: str, context: ErrorContext | None = None,
    ):
        super().__init__(
            message, operation, context, code="STORE_CONNECTION_ERROR",
        )


class StoreAuthError(StoreError):
    """Store rejected the credentials."""
    def __init__(
        self, message: str, operation: str, context: ErrorContext | None = None,
    ):
        super().__init__(
            message, operation, context, code="STORE_AUTH_ERROR",
            category=ErrorCategory.AUTHENTICATION,
        )
