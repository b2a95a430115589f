"""Error taxonomy and error handling for the oplfs disc indexer.

This module provides:
- Custom exception classes for each failure the indexing pipeline can report
- User-friendly error representations with suggested actions
- A centralized error handling service that logs and tallies failures
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any

import structlog

log = structlog.stdlib.get_logger()


class ErrorCategory(Enum):
    """Categories of errors for classification and handling."""
    FILE_SYSTEM = "file_system"
    EXTRACTION = "extraction"
    VALIDATION = "validation"
    UNEXPECTED = "unexpected"


class ErrorSeverity(Enum):
    """Severity levels for errors."""
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


@dataclass(frozen=True)
class ErrorContext:
    """Context information for an error."""
    operation: str
    component: str
    details: dict[str, Any]


@dataclass(frozen=True)
class UserFriendlyError:
    """User-friendly error representation with suggested actions."""
    message: str
    category: ErrorCategory
    severity: ErrorSeverity
    suggested_actions: list[str]
    technical_details: str | None = None
    recoverable: bool = True


class AppError(Exception):
    """Base exception class for application errors."""

    def __init__(
        self,
        message: str,
        category: ErrorCategory = ErrorCategory.UNEXPECTED,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        suggested_actions: list[str] | None = None,
        technical_details: str | None = None,
        recoverable: bool = True,
        context: ErrorContext | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.category = category
        self.severity = severity
        self.suggested_actions = suggested_actions or []
        self.technical_details = technical_details
        self.recoverable = recoverable
        self.context = context

    def to_user_friendly(self) -> UserFriendlyError:
        """Convert to user-friendly error representation."""
        return UserFriendlyError(
            message=self.message,
            category=self.category,
            severity=self.severity,
            suggested_actions=self.suggested_actions,
            technical_details=self.technical_details,
            recoverable=self.recoverable,
        )


class RootNotFoundError(AppError):
    """The root path of a scan does not exist. Aborts the whole scan."""

    def __init__(self, path: str) -> None:
        super().__init__(
            message=f"Path {path} does not exist",
            category=ErrorCategory.FILE_SYSTEM,
            severity=ErrorSeverity.CRITICAL,
            suggested_actions=[
                "Verify the path is correct",
                "Check that the drive or share is mounted",
            ],
            technical_details=f"Path: {path}",
            recoverable=False,
        )
        self.path = path


class ExtractionError(AppError):
    """Base class for per-file failures while indexing a disc image."""

    def __init__(
        self,
        message: str,
        path: str | None = None,
        suggested_actions: list[str] | None = None,
        original_error: Exception | None = None,
    ) -> None:
        technical_details = None
        if path:
            technical_details = f"Path: {path}"
        if original_error:
            technical_details = (technical_details or "") + f"\nError: {type(original_error).__name__}: {original_error}"

        super().__init__(
            message=message,
            category=ErrorCategory.EXTRACTION,
            severity=ErrorSeverity.WARNING,
            suggested_actions=suggested_actions,
            technical_details=technical_details,
            recoverable=True,
        )
        self.path = path
        self.original_error = original_error


class ArchiveError(ExtractionError):
    """The disc image could not be read as a container."""


class ArchiveOpenError(ArchiveError):
    """The disc image could not be opened."""

    def __init__(
        self,
        path: str,
        reason: str,
        original_error: Exception | None = None,
    ) -> None:
        super().__init__(
            message=f"cannot open disc image: {reason}",
            path=path,
            suggested_actions=[
                "Check the file permissions",
                "Verify the file is an ISO9660 disc image",
            ],
            original_error=original_error,
        )
        self.reason = reason


class EntryNotFoundError(ArchiveError):
    """The requested entry does not exist in the disc image."""

    def __init__(self, path: str, entry_name: str) -> None:
        super().__init__(
            message=f"entry {entry_name} not found",
            path=path,
            suggested_actions=[
                "The image may not be a PlayStation 2 disc",
                "The image may be damaged; try re-dumping the disc",
            ],
        )
        self.entry_name = entry_name


class NotAsciiError(ExtractionError):
    """The configuration entry is not valid ASCII text."""

    def __init__(self, position: int, path: str | None = None) -> None:
        super().__init__(
            message=f"configuration is not ASCII (invalid byte at offset {position})",
            path=path,
            suggested_actions=["The image may be damaged; try re-dumping the disc"],
        )
        self.position = position


class NoTitleIdError(ExtractionError):
    """No title ID could be resolved from the configuration."""

    def __init__(self, path: str | None = None) -> None:
        super().__init__(message="no title ID found", path=path)


class ValidationError(AppError):
    """Exception for validation-related errors."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        value: Any = None,
        constraints: list[str] | None = None,
    ) -> None:
        suggested_actions = ["Review the input requirements"]
        if constraints:
            suggested_actions.extend([f"Ensure: {c}" for c in constraints])

        technical_details = None
        if field:
            technical_details = f"Field: {field}"
        if value is not None:
            value_str = str(value)[:100]  # Truncate long values
            technical_details = (technical_details or "") + f"\nValue: {value_str}"

        super().__init__(
            message=message,
            category=ErrorCategory.VALIDATION,
            severity=ErrorSeverity.ERROR,
            suggested_actions=suggested_actions,
            technical_details=technical_details,
            recoverable=False,
        )
        self.field = field
        self.value = value
        self.constraints = constraints or []


class UnrecognizedValueError(ValidationError, ValueError):
    """A stored value is not the canonical text of any enum variant.

    The message has the exact form ``unrecognized <kind> <text>``.
    """

    def __init__(self, kind: str, text: str) -> None:
        super().__init__(
            message=f"unrecognized {kind} {text}",
            field=kind,
            value=text,
        )
        self.kind = kind
        self.text = text


class ErrorHandlingService:
    """Centralized error handling service.

    Converts arbitrary exceptions into ``AppError`` instances, logs them with
    technical details and keeps a bounded history for end-of-run reporting.
    """

    def __init__(self, max_history_size: int = 100) -> None:
        self._error_history: list[AppError] = []
        self._max_history_size = max_history_size
        log.debug("Error handling service initialized")

    def handle_error(
        self,
        error: Exception,
        operation: str,
        component: str,
        context: dict[str, Any] | None = None,
    ) -> UserFriendlyError:
        """Handle an error and return a user-friendly representation.

        Args:
            error: The exception that occurred
            operation: The operation being performed
            component: The component where the error occurred
            context: Additional context information

        Returns:
            User-friendly error representation
        """
        app_error = self._convert_to_app_error(error, operation, component, context)
        self._log_error(app_error, operation, component, context)

        self._error_history.append(app_error)
        if len(self._error_history) > self._max_history_size:
            self._error_history.pop(0)

        return app_error.to_user_friendly()

    def _convert_to_app_error(
        self,
        error: Exception,
        operation: str,
        component: str,
        context: dict[str, Any] | None,
    ) -> AppError:
        """Convert a standard exception to an AppError."""
        if isinstance(error, AppError):
            return error

        path = context.get("path") if context else None

        if isinstance(error, PermissionError):
            return ArchiveOpenError(str(path), "permission denied", original_error=error)
        elif isinstance(error, FileNotFoundError):
            return ArchiveOpenError(str(path), "file not found", original_error=error)
        elif isinstance(error, OSError):
            return ArchiveError(
                message=f"read failed: {error}",
                path=path,
                original_error=error,
            )

        return AppError(
            message="An unexpected error occurred.",
            category=ErrorCategory.UNEXPECTED,
            severity=ErrorSeverity.ERROR,
            technical_details=f"{type(error).__name__}: {error}",
            recoverable=True,
            context=ErrorContext(
                operation=operation,
                component=component,
                details=context or {},
            ),
        )

    def _log_error(
        self,
        error: AppError,
        operation: str,
        component: str,
        context: dict[str, Any] | None,
    ) -> None:
        """Log error with full technical details."""
        log_method = log.warning if error.severity == ErrorSeverity.WARNING else log.error

        log_method(
            "Error occurred",
            error_message=error.message,
            category=error.category.value,
            severity=error.severity.value,
            operation=operation,
            component=component,
            technical_details=error.technical_details,
            recoverable=error.recoverable,
            context=context,
        )

    def get_recent_errors(self, count: int = 10) -> list[AppError]:
        """Get the most recent errors, oldest first."""
        return self._error_history[-count:] if count > 0 else []

    def get_error_count_by_category(self) -> dict[ErrorCategory, int]:
        """Get count of errors by category."""
        counts: dict[ErrorCategory, int] = {}
        for error in self._error_history:
            counts[error.category] = counts.get(error.category, 0) + 1
        return counts

    def create_user_message(
        self,
        error: UserFriendlyError,
        include_suggestions: bool = True,
    ) -> str:
        """Create a formatted user message from an error.

        Args:
            error: The user-friendly error
            include_suggestions: Whether to include suggested actions

        Returns:
            Formatted message string
        """
        parts = [error.message]

        if include_suggestions and error.suggested_actions:
            parts.append("\nSuggested actions:")
            for action in error.suggested_actions[:3]:
                parts.append(f"  • {action}")

        return "\n".join(parts)


_error_service: ErrorHandlingService | None = None


def get_error_service() -> ErrorHandlingService:
    """Get the global error handling service instance."""
    global _error_service
    if _error_service is None:
        _error_service = ErrorHandlingService()
    return _error_service


def handle_error(
    error: Exception,
    operation: str,
    component: str,
    context: dict[str, Any] | None = None,
) -> UserFriendlyError:
    """Convenience function to handle errors using the global service."""
    return get_error_service().handle_error(error, operation, component, context)
