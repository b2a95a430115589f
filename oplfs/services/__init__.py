"""Service layer for disc indexing and the catalog storage boundary."""

from .archive import ArchiveInspector
from .catalog_codec import from_text, record_from_row, record_to_row, to_text
from .catalog_store import CatalogStore
from .config import ConfigurationService, ValidationResult
from .crawler import DiscCrawlerService
from .errors import (
    AppError,
    ArchiveError,
    ArchiveOpenError,
    EntryNotFoundError,
    ErrorCategory,
    ErrorHandlingService,
    ErrorSeverity,
    ExtractionError,
    NoTitleIdError,
    NotAsciiError,
    RootNotFoundError,
    UnrecognizedValueError,
    UserFriendlyError,
    ValidationError,
    get_error_service,
    handle_error,
)
from .system_cnf import SystemCnf, TitleIdResolver

__all__ = [
    "AppError",
    "ArchiveError",
    "ArchiveInspector",
    "ArchiveOpenError",
    "CatalogStore",
    "ConfigurationService",
    "DiscCrawlerService",
    "EntryNotFoundError",
    "ErrorCategory",
    "ErrorHandlingService",
    "ErrorSeverity",
    "ExtractionError",
    "NoTitleIdError",
    "NotAsciiError",
    "RootNotFoundError",
    "SystemCnf",
    "TitleIdResolver",
    "UnrecognizedValueError",
    "UserFriendlyError",
    "ValidationError",
    "ValidationResult",
    "from_text",
    "get_error_service",
    "handle_error",
    "record_from_row",
    "record_to_row",
    "to_text",
]
