"""Data models for the oplfs disc indexer."""

from .config import DEFAULT_ENTRY_NAME, DEFAULT_EXTENSIONS, AppConfig
from .disc import CatalogRecord, Format, Media, Platform, VideoMode
from .scan import DiscFound, ScanFailure, ScanSummary

__all__ = [
    "AppConfig",
    "CatalogRecord",
    "DEFAULT_ENTRY_NAME",
    "DEFAULT_EXTENSIONS",
    "DiscFound",
    "Format",
    "Media",
    "Platform",
    "ScanFailure",
    "ScanSummary",
    "VideoMode",
]
