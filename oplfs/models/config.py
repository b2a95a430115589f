"""Configuration data models."""

from dataclasses import dataclass
from pathlib import Path

DEFAULT_EXTENSIONS: tuple[str, ...] = (".iso", ".iso9660")
DEFAULT_ENTRY_NAME = "SYSTEM.CNF"


@dataclass(frozen=True)
class AppConfig:
    """Application configuration settings."""
    log_level: str = "INFO"
    log_dir: Path | None = None
    catalog_path: Path | None = None  # None = report only, nothing persisted
    extensions: tuple[str, ...] = DEFAULT_EXTENSIONS
    entry_name: str = DEFAULT_ENTRY_NAME
