"""Scan result data models."""

from dataclasses import dataclass, field
from pathlib import Path

from .disc import CatalogRecord


@dataclass(frozen=True)
class DiscFound:
    """A disc image whose title ID was resolved."""
    path: Path
    title_id: str
    record: CatalogRecord


@dataclass(frozen=True)
class ScanFailure:
    """A candidate file that could not be indexed."""
    path: Path
    error: Exception

    @property
    def message(self) -> str:
        return str(self.error)


@dataclass(frozen=True)
class ScanSummary:
    """Outcome of crawling one root path."""
    root: Path
    discs: list[DiscFound] = field(default_factory=list)
    failures: list[ScanFailure] = field(default_factory=list)
    files_visited: int = 0
    candidates: int = 0
