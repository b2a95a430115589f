"""Disc image discovery and indexing."""

from collections.abc import Callable, Iterator
from pathlib import Path

import structlog

from ..models import (
    DEFAULT_EXTENSIONS,
    CatalogRecord,
    DiscFound,
    Format,
    Platform,
    ScanFailure,
    ScanSummary,
    VideoMode,
)
from .archive import ArchiveInspector
from .catalog_codec import from_text
from .errors import (
    ErrorHandlingService,
    ExtractionError,
    RootNotFoundError,
    UnrecognizedValueError,
    get_error_service,
)
from .system_cnf import ASCII_WHITESPACE, VMODE_KEY, SystemCnf, TitleIdResolver

log = structlog.stdlib.get_logger()

DiscCallback = Callable[[DiscFound], None]
FailureCallback = Callable[[ScanFailure], None]


class DiscCrawlerService:
    """Service that walks a directory tree and resolves the title ID of every disc image.

    Files are processed one at a time. A file that fails to index is reported
    and skipped; only a missing root path aborts the scan.
    """

    def __init__(
        self,
        inspector: ArchiveInspector | None = None,
        resolver: TitleIdResolver | None = None,
        extensions: tuple[str, ...] = DEFAULT_EXTENSIONS,
        error_service: ErrorHandlingService | None = None,
    ) -> None:
        """Initialize the crawler.

        Args:
            inspector: Extracts SYSTEM.CNF from each image
            resolver: Resolves the title ID from a parsed SYSTEM.CNF
            extensions: File name suffixes of disc images (case-sensitive)
            error_service: Records per-file failures (defaults to the global service)
        """
        self.inspector = inspector or ArchiveInspector()
        self.resolver = resolver or TitleIdResolver()
        self.extensions = extensions
        self.error_service = error_service or get_error_service()

    def crawl(
        self,
        root: Path,
        on_disc: DiscCallback | None = None,
        on_failure: FailureCallback | None = None,
    ) -> ScanSummary:
        """Index every disc image under ``root``.

        Args:
            root: Directory to walk recursively, or a single image
            on_disc: Called for each disc whose title ID was resolved
            on_failure: Called for each candidate that could not be indexed

        Returns:
            Summary of discovered discs and failures

        Raises:
            RootNotFoundError: If ``root`` does not exist
        """
        log.info("Crawling", root=str(root))

        if not root.exists():
            raise RootNotFoundError(str(root))

        discs: list[DiscFound] = []
        failures: list[ScanFailure] = []
        files_visited = 0
        candidates = 0

        for path in self.iter_files(root):
            files_visited += 1
            if not self.is_candidate(path):
                continue
            candidates += 1

            try:
                found = self.index_file(path)
            except (ExtractionError, OSError) as e:
                self.error_service.handle_error(e, operation="index_file", component="crawler", context={"path": str(path)})
                failure = ScanFailure(path=path, error=e)
                failures.append(failure)
                if on_failure:
                    on_failure(failure)
                continue

            log.info("New disc", title_id=found.title_id, path=str(path))
            discs.append(found)
            if on_disc:
                on_disc(found)

        summary = ScanSummary(
            root=root,
            discs=discs,
            failures=failures,
            files_visited=files_visited,
            candidates=candidates,
        )
        log.info(
            "Crawl complete",
            root=str(root),
            files_visited=files_visited,
            candidates=candidates,
            discs=len(discs),
            failures=len(failures),
        )
        return summary

    def iter_files(self, root: Path) -> Iterator[Path]:
        """Yield every regular file under ``root`` once, in sorted order."""
        if root.is_file():
            yield root
            return

        for path in sorted(root.rglob("*")):
            if path.is_file():
                yield path

    def is_candidate(self, path: Path) -> bool:
        """Check whether the file name ends with a disc image suffix."""
        return any(path.name.endswith(ext) for ext in self.extensions)

    def index_file(self, path: Path) -> DiscFound:
        """Resolve the title ID of one disc image.

        Raises:
            ExtractionError: If the image cannot be indexed
            OSError: If the file cannot be read
        """
        data = self.inspector.read_entry(path)

        try:
            system_cnf = SystemCnf.from_bytes(data)
            title_id = self.resolver.resolve(system_cnf)
        except ExtractionError as e:
            e.path = str(path)
            raise

        record = CatalogRecord(
            title_id=title_id,
            path=str(path),
            size=path.stat().st_size,
            format=Format.ISO,
            platform=Platform.PS2,
            video_mode=self._video_mode(system_cnf, path),
        )
        return DiscFound(path=path, title_id=title_id, record=record)

    @staticmethod
    def _video_mode(system_cnf: SystemCnf, path: Path) -> VideoMode | None:
        vmode = system_cnf.get(VMODE_KEY)
        if vmode is None:
            return None
        try:
            return from_text(VideoMode, vmode.strip(ASCII_WHITESPACE))
        except UnrecognizedValueError:
            log.debug("Ignoring unknown VMODE", path=str(path), vmode=vmode)
            return None
