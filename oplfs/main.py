"""Main entry point for the oplfs disc indexer.

This module provides the command-line interface with:
- Command-line argument parsing
- Service wiring from configuration and flags
- Per-disc reporting for the ``add`` command
"""

import argparse
import sys
from dataclasses import replace
from pathlib import Path
from typing import TextIO

import structlog

from oplfs import __version__
from oplfs.models import AppConfig, DiscFound, ScanFailure
from oplfs.services.archive import ArchiveInspector
from oplfs.services.catalog_store import CatalogStore
from oplfs.services.config import VALID_LOG_LEVELS, ConfigurationService
from oplfs.services.crawler import DiscCrawlerService
from oplfs.services.errors import AppError, get_error_service, handle_error
from oplfs.services.logging import setup_logging


log = structlog.stdlib.get_logger()


class ParsedArgs:
    """Type-safe container for parsed command-line arguments."""

    def __init__(
        self,
        command: str,
        path: Path | None,
        config: Path | None,
        catalog: Path | None,
        log_level: str | None,
        log_dir: Path | None,
        verbose: bool,
    ) -> None:
        self.command: str = command
        self.path: Path | None = path
        self.config: Path | None = config
        self.catalog: Path | None = catalog
        self.log_level: str | None = log_level
        self.log_dir: Path | None = log_dir
        self.verbose: bool = verbose


def build_parser() -> argparse.ArgumentParser:
    """Build the command-line parser."""
    parser = argparse.ArgumentParser(
        prog="oplfs",
        description="Index PlayStation 2 disc images by title ID",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  oplfs add /mnt/games                       Index every disc image under /mnt/games
  oplfs --catalog discs.json add /mnt/games  Also record the discs in a catalog file
        """
    )

    _ = parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}"
    )

    _ = parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to configuration file (default: ~/.config/oplfs/config.json)"
    )

    _ = parser.add_argument(
        "--catalog",
        type=Path,
        default=None,
        metavar="FILE",
        help="Catalog file to record discs in (default: from configuration, none if unset)"
    )

    _ = parser.add_argument(
        "--log-level",
        choices=VALID_LOG_LEVELS,
        default=None,
        help="Set the logging level (default: from configuration, INFO if unset)"
    )

    _ = parser.add_argument(
        "--log-dir",
        type=Path,
        default=None,
        help="Directory for log files"
    )

    _ = parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Also write log output to stderr"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)
    add_parser = subparsers.add_parser("add", help="Adds discs to the index")
    _ = add_parser.add_argument("path", type=Path, help="The path to crawl recursively")

    return parser


def parse_arguments(argv: list[str] | None = None) -> ParsedArgs:
    """Parse command-line arguments."""
    ns = build_parser().parse_args(argv)

    return ParsedArgs(
        command=str(ns.command),
        path=ns.path,
        config=ns.config,
        catalog=ns.catalog,
        log_level=ns.log_level,
        log_dir=ns.log_dir,
        verbose=bool(ns.verbose),
    )


def resolve_config(args: ParsedArgs) -> AppConfig:
    """Load the configuration file and apply command-line overrides."""
    config = ConfigurationService(config_path=args.config).load_config()

    overrides: dict[str, object] = {}
    if args.log_level:
        overrides["log_level"] = args.log_level
    if args.log_dir:
        overrides["log_dir"] = args.log_dir
    if args.catalog:
        overrides["catalog_path"] = args.catalog

    return replace(config, **overrides)


def run_add(root: Path, config: AppConfig, out: TextIO | None = None) -> int:
    """Crawl ``root`` and report every disc and failure.

    Returns:
        Exit code (0 once the crawl ran, even if some files failed)

    Raises:
        RootNotFoundError: If ``root`` does not exist
    """
    if out is None:
        out = sys.stdout

    store: CatalogStore | None = None
    if config.catalog_path:
        store = CatalogStore(config.catalog_path)
        store.load()

    def report_disc(found: DiscFound) -> None:
        print(f"[new disc] [{found.title_id}] {found.path}", file=out)
        if store is not None:
            store.upsert(found.record)

    def report_failure(failure: ScanFailure) -> None:
        print(f"[error] {failure.path}: {failure.message}", file=out)

    crawler = DiscCrawlerService(
        inspector=ArchiveInspector(entry_name=config.entry_name),
        extensions=config.extensions,
    )

    print(f"Crawling {root} ...", file=out)
    summary = crawler.crawl(root, on_disc=report_disc, on_failure=report_failure)

    if store is not None:
        store.save()

    print(
        f"{len(summary.discs)} disc(s) indexed, {len(summary.failures)} failure(s), "
        f"{summary.files_visited} file(s) visited",
        file=out,
    )
    return 0


def main(argv: list[str] | None = None) -> None:
    """Main entry point for the application."""
    args = parse_arguments(argv)
    config = resolve_config(args)

    _ = setup_logging(
        log_level=config.log_level,
        log_dir=config.log_dir,
        quiet=not args.verbose,
    )

    log.info(
        "Starting oplfs",
        version=__version__,
        command=args.command,
        log_level=config.log_level,
    )

    try:
        if args.command == "add" and args.path is not None:
            exit_code = run_add(args.path, config)
        else:
            print(f"Unknown command: {args.command}", file=sys.stderr)
            exit_code = 2

    except AppError as e:
        friendly = handle_error(e, operation=args.command, component="cli")
        print(f"Fatal error: {get_error_service().create_user_message(friendly)}", file=sys.stderr)
        exit_code = 1

    except KeyboardInterrupt:
        log.info("Interrupted by user")
        exit_code = 130  # Standard exit code for SIGINT

    except OSError as e:
        log.error("Unhandled exception", error=str(e), exc_info=True)
        print(f"Fatal error: {e}", file=sys.stderr)
        exit_code = 1

    except Exception as e:
        log.error("Unhandled exception", error=str(e), exc_info=True)
        friendly = handle_error(e, operation=args.command, component="cli")
        print(f"Fatal error: {friendly.message} ({friendly.technical_details})", file=sys.stderr)
        exit_code = 1

    log.info("Exiting", exit_code=exit_code)
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
