from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from sakesync.app import PreflightReport, check_environment, sync_sake_catalog
from sakesync.common.logging import configure_logging
from sakesync.config.errors import ConfigurationError

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

log = logging.getLogger(__name__)

INTERRUPTED_EXIT_CODE = 130


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Synchronise the Sakenowa sake catalog")
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log at DEBUG level",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    sync = subparsers.add_parser("sync", help="Fetch the catalog and apply a new generation")
    sync.add_argument(
        "--dry-run",
        action="store_true",
        default=None,
        help="Detect and log changes without writing to the store (or set DRY_RUN)",
    )
    sync.add_argument(
        "--report-dir",
        type=Path,
        help="Directory for run and error reports (defaults to SAKESYNC_REPORT_DIR)",
    )

    subparsers.add_parser("check", help="Check the store and the catalog source")

    return parser.parse_args(list(argv))


def _log_preflight(report: PreflightReport) -> None:
    if report.missing_tables:
        log.warning("Missing store tables: %s", ", ".join(report.missing_tables))
    else:
        log.info("Store tables present")
    if report.active_records is not None:
        log.info("Active master records: %s", report.active_records)
    if report.latest_generation is not None:
        latest = report.latest_generation
        log.info(
            "Latest generation #%s: %s (started %s)",
            latest.generation_id,
            latest.status,
            latest.started_at.isoformat(),
        )
    else:
        log.info("No generation recorded yet")
    if report.source_sizes is not None:
        sizes = ", ".join(f"{name}={count}" for name, count in report.source_sizes.items())
        log.info("Catalog source reachable: %s", sizes)
    else:
        log.error("Catalog source unreachable: %s", report.source_error)


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    load_dotenv()
    signal(SIGINT, sigint_handler)
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args = _parse_args(args_list)
    configure_logging(level=logging.DEBUG if parsed_args.verbose else logging.INFO)

    try:
        if parsed_args.command == "sync":
            sync_sake_catalog(dry_run=parsed_args.dry_run, report_dir=parsed_args.report_dir)
        elif parsed_args.command == "check":
            report = check_environment()
            _log_preflight(report)
            if not report.ok:
                sys.exit(1)
        else:
            raise ValueError(f"Unsupported command: {parsed_args.command}")  # noqa: TRY301

    except ConfigurationError:
        log.exception("Invalid configuration")
        sys.exit(2)
    except Exception:
        log.exception("Fatal error during sync")
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C); a run in flight is marked failed as the exit unwinds."""
    log.warning("Interrupted by user (Ctrl+C)")
    sys.exit(INTERRUPTED_EXIT_CODE)


if __name__ == "__main__":
    main()
