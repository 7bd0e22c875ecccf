from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from flatport.app import import_csv
from flatport.common import configure_logging, level_for_verbosity
from flatport.config import ConfigurationError
from flatport.domain.flatfile import PRESETS, ReconciliationMode, UpdateOptions

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

log = logging.getLogger(__name__)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Import archival records from a CSV file")
    parser.add_argument("path", type=Path, help="CSV file to import")
    parser.add_argument(
        "--entity",
        choices=sorted(PRESETS),
        default="description",
        help="Kind of record each row describes (default: %(default)s)",
    )
    parser.add_argument(
        "--update",
        type=str,
        help=(
            "Update matching records instead of creating duplicates: "
            f'"{ReconciliationMode.MATCH_AND_UPDATE}" or "{ReconciliationMode.DELETE_AND_REPLACE}"'
        ),
    )
    parser.add_argument(
        "--skip-matched",
        action="store_true",
        help="Skip rows that match an existing record",
    )
    parser.add_argument(
        "--skip-unmatched",
        action="store_true",
        help="Skip rows that match no existing record (requires --update)",
    )
    parser.add_argument(
        "--roundtrip",
        action="store_true",
        help="Treat legacyId as the internal id of a previously exported record",
    )
    parser.add_argument(
        "--keep-existing-children",
        action="store_true",
        help="Keep events of matched records (requires --update=match-and-update)",
    )
    parser.add_argument(
        "--limit",
        type=str,
        help="Slug of a repository or top-level description matches must belong to",
    )
    parser.add_argument(
        "--source-name",
        type=str,
        help="Source name recorded with legacy ids (defaults to config)",
    )
    parser.add_argument(
        "--skip-rows",
        type=int,
        default=0,
        help="Number of leading data rows to skip",
    )
    parser.add_argument(
        "--rename",
        action="append",
        default=[],
        metavar="OLD=NEW",
        help="Rename a header column before import; may be repeated",
    )
    parser.add_argument(
        "--column",
        action="append",
        default=[],
        metavar="NAME",
        help="Add an empty virtual column; may be repeated",
    )
    parser.add_argument(
        "--error-log",
        type=Path,
        help="File row-level errors are appended to (defaults to config)",
    )
    parser.add_argument(
        "--index",
        action="store_true",
        help="Update the search index while importing",
    )
    parser.add_argument("-v", "--verbose", action="count", default=0, help="Debug output")
    parser.add_argument("-q", "--quiet", action="store_true", help="Only log warnings")
    return parser.parse_args(list(argv))


def _parse_renames(values: Sequence[str]) -> dict[str, str]:
    renames: dict[str, str] = {}
    for value in values:
        old, separator, new = value.partition("=")
        if not separator or not old.strip() or not new.strip():
            raise ValueError(f"Invalid --rename value (expected OLD=NEW): {value}")
        renames[old.strip()] = new.strip()
    return renames


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args = _parse_args(args_list)
    configure_logging(level=level_for_verbosity(parsed_args.verbose, quiet=parsed_args.quiet))

    try:
        renames = _parse_renames(parsed_args.rename)
        if parsed_args.skip_rows < 0:
            raise ValueError("--skip-rows must be non-negative")  # noqa: TRY301
        options = UpdateOptions.from_flags(
            update=parsed_args.update,
            skip_matched=parsed_args.skip_matched,
            skip_unmatched=parsed_args.skip_unmatched,
            roundtrip=parsed_args.roundtrip,
            keep_existing_children=parsed_args.keep_existing_children,
        )
        options.validate(limit=parsed_args.limit)
    except (ValueError, ConfigurationError):
        log.exception("CLI validation error")
        sys.exit(2)

    try:
        status = import_csv(
            parsed_args.path,
            entity=parsed_args.entity,
            options=options,
            limit=parsed_args.limit,
            source_name=parsed_args.source_name,
            renames=renames,
            extra_columns=parsed_args.column,
            skip_rows=parsed_args.skip_rows,
            error_log=parsed_args.error_log,
            index=parsed_args.index,
        )
    except Exception:
        log.exception("Fatal error during import")
        sys.exit(1)

    log.info(
        "Imported %d rows: created=%d, updated=%d, duplicates=%d, errors=%d",
        status.rows,
        status.created,
        status.updated,
        status.duplicates,
        status.errors,
    )


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    """Console script entry point."""
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
