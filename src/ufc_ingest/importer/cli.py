"""Command-line interface for the extract importer."""

import argparse
import sys
from pathlib import Path

from .errors import StoreConnectionError
from .pipeline import CLEAR_STAGE, STAGE_NAMES, ImportPipeline
from .storage import DataStorage


def main(argv=None) -> int:
    """Run the importer CLI."""
    parser = argparse.ArgumentParser(description="Import UFC extracts into the data store")
    parser.add_argument(
        "command",
        choices=["run", "stats"],
        help="Command to run",
    )
    parser.add_argument(
        "--data-dir",
        type=Path,
        help="Data store directory (default: $UFC_DATA_DIR or ./data)",
    )
    parser.add_argument(
        "--extracts-dir",
        type=Path,
        help="Directory holding fighters.csv, events.csv and fightstats.csv",
    )
    parser.add_argument("--fighters", help="Path or URL of the fighters extract")
    parser.add_argument("--events", help="Path or URL of the events extract")
    parser.add_argument("--fightstats", help="Path or URL of the fight stats extract")
    parser.add_argument(
        "--stage",
        action="append",
        choices=[CLEAR_STAGE] + STAGE_NAMES,
        help="Only run this stage (repeatable)",
    )
    parser.add_argument(
        "--clear",
        action="store_true",
        help="Delete existing records before importing",
    )

    args = parser.parse_args(argv)

    try:
        storage = DataStorage(args.data_dir)
    except StoreConnectionError as e:
        print(f"Import failed: {e}", file=sys.stderr)
        return 1

    if args.command == "stats":
        for kind, count in storage.get_stats().items():
            print(f"{kind + ':':<13s} {count}")
        return 0

    sources = {
        name: getattr(args, name)
        for name in STAGE_NAMES
        if getattr(args, name)
    }
    pipeline = ImportPipeline(
        storage,
        extracts_dir=args.extracts_dir,
        sources=sources,
        clear=args.clear or CLEAR_STAGE in (args.stage or []),
    )
    result = pipeline.run(only=args.stage)

    for summary in result.stages:
        line = f"{summary.kind:<12s} imported={summary.imported_count} errors={summary.error_count}"
        if summary.failed:
            line += f" FAILED: {summary.failure}"
        print(line)

    return 0


if __name__ == "__main__":
    sys.exit(main())
