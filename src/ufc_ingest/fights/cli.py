"""Command-line interface for fight reconstruction."""

import argparse
import json
import sys
from pathlib import Path

from ..importer.errors import StoreConnectionError
from ..importer.storage import DataStorage
from .reconstructor import FightReconstructor


def main(argv=None) -> int:
    """Run the fights CLI."""
    parser = argparse.ArgumentParser(description="Show the fights of an imported event")
    parser.add_argument("event_id", help="Event ID, e.g. the prefix of its fight IDs")
    parser.add_argument(
        "--data-dir",
        type=Path,
        help="Data store directory (default: $UFC_DATA_DIR or ./data)",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print matchups as JSON",
    )

    args = parser.parse_args(argv)

    try:
        storage = DataStorage(args.data_dir)
    except StoreConnectionError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    matchups = FightReconstructor(storage).reconstruct(args.event_id)

    if args.json:
        print(json.dumps([m.to_dict() for m in matchups], indent=2))
        return 0

    if not matchups:
        print(f"No fights found for event {args.event_id}")
        return 0

    for matchup in matchups:
        names = " vs ".join(matchup.fighter_names)
        partial = "" if matchup.is_complete else " (incomplete)"
        print(f"{matchup.fight_id}: {names}{partial}")
        for stats in matchup.fighters:
            print(
                f"  [{stats.fighter_position}] {stats.fighter_name:<25s} "
                f"KD {stats.knockdowns}  "
                f"Sig {stats.sig_strikes.landed}/{stats.sig_strikes.attempted}  "
                f"TD {stats.takedowns.landed}/{stats.takedowns.attempted}  "
                f"Ctrl {stats.control_time}"
            )

    return 0


if __name__ == "__main__":
    sys.exit(main())
