"""Natural-key upsert loaders, one per record kind."""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Iterable, Optional

from .errors import StructuralError
from .models import EVENTS, FIGHT_STATS, FIGHTERS, ImportSummary, RawRecord
from .normalizers import event_from_row, fight_stat_from_row, fighter_from_row
from .parsers import ParsedExtract
from .storage import DataStorage

logger = logging.getLogger(__name__)

# Only the first few row failures per load are logged
MAX_LOGGED_ERRORS = 5


@dataclass
class RecordLoader:
    """
    Normalizes raw rows of one kind and upserts them by natural key.

    Attributes:
        kind: Record kind (storage collection)
        key_columns: Extract columns that make up the natural key
        build: RawRecord + import time -> typed record with key() and to_dict()
        progress_every: Log progress every N imported rows (0 disables)
    """

    kind: str
    key_columns: tuple[str, ...]
    build: Callable[[RawRecord, datetime], object]
    progress_every: int = 0

    def check_header(self, header: list[str]) -> None:
        """Raise StructuralError if the header lacks a natural-key column."""
        missing = [c for c in self.key_columns if c not in header]
        if missing:
            raise StructuralError(
                f"{self.kind} extract header is missing key column(s): {', '.join(missing)}"
            )

    def load(
        self,
        records: Iterable[RawRecord],
        storage: DataStorage,
        now: Optional[datetime] = None,
    ) -> ImportSummary:
        """
        Upsert every record, isolating failures to the row that caused them.

        Args:
            records: Assembled rows in source order
            storage: Target store
            now: Import wall-clock time (defaults to the current time)

        Returns:
            ImportSummary with imported and error counts
        """
        now = now or datetime.now()
        imported = 0
        errors = 0

        for index, row in enumerate(records, start=1):
            try:
                record = self.build(row, now)
                storage.upsert_by_key(self.kind, record.key(), record.to_dict())
            except Exception as e:
                errors += 1
                if errors <= MAX_LOGGED_ERRORS:
                    logger.error(f"Error importing {self.kind} row {index}: {e}")
                continue

            imported += 1
            if self.progress_every and imported % self.progress_every == 0:
                logger.info(f"Processed {imported} {self.kind}...")

        if errors > MAX_LOGGED_ERRORS:
            logger.error(f"{errors - MAX_LOGGED_ERRORS} further {self.kind} errors not shown")

        return ImportSummary(kind=self.kind, imported_count=imported, error_count=errors)

    def load_extract(
        self,
        extract: ParsedExtract,
        storage: DataStorage,
        now: Optional[datetime] = None,
    ) -> ImportSummary:
        """Load a parsed extract; malformed rows count as errors."""
        self.check_header(extract.header)
        summary = self.load(extract.records, storage, now=now)
        summary.malformed_count = extract.malformed_count
        summary.error_count += extract.malformed_count
        return summary


FIGHTER_LOADER = RecordLoader(
    kind=FIGHTERS,
    key_columns=("url",),
    build=lambda row, now: fighter_from_row(row),
    progress_every=500,
)

EVENT_LOADER = RecordLoader(
    kind=EVENTS,
    key_columns=("event_id",),
    build=event_from_row,
)

FIGHT_STAT_LOADER = RecordLoader(
    kind=FIGHT_STATS,
    key_columns=("fight_id", "fighter_name"),
    build=lambda row, now: fight_stat_from_row(row),
    progress_every=2000,
)
