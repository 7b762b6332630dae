"""Import run orchestration.

A run is an ordered list of independent stages. Each stage reads one
extract, parses it and upserts its rows; any stage can be rerun on its
own because every load is idempotent.
"""

import logging
import os
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Optional, Union

from .client import ExtractClient
from .errors import StructuralError
from .loaders import EVENT_LOADER, FIGHT_STAT_LOADER, FIGHTER_LOADER, RecordLoader
from .models import ImportSummary, RunSummary
from .parsers import parse_extract
from .storage import KINDS, DataStorage

# Default extracts directory (relative to project root)
DEFAULT_EXTRACTS_DIR = Path(
    os.environ.get(
        "UFC_EXTRACTS_DIR",
        Path(__file__).parent.parent.parent.parent / "data" / "extracts",
    )
)

CLEAR_STAGE = "clear"

logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s")
logger = logging.getLogger(__name__)


@dataclass
class ImportStage:
    """One extract and the loader that persists it."""

    name: str
    filename: str
    loader: RecordLoader

    def run(
        self,
        storage: DataStorage,
        source: Union[str, Path],
        client: ExtractClient,
        now: datetime,
    ) -> ImportSummary:
        """Read, parse and load one extract.

        A StructuralError is reported in the summary rather than raised.
        """
        logger.info(f"Importing {self.name} from {source}...")
        try:
            extract = parse_extract(client.read(source))
            logger.info(f"Found {len(extract.records)} {self.name} records")
            summary = self.loader.load_extract(extract, storage, now=now)
        except StructuralError as e:
            logger.error(f"Skipping {self.name}: {e}")
            return ImportSummary(kind=self.loader.kind, failure=str(e))

        logger.info(
            f"Imported {summary.imported_count} {self.name} ({summary.error_count} errors, "
            f"{summary.malformed_count} malformed rows)"
        )
        return summary


STAGES = [
    ImportStage(name="fighters", filename="fighters.csv", loader=FIGHTER_LOADER),
    ImportStage(name="events", filename="events.csv", loader=EVENT_LOADER),
    ImportStage(name="fightstats", filename="fightstats.csv", loader=FIGHT_STAT_LOADER),
]
STAGE_NAMES = [stage.name for stage in STAGES]


def clear_storage(storage: DataStorage) -> ImportSummary:
    """Remove every stored record; imported_count holds the number removed."""
    removed = sum(storage.clear(kind) for kind in KINDS)
    logger.info(f"Cleared {removed} existing records")
    return ImportSummary(kind=CLEAR_STAGE, imported_count=removed)


class ImportPipeline:
    """Runs the import stages in order: fighters, events, fight stats."""

    def __init__(
        self,
        storage: DataStorage,
        extracts_dir: Optional[Path] = None,
        sources: Optional[dict[str, Union[str, Path]]] = None,
        client: Optional[ExtractClient] = None,
        clear: bool = False,
    ):
        """
        Initialize pipeline.

        Args:
            storage: Target store
            extracts_dir: Directory holding fighters.csv, events.csv, fightstats.csv
            sources: Per-stage overrides (stage name -> path or URL)
            client: Extract reader
            clear: Empty the store before loading
        """
        self.storage = storage
        self.extracts_dir = Path(extracts_dir or DEFAULT_EXTRACTS_DIR)
        self.sources = sources or {}
        self.client = client or ExtractClient()
        self.clear = clear

    @property
    def stages(self) -> list[str]:
        """Stage names in execution order."""
        names = list(STAGE_NAMES)
        if self.clear:
            names.insert(0, CLEAR_STAGE)
        return names

    def source_for(self, stage: ImportStage) -> Union[str, Path]:
        return self.sources.get(stage.name) or self.extracts_dir / stage.filename

    def run(self, only: Optional[list[str]] = None, now: Optional[datetime] = None) -> RunSummary:
        """
        Run the pipeline.

        Args:
            only: Restrict the run to these stage names (others are skipped)
            now: Import wall-clock time used for event status

        Returns:
            RunSummary with one ImportSummary per executed stage
        """
        unknown = set(only or []) - set(STAGE_NAMES) - {CLEAR_STAGE}
        if unknown:
            raise ValueError(f"Unknown stage(s): {', '.join(sorted(unknown))}")

        now = now or datetime.now()
        result = RunSummary()

        if self.clear and (not only or CLEAR_STAGE in only):
            result.stages.append(clear_storage(self.storage))

        for stage in STAGES:
            if only and stage.name not in only:
                continue
            summary = stage.run(self.storage, self.source_for(stage), self.client, now)
            result.stages.append(summary)

        logger.info(f"Total data: {self.storage.get_stats()}")
        return result
