"""Data storage utilities for JSON flat files.

Each record is one JSON document on disk, addressed by its natural key.
Writes go through a temporary file and ``os.replace`` so a document is
either fully old or fully new, never half-written.
"""

import hashlib
import json
import os
import shutil
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Optional
from urllib.parse import quote, unquote

from .errors import PersistenceError, StoreConnectionError
from .models import EVENTS, FIGHT_STATS, FIGHTERS

# Default data directory (relative to project root)
DEFAULT_DATA_DIR = Path(
    os.environ.get("UFC_DATA_DIR", Path(__file__).parent.parent.parent.parent / "data")
)

KINDS = (FIGHTERS, EVENTS, FIGHT_STATS)

# Kinds stored in one sub-directory per value of this field, so prefix
# queries on it only touch matching directories.
PARTITIONS = {FIGHT_STATS: "fight_id"}


@dataclass(frozen=True)
class TextMatch:
    """Prefix or substring filter on a text field."""

    value: str
    mode: str = "prefix"  # "prefix" or "contains"
    ignore_case: bool = True

    def matches(self, candidate) -> bool:
        if not isinstance(candidate, str):
            return False
        needle, haystack = self.value, candidate
        if self.ignore_case:
            needle, haystack = needle.casefold(), haystack.casefold()
        if self.mode == "prefix":
            return haystack.startswith(needle)
        return needle in haystack


def _matches(doc: dict, filters: dict) -> bool:
    for name, expected in filters.items():
        value = doc.get(name)
        if isinstance(expected, TextMatch):
            if not expected.matches(value):
                return False
        elif value != expected:
            return False
    return True


def _sort_key(doc: dict, name: str):
    # None sorts before any value
    value = doc.get(name)
    return (value is not None, value if value is not None else 0)


def _document_name(key: dict) -> str:
    """Stable filename for a natural key."""
    encoded = json.dumps(key, sort_keys=True, ensure_ascii=False)
    return hashlib.sha1(encoded.encode("utf-8")).hexdigest() + ".json"


def _partition_name(value) -> str:
    """Directory name for a partition value; dots are escaped so '.' and '..' stay inside."""
    return quote(str(value), safe="").replace(".", "%2E")


class DataStorage:
    """Handles reading/writing imported records to JSON files."""

    def __init__(self, data_dir: Optional[Path] = None):
        """
        Initialize storage with data directory.

        Raises:
            StoreConnectionError: if the directory cannot be created or written
        """
        self.data_dir = Path(data_dir or DEFAULT_DATA_DIR)
        self.kind_dirs = {kind: self.data_dir / kind for kind in KINDS}

        try:
            for dir_path in self.kind_dirs.values():
                dir_path.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StoreConnectionError(f"Cannot open data directory {self.data_dir}: {e}") from e

        if not os.access(self.data_dir, os.W_OK):
            raise StoreConnectionError(f"Data directory {self.data_dir} is not writable")

    def _kind_dir(self, kind: str) -> Path:
        if kind not in self.kind_dirs:
            raise ValueError(f"Unknown record kind: {kind}")
        return self.kind_dirs[kind]

    def _document_path(self, kind: str, key: dict) -> Path:
        kind_dir = self._kind_dir(kind)
        partition = PARTITIONS.get(kind)
        if partition:
            kind_dir = kind_dir / _partition_name(key[partition])
        return kind_dir / _document_name(key)

    def _documents(self, kind: str, filters: dict) -> Iterator[Path]:
        """Candidate document paths, narrowed by partition where possible."""
        kind_dir = self._kind_dir(kind)
        partition = PARTITIONS.get(kind)
        if not partition:
            yield from kind_dir.glob("*.json")
            return

        wanted = filters.get(partition)
        for part_dir in kind_dir.iterdir():
            if not part_dir.is_dir():
                continue
            value = unquote(part_dir.name)
            if isinstance(wanted, TextMatch) and not wanted.matches(value):
                continue
            if isinstance(wanted, str) and value != wanted:
                continue
            yield from part_dir.glob("*.json")

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    def upsert_by_key(self, kind: str, key: dict, fields: dict) -> Path:
        """
        Create or fully replace the document identified by ``key``.

        Fields not present in ``fields`` are not carried over from an
        existing document.

        Raises:
            PersistenceError: if the document cannot be written
        """
        if not key or any(v in (None, "") for v in key.values()):
            raise PersistenceError(f"Empty natural key for {kind}: {key}")

        filepath = self._document_path(kind, key)
        document = {**fields, **key}

        try:
            filepath.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(dir=filepath.parent, suffix=".tmp")
            try:
                with os.fdopen(fd, "w") as f:
                    json.dump(document, f, indent=2, ensure_ascii=False)
                os.replace(tmp_path, filepath)
            except BaseException:
                os.unlink(tmp_path)
                raise
        except (OSError, TypeError, ValueError) as e:
            raise PersistenceError(f"Failed to write {kind} {key}: {e}") from e

        return filepath

    def clear(self, kind: str) -> int:
        """Delete every document of a kind. Returns the number removed."""
        kind_dir = self._kind_dir(kind)
        removed = 0
        for path in list(kind_dir.iterdir()):
            if path.is_dir():
                removed += len(list(path.glob("*.json")))
                shutil.rmtree(path)
            elif path.suffix == ".json":
                removed += 1
                path.unlink()
        return removed

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def get(self, kind: str, key: dict) -> Optional[dict]:
        """Load one document by natural key."""
        filepath = self._document_path(kind, key)
        if not filepath.exists():
            return None
        with open(filepath) as f:
            return json.load(f)

    def exists(self, kind: str, key: dict) -> bool:
        """Check if a document exists."""
        return self._document_path(kind, key).exists()

    def find_by_filter(
        self,
        kind: str,
        filters: Optional[dict] = None,
        sort: Optional[list[tuple[str, int]]] = None,
        limit: Optional[int] = None,
    ) -> list[dict]:
        """
        Find documents matching all filters.

        Args:
            kind: Record kind
            filters: Field name -> exact value or TextMatch
            sort: List of (field, direction) pairs, direction 1 or -1
            limit: Maximum number of documents returned

        Returns:
            List of matching documents
        """
        filters = filters or {}
        docs = []
        for filepath in self._documents(kind, filters):
            with open(filepath) as f:
                doc = json.load(f)
            if _matches(doc, filters):
                docs.append(doc)

        # Stable sorts, applied from least to most significant field
        for name, direction in reversed(sort or []):
            docs.sort(key=lambda d: _sort_key(d, name), reverse=direction < 0)

        if limit is not None:
            docs = docs[:limit]
        return docs

    def count(self, kind: str) -> int:
        """Number of documents of a kind."""
        kind_dir = self._kind_dir(kind)
        if kind in PARTITIONS:
            return len(list(kind_dir.glob("*/*.json")))
        return len(list(kind_dir.glob("*.json")))

    # -------------------------------------------------------------------------
    # Utilities
    # -------------------------------------------------------------------------

    def get_stats(self) -> dict:
        """Get counts of stored data."""
        return {kind: self.count(kind) for kind in KINDS}
