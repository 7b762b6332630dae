"""Regroup per-fighter stat rows into fight matchups."""

from itertools import groupby

from ..importer.models import FIGHT_STATS, FightStatRecord
from ..importer.storage import DataStorage, TextMatch
from .models import FightMatchup


class FightReconstructor:
    """Builds matchups for an event from stored fight stats."""

    def __init__(self, storage: DataStorage):
        self.storage = storage

    def reconstruct(self, event_id: str) -> list[FightMatchup]:
        """
        Build the matchups of one event.

        Fight IDs follow the pattern ``<event_id>_<n>``, so stats are found
        by a case-insensitive prefix match on ``event_id + "_"``.

        Args:
            event_id: Event identifier

        Returns:
            Matchups ordered by fight ID, fighters ordered by position
        """
        if not event_id:
            return []

        docs = self.storage.find_by_filter(
            FIGHT_STATS,
            {"fight_id": TextMatch(f"{event_id}_")},
            sort=[("fight_id", 1), ("fighter_position", 1), ("fighter_name", 1)],
        )
        stats = [FightStatRecord.from_dict(doc) for doc in docs]

        return [
            FightMatchup(fight_id=fight_id, fighters=list(rows))
            for fight_id, rows in groupby(stats, key=lambda s: s.fight_id)
        ]


def reconstruct(storage: DataStorage, event_id: str) -> list[FightMatchup]:
    """Shortcut for FightReconstructor(storage).reconstruct(event_id)."""
    return FightReconstructor(storage).reconstruct(event_id)
