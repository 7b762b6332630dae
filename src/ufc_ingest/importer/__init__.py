"""Extract import pipeline."""

from .loaders import EVENT_LOADER, FIGHT_STAT_LOADER, FIGHTER_LOADER, RecordLoader
from .models import (
    EventRecord,
    EventStatus,
    FighterRecord,
    FightStatRecord,
    ImportSummary,
    RunSummary,
    StrikeStat,
)
from .pipeline import ImportPipeline
from .storage import DataStorage, TextMatch

__all__ = [
    "EventRecord",
    "EventStatus",
    "FighterRecord",
    "FightStatRecord",
    "ImportSummary",
    "RunSummary",
    "StrikeStat",
    "RecordLoader",
    "FIGHTER_LOADER",
    "EVENT_LOADER",
    "FIGHT_STAT_LOADER",
    "ImportPipeline",
    "DataStorage",
    "TextMatch",
]
