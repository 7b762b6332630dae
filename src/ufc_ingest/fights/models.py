"""Data models for reconstructed fights."""

from dataclasses import dataclass, field

from ..importer.models import FightStatRecord


@dataclass
class FightMatchup:
    """
    All stat rows sharing one fight ID, ordered by fighter position.

    Built on read and never persisted. A matchup with a single fighter may
    simply be missing its opponent's row (not yet imported).
    """

    fight_id: str
    fighters: list[FightStatRecord] = field(default_factory=list)

    @property
    def fighter_names(self) -> list[str]:
        return [f.fighter_name for f in self.fighters]

    @property
    def is_complete(self) -> bool:
        return len(self.fighters) >= 2

    def to_dict(self) -> dict:
        return {
            "fight_id": self.fight_id,
            "fighters": [f.to_dict() for f in self.fighters],
        }
