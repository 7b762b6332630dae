"""Data models for imported UFC records."""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Optional

# Header-keyed raw values straight from an extract row
RawRecord = dict[str, str]

# Record kinds, also used as storage directory names
FIGHTERS = "fighters"
EVENTS = "events"
FIGHT_STATS = "fight_stats"


def _iso(value) -> Optional[str]:
    return value.isoformat() if value is not None else None


class EventStatus(Enum):
    """Event status, classified once at import time."""

    UPCOMING = "upcoming"
    COMPLETED = "completed"


@dataclass
class StrikeStat:
    """Landed/attempted pair such as '12 of 34'."""

    landed: int = 0
    attempted: int = 0

    def to_dict(self) -> dict:
        return {"landed": self.landed, "attempted": self.attempted}

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "StrikeStat":
        if not data:
            return cls()
        return cls(landed=data.get("landed", 0), attempted=data.get("attempted", 0))


@dataclass
class FighterRecord:
    """Fighter biography, record and career rates."""

    url: str
    name: str = ""
    nickname: str = ""
    wins: int = 0
    losses: int = 0
    draws: int = 0
    height: str = ""
    weight: str = ""
    reach: Optional[float] = None
    stance: str = ""
    dob: Optional[date] = None
    slpm: float = 0.0  # Significant strikes landed per minute
    striking_accuracy: float = 0.0  # %
    sapm: float = 0.0  # Significant strikes absorbed per minute
    striking_defense: float = 0.0  # %
    takedown_avg: float = 0.0  # Takedowns per 15 min
    takedown_accuracy: float = 0.0  # %
    takedown_defense: float = 0.0  # %
    submission_avg: float = 0.0  # Submissions per 15 min
    scraped_date: Optional[datetime] = None

    def key(self) -> dict:
        return {"url": self.url}

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON storage."""
        return {
            "url": self.url,
            "name": self.name,
            "nickname": self.nickname,
            "wins": self.wins,
            "losses": self.losses,
            "draws": self.draws,
            "height": self.height,
            "weight": self.weight,
            "reach": self.reach,
            "stance": self.stance,
            "dob": _iso(self.dob),
            "slpm": self.slpm,
            "striking_accuracy": self.striking_accuracy,
            "sapm": self.sapm,
            "striking_defense": self.striking_defense,
            "takedown_avg": self.takedown_avg,
            "takedown_accuracy": self.takedown_accuracy,
            "takedown_defense": self.takedown_defense,
            "submission_avg": self.submission_avg,
            "scraped_date": _iso(self.scraped_date),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "FighterRecord":
        """Create from dictionary."""
        dob = data.get("dob")
        scraped = data.get("scraped_date")
        return cls(
            url=data["url"],
            name=data.get("name", ""),
            nickname=data.get("nickname", ""),
            wins=data.get("wins", 0),
            losses=data.get("losses", 0),
            draws=data.get("draws", 0),
            height=data.get("height", ""),
            weight=data.get("weight", ""),
            reach=data.get("reach"),
            stance=data.get("stance", ""),
            dob=date.fromisoformat(dob) if dob else None,
            slpm=data.get("slpm", 0.0),
            striking_accuracy=data.get("striking_accuracy", 0.0),
            sapm=data.get("sapm", 0.0),
            striking_defense=data.get("striking_defense", 0.0),
            takedown_avg=data.get("takedown_avg", 0.0),
            takedown_accuracy=data.get("takedown_accuracy", 0.0),
            takedown_defense=data.get("takedown_defense", 0.0),
            submission_avg=data.get("submission_avg", 0.0),
            scraped_date=datetime.fromisoformat(scraped) if scraped else None,
        )


@dataclass
class EventRecord:
    """A UFC event."""

    event_id: str
    url: str = ""
    name: str = ""
    event_date: Optional[date] = None
    location: str = ""
    status: EventStatus = EventStatus.COMPLETED

    def key(self) -> dict:
        return {"event_id": self.event_id}

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON storage."""
        return {
            "event_id": self.event_id,
            "url": self.url,
            "name": self.name,
            "event_date": _iso(self.event_date),
            "location": self.location,
            "status": self.status.value,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "EventRecord":
        """Create from dictionary."""
        event_date = data.get("event_date")
        return cls(
            event_id=data["event_id"],
            url=data.get("url", ""),
            name=data.get("name", ""),
            event_date=date.fromisoformat(event_date) if event_date else None,
            location=data.get("location", ""),
            status=EventStatus(data.get("status", EventStatus.COMPLETED.value)),
        )


# Strike pairs carried by every fight stat row, in extract column order
STRIKE_FIELDS = (
    "sig_strikes",
    "total_strikes",
    "takedowns",
    "sig_strikes_head",
    "sig_strikes_body",
    "sig_strikes_leg",
    "sig_strikes_distance",
    "sig_strikes_clinch",
    "sig_strikes_ground",
)


@dataclass
class FightStatRecord:
    """One fighter's statistics for one fight.

    ``fighter_name`` is a plain string reference; it is not required to match
    any stored FighterRecord.
    """

    fight_id: str
    fighter_name: str
    fighter_position: int = 0
    knockdowns: int = 0
    sig_strikes: StrikeStat = field(default_factory=StrikeStat)
    sig_strikes_pct: float = 0.0
    total_strikes: StrikeStat = field(default_factory=StrikeStat)
    takedowns: StrikeStat = field(default_factory=StrikeStat)
    takedown_pct: float = 0.0
    submission_attempts: int = 0
    reversals: int = 0
    control_time: str = "0:00"
    sig_strikes_head: StrikeStat = field(default_factory=StrikeStat)
    sig_strikes_body: StrikeStat = field(default_factory=StrikeStat)
    sig_strikes_leg: StrikeStat = field(default_factory=StrikeStat)
    sig_strikes_distance: StrikeStat = field(default_factory=StrikeStat)
    sig_strikes_clinch: StrikeStat = field(default_factory=StrikeStat)
    sig_strikes_ground: StrikeStat = field(default_factory=StrikeStat)

    def key(self) -> dict:
        return {"fight_id": self.fight_id, "fighter_name": self.fighter_name}

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON storage."""
        data = {
            "fight_id": self.fight_id,
            "fighter_name": self.fighter_name,
            "fighter_position": self.fighter_position,
            "knockdowns": self.knockdowns,
            "sig_strikes_pct": self.sig_strikes_pct,
            "takedown_pct": self.takedown_pct,
            "submission_attempts": self.submission_attempts,
            "reversals": self.reversals,
            "control_time": self.control_time,
        }
        for name in STRIKE_FIELDS:
            data[name] = getattr(self, name).to_dict()
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "FightStatRecord":
        """Create from dictionary."""
        strikes = {name: StrikeStat.from_dict(data.get(name)) for name in STRIKE_FIELDS}
        return cls(
            fight_id=data["fight_id"],
            fighter_name=data["fighter_name"],
            fighter_position=data.get("fighter_position", 0),
            knockdowns=data.get("knockdowns", 0),
            sig_strikes_pct=data.get("sig_strikes_pct", 0.0),
            takedown_pct=data.get("takedown_pct", 0.0),
            submission_attempts=data.get("submission_attempts", 0),
            reversals=data.get("reversals", 0),
            control_time=data.get("control_time", "0:00"),
            **strikes,
        )


@dataclass
class ImportSummary:
    """Outcome of one import stage."""

    kind: str
    imported_count: int = 0
    error_count: int = 0  # Includes malformed rows
    malformed_count: int = 0
    failure: Optional[str] = None  # Set when the extract itself could not be read

    @property
    def failed(self) -> bool:
        return self.failure is not None

    def to_dict(self) -> dict:
        return {
            "kind": self.kind,
            "imported_count": self.imported_count,
            "error_count": self.error_count,
            "malformed_count": self.malformed_count,
            "failure": self.failure,
        }


@dataclass
class RunSummary:
    """Summaries of every stage in one import run, in execution order."""

    stages: list[ImportSummary] = field(default_factory=list)

    def get(self, kind: str) -> Optional[ImportSummary]:
        for summary in self.stages:
            if summary.kind == kind:
                return summary
        return None

    @property
    def imported_count(self) -> int:
        return sum(s.imported_count for s in self.stages)

    @property
    def error_count(self) -> int:
        return sum(s.error_count for s in self.stages)
