"""Field normalizers and typed record builders.

Every ``parse_*`` function is total: sentinel strings ("--", "---"), empty
values and garbage map to a fixed default instead of raising.
"""

import math
import re
from datetime import date, datetime, time
from typing import Optional

from .models import (
    EventRecord,
    EventStatus,
    FighterRecord,
    FightStatRecord,
    RawRecord,
    StrikeStat,
)

# Leading numeric prefix, e.g. '72"' -> 72, '52%' -> 52
_NUMBER_RE = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")
_INT_RE = re.compile(r"[+-]?\d+")

_DATE_FORMATS = (
    "%B %d, %Y",  # January 18, 2025
    "%b %d, %Y",  # Jan 18, 2025
    "%m/%d/%Y",
    "%Y/%m/%d",
    "%d %B %Y",
)

STRIKE_SEPARATOR = " of "


def parse_number(value: Optional[str]) -> float:
    """Parse a number; empty, '--' or unparsable values become 0."""
    if not value or value == "--":
        return 0.0
    match = _NUMBER_RE.match(value.strip())
    if not match:
        return 0.0
    number = float(match.group(0))
    return number if math.isfinite(number) else 0.0


def parse_int(value: Optional[str]) -> int:
    """Parse an integer count; same defaults as parse_number."""
    return int(parse_number(value))


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parse a date or date-time; empty, '--' or unparsable values become None."""
    if not value or value == "--":
        return None
    value = value.strip()
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        pass
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(value, fmt)
        except ValueError:
            continue
    return None


def parse_date(value: Optional[str]) -> Optional[date]:
    """Parse a calendar date; empty, '--' or unparsable values become None."""
    parsed = parse_timestamp(value)
    return parsed.date() if parsed else None


def parse_percent(value: Optional[str]) -> float:
    """Parse a percentage like '52%' to 52.0; empty, '---' or unparsable become 0."""
    if not value or value == "---":
        return 0.0
    value = value.strip()
    if value.endswith("%"):
        value = value[:-1]
    return parse_number(value)


def _leading_int(value: str) -> int:
    match = _INT_RE.match(value.strip())
    return int(match.group(0)) if match else 0


def parse_strike_stat(value: Optional[str]) -> StrikeStat:
    """Parse '<landed> of <attempted>'; anything else becomes 0 of 0."""
    if not value or value == "---":
        return StrikeStat()
    parts = value.split(STRIKE_SEPARATOR)
    if len(parts) != 2:
        return StrikeStat()
    return StrikeStat(landed=_leading_int(parts[0]), attempted=_leading_int(parts[1]))


def classify_event_status(event_date: Optional[date], now: datetime) -> EventStatus:
    """Upcoming only when the event's date is strictly after ``now``."""
    if event_date is None:
        return EventStatus.COMPLETED
    starts_at = datetime.combine(event_date, time.min)
    if now.tzinfo is not None:
        now = now.replace(tzinfo=None)
    return EventStatus.UPCOMING if starts_at > now else EventStatus.COMPLETED


def _required(row: RawRecord, column: str) -> str:
    value = (row.get(column) or "").strip()
    if not value:
        raise ValueError(f"Missing required field '{column}'")
    return value


# -----------------------------------------------------------------------------
# Record builders
# -----------------------------------------------------------------------------


def fighter_from_row(row: RawRecord) -> FighterRecord:
    """Build a FighterRecord from a fighters extract row."""
    reach = row.get("reach", "")
    return FighterRecord(
        url=_required(row, "url"),
        name=row.get("name", ""),
        nickname=row.get("nickname", ""),
        wins=parse_int(row.get("wins")),
        losses=parse_int(row.get("losses")),
        draws=parse_int(row.get("draws")),
        height=row.get("height", ""),
        weight=row.get("weight", ""),
        reach=parse_number(reach) if _NUMBER_RE.match((reach or "").strip()) else None,
        stance=row.get("stance", ""),
        dob=parse_date(row.get("dob")),
        slpm=parse_number(row.get("slpm")),
        striking_accuracy=parse_number(row.get("striking_accuracy")),
        sapm=parse_number(row.get("sapm")),
        striking_defense=parse_number(row.get("striking_defense")),
        takedown_avg=parse_number(row.get("takedown_avg")),
        takedown_accuracy=parse_number(row.get("takedown_accuracy")),
        takedown_defense=parse_number(row.get("takedown_defense")),
        submission_avg=parse_number(row.get("submission_avg")),
        scraped_date=parse_timestamp(row.get("scraped_date")),
    )


def event_from_row(row: RawRecord, now: datetime) -> EventRecord:
    """Build an EventRecord, classifying its status against ``now``."""
    event_date = parse_date(row.get("date"))
    return EventRecord(
        event_id=_required(row, "event_id"),
        url=row.get("url", ""),
        name=row.get("event_name", ""),
        event_date=event_date,
        location=row.get("location", ""),
        status=classify_event_status(event_date, now),
    )


def fight_stat_from_row(row: RawRecord) -> FightStatRecord:
    """Build a FightStatRecord from a fightstats extract row."""
    return FightStatRecord(
        fight_id=_required(row, "fight_id"),
        fighter_name=_required(row, "fighter_name"),
        fighter_position=parse_int(row.get("fighter_position")),
        knockdowns=parse_int(row.get("knockdowns")),
        sig_strikes=parse_strike_stat(row.get("sig_strikes")),
        sig_strikes_pct=parse_percent(row.get("sig_strikes_pct")),
        total_strikes=parse_strike_stat(row.get("total_strikes")),
        takedowns=parse_strike_stat(row.get("takedowns")),
        takedown_pct=parse_percent(row.get("takedown_pct")),
        submission_attempts=parse_int(row.get("submission_attempts")),
        reversals=parse_int(row.get("reversals")),
        control_time=row.get("control_time") or "0:00",
        sig_strikes_head=parse_strike_stat(row.get("sig_strikes_head")),
        sig_strikes_body=parse_strike_stat(row.get("sig_strikes_body")),
        sig_strikes_leg=parse_strike_stat(row.get("sig_strikes_leg")),
        sig_strikes_distance=parse_strike_stat(row.get("sig_strikes_distance")),
        sig_strikes_clinch=parse_strike_stat(row.get("sig_strikes_clinch")),
        sig_strikes_ground=parse_strike_stat(row.get("sig_strikes_ground")),
    )
