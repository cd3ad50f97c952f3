"""Group per-player-per-day rows into (date, team) lineups."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
import logging
import re
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from dailylineups.models import PlayerDayRecord


logger = logging.getLogger(__name__)

GroupKey = Tuple[str, str]

_ISO_DAY = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_FALLBACK_FORMATS = ("%m/%d/%Y", "%Y/%m/%d", "%d-%b-%Y")


def normalize_date(value: Any) -> Optional[str]:
    """Return ``YYYY-MM-DD`` for a date-like value, or None when it cannot be read.

    Timezone-aware timestamps are converted to UTC before the day is taken.
    """

    if value is None:
        return None
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()

    text = str(value).strip()
    if not text:
        return None
    if _ISO_DAY.match(text):
        try:
            return date.fromisoformat(text).isoformat()
        except ValueError:
            return None
    try:
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        parsed = None
    if parsed is not None:
        return normalize_date(parsed)
    for fmt in _FALLBACK_FORMATS:
        try:
            return datetime.strptime(text, fmt).date().isoformat()
        except ValueError:
            continue
    return None


def group_label(key: GroupKey) -> str:
    return f"{key[0]}|{key[1]}"


@dataclass
class GroupedSeason:
    groups: Dict[GroupKey, List[PlayerDayRecord]] = field(default_factory=dict)
    skipped: List[PlayerDayRecord] = field(default_factory=list)

    @property
    def skipped_count(self) -> int:
        return len(self.skipped)

    def sizes(self) -> List[int]:
        return [len(rows) for rows in self.groups.values()]


def skip_reason(record: PlayerDayRecord) -> Optional[str]:
    if normalize_date(record.date) is None:
        return "date"
    if not record.team_id:
        return "team"
    if not record.player_id:
        return "player"
    if not record.row_id:
        return "row id"
    return None


def in_weeks(record: PlayerDayRecord, week_ids: Optional[Sequence[str]]) -> bool:
    if not week_ids:
        return True
    return record.week_id is not None and record.week_id in week_ids


def group_player_days(
    records: Iterable[PlayerDayRecord],
    *,
    week_ids: Optional[Sequence[str]] = None,
) -> GroupedSeason:
    """Bucket rows by (normalized date, team), keeping first-seen row order.

    Rows outside ``week_ids`` are ignored. Rows without a readable date, a team,
    a player or a row id are collected in ``skipped``.
    """

    wanted = [str(week) for week in week_ids] if week_ids else None
    grouped = GroupedSeason()
    reasons: Dict[str, int] = {}
    for record in records:
        if not in_weeks(record, wanted):
            continue
        reason = skip_reason(record)
        if reason is not None:
            grouped.skipped.append(record)
            reasons[reason] = reasons.get(reason, 0) + 1
            continue
        key = (normalize_date(record.date), record.team_id)
        grouped.groups.setdefault(key, []).append(record)

    if grouped.skipped:
        logger.warning(
            "Skipped %s player-day rows missing grouping keys: %s",
            grouped.skipped_count,
            ", ".join(f"{reason}={count}" for reason, count in sorted(reasons.items())),
        )
    return grouped
