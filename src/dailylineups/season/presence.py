"""Season-wide presence lookup behind the ``added`` flag."""

from __future__ import annotations

from datetime import date, timedelta
from typing import FrozenSet, Iterable, Optional, Tuple

from dailylineups.models import PlayerDayRecord
from dailylineups.season.grouping import normalize_date

PresenceKey = Tuple[str, str, str]


def build_presence(records: Iterable[PlayerDayRecord]) -> FrozenSet[PresenceKey]:
    """Collect (player, team, day) for every row of the season that has all three."""

    presence = set()
    for record in records:
        day = normalize_date(record.date)
        if day and record.player_id and record.team_id:
            presence.add((record.player_id, record.team_id, day))
    return frozenset(presence)


def previous_day(day: Optional[str]) -> Optional[str]:
    if not day:
        return None
    try:
        return (date.fromisoformat(day) - timedelta(days=1)).isoformat()
    except ValueError:
        return None


def compute_added(record: PlayerDayRecord, presence: FrozenSet[PresenceKey]) -> Optional[bool]:
    """True when the player was not on this team the day before; otherwise None.

    None also covers rows whose previous day, player or team cannot be
    determined.
    """

    if not record.player_id or not record.team_id:
        return None
    prior = previous_day(normalize_date(record.date))
    if prior is None:
        return None
    if (record.player_id, record.team_id, prior) in presence:
        return None
    return True
