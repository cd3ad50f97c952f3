"""Input adapters that normalize raw player-day data."""

from .player_days import (
    DEFAULT_PLAYER_DAY_MAPPING,
    PlayerDayRow,
    load_player_day_csv,
    load_player_days_from_csv,
    load_roster_csv,
    records_to_candidates,
    rows_to_records,
)
from .weeks import DEFAULT_WEEK_MAPPING, load_weeks_csv

__all__ = [
    "DEFAULT_PLAYER_DAY_MAPPING",
    "DEFAULT_WEEK_MAPPING",
    "PlayerDayRow",
    "load_player_day_csv",
    "load_player_days_from_csv",
    "load_roster_csv",
    "load_weeks_csv",
    "records_to_candidates",
    "rows_to_records",
]
