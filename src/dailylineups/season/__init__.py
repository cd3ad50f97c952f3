"""Season-level batch processing."""

from .grouping import GroupedSeason, group_player_days, normalize_date
from .presence import build_presence, compute_added
from .runner import run_season

__all__ = [
    "GroupedSeason",
    "build_presence",
    "compute_added",
    "group_player_days",
    "normalize_date",
    "run_season",
]
