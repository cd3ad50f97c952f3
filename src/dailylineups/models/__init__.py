"""Domain models."""

from .batch import BatchSummary, LineupUpdate, WeekRecord
from .player import LineupCandidate, PlayerDayRecord, parse_positions

__all__ = [
    "BatchSummary",
    "LineupCandidate",
    "LineupUpdate",
    "PlayerDayRecord",
    "WeekRecord",
    "parse_positions",
]
