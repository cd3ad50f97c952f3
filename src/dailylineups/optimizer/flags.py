"""Missed-start and bad-start flags derived from the two lineup views."""

from __future__ import annotations

from dataclasses import dataclass

from dailylineups.config.roster import BENCH, INACTIVE_SLOTS
from dailylineups.models import LineupCandidate


@dataclass(frozen=True)
class StartFlags:
    missed_start: bool
    bad_start: bool


def is_active_slot(label: str | None) -> bool:
    return bool(label) and label not in INACTIVE_SLOTS


def compute_start_flags(candidate: LineupCandidate, full_pos: str, best_pos: str) -> StartFlags:
    """Compare both views against what actually happened.

    Missed start: played without starting yet holds a full-lineup slot.
    Bad start: started yet the rating-optimal lineup benches them.
    """

    missed = candidate.played and not candidate.started and is_active_slot(full_pos)
    bad = candidate.started and best_pos == BENCH
    return StartFlags(missed_start=missed, bad_start=bad)
