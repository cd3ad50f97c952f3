"""Scored candidate pools shared by the assigners."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Tuple

from dailylineups.models import LineupCandidate


# (priority tier, rating); compared lexicographically so a higher tier always
# outranks any rating from a lower one.
Score = Tuple[int, float]

ZERO_SCORE: Score = (0, 0.0)
RATING_EPSILON = 0.01


@dataclass(frozen=True)
class PoolEntry:
    candidate: LineupCandidate
    score: Score
    source_index: int

    @property
    def player_id(self) -> str:
        return self.candidate.player_id

    @property
    def positions(self) -> Tuple[str, ...]:
        return tuple(self.candidate.positions)


def add_scores(left: Score, right: Score) -> Score:
    return (left[0] + right[0], left[1] + right[1])


def sum_scores(scores: Iterable[Score]) -> Score:
    total = ZERO_SCORE
    for score in scores:
        total = add_scores(total, score)
    return total


def scores_match(left: Score, right: Score, *, epsilon: float = RATING_EPSILON) -> bool:
    return left[0] == right[0] and abs(left[1] - right[1]) < epsilon


def rating_pool(candidates: Iterable[LineupCandidate]) -> list[PoolEntry]:
    """Pool scored by raw rating alone, in the given order."""

    return [
        PoolEntry(candidate=candidate, score=(0, candidate.rating), source_index=idx)
        for idx, candidate in enumerate(candidates)
    ]
