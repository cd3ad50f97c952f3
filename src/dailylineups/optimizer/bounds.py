"""Upper bounds on what a candidate pool can contribute."""

from __future__ import annotations

from typing import Sequence

from dailylineups.optimizer.pool import ZERO_SCORE, Score, add_scores, sum_scores


def rank_by_score(scores: Sequence[Score]) -> list[int]:
    """Indices ordered best score first, stable on ties."""

    return sorted(range(len(scores)), key=lambda idx: scores[idx], reverse=True)


def theoretical_max(scores: Sequence[Score], slot_count: int) -> Score:
    """Sum of the ``slot_count`` best scores, ignoring eligibility."""

    ranked = sorted(scores, reverse=True)
    return sum_scores(ranked[:slot_count])


def remaining_bound(ranked: Sequence[int], scores: Sequence[Score], used_mask: int, slots_left: int) -> Score:
    """Best possible contribution of ``slots_left`` more picks from unused entries.

    Entries scoring at or below an empty slot are left out, so the bound stays
    an over-estimate even when ratings are negative.
    """

    if slots_left <= 0:
        return ZERO_SCORE
    total = ZERO_SCORE
    taken = 0
    for idx in ranked:
        if used_mask >> idx & 1:
            continue
        score = scores[idx]
        if score <= ZERO_SCORE:
            break
        total = add_scores(total, score)
        taken += 1
        if taken == slots_left:
            break
    return total
