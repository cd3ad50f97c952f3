"""Exact assignment via PuLP, solved tier-first then rating."""

from __future__ import annotations

import logging
from typing import Dict, Sequence, Tuple

from pulp import PULP_CBC_CMD, LpBinary, LpMaximize, LpProblem, LpStatus, LpVariable, lpSum

from dailylineups.config.roster import Slot
from dailylineups.optimizer.eligibility import fits_slot
from dailylineups.optimizer.pool import ZERO_SCORE, PoolEntry, Score, add_scores


logger = logging.getLogger(__name__)

# Keeps the phase-two tier floor robust to solver round-off.
_TIER_TOLERANCE = 1e-6


def _solve(problem: LpProblem) -> None:
    problem.solve(PULP_CBC_CMD(msg=False))
    status = LpStatus[problem.status]
    if status != "Optimal":
        raise RuntimeError(f"ILP solver finished with status {status}")


def solve_ilp(entries: Sequence[PoolEntry], slots: Sequence[Slot]) -> Tuple[Dict[int, int], Score]:
    """Return (entry index -> slot index, score) maximizing tier total, then rating total.

    Unlike the branch-and-bound search this model may leave a slot empty when
    filling it would lower the total, which only matters for negative ratings.
    """

    pairs = [
        (idx, slot_idx)
        for slot_idx, slot in enumerate(slots)
        for idx, entry in enumerate(entries)
        if fits_slot(entry.positions, slot)
    ]
    if not pairs:
        return {}, ZERO_SCORE

    choose = {
        (idx, slot_idx): LpVariable(f"x_{idx}_{slot_idx}", cat=LpBinary)
        for idx, slot_idx in pairs
    }

    def build(name: str) -> LpProblem:
        problem = LpProblem(name, LpMaximize)
        for idx in {idx for idx, _ in pairs}:
            problem += lpSum(var for (i, _), var in choose.items() if i == idx) <= 1, f"entry_{idx}"
        for slot_idx in {slot_idx for _, slot_idx in pairs}:
            problem += lpSum(var for (_, s), var in choose.items() if s == slot_idx) <= 1, f"slot_{slot_idx}"
        return problem

    tier_expr = lpSum(entries[idx].score[0] * var for (idx, _), var in choose.items())
    rating_expr = lpSum(entries[idx].score[1] * var for (idx, _), var in choose.items())

    best_tier = 0.0
    if any(entries[idx].score[0] for idx, _ in pairs):
        tier_problem = build("lineup_tiers")
        tier_problem += tier_expr
        _solve(tier_problem)
        best_tier = float(tier_problem.objective.value() or 0.0)

    rating_problem = build("lineup_rating")
    rating_problem += rating_expr
    if best_tier:
        rating_problem += tier_expr >= best_tier - _TIER_TOLERANCE, "tier_floor"
    _solve(rating_problem)

    picks: Dict[int, int] = {}
    score = ZERO_SCORE
    for (idx, slot_idx), var in choose.items():
        if (var.value() or 0.0) > 0.5:
            picks[idx] = slot_idx
            score = add_scores(score, entries[idx].score)
    logger.debug("ILP picked %s of %s entries (score %s)", len(picks), len(entries), score)
    return picks, score
