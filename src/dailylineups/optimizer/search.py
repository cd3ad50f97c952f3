"""Branch-and-bound search for the highest-scoring slot assignment.

The search walks slots in the order given (callers pass them scarcest-first)
and tries every eligible unused entry for each slot. Frames live on an
explicit stack instead of the call stack; each frame carries the slot index,
a bitmask of used entries, the accumulated score, the picks made so far and
the bound computed when it was created. A frame is only expanded while its
bound is strictly greater than the best complete assignment found so far, so
exact ties with the incumbent are never explored.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

from dailylineups.config.roster import Slot
from dailylineups.config.settings import SearchBudget
from dailylineups.optimizer.bounds import rank_by_score, remaining_bound
from dailylineups.optimizer.eligibility import fits_slot
from dailylineups.optimizer.pool import ZERO_SCORE, PoolEntry, Score, add_scores

_CLOCK_CHECK_INTERVAL = 512


class SearchBudgetExceeded(RuntimeError):
    """Raised when the search runs past its node or time ceiling."""

    def __init__(self, nodes: int, elapsed: float):
        super().__init__(f"search budget exceeded after {nodes} nodes in {elapsed:.2f}s")
        self.nodes = nodes
        self.elapsed = elapsed


@dataclass(frozen=True)
class SearchFrame:
    slot_index: int
    used_mask: int
    score: Score
    picks: Tuple[Tuple[int, int], ...]
    bound: Optional[Score]


@dataclass(frozen=True)
class SearchResult:
    picks: Dict[int, int]
    score: Score
    nodes: int
    improved: bool


def search_exhaustive(
    entries: Sequence[PoolEntry],
    slots: Sequence[Slot],
    *,
    incumbent: Optional[Dict[int, int]] = None,
    budget: Optional[SearchBudget] = None,
) -> SearchResult:
    """Return the highest-scoring assignment of entries to slots.

    ``incumbent`` (entry index -> slot index) seeds the best-so-far; the
    result only replaces it with a strictly better assignment. A slot with
    no eligible unused entry is skipped rather than failing the branch.
    """

    budget = budget or SearchBudget.unlimited()
    scores = [entry.score for entry in entries]
    ranked = rank_by_score(scores)
    eligible: List[List[int]] = [
        [idx for idx, entry in enumerate(entries) if fits_slot(entry.positions, slot)]
        for slot in slots
    ]

    best_picks: Dict[int, int] = dict(incumbent or {})
    best_score: Optional[Score] = None
    if incumbent is not None:
        best_score = ZERO_SCORE
        for idx in incumbent:
            best_score = add_scores(best_score, scores[idx])

    slot_total = len(slots)
    stack: List[SearchFrame] = [SearchFrame(0, 0, ZERO_SCORE, (), None)]
    nodes = 0
    improved = False
    started = time.perf_counter()

    while stack:
        frame = stack.pop()
        if best_score is not None and frame.bound is not None and not frame.bound > best_score:
            continue

        nodes += 1
        if budget.max_nodes is not None and nodes > budget.max_nodes:
            raise SearchBudgetExceeded(nodes, time.perf_counter() - started)
        if budget.timeout_seconds is not None and nodes % _CLOCK_CHECK_INTERVAL == 0:
            elapsed = time.perf_counter() - started
            if elapsed > budget.timeout_seconds:
                raise SearchBudgetExceeded(nodes, elapsed)

        if frame.slot_index >= slot_total:
            if best_score is None or frame.score > best_score:
                best_score = frame.score
                best_picks = {idx: slot_idx for idx, slot_idx in frame.picks}
                improved = True
            continue

        slot_idx = frame.slot_index
        slots_left = slot_total - slot_idx - 1
        children: List[SearchFrame] = []
        found_eligible = False
        for idx in eligible[slot_idx]:
            if frame.used_mask >> idx & 1:
                continue
            found_eligible = True
            used_mask = frame.used_mask | (1 << idx)
            score = add_scores(frame.score, scores[idx])
            bound = add_scores(score, remaining_bound(ranked, scores, used_mask, slots_left))
            if best_score is not None and not bound > best_score:
                continue
            children.append(
                SearchFrame(slot_idx + 1, used_mask, score, frame.picks + ((idx, slot_idx),), bound)
            )

        if not found_eligible:
            children.append(
                SearchFrame(slot_idx + 1, frame.used_mask, frame.score, frame.picks, frame.bound)
            )

        # Reversed so entries are explored in pool order.
        stack.extend(reversed(children))

    return SearchResult(
        picks=best_picks,
        score=best_score if best_score is not None else ZERO_SCORE,
        nodes=nodes,
        improved=improved,
    )
