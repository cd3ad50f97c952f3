"""Single-pass greedy slot assignment."""

from __future__ import annotations

from typing import Dict, Sequence

from dailylineups.config.roster import Slot
from dailylineups.optimizer.eligibility import fits_slot
from dailylineups.optimizer.pool import PoolEntry


def assign_greedy(entries: Sequence[PoolEntry], slots: Sequence[Slot]) -> Dict[int, int]:
    """Fill ``slots`` in order with the best eligible unused entry.

    ``slots`` should already be scarcest-first. Returns entry index -> slot
    index. Ties keep the entry seen first; slots nobody fits stay empty.
    """

    picks: Dict[int, int] = {}
    for slot_idx, slot in enumerate(slots):
        best_idx: int | None = None
        for idx, entry in enumerate(entries):
            if idx in picks:
                continue
            if not fits_slot(entry.positions, slot):
                continue
            if best_idx is None or entry.score > entries[best_idx].score:
                best_idx = idx
        if best_idx is not None:
            picks[best_idx] = slot_idx
    return picks
