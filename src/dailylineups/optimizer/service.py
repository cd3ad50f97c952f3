"""Lineup optimization entry points: single-view assignment and the dual-view orchestrator."""

from __future__ import annotations

from dataclasses import dataclass
import logging
import time
from typing import Dict, Optional, Sequence, Tuple

from dailylineups.config.roster import BENCH, RosterRules, get_rules
from dailylineups.config.settings import SearchBudget, solver_choice
from dailylineups.models import LineupCandidate
from dailylineups.optimizer.bounds import theoretical_max
from dailylineups.optimizer.flags import compute_start_flags
from dailylineups.optimizer.greedy import assign_greedy
from dailylineups.optimizer.pool import PoolEntry, Score, rating_pool, scores_match, sum_scores
from dailylineups.optimizer.search import SearchBudgetExceeded, search_exhaustive


logger = logging.getLogger(__name__)

METHOD_GREEDY = "greedy"
METHOD_EXHAUSTIVE = "exhaustive"
METHOD_ILP = "ilp"
METHOD_FALLBACK = "greedy_fallback"

# Full-lineup priority tiers; higher tiers are never displaced by lower ones.
TIER_BENCH_START = 3
TIER_ACTIVE = 2
TIER_PLAYED = 1


@dataclass(frozen=True)
class AssignmentResult:
    assignments: Dict[str, str]
    picks: Dict[int, str]
    score: Score
    method: str
    nodes: int = 0

    @property
    def rating(self) -> float:
        return self.score[1]

    @property
    def heuristic_only(self) -> bool:
        return self.method == METHOD_FALLBACK


@dataclass(frozen=True)
class OptimizedPlayer:
    candidate: LineupCandidate
    full_pos: str
    best_pos: str
    missed_start: bool
    bad_start: bool

    @property
    def player_id(self) -> str:
        return self.candidate.player_id


@dataclass(frozen=True)
class LineupStats:
    full_rating: float
    best_rating: float
    improvement_points: float
    improvement_percent: float


@dataclass(frozen=True)
class LineupOutcome:
    players: Tuple[OptimizedPlayer, ...]
    stats: LineupStats
    full_method: str
    best_method: str

    @property
    def heuristic_only(self) -> bool:
        return METHOD_FALLBACK in (self.full_method, self.best_method)

    @property
    def full_rating(self) -> float:
        return self.stats.full_rating

    @property
    def best_rating(self) -> float:
        return self.stats.best_rating

    @property
    def improvement_points(self) -> float:
        return self.stats.improvement_points

    @property
    def improvement_percent(self) -> float:
        return self.stats.improvement_percent


def solve_assignment(
    entries: Sequence[PoolEntry],
    *,
    rules: Optional[RosterRules] = None,
    skip_validation: bool = False,
    budget: Optional[SearchBudget] = None,
    solver: Optional[str] = None,
    label: str = "",
) -> AssignmentResult:
    """Assign entries to slots: greedy first, exhaustive only if greedy can't be proven optimal.

    Greedy is provably optimal when it reaches the eligibility-free ceiling of
    the best ``slot_count`` scores. When the exhaustive search runs out of
    budget the greedy assignment is returned and marked as a fallback.
    """

    rules = rules or get_rules()
    slots = rules.scarcest_first()
    greedy_picks = assign_greedy(entries, slots)
    greedy_score = sum_scores(entries[idx].score for idx in greedy_picks)

    def to_result(picks: Dict[int, int], score: Score, method: str, nodes: int = 0) -> AssignmentResult:
        labels = {idx: slots[slot_idx].label for idx, slot_idx in picks.items()}
        return AssignmentResult(
            assignments={entries[idx].player_id: label for idx, label in labels.items()},
            picks=labels,
            score=score,
            method=method,
            nodes=nodes,
        )

    if skip_validation:
        return to_result(greedy_picks, greedy_score, METHOD_GREEDY)

    ceiling = theoretical_max([entry.score for entry in entries], rules.slot_count)
    if scores_match(greedy_score, ceiling):
        return to_result(greedy_picks, greedy_score, METHOD_GREEDY)

    if (solver or solver_choice()) == "ilp":
        from dailylineups.optimizer.ilp import solve_ilp

        ilp_picks, ilp_score = solve_ilp(entries, slots)
        if ilp_score > greedy_score:
            return to_result(ilp_picks, ilp_score, METHOD_ILP)
        return to_result(greedy_picks, greedy_score, METHOD_GREEDY)

    budget = budget or SearchBudget.from_env()
    started = time.perf_counter()
    try:
        result = search_exhaustive(entries, slots, incumbent=greedy_picks, budget=budget)
    except SearchBudgetExceeded as exc:
        logger.warning(
            "Lineup search for %s stopped after %s nodes (%.2fs); keeping greedy assignment",
            label or "group",
            exc.nodes,
            exc.elapsed,
        )
        return to_result(greedy_picks, greedy_score, METHOD_FALLBACK, exc.nodes)

    logger.debug(
        "Exhaustive search for %s explored %s nodes in %.3fs (greedy %s -> %s)",
        label or "group",
        result.nodes,
        time.perf_counter() - started,
        greedy_score,
        result.score,
    )
    return to_result(result.picks, result.score, METHOD_EXHAUSTIVE, result.nodes)


def find_best_lineup(
    candidates: Sequence[LineupCandidate],
    *,
    skip_validation: bool = False,
    rules: Optional[RosterRules] = None,
    budget: Optional[SearchBudget] = None,
) -> Dict[str, str]:
    """Single-view assignment by raw rating; returns player id -> slot label."""

    entries = rating_pool(candidates)
    result = solve_assignment(entries, rules=rules, skip_validation=skip_validation, budget=budget)
    return result.assignments


def full_lineup_tier(candidate: LineupCandidate) -> int:
    if candidate.started and not candidate.in_active_lineup:
        return TIER_BENCH_START
    if candidate.in_active_lineup:
        return TIER_ACTIVE
    return TIER_PLAYED


def build_full_pool(candidates: Sequence[LineupCandidate]) -> list[PoolEntry]:
    """Players who played, scored (tier, rating)."""

    return [
        PoolEntry(candidate=candidate, score=(full_lineup_tier(candidate), candidate.rating), source_index=idx)
        for idx, candidate in enumerate(candidates)
        if candidate.played
    ]


def build_best_pool(candidates: Sequence[LineupCandidate]) -> list[PoolEntry]:
    """Everyone by raw rating: players who played first, then the rest."""

    indexed = list(enumerate(candidates))
    played = sorted((item for item in indexed if item[1].played), key=lambda item: item[1].rating, reverse=True)
    idle = sorted((item for item in indexed if not item[1].played), key=lambda item: item[1].rating, reverse=True)
    return [
        PoolEntry(candidate=candidate, score=(0, candidate.rating), source_index=idx)
        for idx, candidate in played + idle
    ]


def lineup_stats(players: Sequence[OptimizedPlayer]) -> LineupStats:
    full_rating = sum(p.candidate.rating for p in players if p.full_pos != BENCH)
    best_rating = sum(p.candidate.rating for p in players if p.best_pos != BENCH)
    improvement = best_rating - full_rating
    percent = (improvement / full_rating) * 100 if full_rating > 0 else 0.0
    return LineupStats(
        full_rating=full_rating,
        best_rating=best_rating,
        improvement_points=improvement,
        improvement_percent=percent,
    )


def optimize_lineup(
    candidates: Sequence[LineupCandidate],
    *,
    rules: Optional[RosterRules] = None,
    budget: Optional[SearchBudget] = None,
    label: str = "",
) -> LineupOutcome:
    """Build the full and best lineups for one team-day and flag each player.

    ``budget`` caps the exhaustive search for the whole team-day; the best view
    only gets what the full view left over.
    """

    rules = rules or get_rules()
    budget = budget or SearchBudget.from_env()
    candidates = list(candidates)

    started = time.perf_counter()
    full_entries = build_full_pool(candidates)
    full = solve_assignment(full_entries, rules=rules, budget=budget, label=f"{label} full".strip())
    budget = budget.spend(full.nodes, time.perf_counter() - started)
    full_by_source = {full_entries[idx].source_index: slot for idx, slot in full.picks.items()}

    best_entries = build_best_pool(candidates)
    best = solve_assignment(best_entries, rules=rules, budget=budget, label=f"{label} best".strip())
    best_by_source = {best_entries[idx].source_index: slot for idx, slot in best.picks.items()}

    players = []
    for idx, candidate in enumerate(candidates):
        full_pos = full_by_source.get(idx, BENCH)
        best_pos = best_by_source.get(idx, BENCH)
        flags = compute_start_flags(candidate, full_pos, best_pos)
        players.append(
            OptimizedPlayer(
                candidate=candidate,
                full_pos=full_pos,
                best_pos=best_pos,
                missed_start=flags.missed_start,
                bad_start=flags.bad_start,
            )
        )

    return LineupOutcome(
        players=tuple(players),
        stats=lineup_stats(players),
        full_method=full.method,
        best_method=best.method,
    )
