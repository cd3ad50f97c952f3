import random

import pytest

from dailylineups.config import SearchBudget, get_rules
from dailylineups.config.roster import Slot
from dailylineups.models import LineupCandidate
from dailylineups.optimizer.bounds import remaining_bound, rank_by_score, theoretical_max
from dailylineups.optimizer.eligibility import fits_slot
from dailylineups.optimizer.greedy import assign_greedy
from dailylineups.optimizer.ilp import solve_ilp
from dailylineups.optimizer.pool import rating_pool, sum_scores
from dailylineups.optimizer.search import SearchBudgetExceeded, search_exhaustive
from dailylineups.optimizer.service import find_best_lineup, solve_assignment


def _player(player_id: str, positions, rating: float, **extra) -> LineupCandidate:
    return LineupCandidate(player_id=player_id, positions=positions, rating=rating, **extra)


def _utility_trap() -> list[LineupCandidate]:
    # The LW/C swingman is the best LW, but the lineup is better with him at C.
    return [
        _player("X", ["LW", "C"], 100),
        _player("L1", ["LW"], 90),
        _player("L2", ["LW"], 85),
        _player("L3", ["LW"], 80),
        _player("C1", ["C"], 60),
        _player("C2", ["C"], 55),
    ]


def _one_per_slot() -> list[LineupCandidate]:
    return [
        _player("lw1", ["LW"], 30),
        _player("lw2", ["LW"], 29),
        _player("c1", ["C"], 28),
        _player("c2", ["C"], 27),
        _player("rw1", ["RW"], 26),
        _player("rw2", ["RW"], 25),
        _player("d1", ["D"], 24),
        _player("d2", ["D"], 23),
        _player("d3", ["D"], 22),
        _player("d4", ["D"], 21),
        _player("g1", ["G"], 20),
    ]


def _rating(entries, picks) -> float:
    return sum(entries[idx].candidate.rating for idx in picks)


def _brute_force(entries, slots) -> float:
    best = 0.0

    def walk(slot_idx: int, used: frozenset, total: float) -> None:
        nonlocal best
        if slot_idx == len(slots):
            best = max(best, total)
            return
        walk(slot_idx + 1, used, total)
        for idx, entry in enumerate(entries):
            if idx not in used and fits_slot(entry.positions, slots[slot_idx]):
                walk(slot_idx + 1, used | {idx}, total + entry.candidate.rating)

    walk(0, frozenset(), 0.0)
    return best


def _random_pool(rng: random.Random, size: int) -> list[LineupCandidate]:
    shapes = [["LW"], ["C"], ["RW"], ["D"], ["G"], ["LW", "C"], ["C", "RW"], ["LW", "RW"], ["RW", "D"], []]
    return [
        _player(f"p{idx}", rng.choice(shapes), round(rng.uniform(0, 50), 2))
        for idx in range(size)
    ]


def test_greedy_fills_scarce_slots_first():
    rules = get_rules()
    entries = rating_pool(_utility_trap())
    slots = rules.scarcest_first()
    picks = assign_greedy(entries, slots)

    labels = {entries[idx].player_id: slots[slot_idx].label for idx, slot_idx in picks.items()}
    assert labels == {"X": "LW", "L1": "LW", "C1": "C", "C2": "C", "L2": "Util"}
    assert _rating(entries, picks) == pytest.approx(390)


def test_theoretical_max_ignores_eligibility():
    entries = rating_pool(_utility_trap())
    assert theoretical_max([e.score for e in entries], 11) == (0, pytest.approx(470))
    assert theoretical_max([e.score for e in entries], 2) == (0, pytest.approx(190))


def test_remaining_bound_skips_used_and_non_positive_entries():
    scores = [(0, 10.0), (0, -5.0), (0, 7.0), (0, 3.0)]
    ranked = rank_by_score(scores)
    assert remaining_bound(ranked, scores, used_mask=0b0001, slots_left=3) == (0, 10.0)
    assert remaining_bound(ranked, scores, used_mask=0, slots_left=0) == (0, 0.0)


def test_exhaustive_beats_greedy_on_utility_trap():
    rules = get_rules()
    entries = rating_pool(_utility_trap())
    slots = rules.scarcest_first()
    greedy = assign_greedy(entries, slots)

    result = search_exhaustive(entries, slots, incumbent=greedy)

    assert result.improved
    assert result.score == (0, pytest.approx(415))
    labels = {entries[idx].player_id: slots[slot_idx].label for idx, slot_idx in result.picks.items()}
    assert labels["X"] == "C"
    assert labels["L3"] == "Util"


def test_solve_assignment_takes_fast_path_when_greedy_hits_ceiling():
    entries = rating_pool(_one_per_slot())
    result = solve_assignment(entries)

    assert result.method == "greedy"
    assert result.nodes == 0
    assert len(result.assignments) == 11
    assert result.rating == pytest.approx(sum(c.rating for c in _one_per_slot()))


def test_solve_assignment_runs_search_when_greedy_is_short():
    result = solve_assignment(rating_pool(_utility_trap()))
    assert result.method == "exhaustive"
    assert result.rating == pytest.approx(415)


def test_budget_overrun_keeps_greedy_assignment(caplog):
    entries = rating_pool(_utility_trap())
    with caplog.at_level("WARNING"):
        result = solve_assignment(entries, budget=SearchBudget(max_nodes=1, timeout_seconds=None), label="2024-01-05|T1")

    assert result.method == "greedy_fallback"
    assert result.heuristic_only
    assert result.rating == pytest.approx(390)
    assert "2024-01-05|T1" in caplog.text


def test_search_raises_when_budget_is_exhausted():
    entries = rating_pool(_utility_trap())
    slots = get_rules().scarcest_first()
    with pytest.raises(SearchBudgetExceeded) as excinfo:
        search_exhaustive(entries, slots, budget=SearchBudget(max_nodes=3, timeout_seconds=None))
    assert excinfo.value.nodes == 4


def test_skip_validation_returns_greedy_map():
    assignments = find_best_lineup(_utility_trap(), skip_validation=True)
    assert assignments["X"] == "LW"
    assert "L3" not in assignments


def test_find_best_lineup_returns_optimal_map():
    assignments = find_best_lineup(_utility_trap())
    assert assignments["X"] == "C"
    assert sorted(assignments) == ["C1", "L1", "L2", "L3", "X"]


def test_slot_without_candidates_stays_empty():
    slots = (Slot("G", ("G",)), Slot("LW", ("LW",)))
    entries = rating_pool([_player("lw", ["LW"], 5), _player("bad", "", 99)])
    result = search_exhaustive(entries, slots)
    assert result.picks == {0: 1}


@pytest.mark.parametrize("seed", range(8))
def test_search_matches_brute_force(seed):
    rng = random.Random(seed)
    slots = (
        Slot("LW", ("LW",)),
        Slot("C", ("C",)),
        Slot("RW", ("RW",)),
        Slot("D", ("D",)),
        Slot("G", ("G",)),
        Slot("Util", ("LW", "C", "RW", "D")),
    )
    entries = rating_pool(_random_pool(rng, 9))
    greedy = assign_greedy(entries, slots)
    result = search_exhaustive(entries, slots, incumbent=greedy)

    expected = _brute_force(entries, slots)
    greedy_rating = _rating(entries, greedy)
    ceiling = theoretical_max([e.score for e in entries], len(slots))[1]
    assert result.score[1] == pytest.approx(expected)
    assert greedy_rating <= result.score[1] + 1e-9 <= ceiling + 2e-9

    assert len(set(result.picks.values())) == len(result.picks)
    for idx, slot_idx in result.picks.items():
        assert fits_slot(entries[idx].positions, slots[slot_idx])


@pytest.mark.parametrize("seed", range(4))
def test_ilp_agrees_with_search(seed):
    rng = random.Random(100 + seed)
    slots = get_rules().scarcest_first()
    entries = rating_pool(_random_pool(rng, 16))

    picks, score = solve_ilp(entries, slots)
    result = search_exhaustive(entries, slots, incumbent=assign_greedy(entries, slots))

    assert score[1] == pytest.approx(result.score[1], abs=1e-6)
    assert sum_scores(entries[idx].score for idx in picks)[1] == pytest.approx(score[1])


def test_ilp_backend_selected_from_env(monkeypatch):
    monkeypatch.setenv("DAILYLINEUPS_SOLVER", "ilp")
    result = solve_assignment(rating_pool(_utility_trap()))
    assert result.method == "ilp"
    assert result.rating == pytest.approx(415)
