"""Daily lineup optimizer: greedy fast path with a branch-and-bound fallback."""

from .search import SearchBudgetExceeded
from .service import (
    AssignmentResult,
    LineupOutcome,
    LineupStats,
    OptimizedPlayer,
    find_best_lineup,
    optimize_lineup,
    solve_assignment,
)

__all__ = [
    "AssignmentResult",
    "LineupOutcome",
    "LineupStats",
    "OptimizedPlayer",
    "SearchBudgetExceeded",
    "find_best_lineup",
    "optimize_lineup",
    "solve_assignment",
]
