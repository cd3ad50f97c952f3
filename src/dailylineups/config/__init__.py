"""Configuration helpers for roster slots and search limits."""

from .roster import (
    BENCH,
    DEFAULT_ROSTER,
    RosterRules,
    Slot,
    build_rules,
    get_rules,
    iter_rules,
)
from .settings import SearchBudget, solver_choice, write_chunk_size

__all__ = [
    "BENCH",
    "DEFAULT_ROSTER",
    "RosterRules",
    "SearchBudget",
    "Slot",
    "build_rules",
    "get_rules",
    "iter_rules",
    "solver_choice",
    "write_chunk_size",
]
