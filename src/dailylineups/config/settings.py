"""Environment-driven knobs for the lineup search."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass


logger = logging.getLogger(__name__)

_MAX_NODES_ENV = "DAILYLINEUPS_MAX_NODES"
_TIMEOUT_ENV = "DAILYLINEUPS_SEARCH_TIMEOUT"
_SOLVER_ENV = "DAILYLINEUPS_SOLVER"
_WRITE_CHUNK_ENV = "DAILYLINEUPS_WRITE_CHUNK"

_MAX_NODES_DEFAULT = 250_000
_TIMEOUT_DEFAULT = 2.0
_WRITE_CHUNK_DEFAULT = 10_000

SOLVER_CHOICES = ("bnb", "ilp")


def _env_float(name: str, default: float, *, clamp_min: float | None = None, clamp_max: float | None = None) -> float:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        value = float(raw)
    except ValueError:
        logger.warning("Invalid float for %s: %s; using default %.2f", name, raw, default)
        return default
    if clamp_min is not None:
        value = max(clamp_min, value)
    if clamp_max is not None:
        value = min(clamp_max, value)
    return value


def _env_int(name: str, default: int, *, min_value: int | None = None) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning("Invalid int for %s: %s; using default %d", name, raw, default)
        return default
    if min_value is not None:
        value = max(min_value, value)
    return value


@dataclass(frozen=True)
class SearchBudget:
    """Per-group ceiling on the exhaustive search.

    ``max_nodes`` counts search frames expanded; ``timeout_seconds`` is wall
    clock. ``None`` disables a limit.
    """

    max_nodes: int | None = _MAX_NODES_DEFAULT
    timeout_seconds: float | None = _TIMEOUT_DEFAULT

    @classmethod
    def from_env(cls) -> "SearchBudget":
        timeout = _env_float(_TIMEOUT_ENV, _TIMEOUT_DEFAULT, clamp_min=0.0)
        return cls(
            max_nodes=_env_int(_MAX_NODES_ENV, _MAX_NODES_DEFAULT, min_value=1),
            timeout_seconds=timeout if timeout > 0 else None,
        )

    @classmethod
    def unlimited(cls) -> "SearchBudget":
        return cls(max_nodes=None, timeout_seconds=None)

    def spend(self, nodes: int, elapsed: float) -> "SearchBudget":
        """Budget left after a search used ``nodes`` frames over ``elapsed`` seconds."""

        return SearchBudget(
            max_nodes=None if self.max_nodes is None else max(0, self.max_nodes - nodes),
            timeout_seconds=None if self.timeout_seconds is None else max(0.0, self.timeout_seconds - elapsed),
        )


def solver_choice() -> str:
    choice = os.getenv(_SOLVER_ENV, "bnb").strip().lower()
    if choice not in SOLVER_CHOICES:
        logger.warning("Unknown solver %s; falling back to branch-and-bound", choice)
        return "bnb"
    return choice


def write_chunk_size() -> int:
    return _env_int(_WRITE_CHUNK_ENV, _WRITE_CHUNK_DEFAULT, min_value=1)
