"""Slot eligibility checks."""

from __future__ import annotations

from typing import Iterable, Sequence

from dailylineups.config.roster import GOALIE, SKATER_POSITIONS, UTILITY, Slot


def is_eligible(positions: Iterable[str], eligible_positions: Sequence[str]) -> bool:
    """Return True when a player holding ``positions`` may fill a slot.

    Goalie slots only take goalies, a ``Util`` marker takes any skater, and
    every other slot needs an overlapping position.
    """

    held = set(positions)
    if not held:
        return False
    if GOALIE in eligible_positions:
        return GOALIE in held
    if UTILITY in eligible_positions:
        return bool(held & SKATER_POSITIONS)
    return any(pos in held for pos in eligible_positions)


def fits_slot(positions: Iterable[str], slot: Slot) -> bool:
    return is_eligible(positions, slot.eligible_positions)
