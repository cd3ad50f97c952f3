"""Roster slot configuration for the daily lineup optimizer."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, Mapping, Sequence, Tuple


LEFT_WING = "LW"
CENTER = "C"
RIGHT_WING = "RW"
DEFENSE = "D"
GOALIE = "G"
UTILITY = "Util"

BENCH = "BN"
INJURED_RESERVE = "IR"
INJURED_RESERVE_PLUS = "IRplus"
INJURED_LIST_PLUS = "IL+"

FORWARD_POSITIONS = frozenset({LEFT_WING, CENTER, RIGHT_WING})
SKATER_POSITIONS = FORWARD_POSITIONS | {DEFENSE}

# Daily slot labels that mean the player was not in the active lineup.
INACTIVE_SLOTS = frozenset(
    {BENCH, INJURED_RESERVE, INJURED_RESERVE_PLUS, "IR+", INJURED_LIST_PLUS, "ILplus"}
)


@dataclass(frozen=True)
class Slot:
    label: str
    eligible_positions: Tuple[str, ...]


@dataclass(frozen=True)
class RosterRules:
    name: str
    slots: Tuple[Slot, ...]

    @property
    def slot_count(self) -> int:
        return len(self.slots)

    @property
    def slot_labels(self) -> Tuple[str, ...]:
        return tuple(slot.label for slot in self.slots)

    def scarcest_first(self) -> Tuple[Slot, ...]:
        """Slots ordered by eligible-position count; stable for equal sizes."""

        return tuple(sorted(self.slots, key=lambda slot: len(slot.eligible_positions)))


def build_rules(name: str, slot_positions: Sequence[Tuple[str, Iterable[str]]]) -> RosterRules:
    """Create rules from an ordered list of ``(label, eligible_positions)`` pairs."""

    slots = []
    for label, positions in slot_positions:
        label = str(label).strip()
        if not label:
            raise ValueError("slot label must not be empty")
        eligible = tuple(str(pos).strip() for pos in positions if str(pos).strip())
        if not eligible:
            raise ValueError(f"slot {label!r} has no eligible positions")
        slots.append(Slot(label=label, eligible_positions=eligible))
    if not slots:
        raise ValueError(f"roster {name!r} has no slots")
    return RosterRules(name=name, slots=tuple(slots))


_UTILITY_POSITIONS = (LEFT_WING, CENTER, RIGHT_WING, DEFENSE)

_ROSTER_RULES: Dict[str, RosterRules] = {
    "GSHL": build_rules(
        "GSHL",
        [
            (LEFT_WING, (LEFT_WING,)),
            (LEFT_WING, (LEFT_WING,)),
            (CENTER, (CENTER,)),
            (CENTER, (CENTER,)),
            (RIGHT_WING, (RIGHT_WING,)),
            (RIGHT_WING, (RIGHT_WING,)),
            (DEFENSE, (DEFENSE,)),
            (DEFENSE, (DEFENSE,)),
            (DEFENSE, (DEFENSE,)),
            (UTILITY, _UTILITY_POSITIONS),
            (GOALIE, (GOALIE,)),
        ],
    ),
    "GSHL_2UTIL": build_rules(
        "GSHL_2UTIL",
        [
            (LEFT_WING, (LEFT_WING,)),
            (LEFT_WING, (LEFT_WING,)),
            (CENTER, (CENTER,)),
            (CENTER, (CENTER,)),
            (RIGHT_WING, (RIGHT_WING,)),
            (RIGHT_WING, (RIGHT_WING,)),
            (DEFENSE, (DEFENSE,)),
            (DEFENSE, (DEFENSE,)),
            (DEFENSE, (DEFENSE,)),
            (UTILITY, _UTILITY_POSITIONS),
            (UTILITY, _UTILITY_POSITIONS),
            (GOALIE, (GOALIE,)),
        ],
    ),
}

DEFAULT_ROSTER = "GSHL"


def iter_rules() -> Iterable[RosterRules]:
    """Return an iterator of all configured rule sets."""

    return _ROSTER_RULES.values()


def get_rules(name: str = DEFAULT_ROSTER) -> RosterRules:
    """Fetch rules by roster name, raising KeyError if missing."""

    key = name.upper()
    if key not in _ROSTER_RULES:
        raise KeyError(f"No roster rules configured for roster={name!r}")
    return _ROSTER_RULES[key]


# Read-only view of slot configuration for external callers.
SLOT_CONFIG: Mapping[str, Tuple[Tuple[str, Tuple[str, ...]], ...]] = {
    name: tuple((slot.label, slot.eligible_positions) for slot in rules.slots)
    for name, rules in _ROSTER_RULES.items()
}
