"""Persist and load roster profiles as JSON."""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import List, Tuple

from dailylineups.config.roster import RosterRules, build_rules


@dataclass
class RosterProfile:
    name: str
    slots: List[Tuple[str, List[str]]]

    @classmethod
    def from_rules(cls, rules: RosterRules) -> "RosterProfile":
        return cls(
            name=rules.name,
            slots=[(slot.label, list(slot.eligible_positions)) for slot in rules.slots],
        )

    @classmethod
    def load(cls, path: Path) -> "RosterProfile":
        data = json.loads(path.read_text(encoding="utf-8"))
        if not isinstance(data, dict):
            raise ValueError(f"roster profile {path} must be a JSON object")
        raw_slots = data.get("slots")
        if not isinstance(raw_slots, list):
            raise ValueError(f"roster profile {path} must contain a 'slots' list")
        slots: List[Tuple[str, List[str]]] = []
        for entry in raw_slots:
            if not isinstance(entry, dict) or "label" not in entry:
                raise ValueError(f"invalid slot entry {entry!r} in {path}")
            slots.append((str(entry["label"]), [str(pos) for pos in entry.get("eligible_positions", [])]))
        return cls(name=str(data.get("name") or path.stem), slots=slots)

    def save(self, path: Path) -> None:
        payload = {
            "name": self.name,
            "slots": [
                {"label": label, "eligible_positions": positions}
                for label, positions in self.slots
            ],
        }
        path.write_text(json.dumps(payload, indent=2), encoding="utf-8")

    def to_rules(self) -> RosterRules:
        return build_rules(self.name, self.slots)
