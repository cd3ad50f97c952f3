"""Canonical player models shared across ingestion, optimizer and batch layers."""

from __future__ import annotations

import json
from typing import Any, List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic.config import ConfigDict

from dailylineups.config.roster import (
    BENCH,
    DEFENSE,
    FORWARD_POSITIONS,
    GOALIE,
    INACTIVE_SLOTS,
)


def parse_positions(value: Any) -> List[str]:
    """Parse a position field given as a list, a JSON array or a comma-separated string.

    Anything unparseable yields an empty list; such a player is never eligible
    for a slot.
    """

    if value is None:
        return []
    if isinstance(value, (list, tuple, set, frozenset)):
        items = list(value)
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return []
        if text.startswith("["):
            try:
                decoded = json.loads(text)
            except json.JSONDecodeError:
                return []
            if not isinstance(decoded, list):
                return []
            items = decoded
        else:
            items = text.split(",")
    else:
        return []
    positions: List[str] = []
    for item in items:
        if not isinstance(item, str):
            continue
        token = item.strip()
        if token and token not in positions:
            positions.append(token)
    return positions


def _coerce_number(value: Any) -> float:
    if value is None:
        return 0.0
    if isinstance(value, (bool, int, float)):
        number = float(value)
    else:
        text = str(value).strip()
        if not text:
            return 0.0
        try:
            number = float(text)
        except ValueError:
            return 0.0
    # NaN never equals itself
    return number if number == number else 0.0


def infer_pos_group(positions: List[str]) -> Optional[str]:
    if GOALIE in positions:
        return "G"
    if any(pos in FORWARD_POSITIONS for pos in positions):
        return "F"
    if DEFENSE in positions:
        return "D"
    return None


class LineupCandidate(BaseModel):
    """One player considered for a team's lineup on a single day."""

    player_id: str = Field(..., min_length=1)
    positions: List[str] = Field(default_factory=list)
    pos_group: Optional[str] = None
    daily_pos: str = BENCH
    gp: float = 0.0
    gs: float = 0.0
    ir: float = 0.0
    ir_plus: float = 0.0
    rating: float = 0.0

    model_config = ConfigDict(frozen=True)

    @field_validator("positions", mode="before")
    @classmethod
    def _parse_positions(cls, value: Any) -> List[str]:
        return parse_positions(value)

    @field_validator("gp", "gs", "ir", "ir_plus", "rating", mode="before")
    @classmethod
    def _parse_number(cls, value: Any) -> float:
        return _coerce_number(value)

    @field_validator("daily_pos", mode="before")
    @classmethod
    def _parse_daily_pos(cls, value: Any) -> str:
        if value is None:
            return BENCH
        text = str(value).strip()
        return text or BENCH

    @model_validator(mode="before")
    @classmethod
    def _fill_pos_group(cls, data: Any) -> Any:
        if isinstance(data, dict) and not data.get("pos_group"):
            data = dict(data)
            data["pos_group"] = infer_pos_group(parse_positions(data.get("positions")))
        return data

    @property
    def played(self) -> bool:
        return self.gp == 1

    @property
    def started(self) -> bool:
        return self.gs == 1

    @property
    def in_active_lineup(self) -> bool:
        return self.daily_pos not in INACTIVE_SLOTS


class PlayerDayRecord(BaseModel):
    """A stored per-player-per-day row, including the lineup output columns."""

    row_id: Optional[str] = None
    season_id: Optional[str] = None
    week_id: Optional[str] = None
    date: Optional[str] = None
    team_id: Optional[str] = None
    player_id: Optional[str] = None
    positions: List[str] = Field(default_factory=list)
    pos_group: Optional[str] = None
    daily_pos: str = BENCH
    gp: float = 0.0
    gs: float = 0.0
    ir: float = 0.0
    ir_plus: float = 0.0
    rating: float = 0.0
    full_pos: Optional[str] = None
    best_pos: Optional[str] = None
    missed_start: Optional[bool] = None
    bad_start: Optional[bool] = None
    added: Optional[bool] = None

    model_config = ConfigDict(frozen=True)

    @field_validator("positions", mode="before")
    @classmethod
    def _parse_positions(cls, value: Any) -> List[str]:
        return parse_positions(value)

    @field_validator("gp", "gs", "ir", "ir_plus", "rating", mode="before")
    @classmethod
    def _parse_number(cls, value: Any) -> float:
        return _coerce_number(value)

    @field_validator("row_id", "season_id", "week_id", "date", "team_id", "player_id", mode="before")
    @classmethod
    def _blank_to_none(cls, value: Any) -> Optional[str]:
        if value is None:
            return None
        text = str(value).strip()
        return text or None

    @field_validator("daily_pos", mode="before")
    @classmethod
    def _parse_daily_pos(cls, value: Any) -> str:
        if value is None:
            return BENCH
        text = str(value).strip()
        return text or BENCH

    def to_candidate(self) -> LineupCandidate:
        if not self.player_id:
            raise ValueError(f"row {self.row_id!r} has no player id")
        return LineupCandidate(
            player_id=self.player_id,
            positions=self.positions,
            pos_group=self.pos_group,
            daily_pos=self.daily_pos,
            gp=self.gp,
            gs=self.gs,
            ir=self.ir,
            ir_plus=self.ir_plus,
            rating=self.rating,
        )
