"""Models describing a season batch run and its write-back payload."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List, Optional

from pydantic import BaseModel, Field, field_validator


@dataclass(frozen=True)
class LineupUpdate:
    """Output columns for one stored row, keyed by its row id."""

    row_id: str
    full_pos: str
    best_pos: str
    missed_start: bool
    bad_start: bool
    added: Optional[bool]


class BatchSummary(BaseModel):
    run_id: str
    season_id: str
    dry_run: bool = False
    updated_rows: int = 0
    skipped_rows: int = 0
    groups: int = 0
    heuristic_groups: List[str] = Field(default_factory=list)
    week_ids: List[str] = Field(default_factory=list)
    elapsed_seconds: float = 0.0


class WeekRecord(BaseModel):
    """A season week: its stored id and its number within the season."""

    week_id: str = Field(min_length=1)
    season_id: str = Field(min_length=1)
    week_num: str = Field(min_length=1)

    @field_validator("week_id", "season_id", "week_num", mode="before")
    @classmethod
    def _as_text(cls, value: Any) -> Any:
        return str(value).strip() if value is not None else value
