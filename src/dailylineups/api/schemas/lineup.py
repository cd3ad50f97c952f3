from __future__ import annotations

from typing import Any, List

from pydantic import BaseModel, Field


class SlotPayload(BaseModel):
    label: str
    eligible_positions: List[str]


class CandidatePayload(BaseModel):
    player_id: str = Field(..., min_length=1)
    positions: Any = None
    pos_group: str | None = None
    daily_pos: str | None = None
    gp: Any = 0
    gs: Any = 0
    ir: Any = 0
    ir_plus: Any = 0
    rating: Any = 0


class OptimizeRequest(BaseModel):
    roster: str = Field(default="GSHL")
    slots: List[SlotPayload] | None = None
    players: List[CandidatePayload]


class AssignRequest(OptimizeRequest):
    skip_validation: bool = False


class OptimizedPlayerResponse(BaseModel):
    player_id: str
    positions: List[str]
    pos_group: str | None
    daily_pos: str
    gp: float
    gs: float
    rating: float
    full_pos: str
    best_pos: str
    missed_start: bool
    bad_start: bool


class LineupStatsResponse(BaseModel):
    full_rating: float
    best_rating: float
    improvement_points: float
    improvement_percent: float


class OptimizeResponse(BaseModel):
    roster: str
    players: List[OptimizedPlayerResponse]
    stats: LineupStatsResponse
    full_method: str
    best_method: str
    heuristic_only: bool


class AssignResponse(BaseModel):
    roster: str
    assignments: dict[str, str]
