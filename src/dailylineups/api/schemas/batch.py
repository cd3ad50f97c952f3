from __future__ import annotations

from datetime import datetime
from typing import List

from pydantic import BaseModel, Field


class SeasonBatchRequest(BaseModel):
    week_ids: List[str] | None = None
    week_nums: List[int | str] | None = None
    dry_run: bool = False
    workers: int = Field(default=1, ge=1, le=32)
    roster: str = Field(default="GSHL")


class WeekPayload(BaseModel):
    week_id: str = Field(min_length=1)
    week_num: int | str


class WeeksResponse(BaseModel):
    season_id: str
    stored: int


class RunSummaryResponse(BaseModel):
    run_id: str
    created_at: datetime
    season_id: str
    dry_run: bool
    summary: dict
