"""Pydantic models for API I/O."""

from .lineup import (
    AssignRequest,
    AssignResponse,
    CandidatePayload,
    LineupStatsResponse,
    OptimizedPlayerResponse,
    OptimizeRequest,
    OptimizeResponse,
    SlotPayload,
)
from .batch import RunSummaryResponse, SeasonBatchRequest, WeekPayload, WeeksResponse

__all__ = [
    "AssignRequest",
    "AssignResponse",
    "CandidatePayload",
    "LineupStatsResponse",
    "OptimizedPlayerResponse",
    "OptimizeRequest",
    "OptimizeResponse",
    "RunSummaryResponse",
    "SeasonBatchRequest",
    "SlotPayload",
    "WeekPayload",
    "WeeksResponse",
]
