"""REST API for the daily lineup optimizer."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from fastapi import FastAPI, HTTPException

from dailylineups.api.schemas import (
    AssignRequest,
    AssignResponse,
    LineupStatsResponse,
    OptimizedPlayerResponse,
    OptimizeRequest,
    OptimizeResponse,
    RunSummaryResponse,
    SeasonBatchRequest,
    WeekPayload,
    WeeksResponse,
)
from dailylineups.config.roster import RosterRules, build_rules, get_rules, iter_rules
from dailylineups.models import BatchSummary, LineupCandidate, WeekRecord
from dailylineups.optimizer import find_best_lineup, optimize_lineup
from dailylineups.persistence import DuplicateRowIdError, PlayerDayStore, RunRecord
from dailylineups.season import run_season


logger = logging.getLogger(__name__)


def _unknown_roster(name: str) -> HTTPException:
    available = ", ".join(rules.name for rules in iter_rules())
    return HTTPException(status_code=400, detail=f"Unknown roster {name!r}; available: {available}")


def _resolve_rules(request: OptimizeRequest) -> RosterRules:
    try:
        if request.slots:
            return build_rules(
                request.roster,
                [(slot.label, slot.eligible_positions) for slot in request.slots],
            )
        return get_rules(request.roster)
    except KeyError as exc:
        raise _unknown_roster(request.roster) from exc
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


def _candidates(request: OptimizeRequest) -> list[LineupCandidate]:
    return [LineupCandidate(**player.model_dump(exclude_none=True)) for player in request.players]


def _run_to_response(run: RunRecord) -> RunSummaryResponse:
    return RunSummaryResponse(
        run_id=run.run_id,
        created_at=run.created_at,
        season_id=run.season_id,
        dry_run=run.dry_run,
        summary=run.summary,
    )


def create_app(db_path: Path | str | None = None) -> FastAPI:
    app = FastAPI(title="dailylineups optimizer")
    store = PlayerDayStore(db_path)
    app.state.store = store

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.post("/lineups/optimize", response_model=OptimizeResponse)
    async def optimize(request: OptimizeRequest) -> OptimizeResponse:
        rules = _resolve_rules(request)
        outcome = optimize_lineup(_candidates(request), rules=rules)
        players = [
            OptimizedPlayerResponse(
                player_id=player.candidate.player_id,
                positions=player.candidate.positions,
                pos_group=player.candidate.pos_group,
                daily_pos=player.candidate.daily_pos,
                gp=player.candidate.gp,
                gs=player.candidate.gs,
                rating=player.candidate.rating,
                full_pos=player.full_pos,
                best_pos=player.best_pos,
                missed_start=player.missed_start,
                bad_start=player.bad_start,
            )
            for player in outcome.players
        ]
        return OptimizeResponse(
            roster=rules.name,
            players=players,
            stats=LineupStatsResponse(
                full_rating=outcome.full_rating,
                best_rating=outcome.best_rating,
                improvement_points=outcome.improvement_points,
                improvement_percent=outcome.improvement_percent,
            ),
            full_method=outcome.full_method,
            best_method=outcome.best_method,
            heuristic_only=outcome.heuristic_only,
        )

    @app.post("/lineups/assign", response_model=AssignResponse)
    async def assign(request: AssignRequest) -> AssignResponse:
        rules = _resolve_rules(request)
        assignments = find_best_lineup(
            _candidates(request),
            skip_validation=request.skip_validation,
            rules=rules,
        )
        return AssignResponse(roster=rules.name, assignments=assignments)

    @app.post("/seasons/{season_id}/lineups", response_model=BatchSummary)
    async def run_season_lineups(season_id: str, request: SeasonBatchRequest | None = None) -> BatchSummary:
        request = request or SeasonBatchRequest()
        try:
            rules = get_rules(request.roster)
        except KeyError as exc:
            raise _unknown_roster(request.roster) from exc
        try:
            return run_season(
                store,
                season_id,
                week_ids=request.week_ids,
                week_nums=request.week_nums,
                dry_run=request.dry_run,
                workers=request.workers,
                rules=rules,
            )
        except DuplicateRowIdError as exc:
            logger.error("Season %s batch aborted: %s", season_id, exc)
            raise HTTPException(status_code=409, detail=str(exc)) from exc

    @app.put("/seasons/{season_id}/weeks", response_model=WeeksResponse)
    async def store_weeks(season_id: str, weeks: list[WeekPayload]) -> WeeksResponse:
        stored = store.insert_weeks(
            WeekRecord(week_id=week.week_id, season_id=season_id, week_num=week.week_num) for week in weeks
        )
        return WeeksResponse(season_id=season_id, stored=stored)

    @app.get("/runs", response_model=list[RunSummaryResponse])
    async def list_runs(limit: int = 50) -> list[RunSummaryResponse]:
        return [_run_to_response(run) for run in store.list_runs(limit=limit)]

    @app.get("/runs/{run_id}", response_model=RunSummaryResponse)
    async def get_run(run_id: str) -> Any:
        run = store.get_run(run_id)
        if run is None:
            raise HTTPException(status_code=404, detail="Run not found")
        return _run_to_response(run)

    return app


__all__ = ["create_app"]
