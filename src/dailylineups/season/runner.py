"""Season batch: optimize every (date, team) lineup and write the results back."""

from __future__ import annotations

from dataclasses import dataclass
import logging
import multiprocessing as mp
import time
from typing import Dict, List, Optional, Sequence, Tuple
from uuid import uuid4

from dailylineups.config.roster import RosterRules, get_rules
from dailylineups.config.settings import SearchBudget
from dailylineups.models import BatchSummary, LineupUpdate, PlayerDayRecord
from dailylineups.optimizer.service import optimize_lineup
from dailylineups.persistence import PlayerDayStore
from dailylineups.season.grouping import GroupKey, GroupedSeason, group_label, group_player_days
from dailylineups.season.presence import build_presence, compute_added


logger = logging.getLogger(__name__)

LARGE_ROSTER_THRESHOLD = 25

GroupRows = Tuple[GroupKey, List[PlayerDayRecord]]


@dataclass(frozen=True)
class GroupJobConfig:
    job_id: int
    groups: List[GroupRows]
    rules: RosterRules
    budget: SearchBudget


@dataclass(frozen=True)
class GroupResult:
    key: GroupKey
    updates: List[LineupUpdate]
    heuristic_only: bool


@dataclass(frozen=True)
class GroupJobResult:
    job_id: int
    results: List[GroupResult]


def optimize_group(
    key: GroupKey,
    rows: Sequence[PlayerDayRecord],
    *,
    rules: RosterRules,
    budget: SearchBudget,
) -> GroupResult:
    """Optimize one team-day; added flags are filled in by the caller."""

    outcome = optimize_lineup(
        [row.to_candidate() for row in rows],
        rules=rules,
        budget=budget,
        label=group_label(key),
    )
    updates = [
        LineupUpdate(
            row_id=row.row_id,
            full_pos=player.full_pos,
            best_pos=player.best_pos,
            missed_start=player.missed_start,
            bad_start=player.bad_start,
            added=None,
        )
        for row, player in zip(rows, outcome.players)
    ]
    return GroupResult(key=key, updates=updates, heuristic_only=outcome.heuristic_only)


def _run_group_job(config: GroupJobConfig) -> GroupJobResult:
    return GroupJobResult(
        config.job_id,
        [optimize_group(key, rows, rules=config.rules, budget=config.budget) for key, rows in config.groups],
    )


def _group_worker(config: GroupJobConfig, queue: mp.Queue) -> None:
    try:
        queue.put(_run_group_job(config))
    except Exception as exc:  # pragma: no cover - worker errors bubble to parent
        queue.put(exc)


def _optimize_parallel(
    items: List[GroupRows],
    *,
    rules: RosterRules,
    budget: SearchBudget,
    workers: int,
) -> List[GroupResult]:
    ctx = mp.get_context('spawn')
    queue: mp.Queue = ctx.Queue()

    per_job = max(1, -(-len(items) // workers))
    processes: Dict[int, mp.Process] = {}
    collected: Dict[int, List[GroupResult]] = {}
    try:
        for job_id, start in enumerate(range(0, len(items), per_job)):
            config = GroupJobConfig(job_id, items[start:start + per_job], rules, budget)
            logger.info("Dispatching job %s with %s groups", job_id, len(config.groups))
            proc = ctx.Process(target=_group_worker, args=(config, queue))
            proc.start()
            processes[job_id] = proc

        while len(collected) < len(processes):
            outcome = queue.get()
            if isinstance(outcome, Exception):
                raise outcome
            collected[outcome.job_id] = outcome.results
            processes[outcome.job_id].join()
            logger.info("Job %s completed (%s groups)", outcome.job_id, len(outcome.results))
    finally:
        for proc in processes.values():
            if proc.is_alive():
                proc.terminate()
            proc.join()

    return [result for job_id in sorted(collected) for result in collected[job_id]]


def log_roster_diagnostics(grouped: GroupedSeason) -> None:
    sizes = grouped.sizes()
    if not sizes:
        logger.info("No lineup groups to optimize")
        return
    large = sum(1 for size in sizes if size > LARGE_ROSTER_THRESHOLD)
    logger.info(
        "Roster sizes across %s groups: avg %.1f, max %s, over %s players: %s",
        len(sizes),
        sum(sizes) / len(sizes),
        max(sizes),
        LARGE_ROSTER_THRESHOLD,
        large,
    )


def run_season(
    store: PlayerDayStore,
    season_id: str,
    *,
    week_ids: Optional[Sequence[str]] = None,
    week_nums: Optional[Sequence[str | int]] = None,
    dry_run: bool = False,
    workers: int = 1,
    rules: Optional[RosterRules] = None,
    budget: Optional[SearchBudget] = None,
) -> BatchSummary:
    """Recompute lineup columns for a season (optionally a set of weeks).

    Weeks are chosen by id, or by number through the store's week table when
    no ids are given; week numbers that match no week select nothing.

    All groups are optimized before anything is written. ``added`` always
    looks back through the whole season, even when ``week_ids`` narrows the
    rows being rewritten. Dry runs report what would change without writing
    or recording the run.
    """

    rules = rules or get_rules()
    budget = budget or SearchBudget.from_env()
    run_id = uuid4().hex
    started = time.perf_counter()
    season_id = str(season_id)
    weeks = [str(week) for week in week_ids] if week_ids else []
    if not weeks and week_nums:
        weeks = store.resolve_week_ids(season_id, week_nums)
        if not weeks:
            logger.warning(
                "Season %s has no weeks numbered %s; nothing to update",
                season_id,
                ", ".join(str(num) for num in week_nums),
            )

    records = store.load_season(season_id)
    presence = build_presence(records)
    if week_nums and not weeks:
        grouped = GroupedSeason()
    else:
        grouped = group_player_days(records, week_ids=weeks or None)
    logger.info(
        "Season %s: %s rows loaded, %s groups selected%s",
        season_id,
        len(records),
        len(grouped.groups),
        f" (weeks {', '.join(weeks)})" if weeks else "",
    )
    log_roster_diagnostics(grouped)

    items = list(grouped.groups.items())
    if workers > 1 and len(items) > 1:
        results = _optimize_parallel(items, rules=rules, budget=budget, workers=workers)
    else:
        results = [optimize_group(key, rows, rules=rules, budget=budget) for key, rows in items]

    updates: List[LineupUpdate] = []
    heuristic_groups: List[str] = []
    for result in results:
        if result.heuristic_only:
            heuristic_groups.append(group_label(result.key))
        for row, update in zip(grouped.groups[result.key], result.updates):
            added = compute_added(row, presence)
            updates.append(
                LineupUpdate(
                    row_id=update.row_id,
                    full_pos=update.full_pos,
                    best_pos=update.best_pos,
                    missed_start=update.missed_start,
                    bad_start=update.bad_start,
                    added=added,
                )
            )

    if heuristic_groups:
        logger.warning(
            "%s groups kept a greedy lineup after the search budget ran out: %s",
            len(heuristic_groups),
            ", ".join(heuristic_groups[:10]),
        )

    if not dry_run:
        store.apply_updates(updates)

    summary = BatchSummary(
        run_id=run_id,
        season_id=season_id,
        dry_run=dry_run,
        updated_rows=len(updates),
        skipped_rows=grouped.skipped_count,
        groups=len(items),
        heuristic_groups=sorted(heuristic_groups),
        week_ids=weeks,
        elapsed_seconds=round(time.perf_counter() - started, 3),
    )
    if not dry_run:
        store.save_run(summary)
    logger.info(
        "Season %s %s: %s rows %s, %s skipped, %.2fs",
        season_id,
        "dry run" if dry_run else "run",
        summary.updated_rows,
        "would update" if dry_run else "updated",
        summary.skipped_rows,
        summary.elapsed_seconds,
    )
    return summary
