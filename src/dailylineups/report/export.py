"""CSV export helpers for optimized lineups."""

from __future__ import annotations

import csv
from io import StringIO
from pathlib import Path
from typing import List, Optional, Sequence

from dailylineups.config.roster import BENCH, RosterRules, get_rules
from dailylineups.optimizer.service import LineupOutcome, OptimizedPlayer


LINEUP_HEADERS = (
    "playerId",
    "nhlPos",
    "dailyPos",
    "GP",
    "GS",
    "Rating",
    "fullPos",
    "bestPos",
    "MS",
    "BS",
)


def _format_number(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else f"{value:g}"


def _flag(value: bool) -> str:
    return "1" if value else ""


def ordered_players(outcome: LineupOutcome, rules: Optional[RosterRules] = None) -> List[OptimizedPlayer]:
    """Players in roster-slot order of the full lineup, benched players last."""

    rules = rules or get_rules()
    order = {label: idx for idx, label in enumerate(dict.fromkeys(rules.slot_labels))}
    bench_rank = len(order)

    def sort_key(item):
        position, player = item
        rank = bench_rank if player.full_pos == BENCH else order.get(player.full_pos, bench_rank)
        return (rank, -player.candidate.rating, position)

    return [player for _, player in sorted(enumerate(outcome.players), key=sort_key)]


def lineup_rows(outcome: LineupOutcome, rules: Optional[RosterRules] = None) -> List[Sequence[str]]:
    rows: List[Sequence[str]] = []
    for player in ordered_players(outcome, rules):
        candidate = player.candidate
        rows.append(
            (
                candidate.player_id,
                ",".join(candidate.positions),
                candidate.daily_pos,
                _format_number(candidate.gp),
                _format_number(candidate.gs),
                _format_number(candidate.rating),
                player.full_pos,
                player.best_pos,
                _flag(player.missed_start),
                _flag(player.bad_start),
            )
        )
    return rows


def lineup_to_csv(outcome: LineupOutcome, rules: Optional[RosterRules] = None) -> str:
    buffer = StringIO()
    writer = csv.writer(buffer)
    writer.writerow(LINEUP_HEADERS)
    writer.writerows(lineup_rows(outcome, rules))
    return buffer.getvalue()


def write_lineup_csv(path: Path, outcome: LineupOutcome, rules: Optional[RosterRules] = None) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(lineup_to_csv(outcome, rules), encoding="utf-8")
