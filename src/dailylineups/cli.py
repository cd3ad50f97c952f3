"""Command-line interface for daily lineup optimization."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path

from dailylineups.config.roster import DEFAULT_ROSTER, RosterRules, get_rules, iter_rules
from dailylineups.config_loader import RosterProfile
from dailylineups.ingest import load_player_days_from_csv, load_roster_csv, load_weeks_csv
from dailylineups.optimizer import optimize_lineup
from dailylineups.persistence import DuplicateRowIdError, PlayerDayStore
from dailylineups.report import lineup_rows, write_lineup_csv
from dailylineups.season import run_season


def _add_roster_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--roster",
        default=DEFAULT_ROSTER,
        type=str.upper,
        choices=[rules.name for rules in iter_rules()],
        help="Named roster shape",
    )
    parser.add_argument("--roster-file", type=Path, default=None, help="Load roster slots from a JSON profile")


def _add_db_arg(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--db", type=Path, default=None, help="SQLite database path")


def _add_column_arg(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--column",
        action="append",
        default=[],
        help="Mapping for CSV columns (e.g., rating=Rating, ir_plus=IRplus|IR+)",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Optimize daily fantasy hockey lineups")
    parser.add_argument("--verbose", action="store_true", help="Log progress at INFO level")
    commands = parser.add_subparsers(dest="command", required=True)

    optimize = commands.add_parser("optimize", help="Optimize a single team-day roster CSV")
    optimize.add_argument("roster_csv", type=Path, help="Path to roster CSV (one row per player)")
    _add_roster_args(optimize)
    _add_column_arg(optimize)
    optimize.add_argument("--save-roster", type=Path, default=None, help="Save the roster shape as JSON")
    optimize.add_argument("--output", type=Path, default=None, help="Optional output CSV path")

    ingest = commands.add_parser("import", help="Import player-day rows into the store")
    ingest.add_argument("player_days_csv", type=Path, help="Path to player-day CSV")
    ingest.add_argument("--season", default=None, help="Season id for rows that carry none")
    _add_column_arg(ingest)
    _add_db_arg(ingest)

    weeks = commands.add_parser("import-weeks", help="Import the season week table")
    weeks.add_argument("weeks_csv", type=Path, help="Path to week CSV (id, seasonId, weekNum)")
    weeks.add_argument("--season", default=None, help="Season id for rows that carry none")
    _add_column_arg(weeks)
    _add_db_arg(weeks)

    batch = commands.add_parser("batch", help="Recompute lineup columns for a season")
    batch.add_argument("--season", required=True, help="Season id")
    batch.add_argument("--week", action="append", default=[], help="Limit to a week id (repeatable)")
    batch.add_argument(
        "--week-num",
        action="append",
        default=[],
        help="Limit to a week number, resolved through imported weeks (repeatable)",
    )
    batch.add_argument("--dry-run", action="store_true", help="Compute without writing")
    batch.add_argument("--workers", type=int, default=1, help="Worker processes")
    _add_roster_args(batch)
    _add_db_arg(batch)

    runs = commands.add_parser("runs", help="List recent batch runs")
    runs.add_argument("--limit", type=int, default=20, help="Number of runs to show")
    _add_db_arg(runs)
    return parser


def _parse_mapping(entries: list[str]) -> dict[str, str]:
    mapping: dict[str, str] = {}
    for entry in entries:
        if "=" not in entry:
            raise ValueError(f"Invalid mapping entry '{entry}', expected key=value")
        key, value = entry.split("=", 1)
        mapping[key.strip()] = value.strip()
    return mapping


def _resolve_rules(args: argparse.Namespace) -> RosterRules:
    if args.roster_file:
        return RosterProfile.load(args.roster_file).to_rules()
    return get_rules(args.roster)


def _cmd_optimize(args: argparse.Namespace) -> None:
    rules = _resolve_rules(args)
    if args.save_roster:
        RosterProfile.from_rules(rules).save(args.save_roster)
        print(f"Saved roster profile to {args.save_roster}")

    candidates = load_roster_csv(args.roster_csv, mapping=_parse_mapping(args.column) or None)
    outcome = optimize_lineup(candidates, rules=rules, label=args.roster_csv.name)

    print(f"{'player':<14} {'pos':<10} {'daily':<7} {'rating':>8}  {'full':<5} {'best':<5} flags")
    for row in lineup_rows(outcome, rules):
        player_id, positions, daily_pos, _, _, rating, full_pos, best_pos, ms, bs = row
        flags = " ".join(name for name, value in (("MS", ms), ("BS", bs)) if value)
        print(f"{player_id:<14} {positions:<10} {daily_pos:<7} {rating:>8}  {full_pos:<5} {best_pos:<5} {flags}")
    print(
        "Full {:.2f}  Best {:.2f}  Improvement {:+.2f} ({:.1f}%)".format(
            outcome.full_rating,
            outcome.best_rating,
            outcome.improvement_points,
            outcome.improvement_percent,
        )
    )
    if outcome.heuristic_only:
        print("Search budget exceeded; greedy lineup kept")
    if args.output:
        write_lineup_csv(args.output, outcome, rules)
        print(f"Wrote lineup to {args.output}")


def _cmd_import(args: argparse.Namespace) -> None:
    records = load_player_days_from_csv(
        args.player_days_csv,
        mapping=_parse_mapping(args.column) or None,
        season_id=args.season,
    )
    stored = PlayerDayStore(args.db).insert_player_days(records)
    print(f"Imported {stored} player-day rows from {args.player_days_csv}")


def _cmd_import_weeks(args: argparse.Namespace) -> None:
    weeks = load_weeks_csv(
        args.weeks_csv,
        mapping=_parse_mapping(args.column) or None,
        season_id=args.season,
    )
    stored = PlayerDayStore(args.db).insert_weeks(weeks)
    print(f"Imported {stored} weeks from {args.weeks_csv}")


def _cmd_batch(args: argparse.Namespace) -> None:
    store = PlayerDayStore(args.db)
    try:
        summary = run_season(
            store,
            args.season,
            week_ids=args.week or None,
            week_nums=args.week_num or None,
            dry_run=args.dry_run,
            workers=max(1, args.workers),
            rules=_resolve_rules(args),
        )
    except DuplicateRowIdError as exc:
        print(f"Batch aborted: {exc}")
        raise SystemExit(2) from exc

    verb = "would update" if summary.dry_run else "updated"
    print(
        f"Season {summary.season_id}: {summary.groups} lineups, "
        f"{summary.updated_rows} rows {verb}, {summary.skipped_rows} skipped"
    )
    if summary.heuristic_groups:
        preview = ", ".join(summary.heuristic_groups[:5])
        more = len(summary.heuristic_groups) - 5
        suffix = f", +{more} more" if more > 0 else ""
        print(f"Greedy-only lineups (search budget exceeded): {preview}{suffix}")


def _cmd_runs(args: argparse.Namespace) -> None:
    runs = PlayerDayStore(args.db).list_runs(limit=args.limit)
    if not runs:
        print("No runs recorded")
        return
    for run in runs:
        summary = run.summary
        print(
            f"{run.created_at.isoformat()}  {run.run_id}  season={run.season_id} "
            f"updated={summary.get('updated_rows', 0)} skipped={summary.get('skipped_rows', 0)}"
        )


_COMMANDS = {
    "optimize": _cmd_optimize,
    "import": _cmd_import,
    "import-weeks": _cmd_import_weeks,
    "batch": _cmd_batch,
    "runs": _cmd_runs,
}


def main(argv: list[str] | None = None) -> None:
    args = _build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    _COMMANDS[args.command](args)


if __name__ == "__main__":
    main()
