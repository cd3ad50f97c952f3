"""Lightweight REST client for the dailylineups API."""

from __future__ import annotations

import argparse
import csv
import json
from pathlib import Path

import httpx


def read_roster(path: Path) -> list[dict[str, str]]:
    """Roster CSV rows as request payloads, using the stored column names."""

    columns = {
        "playerId": "player_id",
        "nhlPos": "positions",
        "posGroup": "pos_group",
        "dailyPos": "daily_pos",
        "GP": "gp",
        "GS": "gs",
        "IR": "ir",
        "IRplus": "ir_plus",
        "Rating": "rating",
    }
    with path.open(newline="", encoding="utf-8") as f:
        reader = csv.DictReader(f)
        return [
            {field: row[column] for column, field in columns.items() if row.get(column)}
            for row in reader
        ]


def main() -> None:
    parser = argparse.ArgumentParser(description="Interact with the dailylineups REST API")
    parser.add_argument("base_url", help="Base URL of the API, e.g. http://localhost:8000")
    parser.add_argument("roster", type=Path, nargs="?", help="Roster CSV to optimize")
    parser.add_argument("--roster-name", default="GSHL", help="Named roster shape")
    parser.add_argument("--assign-only", action="store_true", help="Request the single-view assignment map")
    parser.add_argument("--season", help="Run the season batch for this season id")
    parser.add_argument("--week", action="append", default=[], help="Week id filter for --season")
    parser.add_argument("--week-num", action="append", default=[], help="Week number filter for --season")
    parser.add_argument("--dry-run", action="store_true", help="Season batch without writing")
    parser.add_argument("--list-runs", action="store_true", help="List recent runs and exit")
    parser.add_argument("--get-run", metavar="RUN_ID", help="Fetch a specific run and exit")
    args = parser.parse_args()

    with httpx.Client(base_url=args.base_url, timeout=None) as client:
        if args.list_runs:
            resp = client.get("/runs")
            resp.raise_for_status()
            print(json.dumps(resp.json(), indent=2))
            return
        if args.get_run:
            resp = client.get(f"/runs/{args.get_run}")
            if resp.status_code == 404:
                raise SystemExit(f"run {args.get_run} not found")
            resp.raise_for_status()
            print(json.dumps(resp.json(), indent=2))
            return
        if args.season:
            payload = {
                "week_ids": args.week or None,
                "week_nums": args.week_num or None,
                "dry_run": args.dry_run,
                "roster": args.roster_name,
            }
            resp = client.post(f"/seasons/{args.season}/lineups", json=payload)
            if resp.status_code == 409:
                raise SystemExit(f"batch aborted: {resp.json().get('detail')}")
            resp.raise_for_status()
            print(json.dumps(resp.json(), indent=2))
            return

        if args.roster is None:
            raise SystemExit("a roster CSV is required unless using --season/--list-runs/--get-run")

        payload = {"roster": args.roster_name, "players": read_roster(args.roster)}
        if args.assign_only:
            resp = client.post("/lineups/assign", json=payload)
            resp.raise_for_status()
            print(json.dumps(resp.json()["assignments"], indent=2))
            return

        resp = client.post("/lineups/optimize", json=payload)
        resp.raise_for_status()
        result = resp.json()
        for player in result["players"]:
            flags = [name for name, key in (("MS", "missed_start"), ("BS", "bad_start")) if player[key]]
            print(f"{player['player_id']:<14} {player['full_pos']:<5} {player['best_pos']:<5} {' '.join(flags)}")
        print("Stats:", json.dumps(result["stats"], indent=2))


if __name__ == "__main__":
    main()
