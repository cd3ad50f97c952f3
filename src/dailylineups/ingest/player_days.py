"""Helpers to load player-day CSVs and emit canonical records."""

from __future__ import annotations

import csv
import logging
from pathlib import Path
from typing import Iterable, List, Mapping, Optional, Sequence

from pydantic import BaseModel

from dailylineups.models import LineupCandidate, PlayerDayRecord


logger = logging.getLogger(__name__)


class PlayerDayRow(BaseModel):
    """Raw string values pulled from one CSV row through a column mapping."""

    raw_row_id: Optional[str] = None
    raw_season_id: Optional[str] = None
    raw_week_id: Optional[str] = None
    raw_date: Optional[str] = None
    raw_team_id: Optional[str] = None
    raw_player_id: Optional[str] = None
    raw_positions: Optional[str] = None
    raw_pos_group: Optional[str] = None
    raw_daily_pos: Optional[str] = None
    raw_gp: Optional[str] = None
    raw_gs: Optional[str] = None
    raw_ir: Optional[str] = None
    raw_ir_plus: Optional[str] = None
    raw_rating: Optional[str] = None

    @classmethod
    def from_mapping(cls, row: Mapping[str, str], mapping: Mapping[str, str]) -> "PlayerDayRow":
        def extract(spec: Optional[str | Sequence[str]]) -> Optional[str]:
            if spec is None:
                return None
            columns = [spec] if isinstance(spec, str) else list(spec)
            for column in columns:
                value = row.get(column)
                if value is not None and value.strip():
                    return value.strip()
            return None

        def parse_spec(key: str) -> Optional[str | Sequence[str]]:
            spec = mapping.get(key, DEFAULT_PLAYER_DAY_MAPPING.get(key))
            if isinstance(spec, str) and "|" in spec:
                return tuple(part.strip() for part in spec.split("|"))
            return spec

        return cls(**{f"raw_{key}": extract(parse_spec(key)) for key in DEFAULT_PLAYER_DAY_MAPPING})


# Alternatives are separated by "|"; the first non-empty column wins.
DEFAULT_PLAYER_DAY_MAPPING = {
    "row_id": "id",
    "season_id": "seasonId",
    "week_id": "weekId",
    "date": "date",
    "team_id": "gshlTeamId",
    "player_id": "playerId",
    "positions": "nhlPos",
    "pos_group": "posGroup",
    "daily_pos": "dailyPos",
    "gp": "GP",
    "gs": "GS",
    "ir": "IR",
    "ir_plus": "IRplus|IR+",
    "rating": "Rating",
}


def load_player_day_csv(path: Path, *, mapping: Mapping[str, str] | None = None) -> List[PlayerDayRow]:
    mapping = mapping or DEFAULT_PLAYER_DAY_MAPPING
    with path.open(newline="", encoding="utf-8") as f:
        reader = csv.DictReader(f)
        rows = [PlayerDayRow.from_mapping(row, mapping) for row in reader]
    return rows


def rows_to_records(
    rows: Iterable[PlayerDayRow],
    *,
    season_id: str | None = None,
) -> List[PlayerDayRecord]:
    """Convert raw rows; ``season_id`` fills rows that carry none."""

    records: List[PlayerDayRecord] = []
    for row in rows:
        records.append(
            PlayerDayRecord(
                row_id=row.raw_row_id,
                season_id=row.raw_season_id or season_id,
                week_id=row.raw_week_id,
                date=row.raw_date,
                team_id=row.raw_team_id,
                player_id=row.raw_player_id,
                positions=row.raw_positions,
                pos_group=row.raw_pos_group,
                daily_pos=row.raw_daily_pos,
                gp=row.raw_gp,
                gs=row.raw_gs,
                ir=row.raw_ir,
                ir_plus=row.raw_ir_plus,
                rating=row.raw_rating,
            )
        )
    return records


def load_player_days_from_csv(
    path: Path,
    *,
    mapping: Mapping[str, str] | None = None,
    season_id: str | None = None,
) -> List[PlayerDayRecord]:
    return rows_to_records(load_player_day_csv(path, mapping=mapping), season_id=season_id)


def records_to_candidates(records: Iterable[PlayerDayRecord]) -> List[LineupCandidate]:
    """Candidates for a single lineup; rows without a player id are dropped with a warning."""

    candidates: List[LineupCandidate] = []
    missing = 0
    for record in records:
        if not record.player_id:
            missing += 1
            continue
        candidates.append(record.to_candidate())
    if missing:
        logger.warning("Dropped %s roster rows without a player id", missing)
    return candidates


def load_roster_csv(path: Path, *, mapping: Mapping[str, str] | None = None) -> List[LineupCandidate]:
    return records_to_candidates(load_player_days_from_csv(path, mapping=mapping))
