"""Load the season week table used to resolve week numbers to week ids."""

from __future__ import annotations

import csv
import logging
from pathlib import Path
from typing import List, Mapping

from dailylineups.models import WeekRecord


logger = logging.getLogger(__name__)

DEFAULT_WEEK_MAPPING = {
    "week_id": "id",
    "season_id": "seasonId",
    "week_num": "weekNum",
}


def load_weeks_csv(
    path: Path,
    *,
    mapping: Mapping[str, str] | None = None,
    season_id: str | None = None,
) -> List[WeekRecord]:
    """Read weeks; rows missing an id, season or week number are skipped."""

    columns = {**DEFAULT_WEEK_MAPPING, **(mapping or {})}
    weeks: List[WeekRecord] = []
    skipped = 0
    with path.open(newline="", encoding="utf-8") as f:
        for row in csv.DictReader(f):
            values = {key: (row.get(column) or "").strip() for key, column in columns.items()}
            values["season_id"] = values["season_id"] or (season_id or "")
            if not all(values.values()):
                skipped += 1
                continue
            weeks.append(WeekRecord(**values))
    if skipped:
        logger.warning("Skipped %s week rows missing an id, season or week number", skipped)
    return weeks
