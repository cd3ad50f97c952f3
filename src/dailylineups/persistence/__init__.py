"""Persistence layer for player-day rows and lineup run history."""

from __future__ import annotations

import json
import logging
import os
import sqlite3
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, List, Optional, Sequence

from dailylineups.config.settings import write_chunk_size
from dailylineups.models import BatchSummary, LineupUpdate, PlayerDayRecord, WeekRecord


logger = logging.getLogger(__name__)

DEFAULT_DB_PATH = Path("data") / "dailylineups.sqlite"


class DuplicateRowIdError(RuntimeError):
    """The store holds more than one row for the same row id."""

    def __init__(self, row_ids: Sequence[str]):
        preview = ", ".join(list(row_ids)[:5])
        super().__init__(f"Duplicate row ids in player-day store: {preview}")
        self.row_ids = list(row_ids)


@dataclass
class RunRecord:
    run_id: str
    created_at: datetime
    season_id: str
    dry_run: bool
    summary: dict


def _row_id_sort_key(row_id: str):
    return (0, int(row_id), "") if row_id.isdigit() else (1, 0, row_id)


def _to_flag(value: Optional[bool]) -> Optional[int]:
    return None if value is None else int(bool(value))


def _from_flag(value: Optional[int]) -> Optional[bool]:
    return None if value is None else bool(value)


class PlayerDayStore:
    """SQLite-backed store of per-player-per-day rows."""

    def __init__(self, db_path: Path | str | None = None):
        self._use_uri = False
        env_db = os.getenv("DAILYLINEUPS_DB_PATH")
        if db_path is not None:
            self.db_path = Path(db_path)
        elif env_db and env_db.startswith("file:"):
            self.db_path = env_db
            self._use_uri = True
        elif env_db:
            self.db_path = Path(env_db)
        else:
            self.db_path = DEFAULT_DB_PATH
        self._ensure_schema()

    def _connect(self) -> sqlite3.Connection:
        if isinstance(self.db_path, Path):
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            conn = sqlite3.connect(self.db_path)
        else:
            conn = sqlite3.connect(self.db_path, uri=self._use_uri)
        conn.row_factory = sqlite3.Row
        return conn

    def _ensure_schema(self) -> None:
        with self._connect() as conn:
            self._create_schema(conn)

    def _create_schema(self, conn: sqlite3.Connection) -> None:
        # row_id is not UNIQUE; duplicates are rejected at write time.
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS player_days (
                pk INTEGER PRIMARY KEY AUTOINCREMENT,
                row_id TEXT,
                season_id TEXT,
                week_id TEXT,
                date TEXT,
                team_id TEXT,
                player_id TEXT,
                positions_json TEXT NOT NULL,
                pos_group TEXT,
                daily_pos TEXT,
                gp REAL NOT NULL DEFAULT 0,
                gs REAL NOT NULL DEFAULT 0,
                ir REAL NOT NULL DEFAULT 0,
                ir_plus REAL NOT NULL DEFAULT 0,
                rating REAL NOT NULL DEFAULT 0,
                full_pos TEXT,
                best_pos TEXT,
                missed_start INTEGER,
                bad_start INTEGER,
                added INTEGER
            )
            """
        )
        conn.execute(
            "CREATE INDEX IF NOT EXISTS idx_player_days_season ON player_days (season_id)"
        )
        conn.execute(
            "CREATE INDEX IF NOT EXISTS idx_player_days_row_id ON player_days (row_id)"
        )
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS lineup_runs (
                id TEXT PRIMARY KEY,
                created_at TEXT NOT NULL,
                season_id TEXT NOT NULL,
                dry_run INTEGER NOT NULL,
                summary_json TEXT NOT NULL
            )
            """
        )
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS weeks (
                id TEXT PRIMARY KEY,
                season_id TEXT NOT NULL,
                week_num TEXT NOT NULL
            )
            """
        )
        conn.commit()

    def insert_weeks(self, weeks: Iterable[WeekRecord]) -> int:
        payload = [(week.week_id, week.season_id, week.week_num) for week in weeks]
        if not payload:
            return 0
        with self._connect() as conn:
            conn.executemany(
                "INSERT OR REPLACE INTO weeks (id, season_id, week_num) VALUES (?, ?, ?)",
                payload,
            )
            conn.commit()
        logger.info("Stored %s weeks", len(payload))
        return len(payload)

    def resolve_week_ids(self, season_id: str, week_nums: Iterable[str | int]) -> List[str]:
        """Week ids in ``season_id`` whose week number is one of ``week_nums``."""

        wanted = sorted({str(num).strip() for num in week_nums if str(num).strip()})
        if not wanted:
            return []
        placeholders = ", ".join("?" for _ in wanted)
        with self._connect() as conn:
            rows = conn.execute(
                f"SELECT id FROM weeks WHERE season_id = ? AND week_num IN ({placeholders})",
                (str(season_id), *wanted),
            ).fetchall()
        return sorted((row["id"] for row in rows), key=_row_id_sort_key)

    def insert_player_days(self, records: Iterable[PlayerDayRecord]) -> int:
        payload = [
            (
                record.row_id,
                record.season_id,
                record.week_id,
                record.date,
                record.team_id,
                record.player_id,
                json.dumps(record.positions),
                record.pos_group,
                record.daily_pos,
                record.gp,
                record.gs,
                record.ir,
                record.ir_plus,
                record.rating,
                record.full_pos,
                record.best_pos,
                _to_flag(record.missed_start),
                _to_flag(record.bad_start),
                _to_flag(record.added),
            )
            for record in records
        ]
        if not payload:
            return 0
        with self._connect() as conn:
            conn.executemany(
                """
                INSERT INTO player_days (
                    row_id, season_id, week_id, date, team_id, player_id,
                    positions_json, pos_group, daily_pos, gp, gs, ir, ir_plus, rating,
                    full_pos, best_pos, missed_start, bad_start, added
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                payload,
            )
            conn.commit()
        logger.info("Stored %s player-day rows", len(payload))
        return len(payload)

    def load_season(self, season_id: str) -> List[PlayerDayRecord]:
        with self._connect() as conn:
            rows = conn.execute(
                "SELECT * FROM player_days WHERE season_id = ? ORDER BY pk",
                (str(season_id),),
            ).fetchall()
        return [self._row_to_player_day(row) for row in rows]

    def duplicate_row_ids(self, row_ids: Optional[Iterable[str]] = None) -> List[str]:
        """Row ids stored more than once, optionally limited to ``row_ids``."""

        with self._connect() as conn:
            rows = conn.execute(
                """
                SELECT row_id FROM player_days
                WHERE row_id IS NOT NULL
                GROUP BY row_id HAVING COUNT(*) > 1
                """
            ).fetchall()
        duplicates = [row["row_id"] for row in rows]
        if row_ids is not None:
            wanted = set(row_ids)
            duplicates = [row_id for row_id in duplicates if row_id in wanted]
        return sorted(duplicates, key=_row_id_sort_key)

    def apply_updates(
        self,
        updates: Sequence[LineupUpdate],
        *,
        chunk_size: Optional[int] = None,
    ) -> int:
        """Write lineup output columns by row id, in row-id order and fixed-size chunks.

        Raises ``DuplicateRowIdError`` before writing anything when a target row
        id is ambiguous, either in the store or within ``updates``.
        """

        if not updates:
            return 0
        seen = set()
        repeated = set()
        for update in updates:
            if update.row_id in seen:
                repeated.add(update.row_id)
            seen.add(update.row_id)
        conflicts = sorted(repeated | set(self.duplicate_row_ids(seen)), key=_row_id_sort_key)
        if conflicts:
            raise DuplicateRowIdError(conflicts)

        chunk_size = chunk_size or write_chunk_size()
        ordered = sorted(updates, key=lambda update: _row_id_sort_key(update.row_id))
        written = 0
        with self._connect() as conn:
            for start in range(0, len(ordered), chunk_size):
                chunk = ordered[start:start + chunk_size]
                conn.executemany(
                    """
                    UPDATE player_days
                    SET full_pos = ?, best_pos = ?, missed_start = ?, bad_start = ?, added = ?
                    WHERE row_id = ?
                    """,
                    [
                        (
                            update.full_pos,
                            update.best_pos,
                            _to_flag(update.missed_start),
                            _to_flag(update.bad_start),
                            _to_flag(update.added),
                            update.row_id,
                        )
                        for update in chunk
                    ],
                )
                conn.commit()
                written += len(chunk)
                logger.info("Wrote lineup columns for %s/%s rows", written, len(ordered))
        return written

    def save_run(self, summary: BatchSummary, *, created_at: Optional[datetime] = None) -> None:
        created_at = created_at or datetime.now(timezone.utc)
        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO lineup_runs (id, created_at, season_id, dry_run, summary_json)
                VALUES (?, ?, ?, ?, ?)
                """,
                (
                    summary.run_id,
                    created_at.isoformat(),
                    summary.season_id,
                    int(summary.dry_run),
                    summary.model_dump_json(),
                ),
            )
            conn.commit()

    def get_run(self, run_id: str) -> Optional[RunRecord]:
        with self._connect() as conn:
            row = conn.execute("SELECT * FROM lineup_runs WHERE id = ?", (run_id,)).fetchone()
            if row is None:
                return None
            return self._row_to_run(row)

    def list_runs(self, limit: int = 50) -> List[RunRecord]:
        with self._connect() as conn:
            rows = conn.execute(
                "SELECT * FROM lineup_runs ORDER BY datetime(created_at) DESC LIMIT ?",
                (limit,),
            ).fetchall()
        return [self._row_to_run(row) for row in rows]

    def _row_to_run(self, row: sqlite3.Row) -> RunRecord:
        return RunRecord(
            run_id=row["id"],
            created_at=datetime.fromisoformat(row["created_at"]),
            season_id=row["season_id"],
            dry_run=bool(row["dry_run"]),
            summary=json.loads(row["summary_json"]),
        )

    def _row_to_player_day(self, row: sqlite3.Row) -> PlayerDayRecord:
        return PlayerDayRecord(
            row_id=row["row_id"],
            season_id=row["season_id"],
            week_id=row["week_id"],
            date=row["date"],
            team_id=row["team_id"],
            player_id=row["player_id"],
            positions=json.loads(row["positions_json"]),
            pos_group=row["pos_group"],
            daily_pos=row["daily_pos"],
            gp=row["gp"],
            gs=row["gs"],
            ir=row["ir"],
            ir_plus=row["ir_plus"],
            rating=row["rating"],
            full_pos=row["full_pos"],
            best_pos=row["best_pos"],
            missed_start=_from_flag(row["missed_start"]),
            bad_start=_from_flag(row["bad_start"]),
            added=_from_flag(row["added"]),
        )


__all__ = ["DEFAULT_DB_PATH", "DuplicateRowIdError", "PlayerDayStore", "RunRecord"]
