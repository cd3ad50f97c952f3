from datetime import date, datetime, timezone

import pytest

from dailylineups.config import SearchBudget
from dailylineups.models import LineupUpdate, PlayerDayRecord, WeekRecord
from dailylineups.persistence import DuplicateRowIdError, PlayerDayStore
from dailylineups.season import build_presence, compute_added, group_player_days, normalize_date, run_season


def _row(row_id, player_id, day, *, team="T1", week="1", positions="C", daily_pos="C", gp=1, gs=1, rating=5.0, season="S1"):
    return PlayerDayRecord(
        row_id=row_id,
        season_id=season,
        week_id=week,
        date=day,
        team_id=team,
        player_id=player_id,
        positions=positions,
        daily_pos=daily_pos,
        gp=gp,
        gs=gs,
        rating=rating,
    )


@pytest.fixture()
def store(tmp_path):
    return PlayerDayStore(tmp_path / "lineups.sqlite")


def _stored(store, season="S1"):
    return {record.row_id: record for record in store.load_season(season)}


@pytest.mark.parametrize(
    "value, expected",
    [
        ("2024-01-05", "2024-01-05"),
        ("2024-01-05T23:30:00", "2024-01-05"),
        ("2024-01-05T23:30:00-05:00", "2024-01-06"),
        ("01/05/2024", "2024-01-05"),
        (date(2024, 1, 5), "2024-01-05"),
        (datetime(2024, 1, 5, 12, tzinfo=timezone.utc), "2024-01-05"),
        ("2024-02-30", None),
        ("yesterday", None),
        ("", None),
        (None, None),
    ],
)
def test_normalize_date(value, expected):
    assert normalize_date(value) == expected


def test_grouping_counts_rows_missing_keys():
    records = [
        _row("1", "a", "2024-01-05"),
        _row("2", "b", "2024-01-05T10:00:00"),
        _row("3", "c", "2024-01-05", team="T2"),
        _row("4", "d", None),
        _row("5", "e", "2024-01-05", team=None),
        _row("6", None, "2024-01-05"),
    ]
    grouped = group_player_days(records)

    assert set(grouped.groups) == {("2024-01-05", "T1"), ("2024-01-05", "T2")}
    assert [r.player_id for r in grouped.groups[("2024-01-05", "T1")]] == ["a", "b"]
    assert grouped.skipped_count == 3


def test_grouping_week_filter_ignores_other_weeks():
    records = [_row("1", "a", "2024-01-05", week="1"), _row("2", "a", "2024-01-12", week="2")]
    grouped = group_player_days(records, week_ids=["2"])
    assert list(grouped.groups) == [("2024-01-12", "T1")]
    assert grouped.skipped_count == 0


def test_added_flag_uses_previous_day_on_same_team():
    records = [
        _row("1", "stay", "2024-01-04"),
        _row("2", "stay", "2024-01-05"),
        _row("3", "new", "2024-01-05"),
        _row("4", "moved", "2024-01-04", team="T2"),
        _row("5", "moved", "2024-01-05"),
    ]
    presence = build_presence(records)

    assert compute_added(records[1], presence) is None
    assert compute_added(records[2], presence) is True
    assert compute_added(records[4], presence) is True
    assert compute_added(_row("6", "x", "not a date"), presence) is None


def test_run_season_writes_lineup_columns(store):
    store.insert_player_days(
        [
            _row("10", "c1", "2024-01-04", rating=7.0),
            _row("11", "c1", "2024-01-05", rating=7.0),
            _row("12", "c2", "2024-01-05", daily_pos="BN", gs=0, rating=9.0),
            _row("13", "c3", "2024-01-05", daily_pos="C", gs=1, rating=1.0),
            _row("15", "idle", "2024-01-05", daily_pos="BN", gp=0, gs=0, rating=50.0),
            _row("16", "lost", None),
        ]
    )

    summary = run_season(store, "S1")

    assert summary.updated_rows == 5
    assert summary.skipped_rows == 1
    assert summary.groups == 2
    assert not summary.dry_run

    rows = _stored(store)
    assert rows["11"].added is None
    assert rows["12"].added is True
    assert rows["10"].added is True
    assert rows["12"].full_pos == "Util"
    assert rows["12"].missed_start is True
    assert rows["13"].best_pos == "BN"
    assert rows["13"].bad_start is True
    assert rows["15"].full_pos == "BN"
    assert rows["15"].best_pos == "C"
    assert rows["16"].full_pos is None

    runs = store.list_runs()
    assert [run.run_id for run in runs] == [summary.run_id]
    assert runs[0].summary["updated_rows"] == 5


def test_dry_run_leaves_store_untouched(store):
    store.insert_player_days([_row("1", "a", "2024-01-05"), _row("2", "b", "2024-01-05")])

    summary = run_season(store, "S1", dry_run=True)

    assert summary.dry_run
    assert summary.updated_rows == 2
    assert all(record.full_pos is None for record in store.load_season("S1"))
    assert store.list_runs() == []


def test_duplicate_row_ids_abort_before_writing(store):
    store.insert_player_days(
        [
            _row("1", "a", "2024-01-05"),
            _row("1", "b", "2024-01-05"),
            _row("2", "c", "2024-01-06"),
        ]
    )

    with pytest.raises(DuplicateRowIdError) as excinfo:
        run_season(store, "S1")

    assert excinfo.value.row_ids == ["1"]
    assert all(record.full_pos is None for record in store.load_season("S1"))
    assert store.list_runs() == []


def test_week_filter_still_looks_back_into_earlier_weeks(store):
    store.insert_player_days(
        [
            _row("1", "a", "2024-01-07", week="1"),
            _row("2", "a", "2024-01-08", week="2"),
            _row("3", "b", "2024-01-08", week="2"),
        ]
    )

    summary = run_season(store, "S1", week_ids=["2"])

    rows = _stored(store)
    assert summary.week_ids == ["2"]
    assert summary.updated_rows == 2
    assert rows["1"].full_pos is None
    assert rows["2"].added is None
    assert rows["3"].added is True


def test_budget_overrun_is_reported_per_group(store):
    trap = [
        ("1", "X", ["LW", "C"], 100),
        ("2", "L1", "LW", 90),
        ("3", "L2", "LW", 85),
        ("4", "L3", "LW", 80),
        ("5", "C1", "C", 60),
        ("6", "C2", "C", 55),
    ]
    store.insert_player_days(
        [
            _row(row_id, player, "2024-01-05", positions=pos, daily_pos="BN", gp=0, gs=0, rating=rating)
            for row_id, player, pos, rating in trap
        ]
    )

    summary = run_season(store, "S1", budget=SearchBudget(max_nodes=1, timeout_seconds=None))

    assert summary.heuristic_groups == ["2024-01-05|T1"]
    assert _stored(store)["4"].best_pos == "BN"


def test_parallel_workers_match_serial_results(tmp_path):
    records = [
        _row(str(idx), f"p{idx % 4}", f"2024-01-{day:02d}", team=team, positions=["C", "LW", "RW", "D"][idx % 4], rating=idx)
        for idx, (day, team) in enumerate((d, t) for d in range(1, 5) for t in ("T1", "T2"))
    ]
    serial_store = PlayerDayStore(tmp_path / "serial.sqlite")
    parallel_store = PlayerDayStore(tmp_path / "parallel.sqlite")
    serial_store.insert_player_days(records)
    parallel_store.insert_player_days(records)

    serial = run_season(serial_store, "S1")
    parallel = run_season(parallel_store, "S1", workers=2)

    assert parallel.updated_rows == serial.updated_rows == len(records)
    serial_rows = _stored(serial_store)
    for row_id, record in _stored(parallel_store).items():
        assert record.full_pos == serial_rows[row_id].full_pos
        assert record.best_pos == serial_rows[row_id].best_pos
        assert record.added == serial_rows[row_id].added


def test_apply_updates_writes_in_chunks(store):
    store.insert_player_days([_row(str(idx), f"p{idx}", "2024-01-05") for idx in range(5)])
    updates = [
        LineupUpdate(row_id=str(idx), full_pos="C", best_pos="C", missed_start=False, bad_start=False, added=True)
        for idx in reversed(range(5))
    ]

    assert store.apply_updates(updates, chunk_size=2) == 5
    assert {record.full_pos for record in store.load_season("S1")} == {"C"}


def test_apply_updates_rejects_repeated_row_ids(store):
    store.insert_player_days([_row("1", "a", "2024-01-05")])
    update = LineupUpdate(row_id="1", full_pos="C", best_pos="C", missed_start=False, bad_start=False, added=None)
    with pytest.raises(DuplicateRowIdError):
        store.apply_updates([update, update])


def test_week_numbers_resolve_through_week_table(store):
    store.insert_weeks(
        [
            WeekRecord(week_id="w10", season_id="S1", week_num=1),
            WeekRecord(week_id="w11", season_id="S1", week_num=2),
            WeekRecord(week_id="w99", season_id="S2", week_num=2),
        ]
    )
    store.insert_player_days(
        [
            _row("1", "a", "2024-01-07", week="w10"),
            _row("2", "a", "2024-01-14", week="w11"),
        ]
    )

    assert store.resolve_week_ids("S1", [2, "2"]) == ["w11"]

    summary = run_season(store, "S1", week_nums=[2])

    rows = _stored(store)
    assert summary.week_ids == ["w11"]
    assert summary.updated_rows == 1
    assert rows["1"].full_pos is None
    assert rows["2"].full_pos == "C"


def test_unknown_week_numbers_select_nothing(store, caplog):
    store.insert_player_days([_row("1", "a", "2024-01-07", week="w10")])

    with caplog.at_level("WARNING"):
        summary = run_season(store, "S1", week_nums=[7], dry_run=True)

    assert summary.groups == 0
    assert summary.updated_rows == 0
    assert "no weeks numbered 7" in caplog.text
