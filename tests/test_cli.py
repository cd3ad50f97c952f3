import pytest

from dailylineups.cli import main
from dailylineups.persistence import PlayerDayStore


_SEASON_CSV = """id,seasonId,weekId,date,gshlTeamId,playerId,nhlPos,posGroup,dailyPos,GP,GS,IR,IRplus,Rating
1,S1,1,2024-01-04,T1,a,C,F,C,1,1,,,5
2,S1,1,2024-01-05,T1,a,C,F,C,1,1,,,6
3,S1,1,2024-01-05,T1,b,D,D,BN,1,0,,,2
"""


def test_import_batch_and_runs(tmp_path, capsys):
    csv_path = tmp_path / "days.csv"
    csv_path.write_text(_SEASON_CSV, encoding="utf-8")
    db = tmp_path / "cli.sqlite"

    main(["import", str(csv_path), "--db", str(db)])
    assert "Imported 3 player-day rows" in capsys.readouterr().out

    main(["batch", "--season", "S1", "--dry-run", "--db", str(db)])
    assert "3 rows would update" in capsys.readouterr().out

    main(["batch", "--season", "S1", "--db", str(db)])
    assert "3 rows updated" in capsys.readouterr().out
    rows = {record.row_id: record for record in PlayerDayStore(db).load_season("S1")}
    assert rows["3"].full_pos == "D"
    assert rows["3"].missed_start is True
    assert rows["2"].added is None

    main(["runs", "--db", str(db)])
    assert "season=S1 updated=3" in capsys.readouterr().out


def test_optimize_writes_csv_and_profile(tmp_path, capsys):
    csv_path = tmp_path / "roster.csv"
    csv_path.write_text(_SEASON_CSV, encoding="utf-8")
    output = tmp_path / "out" / "lineup.csv"
    profile = tmp_path / "roster.json"

    main(["optimize", str(csv_path), "--roster", "GSHL_2UTIL", "--save-roster", str(profile), "--output", str(output)])

    out = capsys.readouterr().out
    assert "Full" in out and "Best" in out
    assert output.read_text(encoding="utf-8").startswith("playerId,")
    assert profile.exists()

    main(["optimize", str(csv_path), "--roster-file", str(profile)])
    assert "Full" in capsys.readouterr().out


def test_batch_duplicate_ids_exit_nonzero(tmp_path, capsys):
    csv_path = tmp_path / "dupes.csv"
    csv_path.write_text(_SEASON_CSV.replace("\n3,", "\n2,"), encoding="utf-8")
    db = tmp_path / "dupes.sqlite"
    main(["import", str(csv_path), "--db", str(db)])

    with pytest.raises(SystemExit) as excinfo:
        main(["batch", "--season", "S1", "--db", str(db)])
    assert excinfo.value.code == 2
    assert "Batch aborted" in capsys.readouterr().out


def test_roster_names_are_case_insensitive_and_validated(tmp_path, capsys):
    csv_path = tmp_path / "roster.csv"
    csv_path.write_text(_SEASON_CSV, encoding="utf-8")

    main(["optimize", str(csv_path), "--roster", "gshl_2util"])
    assert "Full" in capsys.readouterr().out

    with pytest.raises(SystemExit) as excinfo:
        main(["optimize", str(csv_path), "--roster", "curling"])
    assert excinfo.value.code == 2
    assert "GSHL_2UTIL" in capsys.readouterr().err


def test_import_weeks_and_batch_by_week_number(tmp_path, capsys):
    days = tmp_path / "days.csv"
    days.write_text(_SEASON_CSV, encoding="utf-8")
    weeks = tmp_path / "weeks.csv"
    weeks.write_text("id,seasonId,weekNum\n1,S1,1\n2,S1,\n", encoding="utf-8")
    db = tmp_path / "weeks.sqlite"

    main(["import", str(days), "--db", str(db)])
    main(["import-weeks", str(weeks), "--db", str(db)])
    assert "Imported 1 weeks" in capsys.readouterr().out

    main(["batch", "--season", "S1", "--week-num", "1", "--dry-run", "--db", str(db)])
    assert "3 rows would update" in capsys.readouterr().out
