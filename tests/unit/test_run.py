import json

import polars as pl
import pytest

from pb_pipeline.run import main


def _raw_race(race_id: str, track: str, category: str, lap: str) -> dict:
    return {
        "id": race_id,
        "trackName": track,
        "car": "McLaren MP4-30",
        "seriesName": "Formula A",
        "category": category,
        "date": "2024-03-01T18:00:00Z",
        "year": 2024,
        "strengthOfField": 2000,
        "participants": [{"name": "Test Driver", "custId": 1, "fastestLap": lap}],
    }


@pytest.fixture
def races_file(tmp_path):
    path = tmp_path / "races.json"
    races = [
        _raw_race("1", "Silverstone", "Formula Car", "1:25.123"),
        _raw_race("2", "Spa", "Formula Car", "1:45.456"),
        _raw_race("3", "Silverstone", "Formula Car", "1:24.789"),
        _raw_race("4", "Daytona", "Oval", "0:48.000"),
        _raw_race("5", "Monza", "Formula Car", "N/A"),
    ]
    path.write_text(json.dumps(races), encoding="utf-8")
    return path


def test_main_writes_json(races_file, tmp_path) -> None:
    out = tmp_path / "bests.json"
    code = main(["--races", str(races_file), "--cust-id", "1", "--driver-name", "Test Driver",
                 "--category", "Formula Car", "--out", str(out)])

    assert code == 0
    payload = json.loads(out.read_text(encoding="utf-8"))
    bests = payload["personalBests"]
    assert bests["totalTrackLayouts"] == 2
    assert bests["fastestLapOverall"] == "1:24.789"
    ignored = {i["raceId"]: i["reason"] for i in payload["context"]["ignoredRaces"]}
    assert ignored == {
        "4": "Category Oval not in filter",
        "5": "No valid fastest lap found",
    }


def test_main_writes_parquet(races_file, tmp_path) -> None:
    out = tmp_path / "bests.parquet"
    code = main(["--races", str(races_file), "--cust-id", "1", "--format", "parquet",
                 "--out", str(out)])

    assert code == 0
    assert pl.read_parquet(out).height == 3


def test_main_tabular_requires_out(races_file) -> None:
    assert main(["--races", str(races_file), "--cust-id", "1", "--format", "csv"]) == 1


def test_main_missing_file(tmp_path) -> None:
    assert main(["--races", str(tmp_path / "nope.json"), "--cust-id", "1"]) == 1


def test_main_stdout(races_file, capsys: pytest.CaptureFixture) -> None:
    assert main(["--races", str(races_file), "--cust-id", "1"]) == 0
    assert '"seriesBests"' in capsys.readouterr().out
