import polars as pl
import pytest
from conftest import make_field, make_race

from pb_pipeline.export import export_personal_bests, personal_bests_to_frame
from pb_pipeline.transform.base import PersonalBestsTransformer


@pytest.fixture
def driver_bests(fixed_clock):
    races = [
        make_race(race_id="1", track_name="Silverstone", car="McLaren", fastest_lap="1:25.000"),
        make_race(
            race_id="2",
            track_name="Spa",
            car="Ferrari",
            participants=make_field([100_000 + i * 500 for i in range(10)]),
        ),
    ]
    transformer = PersonalBestsTransformer(clock=fixed_clock)
    return transformer.transform(42, "Test Driver", races, current_rating=2000).personal_bests


def test_personal_bests_to_frame(driver_bests) -> None:
    df = personal_bests_to_frame(driver_bests)

    assert df.height == 2
    assert df["cust_id"].to_list() == [42, 42]
    assert df["track_name"].to_list() == ["Silverstone", "Spa"]
    assert df["fastest_lap_ms"].to_list() == [85_000, 100_000]
    # Single-entrant race cannot be analyzed
    assert df["estimated_rating"].to_list() == [None, 2500]
    assert df["performance_level"].to_list() == [None, "Elite"]


def test_empty_frame_keeps_schema(fixed_clock) -> None:
    bests = PersonalBestsTransformer(clock=fixed_clock).transform(1, "Driver", []).personal_bests
    df = personal_bests_to_frame(bests)
    assert df.is_empty()
    assert df.schema["fastest_lap_ms"] == pl.Int64


@pytest.mark.parametrize("fmt, reader", [("parquet", pl.read_parquet), ("csv", pl.read_csv)])
def test_export_personal_bests(driver_bests, tmp_path, fmt: str, reader) -> None:
    path = tmp_path / f"bests.{fmt}"
    written = export_personal_bests(driver_bests, path, fmt)

    loaded = reader(path)
    assert loaded.height == written.height == 2
    assert loaded["car_name"].to_list() == ["McLaren", "Ferrari"]


def test_export_unknown_format(driver_bests, tmp_path) -> None:
    with pytest.raises(ValueError, match="Unsupported export format"):
        export_personal_bests(driver_bests, tmp_path / "bests.xml", "xml")
