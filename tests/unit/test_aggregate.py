import math
from datetime import UTC, datetime

from conftest import make_race

from pb_pipeline.transform.aggregate import (
    aggregate_by_hierarchy,
    calculate_global_statistics,
    create_series_bests,
    create_track_layout_bests,
    find_personal_bests_by_car,
    group_records_by_track_layout,
)
from pb_pipeline.transform.records import build_personal_best_records


def _records(*races):
    records, _ = build_personal_best_records(list(races))
    return records


def test_find_personal_bests_by_car_picks_fastest() -> None:
    records = _records(
        make_race(race_id="1", fastest_lap="1:25.123"),
        make_race(race_id="2", fastest_lap="1:24.789"),
        make_race(race_id="3", fastest_lap="1:26.000"),
    )
    bests = find_personal_bests_by_car(records)
    assert bests["McLaren MP4-30"].subsession_id == "2"


def test_find_personal_bests_by_car_first_seen_wins_tie() -> None:
    records = _records(
        make_race(race_id="first", fastest_lap="1:25.000"),
        make_race(race_id="second", fastest_lap="1:25.000"),
    )
    assert find_personal_bests_by_car(records)["McLaren MP4-30"].subsession_id == "first"
    assert (
        find_personal_bests_by_car(list(reversed(records)))["McLaren MP4-30"].subsession_id
        == "second"
    )


def test_group_records_by_track_layout_splits_configs() -> None:
    records = _records(
        make_race(race_id="1", config_name="Grand Prix"),
        make_race(race_id="2", config_name="National"),
        make_race(race_id="3", config_name="Grand Prix"),
    )
    grouped = group_records_by_track_layout(records)
    assert len(grouped) == 2
    assert [len(bucket) for bucket in grouped.values()] == [2, 1]


def test_create_track_layout_bests() -> None:
    records = _records(
        make_race(race_id="1", car="Car A", fastest_lap="1:25.000",
                  date=datetime(2024, 1, 1, tzinfo=UTC)),
        make_race(race_id="2", car="Car B", fastest_lap="1:24.000",
                  date=datetime(2024, 2, 1, tzinfo=UTC)),
        make_race(race_id="3", car="Car A", fastest_lap="1:26.000",
                  date=datetime(2024, 3, 1, tzinfo=UTC)),
    )
    layout = create_track_layout_bests("key", records)

    assert layout is not None
    assert set(layout.car_bests) == {"Car A", "Car B"}
    assert layout.total_races == 3
    assert layout.fastest_overall == "1:24.000"
    assert layout.fastest_overall_ms == 84_000
    # Most recent across every race on the layout, not just the winners
    assert layout.most_recent_race == datetime(2024, 3, 1, tzinfo=UTC)


def test_create_track_layout_bests_empty() -> None:
    assert create_track_layout_bests("key", []) is None


def test_create_series_bests_rollups() -> None:
    records = _records(
        make_race(race_id="1", track_name="Silverstone", fastest_lap="1:25.000",
                  strength_of_field=2000),
        make_race(race_id="2", track_name="Spa", fastest_lap="2:15.000",
                  strength_of_field=3000),
        make_race(race_id="3", track_name="Spa", fastest_lap="2:16.000",
                  strength_of_field=1000),
    )
    layouts = [
        create_track_layout_bests(key, bucket)
        for key, bucket in group_records_by_track_layout(records).items()
    ]
    series = create_series_bests("Formula A", layouts)

    assert series is not None
    assert series.total_races == 3
    assert series.unique_track_layouts == 2
    assert series.unique_cars == 1
    # Averaged over winning records only
    assert series.average_sof == 2500
    assert series.best_overall_lap == "1:25.000"
    assert series.model_dump(by_alias=True)["averageSoF"] == 2500


def test_aggregate_by_hierarchy_groups_series() -> None:
    records = _records(
        make_race(race_id="1", series_name="Formula A", track_name="Silverstone"),
        make_race(race_id="2", series_name="GT3 Challenge", track_name="Spa",
                  category="Sports Car", car="Ferrari 296 GT3"),
    )
    series_bests, warnings = aggregate_by_hierarchy(records)
    assert list(series_bests) == ["Formula A", "GT3 Challenge"]
    assert series_bests["GT3 Challenge"].category == "Sports Car"
    assert warnings == []


def test_aggregate_by_hierarchy_min_races() -> None:
    records = _records(
        make_race(race_id="1", track_name="Silverstone"),
        make_race(race_id="2", track_name="Silverstone"),
        make_race(race_id="3", track_name="Spa"),
    )
    series_bests, warnings = aggregate_by_hierarchy(records, min_races=2)

    layouts = series_bests["Formula A"].track_layout_bests
    assert [layout.track_name for layout in layouts.values()] == ["Silverstone"]
    assert len(warnings) == 1
    assert "has only 1 races, minimum is 2" in warnings[0]


def test_calculate_global_statistics() -> None:
    records = _records(
        make_race(race_id="1", track_name="Silverstone", car="McLaren", fastest_lap="1:25.123"),
        make_race(race_id="2", track_name="Spa", car="Ferrari", fastest_lap="1:45.456",
                  series_name="GT3 Challenge", category="Sports Car"),
        make_race(race_id="3", track_name="Silverstone", car="McLaren", fastest_lap="1:24.789"),
    )
    series_bests, _ = aggregate_by_hierarchy(records)
    stats = calculate_global_statistics(series_bests, records)

    assert stats.total_races == 3
    assert stats.total_track_layouts == 2
    assert stats.total_cars == 2
    assert stats.fastest_lap_overall == "1:24.789"
    assert stats.fastest_lap_track == "Silverstone"
    assert stats.fastest_lap_car == "McLaren"


def test_calculate_global_statistics_empty() -> None:
    stats = calculate_global_statistics({}, [])
    assert stats.total_races == 0
    assert stats.fastest_lap_overall == "N/A"
    assert stats.fastest_lap_overall_ms == math.inf


def test_aggregation_does_not_modify_input() -> None:
    records = _records(make_race(race_id="1"), make_race(race_id="2", fastest_lap="1:20.000"))
    snapshot = [r.model_dump() for r in records]
    aggregate_by_hierarchy(records)
    assert [r.model_dump() for r in records] == snapshot


def test_calculate_global_statistics_counts_dropped_layouts() -> None:
    records = _records(
        make_race(race_id="1", track_name="Silverstone", car="McLaren"),
        make_race(race_id="2", track_name="Silverstone", car="McLaren"),
        make_race(race_id="3", track_name="Spa", car="Ferrari"),
    )
    series_bests, _ = aggregate_by_hierarchy(records, min_races=2)
    stats = calculate_global_statistics(series_bests, records)

    assert stats.total_track_layouts == 1
    assert stats.total_races == 3
    assert stats.total_cars == 2
