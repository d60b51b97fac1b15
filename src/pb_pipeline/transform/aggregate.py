"""
Hierarchical aggregation of personal-best records.

records → track layout buckets → best record per car → series groups.
Every step builds new dictionaries; inputs are never modified. Dictionaries
keep insertion order, so "first record seen" is always "first in input order".
"""

import logging
import math
from collections.abc import Sequence
from dataclasses import dataclass

from pb_pipeline.schemas import (
    NO_LAP_TIME,
    PersonalBestRecord,
    SeriesBests,
    TrackLayoutBests,
    TrackLayoutIdentifier,
)
from pb_pipeline.transform.laps import find_fastest_lap_time
from pb_pipeline.transform.layout import generate_track_layout_key

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GlobalStatistics:
    """Driver-level rollups computed from the series hierarchy."""

    total_races: int
    total_track_layouts: int
    total_cars: int
    fastest_lap_overall: str
    fastest_lap_overall_ms: float
    fastest_lap_track: str
    fastest_lap_car: str


def group_records_by_track_layout(
    records: Sequence[PersonalBestRecord],
) -> dict[str, list[PersonalBestRecord]]:
    grouped: dict[str, list[PersonalBestRecord]] = {}
    for record in records:
        key = generate_track_layout_key(
            TrackLayoutIdentifier(
                track_id=record.track_id,
                track_name=record.track_name,
                config_name=record.config_name,
            )
        )
        grouped.setdefault(key, []).append(record)
    return grouped


def find_personal_bests_by_car(
    records: Sequence[PersonalBestRecord],
) -> dict[str, PersonalBestRecord]:
    """
    Pick the fastest record per car.

    Only a strictly faster lap replaces the current best, so on an exact tie
    the record that appears first in the input wins.
    """
    car_bests: dict[str, PersonalBestRecord] = {}
    for record in records:
        current = car_bests.get(record.car_name)
        if current is None or record.fastest_lap_ms < current.fastest_lap_ms:
            car_bests[record.car_name] = record
    return car_bests


def create_track_layout_bests(
    track_layout_key: str,
    records: Sequence[PersonalBestRecord],
) -> TrackLayoutBests | None:
    """Roll up one layout bucket; None for an empty bucket."""
    if not records:
        return None

    first = records[0]
    car_bests = find_personal_bests_by_car(records)
    fastest_overall, fastest_overall_ms = find_fastest_lap_time(
        best.fastest_lap for best in car_bests.values()
    )
    most_recent_race = max(record.race_date for record in records)

    return TrackLayoutBests(
        track_layout_key=track_layout_key,
        track_name=first.track_name,
        config_name=first.config_name,
        track_id=first.track_id,
        category=first.category,
        car_bests=car_bests,
        total_races=len(records),
        fastest_overall=fastest_overall,
        fastest_overall_ms=fastest_overall_ms,
        most_recent_race=most_recent_race,
    )


def group_track_layouts_by_series(
    track_layouts: Sequence[TrackLayoutBests],
) -> dict[str, list[TrackLayoutBests]]:
    """Group layouts under the series of their first car winner."""
    grouped: dict[str, list[TrackLayoutBests]] = {}
    for layout in track_layouts:
        first_best = next(iter(layout.car_bests.values()), None)
        if first_best is None:
            continue
        grouped.setdefault(first_best.series_name, []).append(layout)
    return grouped


def create_series_bests(
    series_name: str,
    track_layouts: Sequence[TrackLayoutBests],
) -> SeriesBests | None:
    if not track_layouts:
        return None

    unique_cars: set[str] = set()
    total_sof = 0
    sof_count = 0
    best_lap = NO_LAP_TIME
    best_lap_ms = math.inf

    for layout in track_layouts:
        for car_best in layout.car_bests.values():
            unique_cars.add(car_best.car_name)
            total_sof += car_best.strength_of_field
            sof_count += 1
            if car_best.fastest_lap_ms < best_lap_ms:
                best_lap_ms = car_best.fastest_lap_ms
                best_lap = car_best.fastest_lap

    return SeriesBests(
        series_name=series_name,
        category=track_layouts[0].category,
        track_layout_bests={layout.track_layout_key: layout for layout in track_layouts},
        total_races=sum(layout.total_races for layout in track_layouts),
        unique_track_layouts=len(track_layouts),
        unique_cars=len(unique_cars),
        average_sof=total_sof / sof_count if sof_count else 0.0,
        best_overall_lap=best_lap,
        best_overall_lap_ms=best_lap_ms,
    )


def aggregate_by_hierarchy(
    records: Sequence[PersonalBestRecord],
    min_races: int | None = None,
) -> tuple[dict[str, SeriesBests], list[str]]:
    """
    Fold candidate records into the series → layout → car hierarchy.

    Args:
        records: Candidate records in input order.
        min_races: Drop layouts with fewer records than this.

    Returns:
        (series name → SeriesBests, warnings for every dropped layout)
    """
    warnings: list[str] = []
    layouts: list[TrackLayoutBests] = []

    for key, bucket in group_records_by_track_layout(records).items():
        if min_races and len(bucket) < min_races:
            warnings.append(
                f"Track layout {key} has only {len(bucket)} races, minimum is {min_races}"
            )
            continue

        layout = create_track_layout_bests(key, bucket)
        if layout is not None:
            layouts.append(layout)

    series_bests: dict[str, SeriesBests] = {}
    for series_name, series_layouts in group_track_layouts_by_series(layouts).items():
        series = create_series_bests(series_name, series_layouts)
        if series is not None:
            series_bests[series_name] = series

    logger.debug(
        f"Aggregated {len(records)} records into {len(layouts)} layouts "
        f"across {len(series_bests)} series"
    )
    return series_bests, warnings


def calculate_global_statistics(
    series_bests: dict[str, SeriesBests],
    records: Sequence[PersonalBestRecord],
) -> GlobalStatistics:
    """
    Driver-level totals and the single fastest lap across every series.

    Race and car counts come from every candidate record, including those on
    layouts dropped by min_races. Layout count and fastest lap come from the
    hierarchy.
    """
    fastest_lap = NO_LAP_TIME
    fastest_ms = math.inf
    fastest_track = ""
    fastest_car = ""

    for series in series_bests.values():
        if series.best_overall_lap_ms < fastest_ms:
            fastest_ms = series.best_overall_lap_ms
            fastest_lap = series.best_overall_lap
            fastest_track, fastest_car = _locate_lap(series, fastest_ms)

    return GlobalStatistics(
        total_races=len(records),
        total_track_layouts=sum(series.unique_track_layouts for series in series_bests.values()),
        total_cars=len({record.car_name for record in records}),
        fastest_lap_overall=fastest_lap,
        fastest_lap_overall_ms=fastest_ms,
        fastest_lap_track=fastest_track,
        fastest_lap_car=fastest_car,
    )


def _locate_lap(series: SeriesBests, lap_ms: float) -> tuple[str, str]:
    for layout in series.track_layout_bests.values():
        for car_best in layout.car_bests.values():
            if car_best.fastest_lap_ms == lap_ms:
                return layout.track_name, car_best.car_name
    return "", ""
