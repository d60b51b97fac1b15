"""
Race filtering and personal-best record construction.

Both steps return the races/records they kept together with an IgnoredRace
entry for every race they dropped, so each drop stays explainable.
"""

import logging
import math
import re
from collections.abc import Sequence

from pydantic import ValidationError

from pb_pipeline.schemas import (
    IgnoredRace,
    PersonalBestRecord,
    RaceRecord,
    TrackLayoutIdentifier,
    TransformOptions,
)
from pb_pipeline.transform.laps import extract_driver_fastest_lap, lap_time_to_ms
from pb_pipeline.transform.layout import extract_track_layout_identifier

logger = logging.getLogger(__name__)

_WHITESPACE = re.compile(r"\s+")


def create_personal_best_record(
    race: RaceRecord,
    identifier: TrackLayoutIdentifier,
    fastest_lap: str,
) -> PersonalBestRecord | None:
    """
    Convert one race into a candidate personal-best record.

    Returns:
        The record, or None if the lap time is unusable or the record fails validation.
    """
    fastest_lap_ms = lap_time_to_ms(fastest_lap)
    if fastest_lap_ms <= 0 or not math.isfinite(fastest_lap_ms):
        return None

    try:
        return PersonalBestRecord(
            id=f"{race.id}_{identifier.track_id}_{_WHITESPACE.sub('_', race.car)}",
            track_id=identifier.track_id,
            track_name=identifier.track_name,
            config_name=identifier.config_name,
            car_name=race.car,
            fastest_lap=fastest_lap,
            fastest_lap_ms=int(fastest_lap_ms),
            series_name=race.series_name,
            category=race.category,
            subsession_id=race.id,
            race_date=race.date,
            year=race.year,
            season=race.season,
            strength_of_field=race.strength_of_field,
            finish_position=race.finish_position,
            total_race_incidents=race.incidents,
        )
    except ValidationError as e:
        logger.debug(f"Record validation failed for race {race.id}: {e}")
        return None


def filter_races_by_options(
    races: Sequence[RaceRecord],
    options: TransformOptions,
) -> tuple[list[RaceRecord], list[IgnoredRace]]:
    """
    Apply category, series, date-range and SoF filters in that order.

    The first failing filter names the reason a race was dropped.
    """
    kept: list[RaceRecord] = []
    ignored: list[IgnoredRace] = []

    for race in races:
        reason = _filter_reason(race, options)
        if reason is None:
            kept.append(race)
        else:
            ignored.append(IgnoredRace(race_id=race.id, reason=reason))

    return kept, ignored


def _filter_reason(race: RaceRecord, options: TransformOptions) -> str | None:
    if options.category_filter is not None and race.category not in options.category_filter:
        return f"Category {race.category} not in filter"

    if options.series_filter is not None and race.series_name not in options.series_filter:
        return f"Series {race.series_name} not in filter"

    if options.date_from is not None and race.date < options.date_from:
        return "Race date before filter range"

    if options.date_to is not None and race.date > options.date_to:
        return "Race date after filter range"

    if options.min_strength_of_field and race.strength_of_field < options.min_strength_of_field:
        return f"SoF {race.strength_of_field} below minimum"

    return None


def build_personal_best_records(
    races: Sequence[RaceRecord],
) -> tuple[list[PersonalBestRecord], list[IgnoredRace]]:
    """Build one candidate record per race, preserving input order."""
    records: list[PersonalBestRecord] = []
    ignored: list[IgnoredRace] = []

    for race in races:
        identifier = extract_track_layout_identifier(race)
        if identifier is None:
            ignored.append(IgnoredRace(race_id=race.id, reason="Invalid track layout identifier"))
            continue

        fastest_lap = extract_driver_fastest_lap(race)
        if fastest_lap is None:
            ignored.append(IgnoredRace(race_id=race.id, reason="No valid fastest lap found"))
            continue

        record = create_personal_best_record(race, identifier, fastest_lap)
        if record is None:
            ignored.append(
                IgnoredRace(race_id=race.id, reason="Failed to create personal best record")
            )
            continue

        records.append(record)

    return records, ignored
