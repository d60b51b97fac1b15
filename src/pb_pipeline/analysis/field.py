"""
Field analysis: the statistical summary of a race's lap-time distribution.
"""

import logging

import polars as pl

from pb_pipeline.analysis.settings import DEFAULT_ANALYSIS_CONFIG, AnalysisConfig
from pb_pipeline.schemas import FieldAnalysis, FieldParticipant, RaceRecord
from pb_pipeline.transform.laps import lap_time_to_ms

logger = logging.getLogger(__name__)

_FIELD_SCHEMA = {
    "cust_id": pl.Int64,
    "display_name": pl.Utf8,
    "lap_time": pl.Utf8,
    "lap_time_ms": pl.Float64,
    "irating": pl.Int64,
    "finish_position": pl.Int64,
}


def _field_frame(race: RaceRecord) -> pl.DataFrame:
    """One row per participant with the parsed fastest lap (inf when unusable)."""
    participants = race.participants
    return pl.DataFrame(
        {
            "cust_id": [p.cust_id for p in participants],
            "display_name": [p.name for p in participants],
            "lap_time": [p.fastest_lap for p in participants],
            "lap_time_ms": [float(lap_time_to_ms(p.fastest_lap)) for p in participants],
            "irating": [p.irating for p in participants],
            "finish_position": [p.finish_position for p in participants],
        },
        schema=_FIELD_SCHEMA,
    )


def extract_field_analysis(
    race: RaceRecord,
    config: AnalysisConfig = DEFAULT_ANALYSIS_CONFIG,
) -> FieldAnalysis | None:
    """
    Summarize a race field for pace comparison.

    Participants without a parseable, positive fastest lap are dropped. A race
    with fewer than config.min_field_size usable lap times yields None, which
    keeps tiny fields from producing confident-looking numbers.

    Returns:
        FieldAnalysis with the cleaned participant list and lap-time statistics,
        or None when the field is too small.
    """
    if len(race.participants) < config.min_field_size:
        return None

    valid = (
        _field_frame(race)
        .filter(pl.col("lap_time_ms").is_finite() & (pl.col("lap_time_ms") > 0))
        .with_columns(pl.col("lap_time_ms").cast(pl.Int64))
    )

    if valid.height < config.min_field_size:
        logger.debug(
            f"Race {race.id}: {valid.height} usable lap times, minimum is {config.min_field_size}"
        )
        return None

    times = valid["lap_time_ms"].sort()

    return FieldAnalysis(
        total_participants=len(race.participants),
        valid_lap_times=valid.height,
        strength_of_field=race.strength_of_field,
        official_session=True,
        participants=[FieldParticipant(**row) for row in valid.iter_rows(named=True)],
        fastest_lap_ms=int(times[0]),
        slowest_lap_ms=int(times[-1]),
        average_lap_ms=float(times.mean()),
        # Upper median: sorted[n // 2]
        median_lap_ms=int(times[len(times) // 2]),
    )
