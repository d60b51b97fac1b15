"""
Flat tabular export of the personal-bests hierarchy.
One row per personal best; analysis columns are null when not analyzed.
"""

import logging
from pathlib import Path
from typing import Literal

import polars as pl

from pb_pipeline.schemas import DriverBests

logger = logging.getLogger(__name__)

ExportFormat = Literal["parquet", "csv", "json"]

PERSONAL_BESTS_SCHEMA = {
    "cust_id": pl.Int64,
    "driver_name": pl.Utf8,
    "series_name": pl.Utf8,
    "category": pl.Utf8,
    "track_layout_key": pl.Utf8,
    "track_name": pl.Utf8,
    "config_name": pl.Utf8,
    "car_name": pl.Utf8,
    "fastest_lap": pl.Utf8,
    "fastest_lap_ms": pl.Int64,
    "subsession_id": pl.Utf8,
    "race_date": pl.Datetime("us", "UTC"),
    "strength_of_field": pl.Int64,
    "finish_position": pl.Int64,
    "layout_total_races": pl.Int64,
    "percentile": pl.Float64,
    "performance_level": pl.Utf8,
    "estimated_rating": pl.Int64,
    "confidence": pl.Int64,
    "rating_delta": pl.Int64,
    "assessment": pl.Utf8,
}


def personal_bests_to_frame(driver_bests: DriverBests) -> pl.DataFrame:
    rows = []
    for series in driver_bests.series_bests.values():
        for layout_key, layout in series.track_layout_bests.items():
            for record in layout.car_bests.values():
                analysis = record.analysis
                rows.append(
                    {
                        "cust_id": driver_bests.cust_id,
                        "driver_name": driver_bests.driver_name,
                        "series_name": series.series_name,
                        "category": record.category,
                        "track_layout_key": layout_key,
                        "track_name": record.track_name,
                        "config_name": record.config_name,
                        "car_name": record.car_name,
                        "fastest_lap": record.fastest_lap,
                        "fastest_lap_ms": record.fastest_lap_ms,
                        "subsession_id": record.subsession_id,
                        "race_date": record.race_date,
                        "strength_of_field": record.strength_of_field,
                        "finish_position": record.finish_position,
                        "layout_total_races": layout.total_races,
                        "percentile": analysis.pace_percentile.percentile if analysis else None,
                        "performance_level": (
                            analysis.pace_percentile.performance_level if analysis else None
                        ),
                        "estimated_rating": (
                            analysis.skill_equivalency.estimated_rating if analysis else None
                        ),
                        "confidence": analysis.skill_equivalency.confidence if analysis else None,
                        "rating_delta": analysis.rating_delta.delta if analysis else None,
                        "assessment": analysis.rating_delta.assessment if analysis else None,
                    }
                )

    return pl.DataFrame(rows, schema=PERSONAL_BESTS_SCHEMA)


def export_personal_bests(
    driver_bests: DriverBests,
    path: str | Path,
    fmt: ExportFormat = "parquet",
) -> pl.DataFrame:
    """
    Write the flattened personal bests to disk.

    Returns:
        The DataFrame that was written.
    """
    df = personal_bests_to_frame(driver_bests)

    logger.info(f"💾 Writing {df.height} personal bests to {path} ({fmt})")

    if fmt == "parquet":
        df.write_parquet(path)
    elif fmt == "csv":
        df.write_csv(path)
    elif fmt == "json":
        df.write_json(path)
    else:
        raise ValueError(f"Unsupported export format: {fmt}")

    return df
