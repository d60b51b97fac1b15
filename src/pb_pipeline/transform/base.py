"""
Personal Bests Transformer
Turns a driver's recent races into the series → track layout → car hierarchy
of personal bests, optionally enriched with per-record skill analysis.
"""

import logging
import time
from collections.abc import Callable, Sequence
from datetime import UTC, datetime

from pb_pipeline import config
from pb_pipeline.analysis.batch import add_analysis_to_driver_bests
from pb_pipeline.analysis.settings import DEFAULT_ANALYSIS_CONFIG, AnalysisConfig
from pb_pipeline.schemas import (
    DriverBests,
    IgnoredRace,
    RaceRecord,
    TransformContext,
    TransformOptions,
    TransformResult,
    empty_driver_bests,
)
from pb_pipeline.transform.aggregate import aggregate_by_hierarchy, calculate_global_statistics
from pb_pipeline.transform.records import build_personal_best_records, filter_races_by_options

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(UTC)


class PersonalBestsTransformer:
    """
    Orchestrates the personal-bests transformation for one driver.

    Data problems never raise: dropped races land in the result context,
    dropped layouts in warnings, and anything unexpected in errors alongside
    an empty hierarchy.
    """

    def __init__(
        self,
        options: TransformOptions | None = None,
        analysis_config: AnalysisConfig = DEFAULT_ANALYSIS_CONFIG,
        clock: Callable[[], datetime] = _utc_now,
        max_workers: int = config.ANALYSIS_WORKERS,
    ):
        """
        Args:
            options: Race filters and the per-layout race minimum.
            analysis_config: Parameters for the optional skill analysis.
            clock: Source of the run timestamp. Inject a fixed clock for
                reproducible output.
            max_workers: Thread pool size for batch analysis (1 = sequential).
        """
        self.options = options or TransformOptions()
        self.analysis_config = analysis_config
        self.clock = clock
        self.max_workers = max_workers

    def transform(
        self,
        cust_id: int,
        driver_name: str,
        races: Sequence[RaceRecord],
        current_rating: int | None = None,
    ) -> TransformResult:
        """
        Execute the full transformation.

        Workflow:
        1. Filter races by the configured options.
        2. Build one candidate record per surviving race.
        3. Aggregate into the series hierarchy and compute driver totals.
        4. If current_rating is given, attach skill analyses.

        Args:
            cust_id: Driver id.
            driver_name: Driver display name.
            races: The driver's races, in the order they should be considered.
            current_rating: Driver's current rating; None skips analysis.
        """
        started = time.perf_counter()
        transformed_at = self.clock()

        logger.info(f"🏁 Transforming {len(races)} races for driver {cust_id}")

        ignored: list[IgnoredRace] = []
        warnings: list[str] = []

        try:
            filtered, dropped = filter_races_by_options(races, self.options)
            ignored.extend(dropped)
            records, unbuilt = build_personal_best_records(filtered)
            ignored.extend(unbuilt)

            logger.info(
                f"📊 Built {len(records)} candidate records "
                f"({len(ignored)} races ignored). Aggregating..."
            )

            series_bests, layout_warnings = aggregate_by_hierarchy(records, self.options.min_races)
            warnings.extend(layout_warnings)
            stats = calculate_global_statistics(series_bests, records)

            personal_bests = DriverBests(
                cust_id=cust_id,
                driver_name=driver_name,
                last_updated=transformed_at,
                series_bests=series_bests,
                total_races=stats.total_races,
                total_series=len(series_bests),
                total_track_layouts=stats.total_track_layouts,
                total_cars=stats.total_cars,
                fastest_lap_overall=stats.fastest_lap_overall,
                fastest_lap_overall_ms=stats.fastest_lap_overall_ms,
                fastest_lap_track=stats.fastest_lap_track,
                fastest_lap_car=stats.fastest_lap_car,
            )

            if current_rating is not None:
                personal_bests = add_analysis_to_driver_bests(
                    personal_bests,
                    filtered,
                    current_rating,
                    self.analysis_config,
                    self.max_workers,
                    calculated_at=transformed_at,
                )

        except Exception as e:
            logger.error(f"❌ Transformation failed for driver {cust_id}: {e}", exc_info=True)
            return TransformResult(
                personal_bests=empty_driver_bests(cust_id, driver_name, transformed_at),
                context=TransformContext(
                    source_race_count=len(races),
                    transformed_at=transformed_at,
                    processing_time_ms=self._elapsed_ms(started),
                    ignored_races=ignored,
                ),
                warnings=warnings,
                errors=[f"Transformation failed: {e}"],
            )

        for warning in warnings:
            logger.warning(f"⚠️ {warning}")

        logger.info(
            f"✅ Personal bests ready: {personal_bests.total_series} series, "
            f"{personal_bests.total_track_layouts} layouts, {personal_bests.total_cars} cars"
        )

        return TransformResult(
            personal_bests=personal_bests,
            context=TransformContext(
                source_race_count=len(races),
                transformed_at=transformed_at,
                processing_time_ms=self._elapsed_ms(started),
                ignored_races=ignored,
            ),
            warnings=warnings,
        )

    @staticmethod
    def _elapsed_ms(started: float) -> int:
        return round((time.perf_counter() - started) * 1000)


def transform_races_to_personal_bests(
    cust_id: int,
    driver_name: str,
    races: Sequence[RaceRecord],
    options: TransformOptions | None = None,
    current_rating: int | None = None,
    analysis_config: AnalysisConfig = DEFAULT_ANALYSIS_CONFIG,
) -> TransformResult:
    """Convenience wrapper around PersonalBestsTransformer.transform."""
    transformer = PersonalBestsTransformer(options=options, analysis_config=analysis_config)
    return transformer.transform(cust_id, driver_name, races, current_rating)
