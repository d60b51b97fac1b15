"""
Batch skill analysis over a driver's personal bests.
"""

import logging
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor
from datetime import UTC, datetime

from pb_pipeline import config as settings
from pb_pipeline.analysis.analyzer import analyze_personal_best, build_analysis_context
from pb_pipeline.analysis.settings import DEFAULT_ANALYSIS_CONFIG, AnalysisConfig
from pb_pipeline.schemas import (
    AnalysisOutcome,
    AnalysisSummary,
    DriverBests,
    PersonalBestRecord,
    RaceRecord,
)

logger = logging.getLogger(__name__)


def _missing_race_outcome(record: PersonalBestRecord, current_rating: int) -> AnalysisOutcome:
    return AnalysisOutcome(
        context=build_analysis_context(
            record, current_rating, warnings=["Race data not found for analysis"]
        ),
        success=False,
        errors=["Race data not available for subsession"],
    )


def analyze_batch(
    records: Sequence[PersonalBestRecord],
    races: Sequence[RaceRecord],
    current_rating: int,
    config: AnalysisConfig = DEFAULT_ANALYSIS_CONFIG,
    max_workers: int = settings.ANALYSIS_WORKERS,
    calculated_at: datetime | None = None,
) -> dict[str, AnalysisOutcome]:
    """
    Analyze every record against the race it was set in.

    Races are matched by subsession id. Records are independent, so with
    max_workers > 1 they run on a thread pool; the returned mapping is always
    keyed by record id in input order.
    """
    calculated_at = calculated_at or datetime.now(UTC)
    races_by_id = {race.id: race for race in races}

    def _analyze(record: PersonalBestRecord) -> AnalysisOutcome:
        race = races_by_id.get(record.subsession_id)
        if race is None:
            return _missing_race_outcome(record, current_rating)
        return analyze_personal_best(record, race, current_rating, config, calculated_at)

    if max_workers > 1 and len(records) > 1:
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            outcomes = list(executor.map(_analyze, records))
    else:
        outcomes = [_analyze(record) for record in records]

    return {record.id: outcome for record, outcome in zip(records, outcomes, strict=True)}


def add_analysis_to_driver_bests(
    driver_bests: DriverBests,
    races: Sequence[RaceRecord],
    current_rating: int,
    config: AnalysisConfig = DEFAULT_ANALYSIS_CONFIG,
    max_workers: int = settings.ANALYSIS_WORKERS,
    calculated_at: datetime | None = None,
) -> DriverBests:
    """
    Return a copy of the hierarchy with analyses attached.

    Records whose analysis failed are carried over unchanged. The input tree
    is never modified.
    """
    records = list(driver_bests.iter_records())
    logger.info(f"🔬 Analyzing {len(records)} personal bests at rating {current_rating}")

    outcomes = analyze_batch(records, races, current_rating, config, max_workers, calculated_at)

    series_bests = {}
    for series_name, series in driver_bests.series_bests.items():
        layouts = {}
        for layout_key, layout in series.track_layout_bests.items():
            car_bests = {}
            for car_name, record in layout.car_bests.items():
                outcome = outcomes.get(record.id)
                if outcome is not None and outcome.success and outcome.analysis is not None:
                    record = record.model_copy(update={"analysis": outcome.analysis})
                car_bests[car_name] = record
            layouts[layout_key] = layout.model_copy(update={"car_bests": car_bests})
        series_bests[series_name] = series.model_copy(update={"track_layout_bests": layouts})

    successful = sum(1 for outcome in outcomes.values() if outcome.success)
    failed = len(outcomes) - successful

    if failed:
        logger.warning(f"⚠️ Analysis complete: {successful} successful, {failed} failed")
    else:
        logger.info(f"✅ Analysis complete: {successful} successful, {failed} failed")

    return driver_bests.model_copy(
        update={
            "series_bests": series_bests,
            "analysis_summary": AnalysisSummary(
                total_records=len(records),
                successful_analyses=successful,
                failed_analyses=failed,
            ),
        }
    )
