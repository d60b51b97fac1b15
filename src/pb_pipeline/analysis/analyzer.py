"""
Skill-equivalency analysis for a single personal best.

Runs field extraction → pace percentile → rating estimate → delta and wraps
the outcome so data gaps come back as failed outcomes instead of exceptions.
"""

import logging
from datetime import UTC, datetime
from typing import cast

from pb_pipeline.analysis.delta import calculate_rating_delta
from pb_pipeline.analysis.estimator import calculate_skill_equivalency
from pb_pipeline.analysis.field import extract_field_analysis
from pb_pipeline.analysis.percentile import calculate_pace_percentile
from pb_pipeline.analysis.settings import DEFAULT_ANALYSIS_CONFIG, AnalysisConfig
from pb_pipeline.exceptions import PBPipelineError
from pb_pipeline.schemas import (
    AnalysisContext,
    AnalysisMetadata,
    AnalysisOutcome,
    AnalysisResult,
    DataQuality,
    DeltaAssessment,
    PacePercentile,
    PersonalBestRecord,
    RaceConditions,
    RaceRecord,
    RatingDelta,
    SkillEquivalency,
)

logger = logging.getLogger(__name__)

RELIABLE_CONFIDENCE = 60
LOW_CONFIDENCE_WARNING = 70

_ASSESSMENT_TEXT: dict[DeltaAssessment, str] = {
    "significantly_above": "significantly faster than your current skill level",
    "moderately_above": "moderately faster than your current skill level",
    "slightly_above": "slightly faster than your current skill level",
    "consistent": "consistent with your current skill level",
    "slightly_below": "slightly slower than your current skill level",
    "moderately_below": "moderately slower than your current skill level",
    "significantly_below": "significantly slower than your current skill level",
}


def get_performance_assessment_text(assessment: str) -> str:
    return _ASSESSMENT_TEXT.get(cast(DeltaAssessment, assessment), "unknown performance level")


def get_confidence_level_text(confidence: float) -> str:
    if confidence >= 85:
        return "Very High"
    if confidence >= 70:
        return "High"
    if confidence >= 55:
        return "Moderate"
    if confidence >= 40:
        return "Low"
    return "Very Low"


def generate_analysis_summary(
    pace: PacePercentile,
    equivalency: SkillEquivalency,
    delta: RatingDelta,
) -> str:
    """One sentence: pace, percentile, estimate, signed delta and a confidence qualifier."""
    if equivalency.confidence >= 80:
        confidence_desc = "high confidence"
    elif equivalency.confidence >= RELIABLE_CONFIDENCE:
        confidence_desc = "moderate confidence"
    else:
        confidence_desc = "low confidence"

    sign = "+" if delta.delta >= 0 else ""
    return (
        f"Your lap shows {pace.performance_level.lower()} pace "
        f"({pace.percentile:.1f}th percentile), equivalent to "
        f"~{equivalency.estimated_rating} iR "
        f"({sign}{delta.delta} vs current {delta.current_rating} iR) "
        f"with {confidence_desc}."
    )


def build_analysis_context(
    personal_best: PersonalBestRecord,
    current_rating: int,
    **overrides,
) -> AnalysisContext:
    return AnalysisContext(
        personal_best_id=personal_best.id,
        subsession_id=personal_best.subsession_id,
        race_date=personal_best.race_date,
        track_name=personal_best.track_name,
        car_name=personal_best.car_name,
        driver_current_rating=current_rating,
        **overrides,
    )


def analyze_personal_best(
    personal_best: PersonalBestRecord,
    race: RaceRecord,
    current_rating: int,
    config: AnalysisConfig = DEFAULT_ANALYSIS_CONFIG,
    calculated_at: datetime | None = None,
) -> AnalysisOutcome:
    """
    Analyze one personal best against the field of the race it was set in.

    Args:
        personal_best: The record to analyze.
        race: The source race (matched by subsession id).
        current_rating: Driver's current rating (>= 0).
        config: Analysis parameters.
        calculated_at: Timestamp to stamp on the result; defaults to now (UTC).

    Returns:
        AnalysisOutcome; success is False with errors when the field is too
        small or the analysis could not be completed.
    """
    calculated_at = calculated_at or datetime.now(UTC)

    field = extract_field_analysis(race, config)
    if field is None:
        return AnalysisOutcome(
            context=build_analysis_context(personal_best, current_rating),
            success=False,
            errors=["Insufficient field data for analysis"],
        )

    try:
        pace = calculate_pace_percentile(
            personal_best.fastest_lap_ms, [p.lap_time_ms for p in field.participants]
        )
        equivalency = calculate_skill_equivalency(pace, field.strength_of_field, field, config)
        delta = calculate_rating_delta(equivalency.estimated_rating, current_rating)
    except (PBPipelineError, ValueError) as e:
        logger.warning(f"⚠️ Analysis failed for {personal_best.id}: {e}")
        return AnalysisOutcome(
            context=build_analysis_context(personal_best, current_rating),
            success=False,
            errors=[f"Analysis failed: {e}"],
        )

    field_data_complete = field.valid_lap_times >= config.min_field_size

    warnings = []
    if field.strength_of_field < config.min_strength_of_field:
        warnings.append("Low strength of field may affect accuracy")
    if equivalency.confidence < LOW_CONFIDENCE_WARNING:
        warnings.append("Analysis confidence is below 70%")
    if field.total_participants < config.min_field_size * 1.5:
        warnings.append("Small field size may limit accuracy")

    metadata = AnalysisMetadata(
        calculated_at=calculated_at,
        race_conditions=RaceConditions(
            strength_of_field=field.strength_of_field,
            field_size=field.total_participants,
            official_session=field.official_session,
        ),
        data_quality=DataQuality(
            has_complete_field_data=field_data_complete,
            has_lap_times_for_all_drivers=field.valid_lap_times == field.total_participants,
            minimum_laps_sample=field.valid_lap_times >= field.total_participants * 0.75,
        ),
    )

    analysis = AnalysisResult(
        pace_percentile=pace,
        skill_equivalency=equivalency,
        rating_delta=delta,
        metadata=metadata,
        summary=generate_analysis_summary(pace, equivalency, delta),
    )

    return AnalysisOutcome(
        analysis=analysis,
        context=build_analysis_context(
            personal_best,
            current_rating,
            field_data_complete=field_data_complete,
            analysis_reliable=equivalency.confidence >= RELIABLE_CONFIDENCE,
            warnings=warnings,
        ),
        success=True,
    )
