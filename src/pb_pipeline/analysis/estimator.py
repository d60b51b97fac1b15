"""
Skill-equivalency estimator.

Turns a pace percentile and the field's strength into an estimated rating,
and scores how far that estimate can be trusted.
"""

import math

from pb_pipeline.analysis.settings import DEFAULT_ANALYSIS_CONFIG, AnalysisConfig
from pb_pipeline.schemas import (
    ConfidenceFactors,
    FieldAnalysis,
    PacePercentile,
    SkillEquivalency,
)


def round_half_up(value: float) -> int:
    """Round .5 away from zero for positive values (Python's round() is banker's)."""
    return int(math.floor(value + 0.5))


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def calculate_confidence_factors(
    strength_of_field: int,
    field: FieldAnalysis,
    config: AnalysisConfig = DEFAULT_ANALYSIS_CONFIG,
) -> ConfidenceFactors:
    """
    Normalize the three confidence signals to 0-100.

    - field size saturates at config.full_confidence_field_size participants
    - SoF ramps linearly from config.min_strength_of_field to config.sof_confidence_ceiling
    - data quality is the share of participants with a usable lap time
    """
    field_size = min(100.0, field.total_participants / config.full_confidence_field_size * 100)

    sof_span = config.sof_confidence_ceiling - config.min_strength_of_field
    strength = _clamp((strength_of_field - config.min_strength_of_field) / sof_span * 100, 0.0, 100.0)

    data_quality = min(100.0, field.valid_lap_times / field.total_participants * 100)

    return ConfidenceFactors(
        field_size=field_size,
        strength_of_field=strength,
        data_quality=data_quality,
    )


def calculate_skill_equivalency(
    pace: PacePercentile,
    strength_of_field: int,
    field: FieldAnalysis,
    config: AnalysisConfig = DEFAULT_ANALYSIS_CONFIG,
) -> SkillEquivalency:
    """
    Estimate the rating implied by a lap's pace.

    estimated = round(SoF × multiplier[level]) clamped to [min_rating, max_rating];
    confidence is the weighted sum of the three factors, clamped to [0, 100].
    """
    multiplier = config.percentile_multipliers[pace.performance_level]
    estimated = round_half_up(strength_of_field * multiplier)
    estimated = int(_clamp(estimated, config.min_rating, config.max_rating))

    factors = calculate_confidence_factors(strength_of_field, field, config)
    weights = config.confidence_weights
    confidence = round_half_up(
        factors.field_size * weights.field_size
        + factors.strength_of_field * weights.strength_of_field
        + factors.data_quality * weights.data_quality
    )

    return SkillEquivalency(
        estimated_rating=estimated,
        confidence=int(_clamp(confidence, 0, 100)),
        confidence_factors=factors,
        analysis_method="fieldPercentile",
    )
