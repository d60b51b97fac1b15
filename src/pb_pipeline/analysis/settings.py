"""
Analysis configuration model.
Defaults come from pb_pipeline.config so the environment can tune them.
"""

import math
from typing import get_args

from pydantic import Field, model_validator

from pb_pipeline import config
from pb_pipeline.schemas import PBBaseModel, PerformanceLevel


class ConfidenceWeights(PBBaseModel):
    """Weights for the three confidence factors. Must sum to 1."""

    field_size: float = Field(config.WEIGHT_FIELD_SIZE, ge=0, le=1)
    strength_of_field: float = Field(config.WEIGHT_STRENGTH_OF_FIELD, ge=0, le=1)
    data_quality: float = Field(config.WEIGHT_DATA_QUALITY, ge=0, le=1)

    @model_validator(mode="after")
    def _weights_sum_to_one(self) -> "ConfidenceWeights":
        total = self.field_size + self.strength_of_field + self.data_quality
        if not math.isclose(total, 1.0, abs_tol=1e-6):
            raise ValueError(f"confidence weights must sum to 1, got {total:.4f}")
        return self


class AnalysisConfig(PBBaseModel):
    """Tunable parameters of the field gate, the estimator and confidence scoring."""

    min_field_size: int = Field(config.MIN_FIELD_SIZE, ge=1)
    min_strength_of_field: int = Field(config.MIN_STRENGTH_OF_FIELD, ge=0)
    percentile_multipliers: dict[PerformanceLevel, float] = Field(
        default_factory=lambda: dict(config.PERCENTILE_MULTIPLIERS)
    )
    min_rating: int = Field(config.MIN_RATING, gt=0)
    max_rating: int = Field(config.MAX_RATING, gt=0)
    confidence_weights: ConfidenceWeights = Field(default_factory=ConfidenceWeights)
    full_confidence_field_size: int = Field(config.FULL_CONFIDENCE_FIELD_SIZE, ge=1)
    sof_confidence_ceiling: int = Field(config.SOF_CONFIDENCE_CEILING, gt=0)

    @model_validator(mode="after")
    def _check_consistency(self) -> "AnalysisConfig":
        missing = [level for level in get_args(PerformanceLevel) if level not in self.percentile_multipliers]
        if missing:
            raise ValueError(f"percentile multipliers missing for: {', '.join(missing)}")
        if any(m <= 0 for m in self.percentile_multipliers.values()):
            raise ValueError("percentile multipliers must be positive")
        if self.min_rating >= self.max_rating:
            raise ValueError("min_rating must be below max_rating")
        if self.sof_confidence_ceiling <= self.min_strength_of_field:
            raise ValueError("sof_confidence_ceiling must be above min_strength_of_field")
        return self


DEFAULT_ANALYSIS_CONFIG = AnalysisConfig()
