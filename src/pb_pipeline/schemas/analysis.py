"""
Skill-equivalency analysis schemas.
Pace percentile, rating estimate, rating delta and the per-race field summary
used to produce them.
"""

from pydantic import Field

from .base import (
    AnalysisMethod,
    DeltaAssessment,
    PBBaseModel,
    PerformanceLevel,
    UtcDatetime,
)


class PacePercentile(PBBaseModel):
    """Where a lap time ranks within a race field (100 = fastest)."""

    percentile: float = Field(ge=0, le=100)
    field_position: int = Field(gt=0, description="1-based position by pace")
    total_drivers: int = Field(gt=0, description="Drivers in the comparison field")
    performance_level: PerformanceLevel


class ConfidenceFactors(PBBaseModel):
    """Normalized 0-100 signals feeding the overall confidence score."""

    field_size: float = Field(ge=0, le=100)
    strength_of_field: float = Field(ge=0, le=100)
    data_quality: float = Field(ge=0, le=100)


class SkillEquivalency(PBBaseModel):
    """Estimated skill rating implied by a lap's pace against its field."""

    estimated_rating: int = Field(gt=0)
    confidence: int = Field(ge=0, le=100)
    confidence_factors: ConfidenceFactors
    analysis_method: AnalysisMethod = "fieldPercentile"


class RatingDelta(PBBaseModel):
    """Comparison between the estimate and the driver's current rating."""

    delta: int = Field(description="Positive when the lap implies a higher rating")
    current_rating: int = Field(ge=0)
    estimated_rating: int = Field(gt=0)
    percentage_change: float = Field(description="Rounded to two decimal places")
    assessment: DeltaAssessment


class RaceConditions(PBBaseModel):
    strength_of_field: int
    field_size: int = Field(gt=0)
    official_session: bool
    weather_conditions: str | None = None


class DataQuality(PBBaseModel):
    has_complete_field_data: bool
    has_lap_times_for_all_drivers: bool
    minimum_laps_sample: bool = Field(
        description="At least 75% of the field produced a usable lap time"
    )


class AnalysisMetadata(PBBaseModel):
    calculated_at: UtcDatetime
    race_conditions: RaceConditions
    data_quality: DataQuality


class AnalysisResult(PBBaseModel):
    """Complete skill-equivalency analysis attached to a personal best."""

    pace_percentile: PacePercentile
    skill_equivalency: SkillEquivalency
    rating_delta: RatingDelta
    metadata: AnalysisMetadata
    summary: str = Field(description="One-sentence human-readable summary")


# --- Field summary ---


class FieldParticipant(PBBaseModel):
    """A field member with a usable fastest lap."""

    cust_id: int
    display_name: str
    lap_time: str
    lap_time_ms: int = Field(gt=0)
    irating: int
    finish_position: int


class FieldAnalysis(PBBaseModel):
    """Statistical summary of a race field's lap-time distribution."""

    total_participants: int = Field(gt=0)
    valid_lap_times: int = Field(gt=0)
    strength_of_field: int
    official_session: bool = True
    participants: list[FieldParticipant]
    fastest_lap_ms: int
    slowest_lap_ms: int
    average_lap_ms: float
    median_lap_ms: int


# --- Batch outcome ---


class AnalysisContext(PBBaseModel):
    """Lineage and reliability notes for one analysis attempt."""

    personal_best_id: str
    subsession_id: str
    race_date: UtcDatetime
    track_name: str
    car_name: str
    driver_current_rating: int
    field_data_complete: bool = False
    analysis_reliable: bool = False
    warnings: list[str] = Field(default_factory=list)


class AnalysisOutcome(PBBaseModel):
    """Result wrapper for one record; failures carry errors instead of raising."""

    analysis: AnalysisResult | None = None
    context: AnalysisContext
    success: bool
    errors: list[str] = Field(default_factory=list)


class AnalysisSummary(PBBaseModel):
    total_records: int
    successful_analyses: int
    failed_analyses: int
