"""
Pydantic schemas for the Personal Bests pipeline.
"""

from .analysis import (
    AnalysisContext,
    AnalysisMetadata,
    AnalysisOutcome,
    AnalysisResult,
    AnalysisSummary,
    ConfidenceFactors,
    DataQuality,
    FieldAnalysis,
    FieldParticipant,
    PacePercentile,
    RaceConditions,
    RatingDelta,
    SkillEquivalency,
)
from .base import (
    NO_LAP_TIME,
    AnalysisMethod,
    DeltaAssessment,
    PBBaseModel,
    PerformanceLevel,
    RaceCategory,
    UtcDatetime,
)
from .bests import (
    DriverBests,
    IgnoredRace,
    PersonalBestRecord,
    SeriesBests,
    TrackLayoutBests,
    TrackLayoutIdentifier,
    TransformContext,
    TransformOptions,
    TransformResult,
    empty_driver_bests,
)
from .race import Lap, Participant, RaceRecord

__all__ = [
    # Base
    "NO_LAP_TIME",
    "AnalysisMethod",
    "DeltaAssessment",
    "PBBaseModel",
    "PerformanceLevel",
    "RaceCategory",
    "UtcDatetime",
    # Race input
    "Lap",
    "Participant",
    "RaceRecord",
    # Personal bests
    "DriverBests",
    "IgnoredRace",
    "PersonalBestRecord",
    "SeriesBests",
    "TrackLayoutBests",
    "TrackLayoutIdentifier",
    "TransformContext",
    "TransformOptions",
    "TransformResult",
    "empty_driver_bests",
    # Analysis
    "AnalysisContext",
    "AnalysisMetadata",
    "AnalysisOutcome",
    "AnalysisResult",
    "AnalysisSummary",
    "ConfidenceFactors",
    "DataQuality",
    "FieldAnalysis",
    "FieldParticipant",
    "PacePercentile",
    "RaceConditions",
    "RatingDelta",
    "SkillEquivalency",
]
