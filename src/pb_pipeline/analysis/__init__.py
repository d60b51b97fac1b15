from .analyzer import (
    analyze_personal_best,
    generate_analysis_summary,
    get_confidence_level_text,
    get_performance_assessment_text,
)
from .batch import add_analysis_to_driver_bests, analyze_batch
from .delta import calculate_rating_delta, classify_percentage_change
from .estimator import calculate_confidence_factors, calculate_skill_equivalency
from .field import extract_field_analysis
from .percentile import calculate_pace_percentile, classify_performance
from .settings import DEFAULT_ANALYSIS_CONFIG, AnalysisConfig, ConfidenceWeights

__all__ = [
    "DEFAULT_ANALYSIS_CONFIG",
    "AnalysisConfig",
    "ConfidenceWeights",
    "add_analysis_to_driver_bests",
    "analyze_batch",
    "analyze_personal_best",
    "calculate_confidence_factors",
    "calculate_pace_percentile",
    "calculate_rating_delta",
    "calculate_skill_equivalency",
    "classify_percentage_change",
    "classify_performance",
    "extract_field_analysis",
    "generate_analysis_summary",
    "get_confidence_level_text",
    "get_performance_assessment_text",
]
