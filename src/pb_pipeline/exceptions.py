# src/pb_pipeline/exceptions.py
"""
Custom exception hierarchy for the Personal Bests pipeline.

Only contract violations and invalid configuration raise. Data-quality gaps
(missing laps, undersized fields, filtered races) are recorded on the result
objects instead.
"""


class PBPipelineError(Exception):
    """Base class for all pipeline-specific errors."""


class EmptyFieldError(PBPipelineError, ValueError):
    """
    Raised when a pace percentile is requested against an empty field.

    Callers gate field size through extract_field_analysis first, so reaching
    this is a programming error rather than a data gap.
    """


class ConfigurationError(PBPipelineError):
    """Raised when environment or analysis configuration is inconsistent."""


class RaceDataError(PBPipelineError):
    """
    Raised by the boundary loader when too many raw races fail validation.

    A high failure rate means the upstream supplier changed shape, so the run
    halts instead of silently producing a thin personal-bests table.
    """
