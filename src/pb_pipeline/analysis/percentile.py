"""
Pace percentile within a race field.
"""

from bisect import bisect_left
from collections.abc import Sequence

from pb_pipeline.exceptions import EmptyFieldError
from pb_pipeline.schemas import PacePercentile, PerformanceLevel

# (minimum percentile, level), checked top-down
PERFORMANCE_BANDS: tuple[tuple[float, PerformanceLevel], ...] = (
    (95, "Elite"),
    (90, "Excellent"),
    (75, "Strong"),
    (25, "Average"),
    (10, "Below Average"),
)


def classify_performance(percentile: float) -> PerformanceLevel:
    for threshold, level in PERFORMANCE_BANDS:
        if percentile >= threshold:
            return level
    return "Struggling"


def calculate_pace_percentile(lap_time_ms: float, field_lap_times: Sequence[float]) -> PacePercentile:
    """
    Rank a lap time against a field's lap times.

    The position is the first slot whose time is >= the lap, so a tie ranks
    the lap alongside the faster entry. A lap slower than the whole field lands
    one past the end. Rank-based, not interpolated: a single-entrant field
    always gives the 100th percentile.

    Raises:
        EmptyFieldError: If field_lap_times is empty.
    """
    if not field_lap_times:
        raise EmptyFieldError("Cannot calculate percentile with empty field data")

    sorted_times = sorted(field_lap_times)
    total = len(sorted_times)
    position = bisect_left(sorted_times, lap_time_ms)

    percentile = max(0.0, min(100.0, (total - position) / total * 100))

    return PacePercentile(
        percentile=percentile,
        field_position=position + 1,
        total_drivers=total,
        performance_level=classify_performance(percentile),
    )
