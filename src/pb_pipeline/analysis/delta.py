"""
Rating delta classification.
"""

from pb_pipeline.schemas import DeltaAssessment, RatingDelta

# (minimum percentage change, assessment), checked top-down
ASSESSMENT_BANDS: tuple[tuple[float, DeltaAssessment], ...] = (
    (15, "significantly_above"),
    (5, "moderately_above"),
    (1, "slightly_above"),
    (-1, "consistent"),
    (-5, "slightly_below"),
    (-15, "moderately_below"),
)


def classify_percentage_change(percentage_change: float) -> DeltaAssessment:
    for threshold, assessment in ASSESSMENT_BANDS:
        if percentage_change >= threshold:
            return assessment
    return "significantly_below"


def calculate_rating_delta(estimated_rating: int, current_rating: int) -> RatingDelta:
    """
    Compare an estimated rating with the driver's current rating.

    The percentage is rounded to two decimals before banding. A zero current
    rating has no meaningful percentage: it is reported as 0 and the assessment
    falls back to the sign of the delta.
    """
    delta = estimated_rating - current_rating

    if current_rating == 0:
        percentage_change = 0.0
        if delta > 0:
            assessment: DeltaAssessment = "significantly_above"
        elif delta < 0:
            assessment = "significantly_below"
        else:
            assessment = "consistent"
    else:
        percentage_change = round(delta / current_rating * 100, 2)
        assessment = classify_percentage_change(percentage_change)

    return RatingDelta(
        delta=delta,
        current_rating=current_rating,
        estimated_rating=estimated_rating,
        percentage_change=percentage_change,
        assessment=assessment,
    )
