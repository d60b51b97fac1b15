"""
Read-only queries over a driver's personal-bests hierarchy.
"""

from pb_pipeline.schemas import DriverBests, PersonalBestRecord

SIGNIFICANT_IMPROVEMENT_MIN_CONFIDENCE = 60


def get_personal_best_for_car_and_track(
    driver_bests: DriverBests,
    car_name: str,
    track_name: str,
) -> PersonalBestRecord | None:
    """First record for the car on any layout of the track, in hierarchy order."""
    for series in driver_bests.series_bests.values():
        for layout in series.track_layout_bests.values():
            if layout.track_name == track_name and car_name in layout.car_bests:
                return layout.car_bests[car_name]
    return None


def get_personal_bests_for_car(driver_bests: DriverBests, car_name: str) -> list[PersonalBestRecord]:
    return [record for record in driver_bests.iter_records() if record.car_name == car_name]


def get_personal_bests_for_track(
    driver_bests: DriverBests, track_name: str
) -> list[PersonalBestRecord]:
    return [record for record in driver_bests.iter_records() if record.track_name == track_name]


def get_personal_bests_with_high_rating(
    driver_bests: DriverBests,
    threshold: int,
) -> list[PersonalBestRecord]:
    """Analyzed records whose estimated rating is at least threshold, highest first."""
    results = [
        record
        for record in driver_bests.iter_records()
        if record.analysis is not None
        and record.analysis.skill_equivalency.estimated_rating >= threshold
    ]
    return sorted(
        results, key=lambda r: r.analysis.skill_equivalency.estimated_rating, reverse=True  # type: ignore[union-attr]
    )


def get_personal_bests_with_significant_improvement(
    driver_bests: DriverBests,
    minimum_delta: int = 100,
) -> list[PersonalBestRecord]:
    """
    Analyzed records implying a rating gain of at least minimum_delta.

    Only reasonably confident analyses count. Largest gain first.
    """
    results = [
        record
        for record in driver_bests.iter_records()
        if record.analysis is not None
        and record.analysis.rating_delta.delta >= minimum_delta
        and record.analysis.skill_equivalency.confidence >= SIGNIFICANT_IMPROVEMENT_MIN_CONFIDENCE
    ]
    return sorted(results, key=lambda r: r.analysis.rating_delta.delta, reverse=True)  # type: ignore[union-attr]
