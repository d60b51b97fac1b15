"""
Personal-best hierarchy schemas.
Driver → series → track layout → car, each level carrying its own rollups.
Parents own children by value, so every model serializes without cycles.
"""

import math
from collections.abc import Iterator
from datetime import datetime

from pydantic import Field

from .analysis import AnalysisResult, AnalysisSummary
from .base import NO_LAP_TIME, PBBaseModel, RaceCategory, UtcDatetime


class TrackLayoutIdentifier(PBBaseModel):
    """Stable identity of one track configuration."""

    track_id: int = Field(ge=0, description="Deterministic id derived from the track name")
    track_name: str
    config_name: str | None = None


class PersonalBestRecord(PBBaseModel):
    """Fastest valid lap for one car on one track layout in one race."""

    id: str = Field(description="'{raceId}_{trackId}_{carName}' with whitespace collapsed")
    track_id: int
    track_name: str
    config_name: str | None = None
    car_id: int | None = None
    car_name: str
    fastest_lap: str = Field(description="Formatted lap time (M:SS.mmm)")
    fastest_lap_ms: int = Field(gt=0)
    series_name: str
    category: RaceCategory
    subsession_id: str = Field(description="Race the lap was set in")
    race_date: UtcDatetime
    year: int
    season: str
    strength_of_field: int = Field(ge=0)
    finish_position: int
    total_race_incidents: int
    analysis: AnalysisResult | None = Field(None, description="Set once batch analysis has run")


class TrackLayoutBests(PBBaseModel):
    """Per-car personal bests for a single track layout."""

    track_layout_key: str
    track_name: str
    config_name: str | None = None
    track_id: int
    category: RaceCategory
    car_bests: dict[str, PersonalBestRecord] = Field(description="car name -> best record")
    total_races: int = Field(ge=0)
    fastest_overall: str
    fastest_overall_ms: float
    most_recent_race: UtcDatetime


class SeriesBests(PBBaseModel):
    """Track layouts driven within one series."""

    series_name: str
    category: RaceCategory
    track_layout_bests: dict[str, TrackLayoutBests] = Field(
        description="track layout key -> layout bests"
    )
    total_races: int = Field(ge=0)
    unique_track_layouts: int = Field(ge=0)
    unique_cars: int = Field(ge=0)
    average_sof: float = Field(alias="averageSoF", ge=0)
    best_overall_lap: str
    best_overall_lap_ms: float


class DriverBests(PBBaseModel):
    """Root of the personal-bests hierarchy for one driver."""

    cust_id: int
    driver_name: str
    last_updated: UtcDatetime
    data_source: str = "recentRaces"
    series_bests: dict[str, SeriesBests] = Field(default_factory=dict)
    total_races: int = 0
    total_series: int = 0
    total_track_layouts: int = 0
    total_cars: int = 0
    fastest_lap_overall: str = NO_LAP_TIME
    fastest_lap_overall_ms: float = math.inf
    fastest_lap_track: str = ""
    fastest_lap_car: str = ""
    analysis_summary: AnalysisSummary | None = None

    def iter_records(self) -> Iterator[PersonalBestRecord]:
        """Yield every personal-best record in hierarchy order."""
        for series in self.series_bests.values():
            for layout in series.track_layout_bests.values():
                yield from layout.car_bests.values()


# --- Transformation lineage ---


class IgnoredRace(PBBaseModel):
    race_id: str
    reason: str


class TransformContext(PBBaseModel):
    """Observability record for one transformation run."""

    source_race_count: int
    transformed_at: UtcDatetime
    processing_time_ms: int
    ignored_races: list[IgnoredRace] = Field(default_factory=list)


class TransformOptions(PBBaseModel):
    """Race filters applied before records are built."""

    category_filter: list[RaceCategory] | None = None
    series_filter: list[str] | None = None
    date_from: UtcDatetime | None = None
    date_to: UtcDatetime | None = None
    min_strength_of_field: int | None = Field(None, ge=0)
    min_races: int | None = Field(None, ge=1, description="Minimum races per track layout")


class TransformResult(PBBaseModel):
    personal_bests: DriverBests
    context: TransformContext
    warnings: list[str] = Field(default_factory=list)
    errors: list[str] = Field(default_factory=list)


def empty_driver_bests(cust_id: int, driver_name: str, last_updated: datetime) -> DriverBests:
    """Well-formed empty hierarchy returned when a transformation fails."""
    return DriverBests(cust_id=cust_id, driver_name=driver_name, last_updated=last_updated)
