"""
Shared base model and domain types for all pipeline schemas.
"""

from datetime import UTC, datetime
from typing import Annotated, Literal

from pydantic import AfterValidator, BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


def _ensure_utc(value: datetime) -> datetime:
    """Read naive datetimes as UTC so every comparison is between aware values."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


# Timestamps are always timezone-aware after validation
UtcDatetime = Annotated[datetime, AfterValidator(_ensure_utc)]

RaceCategory = Literal["Formula Car", "Sports Car", "Prototype", "Oval", "Dirt Oval"]

PerformanceLevel = Literal[
    "Elite",
    "Excellent",
    "Strong",
    "Average",
    "Below Average",
    "Struggling",
]

DeltaAssessment = Literal[
    "significantly_above",
    "moderately_above",
    "slightly_above",
    "consistent",
    "slightly_below",
    "moderately_below",
    "significantly_below",
]

AnalysisMethod = Literal["fieldPercentile", "strengthOfFieldRatio", "hybrid"]

NO_LAP_TIME = "N/A"


class PBBaseModel(BaseModel):
    """
    Base model for every pipeline schema.

    Python code uses snake_case attributes; serializing with by_alias=True
    yields the camelCase names the reporting layer consumes.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,  # Accept both snake_case and camelCase on input
        extra="ignore",  # Drop unknown upstream fields
        frozen=True,  # Stages build new models instead of mutating old ones
    )
