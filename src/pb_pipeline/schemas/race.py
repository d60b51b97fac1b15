"""
Race input schemas.
Canonical shape of the race history handed to the pipeline by the upstream
results client. Treated as read-only.
"""

from pydantic import Field

from .base import NO_LAP_TIME, PBBaseModel, RaceCategory, UtcDatetime


class Lap(PBBaseModel):
    """A single timed lap for one participant."""

    lap_number: int = Field(description="1-based lap number")
    time: str = Field(NO_LAP_TIME, description="Formatted lap time (M:SS.mmm) or 'N/A'")
    invalid: bool = Field(False, description="True when the lap was flagged (off-track, incident)")


class Participant(PBBaseModel):
    """One driver in a race field."""

    name: str = Field(description="Display name")
    cust_id: int = Field(description="Numeric driver identifier")
    start_position: int = Field(0, description="Starting grid position")
    finish_position: int = Field(0, description="Final classified position")
    incidents: int = Field(0, description="Incident points accumulated in the race")
    fastest_lap: str = Field(NO_LAP_TIME, description="Pre-computed fastest lap or 'N/A'")
    irating: int = Field(0, description="Skill rating at the time of the race")
    laps: list[Lap] = Field(default_factory=list, description="Individual laps in order")


class RaceRecord(PBBaseModel):
    """
    One completed race from the driver's history.

    The first participant is always the driver whose history this is.
    """

    id: str = Field(description="Upstream subsession identifier")
    track_name: str = Field(description="Track name as reported upstream")
    config_name: str | None = Field(None, description="Track configuration, when known")
    car: str = Field(description="Car driven in this race")
    series_name: str = Field(description="Series the race belonged to")
    category: RaceCategory = Field(description="License category of the series")
    date: UtcDatetime = Field(description="Race start time")
    year: int = Field(description="Season year")
    season: str = Field("", description="Season label, e.g. 'Season 1'")
    start_position: int = Field(0, description="Driver's starting position")
    finish_position: int = Field(0, description="Driver's finishing position")
    incidents: int = Field(0, description="Driver's incident points")
    strength_of_field: int = Field(ge=0, description="Strength of field (SoF)")
    participants: list[Participant] = Field(default_factory=list)
