from datetime import UTC, datetime

import pytest

from pb_pipeline.schemas import Lap, Participant, RaceRecord
from pb_pipeline.transform.laps import format_lap_time

FIXED_NOW = datetime(2024, 6, 1, 12, 0, tzinfo=UTC)


def make_participant(
    name: str = "Test Driver",
    cust_id: int = 123456,
    fastest_lap: str = "1:30.000",
    laps: list[Lap] | None = None,
    irating: int = 2000,
    finish_position: int = 1,
) -> Participant:
    return Participant(
        name=name,
        cust_id=cust_id,
        fastest_lap=fastest_lap,
        laps=laps or [],
        irating=irating,
        finish_position=finish_position,
    )


def make_race(
    race_id: str = "1001",
    track_name: str = "Silverstone Circuit",
    car: str = "McLaren MP4-30",
    fastest_lap: str = "1:30.000",
    series_name: str = "Formula A",
    category: str = "Formula Car",
    date: datetime = datetime(2024, 3, 1, 18, 0, tzinfo=UTC),
    strength_of_field: int = 2000,
    config_name: str | None = None,
    participants: list[Participant] | None = None,
) -> RaceRecord:
    """A race in the driver's history; the driver is the first participant."""
    return RaceRecord(
        id=race_id,
        track_name=track_name,
        config_name=config_name,
        car=car,
        series_name=series_name,
        category=category,
        date=date,
        year=date.year,
        season="Season 1",
        strength_of_field=strength_of_field,
        participants=participants or [make_participant(fastest_lap=fastest_lap)],
    )


def make_field(lap_times_ms: list[int]) -> list[Participant]:
    """One participant per lap time; the first is the driver."""
    return [
        make_participant(
            name=f"Driver {i}",
            cust_id=100 + i,
            fastest_lap=format_lap_time(ms),
            irating=1500 + i * 10,
            finish_position=i + 1,
        )
        for i, ms in enumerate(lap_times_ms)
    ]


@pytest.fixture
def fixed_clock():
    return lambda: FIXED_NOW


@pytest.fixture
def field_race() -> RaceRecord:
    """Ten drivers, 0.5s apart, driver on pole pace, SoF 2000."""
    return make_race(
        race_id="2001",
        participants=make_field([90_000 + i * 500 for i in range(10)]),
        strength_of_field=2000,
    )


@pytest.fixture
def mock_env(monkeypatch):
    """Isolated environment for configuration tests."""
    env_vars = {
        "PB_MIN_FIELD_SIZE": "6",
        "PB_MIN_STRENGTH_OF_FIELD": "1000",
        "PB_ANALYSIS_WORKERS": "4",
        "PB_WEIGHT_FIELD_SIZE": "0.5",
        "PB_WEIGHT_STRENGTH_OF_FIELD": "0.3",
        "PB_WEIGHT_DATA_QUALITY": "0.2",
    }
    for key, value in env_vars.items():
        monkeypatch.setenv(key, value)
    return env_vars
