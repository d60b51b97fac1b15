"""
Lap-time parsing and fastest-lap extraction.
"""

import math
import re
from collections.abc import Iterable, Sequence

from pb_pipeline.schemas import NO_LAP_TIME, Participant, RaceRecord

# M:SS.mmm (fractions shorter than 3 digits are read as decimals, longer are truncated)
_LAP_TIME_PATTERN = re.compile(r"^\s*(\d+):(\d{1,2})\.(\d{1,4})\s*$")


def lap_time_to_ms(time: str | None) -> float:
    """
    Convert a formatted lap time to milliseconds.

    Args:
        time: Lap time as 'M:SS.mmm'

    Returns:
        Milliseconds as an int, or math.inf when the string is missing or malformed.
    """
    if not time:
        return math.inf
    match = _LAP_TIME_PATTERN.match(time)
    if match is None:
        return math.inf
    minutes, seconds, fraction = match.groups()
    millis = int(fraction.ljust(3, "0")[:3])
    return (int(minutes) * 60 + int(seconds)) * 1000 + millis


def format_lap_time(time_ms: float) -> str:
    """Format milliseconds as 'M:SS.mmm'; negative or non-finite values give 'N/A'."""
    if time_ms < 0 or not math.isfinite(time_ms):
        return NO_LAP_TIME
    minutes, remainder = divmod(int(round(time_ms)), 60_000)
    return f"{minutes}:{remainder / 1000:06.3f}"


def find_fastest_lap_time(lap_times: Iterable[str]) -> tuple[str, float]:
    """
    Reduce formatted lap times to the fastest valid one.

    Empty, 'N/A', unparsable and non-positive entries are skipped. The first
    occurrence wins exact ties.

    Returns:
        (formatted lap, milliseconds), or ('N/A', inf) when nothing is valid.
    """
    fastest_lap = NO_LAP_TIME
    fastest_ms = math.inf

    for lap_time in lap_times:
        if not lap_time or lap_time == NO_LAP_TIME:
            continue
        lap_ms = lap_time_to_ms(lap_time)
        if 0 < lap_ms < fastest_ms:
            fastest_ms = lap_ms
            fastest_lap = lap_time

    return fastest_lap, fastest_ms


def _valid_lap_times(participant: Participant) -> list[str]:
    return [lap.time for lap in participant.laps if not lap.invalid and lap.time != NO_LAP_TIME]


def find_fastest_lap_in_race(participants: Sequence[Participant]) -> str:
    """Fastest lap across the whole field, from both summary and per-lap data."""
    lap_times: list[str] = []
    for participant in participants:
        if participant.fastest_lap and participant.fastest_lap != NO_LAP_TIME:
            lap_times.append(participant.fastest_lap)
        lap_times.extend(_valid_lap_times(participant))

    return find_fastest_lap_time(lap_times)[0]


def extract_driver_fastest_lap(race: RaceRecord) -> str | None:
    """
    Fastest valid lap for the driver who owns this race history.

    The driver is the first participant. Individual laps are preferred; the
    pre-computed fastest lap is only used when no laps were recorded.
    """
    if not race.participants:
        return None

    driver = race.participants[0]
    if driver.laps:
        lap_times = _valid_lap_times(driver)
    else:
        lap_times = [driver.fastest_lap]

    fastest_lap, _ = find_fastest_lap_time(lap_times)
    return fastest_lap if fastest_lap != NO_LAP_TIME else None
