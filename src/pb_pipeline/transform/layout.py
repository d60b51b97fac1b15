"""
Track layout identification.
"""

import re

from pb_pipeline.schemas import RaceRecord, TrackLayoutIdentifier

_UNSAFE_KEY_CHARS = re.compile(r"[^a-zA-Z0-9\-_]")


def generate_track_id(track_name: str) -> int:
    """
    Derive a stable numeric id from a track name.

    31-multiplier string hash wrapped to a signed 32-bit integer, then made
    non-negative. Same name, same id, no lookup table.
    """
    value = 0
    for char in track_name:
        value = (value * 31 + ord(char)) & 0xFFFFFFFF
    if value >= 0x80000000:
        value -= 0x100000000
    return abs(value)


def generate_track_layout_key(identifier: TrackLayoutIdentifier) -> str:
    """Grouping key '{trackId}_{config}' with the config name sanitized, or '_default'."""
    config_name = identifier.config_name
    if config_name and config_name.strip():
        return f"{identifier.track_id}_{_UNSAFE_KEY_CHARS.sub('_', config_name)}"
    return f"{identifier.track_id}_default"


def extract_track_layout_identifier(race: RaceRecord) -> TrackLayoutIdentifier | None:
    """Identify the layout a race was run on; None when the track name is blank."""
    if not race.track_name or not race.track_name.strip():
        return None

    return TrackLayoutIdentifier(
        track_id=generate_track_id(race.track_name),
        track_name=race.track_name,
        config_name=race.config_name,
    )
