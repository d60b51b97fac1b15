"""
Boundary loader: raw race dictionaries → validated RaceRecord models.
"""

import json
import logging
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from pb_pipeline import config
from pb_pipeline.exceptions import RaceDataError
from pb_pipeline.schemas import RaceRecord

logger = logging.getLogger(__name__)

# Batches smaller than this fail on any invalid record
SMALL_BATCH_SIZE = 5


def load_races(
    raw_races: list[dict[str, Any]],
    error_threshold: float = config.LOADER_ERROR_THRESHOLD,
) -> list[RaceRecord]:
    """
    Validate raw race dictionaries (camelCase or snake_case keys).

    Invalid records are skipped, but if more than error_threshold of them
    fail (or any fail in a small batch), the whole load is rejected.

    Raises:
        RaceDataError: If the failure rate exceeds the threshold.
    """
    races = []
    error_details = []
    total_count = len(raw_races)

    for i, raw in enumerate(raw_races):
        try:
            races.append(RaceRecord.model_validate(raw))
        except ValidationError as e:
            error_details.append(f"Race {i} ({raw.get('id', '?')}): {e}")
            if len(error_details) <= 3:
                logger.debug(f"❌ Validation failure on race {i}: {e}")

    error_count = len(error_details)
    if error_count > 0:
        error_rate = error_count / total_count
        logger.warning(
            f"⚠️ Validation issues found: {error_count}/{total_count} races failed "
            f"({error_rate:.1%})"
        )

        if error_rate > error_threshold or (total_count < SMALL_BATCH_SIZE and error_count > 0):
            logger.error("🛑 Error threshold exceeded! First 3 errors:")
            for err in error_details[:3]:
                logger.error(f"   - {err}")
            raise RaceDataError(
                f"{error_count} of {total_count} races failed validation. Check logs for details."
            )

    logger.info(f"📥 Loaded {len(races)} races")
    return races


def read_races_file(
    path: str | Path,
    error_threshold: float = config.LOADER_ERROR_THRESHOLD,
) -> list[RaceRecord]:
    """
    Load races from a JSON file.

    Accepts either a bare list of races or an object with a "recentRaces" list.

    Raises:
        RaceDataError: If the file does not contain a race list or too many races are invalid.
    """
    with open(path, encoding="utf-8") as f:
        payload = json.load(f)

    if isinstance(payload, dict):
        payload = payload.get("recentRaces", payload.get("races"))

    if not isinstance(payload, list):
        raise RaceDataError(f"No race list found in {path}")

    return load_races(payload, error_threshold)
