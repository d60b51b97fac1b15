"""
Configuration module for the Personal Bests pipeline.
Loads environment variables and defines the analysis defaults.
"""

import logging
import math
import os

from dotenv import find_dotenv, load_dotenv

from .exceptions import ConfigurationError

# --- LOGGING CONFIG ---
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

logging.basicConfig(
    level=LOG_LEVEL, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

# --- ENV LOADING ---
_env_found = load_dotenv(find_dotenv(usecwd=True))
if not _env_found:
    logger.debug("ℹ️  No .env file found. Using environment variables from system.")


def get_env_int(key: str, default: int) -> int:
    """
    Read an integer environment variable.

    Raises:
        ConfigurationError: If the variable is set but is not an integer
    """
    raw = os.getenv(key)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise ConfigurationError(f"Environment variable '{key}' must be an integer, got {raw!r}") from e


def get_env_float(key: str, default: float) -> float:
    """
    Read a float environment variable.

    Raises:
        ConfigurationError: If the variable is set but is not a number
    """
    raw = os.getenv(key)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError as e:
        raise ConfigurationError(f"Environment variable '{key}' must be a number, got {raw!r}") from e


# --- 1. FIELD GATING ---
# Races with fewer usable lap times than this never produce a field analysis.
MIN_FIELD_SIZE: int = get_env_int("PB_MIN_FIELD_SIZE", 8)
# Below this SoF the analysis carries a low-accuracy warning.
MIN_STRENGTH_OF_FIELD: int = get_env_int("PB_MIN_STRENGTH_OF_FIELD", 1200)

# --- 2. RATING ESTIMATION ---
MIN_RATING: int = get_env_int("PB_MIN_RATING", 350)
MAX_RATING: int = get_env_int("PB_MAX_RATING", 12000)

PERCENTILE_MULTIPLIERS: dict[str, float] = {
    "Elite": 1.25,
    "Excellent": 1.15,
    "Strong": 1.05,
    "Average": 0.95,
    "Below Average": 0.85,
    "Struggling": 0.75,
}

# --- 3. CONFIDENCE SCORING ---
FULL_CONFIDENCE_FIELD_SIZE: int = get_env_int("PB_FULL_CONFIDENCE_FIELD_SIZE", 20)
SOF_CONFIDENCE_CEILING: int = get_env_int("PB_SOF_CONFIDENCE_CEILING", 3000)

WEIGHT_FIELD_SIZE: float = get_env_float("PB_WEIGHT_FIELD_SIZE", 0.4)
WEIGHT_STRENGTH_OF_FIELD: float = get_env_float("PB_WEIGHT_STRENGTH_OF_FIELD", 0.4)
WEIGHT_DATA_QUALITY: float = get_env_float("PB_WEIGHT_DATA_QUALITY", 0.2)

# --- 4. EXECUTION ---
ANALYSIS_WORKERS: int = get_env_int("PB_ANALYSIS_WORKERS", 1)
LOADER_ERROR_THRESHOLD: float = get_env_float("PB_LOADER_ERROR_THRESHOLD", 0.20)


# --- 5. CONFIGURATION VALIDATION ---
def validate_configuration() -> bool:
    """
    Validate that the loaded configuration is internally consistent.

    Returns:
        True if validation passes

    Raises:
        ConfigurationError: Listing every problem found
    """
    errors = []

    if MIN_FIELD_SIZE < 1:
        errors.append("PB_MIN_FIELD_SIZE must be at least 1")

    if MIN_RATING <= 0 or MIN_RATING >= MAX_RATING:
        errors.append("PB_MIN_RATING must be positive and below PB_MAX_RATING")

    if FULL_CONFIDENCE_FIELD_SIZE < 1:
        errors.append("PB_FULL_CONFIDENCE_FIELD_SIZE must be at least 1")

    if SOF_CONFIDENCE_CEILING <= MIN_STRENGTH_OF_FIELD:
        errors.append("PB_SOF_CONFIDENCE_CEILING must be above PB_MIN_STRENGTH_OF_FIELD")

    weights = (WEIGHT_FIELD_SIZE, WEIGHT_STRENGTH_OF_FIELD, WEIGHT_DATA_QUALITY)
    if any(w < 0 for w in weights):
        errors.append("Confidence weights must not be negative")
    if not math.isclose(sum(weights), 1.0, abs_tol=1e-6):
        errors.append(f"Confidence weights must sum to 1, got {sum(weights):.4f}")

    for label, multiplier in PERCENTILE_MULTIPLIERS.items():
        if multiplier <= 0:
            errors.append(f"Percentile multiplier for '{label}' must be positive")

    if ANALYSIS_WORKERS < 1:
        errors.append("PB_ANALYSIS_WORKERS must be at least 1")

    if not 0.0 <= LOADER_ERROR_THRESHOLD <= 1.0:
        errors.append("PB_LOADER_ERROR_THRESHOLD must be between 0 and 1")

    if errors:
        logger.error("❌ Configuration validation failed:")
        for error in errors:
            logger.error(f"   - {error}")
        raise ConfigurationError("; ".join(errors))

    logger.info("✅ Configuration validation passed")
    return True
