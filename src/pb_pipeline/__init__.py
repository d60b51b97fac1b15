"""
Personal Bests Pipeline Package.
"""

from .config import validate_configuration
from .transform.base import PersonalBestsTransformer, transform_races_to_personal_bests

__version__ = "0.1.0"

__all__ = [
    "PersonalBestsTransformer",
    "transform_races_to_personal_bests",
    "validate_configuration",
]
