"""EmergencyClassifier configuration package."""

from config.defaults import (
    AZURE_VISION_API_VERSION,
    CONFIDENCE_FLOOR,
    DEFAULT_LOG_LEVEL,
    IMAGE_QUALITY_THRESHOLD,
    OTHER_ESCAPE_THRESHOLD,
    OTHER_SUPPRESSION_PENALTY,
    REVIEW_MAX_SCORE_THRESHOLD,
    TIE_BREAK_PRIORITY,
    TRAINING_NON_EMERGENCY_SCORE,
)
from config.settings import ClassifierConfig

__all__ = [
    "ClassifierConfig",
    "AZURE_VISION_API_VERSION",
    "CONFIDENCE_FLOOR",
    "DEFAULT_LOG_LEVEL",
    "IMAGE_QUALITY_THRESHOLD",
    "OTHER_ESCAPE_THRESHOLD",
    "OTHER_SUPPRESSION_PENALTY",
    "REVIEW_MAX_SCORE_THRESHOLD",
    "TIE_BREAK_PRIORITY",
    "TRAINING_NON_EMERGENCY_SCORE",
]
