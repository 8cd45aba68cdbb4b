"""EmergencyClassifier data models package."""

from emergencyclassifier.models.evidence import VisionEvidence, VisionObject, VisionTag
from emergencyclassifier.models.result import ClassificationResult
from emergencyclassifier.models.rules import AdaptiveRule, AdaptiveRuleType
from emergencyclassifier.models.scoring import (
    ALL_CATEGORIES,
    EMERGENCY_CATEGORIES,
    Category,
    MatchResult,
    clamp_score,
    empty_scores,
)

__all__ = [
    "VisionEvidence",
    "VisionObject",
    "VisionTag",
    "ClassificationResult",
    "AdaptiveRule",
    "AdaptiveRuleType",
    "ALL_CATEGORIES",
    "EMERGENCY_CATEGORIES",
    "Category",
    "MatchResult",
    "clamp_score",
    "empty_scores",
]
