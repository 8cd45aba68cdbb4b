"""EmergencyClassifier — Rule-based emergency classification for incident photos.

Public API surface:
    - ClassifierConfig: Runtime configuration
    - EmergencyClassifier: Façade with rule loading and vision integration
    - classify / classify_evidence: Pure classification entry points
    - ClassificationResult: Result model
"""

__version__ = "1.0.0"
__author__ = "EmergencyClassifier Contributors"

from config.settings import ClassifierConfig
from emergencyclassifier.models.result import ClassificationResult
from emergencyclassifier.pipeline import EmergencyClassifier, classify, classify_evidence

__all__ = [
    "__version__",
    "ClassifierConfig",
    "ClassificationResult",
    "EmergencyClassifier",
    "classify",
    "classify_evidence",
]
