"""EmergencyClassifier analysis package.

Pure analytical functions only — no I/O, no API calls, no side effects.
All functions operate on typed models from emergencyclassifier.models.
"""

from emergencyclassifier.analysis.adaptive import apply_adaptive_rules, extract_rule_features
from emergencyclassifier.analysis.aggregator import AggregationContext, AggregationState, aggregate
from emergencyclassifier.analysis.calibration import calibrate_confidence
from emergencyclassifier.analysis.matchers import assess_uncertainty, run_matchers
from emergencyclassifier.analysis.normalizer import build_all_text, normalize_evidence
from emergencyclassifier.analysis.overrides import OVERRIDE_RULES, build_override_result, find_override
from emergencyclassifier.analysis.review import assess_manual_review
from emergencyclassifier.analysis.titles import generate_details, generate_title, summarize_analysis

__all__ = [
    "apply_adaptive_rules",
    "extract_rule_features",
    "AggregationContext",
    "AggregationState",
    "aggregate",
    "calibrate_confidence",
    "assess_uncertainty",
    "run_matchers",
    "build_all_text",
    "normalize_evidence",
    "OVERRIDE_RULES",
    "build_override_result",
    "find_override",
    "assess_manual_review",
    "generate_details",
    "generate_title",
    "summarize_analysis",
]
