"""Classification result data model for EmergencyClassifier."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple


@dataclass(frozen=True)
class ClassificationResult:
    """Final output of one classification call.

    Serialized with to_dict() using the field names consumers store:
    detailedTitle, imageAnalysis, overrideRule, needs_manual_review,
    manual_review_reasons.
    """

    type: str
    confidence: float
    detailed_title: str
    details: Tuple[str, ...] = ()
    reasoning: Tuple[str, ...] = ()
    scores: Dict[str, float] = field(default_factory=dict)
    needs_manual_review: bool = False
    manual_review_reasons: Tuple[str, ...] = ()
    image_analysis: Dict[str, Any] = field(default_factory=dict)
    analysis: str = ""
    override_rule: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Return a JSON-serializable dict of the result."""
        return {
            "type": self.type,
            "confidence": self.confidence,
            "detailedTitle": self.detailed_title,
            "details": list(self.details),
            "reasoning": list(self.reasoning),
            "scores": dict(self.scores),
            "needs_manual_review": self.needs_manual_review,
            "manual_review_reasons": list(self.manual_review_reasons),
            "imageAnalysis": self.image_analysis,
            "analysis": self.analysis,
            "overrideRule": self.override_rule,
        }
