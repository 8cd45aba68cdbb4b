"""Adaptive rule data model for EmergencyClassifier.

Adaptive rules are learned outside this package from human corrections and
stored in the adaptive_classifier_config table. The classifier only reads them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional


class AdaptiveRuleType:
    """Rule type constants."""

    KEYWORD_BOOST = "keyword_boost"
    PATTERN_RULE = "pattern_rule"
    THRESHOLD = "threshold"
    PENALTY = "penalty"


@dataclass(frozen=True)
class AdaptiveRule:
    """A correction-derived score adjustment.

    config_data keys by rule type:
        keyword_boost: originalType, correctedType, features, boost
        pattern_rule:  requiredKeywords, excludedKeywords, contextPatterns, boostType
        penalty:       requiredKeywords, excludedKeywords, contextPatterns, penaltyType
    """

    id: str
    rule_name: str
    rule_type: str
    config_data: Dict[str, Any] = field(default_factory=dict)
    confidence_boost: Optional[float] = None
    is_active: bool = True
    learned_from_corrections: int = 0

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AdaptiveRule":
        """Build a rule from a table row or JSON object.

        Raises:
            ValueError: If rule_type is missing or config_data is not an object.
        """
        rule_type = data.get("rule_type")
        if not rule_type:
            raise ValueError("adaptive rule has no rule_type")
        config_data = data.get("config_data") or {}
        if not isinstance(config_data, dict):
            raise ValueError(f"config_data must be an object, got {type(config_data).__name__}")
        boost = data.get("confidence_boost")
        return cls(
            id=str(data.get("id", "")),
            rule_name=str(data.get("rule_name", "")),
            rule_type=str(rule_type),
            config_data=config_data,
            confidence_boost=float(boost) if boost is not None else None,
            is_active=bool(data.get("is_active", True)),
            learned_from_corrections=int(data.get("learned_from_corrections") or 0),
        )
