"""Adaptive rule applier for EmergencyClassifier.

Applies correction-derived score adjustments (see models.rules.AdaptiveRule)
to the matcher score map. Rules are loaded by clients.rule_store; this module
only evaluates them.

Pure analytical functions only — no I/O, no API calls, no side effects.
"""

from __future__ import annotations

import logging
import math
import re
from typing import Any, Dict, Iterable, List, Optional, Sequence

from config.defaults import (
    ADAPTIVE_CHANGE_EPSILON,
    ADAPTIVE_DEFAULT_BOOST,
    ADAPTIVE_ORIGINAL_TYPE_PENALTY_RATIO,
)
from emergencyclassifier.models.evidence import VisionEvidence
from emergencyclassifier.models.rules import AdaptiveRule, AdaptiveRuleType
from emergencyclassifier.models.scoring import clamp_score

logger = logging.getLogger(__name__)


def extract_rule_features(evidence: VisionEvidence) -> List[str]:
    """Return the feature words adaptive rules are matched against.

    Args:
        evidence: Normalized vision evidence.

    Returns:
        Lower-cased tag names, object names and caption words, in that order.
    """
    features: List[str] = list(evidence.tag_names)
    features.extend(evidence.object_names)
    features.extend(evidence.caption_text.split())
    return features


def _as_strings(value: Any) -> List[str]:
    if isinstance(value, str):
        return [value]
    if isinstance(value, (list, tuple)):
        return [str(v) for v in value if v is not None]
    return []


def _matches_context(config: Dict[str, Any], features: Sequence[str]) -> bool:
    """Evaluate the required/excluded keyword and context-pattern predicate."""
    text = " ".join(features)

    required = _as_strings(config.get("requiredKeywords"))
    if any(k.lower() not in text for k in required):
        return False

    excluded = _as_strings(config.get("excludedKeywords"))
    if any(k.lower() in text for k in excluded):
        return False

    for pattern in _as_strings(config.get("contextPatterns")):
        try:
            if not re.search(pattern, text, re.IGNORECASE):
                return False
        except re.error as exc:
            logger.debug("Invalid context pattern %r: %s", pattern, exc)
            return False
    return True


def _category(config: Dict[str, Any], key: str) -> Optional[str]:
    value = config.get(key)
    return value if isinstance(value, str) and value else None


def _rule_amount(rule: AdaptiveRule, config: Dict[str, Any], use_config_boost: bool) -> Optional[float]:
    """Resolve a rule's boost/penalty amount; None when it is not a finite number."""
    raw = rule.confidence_boost
    if not raw and use_config_boost:
        raw = config.get("boost")
    if not raw:
        return ADAPTIVE_DEFAULT_BOOST
    try:
        amount = float(raw)
    except (TypeError, ValueError):
        amount = math.nan
    if not math.isfinite(amount):
        logger.warning("Skipping adaptive rule '%s': invalid boost %r", rule.rule_name, raw)
        return None
    return amount


def _keyword_boost_applies(
    config: Dict[str, Any], current_best_guess: str, features: Sequence[str]
) -> bool:
    if _category(config, "originalType") != current_best_guess or not _category(config, "correctedType"):
        return False
    wanted = _as_strings(config.get("features"))
    if not wanted:
        return True
    return any(w.lower() in f for w in wanted for f in features)


def _bump(scores: Dict[str, float], category: Optional[str], delta: float) -> None:
    """Add delta to an existing category, clamped to [0, 1]."""
    if category is not None and category in scores:
        scores[category] = clamp_score(scores[category] + delta)


def apply_adaptive_rules(
    scores: Dict[str, float],
    current_best_guess: str,
    features: Sequence[str],
    rules: Iterable[AdaptiveRule],
) -> Dict[str, float]:
    """Apply every active adaptive rule to a copy of the score map.

    keyword_boost rules move score from the category the matchers favoured
    to the category a human corrected it to. pattern_rule rules boost a
    category when the feature text matches their keyword/regex predicate;
    penalty rules use the same predicate to lower a category. threshold and
    unrecognized rule types are ignored.

    Args:
        scores: Category score map. Not mutated.
        current_best_guess: Argmax of the matcher scores.
        features: Output of extract_rule_features().
        rules: Adaptive rules in store order.

    Returns:
        New score map with the same keys as scores.
    """
    updated = dict(scores)

    for rule in rules:
        if not rule.is_active:
            continue
        config = rule.config_data if isinstance(rule.config_data, dict) else {}

        if rule.rule_type == AdaptiveRuleType.KEYWORD_BOOST:
            if not _keyword_boost_applies(config, current_best_guess, features):
                continue
            boost = _rule_amount(rule, config, use_config_boost=True)
            if boost is None:
                continue
            corrected = _category(config, "correctedType")
            original = _category(config, "originalType")
            _bump(updated, corrected, boost)
            if original != corrected:
                _bump(updated, original, -boost * ADAPTIVE_ORIGINAL_TYPE_PENALTY_RATIO)
            logger.debug("Adaptive rule '%s' boosted %s by %.2f", rule.rule_name, corrected, boost)

        elif rule.rule_type == AdaptiveRuleType.PATTERN_RULE:
            if not _matches_context(config, features):
                continue
            boost = _rule_amount(rule, config, use_config_boost=False)
            if boost is None:
                continue
            target = _category(config, "boostType")
            _bump(updated, target, boost)
            logger.debug("Adaptive rule '%s' boosted %s", rule.rule_name, target)

        elif rule.rule_type == AdaptiveRuleType.PENALTY:
            if not _matches_context(config, features):
                continue
            amount = _rule_amount(rule, config, use_config_boost=False)
            if amount is None:
                continue
            target = _category(config, "penaltyType")
            _bump(updated, target, -amount)
            logger.debug("Adaptive rule '%s' penalized %s", rule.rule_name, target)

    return updated


def scores_changed(before: Dict[str, float], after: Dict[str, float]) -> bool:
    """Return True if any category moved by more than the change epsilon."""
    return any(
        abs(after.get(k, 0.0) - before.get(k, 0.0)) > ADAPTIVE_CHANGE_EPSILON
        for k in set(before) | set(after)
    )
