"""Confidence calibrator for EmergencyClassifier.

Maps the winning score to a reported confidence using evidence richness,
category feature floors and an image-quality penalty.

Pure analytical functions only — no I/O, no API calls, no side effects.
"""

from __future__ import annotations

import logging
from typing import List, Sequence

from config.defaults import (
    CAPTION_CONFIDENCE_BOOST,
    CAPTION_CONFIDENCE_BOOST_THRESHOLD,
    CONFIDENCE_CEILING,
    CONFIDENCE_FLOOR,
    EARTHQUAKE_EXTRA_FEATURE_BOOST,
    EARTHQUAKE_FEATURE_FLOOR,
    EARTHQUAKE_FULL_PATTERN_BOOST,
    EARTHQUAKE_FULL_PATTERN_CAP,
    EARTHQUAKE_PARTIAL_PATTERN_BOOST,
    EARTHQUAKE_PARTIAL_PATTERN_CAP,
    EARTHQUAKE_QUALITY_EXEMPT_FEATURES,
    FIRE_FEATURE_FLOOR,
    FIRE_STRONG_FEATURE_FLOOR,
    HIGH_CONFIDENCE_TAG_BOOST,
    HIGH_CONFIDENCE_TAG_MIN_COUNT,
    HIGH_CONFIDENCE_TAG_THRESHOLD,
    IMAGE_QUALITY_PENALTY_FACTOR,
    IMAGE_QUALITY_THRESHOLD,
    MIN_REPORTED_CONFIDENCE,
    NON_EMERGENCY_CONFIDENCE_CEILING,
    NON_EMERGENCY_CONFIDENCE_FLOOR,
    OBJECT_RICHNESS_BOOST,
    OBJECT_RICHNESS_MIN_OBJECTS,
    PEOPLE_PRESENT_BOOST,
    STORM_FEATURE_FLOOR,
    STORM_STRONG_FEATURE_FLOOR,
)
from emergencyclassifier.analysis.rule_tables import EARTHQUAKE_CONTEXT_FEATURES
from emergencyclassifier.models.evidence import VisionEvidence
from emergencyclassifier.models.scoring import Category, clamp_score

logger = logging.getLogger(__name__)

_EARTHQUAKE_STRONG_MARKERS = ("Collapsed", "Hanging", "Exposed", "Debris")


def _has_feature(features: Sequence[str], *markers: str) -> bool:
    return any(marker in f for f in features for marker in markers)


def _damage_features(features: Sequence[str]) -> List[str]:
    return [f for f in features if f not in EARTHQUAKE_CONTEXT_FEATURES]


def _richness_boost(evidence: VisionEvidence) -> float:
    boost = 0.0
    if evidence.caption_confidence > CAPTION_CONFIDENCE_BOOST_THRESHOLD:
        boost += CAPTION_CONFIDENCE_BOOST
    if len(evidence.objects) > OBJECT_RICHNESS_MIN_OBJECTS:
        boost += OBJECT_RICHNESS_BOOST
    if evidence.people_count > 0:
        boost += PEOPLE_PRESENT_BOOST
    confident_tags = sum(1 for t in evidence.tags if t.confidence > HIGH_CONFIDENCE_TAG_THRESHOLD)
    if confident_tags > HIGH_CONFIDENCE_TAG_MIN_COUNT:
        boost += HIGH_CONFIDENCE_TAG_BOOST
    return boost


def _storm_floor(confidence: float, features: Sequence[str]) -> float:
    fallen = _has_feature(features, "Fallen", "Tree", "Branch")
    blocked = _has_feature(features, "Blocked", "Pathway")
    if fallen and blocked:
        return max(confidence, STORM_STRONG_FEATURE_FLOOR)
    if fallen or blocked:
        return max(confidence, STORM_FEATURE_FLOOR)
    return confidence


def _fire_floor(confidence: float, features: Sequence[str]) -> float:
    electrical = _has_feature(features, "Electrical", "Outlet", "Plug")
    flames = _has_feature(features, "Flames", "Smoke")
    clear = flames or _has_feature(features, "Electrical")
    if electrical and flames:
        return max(confidence, FIRE_STRONG_FEATURE_FLOOR)
    if clear and len(features) >= 2:
        return max(confidence, FIRE_FEATURE_FLOOR)
    return confidence


def _earthquake_floor(confidence: float, features: Sequence[str]) -> float:
    strong = [f for f in _damage_features(features) if _has_feature([f], *_EARTHQUAKE_STRONG_MARKERS)]
    if len(strong) >= 2:
        confidence = max(confidence, EARTHQUAKE_FEATURE_FLOOR)
        if len(features) >= 3:
            confidence = min(CONFIDENCE_CEILING, confidence + EARTHQUAKE_EXTRA_FEATURE_BOOST)

    ceiling = "Collapsed Ceiling" in features
    debris = "Scattered Debris" in features
    hanging = "Hanging Fixtures" in features
    if ceiling and debris and hanging:
        confidence = min(EARTHQUAKE_FULL_PATTERN_CAP, confidence + EARTHQUAKE_FULL_PATTERN_BOOST)
    elif ceiling and (debris or hanging):
        confidence = min(EARTHQUAKE_PARTIAL_PATTERN_CAP, confidence + EARTHQUAKE_PARTIAL_PATTERN_BOOST)
    return confidence


def calibrate_confidence(
    predicted: str,
    winning_score: float,
    selection_max: float,
    evidence: VisionEvidence,
    features: Sequence[str] = (),
) -> float:
    """Compute the reported confidence for the predicted category.

    Args:
        predicted: Final predicted category.
        winning_score: Score of the predicted category after aggregation.
        selection_max: Highest score at selection time.
        evidence: Normalized vision evidence.
        features: Detected features of the predicted category's matcher.

    Returns:
        Confidence in [0, 1].
    """
    if predicted == Category.NON_EMERGENCY:
        return min(max(NON_EMERGENCY_CONFIDENCE_FLOOR, selection_max), NON_EMERGENCY_CONFIDENCE_CEILING)

    confidence = winning_score + _richness_boost(evidence)

    if predicted == Category.STORM:
        confidence = _storm_floor(confidence, features)
    elif predicted == Category.FIRE:
        confidence = _fire_floor(confidence, features)
    elif predicted == Category.EARTHQUAKE:
        confidence = _earthquake_floor(confidence, features)

    confidence = clamp_score(confidence, CONFIDENCE_FLOOR, CONFIDENCE_CEILING)

    exempt = (
        predicted == Category.EARTHQUAKE
        and len(_damage_features(features)) >= EARTHQUAKE_QUALITY_EXEMPT_FEATURES
    )
    if evidence.quality_proxy < IMAGE_QUALITY_THRESHOLD and not exempt:
        confidence *= IMAGE_QUALITY_PENALTY_FACTOR
        logger.debug("Image quality %.2f below threshold; confidence reduced", evidence.quality_proxy)

    if predicted != Category.OTHER:
        confidence = max(confidence, MIN_REPORTED_CONFIDENCE)
    return clamp_score(confidence)
