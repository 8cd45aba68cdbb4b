"""Category and score data models for EmergencyClassifier."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Tuple


class Category:
    """Category name constants."""

    FLOOD = "flood"
    ACCIDENT = "accident"
    FIRE = "fire"
    MEDICAL = "medical"
    EARTHQUAKE = "earthquake"
    STORM = "storm"
    NON_EMERGENCY = "non_emergency"
    UNCERTAIN = "uncertain"
    OTHER = "other"


# Canonical iteration order; argmax keeps the first category at the max.
ALL_CATEGORIES: Tuple[str, ...] = (
    Category.FLOOD,
    Category.ACCIDENT,
    Category.FIRE,
    Category.MEDICAL,
    Category.EARTHQUAKE,
    Category.STORM,
    Category.NON_EMERGENCY,
    Category.UNCERTAIN,
    Category.OTHER,
)

# Categories produced by the six pattern matchers.
EMERGENCY_CATEGORIES: Tuple[str, ...] = (
    Category.FLOOD,
    Category.ACCIDENT,
    Category.FIRE,
    Category.MEDICAL,
    Category.EARTHQUAKE,
    Category.STORM,
)

DISPLAY_NAMES: Dict[str, str] = {
    Category.FLOOD: "Flood",
    Category.ACCIDENT: "Accident",
    Category.FIRE: "Fire",
    Category.MEDICAL: "Medical",
    Category.EARTHQUAKE: "Earthquake",
    Category.STORM: "Storm",
    Category.NON_EMERGENCY: "Non-Emergency",
    Category.UNCERTAIN: "Uncertain",
    Category.OTHER: "Other",
}


def empty_scores() -> Dict[str, float]:
    """Return a fresh score map with every category at 0.0."""
    return {category: 0.0 for category in ALL_CATEGORIES}


def clamp_score(value: float, low: float = 0.0, high: float = 1.0) -> float:
    """Clamp a score into [low, high]."""
    return max(low, min(high, value))


@dataclass(frozen=True)
class MatchResult:
    """Output of a single category matcher.

    Attributes:
        category: Category name the score belongs to.
        score: Matcher score in [0, 1].
        features: Detected feature labels, used for titles and calibration only.
        has_indicators: Whether direct category evidence was seen (medical only).
        reasons: Human-readable reasons (uncertainty analyzer only).
    """

    category: str
    score: float
    features: Tuple[str, ...] = ()
    has_indicators: bool = True
    reasons: Tuple[str, ...] = field(default_factory=tuple)
