"""Manual-review flagger for EmergencyClassifier.

Pure analytical functions only — no I/O, no API calls, no side effects.
"""

from __future__ import annotations

from typing import List, Mapping, Sequence, Tuple

from config.defaults import (
    REVIEW_MAX_SCORE_THRESHOLD,
    REVIEW_UNCERTAIN_WINNER_THRESHOLD,
    REVIEW_WEAK_MAX_SCORE,
    REVIEW_WEAK_UNCERTAIN_SCORE,
)
from emergencyclassifier.models.scoring import Category


def assess_manual_review(
    predicted: str,
    scores: Mapping[str, float],
    selection_max: float,
    top_candidates: Sequence[str],
) -> Tuple[bool, Tuple[str, ...]]:
    """Decide whether a human should review the classification.

    A result is flagged when the selection max is low, when "uncertain" won
    with a high score, when weak evidence meets a moderate uncertainty score,
    or when the final category is "other".

    Args:
        predicted: Final predicted category.
        scores: Final score map.
        selection_max: Highest score at selection time.
        top_candidates: Categories tied at the selection max.

    Returns:
        Tuple of (needs_manual_review, reasons). Reasons are empty when not flagged.
    """
    uncertain = scores.get(Category.UNCERTAIN, 0.0)
    reasons: List[str] = []

    if predicted == Category.OTHER:
        reasons.append('Classified as "other" - manual review recommended')
    if selection_max < REVIEW_MAX_SCORE_THRESHOLD:
        reasons.append(f"Low confidence ({selection_max:.2f})")
    if predicted == Category.UNCERTAIN and uncertain > REVIEW_UNCERTAIN_WINNER_THRESHOLD:
        reasons.append(f"Uncertain category selected ({uncertain:.2f})")
    if selection_max < REVIEW_WEAK_MAX_SCORE and uncertain > REVIEW_WEAK_UNCERTAIN_SCORE:
        reasons.append(f"Weak evidence with uncertainty (max {selection_max:.2f})")

    if not reasons:
        return False, ()

    reasons.append(f"Uncertain classification score: {uncertain:.2f}")
    reasons.append(f"Top candidates: {', '.join(top_candidates)}")
    return True, tuple(reasons)
