"""Declarative scoring primitives for EmergencyClassifier.

A matcher is described by data: a list of Signal entries (weighted evidence
groups), a list of Penalty entries (false-positive contexts) and a list of
FeatureRule entries (labels for titles and calibration). This module evaluates
those tables against a VisionEvidence bundle.

Pure functions only — no I/O, no side effects.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple

from emergencyclassifier.models.evidence import VisionEvidence
from emergencyclassifier.utils.text import count_matching_names, count_patterns, count_terms, matches


# ── Evidence sources ──────────────────────────────────────────────────────────

SOURCE_TEXT = "text"                # all_text blob
SOURCE_CAPTION = "caption"          # caption only
SOURCE_NARRATIVE = "narrative"      # caption + OCR + dense captions
SOURCE_DESCRIPTION = "description"  # caption, else dense captions
SOURCE_OBJECTS = "objects"          # one entry per detected object name
SOURCE_TAGS = "tags"                # one entry per tag name


@dataclass(frozen=True)
class Signal:
    """A weighted evidence group.

    Hits are the number of terms found plus the number of patterns matching
    in the chosen source. For name sources (objects, tags) terms are counted
    per name, so two "car" objects are two hits. A signal with neither terms
    nor patterns has one hit whenever its gates pass.

    Attributes:
        weight: Flat contribution, or per-hit contribution when per_match is set.
        terms: Substrings to look for.
        patterns: Regexes to look for.
        source: One of the SOURCE_* constants.
        per_match: Multiply weight by the hit count.
        cap: Upper bound of the per-hit contribution.
        base: Flat amount added on top when there is at least one hit.
        requires: Regexes over all_text that must all match for the signal to count.
        min_people: Minimum people count for the signal to count.
    """

    weight: float
    terms: Tuple[str, ...] = ()
    patterns: Tuple[str, ...] = ()
    source: str = SOURCE_TEXT
    per_match: bool = False
    cap: Optional[float] = None
    base: float = 0.0
    requires: Tuple[str, ...] = ()
    min_people: int = 0


@dataclass(frozen=True)
class Penalty:
    """Subtracted from a matcher score when a false-positive context is present.

    Attributes:
        amount: Value subtracted (the score never drops below 0).
        pattern: Regex over all_text that triggers the penalty.
        when: Optional regex that must also match.
        unless: Optional regex that cancels the penalty when it matches.
    """

    amount: float
    pattern: str
    when: Optional[str] = None
    unless: Optional[str] = None


@dataclass(frozen=True)
class FeatureRule:
    """Adds a detected-feature label when its pattern (and optional second pattern) match."""

    label: str
    pattern: str
    also: Optional[str] = None


def source_text(evidence: VisionEvidence, all_text: str, source: str) -> str:
    """Return the lower-cased text for a text-like source."""
    if source == SOURCE_CAPTION:
        return evidence.caption_text
    if source == SOURCE_NARRATIVE:
        return evidence.narrative_text
    if source == SOURCE_DESCRIPTION:
        return evidence.description_text
    return all_text


def _source_names(evidence: VisionEvidence, source: str) -> Optional[Sequence[str]]:
    if source == SOURCE_OBJECTS:
        return evidence.object_names
    if source == SOURCE_TAGS:
        return evidence.tag_names
    return None


def count_hits(signal: Signal, evidence: VisionEvidence, all_text: str) -> int:
    """Count the hits of a signal, returning 0 when any gate fails."""
    if evidence.people_count < signal.min_people:
        return 0
    if any(not matches(p, all_text) for p in signal.requires):
        return 0
    if not signal.terms and not signal.patterns:
        return 1

    names = _source_names(evidence, signal.source)
    if names is not None:
        return count_matching_names(names, signal.terms)

    text = source_text(evidence, all_text, signal.source)
    return count_terms(text, signal.terms) + count_patterns(signal.patterns, text)


def signal_score(signal: Signal, hits: int) -> float:
    """Contribution of a signal given its hit count."""
    if hits <= 0:
        return 0.0
    if not signal.per_match:
        return signal.base + signal.weight
    contribution = signal.weight * hits
    if signal.cap is not None:
        contribution = min(contribution, signal.cap)
    return signal.base + contribution


def evaluate_signals(signals: Iterable[Signal], evidence: VisionEvidence, all_text: str) -> float:
    """Sum the contributions of every signal in a table."""
    return sum(signal_score(s, count_hits(s, evidence, all_text)) for s in signals)


def penalty_applies(penalty: Penalty, all_text: str) -> bool:
    """Return True if the penalty's trigger matches and it is not cancelled."""
    if not matches(penalty.pattern, all_text):
        return False
    if penalty.when and not matches(penalty.when, all_text):
        return False
    if penalty.unless and matches(penalty.unless, all_text):
        return False
    return True


def apply_penalties(score: float, penalties: Iterable[Penalty], all_text: str) -> float:
    """Subtract each applicable penalty in order, flooring at 0 after each step."""
    for penalty in penalties:
        if penalty_applies(penalty, all_text):
            score = max(0.0, score - penalty.amount)
    return score


def detect_features(rules: Iterable[FeatureRule], all_text: str) -> List[str]:
    """Return the labels of every feature rule that matches, in table order."""
    return [
        rule.label
        for rule in rules
        if matches(rule.pattern, all_text) and (rule.also is None or matches(rule.also, all_text))
    ]
