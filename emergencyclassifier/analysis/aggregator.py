"""Score aggregator and contextual override engine for EmergencyClassifier.

Turns the per-category score map into a single predicted category through an
ordered list of transforms (AGGREGATION_STEPS). Each transform takes the
current AggregationState and returns a new one; a transform that changes the
outcome appends a reasoning entry.

Order:
    1. Suppress "other" when any emergency category has evidence.
    2. Select the winner (argmax in canonical order) and the top candidates.
    3. Escape an "other" winner, or resolve a winner with no evidence to "other".
    4. Contextual overrides: sports injury, structural damage, fallen tree.
    5. Suppression overrides: school/campus scene, training scenario.
    6. Tie-break, crowd-scene suppression, unsupported-medical demotion.
    7. Keyword fallback for a remaining "other" winner.

Pure analytical functions only — no I/O, no API calls, no side effects.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Callable, Dict, List, Mapping, Optional, Tuple

from config.defaults import (
    CROWD_EMERGENCY_THRESHOLD,
    FALLBACK_MIN_SCORE,
    FALLEN_TREE_ACCIDENT_PENALTY,
    FALLEN_TREE_BLOCKED_PATHWAY_BOOST,
    FALLEN_TREE_STORM_BOOST,
    FALLEN_TREE_STORM_FLOOR,
    FALLEN_TREE_STORM_MARGIN,
    FALLEN_TREE_STORM_TRIGGER,
    MEDICAL_NO_INDICATOR_PENALTY,
    OTHER_ESCAPE_THRESHOLD,
    OTHER_SUPPRESSION_PENALTY,
    OTHER_SUPPRESSION_THRESHOLD,
    SCHOOL_MAX_EMERGENCY_SCORE,
    SCHOOL_NON_EMERGENCY_SCORE,
    SPORTS_MEDICAL_BOOST,
    SPORTS_MEDICAL_MARGIN,
    SPORTS_MEDICAL_MIN_SCORE,
    STRONG_EVIDENCE_THRESHOLD,
    STRUCTURAL_EARTHQUAKE_BOOST,
    STRUCTURAL_EARTHQUAKE_MARGIN,
    STRUCTURAL_EARTHQUAKE_MIN_SCORE,
    STRUCTURAL_NON_EMERGENCY_PENALTY,
    TIE_BREAK_PRIORITY,
    TRAINING_NON_EMERGENCY_SCORE,
    UNCERTAIN_REASONING_THRESHOLD,
    WEAK_EVIDENCE_THRESHOLD,
)
from emergencyclassifier.analysis.overrides import has_injury_indicators
from emergencyclassifier.analysis.rule_tables import EMERGENCY_VOCABULARY_PATTERN, INTERIOR_PATTERN
from emergencyclassifier.models.evidence import VisionEvidence
from emergencyclassifier.models.scoring import (
    ALL_CATEGORIES,
    DISPLAY_NAMES,
    EMERGENCY_CATEGORIES,
    Category,
    MatchResult,
    clamp_score,
)
from emergencyclassifier.utils.text import any_name_matches, matches

logger = logging.getLogger(__name__)


# ── Context vocabularies ──────────────────────────────────────────────────────

SPORTS_CONTEXT_PATTERN = (
    r"(sports|sport|athletic|field|stadium|gym|playing|game|match|practice|training|exercise)"
)
EXTRA_INJURY_PATTERN = r"(cut|laceration|crutch|bandage|cast|brace|wrist|arm|leg)"
VEHICLE_CONTEXT_PATTERN = r"(car|vehicle|truck|motorcycle|motorbike|bus|road|street|highway|traffic)"

STRUCTURAL_DAMAGE_PATTERN = (
    r"(ceiling.*collapse|collapsed.*ceiling|hanging.*ceiling|damaged.*ceiling|fallen.*ceiling"
    r"|ceiling.*tile|debris|rubble|structural.*damage|building.*damage|exposed.*(wire|pipe)"
    r"|hanging.*(light|fixture|pipe|wire)|broken.*(ceiling|structure|infrastructure))"
)

TREE_KEYWORD_PATTERN = r"(tree|branch|trunk|fallen|broken|downed|snapped|uprooted)"
TREE_OBJECT_TERMS = ("tree", "branch", "branches", "trunk", "fallen", "broken", "downed")
BLOCKED_PATTERN = r"(blocked|obstruction|blocking)"
STORM_VEHICLE_PATTERN = (
    r"(car|vehicle|truck|motorcycle|motorbike|bus|road.*accident|traffic.*accident|vehicle.*accident)"
)

SCHOOL_PATTERN = (
    r"(student|school|campus|university|college|classroom|lecture|workshop|seminar|conference"
    r"|event|assembly|project|supreme.*student.*council|drug.*free.*workplace)"
)
EDUCATIONAL_PATTERN = (
    r"(teacher|instructor|professor|lecturer|presentation|training|class|lesson|course|education"
    r"|academic)"
)
SCHOOL_EMERGENCY_PATTERN = (
    EMERGENCY_VOCABULARY_PATTERN
    + r"|traffic.*cone|(road|vehicle|traffic|car|motorcycle).*(crash|incident|collision|damage"
    r"|emergency|disaster|chaos|panic|distress|alarm|siren|warning|danger|hazard)"
)

TRAINING_SCENARIO_PATTERNS = (
    r"(fire.*extinguisher|extinguisher.*training|fire.*safety.*training|fire.*drill|fire.*exercise"
    r"|controlled.*fire|barrel.*fire|fire.*demonstration)",
    r"(multiple.*extinguisher|extinguisher.*lined.*up|extinguisher.*supply|training.*extinguisher"
    r"|drill.*extinguisher|exercise.*extinguisher|practice.*extinguisher)",
    r"(civilian|employee|staff|worker|personnel|participant|student|trainee|instructor|teacher"
    r"|trainer).*training",
    r"(training|drill|exercise|practice|demonstration|workshop|seminar).*session",
)

TIE_VEHICLE_TERMS = (
    "car", "vehicle", "land vehicle", "truck", "bus", "motorcycle", "van", "wheel", "tire",
    "automotive tire",
)
TIE_WATER_OBJECT_TERMS = ("water", "puddle", "pond", "lake", "river")
TIE_WATER_TAG_TERMS = (
    "water", "flood", "flooding", "puddle", "river", "lake", "sea", "ocean", "wet", "rain",
)
TIE_ACCIDENT_CAPTION_PATTERN = r"(accident|collision|crash|wreck|impact)"

CROWD_PATTERN = r"(student|students|school|campus|classroom|crowd|assembly|group photo)"
CROWD_DAMAGE_PATTERN = (
    r"(collapse|collapsed|damaged|debris|hanging|broken|exposed|structural.*damage"
    r"|ceiling.*collapse|building.*damage)"
)

# Keyword fallbacks: category, vocabulary, categories it must strictly beat
# (None means the score only has to exceed FALLBACK_MIN_SCORE).
_STRUCTURAL_RIVALS = (Category.FIRE, Category.MEDICAL, Category.EARTHQUAKE, Category.STORM)
FALLBACK_RULES: Tuple[Tuple[str, str, Optional[Tuple[str, ...]]], ...] = (
    (Category.FIRE, r"(fire|flame|burning|smoke|ablaze)", _STRUCTURAL_RIVALS),
    (Category.MEDICAL, r"(injury|injured|medical|hurt|pain|wound|bruise|first aid)", _STRUCTURAL_RIVALS),
    (
        Category.EARTHQUAKE,
        r"(building|structure|damage|collapse|debris|ceiling|column|rebar)",
        _STRUCTURAL_RIVALS,
    ),
    (Category.STORM, r"(tree|branch|fallen|broken|storm|wind)", _STRUCTURAL_RIVALS),
    (Category.ACCIDENT, r"(accident|collision|crash|vehicle|car|truck)", None),
    (Category.FLOOD, r"(flood|water|flooding|submerged)", None),
)


# ── State ─────────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class AggregationContext:
    """Read-only inputs shared by every aggregation step."""

    evidence: VisionEvidence
    all_text: str
    matches: Mapping[str, MatchResult] = field(default_factory=dict)


@dataclass(frozen=True)
class AggregationState:
    """Intermediate aggregation state.

    Attributes:
        scores: Category score map (a fresh dict per state).
        predicted: Current winning category.
        top_candidates: Categories tied at the selection max, fixed at selection.
        selection_max: Highest score at selection time, before contextual overrides.
        reasoning: Reasoning entries recorded so far.
    """

    scores: Dict[str, float]
    predicted: str = Category.OTHER
    top_candidates: Tuple[str, ...] = ()
    selection_max: float = 0.0
    reasoning: Tuple[str, ...] = ()

    def with_reason(self, reason: str, **changes) -> "AggregationState":
        """Return a copy with changes applied and reason appended."""
        return replace(self, reasoning=self.reasoning + (reason,), **changes)


AggregationStep = Callable[[AggregationState, AggregationContext], AggregationState]


# ── Helpers ───────────────────────────────────────────────────────────────────

def argmax(scores: Mapping[str, float]) -> Tuple[str, float]:
    """Return the first category in canonical order holding the maximum score."""
    best, best_score = Category.OTHER, float("-inf")
    for category in ALL_CATEGORIES:
        if category in scores and scores[category] > best_score:
            best, best_score = category, scores[category]
    return best, max(best_score, 0.0)


def top_candidates(scores: Mapping[str, float], value: float) -> Tuple[str, ...]:
    """Return every category (canonical order) whose score equals value."""
    return tuple(c for c in ALL_CATEGORIES if c in scores and scores[c] == value)


def best_emergency(scores: Mapping[str, float]) -> Tuple[str, float]:
    """Return the highest-scoring emergency category and its score."""
    return argmax({c: scores.get(c, 0.0) for c in EMERGENCY_CATEGORIES})


def _any_emergency_above(scores: Mapping[str, float], threshold: float) -> bool:
    return any(scores.get(c, 0.0) > threshold for c in EMERGENCY_CATEGORIES)


def evidence_reasoning(results: Mapping[str, MatchResult]) -> List[str]:
    """Reasoning entries for strong matcher scores and a high uncertainty score."""
    reasoning = [
        f"{DISPLAY_NAMES[r.category]} evidence strong (score:{r.score:.2f})"
        for r in results.values()
        if r.category in EMERGENCY_CATEGORIES and r.score >= STRONG_EVIDENCE_THRESHOLD
    ]
    uncertain = results.get(Category.UNCERTAIN)
    if uncertain is not None and uncertain.score >= UNCERTAIN_REASONING_THRESHOLD:
        reasoning.append(f"Uncertain classification (score:{uncertain.score:.2f})")
    return reasoning


# ── Steps 1–3: selection ──────────────────────────────────────────────────────

def suppress_other(state: AggregationState, ctx: AggregationContext) -> AggregationState:
    """Penalize "other" when any emergency category has non-trivial evidence."""
    if not _any_emergency_above(state.scores, OTHER_SUPPRESSION_THRESHOLD):
        return state
    scores = dict(state.scores)
    scores[Category.OTHER] = max(0.0, scores.get(Category.OTHER, 0.0) - OTHER_SUPPRESSION_PENALTY)
    return state.with_reason(
        'Emergency indicators detected - penalizing "other" classification', scores=scores
    )


def select_winner(state: AggregationState, ctx: AggregationContext) -> AggregationState:
    """Pick the argmax winner and record the tied top candidates and selection max."""
    winner, top = argmax(state.scores)
    return replace(
        state,
        predicted=winner,
        top_candidates=top_candidates(state.scores, top),
        selection_max=top,
    )


def resolve_other(state: AggregationState, ctx: AggregationContext) -> AggregationState:
    """Escape an "other" winner, or send a winner without evidence to "other"."""
    category, score = best_emergency(state.scores)
    if state.predicted == Category.OTHER:
        if score > OTHER_ESCAPE_THRESHOLD:
            return state.with_reason(
                f'Force-classified as {category} (score: {score:.2f}) to avoid "other"',
                predicted=category,
            )
        return state

    if state.predicted != Category.NON_EMERGENCY and score <= OTHER_ESCAPE_THRESHOLD:
        return state.with_reason(
            f"No emergency category above {OTHER_ESCAPE_THRESHOLD:.2f} - classified as other",
            predicted=Category.OTHER,
        )
    return state


# ── Step 4: contextual overrides ──────────────────────────────────────────────

def _reselect(state: AggregationState, scores: Dict[str, float], reason: str) -> AggregationState:
    winner, _ = argmax(scores)
    return state.with_reason(reason, scores=scores, predicted=winner)


def favor_medical_for_sports_injury(
    state: AggregationState, ctx: AggregationContext
) -> AggregationState:
    """Lift medical over accident for sports-field injuries without vehicles."""
    text = ctx.all_text
    injury = has_injury_indicators(ctx.evidence, text) or matches(EXTRA_INJURY_PATTERN, text)
    if not (matches(SPORTS_CONTEXT_PATTERN, text) and injury) or matches(VEHICLE_CONTEXT_PATTERN, text):
        return state

    scores = dict(state.scores)
    medical, accident = scores[Category.MEDICAL], scores[Category.ACCIDENT]
    if medical < SPORTS_MEDICAL_MIN_SCORE or accident < medical:
        return state
    scores[Category.MEDICAL] = clamp_score(
        max(medical + SPORTS_MEDICAL_BOOST, accident + SPORTS_MEDICAL_MARGIN)
    )
    return _reselect(
        state, scores, "Sports injury detected - prioritizing medical over accident classification"
    )


def favor_earthquake_for_structural_damage(
    state: AggregationState, ctx: AggregationContext
) -> AggregationState:
    """Lift earthquake over non_emergency for interior structural damage."""
    text = ctx.all_text
    if not (matches(STRUCTURAL_DAMAGE_PATTERN, text) and matches(INTERIOR_PATTERN, text)):
        return state

    scores = dict(state.scores)
    earthquake, non_emergency = scores[Category.EARTHQUAKE], scores[Category.NON_EMERGENCY]
    if earthquake < STRUCTURAL_EARTHQUAKE_MIN_SCORE:
        return state
    if non_emergency < earthquake and state.predicted != Category.NON_EMERGENCY:
        return state
    scores[Category.EARTHQUAKE] = clamp_score(
        max(earthquake + STRUCTURAL_EARTHQUAKE_BOOST, non_emergency + STRUCTURAL_EARTHQUAKE_MARGIN)
    )
    scores[Category.NON_EMERGENCY] = max(0.0, non_emergency - STRUCTURAL_NON_EMERGENCY_PENALTY)
    return _reselect(
        state,
        scores,
        "Structural damage detected (ceiling collapse/debris) - prioritizing earthquake over "
        "non-emergency classification",
    )


def favor_storm_for_fallen_tree(state: AggregationState, ctx: AggregationContext) -> AggregationState:
    """Lift storm over accident when tree evidence appears without vehicles."""
    text = ctx.all_text
    tree_objects = any_name_matches(ctx.evidence.object_names, TREE_OBJECT_TERMS)
    fallen_tree = matches(TREE_KEYWORD_PATTERN, text) or tree_objects
    if not fallen_tree or matches(STORM_VEHICLE_PATTERN, text):
        return state

    scores = dict(state.scores)
    storm, accident = scores[Category.STORM], scores[Category.ACCIDENT]
    if storm < FALLEN_TREE_STORM_TRIGGER:
        storm = FALLEN_TREE_STORM_FLOOR
    storm = max(storm + FALLEN_TREE_STORM_BOOST, accident + FALLEN_TREE_STORM_MARGIN)
    if matches(BLOCKED_PATTERN, text):
        storm += FALLEN_TREE_BLOCKED_PATHWAY_BOOST
    scores[Category.STORM] = clamp_score(storm)
    scores[Category.ACCIDENT] = max(0.0, accident - FALLEN_TREE_ACCIDENT_PENALTY)
    return _reselect(
        state, scores, "Fallen tree detected - prioritizing storm over accident classification"
    )


# ── Step 5: suppression overrides ─────────────────────────────────────────────

def suppress_school_scene(state: AggregationState, ctx: AggregationContext) -> AggregationState:
    """Force non_emergency for an educational scene with no emergency signals."""
    text = ctx.all_text
    if not (matches(SCHOOL_PATTERN, text) and matches(EDUCATIONAL_PATTERN, text)):
        return state
    if matches(SCHOOL_EMERGENCY_PATTERN, text) or has_injury_indicators(ctx.evidence, text):
        return state
    _, emergency_score = best_emergency(state.scores)
    if emergency_score >= SCHOOL_MAX_EMERGENCY_SCORE:
        return state

    scores = dict(state.scores)
    scores[Category.NON_EMERGENCY] = max(scores[Category.NON_EMERGENCY], SCHOOL_NON_EMERGENCY_SCORE)
    return state.with_reason(
        "School/campus non-emergency scenario detected - classified as non_emergency",
        scores=scores,
        predicted=Category.NON_EMERGENCY,
    )


def suppress_training_scenario(state: AggregationState, ctx: AggregationContext) -> AggregationState:
    """Force non_emergency for fire-safety training, drills and demonstrations."""
    if not any(matches(p, ctx.all_text) for p in TRAINING_SCENARIO_PATTERNS):
        return state
    scores = dict(state.scores)
    scores[Category.NON_EMERGENCY] = max(scores[Category.NON_EMERGENCY], TRAINING_NON_EMERGENCY_SCORE)
    return state.with_reason(
        "Fire safety training scenario detected - classified as non_emergency",
        scores=scores,
        predicted=Category.NON_EMERGENCY,
    )


# ── Step 6: tie-break and late suppression ────────────────────────────────────

def break_ties(state: AggregationState, ctx: AggregationContext) -> AggregationState:
    """Resolve a winner tied with other categories at a positive maximum."""
    _, top = argmax(state.scores)
    if top <= 0.0 or state.scores.get(state.predicted) != top:
        return state
    tied = top_candidates(state.scores, top)
    if len(tied) < 2:
        return state

    evidence = ctx.evidence
    vehicle = (
        matches(TIE_ACCIDENT_CAPTION_PATTERN, evidence.caption_text)
        or any_name_matches(evidence.object_names, TIE_VEHICLE_TERMS)
        or any_name_matches(evidence.tag_names, TIE_VEHICLE_TERMS)
    )
    water = any_name_matches(evidence.object_names, TIE_WATER_OBJECT_TERMS) or any_name_matches(
        evidence.tag_names, TIE_WATER_TAG_TERMS
    )

    if Category.ACCIDENT in tied and vehicle and not water:
        winner, cue = Category.ACCIDENT, "vehicle cues"
    elif Category.FLOOD in tied and water:
        winner, cue = Category.FLOOD, "water cues"
    else:
        winner = next((c for c in TIE_BREAK_PRIORITY if c in tied), state.predicted)
        cue = "category priority"

    if winner == state.predicted:
        return state
    return state.with_reason(
        f"Tie between {', '.join(tied)} resolved as {winner} ({cue})", predicted=winner
    )


def suppress_crowd_scene(state: AggregationState, ctx: AggregationContext) -> AggregationState:
    """Classify weak-evidence crowd or school scenes without damage as non_emergency."""
    if state.predicted == Category.NON_EMERGENCY or state.selection_max >= WEAK_EVIDENCE_THRESHOLD:
        return state
    text = ctx.all_text
    if not matches(CROWD_PATTERN, text) or matches(CROWD_DAMAGE_PATTERN, text):
        return state
    if _any_emergency_above(state.scores, CROWD_EMERGENCY_THRESHOLD):
        return state
    return state.with_reason(
        "Crowd scene with weak evidence - classified as non_emergency",
        predicted=Category.NON_EMERGENCY,
    )


def demote_unsupported_medical(state: AggregationState, ctx: AggregationContext) -> AggregationState:
    """Lower a medical winner whose matcher saw no direct injury indicators."""
    medical = ctx.matches.get(Category.MEDICAL)
    if state.predicted != Category.MEDICAL or medical is None or medical.has_indicators:
        return state
    scores = dict(state.scores)
    scores[Category.MEDICAL] = max(0.0, scores[Category.MEDICAL] - MEDICAL_NO_INDICATOR_PENALTY)
    return _reselect(
        state, scores, "Medical score reduced - no direct injury indicators detected"
    )


# ── Step 7: keyword fallback ──────────────────────────────────────────────────

def fallback_from_keywords(state: AggregationState, ctx: AggregationContext) -> AggregationState:
    """Rescue a remaining "other" winner from emergency keywords in the text."""
    if state.predicted != Category.OTHER:
        return state
    scores = state.scores
    for category, pattern, rivals in FALLBACK_RULES:
        if not matches(pattern, ctx.all_text):
            continue
        score = scores.get(category, 0.0)
        if rivals is None:
            qualifies = score > FALLBACK_MIN_SCORE
        else:
            qualifies = all(score > scores.get(r, 0.0) for r in rivals if r != category)
        if qualifies:
            name = DISPLAY_NAMES[category]
            return state.with_reason(
                f"Fallback: {name} keywords detected, classifying as {category}",
                predicted=category,
            )
    return state


AGGREGATION_STEPS: Tuple[AggregationStep, ...] = (
    suppress_other,
    select_winner,
    resolve_other,
    favor_medical_for_sports_injury,
    favor_earthquake_for_structural_damage,
    favor_storm_for_fallen_tree,
    suppress_school_scene,
    suppress_training_scenario,
    break_ties,
    suppress_crowd_scene,
    demote_unsupported_medical,
    fallback_from_keywords,
)


def aggregate(
    scores: Mapping[str, float],
    ctx: AggregationContext,
    reasoning: Tuple[str, ...] = (),
    steps: Tuple[AggregationStep, ...] = AGGREGATION_STEPS,
) -> AggregationState:
    """Run every aggregation step in order.

    Args:
        scores: Category score map after adaptive rules. Not mutated.
        ctx: Evidence, all_text and matcher results.
        reasoning: Reasoning entries recorded before aggregation.
        steps: Transforms to apply; defaults to AGGREGATION_STEPS.

    Returns:
        Final AggregationState.
    """
    state = AggregationState(scores=dict(scores), reasoning=tuple(reasoning))
    for step in steps:
        state = step(state, ctx)
    logger.debug(
        "Aggregation selected %s (selection max %.2f, candidates: %s)",
        state.predicted,
        state.selection_max,
        ", ".join(state.top_candidates),
    )
    return state
