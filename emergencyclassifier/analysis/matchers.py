"""Category pattern matchers for EmergencyClassifier.

Each matcher maps (VisionEvidence, all_text) to a MatchResult carrying a score
in [0, 1] and the detected-feature labels used for titles and calibration.
Weights, vocabularies and penalties live in analysis.rule_tables; the functions
here only combine them. Matchers are independent of each other.

Pure analytical functions only — no I/O, no API calls, no side effects.
"""

from __future__ import annotations

import logging
from typing import Callable, Dict, List, Tuple

from config.defaults import UNCERTAIN_LOW_QUALITY_THRESHOLD
from emergencyclassifier.analysis import rule_tables as rt
from emergencyclassifier.analysis.signals import (
    apply_penalties,
    count_hits,
    detect_features,
    evaluate_signals,
    signal_score,
)
from emergencyclassifier.models.evidence import VisionEvidence
from emergencyclassifier.models.scoring import Category, MatchResult, clamp_score
from emergencyclassifier.utils.text import (
    any_name_matches,
    contains_any,
    count_patterns,
    count_terms,
    matches,
)

logger = logging.getLogger(__name__)

Matcher = Callable[[VisionEvidence, str], MatchResult]


def _title_case(word: str) -> str:
    return word[:1].upper() + word[1:]


# ── Flood ─────────────────────────────────────────────────────────────────────

def match_flood(evidence: VisionEvidence, all_text: str) -> MatchResult:
    """Score flood evidence: water words, rescue equipment, and water depth cues.

    Recreational, clean-water, happy-people and crowd contexts are penalized.
    Without a flood word in the caption/OCR/dense captions and without flood
    objects the score is capped very low.
    """
    score = evaluate_signals(rt.FLOOD_SIGNALS, evidence, all_text)
    score = apply_penalties(score, rt.FLOOD_PENALTIES, all_text)

    has_flood_word = count_hits(rt.FLOOD_WORD, evidence, all_text) > 0
    flood_objects = count_hits(rt.FLOOD_OBJECTS, evidence, all_text)
    if not has_flood_word and flood_objects == 0:
        score = min(score, rt.FLOOD_NO_EVIDENCE_CAP)

    features = detect_features(rt.FLOOD_FEATURES, all_text)
    return MatchResult(Category.FLOOD, clamp_score(score), tuple(features))


# ── Accident ──────────────────────────────────────────────────────────────────

def match_accident(evidence: VisionEvidence, all_text: str) -> MatchResult:
    """Score traffic-accident evidence: vehicles, collisions, responders, road context.

    Tree/branch evidence without any vehicle object is heavily penalized so that
    storm damage is not read as an accident. School, sports-injury and social
    gathering contexts are penalized afterwards.
    """
    score = evaluate_signals(rt.ACCIDENT_SIGNALS, evidence, all_text)

    vehicle_objects = count_hits(rt.VEHICLE_OBJECTS, evidence, all_text)
    tree_text = matches(rt.TREE_DAMAGE_PATTERN, all_text) and not matches(
        rt.TREE_VEHICLE_PATTERN, all_text
    )
    tree_objects = any_name_matches(evidence.object_names, rt.TREE_OBJECT_TERMS)
    if (tree_text or tree_objects) and vehicle_objects == 0:
        score = max(0.0, score - rt.ACCIDENT_TREE_PENALTY)

    score = apply_penalties(score, rt.ACCIDENT_PENALTIES, all_text)

    features = detect_features(rt.ACCIDENT_FEATURES, all_text)
    return MatchResult(Category.ACCIDENT, clamp_score(score), tuple(features))


# ── Fire ──────────────────────────────────────────────────────────────────────

def _fire_features(all_text: str) -> List[str]:
    features = detect_features(rt.FIRE_FEATURES, all_text)
    if "Electrical Outlet" not in features:
        features.extend(detect_features((rt.FIRE_WALL_FEATURE,), all_text))
    features.extend(detect_features(rt.FIRE_TRAILING_FEATURES, all_text))
    return features


def match_fire(evidence: VisionEvidence, all_text: str) -> MatchResult:
    """Score fire evidence: flames, smoke, electrical and building fire cues.

    Training, controlled-fire, business attire, calm bystanders and
    extinguisher line-ups are penalized in turn, and any such vocabulary caps
    the score so that safety drills are not reported as fires.
    """
    score = evaluate_signals(rt.FIRE_SIGNALS, evidence, all_text)
    score = apply_penalties(score, rt.FIRE_PENALTIES, all_text)
    if matches(rt.FIRE_TRAINING_SCENARIO_PATTERN, all_text):
        score = min(score, rt.FIRE_TRAINING_CAP)

    return MatchResult(Category.FIRE, clamp_score(score), tuple(_fire_features(all_text)))


# ── Medical ───────────────────────────────────────────────────────────────────

def _has_injured_body_part(all_text: str) -> bool:
    swollen_or_bruised = "bruised" in all_text or "swollen" in all_text
    return any(
        f"{part} injury" in all_text
        or f"injured {part}" in all_text
        or (f"{part} is" in all_text and swollen_or_bruised)
        for part in rt.SCORING_BODY_PARTS
    )


def _find_injured_part(all_text: str) -> str:
    condition_words = ("bruised", "swollen", "hurt", "blood", "bleeding")
    for part in rt.FEATURE_BODY_PARTS:
        if (
            f"{part} injury" in all_text
            or f"injured {part}" in all_text
            or f"{part} wound" in all_text
            or f"bleeding {part}" in all_text
            or (part in all_text and contains_any(all_text, condition_words))
        ):
            return part
    return ""


def _medical_features(all_text: str) -> List[str]:
    features: List[str] = []

    injured_part = _find_injured_part(all_text)
    if injured_part:
        features.append(f"{_title_case(injured_part)} Injury")

    features.extend(detect_features(rt.MEDICAL_FEATURES, all_text))
    if matches(rt.MEDICAL_HEAD_INJURY_PATTERN, all_text) and injured_part not in ("head", "face"):
        features.append("Head Injury")

    if matches(r"(grimacing|grimace)", all_text):
        features.append("Grimacing in Pain")
    elif matches(r"(pain|hurt|suffering|distress)", all_text):
        features.append("Visible Pain")

    features.extend(detect_features(rt.MEDICAL_POSTURE_FEATURES, all_text))
    if matches(rt.MEDICAL_CLUTCHING_PATTERN, all_text):
        clutched = next(
            (
                part
                for part in rt.FEATURE_BODY_PARTS
                if f"clutching {part}" in all_text or f"holding {part}" in all_text
            ),
            "",
        )
        features.append(f"Clutching {_title_case(clutched)}" if clutched else "Clutching Injured Area")

    features.extend(detect_features(rt.MEDICAL_AID_FEATURES, all_text))

    if matches(rt.MEDICAL_SPORTS_FIELD_PATTERN, all_text):
        features.insert(0, "Sports Field")
    elif matches(rt.MEDICAL_SPORTS_ATTIRE_PATTERN, all_text):
        features.insert(0, "Sports Activity")
    return features


def match_medical(evidence: VisionEvidence, all_text: str) -> MatchResult:
    """Score medical evidence: injury vocabulary, aids, visible injuries and pain.

    Sports-field injuries, first-aid scenes and people lying down with injury
    cues are boosted; crowd scenes without any injury cue are penalized.
    has_indicators reports whether any direct medical evidence was seen.
    """
    people = evidence.people_count

    keyword_hits = count_hits(rt.MEDICAL_KEYWORD_SIGNAL, evidence, all_text)
    object_hits = count_hits(rt.MEDICAL_OBJECT_SIGNAL, evidence, all_text)
    visual_hits = count_hits(rt.VISUAL_INJURY_SIGNAL, evidence, all_text)
    pain_hits = count_hits(rt.PAIN_SIGNAL, evidence, all_text)
    body_part = _has_injured_body_part(all_text)

    score = (
        signal_score(rt.MEDICAL_KEYWORD_SIGNAL, keyword_hits)
        + signal_score(rt.MEDICAL_OBJECT_SIGNAL, object_hits)
        + signal_score(rt.VISUAL_INJURY_SIGNAL, visual_hits)
        + signal_score(rt.PAIN_SIGNAL, pain_hits)
    )
    if body_part:
        score += rt.MEDICAL_BODY_PART_BOOST

    direct_indicators = keyword_hits > 0 or object_hits > 0 or visual_hits > 0
    if direct_indicators and people > 0:
        score += min(people * rt.MEDICAL_PEOPLE_WEIGHT, rt.MEDICAL_PEOPLE_CAP)

    injury_cue = visual_hits > 0 or body_part or pain_hits > 0
    if injury_cue and matches(rt.MEDICAL_SPORTS_PATTERN, all_text):
        score += rt.MEDICAL_SPORTS_BOOST
    if people >= rt.MEDICAL_FIRST_AID_MIN_PEOPLE and matches(rt.MEDICAL_FIRST_AID_PATTERN, all_text):
        score += rt.MEDICAL_FIRST_AID_BOOST
    if injury_cue and matches(rt.MEDICAL_LYING_PATTERN, all_text):
        score += rt.MEDICAL_LYING_BOOST

    crowd_scene = contains_any(all_text, rt.MEDICAL_CROWD_TERMS)
    if crowd_scene and not direct_indicators and visual_hits == 0 and not body_part:
        score = max(0.0, score - rt.MEDICAL_CROWD_PENALTY)

    has_indicators = (
        direct_indicators
        or body_part
        or matches(rt.MEDICAL_CAPTION_INDICATOR_PATTERN, evidence.description_text)
    )

    return MatchResult(
        Category.MEDICAL,
        clamp_score(score),
        tuple(_medical_features(all_text)),
        has_indicators=has_indicators,
    )


# ── Earthquake ────────────────────────────────────────────────────────────────

def match_earthquake(evidence: VisionEvidence, all_text: str) -> MatchResult:
    """Score structural-damage evidence: columns, rebar, ceilings, debris, hanging fixtures.

    Interior spaces with damage are boosted; scenes described as clean or
    intact are penalized while the score is still low.
    """
    keyword_hits = count_hits(rt.EARTHQUAKE_KEYWORD_SIGNAL, evidence, all_text)
    structural_objects = count_hits(rt.STRUCTURAL_OBJECT_SIGNAL, evidence, all_text)
    ceiling_hits = count_hits(rt.CEILING_KEYWORD_SIGNAL, evidence, all_text)
    ceiling_objects = count_hits(rt.CEILING_OBJECT_SIGNAL, evidence, all_text) > 0
    debris_hits = count_hits(rt.DEBRIS_KEYWORD_SIGNAL, evidence, all_text)
    debris_objects = count_hits(rt.DEBRIS_OBJECT_SIGNAL, evidence, all_text) > 0
    hanging_hits = count_hits(rt.HANGING_SIGNAL, evidence, all_text)

    column_damage = matches(rt.COLUMN_CONTEXT_PATTERN, all_text) and matches(
        rt.COLUMN_DAMAGE_PATTERN, all_text
    )
    rebar_exposed = matches(rt.REBAR_PATTERN, all_text)

    score = signal_score(rt.EARTHQUAKE_KEYWORD_SIGNAL, keyword_hits)
    if column_damage or rebar_exposed:
        score += rt.COLUMN_DAMAGE_BOOST
    score += signal_score(rt.STRUCTURAL_OBJECT_SIGNAL, structural_objects)
    if ceiling_hits > 0 or ceiling_objects:
        score += rt.CEILING_KEYWORD_SIGNAL.weight
        if matches(rt.CEILING_DEBRIS_PATTERN, all_text):
            score += rt.CEILING_DEBRIS_BOOST
    if debris_hits > 0 or debris_objects:
        score += rt.DEBRIS_KEYWORD_SIGNAL.weight
    score += evaluate_signals(rt.EARTHQUAKE_SIGNALS, evidence, all_text)

    is_interior = matches(rt.INTERIOR_PATTERN, all_text)
    has_damage = keyword_hits > 0 or structural_objects > 0 or ceiling_hits > 0 or debris_hits > 0
    if is_interior and has_damage:
        score += rt.INTERIOR_DAMAGE_BOOST

    if matches(rt.NORMAL_SCENE_PATTERN, all_text) and score < rt.NORMAL_SCENE_MAX_SCORE:
        score = max(0.0, score - rt.NORMAL_SCENE_PENALTY)

    patterns = rt.EARTHQUAKE_FEATURE_PATTERNS
    flags: List[Tuple[str, bool]] = [
        ("Collapsed Ceiling", ceiling_hits > 0 or ceiling_objects
         or matches(patterns["Collapsed Ceiling"], all_text)),
        ("Scattered Debris", debris_hits > 0 or debris_objects
         or matches(patterns["Scattered Debris"], all_text)),
        ("Hanging Fixtures", hanging_hits > 0 or matches(patterns["Hanging Fixtures"], all_text)),
        ("Exposed Infrastructure", matches(patterns["Exposed Infrastructure"], all_text)),
        ("Damaged Furniture", matches(patterns["Damaged Furniture"], all_text)),
        ("Wall Damage", matches(patterns["Wall Damage"], all_text)),
        ("Damaged Columns", column_damage or rebar_exposed
         or matches(patterns["Damaged Columns"], all_text)),
        ("Exposed Reinforcement", rebar_exposed),
        ("Concrete Spalling", matches(patterns["Concrete Spalling"], all_text)),
    ]
    features = [label for label, present in flags if present]
    if matches(rt.CLASSROOM_PATTERN, all_text):
        features.insert(0, "Classroom")
    elif is_interior:
        features.insert(0, "Interior Space")

    return MatchResult(Category.EARTHQUAKE, clamp_score(score), tuple(features))


# ── Storm ─────────────────────────────────────────────────────────────────────

def _storm_features(evidence: VisionEvidence, all_text: str) -> List[str]:
    objects = evidence.object_names
    features: List[str] = []

    tree_object = any(
        ("tree" in name or "trunk" in name)
        and contains_any(name, ("fallen", "broken", "downed"))
        for name in objects
    )
    if count_patterns(rt.FALLEN_TREE_PATTERNS, all_text) > 0 or tree_object:
        features.append("Fallen Tree")

    branch_object = any(
        "branch" in name and contains_any(name, ("fallen", "broken")) for name in objects
    )
    if count_patterns(rt.FALLEN_BRANCH_PATTERNS, all_text) > 0 or branch_object:
        features.append("Fallen Branch")

    blocked_path = matches(rt.BLOCKED_PATTERN, all_text) and matches(rt.PATHWAY_PATTERN, all_text)
    pathway_objects = any_name_matches(objects, rt.PATHWAY_OBJECT_TERMS)
    if blocked_path or features or (pathway_objects and tree_object):
        features.append("Pathway Blocked")

    features.extend(detect_features(rt.STORM_TYPE_FEATURES, all_text)[:1])
    features.extend(detect_features((rt.WIND_DAMAGE_FEATURE,), all_text))

    if matches(rt.TREE_DEBRIS_PATTERN, all_text) and (
        matches(rt.TREE_WORD_PATTERN, all_text) or features
    ):
        if "Fallen Tree" not in features and "Fallen Branch" not in features:
            features.append("Tree Debris")

    features.extend(detect_features((rt.RECENT_DAMAGE_FEATURE,), all_text))
    return features


def match_storm(evidence: VisionEvidence, all_text: str) -> MatchResult:
    """Score storm evidence: weather vocabulary and fallen trees or branches.

    A tree object is a very strong storm cue, stronger again when it blocks
    a path, sidewalk or road.
    """
    score = evaluate_signals(rt.STORM_SIGNALS, evidence, all_text)
    return MatchResult(
        Category.STORM, clamp_score(score), tuple(_storm_features(evidence, all_text))
    )


# ── Uncertainty ───────────────────────────────────────────────────────────────

def assess_uncertainty(evidence: VisionEvidence, all_text: str) -> MatchResult:
    """Score how unreliable the evidence is for automated classification.

    Low image quality, conflicting emergency families, generic scene words,
    recreational or training activity, sparse detections and unclear captions
    each add to the score and record a reason.
    """
    score = 0.0
    reasons: List[str] = []

    quality = evidence.quality_proxy
    if quality < UNCERTAIN_LOW_QUALITY_THRESHOLD:
        score += rt.UNCERTAIN_LOW_QUALITY_BOOST
        reasons.append(f"Low image quality ({quality:.2f})")

    conflicts = sum(1 for family in rt.CONFLICT_FAMILIES if contains_any(all_text, family))
    if conflicts >= rt.UNCERTAIN_CONFLICT_MIN:
        score += rt.UNCERTAIN_CONFLICT_BOOST
        reasons.append(f"Conflicting evidence detected ({conflicts} emergency types)")

    ambiguous = count_terms(all_text, rt.AMBIGUOUS_TERMS)
    if ambiguous >= rt.UNCERTAIN_AMBIGUOUS_MIN:
        score += rt.UNCERTAIN_AMBIGUOUS_BOOST
        reasons.append(f"Ambiguous scene detected ({ambiguous} generic terms)")

    recreational = count_terms(all_text, rt.RECREATIONAL_TERMS)
    if recreational >= rt.UNCERTAIN_RECREATIONAL_MIN:
        score += rt.UNCERTAIN_RECREATIONAL_BOOST
        reasons.append(f"Recreational water activity detected ({recreational} recreational terms)")

    training = count_terms(all_text, rt.TRAINING_TERMS)
    if training >= rt.UNCERTAIN_TRAINING_MIN:
        score += rt.UNCERTAIN_TRAINING_BOOST
        reasons.append(f"Training/drill activity detected ({training} training terms)")

    object_count = len(evidence.objects)
    tag_count = len(evidence.tags)
    if object_count < rt.UNCERTAIN_MIN_OBJECTS and tag_count < rt.UNCERTAIN_MIN_TAGS:
        score += rt.UNCERTAIN_POOR_DETECTION_BOOST
        reasons.append(f"Poor object detection ({object_count} objects, {tag_count} tags)")

    unclear = count_terms(evidence.caption_text, rt.UNCLEAR_TERMS)
    if unclear > 0:
        score += rt.UNCERTAIN_UNCLEAR_BOOST
        reasons.append(f"Unclear description ({unclear} unclear terms)")

    return MatchResult(Category.UNCERTAIN, clamp_score(score), reasons=tuple(reasons))


# ── Registry ──────────────────────────────────────────────────────────────────

# Evaluation order of the six category matchers; also the order of the
# "<Category> evidence strong" reasoning entries.
MATCHERS: Tuple[Matcher, ...] = (
    match_flood,
    match_accident,
    match_fire,
    match_medical,
    match_earthquake,
    match_storm,
)


def run_matchers(evidence: VisionEvidence, all_text: str) -> Dict[str, MatchResult]:
    """Run every category matcher plus the uncertainty analyzer.

    Returns:
        Dict mapping category name to its MatchResult, in MATCHERS order with
        the uncertain result last.
    """
    results: Dict[str, MatchResult] = {}
    for matcher in MATCHERS:
        result = matcher(evidence, all_text)
        results[result.category] = result
    uncertain = assess_uncertainty(evidence, all_text)
    results[uncertain.category] = uncertain

    logger.debug(
        "Matcher scores: %s",
        ", ".join(f"{name}={r.score:.2f}" for name, r in results.items()),
    )
    return results
