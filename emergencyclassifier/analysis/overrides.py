"""Override rule set for EmergencyClassifier.

Explicit detectors for obvious scenes, evaluated in order before any generic
scoring. The first matching rule yields a fixed-confidence result and the rest
of the pipeline is skipped. Fire rules come first so that a damaged building
with visible flames resolves to fire rather than earthquake.

Pure analytical functions only — no I/O, no API calls, no side effects.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Tuple

from emergencyclassifier.models.evidence import VisionEvidence
from emergencyclassifier.models.result import ClassificationResult
from emergencyclassifier.models.scoring import Category, empty_scores
from emergencyclassifier.utils.text import any_name_matches, matches, matches_in_either_order

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IndicatorGroup:
    """One vocabulary group of an override rule.

    The group is present when its regex matches all_text, an object name or a
    tag name contains one of its terms, or enough people are in the photo.
    """

    pattern: str
    object_terms: Tuple[str, ...] = ()
    tag_terms: Tuple[str, ...] = ()
    min_people: Optional[int] = None

    def present(self, evidence: VisionEvidence, all_text: str) -> bool:
        return (
            matches(self.pattern, all_text)
            or any_name_matches(evidence.object_names, self.object_terms)
            or any_name_matches(evidence.tag_names, self.tag_terms)
            or (self.min_people is not None and evidence.people_count >= self.min_people)
        )


@dataclass(frozen=True)
class OverrideRule:
    """A short-circuit classification rule.

    The rule fires when every group is present, or when the ordered phrase
    pattern matches in either order, and the excluded group is absent.
    """

    name: str
    category: str
    confidence: float
    title: str
    detail: str
    reasoning: str
    analysis: str
    groups: Tuple[IndicatorGroup, ...]
    ordered: Optional[Tuple[str, str]] = None
    excluded: Optional[IndicatorGroup] = None

    def matches(self, evidence: VisionEvidence, all_text: str) -> bool:
        fired = all(g.present(evidence, all_text) for g in self.groups) or (
            self.ordered is not None and matches_in_either_order(*self.ordered, all_text)
        )
        if fired and self.excluded is not None and self.excluded.present(evidence, all_text):
            return False
        return fired


# ── Indicator groups ──────────────────────────────────────────────────────────

FIRE_INDICATORS = IndicatorGroup(
    r"(fire|flame|burning|ablaze|smoke)",
    object_terms=("fire", "flame", "smoke", "burning"),
    tag_terms=("fire", "flame", "smoke", "burning"),
)
ELECTRICAL_INDICATORS = IndicatorGroup(
    r"(outlet|plug|cord|wire|socket|electrical)",
    object_terms=("outlet", "plug", "cord", "wire", "socket", "electrical", "power"),
    tag_terms=("outlet", "plug", "cord", "wire", "socket", "electrical"),
)
BUILDING_INDICATORS = IndicatorGroup(
    r"(building|structure|multi-story|two-story|roof|wall)",
    object_terms=("building", "structure", "roof", "wall"),
    tag_terms=("building", "structure", "roof"),
)
STRUCTURAL_INDICATORS = IndicatorGroup(
    r"(column|pillar|concrete|rebar|reinforcement|building|structure)",
    object_terms=("column", "pillar", "concrete", "rebar", "building", "structure"),
    tag_terms=("column", "pillar", "concrete", "building"),
)
DAMAGE_INDICATORS = IndicatorGroup(
    r"(damaged|broken|cracked|collapsed|exposed|spall|debris)",
    object_terms=("damaged", "broken", "cracked", "collapsed", "debris", "rubble"),
    tag_terms=("damaged", "broken", "debris"),
)
CEILING_INDICATORS = IndicatorGroup(
    r"(ceiling|tile|suspended)",
    object_terms=("ceiling", "tile"),
    tag_terms=("ceiling", "tile"),
)
COLLAPSE_INDICATORS = IndicatorGroup(
    r"(collapse|collapsed|fallen|hanging|broken|damaged|debris)",
    object_terms=("collapse", "fallen", "hanging", "broken", "debris"),
    tag_terms=("collapse", "damaged", "debris"),
)
TREE_INDICATORS = IndicatorGroup(
    r"(tree|branch|trunk)",
    object_terms=("tree", "branch", "trunk", "log"),
    tag_terms=("tree", "branch"),
)
FALLEN_INDICATORS = IndicatorGroup(
    r"(fallen|broken|downed|snapped|uprooted)",
    object_terms=("fallen", "broken", "downed"),
    tag_terms=("fallen", "broken"),
)
VEHICLE_INDICATORS = IndicatorGroup(
    r"(car|vehicle|truck|motorcycle|motorbike|bus|road.*accident|traffic.*accident)",
    object_terms=("car", "vehicle", "truck", "motorcycle", "bus"),
    tag_terms=("car", "vehicle", "truck"),
)
SPORTS_INDICATORS = IndicatorGroup(
    r"(sports|sport|athletic|field|turf|stadium|gym|playing)",
    object_terms=("field", "stadium", "gym", "turf"),
    tag_terms=("sports", "field", "stadium"),
)
INJURY_INDICATORS = IndicatorGroup(
    r"(injury|injured|bruise|bruised|swollen|wound|hurt|pain|knee|ankle)",
    object_terms=("injury", "wound", "bandage"),
    tag_terms=("injury", "medical"),
    min_people=1,
)
FIRST_AID_INDICATORS = IndicatorGroup(
    r"(first aid|administering|attending|treating|medical assistance|helping|person.*helping"
    r"|gloves|medical gloves|bandage|gauze)",
    object_terms=("gloves", "bandage", "gauze", "medical"),
    tag_terms=("medical", "first aid", "bandage"),
    min_people=2,
)


# ── Ordered rule list ─────────────────────────────────────────────────────────

OVERRIDE_RULES: Tuple[OverrideRule, ...] = (
    OverrideRule(
        name="electrical_fire",
        category=Category.FIRE,
        confidence=0.85,
        title="Fire Emergency - Electrical Fire",
        detail="Electrical fire detected",
        reasoning="Explicit electrical fire pattern detected",
        analysis="Electrical fire detected from outlet/cord area",
        groups=(ELECTRICAL_INDICATORS, FIRE_INDICATORS),
        ordered=(r"(outlet|plug|cord|wire|socket|electrical)", r"(fire|flame|burning|ablaze|smoke)"),
    ),
    OverrideRule(
        name="building_fire",
        category=Category.FIRE,
        confidence=0.85,
        title="Fire Emergency - Building Fire",
        detail="Building fire detected",
        reasoning="Explicit building fire pattern detected",
        analysis="Building fire detected",
        groups=(BUILDING_INDICATORS, FIRE_INDICATORS),
        ordered=(r"(building|structure|multi-story|two-story|roof)", r"(fire|flame|burning|ablaze|smoke)"),
    ),
    OverrideRule(
        name="structural_damage",
        category=Category.EARTHQUAKE,
        confidence=0.8,
        title="Earthquake Emergency - Structural Damage",
        detail="Structural column damage detected",
        reasoning="Explicit structural damage pattern detected",
        analysis="Building structural damage with exposed rebar/columns detected",
        groups=(STRUCTURAL_INDICATORS, DAMAGE_INDICATORS),
        ordered=(
            r"(column|pillar|concrete|rebar|reinforcement)",
            r"(damaged|broken|cracked|collapsed|exposed|spall)",
        ),
    ),
    OverrideRule(
        name="ceiling_collapse",
        category=Category.EARTHQUAKE,
        confidence=0.8,
        title="Earthquake Emergency - Ceiling Collapse",
        detail="Ceiling collapse detected",
        reasoning="Explicit ceiling collapse pattern detected",
        analysis="Ceiling collapse detected",
        groups=(CEILING_INDICATORS, COLLAPSE_INDICATORS),
        ordered=(
            r"(ceiling|ceiling tile|suspended ceiling)",
            r"(collapse|collapsed|fallen|hanging|broken|damaged|debris)",
        ),
    ),
    OverrideRule(
        name="fallen_tree",
        category=Category.STORM,
        confidence=0.85,
        title="Storm Emergency - Fallen Tree",
        detail="Fallen tree detected",
        reasoning="Fallen tree detected - prioritizing storm over accident classification",
        analysis="Fallen tree detected - storm damage",
        groups=(TREE_INDICATORS, FALLEN_INDICATORS),
        ordered=(r"(tree|branch|trunk)", r"(fallen|broken|downed|snapped|uprooted)"),
        excluded=VEHICLE_INDICATORS,
    ),
    OverrideRule(
        name="sports_injury",
        category=Category.MEDICAL,
        confidence=0.8,
        title="Medical Emergency - Sports Injury",
        detail="Sports injury detected",
        reasoning="Explicit sports injury pattern detected",
        analysis="Sports injury detected",
        groups=(SPORTS_INDICATORS, INJURY_INDICATORS),
        ordered=(
            r"(sports|sport|athletic|field|turf|stadium|gym|playing)",
            r"(injury|injured|bruise|bruised|swollen|wound|hurt|pain|knee|ankle)",
        ),
    ),
    OverrideRule(
        name="first_aid",
        category=Category.MEDICAL,
        confidence=0.75,
        title="Medical Emergency - First Aid Scene",
        detail="First aid being administered",
        reasoning="Explicit first aid pattern detected",
        analysis="First aid scene detected",
        groups=(FIRST_AID_INDICATORS,),
    ),
)


def has_injury_indicators(evidence: VisionEvidence, all_text: str) -> bool:
    """Return True if injury vocabulary, injury objects/tags, or any person is present."""
    return INJURY_INDICATORS.present(evidence, all_text)


def find_override(
    evidence: VisionEvidence,
    all_text: str,
    rules: Tuple[OverrideRule, ...] = OVERRIDE_RULES,
) -> Optional[OverrideRule]:
    """Return the first rule in order that matches the evidence, or None."""
    for rule in rules:
        if rule.matches(evidence, all_text):
            logger.debug("Override rule '%s' matched", rule.name)
            return rule
    return None


def build_override_result(rule: OverrideRule, evidence: VisionEvidence) -> ClassificationResult:
    """Build the fixed-confidence result of a matched override rule."""
    scores = empty_scores()
    scores[rule.category] = rule.confidence
    return ClassificationResult(
        type=rule.category,
        confidence=rule.confidence,
        detailed_title=rule.title,
        details=(rule.detail,),
        reasoning=(rule.reasoning,),
        scores=scores,
        needs_manual_review=False,
        manual_review_reasons=(),
        image_analysis=evidence.snapshot(),
        analysis=rule.analysis,
        override_rule=rule.name,
    )
