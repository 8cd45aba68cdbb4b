"""Unit tests for emergencyclassifier.analysis.aggregator.

Covers:
- argmax / top_candidates / evidence_reasoning helpers
- Selection: "other" suppression, winner selection, escape and missing-evidence resolution
- Contextual overrides: sports injury, structural damage, fallen tree
- Suppression overrides: school scene, training scenario, crowd scene
- Tie-break cues and priority, unsupported-medical demotion, keyword fallback
- aggregate: step order and input immutability
- Full step chain: weak crowd scene, flood/accident tie, keyword fallback
"""

from __future__ import annotations

import pytest

from emergencyclassifier.analysis.aggregator import (
    AggregationContext,
    AggregationState,
    aggregate,
    argmax,
    break_ties,
    demote_unsupported_medical,
    evidence_reasoning,
    fallback_from_keywords,
    favor_earthquake_for_structural_damage,
    favor_medical_for_sports_injury,
    favor_storm_for_fallen_tree,
    resolve_other,
    select_winner,
    suppress_crowd_scene,
    suppress_other,
    suppress_school_scene,
    suppress_training_scenario,
)
from emergencyclassifier.analysis.normalizer import build_all_text, normalize_evidence
from emergencyclassifier.models.scoring import MatchResult, empty_scores


def _scores(**values):
    scores = empty_scores()
    scores.update(values)
    return scores


def _ctx(payload, matches=None):
    evidence = normalize_evidence(payload)
    return AggregationContext(evidence=evidence, all_text=build_all_text(evidence), matches=matches or {})


def _state(predicted="other", selection_max=0.0, **values):
    return AggregationState(scores=_scores(**values), predicted=predicted, selection_max=selection_max)


# ── Helpers ───────────────────────────────────────────────────────────────────────

class TestHelpers:
    def test_argmax_first_in_canonical_order(self):
        """Ties must resolve to the first category in canonical order."""
        assert argmax(_scores(medical=0.5, fire=0.5)) == ("fire", 0.5)

    def test_argmax_all_zero(self):
        """An all-zero map must return the first category with 0."""
        assert argmax(empty_scores()) == ("flood", 0.0)

    def test_evidence_reasoning(self):
        """Strong matcher scores and high uncertainty must be reported in order."""
        results = {
            "flood": MatchResult("flood", 0.2),
            "fire": MatchResult("fire", 0.7),
            "storm": MatchResult("storm", 0.6),
            "uncertain": MatchResult("uncertain", 0.55),
        }
        assert evidence_reasoning(results) == [
            "Fire evidence strong (score:0.70)",
            "Storm evidence strong (score:0.60)",
            "Uncertain classification (score:0.55)",
        ]


# ── Selection ─────────────────────────────────────────────────────────────────────

class TestSelection:
    def test_suppress_other_penalizes(self):
        """Emergency evidence above 0.1 must reduce "other" by 0.5, floored at 0."""
        state = suppress_other(_state(fire=0.3, other=0.4), _ctx({}))
        assert state.scores["other"] == 0.0
        assert state.reasoning == ('Emergency indicators detected - penalizing "other" classification',)

    def test_suppress_other_noop_without_evidence(self):
        """No emergency score above 0.1 must leave the state unchanged."""
        original = _state(fire=0.1, other=0.4)
        assert suppress_other(original, _ctx({})) is original

    def test_select_winner_records_candidates(self):
        """Selection must record the argmax, tied candidates and selection max."""
        state = select_winner(_state(fire=0.5, medical=0.5), _ctx({}))
        assert state.predicted == "fire"
        assert state.top_candidates == ("fire", "medical")
        assert state.selection_max == pytest.approx(0.5)

    def test_force_escape_from_other(self):
        """An "other" winner must escape to the best emergency above 0.15."""
        state = resolve_other(_state("other", fire=0.2, other=0.6), _ctx({}))
        assert state.predicted == "fire"
        assert state.reasoning[-1] == 'Force-classified as fire (score: 0.20) to avoid "other"'

    def test_other_kept_without_evidence(self):
        """An "other" winner must stay when no emergency exceeds 0.15."""
        state = resolve_other(_state("other", fire=0.15, other=0.6), _ctx({}))
        assert state.predicted == "other"

    def test_missing_evidence_resolves_to_other(self):
        """A non-emergency-category winner without emergency evidence must become "other"."""
        state = resolve_other(_state("uncertain", uncertain=0.45), _ctx({}))
        assert state.predicted == "other"
        assert state.reasoning[-1] == "No emergency category above 0.15 - classified as other"

    def test_non_emergency_winner_kept(self):
        """A non_emergency winner must not be sent to "other"."""
        state = resolve_other(_state("non_emergency", non_emergency=0.5), _ctx({}))
        assert state.predicted == "non_emergency"


# ── Contextual overrides ──────────────────────────────────────────────────────────

class TestContextualOverrides:
    def test_sports_injury_lifts_medical(self):
        """A sports-field injury must lift medical above accident."""
        ctx = _ctx({"caption": "injured player on the soccer field"})
        state = favor_medical_for_sports_injury(_state("accident", medical=0.5, accident=0.6), ctx)
        assert state.scores["medical"] == pytest.approx(0.7)
        assert state.predicted == "medical"
        assert state.reasoning[-1] == (
            "Sports injury detected - prioritizing medical over accident classification"
        )

    def test_sports_injury_requires_medical_floor(self):
        """Medical below 0.4 must not be lifted."""
        ctx = _ctx({"caption": "injured player on the soccer field"})
        original = _state("accident", medical=0.3, accident=0.6)
        assert favor_medical_for_sports_injury(original, ctx) is original

    def test_structural_damage_lifts_earthquake(self):
        """Interior debris must lift earthquake above non_emergency."""
        ctx = _ctx({"caption": "debris scattered in the office"})
        state = favor_earthquake_for_structural_damage(
            _state("non_emergency", earthquake=0.35, non_emergency=0.5), ctx
        )
        assert state.scores["earthquake"] == pytest.approx(0.7)
        assert state.scores["non_emergency"] == pytest.approx(0.2)
        assert state.predicted == "earthquake"

    def test_fallen_tree_lifts_storm(self):
        """Branch evidence without vehicles must lift storm over accident."""
        ctx = _ctx({"caption": "broken branch on the path", "objects": ["branch"]})
        state = favor_storm_for_fallen_tree(_state("accident", accident=0.6, storm=0.2), ctx)
        assert state.scores["storm"] == pytest.approx(0.9)
        assert state.scores["accident"] == pytest.approx(0.2)
        assert state.predicted == "storm"
        assert state.reasoning[-1] == (
            "Fallen tree detected - prioritizing storm over accident classification"
        )

    def test_fallen_tree_blocked_pathway_bonus(self):
        """A blocked pathway must add 0.2 on top of the storm lift."""
        ctx = _ctx({"caption": "broken branch blocking the path"})
        state = favor_storm_for_fallen_tree(_state("accident", accident=0.3, storm=0.4), ctx)
        assert state.scores["storm"] == pytest.approx(1.0)

    def test_fallen_tree_with_vehicle_untouched(self):
        """Any vehicle vocabulary must leave accident in place."""
        ctx = _ctx({"caption": "broken branch on a car"})
        original = _state("accident", accident=0.6, storm=0.2)
        assert favor_storm_for_fallen_tree(original, ctx) is original


# ── Suppression overrides ─────────────────────────────────────────────────────────

class TestSuppressionOverrides:
    def test_school_scene(self, school_payload):
        """A classroom scene with no emergency signals must become non_emergency at 0.9."""
        state = suppress_school_scene(_state("other", uncertain=0.45), _ctx(school_payload))
        assert state.predicted == "non_emergency"
        assert state.scores["non_emergency"] == pytest.approx(0.9)

    def test_school_scene_with_injury_untouched(self):
        """Injury vocabulary must block the school suppression."""
        ctx = _ctx({"tags": ["student", "classroom"], "caption": "student with injured arm"})
        original = _state("medical", medical=0.3)
        assert suppress_school_scene(original, ctx) is original

    def test_school_scene_with_strong_emergency_untouched(self, school_payload):
        """An emergency score of 0.4 or more must block the school suppression."""
        original = _state("earthquake", earthquake=0.4)
        assert suppress_school_scene(original, _ctx(school_payload)) is original

    def test_training_scenario(self):
        """A fire drill must become non_emergency at 0.95."""
        state = suppress_training_scenario(
            _state("fire", fire=0.2), _ctx({"caption": "fire drill with extinguishers"})
        )
        assert state.predicted == "non_emergency"
        assert state.scores["non_emergency"] == pytest.approx(0.95)

    def test_crowd_scene(self):
        """A weak-evidence crowd scene without damage must become non_emergency."""
        state = suppress_crowd_scene(
            _state("uncertain", selection_max=0.3, uncertain=0.3), _ctx({"tags": ["crowd"]})
        )
        assert state.predicted == "non_emergency"
        assert state.reasoning[-1] == "Crowd scene with weak evidence - classified as non_emergency"

    def test_crowd_scene_with_damage_untouched(self):
        """Damage vocabulary must block the crowd suppression."""
        original = _state("uncertain", selection_max=0.3, uncertain=0.3)
        assert suppress_crowd_scene(original, _ctx({"tags": ["crowd", "collapsed"]})) is original


# ── Tie-break and late steps ──────────────────────────────────────────────────────

class TestTieBreakAndLateSteps:
    def test_vehicle_cue_prefers_accident(self):
        """Vehicle cues without water must resolve a tie to accident."""
        state = break_ties(_state("flood", flood=0.5, accident=0.5), _ctx({"tags": ["car"]}))
        assert state.predicted == "accident"
        assert state.reasoning[-1] == "Tie between flood, accident resolved as accident (vehicle cues)"

    def test_water_cue_keeps_flood(self):
        """Water cues must keep flood in a flood/accident tie."""
        original = _state("flood", flood=0.5, accident=0.5)
        assert break_ties(original, _ctx({"tags": ["water", "car"]})) is original

    def test_priority_order(self):
        """Without cues the priority list must decide."""
        state = break_ties(_state("flood", flood=0.5, fire=0.5), _ctx({}))
        assert state.predicted == "fire"
        assert state.reasoning[-1] == "Tie between flood, fire resolved as fire (category priority)"

    def test_no_tie_untouched(self):
        """A clear winner must not be changed."""
        original = _state("fire", fire=0.6, flood=0.5)
        assert break_ties(original, _ctx({})) is original

    def test_demote_unsupported_medical(self):
        """A medical winner without indicators must lose 0.3 and be re-selected."""
        ctx = _ctx({}, matches={"medical": MatchResult("medical", 0.5, has_indicators=False)})
        state = demote_unsupported_medical(_state("medical", medical=0.5, fire=0.3), ctx)
        assert state.scores["medical"] == pytest.approx(0.2)
        assert state.predicted == "fire"

    def test_fallback_structural_keyword(self):
        """Fire keywords must rescue an "other" winner when fire beats its rivals."""
        state = fallback_from_keywords(_state("other", fire=0.1), _ctx({"caption": "smoke"}))
        assert state.predicted == "fire"
        assert state.reasoning[-1] == "Fallback: Fire keywords detected, classifying as fire"

    def test_fallback_accident_needs_minimum(self):
        """Accident keywords must not rescue "other" at a score of 0.1 or less."""
        original = _state("other", accident=0.05)
        assert fallback_from_keywords(original, _ctx({"caption": "vehicle"})) is original


# ── aggregate ─────────────────────────────────────────────────────────────────────

class TestAggregate:
    def test_school_scene_end_to_end(self, school_payload):
        """A classroom photo must resolve to other, then to non_emergency."""
        scores = _scores(uncertain=0.45)
        state = aggregate(scores, _ctx(school_payload), ("seed",))

        assert state.predicted == "non_emergency"
        assert state.selection_max == pytest.approx(0.45)
        assert state.top_candidates == ("uncertain",)
        assert state.reasoning == (
            "seed",
            "No emergency category above 0.15 - classified as other",
            "School/campus non-emergency scenario detected - classified as non_emergency",
        )

    def test_input_scores_not_mutated(self, school_payload):
        """aggregate must not modify the caller's score map."""
        scores = _scores(uncertain=0.45)
        aggregate(scores, _ctx(school_payload))
        assert scores["non_emergency"] == 0.0


# ── Full step chain ───────────────────────────────────────────────────────────────

_OTHER_PENALIZED = 'Emergency indicators detected - penalizing "other" classification'


class TestAggregateScenarios:
    def test_weak_crowd_scene(self):
        """A weak accident score on a crowd photo must end as non_emergency."""
        ctx = _ctx({"tags": ["crowd", "people"], "caption": "a crowd of people at an outdoor rally"})
        state = aggregate(_scores(accident=0.25, other=0.2), ctx)

        assert state.predicted == "non_emergency"
        assert state.top_candidates == ("accident",)
        assert state.selection_max == pytest.approx(0.25)
        assert state.scores["other"] == 0.0
        assert state.reasoning == (
            _OTHER_PENALIZED,
            "Crowd scene with weak evidence - classified as non_emergency",
        )

    def test_crowd_scene_with_moderate_evidence_kept(self):
        """A crowd photo whose accident score clears the crowd threshold must stay accident."""
        ctx = _ctx({"tags": ["crowd", "people"], "caption": "a crowd of people at an outdoor rally"})
        state = aggregate(_scores(accident=0.32), ctx)

        assert state.predicted == "accident"
        assert state.reasoning == (_OTHER_PENALIZED,)

    def test_flood_accident_tie_with_vehicle(self):
        """A flood/accident tie with a car and no water must end as accident."""
        ctx = _ctx(
            {"tags": ["car", "road"], "caption": "a car stopped on a wet road", "objects": ["car"]}
        )
        state = aggregate(_scores(flood=0.4, accident=0.4), ctx)

        assert state.predicted == "accident"
        assert state.top_candidates == ("flood", "accident")
        assert state.reasoning == (
            _OTHER_PENALIZED,
            "Tie between flood, accident resolved as accident (vehicle cues)",
        )

    def test_flood_accident_tie_with_water(self):
        """A flood/accident tie with a water tag must stay flood."""
        ctx = _ctx({"tags": ["car", "water"], "caption": "a car in the street"})
        state = aggregate(_scores(flood=0.4, accident=0.4), ctx)

        assert state.predicted == "flood"
        assert state.reasoning == (_OTHER_PENALIZED,)

    def test_keyword_fallback_after_weak_winner(self):
        """A fire score too weak to win must be rescued by smoke in the caption."""
        ctx = _ctx({"caption": "smoke rising behind a warehouse"})
        state = aggregate(_scores(fire=0.12, other=0.3), ctx)

        assert state.predicted == "fire"
        assert state.selection_max == pytest.approx(0.12)
        assert state.reasoning == (
            _OTHER_PENALIZED,
            "No emergency category above 0.15 - classified as other",
            "Fallback: Fire keywords detected, classifying as fire",
        )
