"""Integration tests for the EmergencyClassifier pipeline.

These tests run the full engine (normalizer → overrides → matchers →
adaptive rules → aggregator → calibration → titles → review) on fixture
payloads. They verify that:

- The electrical fire, fallen tree and classroom scenarios classify as expected
- A raw Image Analysis 4.0 response classifies end-to-end
- Results are deterministic, bounded and never raise for malformed evidence
- Adaptive rules adjust scores and are reported in the reasoning
- The EmergencyClassifier façade loads rules and wraps the vision client

No real HTTP calls are made; the vision client is a MagicMock.
"""

from __future__ import annotations

import json
from unittest.mock import MagicMock, patch

import pytest

from config.settings import ClassifierConfig
from emergencyclassifier import EmergencyClassifier, classify
from emergencyclassifier.models.rules import AdaptiveRule
from emergencyclassifier.models.scoring import ALL_CATEGORIES


def _config(**overrides) -> ClassifierConfig:
    values = dict(
        azure_vision_endpoint=None,
        azure_vision_key=None,
        enable_adaptive_rules=True,
        supabase_url=None,
        supabase_service_key=None,
        adaptive_rules_path=None,
    )
    values.update(overrides)
    return ClassifierConfig(**values)


# ── Reference scenarios ───────────────────────────────────────────────────────────

class TestReferenceScenarios:
    def test_electrical_fire(self, electrical_fire_payload):
        """Sparks near an outlet must classify as an electrical fire."""
        result = classify(electrical_fire_payload)

        assert result.type == "fire"
        assert result.confidence >= 0.85
        assert result.detailed_title.startswith("Fire Emergency - Electrical Fire")

    def test_fallen_tree(self, fallen_tree_payload):
        """A tree fallen across a sidewalk must classify as storm, never accident."""
        result = classify(fallen_tree_payload)

        assert result.type == "storm"
        assert "Fallen tree detected - prioritizing storm over accident classification" in result.reasoning

    def test_classroom_photo(self, school_payload):
        """A classroom group photo must classify as non_emergency in the capped band."""
        result = classify(school_payload)

        assert result.type == "non_emergency"
        assert 0.55 <= result.confidence <= 0.7
        assert result.override_rule is None


# ── End-to-end classification ─────────────────────────────────────────────────────

class TestEndToEnd:
    def test_azure_flood_response(self, azure_v4_raw):
        """A raw flooded-neighborhood response must classify as flood."""
        result = classify(azure_v4_raw)

        assert result.type == "flood"
        assert result.detailed_title.startswith("Flood Emergency")
        assert result.image_analysis["caption"] == "a flooded neighborhood with a rescue boat"
        assert result.image_analysis["people"] == 1

    def test_image_analysis_keeps_confidences(self, azure_v4_raw):
        """The evidence snapshot must keep tag and caption confidences."""
        snapshot = classify(azure_v4_raw).to_dict()["imageAnalysis"]

        assert snapshot["tags"][0] == {"name": "water", "confidence": 0.98}
        assert snapshot["captionConfidence"] == pytest.approx(0.87)
        assert snapshot["objects"][0] == {"object": "boat", "confidence": 0.81}

    def test_car_crash(self):
        """Crashed cars at an intersection must classify as accident."""
        result = classify(
            {
                "tags": [
                    {"name": "car", "confidence": 0.95},
                    {"name": "vehicle", "confidence": 0.93},
                    {"name": "road", "confidence": 0.9},
                ],
                "caption": "two cars crashed at an intersection",
                "captionConfidence": 0.85,
                "objects": [{"object": "car", "confidence": 0.9}, {"object": "car", "confidence": 0.88}],
            }
        )

        assert result.type == "accident"
        assert result.detailed_title.startswith("Accident Emergency")

    def test_building_fire_beats_structural_damage(self):
        """A burning building with a collapsed ceiling must short-circuit to fire."""
        result = classify({"caption": "building fire with collapsed ceiling and debris"})

        assert result.type == "fire"
        assert result.override_rule == "building_fire"
        assert result.confidence == pytest.approx(0.85)

    def test_fire_drill_is_not_an_emergency(self):
        """A fire drill must be suppressed to non_emergency."""
        result = classify({"caption": "fire drill with extinguishers"})

        assert result.type == "non_emergency"
        assert 0.55 <= result.confidence <= 0.7

    @pytest.mark.parametrize(
        "raw",
        [
            None,
            {},
            {"tags": "not-a-list", "peopleCount": "many"},
            {"captionResult": "a fire"},
            {"tagsResult": ["fire"], "objectsResult": None, "peopleResult": 3},
            {"readResult": "EXIT", "denseCaptionsResult": []},
            {"peopleCount": float("inf")},
            json.loads('{"peopleCount": 1e400}'),
        ],
    )
    def test_malformed_evidence_goes_to_review(self, raw):
        """Missing or malformed evidence must classify as other and request review."""
        result = classify(raw)

        assert result.type == "other"
        assert result.needs_manual_review is True
        assert result.manual_review_reasons[0] == 'Classified as "other" - manual review recommended'

    def test_scores_bounded(self, azure_v4_raw, electrical_fire_payload, school_payload):
        """Every result must carry all nine categories with scores in [0, 1]."""
        for raw in (azure_v4_raw, electrical_fire_payload, school_payload, None):
            result = classify(raw)
            assert set(result.scores) == set(ALL_CATEGORIES)
            assert all(0.0 <= v <= 1.0 for v in result.scores.values())
            assert 0.0 <= result.confidence <= 1.0

    def test_deterministic(self, azure_v4_raw, sample_adaptive_rules):
        """The same evidence and rules must produce identical results."""
        first = classify(azure_v4_raw, sample_adaptive_rules)
        second = classify(azure_v4_raw, sample_adaptive_rules)
        assert first.to_dict() == second.to_dict()


# ── Adaptive rules ────────────────────────────────────────────────────────────────

class TestAdaptiveRulesInPipeline:
    def test_penalty_rule_applied(self, azure_v4_raw):
        """A penalty rule must lower the target score and be reported."""
        rule = AdaptiveRule(
            id="r1",
            rule_name="boats_are_not_floods",
            rule_type="penalty",
            config_data={"requiredKeywords": ["boat"], "penaltyType": "flood"},
            confidence_boost=0.9,
        )
        baseline = classify(azure_v4_raw)
        adjusted = classify(azure_v4_raw, [rule])

        assert adjusted.scores["flood"] == pytest.approx(max(0.0, baseline.scores["flood"] - 0.9))
        assert "Applied 1 adaptive rule(s) learned from corrections" in adjusted.reasoning

    def test_non_matching_rules_not_reported(self, school_payload, sample_adaptive_rules):
        """Rules that change nothing must not add a reasoning entry."""
        result = classify(school_payload, sample_adaptive_rules)
        assert not any("adaptive rule" in line for line in result.reasoning)

    def test_overrides_ignore_rules(self, electrical_fire_payload):
        """An override result must not be affected by adaptive rules."""
        rule = AdaptiveRule(
            id="r2",
            rule_name="no_fire",
            rule_type="penalty",
            config_data={"penaltyType": "fire"},
            confidence_boost=1.0,
        )
        result = classify(electrical_fire_payload, [rule])
        assert result.type == "fire"
        assert result.override_rule == "electrical_fire"

    def test_malformed_rule_config_ignored(self, azure_v4_raw):
        """Rules with non-string categories or unusable boosts must not change the result."""
        rules = [
            AdaptiveRule(
                id="r3",
                rule_name="list_target",
                rule_type="pattern_rule",
                config_data={"boostType": ["fire"]},
                confidence_boost=0.5,
            ),
            AdaptiveRule(
                id="r4",
                rule_name="list_correction",
                rule_type="keyword_boost",
                config_data={"originalType": "flood", "correctedType": ["other"]},
                confidence_boost=0.5,
            ),
            AdaptiveRule(
                id="r5",
                rule_name="text_boost",
                rule_type="penalty",
                config_data={"penaltyType": "flood"},
                confidence_boost="lots",
            ),
        ]
        assert classify(azure_v4_raw, rules).to_dict() == classify(azure_v4_raw).to_dict()

    def test_rule_failure_falls_back_to_matcher_scores(self, azure_v4_raw):
        """An error while applying rules must classify with the unadjusted scores."""
        rule = AdaptiveRule(
            id="r6",
            rule_name="boats_are_not_floods",
            rule_type="penalty",
            config_data={"requiredKeywords": ["boat"], "penaltyType": "flood"},
            confidence_boost=0.9,
        )
        with patch(
            "emergencyclassifier.pipeline.apply_adaptive_rules",
            side_effect=TypeError("unsupported operand"),
        ):
            result = classify(azure_v4_raw, [rule])

        assert result.to_dict() == classify(azure_v4_raw).to_dict()
        assert not any("adaptive rule" in line for line in result.reasoning)


# ── EmergencyClassifier façade ────────────────────────────────────────────────────

class TestEmergencyClassifier:
    def test_rules_disabled(self, classifier_config):
        """Disabled adaptive rules must load nothing."""
        assert EmergencyClassifier(config=classifier_config).load_rules() == []

    def test_fixed_rules_returned(self, classifier_config, sample_adaptive_rules):
        """Rules passed at construction must be used as-is."""
        classifier = EmergencyClassifier(config=classifier_config, rules=sample_adaptive_rules)
        assert classifier.load_rules() == list(sample_adaptive_rules)

    def test_rules_from_file(self, adaptive_rules_path):
        """A configured rules file must be loaded."""
        classifier = EmergencyClassifier(config=_config(adaptive_rules_path=str(adaptive_rules_path)))
        assert len(classifier.load_rules()) == 5

    def test_missing_rules_file_degrades(self, tmp_path):
        """A missing rules file must degrade to classifying without rules."""
        classifier = EmergencyClassifier(config=_config(adaptive_rules_path=str(tmp_path / "none.json")))
        assert classifier.load_rules() == []

    def test_undecodable_rules_file_degrades(self, tmp_path):
        """A rules file that is not UTF-8 must degrade to classifying without rules."""
        path = tmp_path / "rules.json"
        path.write_bytes(b"\xff\xfe\x00[{\"id\": \"r1\"}]")
        classifier = EmergencyClassifier(config=_config(adaptive_rules_path=str(path)))

        payload = {"caption": "flooded street"}

        assert classifier.load_rules() == []
        assert classifier.classify(payload).to_dict() == classify(payload).to_dict()

    def test_no_rule_source(self):
        """No file and no rule store must load nothing."""
        assert EmergencyClassifier(config=_config()).load_rules() == []

    def test_classify(self, classifier_config, fallen_tree_payload):
        """The façade must return the engine's result."""
        classifier = EmergencyClassifier(config=classifier_config)
        assert classifier.classify(fallen_tree_payload, report_id="rpt-test").type == "storm"

    def test_classify_image(self, classifier_config, azure_v4_raw):
        """Image bytes must be analyzed by the vision client, then classified."""
        vision = MagicMock()
        vision.analyze_image.return_value = azure_v4_raw
        with EmergencyClassifier(config=classifier_config, vision_client=vision) as classifier:
            result = classifier.classify_image(b"\xff\xd8jpeg")

        vision.analyze_image.assert_called_once_with(b"\xff\xd8jpeg")
        assert result is not None
        assert result.type == "flood"
        vision.close.assert_called_once()

    def test_classify_image_vision_failure(self, classifier_config):
        """A failed vision call must produce no result."""
        vision = MagicMock()
        vision.analyze_url.return_value = None
        classifier = EmergencyClassifier(config=classifier_config, vision_client=vision)
        assert classifier.classify_image_url("https://img.example.com/x.jpg") is None

    def test_vision_not_configured(self, classifier_config):
        """Without Azure credentials image classification must return None."""
        classifier = EmergencyClassifier(config=classifier_config)
        assert classifier.classify_image(b"img") is None
