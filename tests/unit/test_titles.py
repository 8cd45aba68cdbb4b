"""Unit tests for emergencyclassifier.analysis.titles.

Covers:
- generate_title: feature-driven titles per category and text fallbacks
- generate_details: four fixed lines for every category
- summarize_analysis: summary sentence format
"""

from __future__ import annotations

import pytest

from emergencyclassifier.analysis.normalizer import normalize_evidence
from emergencyclassifier.analysis.titles import generate_details, generate_title, summarize_analysis
from emergencyclassifier.models.scoring import ALL_CATEGORIES, empty_scores


class TestGenerateTitle:
    def test_earthquake_with_context(self):
        """Context plus damage features must name the damaged space."""
        title = generate_title("earthquake", ("Classroom", "Collapsed Ceiling", "Scattered Debris"), "")
        assert title == "Earthquake Emergency - Damaged Classroom - Collapsed Ceiling, Scattered Debris"

    def test_earthquake_without_features(self):
        """No features must fall back to the generic structural title."""
        assert generate_title("earthquake", (), "") == "Earthquake Emergency - Structural Damage Detected"

    def test_medical_sports_context(self):
        """A sports-field context must produce a sports injury title."""
        title = generate_title("medical", ("Sports Field", "Knee Injury", "Swelling"), "")
        assert title == "Medical Emergency - Sports Injury - Knee Injury, Swelling"

    def test_medical_text_fallback(self):
        """Without features the title must be built from body-part and aid vocabulary."""
        title = generate_title("medical", (), "man on crutches with a swollen ankle at the stadium")
        assert title == "Medical Emergency - Sports Injury - Ankle Injury, Visible Injury"

    def test_medical_text_fallback_without_sports_context(self):
        """A body part named only in the text must be title-cased like detected features."""
        title = generate_title("medical", (), "bandage on his knee")
        assert title == "Medical Emergency - Knee Injury, Injury Aid Present"

    def test_medical_default(self):
        """No features and no injury vocabulary must use the default medical title."""
        assert generate_title("medical", (), "person") == "Medical Emergency - Medical Assistance Needed"

    def test_fire_features_limited_to_four(self):
        """Fire titles must list at most four features."""
        features = ("Electrical Fire", "Active Flames", "Smoke Present", "Electrical Sparks", "Wall Fire")
        title = generate_title("fire", features, "")
        assert title == "Fire Emergency - Electrical Fire, Active Flames, Smoke Present, Electrical Sparks"

    def test_fire_text_fallback(self):
        """Without features the fire title must be inferred from text."""
        assert generate_title("fire", (), "smoky kitchen") == "Fire Emergency - Smoke Present"

    def test_storm_text_fallback(self):
        """Without features a named storm must be used."""
        assert generate_title("storm", (), "tornado over farmland") == "Storm Emergency - Tornado"

    def test_accident_uses_first_feature(self):
        """Accident titles must use the first feature."""
        title = generate_title("accident", ("Vehicle Accident", "Vehicle Collision"), "")
        assert title == "Accident Emergency - Traffic Accident - Vehicle Accident"

    def test_non_emergency_school(self):
        """A school scene must be titled as a school activity."""
        assert generate_title("non_emergency", (), "student classroom") == "Non-Emergency - School Activity"

    def test_other(self):
        """An "other" result must be flagged for review in its title."""
        assert generate_title("other", (), "") == "Other Emergency - Requires Review"


class TestGenerateDetails:
    @pytest.mark.parametrize("category", ALL_CATEGORIES)
    def test_four_lines(self, category):
        """Every category must have four detail lines."""
        assert len(generate_details(category)) == 4

    def test_unknown_category_uses_other(self):
        """Unknown categories must fall back to the "other" lines."""
        assert generate_details("volcano") == generate_details("other")


class TestSummarizeAnalysis:
    def test_summary_format(self):
        """The summary must report the predicted type, top score and evidence counts."""
        evidence = normalize_evidence({"tags": ["a", "b"], "objects": ["c"], "peopleCount": 3})
        scores = empty_scores()
        scores["fire"] = 0.734
        assert summarize_analysis("fire", scores, evidence) == (
            "Azure v4 analysis: fire with 0.73 confidence. Objects: 1, People: 3, Tags: 2."
        )
