"""Unit tests for emergencyclassifier.analysis.normalizer.

Covers:
- normalize_evidence: normalized shape, string/dict tags and objects, people aliases
- normalize_evidence: malformed, missing and non-finite fields never raise
- parse_azure_v4_response: captions, tags, objects, people, OCR lines, dense captions, non-object sections
- build_all_text: ordering and lower-casing
"""

from __future__ import annotations

import pytest

from emergencyclassifier.analysis.normalizer import (
    build_all_text,
    is_azure_v4_response,
    normalize_evidence,
    parse_azure_v4_response,
)
from emergencyclassifier.models.evidence import VisionEvidence


# ── normalize_evidence ────────────────────────────────────────────────────────────

class TestNormalizeEvidence:
    def test_string_tags_have_zero_confidence(self):
        """Bare string tags must become VisionTag entries with confidence 0."""
        evidence = normalize_evidence({"tags": ["Fire", "outlet"]})
        assert [t.name for t in evidence.tags] == ["Fire", "outlet"]
        assert all(t.confidence == 0.0 for t in evidence.tags)

    def test_dict_tags_keep_confidence(self):
        """Dict tags must keep their confidence as a float."""
        evidence = normalize_evidence({"tags": [{"name": "water", "confidence": "0.9"}]})
        assert evidence.tags[0].confidence == pytest.approx(0.9)

    def test_objects_accept_object_or_name_keys(self):
        """Objects may carry their label under 'object' or 'name'."""
        evidence = normalize_evidence(
            {"objects": [{"object": "car", "confidence": 0.8}, {"name": "tree"}, "boat"]}
        )
        assert evidence.object_names == ("car", "tree", "boat")

    def test_people_count_alias(self):
        """peopleCount takes precedence over people."""
        evidence = normalize_evidence({"peopleCount": 3, "people": 1})
        assert evidence.people_count == 3

    def test_people_list_counts_entries(self):
        """A list under people counts one person per entry."""
        evidence = normalize_evidence({"people": [{}, {}]})
        assert evidence.people_count == 2

    def test_negative_people_clamped_to_zero(self):
        """A negative people count must clamp to 0."""
        assert normalize_evidence({"peopleCount": -4}).people_count == 0

    def test_none_payload_returns_empty_evidence(self):
        """None must produce empty evidence rather than raising."""
        assert normalize_evidence(None) == VisionEvidence()

    def test_non_dict_payload_returns_empty_evidence(self):
        """A list or string payload must produce empty evidence."""
        assert normalize_evidence(["fire"]) == VisionEvidence()  # type: ignore[arg-type]

    def test_malformed_fields_default_to_empty(self):
        """Wrong field types must default to empty values."""
        evidence = normalize_evidence(
            {
                "tags": "fire",
                "objects": {"object": "car"},
                "caption": None,
                "captionConfidence": "high",
                "denseCaptions": None,
                "peopleCount": "several",
            }
        )
        assert evidence.tags == ()
        assert evidence.objects == ()
        assert evidence.caption == ""
        assert evidence.caption_confidence == 0.0
        assert evidence.dense_captions == ()
        assert evidence.people_count == 0

    @pytest.mark.parametrize("count", [float("inf"), float("nan"), 1e400, "1e400"])
    def test_non_finite_people_count_defaults_to_zero(self, count):
        """Infinite or NaN people counts must default to 0."""
        assert normalize_evidence({"peopleCount": count}).people_count == 0

    def test_non_finite_confidences_default_to_zero(self):
        """Infinite or NaN confidences must default to 0."""
        evidence = normalize_evidence(
            {
                "tags": [{"name": "fire", "confidence": float("nan")}],
                "captionConfidence": float("inf"),
            }
        )
        assert evidence.tags[0].confidence == 0.0
        assert evidence.caption_confidence == 0.0

    def test_empty_names_dropped(self):
        """Tags and objects without a name must be skipped."""
        evidence = normalize_evidence({"tags": ["", {"confidence": 0.9}], "objects": [{}]})
        assert evidence.tags == ()
        assert evidence.objects == ()


# ── Azure Image Analysis 4.0 ──────────────────────────────────────────────────────

class TestAzureV4Response:
    def test_detects_azure_shape(self, azure_v4_raw):
        """A raw Image Analysis response must be recognised."""
        assert is_azure_v4_response(azure_v4_raw) is True
        assert is_azure_v4_response({"tags": ["fire"]}) is False

    def test_parse_flattens_fields(self, azure_v4_raw):
        """Caption, tags, objects, people, OCR and dense captions must be flattened."""
        payload = parse_azure_v4_response(azure_v4_raw)
        assert payload["caption"] == "a flooded neighborhood with a rescue boat"
        assert payload["captionConfidence"] == pytest.approx(0.87)
        assert payload["tags"][0] == {"name": "water", "confidence": 0.98}
        assert payload["objects"] == [
            {"object": "boat", "confidence": 0.81},
            {"object": "person", "confidence": 0.7},
        ]
        assert payload["people"] == 1
        assert payload["ocrText"] == "EVACUATION ROUTE"
        assert payload["denseCaptions"] == ["a boat on flood water", "a house surrounded by water"]

    def test_normalize_azure_response(self, azure_v4_raw):
        """normalize_evidence must accept the raw Azure response directly."""
        evidence = normalize_evidence(azure_v4_raw)
        assert len(evidence.tags) == 6
        assert evidence.object_names == ("boat", "person")
        assert evidence.people_count == 1
        assert evidence.quality_proxy == pytest.approx(0.905)

    def test_partial_azure_response(self):
        """An Azure response with only a caption must still normalize."""
        evidence = normalize_evidence({"captionResult": {"text": "smoke over a roof"}})
        assert evidence.caption == "smoke over a roof"
        assert evidence.tags == ()
        assert evidence.people_count == 0

    def test_non_object_azure_sections_ignored(self):
        """Azure sections that are not objects must be treated as empty."""
        evidence = normalize_evidence(
            {
                "captionResult": "smoke over a roof",
                "tagsResult": ["smoke"],
                "objectsResult": None,
                "peopleResult": 2,
                "readResult": "EXIT",
                "denseCaptionsResult": [{"text": "roof"}],
            }
        )
        assert evidence == VisionEvidence()


# ── build_all_text ────────────────────────────────────────────────────────────────

class TestBuildAllText:
    def test_order_and_case(self):
        """Tags, caption, objects, OCR and dense captions must be joined lower-cased in order."""
        evidence = normalize_evidence(
            {
                "tags": ["Tree"],
                "caption": "Fallen Trunk",
                "objects": [{"object": "Log"}],
                "ocrText": "ROAD CLOSED",
                "denseCaptions": ["A Sidewalk"],
            }
        )
        assert build_all_text(evidence) == "tree fallen trunk log road closed a sidewalk"

    def test_empty_evidence(self):
        """Empty evidence must yield a string of separators only."""
        assert build_all_text(VisionEvidence()).strip() == ""
