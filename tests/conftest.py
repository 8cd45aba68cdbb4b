"""Shared pytest fixtures for EmergencyClassifier tests.

- Fixture data lives in tests/fixtures/ as static JSON files
- Vision and rule-store HTTP calls are mocked at the requests.Session level
- No real external HTTP calls are made in any test
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List

import pytest

_FIXTURES_DIR = Path(__file__).parent / "fixtures"


# ── Raw fixture data loaders ─────────────────────────────────────────────────────

@pytest.fixture(scope="session")
def azure_v4_raw() -> Dict[str, Any]:
    """Raw Image Analysis 4.0 response for a flooded neighborhood photo."""
    with open(_FIXTURES_DIR / "sample_azure_v4_response.json", encoding="utf-8") as f:
        return json.load(f)


@pytest.fixture(scope="session")
def adaptive_rules_raw() -> List[Any]:
    """Raw adaptive_classifier_config rows, including two malformed entries."""
    with open(_FIXTURES_DIR / "sample_adaptive_rules.json", encoding="utf-8") as f:
        return json.load(f)


@pytest.fixture(scope="session")
def adaptive_rules_path() -> Path:
    """Path to the adaptive rules fixture file."""
    return _FIXTURES_DIR / "sample_adaptive_rules.json"


# ── Model object fixtures ────────────────────────────────────────────────────────

@pytest.fixture(scope="session")
def sample_adaptive_rules(adaptive_rules_raw):
    """The five well-formed adaptive rules from the fixture file."""
    from emergencyclassifier.clients.rule_store import parse_rules

    return parse_rules(adaptive_rules_raw)


@pytest.fixture
def electrical_fire_payload() -> Dict[str, Any]:
    """Normalized-shape payload of a sparking wall outlet."""
    return {
        "tags": ["outlet", "fire"],
        "caption": "sparks near wall outlet",
        "objects": [],
        "ocrText": "",
        "denseCaptions": [],
        "peopleCount": 0,
    }


@pytest.fixture
def fallen_tree_payload() -> Dict[str, Any]:
    """Normalized-shape payload of a tree fallen across a sidewalk."""
    return {
        "tags": ["tree", "branch", "fallen"],
        "caption": "tree fallen across sidewalk",
        "objects": [{"object": "tree", "confidence": 0.9}],
        "peopleCount": 0,
    }


@pytest.fixture
def school_payload() -> Dict[str, Any]:
    """Normalized-shape payload of a classroom group photo."""
    return {"tags": ["student", "classroom", "group photo"]}


@pytest.fixture
def classifier_config():
    """ClassifierConfig with every external collaborator disabled."""
    from config.settings import ClassifierConfig

    return ClassifierConfig(
        azure_vision_endpoint=None,
        azure_vision_key=None,
        enable_adaptive_rules=False,
        supabase_url=None,
        supabase_service_key=None,
        adaptive_rules_path=None,
    )
