"""Unit tests for emergencyclassifier.clients.rule_store.

Covers:
- parse_rules: malformed rows skipped, non-list rejected
- load_rules_from_file: fixture file, missing file
- AdaptiveRuleStore.load_rules: request shape, HTTP / transport / JSON failures
"""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest
import requests

from config.settings import ClassifierConfig
from emergencyclassifier.clients.rule_store import (
    AdaptiveRuleStore,
    RuleStoreError,
    load_rules_from_file,
    parse_rules,
)


def _store() -> AdaptiveRuleStore:
    return AdaptiveRuleStore(supabase_url="https://project.supabase.co/", service_key="service-key")


def _response(status_code=200, payload=None, text=""):
    mock = MagicMock()
    mock.status_code = status_code
    mock.text = text
    mock.json.return_value = payload if payload is not None else []
    return mock


# ── parse_rules ───────────────────────────────────────────────────────────────────

class TestParseRules:
    def test_fixture_rows(self, adaptive_rules_raw):
        """Malformed rows must be skipped and the rest kept in order."""
        rules = parse_rules(adaptive_rules_raw)
        assert [r.rule_name for r in rules] == [
            "boat_scenes_are_flood",
            "tree_on_sidewalk_is_storm",
            "pool_is_not_flood",
            "threshold_medical",
            "retired_smoke_rule",
        ]
        assert rules[4].is_active is False

    def test_non_list_rejected(self):
        """A non-array payload must raise RuleStoreError."""
        with pytest.raises(RuleStoreError):
            parse_rules({"rule_type": "penalty"})


# ── load_rules_from_file ──────────────────────────────────────────────────────────

class TestLoadRulesFromFile:
    def test_fixture_file(self, adaptive_rules_path):
        """The fixture file must load five rules."""
        assert len(load_rules_from_file(adaptive_rules_path)) == 5

    def test_missing_file(self, tmp_path):
        """A missing file must raise RuleStoreError."""
        with pytest.raises(RuleStoreError):
            load_rules_from_file(tmp_path / "absent.json")

    def test_invalid_json_file(self, tmp_path):
        """An unparseable file must raise RuleStoreError."""
        path = tmp_path / "rules.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(RuleStoreError):
            load_rules_from_file(path)

    def test_undecodable_file(self, tmp_path):
        """A file that is not UTF-8 must raise RuleStoreError."""
        path = tmp_path / "rules.json"
        path.write_bytes(b"\xff\xfe\x00[]")
        with pytest.raises(RuleStoreError):
            load_rules_from_file(path)

    def test_overflowing_boost_row_skipped(self):
        """A row whose boost overflows a float must be skipped."""
        rows = [
            {"id": "r1", "rule_name": "huge", "rule_type": "penalty", "confidence_boost": 10 ** 400},
            {"id": "r2", "rule_name": "ok", "rule_type": "penalty", "confidence_boost": 0.2},
        ]
        assert [r.rule_name for r in parse_rules(rows)] == ["ok"]


# ── AdaptiveRuleStore ─────────────────────────────────────────────────────────────

class TestAdaptiveRuleStore:
    def test_from_config_requires_credentials(self, classifier_config):
        """from_config must reject a config without Supabase credentials."""
        with pytest.raises(ValueError):
            AdaptiveRuleStore.from_config(classifier_config)

    def test_from_config(self):
        """from_config must use the configured URL, key and table."""
        config = ClassifierConfig(supabase_url="https://p.supabase.co", supabase_service_key="k")
        store = AdaptiveRuleStore.from_config(config)
        assert store.rules_url == "https://p.supabase.co/rest/v1/adaptive_classifier_config"

    def test_load_rules_request(self, adaptive_rules_raw):
        """load_rules must request active rules with service-role headers."""
        store = _store()
        with patch.object(store._session, "get", return_value=_response(payload=adaptive_rules_raw)) as get:
            rules = store.load_rules()

        assert len(rules) == 5
        args, kwargs = get.call_args
        assert args[0] == "https://project.supabase.co/rest/v1/adaptive_classifier_config"
        assert kwargs["params"]["is_active"] == "eq.true"
        assert kwargs["params"]["order"] == "learned_from_corrections.desc"
        assert kwargs["headers"]["apikey"] == "service-key"
        assert kwargs["headers"]["Authorization"] == "Bearer service-key"

    def test_http_error(self):
        """A non-200 response must raise RuleStoreError."""
        store = _store()
        with patch.object(store._session, "get", return_value=_response(401, text="denied")):
            with pytest.raises(RuleStoreError):
                store.load_rules()

    def test_transport_error(self):
        """A transport failure must raise RuleStoreError."""
        store = _store()
        with patch.object(
            store._session, "get", side_effect=requests.exceptions.ConnectionError("down")
        ):
            with pytest.raises(RuleStoreError):
                store.load_rules()

    def test_invalid_json(self):
        """An unparseable body must raise RuleStoreError."""
        store = _store()
        resp = _response()
        resp.json.side_effect = ValueError("bad json")
        with patch.object(store._session, "get", return_value=resp):
            with pytest.raises(RuleStoreError):
                store.load_rules()
