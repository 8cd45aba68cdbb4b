"""Adaptive rule store client for EmergencyClassifier.

Loads correction-derived adaptive rules from the Supabase PostgREST table
adaptive_classifier_config, or from a local JSON file with the same row
shape. Returns parsed AdaptiveRule models only — rule evaluation happens in
analysis.adaptive.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, List

import requests

from config.defaults import ADAPTIVE_RULES_TABLE, RULE_STORE_REQUEST_TIMEOUT
from config.settings import ClassifierConfig
from emergencyclassifier.io.persistence import load_json
from emergencyclassifier.models.rules import AdaptiveRule

logger = logging.getLogger(__name__)


class RuleStoreError(Exception):
    """Raised when adaptive rules cannot be fetched or parsed."""


def parse_rules(rows: Any) -> List[AdaptiveRule]:
    """Convert table rows into AdaptiveRule models.

    Malformed rows are skipped with a warning rather than failing the load.

    Args:
        rows: Decoded JSON array of rule rows.

    Returns:
        Parsed rules in row order.

    Raises:
        RuleStoreError: If rows is not a list.
    """
    if not isinstance(rows, list):
        raise RuleStoreError(f"expected a JSON array of rules, got {type(rows).__name__}")

    rules: List[AdaptiveRule] = []
    for index, row in enumerate(rows):
        if not isinstance(row, dict):
            logger.warning("Skipping adaptive rule %d: not an object", index)
            continue
        try:
            rules.append(AdaptiveRule.from_dict(row))
        except (TypeError, ValueError, OverflowError) as exc:
            logger.warning("Skipping adaptive rule %d (%s): %s", index, row.get("rule_name", "?"), exc)
    return rules


def load_rules_from_file(path: str | Path) -> List[AdaptiveRule]:
    """Load adaptive rules from a local JSON file.

    Raises:
        RuleStoreError: If the file is missing, unreadable or not a JSON array.
    """
    data = load_json(path)
    if data is None:
        raise RuleStoreError(f"adaptive rules file not found or invalid: {path}")
    rules = parse_rules(data)
    logger.info("Adaptive rules: loaded %d rule(s) from %s", len(rules), path)
    return rules


class AdaptiveRuleStore:
    """Client for the adaptive_classifier_config PostgREST endpoint.

    Only active rules are requested, most-corrected first. The fetch is not
    retried; callers fall back to classifying without rules.

    Args:
        supabase_url: Supabase project URL.
        service_key: Service-role key sent as apikey and bearer token.
        table: Rule table name.
        request_timeout: HTTP request timeout in seconds.
    """

    def __init__(
        self,
        supabase_url: str,
        service_key: str,
        table: str = ADAPTIVE_RULES_TABLE,
        request_timeout: int = RULE_STORE_REQUEST_TIMEOUT,
    ) -> None:
        self.supabase_url = supabase_url.rstrip("/")
        self.service_key = service_key
        self.table = table
        self.request_timeout = request_timeout
        self._session = requests.Session()

    @classmethod
    def from_config(cls, config: ClassifierConfig) -> "AdaptiveRuleStore":
        """Build a store from a ClassifierConfig.

        Raises:
            ValueError: If SUPABASE_URL or SUPABASE_SERVICE_ROLE_KEY is not set.
        """
        if not config.rule_store_configured:
            raise ValueError("SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY must both be set")
        return cls(
            supabase_url=config.supabase_url or "",
            service_key=config.supabase_service_key or "",
            table=config.adaptive_rules_table,
            request_timeout=config.rule_store_request_timeout,
        )

    @property
    def rules_url(self) -> str:
        return f"{self.supabase_url}/rest/v1/{self.table}"

    def _headers(self) -> Dict[str, str]:
        return {
            "apikey": self.service_key,
            "Authorization": f"Bearer {self.service_key}",
            "Accept": "application/json",
        }

    def load_rules(self) -> List[AdaptiveRule]:
        """Fetch every active adaptive rule.

        Returns:
            Parsed rules ordered by learned_from_corrections, descending.

        Raises:
            RuleStoreError: On transport errors, non-200 responses or invalid JSON.
        """
        params = {
            "select": "*",
            "is_active": "eq.true",
            "order": "learned_from_corrections.desc",
        }
        try:
            resp = self._session.get(
                self.rules_url,
                params=params,
                headers=self._headers(),
                timeout=self.request_timeout,
            )
        except requests.exceptions.RequestException as exc:
            raise RuleStoreError(f"adaptive rule request failed: {exc}") from exc

        if resp.status_code != 200:
            raise RuleStoreError(
                f"adaptive rule store returned HTTP {resp.status_code}: {resp.text[:200]}"
            )

        try:
            rows = resp.json()
        except ValueError as exc:
            raise RuleStoreError(f"adaptive rule response is not valid JSON: {exc}") from exc

        rules = parse_rules(rows)
        logger.info("Adaptive rules: loaded %d active rule(s) from %s", len(rules), self.table)
        return rules

    def close(self) -> None:
        """Close the underlying HTTP session."""
        self._session.close()

    def __enter__(self) -> "AdaptiveRuleStore":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()
