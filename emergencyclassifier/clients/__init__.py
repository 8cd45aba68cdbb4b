"""EmergencyClassifier clients package.

HTTP API clients only — no business logic in this layer.
Each client handles connection management, retries, and response parsing.
"""

from emergencyclassifier.clients.rule_store import (
    AdaptiveRuleStore,
    RuleStoreError,
    load_rules_from_file,
    parse_rules,
)
from emergencyclassifier.clients.vision_client import VisionClient

__all__ = [
    "AdaptiveRuleStore",
    "RuleStoreError",
    "load_rules_from_file",
    "parse_rules",
    "VisionClient",
]
