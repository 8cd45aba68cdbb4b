"""EmergencyClassifier — ClassifierConfig and environment-based configuration loading.

Runtime configuration for the collaborators around the scoring engine (vision
adapter, adaptive rule store, logging) flows through ClassifierConfig. The
engine itself reads only the constants in config.defaults. API keys come
exclusively from environment variables.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import List, Optional

from dotenv import load_dotenv

from config.defaults import (
    ADAPTIVE_RULES_TABLE,
    AZURE_VISION_API_VERSION,
    AZURE_VISION_FEATURES,
    AZURE_VISION_LANGUAGE,
    DEFAULT_LOG_LEVEL,
    RULE_STORE_REQUEST_TIMEOUT,
    VISION_BACKOFF_BASE,
    VISION_MAX_RETRIES,
    VISION_REQUEST_TIMEOUT,
)

# Load .env file if present; silently skip if missing
load_dotenv()


def _env_flag(name: str, default: bool) -> bool:
    """Read a boolean flag from the environment ("0", "false", "no", "off" are false)."""
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() not in ("0", "false", "no", "off", "")


@dataclass
class ClassifierConfig:
    """Single configuration object for the classifier and its collaborators.

    Endpoint URLs, API keys, timeouts, and rule-source selection live here.
    Never read os.environ directly in client or pipeline code.
    """

    # ── Azure AI Vision ────────────────────────────────────────────────────────
    azure_vision_endpoint: Optional[str] = field(
        default_factory=lambda: os.getenv("AZURE_VISION_ENDPOINT")
    )
    azure_vision_key: Optional[str] = field(default_factory=lambda: os.getenv("AZURE_VISION_KEY"))
    azure_vision_api_version: str = field(
        default_factory=lambda: os.getenv("AZURE_VISION_API_VERSION", AZURE_VISION_API_VERSION)
    )
    azure_vision_features: List[str] = field(default_factory=lambda: list(AZURE_VISION_FEATURES))
    azure_vision_language: str = AZURE_VISION_LANGUAGE
    vision_request_timeout: int = VISION_REQUEST_TIMEOUT
    vision_max_retries: int = VISION_MAX_RETRIES
    vision_backoff_base: float = VISION_BACKOFF_BASE

    # ── Adaptive rule store ────────────────────────────────────────────────────
    enable_adaptive_rules: bool = field(
        default_factory=lambda: _env_flag("ENABLE_ADAPTIVE_RULES", True)
    )
    supabase_url: Optional[str] = field(default_factory=lambda: os.getenv("SUPABASE_URL"))
    supabase_service_key: Optional[str] = field(
        default_factory=lambda: os.getenv("SUPABASE_SERVICE_ROLE_KEY")
    )
    adaptive_rules_table: str = ADAPTIVE_RULES_TABLE
    adaptive_rules_path: Optional[str] = field(
        default_factory=lambda: os.getenv("ADAPTIVE_RULES_PATH")
    )
    rule_store_request_timeout: int = RULE_STORE_REQUEST_TIMEOUT

    # ── Logging ────────────────────────────────────────────────────────────────
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", DEFAULT_LOG_LEVEL))

    def __post_init__(self) -> None:
        if self.azure_vision_endpoint:
            self.azure_vision_endpoint = self.azure_vision_endpoint.rstrip("/")
        if self.supabase_url:
            self.supabase_url = self.supabase_url.rstrip("/")
        # Retry counts and timeouts are clamped rather than rejected
        self.vision_max_retries = max(0, self.vision_max_retries)
        self.vision_request_timeout = max(1, self.vision_request_timeout)
        self.rule_store_request_timeout = max(1, self.rule_store_request_timeout)

    @property
    def vision_configured(self) -> bool:
        """True when both the Azure endpoint and key are available."""
        return bool(self.azure_vision_endpoint and self.azure_vision_key)

    @property
    def rule_store_configured(self) -> bool:
        """True when the remote adaptive-rule store can be reached."""
        return bool(self.supabase_url and self.supabase_service_key)
