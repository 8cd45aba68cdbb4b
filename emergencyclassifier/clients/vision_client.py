"""Azure AI Vision Image Analysis 4.0 client for EmergencyClassifier.

Handles all HTTP communication with the imageanalysis:analyze endpoint:
request construction, rate-limit detection, backoff retry, and safe JSON
parsing.

No business logic lives here — this client returns the raw parsed API
response. Normalization into VisionEvidence happens in analysis.normalizer.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Dict, Optional, Sequence

import requests
from requests import Session
from requests.adapters import HTTPAdapter

from config.defaults import (
    AZURE_VISION_API_VERSION,
    AZURE_VISION_FEATURES,
    AZURE_VISION_LANGUAGE,
    VISION_BACKOFF_BASE,
    VISION_MAX_RETRIES,
    VISION_REQUEST_TIMEOUT,
)
from config.settings import ClassifierConfig

logger = logging.getLogger(__name__)

_ANALYZE_PATH = "/computervision/imageanalysis:analyze"


class VisionClient:
    """Client for the Azure AI Vision Image Analysis 4.0 REST API.

    Args:
        endpoint: Azure resource endpoint, e.g. https://<name>.cognitiveservices.azure.com.
        api_key: Subscription key sent as Ocp-Apim-Subscription-Key.
        api_version: Image Analysis API version.
        features: Visual features to request.
        language: Caption/tag language.
        max_retries: Maximum retry attempts on 429 / 5xx / transport errors.
        backoff_base: Base seconds for backoff between retries.
        request_timeout: HTTP request timeout in seconds.
    """

    def __init__(
        self,
        endpoint: str,
        api_key: str,
        api_version: str = AZURE_VISION_API_VERSION,
        features: Sequence[str] = AZURE_VISION_FEATURES,
        language: str = AZURE_VISION_LANGUAGE,
        max_retries: int = VISION_MAX_RETRIES,
        backoff_base: float = VISION_BACKOFF_BASE,
        request_timeout: int = VISION_REQUEST_TIMEOUT,
    ) -> None:
        self.endpoint = endpoint.rstrip("/")
        self.api_key = api_key
        self.api_version = api_version
        self.features = list(features)
        self.language = language
        self.max_retries = max_retries
        self.backoff_base = backoff_base
        self.request_timeout = request_timeout

        self._session = Session()
        adapter = HTTPAdapter(max_retries=0)   # We handle retries manually
        self._session.mount("https://", adapter)
        self._session.mount("http://", adapter)

    @classmethod
    def from_config(cls, config: ClassifierConfig) -> "VisionClient":
        """Build a client from a ClassifierConfig.

        Raises:
            ValueError: If the Azure endpoint or key is not configured.
        """
        if not config.vision_configured:
            raise ValueError("AZURE_VISION_ENDPOINT and AZURE_VISION_KEY must both be set")
        return cls(
            endpoint=config.azure_vision_endpoint or "",
            api_key=config.azure_vision_key or "",
            api_version=config.azure_vision_api_version,
            features=config.azure_vision_features,
            language=config.azure_vision_language,
            max_retries=config.vision_max_retries,
            backoff_base=config.vision_backoff_base,
            request_timeout=config.vision_request_timeout,
        )

    @property
    def analyze_url_endpoint(self) -> str:
        """Fully qualified analyze URL without the query string."""
        return f"{self.endpoint}{_ANALYZE_PATH}"

    def _params(self) -> Dict[str, str]:
        return {
            "api-version": self.api_version,
            "features": ",".join(self.features),
            "language": self.language,
        }

    def _post_with_retry(
        self,
        headers: Dict[str, str],
        data: Optional[bytes] = None,
        json_body: Optional[Dict[str, Any]] = None,
    ) -> Optional[Dict[str, Any]]:
        """Execute the analyze POST with backoff retry.

        Returns:
            Parsed JSON dict on success, None on failure or exhausted retries.
        """
        headers = {"Ocp-Apim-Subscription-Key": self.api_key, **headers}

        for attempt in range(self.max_retries + 1):
            try:
                resp = self._session.post(
                    self.analyze_url_endpoint,
                    params=self._params(),
                    headers=headers,
                    data=data,
                    json=json_body,
                    timeout=self.request_timeout,
                )

                if resp.status_code == 429:
                    wait = self.backoff_base * (2 ** attempt)
                    logger.warning("Azure Vision rate limit (429) — backing off %.1fs", wait)
                    time.sleep(wait)
                    continue

                if resp.status_code in (500, 502, 503, 504):
                    wait = self.backoff_base * (attempt + 1)
                    logger.warning(
                        "Azure Vision server error %d — retrying in %.1fs (attempt %d/%d)",
                        resp.status_code,
                        wait,
                        attempt + 1,
                        self.max_retries,
                    )
                    time.sleep(wait)
                    continue

                if resp.status_code != 200:
                    logger.warning(
                        "Azure Vision returned HTTP %d: %.200s", resp.status_code, resp.text
                    )
                    return None

                try:
                    payload = resp.json()
                except ValueError as exc:
                    logger.warning("Azure Vision response is not valid JSON: %s", exc)
                    return None
                if not isinstance(payload, dict):
                    logger.warning("Azure Vision response is not a JSON object")
                    return None
                return payload

            except requests.exceptions.Timeout:
                wait = self.backoff_base * (2 ** attempt)
                logger.warning(
                    "Azure Vision request timeout — retrying in %.1fs (attempt %d/%d)",
                    wait,
                    attempt + 1,
                    self.max_retries,
                )
                time.sleep(wait)
            except requests.exceptions.ConnectionError as exc:
                wait = self.backoff_base * (2 ** attempt)
                logger.warning(
                    "Azure Vision connection error: %s — retrying in %.1fs (attempt %d/%d)",
                    exc,
                    wait,
                    attempt + 1,
                    self.max_retries,
                )
                time.sleep(wait)
            except requests.exceptions.RequestException as exc:
                logger.error("Azure Vision request failed permanently: %s", exc)
                return None

        logger.error("Azure Vision: exhausted %d retries", self.max_retries)
        return None

    def analyze_image(self, image_bytes: bytes) -> Optional[Dict[str, Any]]:
        """Analyze raw image bytes.

        Args:
            image_bytes: Encoded image (JPEG, PNG, ...).

        Returns:
            Raw Image Analysis 4.0 response dict, or None on failure.
        """
        if not image_bytes:
            logger.warning("Azure Vision analyze skipped: empty image payload")
            return None
        logger.debug("Azure Vision: analyzing %d bytes", len(image_bytes))
        return self._post_with_retry(
            headers={"Content-Type": "application/octet-stream"}, data=image_bytes
        )

    def analyze_url(self, image_url: str) -> Optional[Dict[str, Any]]:
        """Analyze an image reachable at a public URL.

        Args:
            image_url: HTTP(S) URL of the image.

        Returns:
            Raw Image Analysis 4.0 response dict, or None on failure.
        """
        if not image_url:
            logger.warning("Azure Vision analyze skipped: empty image URL")
            return None
        logger.debug("Azure Vision: analyzing %s", image_url)
        return self._post_with_retry(
            headers={"Content-Type": "application/json"}, json_body={"url": image_url}
        )

    def close(self) -> None:
        """Close the underlying HTTP session."""
        self._session.close()

    def __enter__(self) -> "VisionClient":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()
