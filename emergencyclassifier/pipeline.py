"""EmergencyClassifier classification pipeline.

Runs the scoring engine in its fixed order and wraps it in a façade that
handles configuration, adaptive-rule loading and the optional vision call.

Engine order:
  1. Evidence normalizer    — raw payload → VisionEvidence + all_text
  2. Override rule set      — may short-circuit with a fixed result
  3. Category matchers      — six scores plus the uncertainty analyzer
  4. Adaptive rules         — correction-derived score adjustments
  5. Aggregator             — suppression, contextual overrides, tie-break
  6. Confidence calibrator
  7. Title/detail generator
  8. Manual-review flagger

Usage:
    from emergencyclassifier.pipeline import EmergencyClassifier

    classifier = EmergencyClassifier()
    result = classifier.classify({"tags": ["outlet", "fire"], "caption": "sparks near wall outlet"})
"""

from __future__ import annotations

import logging
import uuid
from typing import Any, Dict, List, Optional, Sequence

from config.settings import ClassifierConfig
from emergencyclassifier.analysis.adaptive import (
    apply_adaptive_rules,
    extract_rule_features,
    scores_changed,
)
from emergencyclassifier.analysis.aggregator import (
    AggregationContext,
    aggregate,
    argmax,
    evidence_reasoning,
)
from emergencyclassifier.analysis.calibration import calibrate_confidence
from emergencyclassifier.analysis.matchers import run_matchers
from emergencyclassifier.analysis.normalizer import build_all_text, normalize_evidence
from emergencyclassifier.analysis.overrides import build_override_result, find_override
from emergencyclassifier.analysis.review import assess_manual_review
from emergencyclassifier.analysis.titles import generate_details, generate_title, summarize_analysis
from emergencyclassifier.clients.rule_store import (
    AdaptiveRuleStore,
    RuleStoreError,
    load_rules_from_file,
)
from emergencyclassifier.clients.vision_client import VisionClient
from emergencyclassifier.models.evidence import VisionEvidence
from emergencyclassifier.models.result import ClassificationResult
from emergencyclassifier.models.rules import AdaptiveRule
from emergencyclassifier.models.scoring import empty_scores
from emergencyclassifier.utils.logging_utils import get_report_logger

logger = logging.getLogger(__name__)


# ── Pure engine ───────────────────────────────────────────────────────────────

def classify_evidence(
    evidence: VisionEvidence,
    rules: Sequence[AdaptiveRule] = (),
) -> ClassificationResult:
    """Classify normalized evidence.

    A pure function of (evidence, rules): the same inputs always produce the
    same result.

    Args:
        evidence: Normalized vision evidence.
        rules: Adaptive rules; inactive rules are ignored.

    Returns:
        ClassificationResult.
    """
    all_text = build_all_text(evidence)

    override = find_override(evidence, all_text)
    if override is not None:
        return build_override_result(override, evidence)

    results = run_matchers(evidence, all_text)
    scores = empty_scores()
    for category, match in results.items():
        scores[category] = match.score
    reasoning = evidence_reasoning(results)

    active = [rule for rule in rules if rule.is_active]
    if active:
        best_guess, _ = argmax(scores)
        try:
            adjusted = apply_adaptive_rules(scores, best_guess, extract_rule_features(evidence), active)
        except (TypeError, ValueError, AttributeError) as exc:
            logger.warning("Failed to apply adaptive rules, using matcher scores: %s", exc)
            adjusted = scores
        if scores_changed(scores, adjusted):
            scores = adjusted
            reasoning.append(f"Applied {len(active)} adaptive rule(s) learned from corrections")

    ctx = AggregationContext(evidence=evidence, all_text=all_text, matches=results)
    state = aggregate(scores, ctx, tuple(reasoning))

    predicted = state.predicted
    features = results[predicted].features if predicted in results else ()
    confidence = calibrate_confidence(
        predicted,
        state.scores.get(predicted, 0.0),
        state.selection_max,
        evidence,
        features,
    )
    needs_review, review_reasons = assess_manual_review(
        predicted, state.scores, state.selection_max, state.top_candidates
    )

    return ClassificationResult(
        type=predicted,
        confidence=confidence,
        detailed_title=generate_title(predicted, features, all_text),
        details=generate_details(predicted),
        reasoning=state.reasoning,
        scores=dict(state.scores),
        needs_manual_review=needs_review,
        manual_review_reasons=review_reasons,
        image_analysis=evidence.snapshot(),
        analysis=summarize_analysis(predicted, state.scores, evidence),
    )


def classify(
    raw: Optional[Dict[str, Any]],
    rules: Sequence[AdaptiveRule] = (),
) -> ClassificationResult:
    """Normalize a raw vision payload and classify it.

    Args:
        raw: Normalized-shape payload or raw Image Analysis 4.0 response.
        rules: Adaptive rules.

    Returns:
        ClassificationResult. Never raises for malformed evidence.
    """
    return classify_evidence(normalize_evidence(raw), rules)


# ── Façade ────────────────────────────────────────────────────────────────────

def _make_report_id() -> str:
    return f"rpt-{uuid.uuid4().hex[:12]}"


class EmergencyClassifier:
    """Classifier façade: configuration, rule loading, vision call and logging.

    Args:
        config: Runtime configuration; read from the environment when omitted.
        rules: Fixed adaptive rules. When omitted, rules are loaded from the
            configured file or rule store on every classification.
        vision_client: Vision client to use for image input; built from
            config on first use when omitted.
    """

    def __init__(
        self,
        config: Optional[ClassifierConfig] = None,
        rules: Optional[Sequence[AdaptiveRule]] = None,
        vision_client: Optional[VisionClient] = None,
    ) -> None:
        self.config = config or ClassifierConfig()
        self._rules = list(rules) if rules is not None else None
        self._vision_client = vision_client

    def load_rules(self) -> List[AdaptiveRule]:
        """Load adaptive rules, degrading to no rules on any failure."""
        if self._rules is not None:
            return self._rules
        if not self.config.enable_adaptive_rules:
            return []

        try:
            if self.config.adaptive_rules_path:
                return load_rules_from_file(self.config.adaptive_rules_path)
            if self.config.rule_store_configured:
                with AdaptiveRuleStore.from_config(self.config) as store:
                    return store.load_rules()
        except RuleStoreError as exc:
            logger.warning("Adaptive rules unavailable — classifying without them: %s", exc)
            return []

        logger.debug("No adaptive rule source configured")
        return []

    def classify(
        self,
        raw: Optional[Dict[str, Any]],
        report_id: Optional[str] = None,
    ) -> ClassificationResult:
        """Classify a vision payload with the currently available adaptive rules.

        Args:
            raw: Normalized-shape payload or raw Image Analysis 4.0 response.
            report_id: Identifier used in log lines; generated when omitted.

        Returns:
            ClassificationResult.
        """
        log = get_report_logger("pipeline", report_id or _make_report_id())
        rules = self.load_rules()
        log.debug("Classifying with %d adaptive rule(s)", len(rules))
        result = classify(raw, rules)
        log.with_override(result.override_rule).info(
            "Classified as %s (confidence %.2f, review=%s)",
            result.type,
            result.confidence,
            result.needs_manual_review,
        )
        return result

    def _get_vision_client(self) -> Optional[VisionClient]:
        if self._vision_client is None:
            if not self.config.vision_configured:
                logger.warning(
                    "Azure Vision not configured — set AZURE_VISION_ENDPOINT and AZURE_VISION_KEY"
                )
                return None
            self._vision_client = VisionClient.from_config(self.config)
        return self._vision_client

    def classify_image(
        self,
        image_bytes: bytes,
        report_id: Optional[str] = None,
    ) -> Optional[ClassificationResult]:
        """Analyze image bytes with the vision service, then classify.

        Returns:
            ClassificationResult, or None when the vision call fails.
        """
        client = self._get_vision_client()
        if client is None:
            return None
        payload = client.analyze_image(image_bytes)
        if payload is None:
            logger.warning("Vision analysis failed — no classification produced")
            return None
        return self.classify(payload, report_id=report_id)

    def classify_image_url(
        self,
        image_url: str,
        report_id: Optional[str] = None,
    ) -> Optional[ClassificationResult]:
        """Analyze an image URL with the vision service, then classify.

        Returns:
            ClassificationResult, or None when the vision call fails.
        """
        client = self._get_vision_client()
        if client is None:
            return None
        payload = client.analyze_url(image_url)
        if payload is None:
            logger.warning("Vision analysis failed for %s — no classification produced", image_url)
            return None
        return self.classify(payload, report_id=report_id)

    def close(self) -> None:
        """Close the vision client session if one was opened."""
        if self._vision_client is not None:
            self._vision_client.close()

    def __enter__(self) -> "EmergencyClassifier":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()
