"""Title, detail and summary generation for EmergencyClassifier.

Builds the human-readable detailedTitle from the winning category's detected
features, the fixed descriptive detail lines per category, and the one-line
analysis summary stored with each result.

Pure analytical functions only — no I/O, no API calls, no side effects.
"""

from __future__ import annotations

from typing import Dict, List, Mapping, Sequence, Tuple

from emergencyclassifier.analysis.rule_tables import EARTHQUAKE_CONTEXT_FEATURES
from emergencyclassifier.models.evidence import VisionEvidence
from emergencyclassifier.models.scoring import Category
from emergencyclassifier.utils.text import matches

MEDICAL_CONTEXT_FEATURES = ("Sports Field", "Sports Activity")

_FALLBACK_BODY_PARTS = ("knee", "ankle", "wrist", "arm", "leg", "shoulder", "elbow")

# First matching pattern names the storm when no features were detected.
_STORM_TEXT_TITLES: Tuple[Tuple[str, str], ...] = (
    (r"hurricane", "Hurricane"),
    (r"tornado", "Tornado"),
    (r"typhoon", "Typhoon"),
    (r"(fallen tree|downed tree|tree down|broken tree)", "Fallen Tree"),
)

_FIRE_TEXT_FEATURES: Tuple[Tuple[str, str], ...] = (
    (r"(electrical fire|electrical|outlet|plug|cord|electrical outlet)", "Electrical Fire"),
    (r"(smoke|smoking|smoky)", "Smoke Present"),
    (r"(flame|flames|burning|burn)", "Active Flames"),
    (r"(extinguisher|fire.*safety)", "Fire Safety Equipment"),
)

DETAILS: Dict[str, Tuple[str, ...]] = {
    Category.FLOOD: (
        "Water detected in image",
        "Flooding conditions identified",
        "Emergency water situation",
        "Potential flood damage",
    ),
    Category.ACCIDENT: (
        "Vehicle collision detected",
        "Traffic accident identified",
        "Road incident confirmed",
        "Vehicle damage observed",
    ),
    Category.FIRE: (
        "Fire or smoke detected",
        "Emergency fire situation",
        "Potential fire hazard",
        "Smoke conditions identified",
    ),
    Category.MEDICAL: (
        "People detected in image",
        "Potential medical emergency",
        "Human presence identified",
        "Emergency medical situation",
    ),
    Category.EARTHQUAKE: (
        "Structural damage detected",
        "Possible earthquake impact",
        "Building integrity compromised",
        "Debris or collapse observed",
    ),
    Category.STORM: (
        "Storm damage detected",
        "Severe weather impact identified",
        "Fallen trees or debris possible",
        "Pathways may be obstructed",
    ),
    Category.NON_EMERGENCY: (
        "No emergency indicators detected",
        "Normal activity observed",
        "No immediate threat identified",
        "No response required",
    ),
    Category.UNCERTAIN: (
        "Evidence is inconclusive",
        "Image quality or context unclear",
        "Multiple interpretations possible",
        "Requires human verification",
    ),
    Category.OTHER: (
        "General emergency situation",
        "Unspecified emergency type",
        "Emergency conditions detected",
        "Requires further assessment",
    ),
}


def _joined(features: Sequence[str], limit: int) -> str:
    return ", ".join(features[:limit])


def _earthquake_title(features: Sequence[str]) -> str:
    context = features[0] if features and features[0] in EARTHQUAKE_CONTEXT_FEATURES else ""
    damage = [f for f in features if f not in EARTHQUAKE_CONTEXT_FEATURES]
    if context and damage:
        return f"Earthquake Emergency - Damaged {context} - {_joined(damage, 3)}"
    if damage:
        return f"Earthquake Emergency - Structural Damage - {_joined(damage, 3)}"
    return "Earthquake Emergency - Structural Damage Detected"


def _medical_title(features: Sequence[str], all_text: str) -> str:
    context = next((f for f in features if f in MEDICAL_CONTEXT_FEATURES), None)
    details = [f for f in features if f != context]
    if context and details:
        label = "Sports" if context == "Sports Field" else context
        return f"Medical Emergency - {label} Injury - {_joined(details, 4)}"
    if details:
        return f"Medical Emergency - {_joined(details, 4)}"

    injuries: List[str] = []
    part = next((p for p in _FALLBACK_BODY_PARTS if p in all_text), None)
    if part:
        injuries.append(f"{part.capitalize()} Injury")
    if matches(r"(bruise|bruised|swollen|swelling)", all_text):
        injuries.append("Visible Injury")
    if matches(r"(crutch|crutches|bandage|cast|brace)", all_text):
        injuries.append("Injury Aid Present")
    if injuries:
        if matches(r"(sports|sport|athletic|field|stadium|gym|playing|game|match)", all_text):
            return f"Medical Emergency - Sports Injury - {_joined(injuries, 2)}"
        return f"Medical Emergency - {_joined(injuries, 2)}"
    return "Medical Emergency - Medical Assistance Needed"


def _fire_title(features: Sequence[str], all_text: str) -> str:
    if features:
        return f"Fire Emergency - {_joined(features, 4)}"
    found = [label for pattern, label in _FIRE_TEXT_FEATURES if matches(pattern, all_text)]
    if found:
        return f"Fire Emergency - {_joined(found, 2)}"
    return "Fire Emergency - Fire Detected"


def _storm_title(features: Sequence[str], all_text: str) -> str:
    if features:
        return f"Storm Emergency - {_joined(features, 4)}"
    for pattern, label in _STORM_TEXT_TITLES:
        if matches(pattern, all_text):
            return f"Storm Emergency - {label}"
    return "Storm Emergency - Severe Weather"


def generate_title(predicted: str, features: Sequence[str], all_text: str) -> str:
    """Build the detailedTitle for the final predicted category.

    Args:
        predicted: Final predicted category.
        features: Detected features of that category's matcher.
        all_text: Lower-cased evidence text, used when no features were detected.

    Returns:
        Title string, always prefixed by the category's display name.
    """
    if predicted == Category.EARTHQUAKE:
        return _earthquake_title(features)
    if predicted == Category.MEDICAL:
        return _medical_title(features, all_text)
    if predicted == Category.FIRE:
        return _fire_title(features, all_text)
    if predicted == Category.STORM:
        return _storm_title(features, all_text)
    if predicted == Category.ACCIDENT:
        if features:
            return f"Accident Emergency - Traffic Accident - {features[0]}"
        return "Accident Emergency - Vehicle Incident"
    if predicted == Category.FLOOD:
        if features:
            return f"Flood Emergency - {_joined(features, 2)}"
        return "Flood Emergency - Water Incident"
    if predicted == Category.NON_EMERGENCY:
        if matches(r"(student|school|classroom|campus)", all_text):
            return "Non-Emergency - School Activity"
        return "Non-Emergency - No Immediate Threat"
    if predicted == Category.UNCERTAIN:
        return "Uncertain Emergency - Incident Detected"
    return "Other Emergency - Requires Review"


def generate_details(predicted: str) -> Tuple[str, ...]:
    """Return the four fixed detail lines for a category."""
    return DETAILS.get(predicted, DETAILS[Category.OTHER])


def summarize_analysis(predicted: str, scores: Mapping[str, float], evidence: VisionEvidence) -> str:
    """One-line analysis summary with the top score and evidence counts."""
    top = max(scores.values()) if scores else 0.0
    return (
        f"Azure v4 analysis: {predicted} with {top:.2f} confidence. "
        f"Objects: {len(evidence.objects)}, People: {evidence.people_count}, "
        f"Tags: {len(evidence.tags)}."
    )
