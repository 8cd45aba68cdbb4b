"""Evidence normalizer for EmergencyClassifier.

Turns a raw vision payload into an immutable VisionEvidence bundle and the
lower-cased text blob every matcher reads. Two payload shapes are accepted:

- the normalized shape (tags, caption, captionConfidence, objects, ocrText,
  denseCaptions, people/peopleCount), where tags and objects may be bare
  strings or dicts;
- a raw Azure AI Vision Image Analysis 4.0 response (captionResult,
  tagsResult, objectsResult, peopleResult, readResult, denseCaptionsResult).

Malformed fields default to empty values. These functions never raise.
"""

from __future__ import annotations

import logging
import math
from typing import Any, Dict, List, Optional, Tuple

from emergencyclassifier.models.evidence import VisionEvidence, VisionObject, VisionTag

logger = logging.getLogger(__name__)

_AZURE_KEYS = ("captionResult", "tagsResult", "objectsResult", "peopleResult", "readResult")


def _to_float(value: Any) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    return number if math.isfinite(number) else 0.0


def _to_text(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def _as_list(value: Any) -> List[Any]:
    return list(value) if isinstance(value, (list, tuple)) else []


def _parse_tag(item: Any) -> Optional[VisionTag]:
    if isinstance(item, str):
        return VisionTag(name=item) if item else None
    if isinstance(item, dict):
        name = _to_text(item.get("name") or item.get("label"))
        if name:
            return VisionTag(name=name, confidence=_to_float(item.get("confidence")))
    return None


def _parse_object(item: Any) -> Optional[VisionObject]:
    if isinstance(item, str):
        return VisionObject(name=item) if item else None
    if isinstance(item, dict):
        name = _to_text(item.get("object") or item.get("name") or item.get("label"))
        if name:
            return VisionObject(name=name, confidence=_to_float(item.get("confidence")))
    return None


def _people_count(value: Any) -> int:
    if isinstance(value, (list, tuple)):
        return len(value)
    try:
        return max(0, int(value))
    except (TypeError, ValueError, OverflowError):
        return 0


def _section(result: Dict[str, Any], key: str) -> Dict[str, Any]:
    """Return one Image Analysis 4.0 result section, or {} if it is not an object."""
    value = result.get(key)
    return value if isinstance(value, dict) else {}


def is_azure_v4_response(raw: Dict[str, Any]) -> bool:
    """Return True if the payload looks like a raw Image Analysis 4.0 response."""
    return any(key in raw for key in _AZURE_KEYS)


def parse_azure_v4_response(result: Dict[str, Any]) -> Dict[str, Any]:
    """Flatten an Image Analysis 4.0 response into the normalized payload shape.

    Args:
        result: Parsed JSON body of the imageanalysis:analyze call.

    Returns:
        Dict with tags, caption, captionConfidence, objects, people, ocrText
        and denseCaptions keys.
    """
    caption_result = _section(result, "captionResult")
    tags = [
        {"name": t.get("name"), "confidence": t.get("confidence")}
        for t in _as_list(_section(result, "tagsResult").get("values"))
        if isinstance(t, dict)
    ]

    objects = []
    for obj in _as_list(_section(result, "objectsResult").get("values")):
        if not isinstance(obj, dict):
            continue
        obj_tags = _as_list(obj.get("tags"))
        first = obj_tags[0] if obj_tags and isinstance(obj_tags[0], dict) else {}
        objects.append({
            "object": first.get("name") or obj.get("name") or "object",
            "confidence": first.get("confidence", obj.get("confidence", 0.0)),
        })

    lines: List[str] = []
    for block in _as_list(_section(result, "readResult").get("blocks")):
        if isinstance(block, dict):
            lines.extend(
                _to_text(line.get("text"))
                for line in _as_list(block.get("lines"))
                if isinstance(line, dict)
            )

    dense = [
        _to_text(d.get("text"))
        for d in _as_list(_section(result, "denseCaptionsResult").get("values"))
        if isinstance(d, dict)
    ]

    return {
        "caption": _to_text(caption_result.get("text")),
        "captionConfidence": _to_float(caption_result.get("confidence")),
        "tags": tags,
        "objects": objects,
        "people": len(_as_list(_section(result, "peopleResult").get("values"))),
        "ocrText": " ".join(lines),
        "denseCaptions": dense,
    }


def normalize_evidence(raw: Optional[Dict[str, Any]]) -> VisionEvidence:
    """Build VisionEvidence from either accepted payload shape.

    Args:
        raw: Raw payload dict, or None.

    Returns:
        VisionEvidence with every missing or malformed field defaulted.
    """
    if not isinstance(raw, dict):
        if raw is not None:
            logger.debug("Ignoring non-dict evidence payload of type %s", type(raw).__name__)
        return VisionEvidence()

    payload = parse_azure_v4_response(raw) if is_azure_v4_response(raw) else raw

    tags = tuple(t for t in (_parse_tag(i) for i in _as_list(payload.get("tags"))) if t)
    objects = tuple(o for o in (_parse_object(i) for i in _as_list(payload.get("objects"))) if o)
    people_raw = payload.get("peopleCount", payload.get("people", 0))
    dense = tuple(_to_text(d) for d in _as_list(payload.get("denseCaptions")) if d)

    return VisionEvidence(
        tags=tags,
        caption=_to_text(payload.get("caption")),
        caption_confidence=_to_float(payload.get("captionConfidence")),
        objects=objects,
        ocr_text=_to_text(payload.get("ocrText")),
        dense_captions=dense,
        people_count=_people_count(people_raw),
    )


def build_all_text(evidence: VisionEvidence) -> str:
    """Lower-cased space-join of tag names, caption, object names, OCR text and dense captions."""
    parts: Tuple[str, ...] = (
        *(t.name for t in evidence.tags),
        evidence.caption,
        *(o.name for o in evidence.objects),
        evidence.ocr_text,
        *evidence.dense_captions,
    )
    return " ".join(parts).lower()
