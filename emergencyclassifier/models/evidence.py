"""Vision evidence data models for EmergencyClassifier.

Defines the immutable evidence bundle produced by the normalizer from a raw
vision-analysis payload. Every matcher and rule reads from this structure.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Tuple


@dataclass(frozen=True)
class VisionTag:
    """A single image-level tag reported by the vision service."""

    name: str
    confidence: float = 0.0


@dataclass(frozen=True)
class VisionObject:
    """A single detected object (bounding box label) reported by the vision service."""

    name: str
    confidence: float = 0.0


@dataclass(frozen=True)
class VisionEvidence:
    """Normalized bundle of vision-analysis outputs for one incident photo.

    All sequences are tuples so that evidence can be shared between matchers
    without copying. Missing fields are empty, never None.
    """

    tags: Tuple[VisionTag, ...] = ()
    caption: str = ""
    caption_confidence: float = 0.0
    objects: Tuple[VisionObject, ...] = ()
    ocr_text: str = ""
    dense_captions: Tuple[str, ...] = ()
    people_count: int = 0

    @property
    def tag_names(self) -> Tuple[str, ...]:
        """Lower-cased tag names in reported order."""
        return tuple(t.name.lower() for t in self.tags)

    @property
    def object_names(self) -> Tuple[str, ...]:
        """Lower-cased object names in reported order."""
        return tuple(o.name.lower() for o in self.objects)

    @property
    def caption_text(self) -> str:
        """Lower-cased caption."""
        return self.caption.lower()

    @property
    def description_text(self) -> str:
        """Lower-cased caption, or the joined dense captions when the caption is empty."""
        if self.caption:
            return self.caption.lower()
        return " ".join(self.dense_captions).lower()

    @property
    def narrative_text(self) -> str:
        """Lower-cased caption, OCR text and dense captions joined by spaces."""
        parts = [self.caption, self.ocr_text, *self.dense_captions]
        return " ".join(p for p in parts if p).lower()

    @property
    def tag_confidence_average(self) -> float:
        """Mean tag confidence, or 0.0 when no tags were reported."""
        if not self.tags:
            return 0.0
        return sum(t.confidence for t in self.tags) / len(self.tags)

    @property
    def quality_proxy(self) -> float:
        """Image-quality proxy: the better of caption confidence and mean tag confidence."""
        return max(self.caption_confidence, self.tag_confidence_average)

    def snapshot(self) -> Dict[str, Any]:
        """Serializable snapshot of the evidence for ClassificationResult.imageAnalysis."""
        return {
            "tags": [{"name": t.name, "confidence": t.confidence} for t in self.tags],
            "caption": self.caption,
            "captionConfidence": self.caption_confidence,
            "objects": [{"object": o.name, "confidence": o.confidence} for o in self.objects],
            "people": self.people_count,
            "ocrText": self.ocr_text,
            "denseCaptions": list(self.dense_captions),
        }
