"""Remote classifier adapters.

Both adapters are optional: an adapter without a configured credential is
skipped and the engine decides on the signals that remain.
"""

from __future__ import annotations

from dataclasses import dataclass

from reportguard.classifiers.nsfw import HuggingFaceNsfwClient
from reportguard.classifiers.perspective import PerspectiveClient


@dataclass
class ClassifierStatus:
    """Which adapters are live."""

    configured: bool
    level: str  # "full" | "text-only" | "image-only" | "basic"
    message: str


def classifier_status(
    text_classifier: PerspectiveClient | None,
    image_classifier: HuggingFaceNsfwClient | None,
) -> ClassifierStatus:
    text = bool(text_classifier and text_classifier.configured)
    image = bool(image_classifier and image_classifier.configured)
    if text and image:
        return ClassifierStatus(True, "full", "Perspective + HuggingFace active")
    if text:
        return ClassifierStatus(True, "text-only", "Perspective active")
    if image:
        return ClassifierStatus(True, "image-only", "HuggingFace active")
    return ClassifierStatus(False, "basic", "No AI keys configured")


__all__ = [
    "ClassifierStatus",
    "HuggingFaceNsfwClient",
    "PerspectiveClient",
    "classifier_status",
]
