"""Image safety adapter for the Hugging Face NSFW classification model."""

from __future__ import annotations

import asyncio
import logging
import os
from typing import Any, Optional

import httpx

from reportguard.classifiers.common import credential_configured, error_message
from reportguard.errors import ClassifierError
from reportguard.moderation.models import ImageModerationResult

logger = logging.getLogger(__name__)

HF_NSFW_MODEL_URL = "https://api-inference.huggingface.co/models/Falconsai/nsfw_image_detection"

_NOT_CONFIGURED_MSG = "HuggingFace token not configured"


class HuggingFaceNsfwClient:
    """Downloads an image and submits its bytes to the NSFW model.

    :meth:`classify_image` never raises; a failed download or inference
    call, or one that outlives ``timeout`` across both requests, yields
    ``ImageModerationResult(success=False)``.
    """

    def __init__(
        self,
        token: str | None = None,
        *,
        timeout: Optional[float] = None,
        url: str = HF_NSFW_MODEL_URL,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.token = token if token is not None else os.environ.get("HUGGINGFACE_TOKEN", "")
        self.timeout = timeout
        self.url = url
        self._transport = transport

    @property
    def configured(self) -> bool:
        return credential_configured(self.token)

    async def classify_image(self, image_url: str) -> ImageModerationResult:
        if not self.configured:
            return ImageModerationResult(url=image_url, success=False, error=_NOT_CONFIGURED_MSG)
        try:
            labels = await asyncio.wait_for(self._request(image_url), self.timeout)
            label, score = parse_nsfw_score(labels)
        except asyncio.TimeoutError:
            logger.warning("image classifier timed out after %ss for %s", self.timeout, image_url)
            return ImageModerationResult(
                url=image_url, success=False, error=f"Timed out after {self.timeout}s"
            )
        except (httpx.HTTPError, ClassifierError, TypeError, ValueError) as exc:
            logger.warning("image classifier failed for %s: %s", image_url, exc)
            return ImageModerationResult(
                url=image_url, success=False, error=str(exc) or type(exc).__name__
            )
        return ImageModerationResult(url=image_url, success=True, nsfw_score=score, label=label)

    async def _request(self, image_url: str) -> Any:
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            image = await client.get(image_url, follow_redirects=True)
            image.raise_for_status()
            resp = await client.post(
                self.url,
                headers={"Authorization": f"Bearer {self.token}"},
                content=image.content,
            )
        if resp.status_code >= 400:
            raise ClassifierError(error_message(resp, "HuggingFace error"))
        return resp.json()


def parse_nsfw_score(labels: Any) -> tuple[str, float]:
    """Return the first ``nsfw`` label and its score, or ``("", 0.0)``."""
    if not isinstance(labels, list):
        raise ClassifierError("Invalid NSFW classifier response")
    for item in labels:
        if not isinstance(item, dict):
            continue
        label = str(item.get("label") or "")
        if "nsfw" in label.lower():
            return label, min(1.0, max(0.0, float(item.get("score") or 0)))
    return "", 0.0
