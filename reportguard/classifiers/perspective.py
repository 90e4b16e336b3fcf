"""Text toxicity adapter for the Perspective comment analyzer.

The client never raises from :meth:`PerspectiveClient.analyze_text`: transport
errors, non-2xx responses and malformed payloads come back as a
``TextModerationResult`` with ``success=False`` so the decision engine can
treat them as "no signal".
"""

from __future__ import annotations

import asyncio
import logging
import os
from typing import Any, Optional

import httpx

from reportguard.classifiers.common import credential_configured, error_message
from reportguard.errors import ClassifierError
from reportguard.moderation.models import TextModerationResult, ToxicityScores

logger = logging.getLogger(__name__)

PERSPECTIVE_API_URL = "https://commentanalyzer.googleapis.com/v1alpha1/comments:analyze"

# Perspective attribute name -> ToxicityScores field
ATTRIBUTES: dict[str, str] = {
    "TOXICITY": "toxicity",
    "SEVERE_TOXICITY": "severe_toxicity",
    "IDENTITY_ATTACK": "identity_attack",
    "INSULT": "insult",
    "PROFANITY": "profanity",
    "THREAT": "threat",
    "SEXUALLY_EXPLICIT": "sexually_explicit",
}

_NOT_CONFIGURED_MSG = "Perspective API key not configured"


class PerspectiveClient:
    """Async client for the toxicity classifier.

    Parameters
    ----------
    api_key : str | None
        Perspective key. Falls back to ``PERSPECTIVE_API_KEY`` when *None*.
    timeout : float | None
        Wall-clock deadline for the whole call in seconds; *None* disables it.
    transport : httpx.AsyncBaseTransport | None
        Injected transport, used by tests.
    """

    def __init__(
        self,
        api_key: str | None = None,
        *,
        timeout: Optional[float] = None,
        url: str = PERSPECTIVE_API_URL,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.api_key = api_key if api_key is not None else os.environ.get("PERSPECTIVE_API_KEY", "")
        self.timeout = timeout
        self.url = url
        self._transport = transport

    @property
    def configured(self) -> bool:
        return credential_configured(self.api_key)

    async def analyze_text(self, text: str) -> TextModerationResult:
        """Score *text* on every attribute; failures become ``success=False``."""
        if not self.configured:
            return TextModerationResult(success=False, error=_NOT_CONFIGURED_MSG)
        try:
            payload = await asyncio.wait_for(self._request(text), self.timeout)
            scores = parse_scores(payload)
        except asyncio.TimeoutError:
            logger.warning("toxicity classifier timed out after %ss", self.timeout)
            return TextModerationResult(success=False, error=f"Timed out after {self.timeout}s")
        except (httpx.HTTPError, ClassifierError, TypeError, ValueError) as exc:
            logger.warning("toxicity classifier unavailable: %s", exc)
            return TextModerationResult(success=False, error=str(exc) or type(exc).__name__)
        return TextModerationResult(success=True, scores=scores)

    async def _request(self, text: str) -> dict[str, Any]:
        body = {
            "comment": {"text": text},
            "languages": ["en"],
            "requestedAttributes": {name: {} for name in ATTRIBUTES},
        }
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            resp = await client.post(self.url, params={"key": self.api_key}, json=body)
        if resp.status_code >= 400:
            raise ClassifierError(error_message(resp, "Perspective API error"))
        return resp.json()


def parse_scores(payload: Any) -> ToxicityScores:
    """Extract and clamp attribute scores from a Perspective response."""
    if not isinstance(payload, dict) or not isinstance(payload.get("attributeScores"), dict):
        raise ClassifierError("Invalid Perspective API response")
    attribute_scores = payload["attributeScores"]
    values: dict[str, float] = {}
    for name, field_name in ATTRIBUTES.items():
        summary = (attribute_scores.get(name) or {}).get("summaryScore") or {}
        raw = summary.get("value", 0)
        try:
            value = float(raw or 0)
        except (TypeError, ValueError):
            raise ClassifierError(f"Non-numeric score for {name}: {raw!r}")
        values[field_name] = min(1.0, max(0.0, value))
    return ToxicityScores(**values)
