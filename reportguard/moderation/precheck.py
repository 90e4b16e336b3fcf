"""Zero-network content pre-filter.

Runs before any classifier call: prohibited keywords, spam by length, and
bot-like character runs. Also holds the suspicious-link screen and the
user-facing rejection messages.
"""

from __future__ import annotations

import re

from reportguard.moderation.models import LinkCheckResult, PrecheckResult
from reportguard.thresholds import PRECHECK_MAX_LENGTH, PRECHECK_REPEAT_RUN

# ---------------------------------------------------------------------------
# Blocklists / patterns
# ---------------------------------------------------------------------------

PROHIBITED_KEYWORDS: tuple[str, ...] = (
    "fuck", "fucking", "shit", "bitch", "asshole",
    "puta", "putang", "putangina", "gago",
    "spam", "click here", "buy now",
)

_REPEATED_CHARS = re.compile(r"(.)\1{%d,}" % PRECHECK_REPEAT_RUN)

_SUSPICIOUS_LINK_PATTERNS: list[re.Pattern[str]] = [
    re.compile(p, re.IGNORECASE)
    for p in [
        r"bit\.ly|tinyurl|goo\.gl|ow\.ly",
        r"\.tk|\.ml|\.ga|\.cf|\.gq",
        r"free.*download",
        r"click.*here.*prize",
        r"verify.*account",
        r"update.*payment",
        r"claim.*reward",
        r"\.exe|\.apk|\.dmg|\.bat",
    ]
]

_URL = re.compile(r"https?://\S+")
_MAX_LINKS = 3

_USER_MESSAGES: dict[str, str] = {
    "explicit_keyword": "Your post contains prohibited words or phrases.",
    "spam": "Your post appears to be spam or contains excessive repeated content.",
    "severe_toxicity": "Your post contains violent, threatening, or harmful content.",
    "sexual": "Your post contains sexual or explicit content.",
    "harassment": "Your post contains harassing or bullying language.",
    "hate": "Your post contains hate speech or discriminatory content.",
    "malicious_link": "Your post contains suspicious or malicious links.",
    "inappropriate_image": "One or more images contain inappropriate content.",
    "unknown": "Your post was flagged for review.",
}


def precheck(text: str) -> PrecheckResult:
    """Screen *text* without touching the network."""
    if not text:
        return PrecheckResult(allowed=True)

    lower = text.lower()
    for keyword in PROHIBITED_KEYWORDS:
        if keyword in lower:
            return PrecheckResult(
                allowed=False,
                reason=f"Contains prohibited keyword: {keyword}",
                category="keyword",
            )

    if len(text) > PRECHECK_MAX_LENGTH:
        return PrecheckResult(
            allowed=False,
            reason="Excessive length - possible spam",
            category="spam",
        )

    if _REPEATED_CHARS.search(text):
        return PrecheckResult(
            allowed=False,
            reason="Repeated characters - possible bot/spam",
            category="spam",
        )

    return PrecheckResult(allowed=True)


def check_links(text: str) -> LinkCheckResult:
    """Flag shortened, phishing-style or excessive links."""
    for pattern in _SUSPICIOUS_LINK_PATTERNS:
        if pattern.search(text):
            return LinkCheckResult(safe=False, reason="Suspicious or malicious link detected")
    if len(_URL.findall(text)) > _MAX_LINKS:
        return LinkCheckResult(safe=False, reason="Too many links (possible spam)")
    return LinkCheckResult(safe=True)


def format_user_message(violation_type: str | None, reason: str = "") -> str:
    """Build the rejection text shown to the submitting user."""
    headline = _USER_MESSAGES.get(violation_type or "unknown", _USER_MESSAGES["unknown"])
    parts = [headline]
    if reason:
        parts.append(reason)
    parts.append("Please review our community guidelines and try again.")
    return "\n\n".join(parts)
