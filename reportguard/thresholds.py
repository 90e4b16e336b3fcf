"""Named thresholds for the moderation and risk engines.

Every cut-off either engine uses lives here so deployments can override
them from configuration instead of patching code.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any, Mapping, Optional

# ---------------------------------------------------------------------------
# Moderation
# ---------------------------------------------------------------------------

# Per-attribute cut-off for the toxicity classifier (strictly greater than)
TEXT_ATTRIBUTE_THRESHOLD = 0.7

# The admin console and the server-side function disagree on the NSFW cut-off.
NSFW_THRESHOLD_ADMIN = 0.5
NSFW_THRESHOLD_SERVER = 0.7

# Server-side adapter timeouts, seconds
TEXT_TIMEOUT_SERVER = 8.0
IMAGE_TIMEOUT_SERVER = 10.0

PRECHECK_MAX_LENGTH = 500
PRECHECK_REPEAT_RUN = 10  # "(.)\1{10,}"

# Fixed verdict constants
LEGITIMACY_ALLOWED = 85
LEGITIMACY_BLOCKED = 30
LEGITIMACY_PRECHECK = 0
CREDIBILITY_ALLOWED = 90
CREDIBILITY_BLOCKED = 40
CREDIBILITY_PRECHECK = 10

# Fallback analyzer
FALLBACK_SHORT_DESCRIPTION = 20
FALLBACK_SPECIAL_CHAR_LIMIT = 5
FALLBACK_LEGITIMATE_BELOW = 40
FALLBACK_HIGH_RISK_ABOVE = 50
FALLBACK_FLAG_ABOVE = 60
FALLBACK_CONFIDENCE = 30

PROFILE_ADMIN = "admin"
PROFILE_SERVER = "server"

# ---------------------------------------------------------------------------
# Risk
# ---------------------------------------------------------------------------

SUSPICIOUS_SCORE = 40
RISK_HIGH = 70
RISK_MEDIUM = 40
RISK_LOW = 20
AUTO_FLAG_SCORE = 80
MAX_CONFIDENCE_SCORE = 100

RAPID_WINDOW_MINUTES = 30
RAPID_REPORT_COUNT = 3
DUPLICATE_SIMILARITY = 0.8
FALSE_RATE_LIMIT = 0.5
FALSE_RATE_MIN_REPORTS = 3
SAME_LOCATION_COUNT = 3

UNUSUAL_HOUR_START = 2
UNUSUAL_HOUR_END = 5  # inclusive

# A user is suspended once this many of their reports are flagged false.
SUSPENSION_FALSE_REPORTS = 3


@dataclass
class ModerationThresholds:
    """Cut-offs used by the moderation decision engine."""

    profile: str = PROFILE_ADMIN
    text_attribute: float = TEXT_ATTRIBUTE_THRESHOLD
    nsfw: float = NSFW_THRESHOLD_ADMIN
    text_timeout: Optional[float] = None
    image_timeout: Optional[float] = None
    check_links: bool = False

    @classmethod
    def for_profile(cls, profile: str) -> "ModerationThresholds":
        """Return the defaults for ``admin`` or ``server``."""
        if profile == PROFILE_SERVER:
            return cls(
                profile=PROFILE_SERVER,
                nsfw=NSFW_THRESHOLD_SERVER,
                text_timeout=TEXT_TIMEOUT_SERVER,
                image_timeout=IMAGE_TIMEOUT_SERVER,
            )
        if profile != PROFILE_ADMIN:
            raise ValueError(f"Unknown moderation profile: {profile!r}")
        return cls()

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "ModerationThresholds":
        base = cls.for_profile(str(data.get("profile", PROFILE_ADMIN)))
        return _override(base, data)


@dataclass
class RiskThresholds:
    """Cut-offs used by the false-report risk engine."""

    suspicious: int = SUSPICIOUS_SCORE
    high: int = RISK_HIGH
    medium: int = RISK_MEDIUM
    low: int = RISK_LOW
    auto_flag: int = AUTO_FLAG_SCORE
    rapid_window_minutes: int = RAPID_WINDOW_MINUTES
    rapid_report_count: int = RAPID_REPORT_COUNT
    duplicate_similarity: float = DUPLICATE_SIMILARITY
    false_rate_limit: float = FALSE_RATE_LIMIT
    false_rate_min_reports: int = FALSE_RATE_MIN_REPORTS
    same_location_count: int = SAME_LOCATION_COUNT
    unusual_hour_start: int = UNUSUAL_HOUR_START
    unusual_hour_end: int = UNUSUAL_HOUR_END
    local_timezone: str = "UTC"

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "RiskThresholds":
        return _override(cls(), data)


def _override(base, data: Mapping[str, Any]):
    """Copy *base* with any known keys from *data* applied."""
    known = {f.name: f for f in fields(base)}
    for key, value in data.items():
        if key not in known:
            raise ValueError(f"Unknown threshold: {key}")
        setattr(base, key, value)
    return base
