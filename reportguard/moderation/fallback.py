"""Local heuristic analyzer used when classifiers are absent or the pipeline fails."""

from __future__ import annotations

import re

from reportguard.moderation.models import ModerationAnalysis
from reportguard.thresholds import (
    FALLBACK_CONFIDENCE,
    FALLBACK_FLAG_ABOVE,
    FALLBACK_HIGH_RISK_ABOVE,
    FALLBACK_LEGITIMATE_BELOW,
    FALLBACK_SHORT_DESCRIPTION,
    FALLBACK_SPECIAL_CHAR_LIMIT,
)

_SPECIAL_CHARS = re.compile(r"[!@#$%^&*()]")


def fallback_analysis(report) -> ModerationAnalysis:
    """Coarse suspicion score from the description alone. Never touches the network."""
    description = getattr(report, "description", "") or ""
    factors: list[str] = []
    score = 0

    if description and len(description) < FALLBACK_SHORT_DESCRIPTION:
        factors.append("Very short description")
        score += 20

    if description.isupper():
        factors.append("All caps text")
        score += 15

    if len(_SPECIAL_CHARS.findall(description)) > FALLBACK_SPECIAL_CHAR_LIMIT:
        factors.append("Excessive special characters")
        score += 15

    return ModerationAnalysis(
        is_legitimate=score < FALLBACK_LEGITIMATE_BELOW,
        legitimacy_confidence=FALLBACK_CONFIDENCE,
        severity="medium",
        credibility_score=100 - score,
        risk_level="high" if score > FALLBACK_HIGH_RISK_ABOVE else "medium",
        suspicious_factors=factors or ["No AI analysis available"],
        recommendations=[
            "Manual review recommended",
            "AI analysis not available - using basic checks",
        ],
        should_flag=score > FALLBACK_FLAG_ABOVE,
        reasoning="Basic keyword-based analysis (AI not configured)",
        method="fallback",
    )
