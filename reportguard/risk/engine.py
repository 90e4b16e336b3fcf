"""False-report risk engine.

Sums four independent sub-analyzers into a suspicion score and maps it onto
a risk tier, a recommendation and the auto-flag rules. The engine is a pure
function of the report, its author's history and the reference time.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Optional, Sequence

from reportguard.models.report import Report
from reportguard.risk.analyzers import (
    analyze_behavior,
    analyze_content,
    analyze_location,
    analyze_timing,
)
from reportguard.risk.models import (
    AnalysisSummary,
    Recommendation,
    RecommendationAction,
    RiskAnalysis,
    RiskLevel,
)
from reportguard.thresholds import MAX_CONFIDENCE_SCORE, RiskThresholds

_MAIN_CONCERNS = 3


def analyze_potential_false_report(
    report: Report,
    user_history: Sequence[Report] = (),
    *,
    now: Optional[datetime] = None,
    thresholds: Optional[RiskThresholds] = None,
) -> RiskAnalysis:
    """Score how likely *report* is to be false or spam.

    *user_history* holds the author's prior reports; order does not matter.
    *now* stands in for a missing ``created_at`` and defaults to the current
    UTC time.
    """
    thresholds = thresholds or RiskThresholds()
    reference = report.created_at or now or datetime.now(timezone.utc)
    history = list(user_history or ())

    breakdown = [
        analyze_content(report),
        analyze_behavior(report, history, reference, thresholds),
        analyze_timing(reference, thresholds),
        analyze_location(report, history, thresholds),
    ]

    score = sum(s.score for s in breakdown)
    factors = [reason for s in breakdown for reason in s.reasons]

    return RiskAnalysis(
        suspicion_score=score,
        confidence_percentage=round(min(score / MAX_CONFIDENCE_SCORE * 100, 100)),
        is_suspicious=score >= thresholds.suspicious,
        risk_level=risk_level(score, thresholds),
        recommendation=recommendation(score, thresholds),
        suspicious_factors=factors,
        breakdown=breakdown,
    )


def risk_level(score: int, thresholds: Optional[RiskThresholds] = None) -> RiskLevel:
    t = thresholds or RiskThresholds()
    if score >= t.high:
        return RiskLevel.HIGH
    if score >= t.medium:
        return RiskLevel.MEDIUM
    if score >= t.low:
        return RiskLevel.LOW
    return RiskLevel.NONE


def recommendation(score: int, thresholds: Optional[RiskThresholds] = None) -> Recommendation:
    t = thresholds or RiskThresholds()
    if score >= t.high:
        return Recommendation(
            action=RecommendationAction.IMMEDIATE_REVIEW,
            message=(
                "This report shows high signs of being false. "
                "Immediate manual review recommended."
            ),
            auto_flag=True,
        )
    if score >= t.medium:
        return Recommendation(
            action=RecommendationAction.CAREFUL_REVIEW,
            message=(
                "This report shows moderate signs of being false. "
                "Careful review recommended."
            ),
        )
    if score >= t.low:
        return Recommendation(
            action=RecommendationAction.MONITOR,
            message="Some suspicious factors detected. Monitor user behavior.",
        )
    return Recommendation(
        action=RecommendationAction.NORMAL,
        message="Report appears legitimate.",
    )


# ---------------------------------------------------------------------------
# Auto-flag rules
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class AutoFlagRule:
    """A named predicate that can auto-flag a report on its own."""

    name: str
    description: str
    predicate: Callable[[RiskAnalysis, RiskThresholds], bool]


AUTO_FLAG_RULES: tuple[AutoFlagRule, ...] = (
    AutoFlagRule(
        name="recommendation_auto_flag",
        description="Recommendation carries autoFlag (score at or above the HIGH tier)",
        predicate=lambda a, t: a.recommendation.auto_flag,
    ),
    AutoFlagRule(
        name="score_at_least_80",
        description="Suspicion score at or above the standalone auto-flag cut-off",
        predicate=lambda a, t: a.suspicion_score >= t.auto_flag,
    ),
)


def auto_flag_rules_matched(
    analysis: RiskAnalysis, thresholds: Optional[RiskThresholds] = None
) -> list[str]:
    """Names of the auto-flag rules that fire for *analysis*."""
    t = thresholds or RiskThresholds()
    return [rule.name for rule in AUTO_FLAG_RULES if rule.predicate(analysis, t)]


def should_auto_flag(
    analysis: RiskAnalysis, thresholds: Optional[RiskThresholds] = None
) -> bool:
    return bool(auto_flag_rules_matched(analysis, thresholds))


def generate_analysis_summary(analysis: RiskAnalysis) -> AnalysisSummary:
    """Top-line verdict and the three leading concerns."""
    return AnalysisSummary(
        verdict="SUSPICIOUS" if analysis.is_suspicious else "LEGITIMATE",
        confidence=f"{analysis.confidence_percentage}%",
        risk_level=analysis.risk_level.value,
        main_concerns=analysis.suspicious_factors[:_MAIN_CONCERNS],
        recommendation=analysis.recommendation.message,
    )
