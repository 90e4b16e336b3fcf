"""Tests for the false-report risk engine: aggregation, tiers and auto-flag rules."""

from datetime import datetime, timedelta, timezone

from reportguard.models.report import Location, Report
from reportguard.risk import (
    AUTO_FLAG_RULES,
    RiskLevel,
    analyze_potential_false_report,
    auto_flag_rules_matched,
    generate_analysis_summary,
    should_auto_flag,
)
from reportguard.risk.engine import recommendation, risk_level
from reportguard.risk.models import RecommendationAction, RiskAnalysis
from reportguard.thresholds import RiskThresholds

WEDNESDAY_NOON = datetime(2024, 5, 15, 12, 0, tzinfo=timezone.utc)
SUNDAY_3AM = datetime(2024, 5, 19, 3, 0, tzinfo=timezone.utc)
GYM = Location(building="Sports Complex", room="Gym")


def _analysis_with_score(score: int) -> RiskAnalysis:
    return RiskAnalysis(
        suspicion_score=score,
        confidence_percentage=min(score, 100),
        is_suspicious=score >= 40,
        risk_level=risk_level(score),
        recommendation=recommendation(score),
    )


def test_legitimate_report():
    report = Report(
        title="Broken window",
        description="The window near the back row was broken during lunch break.",
        location=GYM,
        created_at=WEDNESDAY_NOON,
    )
    analysis = analyze_potential_false_report(report)
    assert analysis.suspicion_score == 0
    assert analysis.risk_level == RiskLevel.NONE
    assert not analysis.is_suspicious
    assert analysis.recommendation.action == RecommendationAction.NORMAL
    assert analysis.recommendation.message == "Report appears legitimate."
    assert [s.name for s in analysis.breakdown] == ["content", "behavior", "timing", "location"]


def test_asdf_report_hand_computed():
    report = Report(description="asdf", created_at=WEDNESDAY_NOON)
    analysis = analyze_potential_false_report(report)

    scores = {s.name: s.score for s in analysis.breakdown}
    # keyword 25 + short 15 + few words 15
    assert scores == {"content": 55, "behavior": 0, "timing": 0, "location": 5}
    assert analysis.suspicion_score == 60
    assert analysis.confidence_percentage == 60
    assert analysis.is_suspicious
    assert analysis.risk_level == RiskLevel.MEDIUM
    assert analysis.recommendation.action == RecommendationAction.CAREFUL_REVIEW
    assert not analysis.recommendation.auto_flag
    assert not should_auto_flag(analysis)


def test_rapid_duplicate_reports():
    history = [
        Report(
            title="Report",
            description="nothing to report",
            created_at=WEDNESDAY_NOON - timedelta(minutes=m),
        )
        for m in (3, 6, 9)
    ]
    report = Report(
        title="Report",
        description="nothing to report",
        location=GYM,
        created_at=WEDNESDAY_NOON + timedelta(minutes=1),
    )
    analysis = analyze_potential_false_report(report, history)

    assert "Multiple reports (3) submitted within 30 minutes" in analysis.suspicious_factors
    assert "Similar or duplicate reports found in user history" in analysis.suspicious_factors
    assert analysis.suspicion_score >= 55
    assert analysis.risk_level in (RiskLevel.MEDIUM, RiskLevel.HIGH)
    # keyword 25 + rapid 30 + duplicate 25
    assert analysis.suspicion_score == 80
    assert analysis.risk_level == RiskLevel.HIGH


def test_sunday_3am_timing():
    report = Report(
        title="Broken window",
        description="The window near the back row was broken during lunch break.",
        location=GYM,
        created_at=SUNDAY_3AM,
    )
    analysis = analyze_potential_false_report(report)
    timing = next(s for s in analysis.breakdown if s.name == "timing")
    assert timing.score == 15
    assert analysis.suspicion_score == 15


def test_now_used_when_report_is_undated():
    report = Report(
        title="Broken window",
        description="The window near the back row was broken during lunch break.",
        location=GYM,
    )
    analysis = analyze_potential_false_report(report, now=SUNDAY_3AM)
    assert analysis.suspicion_score == 15


def test_deterministic():
    history = [Report(description="nothing to report", created_at=WEDNESDAY_NOON)] * 3
    report = Report(description="nothing to report", created_at=WEDNESDAY_NOON)
    first = analyze_potential_false_report(report, history, now=WEDNESDAY_NOON)
    second = analyze_potential_false_report(report, history, now=WEDNESDAY_NOON)
    assert first.to_dict() == second.to_dict()


def test_history_order_does_not_matter():
    history = [
        Report(description=f"nothing to report {i}", created_at=WEDNESDAY_NOON - timedelta(minutes=i))
        for i in range(5)
    ]
    report = Report(description="nothing to report", created_at=WEDNESDAY_NOON)
    forward = analyze_potential_false_report(report, history)
    backward = analyze_potential_false_report(report, list(reversed(history)))
    assert forward.suspicion_score == backward.suspicion_score


def test_confidence_capped_at_100():
    history = [
        Report(
            description="lol lol",
            location=GYM,
            created_at=SUNDAY_3AM - timedelta(minutes=i),
            is_false_positive=True,
        )
        for i in range(4)
    ]
    report = Report(description="lol lol", location=GYM, created_at=SUNDAY_3AM)
    analysis = analyze_potential_false_report(report, history)
    assert analysis.suspicion_score > 100
    assert analysis.confidence_percentage == 100


# --- Tiers ---


def test_risk_level_cutoffs():
    assert risk_level(19) == RiskLevel.NONE
    assert risk_level(20) == RiskLevel.LOW
    assert risk_level(40) == RiskLevel.MEDIUM
    assert risk_level(69) == RiskLevel.MEDIUM
    assert risk_level(70) == RiskLevel.HIGH


def test_recommendation_cutoffs():
    assert recommendation(70).action == RecommendationAction.IMMEDIATE_REVIEW
    assert recommendation(70).auto_flag
    assert recommendation(69).action == RecommendationAction.CAREFUL_REVIEW
    assert not recommendation(69).auto_flag
    assert recommendation(20).action == RecommendationAction.MONITOR
    assert recommendation(19).action == RecommendationAction.NORMAL


def test_custom_thresholds():
    t = RiskThresholds(high=50, medium=30, low=10)
    assert risk_level(35, t) == RiskLevel.MEDIUM
    assert recommendation(50, t).auto_flag


# --- Auto-flag rules ---


def test_auto_flag_rules_enumerated():
    assert [r.name for r in AUTO_FLAG_RULES] == ["recommendation_auto_flag", "score_at_least_80"]


def test_score_85_fires_both_rules():
    analysis = _analysis_with_score(85)
    assert analysis.recommendation.auto_flag
    assert auto_flag_rules_matched(analysis) == ["recommendation_auto_flag", "score_at_least_80"]
    assert should_auto_flag(analysis)


def test_score_75_fires_recommendation_rule_only():
    assert auto_flag_rules_matched(_analysis_with_score(75)) == ["recommendation_auto_flag"]


def test_score_rule_is_independent_of_recommendation():
    analysis = _analysis_with_score(85)
    analysis.recommendation.auto_flag = False
    assert auto_flag_rules_matched(analysis) == ["score_at_least_80"]
    assert should_auto_flag(analysis)


def test_low_score_does_not_flag():
    assert not should_auto_flag(_analysis_with_score(60))


# --- Summary ---


def test_summary_keeps_top_three_concerns():
    report = Report(description="asdf", created_at=SUNDAY_3AM)
    analysis = analyze_potential_false_report(report)
    summary = generate_analysis_summary(analysis)

    assert summary.verdict == "SUSPICIOUS"
    assert summary.confidence == f"{analysis.confidence_percentage}%"
    assert summary.risk_level == analysis.risk_level.value
    assert summary.main_concerns == analysis.suspicious_factors[:3]
    assert len(analysis.suspicious_factors) > 3
    assert summary.to_dict()["mainConcerns"] == summary.main_concerns


def test_report_fields():
    analysis = _analysis_with_score(45)
    assert analysis.to_report_fields() == {
        "suspicionScore": 45,
        "riskLevel": "MEDIUM",
        "isSuspicious": True,
        "confidencePercentage": 45,
    }
