"""Data models for the false-report risk engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class RiskLevel(Enum):
    NONE = "NONE"
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class RecommendationAction(Enum):
    IMMEDIATE_REVIEW = "IMMEDIATE_REVIEW"
    CAREFUL_REVIEW = "CAREFUL_REVIEW"
    MONITOR = "MONITOR"
    NORMAL = "NORMAL"


@dataclass
class SubScore:
    """Contribution of one sub-analyzer."""

    name: str
    score: int = 0
    reasons: list[str] = field(default_factory=list)

    def add(self, points: int, reason: str) -> None:
        self.score += points
        self.reasons.append(reason)


@dataclass
class Recommendation:
    action: RecommendationAction
    message: str
    auto_flag: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "action": self.action.value,
            "message": self.message,
            "autoFlag": self.auto_flag,
        }


@dataclass
class RiskAnalysis:
    """Suspicion score, tier and recommendation for one report."""

    suspicion_score: int
    confidence_percentage: int
    is_suspicious: bool
    risk_level: RiskLevel
    recommendation: Recommendation
    suspicious_factors: list[str] = field(default_factory=list)
    breakdown: list[SubScore] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "suspicionScore": self.suspicion_score,
            "confidencePercentage": self.confidence_percentage,
            "isSuspicious": self.is_suspicious,
            "riskLevel": self.risk_level.value,
            "suspiciousFactors": list(self.suspicious_factors),
            "recommendation": self.recommendation.to_dict(),
            "breakdown": {s.name: s.score for s in self.breakdown},
        }

    def to_report_fields(self) -> dict[str, Any]:
        """The subset persisted on the report as ``aiAnalysis``."""
        return {
            "suspicionScore": self.suspicion_score,
            "riskLevel": self.risk_level.value,
            "isSuspicious": self.is_suspicious,
            "confidencePercentage": self.confidence_percentage,
        }


@dataclass
class AnalysisSummary:
    """Condensed view of a RiskAnalysis for administrators."""

    verdict: str  # "SUSPICIOUS" | "LEGITIMATE"
    confidence: str
    risk_level: str
    main_concerns: list[str] = field(default_factory=list)
    recommendation: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "verdict": self.verdict,
            "confidence": self.confidence,
            "riskLevel": self.risk_level,
            "mainConcerns": list(self.main_concerns),
            "recommendation": self.recommendation,
        }
