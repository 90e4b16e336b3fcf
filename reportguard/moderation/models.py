"""Data models for the content moderation pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional


@dataclass
class ModerationRequest:
    """Content submitted for moderation."""

    title: str = ""
    description: str = ""
    media: list[str] = field(default_factory=list)


@dataclass
class PrecheckResult:
    """Outcome of the zero-network pre-filter."""

    allowed: bool
    reason: str = ""
    category: str = ""  # "keyword" | "spam" | ""


@dataclass
class LinkCheckResult:
    safe: bool
    reason: str = ""


@dataclass
class ToxicityScores:
    """Attribute scores from the toxicity classifier, each in [0, 1]."""

    toxicity: float = 0.0
    severe_toxicity: float = 0.0
    identity_attack: float = 0.0
    insult: float = 0.0
    profanity: float = 0.0
    threat: float = 0.0
    sexually_explicit: float = 0.0

    def to_dict(self) -> dict[str, float]:
        return {
            "toxicity": self.toxicity,
            "severeToxicity": self.severe_toxicity,
            "identityAttack": self.identity_attack,
            "insult": self.insult,
            "profanity": self.profanity,
            "threat": self.threat,
            "sexuallyExplicit": self.sexually_explicit,
        }


@dataclass
class TextModerationResult:
    """Toxicity adapter result. ``success=False`` means "no signal"."""

    success: bool
    scores: Optional[ToxicityScores] = None
    error: str = ""
    reason: str = ""  # "not_run" when the adapter was skipped

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"success": self.success}
        if self.scores is not None:
            data["scores"] = self.scores.to_dict()
        if self.error:
            data["error"] = self.error
        if self.reason:
            data["reason"] = self.reason
        return data


@dataclass
class ImageModerationResult:
    """NSFW adapter result for a single media URL."""

    url: str
    success: bool
    nsfw_score: float = 0.0
    label: str = ""
    error: str = ""

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"url": self.url, "success": self.success}
        if self.success:
            data["nsfwScore"] = self.nsfw_score
            data["label"] = self.label
        if self.error:
            data["error"] = self.error
        return data


@dataclass
class ModerationVerdict:
    """The allow/block decision shown to callers."""

    allowed: bool
    violation_type: Optional[str] = None
    confidence: int = 0  # 0 - 100
    reasons: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "allowed": self.allowed,
            "violationType": self.violation_type,
            "confidence": self.confidence,
            "reasons": list(self.reasons),
        }


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass
class ModerationAnalysis:
    """Full analysis emitted by the decision engine or the fallback analyzer."""

    is_legitimate: bool
    legitimacy_confidence: int
    severity: str  # "low" | "medium" | "high"
    credibility_score: int
    risk_level: str  # "low" | "medium" | "high"
    suspicious_factors: list[str] = field(default_factory=list)
    recommendations: list[str] = field(default_factory=list)
    should_flag: bool = False
    reasoning: str = ""
    method: str = "classifier"  # "precheck" | "classifier" | "fallback"
    violation_type: Optional[str] = None
    analyzed_at: str = field(default_factory=_now_iso)
    text_result: Optional[TextModerationResult] = None
    image_results: list[ImageModerationResult] = field(default_factory=list)

    @property
    def verdict(self) -> ModerationVerdict:
        return ModerationVerdict(
            allowed=self.is_legitimate,
            violation_type=self.violation_type,
            confidence=self.legitimacy_confidence,
            reasons=list(self.suspicious_factors),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "isLegitimate": self.is_legitimate,
            "legitimacyConfidence": self.legitimacy_confidence,
            "severity": self.severity,
            "credibilityScore": self.credibility_score,
            "riskLevel": self.risk_level,
            "suspiciousFactors": list(self.suspicious_factors),
            "recommendations": list(self.recommendations),
            "shouldFlag": self.should_flag,
            "reasoning": self.reasoning,
            "method": self.method,
            "violationType": self.violation_type,
            "analyzedAt": self.analyzed_at,
            "textResult": self.text_result.to_dict() if self.text_result else None,
            "imageResults": [r.to_dict() for r in self.image_results],
        }


@dataclass
class AnalysisOutcome:
    """Top-level engine result.

    ``success=False`` marks a degraded result: ``analysis`` is empty and
    ``fallback_analysis`` carries the local heuristic verdict.
    """

    success: bool
    analysis: Optional[ModerationAnalysis] = None
    error: str = ""
    fallback_analysis: Optional[ModerationAnalysis] = None

    @property
    def effective(self) -> ModerationAnalysis:
        """The analysis a caller should act on, degraded or not."""
        result = self.analysis or self.fallback_analysis
        if result is None:
            raise ValueError("AnalysisOutcome carries no analysis")
        return result

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"success": self.success}
        if self.analysis is not None:
            data["analysis"] = self.analysis.to_dict()
        if self.error:
            data["error"] = self.error
        if self.fallback_analysis is not None:
            data["fallbackAnalysis"] = self.fallback_analysis.to_dict()
        return data
