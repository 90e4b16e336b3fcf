"""Pydantic models for API request/response serialization.

These models mirror the reportguard dataclasses and provide proper JSON
serialization for the FastAPI endpoints.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Moderation models
# ---------------------------------------------------------------------------


class PrecheckRequest(BaseModel):
    text: str = ""


class PrecheckResponse(BaseModel):
    """Mirrors reportguard.moderation.models.PrecheckResult."""

    allowed: bool
    reason: str = ""
    category: str = ""
    message: str = ""


class ModerateRequest(BaseModel):
    title: str = ""
    description: str = ""
    media: list[str] = Field(default_factory=list)
    user_id: Optional[str] = None
    post_id: Optional[str] = None


class ToxicityScoresResponse(BaseModel):
    """Mirrors reportguard.moderation.models.ToxicityScores."""

    toxicity: float = 0.0
    severe_toxicity: float = 0.0
    identity_attack: float = 0.0
    insult: float = 0.0
    profanity: float = 0.0
    threat: float = 0.0
    sexually_explicit: float = 0.0


class TextResultResponse(BaseModel):
    success: bool
    scores: Optional[ToxicityScoresResponse] = None
    error: str = ""
    reason: str = ""


class ImageResultResponse(BaseModel):
    url: str
    success: bool
    nsfw_score: float = 0.0
    label: str = ""
    error: str = ""


class ModerationAnalysisResponse(BaseModel):
    """Mirrors reportguard.moderation.models.ModerationAnalysis."""

    is_legitimate: bool
    legitimacy_confidence: int
    severity: str
    credibility_score: int
    risk_level: str
    suspicious_factors: list[str] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)
    should_flag: bool = False
    reasoning: str = ""
    method: str = ""
    violation_type: Optional[str] = None
    analyzed_at: str = ""
    text_result: Optional[TextResultResponse] = None
    image_results: list[ImageResultResponse] = Field(default_factory=list)


class VerdictResponse(BaseModel):
    allowed: bool
    violation_type: Optional[str] = None
    confidence: int = 0
    reasons: list[str] = Field(default_factory=list)
    message: str = ""


class ModerateResponse(BaseModel):
    """Mirrors reportguard.moderation.models.AnalysisOutcome plus the verdict."""

    success: bool
    verdict: VerdictResponse
    analysis: Optional[ModerationAnalysisResponse] = None
    error: str = ""
    fallback_analysis: Optional[ModerationAnalysisResponse] = None


class ClassifierStatusResponse(BaseModel):
    configured: bool
    level: str
    message: str
    profile: str
    nsfw_threshold: float
    text_threshold: float


class ModerationLogEntryResponse(BaseModel):
    """Mirrors reportguard.audit.moderation_log.ModerationLogEntry."""

    id: str
    timestamp: str
    kind: str
    action: str
    violation_type: Optional[str] = None
    confidence: float = 0
    content_preview: str = ""
    user_id: Optional[str] = None
    post_id: Optional[str] = None
    method: str = ""
    message: str = ""
    details: dict[str, Any] = Field(default_factory=dict)


class ModerationLogExportResponse(BaseModel):
    format: str
    content: str
    record_count: int


# ---------------------------------------------------------------------------
# Risk models
# ---------------------------------------------------------------------------


class RiskAnalyzeRequest(BaseModel):
    """A report and its author's prior reports, in document-store shape."""

    report: dict[str, Any]
    user_history: list[dict[str, Any]] = Field(default_factory=list)
    now: Optional[str] = None
    apply_auto_flag: bool = True


class SubScoreResponse(BaseModel):
    name: str
    score: int = 0
    reasons: list[str] = Field(default_factory=list)


class RecommendationResponse(BaseModel):
    action: str
    message: str
    auto_flag: bool = False


class RiskAnalysisResponse(BaseModel):
    """Mirrors reportguard.risk.models.RiskAnalysis."""

    suspicion_score: int
    confidence_percentage: int
    is_suspicious: bool
    risk_level: str
    recommendation: RecommendationResponse
    suspicious_factors: list[str] = Field(default_factory=list)
    breakdown: list[SubScoreResponse] = Field(default_factory=list)
    auto_flag_rules: list[str] = Field(default_factory=list)
    should_auto_flag: bool = False
    report: dict[str, Any] = Field(default_factory=dict)


class AnalysisSummaryResponse(BaseModel):
    """Mirrors reportguard.risk.models.AnalysisSummary."""

    verdict: str
    confidence: str
    risk_level: str
    main_concerns: list[str] = Field(default_factory=list)
    recommendation: str = ""
