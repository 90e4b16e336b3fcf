"""Risk router -- false-report scoring and summaries.

Prefix: ``/api/risk``
"""

from __future__ import annotations

from dataclasses import asdict

from fastapi import APIRouter, Depends, HTTPException

from reportguard.audit.moderation_log import ModerationLog
from reportguard.config import Settings
from reportguard.errors import ReportValidationError
from reportguard.models.report import Report, normalize_timestamp
from reportguard.pipeline import triage_report
from reportguard.risk import analyze_potential_false_report, generate_analysis_summary
from reportguard.risk.models import RiskAnalysis
from web.backend.app.models.api import (
    AnalysisSummaryResponse,
    RecommendationResponse,
    RiskAnalysisResponse,
    RiskAnalyzeRequest,
    SubScoreResponse,
)
from web.backend.app.routers.moderation import get_log, get_settings

router = APIRouter(prefix="/api/risk", tags=["risk"])


def _parse(req: RiskAnalyzeRequest):
    try:
        report = Report.from_dict(req.report)
        history = [Report.from_dict(r) for r in req.user_history]
        now = normalize_timestamp(req.now) if req.now else None
    except ReportValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    return report, history, now


def _analysis_to_response(a: RiskAnalysis) -> RiskAnalysisResponse:
    return RiskAnalysisResponse(
        suspicion_score=a.suspicion_score,
        confidence_percentage=a.confidence_percentage,
        is_suspicious=a.is_suspicious,
        risk_level=a.risk_level.value,
        recommendation=RecommendationResponse(
            action=a.recommendation.action.value,
            message=a.recommendation.message,
            auto_flag=a.recommendation.auto_flag,
        ),
        suspicious_factors=a.suspicious_factors,
        breakdown=[SubScoreResponse(**asdict(s)) for s in a.breakdown],
    )


@router.post("/analyze", response_model=RiskAnalysisResponse)
async def analyze_risk(
    req: RiskAnalyzeRequest,
    settings: Settings = Depends(get_settings),
    log: ModerationLog = Depends(get_log),
):
    """Score a report and return it with ``aiAnalysis`` attached."""
    report, history, now = _parse(req)
    result = triage_report(
        report,
        history,
        settings=settings,
        now=now,
        log=log,
        apply_auto_flag=req.apply_auto_flag,
    )
    response = _analysis_to_response(result.analysis)
    response.auto_flag_rules = result.rules_matched
    response.should_auto_flag = bool(result.rules_matched)
    response.report = result.report.to_dict()
    return response


@router.post("/summary", response_model=AnalysisSummaryResponse)
async def risk_summary(req: RiskAnalyzeRequest, settings: Settings = Depends(get_settings)):
    """Condensed verdict and leading concerns for a report."""
    report, history, now = _parse(req)
    analysis = analyze_potential_false_report(report, history, now=now, thresholds=settings.risk)
    summary = generate_analysis_summary(analysis)
    return AnalysisSummaryResponse(**asdict(summary))
