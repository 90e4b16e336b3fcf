"""Moderation router -- pre-check, classifier moderation and the moderation log.

Prefix: ``/api/moderation``
"""

from __future__ import annotations

from dataclasses import asdict
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from reportguard.audit.moderation_log import ModerationLog
from reportguard.classifiers import classifier_status
from reportguard.config import Settings, load_settings
from reportguard.errors import ReportValidationError
from reportguard.moderation.models import ModerationAnalysis, ModerationRequest
from reportguard.moderation.precheck import format_user_message, precheck
from reportguard.pipeline import moderate_submission
from web.backend.app.models.api import (
    ClassifierStatusResponse,
    ModerateRequest,
    ModerateResponse,
    ModerationAnalysisResponse,
    ModerationLogEntryResponse,
    ModerationLogExportResponse,
    PrecheckRequest,
    PrecheckResponse,
    VerdictResponse,
)

router = APIRouter(prefix="/api/moderation", tags=["moderation"])

# ---------------------------------------------------------------------------
# Shared instances (created on first use for the running process)
# ---------------------------------------------------------------------------
_settings: Optional[Settings] = None
_log: Optional[ModerationLog] = None


def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = load_settings()
    return _settings


def get_log() -> ModerationLog:
    global _log
    if _log is None:
        _log = ModerationLog(get_settings().log_dir or None)
    return _log


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _analysis_to_response(a: Optional[ModerationAnalysis]) -> Optional[ModerationAnalysisResponse]:
    if a is None:
        return None
    return ModerationAnalysisResponse(**asdict(a))


def _verdict_to_response(a: ModerationAnalysis) -> VerdictResponse:
    v = a.verdict
    return VerdictResponse(
        allowed=v.allowed,
        violation_type=v.violation_type,
        confidence=v.confidence,
        reasons=v.reasons,
        message="" if v.allowed else format_user_message(v.violation_type, a.reasoning),
    )


# =========================================================================
# Moderation endpoints
# =========================================================================


@router.post("/precheck", response_model=PrecheckResponse)
async def precheck_text(req: PrecheckRequest):
    """Run the offline pre-filter only."""
    result = precheck(req.text)
    message = ""
    if not result.allowed:
        violation = "explicit_keyword" if result.category == "keyword" else result.category
        message = format_user_message(violation, result.reason)
    return PrecheckResponse(
        allowed=result.allowed,
        reason=result.reason,
        category=result.category,
        message=message,
    )


@router.post("/analyze", response_model=ModerateResponse)
async def analyze_submission(
    req: ModerateRequest,
    settings: Settings = Depends(get_settings),
    log: ModerationLog = Depends(get_log),
):
    """Moderate a submission with the configured classifiers."""
    request = ModerationRequest(title=req.title, description=req.description, media=req.media)
    try:
        outcome = await moderate_submission(
            request,
            settings=settings,
            log=log,
            user_id=req.user_id,
            post_id=req.post_id,
        )
    except ReportValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc))

    return ModerateResponse(
        success=outcome.success,
        verdict=_verdict_to_response(outcome.effective),
        analysis=_analysis_to_response(outcome.analysis),
        error=outcome.error,
        fallback_analysis=_analysis_to_response(outcome.fallback_analysis),
    )


@router.get("/status", response_model=ClassifierStatusResponse)
async def moderation_status(settings: Settings = Depends(get_settings)):
    """Report which classifiers are configured."""
    st = classifier_status(settings.text_classifier(), settings.image_classifier())
    return ClassifierStatusResponse(
        configured=st.configured,
        level=st.level,
        message=st.message,
        profile=settings.moderation.profile,
        nsfw_threshold=settings.moderation.nsfw,
        text_threshold=settings.moderation.text_attribute,
    )


# =========================================================================
# Moderation log endpoints
# =========================================================================


@router.get("/logs", response_model=list[ModerationLogEntryResponse])
async def list_log_entries(
    kind: Optional[str] = Query(None),
    action: Optional[str] = Query(None),
    violation_type: Optional[str] = Query(None),
    user_id: Optional[str] = Query(None),
    start_date: Optional[str] = Query(None),
    end_date: Optional[str] = Query(None),
    limit: int = Query(200, ge=1, le=10000),
    log: ModerationLog = Depends(get_log),
):
    """List moderation log entries with optional filters."""
    entries = log.get_entries(
        kind=kind,
        action=action,
        violation_type=violation_type,
        user_id=user_id,
        start_date=start_date,
        end_date=end_date,
        limit=limit,
    )
    return [ModerationLogEntryResponse(**asdict(e)) for e in entries]


@router.get("/logs/export", response_model=ModerationLogExportResponse)
async def export_log(
    format: str = Query("json", pattern="^(json|csv)$"),
    kind: Optional[str] = Query(None),
    action: Optional[str] = Query(None),
    violation_type: Optional[str] = Query(None),
    start_date: Optional[str] = Query(None),
    end_date: Optional[str] = Query(None),
    log: ModerationLog = Depends(get_log),
):
    """Export the moderation log in JSON or CSV format."""
    filters = {
        "kind": kind,
        "action": action,
        "violation_type": violation_type,
        "start_date": start_date,
        "end_date": end_date,
    }
    content = log.export(format, **filters)
    entries = log.get_entries(limit=10000, **filters)
    return ModerationLogExportResponse(
        format=format, content=content, record_count=len(entries)
    )
