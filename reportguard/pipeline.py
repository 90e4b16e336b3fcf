"""Submission and triage flows around the two engines.

These are the caller-side steps: validate, run an engine, write the result
to the moderation log best-effort, and apply the outcome to the report.
Persisting the updated report is left to the caller.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Optional, Sequence

from reportguard.audit.moderation_log import ModerationLog, record_safely
from reportguard.config import Settings
from reportguard.errors import ReportValidationError
from reportguard.models.report import Report, ReportStatus
from reportguard.moderation.engine import analyze_report, validate_submission
from reportguard.moderation.models import AnalysisOutcome, ModerationAnalysis
from reportguard.risk.engine import (
    analyze_potential_false_report,
    auto_flag_rules_matched,
)
from reportguard.risk.models import RiskAnalysis
from reportguard.thresholds import SUSPENSION_FALSE_REPORTS

logger = logging.getLogger(__name__)


def moderation_action(analysis: ModerationAnalysis) -> str:
    """Log action for a moderation analysis."""
    if analysis.method == "precheck":
        return "blocked"
    return "approved" if analysis.is_legitimate else "rejected"


async def moderate_submission(
    submission,
    *,
    settings: Optional[Settings] = None,
    text_classifier=None,
    image_classifier=None,
    log: Optional[ModerationLog] = None,
    user_id: Optional[str] = None,
    post_id: Optional[str] = None,
) -> AnalysisOutcome:
    """Moderate a submission and record the decision.

    Classifiers default to the ones described by *settings*. Raises
    :class:`ReportValidationError` for empty input; log failures are only
    reported as warnings.
    """
    validate_submission(submission)
    settings = settings or Settings()
    if text_classifier is None:
        text_classifier = settings.text_classifier()
    if image_classifier is None:
        image_classifier = settings.image_classifier()

    outcome = await analyze_report(
        submission,
        text_classifier=text_classifier,
        image_classifier=image_classifier,
        thresholds=settings.moderation,
    )
    analysis = outcome.effective

    details = {
        "textResult": analysis.text_result.to_dict() if analysis.text_result else None,
        "imageResults": [r.to_dict() for r in analysis.image_results],
    }
    if not outcome.success:
        details["error"] = outcome.error

    record_safely(
        log,
        kind="moderation",
        action=moderation_action(analysis),
        violation_type=analysis.violation_type,
        confidence=analysis.legitimacy_confidence,
        content=getattr(submission, "description", "") or "",
        user_id=user_id,
        post_id=post_id,
        method=analysis.method,
        message=analysis.reasoning,
        details=details,
    )
    return outcome


@dataclass
class TriageResult:
    """A risk analysis and the report it was applied to."""

    report: Report
    analysis: RiskAnalysis
    auto_flagged: bool = False
    rules_matched: list[str] = field(default_factory=list)


def triage_report(
    report: Report,
    user_history: Sequence[Report] = (),
    *,
    settings: Optional[Settings] = None,
    now: Optional[datetime] = None,
    log: Optional[ModerationLog] = None,
    apply_auto_flag: bool = True,
) -> TriageResult:
    """Score *report*, attach ``aiAnalysis`` and auto-flag when a rule fires.

    The input report is not mutated; the updated copy is returned.
    """
    settings = settings or Settings()
    analysis = analyze_potential_false_report(
        report, user_history, now=now, thresholds=settings.risk
    )
    rules = auto_flag_rules_matched(analysis, settings.risk)

    updated = replace(report, ai_analyzed=True, ai_analysis=analysis.to_report_fields())
    auto_flagged = bool(rules) and apply_auto_flag
    if auto_flagged:
        updated = replace(
            updated,
            status=ReportStatus.FLAGGED_FALSE,
            is_false_positive=True,
            false_positive_reason="Automatically flagged: " + ", ".join(rules),
        )
        logger.info("report %s auto-flagged (%s)", report.id or "<new>", ", ".join(rules))

    record_safely(
        log,
        kind="risk",
        action="auto_flagged" if auto_flagged else "analyzed",
        confidence=analysis.confidence_percentage,
        content=report.description,
        user_id=report.user_id or None,
        post_id=report.id or None,
        method="risk_engine",
        message=analysis.recommendation.message,
        details=analysis.to_dict(),
    )
    return TriageResult(
        report=updated, analysis=analysis, auto_flagged=auto_flagged, rules_matched=rules
    )


def flag_false_report(report: Report, reason: str) -> Report:
    """Mark *report* as a false report; an administrator's justification is required."""
    if not reason or not reason.strip():
        raise ReportValidationError("A justification is required to flag a report as false")
    return replace(
        report,
        status=ReportStatus.FLAGGED_FALSE,
        is_false_positive=True,
        false_positive_reason=reason.strip(),
    )


@dataclass
class FalseReportTally:
    count: int
    suspended: bool


def register_false_report(current_count: int) -> FalseReportTally:
    """Increment a user's false-report counter; suspension at the configured limit."""
    count = max(0, current_count) + 1
    return FalseReportTally(count=count, suspended=count >= SUSPENSION_FALSE_REPORTS)
