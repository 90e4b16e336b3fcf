"""Tests for the submission and triage flows."""

import asyncio
import tempfile
from datetime import datetime, timedelta, timezone

import pytest

from reportguard.audit import ModerationLog
from reportguard.config import Settings
from reportguard.errors import ReportValidationError
from reportguard.models.report import Location, Report, ReportStatus
from reportguard.moderation.models import ModerationRequest, TextModerationResult, ToxicityScores
from reportguard.pipeline import (
    flag_false_report,
    moderate_submission,
    register_false_report,
    triage_report,
)

WEDNESDAY_NOON = datetime(2024, 5, 15, 12, 0, tzinfo=timezone.utc)


class InsultingText:
    configured = True

    async def analyze_text(self, text):
        return TextModerationResult(success=True, scores=ToxicityScores(insult=0.9))


class BrokenLog:
    def record(self, **kwargs):
        raise OSError("read-only file system")


def _moderate(request, **kwargs):
    return asyncio.run(moderate_submission(request, **kwargs))


# --- Moderation ---


def test_moderation_without_keys_logs_approval():
    with tempfile.TemporaryDirectory() as tmp:
        log = ModerationLog(tmp)
        request = ModerationRequest(
            title="Broken window", description="Glass on the floor near the library entrance"
        )
        outcome = _moderate(request, settings=Settings(), log=log, user_id="u1", post_id="p1")

        assert outcome.success
        assert outcome.analysis.method == "fallback"
        [entry] = log.get_entries()
        assert entry.kind == "moderation"
        assert entry.action == "approved"
        assert entry.method == "fallback"
        assert entry.user_id == "u1"
        assert entry.post_id == "p1"


def test_precheck_block_logged_as_blocked():
    with tempfile.TemporaryDirectory() as tmp:
        log = ModerationLog(tmp)
        outcome = _moderate(ModerationRequest(description="buy now"), settings=Settings(), log=log)
        assert not outcome.analysis.is_legitimate
        [entry] = log.get_entries()
        assert entry.action == "blocked"
        assert entry.violation_type == "explicit_keyword"
        assert entry.confidence == 0


def test_classifier_rejection_logged():
    with tempfile.TemporaryDirectory() as tmp:
        log = ModerationLog(tmp)
        _moderate(
            ModerationRequest(description="You are all idiots in this office"),
            settings=Settings(),
            text_classifier=InsultingText(),
            log=log,
        )
        [entry] = log.get_entries()
        assert entry.action == "rejected"
        assert entry.violation_type == "harassment"
        assert entry.details["textResult"]["success"] is True


def test_invalid_submission_is_not_logged():
    with tempfile.TemporaryDirectory() as tmp:
        log = ModerationLog(tmp)
        with pytest.raises(ReportValidationError):
            _moderate(ModerationRequest(), settings=Settings(), log=log)
        assert log.get_entries() == []


def test_log_failure_does_not_block_verdict():
    outcome = _moderate(
        ModerationRequest(description="Glass on the floor near the library entrance"),
        settings=Settings(),
        log=BrokenLog(),
    )
    assert outcome.success
    assert outcome.analysis.is_legitimate


# --- Triage ---


def test_triage_attaches_analysis_without_mutating_input():
    with tempfile.TemporaryDirectory() as tmp:
        log = ModerationLog(tmp)
        report = Report(id="r1", user_id="u1", description="asdf", created_at=WEDNESDAY_NOON)
        result = triage_report(report, log=log)

        assert not report.ai_analyzed
        assert result.report.ai_analyzed
        assert result.report.ai_analysis["suspicionScore"] == 60
        assert result.report.ai_analysis["riskLevel"] == "MEDIUM"
        assert result.report.status == ReportStatus.PENDING
        assert not result.auto_flagged

        [entry] = log.get_entries(kind="risk")
        assert entry.action == "analyzed"
        assert entry.post_id == "r1"
        assert entry.confidence == 60


def _rapid_duplicates():
    history = [
        Report(title="Report", description="nothing to report", created_at=WEDNESDAY_NOON - timedelta(minutes=m))
        for m in (3, 6, 9)
    ]
    report = Report(
        id="r4",
        title="Report",
        description="nothing to report",
        location=Location(building="Main", room="101"),
        created_at=WEDNESDAY_NOON,
    )
    return report, history


def test_triage_auto_flags_high_risk():
    with tempfile.TemporaryDirectory() as tmp:
        log = ModerationLog(tmp)
        report, history = _rapid_duplicates()
        result = triage_report(report, history, log=log)

        assert result.analysis.suspicion_score == 80
        assert result.auto_flagged
        assert result.rules_matched == ["recommendation_auto_flag", "score_at_least_80"]
        assert result.report.status == ReportStatus.FLAGGED_FALSE
        assert result.report.is_false_positive
        assert result.report.false_positive_reason.startswith("Automatically flagged")
        assert log.get_entries()[0].action == "auto_flagged"


def test_triage_can_skip_auto_flag():
    report, history = _rapid_duplicates()
    result = triage_report(report, history, apply_auto_flag=False)
    assert not result.auto_flagged
    assert result.rules_matched
    assert result.report.status == ReportStatus.PENDING


# --- Manual flagging ---


def test_flag_false_report_requires_reason():
    report = Report(id="r1", description="Glass on the floor")
    with pytest.raises(ReportValidationError):
        flag_false_report(report, "   ")

    flagged = flag_false_report(report, "  Nothing found on inspection ")
    assert flagged.status == ReportStatus.FLAGGED_FALSE
    assert flagged.is_false_positive
    assert flagged.false_positive_reason == "Nothing found on inspection"
    assert report.status == ReportStatus.PENDING


def test_register_false_report_suspends_at_three():
    assert register_false_report(0).count == 1
    assert not register_false_report(1).suspended
    tally = register_false_report(2)
    assert tally.count == 3
    assert tally.suspended
