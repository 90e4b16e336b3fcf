"""Sub-analyzers for the false-report risk engine.

Each analyzer looks at one independent signal family and returns a
:class:`SubScore`. Scores are additive with no weighting; the engine simply
sums them.
"""

from __future__ import annotations

import re
from datetime import datetime
from typing import Sequence
from zoneinfo import ZoneInfo

from reportguard.models.report import Report
from reportguard.risk.models import SubScore
from reportguard.thresholds import RiskThresholds

SPAM_KEYWORDS: tuple[str, ...] = (
    "test", "testing", "fake", "joke", "lol", "haha", "nothing", "none",
    "asdf", "qwerty", "123", "abcd", "xyz", "random", "spam",
)

_REPETITION = re.compile(r"(.)\1{4,}")
_CAPITALS = re.compile(r"[A-Z]")

_SHORT_DESCRIPTION = 10
_CAPS_RATIO = 0.7
_CAPS_MIN_LENGTH = 10
_MIN_WORDS = 3

_SATURDAY, _SUNDAY = 5, 6


def jaccard_similarity(text1: str, text2: str) -> float:
    """Word-set Jaccard similarity; 0 when either side is empty."""
    if not text1 or not text2:
        return 0.0
    words1 = set(text1.split())
    words2 = set(text2.split())
    union = words1 | words2
    if not union:
        return 0.0
    return len(words1 & words2) / len(union)


def analyze_content(report: Report) -> SubScore:
    """Spam keywords, very short text, character runs, shouting, few words."""
    result = SubScore(name="content")

    raw_text = f"{report.title or ''} {report.description or ''}"
    text = raw_text.lower()
    description = (report.description or "").lower()

    found = [kw for kw in SPAM_KEYWORDS if kw in text]
    if found:
        result.add(25, f"Contains spam-like keywords: {', '.join(found)}")

    if 0 < len(description) < _SHORT_DESCRIPTION:
        result.add(15, "Report description is suspiciously short")

    if _REPETITION.search(text):
        result.add(20, "Contains repetitive character patterns")

    caps_ratio = len(_CAPITALS.findall(raw_text)) / len(raw_text)
    if caps_ratio > _CAPS_RATIO and len(raw_text) > _CAPS_MIN_LENGTH:
        result.add(10, "Excessive use of capital letters")

    if len(text.split()) < _MIN_WORDS:
        result.add(15, "Very few words in report")

    return result


def analyze_behavior(
    report: Report,
    history: Sequence[Report],
    reference: datetime,
    thresholds: RiskThresholds,
) -> SubScore:
    """Rapid-fire submissions, near-duplicates, and a poor track record."""
    result = SubScore(name="behavior")
    if not history:
        return result

    window = thresholds.rapid_window_minutes * 60
    recent = [
        r
        for r in history
        if r.created_at is not None
        and abs((reference - r.created_at).total_seconds()) < window
    ]
    if len(recent) >= thresholds.rapid_report_count:
        result.add(
            30,
            f"Multiple reports ({len(recent)}) submitted within "
            f"{thresholds.rapid_window_minutes} minutes",
        )

    current = (report.description or "").lower()
    if any(
        jaccard_similarity(current, (r.description or "").lower()) > thresholds.duplicate_similarity
        for r in history
    ):
        result.add(25, "Similar or duplicate reports found in user history")

    false_count = sum(1 for r in history if r.is_false_positive)
    rate = false_count / len(history)
    if rate > thresholds.false_rate_limit and len(history) >= thresholds.false_rate_min_reports:
        result.add(35, f"High false report rate: {round(rate * 100)}%")

    return result


def analyze_timing(reference: datetime, thresholds: RiskThresholds) -> SubScore:
    """Small-hours and weekend submissions."""
    result = SubScore(name="timing")
    local = reference.astimezone(ZoneInfo(thresholds.local_timezone))

    if thresholds.unusual_hour_start <= local.hour <= thresholds.unusual_hour_end:
        result.add(
            10,
            f"Report submitted at unusual hours "
            f"({thresholds.unusual_hour_start}-{thresholds.unusual_hour_end} AM)",
        )

    if local.weekday() in (_SATURDAY, _SUNDAY):
        result.add(5, "Report submitted on weekend")

    return result


def analyze_location(
    report: Report, history: Sequence[Report], thresholds: RiskThresholds
) -> SubScore:
    """Missing location, or the same room reported over and over."""
    result = SubScore(name="location")

    if report.location is None:
        result.add(5, "No location specified")
        return result

    same_place = [r for r in history if report.location.same_place(r.location)]
    if len(same_place) >= thresholds.same_location_count:
        result.add(
            15,
            f"Multiple reports from same location: "
            f"{report.location.building} - {report.location.room}",
        )

    return result
