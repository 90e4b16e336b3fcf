"""Moderation decision engine.

Combines the pre-filter with the optional toxicity and NSFW classifiers into
one allow/block analysis. Any single block wins; the reported violation type
is the first signal to fire in priority order:

    explicit keyword > severe toxicity/threat > insult group > sexual text
    > NSFW image > malicious link
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

from reportguard.errors import ReportValidationError
from reportguard.moderation.fallback import fallback_analysis
from reportguard.moderation.models import (
    AnalysisOutcome,
    ImageModerationResult,
    ModerationAnalysis,
    PrecheckResult,
    TextModerationResult,
    ToxicityScores,
)
from reportguard.moderation.precheck import check_links, precheck
from reportguard.thresholds import (
    CREDIBILITY_ALLOWED,
    CREDIBILITY_BLOCKED,
    CREDIBILITY_PRECHECK,
    LEGITIMACY_ALLOWED,
    LEGITIMACY_BLOCKED,
    LEGITIMACY_PRECHECK,
    ModerationThresholds,
)

logger = logging.getLogger(__name__)

# (violation type, reason, score fields) checked in order; only the first match fires
TEXT_RULES: tuple[tuple[str, str, tuple[str, ...]], ...] = (
    ("severe_toxicity", "Severe toxicity or threat detected", ("severe_toxicity", "threat")),
    (
        "harassment",
        "Insult/Identity attack/profanity detected",
        ("identity_attack", "insult", "profanity"),
    ),
    ("sexual", "Sexually explicit language", ("sexually_explicit",)),
)

NSFW_VIOLATION = "inappropriate_image"
NSFW_REASON = "NSFW image detected"
LINK_VIOLATION = "malicious_link"

_PRECHECK_VIOLATIONS = {"keyword": "explicit_keyword", "spam": "spam"}


def validate_submission(report) -> None:
    """Reject a submission whose title and description are both empty."""
    title = (getattr(report, "title", "") or "").strip()
    description = (getattr(report, "description", "") or "").strip()
    if not title and not description:
        raise ReportValidationError("Title or description required")


async def analyze_report(
    report,
    *,
    text_classifier=None,
    image_classifier=None,
    thresholds: Optional[ModerationThresholds] = None,
) -> AnalysisOutcome:
    """Moderate a report (anything with ``title``, ``description`` and ``media``).

    Raises :class:`ReportValidationError` for empty input. Every other
    failure is absorbed: adapter errors become "no signal" and a pipeline
    error returns ``success=False`` with the fallback analysis attached.
    """
    validate_submission(report)
    thresholds = thresholds or ModerationThresholds()
    try:
        analysis = await _analyze(report, text_classifier, image_classifier, thresholds)
    except Exception as exc:
        logger.exception("moderation pipeline failed; returning fallback analysis")
        return AnalysisOutcome(
            success=False,
            error=str(exc) or type(exc).__name__,
            fallback_analysis=fallback_analysis(report),
        )
    return AnalysisOutcome(success=True, analysis=analysis)


def analyze_report_sync(report, **kwargs) -> AnalysisOutcome:
    """Blocking wrapper around :func:`analyze_report`."""
    return asyncio.run(analyze_report(report, **kwargs))


async def _analyze(
    report,
    text_classifier,
    image_classifier,
    thresholds: ModerationThresholds,
) -> ModerationAnalysis:
    text = f"{report.title or ''}\n{report.description or ''}"

    pre = precheck(text)
    if not pre.allowed:
        return _precheck_block(pre)

    use_text = _available(text_classifier)
    use_images = _available(image_classifier)
    if not use_text and not use_images:
        logger.info("no classifiers configured; using fallback analysis")
        return fallback_analysis(report)

    media = list(getattr(report, "media", None) or [])
    image_jobs = (
        [_classify_image(image_classifier, url) for url in media] if use_images else []
    )
    if use_text:
        text_result, *image_results = await asyncio.gather(
            _analyze_text(text_classifier, text), *image_jobs
        )
    else:
        text_result = TextModerationResult(success=False, reason="not_run")
        image_results = list(await asyncio.gather(*image_jobs))

    signals: list[tuple[str, str]] = []

    if text_result.success:
        signal = _text_signal(text_result.scores, thresholds.text_attribute)
        if signal:
            signals.append(signal)

    if any(r.success and r.nsfw_score >= thresholds.nsfw for r in image_results):
        signals.append((NSFW_VIOLATION, NSFW_REASON))

    if thresholds.check_links:
        links = check_links(report.description or "")
        if not links.safe:
            signals.append((LINK_VIOLATION, links.reason))

    blocked = bool(signals)
    reasons = [reason for _, reason in signals]
    return ModerationAnalysis(
        is_legitimate=not blocked,
        legitimacy_confidence=LEGITIMACY_BLOCKED if blocked else LEGITIMACY_ALLOWED,
        severity="high" if blocked else "low",
        credibility_score=CREDIBILITY_BLOCKED if blocked else CREDIBILITY_ALLOWED,
        risk_level="high" if blocked else "low",
        suspicious_factors=reasons,
        recommendations=["Manual review recommended"] if blocked else ["No action required"],
        should_flag=blocked,
        reasoning="; ".join(reasons) or "No issues detected",
        method="classifier",
        violation_type=signals[0][0] if signals else None,
        text_result=text_result,
        image_results=list(image_results),
    )


def _precheck_block(pre: PrecheckResult) -> ModerationAnalysis:
    return ModerationAnalysis(
        is_legitimate=False,
        legitimacy_confidence=LEGITIMACY_PRECHECK,
        severity="high",
        credibility_score=CREDIBILITY_PRECHECK,
        risk_level="high",
        suspicious_factors=[pre.reason],
        recommendations=["Manual review recommended"],
        should_flag=True,
        reasoning=pre.reason,
        method="precheck",
        violation_type=_PRECHECK_VIOLATIONS.get(pre.category, pre.category),
        text_result=TextModerationResult(success=False, reason=pre.reason),
    )


def _text_signal(scores: ToxicityScores, threshold: float) -> Optional[tuple[str, str]]:
    for violation, reason, fields in TEXT_RULES:
        if any(getattr(scores, name) > threshold for name in fields):
            return violation, reason
    return None


def _available(classifier) -> bool:
    return classifier is not None and bool(getattr(classifier, "configured", True))


async def _analyze_text(classifier, text: str) -> TextModerationResult:
    try:
        return await classifier.analyze_text(text)
    except Exception as exc:
        logger.warning("text classifier raised: %s", exc)
        return TextModerationResult(success=False, error=str(exc) or type(exc).__name__)


async def _classify_image(classifier, url: str) -> ImageModerationResult:
    try:
        return await classifier.classify_image(url)
    except Exception as exc:
        logger.warning("image classifier raised for %s: %s", url, exc)
        return ImageModerationResult(url=url, success=False, error=str(exc) or type(exc).__name__)
