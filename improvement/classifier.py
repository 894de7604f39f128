"""
improvement/classifier.py

Answer sentiment classification and the per-report AI-confidence heuristic.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final, Literal

from app.domain.compliance_report import STATUS_APPROVED, ComplianceReport

YES_VALUES: Final[frozenset[str]] = frozenset({"yes", "y", "true", "1"})
NO_VALUES: Final[frozenset[str]] = frozenset({"no", "n", "false", "0"})

NEUTRAL_SENTIMENT: Final[float] = 0.5
SENTIMENT_WEIGHT: Final[float] = 0.7
PHOTO_BOOST: Final[float] = 0.1
VALIDATED_THRESHOLD: Final[float] = 0.55
FLAG_THRESHOLD: Final[float] = 0.35

Sentiment = Literal["yes", "no"]


def classify_answer(raw: str | None) -> Sentiment | None:
    """Map a free-text answer onto the yes/no buckets, or ``None``."""
    token = (raw or "").strip().lower()
    if token in YES_VALUES:
        return "yes"
    if token in NO_VALUES:
        return "no"
    return None


@dataclass(frozen=True)
class ReportSignal:
    """
    Per-report inputs and outcome of the confidence heuristic.

    ``validated`` and ``flagged`` are mutually exclusive; reports in the
    open interval (0.35, 0.55) are neither.
    """

    report_id: str
    yes_count: int
    no_count: int
    photo_count: int
    confidence: float
    validated: bool
    flagged: bool
    recheck_suggested: bool


def score_report(report: ComplianceReport) -> ReportSignal:
    """Compute yes/no/photo counts and the AI-confidence verdict for one report."""
    yes_count = 0
    no_count = 0
    for answer in report.answers:
        bucket = classify_answer(answer.answer)
        if bucket == "yes":
            yes_count += 1
        elif bucket == "no":
            no_count += 1

    photo_count = report.photo_count()
    denominator = yes_count + no_count
    sentiment = yes_count / denominator if denominator else NEUTRAL_SENTIMENT
    boost = PHOTO_BOOST if photo_count > 0 else 0.0
    confidence = sentiment * SENTIMENT_WEIGHT + boost

    validated = confidence >= VALIDATED_THRESHOLD
    low_confidence = not validated and confidence <= FLAG_THRESHOLD
    is_approved = report.status == STATUS_APPROVED

    return ReportSignal(
        report_id=report.id,
        yes_count=yes_count,
        no_count=no_count,
        photo_count=photo_count,
        confidence=confidence,
        validated=validated,
        flagged=low_confidence and not is_approved,
        recheck_suggested=low_confidence and is_approved,
    )
