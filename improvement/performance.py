"""
improvement/performance.py

Feeder point and employee performance rankings, plus per-question yes/no
tallies used by summaries and exports.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import date, datetime

from app.domain.compliance_report import (
    STATUS_APPROVED,
    STATUS_REJECTED,
    STATUS_REQUIRES_ACTION,
    ComplianceReport,
)
from improvement.aggregator import UNSPECIFIED_FEEDER_NAME
from improvement.classifier import classify_answer

_LABEL_SEPARATORS = re.compile(r"[_-]+")
_WHITESPACE = re.compile(r"\s+")


@dataclass(frozen=True)
class StatusBreakdown:
    """Status counts for a group of reports.

    ``pending`` includes ``requires_action`` and unknown statuses;
    ``requires_action`` is also reported on its own.
    """

    total_reports: int
    approved: int
    rejected: int
    pending: int
    requires_action: int
    approval_rate: float
    last_report_at: datetime | None


@dataclass(frozen=True)
class FeederPerformance:
    key: str
    name: str
    breakdown: StatusBreakdown


@dataclass(frozen=True)
class FeederRanking:
    best: FeederPerformance | None
    worst: FeederPerformance | None
    only_one: bool = False

    @property
    def has_data(self) -> bool:
        return self.best is not None


@dataclass(frozen=True)
class EmployeePerformance:
    user_key: str
    name: str
    breakdown: StatusBreakdown


@dataclass(frozen=True)
class QuestionStat:
    name: str
    yes: int
    no: int

    def summary_line(self) -> str:
        return f"For \"{self.name}\": {self.yes} reports answered 'yes' and {self.no} reports answered 'no'."


def status_breakdown(reports: Iterable[ComplianceReport]) -> StatusBreakdown:
    """Count statuses case-insensitively and track the latest report date."""
    approved = rejected = pending = requires_action = total = 0
    latest: datetime | None = None
    for report in reports:
        total += 1
        status = (report.status or "").lower()
        if status == STATUS_APPROVED:
            approved += 1
        elif status == STATUS_REJECTED:
            rejected += 1
        else:
            pending += 1
            if status == STATUS_REQUIRES_ACTION:
                requires_action += 1
        report_date = report.resolved_date
        if report_date is not None and (latest is None or report_date > latest):
            latest = report_date

    return StatusBreakdown(
        total_reports=total,
        approved=approved,
        rejected=rejected,
        pending=pending,
        requires_action=requires_action,
        approval_rate=approved / total if total else 0.0,
        last_report_at=latest,
    )


def rank_feeder_points(
    reports: Sequence[ComplianceReport],
    single_day: date | None = None,
) -> FeederRanking:
    """Best and worst feeder point by approval rate, ties broken by volume.

    With *single_day*, only reports whose resolved date falls on that
    calendar day are considered.
    """
    groups: dict[str, list[ComplianceReport]] = {}
    names: dict[str, str] = {}
    for report in reports:
        if single_day is not None:
            report_date = report.resolved_date
            if report_date is None or report_date.date() != single_day:
                continue
        key = report.bucket_key
        groups.setdefault(key, []).append(report)
        names.setdefault(key, report.feeder_point_name or UNSPECIFIED_FEEDER_NAME)

    scored = [
        FeederPerformance(key=key, name=names[key], breakdown=status_breakdown(group))
        for key, group in groups.items()
    ]
    if not scored:
        return FeederRanking(best=None, worst=None)

    scored.sort(key=lambda p: (p.breakdown.approval_rate, p.breakdown.total_reports), reverse=True)
    return FeederRanking(best=scored[0], worst=scored[-1], only_one=len(scored) == 1)


def employee_performance(reports: Iterable[ComplianceReport]) -> list[EmployeePerformance]:
    """Per-employee status breakdowns, keyed by user id or user name."""
    groups: dict[str, list[ComplianceReport]] = {}
    names: dict[str, str] = {}
    for report in reports:
        key = report.user_id or report.user_name or "unknown"
        groups.setdefault(key, []).append(report)
        names.setdefault(key, report.user_name or key)
    return [
        EmployeePerformance(user_key=key, name=names[key], breakdown=status_breakdown(group))
        for key, group in groups.items()
    ]


def top_performers(people: Iterable[EmployeePerformance], limit: int = 3) -> list[EmployeePerformance]:
    active = [p for p in people if p.breakdown.total_reports > 0]
    active.sort(
        key=lambda p: (p.breakdown.approval_rate, p.breakdown.approved, p.breakdown.total_reports),
        reverse=True,
    )
    return active[:limit]


def lowest_performers(people: Iterable[EmployeePerformance], limit: int = 3) -> list[EmployeePerformance]:
    active = [p for p in people if p.breakdown.total_reports > 0]
    active.sort(
        key=lambda p: (p.breakdown.approval_rate, -p.breakdown.rejected, -p.breakdown.total_reports)
    )
    return active[:limit]


def format_question_label(value: str) -> str:
    """``waste_segregated`` -> ``waste segregated``."""
    cleaned = _WHITESPACE.sub(" ", _LABEL_SEPARATORS.sub(" ", value)).strip()
    return cleaned.lower() if cleaned else "question"


def build_question_stats(reports: Iterable[ComplianceReport]) -> list[QuestionStat]:
    """Yes/no tallies per question, in first-seen order; other answers are skipped."""
    counts: dict[str, dict[str, int]] = {}
    for report in reports:
        for answer in report.answers:
            raw_question = answer.question_id or answer.description or "question"
            bucket = classify_answer(_WHITESPACE.sub("", answer.answer))
            if bucket is None:
                continue
            label = format_question_label(raw_question)
            tally = counts.setdefault(label, {"yes": 0, "no": 0})
            tally[bucket] += 1
    return [QuestionStat(name=name, yes=t["yes"], no=t["no"]) for name, t in counts.items()]

