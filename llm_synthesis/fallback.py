"""Templated analysis used when no model output is available.

Every fallback summary carries the numerical question section, headed by
``NUMERIC_SUMMARY_HEADER``; callers use that header to tell the templated
path from model output.
"""

from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional, Sequence

from app.domain.compliance_report import ComplianceReport
from improvement.normalizer import round_half_up
from improvement.performance import build_question_stats
from llm_synthesis.schema import DailyReportData, SummaryOutput

NUMERIC_SUMMARY_HEADER = "Numerical Summary of Key Questions:"

_NEGATIVE_ANSWER_MARKERS = ("no", "not available", "requires_action", "pending")
_ATTENTION_ANSWERS = frozenset({"no", "requires_action", "pending", "delayed", "issue", "not available"})
_STATUS_ORDER = ("pending", "approved", "rejected", "requires_action", "action_taken")
_UNKNOWN_FEEDER = "Unknown Feeder"


@dataclass
class _AnswerDetail:
    count: int = 0
    report_ids: List[str] = field(default_factory=list)


def numeric_summary_section(
    reports: Sequence[ComplianceReport],
    scope: str = "the selected reports",
) -> str:
    """Per-question yes/no counts under the numerical summary header.

    Args:
        reports: Reports to tally.
        scope: Phrase naming what was summarised, used when no yes/no
            answers exist.
    """
    stats = build_question_stats(reports)
    if not stats:
        return (
            f"{NUMERIC_SUMMARY_HEADER}\n"
            f"No yes/no responses were captured for {scope} in the selected range."
        )
    return NUMERIC_SUMMARY_HEADER + "\n" + "\n".join(stat.summary_line() for stat in stats)


def _title_label(question_id: str) -> str:
    return (question_id or "question").replace("_", " ").title()


def _summarize_list(items: Sequence[str], limit: int = 4) -> str:
    if not items:
        return ""
    suffix = "..." if len(items) > limit else ""
    return ", ".join(items[:limit]) + suffix


def simulate_analysis(report_data: DailyReportData) -> SummaryOutput:
    """Build the detailed report and concise summary from raw reports alone.

    Returns:
        SummaryOutput with ``simulated=True``. ``summary`` always ends with
        the numerical question section.
    """
    reports = report_data.raw_reports
    numeric_section = numeric_summary_section(reports)
    if not reports:
        message = f"No compliance reports are available for {report_data.date}."
        return SummaryOutput(
            detailed=f"{message}\n\n{numeric_section}",
            summary=f"{message}\n\n{numeric_section}",
            simulated=True,
        )

    status_counts = Counter(report.status for report in reports)
    total = len(reports)
    approved = status_counts.get("approved", 0)
    pending = status_counts.get("pending", 0)
    requires_action = status_counts.get("requires_action", 0)
    rejected = status_counts.get("rejected", 0)
    completed = total - pending
    resolution_rate = round_half_up(approved / total * 100)

    unique_reporters = len({r.user_id or r.user_name or "unknown_reporter" for r in reports})
    unique_feeders = len({r.feeder_point_id or r.feeder_point_name or "unknown_feeder" for r in reports})

    feeder_lines = _feeder_lines(reports)
    details = _answer_details(reports)

    breakdown_lines: List[str] = []
    attention_lines: List[str] = []
    for question_id, by_answer in details.items():
        question_total = sum(d.count for d in by_answer.values())
        ranked = sorted(by_answer.items(), key=lambda item: item[1].count, reverse=True)
        parts = []
        for answer, detail in ranked:
            percentage = round_half_up(detail.count / question_total * 100) if question_total else 0
            parts.append(
                f'{detail.count} "{answer}" ({percentage}%) '
                f"[reports: {_summarize_list(detail.report_ids, 3)}]"
            )
        breakdown_lines.append(
            f"- {_title_label(question_id)} ({question_total} responses): {'; '.join(parts)}"
        )
        for answer, detail in by_answer.items():
            if any(marker in answer.lower() for marker in _NEGATIVE_ANSWER_MARKERS):
                attention_lines.append(
                    f'{detail.count} responses flagged for "{_title_label(question_id)}" ({answer}) '
                    f"[reports: {_summarize_list(detail.report_ids, 4)}]"
                )

    notes = _summarize_list(_field_notes(reports), 8)

    detailed = "\n".join(
        [
            f"Daily Compliance Analysis ({report_data.date})",
            "",
            "Operational Overview:",
            f"- {total} reports from {unique_reporters} inspectors across {unique_feeders} feeder points.",
            f"- Status mix: {approved} approved, {pending} pending, "
            f"{requires_action} requires action, {rejected} rejected.",
            f"- Resolution rate: {resolution_rate}% | Completed inspections: {completed}.",
            "",
            "Feeder Coverage:",
            "\n".join(feeder_lines) if feeder_lines else "No feeder-level breakdown available.",
            "",
            "Question & Answer Breakdown:",
            "\n".join(breakdown_lines) if breakdown_lines else "No answers were captured in the selected reports.",
            "",
            "Attention Items:",
            "\n".join(attention_lines) if attention_lines else "No negative responses flagged in this set of reports.",
            "",
            "Field Notes:",
            notes or "No notes were provided by inspectors.",
            "",
            numeric_section,
        ]
    )

    summary_lines = [
        f"Summary for {report_data.date}: {total} reports "
        f"({unique_feeders} feeder points, {unique_reporters} inspectors).",
        f"Statuses: {approved} approved | {pending} pending | {requires_action} requires action | "
        f"{rejected} rejected (resolution rate {resolution_rate}%).",
        f"Top question signals: {' | '.join(breakdown_lines[:2])}"
        if breakdown_lines
        else "No question-level responses recorded.",
        f"Attention: {' | '.join(attention_lines[:2])}"
        if attention_lines
        else "No attention items detected from responses.",
    ]
    if feeder_lines:
        summary_lines.append(f"Feeder coverage: {' | '.join(feeder_lines[:2])}")
    if notes:
        summary_lines.append(f"Noted comments: {notes}")

    return SummaryOutput(
        detailed=detailed,
        summary="\n".join(summary_lines) + "\n\n" + numeric_section,
        simulated=True,
    )


def _feeder_lines(reports: Sequence[ComplianceReport]) -> List[str]:
    grouped: Dict[str, List[ComplianceReport]] = {}
    for report in reports:
        name = report.feeder_point_name or report.feeder_point_id or "Unknown Feeder Point"
        grouped.setdefault(name, []).append(report)

    lines = []
    for name, group in grouped.items():
        counts = Counter(report.status for report in group)
        ordered = [s for s in _STATUS_ORDER if counts.get(s)] + sorted(
            s for s in counts if s not in _STATUS_ORDER
        )
        status_label = ", ".join(f"{counts[s]} {s.replace('_', ' ')}" for s in ordered)
        trips = sorted({r.trip_number for r in group if r.trip_number})
        trip_label = f" | trips {', '.join(trips)}" if trips else ""
        report_label = f" | reports: {_summarize_list([r.id for r in group], 5)}"
        lines.append(f"- {name}: {status_label or 'no status recorded'}{trip_label}{report_label}")
    return lines


def _answer_details(reports: Sequence[ComplianceReport]) -> Dict[str, Dict[str, _AnswerDetail]]:
    details: Dict[str, Dict[str, _AnswerDetail]] = {}
    for report in reports:
        for answer in report.answers:
            question_id = answer.question_id or "unspecified_question"
            by_answer = details.setdefault(question_id, {})
            detail = by_answer.setdefault(answer.answer.strip(), _AnswerDetail())
            detail.count += 1
            detail.report_ids.append(report.id)
    return details


def _field_notes(reports: Sequence[ComplianceReport]) -> List[str]:
    notes: List[str] = []
    for report in reports:
        feeder = report.feeder_point_name or _UNKNOWN_FEEDER
        for answer in report.answers:
            if answer.notes:
                notes.append(
                    f"Report {report.id} ({feeder} - {_title_label(answer.question_id)}): {answer.notes}"
                )
        if report.description:
            notes.append(f"Report {report.id} ({feeder}): {report.description}")
    return notes


def _format_timestamp(value: Optional[datetime]) -> str:
    if value is None:
        return "Not specified"
    return value.strftime("%d %b %Y, %H:%M")


def simulate_compliance_analysis(
    report: Optional[ComplianceReport],
    feeder_point_name: Optional[str] = None,
) -> str:
    """Templated single-report review used when the model is unavailable."""
    if report is None:
        return "No report data was provided for analysis. Please re-open the record and try again."

    location = feeder_point_name or report.feeder_point_name or "Feeder Point"
    priority = _title_label(report.priority) if report.priority else "Not specified"
    status = _title_label(report.status) if report.status else "Not specified"

    distance_line = None
    distance = report.extra.get("distanceFromFeederPoint")
    if isinstance(distance, (int, float)) and not isinstance(distance, bool):
        distance_line = f"Distance logged: {round_half_up(distance)} meters from the feeder point."

    attention: List[str] = []
    informational: List[str] = []
    for answer in report.answers:
        label = answer.description or _title_label(answer.question_id)
        note = f" (Notes: {answer.notes})" if answer.notes else ""
        entry = f"- {label}: {answer.answer}{note}"
        if answer.answer.lower() in _ATTENTION_ANSWERS:
            attention.append(entry)
        else:
            informational.append(entry)

    admin_notes = report.extra.get("adminNotes") or report.description

    sections = [
        f"Simulated review for {location}",
        f"Status: {status} | Priority: {priority}",
        f"Submitted by {report.user_name or 'Unknown inspector'} on {_format_timestamp(report.submitted_at)}",
        distance_line,
        "Items requiring attention:\n" + "\n".join(attention)
        if attention
        else "No critical issues were flagged in this submission.",
        "Additional observations:\n" + "\n".join(informational) if informational else None,
        f"Field/Reviewer notes: {admin_notes}" if admin_notes else None,
        "Recommended next steps:\n- Acknowledge the noted gaps with the field team.\n"
        "- Capture updated evidence once corrective actions are completed."
        if attention
        else "Recommended next steps:\n- Maintain current operating discipline and continue periodic monitoring.",
    ]
    return "\n\n".join(section for section in sections if section)
