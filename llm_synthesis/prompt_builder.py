"""Prompt builder for daily and feeder point AI summaries."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional, Sequence

from app.domain.compliance_report import ComplianceReport
from improvement.normalizer import round_half_up
from llm_synthesis.schema import DailyReportData

_YES_NO_QUESTIONS = (
    "scp_area_clean",
    "waste_segregated",
    "staff_present",
    "workers_wearing_uniform",
    "collection_team_mixing_waste",
    "driver_helper_uniform",
    "vehicle_separate_compartments",
)

_METRICS_TEMPLATE = """\
Date: {date}

Key Metrics:
- Total Reports Submitted: {total}
- Pending Reports: {pending}
- Resolution Rate: {rate}%
"""

_DETAILED_TASK = """\
Provide a comprehensive analysis of the day's operations. **Ignore any word \
limits for this DETAILED REPORT.** Highlight key trends, successes, and areas \
of concern. Specifically, analyze the aggregated question-answer data, \
providing concrete examples from the "Occurrences in Report IDs" where \
applicable. For instance, if "vehicle_separate_compartments" was answered \
"no" in multiple reports, state "vehicle separate compartments were not \
present in reports: ID1, ID5, ID10". For each question, provide a summary of \
how many times each answer option was selected across all reports. For \
questions with 'yes/no' answers (e.g., {yes_no}), explicitly state the count \
of 'yes' and 'no' responses across all reports. Discuss the implications of \
these findings and suggest detailed operational improvements. When \
summarizing question answers, focus on the counts of selected options and \
avoid phrasing that suggests a lack of effort or negative performance (e.g., \
instead of "0% approved", state "X reports had 'Approved' status out of Y \
total"). Ensure the summary is objective and data-driven."""

_CONCISE_TASK = """\
Provide a summary of the day's operations, approximately 300 words. This \
summary should capture the most important aspects of the detailed report, \
including overall performance, key challenges (like waste segregation issues \
or lack of vehicle separate compartments), and high-level recommendations. It \
should be suitable for a high-level overview for a minister. Ensure the \
summary incorporates the aggregated question-answer analysis and adheres to \
the phrasing guidelines for sensitive metrics, focusing on factual counts and \
specific examples from the reports rather than evaluative percentages that \
might be misinterpreted."""

_COMPLIANCE_TASK = """\
Review the single field inspection report below for a government taskforce \
system. List the checklist items that need attention, note any reviewer or \
field comments, and recommend next steps in two or three short bullet points. \
Use only the data provided."""


@dataclass
class _AnswerDetail:
    count: int = 0
    report_ids: List[str] = field(default_factory=list)
    notes: List[str] = field(default_factory=list)


def _format_moment(value: Optional[datetime]) -> str:
    return value.isoformat() if value is not None else "n/a"


class SummaryPromptBuilder:
    """Builds deterministic prompts for summary generation.

    Two prompts are produced per request: a detailed report and a
    concise minister-facing summary. Both embed the aggregated
    question/answer section so the model works from counted data.
    """

    def aggregate_question_answers(self, reports: Sequence[ComplianceReport]) -> str:
        """Count each distinct answer per question across reports.

        Args:
            reports: Reports to aggregate.

        Returns:
            A text section listing answer counts, percentages, notes and
            the report ids each answer occurred in.
        """
        details: Dict[str, Dict[str, _AnswerDetail]] = {}
        for report in reports:
            for answer in report.answers:
                by_answer = details.setdefault(answer.question_id, {})
                detail = by_answer.setdefault(answer.answer, _AnswerDetail())
                detail.count += 1
                detail.report_ids.append(report.id)
                if answer.notes:
                    detail.notes.append(f"Report {report.id}: {answer.notes}")

        content = "\n\nAggregated Question-Answer Analysis:\n"
        if not details:
            return content + "No specific question-answer data available for aggregation.\n"

        for question_id, by_answer in details.items():
            content += f'\nQuestion: "{question_id}"\n'
            total = sum(d.count for d in by_answer.values())
            for answer, detail in by_answer.items():
                percentage = round_half_up(detail.count / total * 100) if total else 0
                content += f'- "{answer}": {detail.count} times ({percentage}%)\n'
                if detail.notes:
                    content += f"  Notes: {'; '.join(detail.notes)}\n"
                if detail.report_ids:
                    content += f"  Occurrences in Report IDs: {', '.join(detail.report_ids)}\n"
        return content

    def build_detailed_prompt(self, report_data: DailyReportData) -> str:
        """Prompt for the long-form detailed report.

        Includes every raw report so the model can cite examples.
        """
        return (
            "Analyze the following daily operational data for a government "
            "taskforce system and provide a DETAILED REPORT.\n\n"
            f"{self._format_metrics(report_data)}"
            f"{self.aggregate_question_answers(report_data.raw_reports)}"
            f"{self._format_raw_reports(report_data.raw_reports)}\n\n"
            f"{_DETAILED_TASK.format(yes_no=', '.join(repr(q) for q in _YES_NO_QUESTIONS))}\n"
        )

    def build_concise_prompt(self, report_data: DailyReportData) -> str:
        """Prompt for the ~300 word summary."""
        return (
            "Analyze the following daily operational data for a government "
            "taskforce system and provide a CONCISE SUMMARY.\n\n"
            f"{self._format_metrics(report_data)}"
            f"{self.aggregate_question_answers(report_data.raw_reports)}\n"
            f"{_CONCISE_TASK}\n"
        )

    def build_compliance_prompt(
        self,
        report: ComplianceReport,
        feeder_point_name: Optional[str] = None,
    ) -> str:
        """Prompt for reviewing a single report."""
        location = feeder_point_name or report.feeder_point_name or "Feeder Point"
        lines = [
            _COMPLIANCE_TASK,
            "",
            f"Feeder Point: {location}",
            f"Status: {report.status} | Priority: {report.priority or 'n/a'}",
            f"Submitted by {report.user_name or 'Unknown inspector'} on {_format_moment(report.submitted_at)}",
        ]
        for answer in report.answers:
            label = answer.description or answer.question_id
            note = f" (Notes: {answer.notes})" if answer.notes else ""
            lines.append(f"- {label}: {answer.answer}{note}")
        admin_notes = report.extra.get("adminNotes") or report.description
        if admin_notes:
            lines.append(f"Field/Reviewer notes: {admin_notes}")
        return "\n".join(lines) + "\n"

    @staticmethod
    def _format_metrics(report_data: DailyReportData) -> str:
        metrics = report_data.metrics
        return _METRICS_TEMPLATE.format(
            date=report_data.date,
            total=metrics.total_complaints,
            pending=metrics.total_complaints - metrics.resolved_complaints,
            rate=report_data.performance.complaint_resolution_rate,
        )

    @staticmethod
    def _format_raw_reports(reports: Sequence[ComplianceReport]) -> str:
        if not reports:
            return ""
        content = (
            "\n\nRaw Reports Data (for detailed analysis): For specific examples "
            "and context, refer to these individual reports:\n"
        )
        for report in reports:
            content += (
                f"\n--- Report {report.id} (Feeder Point: {report.feeder_point_name}, "
                f"Submitted By: {report.user_name}) ---\n"
                f"Status: {report.status}, Priority: {report.priority}, "
                f"Trip: {report.trip_number} on {_format_moment(report.trip_date)}\n"
            )
            for answer in report.answers:
                content += f"  Q: {answer.question_id}\n  A: {answer.answer}\n"
                if answer.notes:
                    content += f"  Notes: {answer.notes}\n"
            content += f"Description: {report.description}\n"
        return content
