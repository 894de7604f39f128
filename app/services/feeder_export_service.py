"""
app/services/feeder_export_service.py

Downloadable feeder point summaries.

Two encodings of the same content:

    txt: human-readable report: headline counts, optional AI summary,
         rationale, numerical question summary, status breakdown and
         trip distribution.
    csv: one row per value with columns ``section,name,yes,no,value``.

No HTTP concerns live here; the router only picks the media type.
"""

from __future__ import annotations

import csv
import io
import re
from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Final, Sequence

from app.domain.compliance_report import ComplianceReport
from app.domain.feeder_insight import FeederInsight
from improvement.performance import QuestionStat, build_question_stats, status_breakdown
from llm_synthesis.fallback import NUMERIC_SUMMARY_HEADER

ALL_TRIPS: Final[str] = "all"
UNSPECIFIED_TRIP: Final[str] = "unspecified"

_CSV_FIELDS: Final[list[str]] = ["section", "name", "yes", "no", "value"]
_WHITESPACE = re.compile(r"\s+")
_UNSAFE_FILENAME_CHARS = re.compile(r"[^\w-]")


# ---------------------------------------------------------------------------
# Export content container
# ---------------------------------------------------------------------------


@dataclass
class FeederExport:
    """
    Everything a feeder point download contains, before encoding.
    """

    feeder_name: str
    start_input: str
    end_input: str
    trip_filter: str
    reports: list[ComplianceReport]
    insight: FeederInsight | None = None
    ai_summary: str | None = None
    question_stats: list[QuestionStat] = field(default_factory=list)

    @property
    def trip_label(self) -> str:
        if self.trip_filter == ALL_TRIPS:
            return "All trips"
        if self.trip_filter == UNSPECIFIED_TRIP:
            return "Unspecified trip"
        return f"Trip {self.trip_filter}"


def filter_by_trip(reports: Sequence[ComplianceReport], trip_filter: str) -> list[ComplianceReport]:
    """``all`` keeps everything; ``unspecified`` keeps reports without a trip number."""
    if trip_filter == ALL_TRIPS:
        return list(reports)
    if trip_filter == UNSPECIFIED_TRIP:
        return [r for r in reports if not r.trip_number]
    return [r for r in reports if r.trip_number == trip_filter]


def export_filename(feeder_name: str | None, extension: str) -> str:
    """``Feeder_Summary_<name>.<ext>`` with whitespace as ``_`` and other symbols dropped."""
    base = _WHITESPACE.sub("_", feeder_name or "report")
    base = _UNSAFE_FILENAME_CHARS.sub("", base) or "report"
    return f"Feeder_Summary_{base}.{extension}"


def _plural(count: int) -> str:
    return f"{count} report{'' if count == 1 else 's'}"


def _status_rows(reports: Sequence[ComplianceReport]) -> list[tuple[str, int]]:
    breakdown = status_breakdown(reports)
    rows = [
        ("Approved", breakdown.approved),
        ("Pending", breakdown.pending - breakdown.requires_action),
        ("Rejected", breakdown.rejected),
        ("Requires Action", breakdown.requires_action),
    ]
    return [(name, count) for name, count in rows if count > 0]


def _trip_rows(reports: Sequence[ComplianceReport]) -> list[tuple[str, int]]:
    counts = Counter(f"Trip {r.trip_number}" if r.trip_number else "Unspecified trip" for r in reports)
    return sorted(counts.items())


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------


class FeederExportService:
    """
    Render a FeederExport as plain text or CSV.
    """

    def build(
        self,
        *,
        feeder_name: str,
        start_input: str,
        end_input: str,
        reports: Sequence[ComplianceReport],
        insight: FeederInsight | None = None,
        trip_filter: str = ALL_TRIPS,
        ai_summary: str | None = None,
    ) -> FeederExport:
        selected = filter_by_trip(reports, trip_filter)
        return FeederExport(
            feeder_name=feeder_name,
            start_input=start_input,
            end_input=end_input,
            trip_filter=trip_filter,
            reports=selected,
            insight=insight,
            ai_summary=ai_summary.strip() if ai_summary else None,
            question_stats=build_question_stats(selected),
        )

    def to_text(self, export: FeederExport) -> str:
        breakdown = status_breakdown(export.reports)
        employees = {r.user_id or r.user_name for r in export.reports} - {None}

        headline = "\n".join(
            [
                f"Feeder Point: {export.feeder_name or 'Unknown'}",
                f"Date Range: {export.start_input} to {export.end_input}",
                f"Trip Filter: {export.trip_label}",
                f"Total Reports: {breakdown.total_reports}",
                f"Approved: {breakdown.approved}",
                f"Rejected: {breakdown.rejected}",
                f"Pending: {breakdown.pending - breakdown.requires_action}",
                f"Requires Action: {breakdown.requires_action}",
                f"Unique Employees: {len(employees)}",
            ]
        )

        numeric_section = ""
        if export.question_stats:
            numeric_section = NUMERIC_SUMMARY_HEADER + "\n" + "\n".join(
                stat.summary_line() for stat in export.question_stats
            )
        if export.ai_summary and NUMERIC_SUMMARY_HEADER in export.ai_summary:
            numeric_section = ""

        rationale = ""
        if export.insight is not None:
            rationale = (
                f"Improvement: {export.insight.improvement_percent}% | "
                f"Transformation Score: {export.insight.transformation_score}\n"
                + "\n".join(f"- {line}" for line in export.insight.rationale)
            )

        status_lines = [f"- {name}: {_plural(count)}" for name, count in _status_rows(export.reports)]
        trip_lines = [f"- {name}: {_plural(count)}" for name, count in _trip_rows(export.reports)]

        segments = [
            headline,
            export.ai_summary or "",
            f"Rationale:\n{rationale}" if rationale else "",
            numeric_section,
            "Status Breakdown:\n" + "\n".join(status_lines) if status_lines else "",
            "Trip Distribution:\n" + "\n".join(trip_lines) if trip_lines else "",
        ]
        return "\n\n".join(segment for segment in segments if segment)

    def to_rows(self, export: FeederExport) -> list[dict[str, Any]]:
        breakdown = status_breakdown(export.reports)
        rows: list[dict[str, Any]] = [
            {"section": "feeder", "name": "Feeder Point", "value": export.feeder_name},
            {"section": "feeder", "name": "Date Range", "value": f"{export.start_input} to {export.end_input}"},
            {"section": "feeder", "name": "Trip Filter", "value": export.trip_label},
            {"section": "status", "name": "Total Reports", "value": breakdown.total_reports},
        ]
        rows.extend(
            {"section": "status", "name": name, "value": count} for name, count in _status_rows(export.reports)
        )
        if export.insight is not None:
            rows.append({"section": "score", "name": "Improvement Percent", "value": export.insight.improvement_percent})
            rows.append(
                {"section": "score", "name": "Transformation Score", "value": export.insight.transformation_score}
            )
            rows.extend(
                {"section": "rationale", "name": str(index), "value": line}
                for index, line in enumerate(export.insight.rationale, start=1)
            )
        rows.extend(
            {"section": "question", "name": stat.name, "yes": stat.yes, "no": stat.no}
            for stat in export.question_stats
        )
        rows.extend({"section": "trip", "name": name, "value": count} for name, count in _trip_rows(export.reports))
        if export.ai_summary:
            rows.append({"section": "summary", "name": "AI Summary", "value": export.ai_summary})
        return rows

    def to_csv(self, export: FeederExport) -> str:
        buf = io.StringIO()
        writer = csv.DictWriter(
            buf,
            fieldnames=_CSV_FIELDS,
            extrasaction="ignore",
            restval="",
            lineterminator="\r\n",
        )
        writer.writeheader()
        for row in self.to_rows(export):
            writer.writerow({k: ("" if v is None else v) for k, v in row.items()})
        return buf.getvalue()


# ---------------------------------------------------------------------------
# Singleton factory
# ---------------------------------------------------------------------------


_service: FeederExportService | None = None


def get_feeder_export_service() -> FeederExportService:
    global _service
    if _service is None:
        _service = FeederExportService()
    return _service
