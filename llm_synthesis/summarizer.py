"""AI summary generation with templated fallback.

One attempt per prompt, no retry. Any adapter failure, a missing API key
or blank model output returns the templated analysis instead, so callers
always receive text.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional, Sequence

from app.config import SummarySettings, get_summary_settings
from app.domain.compliance_report import STATUS_APPROVED, STATUS_PENDING, ComplianceReport
from improvement.normalizer import round_half_up
from improvement.performance import QuestionStat, build_question_stats
from llm_synthesis.adapter import (
    BaseLLMAdapter,
    ChatCompletionLLMAdapter,
    GeminiLLMAdapter,
    LLMConfigurationError,
    MockLLMAdapter,
)
from llm_synthesis.fallback import (
    NUMERIC_SUMMARY_HEADER,
    numeric_summary_section,
    simulate_analysis,
    simulate_compliance_analysis,
)
from llm_synthesis.prompt_builder import SummaryPromptBuilder
from llm_synthesis.schema import DailyMetrics, DailyPerformance, DailyReportData, SummaryOutput
from llm_synthesis.validator import validate_summary_text

_prompt_builder = SummaryPromptBuilder()
logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FeederSummary:
    """AI summary for one feeder point plus the tallies it was built from."""

    summary: str
    question_stats: list[QuestionStat] = field(default_factory=list)
    simulated: bool = False

    @property
    def has_numeric_section(self) -> bool:
        return NUMERIC_SUMMARY_HEADER in self.summary


@dataclass(frozen=True)
class ComplianceAnalysis:
    """Review text for a single report."""

    analysis: str
    simulated: bool = False


def build_adapter(settings: Optional[SummarySettings] = None) -> Optional[BaseLLMAdapter]:
    """Instantiate the adapter selected by SUMMARY_PROVIDER.

    SUMMARY_PROVIDER=mock       -> MockLLMAdapter (testing, no API key required)
    SUMMARY_PROVIDER=openai     -> ChatCompletionLLMAdapter (default)
    SUMMARY_PROVIDER=perplexity -> ChatCompletionLLMAdapter against Perplexity
    SUMMARY_PROVIDER=gemini     -> GeminiLLMAdapter

    Returns None when summaries are disabled or no API key is configured;
    callers then use the templated fallback.
    """
    settings = settings or get_summary_settings()
    if not settings.enabled:
        logger.info("AI summaries disabled; using templated analysis.")
        return None
    if settings.provider == "mock":
        return MockLLMAdapter()

    try:
        if settings.provider == "gemini":
            return GeminiLLMAdapter(
                model=settings.model,
                max_tokens=settings.max_tokens,
                api_key=settings.api_key,
            )
        return ChatCompletionLLMAdapter(
            model=settings.model,
            max_tokens=settings.max_tokens,
            api_key=settings.api_key,
            base_url=settings.base_url,
        )
    except LLMConfigurationError as exc:
        logger.warning("AI summary provider '%s' unavailable: %s", settings.provider, exc)
        return None


def generate_analysis(
    report_data: DailyReportData,
    adapter: Optional[BaseLLMAdapter],
) -> SummaryOutput:
    """Generate the detailed report and concise summary for *report_data*.

    Args:
        report_data: Metrics and raw reports to analyse.
        adapter: LLM adapter, or None when no provider is configured.

    Returns:
        Model output, or the templated analysis (``simulated=True``) on any
        failure.
    """
    if adapter is None:
        return simulate_analysis(report_data)

    try:
        detailed = validate_summary_text(
            adapter.generate(_prompt_builder.build_detailed_prompt(report_data)), "detailed"
        )
        summary = validate_summary_text(
            adapter.generate(_prompt_builder.build_concise_prompt(report_data)), "summary"
        )
    except Exception as exc:  # noqa: BLE001
        logger.error(
            "AI summary generation failed for %s via %s: %s",
            report_data.date,
            getattr(adapter, "name", type(adapter).__name__),
            exc,
        )
        return simulate_analysis(report_data)

    return SummaryOutput(detailed=detailed, summary=summary)


def feeder_report_data(reports: Sequence[ComplianceReport], date_label: str) -> DailyReportData:
    """Package one feeder point's reports into the summary request shape."""
    total = len(reports)
    approved = sum(1 for r in reports if r.status == STATUS_APPROVED)
    pending = sum(1 for r in reports if r.status == STATUS_PENDING)
    employees = {r.user_id or r.user_name for r in reports} - {None}

    return DailyReportData(
        date=date_label,
        metrics=DailyMetrics(
            total_users=len(employees),
            new_registrations=0,
            total_complaints=total,
            resolved_complaints=approved,
            active_feeder_points=1,
            completed_inspections=total,
        ),
        performance=DailyPerformance(
            complaint_resolution_rate=round_half_up(approved / total * 100) if total else 0,
            user_growth=0,
            operational_efficiency=round_half_up((approved + pending) / total * 100) if total else 0,
        ),
        raw_reports=list(reports),
    )


def generate_feeder_summary(
    reports: Sequence[ComplianceReport],
    date_label: str,
    adapter: Optional[BaseLLMAdapter],
) -> FeederSummary:
    """Concise AI summary for a single feeder point's filtered reports.

    The templated path always carries the per-question yes/no section;
    model output is returned as-is.
    """
    stats = build_question_stats(reports)
    if not reports:
        return FeederSummary(
            summary=(
                "No reports are available for this feeder point in the selected range.\n\n"
                + numeric_summary_section(reports, "this feeder point")
            ),
            question_stats=stats,
            simulated=True,
        )

    output = generate_analysis(feeder_report_data(reports, date_label), adapter)
    return FeederSummary(summary=output.summary, question_stats=stats, simulated=output.simulated)


def analyze_report_compliance(
    report: Optional[ComplianceReport],
    adapter: Optional[BaseLLMAdapter],
    feeder_point_name: Optional[str] = None,
) -> ComplianceAnalysis:
    """Single-report review text, model-generated when possible."""
    if report is None or adapter is None:
        return ComplianceAnalysis(simulate_compliance_analysis(report, feeder_point_name), simulated=True)
    try:
        raw = adapter.generate(_prompt_builder.build_compliance_prompt(report, feeder_point_name))
        return ComplianceAnalysis(validate_summary_text(raw, "analysis"))
    except Exception as exc:  # noqa: BLE001
        logger.error("Compliance analysis failed for report %s: %s", report.id, exc)
        return ComplianceAnalysis(simulate_compliance_analysis(report, feeder_point_name), simulated=True)
