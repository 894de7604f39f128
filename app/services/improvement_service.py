"""
app/services/improvement_service.py

Glue between the report store and the analytics core.

Every call fetches a fresh snapshot from the store and recomputes; no
aggregation result is cached between requests.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import tzinfo
from typing import Collection

from app.config import get_report_settings
from app.domain.compliance_report import STATUS_APPROVED, ComplianceReport
from app.domain.timestamps import resolve_timezone
from improvement.aggregator import (
    AggregationResult,
    FeederPointAggregator,
    FilterMode,
    flagged_review_queue,
    recheck_suggestions,
)
from improvement.date_window import resolve_date_window
from improvement.normalizer import round_half_up
from llm_synthesis.schema import DailyMetrics, DailyPerformance, DailyReportData
from store.report_store import BaseReportStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReviewQueue:
    key: str
    flagged: list[ComplianceReport]
    recheck: list[ComplianceReport]


class DateRangeError(ValueError):
    """Raised by operations that cannot proceed without a valid date window."""


class ImprovementService:
    """
    Runs aggregation passes over the store's current report snapshot.
    """

    def __init__(self, tz: tzinfo) -> None:
        self._tz = tz
        self._aggregator = FeederPointAggregator(tz=tz)

    @property
    def timezone(self) -> tzinfo:
        return self._tz

    def summarize(
        self,
        store: BaseReportStore,
        start_input: str | None,
        end_input: str | None,
        mode: FilterMode = "all",
        hidden_keys: Collection[str] = (),
    ) -> AggregationResult:
        reports = store.list_compliance_reports()
        result = self._aggregator.aggregate(reports, start_input, end_input, mode, hidden_keys)
        logger.debug(
            "Aggregated %d report(s) into %d insight(s) mode=%s",
            len(result.filtered_reports),
            len(result.insights),
            mode,
        )
        return result

    def review_queue(
        self,
        store: BaseReportStore,
        key: str,
        start_input: str | None,
        end_input: str | None,
    ) -> ReviewQueue:
        """
        Flagged reports and re-check suggestions for one bucket, newest first.

        Raises:
            DateRangeError: If the window is invalid.
        """

        result = self.summarize(store, start_input, end_input)
        if result.date_error:
            raise DateRangeError(result.date_error)
        return ReviewQueue(
            key=key,
            flagged=flagged_review_queue(result, key),
            recheck=recheck_suggestions(result, key),
        )

    def feeder_reports(
        self,
        store: BaseReportStore,
        key: str,
        start_input: str | None,
        end_input: str | None,
    ) -> list[ComplianceReport]:
        """
        Reports in the window that belong to bucket *key*.

        Raises:
            DateRangeError: If the window is invalid.
        """

        window = resolve_date_window(start_input, end_input, self._tz)
        if not window.is_valid:
            raise DateRangeError(window.error)
        reports = FeederPointAggregator.filter_reports(store.list_compliance_reports(), window)
        return [report for report in reports if report.bucket_key == key]

    def find_report(self, store: BaseReportStore, report_id: str) -> ComplianceReport | None:
        return next((r for r in store.list_compliance_reports() if r.id == report_id), None)

    def daily_report_data(
        self,
        store: BaseReportStore,
        start_input: str,
        end_input: str | None = None,
    ) -> DailyReportData:
        """
        Package one day (or an inclusive range) of reports for AI analysis.

        Raises:
            DateRangeError: If the window is invalid.
        """

        end_input = end_input or start_input
        window = resolve_date_window(start_input, end_input, self._tz)
        if not window.is_valid:
            raise DateRangeError(window.error)

        reports = FeederPointAggregator.filter_reports(store.list_compliance_reports(), window)
        total = len(reports)
        approved = sum(1 for r in reports if r.status == STATUS_APPROVED)
        label = start_input if start_input == end_input else f"{start_input} to {end_input}"

        return DailyReportData(
            date=label,
            metrics=DailyMetrics(
                total_users=len({r.user_id or r.user_name for r in reports} - {None}),
                new_registrations=0,
                total_complaints=total,
                resolved_complaints=approved,
                active_feeder_points=len({r.bucket_key for r in reports}),
                completed_inspections=approved,
            ),
            performance=DailyPerformance(
                complaint_resolution_rate=round_half_up(approved / total * 100) if total else 0,
                user_growth=0,
                operational_efficiency=0,
            ),
            raw_reports=reports,
        )


# ---------------------------------------------------------------------------
# Singleton factory
# ---------------------------------------------------------------------------


_service: ImprovementService | None = None


def get_improvement_service() -> ImprovementService:
    global _service
    if _service is None:
        _service = ImprovementService(tz=resolve_timezone(get_report_settings().timezone))
    return _service
