"""
improvement/aggregator.py

Buckets compliance reports by feeder point and derives one FeederInsight
per bucket. Contains no scoring math of its own; that lives in
ImprovementScoringModel.

Every call recomputes from the full report list. There is no cache and no
incremental path: the output is a pure function of the inputs.
"""

from __future__ import annotations

import logging
from collections.abc import Collection, Iterable, Sequence
from dataclasses import dataclass, field
from datetime import datetime, timezone, tzinfo
from typing import Final, Literal

from app.domain.compliance_report import STATUS_APPROVED, STATUS_REJECTED, ComplianceReport
from app.domain.feeder_insight import AggregateSummary, DateWindow, FeederInsight
from improvement.base import BaseImprovementModel, BucketCounts
from improvement.classifier import score_report
from improvement.date_window import in_window, resolve_date_window
from improvement.normalizer import round_half_up
from improvement.rationale import build_improvement_notes, build_rationale
from improvement.scoring import ImprovementScoringModel

logger = logging.getLogger(__name__)

FilterMode = Literal["all", "top", "needs_attention"]
FILTER_MODES: Final[frozenset[str]] = frozenset({"all", "top", "needs_attention"})

UNSPECIFIED_FEEDER_NAME: Final[str] = "Unspecified Feeder Point"
TOP_IMPROVEMENT_THRESHOLD: Final[int] = 70
MAX_EVIDENCE_IMAGES: Final[int] = 8


# ---------------------------------------------------------------------------
# Accumulation state (internal, one per bucket per pass)
# ---------------------------------------------------------------------------


@dataclass
class _Bucket:
    key: str
    name: str
    feeder_point_id: str | None
    total_reports: int = 0
    approved: int = 0
    rejected: int = 0
    pending: int = 0
    photos: int = 0
    yes_answers: int = 0
    no_answers: int = 0
    ai_validated_approved: int = 0
    ai_flagged: int = 0
    latest_date: datetime | None = None
    before_images: list[str] = field(default_factory=list)
    after_images: list[str] = field(default_factory=list)
    before_date: datetime | None = None
    after_date: datetime | None = None
    flagged: list[ComplianceReport] = field(default_factory=list)
    recheck: list[ComplianceReport] = field(default_factory=list)

    def counts(self) -> BucketCounts:
        return BucketCounts(
            total_reports=self.total_reports,
            approved=self.approved,
            rejected=self.rejected,
            pending=self.pending,
            photos=self.photos,
            yes_answers=self.yes_answers,
            no_answers=self.no_answers,
            ai_flagged=self.ai_flagged,
        )


# ---------------------------------------------------------------------------
# Result container
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class AggregationResult:
    """
    Output of one aggregation pass.

    ``insights`` is filtered and sorted for presentation; ``flagged`` and
    ``recheck`` are keyed by bucket key and cover every bucket, hidden or not.
    """

    window: DateWindow
    insights: list[FeederInsight] = field(default_factory=list)
    aggregate: AggregateSummary = field(default_factory=AggregateSummary)
    filtered_reports: list[ComplianceReport] = field(default_factory=list)
    flagged: dict[str, list[ComplianceReport]] = field(default_factory=dict)
    recheck: dict[str, list[ComplianceReport]] = field(default_factory=dict)

    @property
    def date_error(self) -> str | None:
        return self.window.error


# ---------------------------------------------------------------------------
# Aggregator
# ---------------------------------------------------------------------------


class FeederPointAggregator:
    """Builds ranked feeder point insights from a compliance report snapshot.

    Delegates scoring to a BaseImprovementModel so the formula can be unit
    tested independently of bucketing.
    """

    def __init__(
        self,
        model: BaseImprovementModel | None = None,
        tz: tzinfo = timezone.utc,
    ) -> None:
        """
        Args:
            model: Scoring model; defaults to ImprovementScoringModel.
            tz: Timezone in which date-picker days are interpreted.
        """
        self._model = model or ImprovementScoringModel()
        self._tz = tz

    def aggregate(
        self,
        reports: Sequence[ComplianceReport],
        start_input: str | None,
        end_input: str | None,
        mode: FilterMode = "all",
        hidden_keys: Collection[str] = (),
    ) -> AggregationResult:
        """Run one full pass: validate window, filter, bucket, score, rank.

        An invalid window short-circuits to an empty result carrying the
        error message; nothing is raised.

        Args:
            reports: Full report snapshot from the store.
            start_input: ``YYYY-MM-DD`` start day.
            end_input: ``YYYY-MM-DD`` end day, inclusive through end of day.
            mode: ``all``, ``top`` or ``needs_attention``.
            hidden_keys: Bucket keys soft-deleted by the caller.

        Returns:
            AggregationResult for presentation.
        """
        window = resolve_date_window(start_input, end_input, self._tz)
        if not window.is_valid:
            logger.debug("Aggregation skipped: %s", window.error)
            return AggregationResult(window=window)

        filtered = self.filter_reports(reports, window)
        insights, flagged, recheck = self.build_insights(filtered)
        return AggregationResult(
            window=window,
            insights=select_insights(insights, mode, hidden_keys),
            aggregate=summarize_reports(filtered),
            filtered_reports=filtered,
            flagged=flagged,
            recheck=recheck,
        )

    @staticmethod
    def filter_reports(
        reports: Iterable[ComplianceReport],
        window: DateWindow,
    ) -> list[ComplianceReport]:
        """Keep reports whose resolved date lies in the window; drop undated ones."""
        return [report for report in reports if in_window(report.resolved_date, window)]

    def build_insights(
        self,
        reports: Sequence[ComplianceReport],
    ) -> tuple[list[FeederInsight], dict[str, list[ComplianceReport]], dict[str, list[ComplianceReport]]]:
        """Bucket already-filtered reports and score each bucket.

        Returns:
            ``(insights, flagged_by_key, recheck_by_key)`` with insights in
            first-seen bucket order, unfiltered and unsorted.
        """
        buckets: dict[str, _Bucket] = {}

        for report in reports:
            key = report.bucket_key
            bucket = buckets.get(key)
            if bucket is None:
                bucket = _Bucket(
                    key=key,
                    name=report.feeder_point_name or UNSPECIFIED_FEEDER_NAME,
                    feeder_point_id=report.feeder_point_id,
                )
                buckets[key] = bucket
            self._accumulate(bucket, report)

        total_filtered = len(reports) or 1
        insights: list[FeederInsight] = []
        for bucket in buckets.values():
            counts = bucket.counts()
            score = self._model.compute(counts)
            insights.append(
                FeederInsight(
                    key=bucket.key,
                    name=bucket.name,
                    feeder_point_id=bucket.feeder_point_id,
                    total_reports=bucket.total_reports,
                    approved=bucket.approved,
                    rejected=bucket.rejected,
                    pending=bucket.pending,
                    photos=bucket.photos,
                    yes_answers=bucket.yes_answers,
                    no_answers=bucket.no_answers,
                    latest_date=bucket.latest_date,
                    improvement_percent=score.improvement_percent,
                    transformation_score=score.transformation_score,
                    rationale=build_rationale(counts, score, bucket.ai_validated_approved),
                    ai_validated_approved=bucket.ai_validated_approved,
                    ai_flagged=bucket.ai_flagged,
                    share_of_total=round_half_up(bucket.total_reports / total_filtered * 100),
                    before_images=list(bucket.before_images),
                    after_images=list(bucket.after_images),
                    before_date=bucket.before_date,
                    after_date=bucket.after_date,
                    improvement_notes=build_improvement_notes(counts, score),
                    flagged_report_ids=[r.id for r in bucket.flagged],
                )
            )

        flagged = {key: list(b.flagged) for key, b in buckets.items() if b.flagged}
        recheck = {key: list(b.recheck) for key, b in buckets.items() if b.recheck}
        return insights, flagged, recheck

    @staticmethod
    def _accumulate(bucket: _Bucket, report: ComplianceReport) -> None:
        bucket.total_reports += 1
        if report.status == STATUS_APPROVED:
            bucket.approved += 1
        elif report.status == STATUS_REJECTED:
            bucket.rejected += 1
        else:
            bucket.pending += 1

        signal = score_report(report)
        bucket.yes_answers += signal.yes_count
        bucket.no_answers += signal.no_count
        bucket.photos += signal.photo_count

        if signal.validated:
            bucket.ai_validated_approved += 1
        elif signal.flagged:
            bucket.ai_flagged += 1
            bucket.flagged.append(report)
        elif signal.recheck_suggested:
            bucket.recheck.append(report)

        report_date = report.resolved_date
        if report_date is None:
            return
        if bucket.latest_date is None or report_date > bucket.latest_date:
            bucket.latest_date = report_date

        photos = report.photo_urls()
        if not photos:
            return
        if bucket.before_date is None or report_date < bucket.before_date:
            bucket.before_date = report_date
            bucket.before_images = photos[:MAX_EVIDENCE_IMAGES]
        if bucket.after_date is None or report_date > bucket.after_date:
            bucket.after_date = report_date
            bucket.after_images = photos[:MAX_EVIDENCE_IMAGES]


# ---------------------------------------------------------------------------
# Presentation helpers
# ---------------------------------------------------------------------------


def select_insights(
    insights: Iterable[FeederInsight],
    mode: FilterMode = "all",
    hidden_keys: Collection[str] = (),
) -> list[FeederInsight]:
    """
    Apply the filter mode, drop hidden buckets and rank.

    Sorted by transformation score, then improvement percent, both descending.
    """

    if mode not in FILTER_MODES:
        raise ValueError(f"Unknown filter mode: {mode!r}")

    selected: list[FeederInsight] = []
    for insight in insights:
        if insight.key in hidden_keys:
            continue
        if mode == "top" and insight.improvement_percent < TOP_IMPROVEMENT_THRESHOLD:
            continue
        if mode == "needs_attention" and not insight.needs_attention:
            continue
        selected.append(insight)

    selected.sort(key=lambda i: (i.transformation_score, i.improvement_percent), reverse=True)
    return selected


def summarize_reports(reports: Iterable[ComplianceReport]) -> AggregateSummary:
    """Totals shown above the insight table."""
    photos = 0
    answered = 0
    total = 0
    earliest: datetime | None = None
    latest: datetime | None = None

    for report in reports:
        total += 1
        answered += len(report.answers)
        photos += report.photo_count()
        report_date = report.resolved_date
        if report_date is not None:
            if earliest is None or report_date < earliest:
                earliest = report_date
            if latest is None or report_date > latest:
                latest = report_date

    return AggregateSummary(
        photos=photos,
        answered_questions=answered,
        total_responses=total,
        earliest=earliest,
        latest=latest,
    )


def flagged_review_queue(result: AggregationResult, key: str) -> list[ComplianceReport]:
    """Flagged reports for one bucket, newest first."""
    return _newest_first(result.flagged.get(key, []))


def recheck_suggestions(result: AggregationResult, key: str) -> list[ComplianceReport]:
    """Already-approved reports with low AI confidence for one bucket, newest first."""
    return _newest_first(result.recheck.get(key, []))


def _newest_first(reports: Iterable[ComplianceReport]) -> list[ComplianceReport]:
    epoch = datetime.min.replace(tzinfo=timezone.utc)
    return sorted(reports, key=lambda r: r.resolved_date or epoch, reverse=True)
