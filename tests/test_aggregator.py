"""
tests/test_aggregator.py

Pytest unit tests for FeederPointAggregator.

Reports are built from raw documents; no store, no network.

Coverage
--------
- Bucketing by feeder point id, name, or report id
- Date filtering (inclusive end day, undated reports dropped)
- Status counts, AI validation and flagging per bucket
- Rationale content
- Filter modes, hidden keys and ranking order
- Before/after evidence images
- Review queue ordering
"""

from __future__ import annotations

import pytest

from app.domain.compliance_report import ComplianceReport
from improvement.aggregator import (
    MAX_EVIDENCE_IMAGES,
    UNSPECIFIED_FEEDER_NAME,
    FeederPointAggregator,
    flagged_review_queue,
    recheck_suggestions,
    select_insights,
    summarize_reports,
)
from improvement.date_window import MISSING_DATES_ERROR, REVERSED_DATES_ERROR

from factories import make_report

START = "2025-01-01"
END = "2025-01-31"


@pytest.fixture()
def aggregator() -> FeederPointAggregator:
    return FeederPointAggregator()


@pytest.fixture()
def scenario_reports() -> list[ComplianceReport]:
    """Two approved and one rejected report for FP-1, one yes and one no answer."""
    return [
        make_report("r1", "approved", answers=[("waste_segregated", "yes")], day="2025-01-05"),
        make_report("r2", "approved", day="2025-01-06"),
        make_report("r3", "rejected", answers=[("waste_segregated", "no")], day="2025-01-07"),
    ]


# ---------------------------------------------------------------------------
# Single bucket scoring
# ---------------------------------------------------------------------------


class TestSingleBucket:
    def test_counts_and_scores(self, aggregator, scenario_reports) -> None:
        result = aggregator.aggregate(scenario_reports, START, END)
        assert result.date_error is None
        [insight] = result.insights
        assert insight.key == "FP-1"
        assert insight.name == "Market Road"
        assert (insight.total_reports, insight.approved, insight.rejected, insight.pending) == (3, 2, 1, 0)
        assert (insight.yes_answers, insight.no_answers) == (1, 1)
        assert insight.improvement_percent == 55
        assert insight.share_of_total == 100

    def test_ai_validation_and_flags(self, aggregator, scenario_reports) -> None:
        [insight] = aggregator.aggregate(scenario_reports, START, END).insights
        assert insight.ai_validated_approved == 1
        assert insight.ai_flagged == 1
        assert insight.flagged_report_ids == ["r3"]
        # 55 - 5 flagged - 2 rejected
        assert insight.transformation_score == 48

    def test_rationale(self, aggregator, scenario_reports) -> None:
        [insight] = aggregator.aggregate(scenario_reports, START, END).insights
        assert insight.rationale == [
            "3 reports with 67% approvals.",
            "Answers: 1 positive vs 1 negative.",
            "Open issues: 1 rejection.",
            "AI confirmed 1 submission.",
            "AI flagged 1 for manual inspection.",
        ]
        assert insight.rationale_text.startswith("3 reports with 67% approvals. Answers:")

    def test_approved_low_confidence_is_not_flagged(self, aggregator) -> None:
        report = make_report("r1", "approved", answers=[("a", "no")])
        result = aggregator.aggregate([report], START, END)
        [insight] = result.insights
        assert insight.ai_flagged == 0
        assert recheck_suggestions(result, "FP-1") == [report]
        assert flagged_review_queue(result, "FP-1") == []

    def test_status_counts_always_sum_to_total(self, aggregator) -> None:
        reports = [
            make_report("r1", "approved"),
            make_report("r2", "requires_action"),
            make_report("r3", "something_else"),
            make_report("r4", "rejected"),
        ]
        [insight] = aggregator.aggregate(reports, START, END).insights
        assert insight.pending == 2
        assert insight.approved + insight.rejected + insight.pending == insight.total_reports

    def test_latest_date(self, aggregator, scenario_reports) -> None:
        [insight] = aggregator.aggregate(scenario_reports, START, END).insights
        assert insight.latest_date.isoformat().startswith("2025-01-07")


# ---------------------------------------------------------------------------
# Bucketing and filtering
# ---------------------------------------------------------------------------


class TestBucketing:
    def test_share_of_total(self, aggregator) -> None:
        reports = [make_report(f"a{i}") for i in range(3)] + [
            make_report("b1", feeder_id="FP-2", feeder_name="Lake View")
        ]
        shares = {i.key: i.share_of_total for i in aggregator.aggregate(reports, START, END).insights}
        assert shares == {"FP-1": 75, "FP-2": 25}

    def test_bucket_by_name_without_id(self, aggregator) -> None:
        reports = [
            make_report("r1", feeder_id=None, feeder_name="Lake View"),
            make_report("r2", feeder_id=None, feeder_name="Lake View"),
        ]
        [insight] = aggregator.aggregate(reports, START, END).insights
        assert insight.key == "Lake View"
        assert insight.feeder_point_id is None

    def test_unnamed_reports_get_own_bucket(self, aggregator) -> None:
        reports = [
            make_report("r1", feeder_id=None, feeder_name=None),
            make_report("r2", feeder_id=None, feeder_name=None),
        ]
        insights = aggregator.aggregate(reports, START, END).insights
        assert sorted(i.key for i in insights) == ["r1", "r2"]
        assert {i.name for i in insights} == {UNSPECIFIED_FEEDER_NAME}

    def test_out_of_window_and_undated_reports_dropped(self, aggregator) -> None:
        reports = [
            make_report("in", day="2025-01-15"),
            make_report("before", day="2024-12-31"),
            make_report("after", day="2025-02-01"),
            ComplianceReport(id="undated", feeder_point_id="FP-1"),
        ]
        result = aggregator.aggregate(reports, START, END)
        assert [r.id for r in result.filtered_reports] == ["in"]
        assert result.insights[0].total_reports == 1

    def test_end_day_is_inclusive(self, aggregator) -> None:
        report = make_report("late", submittedAt="2025-01-31T23:59:59Z")
        assert aggregator.aggregate([report], START, END).insights[0].total_reports == 1

    def test_invalid_window_returns_error_not_raise(self, aggregator, scenario_reports) -> None:
        result = aggregator.aggregate(scenario_reports, "", END)
        assert result.date_error == MISSING_DATES_ERROR
        assert result.insights == []
        assert result.aggregate.total_responses == 0

    def test_reversed_window(self, aggregator, scenario_reports) -> None:
        assert aggregator.aggregate(scenario_reports, END, START).date_error == REVERSED_DATES_ERROR

    def test_same_input_same_output(self, aggregator, scenario_reports) -> None:
        first = aggregator.aggregate(scenario_reports, START, END)
        second = aggregator.aggregate(scenario_reports, START, END)
        assert first.insights == second.insights


# ---------------------------------------------------------------------------
# Evidence images
# ---------------------------------------------------------------------------


class TestEvidenceImages:
    def test_before_and_after(self, aggregator) -> None:
        reports = [
            make_report("late", day="2025-01-20", photos=1),
            make_report("early", day="2025-01-02", photos=2),
            make_report("mid", day="2025-01-10"),
        ]
        [insight] = aggregator.aggregate(reports, START, END).insights
        assert insight.before_images == [
            "https://img.example/2025-01-02/0.jpg",
            "https://img.example/2025-01-02/1.jpg",
        ]
        assert insight.after_images == ["https://img.example/2025-01-20/0.jpg"]
        assert insight.before_date < insight.after_date

    def test_images_are_capped(self, aggregator) -> None:
        [insight] = aggregator.aggregate([make_report(photos=12)], START, END).insights
        assert len(insight.before_images) == MAX_EVIDENCE_IMAGES
        assert insight.photos == 12


# ---------------------------------------------------------------------------
# Selection and ranking
# ---------------------------------------------------------------------------


class TestSelection:
    @pytest.fixture()
    def mixed(self) -> list[ComplianceReport]:
        return [
            make_report("g1", "approved", answers=[("a", "yes")], photos=1),
            make_report("g2", "approved", answers=[("a", "yes")], photos=1),
            make_report("b1", "rejected", feeder_id="FP-2", feeder_name="Lake View", answers=[("a", "no")]),
        ]

    def test_sorted_by_transformation_score(self, aggregator, mixed) -> None:
        insights = aggregator.aggregate(mixed, START, END).insights
        assert [i.key for i in insights] == ["FP-1", "FP-2"]
        assert insights[0].transformation_score == 100

    def test_top_mode(self, aggregator, mixed) -> None:
        insights = aggregator.aggregate(mixed, START, END, mode="top").insights
        assert [i.key for i in insights] == ["FP-1"]

    def test_needs_attention_mode(self, aggregator, mixed) -> None:
        insights = aggregator.aggregate(mixed, START, END, mode="needs_attention").insights
        assert [i.key for i in insights] == ["FP-2"]

    def test_hidden_keys_are_dropped_but_flags_kept(self, aggregator, mixed) -> None:
        result = aggregator.aggregate(mixed, START, END, hidden_keys={"FP-2"})
        assert [i.key for i in result.insights] == ["FP-1"]
        assert [r.id for r in flagged_review_queue(result, "FP-2")] == ["b1"]

    def test_unknown_mode_raises(self) -> None:
        with pytest.raises(ValueError):
            select_insights([], mode="best")  # type: ignore[arg-type]


def test_flagged_queue_is_newest_first(aggregator) -> None:
    reports = [
        make_report("old", answers=[("a", "no")], day="2025-01-02"),
        make_report("new", answers=[("a", "no")], day="2025-01-20"),
        make_report("mid", answers=[("a", "no")], day="2025-01-10"),
    ]
    result = aggregator.aggregate(reports, START, END)
    assert [r.id for r in flagged_review_queue(result, "FP-1")] == ["new", "mid", "old"]
    assert flagged_review_queue(result, "missing") == []


def test_summarize_reports() -> None:
    reports = [
        make_report("r1", answers=[("a", "yes"), ("b", "no")], photos=2, day="2025-01-03"),
        make_report("r2", answers=[("a", "maybe")], day="2025-01-09"),
    ]
    summary = summarize_reports(reports)
    assert summary.total_responses == 2
    assert summary.answered_questions == 3
    assert summary.photos == 2
    assert summary.earliest < summary.latest
