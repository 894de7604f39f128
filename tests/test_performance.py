"""
tests/test_performance.py

Status breakdowns, feeder point ranking, employee leaderboards and
per-question tallies.
"""

from __future__ import annotations

from datetime import date

import pytest

from improvement.performance import (
    build_question_stats,
    employee_performance,
    format_question_label,
    lowest_performers,
    rank_feeder_points,
    status_breakdown,
    top_performers,
)

from factories import make_report


class TestStatusBreakdown:
    def test_requires_action_counts_as_pending(self) -> None:
        reports = [
            make_report("r1", "approved"),
            make_report("r2", "Requires_Action"),
            make_report("r3", "pending"),
            make_report("r4", "rejected"),
        ]
        breakdown = status_breakdown(reports)
        assert (breakdown.approved, breakdown.rejected, breakdown.pending) == (1, 1, 2)
        assert breakdown.requires_action == 1
        assert breakdown.approval_rate == pytest.approx(0.25)

    def test_empty(self) -> None:
        breakdown = status_breakdown([])
        assert breakdown.total_reports == 0
        assert breakdown.approval_rate == 0.0
        assert breakdown.last_report_at is None


class TestRankFeederPoints:
    def test_best_and_worst(self) -> None:
        reports = [
            make_report("a1", "approved"),
            make_report("a2", "approved"),
            make_report("b1", "rejected", feeder_id="FP-2", feeder_name="Lake View"),
            make_report("b2", "approved", feeder_id="FP-2", feeder_name="Lake View"),
        ]
        ranking = rank_feeder_points(reports)
        assert ranking.best.name == "Market Road"
        assert ranking.worst.name == "Lake View"
        assert ranking.only_one is False

    def test_ties_broken_by_volume(self) -> None:
        reports = [
            make_report("a1", "approved"),
            make_report("b1", "approved", feeder_id="FP-2", feeder_name="Lake View"),
            make_report("b2", "approved", feeder_id="FP-2", feeder_name="Lake View"),
        ]
        assert rank_feeder_points(reports).best.key == "FP-2"

    def test_single_day(self) -> None:
        reports = [
            make_report("a1", "approved", day="2025-01-10"),
            make_report("b1", "rejected", feeder_id="FP-2", day="2025-01-11"),
        ]
        ranking = rank_feeder_points(reports, single_day=date(2025, 1, 10))
        assert ranking.best.key == "FP-1"
        assert ranking.only_one is True

    def test_no_data(self) -> None:
        ranking = rank_feeder_points([])
        assert not ranking.has_data
        assert ranking.worst is None


class TestEmployeePerformance:
    @pytest.fixture()
    def people(self):
        reports = [
            make_report("1", "approved", user="ana"),
            make_report("2", "approved", user="ana"),
            make_report("3", "rejected", user="raj"),
            make_report("4", "approved", user="raj"),
            make_report("5", "rejected", user="li"),
            make_report("6", "approved", user=None),
        ]
        return employee_performance(reports)

    def test_grouping(self, people) -> None:
        by_key = {p.user_key: p for p in people}
        assert by_key["ana"].name == "ANA"
        assert by_key["unknown"].breakdown.total_reports == 1

    def test_top_performers(self, people) -> None:
        assert [p.user_key for p in top_performers(people, limit=2)] == ["ana", "unknown"]

    def test_lowest_performers(self, people) -> None:
        assert [p.user_key for p in lowest_performers(people, limit=2)] == ["li", "raj"]


class TestQuestionStats:
    def test_labels_are_normalised(self) -> None:
        assert format_question_label("waste_segregated") == "waste segregated"
        assert format_question_label("Driver-Helper  Uniform") == "driver helper uniform"
        assert format_question_label("__") == "question"

    def test_tallies_in_first_seen_order(self) -> None:
        reports = [
            make_report("1", answers=[("staff_present", "yes"), ("waste_segregated", "no")]),
            make_report("2", answers=[("waste_segregated", "y e s"), ("notes_field", "looks fine")]),
        ]
        stats = build_question_stats(reports)
        assert [(s.name, s.yes, s.no) for s in stats] == [
            ("staff present", 1, 0),
            ("waste segregated", 1, 1),
        ]

    def test_summary_line(self) -> None:
        [stat] = build_question_stats([make_report(answers=[("staff_present", "no")])])
        assert stat.summary_line() == (
            "For \"staff present\": 0 reports answered 'yes' and 1 reports answered 'no'."
        )
