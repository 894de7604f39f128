"""
tests/test_scoring.py

Pytest unit tests for ImprovementScoringModel.

Pure arithmetic over BucketCounts; no reports, no I/O.

Coverage
--------
- Approval/sentiment/photo blend and half-up rounding
- Neutral sentiment when no yes/no answers exist
- Photo impact logarithm and its cap
- Flagged/rejected/pending penalties
- Clean sweep score of 100 versus the 95 cap
- Clamping at zero
"""

from __future__ import annotations

import pytest

from improvement.base import BucketCounts
from improvement.normalizer import ScoreNormalizer, round_half_up
from improvement.scoring import ImprovementScoringModel


@pytest.fixture()
def model() -> ImprovementScoringModel:
    return ImprovementScoringModel()


# ---------------------------------------------------------------------------
# Improvement percent
# ---------------------------------------------------------------------------


class TestImprovementPercent:
    def test_two_approved_one_rejected_with_split_answers(self, model) -> None:
        counts = BucketCounts(total_reports=3, approved=2, rejected=1, yes_answers=1, no_answers=1)
        score = model.compute(counts)
        assert score.approval_score == pytest.approx(0.667, abs=1e-3)
        assert score.sentiment_score == pytest.approx(0.5)
        assert score.photo_weight == 0.0
        assert score.blended == pytest.approx(0.55)
        assert score.improvement_percent == 55

    def test_photo_adds_ten_points(self, model) -> None:
        counts = BucketCounts(total_reports=3, approved=2, rejected=1, yes_answers=1, no_answers=1, photos=2)
        assert model.compute(counts).improvement_percent == 65

    def test_neutral_sentiment_without_answers(self, model) -> None:
        score = model.compute(BucketCounts(total_reports=2, approved=2))
        assert score.sentiment_score == 0.5
        assert score.improvement_percent == 75

    def test_empty_bucket_does_not_raise(self, model) -> None:
        score = model.compute(BucketCounts())
        assert score.approval_score == 0.0
        assert score.improvement_percent == 15
        assert score.transformation_score == 15

    def test_maximum_is_one_hundred(self, model) -> None:
        counts = BucketCounts(total_reports=4, approved=4, yes_answers=8, photos=3)
        assert model.compute(counts).improvement_percent == 100


# ---------------------------------------------------------------------------
# Transformation score
# ---------------------------------------------------------------------------


class TestTransformationScore:
    def test_rejection_penalty(self, model) -> None:
        counts = BucketCounts(total_reports=3, approved=2, rejected=1, yes_answers=1, no_answers=1)
        assert model.compute(counts).transformation_score == 53

    def test_flagged_penalty_is_five_per_report(self, model) -> None:
        counts = BucketCounts(
            total_reports=3, approved=2, rejected=1, yes_answers=1, no_answers=1, ai_flagged=1
        )
        assert model.compute(counts).transformation_score == 48

    def test_pending_penalty_is_one_per_report(self, model) -> None:
        counts = BucketCounts(total_reports=4, approved=2, pending=2, yes_answers=2)
        # 0.3 + 0.3 = 60, minus 2 pending
        assert model.compute(counts).transformation_score == 58

    def test_photo_impact_uses_log10(self, model) -> None:
        score = model.compute(BucketCounts(total_reports=1, pending=1, photos=9))
        assert score.photo_impact == pytest.approx(15.0)

    def test_photo_impact_is_capped_at_twenty(self, model) -> None:
        score = model.compute(BucketCounts(total_reports=1, pending=1, photos=1000))
        assert score.photo_impact == 20.0

    def test_clean_sweep_scores_exactly_one_hundred(self, model) -> None:
        counts = BucketCounts(total_reports=2, approved=2, yes_answers=2, photos=1)
        score = model.compute(counts)
        assert score.clean_sweep is True
        assert score.transformation_score == 100

    def test_non_clean_sweep_is_capped_at_95(self, model) -> None:
        counts = BucketCounts(total_reports=10, approved=9, rejected=1, yes_answers=10, photos=10)
        score = model.compute(counts)
        assert score.improvement_percent == 94
        assert score.clean_sweep is False
        assert score.transformation_score == 95

    def test_high_improvement_with_pending_is_not_clean_sweep(self, model) -> None:
        counts = BucketCounts(total_reports=11, approved=10, pending=1, yes_answers=5, photos=1)
        score = model.compute(counts)
        assert score.improvement_percent >= 90
        assert score.clean_sweep is False
        assert score.transformation_score <= 95

    def test_clamped_at_zero(self, model) -> None:
        counts = BucketCounts(total_reports=5, pending=5, ai_flagged=5)
        assert model.compute(counts).transformation_score == 0

    def test_same_counts_same_score(self, model) -> None:
        counts = BucketCounts(total_reports=7, approved=3, rejected=2, pending=2, yes_answers=4, no_answers=3, photos=5)
        assert model.compute(counts) == model.compute(counts)


# ---------------------------------------------------------------------------
# Normalizer helpers
# ---------------------------------------------------------------------------


class TestNormalizer:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [(54.5, 55), (54.49, 54), (0.5, 1), (2.5, 3), (-2.5, -2), (99.999, 100)],
    )
    def test_round_half_up(self, value, expected) -> None:
        assert round_half_up(value) == expected

    def test_ratio_default_on_zero_denominator(self) -> None:
        assert ScoreNormalizer().ratio(3, 0, 0.5) == 0.5

    def test_clamp(self) -> None:
        n = ScoreNormalizer()
        assert n.clamp(120, 0, 95) == 95
        assert n.clamp(-3, 0, 95) == 0
