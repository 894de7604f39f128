"""
tests/test_classifier.py

Answer classification and the per-report AI-confidence heuristic.
"""

from __future__ import annotations

import pytest

from improvement.classifier import classify_answer, score_report

from factories import make_report


class TestClassifyAnswer:
    @pytest.mark.parametrize("raw", ["yes", " YES ", "y", "True", "1"])
    def test_yes_tokens(self, raw) -> None:
        assert classify_answer(raw) == "yes"

    @pytest.mark.parametrize("raw", ["no", "N", "false", "0"])
    def test_no_tokens(self, raw) -> None:
        assert classify_answer(raw) == "no"

    @pytest.mark.parametrize("raw", ["maybe", "", None, "not available"])
    def test_other_answers_are_unclassified(self, raw) -> None:
        assert classify_answer(raw) is None


class TestScoreReport:
    def test_all_yes_with_photo_is_validated(self) -> None:
        signal = score_report(make_report(answers=[("a", "yes")], photos=1))
        assert signal.confidence == pytest.approx(0.8)
        assert signal.validated is True
        assert signal.flagged is False

    def test_split_answers_without_photo_is_flagged(self) -> None:
        signal = score_report(make_report(answers=[("a", "yes"), ("b", "no")]))
        assert signal.confidence == pytest.approx(0.35)
        assert signal.flagged is True

    def test_split_answers_with_photo_is_neither(self) -> None:
        signal = score_report(make_report(answers=[("a", "yes"), ("b", "no")], photos=1))
        assert signal.confidence == pytest.approx(0.45)
        assert signal.validated is False
        assert signal.flagged is False
        assert signal.recheck_suggested is False

    def test_no_answers_uses_neutral_sentiment(self) -> None:
        signal = score_report(make_report())
        assert signal.confidence == pytest.approx(0.35)
        assert signal.flagged is True

    def test_approved_low_confidence_is_recheck_not_flag(self) -> None:
        signal = score_report(make_report(status="approved", answers=[("a", "no")]))
        assert signal.flagged is False
        assert signal.recheck_suggested is True

    def test_unclassified_answers_are_ignored(self) -> None:
        signal = score_report(make_report(answers=[("a", "yes"), ("b", "partially")]))
        assert (signal.yes_count, signal.no_count) == (1, 0)

    def test_photo_count_includes_inline_and_attachments(self) -> None:
        report = make_report(
            photos=2,
            answers=[],
        )
        assert score_report(report).photo_count == 2
