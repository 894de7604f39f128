"""
tests/test_rationale.py

Conditional rationale sentences and improvement notes.
"""

from __future__ import annotations

from improvement.base import BucketCounts
from improvement.rationale import build_improvement_notes, build_rationale
from improvement.scoring import ImprovementScoringModel

_model = ImprovementScoringModel()


def _rationale(counts: BucketCounts, validated: int = 0) -> list[str]:
    return build_rationale(counts, _model.compute(counts), validated)


class TestBuildRationale:
    def test_approval_sentence_only(self) -> None:
        assert _rationale(BucketCounts(total_reports=2, approved=2)) == ["2 reports with 100% approvals."]

    def test_singular_photo(self) -> None:
        parts = _rationale(BucketCounts(total_reports=1, approved=1, photos=1))
        assert "1 photo reviewed as evidence." in parts

    def test_plural_photos(self) -> None:
        parts = _rationale(BucketCounts(total_reports=1, approved=1, photos=3))
        assert "3 photos reviewed as evidence." in parts

    def test_pending_shown_only_without_rejections(self) -> None:
        parts = _rationale(BucketCounts(total_reports=3, approved=1, pending=2))
        assert parts[-1] == "2 submissions awaiting review."

        parts = _rationale(BucketCounts(total_reports=4, approved=1, rejected=2, pending=1))
        assert "Open issues: 2 rejections." in parts
        assert not any("awaiting review" in p for p in parts)

    def test_ai_sentences_order(self) -> None:
        parts = _rationale(BucketCounts(total_reports=3, approved=2, pending=1, ai_flagged=2), validated=3)
        assert parts[-2:] == ["AI confirmed 3 submissions.", "AI flagged 2 for manual inspection."]

    def test_no_sentiment_sentence_without_answers(self) -> None:
        parts = _rationale(BucketCounts(total_reports=1, pending=1))
        assert not any(p.startswith("Answers:") for p in parts)


class TestImprovementNotes:
    def test_without_photos_or_flags(self) -> None:
        counts = BucketCounts(total_reports=2, approved=1, pending=1, yes_answers=3, no_answers=1)
        notes = build_improvement_notes(counts, _model.compute(counts))
        assert notes[0] == "Approvals are strong: 50% of reports got approved."
        assert "about 75% positive" in notes[1]
        assert notes[2] == "No photos were shared, so the score relies on answers only."
        assert notes[3] == "Nothing is waiting for a human recheck."

    def test_with_photo_and_flag(self) -> None:
        counts = BucketCounts(total_reports=1, pending=1, photos=1, ai_flagged=1)
        notes = build_improvement_notes(counts, _model.compute(counts))
        assert notes[2] == "1 photo shows the place, helping the score."
        assert notes[3] == "1 report need human recheck."
