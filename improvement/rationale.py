"""
improvement/rationale.py

Human-readable explanations for feeder point scores.

The rationale is the only explanation shown next to a score, so sentence
inclusion is strictly conditional on the counts that drove it.
"""

from __future__ import annotations

from improvement.base import BucketCounts, ImprovementScore
from improvement.normalizer import round_half_up


def _plural(count: int, singular: str, plural: str | None = None) -> str:
    if count == 1:
        return singular
    return plural or f"{singular}s"


def build_rationale(
    counts: BucketCounts,
    score: ImprovementScore,
    ai_validated_approved: int,
) -> list[str]:
    """
    Assemble the ordered, variable-length rationale sentence list.

    1. Approval rate, always.
    2. Photo evidence, when any photos were counted.
    3. Answer sentiment, when any yes/no answers were counted.
    4. Rejections if any, otherwise pending submissions if any.
    5. AI confirmations, when non-zero.
    6. AI flags, when non-zero.
    """

    parts: list[str] = [
        f"{counts.total_reports} reports with {round_half_up(score.approval_score * 100)}% approvals."
    ]
    if counts.photos > 0:
        parts.append(f"{counts.photos} {_plural(counts.photos, 'photo')} reviewed as evidence.")
    if counts.yes_answers + counts.no_answers > 0:
        parts.append(f"Answers: {counts.yes_answers} positive vs {counts.no_answers} negative.")
    if counts.rejected > 0:
        parts.append(f"Open issues: {counts.rejected} {_plural(counts.rejected, 'rejection')}.")
    elif counts.pending > 0:
        parts.append(f"{counts.pending} {_plural(counts.pending, 'submission')} awaiting review.")
    if ai_validated_approved > 0:
        parts.append(
            f"AI confirmed {ai_validated_approved} {_plural(ai_validated_approved, 'submission')}."
        )
    if counts.ai_flagged > 0:
        parts.append(f"AI flagged {counts.ai_flagged} for manual inspection.")
    return parts


def build_improvement_notes(counts: BucketCounts, score: ImprovementScore) -> list[str]:
    """
    Plain-language notes for the improvement detail view.
    """

    approval_pct = round_half_up(score.approval_score * 100)
    sentiment_pct = round_half_up(score.sentiment_score * 100)
    notes = [
        f"Approvals are strong: {approval_pct}% of reports got approved.",
        f'People mostly said "yes": {counts.yes_answers} yes answers and '
        f"{counts.no_answers} no answers (about {sentiment_pct}% positive).",
    ]
    if counts.photos > 0:
        notes.append(
            f"{counts.photos} {_plural(counts.photos, 'photo')} "
            f"{'shows' if counts.photos == 1 else 'show'} the place, helping the score."
        )
    else:
        notes.append("No photos were shared, so the score relies on answers only.")
    if counts.ai_flagged > 0:
        notes.append(
            f"{counts.ai_flagged} {_plural(counts.ai_flagged, 'report')} need human recheck."
        )
    else:
        notes.append("Nothing is waiting for a human recheck.")
    return notes
