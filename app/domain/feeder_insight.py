"""
app/domain/feeder_insight.py

Derived per-feeder-point results. Recomputed from scratch on every
aggregation pass; nothing here is persisted.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class FeederInsight:
    """
    Summary statistics and heuristic scores for one feeder point bucket.

    ``approved + rejected + pending == total_reports`` always holds;
    ``requires_action`` and unknown statuses are counted as pending.
    """

    key: str
    name: str
    feeder_point_id: str | None
    total_reports: int
    approved: int
    rejected: int
    pending: int
    photos: int
    yes_answers: int
    no_answers: int
    latest_date: datetime | None
    improvement_percent: int
    transformation_score: int
    rationale: list[str]
    ai_validated_approved: int
    ai_flagged: int
    share_of_total: int = 0
    before_images: list[str] = field(default_factory=list)
    after_images: list[str] = field(default_factory=list)
    before_date: datetime | None = None
    after_date: datetime | None = None
    improvement_notes: list[str] = field(default_factory=list)
    flagged_report_ids: list[str] = field(default_factory=list)

    @property
    def rationale_text(self) -> str:
        return " ".join(self.rationale)

    @property
    def needs_attention(self) -> bool:
        return self.improvement_percent < 40 or self.ai_flagged > 0 or self.rejected > self.approved


@dataclass(frozen=True)
class AggregateSummary:
    """
    Totals over the date-filtered report set.
    """

    photos: int = 0
    answered_questions: int = 0
    total_responses: int = 0
    earliest: datetime | None = None
    latest: datetime | None = None


@dataclass(frozen=True)
class DateWindow:
    """
    Validated inclusive date window. ``error`` is set instead of raising.
    """

    start: datetime | None
    end: datetime | None
    error: str | None = None

    @property
    def is_valid(self) -> bool:
        return self.error is None and self.start is not None and self.end is not None
