"""
improvement/base.py

Abstract base interface for feeder point scoring models.
All scoring model implementations must inherit from BaseImprovementModel.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class BucketCounts:
    """Final per-bucket counts a scoring model consumes."""

    total_reports: int = 0
    approved: int = 0
    rejected: int = 0
    pending: int = 0
    photos: int = 0
    yes_answers: int = 0
    no_answers: int = 0
    ai_flagged: int = 0


@dataclass(frozen=True)
class ImprovementScore:
    """Scores and intermediate ratios produced by a scoring model."""

    approval_score: float
    sentiment_score: float
    photo_weight: float
    blended: float
    improvement_percent: int
    photo_impact: float
    clean_sweep: bool
    transformation_score: int


class BaseImprovementModel(ABC):
    """Abstract base class for feeder point scoring models.

    Defines the interface that all scoring implementations must follow.
    Implementations must be pure: the same counts always yield the same score.
    """

    @abstractmethod
    def compute(self, counts: BucketCounts) -> ImprovementScore:
        """Compute improvement and transformation scores from bucket counts.

        Args:
            counts: Fully accumulated counts for one feeder point bucket.

        Returns:
            An ImprovementScore. Implementations must not raise for
            zero-valued counts.
        """
        raise NotImplementedError("Subclasses must implement compute()")
