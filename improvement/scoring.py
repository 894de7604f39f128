"""
improvement/scoring.py

Feeder point improvement model implementing BaseImprovementModel.
Blends approval rate, answer sentiment and photo evidence into an
improvement percentage, then derives the transformation score.
"""

import math

from improvement.base import BaseImprovementModel, BucketCounts, ImprovementScore
from improvement.normalizer import ScoreNormalizer, round_half_up


class ImprovementScoringModel(BaseImprovementModel):
    """Heuristic scoring model for feeder point improvement ranking.

    The weights are fixed illustrative constants, not fitted values.
    A transformation score of exactly 100 is reserved for clean sweeps:
    improvement of at least 90% with no flagged, rejected or pending reports.
    Every other bucket is capped at 95.
    """

    # Improvement blend weights
    APPROVAL_WEIGHT: float = 0.6
    SENTIMENT_WEIGHT: float = 0.3
    PHOTO_WEIGHT: float = 0.1
    NEUTRAL_SENTIMENT: float = 0.5

    # Transformation adjustments
    PHOTO_IMPACT_SCALE: float = 15.0
    PHOTO_IMPACT_CAP: float = 20.0
    FLAGGED_PENALTY: float = 5.0
    REJECTED_PENALTY: float = 2.0
    PENDING_PENALTY: float = 1.0
    TRANSFORMATION_CAP: int = 95
    CLEAN_SWEEP_SCORE: int = 100
    CLEAN_SWEEP_MIN_IMPROVEMENT: int = 90

    def __init__(self) -> None:
        """Initialize the model with a shared ScoreNormalizer instance."""
        self._normalizer = ScoreNormalizer()

    def compute(self, counts: BucketCounts) -> ImprovementScore:
        """Compute improvement percent and transformation score for one bucket.

        Formula::

            approval    = approved / total                 (0 when total == 0)
            sentiment   = yes / (yes + no)                 (0.5 when no yes/no answers)
            photo       = 0.1 if photos > 0 else 0
            improvement = clamp(round((0.6*approval + 0.3*sentiment + photo) * 100), 0, 100)

            impact      = min(20, log10(photos + 1) * 15)
            base        = improvement + impact - 5*flagged - 2*rejected - pending
            score       = 100 on clean sweep, else clamp(round(base), 0, 95)

        Args:
            counts: Final counts for the bucket.

        Returns:
            ImprovementScore with both scores and the intermediate ratios.
        """
        n = self._normalizer

        approval_score = n.ratio(counts.approved, counts.total_reports, 0.0)
        sentiment_score = n.ratio(
            counts.yes_answers,
            counts.yes_answers + counts.no_answers,
            self.NEUTRAL_SENTIMENT,
        )
        photo_weight = self.PHOTO_WEIGHT if counts.photos > 0 else 0.0

        blended = (
            approval_score * self.APPROVAL_WEIGHT
            + sentiment_score * self.SENTIMENT_WEIGHT
            + photo_weight
        )
        improvement_percent = int(n.clamp(n.percent(blended), 0, 100))

        photo_impact = min(
            self.PHOTO_IMPACT_CAP,
            math.log10(counts.photos + 1) * self.PHOTO_IMPACT_SCALE,
        )
        base_transformation = (
            improvement_percent
            + photo_impact
            - counts.ai_flagged * self.FLAGGED_PENALTY
            - counts.rejected * self.REJECTED_PENALTY
            - counts.pending * self.PENDING_PENALTY
        )

        clean_sweep = (
            improvement_percent >= self.CLEAN_SWEEP_MIN_IMPROVEMENT
            and counts.ai_flagged == 0
            and counts.rejected == 0
            and counts.pending == 0
        )
        if clean_sweep:
            transformation_score = self.CLEAN_SWEEP_SCORE
        else:
            transformation_score = int(
                n.clamp(round_half_up(base_transformation), 0, self.TRANSFORMATION_CAP)
            )

        return ImprovementScore(
            approval_score=approval_score,
            sentiment_score=sentiment_score,
            photo_weight=photo_weight,
            blended=blended,
            improvement_percent=improvement_percent,
            photo_impact=photo_impact,
            clean_sweep=clean_sweep,
            transformation_score=transformation_score,
        )
