"""
improvement/normalizer.py

Deterministic helpers shared by the improvement scoring model.
"""

import math


class ScoreNormalizer:
    """Provides stateless ratio and clamping helpers.

    All methods are deterministic and never raise on zero denominators;
    callers supply the value to use instead.
    """

    def ratio(self, numerator: float, denominator: float, default: float) -> float:
        """Return numerator / denominator, or *default* when denominator is zero.

        Args:
            numerator: The dividend.
            denominator: The divisor.
            default: Value returned when the divisor is zero.

        Returns:
            The ratio, or the default.
        """
        if not denominator:
            return default
        return numerator / denominator

    def clamp(self, value: float, min_value: float, max_value: float) -> float:
        """Clamp a value to the specified [min_value, max_value] range."""
        return max(min_value, min(value, max_value))

    def percent(self, fraction: float) -> int:
        """Round a [0, 1] fraction to an integer percentage, halves rounding up."""
        return round_half_up(fraction * 100.0)


def round_half_up(value: float) -> int:
    """Round to the nearest integer with .5 going up.

    Matches conventional rounding (54.5 becomes 55, -2.5 becomes -2)
    rather than the banker's rounding of the built-in ``round``.
    """
    return int(math.floor(value + 0.5))
