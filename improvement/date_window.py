"""
improvement/date_window.py

Date-picker input validation and quick-range presets.
"""

from __future__ import annotations

import re
from datetime import date, datetime, time, timedelta, timezone, tzinfo
from typing import Final, Literal

from app.domain.feeder_insight import DateWindow

MISSING_DATES_ERROR: Final[str] = "Please select both start and end dates."
INVALID_DATES_ERROR: Final[str] = "Invalid date range selections."
REVERSED_DATES_ERROR: Final[str] = "Start date must be before the end date."

ALL_TIME_START: Final[str] = "2000-01-01"

QuickRange = Literal["7d", "30d", "90d", "all"]
_QUICK_RANGE_DAYS: Final[dict[str, int]] = {"7d": 7, "30d": 30, "90d": 90}
_INPUT_PATTERN: Final[re.Pattern[str]] = re.compile(r"\d{4}-\d{2}-\d{2}")


def _parse_input(value: str) -> date | None:
    text = value.strip()
    if not _INPUT_PATTERN.fullmatch(text):
        return None
    try:
        return datetime.strptime(text, "%Y-%m-%d").date()
    except ValueError:
        return None


def resolve_date_window(
    start_input: str | None,
    end_input: str | None,
    tz: tzinfo = timezone.utc,
) -> DateWindow:
    """
    Validate ``YYYY-MM-DD`` inputs into an inclusive window.

    The start is midnight and the end is the last instant of the end day,
    both in *tz*. Problems are reported through ``DateWindow.error``.
    """

    if not start_input or not end_input or not start_input.strip() or not end_input.strip():
        return DateWindow(start=None, end=None, error=MISSING_DATES_ERROR)

    start_day = _parse_input(start_input)
    end_day = _parse_input(end_input)
    if start_day is None or end_day is None:
        return DateWindow(start=None, end=None, error=INVALID_DATES_ERROR)

    start = datetime.combine(start_day, time.min, tzinfo=tz)
    end = datetime.combine(end_day, time.max, tzinfo=tz)
    if start > end:
        return DateWindow(start=None, end=None, error=REVERSED_DATES_ERROR)

    return DateWindow(start=start, end=end, error=None)


def quick_range(preset: QuickRange, today: date) -> tuple[str, str]:
    """
    Return ``(start_input, end_input)`` strings for a preset ending *today*.
    """

    end_input = today.isoformat()
    if preset == "all":
        return ALL_TIME_START, end_input
    try:
        days = _QUICK_RANGE_DAYS[preset]
    except KeyError as exc:
        raise ValueError(f"Unknown quick range: {preset!r}") from exc
    return (today - timedelta(days=days)).isoformat(), end_input


def in_window(moment: datetime | None, window: DateWindow) -> bool:
    """True when *moment* falls inside a valid window (inclusive)."""
    if moment is None or not window.is_valid:
        return False
    return window.start <= moment <= window.end
