"""
app/domain/timestamps.py

Single conversion point for report timestamps.

Store documents carry timestamps in several shapes: native datetimes
(Firestore returns ``DatetimeWithNanoseconds``), plain dates, ISO strings,
epoch seconds, or serialised timestamp mappings such as
``{"seconds": 1735689600, "nanoseconds": 0}``. Everything downstream of the
store boundary works with timezone-aware ``datetime`` objects only.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from datetime import date, datetime, time, timezone, tzinfo
from typing import Union
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

logger = logging.getLogger(__name__)

EpochSeconds = Union[int, float]
ReportTimestamp = Union[datetime, date, str, EpochSeconds, Mapping]


def resolve_timezone(name: str | None) -> tzinfo:
    """
    Return a tzinfo for *name*, falling back to UTC for unknown names.
    """

    if not name:
        return timezone.utc
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning("Unknown report timezone %r; using UTC", name)
        return timezone.utc


def _localize(value: datetime, tz: tzinfo) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=tz)
    return value.astimezone(tz)


def _from_epoch(seconds: float, tz: tzinfo) -> datetime | None:
    try:
        return datetime.fromtimestamp(seconds, tz=timezone.utc).astimezone(tz)
    except (OverflowError, OSError, ValueError):
        return None


def _from_string(value: str, tz: tzinfo) -> datetime | None:
    text = value.strip()
    if not text:
        return None
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    return _localize(parsed, tz)


def to_datetime(value: ReportTimestamp | None, tz: tzinfo = timezone.utc) -> datetime | None:
    """
    Convert any supported timestamp shape into an aware datetime in *tz*.

    Returns ``None`` for missing or unparseable values; never raises.
    Naive values are interpreted as wall-clock time in *tz*.
    """

    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        return _localize(value, tz)
    if isinstance(value, date):
        return datetime.combine(value, time.min, tzinfo=tz)
    if isinstance(value, (int, float)):
        return _from_epoch(float(value), tz)
    if isinstance(value, str):
        return _from_string(value, tz)
    if isinstance(value, Mapping):
        seconds = value.get("seconds", value.get("_seconds"))
        if isinstance(seconds, (int, float)) and not isinstance(seconds, bool):
            nanos = value.get("nanoseconds", value.get("_nanoseconds")) or 0
            return _from_epoch(float(seconds) + float(nanos) / 1_000_000_000, tz)
    return None
