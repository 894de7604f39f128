"""
app/domain package marker.
"""

from app.domain.compliance_report import (
    REPORT_STATUSES,
    REVIEW_STATUSES,
    ComplianceReport,
    ReportAnswer,
    ReportAttachment,
)
from app.domain.feeder_insight import AggregateSummary, DateWindow, FeederInsight
from app.domain.timestamps import ReportTimestamp, resolve_timezone, to_datetime

__all__ = [
    "AggregateSummary",
    "ComplianceReport",
    "DateWindow",
    "FeederInsight",
    "REPORT_STATUSES",
    "REVIEW_STATUSES",
    "ReportAnswer",
    "ReportAttachment",
    "ReportTimestamp",
    "resolve_timezone",
    "to_datetime",
]
