"""
store/errors.py

Exceptions raised by report store implementations.
"""

from __future__ import annotations


class ReportStoreError(Exception):
    """Base class for report store failures."""


class ReportNotFoundError(ReportStoreError):
    """Raised when a report id does not exist in the store."""

    def __init__(self, report_id: str) -> None:
        self.report_id = report_id
        super().__init__(f"Compliance report '{report_id}' not found.")


class ReportUpdateError(ReportStoreError):
    """Raised when the store rejects or fails a write."""

    def __init__(self, report_id: str, reason: str) -> None:
        self.report_id = report_id
        self.reason = reason
        super().__init__(f"Could not update compliance report '{report_id}': {reason}")
