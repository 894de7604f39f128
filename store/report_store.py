"""
store/report_store.py

Report store collaborators: the Firestore-backed implementation used in
production and an in-memory implementation for tests and local runs.

Reads degrade gracefully: a failed fetch is logged and yields an empty
list (or zero counts). Writes raise ReportStoreError subclasses so the
caller can surface the failure.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Iterable, Mapping
from dataclasses import asdict, dataclass
from datetime import datetime, timezone, tzinfo
from typing import Any, Final

from app.domain.compliance_report import REVIEW_STATUSES, ComplianceReport
from store.errors import ReportNotFoundError, ReportStoreError, ReportUpdateError

logger = logging.getLogger(__name__)

REPORTS_COLLECTION: Final[str] = "complianceReports"
FEEDER_POINTS_COLLECTION: Final[str] = "feederPoints"


@dataclass(frozen=True)
class DashboardStats:
    """
    Collection counts shown on the dashboard landing page.
    """

    total_users: int = 0
    active_users: int = 0
    pending_requests: int = 0
    total_complaints: int = 0
    total_inspections: int = 0
    total_feeder_points: int = 0
    total_teams: int = 0
    total_ip_records: int = 0

    def to_dict(self) -> dict[str, int]:
        return asdict(self)


def _check_review_status(report_id: str, status: str) -> None:
    if status not in REVIEW_STATUSES:
        raise ReportUpdateError(
            report_id,
            f"status must be one of {sorted(REVIEW_STATUSES)}, got {status!r}",
        )


class BaseReportStore(ABC):
    """
    Abstract report store.

    Implementations convert raw documents through
    ``ComplianceReport.from_document`` and nowhere else.
    """

    def __init__(self, tz: tzinfo = timezone.utc) -> None:
        self._tz = tz

    @abstractmethod
    def list_compliance_reports(self) -> list[ComplianceReport]:
        """Return every compliance report; an empty list on fetch failure."""

    @abstractmethod
    def update_report_status(self, report_id: str, status: str) -> None:
        """
        Persist an ``approved``/``rejected`` review decision.

        Raises:
            ReportNotFoundError: If *report_id* does not exist.
            ReportUpdateError: If the status is not a review status or the
                write fails.
        """

    @abstractmethod
    def delete_feeder_point_and_reports(
        self,
        feeder_point_id: str | None,
        feeder_point_name: str | None,
    ) -> int:
        """
        Permanently remove a feeder point and every report filed against it.

        Returns the number of reports deleted.
        """

    @abstractmethod
    def dashboard_stats(self) -> DashboardStats:
        """Collection counts; all zeros on fetch failure."""

    def close(self) -> None:
        """Release client resources. No-op by default."""


class FirestoreReportStore(BaseReportStore):
    """
    Report store backed by Cloud Firestore.
    """

    def __init__(self, client: Any = None, tz: tzinfo = timezone.utc) -> None:
        super().__init__(tz)
        self._client = client
        self._shared_client = client is None

    def _db(self) -> Any:
        if self._client is None:
            from store.client import get_firestore_client

            self._client = get_firestore_client()
        return self._client

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def list_compliance_reports(self) -> list[ComplianceReport]:
        try:
            snapshots = list(self._db().collection(REPORTS_COLLECTION).stream())
        except Exception as exc:  # noqa: BLE001
            logger.error("Failed to fetch compliance reports: %s", exc)
            return []

        reports: list[ComplianceReport] = []
        for snapshot in snapshots:
            data = snapshot.to_dict() or {}
            reports.append(ComplianceReport.from_document(snapshot.id, data, self._tz))
        logger.debug("Fetched %d compliance reports", len(reports))
        return reports

    def dashboard_stats(self) -> DashboardStats:
        try:
            from google.cloud.firestore_v1.base_query import FieldFilter

            db = self._db()
            return DashboardStats(
                total_users=self._count(db.collection("approvedUsers")),
                active_users=self._count(
                    db.collection("approvedUsers").where(filter=FieldFilter("isActive", "==", True))
                ),
                pending_requests=self._count(
                    db.collection("accessRequests").where(filter=FieldFilter("status", "==", "pending"))
                ),
                total_complaints=self._count(db.collection("complaints")),
                total_inspections=self._count(db.collection("inspections")),
                total_feeder_points=self._count(db.collection(FEEDER_POINTS_COLLECTION)),
                total_teams=self._count(db.collection("teams")),
                total_ip_records=self._count(db.collection("ipRecords")),
            )
        except Exception as exc:  # noqa: BLE001
            logger.error("Error fetching dashboard stats: %s", exc)
            return DashboardStats()

    @staticmethod
    def _count(query: Any) -> int:
        result = query.count(alias="total").get()
        return int(result[0][0].value)

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    def update_report_status(self, report_id: str, status: str) -> None:
        _check_review_status(report_id, status)
        try:
            from google.cloud import firestore

            doc_ref = self._db().collection(REPORTS_COLLECTION).document(report_id)
            snapshot = doc_ref.get()
            if not snapshot.exists:
                raise ReportNotFoundError(report_id)
            doc_ref.update(
                {
                    "status": status,
                    "reviewedAt": firestore.SERVER_TIMESTAMP,
                    "updatedAt": firestore.SERVER_TIMESTAMP,
                }
            )
        except ReportStoreError:
            raise
        except Exception as exc:  # noqa: BLE001
            logger.error("Failed to update report %s to %s: %s", report_id, status, exc)
            raise ReportUpdateError(report_id, str(exc)) from exc

        logger.info("Report %s marked %s", report_id, status)

    def delete_feeder_point_and_reports(
        self,
        feeder_point_id: str | None,
        feeder_point_name: str | None,
    ) -> int:
        if not feeder_point_id and not feeder_point_name:
            raise ReportStoreError("A feeder point id or name is required for deletion.")

        try:
            from google.cloud.firestore_v1.base_query import FieldFilter

            db = self._db()
            reports = db.collection(REPORTS_COLLECTION)
            refs: dict[str, Any] = {}
            if feeder_point_id:
                query = reports.where(filter=FieldFilter("feederPointId", "==", feeder_point_id))
                refs.update({snap.id: snap.reference for snap in query.stream()})
            if feeder_point_name:
                query = reports.where(filter=FieldFilter("feederPointName", "==", feeder_point_name))
                refs.update({snap.id: snap.reference for snap in query.stream()})

            batch = db.batch()
            for ref in refs.values():
                batch.delete(ref)
            if feeder_point_id:
                batch.delete(db.collection(FEEDER_POINTS_COLLECTION).document(feeder_point_id))
            batch.commit()
        except Exception as exc:  # noqa: BLE001
            logger.error(
                "Failed to delete feeder point %s (%s): %s",
                feeder_point_id,
                feeder_point_name,
                exc,
            )
            raise ReportStoreError(f"Could not delete feeder point: {exc}") from exc

        logger.info(
            "Deleted feeder point %s (%s) and %d report(s)",
            feeder_point_id,
            feeder_point_name,
            len(refs),
        )
        return len(refs)

    def close(self) -> None:
        if self._client is not None and self._shared_client:
            from store.client import close_firestore_client

            close_firestore_client()
        self._client = None


class InMemoryReportStore(BaseReportStore):
    """
    Report store holding raw documents in a dict. Used in tests and when
    ``REPORT_STORE=memory``.
    """

    def __init__(
        self,
        documents: Mapping[str, Mapping[str, Any]] | None = None,
        tz: tzinfo = timezone.utc,
        stats: DashboardStats | None = None,
    ) -> None:
        super().__init__(tz)
        self._documents: dict[str, dict[str, Any]] = {
            doc_id: dict(data) for doc_id, data in (documents or {}).items()
        }
        self._stats = stats or DashboardStats()

    def add_documents(self, documents: Iterable[tuple[str, Mapping[str, Any]]]) -> None:
        for doc_id, data in documents:
            self._documents[doc_id] = dict(data)

    def list_compliance_reports(self) -> list[ComplianceReport]:
        return [
            ComplianceReport.from_document(doc_id, data, self._tz)
            for doc_id, data in self._documents.items()
        ]

    def update_report_status(self, report_id: str, status: str) -> None:
        _check_review_status(report_id, status)
        document = self._documents.get(report_id)
        if document is None:
            raise ReportNotFoundError(report_id)
        now = datetime.now(timezone.utc)
        document.update({"status": status, "reviewedAt": now, "updatedAt": now})

    def delete_feeder_point_and_reports(
        self,
        feeder_point_id: str | None,
        feeder_point_name: str | None,
    ) -> int:
        if not feeder_point_id and not feeder_point_name:
            raise ReportStoreError("A feeder point id or name is required for deletion.")

        doomed = [
            doc_id
            for doc_id, data in self._documents.items()
            if (feeder_point_id and data.get("feederPointId") == feeder_point_id)
            or (feeder_point_name and data.get("feederPointName") == feeder_point_name)
        ]
        for doc_id in doomed:
            del self._documents[doc_id]
        return len(doomed)

    def dashboard_stats(self) -> DashboardStats:
        if self._stats.total_feeder_points:
            return self._stats
        feeder_keys = {
            data.get("feederPointId") or data.get("feederPointName")
            for data in self._documents.values()
        }
        feeder_keys.discard(None)
        return DashboardStats(
            total_users=self._stats.total_users,
            active_users=self._stats.active_users,
            pending_requests=self._stats.pending_requests,
            total_complaints=self._stats.total_complaints,
            total_inspections=self._stats.total_inspections,
            total_feeder_points=len(feeder_keys),
            total_teams=self._stats.total_teams,
            total_ip_records=self._stats.total_ip_records,
        )
