"""
app/domain/compliance_report.py

Read-only compliance report records as consumed by the analytics layer.

Documents arrive from the report store with camelCase field names; this
module is the boundary where they become typed, immutable records.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone, tzinfo
from typing import Any, Final

from app.domain.timestamps import to_datetime

STATUS_PENDING: Final[str] = "pending"
STATUS_APPROVED: Final[str] = "approved"
STATUS_REJECTED: Final[str] = "rejected"
STATUS_REQUIRES_ACTION: Final[str] = "requires_action"

REPORT_STATUSES: Final[frozenset[str]] = frozenset(
    {STATUS_PENDING, STATUS_APPROVED, STATUS_REJECTED, STATUS_REQUIRES_ACTION}
)
REVIEW_STATUSES: Final[frozenset[str]] = frozenset({STATUS_APPROVED, STATUS_REJECTED})


@dataclass(frozen=True)
class ReportAnswer:
    """
    One answered checklist question.
    """

    question_id: str
    answer: str
    photos: tuple[str, ...] = ()
    notes: str | None = None
    description: str | None = None


@dataclass(frozen=True)
class ReportAttachment:
    """
    File attached to a report. Only ``type == "photo"`` counts as evidence.
    """

    type: str
    url: str
    filename: str = ""
    uploaded_date: datetime | None = None

    @property
    def is_photo(self) -> bool:
        return self.type == "photo"


@dataclass(frozen=True)
class ComplianceReport:
    """
    Immutable view of one ``complianceReports`` document.
    """

    id: str
    status: str = STATUS_PENDING
    feeder_point_id: str | None = None
    feeder_point_name: str | None = None
    answers: tuple[ReportAnswer, ...] = ()
    attachments: tuple[ReportAttachment, ...] = ()
    submitted_at: datetime | None = None
    updated_at: datetime | None = None
    created_at: datetime | None = None
    trip_date: datetime | None = None
    user_id: str | None = None
    user_name: str | None = None
    trip_number: str | None = None
    priority: str | None = None
    description: str | None = None
    extra: dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @property
    def resolved_date(self) -> datetime | None:
        """
        The report's effective date: submitted, updated, created, then trip date.
        """

        for candidate in (self.submitted_at, self.updated_at, self.created_at, self.trip_date):
            if candidate is not None:
                return candidate
        return None

    @property
    def bucket_key(self) -> str:
        return self.feeder_point_id or self.feeder_point_name or self.id

    def photo_urls(self) -> list[str]:
        """
        Inline answer photos followed by photo attachments, in document order.
        """

        urls: list[str] = []
        for answer in self.answers:
            urls.extend(answer.photos)
        urls.extend(att.url for att in self.attachments if att.is_photo)
        return urls

    def photo_count(self) -> int:
        return sum(len(a.photos) for a in self.answers) + sum(
            1 for att in self.attachments if att.is_photo
        )

    def with_status(self, status: str) -> "ComplianceReport":
        """
        Return a copy carrying *status*; used after a review update.
        """

        return replace(self, status=status)

    @classmethod
    def from_document(
        cls,
        doc_id: str,
        data: Mapping[str, Any],
        tz: tzinfo = timezone.utc,
    ) -> "ComplianceReport":
        """
        Build a report from a raw store document.

        Malformed nested entries are skipped rather than rejected.
        """

        known = {
            "status", "feederPointId", "feederPointName", "answers", "attachments",
            "submittedAt", "updatedAt", "createdAt", "tripDate", "userId", "userName",
            "tripNumber", "priority", "description",
        }
        return cls(
            id=str(doc_id),
            status=_clean_str(data.get("status")) or STATUS_PENDING,
            feeder_point_id=_clean_str(data.get("feederPointId")),
            feeder_point_name=_clean_str(data.get("feederPointName")),
            answers=tuple(_parse_answers(data.get("answers"))),
            attachments=tuple(_parse_attachments(data.get("attachments"), tz)),
            submitted_at=to_datetime(data.get("submittedAt"), tz),
            updated_at=to_datetime(data.get("updatedAt"), tz),
            created_at=to_datetime(data.get("createdAt"), tz),
            trip_date=to_datetime(data.get("tripDate"), tz),
            user_id=_clean_str(data.get("userId")),
            user_name=_clean_str(data.get("userName")),
            trip_number=_clean_str(data.get("tripNumber")),
            priority=_clean_str(data.get("priority")),
            description=_clean_str(data.get("description")),
            extra={k: v for k, v in data.items() if k not in known},
        )


def _clean_str(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _answer_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _parse_answers(raw: Any) -> list[ReportAnswer]:
    if not isinstance(raw, Sequence) or isinstance(raw, (str, bytes)):
        return []
    answers: list[ReportAnswer] = []
    for item in raw:
        if not isinstance(item, Mapping):
            continue
        photos = item.get("photos") or []
        if not isinstance(photos, Sequence) or isinstance(photos, str):
            photos = []
        answers.append(
            ReportAnswer(
                question_id=_clean_str(item.get("questionId")) or "",
                answer=_answer_text(item.get("answer")),
                photos=tuple(str(p) for p in photos if p),
                notes=_clean_str(item.get("notes")),
                description=_clean_str(item.get("description")),
            )
        )
    return answers


def _parse_attachments(raw: Any, tz: tzinfo) -> list[ReportAttachment]:
    if not isinstance(raw, Sequence) or isinstance(raw, (str, bytes)):
        return []
    attachments: list[ReportAttachment] = []
    for item in raw:
        if not isinstance(item, Mapping):
            continue
        url = _clean_str(item.get("url"))
        if not url:
            continue
        attachments.append(
            ReportAttachment(
                type=_clean_str(item.get("type")) or "",
                url=url,
                filename=_clean_str(item.get("filename")) or "",
                uploaded_date=to_datetime(item.get("uploadedDate"), tz),
            )
        )
    return attachments
