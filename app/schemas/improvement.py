"""
app/schemas/improvement.py

Response schemas for improvement insights and the review workflow.
"""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

from app.domain.compliance_report import ComplianceReport, ReportAnswer
from app.domain.feeder_insight import AggregateSummary, FeederInsight


class FeederInsightResponse(BaseModel):
    """
    API response model for one feeder point insight.
    """

    key: str
    name: str
    feeder_point_id: str | None = None
    total_reports: int = Field(..., ge=0)
    approved: int = Field(..., ge=0)
    rejected: int = Field(..., ge=0)
    pending: int = Field(..., ge=0)
    photos: int = Field(..., ge=0)
    yes_answers: int = Field(..., ge=0)
    no_answers: int = Field(..., ge=0)
    latest_date: datetime | None = None
    improvement_percent: int = Field(..., ge=0, le=100)
    transformation_score: int = Field(..., ge=0, le=100)
    rationale: list[str]
    ai_validated_approved: int = Field(..., ge=0)
    ai_flagged: int = Field(..., ge=0)
    share_of_total: int = Field(..., ge=0, le=100)
    before_images: list[str]
    after_images: list[str]
    before_date: datetime | None = None
    after_date: datetime | None = None
    improvement_notes: list[str]
    flagged_report_ids: list[str]

    @classmethod
    def from_insight(cls, insight: FeederInsight) -> "FeederInsightResponse":
        return cls(
            key=insight.key,
            name=insight.name,
            feeder_point_id=insight.feeder_point_id,
            total_reports=insight.total_reports,
            approved=insight.approved,
            rejected=insight.rejected,
            pending=insight.pending,
            photos=insight.photos,
            yes_answers=insight.yes_answers,
            no_answers=insight.no_answers,
            latest_date=insight.latest_date,
            improvement_percent=insight.improvement_percent,
            transformation_score=insight.transformation_score,
            rationale=list(insight.rationale),
            ai_validated_approved=insight.ai_validated_approved,
            ai_flagged=insight.ai_flagged,
            share_of_total=insight.share_of_total,
            before_images=list(insight.before_images),
            after_images=list(insight.after_images),
            before_date=insight.before_date,
            after_date=insight.after_date,
            improvement_notes=list(insight.improvement_notes),
            flagged_report_ids=list(insight.flagged_report_ids),
        )


class AggregateSummaryResponse(BaseModel):
    photos: int = Field(..., ge=0)
    answered_questions: int = Field(..., ge=0)
    total_responses: int = Field(..., ge=0)
    earliest: datetime | None = None
    latest: datetime | None = None

    @classmethod
    def from_summary(cls, summary: AggregateSummary) -> "AggregateSummaryResponse":
        return cls(
            photos=summary.photos,
            answered_questions=summary.answered_questions,
            total_responses=summary.total_responses,
            earliest=summary.earliest,
            latest=summary.latest,
        )


class ImprovementSummaryResponse(BaseModel):
    """
    Ranked insights for a date window. ``date_error`` is set, and the
    insight list empty, when the window is invalid.
    """

    start_date: str | None = None
    end_date: str | None = None
    mode: str
    date_error: str | None = None
    aggregate: AggregateSummaryResponse
    insights: list[FeederInsightResponse]


class ReportAnswerResponse(BaseModel):
    question_id: str
    answer: str
    notes: str | None = None

    @classmethod
    def from_answer(cls, answer: ReportAnswer) -> "ReportAnswerResponse":
        return cls(question_id=answer.question_id, answer=answer.answer, notes=answer.notes)


class ReportSummaryResponse(BaseModel):
    """
    Compact view of a report in the review queue.
    """

    id: str
    status: str
    feeder_point_id: str | None = None
    feeder_point_name: str | None = None
    user_name: str | None = None
    resolved_date: datetime | None = None
    photo_urls: list[str]
    answers: list[ReportAnswerResponse]

    @classmethod
    def from_report(cls, report: ComplianceReport) -> "ReportSummaryResponse":
        return cls(
            id=report.id,
            status=report.status,
            feeder_point_id=report.feeder_point_id,
            feeder_point_name=report.feeder_point_name,
            user_name=report.user_name,
            resolved_date=report.resolved_date,
            photo_urls=report.photo_urls(),
            answers=[ReportAnswerResponse.from_answer(a) for a in report.answers],
        )


class ReviewQueueResponse(BaseModel):
    key: str
    flagged: list[ReportSummaryResponse]
    recheck: list[ReportSummaryResponse]


class StatusUpdateRequest(BaseModel):
    status: Literal["approved", "rejected"]


class StatusUpdateResponse(BaseModel):
    report_id: str
    status: str


class ReportAnalysisRequest(BaseModel):
    feeder_point_name: str | None = None


class ReportAnalysisResponse(BaseModel):
    """
    Review text for one report; ``simulated`` when the templated review
    was used.
    """

    report_id: str
    analysis: str
    simulated: bool


class HideFeederRequest(BaseModel):
    """
    ``purge`` also deletes the feeder point and its reports from the store.
    """

    purge: bool = False
    feeder_point_id: str | None = None
    feeder_point_name: str | None = None


class HideFeederResponse(BaseModel):
    key: str
    hidden_keys: list[str]
    deleted_reports: int = Field(default=0, ge=0)
