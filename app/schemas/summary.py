"""
app/schemas/summary.py

Request/response schemas for AI summaries.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from improvement.performance import QuestionStat


class QuestionStatResponse(BaseModel):
    name: str
    yes: int = Field(..., ge=0)
    no: int = Field(..., ge=0)

    @classmethod
    def from_stat(cls, stat: QuestionStat) -> "QuestionStatResponse":
        return cls(name=stat.name, yes=stat.yes, no=stat.no)


class FeederSummaryRequest(BaseModel):
    key: str = Field(..., min_length=1)
    start_date: str
    end_date: str


class FeederSummaryResponse(BaseModel):
    """
    ``simulated`` is true when the templated fallback produced the text.
    """

    key: str
    summary: str
    simulated: bool
    question_stats: list[QuestionStatResponse]


class DailySummaryRequest(BaseModel):
    """
    One day, or an inclusive range when ``end_date`` is given.
    """

    date: str = Field(..., min_length=1)
    end_date: str | None = None
    include_ministry_report: bool = False


class DailySummaryResponse(BaseModel):
    date: str
    detailed: str
    summary: str
    simulated: bool
    ministry_report: str | None = None
