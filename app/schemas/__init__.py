"""
app/schemas package marker.
"""

from app.schemas.auth import LoginRequest, LoginResponse, LogoutResponse
from app.schemas.dashboard import (
    DashboardStatsResponse,
    EmployeePerformanceResponse,
    FeederRankingResponse,
    PerformanceResponse,
)
from app.schemas.improvement import (
    AggregateSummaryResponse,
    FeederInsightResponse,
    HideFeederRequest,
    HideFeederResponse,
    ImprovementSummaryResponse,
    ReportAnalysisRequest,
    ReportAnalysisResponse,
    ReportAnswerResponse,
    ReportSummaryResponse,
    ReviewQueueResponse,
    StatusUpdateRequest,
    StatusUpdateResponse,
)
from app.schemas.summary import (
    DailySummaryRequest,
    DailySummaryResponse,
    FeederSummaryRequest,
    FeederSummaryResponse,
    QuestionStatResponse,
)

__all__ = [
    "AggregateSummaryResponse",
    "DailySummaryRequest",
    "DailySummaryResponse",
    "DashboardStatsResponse",
    "EmployeePerformanceResponse",
    "FeederInsightResponse",
    "FeederRankingResponse",
    "FeederSummaryRequest",
    "FeederSummaryResponse",
    "HideFeederRequest",
    "HideFeederResponse",
    "ImprovementSummaryResponse",
    "LoginRequest",
    "LoginResponse",
    "LogoutResponse",
    "PerformanceResponse",
    "QuestionStatResponse",
    "ReportAnalysisRequest",
    "ReportAnalysisResponse",
    "ReportAnswerResponse",
    "ReportSummaryResponse",
    "ReviewQueueResponse",
    "StatusUpdateRequest",
    "StatusUpdateResponse",
]
