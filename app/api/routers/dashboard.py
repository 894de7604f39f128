"""
app/api/routers/dashboard.py

Landing page counts and performance rankings.
"""

from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, Query

from app.api.dependencies import get_report_store, require_admin_session
from app.schemas.dashboard import (
    DashboardStatsResponse,
    EmployeePerformanceResponse,
    FeederRankingResponse,
    PerformanceResponse,
)
from app.services.improvement_service import ImprovementService, get_improvement_service
from app.session import AdminSession
from improvement.performance import (
    EmployeePerformance,
    employee_performance,
    lowest_performers,
    rank_feeder_points,
    top_performers,
)
from store.report_store import BaseReportStore

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


def _employee_response(person: EmployeePerformance) -> EmployeePerformanceResponse:
    return EmployeePerformanceResponse(
        user_key=person.user_key,
        name=person.name,
        total_reports=person.breakdown.total_reports,
        approved=person.breakdown.approved,
        rejected=person.breakdown.rejected,
        approval_rate=person.breakdown.approval_rate,
    )


@router.get("/stats", response_model=DashboardStatsResponse)
def dashboard_stats(
    _session: AdminSession = Depends(require_admin_session),
    store: BaseReportStore = Depends(get_report_store),
) -> DashboardStatsResponse:
    """
    Collection counts. All zeros when the store cannot be reached.
    """

    return DashboardStatsResponse(**store.dashboard_stats().to_dict())


@router.get("/performance", response_model=PerformanceResponse)
def performance(
    start_date: str | None = Query(default=None),
    end_date: str | None = Query(default=None),
    single_day: date | None = Query(default=None, description="Rank feeder points for this day only."),
    _session: AdminSession = Depends(require_admin_session),
    store: BaseReportStore = Depends(get_report_store),
    service: ImprovementService = Depends(get_improvement_service),
) -> PerformanceResponse:
    result = service.summarize(store, start_date, end_date)
    if result.date_error:
        return PerformanceResponse(
            date_error=result.date_error,
            feeder_ranking=FeederRankingResponse(),
            top_performers=[],
            lowest_performers=[],
        )

    ranking = rank_feeder_points(result.filtered_reports, single_day=single_day)
    people = employee_performance(result.filtered_reports)
    return PerformanceResponse(
        feeder_ranking=FeederRankingResponse(
            best_name=ranking.best.name if ranking.best else None,
            best_approval_rate=ranking.best.breakdown.approval_rate if ranking.best else None,
            worst_name=ranking.worst.name if ranking.worst else None,
            worst_approval_rate=ranking.worst.breakdown.approval_rate if ranking.worst else None,
            only_one=ranking.only_one,
        ),
        top_performers=[_employee_response(p) for p in top_performers(people)],
        lowest_performers=[_employee_response(p) for p in lowest_performers(people)],
    )
