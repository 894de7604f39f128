"""
app/api/routers/summary.py

AI summary and single-report review endpoints. They answer with text
even when the provider is missing or fails: the templated analysis is
returned and ``simulated`` is true.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status

from app.api.dependencies import get_report_store, get_summary_adapter, require_admin_session
from app.schemas.improvement import ReportAnalysisRequest, ReportAnalysisResponse
from app.schemas.summary import (
    DailySummaryRequest,
    DailySummaryResponse,
    FeederSummaryRequest,
    FeederSummaryResponse,
    QuestionStatResponse,
)
from app.services.improvement_service import (
    DateRangeError,
    ImprovementService,
    get_improvement_service,
)
from app.session import AdminSession
from llm_synthesis.adapter import BaseLLMAdapter
from llm_synthesis.report_templates import generate_ministry_report
from llm_synthesis.summarizer import (
    analyze_report_compliance,
    generate_analysis,
    generate_feeder_summary,
)
from store.report_store import BaseReportStore

router = APIRouter(tags=["summary"])


@router.post("/feeder-summary", response_model=FeederSummaryResponse)
def feeder_summary(
    payload: FeederSummaryRequest,
    _session: AdminSession = Depends(require_admin_session),
    store: BaseReportStore = Depends(get_report_store),
    adapter: BaseLLMAdapter | None = Depends(get_summary_adapter),
    service: ImprovementService = Depends(get_improvement_service),
) -> FeederSummaryResponse:
    """
    Concise AI summary for one feeder point over the window.
    """

    try:
        reports = service.feeder_reports(store, payload.key, payload.start_date, payload.end_date)
    except DateRangeError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc

    result = generate_feeder_summary(reports, payload.start_date, adapter)
    return FeederSummaryResponse(
        key=payload.key,
        summary=result.summary,
        simulated=result.simulated,
        question_stats=[QuestionStatResponse.from_stat(s) for s in result.question_stats],
    )


@router.post("/daily-summary", response_model=DailySummaryResponse)
def daily_summary(
    payload: DailySummaryRequest,
    _session: AdminSession = Depends(require_admin_session),
    store: BaseReportStore = Depends(get_report_store),
    adapter: BaseLLMAdapter | None = Depends(get_summary_adapter),
    service: ImprovementService = Depends(get_improvement_service),
) -> DailySummaryResponse:
    """
    Detailed report and concise summary for a day or range, optionally
    wrapped in the ministry report template.
    """

    try:
        report_data = service.daily_report_data(store, payload.date, payload.end_date)
    except DateRangeError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc

    output = generate_analysis(report_data, adapter)
    ministry_report = None
    if payload.include_ministry_report:
        ministry_report = generate_ministry_report(report_data, output.summary)

    return DailySummaryResponse(
        date=report_data.date,
        detailed=output.detailed,
        summary=output.summary,
        simulated=output.simulated,
        ministry_report=ministry_report,
    )


@router.post("/reports/{report_id}/analysis", response_model=ReportAnalysisResponse)
def report_analysis(
    report_id: str,
    payload: ReportAnalysisRequest | None = None,
    _session: AdminSession = Depends(require_admin_session),
    store: BaseReportStore = Depends(get_report_store),
    adapter: BaseLLMAdapter | None = Depends(get_summary_adapter),
    service: ImprovementService = Depends(get_improvement_service),
) -> ReportAnalysisResponse:
    """
    Review text for a single report, used next to the approve/reject
    decision.
    """

    report = service.find_report(store, report_id)
    if report is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Report {report_id} not found.")

    payload = payload or ReportAnalysisRequest()
    result = analyze_report_compliance(report, adapter, payload.feeder_point_name)
    return ReportAnalysisResponse(report_id=report_id, analysis=result.analysis, simulated=result.simulated)
