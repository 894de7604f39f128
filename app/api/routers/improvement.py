"""
app/api/routers/improvement.py

Feeder point improvement insights and the flagged-report review workflow.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status

from app.api.dependencies import get_report_store, get_session_manager, require_admin_session
from app.schemas.improvement import (
    AggregateSummaryResponse,
    FeederInsightResponse,
    HideFeederRequest,
    HideFeederResponse,
    ImprovementSummaryResponse,
    ReportSummaryResponse,
    ReviewQueueResponse,
    StatusUpdateRequest,
    StatusUpdateResponse,
)
from app.services.improvement_service import (
    DateRangeError,
    ImprovementService,
    get_improvement_service,
)
from app.session import AdminSession, AdminSessionManager
from improvement.aggregator import FilterMode
from store.errors import ReportNotFoundError, ReportStoreError
from store.report_store import BaseReportStore

logger = logging.getLogger(__name__)

router = APIRouter(tags=["improvement"])


# ---------------------------------------------------------------------------
# Insights
# ---------------------------------------------------------------------------


@router.get("/improvement-summary", response_model=ImprovementSummaryResponse)
def improvement_summary(
    start_date: str | None = Query(default=None, description="Inclusive start day (YYYY-MM-DD)."),
    end_date: str | None = Query(default=None, description="Inclusive end day (YYYY-MM-DD)."),
    mode: FilterMode = Query(default="all", description='"all", "top" or "needs_attention".'),
    session: AdminSession = Depends(require_admin_session),
    sessions: AdminSessionManager = Depends(get_session_manager),
    store: BaseReportStore = Depends(get_report_store),
    service: ImprovementService = Depends(get_improvement_service),
) -> ImprovementSummaryResponse:
    """
    Ranked feeder point insights for the window.

    An invalid window is not an HTTP error: ``date_error`` carries the
    message and ``insights`` is empty.
    """

    result = service.summarize(
        store,
        start_date,
        end_date,
        mode=mode,
        hidden_keys=sessions.hidden_keys(session.token),
    )
    return ImprovementSummaryResponse(
        start_date=start_date,
        end_date=end_date,
        mode=mode,
        date_error=result.date_error,
        aggregate=AggregateSummaryResponse.from_summary(result.aggregate),
        insights=[FeederInsightResponse.from_insight(i) for i in result.insights],
    )


@router.post("/improvement-summary/{key}/hide", response_model=HideFeederResponse)
def hide_feeder(
    key: str,
    payload: HideFeederRequest | None = None,
    session: AdminSession = Depends(require_admin_session),
    sessions: AdminSessionManager = Depends(get_session_manager),
    store: BaseReportStore = Depends(get_report_store),
) -> HideFeederResponse:
    """
    Hide a feeder point from this session's insight list.

    With ``purge`` the feeder point and its reports are also deleted from
    the store; the key is hidden only after the deletion succeeds.
    """

    payload = payload or HideFeederRequest()
    deleted = 0
    if payload.purge:
        try:
            deleted = store.delete_feeder_point_and_reports(
                payload.feeder_point_id,
                payload.feeder_point_name,
            )
        except ReportStoreError as exc:
            raise HTTPException(
                status_code=status.HTTP_502_BAD_GATEWAY,
                detail="Could not delete this feeder point right now. Please try again.",
            ) from exc
        logger.info("Session %s purged feeder %s (%d reports)", session.username, key, deleted)

    hidden = sessions.hide_key(session.token, key)
    return HideFeederResponse(key=key, hidden_keys=sorted(hidden), deleted_reports=deleted)


# ---------------------------------------------------------------------------
# Review workflow
# ---------------------------------------------------------------------------


@router.get("/improvement-summary/{key}/flagged", response_model=ReviewQueueResponse)
def flagged_reports(
    key: str,
    start_date: str | None = Query(default=None),
    end_date: str | None = Query(default=None),
    _session: AdminSession = Depends(require_admin_session),
    store: BaseReportStore = Depends(get_report_store),
    service: ImprovementService = Depends(get_improvement_service),
) -> ReviewQueueResponse:
    """
    Flagged reports for one feeder point, newest first, plus approved
    reports the heuristic suggests re-checking.
    """

    try:
        queue = service.review_queue(store, key, start_date, end_date)
    except DateRangeError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc

    return ReviewQueueResponse(
        key=queue.key,
        flagged=[ReportSummaryResponse.from_report(r) for r in queue.flagged],
        recheck=[ReportSummaryResponse.from_report(r) for r in queue.recheck],
    )


@router.post("/reports/{report_id}/status", response_model=StatusUpdateResponse)
def update_report_status(
    report_id: str,
    payload: StatusUpdateRequest,
    session: AdminSession = Depends(require_admin_session),
    store: BaseReportStore = Depends(get_report_store),
) -> StatusUpdateResponse:
    """
    Record an approve/reject decision for a report.
    """

    try:
        store.update_report_status(report_id, payload.status)
    except ReportNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except ReportStoreError as exc:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Could not update this report right now. Please try again.",
        ) from exc

    logger.info("Report %s set to %s by %s", report_id, payload.status, session.username)
    return StatusUpdateResponse(report_id=report_id, status=payload.status)
