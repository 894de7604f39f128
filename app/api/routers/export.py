"""
app/api/routers/export.py

Feeder point summary download.

GET /export/feeder-summary

Query parameters
----------------
key           : feeder bucket key (required)
start_date    : inclusive start day (YYYY-MM-DD)
end_date      : inclusive end day (YYYY-MM-DD)
trip          : "all" | "unspecified" | a trip number   (default: "all")
output_format : "txt" | "csv"                            (default: "txt")
include_summary : also generate the AI summary            (default: false)

Responses
---------
TXT → text/plain attachment, Feeder_Summary_<name>.txt
CSV → text/csv attachment,   Feeder_Summary_<name>.csv
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import Response

from app.api.dependencies import get_report_store, get_summary_adapter, require_admin_session
from app.services.feeder_export_service import (
    ALL_TRIPS,
    FeederExportService,
    export_filename,
    get_feeder_export_service,
)
from app.services.improvement_service import ImprovementService, get_improvement_service
from app.session import AdminSession
from improvement.aggregator import UNSPECIFIED_FEEDER_NAME
from llm_synthesis.adapter import BaseLLMAdapter
from llm_synthesis.summarizer import generate_feeder_summary
from store.report_store import BaseReportStore

logger = logging.getLogger(__name__)

router = APIRouter(tags=["export"])

_VALID_FORMATS = frozenset({"txt", "csv"})


@router.get("/export/feeder-summary", summary="Download a feeder point summary")
def export_feeder_summary(
    key: str = Query(..., min_length=1),
    start_date: str | None = Query(default=None),
    end_date: str | None = Query(default=None),
    trip: str = Query(default=ALL_TRIPS),
    output_format: str = Query(default="txt", alias="format"),
    include_summary: bool = Query(default=False),
    _session: AdminSession = Depends(require_admin_session),
    store: BaseReportStore = Depends(get_report_store),
    adapter: BaseLLMAdapter | None = Depends(get_summary_adapter),
    service: ImprovementService = Depends(get_improvement_service),
    exporter: FeederExportService = Depends(get_feeder_export_service),
) -> Response:
    # --- Validate query params ---
    if output_format not in _VALID_FORMATS:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid format {output_format!r}. Must be one of: {sorted(_VALID_FORMATS)}.",
        )

    result = service.summarize(store, start_date, end_date)
    if result.date_error:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=result.date_error)

    insight = next((i for i in result.insights if i.key == key), None)
    reports = [r for r in result.filtered_reports if r.bucket_key == key]
    if not reports:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"No reports for feeder point {key!r} in the selected range.",
        )

    feeder_name = insight.name if insight else (reports[0].feeder_point_name or UNSPECIFIED_FEEDER_NAME)
    ai_summary = None
    if include_summary:
        ai_summary = generate_feeder_summary(reports, start_date or "", adapter).summary

    export = exporter.build(
        feeder_name=feeder_name,
        start_input=start_date or "",
        end_input=end_date or "",
        reports=reports,
        insight=insight,
        trip_filter=trip,
        ai_summary=ai_summary,
    )

    logger.info("Feeder export key=%r format=%r rows=%d", key, output_format, len(export.reports))

    # --- Serialise ---
    filename = export_filename(feeder_name, output_format)
    headers = {"Content-Disposition": f'attachment; filename="{filename}"'}
    if output_format == "csv":
        return Response(content=exporter.to_csv(export), media_type="text/csv; charset=utf-8", headers=headers)
    return Response(content=exporter.to_text(export), media_type="text/plain; charset=utf-8", headers=headers)
