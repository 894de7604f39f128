"""
app/schemas/dashboard.py

Response schemas for the dashboard landing page.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class DashboardStatsResponse(BaseModel):
    total_users: int = Field(..., ge=0)
    active_users: int = Field(..., ge=0)
    pending_requests: int = Field(..., ge=0)
    total_complaints: int = Field(..., ge=0)
    total_inspections: int = Field(..., ge=0)
    total_feeder_points: int = Field(..., ge=0)
    total_teams: int = Field(..., ge=0)
    total_ip_records: int = Field(..., ge=0)


class FeederRankingResponse(BaseModel):
    best_name: str | None = None
    best_approval_rate: float | None = None
    worst_name: str | None = None
    worst_approval_rate: float | None = None
    only_one: bool = False


class EmployeePerformanceResponse(BaseModel):
    user_key: str
    name: str
    total_reports: int = Field(..., ge=0)
    approved: int = Field(..., ge=0)
    rejected: int = Field(..., ge=0)
    approval_rate: float = Field(..., ge=0.0, le=1.0)


class PerformanceResponse(BaseModel):
    """
    Feeder and employee rankings over a date window.
    """

    date_error: str | None = None
    feeder_ranking: FeederRankingResponse
    top_performers: list[EmployeePerformanceResponse]
    lowest_performers: list[EmployeePerformanceResponse]
