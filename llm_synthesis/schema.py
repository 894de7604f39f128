"""Request and output schemas for AI summary generation."""

from typing import List

from pydantic import BaseModel, ConfigDict, Field

from app.domain.compliance_report import ComplianceReport


class DailyMetrics(BaseModel):
    """Headline operational counts for the summarised period."""

    model_config = ConfigDict(populate_by_name=True)

    total_users: int = Field(default=0, ge=0, alias="totalUsers")
    new_registrations: int = Field(default=0, ge=0, alias="newRegistrations")
    total_complaints: int = Field(default=0, ge=0, alias="totalComplaints")
    resolved_complaints: int = Field(default=0, ge=0, alias="resolvedComplaints")
    active_feeder_points: int = Field(default=0, ge=0, alias="activeFeederPoints")
    completed_inspections: int = Field(default=0, ge=0, alias="completedInspections")


class DailyPerformance(BaseModel):
    """Derived performance percentages for the summarised period."""

    model_config = ConfigDict(populate_by_name=True)

    complaint_resolution_rate: float = Field(default=0.0, alias="complaintResolutionRate")
    user_growth: float = Field(default=0.0, alias="userGrowth")
    operational_efficiency: float = Field(default=0.0, alias="operationalEfficiency")


class DailyReportData(BaseModel):
    """Everything an AI summary request is built from."""

    model_config = ConfigDict(populate_by_name=True, arbitrary_types_allowed=True)

    date: str = Field(min_length=1)
    metrics: DailyMetrics = Field(default_factory=DailyMetrics)
    performance: DailyPerformance = Field(default_factory=DailyPerformance)
    raw_reports: List[ComplianceReport] = Field(default_factory=list, alias="rawReports")


class SummaryOutput(BaseModel):
    """Only output contract for summary generation.

    ``detailed`` and ``summary`` are the field names callers consume.
    """

    model_config = ConfigDict(
        extra="forbid",
        frozen=True,
        str_strip_whitespace=True,
    )

    detailed: str = Field(min_length=1)
    summary: str = Field(min_length=1)
    simulated: bool = False
