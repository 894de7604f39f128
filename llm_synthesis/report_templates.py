"""Ministry-facing daily operational report built around an AI summary."""

from datetime import date, datetime
from typing import List, Optional

from llm_synthesis.schema import DailyReportData

_RULE = "═" * 63

_NEXT_DAY_PRIORITIES = (
    "1. Continue monitoring complaint resolution times\n"
    "2. Maintain user engagement initiatives\n"
    "3. Ensure all feeder points remain operational\n"
    "4. Review and update security protocols"
)


def _mixed_waste_count(report_data: DailyReportData) -> int:
    """Reports whose waste segregation answer is 'no' or notes mention mixed waste."""
    count = 0
    for report in report_data.raw_reports:
        answer = next((a for a in report.answers if a.question_id == "waste_segregated"), None)
        if answer is None:
            continue
        if answer.answer == "no" or "mixed" in (answer.notes or "").lower():
            count += 1
    return count


def generate_trend_analysis(report_data: DailyReportData) -> str:
    trends: List[str] = []
    mixed = _mixed_waste_count(report_data)
    if mixed > len(report_data.raw_reports) / 2:
        trends.append("📉 WASTE SEGREGATION: Significant trend of mixed waste observed across feeder points.")
    elif mixed > 0:
        trends.append("⚠️ WASTE SEGREGATION: Some instances of mixed waste reported, requiring attention.")
    else:
        trends.append("✅ WASTE SEGREGATION: Generally good compliance with waste segregation today.")

    performance = report_data.performance
    if performance.user_growth > 5:
        trends.append("📈 USER GROWTH: Strong upward trend in new registrations")
    elif performance.user_growth > 0:
        trends.append("📊 USER GROWTH: Steady growth in user base")

    if performance.complaint_resolution_rate > 85:
        trends.append("✅ SERVICE QUALITY: High resolution rate maintained")
    elif performance.complaint_resolution_rate > 70:
        trends.append("⚠️ SERVICE QUALITY: Resolution rate within acceptable range")

    if report_data.metrics.active_feeder_points > 10:
        trends.append("🗺️ COVERAGE: Comprehensive monitoring network active")

    return "\n".join(trends)


def generate_recommendations(report_data: DailyReportData) -> str:
    recommendations: List[str] = []

    if _mixed_waste_count(report_data) > 0:
        recommendations.extend(
            [
                "• Implement targeted training for field teams on waste segregation protocols.",
                "• Conduct surprise inspections at feeder points identified with segregation issues.",
                "• Enhance monitoring mechanisms to identify and address non-compliance promptly.",
            ]
        )
    if report_data.performance.complaint_resolution_rate < 80:
        recommendations.extend(
            [
                "• Focus on improving complaint resolution processes",
                "• Consider additional training for response teams",
            ]
        )
    if report_data.performance.user_growth > 10:
        recommendations.extend(
            [
                "• Prepare for increased system load due to user growth",
                "• Consider expanding monitoring capacity",
            ]
        )
    if report_data.metrics.total_complaints > 20:
        recommendations.extend(
            [
                "• Analyze complaint patterns for preventive measures",
                "• Review resource allocation for high-volume areas",
            ]
        )

    if not recommendations:
        recommendations = [
            "• Continue current operational protocols",
            "• Maintain regular monitoring and assessment schedules",
            "• Prepare for potential scaling requirements",
        ]
    return "\n".join(recommendations)


def _parse_report_date(value: str) -> Optional[date]:
    try:
        return date.fromisoformat(value[:10])
    except ValueError:
        return None


def _format_growth(value: float) -> str:
    text = f"{value:g}"
    return f"+{text}" if value > 0 else text


def generate_ministry_report(
    report_data: DailyReportData,
    summary: str,
    generated_at: Optional[datetime] = None,
) -> str:
    """Render the plain-text daily operational report.

    Args:
        report_data: Metrics and raw reports for the day.
        summary: Executive summary text, AI-generated or templated.
        generated_at: Generation timestamp; defaults to now.
    """
    report_day = _parse_report_date(report_data.date)
    if report_day is not None:
        formatted_date = report_day.strftime("%A, %d %B %Y")
        report_id = f"TCR-{report_day:%Y-%m-%d}"
    else:
        formatted_date = report_data.date
        report_id = "TCR-UNDATED"
    generated = (generated_at or datetime.now()).strftime("%d/%m/%Y, %H:%M:%S")

    metrics = report_data.metrics
    performance = report_data.performance

    return f"""\
GOVERNMENT OF INDIA
MINISTRY OF HOME AFFAIRS
TASKFORCE COMMAND CENTER

DAILY OPERATIONAL REPORT
{formatted_date}

CLASSIFICATION: OFFICIAL USE ONLY
REPORT ID: {report_id}
GENERATED: {generated}

{_RULE}

EXECUTIVE SUMMARY:
{summary}

{_RULE}

OPERATIONAL METRICS:

📊 USER MANAGEMENT:
   • Total Registered Users: {metrics.total_users:,}
   • New Registrations Today: {metrics.new_registrations}
   • User Growth Rate: {_format_growth(performance.user_growth)}

🎯 SERVICE DELIVERY:
   • Complaints Received: {metrics.total_complaints}
   • Complaints Resolved: {metrics.resolved_complaints}
   • Resolution Rate: {performance.complaint_resolution_rate:g}%
   • Pending Cases: {metrics.total_complaints - metrics.resolved_complaints}

🗺️ FIELD OPERATIONS:
   • Active Monitoring Points: {metrics.active_feeder_points}
   • Completed Inspections: {metrics.completed_inspections}
   • Operational Coverage: {performance.operational_efficiency:g}%

{_RULE}

TREND ANALYSIS:

{generate_trend_analysis(report_data)}

{_RULE}

RECOMMENDATIONS:

{generate_recommendations(report_data)}

{_RULE}

NEXT DAY PRIORITIES:
{_NEXT_DAY_PRIORITIES}

{_RULE}

PREPARED BY: Taskforce Command Center - Automated Reporting System
REVIEWED BY: Super Administrator
SUBMITTED TO: Ministry of Home Affairs
DISTRIBUTION: Secretary (Internal Security), Joint Secretary (Operations)

END OF REPORT
"""
