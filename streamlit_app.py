"""Streamlit dashboard for feeder point improvement insights."""

from __future__ import annotations

import io
from datetime import date, timedelta
from typing import Any

import pandas as pd
import streamlit as st

from app.domain.feeder_insight import FeederInsight
from improvement.aggregator import FILTER_MODES
from improvement.date_window import quick_range

st.set_page_config(page_title="Taskforce Improvement", page_icon="TF", layout="wide")

_MODE_LABELS = {
    "all": "All feeder points",
    "top": "Top improvement (70%+)",
    "needs_attention": "Needs attention",
}
_QUICK_RANGES = {"7d": "Last 7 days", "30d": "Last 30 days", "90d": "Last 90 days", "all": "All time"}


@st.cache_resource(show_spinner=False)
def _load_backend_handles() -> dict[str, Any]:
    """Build backend collaborators once per Streamlit server process."""
    from app.config import get_admin_settings  # noqa: PLC0415
    from app.main import _build_report_store  # noqa: PLC0415
    from app.services import get_feeder_export_service, get_improvement_service  # noqa: PLC0415
    from app.session import AdminSessionManager  # noqa: PLC0415
    from llm_synthesis.summarizer import build_adapter  # noqa: PLC0415

    return {
        "store": _build_report_store(),
        "sessions": AdminSessionManager(get_admin_settings()),
        "adapter": build_adapter(),
        "service": get_improvement_service(),
        "exporter": get_feeder_export_service(),
    }


def _insights_frame(insights: list[FeederInsight]) -> pd.DataFrame:
    """Tabular view of ranked insights."""
    rows = [
        {
            "Feeder Point": i.name,
            "Reports": i.total_reports,
            "Share %": i.share_of_total,
            "Approved": i.approved,
            "Rejected": i.rejected,
            "Pending": i.pending,
            "Photos": i.photos,
            "Improvement %": i.improvement_percent,
            "Transformation": i.transformation_score,
            "AI Flagged": i.ai_flagged,
            "Latest": i.latest_date.strftime("%Y-%m-%d") if i.latest_date else "",
            "Rationale": i.rationale_text,
        }
        for i in insights
    ]
    return pd.DataFrame(rows)


def _csv_bytes(frame: pd.DataFrame) -> bytes:
    buffer = io.StringIO()
    frame.to_csv(buffer, index=False)
    return buffer.getvalue().encode("utf-8")


def _default_range() -> tuple[str, str]:
    from app.config import get_report_settings  # noqa: PLC0415

    today = date.today()
    days = get_report_settings().default_window_days
    return (today - timedelta(days=days)).isoformat(), today.isoformat()


handles = _load_backend_handles()

if "token" not in st.session_state:
    st.session_state.token = None
if "start_input" not in st.session_state:
    st.session_state.start_input, st.session_state.end_input = _default_range()
if "feeder_summaries" not in st.session_state:
    st.session_state.feeder_summaries = {}
if "report_analyses" not in st.session_state:
    st.session_state.report_analyses = {}


# ---------------------------------------------------------------------------
# Login gate
# ---------------------------------------------------------------------------

if st.session_state.token is None or handles["sessions"].get(st.session_state.token) is None:
    from app.session import InvalidCredentialsError  # noqa: PLC0415

    st.title("Taskforce Super Admin")
    with st.form("login"):
        username = st.text_input("Username")
        password = st.text_input("Password", type="password")
        submitted = st.form_submit_button("Sign in", type="primary")
    if submitted:
        try:
            st.session_state.token = handles["sessions"].login(username, password).token
            st.rerun()
        except InvalidCredentialsError as exc:
            st.error(str(exc))
    st.stop()

token: str = st.session_state.token


# ---------------------------------------------------------------------------
# Controls
# ---------------------------------------------------------------------------

with st.sidebar:
    st.header("Date range")
    for preset, label in _QUICK_RANGES.items():
        if st.button(label, use_container_width=True):
            st.session_state.start_input, st.session_state.end_input = quick_range(preset, date.today())
            st.rerun()

    start_input = st.text_input("Start date (YYYY-MM-DD)", key="start_input")
    end_input = st.text_input("End date (YYYY-MM-DD)", key="end_input")
    mode = st.radio(
        "Filter",
        options=sorted(FILTER_MODES),
        format_func=lambda m: _MODE_LABELS[m],
        index=0,
    )

    if st.button("Log out", use_container_width=True):
        handles["sessions"].logout(token)
        st.session_state.token = None
        st.rerun()


st.title("Improvement Summary")

service = handles["service"]
store = handles["store"]
result = service.summarize(
    store,
    start_input,
    end_input,
    mode=mode,
    hidden_keys=handles["sessions"].hidden_keys(token),
)

if result.date_error:
    st.warning(result.date_error)
    st.stop()

if not result.filtered_reports:
    st.info("No reports in this date range.")
    st.stop()

st.caption(f"Impact from {start_input} to {end_input}")
aggregate = result.aggregate
mcol1, mcol2, mcol3, mcol4 = st.columns(4)
mcol1.metric("Responses", aggregate.total_responses)
mcol2.metric("Answered questions", aggregate.answered_questions)
mcol3.metric("Photos", aggregate.photos)
mcol4.metric("Feeder points", len(result.insights))

frame = _insights_frame(result.insights)
st.dataframe(frame, use_container_width=True, hide_index=True)
st.download_button(
    label="Download insights CSV",
    data=_csv_bytes(frame),
    file_name=f"improvement_{start_input}_to_{end_input}.csv",
    mime="text/csv",
)


# ---------------------------------------------------------------------------
# Per-feeder detail
# ---------------------------------------------------------------------------

from app.services.feeder_export_service import export_filename  # noqa: E402
from improvement.aggregator import flagged_review_queue, recheck_suggestions  # noqa: E402
from llm_synthesis.summarizer import analyze_report_compliance, generate_feeder_summary  # noqa: E402
from store.errors import ReportStoreError  # noqa: E402

for insight in result.insights:
    with st.expander(f"{insight.name}: {insight.improvement_percent}% improvement"):
        st.write(insight.rationale_text)
        for note in insight.improvement_notes:
            st.caption(note)

        icol1, icol2 = st.columns(2)
        with icol1:
            st.markdown("**Before**")
            if insight.before_images:
                st.image(insight.before_images[:4], width=160)
        with icol2:
            st.markdown("**After**")
            if insight.after_images:
                st.image(insight.after_images[:4], width=160)

        feeder_reports = [r for r in result.filtered_reports if r.bucket_key == insight.key]

        if st.button("Generate Concise AI Summary", key=f"summary-{insight.key}"):
            with st.spinner("Generating summary..."):
                st.session_state.feeder_summaries[insight.key] = generate_feeder_summary(
                    feeder_reports, start_input, handles["adapter"]
                ).summary
        summary_text = st.session_state.feeder_summaries.get(insight.key)
        if summary_text:
            st.text(summary_text)

        export = handles["exporter"].build(
            feeder_name=insight.name,
            start_input=start_input,
            end_input=end_input,
            reports=feeder_reports,
            insight=insight,
            ai_summary=summary_text,
        )
        st.download_button(
            label="Download summary",
            data=handles["exporter"].to_text(export).encode("utf-8"),
            file_name=export_filename(insight.name, "txt"),
            mime="text/plain",
            key=f"export-{insight.key}",
        )

        flagged = flagged_review_queue(result, insight.key)
        recheck = recheck_suggestions(result, insight.key)
        if flagged:
            st.markdown(f"**Flagged for review ({len(flagged)})**")
        for report in flagged:
            rcol1, rcol2, rcol3, rcol4 = st.columns([3, 1, 1, 1])
            rcol1.write(f"{report.id} | {report.user_name or 'Unknown'} | {report.resolved_date}")
            for status_value, column in (("approved", rcol2), ("rejected", rcol3)):
                if column.button(status_value.title(), key=f"{status_value}-{report.id}"):
                    try:
                        store.update_report_status(report.id, status_value)
                        st.rerun()
                    except ReportStoreError as exc:
                        st.error(f"Could not update this report right now. Please try again. ({exc})")
            if rcol4.button("Analyze", key=f"analyze-{report.id}"):
                with st.spinner("Analyzing report..."):
                    st.session_state.report_analyses[report.id] = analyze_report_compliance(
                        report, handles["adapter"], insight.name
                    ).analysis
            analysis_text = st.session_state.report_analyses.get(report.id)
            if analysis_text:
                st.text(analysis_text)
        if recheck:
            st.caption(
                "Previously approved, AI suggests re-check: " + ", ".join(r.id for r in recheck)
            )

        if st.button("Hide from this view", key=f"hide-{insight.key}"):
            handles["sessions"].hide_key(token, insight.key)
            st.rerun()
