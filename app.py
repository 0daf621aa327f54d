"""
Samarth — Interactive Dashboard

Run with:  streamlit run app.py
"""

from datetime import date

import plotly.graph_objects as go
import streamlit as st

from samarth_dashboard.config import DATABASE_URL, FEEDBACK_TYPES
from samarth_dashboard.dashboard import get_dashboard_overview, get_district_profile
from samarth_dashboard.errors import SamarthError
from samarth_dashboard.feedback import submit_feedback
from samarth_dashboard.kpis import previous_month
from samarth_dashboard.loaders.utils import district_id
from samarth_dashboard.pipeline import IngestOutcome, ingest_report
from samarth_dashboard.store import DocumentStore

# ---------------------------------------------------------------------------
# Page config
# ---------------------------------------------------------------------------
st.set_page_config(
    page_title="Samarth Dashboard",
    layout="wide",
    initial_sidebar_state="expanded",
)


@st.cache_resource
def get_store() -> DocumentStore:
    return DocumentStore.from_url(DATABASE_URL)


store = get_store()

# ---------------------------------------------------------------------------
# Sidebar: direct-write report upload
# ---------------------------------------------------------------------------
st.sidebar.title("Samarth")
st.sidebar.markdown("District Performance Dashboard")
st.sidebar.divider()

st.sidebar.subheader("Live Data Upload")
uploaded = st.sidebar.file_uploader("Good Work Done report", type=["csv", "xlsx"])
record_month = st.sidebar.checkbox("Record as monthly history")
month = None
if record_month:
    month = st.sidebar.text_input("Month (YYYY-MM)", value=previous_month(date.today()))

if uploaded is not None and st.sidebar.button("Submit Report"):
    try:
        result = ingest_report(store, uploaded.getvalue(), uploaded.name, month=month or None)
    except (SamarthError, ValueError) as exc:
        st.sidebar.error(f"Upload failed: {exc}")
    else:
        if result.outcome is IngestOutcome.EMPTY:
            st.sidebar.warning("No district rows found in the report.")
        else:
            st.sidebar.success(
                f"Updated {result.districts_written} districts "
                f"({result.rows_rejected} rows skipped)."
            )

# ---------------------------------------------------------------------------
# Sidebar: citizen feedback
# ---------------------------------------------------------------------------
st.sidebar.divider()
st.sidebar.subheader("Citizen Feedback")
with st.sidebar.form("feedback", clear_on_submit=True):
    fb_type = st.selectbox("Type", FEEDBACK_TYPES, format_func=str.title)
    fb_district = st.text_input("District (optional)")
    fb_officer = st.text_input("Officer (optional)")
    fb_rating = st.slider("Rating", 1, 5, 5)
    fb_message = st.text_area("Message")
    if st.form_submit_button("Submit Feedback"):
        try:
            submit_feedback(
                store, fb_type, fb_message, rating=fb_rating,
                district=fb_district, officer_name=fb_officer,
            )
        except SamarthError as exc:
            st.error(f"Feedback not sent: {exc}")
        else:
            st.success("Thank you, your feedback was recorded.")

overview = get_dashboard_overview(store)

# ===========================================================================
# Summary cards
# ===========================================================================
st.title("Statewide Summary")

summary = overview["summary"]
if summary is None:
    st.info("No data yet. Upload a CSV or Excel report to populate the dashboard.")
else:
    cols = st.columns(4)
    cols[0].metric("Conviction Ratio", f"{summary['statewideConvictionRatio']}%")
    cols[1].metric("Drug Seizure", f"{summary['totalDrugSeizureVolume_kg']:,} kg")
    cols[2].metric("NBWs Executed", f"{summary['totalNbwsExecuted']:,}")
    cols[3].metric("Value Recovered", f"INR {summary['totalValueRecovered_INR']:,}")
    st.caption(f"Last updated: {summary.get('last_updated', 'N/A')}")

# ===========================================================================
# Insights
# ===========================================================================
insights = overview["insights"]
if insights:
    st.subheader("Insights")
    st.write(insights.get("naturalLanguageSummary", ""))
    st.warning(insights.get("predictiveAlert", ""))

    col1, col2 = st.columns(2)
    with col1:
        st.markdown("**Top performers**")
        for name in insights.get("top_performers", []):
            st.markdown(f"- {name}")
    with col2:
        st.markdown("**Risk districts**")
        for name in insights.get("risk_districts", []):
            st.markdown(f"- {name}")

st.divider()

# ===========================================================================
# Leaderboard and zones
# ===========================================================================
st.subheader("District Leaderboard")
leaderboard = overview["leaderboard"]
if leaderboard.empty:
    st.info("No district data available.")
else:
    st.dataframe(leaderboard, use_container_width=True, hide_index=True)

zones = overview["zones"]
if not zones.empty:
    st.subheader("Zones")
    st.dataframe(zones, use_container_width=True, hide_index=True)

# ===========================================================================
# Monthly trend
# ===========================================================================
history = overview["history"]
if not history.empty:
    st.subheader("Monthly Trend")
    fig = go.Figure()
    fig.add_trace(go.Scatter(
        x=history["id"],
        y=history["convictionRatio"],
        name="Conviction ratio (%)",
        mode="lines+markers",
    ))
    fig.add_trace(go.Bar(
        x=history["id"],
        y=history["nbwsExecuted"],
        name="NBWs executed",
        yaxis="y2",
        opacity=0.5,
    ))
    fig.update_layout(
        height=380,
        yaxis=dict(title="Conviction ratio (%)"),
        yaxis2=dict(title="NBWs", overlaying="y", side="right"),
        plot_bgcolor="rgba(0,0,0,0)",
    )
    st.plotly_chart(fig, use_container_width=True)

# ===========================================================================
# District view
# ===========================================================================
if not leaderboard.empty:
    st.subheader("District View")
    names = leaderboard["district_name"].tolist()
    selected = st.selectbox("District", names)
    profile = get_district_profile(store, district_id(selected))
    if profile is not None:
        cols = st.columns(3)
        cols[0].metric("Superintendent", profile["superintendent"] or "N/A")
        cols[1].metric("Officers Active", profile["officer_count"])
        cols[2].metric("Avg Officer HPS", profile["mean_officer_hps"])
        if not profile["officers"].empty:
            st.dataframe(profile["officers"], use_container_width=True, hide_index=True)
