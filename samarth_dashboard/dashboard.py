"""
Dashboard-ready output functions.

These are the read-side entry points for the Streamlit front end. Each
function returns plain dicts or DataFrames suitable for rendering cards,
tables, and charts. Nothing here writes to the store.
"""

import logging

import pandas as pd

from .aggregation import load_districts
from .config import (
    DEFAULT_ZONE,
    DISTRICTS_COLLECTION,
    FEEDBACK_COLLECTION,
    HISTORICAL_COLLECTION,
    INSIGHTS_COLLECTION,
    INSIGHTS_DOC_ID,
    OFFICERS_COLLECTION,
    SUMMARY_COLLECTION,
    SUMMARY_DOC_ID,
    SUPERINTENDENT_RANK,
)
from .kpis import build_district_frame, round_half_up, sort_descending
from .loaders.utils import safe_float
from .store import DocumentStore

logger = logging.getLogger(__name__)

_HISTORY_COLUMNS = ["id", "month", "convictionRatio", "nbwsExecuted", "drugSeizure_kg"]
_OFFICER_COLUMNS = [
    "id", "name", "rank", "designation", "badge_number",
    "hps_score", "cases_solved", "recognitions", "join_date",
]
_FEEDBACK_COLUMNS = [
    "id", "submitted_at", "feedback_type", "rating", "status",
    "district", "officer_name", "message",
]


def get_summary(store: DocumentStore) -> dict | None:
    return store.get(SUMMARY_COLLECTION, SUMMARY_DOC_ID)


def get_insights(store: DocumentStore) -> dict | None:
    return store.get(INSIGHTS_COLLECTION, INSIGHTS_DOC_ID)


def get_leaderboard(store: DocumentStore) -> pd.DataFrame:
    """All districts ranked by HPS score, highest first.

    Returns
    -------
    DataFrame with columns:
        rank, district_name, zone, hps_score, conviction_ratio,
        nbws_executed, drug_seizure_kg, cases_solved, recognitions
    """
    frame = build_district_frame(load_districts(store))
    ranked = sort_descending(frame, "hps_score").reset_index(drop=True)
    ranked.insert(0, "rank", range(1, len(ranked) + 1))
    return ranked.drop(columns=["id"])


def get_historical_series(store: DocumentStore) -> pd.DataFrame:
    """Historical data points ordered by month key, for trend charts."""
    points = [data for _, data in store.list_documents(HISTORICAL_COLLECTION)]
    if not points:
        return pd.DataFrame(columns=_HISTORY_COLUMNS)
    df = pd.DataFrame(points, columns=_HISTORY_COLUMNS)
    return df.sort_values("id").reset_index(drop=True)


def get_zone_breakdown(store: DocumentStore) -> pd.DataFrame:
    """Mean HPS score and district count per zone.

    Districts without a zone are grouped under "Unassigned".
    """
    frame = build_district_frame(load_districts(store))
    if frame.empty:
        return pd.DataFrame(columns=["zone", "districts", "mean_hps_score"])

    frame["zone"] = frame["zone"].fillna(DEFAULT_ZONE)
    grouped = (
        frame.groupby("zone", sort=True)
        .agg(districts=("district_name", "count"), mean_hps_score=("hps_score", "mean"))
        .reset_index()
    )
    grouped["mean_hps_score"] = grouped["mean_hps_score"].round(1)
    return grouped


def get_district_officers(store: DocumentStore, district_id: str) -> pd.DataFrame:
    """Officers posted to one district, in scan order.

    Officers are matched on their `district` field against the district's
    document id. Missing numeric fields read as 0.
    """
    rows = []
    for doc_id, data in store.list_documents(OFFICERS_COLLECTION):
        if data.get("district") != district_id:
            continue
        row = {col: data.get(col) for col in _OFFICER_COLUMNS}
        row["id"] = doc_id
        row["name"] = data.get("name") or ""
        row["rank"] = data.get("rank") or ""
        for field in ("hps_score", "cases_solved", "recognitions"):
            val = safe_float(data.get(field))
            row[field] = val if val is not None else 0.0
        rows.append(row)
    return pd.DataFrame(rows, columns=_OFFICER_COLUMNS)


def get_district_profile(store: DocumentStore, district_id: str) -> dict | None:
    """District card: its metrics, officer roster, SP, and mean officer HPS.

    Returns None when the district does not exist. The SP is the first
    officer whose rank or designation is "SP", else the first officer.
    """
    district = store.get(DISTRICTS_COLLECTION, district_id)
    if district is None:
        return None

    officers = get_district_officers(store, district_id)
    superintendent = None
    mean_hps = 0.0
    if not officers.empty:
        is_sp = (officers["rank"] == SUPERINTENDENT_RANK) | (officers["designation"] == SUPERINTENDENT_RANK)
        head = officers[is_sp] if is_sp.any() else officers
        superintendent = head.iloc[0]["name"]
        mean_hps = round_half_up(float(officers["hps_score"].mean()), 1)

    return {
        "district": {"id": district_id, **district},
        "officers": officers,
        "superintendent": superintendent,
        "officer_count": int(len(officers)),
        "mean_officer_hps": mean_hps,
    }


def get_feedback(store: DocumentStore, status: str | None = None) -> pd.DataFrame:
    """Feedback submissions, newest first, optionally filtered by status."""
    rows = [
        {**{col: data.get(col) for col in _FEEDBACK_COLUMNS}, "id": doc_id}
        for doc_id, data in store.list_documents(FEEDBACK_COLLECTION)
        if status is None or data.get("status") == status
    ]
    df = pd.DataFrame(rows, columns=_FEEDBACK_COLUMNS)
    return df.sort_values("submitted_at", ascending=False, kind="stable").reset_index(drop=True)


def get_dashboard_overview(store: DocumentStore) -> dict:
    """Single entry point a Streamlit app would call to populate the page."""
    overview = {
        "summary": get_summary(store),
        "insights": get_insights(store),
        "leaderboard": get_leaderboard(store),
        "history": get_historical_series(store),
        "zones": get_zone_breakdown(store),
    }
    if overview["summary"] is None:
        logger.warning("No summary document yet; upload a report to populate the dashboard")
    return overview
