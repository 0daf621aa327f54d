"""
Tests for the read-side dashboard functions.
"""

from datetime import datetime, timezone

from samarth_dashboard.dashboard import (
    get_dashboard_overview,
    get_district_officers,
    get_district_profile,
    get_historical_series,
    get_leaderboard,
    get_zone_breakdown,
)
from samarth_dashboard.pipeline import ingest_report

NOW = datetime(2025, 10, 15, 9, 30, tzinfo=timezone.utc)


def test_empty_store_overview(store):
    overview = get_dashboard_overview(store)

    assert overview["summary"] is None
    assert overview["insights"] is None
    assert overview["leaderboard"].empty
    assert overview["history"].empty
    assert overview["zones"].empty


def test_leaderboard_ranks_by_hps(store, make_csv, sample_rows):
    ingest_report(store, make_csv(sample_rows), "report.csv", now=NOW)

    board = get_leaderboard(store)

    assert board["district_name"].tolist() == ["Ganjam", "Cuttack", "Puri", "Koraput"]
    assert board["rank"].tolist() == [1, 2, 3, 4]
    assert "id" not in board.columns


def test_historical_series_sorted_by_month(store):
    for month, nbws in [("2025-10", 30), ("2025-08", 10), ("2025-09", 20)]:
        store.set("historical_data", month, {
            "id": month, "month": month, "convictionRatio": 50, "nbwsExecuted": nbws, "drugSeizure_kg": 1,
        })

    series = get_historical_series(store)

    assert series["id"].tolist() == ["2025-08", "2025-09", "2025-10"]
    assert series["nbwsExecuted"].tolist() == [10, 20, 30]


def test_zone_breakdown(store, make_csv, sample_rows):
    rows = sample_rows + [{"name": "Bhadrak", "hps_score": 40}]
    ingest_report(store, make_csv(rows), "report.csv", now=NOW)

    zones = get_zone_breakdown(store).set_index("zone")

    assert zones.loc["Central", "districts"] == 2
    assert zones.loc["Central", "mean_hps_score"] == 78.0
    assert zones.loc["Southern", "mean_hps_score"] == 73.0
    assert zones.loc["Unassigned", "districts"] == 1


def _seed_officers(store):
    store.set("officers", "o1", {"name": "A. Mishra", "rank": "DSP", "district": "cuttack", "hps_score": 70})
    store.set("officers", "o2", {"name": "S. Patra", "rank": "IPS", "designation": "SP", "district": "cuttack",
                                 "hps_score": "85.5"})
    store.set("officers", "o3", {"name": "K. Rao", "rank": "SP", "district": "puri", "hps_score": 60})
    store.set("officers", "o4", {"name": "N. Sahu", "rank": "SI", "district": "cuttack"})


def test_officers_are_filtered_by_district(store):
    _seed_officers(store)

    officers = get_district_officers(store, "cuttack")

    assert officers["id"].tolist() == ["o1", "o2", "o4"]
    assert officers["hps_score"].tolist() == [70.0, 85.5, 0.0]
    assert get_district_officers(store, "ganjam").empty


def test_district_profile(store, make_csv, sample_rows):
    ingest_report(store, make_csv(sample_rows), "report.csv", now=NOW)
    _seed_officers(store)

    profile = get_district_profile(store, "cuttack")

    assert profile["district"]["district_name"] == "Cuttack"
    assert profile["superintendent"] == "S. Patra"
    assert profile["officer_count"] == 3
    assert profile["mean_officer_hps"] == 51.8


def test_district_profile_without_officers_or_district(store, make_csv, sample_rows):
    ingest_report(store, make_csv(sample_rows), "report.csv", now=NOW)

    profile = get_district_profile(store, "koraput")

    assert profile["superintendent"] is None
    assert profile["officer_count"] == 0
    assert profile["mean_officer_hps"] == 0.0
    assert get_district_profile(store, "nowhere") is None
