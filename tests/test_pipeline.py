"""
Tests for upload handling, the direct-write path, and scheduled triggers.
"""

from datetime import date, datetime, timezone
from unittest.mock import patch

import pytest

from samarth_dashboard.errors import StoreError, UnsupportedFormat
from samarth_dashboard.pipeline import (
    IngestOutcome,
    handle_upload,
    ingest_report,
    month_from_filename,
    run_daily_insights,
    run_monthly_aggregation,
)

NOW = datetime(2025, 10, 15, 9, 30, tzinfo=timezone.utc)


def _upload(bucket, path, data):
    bucket.write_bytes(path, data)
    return path


def test_csv_upload_is_processed_and_moved(store, bucket, make_csv, sample_rows):
    path = _upload(bucket, "incoming_reports/1760000000000-report.csv", make_csv(sample_rows))

    result = handle_upload(store, bucket, path, now=NOW)

    assert result.outcome is IngestOutcome.PROCESSED
    assert result.rows_parsed == 4
    assert result.districts_written == 4
    assert store.count("districts") == 4
    assert store.get("districts", "cuttack")["zone"] == "Central"
    assert store.get("ai_insights", "latest")["top_performers"] == ["Ganjam", "Cuttack", "Puri"]
    assert bucket.list() == ["processed_reports/1760000000000-report.csv"]


def test_xlsx_upload_defaults_missing_zone(store, bucket, make_xlsx):
    data = make_xlsx(["District", "hps_score"], [["Balasore", 66], [None, 10]])
    path = _upload(bucket, "incoming_reports/r.xlsx", data)

    result = handle_upload(store, bucket, path, now=NOW)

    assert result.outcome is IngestOutcome.PROCESSED
    assert result.rows_rejected == 1
    assert store.get("districts", "balasore")["zone"] == "Unassigned"


def test_files_outside_incoming_are_ignored(store, bucket, make_csv, sample_rows, document_total):
    path = _upload(bucket, "other/report.csv", make_csv(sample_rows))

    result = handle_upload(store, bucket, path)

    assert result.outcome is IngestOutcome.IGNORED
    assert bucket.exists(path)
    assert document_total(store) == 0


def test_pdf_goes_to_unsupported_without_writes(store, bucket, document_total):
    path = _upload(bucket, "incoming_reports/report.pdf", b"%PDF-1.4")

    result = handle_upload(store, bucket, path)

    assert result.outcome is IngestOutcome.UNSUPPORTED
    assert bucket.list() == ["processed_reports/unsupported_report.pdf"]
    assert document_total(store) == 0


def test_header_only_csv_goes_to_empty(store, bucket, document_total):
    path = _upload(bucket, "incoming_reports/blank.csv", b"name,hps_score,conviction_ratio\n")

    with patch("samarth_dashboard.pipeline.refresh_insights") as refresh:
        result = handle_upload(store, bucket, path)

    assert result.outcome is IngestOutcome.EMPTY
    refresh.assert_not_called()
    assert bucket.list() == ["processed_reports/empty_blank.csv"]
    assert document_total(store) == 0


def test_rows_without_names_empty_the_batch(store, bucket, make_csv, document_total):
    data = make_csv([{"hps_score": 80}, {"hps_score": 70}], columns=["name", "hps_score"])
    path = _upload(bucket, "incoming_reports/nameless.csv", data)

    result = handle_upload(store, bucket, path)

    assert result.outcome is IngestOutcome.EMPTY
    assert result.rows_rejected == 2
    assert document_total(store) == 0


def test_corrupt_file_goes_to_error(store, bucket, document_total):
    path = _upload(bucket, "incoming_reports/broken.xlsx", b"definitely not xlsx")

    result = handle_upload(store, bucket, path)

    assert result.outcome is IngestOutcome.ERROR
    assert bucket.list() == ["error_reports/broken.xlsx"]
    assert document_total(store) == 0


def test_store_failure_goes_to_error(store, bucket, make_csv, sample_rows):
    path = _upload(bucket, "incoming_reports/report.csv", make_csv(sample_rows))

    with patch("samarth_dashboard.pipeline.upsert_districts", side_effect=StoreError("batch_commit")):
        result = handle_upload(store, bucket, path)

    assert result.outcome is IngestOutcome.ERROR
    assert bucket.list() == ["error_reports/report.csv"]


def test_month_in_filename_records_history(store, bucket, make_csv, sample_rows):
    path = _upload(bucket, "incoming_reports/1760000000000-2025-09-report.csv", make_csv(sample_rows))

    result = handle_upload(store, bucket, path, now=NOW)

    assert result.month == "2025-09"
    assert store.get("historical_data", "2025-09")["nbwsExecuted"] == 310


@pytest.mark.parametrize("name, expected", [
    ("incoming_reports/1760000000000-2025-09-report.csv", "2025-09"),
    ("incoming_reports/1760000000000-report.csv", None),
    ("incoming_reports/2025-13.csv", None),
])
def test_month_from_filename(name, expected):
    assert month_from_filename(name) == expected


def test_direct_write_raises_synchronously(store):
    with pytest.raises(UnsupportedFormat):
        ingest_report(store, b"...", "notes.txt")
    with pytest.raises(ValueError):
        ingest_report(store, b"name\nPuri\n", "r.csv", month="Sept")


def test_direct_write_returns_counts_and_documents(store, make_csv, sample_rows):
    result = ingest_report(store, make_csv(sample_rows), "report.csv", month="2025-10", now=NOW)

    assert result.outcome is IngestOutcome.PROCESSED
    assert result.districts_written == 4
    assert result.summary["totalNbwsExecuted"] == 310
    assert result.insights["risk_districts"] == ["Puri"]
    assert result.historical["id"] == "2025-10"


def test_scheduled_insights_skip_empty_store(store, document_total):
    assert run_daily_insights(store) is None
    assert document_total(store) == 0


def test_scheduled_insights_regenerate(store, make_csv, sample_rows):
    ingest_report(store, make_csv(sample_rows), "report.csv", now=NOW)
    store.set("ai_insights", "latest", {})

    result = run_daily_insights(store)

    assert result["insights"]["top_performers"] == ["Ganjam", "Cuttack", "Puri"]
    assert store.get("ai_insights", "latest")["top_performers"] == ["Ganjam", "Cuttack", "Puri"]


def test_monthly_aggregation_uses_previous_month_batch(store, make_csv):
    ingest_report(
        store,
        make_csv([{"name": "Cuttack", "nbws_executed": 40, "conviction_ratio": 60}]),
        "october.csv",
        now=datetime(2025, 10, 20, tzinfo=timezone.utc),
    )
    ingest_report(
        store,
        make_csv([{"name": "Puri", "nbws_executed": 99, "conviction_ratio": 20}]),
        "november.csv",
        now=datetime(2025, 11, 1, 0, 30, tzinfo=timezone.utc),
    )

    point = run_monthly_aggregation(store, today=date(2025, 11, 1))

    assert point["id"] == "2025-10"
    assert point["nbwsExecuted"] == 40
    assert point["convictionRatio"] == 60.0


def test_monthly_aggregation_skips_when_nothing_ingested(store):
    assert run_monthly_aggregation(store, today=date(2025, 11, 1)) is None
    assert store.count("historical_data") == 0
