"""
Shared fixtures: an isolated in-memory SQLite document store, a temporary
report bucket, and builders for CSV/XLSX report bytes.
"""

import io

import openpyxl
import pandas as pd
import pytest
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from samarth_dashboard.bucket import ReportBucket
from samarth_dashboard.config import (
    DISTRICTS_COLLECTION,
    HISTORICAL_COLLECTION,
    INSIGHTS_COLLECTION,
    SUMMARY_COLLECTION,
)
from samarth_dashboard.store import DocumentStore


@pytest.fixture
def store():
    # One shared connection so every session sees the same in-memory database
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
        future=True,
    )
    doc_store = DocumentStore(engine)
    doc_store.create_tables()
    yield doc_store
    engine.dispose()


@pytest.fixture
def bucket(tmp_path):
    return ReportBucket(tmp_path / "bucket")


@pytest.fixture
def document_total():
    """Count every document the pipeline could have written."""

    def _total(doc_store: DocumentStore) -> int:
        return sum(
            doc_store.count(c)
            for c in (DISTRICTS_COLLECTION, SUMMARY_COLLECTION, INSIGHTS_COLLECTION, HISTORICAL_COLLECTION)
        )

    return _total


@pytest.fixture
def make_csv():
    def _make(rows: list[dict], columns: list[str] | None = None) -> bytes:
        return pd.DataFrame(rows, columns=columns).to_csv(index=False).encode("utf-8")

    return _make


@pytest.fixture
def make_xlsx():
    def _make(header: list, rows: list[list]) -> bytes:
        wb = openpyxl.Workbook()
        ws = wb.active
        ws.append(header)
        for row in rows:
            ws.append(row)
        buf = io.BytesIO()
        wb.save(buf)
        return buf.getvalue()

    return _make


@pytest.fixture
def sample_rows():
    return [
        {"name": "Cuttack", "hps_score": 82, "nbws_executed": 140, "conviction_ratio": 65,
         "drug_seizure_kg": 12.5, "cases_solved": 210, "recognitions": 6, "zone": "Central"},
        {"name": "Puri", "hps_score": 74, "nbws_executed": 90, "conviction_ratio": 38,
         "drug_seizure_kg": 30, "cases_solved": 120, "recognitions": 3, "zone": "Central"},
        {"name": "Ganjam", "hps_score": 91, "nbws_executed": 60, "conviction_ratio": 72,
         "drug_seizure_kg": 4, "cases_solved": 300, "recognitions": 9, "zone": "Southern"},
        {"name": "Koraput", "hps_score": 55, "nbws_executed": 20, "conviction_ratio": 51,
         "drug_seizure_kg": 48, "cases_solved": 75, "recognitions": 1, "zone": "Southern"},
    ]
