"""
Derived-document writers.

refresh_insights() recomputes the statewide summary and the insight report
from a full scan of the districts collection and overwrites both singletons.
record_historical_point() writes one month's data point from the batch that
was ingested for that month. District documents are only ever read here.
"""

import logging
from datetime import datetime, timezone

from .config import (
    DISTRICTS_COLLECTION,
    HISTORICAL_COLLECTION,
    INSIGHTS_COLLECTION,
    INSIGHTS_DOC_ID,
    RISK_CONVICTION_THRESHOLD,
    SUMMARY_COLLECTION,
    SUMMARY_DOC_ID,
)
from .kpis import build_district_frame, compute_historical_point, compute_insights, compute_summary
from .models import DistrictMetrics
from .store import DocumentStore

logger = logging.getLogger(__name__)


def load_districts(store: DocumentStore) -> list[dict]:
    """Full scan of the districts collection, each document with its id."""
    return [{"id": doc_id, **data} for doc_id, data in store.list_documents(DISTRICTS_COLLECTION)]


def refresh_insights(
    store: DocumentStore,
    now: datetime | None = None,
    threshold: float = RISK_CONVICTION_THRESHOLD,
) -> dict | None:
    """Recompute and overwrite the summary and insight documents.

    Returns
    -------
    {"summary": {...}, "insights": {...}} as written, or None when the
    districts collection is empty (nothing is written in that case).
    """
    districts = load_districts(store)
    if not districts:
        logger.info("No district data found. Skipping insight generation.")
        return None

    stamp = (now or datetime.now(timezone.utc)).isoformat()
    frame = build_district_frame(districts)

    summary = compute_summary(frame)
    summary["last_updated"] = stamp

    insights = compute_insights(frame, threshold=threshold)
    insights["generated_at"] = stamp

    store.set(SUMMARY_COLLECTION, SUMMARY_DOC_ID, summary)
    store.set(INSIGHTS_COLLECTION, INSIGHTS_DOC_ID, insights)
    logger.info("Saved summary and insights for %d districts", len(frame))

    return {"summary": summary, "insights": insights}


def record_historical_point(
    store: DocumentStore,
    records: list[DistrictMetrics] | list[dict],
    month: str,
) -> dict:
    """Write the historical data point for `month` from one ingested batch.

    `records` are the batch's DistrictMetrics (or their documents); the rest
    of the districts collection does not contribute.
    """
    documents = [
        {"id": r.id, **r.to_document()} if isinstance(r, DistrictMetrics) else r
        for r in records
    ]
    frame = build_district_frame(documents)
    point = compute_historical_point(frame, month)

    store.set(HISTORICAL_COLLECTION, month, point)
    logger.info("Saved historical data for %s (%d districts)", month, len(frame))
    return point
