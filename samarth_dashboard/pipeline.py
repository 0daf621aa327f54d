"""
Ingestion orchestration: sequencing and outcome routing only.

Entry points
------------
handle_upload(store, bucket, path)
    Upload trigger. The file is parsed, normalised, upserted, the summary
    and insights are refreshed, and the file is moved to its outcome
    location. Failures never propagate; they route the file to error_reports/.

ingest_report(store, data, filename)
    Direct write from the dashboard uploader. Same stages without a bucket;
    errors are raised to the caller.

run_daily_insights(store)
    Scheduled insight regeneration.

run_monthly_aggregation(store)
    Scheduled first-of-month historical aggregation.
"""

import enum
import logging
import re
from dataclasses import dataclass, field
from datetime import date, datetime, timezone

from .aggregation import load_districts, record_historical_point, refresh_insights
from .bucket import ReportBucket, outcome_path
from .config import DEFAULT_ZONE, INCOMING_PREFIX
from .errors import UnsupportedFormat
from .kpis import parse_month, previous_month
from .loaders import parse_report
from .store import DocumentStore
from .transforms import normalise_rows
from .upsert import dedupe_records, upsert_districts

logger = logging.getLogger(__name__)

_MONTH_IN_NAME = re.compile(r"(?<!\d)(\d{4}-(?:0[1-9]|1[0-2]))(?!\d)")


class IngestOutcome(enum.Enum):
    IGNORED = "ignored"
    UNSUPPORTED = "unsupported"
    EMPTY = "empty"
    PROCESSED = "processed"
    ERROR = "error"


@dataclass
class IngestResult:
    """What one report ingestion did."""

    filename: str
    outcome: IngestOutcome
    rows_parsed: int = 0
    rows_rejected: int = 0
    districts_written: int = 0
    month: str | None = None
    summary: dict | None = None
    insights: dict | None = None
    historical: dict | None = field(default=None, repr=False)


def month_from_filename(filename: str) -> str | None:
    """Return a 'YYYY-MM' key embedded in a report filename, if any."""
    match = _MONTH_IN_NAME.search(filename)
    return match.group(1) if match else None


def ingest_report(
    store: DocumentStore,
    data: bytes,
    filename: str,
    month: str | None = None,
    now: datetime | None = None,
) -> IngestResult:
    """Run parse -> normalise -> upsert -> aggregate for one report.

    When `month` is given, the batch's historical data point is written too.

    Raises
    ------
    UnsupportedFormat, ParseError, StoreError : propagated unchanged.
    ValueError : `month` is not a 'YYYY-MM' key.
    """
    if month is not None:
        parse_month(month)
    now = now or datetime.now(timezone.utc)

    rows = parse_report(data, filename)
    records = normalise_rows(rows, default_zone=DEFAULT_ZONE)

    result = IngestResult(
        filename=filename,
        outcome=IngestOutcome.PROCESSED,
        rows_parsed=len(rows),
        rows_rejected=len(rows) - len(records),
        month=month,
    )

    if not records:
        logger.info("No data extracted from %s. Aborting store write.", filename)
        result.outcome = IngestOutcome.EMPTY
        return result

    batch = dedupe_records(records)
    result.districts_written = upsert_districts(store, batch, now=now)

    refreshed = refresh_insights(store, now=now)
    if refreshed is not None:
        result.summary = refreshed["summary"]
        result.insights = refreshed["insights"]

    if month is not None:
        result.historical = record_historical_point(store, batch, month)

    return result


def handle_upload(
    store: DocumentStore,
    bucket: ReportBucket,
    path: str,
    month: str | None = None,
    now: datetime | None = None,
) -> IngestResult:
    """Process a file that landed in the bucket.

    Files outside incoming_reports/ are ignored. Every other file ends up
    in exactly one outcome location.
    """
    if not path or not path.startswith(INCOMING_PREFIX):
        logger.info("File %s is not in the target directory. Ignoring.", path)
        return IngestResult(filename=path, outcome=IngestOutcome.IGNORED)

    month = month or month_from_filename(path)

    try:
        data = bucket.read_bytes(path)
        result = ingest_report(store, data, path, month=month, now=now)
    except UnsupportedFormat:
        logger.warning("Unsupported file type for: %s", path)
        bucket.move(path, outcome_path(path, "unsupported"))
        return IngestResult(filename=path, outcome=IngestOutcome.UNSUPPORTED)
    except Exception:
        logger.exception("Error processing file: %s", path)
        bucket.move(path, outcome_path(path, "error"))
        return IngestResult(filename=path, outcome=IngestOutcome.ERROR, month=month)

    if result.outcome is IngestOutcome.EMPTY:
        bucket.move(path, outcome_path(path, "empty"))
    else:
        bucket.move(path, outcome_path(path, "processed"))
    return result


def run_daily_insights(store: DocumentStore, now: datetime | None = None) -> dict | None:
    """Scheduled insight regeneration; a no-op on an empty store."""
    logger.info("Starting daily insights generation...")
    return refresh_insights(store, now=now)


def run_monthly_aggregation(store: DocumentStore, today: date | None = None) -> dict | None:
    """Scheduled historical aggregation for the previous calendar month.

    The batch for that month is the set of districts whose last ingestion
    falls inside it. Returns the written point, or None when there is none.
    """
    today = today or datetime.now(timezone.utc).date()
    month = previous_month(today)
    logger.info("Starting monthly historical aggregation for %s...", month)

    batch = [doc for doc in load_districts(store) if str(doc.get("last_updated", "")).startswith(month)]
    if not batch:
        logger.info("No districts were ingested during %s. Skipping aggregation.", month)
        return None

    return record_historical_point(store, batch, month)
