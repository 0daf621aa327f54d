"""
District upsert: merge normalised records into the districts collection.

Rules
-----
- One write per distinct district id; a later row for the same id replaces
  an earlier one within the batch.
- Membership is read once, before any write, to choose between "set" (new
  district) and "update" (known district). Both merge, so stored fields the
  report does not carry (zone, geometry, officer counts) survive.
- Writes are committed in sub-batches of at most `batch_limit` operations.
  Each sub-batch is atomic on its own; a failing sub-batch does not undo the
  ones already committed.
- Every record is stamped with the ingestion time.
"""

import logging
from dataclasses import replace
from datetime import datetime, timezone

from .config import DISTRICTS_COLLECTION, MAX_BATCH_WRITES
from .models import DistrictMetrics
from .store import DocumentStore

logger = logging.getLogger(__name__)


def dedupe_records(records: list[DistrictMetrics]) -> list[DistrictMetrics]:
    """Keep the last record per id, in the position the id first appeared."""
    latest: dict[str, DistrictMetrics] = {}
    for record in records:
        latest[record.id] = record
    return list(latest.values())


def chunk(items: list, size: int) -> list[list]:
    if size < 1:
        raise ValueError("batch size must be positive")
    return [items[i:i + size] for i in range(0, len(items), size)]


def upsert_districts(
    store: DocumentStore,
    records: list[DistrictMetrics],
    now: datetime | None = None,
    batch_limit: int = MAX_BATCH_WRITES,
) -> int:
    """Write one ingestion batch to the districts collection.

    Returns
    -------
    Number of district documents written.

    Raises
    ------
    StoreError : a read or sub-batch commit failed. Sub-batches committed
        before the failure stay applied.
    """
    if not records:
        return 0

    stamp = (now or datetime.now(timezone.utc)).isoformat()
    unique = dedupe_records(records)

    existing = store.list_ids(DISTRICTS_COLLECTION)
    logger.info("Found %d existing districts", len(existing))

    written = 0
    chunks = chunk(unique, batch_limit)
    for idx, part in enumerate(chunks, start=1):
        batch = store.batch()
        for record in part:
            doc = replace(record, last_updated=stamp).to_document()
            if record.id in existing:
                batch.update(DISTRICTS_COLLECTION, record.id, doc)
            else:
                batch.set(DISTRICTS_COLLECTION, record.id, doc, merge=True)
        batch.commit()
        written += len(part)
        logger.info("Committed district sub-batch %d/%d (%d writes)", idx, len(chunks), len(part))

    logger.info("Upserted %d districts (%d new)", written, sum(1 for r in unique if r.id not in existing))
    return written
