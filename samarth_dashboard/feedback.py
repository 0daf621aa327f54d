"""
Citizen feedback submissions.

Each submission becomes one document in the feedback collection under a
generated id. New feedback starts as "pending"; reviewers move it to
"reviewed" or "resolved".
"""

import logging
import uuid
from datetime import datetime, timezone

from .config import FEEDBACK_COLLECTION, FEEDBACK_STATUSES, FEEDBACK_TYPES, RATING_RANGE
from .errors import InvalidFeedback, StoreError
from .store import DocumentStore

logger = logging.getLogger(__name__)


def _validate_rating(rating) -> int:
    if isinstance(rating, bool):
        raise InvalidFeedback("rating", f"expected a whole number, got {rating!r}")
    try:
        value = int(str(rating).strip())
    except ValueError:
        raise InvalidFeedback("rating", f"expected a whole number, got {rating!r}") from None

    low, high = RATING_RANGE
    if not low <= value <= high:
        raise InvalidFeedback("rating", f"must be between {low} and {high}, got {value}")
    return value


def submit_feedback(
    store: DocumentStore,
    feedback_type: str,
    message: str,
    rating: int | str = 5,
    district: str | None = None,
    officer_name: str | None = None,
    now: datetime | None = None,
) -> str:
    """Validate and store one feedback submission.

    Parameters
    ----------
    feedback_type : one of compliment, complaint, suggestion
    message       : free text; must not be blank
    rating        : 1 to 5; numeric strings are accepted
    district, officer_name : optional context, stored trimmed when given

    Returns
    -------
    The id of the new feedback document.

    Raises
    ------
    InvalidFeedback : a field failed validation; nothing is written.
    StoreError      : the write failed.
    """
    kind = (feedback_type or "").strip().lower()
    if kind not in FEEDBACK_TYPES:
        raise InvalidFeedback("feedback_type", f"must be one of {', '.join(FEEDBACK_TYPES)}")

    text = (message or "").strip()
    if not text:
        raise InvalidFeedback("message", "must not be blank")

    doc = {
        "feedback_type": kind,
        "message": text,
        "rating": _validate_rating(rating),
        "submitted_at": (now or datetime.now(timezone.utc)).isoformat(),
        "status": "pending",
    }
    if district and district.strip():
        doc["district"] = district.strip()
    if officer_name and officer_name.strip():
        doc["officer_name"] = officer_name.strip()

    feedback_id = uuid.uuid4().hex
    store.set(FEEDBACK_COLLECTION, feedback_id, doc)
    logger.info("Stored %s feedback %s", kind, feedback_id)
    return feedback_id


def set_feedback_status(store: DocumentStore, feedback_id: str, status: str) -> None:
    """Move a feedback document to a new review status."""
    if status not in FEEDBACK_STATUSES:
        raise InvalidFeedback("status", f"must be one of {', '.join(FEEDBACK_STATUSES)}")
    batch = store.batch()
    batch.update(FEEDBACK_COLLECTION, feedback_id, {"status": status})
    try:
        batch.commit()
    except StoreError:
        logger.error("Feedback %s not updated to %s", feedback_id, status)
        raise
