"""
Row normalisation: project raw report rows onto DistrictMetrics.

Header aliasing is tolerated for the district name ("name", "District",
"district_name"); every numeric field defaults to 0 when absent or
unparseable. Rows without a usable district name are rejected.
"""

import logging
from typing import Any

from .config import DISTRICT_NAME_FIELDS, NUMERIC_FIELDS
from .errors import MissingDistrictName
from .loaders.utils import district_id, safe_float
from .models import DistrictMetrics

logger = logging.getLogger(__name__)


def resolve_district_name(row: dict[str, Any]) -> str | None:
    """Return the first non-empty string among the district-name headers."""
    for field in DISTRICT_NAME_FIELDS:
        val = row.get(field)
        if isinstance(val, str) and val.strip():
            return val.strip()
    return None


def normalise_row(row: dict[str, Any], default_zone: str | None = None) -> DistrictMetrics:
    """Convert one raw row into a DistrictMetrics record.

    Parameters
    ----------
    row : Mapping of header -> raw cell value, as produced by parse_report().
    default_zone : Zone used when the row has none. Leave as None to keep
        whatever zone the stored district already carries.

    Raises
    ------
    MissingDistrictName : no usable district name in the row.
    """
    name = resolve_district_name(row)
    if name is None:
        raise MissingDistrictName(row)

    numbers = {}
    for field in NUMERIC_FIELDS:
        val = safe_float(row.get(field))
        numbers[field] = val if val is not None else 0.0

    zone = row.get("zone")
    zone = str(zone).strip() if zone is not None and str(zone).strip() else default_zone

    return DistrictMetrics(
        id=district_id(name),
        district_name=name,
        zone=zone,
        **numbers,
    )


def normalise_rows(
    rows: list[dict[str, Any]],
    default_zone: str | None = None,
) -> list[DistrictMetrics]:
    """Normalise a parsed batch, dropping rows without a district name.

    Row order is preserved. Rejected rows are logged, never raised.
    """
    records = []
    rejected = 0
    for idx, row in enumerate(rows, start=1):
        try:
            records.append(normalise_row(row, default_zone=default_zone))
        except MissingDistrictName:
            rejected += 1
            logger.warning("Skipping row %d: missing or invalid district name: %r", idx, row)

    logger.info("Normalised %d rows (%d rejected)", len(records), rejected)
    return records
