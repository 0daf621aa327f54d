"""
Shared utilities for report ingestion: numeric coercion, header cleaning,
district key derivation.
"""

import math
import re
from typing import Any

_WHITESPACE = re.compile(r"\s+")


def safe_float(val: Any) -> float | None:
    """Coerce a cell value to float, returning None for non-numeric values.

    Booleans are not treated as numbers. NaN and infinities are rejected.
    """
    if val is None or isinstance(val, bool):
        return None
    if isinstance(val, str):
        val = val.strip()
        # Skip formula strings and text labels
        if not val or val.startswith("="):
            return None
        # Handle percentage strings like "78%"
        if val.endswith("%"):
            val = val[:-1].strip()
        val = val.replace(",", "")
    try:
        result = float(val)
    except (ValueError, TypeError):
        return None
    if math.isnan(result) or math.isinf(result):
        return None
    return result


def clean_header(val: Any) -> str:
    """Return a trimmed header string; blank or missing headers become ''."""
    if val is None:
        return ""
    return str(val).strip()


def district_id(name: str) -> str:
    """Derive the stable document key for a district name.

    Trims, collapses whitespace runs to a single underscore, lowercases:
    "  North   Cuttack " -> "north_cuttack".
    """
    return _WHITESPACE.sub("_", name.strip()).lower()
