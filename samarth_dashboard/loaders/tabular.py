"""
Tabular parser for uploaded district reports.

Accepted formats
----------------
- .xlsx: first worksheet only. Row 1 carries headers; every later row is a
  data row. Columns with a blank header are dropped from every record.
- .csv: comma-delimited text with a header row. Blank lines are skipped.

Output is a list of plain dicts keyed by trimmed header. Values are left raw
(numbers, strings, None); typing happens in the normaliser.
"""

import io
import logging
from pathlib import PurePosixPath

import openpyxl
import pandas as pd

from ..config import SUPPORTED_EXTENSIONS
from ..errors import ParseError, UnsupportedFormat
from .utils import clean_header

logger = logging.getLogger(__name__)


def report_extension(filename: str) -> str:
    """Return the lowercase extension of a report filename ('' if none)."""
    return PurePosixPath(filename).suffix.lower()


def parse_report(data: bytes, filename: str) -> list[dict]:
    """Parse raw report bytes into row records.

    Raises
    ------
    UnsupportedFormat : extension is not .csv or .xlsx.
    ParseError : the content could not be read as the declared format.
    """
    ext = report_extension(filename)
    if ext not in SUPPORTED_EXTENSIONS:
        raise UnsupportedFormat(filename)

    try:
        if ext == ".xlsx":
            rows = _parse_xlsx(data)
        else:
            rows = _parse_csv(data)
    except Exception as exc:
        logger.exception("Failed to parse report: %s", filename)
        raise ParseError(filename, exc) from exc

    logger.info("Parsed %d rows from %s", len(rows), filename)
    return rows


def _parse_xlsx(data: bytes) -> list[dict]:
    wb = openpyxl.load_workbook(io.BytesIO(data), data_only=True, read_only=True)
    try:
        ws = wb.worksheets[0]
        row_iter = ws.iter_rows(values_only=True)

        header_row = next(row_iter, None)
        if header_row is None:
            return []
        headers = [clean_header(h) for h in header_row]

        records = []
        for values in row_iter:
            # Rows with no values at all are padding, not data
            if all(v is None for v in values):
                continue
            record = {}
            for col_idx, header in enumerate(headers):
                if not header:
                    continue
                record[header] = values[col_idx] if col_idx < len(values) else None
            records.append(record)
        return records
    finally:
        wb.close()


def _parse_csv(data: bytes) -> list[dict]:
    try:
        df = pd.read_csv(
            io.BytesIO(data),
            dtype=str,
            keep_default_na=False,
            skip_blank_lines=True,
            encoding="utf-8-sig",
        )
    except pd.errors.EmptyDataError:
        logger.warning("CSV report has no header row")
        return []

    df.columns = [clean_header(c) for c in df.columns]
    # pandas names blank headers "Unnamed: <n>"
    keep = [c for c in df.columns if c and not c.startswith("Unnamed:")]
    df = df[keep]

    return df.to_dict(orient="records")
