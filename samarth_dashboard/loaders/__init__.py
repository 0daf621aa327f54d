"""Report loaders for uploaded district spreadsheets."""

from .tabular import parse_report, report_extension

__all__ = [
    "parse_report",
    "report_extension",
]
