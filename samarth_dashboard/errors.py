"""
Exception hierarchy for report ingestion and aggregation.

Row-level problems (MissingDistrictName) are absorbed by the normaliser.
File-level problems abort the pipeline for that file and decide where the
uploaded file ends up.
"""


class SamarthError(Exception):
    """Base class for all pipeline errors."""


class UnsupportedFormat(SamarthError):
    """The uploaded file has an extension the parser does not read."""

    def __init__(self, filename: str):
        self.filename = filename
        super().__init__(f"Unsupported report format: {filename}")


class ParseError(SamarthError):
    """The file content does not match its declared format."""

    def __init__(self, filename: str, cause: Exception):
        self.filename = filename
        self.cause = cause
        super().__init__(f"Could not parse {filename}: {cause}")


class MissingDistrictName(SamarthError):
    """A report row carries no usable district name."""

    def __init__(self, row: dict):
        self.row = row
        super().__init__(f"Row has no district name: {row!r}")


class StoreError(SamarthError):
    """The document store rejected a read or write."""

    def __init__(self, operation: str, cause: Exception | None = None):
        self.operation = operation
        self.cause = cause
        message = f"Store operation '{operation}' failed"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)


class InvalidFeedback(SamarthError):
    """A feedback submission failed validation; nothing was stored."""

    def __init__(self, field: str, reason: str):
        self.field = field
        self.reason = reason
        super().__init__(f"Invalid feedback {field}: {reason}")
