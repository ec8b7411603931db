from __future__ import annotations

"""Exception hierarchy for the CSV transaction import pipeline.

Fatal kinds derive from CsvImportError and abort one import call with a
human-readable message. RowValidationError is row-scoped: the parser catches
it, records a warning and keeps going.
"""

__all__ = [
    "CsvImportError",
    "SourceReadError",
    "StructuralError",
    "EmptyResultError",
    "TransportError",
    "MalformedResponseError",
    "ImportInProgressError",
    "RowValidationError",
    "StoreError",
    "TransactionNotFoundError",
]


class CsvImportError(Exception):
    """Base class for failures that abort a whole import call."""


class SourceReadError(CsvImportError):
    """The input byte source could not be read or decoded."""


class StructuralError(CsvImportError):
    """CSV has no data rows or its header lacks required columns."""


class EmptyResultError(CsvImportError):
    """CSV parsed fine but not a single row was accepted."""


class TransportError(CsvImportError):
    """Bulk-insert / delete call failed (network or non-success status)."""


class MalformedResponseError(TransportError):
    """Bulk-insert call succeeded but its body is not the expected shape."""


class ImportInProgressError(CsvImportError):
    """Another import is already running against the same collection."""


class RowValidationError(ValueError):
    """One CSV row failed a field rule (recovered by the parser)."""

    def __init__(self, message: str, row_number: int | None = None) -> None:
        super().__init__(message)
        self.row_number = row_number


class StoreError(Exception):
    """Local transaction file could not be read or written."""


class TransactionNotFoundError(StoreError):
    pass
